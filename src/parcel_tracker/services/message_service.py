"""Message Service - per-package conversation thread.

Messages are append-only and visible to everyone with access to the
package. There is no edit or delete.
"""

from typing import List, Optional

from sqlalchemy.orm import Session

from parcel_tracker.models import Message, Package, User
from parcel_tracker.services.database import session_scope
from parcel_tracker.services.exceptions import PackageNotFound, UserNotFound, ValidationError
from parcel_tracker.services.logging_utils import get_service_logger, log_operation
from parcel_tracker.utils.constants import MAX_MESSAGE_LENGTH

logger = get_service_logger(__name__)


def post_message(package_id: int, sender_id: int, text: str, session: Optional[Session] = None) -> Message:
    """Append a message to a package thread.

    Raises:
        ValidationError: If text is empty or too long
        PackageNotFound: If the package does not exist
        UserNotFound: If the sender does not exist
    """
    if session is not None:
        return _post_message_impl(package_id, sender_id, text, session)
    with session_scope() as session:
        return _post_message_impl(package_id, sender_id, text, session)


def _post_message_impl(package_id: int, sender_id: int, text: str, session: Session) -> Message:
    body = (text or "").strip()
    if not body:
        raise ValidationError(["Message text is required"])
    if len(body) > MAX_MESSAGE_LENGTH:
        raise ValidationError([f"Message exceeds {MAX_MESSAGE_LENGTH} characters"])

    if session.get(Package, package_id) is None:
        raise PackageNotFound(package_id)
    if session.get(User, sender_id) is None:
        raise UserNotFound(sender_id)

    message = Message(package_id=package_id, sender_id=sender_id, text=body)
    session.add(message)
    session.flush()

    log_operation(
        logger, operation="post_message", outcome="success", package_id=package_id, sender_id=sender_id
    )
    return message


def list_messages(package_id: int, session: Optional[Session] = None) -> List[Message]:
    """Messages of a package, oldest first.

    Raises:
        PackageNotFound: If the package does not exist
    """
    if session is not None:
        return _list_messages_impl(package_id, session)
    with session_scope() as session:
        return _list_messages_impl(package_id, session)


def _list_messages_impl(package_id: int, session: Session) -> List[Message]:
    if session.get(Package, package_id) is None:
        raise PackageNotFound(package_id)
    return (
        session.query(Message)
        .filter(Message.package_id == package_id)
        .order_by(Message.created_at, Message.id)
        .all()
    )
