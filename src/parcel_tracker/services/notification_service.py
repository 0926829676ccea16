"""Notification Service - event records for users.

Notifications are created as a side effect of workflow transitions and
administrative actions, inside the caller's transaction, so a rolled-back
transition never leaves a notification behind. Delivery over email or
Telegram is outside this service; it only stores records.

Fan-out rule for status changes: whenever a role's sub-status becomes one
where that role must act, or reaches the end of its vocabulary, every user
behind that role is notified.

All public functions accept session=None and open their own
session_scope() when none is given.
"""

import logging
from typing import Dict, List, Optional

from sqlalchemy.orm import Session

from parcel_tracker.models import (
    Logist,
    Notification,
    NotificationKind,
    Package,
    User,
    UserRole,
    WorkflowRole,
)
from parcel_tracker.services.database import session_scope
from parcel_tracker.services.exceptions import NotificationNotFound
from parcel_tracker.services.logging_utils import get_service_logger, log_operation
from parcel_tracker.services.workflow import (
    can_interact,
    get_status_description,
    get_status_label,
    is_terminal,
)
from parcel_tracker.utils.config import get_config

logger = get_service_logger(__name__)


def create_notification(
    user_id: int,
    title: str,
    message: str,
    kind: NotificationKind = NotificationKind.SYSTEM,
    package_id: Optional[int] = None,
    session: Optional[Session] = None,
) -> Notification:
    """Store one notification for one user.

    Args:
        user_id: Recipient user ID
        title: Short headline
        message: Body text
        kind: Notification classification (default: SYSTEM)
        package_id: Related package, if any
        session: Optional session for transaction sharing

    Returns:
        Created Notification
    """
    if session is not None:
        return _create_notification_impl(user_id, title, message, kind, package_id, session)
    with session_scope() as session:
        return _create_notification_impl(user_id, title, message, kind, package_id, session)


def _create_notification_impl(
    user_id: int,
    title: str,
    message: str,
    kind: NotificationKind,
    package_id: Optional[int],
    session: Session,
) -> Notification:
    notification = Notification(
        user_id=user_id,
        title=title,
        message=message,
        kind=NotificationKind(kind),
        package_id=package_id,
    )
    session.add(notification)
    session.flush()
    return notification


def list_notifications(
    user_id: int,
    unread_only: bool = False,
    session: Optional[Session] = None,
) -> List[Notification]:
    """Notifications of a user, newest first."""
    if session is not None:
        return _list_notifications_impl(user_id, unread_only, session)
    with session_scope() as session:
        return _list_notifications_impl(user_id, unread_only, session)


def _list_notifications_impl(user_id: int, unread_only: bool, session: Session) -> List[Notification]:
    query = session.query(Notification).filter(Notification.user_id == user_id)
    if unread_only:
        query = query.filter(Notification.is_read == False)  # noqa: E712
    return query.order_by(Notification.created_at.desc(), Notification.id.desc()).all()


def count_unread(user_id: int, session: Optional[Session] = None) -> int:
    """Number of unread notifications for a user."""
    if session is not None:
        return _count_unread_impl(user_id, session)
    with session_scope() as session:
        return _count_unread_impl(user_id, session)


def _count_unread_impl(user_id: int, session: Session) -> int:
    return (
        session.query(Notification)
        .filter(Notification.user_id == user_id, Notification.is_read == False)  # noqa: E712
        .count()
    )


def mark_read(notification_id: int, session: Optional[Session] = None) -> Notification:
    """Mark one notification as read.

    Raises:
        NotificationNotFound: If the notification does not exist
    """
    if session is not None:
        return _mark_read_impl(notification_id, session)
    with session_scope() as session:
        return _mark_read_impl(notification_id, session)


def _mark_read_impl(notification_id: int, session: Session) -> Notification:
    notification = session.get(Notification, notification_id)
    if notification is None:
        raise NotificationNotFound(notification_id)
    notification.is_read = True
    session.flush()
    return notification


def mark_all_read(user_id: int, session: Optional[Session] = None) -> int:
    """Mark every unread notification of a user as read.

    Returns:
        Number of notifications updated
    """
    if session is not None:
        return _mark_all_read_impl(user_id, session)
    with session_scope() as session:
        return _mark_all_read_impl(user_id, session)


def _mark_all_read_impl(user_id: int, session: Session) -> int:
    updated = (
        session.query(Notification)
        .filter(Notification.user_id == user_id, Notification.is_read == False)  # noqa: E712
        .update({Notification.is_read: True}, synchronize_session="fetch")
    )
    session.flush()
    return updated


# =============================================================================
# Fan-out helpers (always run inside the caller's transaction)
# =============================================================================


def manager_user_ids(session: Session) -> List[int]:
    """IDs of all active admins and managers."""
    rows = (
        session.query(User.id)
        .filter(User.role.in_([UserRole.ADMIN, UserRole.MANAGER]), User.is_active == True)  # noqa: E712
        .order_by(User.id)
        .all()
    )
    return [row.id for row in rows]


def recipients_for_role(package: Package, role: WorkflowRole, session: Session) -> List[int]:
    """User IDs standing behind one workflow role of a package."""
    if role == WorkflowRole.CLIENT:
        return [package.client_id]
    if role == WorkflowRole.LOGIST:
        logist = session.get(Logist, package.logist_id)
        return [logist.user_id] if logist is not None else []
    return manager_user_ids(session)


def notify_users(
    user_ids: List[int],
    title: str,
    message: str,
    kind: NotificationKind,
    package_id: Optional[int],
    session: Session,
) -> List[Notification]:
    """Create the same notification for several users (deduplicated)."""
    if not get_config().notifications_enabled:
        return []
    created = []
    for user_id in dict.fromkeys(user_ids):
        created.append(
            _create_notification_impl(user_id, title, message, kind, package_id, session)
        )
    return created


def notify_package_created(package: Package, session: Session) -> List[Notification]:
    """Tell the assigned logist and all managers that a package was created."""
    site = get_config().site_name
    created = notify_users(
        manager_user_ids(session),
        "New package created",
        f"{site}: a client created package {package.tracking_code}",
        NotificationKind.STATUS_CHANGE,
        package.id,
        session,
    )
    created += notify_users(
        recipients_for_role(package, WorkflowRole.LOGIST, session),
        "New package assigned",
        f"{site}: package {package.tracking_code} has been assigned to you",
        NotificationKind.STATUS_CHANGE,
        package.id,
        session,
    )
    return created


def notify_status_change(
    package: Package,
    changes: Dict[WorkflowRole, object],
    session: Session,
) -> List[Notification]:
    """Notify each role whose new sub-status needs its attention.

    Args:
        package: Package after the transition was applied
        changes: Role -> new sub-status for every write of the transition
        session: Caller's session

    Returns:
        Created notifications
    """
    site = get_config().site_name
    created = []
    for role, status in changes.items():
        if not (can_interact(status, role) or is_terminal(status, role)):
            continue
        label = get_status_label(role, status)
        description = get_status_description(role, status)
        created += notify_users(
            recipients_for_role(package, role, session),
            label,
            f"{site}: package {package.tracking_code} is now '{label}'. {description}",
            NotificationKind.STATUS_CHANGE,
            package.id,
            session,
        )
    if created:
        log_operation(
            logger,
            operation="notify_status_change",
            outcome="created",
            level=logging.DEBUG,
            package_id=package.id,
            count=len(created),
        )
    return created
