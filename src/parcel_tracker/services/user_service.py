"""User Service - accounts, roles and credentials.

Key Features:
- Create users with a role and a salted PBKDF2 password hash
- Role and access administration, restricted to admins and managers
- Credential validation for the (external) login layer
- Password reset requests, relayed to managers as notifications

All functions follow the session pattern: pass session= to share the
caller's transaction, otherwise a session_scope() is opened.

Example Usage:
    >>> from parcel_tracker.services.user_service import create_user
    >>> user = create_user("ann@example.com", role=UserRole.CLIENT, password="s3cret")
    >>> user.role
    <UserRole.CLIENT: 'client'>
"""

import hashlib
import hmac
import logging
import secrets
from typing import List, Optional, Union

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from parcel_tracker.models import Notification, NotificationKind, User, UserRole
from parcel_tracker.services.database import session_scope
from parcel_tracker.services.exceptions import (
    DatabaseError,
    ForbiddenActionError,
    UserNotFound,
    ValidationError,
)
from parcel_tracker.services.logging_utils import get_service_logger, log_operation
from parcel_tracker.services import notification_service

logger = get_service_logger(__name__)

PBKDF2_ALGORITHM = "sha256"
PBKDF2_ITERATIONS = 260000

ADMIN_ROLES = (UserRole.ADMIN, UserRole.MANAGER)


# =============================================================================
# Password hashing
# =============================================================================


def hash_password(password: str, salt: Optional[str] = None) -> str:
    """Hash a password as 'pbkdf2_sha256$<iterations>$<salt>$<hex digest>'."""
    if salt is None:
        salt = secrets.token_hex(16)
    digest = hashlib.pbkdf2_hmac(
        PBKDF2_ALGORITHM, password.encode("utf-8"), salt.encode("utf-8"), PBKDF2_ITERATIONS
    )
    return f"pbkdf2_{PBKDF2_ALGORITHM}${PBKDF2_ITERATIONS}${salt}${digest.hex()}"


def verify_password(password: str, password_hash: Optional[str]) -> bool:
    """Check a password against a stored hash. Malformed hashes never match."""
    if not password_hash:
        return False
    try:
        scheme, iterations, salt, expected = password_hash.split("$")
        algorithm = scheme.split("_", 1)[1]
        digest = hashlib.pbkdf2_hmac(
            algorithm, password.encode("utf-8"), salt.encode("utf-8"), int(iterations)
        )
    except (ValueError, IndexError):
        return False
    return hmac.compare_digest(digest.hex(), expected)


def _parse_role(role: Union[UserRole, str]) -> UserRole:
    try:
        return UserRole(role)
    except ValueError:
        raise ValidationError([f"Unknown role '{role}'"])


def _require_admin(acting_role: Union[UserRole, str], operation: str) -> None:
    try:
        parsed = UserRole(acting_role)
    except ValueError:
        parsed = None
    if parsed not in ADMIN_ROLES:
        raise ForbiddenActionError(acting_role, action=operation, reason="admin or manager required")


# =============================================================================
# CRUD
# =============================================================================


def create_user(
    email: str,
    role: Union[UserRole, str] = UserRole.CLIENT,
    password: Optional[str] = None,
    first_name: Optional[str] = None,
    last_name: Optional[str] = None,
    telegram_username: Optional[str] = None,
    session: Optional[Session] = None,
) -> User:
    """Create a new user.

    Args:
        email: Unique login email (case-insensitive, stored lower-case)
        role: Account role (default: client)
        password: Plain password; only its hash is stored
        first_name: Given name (optional)
        last_name: Family name (optional)
        telegram_username: Contact handle (optional)
        session: Optional database session

    Returns:
        Created User

    Raises:
        ValidationError: If email is missing/invalid, already taken, or role unknown
        DatabaseError: If the insert fails, e.g. a concurrent duplicate email
    """
    if session is not None:
        return _create_user_impl(
            email, role, password, first_name, last_name, telegram_username, session
        )
    with session_scope() as session:
        return _create_user_impl(
            email, role, password, first_name, last_name, telegram_username, session
        )


def _create_user_impl(
    email: str,
    role: Union[UserRole, str],
    password: Optional[str],
    first_name: Optional[str],
    last_name: Optional[str],
    telegram_username: Optional[str],
    session: Session,
) -> User:
    errors = []
    normalized = (email or "").strip().lower()
    if not normalized or "@" not in normalized:
        errors.append("A valid email is required")
    if password is not None and len(password) < 6:
        errors.append("Password must be at least 6 characters")
    if errors:
        raise ValidationError(errors)

    parsed_role = _parse_role(role)

    if session.query(User).filter(User.email == normalized).first() is not None:
        raise ValidationError([f"Email '{normalized}' is already registered"])

    user = User(
        email=normalized,
        role=parsed_role,
        first_name=first_name,
        last_name=last_name,
        telegram_username=telegram_username,
        password_hash=hash_password(password) if password else None,
        is_active=True,
    )
    try:
        session.add(user)
        session.flush()
    except SQLAlchemyError as e:
        logger.error(f"Database error creating user: {e}")
        raise DatabaseError(f"Failed to create user: {e}", original_error=e)

    log_operation(logger, operation="create_user", outcome="success", user_id=user.id, role=parsed_role)
    return user


def get_user(user_id: int, session: Optional[Session] = None) -> User:
    """Get a user by ID.

    Raises:
        UserNotFound: If no user has this ID
    """
    if session is not None:
        return _get_user_impl(user_id, session)
    with session_scope() as session:
        return _get_user_impl(user_id, session)


def _get_user_impl(user_id: int, session: Session) -> User:
    user = session.get(User, user_id)
    if user is None:
        raise UserNotFound(user_id)
    return user


def get_user_by_email(email: str, session: Optional[Session] = None) -> Optional[User]:
    """Get a user by email, or None."""
    if session is not None:
        return _get_user_by_email_impl(email, session)
    with session_scope() as session:
        return _get_user_by_email_impl(email, session)


def _get_user_by_email_impl(email: str, session: Session) -> Optional[User]:
    normalized = (email or "").strip().lower()
    return session.query(User).filter(User.email == normalized).first()


def list_users(
    role: Optional[Union[UserRole, str]] = None,
    include_inactive: bool = True,
    session: Optional[Session] = None,
) -> List[User]:
    """List users ordered by creation, optionally filtered by role."""
    if session is not None:
        return _list_users_impl(role, include_inactive, session)
    with session_scope() as session:
        return _list_users_impl(role, include_inactive, session)


def _list_users_impl(role, include_inactive: bool, session: Session) -> List[User]:
    query = session.query(User)
    if role is not None:
        query = query.filter(User.role == _parse_role(role))
    if not include_inactive:
        query = query.filter(User.is_active == True)  # noqa: E712
    return query.order_by(User.created_at, User.id).all()


def update_user_role(
    user_id: int,
    role: Union[UserRole, str],
    acting_role: Union[UserRole, str],
    session: Optional[Session] = None,
) -> User:
    """Change a user's role. Admins and managers only.

    Raises:
        ForbiddenActionError: If acting_role is not admin/manager
        ValidationError: If role is unknown
        UserNotFound: If the user does not exist
    """
    if session is not None:
        return _update_user_role_impl(user_id, role, acting_role, session)
    with session_scope() as session:
        return _update_user_role_impl(user_id, role, acting_role, session)


def _update_user_role_impl(user_id: int, role, acting_role, session: Session) -> User:
    _require_admin(acting_role, "change_role")
    parsed_role = _parse_role(role)
    user = _get_user_impl(user_id, session)
    previous = user.role
    user.role = parsed_role
    session.flush()

    log_operation(
        logger,
        operation="update_user_role",
        outcome="success",
        user_id=user_id,
        previous_role=previous,
        new_role=parsed_role,
    )
    return user


def set_user_active(
    user_id: int,
    is_active: bool,
    acting_role: Union[UserRole, str],
    session: Optional[Session] = None,
) -> User:
    """Grant or revoke a user's access. Admins and managers only."""
    if session is not None:
        return _set_user_active_impl(user_id, is_active, acting_role, session)
    with session_scope() as session:
        return _set_user_active_impl(user_id, is_active, acting_role, session)


def _set_user_active_impl(user_id: int, is_active: bool, acting_role, session: Session) -> User:
    _require_admin(acting_role, "set_access")
    user = _get_user_impl(user_id, session)
    user.is_active = bool(is_active)
    session.flush()

    log_operation(
        logger, operation="set_user_active", outcome="success", user_id=user_id, is_active=user.is_active
    )
    return user


def set_password(user_id: int, password: str, session: Optional[Session] = None) -> User:
    """Replace a user's password hash."""
    if session is not None:
        return _set_password_impl(user_id, password, session)
    with session_scope() as session:
        return _set_password_impl(user_id, password, session)


def _set_password_impl(user_id: int, password: str, session: Session) -> User:
    if not password or len(password) < 6:
        raise ValidationError(["Password must be at least 6 characters"])
    user = _get_user_impl(user_id, session)
    user.password_hash = hash_password(password)
    session.flush()
    return user


# =============================================================================
# Credentials
# =============================================================================


def validate_credentials(email: str, password: str, session: Optional[Session] = None) -> Optional[User]:
    """Return the user if the password matches and the account is active.

    Returns:
        User on success, None otherwise (unknown email, wrong password,
        or inactive account are not distinguished)
    """
    if session is not None:
        return _validate_credentials_impl(email, password, session)
    with session_scope() as session:
        return _validate_credentials_impl(email, password, session)


def _validate_credentials_impl(email: str, password: str, session: Session) -> Optional[User]:
    user = _get_user_by_email_impl(email, session)
    if user is None or not user.is_active or not verify_password(password or "", user.password_hash):
        log_operation(logger, operation="validate_credentials", outcome="rejected", level=logging.WARNING)
        return None
    return user


def request_password_reset(email: str, session: Optional[Session] = None) -> List[Notification]:
    """Ask managers to reset a user's password.

    Unknown emails are ignored silently so the call cannot be used to discover
    which accounts exist.

    Returns:
        Notifications created for managers (empty for unknown emails)
    """
    if session is not None:
        return _request_password_reset_impl(email, session)
    with session_scope() as session:
        return _request_password_reset_impl(email, session)


def _request_password_reset_impl(email: str, session: Session) -> List[Notification]:
    user = _get_user_by_email_impl(email, session)
    if user is None:
        log_operation(logger, operation="request_password_reset", outcome="unknown_email")
        return []

    created = notification_service.notify_users(
        notification_service.manager_user_ids(session),
        "Password reset requested",
        f"User {user.display_name} ({user.email}) requested a password reset",
        NotificationKind.PASSWORD_RESET,
        None,
        session,
    )
    log_operation(
        logger, operation="request_password_reset", outcome="success", user_id=user.id, count=len(created)
    )
    return created
