"""Package Service - package lifecycle and the status workflow boundary.

This module is the entry point used by outer layers (HTTP handlers, CLI):
- create_package: validate details, assign a tracking code, set initial
  sub-statuses, notify the logist and managers
- apply_action: interaction policy -> transition table -> cross-role
  projection, written atomically with the resulting notifications
- set_payment_info / attach_file: side-channel writes with no status effect
- get_visible_status / get_available_actions: per-role views for the UI

Transaction boundary: every public function accepts session=None. With a
session, work joins the caller's transaction; without one, a
session_scope() wraps the whole operation so a failure in any step (primary
write, projected writes, notifications) rolls everything back.

Concurrency: Package.version is SQLAlchemy's version counter. A concurrent
writer makes our UPDATE match no row; the resulting StaleDataError is
reported as StatusConflictError. Callers holding a version may also pass
expected_version to reject stale requests up front.
"""

import logging
import secrets
from datetime import date, datetime
from pathlib import PurePath
from typing import Any, Dict, List, Optional, Union

from sqlalchemy import or_
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from sqlalchemy.orm.exc import StaleDataError

from parcel_tracker.models import (
    Action,
    DeliveryType,
    FileKind,
    Logist,
    NotificationKind,
    Package,
    PackageFile,
    User,
    UserRole,
    WorkflowRole,
)
from parcel_tracker.services import notification_service
from parcel_tracker.services.database import session_scope
from parcel_tracker.services.exceptions import (
    DatabaseError,
    ForbiddenActionError,
    InvalidTransitionError,
    LogistNotFound,
    PackageNotFound,
    StatusConflictError,
    UserNotFound,
    ValidationError,
)
from parcel_tracker.services.logging_utils import get_service_logger, log_operation
from parcel_tracker.services.workflow import (
    available_actions,
    coerce_status,
    get_status_description,
    get_status_label,
    initial_statuses,
    resolve_role,
    resolve_transition,
)
from parcel_tracker.utils.config import get_config
from parcel_tracker.utils.constants import (
    ALLOWED_FILE_EXTENSIONS,
    OPTIONAL_PACKAGE_FIELDS,
    REQUIRED_PACKAGE_FIELDS,
    TRACKING_CODE_ALPHABET,
    TRACKING_CODE_MAX_ATTEMPTS,
    TRACKING_CODE_PREFIX,
    TRACKING_CODE_SUFFIX_LENGTH,
)
from parcel_tracker.utils.datetime_utils import epoch_millis

logger = get_service_logger(__name__)

RoleArg = Union[UserRole, WorkflowRole, str]

FILE_METADATA_FIELDS = ("filename", "original_name", "mime_type", "size", "uploaded_by")


# =============================================================================
# Helpers
# =============================================================================


def _get_package_or_raise(package_id: int, session: Session) -> Package:
    """Get package by ID or raise PackageNotFound.

    Transaction boundary: Inherits session from caller.
    """
    package = session.get(Package, package_id)
    if package is None:
        raise PackageNotFound(package_id)
    return package


def _require_manager(acting_role: RoleArg, operation: str) -> None:
    if resolve_role(acting_role) != WorkflowRole.MANAGER:
        raise ForbiddenActionError(acting_role, action=operation, reason="admin or manager required")


def generate_tracking_code() -> str:
    """Build a candidate tracking code: PKG-<epoch millis>-<4 chars>."""
    suffix = "".join(
        secrets.choice(TRACKING_CODE_ALPHABET) for _ in range(TRACKING_CODE_SUFFIX_LENGTH)
    )
    return f"{TRACKING_CODE_PREFIX}-{epoch_millis()}-{suffix}"


def _allocate_tracking_code(session: Session) -> str:
    for _ in range(TRACKING_CODE_MAX_ATTEMPTS):
        code = generate_tracking_code()
        exists = session.query(Package.id).filter(Package.tracking_code == code).first()
        if exists is None:
            return code
    raise DatabaseError("Could not allocate a unique tracking code")


def _parse_datetime(value: Any) -> Optional[datetime]:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    try:
        return datetime.fromisoformat(str(value))
    except ValueError:
        raise ValidationError([f"estimated_delivery_date '{value}' is not an ISO date"])


def _validate_details(details: Dict[str, Any]) -> Dict[str, Any]:
    """Validate and normalize package details. Raises before any write."""
    errors = []
    allowed = set(REQUIRED_PACKAGE_FIELDS) | set(OPTIONAL_PACKAGE_FIELDS)
    for name in sorted(set(details) - allowed):
        errors.append(f"Unknown field '{name}'")

    clean: Dict[str, Any] = {}
    for name in REQUIRED_PACKAGE_FIELDS:
        value = details.get(name)
        if isinstance(value, str):
            value = value.strip()
        if value is None or value == "":
            errors.append(f"{name} is required")
        clean[name] = value

    if clean.get("delivery_type") not in (None, ""):
        try:
            clean["delivery_type"] = DeliveryType(clean["delivery_type"])
        except ValueError:
            errors.append(f"delivery_type must be one of: {', '.join(d.value for d in DeliveryType)}")

    if errors:
        raise ValidationError(errors)

    for name in OPTIONAL_PACKAGE_FIELDS:
        value = details.get(name)
        if isinstance(value, str):
            value = value.strip() or None
        clean[name] = value
    clean["estimated_delivery_date"] = _parse_datetime(clean["estimated_delivery_date"])
    return clean


def _check_actor(package: Package, role: WorkflowRole, actor_id: int, session: Session) -> None:
    """Verify that the acting user is the party behind the role on this package."""
    actor = session.get(User, actor_id)
    if actor is None:
        raise UserNotFound(actor_id)
    if not actor.is_active:
        raise ForbiddenActionError(actor.role, reason="account is inactive")
    if resolve_role(actor.role) != role:
        raise ForbiddenActionError(actor.role, reason=f"user does not hold the {role.value} role")
    if role == WorkflowRole.CLIENT and package.client_id != actor_id:
        raise ForbiddenActionError(actor.role, reason="package belongs to another client")
    if role == WorkflowRole.LOGIST:
        logist = session.get(Logist, package.logist_id)
        if logist is None or logist.user_id != actor_id:
            raise ForbiddenActionError(actor.role, reason="package is assigned to another logist")


# =============================================================================
# Creation
# =============================================================================


def create_package(
    client_id: int,
    logist_id: int,
    details: Dict[str, Any],
    session: Optional[Session] = None,
) -> Package:
    """Create a package on behalf of a client.

    Transaction boundary: Multi-step operation (atomic).
        1. Validate details, client and logist
        2. Allocate a unique tracking code
        3. Insert the package with its initial sub-statuses
        4. Notify the assigned logist and all managers

    Args:
        client_id: ID of the creating client user
        logist_id: ID of the assigned logist profile
        details: recipient_name, delivery_type, courier_service,
            tracking_number, item_name, shop_name (required) and
            telegram_username, locker_address, locker_code,
            estimated_delivery_date, comments (optional)
        session: Optional session for transaction sharing

    Returns:
        Created Package (client CREATED, manager CREATED, logist None)

    Raises:
        ValidationError: Missing/invalid details or inactive logist
        UserNotFound: Client does not exist
        LogistNotFound: Logist profile does not exist
        ForbiddenActionError: Creator is not an active client
        DatabaseError: The insert failed, e.g. a duplicate tracking code
    """
    if session is not None:
        return _create_package_impl(client_id, logist_id, details, session)
    with session_scope() as session:
        return _create_package_impl(client_id, logist_id, details, session)


def _create_package_impl(
    client_id: int, logist_id: int, details: Dict[str, Any], session: Session
) -> Package:
    clean = _validate_details(details or {})

    client = session.get(User, client_id)
    if client is None:
        raise UserNotFound(client_id)
    if client.role != UserRole.CLIENT or not client.is_active:
        raise ForbiddenActionError(client.role, action="create_package", reason="active client required")

    logist = session.get(Logist, logist_id)
    if logist is None:
        raise LogistNotFound(logist_id)
    if not logist.is_active:
        raise ValidationError([f"Logist {logist_id} is not accepting packages"])

    statuses = initial_statuses()
    package = Package(
        tracking_code=_allocate_tracking_code(session),
        client_id=client_id,
        logist_id=logist_id,
        client_status=statuses[WorkflowRole.CLIENT],
        logist_status=statuses[WorkflowRole.LOGIST],
        manager_status=statuses[WorkflowRole.MANAGER],
        **clean,
    )
    try:
        session.add(package)
        session.flush()
    except SQLAlchemyError as e:
        logger.error(f"Database error creating package: {e}")
        raise DatabaseError(f"Failed to create package: {e}", original_error=e)

    notification_service.notify_package_created(package, session)

    log_operation(
        logger,
        operation="create_package",
        outcome="success",
        package_id=package.id,
        tracking_code=package.tracking_code,
        client_id=client_id,
        logist_id=logist_id,
    )
    return package


# =============================================================================
# Workflow
# =============================================================================


def apply_action(
    package_id: int,
    acting_role: RoleArg,
    action: Union[Action, str],
    expected_version: Optional[int] = None,
    actor_id: Optional[int] = None,
    comment: Optional[str] = None,
    session: Optional[Session] = None,
) -> Package:
    """Advance a package's workflow by one action.

    Transaction boundary: Multi-step operation (atomic).
        1. Load package, check expected_version and acting user
        2. Interaction policy + transition table (resolve_transition)
        3. Write the acting role's new sub-status
        4. Write the projected sub-statuses of the other roles (one hop)
        5. Create notifications for roles that now need to act

    Args:
        package_id: Package to advance
        acting_role: Role of the caller (admin acts as manager)
        action: Requested action
        expected_version: Version the caller last saw (optional)
        actor_id: Acting user; when given, must be the party behind the role
        comment: Manager/admin comment stored on the package (managers only)
        session: Optional session for transaction sharing

    Returns:
        Updated Package

    Raises:
        PackageNotFound: Package does not exist
        StatusConflictError: Package changed since expected_version
        ForbiddenActionError: Role/status mismatch or waiting status
        InvalidTransitionError: Action not defined for the current status
    """
    if session is not None:
        return _apply_action_impl(
            package_id, acting_role, action, expected_version, actor_id, comment, session
        )
    with session_scope() as session:
        return _apply_action_impl(
            package_id, acting_role, action, expected_version, actor_id, comment, session
        )


def _apply_action_impl(
    package_id: int,
    acting_role: RoleArg,
    action: Union[Action, str],
    expected_version: Optional[int],
    actor_id: Optional[int],
    comment: Optional[str],
    session: Session,
) -> Package:
    package = _get_package_or_raise(package_id, session)
    version_before = package.version

    if expected_version is not None and expected_version != version_before:
        log_operation(
            logger,
            operation="apply_action",
            outcome="conflict",
            level=logging.WARNING,
            package_id=package_id,
            expected_version=expected_version,
            actual_version=version_before,
        )
        raise StatusConflictError(package_id, expected_version, version_before)

    workflow_role = resolve_role(acting_role)
    if workflow_role is not None and actor_id is not None:
        _check_actor(package, workflow_role, actor_id, session)

    current = package.get_sub_status(workflow_role) if workflow_role is not None else None
    try:
        result = resolve_transition(acting_role, current, action)
    except (ForbiddenActionError, InvalidTransitionError) as e:
        log_operation(
            logger,
            operation="apply_action",
            outcome="forbidden" if isinstance(e, ForbiddenActionError) else "invalid_transition",
            level=logging.WARNING,
            package_id=package_id,
            role=acting_role,
            action=action,
            status=current,
        )
        raise

    changes = result.changes()
    for role, status in changes.items():
        package.set_sub_status(role, status)
    if comment is not None and result.role == WorkflowRole.MANAGER:
        package.admin_comments = comment

    try:
        session.flush()
    except StaleDataError as e:
        log_operation(
            logger,
            operation="apply_action",
            outcome="conflict",
            level=logging.WARNING,
            package_id=package_id,
            expected_version=version_before,
        )
        raise StatusConflictError(package_id, version_before) from e

    notification_service.notify_status_change(package, changes, session)

    log_operation(
        logger,
        operation="apply_action",
        outcome="success",
        package_id=package_id,
        role=result.role,
        action=result.action,
        from_status=result.from_status,
        to_status=result.to_status,
        projected={r.value: s.value for r, s in result.projections.items()},
        version=package.version,
    )
    return package


def get_visible_status(package: Package, role: RoleArg):
    """The sub-status a role's UI should display (None before it reaches the role)."""
    workflow_role = resolve_role(role)
    if workflow_role is None:
        return None
    return package.get_sub_status(workflow_role)


def get_available_actions(package: Package, role: RoleArg) -> List[Action]:
    """Actions to render as buttons for the role; empty when it must wait."""
    workflow_role = resolve_role(role)
    if workflow_role is None:
        return []
    return available_actions(workflow_role, package.get_sub_status(workflow_role))


def describe_package(package: Package, role: RoleArg) -> Dict[str, Any]:
    """Role-specific summary: visible status with label, description and actions."""
    status = get_visible_status(package, role)
    return {
        "id": package.id,
        "tracking_code": package.tracking_code,
        "role": role.value if hasattr(role, "value") else str(role),
        "status": status.value if status is not None else None,
        "status_label": get_status_label(role, status),
        "status_description": get_status_description(role, status),
        "available_actions": [a.value for a in get_available_actions(package, role)],
        "version": package.version,
    }


# =============================================================================
# Side channels
# =============================================================================


def set_payment_info(
    package_id: int,
    amount: int,
    details: Optional[str],
    acting_role: RoleArg = UserRole.MANAGER,
    session: Optional[Session] = None,
) -> Package:
    """Record the amount due and payment instructions. No status change.

    Args:
        package_id: Package ID
        amount: Amount in minor currency units (non-negative integer)
        details: Free-text payment instructions shown to the client
        acting_role: Must be manager or admin

    Raises:
        ForbiddenActionError: Caller is not a manager/admin
        ValidationError: Amount is not a non-negative integer
        PackageNotFound: Package does not exist
    """
    if session is not None:
        return _set_payment_info_impl(package_id, amount, details, acting_role, session)
    with session_scope() as session:
        return _set_payment_info_impl(package_id, amount, details, acting_role, session)


def _set_payment_info_impl(
    package_id: int, amount: int, details: Optional[str], acting_role: RoleArg, session: Session
) -> Package:
    _require_manager(acting_role, "set_payment_info")
    if isinstance(amount, bool) or not isinstance(amount, int) or amount < 0:
        raise ValidationError(["payment amount must be a non-negative integer (minor units)"])

    package = _get_package_or_raise(package_id, session)
    package.payment_amount = amount
    package.payment_details = details.strip() if details else None
    session.flush()

    log_operation(
        logger, operation="set_payment_info", outcome="success", package_id=package_id, amount=amount
    )
    return package


def attach_file(
    package_id: int,
    file_kind: Union[FileKind, str],
    metadata: Dict[str, Any],
    session: Optional[Session] = None,
) -> PackageFile:
    """Record an uploaded file. No status change, never required by a transition.

    Args:
        package_id: Package ID
        file_kind: proof_of_receipt, shipping_proof, payment_proof or document
        metadata: filename, original_name, mime_type, size (bytes), uploaded_by (user ID)

    Raises:
        ValidationError: Bad kind, missing metadata, disallowed extension or size
        PackageNotFound: Package does not exist
        UserNotFound: Uploader does not exist
    """
    if session is not None:
        return _attach_file_impl(package_id, file_kind, metadata, session)
    with session_scope() as session:
        return _attach_file_impl(package_id, file_kind, metadata, session)


def _attach_file_impl(
    package_id: int, file_kind: Union[FileKind, str], metadata: Dict[str, Any], session: Session
) -> PackageFile:
    metadata = metadata or {}
    errors = []
    try:
        kind = FileKind(file_kind)
    except ValueError:
        kind = None
        errors.append(f"Unknown file kind '{file_kind}'")

    for name in FILE_METADATA_FIELDS:
        if metadata.get(name) in (None, ""):
            errors.append(f"{name} is required")

    original_name = str(metadata.get("original_name") or "")
    extension = PurePath(original_name).suffix.lower().lstrip(".")
    if original_name and extension not in ALLOWED_FILE_EXTENSIONS:
        errors.append(f"File type '.{extension}' is not allowed")

    size = metadata.get("size")
    if size is not None:
        max_bytes = get_config().max_upload_bytes
        if isinstance(size, bool) or not isinstance(size, int) or size <= 0:
            errors.append("size must be a positive integer")
        elif size > max_bytes:
            errors.append(f"File exceeds the {max_bytes} byte limit")

    if errors:
        raise ValidationError(errors)

    _get_package_or_raise(package_id, session)
    uploader_id = metadata["uploaded_by"]
    if session.get(User, uploader_id) is None:
        raise UserNotFound(uploader_id)

    record = PackageFile(
        package_id=package_id,
        kind=kind,
        filename=metadata["filename"],
        original_name=original_name,
        mime_type=metadata["mime_type"],
        size=size,
        uploaded_by=uploader_id,
    )
    session.add(record)
    session.flush()

    log_operation(
        logger,
        operation="attach_file",
        outcome="success",
        package_id=package_id,
        file_kind=kind,
        file_id=record.id,
    )
    return record


def list_package_files(
    package_id: int,
    file_kind: Optional[Union[FileKind, str]] = None,
    session: Optional[Session] = None,
) -> List[PackageFile]:
    """Files of a package, oldest first, optionally filtered by kind."""
    if session is not None:
        return _list_package_files_impl(package_id, file_kind, session)
    with session_scope() as session:
        return _list_package_files_impl(package_id, file_kind, session)


def _list_package_files_impl(package_id: int, file_kind, session: Session) -> List[PackageFile]:
    _get_package_or_raise(package_id, session)
    query = session.query(PackageFile).filter(PackageFile.package_id == package_id)
    if file_kind is not None:
        try:
            kind = FileKind(file_kind)
        except ValueError:
            raise ValidationError([f"Unknown file kind '{file_kind}'"])
        query = query.filter(PackageFile.kind == kind)
    return query.order_by(PackageFile.created_at, PackageFile.id).all()


# =============================================================================
# Queries
# =============================================================================


def get_package(package_id: int, session: Optional[Session] = None) -> Package:
    """Get a package by ID.

    Raises:
        PackageNotFound: If the package does not exist
    """
    if session is not None:
        return _get_package_or_raise(package_id, session)
    with session_scope() as session:
        return _get_package_or_raise(package_id, session)


def get_package_by_tracking_code(tracking_code: str, session: Optional[Session] = None) -> Package:
    """Get a package by tracking code (case-insensitive).

    Raises:
        PackageNotFound: If no package has this code
    """
    if session is not None:
        return _get_package_by_tracking_code_impl(tracking_code, session)
    with session_scope() as session:
        return _get_package_by_tracking_code_impl(tracking_code, session)


def _get_package_by_tracking_code_impl(tracking_code: str, session: Session) -> Package:
    code = (tracking_code or "").strip().upper()
    package = session.query(Package).filter(Package.tracking_code == code).first()
    if package is None:
        raise PackageNotFound(tracking_code)
    return package


def list_packages(
    client_id: Optional[int] = None,
    logist_id: Optional[int] = None,
    role: Optional[RoleArg] = None,
    status: Optional[str] = None,
    search: Optional[str] = None,
    session: Optional[Session] = None,
) -> List[Package]:
    """List packages, newest first.

    Args:
        client_id: Only packages of this client
        logist_id: Only packages assigned to this logist profile
        role: Vocabulary in which status is interpreted (default: manager)
        status: Sub-status key to filter on
        search: Case-insensitive match on tracking code, recipient or item name

    Raises:
        ValidationError: If status is not a key of the role's vocabulary
    """
    if session is not None:
        return _list_packages_impl(client_id, logist_id, role, status, search, session)
    with session_scope() as session:
        return _list_packages_impl(client_id, logist_id, role, status, search, session)


def _list_packages_impl(client_id, logist_id, role, status, search, session: Session) -> List[Package]:
    query = session.query(Package)
    if client_id is not None:
        query = query.filter(Package.client_id == client_id)
    if logist_id is not None:
        query = query.filter(Package.logist_id == logist_id)

    if status is not None:
        workflow_role = resolve_role(role) if role is not None else WorkflowRole.MANAGER
        member = coerce_status(workflow_role, status) if workflow_role else None
        if member is None:
            raise ValidationError([f"Unknown status '{status}' for role '{role}'"])
        column = getattr(Package, f"{workflow_role.value}_status")
        query = query.filter(column == member)

    if search:
        pattern = f"%{search.strip()}%"
        query = query.filter(
            or_(
                Package.tracking_code.ilike(pattern),
                Package.recipient_name.ilike(pattern),
                Package.item_name.ilike(pattern),
            )
        )

    return query.order_by(Package.created_at.desc(), Package.id.desc()).all()


def list_packages_for_user(
    user_id: int,
    status: Optional[str] = None,
    search: Optional[str] = None,
    session: Optional[Session] = None,
) -> List[Package]:
    """Packages visible to a user: own (client), assigned (logist) or all (managers).

    The status filter is interpreted in the user's own vocabulary.
    """
    if session is not None:
        return _list_packages_for_user_impl(user_id, status, search, session)
    with session_scope() as session:
        return _list_packages_for_user_impl(user_id, status, search, session)


def _list_packages_for_user_impl(user_id: int, status, search, session: Session) -> List[Package]:
    user = session.get(User, user_id)
    if user is None:
        raise UserNotFound(user_id)

    role = resolve_role(user.role)
    if role == WorkflowRole.CLIENT:
        return _list_packages_impl(user_id, None, role, status, search, session)
    if role == WorkflowRole.LOGIST:
        logist = session.query(Logist).filter(Logist.user_id == user_id).first()
        if logist is None:
            return []
        return _list_packages_impl(None, logist.id, role, status, search, session)
    return _list_packages_impl(None, None, role, status, search, session)


# =============================================================================
# Administration
# =============================================================================


def set_admin_comments(
    package_id: int,
    comments: Optional[str],
    acting_role: RoleArg,
    session: Optional[Session] = None,
) -> Package:
    """Store manager/admin comments on a package."""
    if session is not None:
        return _set_admin_comments_impl(package_id, comments, acting_role, session)
    with session_scope() as session:
        return _set_admin_comments_impl(package_id, comments, acting_role, session)


def _set_admin_comments_impl(package_id: int, comments, acting_role, session: Session) -> Package:
    _require_manager(acting_role, "set_admin_comments")
    package = _get_package_or_raise(package_id, session)
    package.admin_comments = comments.strip() if comments else None
    session.flush()
    return package


def reassign_package(
    package_id: int,
    acting_role: RoleArg,
    logist_id: Optional[int] = None,
    client_id: Optional[int] = None,
    session: Optional[Session] = None,
) -> Package:
    """Move a package to another logist and/or client. Managers only.

    Sub-statuses are left untouched; the new parties inherit the package
    at its current point in the workflow. The newly assigned logist is
    notified.

    Raises:
        ForbiddenActionError: Caller is not a manager/admin
        ValidationError: Neither target given, or target has the wrong role
        PackageNotFound / LogistNotFound / UserNotFound
    """
    if session is not None:
        return _reassign_package_impl(package_id, acting_role, logist_id, client_id, session)
    with session_scope() as session:
        return _reassign_package_impl(package_id, acting_role, logist_id, client_id, session)


def _reassign_package_impl(package_id, acting_role, logist_id, client_id, session: Session) -> Package:
    _require_manager(acting_role, "reassign_package")
    if logist_id is None and client_id is None:
        raise ValidationError(["Provide logist_id and/or client_id"])

    package = _get_package_or_raise(package_id, session)

    if client_id is not None:
        client = session.get(User, client_id)
        if client is None:
            raise UserNotFound(client_id)
        if client.role != UserRole.CLIENT:
            raise ValidationError([f"User {client_id} is not a client"])
        package.client_id = client_id

    logist_changed = False
    if logist_id is not None:
        logist = session.get(Logist, logist_id)
        if logist is None:
            raise LogistNotFound(logist_id)
        if not logist.is_active:
            raise ValidationError([f"Logist {logist_id} is not accepting packages"])
        logist_changed = logist_id != package.logist_id
        package.logist_id = logist_id

    session.flush()

    if logist_changed:
        notification_service.notify_users(
            notification_service.recipients_for_role(package, WorkflowRole.LOGIST, session),
            "Package reassigned",
            f"{get_config().site_name}: package {package.tracking_code} has been assigned to you",
            NotificationKind.STATUS_CHANGE,
            package.id,
            session,
        )

    log_operation(
        logger,
        operation="reassign_package",
        outcome="success",
        package_id=package_id,
        logist_id=package.logist_id,
        client_id=package.client_id,
    )
    return package
