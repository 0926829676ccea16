"""Service layer exception classes for Parcel Tracker.

This module defines all custom exceptions used by the service layer to provide
consistent error handling across the application.

Exception Hierarchy:
    ServiceError (base)
    ├── ValidationError
    ├── ForbiddenActionError
    ├── NotFoundError
    │   ├── PackageNotFound
    │   ├── UserNotFound
    │   ├── LogistNotFound
    │   └── NotificationNotFound
    ├── StatusConflictError
    ├── InvalidTransitionError
    └── DatabaseError
"""

from typing import Any, Dict, List, Optional


class ServiceError(Exception):
    """Base exception for all service layer errors.

    All service-specific exceptions inherit from this class. Subclasses set
    http_status_code so an outer HTTP layer can map errors without knowing
    every class.

    Args:
        message: Human-readable message
        correlation_id: Optional request identifier for log correlation
        **context: Extra structured fields (entity ids, statuses, ...)
    """

    http_status_code = 500

    def __init__(self, message: str = "", correlation_id: Optional[str] = None, **context: Any):
        self.message = message
        self.correlation_id = correlation_id
        self.context: Dict[str, Any] = context
        super().__init__(message)

    def to_dict(self) -> Dict[str, Any]:
        """Serialize the error for logs and API responses."""
        return {
            "type": self.__class__.__name__,
            "message": self.message,
            "correlation_id": self.correlation_id,
            "http_status_code": self.http_status_code,
            "context": {key: _plain(value) for key, value in self.context.items()},
        }


def _plain(value: Any) -> Any:
    """Render enums as their value for serialization."""
    return getattr(value, "value", value)


class ValidationError(ServiceError):
    """Raised when input validation fails. Nothing has been written.

    Args:
        errors: List of validation messages

    Example:
        >>> raise ValidationError(["recipient_name is required"])
        ValidationError: Validation failed: recipient_name is required
    """

    http_status_code = 400

    def __init__(self, errors: List[str], **context: Any):
        self.errors = errors
        super().__init__(f"Validation failed: {'; '.join(errors)}", **context)


class ForbiddenActionError(ServiceError):
    """Raised when a role acts outside its vocabulary or on a waiting status.

    Fatal for the request; callers must not retry automatically.

    Args:
        role: Acting role
        status: Caller's current sub-status (None if not yet assigned)
        action: Requested action, if any
        reason: Short explanation
    """

    http_status_code = 403

    def __init__(self, role: Any, status: Any = None, action: Any = None, reason: str = ""):
        self.role = role
        self.status = status
        self.action = action
        msg = f"Role '{_plain(role)}' may not act"
        if action is not None:
            msg += f" with '{_plain(action)}'"
        if status is not None:
            msg += f" at status '{_plain(status)}'"
        if reason:
            msg += f": {reason}"
        super().__init__(msg, role=role, status=status, action=action)


class NotFoundError(ServiceError):
    """Raised when an entity id does not resolve.

    Args:
        entity: Entity name (e.g., "Package")
        identifier: The id or code that was looked up
    """

    http_status_code = 404

    def __init__(self, entity: str, identifier: Any):
        self.entity = entity
        self.identifier = identifier
        super().__init__(f"{entity} '{identifier}' not found", entity=entity, identifier=identifier)


class PackageNotFound(NotFoundError):
    """Raised when a package cannot be found by id or tracking code.

    Example:
        >>> raise PackageNotFound(42)
        PackageNotFound: Package '42' not found
    """

    def __init__(self, package_id: Any):
        self.package_id = package_id
        super().__init__("Package", package_id)


class UserNotFound(NotFoundError):
    """Raised when a user cannot be found by id or email."""

    def __init__(self, user_id: Any):
        self.user_id = user_id
        super().__init__("User", user_id)


class LogistNotFound(NotFoundError):
    """Raised when a logist profile cannot be found."""

    def __init__(self, logist_id: Any):
        self.logist_id = logist_id
        super().__init__("Logist", logist_id)


class NotificationNotFound(NotFoundError):
    """Raised when a notification cannot be found."""

    def __init__(self, notification_id: Any):
        self.notification_id = notification_id
        super().__init__("Notification", notification_id)


class StatusConflictError(ServiceError):
    """Raised when a package changed since the caller last read it.

    The caller should refetch the package and retry once.

    Args:
        package_id: Package being updated
        expected_version: Version the caller acted on
        actual_version: Version found in storage (None if unknown)
    """

    http_status_code = 409

    def __init__(self, package_id: int, expected_version: Optional[int], actual_version: Optional[int] = None):
        self.package_id = package_id
        self.expected_version = expected_version
        self.actual_version = actual_version
        msg = f"Package {package_id} was modified concurrently"
        if expected_version is not None:
            msg += f" (expected version {expected_version}, found {actual_version})"
        super().__init__(
            msg,
            package_id=package_id,
            expected_version=expected_version,
            actual_version=actual_version,
        )


class InvalidTransitionError(ServiceError):
    """Raised when the action is not defined for the current status.

    Typically a stale UI replaying an action that already succeeded; the
    user should refresh and retry.

    Args:
        role: Acting workflow role
        status: Current sub-status
        action: Requested action
    """

    http_status_code = 422

    def __init__(self, role: Any, status: Any, action: Any):
        self.role = role
        self.status = status
        self.action = action
        super().__init__(
            f"Action '{_plain(action)}' is not valid for {_plain(role)} status "
            f"'{_plain(status)}'; refresh and retry",
            role=role,
            status=status,
            action=action,
        )


class DatabaseError(ServiceError):
    """Raised when a database operation fails."""

    http_status_code = 500

    def __init__(self, message: str, original_error: Exception = None):
        self.original_error = original_error
        super().__init__(f"Database error: {message}")
