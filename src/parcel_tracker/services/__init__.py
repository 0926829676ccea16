"""Services package - Business logic layer for Parcel Tracker.

This package contains all service modules that provide business logic
and database operations for the application.

Architecture:
- Services: Stateless functions organized by domain (package, user, logist, message, notification)
- Workflow: Pure status tables and the transition engine (no database access)
- Transactions: Managed via session_scope() context manager
- Exceptions: Consistent error handling via ServiceError hierarchy
- Validation: Input validation before database operations

Service Modules:
- package_service: Package creation, status workflow, payment info and files
- user_service: Accounts, roles, credentials and password reset requests
- logist_service: Logist profiles
- message_service: Per-package message threads
- notification_service: Notification records and status-change fan-out

Infrastructure:
- exceptions: Custom exception classes for service layer errors
- database: Session management and database utilities
- logging_utils: Service logger naming and structured operation logs
"""

from . import (
    exceptions,
    database,
    workflow,
    notification_service,
    user_service,
    logist_service,
    message_service,
    package_service,
)

from .exceptions import (
    ServiceError,
    ValidationError,
    ForbiddenActionError,
    NotFoundError,
    PackageNotFound,
    UserNotFound,
    LogistNotFound,
    NotificationNotFound,
    StatusConflictError,
    InvalidTransitionError,
    DatabaseError,
)

__all__ = [
    "exceptions",
    "database",
    "workflow",
    "notification_service",
    "user_service",
    "logist_service",
    "message_service",
    "package_service",
    "ServiceError",
    "ValidationError",
    "ForbiddenActionError",
    "NotFoundError",
    "PackageNotFound",
    "UserNotFound",
    "LogistNotFound",
    "NotificationNotFound",
    "StatusConflictError",
    "InvalidTransitionError",
    "DatabaseError",
]
