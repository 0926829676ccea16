"""
Database models package.

This package contains all SQLAlchemy ORM models for the application.
"""

from .base import Base, BaseModel
from .enums import (
    Action,
    DeliveryType,
    FileKind,
    NotificationKind,
    UserRole,
    WorkflowRole,
)
from .package_status import ClientStatus, LogistStatus, ManagerStatus, SubStatus
from .user import User, Logist
from .package import Package, PackageFile
from .message import Message
from .notification import Notification

__all__ = [
    "Base",
    "BaseModel",
    # Enums
    "Action",
    "DeliveryType",
    "FileKind",
    "NotificationKind",
    "UserRole",
    "WorkflowRole",
    "ClientStatus",
    "LogistStatus",
    "ManagerStatus",
    "SubStatus",
    # Models
    "User",
    "Logist",
    "Package",
    "PackageFile",
    "Message",
    "Notification",
]
