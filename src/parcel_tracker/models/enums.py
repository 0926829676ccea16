"""
Enumerations shared by models and services.

This module contains:
- UserRole: Account roles stored on User
- WorkflowRole: The three status vocabularies of the package workflow
- Action: Workflow actions a role can request
- DeliveryType: How the package reaches the recipient
- FileKind: Classification of uploaded package files
- NotificationKind: Classification of notification records
"""

from enum import Enum
from typing import Optional, Union


class UserRole(str, Enum):
    """
    Account role.

    ADMIN is a superset of MANAGER: wherever a manager may act, an admin
    may act too.
    """

    ADMIN = "admin"
    MANAGER = "manager"
    LOGIST = "logist"
    CLIENT = "client"


class WorkflowRole(str, Enum):
    """Owner of one status vocabulary in the package workflow."""

    CLIENT = "client"
    LOGIST = "logist"
    MANAGER = "manager"

    @classmethod
    def from_role(cls, role: Union["WorkflowRole", UserRole, str]) -> Optional["WorkflowRole"]:
        """
        Map an account role (or role name) to its workflow vocabulary.

        Args:
            role: WorkflowRole, UserRole or role name string

        Returns:
            Matching WorkflowRole (admin maps to MANAGER), or None if the
            role is unknown
        """
        if isinstance(role, cls):
            return role
        value = role.value if isinstance(role, Enum) else str(role).strip().lower()
        if value == UserRole.ADMIN.value:
            return cls.MANAGER
        try:
            return cls(value)
        except ValueError:
            return None


class Action(str, Enum):
    """
    Workflow action names.

    SEND_TO_LOGIST is used twice by managers: once to hand a new package to
    the logist and once to release a paid package for shipping. The
    transition table is keyed by status as well, so the two never collide.
    """

    CONFIRM = "confirm"
    PAY = "pay"
    CONFIRM_RECEIVED = "confirm_received"
    SHIP = "ship"
    SEND_TO_LOGIST = "send_to_logist"
    SEND_TO_CLIENT = "send_to_client"
    SEND_PAYMENT_INFO = "send_payment_info"
    CONFIRM_SHIPPED = "confirm_shipped"


class DeliveryType(str, Enum):
    """Delivery method. Locker fields are only meaningful for LOCKER."""

    LOCKER = "locker"
    ADDRESS = "address"


class FileKind(str, Enum):
    """Classification of an uploaded package file."""

    PROOF_OF_RECEIPT = "proof_of_receipt"
    SHIPPING_PROOF = "shipping_proof"
    PAYMENT_PROOF = "payment_proof"
    DOCUMENT = "document"


class NotificationKind(str, Enum):
    """Classification of a notification record."""

    STATUS_CHANGE = "status_change"
    SYSTEM = "system"
    PASSWORD_RESET = "password_reset"
