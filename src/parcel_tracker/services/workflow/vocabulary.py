"""Status vocabularies for the three workflow roles.

Each role owns an ordered, closed set of statuses. Every status carries a
display label, a description shown next to it, and an interactive flag
marking the statuses where the owning role is expected to act.

Lookups by key never raise: an unknown key yields the key itself as label
and an empty description.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Optional, Type, Union

from parcel_tracker.models.enums import UserRole, WorkflowRole
from parcel_tracker.models.package_status import (
    ClientStatus,
    LogistStatus,
    ManagerStatus,
    SubStatus,
)


@dataclass(frozen=True)
class StatusInfo:
    """Static metadata for one status."""

    label: str
    description: str
    interactive: bool = False


STATUS_ENUMS: Dict[WorkflowRole, Type[Enum]] = {
    WorkflowRole.CLIENT: ClientStatus,
    WorkflowRole.LOGIST: LogistStatus,
    WorkflowRole.MANAGER: ManagerStatus,
}

VOCABULARIES: Dict[WorkflowRole, Dict[Enum, StatusInfo]] = {
    WorkflowRole.CLIENT: {
        ClientStatus.CREATED: StatusInfo(
            "Created",
            "Package created and awaiting review by a manager",
        ),
        ClientStatus.RECEIVED_BY_LOGIST: StatusInfo(
            "Received by logist",
            "The logist has received the package. Confirm receipt and upload the file",
            interactive=True,
        ),
        ClientStatus.AWAITING_PROCESSING: StatusInfo(
            "Awaiting processing",
            "Awaiting processing by a manager",
        ),
        ClientStatus.AWAITING_PAYMENT: StatusInfo(
            "Awaiting payment",
            "Pay for the package and upload the payment proof",
            interactive=True,
        ),
        ClientStatus.AWAITING_SHIPPING: StatusInfo(
            "Awaiting shipping",
            "Awaiting shipment by the logist",
        ),
        ClientStatus.SHIPPED: StatusInfo(
            "Shipped",
            "The package has been shipped",
        ),
    },
    WorkflowRole.LOGIST: {
        LogistStatus.RECEIVED_INFO: StatusInfo(
            "Package info received",
            "Waiting for the package to arrive",
            interactive=True,
        ),
        LogistStatus.PACKAGE_RECEIVED: StatusInfo(
            "Package received",
            "Package received, awaiting processing",
        ),
        LogistStatus.AWAITING_SHIPPING: StatusInfo(
            "Awaiting shipping",
            "Ready to ship",
            interactive=True,
        ),
        LogistStatus.SHIPPED: StatusInfo(
            "Shipped",
            "The package has been shipped",
        ),
        LogistStatus.PAID: StatusInfo(
            "Paid",
            "Work completed",
        ),
    },
    WorkflowRole.MANAGER: {
        ManagerStatus.CREATED: StatusInfo(
            "Created",
            "Check the details and hand the package to the logist",
            interactive=True,
        ),
        ManagerStatus.SENT_TO_LOGIST: StatusInfo(
            "Sent to logist",
            "Waiting for the logist to receive the package",
        ),
        ManagerStatus.LOGIST_CONFIRMED: StatusInfo(
            "Logist confirmed receipt",
            "Check the details and send them to the client",
            interactive=True,
        ),
        ManagerStatus.INFO_SENT_TO_CLIENT: StatusInfo(
            "Info sent to client",
            "Waiting for the client to confirm",
        ),
        ManagerStatus.CONFIRMED_BY_CLIENT: StatusInfo(
            "Confirmed by client",
            "Set the amount due and send payment details",
            interactive=True,
        ),
        ManagerStatus.AWAITING_PAYMENT: StatusInfo(
            "Awaiting payment",
            "Waiting for the client's payment",
        ),
        ManagerStatus.AWAITING_PROCESSING: StatusInfo(
            "Awaiting processing",
            "Check the payment and prepare for shipping",
            interactive=True,
        ),
        ManagerStatus.AWAITING_SHIPPING: StatusInfo(
            "Awaiting shipping",
            "Waiting for the logist to ship",
        ),
        ManagerStatus.SHIPPED_BY_LOGIST: StatusInfo(
            "Shipped by logist",
            "Check the shipment and notify the client",
            interactive=True,
        ),
        ManagerStatus.PAID: StatusInfo(
            "Paid",
            "Process complete",
        ),
    },
}

# Sub-status every package starts with; the logist has none until relayed.
INITIAL_STATUSES: Dict[WorkflowRole, Optional[SubStatus]] = {
    WorkflowRole.CLIENT: ClientStatus.CREATED,
    WorkflowRole.LOGIST: None,
    WorkflowRole.MANAGER: ManagerStatus.CREATED,
}

RoleLike = Union[WorkflowRole, UserRole, str]


def resolve_role(role: RoleLike) -> Optional[WorkflowRole]:
    """Map any role representation to its WorkflowRole (admin -> manager)."""
    if role is None:
        return None
    return WorkflowRole.from_role(role)


def role_of(status) -> Optional[WorkflowRole]:
    """Return the workflow role whose vocabulary owns an enum status."""
    for role, enum_cls in STATUS_ENUMS.items():
        if isinstance(status, enum_cls):
            return role
    return None


def coerce_status(role: RoleLike, status) -> Optional[SubStatus]:
    """
    Interpret a status value within one role's vocabulary.

    Args:
        role: Workflow role (or account role / role name)
        status: Enum member or raw key string

    Returns:
        The role's enum member, or None if the status does not belong to
        that vocabulary. An enum member from another role's vocabulary is
        never reinterpreted, even when the raw key matches.
    """
    workflow_role = resolve_role(role)
    if workflow_role is None or status is None:
        return None
    enum_cls = STATUS_ENUMS[workflow_role]
    if isinstance(status, Enum):
        return status if isinstance(status, enum_cls) else None
    try:
        return enum_cls(str(status))
    except ValueError:
        return None


def get_statuses_for_role(role: RoleLike) -> List[SubStatus]:
    """
    Ordered status list for a role.

    Admins see the manager vocabulary. Unknown roles get an empty list.
    """
    workflow_role = resolve_role(role)
    if workflow_role is None:
        return []
    return list(STATUS_ENUMS[workflow_role])


def get_status_info(role: RoleLike, status) -> Optional[StatusInfo]:
    """StatusInfo for a status within a role's vocabulary, or None."""
    member = coerce_status(role, status)
    if member is None:
        return None
    return VOCABULARIES[resolve_role(role)][member]


def _raw_key(status) -> str:
    if status is None:
        return ""
    return status.value if isinstance(status, Enum) else str(status)


def get_status_label(role: RoleLike, status) -> str:
    """Display label for a status; the raw key if the status is unknown."""
    info = get_status_info(role, status)
    return info.label if info else _raw_key(status)


def get_status_description(role: RoleLike, status) -> str:
    """Description for a status; empty string if the status is unknown."""
    info = get_status_info(role, status)
    return info.description if info else ""


def status_position(status) -> int:
    """Zero-based lifecycle position of an enum status within its vocabulary."""
    role = role_of(status)
    if role is None:
        return -1
    return list(STATUS_ENUMS[role]).index(status)
