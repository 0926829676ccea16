"""Cross-role projection table.

When a role's sub-status changes, the other roles' views of the package may
have to change too. This table names, for each (role, new status), the exact
sub-status to write into the other vocabularies.

Projections are applied once per triggering change and never chained: a
projected write does not itself trigger another projection. Relaying a
change further always takes a separate, explicit action by the role that
now holds the package.
"""

from enum import Enum
from typing import Dict, Optional, Tuple

from parcel_tracker.models.enums import WorkflowRole
from parcel_tracker.models.package_status import (
    ClientStatus,
    LogistStatus,
    ManagerStatus,
    SubStatus,
)

from .vocabulary import RoleLike, coerce_status, resolve_role, role_of

C, L, M = WorkflowRole.CLIENT, WorkflowRole.LOGIST, WorkflowRole.MANAGER

PROJECTIONS: Dict[Tuple[WorkflowRole, Enum], Dict[WorkflowRole, Enum]] = {
    # Client creates the package; managers see it immediately
    (C, ClientStatus.CREATED): {M: ManagerStatus.CREATED},
    (M, ManagerStatus.SENT_TO_LOGIST): {L: LogistStatus.RECEIVED_INFO},
    (L, LogistStatus.PACKAGE_RECEIVED): {M: ManagerStatus.LOGIST_CONFIRMED},
    (M, ManagerStatus.INFO_SENT_TO_CLIENT): {C: ClientStatus.RECEIVED_BY_LOGIST},
    (C, ClientStatus.AWAITING_PROCESSING): {M: ManagerStatus.CONFIRMED_BY_CLIENT},
    (M, ManagerStatus.AWAITING_PAYMENT): {C: ClientStatus.AWAITING_PAYMENT},
    (C, ClientStatus.AWAITING_SHIPPING): {M: ManagerStatus.AWAITING_PROCESSING},
    (M, ManagerStatus.AWAITING_SHIPPING): {L: LogistStatus.AWAITING_SHIPPING},
    (L, LogistStatus.SHIPPED): {M: ManagerStatus.SHIPPED_BY_LOGIST},
    # Manager confirms shipment and manual payment; everyone reaches the end
    (M, ManagerStatus.PAID): {C: ClientStatus.SHIPPED, L: LogistStatus.PAID},
}


def project(status, role: Optional[RoleLike] = None) -> Dict[WorkflowRole, SubStatus]:
    """
    Sub-statuses to write into the other vocabularies after a change.

    Args:
        status: The triggering role's new sub-status
        role: Triggering role; inferred from the enum type when omitted

    Returns:
        Mapping of other role -> status to assign. Empty when the status
        has no row, which means "nothing to mirror", not an error.
    """
    workflow_role = resolve_role(role) if role is not None else role_of(status)
    if workflow_role is None:
        return {}
    member = coerce_status(workflow_role, status)
    if member is None:
        return {}
    return dict(PROJECTIONS.get((workflow_role, member), {}))


def has_projection(status, role: Optional[RoleLike] = None) -> bool:
    """True if the status has a row in the projection table."""
    return bool(project(status, role))
