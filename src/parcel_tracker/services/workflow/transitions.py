"""Transition table: (role, status, action) -> next status.

The workflow only moves forward. Every interactive status has exactly one
outgoing action; waiting and terminal statuses have none.

    client   RECEIVED_BY_LOGIST  --confirm-->           AWAITING_PROCESSING
    client   AWAITING_PAYMENT    --pay-->               AWAITING_SHIPPING
    logist   RECEIVED_INFO       --confirm_received-->  PACKAGE_RECEIVED
    logist   AWAITING_SHIPPING   --ship-->              SHIPPED
    manager  CREATED             --send_to_logist-->    SENT_TO_LOGIST
    manager  LOGIST_CONFIRMED    --send_to_client-->    INFO_SENT_TO_CLIENT
    manager  CONFIRMED_BY_CLIENT --send_payment_info--> AWAITING_PAYMENT
    manager  AWAITING_PROCESSING --send_to_logist-->    AWAITING_SHIPPING
    manager  SHIPPED_BY_LOGIST   --confirm_shipped-->   PAID
"""

from enum import Enum
from typing import Dict, List, Optional, Set, Union

from parcel_tracker.models.enums import Action, WorkflowRole
from parcel_tracker.models.package_status import (
    ClientStatus,
    LogistStatus,
    ManagerStatus,
    SubStatus,
)

from .vocabulary import RoleLike, coerce_status, resolve_role, role_of

TRANSITIONS: Dict[WorkflowRole, Dict[Enum, Dict[Action, Enum]]] = {
    WorkflowRole.CLIENT: {
        ClientStatus.RECEIVED_BY_LOGIST: {Action.CONFIRM: ClientStatus.AWAITING_PROCESSING},
        ClientStatus.AWAITING_PAYMENT: {Action.PAY: ClientStatus.AWAITING_SHIPPING},
    },
    WorkflowRole.LOGIST: {
        LogistStatus.RECEIVED_INFO: {Action.CONFIRM_RECEIVED: LogistStatus.PACKAGE_RECEIVED},
        LogistStatus.AWAITING_SHIPPING: {Action.SHIP: LogistStatus.SHIPPED},
    },
    WorkflowRole.MANAGER: {
        ManagerStatus.CREATED: {Action.SEND_TO_LOGIST: ManagerStatus.SENT_TO_LOGIST},
        ManagerStatus.LOGIST_CONFIRMED: {Action.SEND_TO_CLIENT: ManagerStatus.INFO_SENT_TO_CLIENT},
        ManagerStatus.CONFIRMED_BY_CLIENT: {
            Action.SEND_PAYMENT_INFO: ManagerStatus.AWAITING_PAYMENT
        },
        ManagerStatus.AWAITING_PROCESSING: {
            Action.SEND_TO_LOGIST: ManagerStatus.AWAITING_SHIPPING
        },
        ManagerStatus.SHIPPED_BY_LOGIST: {Action.CONFIRM_SHIPPED: ManagerStatus.PAID},
    },
}

TERMINAL_STATUSES: Dict[WorkflowRole, SubStatus] = {
    WorkflowRole.CLIENT: ClientStatus.SHIPPED,
    WorkflowRole.LOGIST: LogistStatus.PAID,
    WorkflowRole.MANAGER: ManagerStatus.PAID,
}


def coerce_action(action: Union[Action, str, None]) -> Optional[Action]:
    """Parse an action name; None for unknown names."""
    if action is None or isinstance(action, Action):
        return action
    try:
        return Action(str(action).strip().lower())
    except ValueError:
        return None


def _resolve(status, role: Optional[RoleLike]):
    """Pair a status with its role, inferring the role from enum members."""
    workflow_role = resolve_role(role) if role is not None else role_of(status)
    if workflow_role is None:
        return None, None
    return workflow_role, coerce_status(workflow_role, status)


def next_status(status, action, role: Optional[RoleLike] = None) -> Optional[SubStatus]:
    """
    Look up the successor of a status under an action.

    Args:
        status: Current sub-status (enum member, or raw key together with role)
        action: Action enum member or name
        role: Workflow role; inferred from the enum type when omitted

    Returns:
        Next status in the same vocabulary, or None when the action is not
        defined for the status
    """
    workflow_role, member = _resolve(status, role)
    parsed = coerce_action(action)
    if member is None or parsed is None:
        return None
    return TRANSITIONS[workflow_role].get(member, {}).get(parsed)


def actions_for(status, role: Optional[RoleLike] = None) -> List[Action]:
    """Actions defined for a status, in table order."""
    workflow_role, member = _resolve(status, role)
    if member is None:
        return []
    return list(TRANSITIONS[workflow_role].get(member, {}))


def role_actions(role: RoleLike) -> Set[Action]:
    """Every action the role can ever perform."""
    workflow_role = resolve_role(role)
    if workflow_role is None:
        return set()
    return {
        action
        for edges in TRANSITIONS[workflow_role].values()
        for action in edges
    }


def producing_actions(status, role: Optional[RoleLike] = None) -> Set[Action]:
    """Actions whose transition lands on the given status."""
    workflow_role, member = _resolve(status, role)
    if member is None:
        return set()
    return {
        action
        for edges in TRANSITIONS[workflow_role].values()
        for action, target in edges.items()
        if target == member
    }


def is_terminal(status, role: Optional[RoleLike] = None) -> bool:
    """True for the last status of a role's vocabulary."""
    workflow_role, member = _resolve(status, role)
    return member is not None and TERMINAL_STATUSES[workflow_role] == member
