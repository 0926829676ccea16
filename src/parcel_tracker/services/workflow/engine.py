"""Workflow engine: decide the outcome of an action request.

Pure functions over the vocabulary, policy, transition and projection
tables. Nothing here touches the database; package_service loads the
package, calls resolve_transition() and writes the result.

Rejection rules, checked in order:
    1. Unknown role, or the role has no sub-status yet -> ForbiddenActionError
    2. Action belongs to another role's vocabulary      -> ForbiddenActionError
    3. Current status is a waiting status:
         the action is the one that produced it (replay) -> InvalidTransitionError
         any other action                                -> ForbiddenActionError
    4. Action not defined for the interactive status     -> InvalidTransitionError
"""

from dataclasses import dataclass, field
from typing import Dict, List

from parcel_tracker.models.enums import Action, WorkflowRole
from parcel_tracker.models.package_status import SubStatus
from parcel_tracker.services.exceptions import ForbiddenActionError, InvalidTransitionError

from .policy import can_interact
from .projection import project
from .transitions import actions_for, coerce_action, next_status, producing_actions, role_actions
from .vocabulary import INITIAL_STATUSES, RoleLike, coerce_status, resolve_role


@dataclass(frozen=True)
class TransitionResult:
    """Outcome of a valid action: the primary write plus mirrored writes."""

    role: WorkflowRole
    action: Action
    from_status: SubStatus
    to_status: SubStatus
    projections: Dict[WorkflowRole, SubStatus] = field(default_factory=dict)

    def changes(self) -> Dict[WorkflowRole, SubStatus]:
        """Every sub-status write this transition performs."""
        result = {self.role: self.to_status}
        result.update(self.projections)
        return result


def initial_statuses() -> Dict[WorkflowRole, SubStatus]:
    """
    Sub-statuses of a newly created package.

    The client starts at CREATED and the creation is mirrored to the
    manager through the projection table. The logist has no sub-status
    until a manager relays the package.
    """
    statuses = dict(INITIAL_STATUSES)
    client_status = statuses[WorkflowRole.CLIENT]
    statuses.update(project(client_status, WorkflowRole.CLIENT))
    return statuses


def resolve_transition(role: RoleLike, current_status, action) -> TransitionResult:
    """
    Validate an action request against the current sub-status.

    Args:
        role: Acting role (admin acts as manager)
        current_status: The acting role's current sub-status (may be None)
        action: Requested action

    Returns:
        TransitionResult describing all writes to perform

    Raises:
        ForbiddenActionError: Role/status mismatch or waiting status
        InvalidTransitionError: Action not defined for the current status
    """
    workflow_role = resolve_role(role)
    if workflow_role is None:
        raise ForbiddenActionError(role, current_status, action, reason="unknown role")

    member = coerce_status(workflow_role, current_status)
    if member is None:
        raise ForbiddenActionError(
            workflow_role, current_status, action, reason="package has not reached this role yet"
        )

    parsed = coerce_action(action)
    if parsed is not None and parsed not in role_actions(workflow_role):
        raise ForbiddenActionError(
            workflow_role, member, parsed, reason="action belongs to another role"
        )

    if not can_interact(member, workflow_role):
        if parsed is not None and parsed in producing_actions(member, workflow_role):
            raise InvalidTransitionError(workflow_role, member, parsed)
        raise ForbiddenActionError(
            workflow_role, member, action, reason="waiting for another role"
        )

    target = next_status(member, parsed, workflow_role)
    if target is None:
        raise InvalidTransitionError(workflow_role, member, action)

    return TransitionResult(
        role=workflow_role,
        action=parsed,
        from_status=member,
        to_status=target,
        projections=project(target, workflow_role),
    )


def available_actions(role: RoleLike, current_status) -> List[Action]:
    """Actions the role may request right now; empty for waiting statuses."""
    workflow_role = resolve_role(role)
    if workflow_role is None or not can_interact(current_status, workflow_role):
        return []
    return actions_for(current_status, workflow_role)
