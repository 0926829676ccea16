"""Interaction policy: which role may act at which sub-status.

A role may act only on a status of its own vocabulary that is flagged
interactive. Exactly one role owns each status, so at most one role can
act at any given point of a package's lifecycle.
"""

from typing import List

from parcel_tracker.models.package_status import SubStatus

from .vocabulary import (
    VOCABULARIES,
    RoleLike,
    coerce_status,
    get_status_info,
    resolve_role,
)


def can_interact(status, role: RoleLike) -> bool:
    """
    Check whether a role may act on a package at the given sub-status.

    Args:
        status: Sub-status as enum member or raw key
        role: Workflow role, account role or role name (admin acts as manager)

    Returns:
        True iff the status belongs to the role's vocabulary and is
        interactive there
    """
    info = get_status_info(role, status)
    return bool(info and info.interactive)


def interactive_statuses(role: RoleLike) -> List[SubStatus]:
    """Statuses at which the role is expected to act, in lifecycle order."""
    workflow_role = resolve_role(role)
    if workflow_role is None:
        return []
    return [
        status
        for status, info in VOCABULARIES[workflow_role].items()
        if info.interactive
    ]


def is_waiting_status(status, role: RoleLike) -> bool:
    """True for a status of the role's vocabulary where the role must wait."""
    member = coerce_status(role, status)
    return member is not None and not can_interact(member, role)
