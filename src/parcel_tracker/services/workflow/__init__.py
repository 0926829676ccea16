"""Package status workflow.

Modules:
- vocabulary: Per-role status sets with labels, descriptions, interactive flags
- policy: can_interact() gate
- transitions: (role, status, action) -> next status
- projection: Cross-role mirrored status writes
- engine: Combines the tables into a single decision
"""

from .vocabulary import (
    StatusInfo,
    VOCABULARIES,
    coerce_status,
    get_status_description,
    get_status_info,
    get_status_label,
    get_statuses_for_role,
    resolve_role,
    role_of,
)
from .policy import can_interact, interactive_statuses, is_waiting_status
from .transitions import (
    TRANSITIONS,
    actions_for,
    coerce_action,
    is_terminal,
    next_status,
    role_actions,
)
from .projection import PROJECTIONS, has_projection, project
from .engine import TransitionResult, available_actions, initial_statuses, resolve_transition

__all__ = [
    "StatusInfo",
    "VOCABULARIES",
    "coerce_status",
    "get_status_description",
    "get_status_info",
    "get_status_label",
    "get_statuses_for_role",
    "resolve_role",
    "role_of",
    "can_interact",
    "interactive_statuses",
    "is_waiting_status",
    "TRANSITIONS",
    "actions_for",
    "coerce_action",
    "is_terminal",
    "next_status",
    "role_actions",
    "PROJECTIONS",
    "has_projection",
    "project",
    "TransitionResult",
    "available_actions",
    "initial_statuses",
    "resolve_transition",
]
