"""Tests for the workflow engine decision function."""

import pytest

from parcel_tracker.models import (
    Action,
    ClientStatus,
    LogistStatus,
    ManagerStatus,
    UserRole,
    WorkflowRole,
)
from parcel_tracker.services.exceptions import ForbiddenActionError, InvalidTransitionError
from parcel_tracker.services.workflow import (
    available_actions,
    initial_statuses,
    resolve_transition,
)


class TestInitialStatuses:
    """Sub-statuses of a new package."""

    def test_initial(self):
        assert initial_statuses() == {
            WorkflowRole.CLIENT: ClientStatus.CREATED,
            WorkflowRole.LOGIST: None,
            WorkflowRole.MANAGER: ManagerStatus.CREATED,
        }


class TestResolveTransition:
    """resolve_transition(role, current_status, action)."""

    def test_manager_relay(self):
        result = resolve_transition("manager", ManagerStatus.CREATED, "send_to_logist")
        assert result.role == WorkflowRole.MANAGER
        assert result.action == Action.SEND_TO_LOGIST
        assert result.from_status == ManagerStatus.CREATED
        assert result.to_status == ManagerStatus.SENT_TO_LOGIST
        assert result.changes() == {
            WorkflowRole.MANAGER: ManagerStatus.SENT_TO_LOGIST,
            WorkflowRole.LOGIST: LogistStatus.RECEIVED_INFO,
        }

    def test_admin_acts_as_manager(self):
        result = resolve_transition(UserRole.ADMIN, ManagerStatus.SHIPPED_BY_LOGIST, Action.CONFIRM_SHIPPED)
        assert result.role == WorkflowRole.MANAGER
        assert result.changes()[WorkflowRole.CLIENT] == ClientStatus.SHIPPED

    def test_client_pay(self):
        result = resolve_transition("client", "awaiting_payment", "pay")
        assert result.changes() == {
            WorkflowRole.CLIENT: ClientStatus.AWAITING_SHIPPING,
            WorkflowRole.MANAGER: ManagerStatus.AWAITING_PROCESSING,
        }

    def test_unknown_role_forbidden(self):
        with pytest.raises(ForbiddenActionError):
            resolve_transition("courier", ManagerStatus.CREATED, "send_to_logist")

    def test_role_without_status_forbidden(self):
        with pytest.raises(ForbiddenActionError):
            resolve_transition("logist", None, "confirm_received")

    def test_action_of_another_role_forbidden(self):
        with pytest.raises(ForbiddenActionError):
            resolve_transition("client", ClientStatus.AWAITING_PAYMENT, "send_to_logist")

    def test_action_at_waiting_status_forbidden(self):
        with pytest.raises(ForbiddenActionError) as exc_info:
            resolve_transition("client", ClientStatus.AWAITING_SHIPPING, "confirm")
        assert exc_info.value.http_status_code == 403

    def test_replay_is_invalid_transition(self):
        """Repeating the action that produced the current status."""
        with pytest.raises(InvalidTransitionError) as exc_info:
            resolve_transition("client", ClientStatus.AWAITING_SHIPPING, "pay")
        assert exc_info.value.http_status_code == 422

    def test_unknown_action_at_interactive_status(self):
        with pytest.raises(InvalidTransitionError):
            resolve_transition("manager", ManagerStatus.CREATED, "teleport")

    def test_wrong_action_at_interactive_status(self):
        with pytest.raises(InvalidTransitionError):
            resolve_transition("manager", ManagerStatus.CREATED, "confirm_shipped")

    def test_terminal_status_rejects_everything(self):
        for action in Action:
            with pytest.raises((ForbiddenActionError, InvalidTransitionError)):
                resolve_transition("manager", ManagerStatus.PAID, action)


class TestAvailableActions:
    """available_actions(role, status)."""

    def test_interactive(self):
        assert available_actions("logist", LogistStatus.AWAITING_SHIPPING) == [Action.SHIP]

    def test_waiting(self):
        assert available_actions("client", ClientStatus.AWAITING_SHIPPING) == []

    def test_no_status_yet(self):
        assert available_actions("logist", None) == []

    def test_unknown_role(self):
        assert available_actions("courier", ManagerStatus.CREATED) == []
