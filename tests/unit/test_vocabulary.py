"""Tests for the per-role status vocabularies and the interaction policy."""

import pytest

from parcel_tracker.models import (
    ClientStatus,
    LogistStatus,
    ManagerStatus,
    UserRole,
    WorkflowRole,
)
from parcel_tracker.services.workflow import (
    VOCABULARIES,
    can_interact,
    coerce_status,
    get_status_description,
    get_status_label,
    get_statuses_for_role,
    interactive_statuses,
    is_waiting_status,
    resolve_role,
    role_of,
)
from parcel_tracker.services.workflow.vocabulary import status_position


class TestVocabularies:
    """Ordered status sets per role."""

    def test_client_order(self):
        assert [s.value for s in get_statuses_for_role("client")] == [
            "created",
            "received_by_logist",
            "awaiting_processing",
            "awaiting_payment",
            "awaiting_shipping",
            "shipped",
        ]

    def test_logist_order(self):
        assert [s.value for s in get_statuses_for_role(WorkflowRole.LOGIST)] == [
            "received_info",
            "package_received",
            "awaiting_shipping",
            "shipped",
            "paid",
        ]

    def test_manager_has_ten_statuses(self):
        statuses = get_statuses_for_role("manager")
        assert len(statuses) == 10
        assert statuses[0] == ManagerStatus.CREATED
        assert statuses[-1] == ManagerStatus.PAID

    def test_admin_sees_manager_vocabulary(self):
        assert get_statuses_for_role(UserRole.ADMIN) == get_statuses_for_role("manager")

    def test_unknown_role_has_empty_vocabulary(self):
        assert get_statuses_for_role("courier") == []

    def test_every_status_has_label_and_description(self):
        for vocabulary in VOCABULARIES.values():
            for info in vocabulary.values():
                assert info.label
                assert info.description

    def test_status_position_follows_lifecycle(self):
        assert status_position(ClientStatus.CREATED) == 0
        assert status_position(ManagerStatus.PAID) == 9
        assert status_position(LogistStatus.SHIPPED) == 3


class TestLabels:
    """Label and description lookups never raise."""

    def test_label_by_key(self):
        assert get_status_label("client", "awaiting_payment") == "Awaiting payment"

    def test_unknown_key_returns_raw_key(self):
        assert get_status_label("client", "lost_in_transit") == "lost_in_transit"

    def test_unknown_key_has_empty_description(self):
        assert get_status_description("manager", "lost_in_transit") == ""

    def test_none_status(self):
        assert get_status_label("logist", None) == ""
        assert get_status_description("logist", None) == ""

    def test_other_roles_member_is_not_reinterpreted(self):
        """A logist member is unknown to the client vocabulary even when the key matches."""
        assert coerce_status("client", LogistStatus.SHIPPED) is None
        assert coerce_status("client", "shipped") == ClientStatus.SHIPPED


class TestRoles:
    """Role resolution."""

    def test_admin_maps_to_manager(self):
        assert resolve_role(UserRole.ADMIN) == WorkflowRole.MANAGER
        assert resolve_role("Admin") == WorkflowRole.MANAGER

    def test_unknown_role(self):
        assert resolve_role("courier") is None
        assert resolve_role(None) is None

    def test_role_of_enum_member(self):
        assert role_of(ClientStatus.SHIPPED) == WorkflowRole.CLIENT
        assert role_of(LogistStatus.SHIPPED) == WorkflowRole.LOGIST
        assert role_of("shipped") is None


class TestInteractionPolicy:
    """can_interact(status, role)."""

    @pytest.mark.parametrize("role", list(WorkflowRole))
    def test_true_iff_interactive_in_own_vocabulary(self, role):
        for status, info in VOCABULARIES[role].items():
            assert can_interact(status, role) is info.interactive
            for other in WorkflowRole:
                if other != role:
                    assert can_interact(status, other) is False

    def test_interactive_statuses(self):
        assert interactive_statuses("client") == [
            ClientStatus.RECEIVED_BY_LOGIST,
            ClientStatus.AWAITING_PAYMENT,
        ]
        assert interactive_statuses("logist") == [
            LogistStatus.RECEIVED_INFO,
            LogistStatus.AWAITING_SHIPPING,
        ]
        assert interactive_statuses("manager") == [
            ManagerStatus.CREATED,
            ManagerStatus.LOGIST_CONFIRMED,
            ManagerStatus.CONFIRMED_BY_CLIENT,
            ManagerStatus.AWAITING_PROCESSING,
            ManagerStatus.SHIPPED_BY_LOGIST,
        ]

    def test_raw_keys_are_accepted(self):
        assert can_interact("awaiting_payment", "client") is True
        assert can_interact("awaiting_shipping", "client") is False

    def test_admin_interacts_like_manager(self):
        assert can_interact(ManagerStatus.CREATED, UserRole.ADMIN) is True

    def test_none_status_is_not_interactive(self):
        assert can_interact(None, "logist") is False

    def test_waiting_status(self):
        assert is_waiting_status(ClientStatus.AWAITING_SHIPPING, "client") is True
        assert is_waiting_status(ClientStatus.AWAITING_PAYMENT, "client") is False
        assert is_waiting_status("not_a_status", "client") is False
