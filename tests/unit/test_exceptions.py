"""Tests for the service exception hierarchy."""

import pytest

from parcel_tracker.models import ClientStatus, WorkflowRole
from parcel_tracker.services.exceptions import (
    DatabaseError,
    ForbiddenActionError,
    InvalidTransitionError,
    LogistNotFound,
    NotFoundError,
    NotificationNotFound,
    PackageNotFound,
    ServiceError,
    StatusConflictError,
    UserNotFound,
    ValidationError,
)


class TestHierarchy:
    """All service exceptions share ServiceError as a base."""

    @pytest.mark.parametrize(
        "exc",
        [
            ValidationError(["x is required"]),
            ForbiddenActionError("client"),
            PackageNotFound(1),
            StatusConflictError(1, 2, 3),
            InvalidTransitionError("client", "created", "pay"),
            DatabaseError("boom"),
        ],
    )
    def test_is_service_error(self, exc):
        assert isinstance(exc, ServiceError)

    def test_not_found_family(self):
        for exc in (PackageNotFound(1), UserNotFound(1), LogistNotFound(1), NotificationNotFound(1)):
            assert isinstance(exc, NotFoundError)
            assert exc.http_status_code == 404


class TestStatusCodes:
    """Class-level HTTP mapping."""

    def test_codes(self):
        assert ValidationError.http_status_code == 400
        assert ForbiddenActionError.http_status_code == 403
        assert NotFoundError.http_status_code == 404
        assert StatusConflictError.http_status_code == 409
        assert InvalidTransitionError.http_status_code == 422
        assert DatabaseError.http_status_code == 500
        assert ServiceError.http_status_code == 500


class TestMessages:
    """Exception messages and attributes."""

    def test_validation_joins_errors(self):
        exc = ValidationError(["a is required", "b is required"])
        assert exc.errors == ["a is required", "b is required"]
        assert str(exc) == "Validation failed: a is required; b is required"

    def test_forbidden_mentions_role_action_status(self):
        exc = ForbiddenActionError(
            WorkflowRole.CLIENT, ClientStatus.AWAITING_SHIPPING, "confirm", reason="waiting for another role"
        )
        message = str(exc)
        assert "client" in message
        assert "confirm" in message
        assert "awaiting_shipping" in message
        assert "waiting for another role" in message

    def test_package_not_found(self):
        exc = PackageNotFound(42)
        assert exc.package_id == 42
        assert str(exc) == "Package '42' not found"

    def test_conflict(self):
        exc = StatusConflictError(7, expected_version=2, actual_version=3)
        assert exc.expected_version == 2
        assert exc.actual_version == 3
        assert "expected version 2" in str(exc)

    def test_invalid_transition_suggests_refresh(self):
        exc = InvalidTransitionError(WorkflowRole.CLIENT, ClientStatus.AWAITING_SHIPPING, "pay")
        assert "refresh and retry" in str(exc)

    def test_database_error_keeps_original(self):
        original = RuntimeError("disk full")
        exc = DatabaseError("write failed", original_error=original)
        assert exc.original_error is original
        assert str(exc) == "Database error: write failed"


class TestToDict:
    """Serialization for logs and API responses."""

    def test_to_dict_flattens_enums(self):
        exc = InvalidTransitionError(WorkflowRole.CLIENT, ClientStatus.AWAITING_SHIPPING, "pay")
        data = exc.to_dict()
        assert data["type"] == "InvalidTransitionError"
        assert data["http_status_code"] == 422
        assert data["context"] == {"role": "client", "status": "awaiting_shipping", "action": "pay"}

    def test_correlation_id(self):
        exc = ServiceError("failed", correlation_id="req-1", package_id=5)
        data = exc.to_dict()
        assert data["correlation_id"] == "req-1"
        assert data["context"] == {"package_id": 5}
