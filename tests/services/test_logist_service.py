"""Tests for Logist Service."""

import pytest

from parcel_tracker.services import logist_service, user_service
from parcel_tracker.services.exceptions import LogistNotFound, UserNotFound, ValidationError


class TestCreateLogist:
    """Tests for create_logist."""

    def test_create(self, session, logist_user):
        logist = logist_service.create_logist(
            logist_user.id, " Warsaw ", "1 Dock Road", supports_offices=True, session=session
        )
        assert logist.location == "Warsaw"
        assert logist.supports_offices is True
        assert logist.supports_lockers is False
        assert logist.is_active is True
        assert logist.user.id == logist_user.id

    def test_requires_logist_role(self, session, client_user):
        with pytest.raises(ValidationError):
            logist_service.create_logist(client_user.id, "Warsaw", "1 Dock Road", session=session)

    def test_one_profile_per_user(self, session, logist):
        with pytest.raises(ValidationError):
            logist_service.create_logist(logist.user_id, "Krakow", "2 Dock Road", session=session)

    def test_missing_fields(self, session, logist_user):
        with pytest.raises(ValidationError) as exc_info:
            logist_service.create_logist(logist_user.id, "", " ", session=session)
        assert len(exc_info.value.errors) == 2

    def test_unknown_user(self, session):
        with pytest.raises(UserNotFound):
            logist_service.create_logist(999, "Warsaw", "1 Dock Road", session=session)


class TestQueries:
    def test_get_logist(self, session, logist):
        assert logist_service.get_logist(logist.id, session=session).address == "1 Warehouse Street"

    def test_get_logist_not_found(self, session):
        with pytest.raises(LogistNotFound):
            logist_service.get_logist(999, session=session)

    def test_get_by_user(self, session, logist, client_user):
        assert logist_service.get_logist_by_user_id(logist.user_id, session=session).id == logist.id
        assert logist_service.get_logist_by_user_id(client_user.id, session=session) is None

    def test_list_active_only(self, session, logist):
        user = user_service.create_user("l2@example.com", role="logist", session=session)
        second = logist_service.create_logist(user.id, "Berlin", "3 Quay", session=session)
        logist_service.update_logist(second.id, {"is_active": False}, session=session)

        assert [l.location for l in logist_service.list_logists(session=session)] == ["Berlin", "Warsaw"]
        assert [l.id for l in logist_service.list_logists(active_only=True, session=session)] == [logist.id]


class TestUpdateLogist:
    def test_update(self, session, logist):
        updated = logist_service.update_logist(
            logist.id, {"address": " 9 New Street ", "supports_lockers": 0}, session=session
        )
        assert updated.address == "9 New Street"
        assert updated.supports_lockers is False

    def test_unknown_field(self, session, logist):
        with pytest.raises(ValidationError):
            logist_service.update_logist(logist.id, {"user_id": 5}, session=session)

    def test_blank_location(self, session, logist):
        with pytest.raises(ValidationError):
            logist_service.update_logist(logist.id, {"location": ""}, session=session)
