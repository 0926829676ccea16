"""Tests for User Service.

Tests cover:
- Create user with validation and password hashing
- Lookup by ID and email, listing by role
- Role and access administration
- Credential validation
- Password reset requests
"""

import pytest

from parcel_tracker.models import Notification, NotificationKind, User, UserRole
from parcel_tracker.services import user_service
from parcel_tracker.services.exceptions import (
    DatabaseError,
    ForbiddenActionError,
    UserNotFound,
    ValidationError,
)


class TestPasswords:
    """hash_password / verify_password."""

    def test_round_trip(self):
        hashed = user_service.hash_password("correct horse")
        assert hashed.startswith("pbkdf2_sha256$")
        assert user_service.verify_password("correct horse", hashed)
        assert not user_service.verify_password("wrong", hashed)

    def test_salted(self):
        assert user_service.hash_password("same") != user_service.hash_password("same")

    def test_malformed_hash_never_matches(self):
        assert not user_service.verify_password("x", "not-a-hash")
        assert not user_service.verify_password("x", None)


class TestCreateUser:
    """Tests for create_user."""

    def test_create(self, session):
        user = user_service.create_user(
            " Ann@Example.COM ", role="client", password="secret1", first_name="Ann", session=session
        )
        assert user.email == "ann@example.com"
        assert user.role == UserRole.CLIENT
        assert user.is_active is True
        assert user.password_hash != "secret1"

    def test_to_dict_hides_hash(self, session):
        user = user_service.create_user("a@example.com", password="secret1", session=session)
        data = user.to_dict()
        assert "password_hash" not in data
        assert data["role"] == "client"
        assert data["display_name"] == "a@example.com"

    def test_duplicate_email(self, session):
        user_service.create_user("a@example.com", session=session)
        with pytest.raises(ValidationError):
            user_service.create_user("A@example.com", session=session)

    def test_concurrent_duplicate_email_is_database_error(self, session):
        # Another writer's row is pending, so the lookup does not see it
        session.autoflush = False
        session.add(User(email="race@example.com", role=UserRole.CLIENT))
        with pytest.raises(DatabaseError) as exc_info:
            user_service.create_user("race@example.com", session=session)
        assert exc_info.value.original_error is not None
        assert exc_info.value.http_status_code == 500

    def test_invalid_email(self, session):
        with pytest.raises(ValidationError):
            user_service.create_user("not-an-email", session=session)

    def test_short_password(self, session):
        with pytest.raises(ValidationError):
            user_service.create_user("a@example.com", password="123", session=session)

    def test_unknown_role(self, session):
        with pytest.raises(ValidationError):
            user_service.create_user("a@example.com", role="courier", session=session)


class TestQueries:
    """Lookup and listing."""

    def test_get_user(self, session, client_user):
        assert user_service.get_user(client_user.id, session=session).email == "client@example.com"

    def test_get_user_not_found(self, session):
        with pytest.raises(UserNotFound):
            user_service.get_user(999, session=session)

    def test_get_by_email(self, session, client_user):
        assert user_service.get_user_by_email("CLIENT@example.com", session=session).id == client_user.id
        assert user_service.get_user_by_email("nobody@example.com", session=session) is None

    def test_list_by_role(self, session, client_user, manager_user, logist_user):
        assert [u.id for u in user_service.list_users(role="manager", session=session)] == [manager_user.id]
        assert len(user_service.list_users(session=session)) == 3

    def test_list_active_only(self, session, client_user, manager_user):
        user_service.set_user_active(client_user.id, False, acting_role="manager", session=session)
        active = user_service.list_users(include_inactive=False, session=session)
        assert [u.id for u in active] == [manager_user.id]


class TestAdministration:
    """Role and access changes."""

    def test_update_role(self, session, client_user):
        user = user_service.update_user_role(client_user.id, "logist", acting_role="admin", session=session)
        assert user.role == UserRole.LOGIST

    def test_update_role_forbidden(self, session, client_user):
        with pytest.raises(ForbiddenActionError):
            user_service.update_user_role(client_user.id, "admin", acting_role="client", session=session)

    def test_set_inactive(self, session, client_user):
        user = user_service.set_user_active(client_user.id, False, acting_role=UserRole.MANAGER, session=session)
        assert user.is_active is False

    def test_set_inactive_forbidden_for_logist(self, session, client_user):
        with pytest.raises(ForbiddenActionError):
            user_service.set_user_active(client_user.id, False, acting_role="logist", session=session)


class TestCredentials:
    """validate_credentials and set_password."""

    def test_valid(self, session, client_user):
        assert user_service.validate_credentials("client@example.com", "secret1", session=session).id == client_user.id

    def test_wrong_password(self, session, client_user):
        assert user_service.validate_credentials("client@example.com", "nope", session=session) is None

    def test_inactive(self, session, client_user):
        user_service.set_user_active(client_user.id, False, acting_role="admin", session=session)
        assert user_service.validate_credentials("client@example.com", "secret1", session=session) is None

    def test_set_password(self, session, client_user):
        user_service.set_password(client_user.id, "brand-new", session=session)
        assert user_service.validate_credentials("client@example.com", "brand-new", session=session)

    def test_set_password_too_short(self, session, client_user):
        with pytest.raises(ValidationError):
            user_service.set_password(client_user.id, "abc", session=session)


class TestPasswordReset:
    """request_password_reset."""

    def test_notifies_managers(self, session, client_user, manager_user):
        admin = user_service.create_user("admin@example.com", role="admin", session=session)
        created = user_service.request_password_reset("client@example.com", session=session)
        assert {n.user_id for n in created} == {manager_user.id, admin.id}
        assert all(n.kind == NotificationKind.PASSWORD_RESET for n in created)
        assert "client@example.com" in created[0].message

    def test_unknown_email_is_silent(self, session, manager_user):
        assert user_service.request_password_reset("ghost@example.com", session=session) == []
        assert session.query(Notification).count() == 0
