"""Tests for Message Service."""

import pytest

from parcel_tracker.services import message_service
from parcel_tracker.services.exceptions import PackageNotFound, UserNotFound, ValidationError


class TestPostMessage:
    def test_post(self, session, package, client_user):
        message = message_service.post_message(package.id, client_user.id, "  Is it here yet?  ", session=session)
        assert message.text == "Is it here yet?"
        assert message.sender_id == client_user.id

    def test_empty_text(self, session, package, client_user):
        with pytest.raises(ValidationError):
            message_service.post_message(package.id, client_user.id, "   ", session=session)

    def test_too_long(self, session, package, client_user):
        with pytest.raises(ValidationError):
            message_service.post_message(package.id, client_user.id, "x" * 5001, session=session)

    def test_unknown_package(self, session, client_user):
        with pytest.raises(PackageNotFound):
            message_service.post_message(999, client_user.id, "hello", session=session)

    def test_unknown_sender(self, session, package):
        with pytest.raises(UserNotFound):
            message_service.post_message(package.id, 999, "hello", session=session)


class TestListMessages:
    def test_oldest_first(self, session, package, client_user, manager_user):
        message_service.post_message(package.id, client_user.id, "first", session=session)
        message_service.post_message(package.id, manager_user.id, "second", session=session)
        texts = [m.text for m in message_service.list_messages(package.id, session=session)]
        assert texts == ["first", "second"]

    def test_unknown_package(self, session):
        with pytest.raises(PackageNotFound):
            message_service.list_messages(999, session=session)
