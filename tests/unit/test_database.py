"""Tests for database setup and reset helpers."""

import pytest
from sqlalchemy.orm import Session

from parcel_tracker.models import User
from parcel_tracker.services import database, user_service


@pytest.fixture
def memory_engine(monkeypatch):
    """The global engine, pointed at an in-memory database with tables created."""
    monkeypatch.setenv("PARCEL_TRACKER_DB_URL", "sqlite:///:memory:")
    database.close_connections()
    engine = database.get_engine()
    database.init_database(engine)
    yield engine
    database.close_connections()


class TestResetDatabase:
    """reset_database."""

    def test_requires_confirm(self, memory_engine):
        with pytest.raises(ValueError):
            database.reset_database()

    def test_guard_keeps_data(self, memory_engine):
        with Session(bind=memory_engine) as session:
            user_service.create_user("keep@example.com", session=session)
            session.commit()

        with pytest.raises(ValueError):
            database.reset_database(confirm=False)

        with Session(bind=memory_engine) as session:
            assert session.query(User).count() == 1

    def test_confirmed_reset_drops_data(self, memory_engine):
        with Session(bind=memory_engine) as session:
            user_service.create_user("gone@example.com", session=session)
            session.commit()

        database.reset_database(confirm=True)

        assert database.verify_database() is True
        with Session(bind=memory_engine) as session:
            assert session.query(User).count() == 0
