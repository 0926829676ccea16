"""Pytest configuration and fixtures for Parcel Tracker tests."""

import os

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, scoped_session

from parcel_tracker.models import Base, UserRole
from parcel_tracker.utils.config import reset_config


PACKAGE_DETAILS = {
    "recipient_name": "Ann Smith",
    "delivery_type": "address",
    "courier_service": "UPS",
    "tracking_number": "1Z999AA10123456784",
    "item_name": "Wireless headphones",
    "shop_name": "Example Shop",
}


@pytest.fixture(autouse=True)
def clean_config(monkeypatch):
    """Start every test with a fresh config and no PARCEL_TRACKER_* overrides."""
    for key in list(os.environ):
        if key.startswith("PARCEL_TRACKER_"):
            monkeypatch.delenv(key)
    reset_config()
    yield
    reset_config()


@pytest.fixture
def engine():
    """Create in-memory SQLite database for testing."""
    engine = create_engine("sqlite:///:memory:")
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session(engine):
    """Create database session for testing."""
    Session = sessionmaker(bind=engine)
    session = Session()
    yield session
    session.close()


@pytest.fixture(scope="function")
def test_db():
    """Provide a clean test database for each test function.

    This fixture:
    1. Creates an in-memory SQLite database
    2. Creates all tables
    3. Points the global session factory at it
    4. Drops all tables after the test completes
    """
    engine = create_engine("sqlite:///:memory:", echo=False)
    Base.metadata.create_all(engine)

    session_factory = sessionmaker(bind=engine, expire_on_commit=False)
    Session = scoped_session(session_factory)

    # Monkey-patch the global session factory for tests
    import parcel_tracker.services.database as db_module

    original_get_session = db_module.get_session_factory
    db_module.get_session_factory = lambda: Session

    yield Session

    Session.remove()
    Base.metadata.drop_all(engine)
    engine.dispose()

    db_module.get_session_factory = original_get_session


@pytest.fixture
def package_details():
    """Valid package details; each test gets its own copy."""
    return dict(PACKAGE_DETAILS)


@pytest.fixture
def client_user(session):
    """A client account."""
    from parcel_tracker.services import user_service

    return user_service.create_user(
        "client@example.com",
        role=UserRole.CLIENT,
        password="secret1",
        first_name="Ann",
        last_name="Smith",
        session=session,
    )


@pytest.fixture
def manager_user(session):
    """A manager account."""
    from parcel_tracker.services import user_service

    return user_service.create_user(
        "manager@example.com", role=UserRole.MANAGER, password="secret1", session=session
    )


@pytest.fixture
def logist_user(session):
    """A logist-role account without a profile."""
    from parcel_tracker.services import user_service

    return user_service.create_user(
        "logist@example.com", role=UserRole.LOGIST, password="secret1", session=session
    )


@pytest.fixture
def logist(session, logist_user):
    """An active logist profile."""
    from parcel_tracker.services import logist_service

    return logist_service.create_logist(
        logist_user.id,
        location="Warsaw",
        address="1 Warehouse Street",
        supports_lockers=True,
        session=session,
    )


@pytest.fixture
def package(session, client_user, logist, manager_user, package_details):
    """A freshly created package (client created, manager created, logist unset)."""
    from parcel_tracker.services import package_service

    return package_service.create_package(
        client_user.id, logist.id, package_details, session=session
    )
