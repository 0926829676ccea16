"""Logist Service - fulfillment agent profiles.

A logist profile extends a logist-role user with the service location,
receiving address and capability flags. Packages are assigned to a
profile, not to the user directly.
"""

from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from parcel_tracker.models import Logist, User, UserRole
from parcel_tracker.services.database import session_scope
from parcel_tracker.services.exceptions import LogistNotFound, UserNotFound, ValidationError
from parcel_tracker.services.logging_utils import get_service_logger, log_operation

logger = get_service_logger(__name__)

UPDATABLE_FIELDS = ("location", "address", "supports_lockers", "supports_offices", "is_active")


def create_logist(
    user_id: int,
    location: str,
    address: str,
    supports_lockers: bool = False,
    supports_offices: bool = False,
    session: Optional[Session] = None,
) -> Logist:
    """Create the logist profile of a logist-role user.

    Args:
        user_id: ID of a user whose role is logist
        location: Service location (required)
        address: Receiving address (required)
        supports_lockers: Can deliver to parcel lockers
        supports_offices: Operates staffed offices
        session: Optional database session

    Returns:
        Created Logist

    Raises:
        UserNotFound: If the user does not exist
        ValidationError: If fields are missing, the user is not a logist,
            or a profile already exists
    """
    if session is not None:
        return _create_logist_impl(user_id, location, address, supports_lockers, supports_offices, session)
    with session_scope() as session:
        return _create_logist_impl(user_id, location, address, supports_lockers, supports_offices, session)


def _create_logist_impl(
    user_id: int,
    location: str,
    address: str,
    supports_lockers: bool,
    supports_offices: bool,
    session: Session,
) -> Logist:
    errors = []
    if not (location or "").strip():
        errors.append("location is required")
    if not (address or "").strip():
        errors.append("address is required")
    if errors:
        raise ValidationError(errors)

    user = session.get(User, user_id)
    if user is None:
        raise UserNotFound(user_id)
    if user.role != UserRole.LOGIST:
        raise ValidationError([f"User {user_id} has role '{user.role.value}', expected 'logist'"])
    if session.query(Logist).filter(Logist.user_id == user_id).first() is not None:
        raise ValidationError([f"User {user_id} already has a logist profile"])

    logist = Logist(
        user_id=user_id,
        location=location.strip(),
        address=address.strip(),
        supports_lockers=bool(supports_lockers),
        supports_offices=bool(supports_offices),
        is_active=True,
    )
    session.add(logist)
    session.flush()

    log_operation(logger, operation="create_logist", outcome="success", logist_id=logist.id, user_id=user_id)
    return logist


def get_logist(logist_id: int, session: Optional[Session] = None) -> Logist:
    """Get a logist profile by ID.

    Raises:
        LogistNotFound: If the profile does not exist
    """
    if session is not None:
        return _get_logist_impl(logist_id, session)
    with session_scope() as session:
        return _get_logist_impl(logist_id, session)


def _get_logist_impl(logist_id: int, session: Session) -> Logist:
    logist = session.get(Logist, logist_id)
    if logist is None:
        raise LogistNotFound(logist_id)
    return logist


def get_logist_by_user_id(user_id: int, session: Optional[Session] = None) -> Optional[Logist]:
    """Get the logist profile of a user, or None."""
    if session is not None:
        return session.query(Logist).filter(Logist.user_id == user_id).first()
    with session_scope() as session:
        return session.query(Logist).filter(Logist.user_id == user_id).first()


def list_logists(active_only: bool = False, session: Optional[Session] = None) -> List[Logist]:
    """List logist profiles ordered by location."""
    if session is not None:
        return _list_logists_impl(active_only, session)
    with session_scope() as session:
        return _list_logists_impl(active_only, session)


def _list_logists_impl(active_only: bool, session: Session) -> List[Logist]:
    query = session.query(Logist)
    if active_only:
        query = query.filter(Logist.is_active == True)  # noqa: E712
    return query.order_by(Logist.location, Logist.id).all()


def update_logist(logist_id: int, updates: Dict[str, Any], session: Optional[Session] = None) -> Logist:
    """Update profile fields.

    Args:
        logist_id: Profile ID
        updates: Any of location, address, supports_lockers,
            supports_offices, is_active

    Raises:
        LogistNotFound: If the profile does not exist
        ValidationError: If an unknown field is given or a required text
            field is blanked
    """
    if session is not None:
        return _update_logist_impl(logist_id, updates, session)
    with session_scope() as session:
        return _update_logist_impl(logist_id, updates, session)


def _update_logist_impl(logist_id: int, updates: Dict[str, Any], session: Session) -> Logist:
    unknown = sorted(set(updates) - set(UPDATABLE_FIELDS))
    if unknown:
        raise ValidationError([f"Unknown field '{name}'" for name in unknown])
    for name in ("location", "address"):
        if name in updates and not (updates[name] or "").strip():
            raise ValidationError([f"{name} is required"])

    logist = _get_logist_impl(logist_id, session)
    for name, value in updates.items():
        if name in ("location", "address"):
            value = value.strip()
        elif name in ("supports_lockers", "supports_offices", "is_active"):
            value = bool(value)
        setattr(logist, name, value)
    session.flush()
    return logist
