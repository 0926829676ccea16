"""Datetime utilities for timezone-aware UTC timestamps.

Usage:
    from parcel_tracker.utils.datetime_utils import utc_now

    # For SQLAlchemy Column defaults
    created_at = Column(DateTime, default=utc_now)

    # For tracking code generation
    stamp = epoch_millis()
"""

from datetime import datetime, timezone
from typing import Optional


def utc_now() -> datetime:
    """Return current UTC time as timezone-aware datetime."""
    return datetime.now(timezone.utc)


def epoch_millis(moment: Optional[datetime] = None) -> int:
    """Return milliseconds since the Unix epoch.

    Args:
        moment: Datetime to convert (default: now). Naive values are
            treated as UTC.

    Returns:
        Integer milliseconds
    """
    if moment is None:
        moment = utc_now()
    elif moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return int(moment.timestamp() * 1000)
