"""
Timezone utilities.

All database timestamps are stored as timezone-naive UTC. These helpers
produce and normalize such values.
"""

from datetime import datetime, timedelta

import pytz

UTC_TZ = pytz.UTC


def utc_now() -> datetime:
    """Get current time in UTC (timezone-naive, for database storage)."""
    return datetime.now(UTC_TZ).replace(tzinfo=None)


def to_naive_utc(dt: datetime) -> datetime:
    """
    Normalize a datetime to timezone-naive UTC.

    Naive values are assumed to already be in UTC.
    """
    if dt.tzinfo is None:
        return dt
    return dt.astimezone(UTC_TZ).replace(tzinfo=None)


def seconds_ago(seconds: float, now: datetime | None = None) -> datetime:
    """Naive UTC timestamp `seconds` before `now` (default: current time)."""
    reference = to_naive_utc(now) if now is not None else utc_now()
    return reference - timedelta(seconds=seconds)
