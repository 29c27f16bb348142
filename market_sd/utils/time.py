"""
Time semantics utilities for UTC time-of-day evaluation.

Schedules are expressed as UTC wall-clock windows with no date component.
These helpers normalize instants to that representation and build the
minute grids used for per-minute vectors.
"""

from datetime import date, datetime, time, timedelta, timezone
from typing import Optional, Union

MINUTES_PER_DAY = 24 * 60


def utc_now() -> datetime:
    """Current wall-clock time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


def ensure_utc(instant: datetime) -> datetime:
    """
    Normalize a datetime to aware UTC.

    Naive datetimes are taken to already be in UTC.

    Args:
        instant: Datetime to normalize

    Returns:
        Aware datetime in UTC
    """
    if instant.tzinfo is None:
        return instant.replace(tzinfo=timezone.utc)
    return instant.astimezone(timezone.utc)


def utc_time_of_day(instant: Union[datetime, time]) -> time:
    """
    Get the naive UTC time-of-day of an instant.

    Args:
        instant: Datetime (converted to UTC) or time-of-day

    Returns:
        Naive time suitable for comparison with schedule windows
    """
    if isinstance(instant, datetime):
        return ensure_utc(instant).time()
    return instant.replace(tzinfo=None)


def utc_day(instant: Optional[datetime] = None) -> date:
    """UTC calendar date of an instant, defaulting to now."""
    if instant is None:
        instant = utc_now()
    return ensure_utc(instant).date()


def start_of_day(day: date) -> datetime:
    """Midnight UTC at the start of a calendar day."""
    return datetime.combine(day, time(0, 0), tzinfo=timezone.utc)


def minute_grid(day: date, minutes: int = MINUTES_PER_DAY) -> list[datetime]:
    """
    Build the per-minute instants of a UTC day.

    Args:
        day: UTC calendar day
        minutes: Number of minutes from midnight (default a full day)

    Returns:
        Aware UTC datetimes from 00:00 onwards, one per minute
    """
    midnight = start_of_day(day)
    return [midnight + timedelta(minutes=i) for i in range(minutes)]


def format_compact_date(day: date) -> str:
    """Format a date as YYYYMMDD for file names."""
    return day.strftime("%Y%m%d")


def format_clock(instant: datetime) -> str:
    """Format the UTC clock time as HH:MM:SS."""
    return ensure_utc(instant).strftime("%H:%M:%S")


def epoch_seconds(instant: datetime) -> int:
    """Whole seconds since the Unix epoch."""
    return int(ensure_utc(instant).timestamp())
