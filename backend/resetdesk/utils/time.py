"""Time Utilities - UTC timestamps, day boundaries and formatting

All persisted timestamps are naive UTC datetimes, which is what pymongo
hands back when reading documents.
"""
from datetime import date, datetime, time, timezone, timedelta
from typing import List, Optional, Tuple


def utc_now() -> datetime:
    """Get current UTC datetime (naive)"""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def utc_today() -> date:
    """Get current UTC calendar date"""
    return utc_now().date()


def format_iso(dt: datetime) -> str:
    """
    Format datetime to ISO 8601 string

    Args:
        dt: Datetime object (naive values are treated as UTC)

    Returns:
        ISO formatted string with Z suffix for UTC
    """
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.isoformat().replace("+00:00", "Z")


def start_of_day(day: date) -> datetime:
    """First instant of a calendar day"""
    return datetime.combine(day, time.min)


def end_of_day(day: date) -> datetime:
    """Last instant of a calendar day (inclusive upper bound)"""
    return datetime.combine(day, time.max)


def day_range_bounds(
    date_from: Optional[date],
    date_to: Optional[date]
) -> Tuple[Optional[datetime], Optional[datetime]]:
    """
    Convert an inclusive calendar-date range to datetime bounds.

    Either side may be open (None).
    """
    lower = start_of_day(date_from) if date_from else None
    upper = end_of_day(date_to) if date_to else None
    return lower, upper


def trailing_days(range_days: int, until: Optional[date] = None) -> List[date]:
    """
    Calendar days of a rolling window ending at ``until`` (default today).

    Returns the days in ascending order; the window always contains
    ``range_days`` entries.
    """
    last = until or utc_today()
    return [last - timedelta(days=offset) for offset in range(range_days - 1, -1, -1)]
