"""UTC bucketing and calendar helpers.

All bucket math happens in UTC. Server-local time never leaks into bucket
boundaries, so an event at 23:59:59Z and one at 00:00:01Z the next day always
land in different days regardless of the host timezone.
"""

import calendar
from collections.abc import Callable
from datetime import UTC, date, datetime

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(UTC)


def as_utc_aware(value: datetime | None) -> datetime | None:
    """Normalize DB datetimes to UTC-aware before arithmetic."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


def truncate_to_hour(value: datetime) -> datetime:
    """Return the start of the UTC hour containing ``value``."""
    aware = as_utc_aware(value)
    assert aware is not None
    return aware.replace(minute=0, second=0, microsecond=0)


def start_of_day(value: datetime | date) -> datetime:
    """Midnight UTC of the calendar day containing ``value``."""
    if isinstance(value, datetime):
        aware = as_utc_aware(value)
        assert aware is not None
        return aware.replace(hour=0, minute=0, second=0, microsecond=0)
    return datetime(value.year, value.month, value.day, tzinfo=UTC)


def days_in_month(year: int, month: int) -> int:
    return calendar.monthrange(year, month)[1]


def shift_months(year: int, month: int, offset: int) -> tuple[int, int]:
    """Move ``offset`` months from (year, month), returning the new pair."""
    index = year * 12 + (month - 1) + offset
    return index // 12, index % 12 + 1


def end_of_hour(hour_start: datetime) -> datetime:
    return hour_start.replace(minute=59, second=59, microsecond=999999)


def day_bounds(day: date) -> tuple[datetime, datetime]:
    """Closed [start, end] UTC range covering one calendar day."""
    start = start_of_day(day)
    return start, start.replace(hour=23, minute=59, second=59, microsecond=999999)


def month_bounds(year: int, month: int) -> tuple[datetime, datetime]:
    """Closed [start, end] UTC range covering one calendar month."""
    start = datetime(year, month, 1, tzinfo=UTC)
    last_day = datetime(year, month, days_in_month(year, month), tzinfo=UTC)
    return start, last_day.replace(hour=23, minute=59, second=59, microsecond=999999)


def year_bounds(year: int) -> tuple[datetime, datetime]:
    """Closed [start, end] UTC range covering one calendar year."""
    start = datetime(year, 1, 1, tzinfo=UTC)
    return start, datetime(year, 12, 31, 23, 59, 59, 999999, tzinfo=UTC)
