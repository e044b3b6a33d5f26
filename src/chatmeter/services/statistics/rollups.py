"""Rollup aggregator: dense hour/day/month views over hourly usage buckets.

Every view follows the same two steps. First the full, ordered list of
expected period starts is generated for the requested UTC range. Then the
sparse buckets fetched for that range are summed into the period that
contains them. Periods without buckets keep zero counters, so the output
never has gaps.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from datetime import date, datetime, timedelta

from chatmeter.db.repositories import (
    LifetimeStatisticsRecord,
    StatisticsRepository,
    UsageBucketRecord,
    UsageRepository,
)
from chatmeter.db.session import Database
from chatmeter.domain import UsageCounters
from chatmeter.services.statistics.models import (
    Granularity,
    InvalidRangeError,
    UsagePeriod,
    UsageView,
)
from chatmeter.shared_utils import (
    Clock,
    day_bounds,
    days_in_month,
    end_of_hour,
    month_bounds,
    shift_months,
    start_of_day,
    truncate_to_hour,
    utc_now,
    year_bounds,
)

logger = logging.getLogger(__name__)

MIN_YEAR = 2000
MAX_YEAR = 9999


def validate_year(year: int) -> None:
    if not MIN_YEAR <= year <= MAX_YEAR:
        raise InvalidRangeError(
            f"Valid year is required ({MIN_YEAR}-{MAX_YEAR}), got {year}"
        )


def validate_month(year: int, month: int) -> None:
    validate_year(year)
    if not 1 <= month <= 12:
        raise InvalidRangeError(f"Valid month (1-12) is required, got {month}")


def period_start(granularity: Granularity, instant: datetime) -> datetime:
    """Start of the period of ``granularity`` that contains ``instant``."""
    hour = truncate_to_hour(instant)
    if granularity is Granularity.HOUR:
        return hour
    if granularity is Granularity.DAY:
        return hour.replace(hour=0)
    return hour.replace(day=1, hour=0)


def hour_keys(first: datetime, count: int) -> list[datetime]:
    return [first + timedelta(hours=index) for index in range(count)]


def day_keys(first: datetime, count: int) -> list[datetime]:
    return [first + timedelta(days=index) for index in range(count)]


def month_keys(year: int, month: int, count: int) -> list[datetime]:
    keys: list[datetime] = []
    for offset in range(count):
        key_year, key_month = shift_months(year, month, offset)
        keys.append(month_bounds(key_year, key_month)[0])
    return keys


def fill_periods(
    granularity: Granularity,
    keys: Sequence[datetime],
    buckets: Iterable[UsageBucketRecord],
) -> list[UsagePeriod]:
    """
    Sum ``buckets`` into the expected periods, zero-filling the rest.

    Buckets outside every expected period are ignored.
    """
    sums: dict[datetime, UsageCounters] = {key: UsageCounters() for key in keys}
    for bucket in buckets:
        key = period_start(granularity, bucket.time_interval)
        if key in sums:
            sums[key] = sums[key] + bucket.counters
    return [UsagePeriod(start=key, counters=sums[key]) for key in keys]


def _view(
    granularity: Granularity,
    start: datetime,
    end: datetime,
    periods: list[UsagePeriod],
) -> UsageView:
    return UsageView(
        granularity=granularity,
        start=start,
        end=end,
        periods=periods,
        totals=UsageCounters.total([period.counters for period in periods]),
    )


class RollupAggregator:
    """
    Builds fixed-shape usage views for one API key.

    No view is an error for a key without activity: the periods are all
    present with zero counters.
    """

    def __init__(self, database: Database, *, clock: Clock = utc_now) -> None:
        self._database = database
        self._clock = clock

    async def _fetch(
        self, api_key_id: str, start: datetime, end: datetime
    ) -> list[UsageBucketRecord]:
        async with self._database.session() as session:
            return await UsageRepository(session).list_range(api_key_id, start, end)

    async def _build(
        self,
        api_key_id: str,
        granularity: Granularity,
        keys: list[datetime],
        start: datetime,
        end: datetime,
    ) -> UsageView:
        buckets = await self._fetch(api_key_id, start, end)
        logger.debug(
            "Rollup granularity=%s api_key_id=%s buckets=%d periods=%d",
            granularity,
            api_key_id,
            len(buckets),
            len(keys),
        )
        periods = fill_periods(granularity, keys, buckets)
        return _view(granularity, start, end, periods)

    async def last_24_hours(self, api_key_id: str) -> UsageView:
        """24 hourly periods ending with the current (still open) hour."""
        current_hour = truncate_to_hour(self._clock())
        first = current_hour - timedelta(hours=23)
        keys = hour_keys(first, 24)
        return await self._build(
            api_key_id, Granularity.HOUR, keys, first, end_of_hour(current_hour)
        )

    async def day(self, api_key_id: str, day: date) -> UsageView:
        """24 hourly periods of one UTC calendar day."""
        if isinstance(day, datetime):
            day = start_of_day(day).date()
        validate_year(day.year)
        start, end = day_bounds(day)
        keys = hour_keys(start, 24)
        return await self._build(api_key_id, Granularity.HOUR, keys, start, end)

    async def month(self, api_key_id: str, year: int, month: int) -> UsageView:
        """One daily period per calendar day of the month."""
        validate_month(year, month)
        start, end = month_bounds(year, month)
        keys = day_keys(start, days_in_month(year, month))
        return await self._build(api_key_id, Granularity.DAY, keys, start, end)

    async def year(self, api_key_id: str, year: int) -> UsageView:
        """Twelve monthly periods of one calendar year."""
        validate_year(year)
        start, end = year_bounds(year)
        keys = month_keys(year, 1, 12)
        return await self._build(api_key_id, Granularity.MONTH, keys, start, end)

    async def last_30_days(self, api_key_id: str) -> UsageView:
        """30 daily periods ending with today (UTC)."""
        today = start_of_day(self._clock())
        first = today - timedelta(days=29)
        keys = day_keys(first, 30)
        _, end = day_bounds(today.date())
        return await self._build(api_key_id, Granularity.DAY, keys, first, end)

    async def last_12_months(self, api_key_id: str) -> UsageView:
        """12 monthly periods ending with the current month (UTC)."""
        now = self._clock()
        current = period_start(Granularity.MONTH, now)
        first_year, first_month = shift_months(current.year, current.month, -11)
        keys = month_keys(first_year, first_month, 12)
        _, end = month_bounds(current.year, current.month)
        return await self._build(api_key_id, Granularity.MONTH, keys, keys[0], end)

    async def totals(
        self, api_key_id: str, start: datetime, end: datetime
    ) -> UsageCounters:
        """Summed counters over an arbitrary closed range."""
        if end < start:
            raise InvalidRangeError("Range end must not precede its start")
        async with self._database.session() as session:
            return await UsageRepository(session).sum_range(api_key_id, start, end)

    async def lifetime(self, api_key_id: str) -> LifetimeStatisticsRecord | None:
        """Lifetime summary, or None when the key has no recorded events."""
        async with self._database.session() as session:
            return await StatisticsRepository(session).get(api_key_id)
