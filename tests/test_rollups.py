from __future__ import annotations

import random
from datetime import date, timedelta

import pytest
from _fixtures.time import FrozenClock, utc_dt

from chatmeter.db.repositories import UsageRepository
from chatmeter.services.statistics import (
    Granularity,
    InvalidRangeError,
    RollupAggregator,
)


async def _seed(db, api_key: str, buckets: dict) -> None:
    async with db.session() as session:
        repo = UsageRepository(session)
        for instant, increments in buckets.items():
            await repo.increment(api_key, instant, increments)


@pytest.mark.asyncio
async def test_views_are_zero_filled_for_a_key_without_activity(
    sqlite_db, api_key
) -> None:
    aggregator = RollupAggregator(
        sqlite_db, clock=FrozenClock(utc_dt(2024, 3, 10, 15, 20))
    )

    last_24 = await aggregator.last_24_hours(api_key)
    day = await aggregator.day(api_key, date(2024, 3, 10))
    leap_february = await aggregator.month(api_key, 2024, 2)
    february = await aggregator.month(api_key, 2023, 2)
    year = await aggregator.year(api_key, 2024)
    last_30 = await aggregator.last_30_days(api_key)
    last_12 = await aggregator.last_12_months(api_key)

    assert len(last_24.periods) == 24
    assert len(day.periods) == 24
    assert len(leap_february.periods) == 29
    assert len(february.periods) == 28
    assert len(year.periods) == 12
    assert len(last_30.periods) == 30
    assert len(last_12.periods) == 12
    for view in (last_24, day, leap_february, february, year, last_30, last_12):
        assert view.totals.requests_count == 0
        assert all(period.counters.requests_count == 0 for period in view.periods)
    assert await aggregator.lifetime(api_key) is None


@pytest.mark.asyncio
async def test_day_view_places_buckets_in_their_hours(sqlite_db, api_key) -> None:
    await _seed(
        sqlite_db,
        api_key,
        {
            utc_dt(2024, 3, 15, 3): {"requests_count": 1, "token_used": 10},
            utc_dt(2024, 3, 15, 17): {"requests_count": 1, "token_used": 5},
            utc_dt(2024, 3, 16, 0): {"requests_count": 1, "token_used": 99},
        },
    )

    view = await RollupAggregator(sqlite_db).day(api_key, date(2024, 3, 15))

    assert view.granularity is Granularity.HOUR
    assert view.periods[3].counters.token_used == 10
    assert view.periods[17].counters.token_used == 5
    assert view.totals.token_used == 15
    assert [period.hour for period in view.periods] == list(range(24))
    assert sum(period.counters.token_used for period in view.periods) == 15


@pytest.mark.asyncio
async def test_rollups_conserve_bucket_totals(sqlite_db, api_key) -> None:
    rng = random.Random(7)
    start = utc_dt(2023, 12, 25)
    buckets = {
        start + timedelta(hours=rng.randrange(0, 24 * 60)): {
            "requests_count": rng.randint(1, 5),
            "token_used": rng.randint(0, 500),
        }
        for _ in range(200)
    }
    await _seed(sqlite_db, api_key, buckets)

    aggregator = RollupAggregator(sqlite_db, clock=FrozenClock(utc_dt(2024, 2, 20)))
    for year, month in ((2023, 12), (2024, 1), (2024, 2)):
        month_view = await aggregator.month(api_key, year, month)
        month_start, month_end = month_view.start, month_view.end
        direct = await aggregator.totals(api_key, month_start, month_end)
        assert month_view.totals == direct

        days_total = 0
        for period in month_view.periods:
            day_view = await aggregator.day(api_key, period.date)
            assert day_view.totals == period.counters
            days_total += day_view.totals.token_used
        assert days_total == month_view.totals.token_used

    year_2024 = await aggregator.year(api_key, 2024)
    assert year_2024.totals == await aggregator.totals(
        api_key, year_2024.start, year_2024.end
    )

    expected_tokens = sum(increments["token_used"] for increments in buckets.values())
    overall = await aggregator.totals(api_key, utc_dt(2023, 1, 1), utc_dt(2024, 12, 31))
    assert overall.token_used == expected_tokens


@pytest.mark.asyncio
async def test_trailing_views_end_with_the_current_period(sqlite_db, api_key) -> None:
    clock = FrozenClock(utc_dt(2024, 3, 1, 8, 30))
    await _seed(
        sqlite_db,
        api_key,
        {
            utc_dt(2024, 3, 1, 8): {"requests_count": 2},
            utc_dt(2024, 2, 29, 9): {"requests_count": 3},
            utc_dt(2024, 2, 29, 8): {"requests_count": 100},
            utc_dt(2023, 4, 2): {"requests_count": 4},
            utc_dt(2023, 3, 31): {"requests_count": 50},
        },
    )
    aggregator = RollupAggregator(sqlite_db, clock=clock)

    last_24 = await aggregator.last_24_hours(api_key)
    assert last_24.periods[0].start == utc_dt(2024, 2, 29, 9)
    assert last_24.periods[-1].start == utc_dt(2024, 3, 1, 8)
    assert last_24.totals.requests_count == 5

    last_30 = await aggregator.last_30_days(api_key)
    assert last_30.periods[-1].date == date(2024, 3, 1)
    assert last_30.periods[0].date == date(2024, 2, 1)
    assert last_30.totals.requests_count == 105

    last_12 = await aggregator.last_12_months(api_key)
    assert [(p.year, p.month) for p in last_12.periods][:2] == [(2023, 4), (2023, 5)]
    assert (last_12.periods[-1].year, last_12.periods[-1].month) == (2024, 3)
    assert last_12.periods[0].counters.requests_count == 4
    assert last_12.totals.requests_count == 109


@pytest.mark.asyncio
async def test_invalid_ranges_are_rejected_before_querying(sqlite_db, api_key) -> None:
    aggregator = RollupAggregator(sqlite_db)

    with pytest.raises(InvalidRangeError):
        await aggregator.month(api_key, 2024, 13)
    with pytest.raises(InvalidRangeError):
        await aggregator.month(api_key, 2024, 0)
    with pytest.raises(InvalidRangeError):
        await aggregator.year(api_key, 1999)
    with pytest.raises(InvalidRangeError):
        await aggregator.day(api_key, date(1990, 1, 1))
    with pytest.raises(InvalidRangeError):
        await aggregator.totals(api_key, utc_dt(2024, 2, 1), utc_dt(2024, 1, 1))

    december_9999 = await aggregator.month(api_key, 9999, 12)
    assert len(december_9999.periods) == 31
