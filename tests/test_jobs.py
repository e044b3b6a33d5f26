from __future__ import annotations

import asyncio
import logging

import pytest
from _fixtures.time import FrozenClock, utc_dt

from chatmeter.config import Settings
from chatmeter.db.repositories import (
    NEWS_STATUS_DRAFT,
    NEWS_STATUS_PUBLISHED,
    ApiKeyRepository,
    NewsRepository,
    StatisticsRepository,
)
from chatmeter.db.session import Database
from chatmeter.services.operations import (
    JOB_NAMES,
    ActivityRecalculationJob,
    ExpireApiKeysJob,
    PeriodicJob,
    PublishScheduledNewsJob,
    build_jobs,
)
from chatmeter.services.statistics import StatisticsRecorder


@pytest.mark.asyncio
async def test_expire_job_deactivates_only_past_expiries(
    sqlite_db, make_api_key
) -> None:
    now = utc_dt(2024, 7, 1, 12)
    expired = await make_api_key(id="expired", expired_at=utc_dt(2024, 7, 1, 11))
    future = await make_api_key(id="future", expired_at=utc_dt(2024, 7, 2))
    no_expiry = await make_api_key(id="no-expiry")
    inactive = await make_api_key(
        id="inactive", expired_at=utc_dt(2024, 1, 1), is_active=False
    )

    job = ExpireApiKeysJob(sqlite_db, interval_seconds=3600, clock=FrozenClock(now))

    assert await job.run() == 1
    assert await job.run() == 0

    async with sqlite_db.session() as session:
        repo = ApiKeyRepository(session)
        expired_row = await repo.get_by_id(expired)
        future_row = await repo.get_by_id(future)
        no_expiry_row = await repo.get_by_id(no_expiry)
        inactive_row = await repo.get_by_id(inactive)

    assert expired_row is not None and expired_row.is_active is False
    assert expired_row.last_used_at is not None
    assert expired_row.last_used_at.replace(tzinfo=None) == now.replace(tzinfo=None)
    assert future_row is not None and future_row.is_active is True
    assert no_expiry_row is not None and no_expiry_row.is_active is True
    assert inactive_row is not None and inactive_row.last_used_at is None


@pytest.mark.asyncio
async def test_publish_job_is_idempotent(sqlite_db) -> None:
    now = utc_dt(2024, 7, 1, 12)
    async with sqlite_db.session() as session:
        repo = NewsRepository(session)
        due = (await repo.create(title="due", publish_at=utc_dt(2024, 7, 1, 12))).id
        later = (await repo.create(title="later", publish_at=utc_dt(2024, 7, 3))).id
        unscheduled = (await repo.create(title="unscheduled")).id

    job = PublishScheduledNewsJob(
        sqlite_db, interval_seconds=300, clock=FrozenClock(now)
    )

    assert await job.run() == 1
    assert await job.run() == 0

    async with sqlite_db.session() as session:
        repo = NewsRepository(session)
        statuses = {
            news_id: (await repo.get_by_id(news_id)).status
            for news_id in (due, later, unscheduled)
        }

    assert statuses == {
        due: NEWS_STATUS_PUBLISHED,
        later: NEWS_STATUS_DRAFT,
        unscheduled: NEWS_STATUS_DRAFT,
    }


@pytest.mark.asyncio
async def test_activity_job_updates_keys_active_in_the_last_day(
    sqlite_db, make_api_key
) -> None:
    clock = FrozenClock(utc_dt(2024, 7, 1, 10))
    active = await make_api_key(id="active")
    stale = await make_api_key(id="stale")

    recorder = StatisticsRecorder(sqlite_db, clock=clock)
    await recorder.record_event(stale, {})
    clock.advance(days=2)
    await recorder.record_event(active, {})
    await recorder.record_event(active, {})

    job = ActivityRecalculationJob(sqlite_db, interval_seconds=3600, clock=clock)

    assert await job.run() == 1
    async with sqlite_db.session() as session:
        repo = StatisticsRepository(session)
        active_summary = await repo.get(active)
        stale_summary = await repo.get(stale)

    assert active_summary is not None and active_summary.most_active_hour == 10
    assert stale_summary is not None and stale_summary.most_active_hour is None


@pytest.mark.asyncio
async def test_tick_skips_when_another_instance_holds_the_lock(
    sqlite_db, fake_redis, make_api_key
) -> None:
    await make_api_key(id="expired", expired_at=utc_dt(2024, 1, 1))
    job = ExpireApiKeysJob(
        sqlite_db,
        interval_seconds=3600,
        redis_client=fake_redis,
        clock=FrozenClock(utc_dt(2024, 7, 1)),
    )
    await fake_redis.set(job.lock_key, "other-instance", ex=60)

    assert await job.tick() is None
    assert await fake_redis.get(job.lock_key) == "other-instance"

    await fake_redis.delete(job.lock_key)
    assert await job.tick() == 1
    # Released after the run.
    assert await fake_redis.get(job.lock_key) is None


class _BrokenJob(PeriodicJob):
    name = "broken"

    async def run(self) -> int:
        raise RuntimeError("boom")


@pytest.mark.asyncio
async def test_failed_tick_is_logged_and_releases_the_lock(
    sqlite_db, fake_redis, caplog: pytest.LogCaptureFixture
) -> None:
    job = _BrokenJob(sqlite_db, interval_seconds=60, redis_client=fake_redis)

    with caplog.at_level(logging.WARNING, logger="chatmeter.services.operations"):
        assert await job.tick() is None

    assert "Job broken error: boom" in caplog.text
    assert await fake_redis.get(job.lock_key) is None


@pytest.mark.asyncio
async def test_start_and_stop_manage_the_background_task(sqlite_db) -> None:
    job = ExpireApiKeysJob(
        sqlite_db, interval_seconds=3600, startup_jitter_seconds=0
    )

    await job.start()
    await job.start()
    assert job.running is True
    await asyncio.sleep(0)

    await job.stop()
    await job.stop()
    assert job.running is False


def test_build_jobs_uses_configured_intervals() -> None:
    settings = Settings(
        publish_news_interval_seconds=42,
        jobs_startup_jitter_seconds=0,
        jobs_lock_ttl_seconds=30,
    )

    jobs = build_jobs(Database("sqlite+aiosqlite:///:memory:"), settings)

    assert tuple(jobs) == JOB_NAMES
    publish = jobs["publish-scheduled-news"]
    assert isinstance(publish, PublishScheduledNewsJob)
    assert publish._interval_seconds == 42  # noqa: SLF001
    assert publish._lock_ttl_seconds == 30  # noqa: SLF001
    assert publish.lock_key == "chatmeter:jobs:publish-scheduled-news:lock"
