"""Scheduled maintenance jobs.

Each job runs on its own interval. When Redis is available a run first takes
a ``SET NX EX`` lock so only one server instance does the work; without Redis
every instance runs, which is safe because each job's update is idempotent.
"""

from __future__ import annotations

import asyncio
import logging
import random
from abc import ABC, abstractmethod
from datetime import timedelta
from typing import Any
from uuid import uuid4

from chatmeter.config import Settings
from chatmeter.db.repositories import (
    ApiKeyRepository,
    NewsRepository,
    UsageRepository,
)
from chatmeter.db.session import Database
from chatmeter.services.statistics import StatisticsRecorder
from chatmeter.shared_utils import Clock, utc_now

logger = logging.getLogger(__name__)

LOCK_KEY_PREFIX = "chatmeter:jobs"
RELEASE_LOCK_SCRIPT = """
if redis.call('get', KEYS[1]) == ARGV[1] then
  return redis.call('del', KEYS[1])
else
  return 0
end
"""


class PeriodicJob(ABC):
    """Base for interval jobs with startup jitter and an optional lock."""

    name: str = ""

    def __init__(
        self,
        database: Database,
        *,
        interval_seconds: float,
        redis_client: Any | None = None,
        startup_jitter_seconds: float = 30.0,
        lock_ttl_seconds: int = 300,
        clock: Clock = utc_now,
    ) -> None:
        self._database = database
        self._interval_seconds = interval_seconds
        self._redis = redis_client
        self._startup_jitter_seconds = max(0.0, startup_jitter_seconds)
        self._lock_ttl_seconds = lock_ttl_seconds
        self._clock = clock
        self._task: asyncio.Task[None] | None = None

    @property
    def lock_key(self) -> str:
        return f"{LOCK_KEY_PREFIX}:{self.name}:lock"

    @property
    def running(self) -> bool:
        return self._task is not None

    @abstractmethod
    async def run(self) -> int:
        """Do one unit of work and return the number of affected rows."""

    async def start(self) -> None:
        if self._task is not None:
            return
        self._task = asyncio.create_task(self._loop())
        logger.info(
            f"Job {self.name} started "
            f"(interval={self._interval_seconds:.0f}s, "
            f"startup_jitter={self._startup_jitter_seconds:.0f}s)"
        )

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None
        logger.info(f"Job {self.name} stopped")

    async def _loop(self) -> None:
        # Delay the first run so restart waves do not stampede the lock.
        if self._startup_jitter_seconds > 0:
            await asyncio.sleep(random.uniform(0, self._startup_jitter_seconds))
        else:
            await asyncio.sleep(self._interval_seconds)

        while True:
            await self.tick()
            await asyncio.sleep(self._interval_seconds)

    async def _acquire(self) -> str | None:
        """Return a lock token, or None when another instance holds the lock."""
        token = uuid4().hex
        if self._redis is None:
            return token
        try:
            acquired = await self._redis.set(
                self.lock_key, token, nx=True, ex=self._lock_ttl_seconds
            )
        except Exception as exc:
            logger.debug(f"Job {self.name}: lock acquire failed: {exc}")
            return None
        return token if acquired else None

    async def _release(self, token: str) -> None:
        if self._redis is None:
            return
        try:
            await self._redis.eval(RELEASE_LOCK_SCRIPT, 1, self.lock_key, token)
        except Exception as exc:
            logger.debug(f"Job {self.name}: lock release failed: {exc}")

    async def tick(self) -> int | None:
        """
        One scheduled run under the lock.

        Returns the affected count, or None when the lock was held elsewhere
        or the run failed. Failures are logged and the next tick proceeds.
        """
        token = await self._acquire()
        if token is None:
            return None

        try:
            affected = await self.run()
        except Exception as e:
            logger.warning(f"Job {self.name} error: {e}", extra={"job": self.name})
            return None
        finally:
            await self._release(token)

        if affected > 0:
            logger.info(
                f"Job {self.name}: affected {affected} rows",
                extra={"job": self.name, "affected": affected},
            )
        return affected


class ExpireApiKeysJob(PeriodicJob):
    """Deactivates active API keys whose expiry is in the past."""

    name = "expire-api-keys"

    async def run(self) -> int:
        async with self._database.session() as session:
            return await ApiKeyRepository(session).deactivate_expired(self._clock())


class PublishScheduledNewsJob(PeriodicJob):
    """Publishes draft news whose publish time has come."""

    name = "publish-scheduled-news"

    async def run(self) -> int:
        async with self._database.session() as session:
            return await NewsRepository(session).publish_scheduled(self._clock())


class ActivityRecalculationJob(PeriodicJob):
    """Refreshes most/least active hours for keys active in the last day."""

    name = "recalculate-activity"

    async def run(self) -> int:
        now = self._clock()
        async with self._database.session() as session:
            api_key_ids = await UsageRepository(session).list_keys_with_activity(
                now - timedelta(hours=24), now
            )

        recorder = StatisticsRecorder(self._database, clock=lambda: now)
        updated = 0
        for api_key_id in api_key_ids:
            if await recorder.recalculate_activity_window(api_key_id) is not None:
                updated += 1
        return updated


JOB_TYPES: tuple[type[PeriodicJob], ...] = (
    ExpireApiKeysJob,
    PublishScheduledNewsJob,
    ActivityRecalculationJob,
)
JOB_NAMES: tuple[str, ...] = tuple(job_type.name for job_type in JOB_TYPES)


def build_jobs(
    database: Database,
    settings: Settings,
    *,
    redis_client: Any | None = None,
    clock: Clock = utc_now,
) -> dict[str, PeriodicJob]:
    """Build every maintenance job keyed by name."""
    intervals = {
        ExpireApiKeysJob.name: settings.expire_keys_interval_seconds,
        PublishScheduledNewsJob.name: settings.publish_news_interval_seconds,
        ActivityRecalculationJob.name: settings.activity_recalc_interval_seconds,
    }
    return {
        job_type.name: job_type(
            database,
            interval_seconds=intervals[job_type.name],
            redis_client=redis_client,
            startup_jitter_seconds=settings.jobs_startup_jitter_seconds,
            lock_ttl_seconds=settings.jobs_lock_ttl_seconds,
            clock=clock,
        )
        for job_type in JOB_TYPES
    }
