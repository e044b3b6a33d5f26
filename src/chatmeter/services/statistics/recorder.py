"""Statistics recorder: the write path for chat usage events."""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from datetime import timedelta

from sqlalchemy.exc import IntegrityError

from chatmeter.db.repositories import (
    ActivityHours,
    StatisticsRepository,
    UsageBucketRecord,
    UsageRepository,
)
from chatmeter.db.session import Database
from chatmeter.domain import UsageDelta
from chatmeter.shared_utils import Clock, truncate_to_hour, utc_now

logger = logging.getLogger(__name__)

ACTIVITY_WINDOW = timedelta(hours=24)


def compute_activity_hours(
    buckets: Sequence[UsageBucketRecord],
) -> ActivityHours | None:
    """
    Pick the busiest and quietest hour-of-day among existing buckets.

    Ranking is by ``requests_count``; ties go to the earliest bucket. Hours
    without a bucket are not candidates for the quietest hour.
    """
    if not buckets:
        return None
    ordered = sorted(buckets, key=lambda bucket: bucket.time_interval)
    busiest = max(ordered, key=lambda bucket: bucket.counters.requests_count)
    quietest = min(ordered, key=lambda bucket: bucket.counters.requests_count)
    return ActivityHours(
        most_active_hour=busiest.time_interval.hour,
        least_active_hour=quietest.time_interval.hour,
    )


class StatisticsRecorder:
    """
    Records usage events into both statistics stores.

    The lifetime summary upsert and the hourly bucket upsert for one event
    run in the same transaction: either both are committed or neither is.
    Failures propagate to the caller and are never retried here, since a
    blind retry of an already-committed event would count it twice.
    """

    def __init__(self, database: Database, *, clock: Clock = utc_now) -> None:
        self._database = database
        self._clock = clock

    async def record_event(
        self,
        api_key_id: str,
        delta: UsageDelta | Mapping[str, object],
    ) -> None:
        """
        Record one chat event for ``api_key_id``.

        Args:
            api_key_id: Resource key the event is billed to
            delta: Typed delta or mapping accepted by UsageDelta
        """
        payload = (
            delta if isinstance(delta, UsageDelta) else UsageDelta.model_validate(delta)
        )
        bucket = truncate_to_hour(self._clock())

        try:
            async with self._database.session() as session:
                await StatisticsRepository(session).apply(api_key_id, payload)
                await UsageRepository(session).increment(
                    api_key_id, bucket, payload.bucket_increments()
                )
        except IntegrityError:
            logger.warning(
                "Rejected usage event for unknown api_key_id=%s",
                api_key_id,
                extra={"api_key_id": api_key_id, "bucket": bucket},
            )
            raise
        except Exception:
            logger.exception(
                "Failed to record usage event for api_key_id=%s bucket=%s",
                api_key_id,
                bucket.isoformat(),
                extra={"api_key_id": api_key_id, "bucket": bucket},
            )
            raise

    async def recalculate_activity_window(
        self, api_key_id: str
    ) -> ActivityHours | None:
        """
        Refresh most/least active hours from the trailing 24 hours.

        Returns the stored hours, or None when the window has no buckets or
        the key has no summary row. In both cases previously stored hours are
        left as they are.
        """
        end = self._clock()
        start = end - ACTIVITY_WINDOW

        async with self._database.session() as session:
            buckets = await UsageRepository(session).list_range(api_key_id, start, end)
            hours = compute_activity_hours(buckets)
            if hours is None:
                logger.debug(
                    "No usage in activity window for api_key_id=%s", api_key_id
                )
                return None

            updated = await StatisticsRepository(session).set_activity_hours(
                api_key_id, hours
            )

        if not updated:
            logger.debug("No statistics row for api_key_id=%s", api_key_id)
            return None
        return hours
