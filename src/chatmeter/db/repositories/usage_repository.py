"""Repository for hourly usage buckets."""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from chatmeter.db.repositories.models import UsageBucketRecord
from chatmeter.db.repositories.utils import dialect_insert
from chatmeter.db.tables import ApiKeyUsage
from chatmeter.domain import COUNTER_FIELDS, UsageCounters
from chatmeter.shared_utils import as_utc_aware, truncate_to_hour


def _to_record(row: ApiKeyUsage) -> UsageBucketRecord:
    time_interval = as_utc_aware(row.time_interval)
    assert time_interval is not None
    return UsageBucketRecord(
        api_key_id=row.api_key_id,
        time_interval=time_interval,
        counters=UsageCounters.from_mapping(row),
    )


def _utc_range(start: datetime, end: datetime) -> tuple[datetime, datetime]:
    # SQLite stores naive UTC text, so bounds must be UTC before comparison.
    utc_start, utc_end = as_utc_aware(start), as_utc_aware(end)
    assert utc_start is not None and utc_end is not None
    return utc_start, utc_end


class UsageRepository:
    """
    Counter store keyed by (api_key_id, hour bucket).

    Writes are a single ``INSERT ... ON CONFLICT DO UPDATE`` so concurrent
    events for the same hour accumulate into one row without lost updates.
    """

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def increment(
        self,
        api_key_id: str,
        time_interval: datetime,
        increments: dict[str, int],
    ) -> None:
        """
        Add ``increments`` to the bucket, creating it seeded with them if absent.

        Args:
            api_key_id: Resource key
            time_interval: Any instant inside the target hour
            increments: Column name to non-negative increment
        """
        unknown = set(increments) - set(COUNTER_FIELDS)
        if unknown:
            raise ValueError(f"Unknown usage counters: {sorted(unknown)}")

        bucket = truncate_to_hour(time_interval)
        insert = dialect_insert(self._session)
        stmt = insert(ApiKeyUsage).values(
            api_key_id=api_key_id,
            time_interval=bucket,
            **increments,
        )
        update_values: dict[str, Any] = {
            name: getattr(ApiKeyUsage, name) + stmt.excluded[name]
            for name in increments
        }
        update_values["updated_at"] = datetime.now(UTC)
        stmt = stmt.on_conflict_do_update(
            index_elements=[ApiKeyUsage.api_key_id, ApiKeyUsage.time_interval],
            set_=update_values,
        )
        await self._session.execute(stmt)

    async def list_range(
        self,
        api_key_id: str,
        start: datetime,
        end: datetime,
    ) -> list[UsageBucketRecord]:
        """Buckets with ``start <= time_interval <= end``, oldest first."""
        start, end = _utc_range(start, end)
        query = (
            select(ApiKeyUsage)
            .where(
                ApiKeyUsage.api_key_id == api_key_id,
                ApiKeyUsage.time_interval >= start,
                ApiKeyUsage.time_interval <= end,
            )
            .order_by(ApiKeyUsage.time_interval.asc())
        )
        result = await self._session.execute(query)
        return [_to_record(row) for row in result.scalars().all()]

    async def sum_range(
        self,
        api_key_id: str,
        start: datetime,
        end: datetime,
    ) -> UsageCounters:
        """Field-wise sum of all buckets in the closed range."""
        start, end = _utc_range(start, end)
        query = select(
            *[
                func.coalesce(func.sum(getattr(ApiKeyUsage, name)), 0).label(name)
                for name in COUNTER_FIELDS
            ]
        ).where(
            ApiKeyUsage.api_key_id == api_key_id,
            ApiKeyUsage.time_interval >= start,
            ApiKeyUsage.time_interval <= end,
        )
        result = await self._session.execute(query)
        return UsageCounters.from_mapping(result.one())

    async def get_bucket(
        self, api_key_id: str, time_interval: datetime
    ) -> UsageBucketRecord | None:
        """The bucket containing ``time_interval``, if any."""
        query = select(ApiKeyUsage).where(
            ApiKeyUsage.api_key_id == api_key_id,
            ApiKeyUsage.time_interval == truncate_to_hour(time_interval),
        )
        result = await self._session.execute(query)
        row = result.scalar_one_or_none()
        return _to_record(row) if row is not None else None

    async def count_buckets(self, api_key_id: str) -> int:
        query = select(func.count(ApiKeyUsage.id)).where(
            ApiKeyUsage.api_key_id == api_key_id
        )
        result = await self._session.execute(query)
        return int(result.scalar_one())

    async def list_keys_with_activity(
        self,
        start: datetime,
        end: datetime,
    ) -> list[str]:
        """Distinct API keys that have at least one bucket in range."""
        start, end = _utc_range(start, end)
        query = (
            select(ApiKeyUsage.api_key_id)
            .where(
                ApiKeyUsage.time_interval >= start,
                ApiKeyUsage.time_interval <= end,
            )
            .distinct()
            .order_by(ApiKeyUsage.api_key_id)
        )
        result = await self._session.execute(query)
        return list(result.scalars().all())
