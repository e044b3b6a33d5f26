"""Repository for lifetime API key statistics."""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any

from sqlalchemy import case, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from chatmeter.db.repositories.models import ActivityHours, LifetimeStatisticsRecord
from chatmeter.db.repositories.utils import dialect_insert
from chatmeter.db.tables import ApiKeyStatistics
from chatmeter.domain import UsageDelta
from chatmeter.shared_utils import as_utc_aware


def _to_record(row: ApiKeyStatistics) -> LifetimeStatisticsRecord:
    updated_at = as_utc_aware(row.updated_at)
    assert updated_at is not None
    return LifetimeStatisticsRecord(
        api_key_id=row.api_key_id,
        token_used=row.token_used,
        total_chats_started=row.total_chats_started,
        total_messages_sent=row.total_messages_sent,
        requests_count=row.requests_count,
        bot_messages_count=row.bot_messages_count,
        operator_messages_count=row.operator_messages_count,
        user_messages_count=row.user_messages_count,
        total_response_time=row.total_response_time,
        response_count=row.response_count,
        completed_chats=row.completed_chats,
        total_chat_duration=row.total_chat_duration,
        shortest_chat_duration=row.shortest_chat_duration,
        longest_chat_duration=row.longest_chat_duration,
        most_active_hour=row.most_active_hour,
        least_active_hour=row.least_active_hour,
        updated_at=updated_at,
    )


class StatisticsRepository:
    """Repository for the one-row-per-key lifetime summary."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def apply(self, api_key_id: str, delta: UsageDelta) -> None:
        """
        Fold one event into the lifetime summary with a single upsert.

        On insert every counter is seeded from the delta and both extrema are
        set to the supplied chat duration (or left NULL). On conflict totals
        are added and each extremum is replaced only when the new duration is
        strictly better or nothing is stored yet.
        """
        increments = delta.summary_increments()
        duration = delta.effective_chat_duration

        insert = dialect_insert(self._session)
        stmt = insert(ApiKeyStatistics).values(
            api_key_id=api_key_id,
            shortest_chat_duration=duration,
            longest_chat_duration=duration,
            **increments,
        )

        update_values: dict[str, Any] = {
            name: getattr(ApiKeyStatistics, name) + stmt.excluded[name]
            for name in increments
        }
        if duration is not None:
            shortest = ApiKeyStatistics.shortest_chat_duration
            longest = ApiKeyStatistics.longest_chat_duration
            update_values["shortest_chat_duration"] = case(
                (shortest.is_(None), stmt.excluded.shortest_chat_duration),
                (
                    stmt.excluded.shortest_chat_duration < shortest,
                    stmt.excluded.shortest_chat_duration,
                ),
                else_=shortest,
            )
            update_values["longest_chat_duration"] = case(
                (longest.is_(None), stmt.excluded.longest_chat_duration),
                (
                    stmt.excluded.longest_chat_duration > longest,
                    stmt.excluded.longest_chat_duration,
                ),
                else_=longest,
            )
        update_values["updated_at"] = datetime.now(UTC)

        stmt = stmt.on_conflict_do_update(
            index_elements=[ApiKeyStatistics.api_key_id],
            set_=update_values,
        )
        await self._session.execute(stmt)

    async def get(self, api_key_id: str) -> LifetimeStatisticsRecord | None:
        """Get the lifetime summary for a key, or None before its first event."""
        query = select(ApiKeyStatistics).where(
            ApiKeyStatistics.api_key_id == api_key_id
        )
        result = await self._session.execute(query)
        row = result.scalar_one_or_none()
        return _to_record(row) if row is not None else None

    async def set_activity_hours(self, api_key_id: str, hours: ActivityHours) -> bool:
        """Store most/least active hours. Returns False when no summary row exists."""
        stmt = (
            update(ApiKeyStatistics)
            .where(ApiKeyStatistics.api_key_id == api_key_id)
            .values(
                most_active_hour=hours.most_active_hour,
                least_active_hour=hours.least_active_hour,
                updated_at=datetime.now(UTC),
            )
            .execution_options(synchronize_session=False)
        )
        result = await self._session.execute(stmt)
        return (result.rowcount or 0) > 0  # type: ignore[attr-defined]
