"""Repository for API key lifecycle operations."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from chatmeter.db.tables import ApiKey
from chatmeter.shared_utils import as_utc_aware


class ApiKeyRepository:
    """Repository for API key rows touched by the statistics engine."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def create(
        self,
        *,
        name: str = "default",
        expired_at: datetime | None = None,
        is_active: bool = True,
        id: str | None = None,
    ) -> ApiKey:
        """Create an API key row."""
        api_key = ApiKey(name=name, expired_at=expired_at, is_active=is_active)
        if id is not None:
            api_key.id = id
        self._session.add(api_key)
        await self._session.flush()
        return api_key

    async def get_by_id(self, id: str) -> ApiKey | None:
        result = await self._session.execute(select(ApiKey).where(ApiKey.id == id))
        return result.scalar_one_or_none()

    async def deactivate_expired(self, now: datetime) -> int:
        """
        Flag every active key whose expiry is strictly before ``now`` inactive.

        One set-based UPDATE; a second call with the same ``now`` matches
        nothing because the rows are no longer active.

        Returns:
            Number of deactivated keys
        """
        now = as_utc_aware(now) or now
        stmt = (
            update(ApiKey)
            .where(
                ApiKey.is_active.is_(True),
                ApiKey.expired_at.is_not(None),
                ApiKey.expired_at < now,
            )
            .values(is_active=False, last_used_at=now, updated_at=now)
            .execution_options(synchronize_session=False)
        )
        result = await self._session.execute(stmt)
        return result.rowcount or 0  # type: ignore[attr-defined]
