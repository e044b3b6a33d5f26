"""Repository for scheduled news publication."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from chatmeter.db.tables import News
from chatmeter.shared_utils import as_utc_aware

NEWS_STATUS_DRAFT = "draft"
NEWS_STATUS_PUBLISHED = "published"


class NewsRepository:
    """Repository for news rows the publish sweep operates on."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def create(
        self,
        *,
        title: str,
        status: str = NEWS_STATUS_DRAFT,
        publish_at: datetime | None = None,
    ) -> News:
        news = News(title=title, status=status, publish_at=publish_at)
        self._session.add(news)
        await self._session.flush()
        return news

    async def get_by_id(self, id: str) -> News | None:
        result = await self._session.execute(select(News).where(News.id == id))
        return result.scalar_one_or_none()

    async def publish_scheduled(self, now: datetime) -> int:
        """Publish drafts whose ``publish_at`` is set and not in the future."""
        now = as_utc_aware(now) or now
        stmt = (
            update(News)
            .where(
                News.status == NEWS_STATUS_DRAFT,
                News.publish_at.is_not(None),
                News.publish_at <= now,
            )
            .values(status=NEWS_STATUS_PUBLISHED, updated_at=now)
            .execution_options(synchronize_session=False)
        )
        result = await self._session.execute(stmt)
        return result.rowcount or 0  # type: ignore[attr-defined]
