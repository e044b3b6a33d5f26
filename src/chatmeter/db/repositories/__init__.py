from chatmeter.db.repositories.api_keys_repository import ApiKeyRepository
from chatmeter.db.repositories.models import (
    ActivityHours,
    LifetimeStatisticsRecord,
    UsageBucketRecord,
)
from chatmeter.db.repositories.news_repository import (
    NEWS_STATUS_DRAFT,
    NEWS_STATUS_PUBLISHED,
    NewsRepository,
)
from chatmeter.db.repositories.statistics_repository import StatisticsRepository
from chatmeter.db.repositories.usage_repository import UsageRepository

__all__ = [
    "ActivityHours",
    "ApiKeyRepository",
    "LifetimeStatisticsRecord",
    "NEWS_STATUS_DRAFT",
    "NEWS_STATUS_PUBLISHED",
    "NewsRepository",
    "StatisticsRepository",
    "UsageBucketRecord",
    "UsageRepository",
]
