"""Database module for chatmeter."""

from chatmeter.db.repositories import (
    ApiKeyRepository,
    NewsRepository,
    StatisticsRepository,
    UsageRepository,
)
from chatmeter.db.session import (
    Database,
    get_database,
    init_database,
    reset_database,
)
from chatmeter.db.tables import ApiKey, ApiKeyStatistics, ApiKeyUsage, Base, News

__all__ = [
    # Models
    "Base",
    "ApiKey",
    "ApiKeyStatistics",
    "ApiKeyUsage",
    "News",
    # Database
    "Database",
    "get_database",
    "init_database",
    "reset_database",
    # Repositories
    "ApiKeyRepository",
    "NewsRepository",
    "StatisticsRepository",
    "UsageRepository",
]
