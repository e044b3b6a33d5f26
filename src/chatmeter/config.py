import logging
from enum import StrEnum
from functools import lru_cache
from typing import Literal

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from chatmeter._version import __version__

logger = logging.getLogger(__name__)


class Environments(StrEnum):
    DEV = "dev"
    PROD = "prod"

    def is_production(self) -> bool:
        return self == self.PROD

    def is_development(self) -> bool:
        return self == self.DEV


class Settings(BaseSettings):
    """Server configuration."""

    model_config = SettingsConfigDict(
        env_prefix="CHATMETER_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    redis_url: str | None = None
    database_url: str | None = None
    env: Environments = Environments.DEV
    host: str = "0.0.0.0"
    port: int = 8080
    debug: bool = False
    log_format: Literal["text", "json"] = "text"
    cors_allow_origins: str = "*"
    cors_allow_credentials: bool = False
    readiness_require_redis: bool = False

    # Database pool tuning (ignored for SQLite).
    database_pool_size: int = 5
    database_max_overflow: int = 10

    # Scheduled maintenance jobs.
    jobs_enabled: bool = True
    jobs_startup_jitter_seconds: float = 30.0
    jobs_lock_ttl_seconds: int = 300
    expire_keys_interval_seconds: float = 3600.0
    publish_news_interval_seconds: float = 300.0
    activity_recalc_interval_seconds: float = 3600.0

    version: str = __version__

    @field_validator("env", mode="before")
    @classmethod
    def _normalize_env_aliases(cls, value: object) -> object:
        """Allow long-form env aliases."""
        if isinstance(value, str):
            normalized = value.strip().lower()
            aliases = {
                "development": Environments.DEV.value,
                "production": Environments.PROD.value,
            }
            return aliases.get(normalized, normalized)
        return value

    @property
    def is_production(self) -> bool:
        return self.env.is_production()

    @property
    def is_development(self) -> bool:
        return self.env.is_development()

    @property
    def effective_database_url(self) -> str:
        """Get database URL, defaulting to SQLite if not configured."""
        if self.database_url:
            return self.database_url
        return "sqlite+aiosqlite:///chatmeter.db"

    @property
    def is_sqlite(self) -> bool:
        """Check if using SQLite database."""
        return self.effective_database_url.startswith("sqlite")

    @property
    def cors_allow_origins_list(self) -> list[str]:
        """Parse comma-delimited CORS origins into a list."""
        origins = [origin.strip() for origin in self.cors_allow_origins.split(",")]
        cleaned = [origin for origin in origins if origin]
        return cleaned or ["*"]


@lru_cache
def get_settings() -> Settings:
    return Settings()
