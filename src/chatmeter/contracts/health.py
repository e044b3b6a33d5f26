"""Health and readiness contract payloads."""

from pydantic import BaseModel, Field


class DependencyHealth(BaseModel):
    """Readiness status for a dependency."""

    status: str = "ok"
    detail: str | None = None


class ReadinessMetrics(BaseModel):
    database: DependencyHealth = Field(default_factory=DependencyHealth)
    redis: DependencyHealth = Field(
        default_factory=lambda: DependencyHealth(
            status="skipped",
            detail="CHATMETER_REDIS_URL not set",
        )
    )


class JobsHealthSummary(BaseModel):
    """Scheduled job states surfaced by health endpoints."""

    enabled: bool = False
    running: list[str] = Field(default_factory=list)


class HealthResponse(BaseModel):
    """Health check response."""

    status: str = "ok"
    version: str
    readiness: ReadinessMetrics = Field(default_factory=ReadinessMetrics)
    jobs: JobsHealthSummary = Field(default_factory=JobsHealthSummary)


__all__ = [
    "DependencyHealth",
    "HealthResponse",
    "JobsHealthSummary",
    "ReadinessMetrics",
]
