"""Health check routes."""

import logging

from fastapi import APIRouter, Request, Response, status
from sqlalchemy import text

from chatmeter.config import get_settings
from chatmeter.contracts import (
    DependencyHealth,
    HealthResponse,
    JobsHealthSummary,
    ReadinessMetrics,
)
from chatmeter.db.session import get_database
from chatmeter.services.redis import get_redis

logger = logging.getLogger(__name__)

router = APIRouter(tags=["health"])


async def _check_database_readiness() -> DependencyHealth:
    try:
        db = get_database()
    except RuntimeError as exc:
        return DependencyHealth(status="error", detail=str(exc))

    try:
        async with db.session() as session:
            await session.execute(text("SELECT 1"))
    except Exception as exc:
        return DependencyHealth(
            status="error",
            detail=f"Database readiness probe failed: {exc}",
        )

    return DependencyHealth(status="ok")


async def _check_redis_readiness(
    redis_url: str | None,
    *,
    required: bool,
) -> DependencyHealth:
    if not redis_url:
        return DependencyHealth(
            status="error" if required else "skipped",
            detail="CHATMETER_REDIS_URL not set",
        )

    try:
        redis_client = await get_redis()
    except RuntimeError as exc:
        return DependencyHealth(status="error", detail=str(exc))

    try:
        pong = await redis_client.ping()  # type: ignore[misc]
    except Exception as exc:
        return DependencyHealth(status="error", detail=f"Redis ping failed: {exc}")

    if pong is False:
        return DependencyHealth(status="error", detail="Redis ping returned false")

    return DependencyHealth(status="ok")


def _jobs_summary(request: Request | None) -> JobsHealthSummary:
    jobs = getattr(request.app.state, "jobs", None) if request is not None else None
    if not jobs:
        return JobsHealthSummary()
    return JobsHealthSummary(
        enabled=True,
        running=sorted(name for name, job in jobs.items() if job.running),
    )


async def _build_health_response(
    request: Request | None = None,
) -> tuple[HealthResponse, bool]:
    settings = get_settings()
    redis_required = settings.readiness_require_redis
    db_readiness = await _check_database_readiness()
    redis_readiness = await _check_redis_readiness(
        settings.redis_url,
        required=redis_required,
    )
    if redis_required:
        redis_ready = redis_readiness.status == "ok"
    else:
        redis_ready = redis_readiness.status in {"ok", "skipped"}
    ready = db_readiness.status == "ok" and redis_ready

    payload = HealthResponse(
        status="ok" if ready else "degraded",
        version=settings.version,
        readiness=ReadinessMetrics(database=db_readiness, redis=redis_readiness),
        jobs=_jobs_summary(request),
    )
    return payload, ready


@router.get("/health", response_model=HealthResponse)
async def health_check(request: Request) -> HealthResponse:
    """
    Liveness endpoint with dependency status details.

    Always returns 200 while the process is alive; see /ready for gating.
    """
    payload, _ = await _build_health_response(request)
    return payload


@router.get("/ready", response_model=HealthResponse)
async def readiness_check(request: Request, response: Response) -> HealthResponse:
    """Readiness endpoint for load balancers and traffic gating."""
    payload, ready = await _build_health_response(request)
    if not ready:
        response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    return payload
