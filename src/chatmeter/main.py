"""Chatmeter API server."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from chatmeter.config import Settings, get_settings
from chatmeter.db.session import (
    Database,
    get_database,
    init_database,
    reset_database,
)
from chatmeter.db.tables import Base
from chatmeter.logging import configure_logging
from chatmeter.middleware import CorrelationIDMiddleware
from chatmeter.routes import health_router, v1_router
from chatmeter.services.operations import build_jobs
from chatmeter.services.redis import close_redis, connect_redis
from chatmeter.services.statistics import InvalidRangeError

# Configure logging (supports CHATMETER_LOG_FORMAT=json for structured output).
_boot_settings = get_settings()
configure_logging(log_format=_boot_settings.log_format, debug=_boot_settings.debug)
logger = logging.getLogger(__name__)

REQUIRED_TABLES = set(Base.metadata.tables)


class AppResponse(BaseModel):
    name: str = "Chatmeter API"
    version: str = get_settings().version
    docs: str = "/docs"


async def prepare_database(settings: Settings) -> Database:
    """Connect the global database and make sure the schema is usable."""
    db = init_database(
        settings.effective_database_url,
        pool_size=settings.database_pool_size,
        max_overflow=settings.database_max_overflow,
    )
    await db.connect()

    if settings.is_sqlite:
        logger.info("Database connected (SQLite)")
        await db.create_tables()
    else:
        logger.info("Database connected (PostgreSQL)")
        missing_tables = await db.get_missing_tables(REQUIRED_TABLES)
        if missing_tables:
            await db.disconnect()
            raise RuntimeError(
                "Database schema is missing required tables: "
                + ", ".join(missing_tables)
                + ". Run Alembic migrations (e.g. `alembic upgrade head`) before starting."
            )
    return db


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler."""
    logger.info("Starting Chatmeter API server...")

    settings = get_settings()
    db = await prepare_database(settings)

    redis_client = None
    if settings.redis_url:
        redis_client = await connect_redis(settings.redis_url)
        logger.info("Redis connected")
    else:
        logger.info(
            "Redis not configured (CHATMETER_REDIS_URL not set), "
            "jobs run without a distributed lock"
        )

    jobs = {}
    if settings.jobs_enabled:
        jobs = build_jobs(db, settings, redis_client=redis_client)
        for job in jobs.values():
            await job.start()
    else:
        logger.info("Scheduled jobs disabled (CHATMETER_JOBS_ENABLED=false)")
    app.state.jobs = jobs

    yield

    logger.info("Shutting down Chatmeter API server...")

    for job in jobs.values():
        await job.stop()
    app.state.jobs = {}

    if redis_client:
        await close_redis()
        logger.info("Redis disconnected")

    await get_database().disconnect()
    reset_database()
    logger.info("Database disconnected")


def create_app(settings: Settings | None = None) -> FastAPI:
    """Build the FastAPI application."""
    settings = settings or get_settings()
    application = FastAPI(
        title="Chatmeter API",
        description="Usage statistics and maintenance jobs for chat API keys",
        version=settings.version,
        lifespan=lifespan,
    )

    # Runs before CORS so the ID is on every response.
    application.add_middleware(CorrelationIDMiddleware)

    allow_origins = settings.cors_allow_origins_list
    allow_credentials = settings.cors_allow_credentials and "*" not in allow_origins
    if settings.cors_allow_credentials and "*" in allow_origins:
        logger.warning(
            "CORS credentials disabled because wildcard origins are configured. "
            "Set CHATMETER_CORS_ALLOW_ORIGINS to explicit origins to enable credentials."
        )

    application.add_middleware(
        CORSMiddleware,
        allow_origins=allow_origins,
        allow_credentials=allow_credentials,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @application.exception_handler(InvalidRangeError)
    async def invalid_range_handler(_request: Request, exc: InvalidRangeError):
        return JSONResponse(status_code=400, content={"detail": str(exc)})

    application.include_router(health_router)
    application.include_router(v1_router)

    @application.get("/")
    async def root():
        return AppResponse()

    return application


app = create_app()


def main():
    """Run the server."""
    import uvicorn

    settings = get_settings()

    uvicorn.run(
        "chatmeter.main:app",
        host=settings.host,
        port=settings.port,
    )


if __name__ == "__main__":
    main()
