"""API routes."""

from fastapi import APIRouter

from chatmeter.routes.admin import router as admin_router
from chatmeter.routes.health import router as health_router
from chatmeter.routes.statistics import router as statistics_router

# Callers are authorised upstream.
v1_router = APIRouter(prefix="/api/v1")
v1_router.include_router(statistics_router)
v1_router.include_router(admin_router)

__all__ = [
    "v1_router",
    "health_router",
]
