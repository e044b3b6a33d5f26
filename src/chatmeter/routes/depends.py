"""Shared FastAPI dependencies for route handlers."""

from fastapi import HTTPException

from chatmeter.db.session import Database, get_database
from chatmeter.shared_utils import Clock, utc_now


def require_database() -> Database:
    """FastAPI dependency that returns the database or raises 503."""
    try:
        return get_database()
    except RuntimeError:
        raise HTTPException(status_code=503, detail="Database not available")


def get_clock() -> Clock:
    return utc_now
