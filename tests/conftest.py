from __future__ import annotations

from collections.abc import AsyncIterator, Awaitable, Callable
from datetime import datetime
from pathlib import Path

import pytest
import pytest_asyncio
from fakeredis.aioredis import FakeRedis

from chatmeter.config import get_settings
from chatmeter.db.repositories import ApiKeyRepository
from chatmeter.db.session import Database
from chatmeter.db.session import init_database as _init_database
from chatmeter.db.session import reset_database


@pytest.fixture(autouse=True)
def _fresh_settings(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.delenv("CHATMETER_DATABASE_URL", raising=False)
    monkeypatch.delenv("CHATMETER_REDIS_URL", raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest_asyncio.fixture
async def fake_redis() -> AsyncIterator[FakeRedis]:
    client = FakeRedis(decode_responses=True)
    try:
        yield client
    finally:
        await client.aclose()


@pytest_asyncio.fixture
async def sqlite_db(tmp_path: Path) -> AsyncIterator[Database]:
    db_path = tmp_path / "chatmeter-test.db"
    db = _init_database(f"sqlite+aiosqlite:///{db_path}")
    await db.connect()
    await db.create_tables()
    try:
        yield db
    finally:
        await db.disconnect()
        reset_database()


@pytest_asyncio.fixture
async def make_api_key(
    sqlite_db: Database,
) -> Callable[..., Awaitable[str]]:
    async def _make(
        *,
        id: str | None = None,
        expired_at: datetime | None = None,
        is_active: bool = True,
    ) -> str:
        async with sqlite_db.session() as session:
            api_key = await ApiKeyRepository(session).create(
                name="widget",
                expired_at=expired_at,
                is_active=is_active,
                id=id,
            )
            return api_key.id

    return _make


@pytest_asyncio.fixture
async def api_key(make_api_key: Callable[..., Awaitable[str]]) -> str:
    return await make_api_key(id="key-1")
