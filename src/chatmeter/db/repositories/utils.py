from typing import Any

from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.ext.asyncio import AsyncSession


def session_dialect(session: AsyncSession) -> str:
    """Name of the dialect the session is bound to."""
    return session.get_bind().dialect.name


def dialect_insert(session: AsyncSession) -> Any:
    """
    Return the dialect-specific ``insert`` that supports ``ON CONFLICT``.

    Counter writes must be a single insert-or-add statement, so only
    dialects with native upsert are supported.
    """
    dialect = session_dialect(session)
    if dialect == "postgresql":
        return postgresql.insert
    if dialect == "sqlite":
        return sqlite.insert
    raise NotImplementedError(f"Atomic upsert is not supported for dialect {dialect!r}")
