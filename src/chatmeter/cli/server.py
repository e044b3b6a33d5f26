"""Server and database commands."""

from __future__ import annotations

import asyncio
import os
from collections.abc import Callable
from pathlib import Path
from typing import Any

import typer

from chatmeter.cli._console import dim, error_panel, setup_logging, success, warning


def _project_root() -> Path:
    """Directory holding alembic.ini in a source checkout."""
    import chatmeter

    return Path(chatmeter.__file__).resolve().parents[2]


def _set_server_env(database_url: str | None, redis_url: str | None) -> None:
    """Set env vars read by settings in this process and in uvicorn reloads."""
    from chatmeter.config import get_settings

    if database_url:
        os.environ["CHATMETER_DATABASE_URL"] = database_url
    if redis_url:
        os.environ["CHATMETER_REDIS_URL"] = redis_url
    get_settings.cache_clear()


def _build_alembic_config() -> Any:
    from alembic.config import Config

    root = _project_root()
    alembic_ini = root / "alembic.ini"
    script_location = root / "alembic"
    if not alembic_ini.exists() or not script_location.is_dir():
        error_panel(
            f"Alembic config not found under {root}",
            title="Migrations missing",
        )
        raise typer.Exit(1)

    cfg = Config(str(alembic_ini))
    cfg.set_main_option("script_location", str(script_location))
    return cfg


def _run_alembic_command(
    *,
    database_url: str | None,
    verbose: bool,
    failure_title: str,
    run: Callable[[Any, Any], None],
) -> None:
    setup_logging(verbose=verbose)
    _set_server_env(database_url, redis_url=None)

    try:
        from alembic import command

        run(command, _build_alembic_config())
    except typer.Exit:
        raise
    except Exception as e:
        error_panel(str(e), title=failure_title)
        raise typer.Exit(1) from e


async def _create_tables(database_url: str) -> None:
    from chatmeter.db.session import Database

    db = Database(database_url)
    await db.connect()
    try:
        await db.create_tables()
    finally:
        await db.disconnect()


def start(
    host: str = typer.Option("0.0.0.0", "--host", help="Bind host"),
    port: int = typer.Option(8080, "--port", help="Bind port"),
    reload: bool = typer.Option(False, "--reload", help="Enable auto-reload"),
    database_url: str | None = typer.Option(
        None,
        "--database-url",
        envvar="CHATMETER_DATABASE_URL",
        help="Database URL",
    ),
    redis_url: str | None = typer.Option(
        None,
        "--redis-url",
        envvar="CHATMETER_REDIS_URL",
        help="Redis URL for job locks",
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose logging"),
) -> None:
    """Start the Chatmeter API server."""
    setup_logging(verbose=verbose)
    _set_server_env(database_url, redis_url)

    import uvicorn

    try:
        uvicorn.run("chatmeter.main:app", host=host, port=port, reload=reload)
    except Exception as e:
        error_panel(str(e), title="Server start failed")
        raise typer.Exit(1) from e


def db_upgrade(
    revision: str = typer.Argument("head", help="Target Alembic revision"),
    database_url: str | None = typer.Option(
        None,
        "--database-url",
        envvar="CHATMETER_DATABASE_URL",
        help="Database URL for migrations",
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose logging"),
) -> None:
    """Run Alembic upgrade."""
    _run_alembic_command(
        database_url=database_url,
        verbose=verbose,
        failure_title="Migration failed",
        run=lambda command, cfg: command.upgrade(cfg, revision),
    )
    success(f"Database upgraded to {revision}")


def db_create(
    database_url: str | None = typer.Option(
        None,
        "--database-url",
        envvar="CHATMETER_DATABASE_URL",
        help="Database URL",
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose logging"),
) -> None:
    """Create all tables directly from the models (development only)."""
    setup_logging(verbose=verbose)
    _set_server_env(database_url, redis_url=None)

    from chatmeter.config import get_settings

    settings = get_settings()
    if not settings.is_sqlite:
        warning("Use `chatmeter db upgrade` for PostgreSQL schemas.")

    try:
        asyncio.run(_create_tables(settings.effective_database_url))
    except Exception as e:
        error_panel(str(e), title="Table creation failed")
        if verbose:
            dim(repr(e))
        raise typer.Exit(1) from e
    success("Tables created")
