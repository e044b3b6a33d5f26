"""Maintenance job commands."""

import asyncio

import typer

from chatmeter.cli._console import console, error, error_panel, nl, setup_logging, success


async def _run_job(name: str) -> int:
    from chatmeter.config import get_settings
    from chatmeter.db.session import Database
    from chatmeter.services.operations import build_jobs

    settings = get_settings()
    db = Database(settings.effective_database_url)
    await db.connect()
    try:
        job = build_jobs(db, settings)[name]
        return await job.run()
    finally:
        await db.disconnect()


def list_jobs() -> None:
    """List available maintenance jobs."""
    from chatmeter.services.operations import JOB_NAMES

    nl()
    for name in JOB_NAMES:
        console.print(f"  {name}")
    nl()


def run_job(
    name: str = typer.Argument(..., help="Job name (see `chatmeter jobs list`)"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose logging"),
) -> None:
    """Run one maintenance job once and report affected rows."""
    from chatmeter.services.operations import JOB_NAMES

    setup_logging(verbose=verbose)
    if name not in JOB_NAMES:
        error(f"Job '{name}' not found")
        console.print("Available jobs: " + ", ".join(JOB_NAMES), style="dim")
        raise typer.Exit(1)

    try:
        affected = asyncio.run(_run_job(name))
    except Exception as e:
        error_panel(str(e), title=f"Job {name} failed")
        raise typer.Exit(1) from e
    success(f"{name}: {affected} affected")
