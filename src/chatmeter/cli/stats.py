"""Statistics inspection commands."""

import asyncio

import typer
from rich.table import Table

from chatmeter.cli._console import console, error, nl, setup_logging


async def _load(api_key_id: str):
    from chatmeter.config import get_settings
    from chatmeter.db.session import Database
    from chatmeter.services.statistics import RollupAggregator

    db = Database(get_settings().effective_database_url)
    await db.connect()
    try:
        aggregator = RollupAggregator(db)
        return (
            await aggregator.lifetime(api_key_id),
            await aggregator.last_24_hours(api_key_id),
        )
    finally:
        await db.disconnect()


def show(
    api_key_id: str = typer.Argument(..., help="API key id"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose logging"),
) -> None:
    """Show lifetime statistics and the last 24 hours for a key."""
    setup_logging(verbose=verbose)
    record, view = asyncio.run(_load(api_key_id))
    if record is None:
        error(f"No statistics for {api_key_id}")
        raise typer.Exit(1)

    summary = Table(title="Lifetime", show_header=False, box=None)
    summary.add_row("Tokens", str(record.token_used))
    summary.add_row("Requests", str(record.requests_count))
    summary.add_row("Chats started", str(record.total_chats_started))
    summary.add_row("Messages", str(record.total_messages_sent))
    summary.add_row(
        "Bot / operator / user",
        f"{record.bot_messages_count} / {record.operator_messages_count}"
        f" / {record.user_messages_count}",
    )
    summary.add_row("Avg response time", f"{record.average_response_time:.1f}")
    summary.add_row("Avg chat duration", f"{record.average_chat_duration:.1f}")
    summary.add_row(
        "Most / least active hour",
        f"{record.most_active_hour} / {record.least_active_hour}",
    )

    hourly = Table(title="Last 24 hours (UTC)")
    hourly.add_column("Hour")
    hourly.add_column("Requests", justify="right")
    hourly.add_column("Tokens", justify="right")
    for period in view.periods:
        hourly.add_row(
            period.start.strftime("%Y-%m-%d %H:00"),
            str(period.counters.requests_count),
            str(period.counters.token_used),
        )

    nl()
    console.print(summary)
    nl()
    console.print(hourly)
