"""Chatmeter CLI."""

import typer

from chatmeter.cli._console import console
from chatmeter.cli.jobs import list_jobs, run_job
from chatmeter.cli.server import db_create, db_upgrade, start
from chatmeter.cli.stats import show

app = typer.Typer(
    name="chatmeter",
    help="Usage statistics for chat API keys.",
    no_args_is_help=True,
    rich_markup_mode="rich",
    add_completion=False,
)


def _version_callback(value: bool) -> None:
    if value:
        from chatmeter import __version__

        console.print(f"[bold]chatmeter[/bold] [dim]{__version__}[/dim]")
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(
        False,
        "--version",
        "-V",
        callback=_version_callback,
        is_eager=True,
        help="Show version",
    ),
) -> None:
    """Usage statistics for chat API keys."""


server_app = typer.Typer(help="API server commands.", no_args_is_help=True)
server_app.command("start")(start)
app.add_typer(server_app, name="server")

db_app = typer.Typer(help="Database schema commands.", no_args_is_help=True)
db_app.command("upgrade")(db_upgrade)
db_app.command("create")(db_create)
app.add_typer(db_app, name="db")

jobs_app = typer.Typer(help="Maintenance job commands.", no_args_is_help=True)
jobs_app.command("list")(list_jobs)
jobs_app.command("run")(run_job)
app.add_typer(jobs_app, name="jobs")

stats_app = typer.Typer(help="Statistics commands.", no_args_is_help=True)
stats_app.command("show")(show)
app.add_typer(stats_app, name="stats")
