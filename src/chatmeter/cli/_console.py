"""Shared console and formatting utilities."""

import logging
import os

from rich.console import Console
from rich.logging import RichHandler

# NO_COLOR disables colors
no_color = os.environ.get("NO_COLOR", "").lower() in ("1", "true", "yes")

console = Console(
    highlight=False,
    force_terminal=not no_color,
    no_color=no_color,
)


def success(msg: str) -> None:
    console.print(f"  [green]✓[/green] {msg}")


def error(msg: str) -> None:
    console.print(f"  [red]✗[/red] {msg}")


def warning(msg: str) -> None:
    console.print(f"  [yellow]![/yellow] {msg}")


def dim(msg: str) -> None:
    console.print(f"  [dim]{msg}[/dim]")


def error_panel(msg: str, *, title: str = "Failed") -> None:
    """Print a styled error panel."""
    from rich.box import ROUNDED
    from rich.panel import Panel
    from rich.text import Text

    line = Text()
    line.append("✗ ", style="red bold")
    line.append(title, style="red")

    panel = Panel(
        Text("\n").join([line, Text(), Text(msg, style="dim")]),
        border_style="red dim",
        box=ROUNDED,
        padding=(0, 1),
        expand=False,
    )
    console.print(panel)


def nl() -> None:
    console.print()


def setup_logging(verbose: bool = False) -> None:
    """Route chatmeter logs through rich for CLI output."""
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)

    handler = RichHandler(
        console=console,
        show_time=False,
        show_path=False,
        rich_tracebacks=True,
        markup=True,
        keywords=[],
    )

    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[handler],
        force=True,
    )
    logging.getLogger("chatmeter").setLevel(level)
