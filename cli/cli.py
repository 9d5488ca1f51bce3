"""CLI for the Life Hub backend.

Runs the API locally and exposes the calendar maintenance utilities
(source repair, per-source counts) against the configured database.
"""

import os

import typer
import uvicorn
from loguru import logger
from rich.console import Console
from rich.table import Table

from app.calendar.repair import count_event_sources, fix_calendar_event_sources
from app.config.settings import settings
from app.core.logger import setup_logger
from app.db.session import get_store, init_db
from app.db.store import StoreError

console = Console()

app = typer.Typer(
    name="lifehub-cli",
    help="Life Hub backend CLI - local server and calendar maintenance",
    add_completion=False,
)

DEFAULT_HOST = os.getenv("SERVER_HOST", "127.0.0.1")


@app.callback()
def main(verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging")) -> None:
    setup_logger(settings, level="DEBUG" if verbose else None)


@app.command()
def serve(
    host: str = typer.Option(DEFAULT_HOST, "--host", "-h", help="Host to bind to"),
    port: int = typer.Option(8000, "--port", "-p", help="Port to bind to"),
    reload: bool = typer.Option(False, "--reload", help="Enable auto-reload"),
) -> None:
    """Start the FastAPI application with uvicorn."""
    uvicorn.run("app.main:app", host=host, port=port, reload=reload)


@app.command("init-db")
def init_db_command() -> None:
    """Create missing tables."""
    init_db()
    console.print("[green]Database tables verified[/green]")


@app.command("repair-sources")
def repair_sources(user_id: str | None = typer.Option(None, "--user-id", help="Only repair this user's events")) -> None:
    """Re-tag planned meal events stored with the meal source."""
    repaired = fix_calendar_event_sources(get_store(), user_id)
    if isinstance(repaired, StoreError):
        console.print(f"[red]Failed to read calendar events:[/red] {repaired.message}")
        raise typer.Exit(code=1)
    logger.debug(f"Repaired ids: {repaired}")
    console.print(f"Re-tagged [bold]{len(repaired)}[/bold] calendar events as planned_meal")


@app.command("source-counts")
def source_counts(user_id: str | None = typer.Option(None, "--user-id", help="Only count this user's events")) -> None:
    """Show how many calendar events exist per source."""
    summary = count_event_sources(get_store(), user_id)
    if isinstance(summary, StoreError):
        console.print(f"[red]Failed to read calendar events:[/red] {summary.message}")
        raise typer.Exit(code=1)

    table = Table(title="Calendar events by source")
    table.add_column("Source")
    table.add_column("Count", justify="right")
    table.add_column("Examples")
    for source, info in sorted(summary.items()):
        table.add_row(source, str(info["count"]), ", ".join(info["examples"]))
    console.print(table)


if __name__ == "__main__":
    app()
