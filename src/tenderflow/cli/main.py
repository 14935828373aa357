"""
Tenderflow CLI - Main entry point.

Terminal front end for the tender and bid lifecycle engine.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import typer
from dotenv import load_dotenv
from rich.panel import Panel
from rich.traceback import install as install_rich_traceback

from tenderflow import __app_name__, __version__

from . import runtime
from .runtime import console, err_console

# Load environment variables from .env (if present)
load_dotenv()

install_rich_traceback(show_locals=False, width=120)

app = typer.Typer(
    name=__app_name__,
    help="Versioned tender and bid lifecycle engine",
    rich_markup_mode="rich",
    no_args_is_help=True,
    pretty_exceptions_show_locals=False,
)


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        console.print(f"[bold cyan]{__app_name__}[/bold cyan] version [green]{__version__}[/green]")
        raise typer.Exit()


@app.callback()
def main(
    version: Optional[bool] = typer.Option(
        None,
        "--version",
        "-v",
        help="Show version and exit",
        callback=version_callback,
        is_eager=True,
    ),
    config: Optional[Path] = typer.Option(
        None,
        "--config",
        "-c",
        help="Path to app.yaml (default: configs/app.yaml)",
    ),
) -> None:
    """Tenderflow - tenders, bids and their version history."""
    runtime.config_path = config


# =============================================================================
# Import and register subcommand modules
# =============================================================================

from .commands import bids, db, org, tenders  # noqa: E402

app.add_typer(db.app, name="db", help="Database operations")
app.add_typer(org.app, name="org", help="Organizations and employees")
app.add_typer(tenders.app, name="tender", help="Create and manage tenders")
app.add_typer(bids.app, name="bid", help="Create and manage bids")


# =============================================================================
# Init Command
# =============================================================================


@app.command()
def init(
    force: bool = typer.Option(
        False,
        "--force",
        "-f",
        help="Overwrite existing configuration",
    ),
) -> None:
    """Initialize Tenderflow database and configuration.

    Creates required directories, the default configuration file,
    and the database schema.
    """
    from tenderflow.core.config.loader import DEFAULT_CONFIG_PATH
    from tenderflow.persistence.db import init_db

    app_config_path = runtime.config_path or DEFAULT_CONFIG_PATH
    if not app_config_path.exists() or force:
        _create_default_app_config(app_config_path)

    config = runtime.load_config()
    config.ensure_directories()

    database = init_db(config.database)
    database.dispose()

    console.print()
    console.print(Panel.fit(
        "[bold green]OK - Tenderflow initialized successfully![/bold green]\n\n"
        f"Config:   [cyan]{app_config_path}[/cyan]\n"
        f"Database: [cyan]{config.database.url}[/cyan]\n\n"
        "Next steps:\n"
        "  1. Add an organization: [yellow]tenderflow org add <name>[/yellow]\n"
        "  2. Add an employee: [yellow]tenderflow org employee <username>[/yellow]\n"
        "  3. Grant responsibility: [yellow]tenderflow org grant <org-id> <username>[/yellow]",
        title="[bold]Initialization Complete[/bold]",
        border_style="green",
    ))


def _create_default_app_config(path: Path) -> None:
    """Create default app.yaml configuration."""
    default_config = """\
# Tenderflow Configuration

data_dir: data

database:
  url: ${DATABASE_URL:-sqlite:///data/tenderflow.db}
  echo: false
  connect_attempts: 3
  connect_timeout_seconds: 5

logging:
  level: INFO
  file: logs/tenderflow.log
  json_format: true
  rich_console: true

pagination:
  default_limit: 5
  max_limit: 50

versioning:
  max_write_attempts: 3
"""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(default_config, encoding="utf-8")


# =============================================================================
# Status Command
# =============================================================================


@app.command()
def status() -> None:
    """Show database health and entity counts."""
    from rich.table import Table
    from sqlalchemy.exc import OperationalError

    from tenderflow.core.enums import EntityKind
    from tenderflow.persistence.repo import DirectoryRepository, EntityStore

    with runtime.open_database() as database:
        if not database.ping():
            err_console.print(f"[red]Database unreachable:[/red] {database!r}")
            raise typer.Exit(1)

        try:
            with database.session() as session:
                store = EntityStore(session)
                directory = DirectoryRepository(session)
                counts = {
                    "Organizations": len(directory.list_organizations()),
                    "Employees": len(directory.list_employees()),
                    "Tenders": store.count(EntityKind.TENDER),
                    "Bids": store.count(EntityKind.BID),
                }
        except OperationalError:
            err_console.print("[red]Tenderflow not initialized. Run:[/red] tenderflow init")
            raise typer.Exit(1)

    table = Table(title="Tenderflow Status", show_header=True, header_style="bold magenta")
    table.add_column("Entity", style="cyan")
    table.add_column("Count", justify="right")
    for name, count in counts.items():
        table.add_row(name, str(count))

    console.print("[green]OK[/green] Database reachable")
    console.print(table)


# =============================================================================
# Entry Point
# =============================================================================


def run() -> None:
    """Run the CLI application."""
    app()


if __name__ == "__main__":
    run()
