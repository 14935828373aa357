"""
Shared plumbing for CLI commands.

Loads configuration, sets up logging and owns the Database handle for the
duration of one command.
"""

from __future__ import annotations

from contextlib import contextmanager
from pathlib import Path
from typing import Any, Generator, Iterable

import orjson
import typer
from rich.console import Console
from rich.table import Table

from tenderflow.core.config import AppConfig, ConfigError, load_app_config
from tenderflow.core.errors import DomainError
from tenderflow.core.logging import setup_logging
from tenderflow.core.orchestrator import Orchestrator
from tenderflow.core.schemas import BidView, TenderView
from tenderflow.persistence.db import Database

console = Console()
err_console = Console(stderr=True)

# Set by the --config option of the root command
config_path: Path | None = None


def load_config() -> AppConfig:
    """Load the app config and configure logging from it."""
    try:
        config = load_app_config(config_path)
    except ConfigError as e:
        err_console.print(f"[red]Configuration error:[/red] {e}")
        if e.details:
            err_console.print(f"[dim]{e.details}[/dim]")
        raise typer.Exit(1)

    setup_logging(
        level=config.logging.level,
        log_file=config.logging.file,
        json_format=config.logging.json_format,
        rich_console=config.logging.rich_console,
    )
    return config


@contextmanager
def open_database(config: AppConfig | None = None) -> Generator[Database, None, None]:
    """Database handle that is disposed when the command finishes."""
    config = config or load_config()
    database = Database.from_config(config.database)
    try:
        yield database
    finally:
        database.dispose()


@contextmanager
def engine() -> Generator[Orchestrator, None, None]:
    """Orchestrator for one command.

    A DomainError is printed as ``[status] reason`` and exits with code 1.
    """
    config = load_config()
    with open_database(config) as database:
        try:
            yield Orchestrator(database, config)
        except DomainError as e:
            err_console.print(f"[{e.status}] {e.reason}", style="red", markup=False)
            raise typer.Exit(1)


# =============================================================================
# Output
# =============================================================================


def print_json(data: Any) -> None:
    console.print_json(orjson.dumps(data).decode("utf-8"))


def tender_table(tenders: Iterable[TenderView], title: str = "Tenders") -> Table:
    table = Table(title=title, show_header=True, header_style="bold magenta")
    table.add_column("ID", style="dim", no_wrap=True)
    table.add_column("Name", style="cyan", max_width=40)
    table.add_column("Service", justify="center")
    table.add_column("Status", justify="center")
    table.add_column("Version", justify="right")

    status_style = {"Created": "yellow", "Published": "green", "Closed": "dim"}
    for t in tenders:
        style = status_style.get(t.status, "default")
        table.add_row(
            t.id,
            t.name,
            str(t.service_type),
            f"[{style}]{t.status}[/{style}]",
            str(t.version),
        )
    return table


def bid_table(bids: Iterable[BidView], title: str = "Bids") -> Table:
    table = Table(title=title, show_header=True, header_style="bold magenta")
    table.add_column("ID", style="dim", no_wrap=True)
    table.add_column("Name", style="cyan", max_width=40)
    table.add_column("Tender", style="dim", no_wrap=True)
    table.add_column("Status", justify="center")
    table.add_column("Decision", justify="center")
    table.add_column("Version", justify="right")

    status_style = {"Created": "yellow", "Published": "green", "Canceled": "dim"}
    for b in bids:
        style = status_style.get(b.status, "default")
        table.add_row(
            b.id,
            b.name,
            b.tender_id,
            f"[{style}]{b.status}[/{style}]",
            str(b.decision or "-"),
            str(b.version),
        )
    return table


def show_entity(view: TenderView | BidView, as_json: bool) -> None:
    """Print one tender or bid."""
    if as_json:
        print_json(view.to_wire())
        return

    table = Table(show_header=False, box=None)
    table.add_column("Field", style="bold")
    table.add_column("Value")
    for key, value in view.model_dump().items():
        table.add_row(key, "-" if value is None else str(value))
    console.print(table)
