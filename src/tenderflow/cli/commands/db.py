"""
Database management commands.
"""

from __future__ import annotations

import typer

from tenderflow.cli import runtime
from tenderflow.cli.runtime import console, err_console

app = typer.Typer(
    help="Database operations",
    no_args_is_help=True,
)


def _alembic_config():
    from alembic.config import Config

    config = runtime.load_config()
    alembic_cfg = Config("alembic.ini")
    alembic_cfg.set_main_option("sqlalchemy.url", config.database.url)
    return alembic_cfg


@app.command("init")
def init_database(
    drop_existing: bool = typer.Option(
        False,
        "--drop",
        help="Drop existing tables before creating",
    ),
    yes: bool = typer.Option(
        False,
        "--yes",
        "-y",
        help="Do not ask for confirmation",
    ),
) -> None:
    """Initialize the database schema.

    Creates all tables. Use --drop to reset the database.
    """
    config = runtime.load_config()

    with runtime.open_database(config) as database:
        database.connect(
            attempts=config.database.connect_attempts,
            wait_seconds=config.database.connect_timeout_seconds,
        )

        if drop_existing:
            if not yes and not typer.confirm("This will DELETE ALL DATA. Continue?", default=False):
                raise typer.Abort()

            console.print("[yellow]Dropping existing tables...[/yellow]")
            database.drop_all()

        console.print("Creating database schema...")
        database.create_all()

    console.print("[green]OK[/green] Database initialized")


@app.command("migrate")
def run_migrations(
    revision: str = typer.Option(
        "head",
        "--revision",
        "-r",
        help="Target revision (default: head)",
    ),
) -> None:
    """Run database migrations."""
    from alembic import command
    from alembic.util import CommandError

    alembic_cfg = _alembic_config()

    console.print(f"Running migrations to: {revision}")

    try:
        command.upgrade(alembic_cfg, revision)
        console.print("[green]OK[/green] Migrations complete")
    except CommandError as e:
        err_console.print(f"[red]Migration failed:[/red] {e}")
        raise typer.Exit(1)


@app.command("current")
def show_current() -> None:
    """Show current database revision."""
    from alembic import command

    alembic_cfg = _alembic_config()

    console.print("[bold]Current database revision:[/bold]")
    command.current(alembic_cfg, verbose=True)


@app.command("history")
def show_history() -> None:
    """Show migration history."""
    from alembic import command

    alembic_cfg = _alembic_config()

    console.print("[bold]Migration history:[/bold]")
    command.history(alembic_cfg, indicate_current=True)
