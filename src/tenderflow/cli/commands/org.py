"""
Directory commands: organizations, employees and responsible parties.
"""

from __future__ import annotations

from typing import Optional

import typer
from rich.table import Table

from tenderflow.cli import runtime
from tenderflow.cli.runtime import console, err_console
from tenderflow.core.enums import OrganizationType
from tenderflow.persistence.repo import DirectoryRepository

app = typer.Typer(
    help="Organizations and employees",
    no_args_is_help=True,
)


@app.command("add")
def add_organization(
    name: str = typer.Argument(..., help="Organization name"),
    type: OrganizationType = typer.Option(
        OrganizationType.LLC,
        "--type",
        "-t",
        help="Organization type",
    ),
    description: Optional[str] = typer.Option(
        None,
        "--description",
        "-d",
        help="Free-text description",
    ),
) -> None:
    """Register an organization and print its id."""
    with runtime.open_database() as database:
        with database.session() as session:
            organization = DirectoryRepository(session).create_organization(
                name=name,
                type=type.value,
                description=description,
            )
            organization_id = organization.id

    console.print(f"[green]OK[/green] Organization [cyan]{name}[/cyan] created")
    console.print(organization_id)


@app.command("employee")
def add_employee(
    username: str = typer.Argument(..., help="Unique username"),
    first_name: Optional[str] = typer.Option(None, "--first-name", help="First name"),
    last_name: Optional[str] = typer.Option(None, "--last-name", help="Last name"),
) -> None:
    """Register an employee and print their id."""
    with runtime.open_database() as database:
        with database.session() as session:
            repo = DirectoryRepository(session)
            if repo.get_employee(username) is not None:
                err_console.print(f"[red]Employee already exists:[/red] {username}")
                raise typer.Exit(1)
            employee_id = repo.create_employee(username, first_name, last_name).id

    console.print(f"[green]OK[/green] Employee [cyan]{username}[/cyan] created")
    console.print(employee_id)


@app.command("grant")
def grant_responsible(
    organization_id: str = typer.Argument(..., help="Organization id"),
    username: str = typer.Argument(..., help="Employee username"),
) -> None:
    """Make an employee a responsible party of an organization."""
    with runtime.open_database() as database:
        with database.session() as session:
            repo = DirectoryRepository(session)

            organization = repo.get_organization(organization_id)
            if organization is None:
                err_console.print(f"[red]Organization not found:[/red] {organization_id}")
                raise typer.Exit(1)

            employee = repo.get_employee(username)
            if employee is None:
                err_console.print(f"[red]Employee not found:[/red] {username}")
                raise typer.Exit(1)

            _, created = repo.grant_responsible(organization.id, employee.id)

    if created:
        console.print(f"[green]OK[/green] {username} is now responsible for {organization.name}")
    else:
        console.print(f"[dim]{username} is already responsible for {organization.name}[/dim]")


@app.command("list")
def list_organizations(
    username: Optional[str] = typer.Option(
        None,
        "--user",
        "-u",
        help="Only organizations this user is responsible for",
    ),
) -> None:
    """List organizations."""
    with runtime.open_database() as database:
        with database.session() as session:
            repo = DirectoryRepository(session)
            if username:
                organizations = repo.organizations_for(username)
            else:
                organizations = repo.list_organizations()

            rows = [(o.id, o.name, o.type, len(o.responsibles)) for o in organizations]

    if not rows:
        console.print("[dim]No organizations found.[/dim]")
        return

    table = Table(title="Organizations", show_header=True, header_style="bold magenta")
    table.add_column("ID", style="dim", no_wrap=True)
    table.add_column("Name", style="cyan")
    table.add_column("Type", justify="center")
    table.add_column("Responsible", justify="right")
    for row in rows:
        table.add_row(row[0], row[1], row[2], str(row[3]))

    console.print(table)
