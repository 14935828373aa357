"""
Tender commands.
"""

from __future__ import annotations

from typing import List, Optional

import typer
from rich.table import Table

from tenderflow.cli import runtime
from tenderflow.cli.runtime import console, print_json, show_entity, tender_table
from tenderflow.core.enums import ServiceType, TenderStatus

app = typer.Typer(
    help="Create and manage tenders",
    no_args_is_help=True,
)

UsernameOption = typer.Option(..., "--user", "-u", help="Acting username")
JsonOption = typer.Option(False, "--json", help="Output JSON")


@app.command("new")
def new_tender(
    name: str = typer.Option(..., "--name", "-n", help="Tender name"),
    description: str = typer.Option(..., "--description", "-d", help="Tender description"),
    service_type: ServiceType = typer.Option(..., "--service-type", "-s", help="Service type"),
    organization_id: str = typer.Option(..., "--org", "-o", help="Owning organization id"),
    username: str = UsernameOption,
    as_json: bool = JsonOption,
) -> None:
    """Create a tender on behalf of an organization."""
    with runtime.engine() as engine:
        tender = engine.create_tender(
            {
                "name": name,
                "description": description,
                "serviceType": service_type.value,
                "organizationId": organization_id,
                "creatorUsername": username,
            }
        )
    show_entity(tender, as_json)


@app.command("list")
def list_tenders(
    service_types: Optional[List[ServiceType]] = typer.Option(
        None,
        "--service-type",
        "-s",
        help="Filter by service type (repeatable)",
    ),
    offset: Optional[int] = typer.Option(None, "--offset", help="Rows to skip"),
    limit: Optional[int] = typer.Option(None, "--limit", "-n", help="Maximum rows"),
    as_json: bool = JsonOption,
) -> None:
    """List published tenders."""
    with runtime.engine() as engine:
        tenders = engine.get_tenders(
            [s.value for s in service_types or []],
            offset=offset,
            limit=limit,
        )

    if as_json:
        print_json([t.to_wire() for t in tenders])
    elif tenders:
        console.print(tender_table(tenders, title=f"Published tenders ({len(tenders)} shown)"))
    else:
        console.print("[dim]No tenders found.[/dim]")


@app.command("mine")
def my_tenders(
    username: str = UsernameOption,
    offset: Optional[int] = typer.Option(None, "--offset", help="Rows to skip"),
    limit: Optional[int] = typer.Option(None, "--limit", "-n", help="Maximum rows"),
    as_json: bool = JsonOption,
) -> None:
    """List tenders created by a user."""
    with runtime.engine() as engine:
        tenders = engine.get_user_tenders(username, offset=offset, limit=limit)

    if as_json:
        print_json([t.to_wire() for t in tenders])
    elif tenders:
        console.print(tender_table(tenders, title=f"Tenders of {username}"))
    else:
        console.print("[dim]No tenders found.[/dim]")


@app.command("status")
def tender_status(
    tender_id: str = typer.Argument(..., help="Tender id"),
    username: str = UsernameOption,
) -> None:
    """Show the status of a tender."""
    with runtime.engine() as engine:
        status = engine.get_tender_status(tender_id, username)
    console.print(status.value)


@app.command("set-status")
def set_tender_status(
    tender_id: str = typer.Argument(..., help="Tender id"),
    status: TenderStatus = typer.Argument(..., help="New status"),
    username: str = UsernameOption,
    as_json: bool = JsonOption,
) -> None:
    """Change the status of a tender."""
    with runtime.engine() as engine:
        tender = engine.update_tender_status(tender_id, status.value, username)
    show_entity(tender, as_json)


@app.command("edit")
def edit_tender(
    tender_id: str = typer.Argument(..., help="Tender id"),
    username: str = UsernameOption,
    name: Optional[str] = typer.Option(None, "--name", "-n", help="New name"),
    description: Optional[str] = typer.Option(None, "--description", "-d", help="New description"),
    service_type: Optional[ServiceType] = typer.Option(None, "--service-type", "-s", help="New service type"),
    as_json: bool = JsonOption,
) -> None:
    """Edit a tender. Omitted fields are left unchanged."""
    with runtime.engine() as engine:
        tender = engine.edit_tender(
            tender_id,
            {
                "name": name,
                "description": description,
                "serviceType": service_type.value if service_type else None,
            },
            username,
        )
    show_entity(tender, as_json)


@app.command("rollback")
def rollback_tender(
    tender_id: str = typer.Argument(..., help="Tender id"),
    version: int = typer.Argument(..., help="Version whose content to restore"),
    username: str = UsernameOption,
    as_json: bool = JsonOption,
) -> None:
    """Restore an earlier version as a new version."""
    with runtime.engine() as engine:
        tender = engine.rollback_tender(tender_id, version, username)
    show_entity(tender, as_json)


@app.command("history")
def tender_history(
    tender_id: str = typer.Argument(..., help="Tender id"),
    username: str = UsernameOption,
    as_json: bool = JsonOption,
) -> None:
    """Show superseded versions of a tender."""
    with runtime.engine() as engine:
        versions = engine.get_tender_history(tender_id, username)

    if as_json:
        print_json([v.to_wire() for v in versions])
        return
    if not versions:
        console.print("[dim]No earlier versions.[/dim]")
        return

    table = Table(title="Tender history", show_header=True, header_style="bold magenta")
    table.add_column("Version", justify="right")
    table.add_column("Name", style="cyan")
    table.add_column("Status", justify="center")
    table.add_column("Superseded", justify="right")
    for v in versions:
        table.add_row(str(v.version), v.name, v.status, v.updated_at.strftime("%Y-%m-%d %H:%M"))
    console.print(table)
