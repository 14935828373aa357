"""
Bid commands.
"""

from __future__ import annotations

from typing import Optional

import typer
from rich.table import Table

from tenderflow.cli import runtime
from tenderflow.cli.runtime import bid_table, console, print_json, show_entity
from tenderflow.core.enums import AuthorType, BidDecision, BidStatus

app = typer.Typer(
    help="Create and manage bids",
    no_args_is_help=True,
)

UsernameOption = typer.Option(..., "--user", "-u", help="Acting username")
JsonOption = typer.Option(False, "--json", help="Output JSON")


def _print_bids(bids, as_json: bool, title: str) -> None:
    if as_json:
        print_json([b.to_wire() for b in bids])
    elif bids:
        console.print(bid_table(bids, title=title))
    else:
        console.print("[dim]No bids found.[/dim]")


@app.command("new")
def new_bid(
    name: str = typer.Option(..., "--name", "-n", help="Bid name"),
    description: str = typer.Option(..., "--description", "-d", help="Bid description"),
    tender_id: str = typer.Option(..., "--tender", "-t", help="Tender id"),
    author_id: str = typer.Option(..., "--author-id", "-a", help="Author employee id"),
    author_type: AuthorType = typer.Option(
        AuthorType.ORGANIZATION,
        "--author-type",
        help="Author type",
    ),
    organization_id: Optional[str] = typer.Option(
        None,
        "--org",
        "-o",
        help="Bidding organization id",
    ),
    as_json: bool = JsonOption,
) -> None:
    """Submit a bid against a tender."""
    with runtime.engine() as engine:
        bid = engine.create_bid(
            {
                "name": name,
                "description": description,
                "tenderId": tender_id,
                "authorType": author_type.value,
                "authorId": author_id,
                "organizationId": organization_id,
            }
        )
    show_entity(bid, as_json)


@app.command("mine")
def my_bids(
    username: str = UsernameOption,
    offset: Optional[int] = typer.Option(None, "--offset", help="Rows to skip"),
    limit: Optional[int] = typer.Option(None, "--limit", "-n", help="Maximum rows"),
    as_json: bool = JsonOption,
) -> None:
    """List bids authored by a user."""
    with runtime.engine() as engine:
        bids = engine.get_user_bids(username, offset=offset, limit=limit)
    _print_bids(bids, as_json, f"Bids of {username}")


@app.command("list")
def tender_bids(
    tender_id: str = typer.Argument(..., help="Tender id"),
    username: str = UsernameOption,
    offset: Optional[int] = typer.Option(None, "--offset", help="Rows to skip"),
    limit: Optional[int] = typer.Option(None, "--limit", "-n", help="Maximum rows"),
    as_json: bool = JsonOption,
) -> None:
    """List published bids on a tender."""
    with runtime.engine() as engine:
        bids = engine.get_bids_for_tender(tender_id, username, offset=offset, limit=limit)
    _print_bids(bids, as_json, "Published bids")


@app.command("status")
def bid_status(
    bid_id: str = typer.Argument(..., help="Bid id"),
    username: str = UsernameOption,
) -> None:
    """Show the status of a bid."""
    with runtime.engine() as engine:
        status = engine.get_bid_status(bid_id, username)
    console.print(status.value)


@app.command("set-status")
def set_bid_status(
    bid_id: str = typer.Argument(..., help="Bid id"),
    status: BidStatus = typer.Argument(..., help="New status"),
    username: str = UsernameOption,
    as_json: bool = JsonOption,
) -> None:
    """Change the status of a bid."""
    with runtime.engine() as engine:
        bid = engine.update_bid_status(bid_id, status.value, username)
    show_entity(bid, as_json)


@app.command("edit")
def edit_bid(
    bid_id: str = typer.Argument(..., help="Bid id"),
    username: str = UsernameOption,
    name: Optional[str] = typer.Option(None, "--name", "-n", help="New name"),
    description: Optional[str] = typer.Option(None, "--description", "-d", help="New description"),
    as_json: bool = JsonOption,
) -> None:
    """Edit a bid. Omitted fields are left unchanged."""
    with runtime.engine() as engine:
        bid = engine.edit_bid(bid_id, {"name": name, "description": description}, username)
    show_entity(bid, as_json)


@app.command("rollback")
def rollback_bid(
    bid_id: str = typer.Argument(..., help="Bid id"),
    version: int = typer.Argument(..., help="Version whose content to restore"),
    username: str = UsernameOption,
    as_json: bool = JsonOption,
) -> None:
    """Restore an earlier version as a new version."""
    with runtime.engine() as engine:
        bid = engine.rollback_bid(bid_id, version, username)
    show_entity(bid, as_json)


@app.command("decide")
def decide_bid(
    bid_id: str = typer.Argument(..., help="Bid id"),
    decision: BidDecision = typer.Argument(..., help="Decision"),
    username: str = UsernameOption,
    as_json: bool = JsonOption,
) -> None:
    """Approve or reject a bid."""
    with runtime.engine() as engine:
        bid = engine.submit_bid_decision(bid_id, decision.value, username)
    show_entity(bid, as_json)


@app.command("feedback")
def bid_feedback(
    bid_id: str = typer.Argument(..., help="Bid id"),
    feedback: str = typer.Argument(..., help="Feedback text"),
    username: str = UsernameOption,
    as_json: bool = JsonOption,
) -> None:
    """Leave a review on a bid."""
    with runtime.engine() as engine:
        bid = engine.submit_bid_feedback(bid_id, feedback, username)
    show_entity(bid, as_json)


@app.command("reviews")
def bid_reviews(
    tender_id: str = typer.Argument(..., help="Tender id"),
    author: str = typer.Option(..., "--author", help="Bid author whose reviews to show"),
    username: str = UsernameOption,
    offset: Optional[int] = typer.Option(None, "--offset", help="Rows to skip"),
    limit: Optional[int] = typer.Option(None, "--limit", "-n", help="Maximum rows"),
    as_json: bool = JsonOption,
) -> None:
    """Show reviews left on an author's bids."""
    with runtime.engine() as engine:
        reviews = engine.get_bid_reviews(tender_id, author, username, offset=offset, limit=limit)

    if as_json:
        print_json([r.to_wire() for r in reviews])
        return
    if not reviews:
        console.print("[dim]No reviews found.[/dim]")
        return

    table = Table(title=f"Reviews of {author}", show_header=True, header_style="bold magenta")
    table.add_column("Bid", style="dim", no_wrap=True)
    table.add_column("Reviewer", style="cyan")
    table.add_column("Feedback")
    table.add_column("Created", justify="right")
    for r in reviews:
        table.add_row(r.bid_id, r.author_username, r.description, r.created_at.strftime("%Y-%m-%d %H:%M"))
    console.print(table)


@app.command("history")
def bid_history(
    bid_id: str = typer.Argument(..., help="Bid id"),
    username: str = UsernameOption,
    as_json: bool = JsonOption,
) -> None:
    """Show superseded versions of a bid."""
    with runtime.engine() as engine:
        versions = engine.get_bid_history(bid_id, username)

    if as_json:
        print_json([v.to_wire() for v in versions])
        return
    if not versions:
        console.print("[dim]No earlier versions.[/dim]")
        return

    table = Table(title="Bid history", show_header=True, header_style="bold magenta")
    table.add_column("Version", justify="right")
    table.add_column("Name", style="cyan")
    table.add_column("Status", justify="center")
    table.add_column("Superseded", justify="right")
    for v in versions:
        table.add_row(str(v.version), v.name, v.status, v.updated_at.strftime("%Y-%m-%d %H:%M"))
    console.print(table)
