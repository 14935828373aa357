"""Initial schema

Revision ID: 001
Revises:
Create Date: 2026-10-19 00:00:00.000000

"""
from __future__ import annotations

from typing import Sequence

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision: str = "001"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    """Create initial database schema."""

    # Directory
    op.create_table(
        "organization",
        sa.Column("id", sa.String(length=36), nullable=False),
        sa.Column("name", sa.String(length=100), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("type", sa.String(length=10), nullable=False, server_default="LLC"),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )

    op.create_table(
        "employee",
        sa.Column("id", sa.String(length=36), nullable=False),
        sa.Column("username", sa.String(length=50), nullable=False),
        sa.Column("first_name", sa.String(length=50), nullable=True),
        sa.Column("last_name", sa.String(length=50), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_employee_username", "employee", ["username"], unique=True)

    op.create_table(
        "organization_responsible",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("organization_id", sa.String(length=36), nullable=False),
        sa.Column("user_id", sa.String(length=36), nullable=False),
        sa.ForeignKeyConstraint(["organization_id"], ["organization.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["user_id"], ["employee.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("organization_id", "user_id", name="uq_responsible_org_user"),
    )
    op.create_index(
        "ix_organization_responsible_organization_id",
        "organization_responsible",
        ["organization_id"],
    )
    op.create_index("ix_organization_responsible_user_id", "organization_responsible", ["user_id"])

    # Tenders
    op.create_table(
        "tender",
        sa.Column("id", sa.String(length=36), nullable=False),
        sa.Column("name", sa.String(length=100), nullable=False),
        sa.Column("description", sa.String(length=500), nullable=False),
        sa.Column("service_type", sa.String(length=20), nullable=False),
        sa.Column("status", sa.String(length=20), nullable=False, server_default="Created"),
        sa.Column("version", sa.Integer(), nullable=False, server_default="1"),
        sa.Column("organization_id", sa.String(length=36), nullable=False),
        sa.Column("creator_username", sa.String(length=50), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(["organization_id"], ["organization.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_tender_name", "tender", ["name"])
    op.create_index("ix_tender_service_type", "tender", ["service_type"])
    op.create_index("ix_tender_status", "tender", ["status"])
    op.create_index("ix_tender_organization_id", "tender", ["organization_id"])
    op.create_index("ix_tender_creator_username", "tender", ["creator_username"])
    op.create_index("ix_tender_status_name", "tender", ["status", "name"])

    op.create_table(
        "tender_history",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("tender_id", sa.String(length=36), nullable=False),
        sa.Column("version", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(length=100), nullable=False),
        sa.Column("description", sa.String(length=500), nullable=False),
        sa.Column("service_type", sa.String(length=20), nullable=False),
        sa.Column("status", sa.String(length=20), nullable=False),
        sa.Column("organization_id", sa.String(length=36), nullable=False),
        sa.Column("creator_username", sa.String(length=50), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(["tender_id"], ["tender.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("tender_id", "version", name="uq_tender_history_version"),
    )
    op.create_index("ix_tender_history_tender_id", "tender_history", ["tender_id"])

    # Bids
    op.create_table(
        "bid",
        sa.Column("id", sa.String(length=36), nullable=False),
        sa.Column("name", sa.String(length=100), nullable=False),
        sa.Column("description", sa.String(length=500), nullable=False),
        sa.Column("feedback", sa.Text(), nullable=True),
        sa.Column("status", sa.String(length=20), nullable=False, server_default="Created"),
        sa.Column("tender_id", sa.String(length=36), nullable=False),
        sa.Column("organization_id", sa.String(length=36), nullable=True),
        sa.Column("decision", sa.String(length=20), nullable=True),
        sa.Column("author_id", sa.String(length=36), nullable=False),
        sa.Column("author_username", sa.String(length=50), nullable=False),
        sa.Column("author_type", sa.String(length=20), nullable=False, server_default="Organization"),
        sa.Column("version", sa.Integer(), nullable=False, server_default="1"),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(["tender_id"], ["tender.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["organization_id"], ["organization.id"], ondelete="SET NULL"),
        sa.ForeignKeyConstraint(["author_id"], ["employee.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_bid_name", "bid", ["name"])
    op.create_index("ix_bid_status", "bid", ["status"])
    op.create_index("ix_bid_tender_id", "bid", ["tender_id"])
    op.create_index("ix_bid_author_username", "bid", ["author_username"])
    op.create_index("ix_bid_tender_status", "bid", ["tender_id", "status"])

    op.create_table(
        "bid_history",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("bid_id", sa.String(length=36), nullable=False),
        sa.Column("version", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(length=100), nullable=False),
        sa.Column("description", sa.String(length=500), nullable=False),
        sa.Column("feedback", sa.Text(), nullable=True),
        sa.Column("status", sa.String(length=20), nullable=False),
        sa.Column("tender_id", sa.String(length=36), nullable=False),
        sa.Column("organization_id", sa.String(length=36), nullable=True),
        sa.Column("decision", sa.String(length=20), nullable=True),
        sa.Column("author_id", sa.String(length=36), nullable=False),
        sa.Column("author_username", sa.String(length=50), nullable=False),
        sa.Column("author_type", sa.String(length=20), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(["bid_id"], ["bid.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("bid_id", "version", name="uq_bid_history_version"),
    )
    op.create_index("ix_bid_history_bid_id", "bid_history", ["bid_id"])

    # Reviews
    op.create_table(
        "review",
        sa.Column("id", sa.String(length=36), nullable=False),
        sa.Column("bid_id", sa.String(length=36), nullable=False),
        sa.Column("author_username", sa.String(length=50), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(["bid_id"], ["bid.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_review_bid_id", "review", ["bid_id"])
    op.create_index("ix_review_author_username", "review", ["author_username"])
    op.create_index("ix_review_created_at", "review", ["created_at"])


def downgrade() -> None:
    """Drop all tables."""
    op.drop_table("review")
    op.drop_table("bid_history")
    op.drop_table("bid")
    op.drop_table("tender_history")
    op.drop_table("tender")
    op.drop_table("organization_responsible")
    op.drop_table("employee")
    op.drop_table("organization")
