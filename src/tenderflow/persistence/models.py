"""
SQLAlchemy ORM models for Tenderflow.

Defines the complete database schema including:
- Organizations, Employees and the responsible-party link between them
- Tenders and their immutable version history
- Bids and their immutable version history
- Reviews left on bids
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from datetime import datetime
from typing import Any

from sqlalchemy import (
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship

from tenderflow.core.enums import EntityKind


def new_id() -> str:
    """Opaque entity identifier."""
    return str(uuid.uuid4())


# =============================================================================
# Base Class
# =============================================================================


class Base(DeclarativeBase):
    """Base class for all ORM models."""

    def to_dict(self) -> dict[str, Any]:
        """Column values keyed by attribute name."""
        return {c.key: getattr(self, c.key) for c in self.__mapper__.column_attrs}


# =============================================================================
# Mixins
# =============================================================================


class TimestampMixin:
    """Mixin providing created_at and updated_at columns."""

    created_at: Mapped[datetime] = mapped_column(
        DateTime,
        default=datetime.utcnow,
        nullable=False,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime,
        default=datetime.utcnow,
        nullable=False,
    )


# =============================================================================
# Directory Models
# =============================================================================


class Organization(Base, TimestampMixin):
    """An organization that publishes tenders or submits bids."""

    __tablename__ = "organization"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    type: Mapped[str] = mapped_column(String(10), nullable=False, default="LLC")

    responsibles: Mapped[list["OrganizationResponsible"]] = relationship(
        "OrganizationResponsible",
        back_populates="organization",
        cascade="all, delete-orphan",
    )

    def __repr__(self) -> str:
        return f"<Organization(id={self.id}, name='{self.name}')>"


class Employee(Base, TimestampMixin):
    """A user identity. Usernames are unauthenticated handles."""

    __tablename__ = "employee"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    username: Mapped[str] = mapped_column(String(50), unique=True, nullable=False, index=True)
    first_name: Mapped[str | None] = mapped_column(String(50), nullable=True)
    last_name: Mapped[str | None] = mapped_column(String(50), nullable=True)

    def __repr__(self) -> str:
        return f"<Employee(id={self.id}, username='{self.username}')>"


class OrganizationResponsible(Base):
    """Links an employee as a responsible party of an organization."""

    __tablename__ = "organization_responsible"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    organization_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("organization.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    user_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("employee.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    organization: Mapped["Organization"] = relationship(
        "Organization",
        back_populates="responsibles",
    )
    user: Mapped["Employee"] = relationship("Employee")

    __table_args__ = (
        UniqueConstraint("organization_id", "user_id", name="uq_responsible_org_user"),
    )

    def __repr__(self) -> str:
        return f"<OrganizationResponsible(org={self.organization_id}, user={self.user_id})>"


# =============================================================================
# Tender Models
# =============================================================================


class Tender(Base, TimestampMixin):
    """Current content of a tender."""

    __tablename__ = "tender"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    name: Mapped[str] = mapped_column(String(100), nullable=False, index=True)
    description: Mapped[str] = mapped_column(String(500), nullable=False)
    service_type: Mapped[str] = mapped_column(String(20), nullable=False, index=True)
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="Created", index=True)
    version: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    organization_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("organization.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    creator_username: Mapped[str] = mapped_column(String(50), nullable=False, index=True)

    history: Mapped[list["TenderHistory"]] = relationship(
        "TenderHistory",
        back_populates="tender",
        cascade="all, delete-orphan",
        order_by="TenderHistory.version",
    )

    __table_args__ = (
        Index("ix_tender_status_name", "status", "name"),
    )

    def __repr__(self) -> str:
        return f"<Tender(id={self.id}, name='{self.name}', version={self.version})>"


class TenderHistory(Base):
    """Immutable snapshot of a tender at a superseded version."""

    __tablename__ = "tender_history"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    tender_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("tender.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    version: Mapped[int] = mapped_column(Integer, nullable=False)

    # Snapshot of the tender row
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    description: Mapped[str] = mapped_column(String(500), nullable=False)
    service_type: Mapped[str] = mapped_column(String(20), nullable=False)
    status: Mapped[str] = mapped_column(String(20), nullable=False)
    organization_id: Mapped[str] = mapped_column(String(36), nullable=False)
    creator_username: Mapped[str] = mapped_column(String(50), nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)

    tender: Mapped["Tender"] = relationship("Tender", back_populates="history")

    __table_args__ = (
        UniqueConstraint("tender_id", "version", name="uq_tender_history_version"),
    )

    def __repr__(self) -> str:
        return f"<TenderHistory(tender_id={self.tender_id}, version={self.version})>"


# =============================================================================
# Bid Models
# =============================================================================


class Bid(Base, TimestampMixin):
    """Current content of a bid."""

    __tablename__ = "bid"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    name: Mapped[str] = mapped_column(String(100), nullable=False, index=True)
    description: Mapped[str] = mapped_column(String(500), nullable=False)
    feedback: Mapped[str | None] = mapped_column(Text, nullable=True)
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="Created", index=True)
    tender_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("tender.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    organization_id: Mapped[str | None] = mapped_column(
        String(36),
        ForeignKey("organization.id", ondelete="SET NULL"),
        nullable=True,
    )
    decision: Mapped[str | None] = mapped_column(String(20), nullable=True)
    author_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("employee.id", ondelete="CASCADE"),
        nullable=False,
    )
    author_username: Mapped[str] = mapped_column(String(50), nullable=False, index=True)
    author_type: Mapped[str] = mapped_column(String(20), nullable=False, default="Organization")
    version: Mapped[int] = mapped_column(Integer, nullable=False, default=1)

    history: Mapped[list["BidHistory"]] = relationship(
        "BidHistory",
        back_populates="bid",
        cascade="all, delete-orphan",
        order_by="BidHistory.version",
    )
    reviews: Mapped[list["Review"]] = relationship(
        "Review",
        back_populates="bid",
        cascade="all, delete-orphan",
    )

    __table_args__ = (
        Index("ix_bid_tender_status", "tender_id", "status"),
    )

    def __repr__(self) -> str:
        return f"<Bid(id={self.id}, name='{self.name}', version={self.version})>"


class BidHistory(Base):
    """Immutable snapshot of a bid at a superseded version."""

    __tablename__ = "bid_history"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    bid_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("bid.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    version: Mapped[int] = mapped_column(Integer, nullable=False)

    # Snapshot of the bid row
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    description: Mapped[str] = mapped_column(String(500), nullable=False)
    feedback: Mapped[str | None] = mapped_column(Text, nullable=True)
    status: Mapped[str] = mapped_column(String(20), nullable=False)
    tender_id: Mapped[str] = mapped_column(String(36), nullable=False)
    organization_id: Mapped[str | None] = mapped_column(String(36), nullable=True)
    decision: Mapped[str | None] = mapped_column(String(20), nullable=True)
    author_id: Mapped[str] = mapped_column(String(36), nullable=False)
    author_username: Mapped[str] = mapped_column(String(50), nullable=False)
    author_type: Mapped[str] = mapped_column(String(20), nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)

    bid: Mapped["Bid"] = relationship("Bid", back_populates="history")

    __table_args__ = (
        UniqueConstraint("bid_id", "version", name="uq_bid_history_version"),
    )

    def __repr__(self) -> str:
        return f"<BidHistory(bid_id={self.bid_id}, version={self.version})>"


# =============================================================================
# Review Model
# =============================================================================


class Review(Base):
    """Feedback left on a bid. Independent of the bid's version and status."""

    __tablename__ = "review"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    bid_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("bid.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    author_username: Mapped[str] = mapped_column(String(50), nullable=False, index=True)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime,
        default=datetime.utcnow,
        nullable=False,
        index=True,
    )

    bid: Mapped["Bid"] = relationship("Bid", back_populates="reviews")

    def __repr__(self) -> str:
        return f"<Review(id={self.id}, bid_id={self.bid_id})>"


# =============================================================================
# Versioned Kind Registry
# =============================================================================


@dataclass(frozen=True)
class VersionedModel:
    """How one entity kind maps onto its current and history tables."""

    kind: EntityKind
    model: type[Base]
    history: type[Base]
    history_key: str  # FK column on the history table
    editable_fields: tuple[str, ...]  # columns a versioned edit may write
    restorable_fields: tuple[str, ...]  # content a rollback brings back

    @property
    def label(self) -> str:
        return self.kind.value

    def snapshot_values(self, row: Base) -> dict[str, Any]:
        """Every column of ``row`` except its id, for a history insert."""
        values = row.to_dict()
        entity_id = values.pop("id")
        values[self.history_key] = entity_id
        return values

    def history_entity_id(self) -> Any:
        return getattr(self.history, self.history_key)


VERSIONED_MODELS: dict[EntityKind, VersionedModel] = {
    EntityKind.TENDER: VersionedModel(
        kind=EntityKind.TENDER,
        model=Tender,
        history=TenderHistory,
        history_key="tender_id",
        editable_fields=("name", "description", "service_type", "status"),
        restorable_fields=("name", "description", "service_type", "status"),
    ),
    EntityKind.BID: VersionedModel(
        kind=EntityKind.BID,
        model=Bid,
        history=BidHistory,
        history_key="bid_id",
        editable_fields=("name", "description", "feedback", "status", "decision"),
        # status and decision belong to the tender side
        restorable_fields=("name", "description"),
    ),
}
