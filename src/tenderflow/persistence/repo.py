"""
Repository pattern for database operations.

Provides session-bound access to current tender/bid rows, their history
snapshots, reviews, and the organization directory.
"""

from __future__ import annotations

from typing import Any, Sequence

from sqlalchemy import and_, func, select
from sqlalchemy.orm import Session

from tenderflow.core import errors
from tenderflow.core.enums import EntityKind
from tenderflow.core.ports import EntityStorePort, ListFilter, Page

from .models import (
    VERSIONED_MODELS,
    Base,
    Bid,
    Employee,
    Organization,
    OrganizationResponsible,
    Review,
    Tender,
)


# =============================================================================
# Entity Store
# =============================================================================


class EntityStore(EntityStorePort):
    """Current-row reads for tenders and bids."""

    def __init__(self, session: Session):
        self.session = session

    def get_by_id(self, kind: EntityKind, entity_id: str) -> Tender | Bid:
        """Get the current row or raise NOT_FOUND."""
        row = self.find(kind, entity_id)
        if row is None:
            raise errors.not_found()
        return row

    def find(self, kind: EntityKind, entity_id: str) -> Tender | Bid | None:
        """Get the current row, or None."""
        model = VERSIONED_MODELS[kind].model
        return self.session.get(model, entity_id)

    def list(self, kind: EntityKind, list_filter: ListFilter, page: Page) -> Sequence[Tender | Bid]:
        """List current rows with filters, ordered by name then id."""
        if page.limit <= 0:
            return []

        model: Any = VERSIONED_MODELS[kind].model
        stmt = select(model)

        conditions = []
        if list_filter.statuses:
            conditions.append(model.status.in_(list(list_filter.statuses)))
        if list_filter.service_types:
            if kind is not EntityKind.TENDER:
                raise ValueError("service_types only applies to tenders")
            conditions.append(Tender.service_type.in_(list(list_filter.service_types)))
        if list_filter.creator_username is not None:
            if kind is not EntityKind.TENDER:
                raise ValueError("creator_username only applies to tenders")
            conditions.append(Tender.creator_username == list_filter.creator_username)
        if list_filter.author_username is not None:
            if kind is not EntityKind.BID:
                raise ValueError("author_username only applies to bids")
            conditions.append(Bid.author_username == list_filter.author_username)
        if list_filter.tender_id is not None:
            if kind is not EntityKind.BID:
                raise ValueError("tender_id only applies to bids")
            conditions.append(Bid.tender_id == list_filter.tender_id)

        if conditions:
            stmt = stmt.where(and_(*conditions))

        stmt = stmt.order_by(model.name.asc(), model.id.asc())
        stmt = stmt.offset(page.offset).limit(page.limit)

        return self.session.execute(stmt).scalars().all()

    def count(self, kind: EntityKind) -> int:
        """Number of current rows of this kind."""
        model: Any = VERSIONED_MODELS[kind].model
        return self.session.execute(select(func.count(model.id))).scalar_one()


# =============================================================================
# History Repository
# =============================================================================


class HistoryRepository:
    """Reads and appends immutable version snapshots."""

    def __init__(self, session: Session):
        self.session = session

    def get_snapshot(self, kind: EntityKind, entity_id: str, version: int) -> Base | None:
        """Get the snapshot taken at exactly ``version``."""
        spec = VERSIONED_MODELS[kind]
        history: Any = spec.history
        stmt = select(history).where(
            and_(
                spec.history_entity_id() == entity_id,
                history.version == version,
            )
        )
        return self.session.execute(stmt).scalar_one_or_none()

    def list_versions(self, kind: EntityKind, entity_id: str) -> Sequence[Base]:
        """All snapshots of an entity, oldest first."""
        spec = VERSIONED_MODELS[kind]
        history: Any = spec.history
        stmt = (
            select(history)
            .where(spec.history_entity_id() == entity_id)
            .order_by(history.version.asc())
        )
        return self.session.execute(stmt).scalars().all()

    def append(self, kind: EntityKind, row: Base) -> Base:
        """Insert a snapshot of ``row`` tagged with its current version."""
        spec = VERSIONED_MODELS[kind]
        snapshot = spec.history(**spec.snapshot_values(row))
        self.session.add(snapshot)
        self.session.flush()
        return snapshot


# =============================================================================
# Review Repository
# =============================================================================


class ReviewRepository:
    """Repository for bid reviews."""

    def __init__(self, session: Session):
        self.session = session

    def create(self, bid_id: str, author_username: str, description: str) -> Review:
        """Append a review to a bid."""
        review = Review(
            bid_id=bid_id,
            author_username=author_username,
            description=description,
        )
        self.session.add(review)
        self.session.flush()
        return review

    def list_for_bid_author(
        self,
        author_username: str,
        page: Page,
    ) -> Sequence[Review]:
        """Reviews left on bids written by ``author_username``, newest first."""
        if page.limit <= 0:
            return []

        stmt = (
            select(Review)
            .join(Bid, Review.bid_id == Bid.id)
            .where(Bid.author_username == author_username)
        )
        stmt = stmt.order_by(Review.created_at.desc(), Review.id.asc())
        stmt = stmt.offset(page.offset).limit(page.limit)

        return self.session.execute(stmt).scalars().all()


# =============================================================================
# Directory Repository
# =============================================================================


class DirectoryRepository:
    """Organizations, employees and responsible-party links."""

    def __init__(self, session: Session):
        self.session = session

    def get_employee(self, username: str) -> Employee | None:
        """Get employee by unique username."""
        stmt = select(Employee).where(Employee.username == username)
        return self.session.execute(stmt).scalar_one_or_none()

    def get_employee_by_id(self, employee_id: str) -> Employee | None:
        return self.session.get(Employee, employee_id)

    def get_organization(self, organization_id: str) -> Organization | None:
        return self.session.get(Organization, organization_id)

    def create_organization(
        self,
        name: str,
        type: str = "LLC",
        description: str | None = None,
    ) -> Organization:
        """Create a new organization."""
        organization = Organization(name=name, type=type, description=description)
        self.session.add(organization)
        self.session.flush()
        return organization

    def create_employee(
        self,
        username: str,
        first_name: str | None = None,
        last_name: str | None = None,
    ) -> Employee:
        """Create a new employee."""
        employee = Employee(username=username, first_name=first_name, last_name=last_name)
        self.session.add(employee)
        self.session.flush()
        return employee

    def grant_responsible(self, organization_id: str, user_id: str) -> tuple[OrganizationResponsible, bool]:
        """Link an employee to an organization.

        Returns:
            Tuple of (link, created) where created is False if it already existed
        """
        stmt = select(OrganizationResponsible).where(
            and_(
                OrganizationResponsible.organization_id == organization_id,
                OrganizationResponsible.user_id == user_id,
            )
        )
        existing = self.session.execute(stmt).scalar_one_or_none()
        if existing:
            return existing, False

        link = OrganizationResponsible(organization_id=organization_id, user_id=user_id)
        self.session.add(link)
        self.session.flush()
        return link, True

    def organizations_for(self, username: str) -> Sequence[Organization]:
        """Organizations the user is responsible for, ordered by name."""
        stmt = (
            select(Organization)
            .join(OrganizationResponsible, OrganizationResponsible.organization_id == Organization.id)
            .join(Employee, OrganizationResponsible.user_id == Employee.id)
            .where(Employee.username == username)
            .order_by(Organization.name, Organization.id)
        )
        return self.session.execute(stmt).scalars().all()

    def list_organizations(self) -> Sequence[Organization]:
        stmt = select(Organization).order_by(Organization.name, Organization.id)
        return self.session.execute(stmt).scalars().all()

    def list_employees(self) -> Sequence[Employee]:
        stmt = select(Employee).order_by(Employee.username)
        return self.session.execute(stmt).scalars().all()
