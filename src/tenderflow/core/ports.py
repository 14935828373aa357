"""
Storage-facing interfaces used by the orchestrator.

AuthorizationPort answers relationship questions, EntityStorePort reads
current rows. Both are bound to one session, so every check and read of
a request happens inside that request's transaction.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Sequence

from . import errors
from .enums import EntityKind

if TYPE_CHECKING:
    from tenderflow.persistence.models import Bid, Tender


@dataclass
class ListFilter:
    """Row filter for EntityStorePort.list.

    Unset fields do not filter.
    """

    statuses: Sequence[str] = field(default_factory=tuple)
    service_types: Sequence[str] = field(default_factory=tuple)
    creator_username: str | None = None
    author_username: str | None = None
    tender_id: str | None = None


@dataclass
class Page:
    """Offset/limit window over an ordered listing."""

    offset: int = 0
    limit: int = 5


class AuthorizationPort(ABC):
    """Relationship predicates over the directory and entity tables.

    Predicates return booleans and never raise on a negative answer. The
    ``require_*`` helpers turn a negative answer into the classified error.
    """

    @abstractmethod
    def actor_exists(self, username: str) -> bool:
        """Whether an employee with this username exists."""

    @abstractmethod
    def actor_exists_by_id(self, employee_id: str) -> bool:
        """Whether an employee with this id exists."""

    @abstractmethod
    def entity_exists(self, kind: EntityKind, entity_id: str) -> bool:
        """Whether a tender or bid with this id exists."""

    @abstractmethod
    def is_responsible_for_organization(self, organization_id: str, username: str) -> bool:
        """Whether the user is a responsible party of the organization."""

    @abstractmethod
    def is_employee_responsible(self, employee_id: str, organization_id: str | None = None) -> bool:
        """Whether the employee is responsible for ``organization_id``, or for any organization when None."""

    @abstractmethod
    def is_responsible_for_tender(self, tender_id: str, username: str) -> bool:
        """Whether the user is responsible for the tender's organization."""

    @abstractmethod
    def is_responsible_for_bid(self, bid_id: str, username: str) -> bool:
        """Whether the user is responsible for the organization owning the bid's tender."""

    @abstractmethod
    def is_bid_author(self, bid_id: str, username: str) -> bool:
        """Whether the user is the recorded author of the bid."""

    @abstractmethod
    def version_exists(self, kind: EntityKind, entity_id: str, version: int) -> bool:
        """Whether a history snapshot exists at exactly this version."""

    # -------------------------------------------------------------------------
    # Raising helpers
    # -------------------------------------------------------------------------

    def require_entity(self, kind: EntityKind, entity_id: str) -> None:
        if not self.entity_exists(kind, entity_id):
            raise errors.not_found()

    def require_actor(self, username: str) -> None:
        if not username or not self.actor_exists(username):
            raise errors.unauthorized()

    def require_actor_by_id(self, employee_id: str) -> None:
        if not employee_id or not self.actor_exists_by_id(employee_id):
            raise errors.unauthorized()

    def require_organization_responsible(self, organization_id: str, username: str) -> None:
        if not self.is_responsible_for_organization(organization_id, username):
            raise errors.forbidden()

    def require_employee_responsible(self, employee_id: str, organization_id: str | None = None) -> None:
        if not self.is_employee_responsible(employee_id, organization_id):
            raise errors.forbidden()

    def require_tender_responsible(self, tender_id: str, username: str) -> None:
        if not self.is_responsible_for_tender(tender_id, username):
            raise errors.forbidden()

    def require_bid_responsible(self, bid_id: str, username: str) -> None:
        if not self.is_responsible_for_bid(bid_id, username):
            raise errors.forbidden()

    def require_bid_author(self, bid_id: str, username: str) -> None:
        if not self.is_bid_author(bid_id, username):
            raise errors.forbidden()

    def require_bid_viewer(self, bid_id: str, username: str) -> None:
        """Author or tender responsible party."""
        if not (self.is_bid_author(bid_id, username) or self.is_responsible_for_bid(bid_id, username)):
            raise errors.forbidden()

    def require_version(self, kind: EntityKind, entity_id: str, version: int) -> None:
        if not self.version_exists(kind, entity_id, version):
            raise errors.version_not_found()


class EntityStorePort(ABC):
    """Read access to current tender and bid rows."""

    @abstractmethod
    def get_by_id(self, kind: EntityKind, entity_id: str) -> "Tender | Bid":
        """Return the current row.

        Raises:
            DomainError: NOT_FOUND when no such entity exists
        """

    @abstractmethod
    def list(self, kind: EntityKind, list_filter: ListFilter, page: Page) -> "Sequence[Tender | Bid]":
        """Return rows matching ``list_filter`` ordered by name, then id."""
