"""
Relationship checks over the directory tables.

Every predicate is a single EXISTS query bound to the caller's session.
"""

from __future__ import annotations

from typing import Any

from sqlalchemy import and_, exists, select
from sqlalchemy.orm import Session

from tenderflow.persistence.models import (
    VERSIONED_MODELS,
    Bid,
    Employee,
    OrganizationResponsible,
    Tender,
)

from .enums import EntityKind
from .ports import AuthorizationPort


def _responsible_link(username: str) -> Any:
    """Join condition: a responsible link owned by ``username``."""
    return and_(
        OrganizationResponsible.user_id == Employee.id,
        Employee.username == username,
    )


class AuthorizationEngine(AuthorizationPort):
    """SQL implementation of the authorization predicates."""

    def __init__(self, session: Session):
        self.session = session

    def _exists(self, *conditions: Any) -> bool:
        return bool(self.session.execute(select(exists().where(*conditions))).scalar())

    def actor_exists(self, username: str) -> bool:
        return self._exists(Employee.username == username)

    def actor_exists_by_id(self, employee_id: str) -> bool:
        return self._exists(Employee.id == employee_id)

    def entity_exists(self, kind: EntityKind, entity_id: str) -> bool:
        model: Any = VERSIONED_MODELS[kind].model
        return self._exists(model.id == entity_id)

    def is_responsible_for_organization(self, organization_id: str, username: str) -> bool:
        return self._exists(
            OrganizationResponsible.organization_id == organization_id,
            _responsible_link(username),
        )

    def is_employee_responsible(self, employee_id: str, organization_id: str | None = None) -> bool:
        conditions = [OrganizationResponsible.user_id == employee_id]
        if organization_id is not None:
            conditions.append(OrganizationResponsible.organization_id == organization_id)
        return self._exists(*conditions)

    def is_responsible_for_tender(self, tender_id: str, username: str) -> bool:
        return self._exists(
            Tender.id == tender_id,
            OrganizationResponsible.organization_id == Tender.organization_id,
            _responsible_link(username),
        )

    def is_responsible_for_bid(self, bid_id: str, username: str) -> bool:
        # bid -> tender -> organization -> responsible
        return self._exists(
            Bid.id == bid_id,
            Tender.id == Bid.tender_id,
            OrganizationResponsible.organization_id == Tender.organization_id,
            _responsible_link(username),
        )

    def is_bid_author(self, bid_id: str, username: str) -> bool:
        return self._exists(Bid.id == bid_id, Bid.author_username == username)

    def version_exists(self, kind: EntityKind, entity_id: str, version: int) -> bool:
        spec = VERSIONED_MODELS[kind]
        history: Any = spec.history
        return self._exists(
            spec.history_entity_id() == entity_id,
            history.version == version,
        )
