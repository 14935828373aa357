"""
Request pipeline.

Each operation declares which checks apply to it; the pipeline always runs
them in the same order and stops at the first failure:

1. target exists        -> NOT_FOUND
2. actor exists         -> UNAUTHORIZED
3. relationship holds   -> FORBIDDEN
4. version exists       -> NOT_FOUND (rollback only)
5. delegate to storage
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, Sequence

from sqlalchemy.orm import Session

from tenderflow.core.authorization import AuthorizationEngine
from tenderflow.core.enums import EntityKind
from tenderflow.core.ports import AuthorizationPort
from tenderflow.core.versioning import VersionManager
from tenderflow.persistence.repo import (
    DirectoryRepository,
    EntityStore,
    HistoryRepository,
    ReviewRepository,
)

RelationshipCheck = Callable[[AuthorizationPort], None]


@dataclass
class RequestContext:
    """Collaborators bound to one request's transaction."""

    session: Session
    auth: AuthorizationPort
    store: EntityStore
    versions: VersionManager
    history: HistoryRepository
    reviews: ReviewRepository
    directory: DirectoryRepository

    @classmethod
    def bind(cls, session: Session) -> "RequestContext":
        return cls(
            session=session,
            auth=AuthorizationEngine(session),
            store=EntityStore(session),
            versions=VersionManager(session),
            history=HistoryRepository(session),
            reviews=ReviewRepository(session),
            directory=DirectoryRepository(session),
        )


@dataclass
class Checks:
    """Checks one operation needs before it may touch storage.

    ``actors`` and ``actor_ids`` are checked in the order given; an empty
    string is a missing actor, not a skipped check.
    """

    target: tuple[EntityKind, str] | None = None
    actors: Sequence[str] = field(default_factory=tuple)
    actor_ids: Sequence[str] = field(default_factory=tuple)
    relationship: RelationshipCheck | None = None
    version: int | None = None

    def run(self, auth: AuthorizationPort) -> None:
        """Run steps 1-4. Raises the first DomainError encountered."""
        if self.target is not None:
            auth.require_entity(*self.target)

        for username in self.actors:
            auth.require_actor(username)
        for employee_id in self.actor_ids:
            auth.require_actor_by_id(employee_id)

        if self.relationship is not None:
            self.relationship(auth)

        if self.version is not None:
            if self.target is None:
                raise ValueError("A version check needs a target entity")
            kind, entity_id = self.target
            auth.require_version(kind, entity_id, self.version)
