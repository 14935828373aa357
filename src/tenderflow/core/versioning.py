"""
Versioned writes for tenders and bids.

Every mutation of a current row goes through VersionManager, which copies
the pre-edit row into the history table and bumps ``version`` by one in
the same transaction. The current-row UPDATE is guarded by the version it
was read at; a concurrent writer surfaces as StaleVersionError.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Mapping

from sqlalchemy import update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from tenderflow.persistence.models import VERSIONED_MODELS, Base, VersionedModel
from tenderflow.persistence.repo import HistoryRepository

from . import errors
from .enums import EntityKind
from .errors import StaleVersionError
from .logging import get_logger

logger = get_logger("versioning")


def coalesce_patch(patch: Mapping[str, Any]) -> dict[str, Any]:
    """Drop fields meaning "leave unchanged" (None or empty string)."""
    return {key: value for key, value in patch.items() if value is not None and value != ""}


class VersionManager:
    """Creates, edits and rolls back versioned entities."""

    def __init__(self, session: Session):
        self.session = session
        self.history = HistoryRepository(session)

    def create(self, kind: EntityKind, values: Mapping[str, Any]) -> Base:
        """Insert a new entity at version 1 with no history."""
        spec = VERSIONED_MODELS[kind]
        row = spec.model(**dict(values), version=1)
        self.session.add(row)
        self.session.flush()
        logger.debug(f"Created {spec.label} {row.id} at version 1")
        return row

    def edit(
        self,
        kind: EntityKind,
        entity_id: str,
        patch: Mapping[str, Any],
        coalesce: bool = True,
    ) -> Base:
        """Apply ``patch`` as a new version.

        Args:
            kind: Entity kind
            entity_id: Entity to edit
            patch: Field values to write
            coalesce: Treat None and "" as "leave unchanged"

        Returns:
            The refreshed current row

        Raises:
            DomainError: NOT_FOUND when the entity does not exist
            StaleVersionError: When another writer got there first
        """
        spec = VERSIONED_MODELS[kind]
        row = self.session.get(spec.model, entity_id)
        if row is None:
            raise errors.not_found()

        changes = coalesce_patch(patch) if coalesce else dict(patch)
        unknown = set(changes) - set(spec.editable_fields)
        if unknown:
            raise ValueError(f"Fields not editable on {spec.label}: {sorted(unknown)}")

        observed = row.version
        self._snapshot(spec, row, observed)
        self._write(spec, entity_id, observed, changes)

        self.session.refresh(row)
        logger.debug(
            f"Edited {spec.label} {entity_id}: version {observed} -> {row.version}",
            extra={"entity_id": entity_id, "version": row.version},
        )
        return row

    def rollback(self, kind: EntityKind, entity_id: str, target_version: int) -> Base:
        """Restore the content of ``target_version`` as a new version.

        History is never rewritten: the result is current version + 1.

        Raises:
            DomainError: NOT_FOUND (version) when no snapshot exists
            StaleVersionError: When another writer got there first
        """
        spec = VERSIONED_MODELS[kind]
        snapshot = self.history.get_snapshot(kind, entity_id, target_version)
        if snapshot is None:
            raise errors.version_not_found()

        content = {field: getattr(snapshot, field) for field in spec.restorable_fields}
        row = self.edit(kind, entity_id, content, coalesce=False)
        logger.debug(
            f"Rolled back {spec.label} {entity_id} to content of version {target_version}",
            extra={"entity_id": entity_id, "version": row.version},
        )
        return row

    # -------------------------------------------------------------------------
    # Internals
    # -------------------------------------------------------------------------

    def _snapshot(self, spec: VersionedModel, row: Base, observed: int) -> None:
        try:
            self.history.append(spec.kind, row)
        except IntegrityError as e:
            # (entity_id, version) already archived by a concurrent writer
            raise StaleVersionError(spec.label, row.id, observed) from e

    def _write(
        self,
        spec: VersionedModel,
        entity_id: str,
        observed: int,
        changes: dict[str, Any],
    ) -> None:
        model: Any = spec.model
        stmt = (
            update(model)
            .where(model.id == entity_id, model.version == observed)
            .values(**changes, version=observed + 1, updated_at=datetime.utcnow())
            .execution_options(synchronize_session=False)
        )
        result = self.session.execute(stmt)
        if result.rowcount != 1:
            raise StaleVersionError(spec.label, entity_id, observed)
