from __future__ import annotations

import pytest
from sqlalchemy import select

from tenderflow.core.enums import EntityKind
from tenderflow.core.errors import DomainError, ErrorKind, StaleVersionError, VERSION_NOT_FOUND_REASON
from tenderflow.core.versioning import VersionManager, coalesce_patch
from tenderflow.persistence.models import VERSIONED_MODELS, BidHistory, Tender, TenderHistory


def _new_tender(session, directory, name="Bridge"):
    return VersionManager(session).create(
        EntityKind.TENDER,
        {
            "name": name,
            "description": "Build a bridge",
            "service_type": "Construction",
            "status": "Created",
            "organization_id": directory.acme_id,
            "creator_username": "alice",
        },
    )


def _history_versions(session, tender_id):
    rows = session.execute(
        select(TenderHistory.version)
        .where(TenderHistory.tender_id == tender_id)
        .order_by(TenderHistory.version)
    )
    return [v for (v,) in rows]


def test_coalesce_patch_drops_none_and_empty():
    assert coalesce_patch({"name": "", "description": None, "status": "Closed"}) == {"status": "Closed"}


def test_create_starts_at_version_one_without_history(database, directory):
    with database.session() as session:
        row = _new_tender(session, directory)
        assert row.version == 1
        assert _history_versions(session, row.id) == []


def test_edit_snapshots_previous_version(database, directory):
    with database.session() as session:
        manager = VersionManager(session)
        row = _new_tender(session, directory)
        edited = manager.edit(EntityKind.TENDER, row.id, {"name": "Bridge v2"})

        assert edited.version == 2
        assert edited.name == "Bridge v2"

        snapshot = manager.history.get_snapshot(EntityKind.TENDER, row.id, 1)
        assert snapshot.name == "Bridge"
        assert snapshot.version == 1


def test_edit_with_empty_string_leaves_field_unchanged(database, directory):
    with database.session() as session:
        manager = VersionManager(session)
        row = _new_tender(session, directory)
        edited = manager.edit(EntityKind.TENDER, row.id, {"name": "", "description": None})

        assert edited.name == "Bridge"
        assert edited.description == "Build a bridge"
        # An edit is still a new version
        assert edited.version == 2


def test_edit_rejects_non_content_fields(database, directory):
    with database.session() as session:
        row = _new_tender(session, directory)
        with pytest.raises(ValueError):
            VersionManager(session).edit(EntityKind.TENDER, row.id, {"organization_id": "x"})


def test_history_is_contiguous(database, directory):
    with database.session() as session:
        manager = VersionManager(session)
        row = _new_tender(session, directory)
        for i in range(4):
            manager.edit(EntityKind.TENDER, row.id, {"name": f"Bridge {i}"})

        assert row.version == 5
        assert _history_versions(session, row.id) == [1, 2, 3, 4]


def test_rollback_restores_content_as_new_version(database, directory):
    with database.session() as session:
        manager = VersionManager(session)
        row = _new_tender(session, directory, name="T1")
        manager.edit(EntityKind.TENDER, row.id, {"name": "T2"})
        manager.edit(EntityKind.TENDER, row.id, {"name": "T3", "status": "Published"})

        restored = manager.rollback(EntityKind.TENDER, row.id, 1)

        assert restored.version == 4
        assert restored.name == "T1"
        assert restored.status == "Created"
        assert _history_versions(session, row.id) == [1, 2, 3]


def test_rollback_to_missing_version(database, directory):
    with database.session() as session:
        row = _new_tender(session, directory)
        with pytest.raises(DomainError) as exc:
            VersionManager(session).rollback(EntityKind.TENDER, row.id, 7)

    assert exc.value.kind is ErrorKind.NOT_FOUND
    assert exc.value.reason == VERSION_NOT_FOUND_REASON


def test_bid_rollback_restores_content_only(database, directory):
    """Status and decision are not part of a bid's restorable content."""
    with database.session() as session:
        manager = VersionManager(session)
        tender = _new_tender(session, directory)
        bid = manager.create(
            EntityKind.BID,
            {
                "name": "Offer",
                "description": "Cheap",
                "status": "Created",
                "tender_id": tender.id,
                "author_id": directory.bob_id,
                "author_username": "bob",
                "author_type": "Organization",
            },
        )
        manager.edit(EntityKind.BID, bid.id, {"name": "Offer 2", "decision": "Approved", "status": "Published"})
        restored = manager.rollback(EntityKind.BID, bid.id, 1)

        assert restored.name == "Offer"
        assert restored.decision == "Approved"
        assert restored.status == "Published"
        assert restored.version == 3
        snapshots = session.execute(select(BidHistory).where(BidHistory.bid_id == bid.id)).scalars().all()
        assert len(snapshots) == 2


def test_guarded_write_detects_stale_version(database, directory):
    with database.session() as session:
        row = _new_tender(session, directory)
        manager = VersionManager(session)
        with pytest.raises(StaleVersionError) as exc:
            manager._write(VERSIONED_MODELS[EntityKind.TENDER], row.id, 3, {"name": "late"})

    assert exc.value.observed_version == 3


def test_duplicate_history_slot_is_stale(database, directory):
    with database.session() as session:
        tender_id = _new_tender(session, directory).id

    with pytest.raises(StaleVersionError):
        with database.session() as session:
            current = session.get(Tender, tender_id)
            # Another writer already archived version 1
            session.add(TenderHistory(**VERSIONED_MODELS[EntityKind.TENDER].snapshot_values(current)))
            session.flush()
            VersionManager(session).edit(EntityKind.TENDER, tender_id, {"name": "mine"})

    with database.session() as session:
        assert session.get(Tender, tender_id).version == 1
        assert _history_versions(session, tender_id) == []
