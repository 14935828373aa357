from __future__ import annotations

import pytest

from tenderflow.core.enums import TenderStatus
from tenderflow.core.errors import DomainError, ErrorKind


def _tender_payload(directory, **overrides):
    payload = {
        "name": "Office supplies",
        "description": "Paper and pens",
        "serviceType": "Delivery",
        "organizationId": directory.acme_id,
        "creatorUsername": "alice",
    }
    payload.update(overrides)
    return payload


def test_create_tender(engine, directory):
    tender = engine.create_tender(_tender_payload(directory))

    assert tender.version == 1
    assert tender.status == "Created"
    assert tender.service_type == "Delivery"
    assert tender.creator_username == "alice"
    assert tender.to_wire()["organizationId"] == directory.acme_id


def test_create_tender_requires_existing_user(engine, directory):
    with pytest.raises(DomainError) as exc:
        engine.create_tender(_tender_payload(directory, creatorUsername="mallory"))
    assert exc.value.kind is ErrorKind.UNAUTHORIZED


def test_create_tender_requires_responsibility(engine, directory):
    with pytest.raises(DomainError) as exc:
        engine.create_tender(_tender_payload(directory, creatorUsername="bob"))
    assert exc.value.kind is ErrorKind.FORBIDDEN


def test_create_tender_validates_payload(engine, directory):
    with pytest.raises(DomainError) as exc:
        engine.create_tender(_tender_payload(directory, serviceType="Catering"))
    assert exc.value.kind is ErrorKind.VALIDATION
    assert exc.value.status == 400
    assert exc.value.reason.startswith("serviceType")

    with pytest.raises(DomainError) as exc:
        engine.create_tender(_tender_payload(directory, name="x" * 101))
    assert exc.value.kind is ErrorKind.VALIDATION


def test_create_edit_rollback_scenario(engine, tender):
    edited = engine.edit_tender(tender.id, {"name": "Road repair, phase 2"}, "alice")
    assert edited.version == 2

    restored = engine.rollback_tender(tender.id, 1, "alice")
    assert restored.version == 3
    assert restored.name == "Road repair"


def test_rollback_law(engine, directory):
    t = engine.create_tender(_tender_payload(directory, name="T1"))
    engine.edit_tender(t.id, {"name": "T2"}, "alice")
    engine.edit_tender(t.id, {"name": "T3"}, "alice")

    restored = engine.rollback_tender(t.id, 1, "alice")

    assert restored.version == 4
    assert restored.name == "T1"
    assert [h.version for h in engine.get_tender_history(t.id, "alice")] == [1, 2, 3]


def test_coalescing_edit(engine, tender):
    edited = engine.edit_tender(tender.id, {"name": "", "description": "Patch the potholes"}, "alice")

    assert edited.name == "Road repair"
    assert edited.description == "Patch the potholes"
    assert edited.service_type == tender.service_type


def test_edit_by_non_responsible_is_forbidden(engine, tender):
    with pytest.raises(DomainError) as exc:
        engine.edit_tender(tender.id, {"name": "Hijacked"}, "bob")
    assert exc.value.kind is ErrorKind.FORBIDDEN
    assert engine.get_user_tenders("alice")[0].version == 1


def test_rollback_to_unknown_version(engine, tender):
    with pytest.raises(DomainError) as exc:
        engine.rollback_tender(tender.id, 5, "alice")
    assert exc.value.kind is ErrorKind.NOT_FOUND
    assert exc.value.reason == "Version not found."


def test_rollback_version_must_be_positive(engine, tender):
    with pytest.raises(DomainError) as exc:
        engine.rollback_tender(tender.id, 0, "alice")
    assert exc.value.kind is ErrorKind.VALIDATION


def test_status_updates_are_versioned(engine, tender):
    published = engine.update_tender_status(tender.id, "Published", "alice")
    assert published.status == "Published"
    assert published.version == 2

    assert engine.get_tender_status(tender.id, "alice") is TenderStatus.PUBLISHED

    closed = engine.update_tender_status(tender.id, "Closed", "alice")
    assert closed.version == 3


def test_unknown_status_is_rejected(engine, tender):
    with pytest.raises(DomainError) as exc:
        engine.update_tender_status(tender.id, "Archived", "alice")
    assert exc.value.kind is ErrorKind.VALIDATION


def test_get_tender_status_requires_responsibility(engine, tender):
    with pytest.raises(DomainError) as exc:
        engine.get_tender_status(tender.id, "carol")
    assert exc.value.kind is ErrorKind.FORBIDDEN


def test_public_listing_shows_published_only(engine, directory, tender):
    other = engine.create_tender(_tender_payload(directory, name="Cement", serviceType="Manufacture"))
    assert engine.get_tenders() == []

    engine.update_tender_status(tender.id, "Published", "alice")
    engine.update_tender_status(other.id, "Published", "alice")

    assert [t.name for t in engine.get_tenders()] == ["Cement", "Road repair"]
    assert [t.name for t in engine.get_tenders(["Construction"])] == ["Road repair"]
    assert [t.name for t in engine.get_tenders(["Construction", "Manufacture"])] == ["Cement", "Road repair"]

    engine.update_tender_status(tender.id, "Closed", "alice")
    assert [t.name for t in engine.get_tenders()] == ["Cement"]


def test_user_listing_shows_every_status(engine, directory, tender):
    engine.create_tender(_tender_payload(directory, name="Archive"))
    engine.update_tender_status(tender.id, "Closed", "alice")

    names = [t.name for t in engine.get_user_tenders("alice")]
    assert names == ["Archive", "Road repair"]
    assert engine.get_user_tenders("bob") == []


def test_user_listing_requires_known_user(engine, directory):
    with pytest.raises(DomainError) as exc:
        engine.get_user_tenders("mallory")
    assert exc.value.kind is ErrorKind.UNAUTHORIZED


def test_pagination_defaults_and_bounds(engine, directory):
    for i in range(7):
        engine.create_tender(_tender_payload(directory, name=f"Tender {i}"))

    assert len(engine.get_user_tenders("alice")) == 5
    assert len(engine.get_user_tenders("alice", offset=5)) == 2
    assert engine.get_user_tenders("alice", offset=1000, limit=5) == []
    assert engine.get_user_tenders("alice", limit=0) == []

    for kwargs in ({"offset": -1}, {"limit": -1}, {"limit": 51}):
        with pytest.raises(DomainError) as exc:
            engine.get_user_tenders("alice", **kwargs)
        assert exc.value.kind is ErrorKind.VALIDATION


def test_unknown_service_type_filter(engine):
    with pytest.raises(DomainError) as exc:
        engine.get_tenders(["Catering"])
    assert exc.value.kind is ErrorKind.VALIDATION
