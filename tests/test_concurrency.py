from __future__ import annotations

import pytest
from sqlalchemy.exc import OperationalError

from tenderflow.core.config import AppConfig, LoggingConfig, VersioningConfig
from tenderflow.core.errors import CONFLICT_REASON, DomainError, ErrorKind, StaleVersionError
from tenderflow.core.orchestrator import Orchestrator
from tenderflow.core.versioning import VersionManager


@pytest.fixture
def flaky_write(monkeypatch):
    """Make the guarded UPDATE lose the race a given number of times."""
    original = VersionManager._write
    state = {"failures": 0, "calls": 0}

    def write(self, spec, entity_id, observed, changes):
        state["calls"] += 1
        if state["calls"] <= state["failures"]:
            raise StaleVersionError(spec.label, entity_id, observed)
        return original(self, spec, entity_id, observed, changes)

    monkeypatch.setattr(VersionManager, "_write", write)
    return state


def test_stale_write_is_retried(engine, tender, flaky_write):
    flaky_write["failures"] = 2

    edited = engine.edit_tender(tender.id, {"name": "Second try"}, "alice")

    assert flaky_write["calls"] == 3
    assert edited.version == 2
    # Failed attempts left no snapshots behind
    assert [h.version for h in engine.get_tender_history(tender.id, "alice")] == [1]


def test_conflict_after_exhausted_attempts(database, directory, tender, flaky_write):
    engine = Orchestrator(
        database,
        AppConfig(
            logging=LoggingConfig(file=None, rich_console=False),
            versioning=VersioningConfig(max_write_attempts=2),
        ),
    )
    flaky_write["failures"] = 10

    with pytest.raises(DomainError) as exc:
        engine.edit_tender(tender.id, {"name": "Never"}, "alice")

    assert exc.value.kind is ErrorKind.CONFLICT
    assert exc.value.status == 409
    assert exc.value.reason == CONFLICT_REASON
    assert flaky_write["calls"] == 2
    assert engine.get_user_tenders("alice")[0].name == "Road repair"


def test_domain_errors_are_not_retried(engine, tender, flaky_write):
    with pytest.raises(DomainError):
        engine.edit_tender(tender.id, {"name": "x"}, "bob")
    assert flaky_write["calls"] == 0


def test_storage_failure_rolls_back_whole_edit(engine, tender, monkeypatch):
    original = VersionManager._write

    def write_then_fail(self, spec, entity_id, observed, changes):
        original(self, spec, entity_id, observed, changes)
        raise OperationalError("UPDATE tender", {}, Exception("disk I/O error"))

    monkeypatch.setattr(VersionManager, "_write", write_then_fail)

    with pytest.raises(DomainError) as exc:
        engine.edit_tender(tender.id, {"name": "Half done"}, "alice")

    assert exc.value.kind is ErrorKind.INTERNAL
    assert exc.value.status == 500
    monkeypatch.undo()

    current = engine.get_user_tenders("alice")[0]
    assert current.version == 1
    assert current.name == "Road repair"
    assert engine.get_tender_history(tender.id, "alice") == []
