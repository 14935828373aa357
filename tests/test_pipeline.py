from __future__ import annotations

import pytest

from tenderflow.core.errors import DomainError, ErrorKind
from tenderflow.core.orchestrator import Checks


class RecordingAuth:
    """Answers every predicate from a table and records call order."""

    def __init__(self, **answers):
        self.answers = answers
        self.calls = []

    def __getattr__(self, name):
        def check(*args):
            self.calls.append(name)
            if not self.answers.get(name, True):
                raise DomainError(ErrorKind.INTERNAL, name)

        return check


def test_checks_run_in_fixed_order():
    auth = RecordingAuth()
    checks = Checks(
        target=("tender", "t1"),
        actors=("alice", "bob"),
        relationship=lambda a: a.require_tender_responsible("t1", "alice"),
        version=2,
    )

    checks.run(auth)

    assert auth.calls == [
        "require_entity",
        "require_actor",
        "require_actor",
        "require_tender_responsible",
        "require_version",
    ]


def test_first_failure_short_circuits():
    auth = RecordingAuth(require_actor=False)
    checks = Checks(
        target=("tender", "t1"),
        actors=("alice",),
        relationship=lambda a: a.require_tender_responsible("t1", "alice"),
    )

    with pytest.raises(DomainError):
        checks.run(auth)

    assert auth.calls == ["require_entity", "require_actor"]


def test_missing_entity_wins_over_missing_user(engine, directory):
    with pytest.raises(DomainError) as exc:
        engine.edit_tender("missing", {"name": "x"}, "mallory")
    assert exc.value.kind is ErrorKind.NOT_FOUND
    assert exc.value.status == 404


def test_missing_user_wins_over_missing_relationship(engine, tender):
    with pytest.raises(DomainError) as exc:
        engine.rollback_tender(tender.id, 1, "mallory")
    assert exc.value.kind is ErrorKind.UNAUTHORIZED


def test_relationship_checked_before_version(engine, tender):
    with pytest.raises(DomainError) as exc:
        engine.rollback_tender(tender.id, 99, "bob")
    assert exc.value.kind is ErrorKind.FORBIDDEN


def test_empty_username_is_unauthorized(engine, tender):
    with pytest.raises(DomainError) as exc:
        engine.get_tender_status(tender.id, "")
    assert exc.value.kind is ErrorKind.UNAUTHORIZED


@pytest.mark.parametrize(
    "operation",
    [
        lambda e, t: e.get_tender_status(t.id, "carol"),
        lambda e, t: e.update_tender_status(t.id, "Published", "carol"),
        lambda e, t: e.edit_tender(t.id, {"name": "x"}, "carol"),
        lambda e, t: e.rollback_tender(t.id, 1, "carol"),
        lambda e, t: e.get_bids_for_tender(t.id, "carol"),
    ],
)
def test_authorization_law(engine, tender, operation):
    """A user with no relationship to the tender is refused and nothing changes."""
    with pytest.raises(DomainError) as exc:
        operation(engine, tender)
    assert exc.value.kind is ErrorKind.FORBIDDEN
    assert engine.get_tender_history(tender.id, "alice") == []
