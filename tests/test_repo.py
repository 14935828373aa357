from __future__ import annotations

import pytest

from tenderflow.core.enums import EntityKind
from tenderflow.core.errors import DomainError, ErrorKind
from tenderflow.core.ports import ListFilter, Page
from tenderflow.persistence.repo import DirectoryRepository, EntityStore, ReviewRepository


@pytest.fixture
def named_tenders(engine, directory):
    ids = {}
    for name in ("Charlie", "Alpha", "Bravo"):
        ids[name] = engine.create_tender(
            {
                "name": name,
                "description": f"{name} works",
                "serviceType": "Delivery",
                "organizationId": directory.acme_id,
                "creatorUsername": "alice",
            }
        ).id
    return ids


def test_get_by_id_missing_raises_not_found(database):
    with database.session() as session:
        with pytest.raises(DomainError) as exc:
            EntityStore(session).get_by_id(EntityKind.BID, "nope")
    assert exc.value.kind is ErrorKind.NOT_FOUND


def test_list_orders_by_name(database, named_tenders):
    with database.session() as session:
        rows = EntityStore(session).list(EntityKind.TENDER, ListFilter(), Page(0, 10))
        assert [r.name for r in rows] == ["Alpha", "Bravo", "Charlie"]


def test_list_ties_broken_by_id(engine, database, directory):
    for _ in range(3):
        engine.create_tender(
            {
                "name": "Same",
                "description": "Same name",
                "serviceType": "Delivery",
                "organizationId": directory.acme_id,
                "creatorUsername": "alice",
            }
        )
    with database.session() as session:
        rows = EntityStore(session).list(EntityKind.TENDER, ListFilter(), Page(0, 10))
        ids = [r.id for r in rows]
    assert ids == sorted(ids)


def test_list_pagination(database, named_tenders):
    with database.session() as session:
        store = EntityStore(session)
        assert [r.name for r in store.list(EntityKind.TENDER, ListFilter(), Page(1, 1))] == ["Bravo"]
        assert store.list(EntityKind.TENDER, ListFilter(), Page(1000, 5)) == []
        assert store.list(EntityKind.TENDER, ListFilter(), Page(0, 0)) == []


def test_list_filters_by_status(engine, database, named_tenders):
    engine.update_tender_status(named_tenders["Bravo"], "Published", "alice")
    with database.session() as session:
        rows = EntityStore(session).list(
            EntityKind.TENDER, ListFilter(statuses=("Published",)), Page(0, 10)
        )
        assert [r.name for r in rows] == ["Bravo"]


def test_tender_only_filter_on_bids_is_rejected(database):
    with database.session() as session:
        with pytest.raises(ValueError):
            EntityStore(session).list(EntityKind.BID, ListFilter(service_types=("Delivery",)), Page())


def test_count(database, named_tenders):
    with database.session() as session:
        assert EntityStore(session).count(EntityKind.TENDER) == 3
        assert EntityStore(session).count(EntityKind.BID) == 0


def test_reviews_listed_by_bid_author(database, bid):
    with database.session() as session:
        reviews = ReviewRepository(session)
        reviews.create(bid.id, "alice", "Too slow")
        reviews.create(bid.id, "alice", "Still too slow")

    with database.session() as session:
        reviews = ReviewRepository(session)
        assert len(reviews.list_for_bid_author("bob", Page(0, 10))) == 2
        assert len(reviews.list_for_bid_author("bob", Page(1, 10))) == 1
        assert reviews.list_for_bid_author("alice", Page(0, 10)) == []


def test_grant_responsible_is_idempotent(database, directory):
    with database.session() as session:
        repo = DirectoryRepository(session)
        _, created = repo.grant_responsible(directory.acme_id, directory.carol_id)
        assert created
        _, created = repo.grant_responsible(directory.acme_id, directory.carol_id)
        assert not created
        assert [o.name for o in repo.organizations_for("carol")] == ["Acme"]
