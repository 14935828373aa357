from __future__ import annotations

import logging
from dataclasses import dataclass

import pytest

from tenderflow.core.config import AppConfig, LoggingConfig
from tenderflow.core.orchestrator import Orchestrator
from tenderflow.persistence.db import Database
from tenderflow.persistence.repo import DirectoryRepository


@dataclass
class Directory:
    """Ids seeded into the directory tables.

    alice is responsible for Acme, bob for Globex, carol for nothing.
    """

    acme_id: str
    globex_id: str
    alice_id: str
    bob_id: str
    carol_id: str


@pytest.fixture
def database():
    db = Database("sqlite://")
    db.create_all()
    yield db
    db.dispose()


@pytest.fixture
def config():
    return AppConfig(logging=LoggingConfig(file=None, rich_console=False))


@pytest.fixture
def engine(database, config):
    return Orchestrator(database, config)


@pytest.fixture
def directory(database):
    with database.session() as session:
        repo = DirectoryRepository(session)
        acme = repo.create_organization("Acme", type="LLC")
        globex = repo.create_organization("Globex", type="JSC")
        alice = repo.create_employee("alice", "Alice", "Archer")
        bob = repo.create_employee("bob", "Bob", "Baker")
        carol = repo.create_employee("carol")
        repo.grant_responsible(acme.id, alice.id)
        repo.grant_responsible(globex.id, bob.id)

        return Directory(
            acme_id=acme.id,
            globex_id=globex.id,
            alice_id=alice.id,
            bob_id=bob.id,
            carol_id=carol.id,
        )


@pytest.fixture
def tender(engine, directory):
    """A Created tender owned by Acme."""
    return engine.create_tender(
        {
            "name": "Road repair",
            "description": "Resurface the main road",
            "serviceType": "Construction",
            "organizationId": directory.acme_id,
            "creatorUsername": "alice",
        }
    )


@pytest.fixture
def bid(engine, directory, tender):
    """A Created bid by bob on behalf of Globex."""
    return engine.create_bid(
        {
            "name": "Globex offer",
            "description": "We can do it in a week",
            "tenderId": tender.id,
            "authorType": "Organization",
            "authorId": directory.bob_id,
            "organizationId": directory.globex_id,
        }
    )


@pytest.fixture(autouse=True)
def reset_tenderflow_logger():
    yield
    logger = logging.getLogger("tenderflow")
    for handler in list(logger.handlers):
        handler.close()
    logger.handlers.clear()
