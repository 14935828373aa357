from __future__ import annotations

import json

import pytest
from typer.testing import CliRunner

from tenderflow.cli.main import app

runner = CliRunner()


@pytest.fixture
def cli(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv("DATABASE_URL", raising=False)
    config_dir = tmp_path / "configs"
    config_dir.mkdir()
    (config_dir / "app.yaml").write_text(
        "database:\n"
        "  url: sqlite:///data/cli.db\n"
        "  connect_timeout_seconds: 0\n"
        "logging:\n"
        "  level: WARNING\n"
        "  file: null\n"
        "  rich_console: false\n",
        encoding="utf-8",
    )

    def invoke(*args):
        return runner.invoke(app, [str(a) for a in args])

    result = invoke("init")
    assert result.exit_code == 0, result.output
    return invoke


def _last_line(result):
    assert result.exit_code == 0, result.output
    return result.output.strip().splitlines()[-1].strip()


def _json(result):
    assert result.exit_code == 0, result.output
    return json.loads(result.output)


@pytest.fixture
def seeded(cli):
    acme = _last_line(cli("org", "add", "Acme"))
    globex = _last_line(cli("org", "add", "Globex", "--type", "JSC"))
    _last_line(cli("org", "employee", "alice"))
    bob_id = _last_line(cli("org", "employee", "bob"))
    assert cli("org", "grant", acme, "alice").exit_code == 0
    assert cli("org", "grant", globex, "bob").exit_code == 0
    return {"acme": acme, "globex": globex, "bob_id": bob_id}


def _new_tender(cli, seeded):
    return _json(
        cli(
            "tender", "new",
            "--name", "Road",
            "--description", "Fix the road",
            "--service-type", "Construction",
            "--org", seeded["acme"],
            "--user", "alice",
            "--json",
        )
    )


def test_version_flag():
    result = runner.invoke(app, ["--version"])
    assert result.exit_code == 0
    assert "0.1.0" in result.output


def test_status_counts(cli, seeded):
    result = cli("status")
    assert result.exit_code == 0, result.output
    assert "Database reachable" in result.output
    assert "Organizations" in result.output


def test_tender_lifecycle(cli, seeded):
    tender = _new_tender(cli, seeded)
    assert tender["version"] == 1
    assert tender["serviceType"] == "Construction"

    edited = _json(cli("tender", "edit", tender["id"], "--user", "alice", "--name", "Road 2", "--json"))
    assert edited["version"] == 2
    assert edited["description"] == "Fix the road"

    restored = _json(cli("tender", "rollback", tender["id"], 1, "--user", "alice", "--json"))
    assert restored["version"] == 3
    assert restored["name"] == "Road"

    history = _json(cli("tender", "history", tender["id"], "--user", "alice", "--json"))
    assert [h["version"] for h in history] == [1, 2]

    assert _json(cli("tender", "list", "--json")) == []
    cli("tender", "set-status", tender["id"], "Published", "--user", "alice")
    assert _last_line(cli("tender", "status", tender["id"], "--user", "alice")) == "Published"

    published = _json(cli("tender", "list", "--service-type", "Construction", "--json"))
    assert [t["id"] for t in published] == [tender["id"]]


def test_bid_flow(cli, seeded):
    tender = _new_tender(cli, seeded)

    bid = _json(
        cli(
            "bid", "new",
            "--name", "Offer",
            "--description", "Cheap and quick",
            "--tender", tender["id"],
            "--author-id", seeded["bob_id"],
            "--org", seeded["globex"],
            "--json",
        )
    )
    assert bid["authorUsername"] == "bob"

    decided = _json(cli("bid", "decide", bid["id"], "Approved", "--user", "alice", "--json"))
    assert decided["decision"] == "Approved"
    assert decided["version"] == 2

    cli("bid", "feedback", bid["id"], "Lower the price", "--user", "alice")
    reviews = _json(cli("bid", "reviews", tender["id"], "--author", "bob", "--user", "alice", "--json"))
    assert [r["description"] for r in reviews] == ["Lower the price"]

    mine = _json(cli("bid", "mine", "--user", "bob", "--json"))
    assert [b["id"] for b in mine] == [bid["id"]]


def test_domain_error_exits_with_status(cli, seeded):
    tender = _new_tender(cli, seeded)

    result = cli("tender", "edit", tender["id"], "--user", "bob", "--name", "Mine")
    assert result.exit_code == 1
    assert "[403] Insufficient rights to perform the action." in result.output

    result = cli("bid", "new", "--name", "x", "--description", "y", "--tender", tender["id"],
                 "--author-id", seeded["bob_id"], "--author-type", "User")
    assert result.exit_code == 1
    assert "[400]" in result.output
