"""
Airtable CLI tests.

Commands run in-process against a recording transport, so no credentials
or network access are needed.

Run with: python -m pytest tests/test_cli.py -v
"""

import io
import json

import pytest
from conftest import FakeTransport, record_json

from airtable_kit import cli
from airtable_kit.sdk import Airtable

# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture
def fake(monkeypatch) -> FakeTransport:
    """Route the CLI's client through a FakeTransport."""
    transport = FakeTransport()

    def make_client(base_id=None):
        return Airtable(base_id=base_id or "base123", api_key="key123", transport=transport)

    monkeypatch.setattr(cli, "Airtable", make_client)
    monkeypatch.setattr(cli, "load_dotenv", lambda: None)
    return transport


def run(capsys, *args: str) -> tuple[int, object]:
    """Run the CLI and return (exit code, parsed JSON output)."""
    code = 0
    try:
        cli.main(list(args))
    except SystemExit as e:
        code = e.code or 0
    out = capsys.readouterr().out
    return code, json.loads(out) if out.strip() else None


# =============================================================================
# Commands
# =============================================================================


def test_list(fake, capsys):
    fake.queue(200, {"records": [record_json("rec1", {"Name": "John"})]})

    code, data = run(capsys, "list", "Tasks", "--field", "Name", "--max-records", "5")

    assert code == 0
    assert data == {"records": [{"id": "rec1", "createdTime": "2024-01-31T10:00:00.000Z", "fields": {"Name": "John"}}]}
    assert "fields%5B%5D=Name" in fake.requests[0].url
    assert "maxRecords=5" in fake.requests[0].url


def test_get_uses_base_flag(fake, capsys):
    fake.queue(200, record_json("rec1", {"Name": "John"}))

    code, data = run(capsys, "--base", "appOther", "get", "Tasks", "rec1")

    assert code == 0
    assert data["id"] == "rec1"
    assert "/appOther/Tasks/rec1" in fake.requests[0].url


def test_create_single(fake, capsys):
    fake.queue(200, record_json("recNew", {"Name": "John"}))

    code, data = run(capsys, "create", "Tasks", "--fields", '{"Name": "John"}')

    assert code == 0
    assert data["id"] == "recNew"
    assert fake.json_bodies() == [{"fields": {"Name": "John"}}]


def test_create_batch_from_stdin(fake, capsys, monkeypatch):
    fake.queue(200, {"records": [record_json("rec1"), record_json("rec2")]})
    monkeypatch.setattr("sys.stdin", io.StringIO('[{"Name": "a"}, {"Name": "b"}]'))

    code, data = run(capsys, "create", "Tasks", "--fields", "-")

    assert code == 0
    assert [r["id"] for r in data["records"]] == ["rec1", "rec2"]
    assert fake.json_bodies() == [{"records": [{"fields": {"Name": "a"}}, {"fields": {"Name": "b"}}]}]


def test_update_replace(fake, capsys):
    fake.queue(200, record_json("rec1", {"Status": "Done"}))

    code, _ = run(capsys, "update", "Tasks", "rec1", "--fields", '{"Status": "Done"}', "--replace")

    assert code == 0
    assert fake.requests[0].method == "PUT"
    assert fake.requests[0].url.endswith("/Tasks/rec1")


def test_delete_many(fake, capsys):
    fake.queue(200, {"records": [{"id": "rec1", "deleted": True}, {"id": "rec2", "deleted": True}]})

    code, data = run(capsys, "delete", "Tasks", "rec1", "rec2")

    assert code == 0
    assert data == {"records": [{"id": "rec1", "deleted": True}, {"id": "rec2", "deleted": True}]}
    assert fake.requests[0].url.endswith("/Tasks?records%5B%5D=rec1&records%5B%5D=rec2")


# =============================================================================
# Errors
# =============================================================================


def test_api_error_is_json(fake, capsys):
    fake.queue(404, {"error": "NOT_FOUND"})

    code, data = run(capsys, "get", "Tasks", "recMissing")

    assert code == 1
    assert data["type"] == "NotFoundError"
    assert data["status"] == 404


def test_invalid_json_argument(fake, capsys):
    code, data = run(capsys, "create", "Tasks", "--fields", "{not json")

    assert code == 1
    assert data["type"] == "InvalidParametersError"
    assert fake.requests == []


def test_missing_credentials(monkeypatch, capsys):
    monkeypatch.setattr(cli, "load_dotenv", lambda: None)
    monkeypatch.delenv("AIRTABLE_API_KEY", raising=False)

    code, data = run(capsys, "get", "Tasks", "rec1")

    assert code == 1
    assert "AIRTABLE_API_KEY" in data["error"]


def test_no_command_prints_help(capsys):
    with pytest.raises(SystemExit) as exc_info:
        cli.main([])
    assert exc_info.value.code == 0
    assert "usage: airtable" in capsys.readouterr().out


def test_network_error_is_json(fake, capsys):
    fake.queue_error(ConnectionError("Invalid HTTP response"))

    code, data = run(capsys, "get", "Tasks", "rec1")

    assert code == 1
    assert data["type"] == "NetworkError"
