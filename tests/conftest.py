"""Pytest configuration - loads .env and provides a recording transport."""

import json
from pathlib import Path
from typing import Any

import pytest
from dotenv import load_dotenv

from airtable_kit.core.client import HTTPRequest, HTTPResponse
from airtable_kit.sdk import Airtable

# Load .env from project root
env_path = Path(__file__).parent.parent / ".env"
load_dotenv(env_path)


class FakeTransport:
    """Transport spy: records requests and replays queued outcomes in order."""

    def __init__(self):
        self.requests: list[HTTPRequest] = []
        self._outcomes: list[HTTPResponse | OSError] = []

    def queue(self, status: int, data: Any = None, raw: bytes | None = None) -> "FakeTransport":
        body = raw if raw is not None else (json.dumps(data).encode("utf-8") if data is not None else b"")
        self._outcomes.append(HTTPResponse(status=status, body=body))
        return self

    def queue_error(self, error: OSError) -> "FakeTransport":
        self._outcomes.append(error)
        return self

    def send(self, request: HTTPRequest) -> HTTPResponse:
        self.requests.append(request)
        if not self._outcomes:
            raise AssertionError(f"Unexpected request: {request.method} {request.url}")
        outcome = self._outcomes.pop(0)
        if isinstance(outcome, OSError):
            raise outcome
        return outcome

    def json_bodies(self) -> list[Any]:
        return [json.loads(r.body) if r.body is not None else None for r in self.requests]


def record_json(record_id: str, fields: dict | None = None) -> dict[str, Any]:
    """Server-side shape of a record."""
    return {"id": record_id, "createdTime": "2024-01-31T10:00:00.000Z", "fields": fields or {}}


@pytest.fixture
def transport() -> FakeTransport:
    return FakeTransport()


@pytest.fixture
def client(transport: FakeTransport) -> Airtable:
    return Airtable(base_id="base123", api_key="key123", base_url="https://api.example.com/v0", transport=transport)
