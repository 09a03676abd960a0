"""Shared fixtures: temporary local store and an in-memory PostgREST backend."""

import json
from typing import Any, Dict, List, Optional

import pytest

from catalog.data_access import DataAccess
from catalog.local_store import LocalStore
from catalog.remote_sync import RemoteSyncAdapter

ENDPOINT = "https://demo.supabase.co"
CREDENTIAL = "anon-key"


class FakeResponse:
    """Minimal stand-in for requests.Response."""

    def __init__(self, status_code: int = 200, body: Any = None, reason: str = "OK"):
        self.status_code = status_code
        self.reason = reason
        self._body = body

    def json(self) -> Any:
        if self._body is None:
            raise ValueError("No JSON body")
        return self._body


class FakePostgrest:
    """In-memory app_data table answering like PostgREST."""

    def __init__(self):
        self.rows: Dict[int, Any] = {}
        self.table_exists = True
        self.fail_with: Optional[Exception] = None
        self.fail_writes_with: Optional[FakeResponse] = None
        self.fail_reads_with: Optional[Exception] = None
        self.requests: List[Dict[str, Any]] = []

    def session(self) -> "FakeSession":
        return FakeSession(self)

    def payload(self, record_id: int = 1) -> Any:
        return self.rows.get(record_id)

    def handle(self, method, url, params=None, json_body=None, headers=None):
        self.requests.append({"method": method, "url": url, "params": params, "json": json_body, "headers": headers})

        if self.fail_with is not None:
            raise self.fail_with
        if not self.table_exists:
            return FakeResponse(
                404,
                {"code": "PGRST205", "message": "Could not find the table 'public.app_data' in the schema cache"},
                "Not Found",
            )

        if method == "GET":
            if self.fail_reads_with is not None:
                raise self.fail_reads_with
            record_id = int(params["id"].split(".", 1)[1])
            if record_id not in self.rows:
                return FakeResponse(200, [])
            row = {"id": record_id, "payload": self.rows[record_id]}
            return FakeResponse(200, [{col: row[col] for col in params["select"].split(",")}])

        if method == "POST":
            if self.fail_writes_with is not None:
                return self.fail_writes_with
            record_id = json_body["id"]
            upsert = bool(headers) and "merge-duplicates" in headers.get("Prefer", "")
            if record_id in self.rows and not upsert:
                return FakeResponse(
                    409,
                    {"code": "23505", "message": "duplicate key value violates unique constraint"},
                    "Conflict",
                )
            # Round-trip through JSON like the wire does
            self.rows[record_id] = json.loads(json.dumps(json_body["payload"]))
            return FakeResponse(201, None, "Created")

        return FakeResponse(405, {"message": "Method not allowed"}, "Method Not Allowed")


class FakeSession:
    def __init__(self, server: FakePostgrest):
        self.server = server
        self.headers: Dict[str, str] = {}
        self.closed = False

    def request(self, method, url, params=None, json=None, headers=None, timeout=None):
        return self.server.handle(method, url, params=params, json_body=json, headers=headers)

    def close(self) -> None:
        self.closed = True


@pytest.fixture
def postgrest():
    """In-memory remote backend."""
    return FakePostgrest()


@pytest.fixture
def local_store(tmp_path):
    """Local store on a temporary SQLite file."""
    return LocalStore(str(tmp_path / "catalog.db"))


@pytest.fixture
def remote(local_store, postgrest):
    """Disconnected remote adapter wired to the fake backend."""
    return RemoteSyncAdapter(local_store, session_factory=postgrest.session)


@pytest.fixture
def connected_remote(remote):
    """Remote adapter configured against the fake backend."""
    remote.configure(ENDPOINT, CREDENTIAL)
    return remote


@pytest.fixture
def data_access(local_store, remote):
    """Data access facade over the temporary store and fake backend (disconnected)."""
    return DataAccess(local_store, remote)
