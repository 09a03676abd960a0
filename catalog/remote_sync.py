"""Remote sync adapter for a Supabase/PostgREST backend.

The remote side is one table with one addressable row (id = 1) whose
``payload`` column holds the whole catalog as JSON:

    {"fields": [...], "items": [...], "last_updated": "..."}

Reads are point lookups on that row, writes are upserts of the whole row.
Pull failures are non-fatal and return None; push failures raise so the
caller knows the data was not stored remotely.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, Optional
from urllib.parse import urlparse

import requests

from catalog.config import (
    HEADERS,
    REMOTE_CONFIG_KEY,
    REMOTE_RECORD_ID,
    REMOTE_SCHEMES,
    REMOTE_TABLE,
    REMOTE_TIMEOUT,
)
from catalog.errors import (
    CatalogError,
    ConfigurationInvalid,
    ConnectivityFailure,
    LocalWriteError,
    MalformedDocument,
    MalformedLocalData,
    SchemaMissing,
    WriteFailure,
)
from catalog.local_store import LocalStore
from catalog.logging_config import log_sync_event
from catalog.models import SyncDocument, utc_now_iso

__all__ = [
    "ConnectionState",
    "ConnectivityResult",
    "RemoteSyncAdapter",
    "validate_endpoint",
    "SETUP_SQL",
]

logger = logging.getLogger(__name__)

# PostgREST / Postgres error codes for a missing table
_SCHEMA_MISSING_CODES = {"42P01", "PGRST205"}

SETUP_SQL = f"""-- Run this SQL in the Supabase SQL Editor:

CREATE TABLE IF NOT EXISTS {REMOTE_TABLE} (
  id INTEGER PRIMARY KEY,
  payload JSONB NOT NULL,
  created_at TIMESTAMP WITH TIME ZONE DEFAULT NOW(),
  updated_at TIMESTAMP WITH TIME ZONE DEFAULT NOW()
);

ALTER TABLE {REMOTE_TABLE} ENABLE ROW LEVEL SECURITY;

CREATE POLICY "Allow all access" ON {REMOTE_TABLE} FOR ALL USING (true) WITH CHECK (true);

INSERT INTO {REMOTE_TABLE} (id, payload)
VALUES ({REMOTE_RECORD_ID}, '{{"fields": [], "items": []}}'::jsonb)
ON CONFLICT (id) DO NOTHING;"""


class ConnectionState(str, Enum):
    DISCONNECTED = "disconnected"
    CONFIGURING = "configuring"
    CONNECTED = "connected"


@dataclass
class ConnectivityResult:
    ok: bool
    message: str
    bootstrapped: bool = False
    schema_missing: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "success": self.ok,
            "message": self.message,
            "bootstrapped": self.bootstrapped,
            "schema_missing": self.schema_missing,
        }


def validate_endpoint(endpoint: str) -> str:
    """Normalize and validate a remote endpoint URL.

    Returns:
        The endpoint without surrounding whitespace or trailing slash.

    Raises:
        ConfigurationInvalid: If the endpoint lacks an http(s) scheme or host.
    """
    if not endpoint or not isinstance(endpoint, str):
        raise ConfigurationInvalid("Endpoint URL is required")
    endpoint = endpoint.strip().rstrip("/")
    if not endpoint.lower().startswith(REMOTE_SCHEMES):
        raise ConfigurationInvalid("Endpoint URL must start with https://")
    if not urlparse(endpoint).netloc:
        raise ConfigurationInvalid(f"Endpoint URL has no host: {endpoint}")
    return endpoint


def _is_schema_missing(code: Optional[str], message: str) -> bool:
    if code in _SCHEMA_MISSING_CODES:
        return True
    lowered = message.lower()
    return ("relation" in lowered and "does not exist" in lowered) or "could not find the table" in lowered


class RemoteSyncAdapter:
    """Push/pull the singleton sync document and manage the connection.

    State moves DISCONNECTED -> CONFIGURING -> CONNECTED on ``configure`` and
    back to DISCONNECTED on ``disconnect`` or a failed configuration. Every
    remote call checks the state first; nothing is retried.
    """

    def __init__(
        self,
        store: LocalStore,
        session_factory: Callable[[], requests.Session] = requests.Session,
        timeout: float = REMOTE_TIMEOUT,
    ):
        self.store = store
        self.session_factory = session_factory
        self.timeout = timeout
        self.state = ConnectionState.DISCONNECTED
        self.endpoint: Optional[str] = None
        self._session: Optional[requests.Session] = None
        self.restore()

    # ---------- lifecycle ----------

    @property
    def is_connected(self) -> bool:
        return self.state == ConnectionState.CONNECTED and self._session is not None

    @property
    def table_url(self) -> str:
        return f"{self.endpoint}/rest/v1/{REMOTE_TABLE}"

    def _open_session(self, endpoint: str, credential: str) -> None:
        if self._session is not None:
            self._session.close()
        session = self.session_factory()
        session.headers.update(HEADERS)
        session.headers.update({
            "apikey": credential,
            "Authorization": f"Bearer {credential}",
        })
        self._session = session
        self.endpoint = endpoint

    def restore(self) -> None:
        """Reconnect from persisted configuration, clearing it if invalid."""
        try:
            config = self.store.get_json(REMOTE_CONFIG_KEY)
        except MalformedLocalData:
            logger.warning("Stored remote config is not valid JSON, clearing it")
            self.disconnect()
            return
        if not config:
            return

        try:
            endpoint = validate_endpoint(config.get("endpoint", "") if isinstance(config, dict) else "")
            credential = config.get("credential")
            if not credential:
                raise ConfigurationInvalid("Stored remote config has no credential")
        except ConfigurationInvalid as e:
            logger.warning(f"Stored remote config is invalid, clearing it: {e}")
            self.disconnect()
            return

        self._open_session(endpoint, credential)
        self.state = ConnectionState.CONNECTED
        logger.info(f"Remote sync restored for {endpoint}")

    def configure(self, endpoint: str, credential: str) -> None:
        """Validate and persist a remote configuration, then mark connected.

        Connected is optimistic: it does not prove the remote table exists.
        Use ``test_connectivity`` for that.

        Raises:
            ConfigurationInvalid: If the endpoint or credential is malformed.
                No state is changed in that case.
            LocalWriteError: If the configuration cannot be persisted.
        """
        endpoint = validate_endpoint(endpoint)
        if not credential or not str(credential).strip():
            raise ConfigurationInvalid("API key is required")
        credential = str(credential).strip()

        self.state = ConnectionState.CONFIGURING
        try:
            self.store.set_json(REMOTE_CONFIG_KEY, {"endpoint": endpoint, "credential": credential})
            self._open_session(endpoint, credential)
        except LocalWriteError:
            if self._session is not None:
                self._session.close()
            self._session = None
            self.endpoint = None
            self.state = ConnectionState.DISCONNECTED
            raise

        self.state = ConnectionState.CONNECTED
        log_sync_event("connect", {"message": f"Remote sync configured for {endpoint}", "endpoint": endpoint})

    def disconnect(self) -> None:
        """Forget the remote configuration and close the session."""
        if self._session is not None:
            self._session.close()
        self._session = None
        self.endpoint = None
        self.state = ConnectionState.DISCONNECTED
        self.store.delete(REMOTE_CONFIG_KEY)
        log_sync_event("disconnect", {"message": "Remote sync disconnected"})

    def status(self) -> Dict[str, Any]:
        return {"state": self.state.value, "connected": self.is_connected, "endpoint": self.endpoint}

    # ---------- HTTP ----------

    def _error_from_response(self, resp: requests.Response) -> ConnectivityFailure:
        code = None
        message = resp.reason or f"HTTP {resp.status_code}"
        try:
            body = resp.json()
        except ValueError:
            body = None
        if isinstance(body, dict):
            code = body.get("code")
            message = body.get("message") or message

        if _is_schema_missing(code, message):
            return SchemaMissing()
        return ConnectivityFailure(f"HTTP {resp.status_code}: {message}")

    def _request(
        self,
        method: str,
        params: Optional[Dict[str, str]] = None,
        payload: Optional[Dict[str, Any]] = None,
        prefer: Optional[str] = None,
    ) -> requests.Response:
        """Send one request to the table endpoint.

        Raises:
            ConnectivityFailure: On network errors and error responses.
            SchemaMissing: If the remote table does not exist.
        """
        if not self.is_connected:
            raise ConnectivityFailure("Not connected to database")

        headers = {"Prefer": prefer} if prefer else None
        try:
            resp = self._session.request(
                method,
                self.table_url,
                params=params,
                json=payload,
                headers=headers,
                timeout=self.timeout,
            )
        except requests.exceptions.Timeout as e:
            raise ConnectivityFailure(f"Timeout contacting {self.endpoint}: {e}") from e
        except requests.exceptions.RequestException as e:
            raise ConnectivityFailure(f"Failed to reach {self.endpoint}: {e}") from e

        if resp.status_code >= 400:
            raise self._error_from_response(resp)
        return resp

    def _select_record(self, columns: str) -> Optional[Dict[str, Any]]:
        resp = self._request("GET", params={"id": f"eq.{REMOTE_RECORD_ID}", "select": columns})
        try:
            rows = resp.json()
        except ValueError as e:
            raise ConnectivityFailure(f"Remote answered with invalid JSON: {e}") from e
        if not isinstance(rows, list):
            raise ConnectivityFailure("Remote answered with an unexpected body")
        return rows[0] if rows else None

    # ---------- operations ----------

    def test_connectivity(self, bootstrap: Optional[SyncDocument] = None) -> ConnectivityResult:
        """Round-trip read of the sync record.

        If the table exists but the record does not, insert ``bootstrap``
        (or an empty document) once.
        """
        if not self.is_connected:
            return ConnectivityResult(False, "Not connected to database")

        try:
            row = self._select_record("id")
        except SchemaMissing as e:
            log_sync_event("test_failed", {"message": str(e), "schema_missing": True}, level=logging.WARNING)
            return ConnectivityResult(False, str(e), schema_missing=True)
        except ConnectivityFailure as e:
            log_sync_event("test_failed", {"message": str(e)}, level=logging.WARNING)
            return ConnectivityResult(False, str(e))

        if row is not None:
            return ConnectivityResult(True, "Connection successful!")

        document = bootstrap or SyncDocument(fields=[], items=[])
        if not document.last_updated:
            document.last_updated = utc_now_iso()
        try:
            self._request(
                "POST",
                payload={"id": REMOTE_RECORD_ID, "payload": document.to_dict()},
                prefer="return=minimal",
            )
        except ConnectivityFailure as e:
            log_sync_event("bootstrap_failed", {"message": str(e)}, level=logging.WARNING)
            return ConnectivityResult(False, str(e), schema_missing=isinstance(e, SchemaMissing))

        log_sync_event("bootstrap", {"message": "Remote record initialized"})
        return ConnectivityResult(True, "Connection successful! Remote record initialized.", bootstrapped=True)

    def fetch(self) -> Optional[SyncDocument]:
        """Fetch the sync document, or None when the record does not exist.

        Raises:
            ConnectivityFailure: If not connected or the read failed.
            MalformedDocument: If the stored payload has the wrong shape.
        """
        row = self._select_record("payload")
        if row is None:
            log_sync_event("pull_empty", {"message": "No remote record yet"})
            return None
        return SyncDocument.from_dict(row.get("payload"))

    def pull(self) -> Optional[SyncDocument]:
        """Fetch the sync document; None when disconnected, missing or on any failure."""
        if not self.is_connected:
            return None

        try:
            document = self.fetch()
        except ConnectivityFailure as e:
            log_sync_event("pull_failed", {"message": f"Failed to fetch from cloud: {e}"}, level=logging.WARNING)
            return None
        except MalformedDocument as e:
            log_sync_event("pull_malformed", {"message": str(e)}, level=logging.WARNING)
            return None
        if document is None:
            return None

        log_sync_event("pull", {
            "message": "Fetched remote document",
            "last_updated": document.last_updated,
        })
        return document

    def push(self, document: SyncDocument) -> None:
        """Upsert the whole sync document.

        Raises:
            WriteFailure: If not connected or the remote rejected the write.
            SchemaMissing: If the remote table does not exist.
        """
        if not self.is_connected:
            raise WriteFailure("Not connected to database")

        try:
            self._request(
                "POST",
                params={"on_conflict": "id"},
                payload={"id": REMOTE_RECORD_ID, "payload": document.to_dict()},
                prefer="resolution=merge-duplicates,return=minimal",
            )
        except SchemaMissing:
            log_sync_event("push_failed", {"message": "Remote table missing"}, level=logging.ERROR)
            raise
        except CatalogError as e:
            log_sync_event("push_failed", {"message": f"Cloud sync push failed: {e}"}, level=logging.ERROR)
            raise WriteFailure(str(e)) from e

        log_sync_event("push", {
            "message": "Data synced to cloud successfully",
            "fields": len(document.fields or []),
            "items": len(document.items or []),
            "last_updated": document.last_updated,
        })

    def setup_sql(self) -> str:
        return SETUP_SQL
