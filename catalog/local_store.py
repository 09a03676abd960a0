"""SQLite key/value store used as the local cache.

Holds the two collections (fields, items) plus small settings blobs such as
the remote sync configuration. Values are stored as JSON text.
"""

import json
import logging
import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Generator, List, Optional

from catalog.config import DB_PATH, FIELDS_KEY, ITEMS_KEY
from catalog.errors import LocalWriteError, MalformedLocalData
from catalog.models import ComparableField, ComparableItem

__all__ = ["LocalStore"]

logger = logging.getLogger(__name__)


class LocalStore:
    """Durable key/value store backed by a single SQLite table."""

    def __init__(self, db_path: str = DB_PATH):
        self.db_path = str(db_path)
        self._init_db()

    @contextmanager
    def _get_connection(self) -> Generator[sqlite3.Connection, None, None]:
        """Context manager for database connections."""
        Path(self.db_path).parent.mkdir(parents=True, exist_ok=True)

        conn = sqlite3.connect(self.db_path, timeout=10)
        conn.row_factory = sqlite3.Row
        try:
            yield conn
        finally:
            conn.close()

    def _init_db(self) -> None:
        with self._get_connection() as conn:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS kv (
                    key TEXT PRIMARY KEY,
                    value TEXT NOT NULL,
                    updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
                )
            """)
            conn.commit()

    # ---------- raw key/value ----------

    def get_raw(self, key: str) -> Optional[str]:
        with self._get_connection() as conn:
            row = conn.execute("SELECT value FROM kv WHERE key = ?", (key,)).fetchone()
        return row["value"] if row else None

    def get_json(self, key: str) -> Any:
        """Return the decoded value for key, or None if the key is unset.

        Raises:
            MalformedLocalData: If the stored text is not valid JSON.
        """
        raw = self.get_raw(key)
        if raw is None:
            return None
        try:
            return json.loads(raw)
        except json.JSONDecodeError as e:
            raise MalformedLocalData(f"Local value {key!r} is not valid JSON: {e}") from e

    def set_json(self, key: str, value: Any) -> None:
        """Store value under key, replacing any previous value.

        Raises:
            LocalWriteError: If the value cannot be encoded or written.
        """
        try:
            payload = json.dumps(value, ensure_ascii=False)
        except (TypeError, ValueError) as e:
            raise LocalWriteError(f"Cannot encode local value {key!r}: {e}") from e

        try:
            with self._get_connection() as conn:
                conn.execute(
                    """
                    INSERT INTO kv (key, value, updated_at) VALUES (?, ?, CURRENT_TIMESTAMP)
                    ON CONFLICT(key) DO UPDATE SET value = excluded.value, updated_at = CURRENT_TIMESTAMP
                    """,
                    (key, payload),
                )
                conn.commit()
        except sqlite3.Error as e:
            logger.error(f"Failed to write local value {key!r}: {e}")
            raise LocalWriteError(f"Failed to write local value {key!r}: {e}") from e

    def delete(self, key: str) -> None:
        try:
            with self._get_connection() as conn:
                conn.execute("DELETE FROM kv WHERE key = ?", (key,))
                conn.commit()
        except sqlite3.Error as e:
            raise LocalWriteError(f"Failed to delete local value {key!r}: {e}") from e

    # ---------- collections ----------

    def load_fields(self) -> Optional[List[ComparableField]]:
        """Cached fields, or None on a cache miss.

        Raises:
            MalformedLocalData: If the cached value cannot be decoded.
        """
        data = self.get_json(FIELDS_KEY)
        if data is None:
            return None
        if not isinstance(data, list):
            raise MalformedLocalData("Cached fields must be a list")
        try:
            return [ComparableField.from_dict(f) for f in data]
        except (TypeError, ValueError) as e:
            raise MalformedLocalData(f"Cached field is invalid: {e}") from e

    def load_items(self) -> Optional[List[ComparableItem]]:
        """Cached items, or None on a cache miss.

        Raises:
            MalformedLocalData: If the cached value cannot be decoded.
        """
        data = self.get_json(ITEMS_KEY)
        if data is None:
            return None
        if not isinstance(data, list):
            raise MalformedLocalData("Cached items must be a list")
        try:
            return [ComparableItem.from_dict(i) for i in data]
        except (TypeError, ValueError) as e:
            raise MalformedLocalData(f"Cached item is invalid: {e}") from e

    def save_fields(self, fields: List[ComparableField]) -> None:
        self.set_json(FIELDS_KEY, [f.to_dict() for f in fields])

    def save_items(self, items: List[ComparableItem]) -> None:
        self.set_json(ITEMS_KEY, [i.to_dict() for i in items])
