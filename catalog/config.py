"""Configuration and constants for the catalog core."""

import os
from pathlib import Path

__all__ = [
    "DB_PATH",
    "LOG_DIR",
    "MAX_SELECTION",
    "REMOTE_TABLE",
    "REMOTE_RECORD_ID",
    "REMOTE_TIMEOUT",
    "REMOTE_SCHEMES",
    "HEADERS",
    "FIELDS_KEY",
    "ITEMS_KEY",
    "REMOTE_CONFIG_KEY",
    "ADMIN_PASSWORD_KEY",
    "LAST_SYNC_KEY",
]

_PROJECT_ROOT = Path(__file__).parent.parent

# Local cache (SQLite key/value store)
DB_PATH = os.getenv("CATALOG_DB_PATH", str(_PROJECT_ROOT / "data" / "catalog.db"))

LOG_DIR = Path(os.getenv("CATALOG_LOG_DIR", str(_PROJECT_ROOT / "logs")))

# Comparison selection size limit
MAX_SELECTION = 4

# Remote backend (Supabase/PostgREST): one table, one row
REMOTE_TABLE = "app_data"
REMOTE_RECORD_ID = 1
REMOTE_TIMEOUT = float(os.getenv("REMOTE_TIMEOUT", "10"))
REMOTE_SCHEMES = ("http://", "https://")

HEADERS = {
    "User-Agent": "tvcompare sync client",
    "Content-Type": "application/json",
    "Accept": "application/json",
}

# Local store keys
FIELDS_KEY = "fields"
ITEMS_KEY = "items"
REMOTE_CONFIG_KEY = "remoteConfig"
ADMIN_PASSWORD_KEY = "adminPassword"
LAST_SYNC_KEY = "last_sync_time"
