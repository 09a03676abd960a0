"""Data access facade: local cache plus opportunistic cloud sync.

Reads resolve each collection through ``READ_TIERS`` in order:

1. remote - the synced document, when connected and the pull succeeds
2. local  - the SQLite cache
3. seed   - the built-in defaults, which are then written to the cache

Writes go to the local cache first. When connected, a merged document is
then pushed; a failed push is reported in the ``SaveResult`` and never
undoes the local write.

Two concurrent pushes that both replace the same collection race and the
last upsert wins. An optimistic version stamp compared at upsert time
would be needed for anything stronger.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple

from catalog.config import LAST_SYNC_KEY
from catalog.defaults import default_fields, default_items
from catalog.errors import (
    ConnectivityFailure,
    LocalWriteError,
    MalformedDocument,
    MalformedLocalData,
    SchemaMissing,
    ValidationError,
    WriteFailure,
)
from catalog.local_store import LocalStore
from catalog.models import (
    ComparableField,
    ComparableItem,
    SyncDocument,
    normalize_specs,
    utc_now_iso,
)
from catalog.remote_sync import ConnectivityResult, RemoteSyncAdapter

__all__ = ["DataAccess", "CatalogData", "SaveResult", "READ_TIERS", "validate_fields", "validate_items"]

logger = logging.getLogger(__name__)

READ_TIERS = ("remote", "local", "seed")


@dataclass
class CatalogData:
    fields: List[ComparableField] = field(default_factory=list)
    items: List[ComparableItem] = field(default_factory=list)
    # Which tier each collection came from
    sources: Dict[str, str] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "fields": [f.to_dict() for f in self.fields],
            "items": [i.to_dict() for i in self.items],
        }


@dataclass
class SaveResult:
    """Outcome of a save: the local write always happened if this exists."""

    local_saved: bool = True
    remote_attempted: bool = False
    remote_saved: bool = False
    remote_error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.local_saved and self.remote_error is None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "local_saved": self.local_saved,
            "remote_attempted": self.remote_attempted,
            "remote_saved": self.remote_saved,
            "remote_error": self.remote_error,
        }


def validate_fields(fields: Sequence[ComparableField]) -> None:
    """Check every field and the uniqueness of ids.

    Raises:
        ValidationError: On the first invalid or duplicate field.
    """
    seen = set()
    for f in fields:
        f.validate()
        if f.id in seen:
            raise ValidationError(f"Duplicate field id: {f.id!r}")
        seen.add(f.id)


def validate_items(items: Sequence[ComparableItem], fields: Sequence[ComparableField]) -> List[ComparableItem]:
    """Check items and decode their spec values by field type.

    Returns:
        The items with normalized specs.

    Raises:
        ValidationError: On a missing id/name, a duplicate id or a bad spec value.
    """
    seen = set()
    for item in items:
        if not item.id:
            raise ValidationError("Item id is required")
        if not item.name:
            raise ValidationError(f"Item {item.id!r} needs a name")
        if item.id in seen:
            raise ValidationError(f"Duplicate item id: {item.id!r}")
        seen.add(item.id)
        item.specs = normalize_specs(item.specs, fields)
    return list(items)


class DataAccess:
    """Single entry point for reading and writing the catalog."""

    def __init__(self, store: LocalStore, remote: RemoteSyncAdapter):
        self.store = store
        self.remote = remote

    # ---------- reads ----------

    def _local_fields(self) -> Optional[List[ComparableField]]:
        try:
            return self.store.load_fields()
        except MalformedLocalData as e:
            logger.warning(f"Local fields cache unreadable, treating as empty: {e}")
            return None

    def _local_items(self) -> Optional[List[ComparableItem]]:
        try:
            return self.store.load_items()
        except MalformedLocalData as e:
            logger.warning(f"Local items cache unreadable, treating as empty: {e}")
            return None

    def _resolve(
        self,
        name: str,
        remote_value: Optional[list],
        load_local: Callable[[], Optional[list]],
        load_seed: Callable[[], list],
        save_local: Callable[[list], None],
    ) -> Tuple[list, str]:
        """Walk READ_TIERS for one collection and return (value, tier)."""
        for tier in READ_TIERS:
            if tier == "remote":
                if remote_value is None:
                    continue
                try:
                    save_local(remote_value)
                except LocalWriteError as e:
                    logger.error(f"Failed to cache remote {name} locally: {e}")
                return remote_value, tier
            if tier == "local":
                value = load_local()
                if value is not None:
                    return value, tier
            if tier == "seed":
                value = load_seed()
                try:
                    save_local(value)
                except LocalWriteError as e:
                    logger.error(f"Failed to seed local {name}: {e}")
                return value, tier
        raise AssertionError("seed tier always resolves")

    def load_all(self) -> CatalogData:
        """Load fields and items: remote first, then local cache, then defaults.

        Never raises for read-side failures.
        """
        document = self.remote.pull() if self.remote.is_connected else None

        fields, fields_source = self._resolve(
            "fields",
            document.fields if document else None,
            self._local_fields,
            default_fields,
            self.store.save_fields,
        )
        items, items_source = self._resolve(
            "items",
            document.items if document else None,
            self._local_items,
            default_items,
            self.store.save_items,
        )

        logger.debug(f"Loaded catalog: fields from {fields_source}, items from {items_source}")
        return CatalogData(fields=fields, items=items, sources={"fields": fields_source, "items": items_source})

    # ---------- writes ----------

    def _sync_after_save(self, fields=None, items=None) -> SaveResult:
        result = SaveResult()
        if not self.remote.is_connected:
            return result

        result.remote_attempted = True
        try:
            self.push_merged(fields=fields, items=items)
            result.remote_saved = True
        except WriteFailure as e:
            result.remote_error = str(e)
        return result

    def save_fields(self, fields: List[ComparableField]) -> SaveResult:
        """Persist fields locally, then push them when connected.

        Raises:
            ValidationError: If a field is invalid (nothing is written).
            LocalWriteError: If the local cache cannot be written.
        """
        validate_fields(fields)
        self.store.save_fields(fields)
        logger.info(f"Saved {len(fields)} fields locally")
        return self._sync_after_save(fields=fields)

    def save_items(self, items: List[ComparableItem]) -> SaveResult:
        """Persist items locally, then push them when connected.

        Raises:
            ValidationError: If an item or spec value is invalid (nothing is written).
            LocalWriteError: If the local cache cannot be written.
        """
        known_fields = self._local_fields() or []
        items = validate_items(items, known_fields)
        self.store.save_items(items)
        logger.info(f"Saved {len(items)} items locally")
        return self._sync_after_save(items=items)

    def _merge_source(
        self,
        name: str,
        current: Optional[SyncDocument],
        load_local: Callable[[], Optional[list]],
        load_seed: Callable[[], list],
    ) -> list:
        remote_value = getattr(current, name) if current is not None else None
        if remote_value is not None:
            return remote_value
        local_value = load_local()
        if local_value is not None:
            return local_value
        return load_seed()

    def push_merged(
        self,
        fields: Optional[List[ComparableField]] = None,
        items: Optional[List[ComparableItem]] = None,
    ) -> SyncDocument:
        """Upsert a document that replaces only the collections given.

        A collection passed as None is taken from the remote document when
        it has one, otherwise from the local cache, otherwise from the seed
        defaults. If the remote document is needed but cannot be read or
        parsed, nothing is pushed.

        Raises:
            WriteFailure: If not connected, the remote read fails or the
                upsert fails.
        """
        if not self.remote.is_connected:
            raise WriteFailure("Not connected to database")

        current = None
        if fields is None or items is None:
            try:
                current = self.remote.fetch()
            except SchemaMissing:
                raise
            except (ConnectivityFailure, MalformedDocument) as e:
                raise WriteFailure(f"Cannot read remote document before push: {e}") from e

        if fields is None:
            fields = self._merge_source("fields", current, self._local_fields, default_fields)
        if items is None:
            items = self._merge_source("items", current, self._local_items, default_items)

        document = SyncDocument(fields=list(fields), items=list(items), last_updated=utc_now_iso())
        self.remote.push(document)
        self.store.set_json(LAST_SYNC_KEY, document.last_updated)
        return document

    # ---------- connection management ----------

    def local_snapshot(self) -> SyncDocument:
        return SyncDocument(
            fields=self._local_fields() or default_fields(),
            items=self._local_items() or default_items(),
            last_updated=utc_now_iso(),
        )

    def test_connectivity(self) -> ConnectivityResult:
        """Test the remote, bootstrapping it with the local catalog if empty."""
        return self.remote.test_connectivity(bootstrap=self.local_snapshot())

    def connect(self, endpoint: str, credential: str) -> ConnectivityResult:
        """Configure the remote, test it and push the local catalog.

        A failed test disconnects again so the configuration is not kept.

        Raises:
            ConfigurationInvalid: If the endpoint or credential is malformed.
        """
        self.remote.configure(endpoint, credential)
        result = self.test_connectivity()
        if not result.ok:
            self.remote.disconnect()
            return result

        try:
            self.push_merged()
        except WriteFailure as e:
            logger.warning(f"Initial sync after connect failed: {e}")
            return ConnectivityResult(False, f"Connected, but initial sync failed: {e}")
        return result

    def disconnect(self) -> None:
        self.remote.disconnect()

    def sync_status(self) -> Dict[str, Any]:
        status = self.remote.status()
        try:
            status["last_sync_time"] = self.store.get_json(LAST_SYNC_KEY)
        except MalformedLocalData:
            status["last_sync_time"] = None
        return status
