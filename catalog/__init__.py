"""TV catalog core: comparison engine and local/cloud data layer."""

__version__ = "0.1.0"

# Re-export main components for convenient imports
from catalog.comparison import (
    best_item_for_field,
    classify_value,
    compare_items,
    field_differs,
)
from catalog.data_access import CatalogData, DataAccess, SaveResult
from catalog.local_store import LocalStore
from catalog.models import (
    ComparableField,
    ComparableItem,
    ComparisonRule,
    FieldType,
    Selection,
    SyncDocument,
)
from catalog.remote_sync import ConnectionState, RemoteSyncAdapter

__all__ = [
    # Version
    "__version__",
    # Models
    "ComparableField",
    "ComparableItem",
    "ComparisonRule",
    "FieldType",
    "Selection",
    "SyncDocument",
    # Comparison engine
    "best_item_for_field",
    "field_differs",
    "classify_value",
    "compare_items",
    # Data layer
    "LocalStore",
    "RemoteSyncAdapter",
    "ConnectionState",
    "DataAccess",
    "CatalogData",
    "SaveResult",
]
