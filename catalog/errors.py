"""Error taxonomy for the catalog core.

Read-path errors (connectivity, malformed cache) are caught inside the
data layer and degrade to the local cache or the seed defaults. Write-path
errors propagate to the caller.
"""

__all__ = [
    "CatalogError",
    "ValidationError",
    "ConfigurationInvalid",
    "ConnectivityFailure",
    "SchemaMissing",
    "WriteFailure",
    "MalformedLocalData",
    "MalformedDocument",
    "LocalWriteError",
    "SelectionFull",
]


class CatalogError(Exception):
    """Base class for all catalog errors."""
    pass


class ValidationError(CatalogError, ValueError):
    """A field, item or spec value does not match its declared shape."""
    pass


class ConfigurationInvalid(CatalogError, ValueError):
    """Remote endpoint or credential rejected before anything is persisted."""
    pass


class ConnectivityFailure(CatalogError):
    """Remote backend could not be reached or answered with an error."""
    pass


class WriteFailure(CatalogError):
    """A push to the remote backend was not durably stored."""
    pass


class SchemaMissing(ConnectivityFailure, WriteFailure):
    """The remote table has not been provisioned."""

    def __init__(self, message: str = 'Table "app_data" does not exist. Run the SQL setup script.'):
        super().__init__(message)


class MalformedLocalData(CatalogError):
    """The local cache holds JSON that cannot be parsed."""
    pass


class MalformedDocument(CatalogError, ValueError):
    """A sync document payload does not have the expected structure."""
    pass


class LocalWriteError(CatalogError):
    """Writing to the local cache failed."""
    pass


class SelectionFull(CatalogError):
    """A comparison selection already holds the maximum number of items."""

    def __init__(self, limit: int):
        super().__init__(f"You can compare at most {limit} models")
        self.limit = limit
