"""Storage-layer exceptions."""


class StorageError(Exception):
    """Base class for catalog and blob storage failures."""


class PersistenceError(StorageError):
    """The catalog document could not be read or written."""


class CatalogReadError(PersistenceError):
    """Raised when the catalog document exists but cannot be loaded."""


class CatalogWriteError(PersistenceError):
    """Raised when the full catalog could not be durably written."""


class BlobError(StorageError):
    """Raw video bytes could not be stored, listed, or deleted."""


class BlobStoreError(BlobError):
    """Raised when bytes could not be stored or listed."""


class BlobDeleteError(BlobError):
    """Raised when a stored object could not be removed."""
