"""Local storage errors."""


class StorageError(Exception):
    """Raised when a storage key cannot be read or written."""
