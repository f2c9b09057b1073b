"""Storage exceptions for the versioning console.

All storage-related exceptions inherit from StorageException.
"""


class StorageException(Exception):
    """Base exception for storage operations."""

    pass


class StorageNotFoundError(StorageException):
    """Raised when a requested item is not found in storage."""

    pass
