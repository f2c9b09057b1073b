"""Storage integration module for the versioning console."""

from spvm.core.config import settings
from spvm.platform.storage.backend import FilesystemBackend, StorageBackend
from spvm.platform.storage.console_store import ConsoleStore
from spvm.platform.storage.exceptions import StorageException, StorageNotFoundError
from spvm.platform.storage.report_store import ReportStore

__all__ = [
    "ConsoleStore",
    "FilesystemBackend",
    "ReportStore",
    "StorageBackend",
    "StorageException",
    "StorageNotFoundError",
    "get_storage_backend",
]


def get_storage_backend() -> StorageBackend:
    """Factory function to get the storage backend for the current environment."""
    if settings.ENVIRONMENT in ["local", "test", "prd"]:
        return FilesystemBackend(base_path=settings.STORAGE_PATH)
    raise ValueError(f"Unsupported environment for storage backend: {settings.ENVIRONMENT}")
