"""Storage backend for persisted console state.

Provides a small abstract key-value interface over JSON documents and a
filesystem implementation. All methods are async-first to work well with
FastAPI.

Usage:
    from spvm.platform.storage import get_storage_backend

    backend = get_storage_backend()
    await backend.write_json("console/config.json", {"key": "value"})
    data = await backend.read_json("console/config.json")
"""

import json
import os
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict, Union

from spvm.core.logging import logger
from spvm.platform.storage.exceptions import StorageException, StorageNotFoundError


class StorageBackend(ABC):
    """Abstract storage backend interface.

    All paths are relative strings (e.g., "console/reports.json").
    Implementations handle the actual storage location.
    """

    @abstractmethod
    async def write_json(self, path: str, data: Dict[str, Any]) -> None:
        """Write JSON data to storage.

        Args:
            path: Relative path (e.g., "console/config.json")
            data: Dict to serialize as JSON
        """
        pass

    @abstractmethod
    async def read_json(self, path: str) -> Dict[str, Any]:
        """Read JSON data from storage.

        Args:
            path: Relative path

        Returns:
            Deserialized dict

        Raises:
            StorageNotFoundError: If path doesn't exist
        """
        pass

    @abstractmethod
    async def delete(self, path: str) -> bool:
        """Delete a document.

        Returns:
            True if deleted, False if it didn't exist
        """
        pass


class FilesystemBackend(StorageBackend):
    """Filesystem-based storage backend.

    Writes go to a temporary sibling file first and are moved into place, so a
    crash never leaves a half-written document behind.
    """

    def __init__(self, base_path: Union[str, Path]):
        """Initialize filesystem backend.

        Args:
            base_path: Root directory for all storage operations
        """
        self.base_path = Path(base_path)
        self.base_path.mkdir(parents=True, exist_ok=True)
        logger.debug(f"FilesystemBackend initialized at {self.base_path}")

    def _resolve(self, path: str) -> Path:
        """Resolve relative path to absolute."""
        normalized = path.replace("/", os.sep)
        return self.base_path / normalized

    async def write_json(self, path: str, data: Dict[str, Any]) -> None:
        """Write JSON to filesystem."""
        full_path = self._resolve(path)
        full_path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = full_path.with_name(full_path.name + ".tmp")

        try:
            with open(tmp_path, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2, default=str)
            os.replace(tmp_path, full_path)
        except Exception as e:
            raise StorageException(f"Failed to write JSON to {path}: {e}") from e

    async def read_json(self, path: str) -> Dict[str, Any]:
        """Read JSON from filesystem."""
        full_path = self._resolve(path)

        if not full_path.exists():
            raise StorageNotFoundError(f"Path not found: {path}")

        try:
            with open(full_path, "r", encoding="utf-8") as f:
                return json.load(f)
        except json.JSONDecodeError as e:
            raise StorageException(f"Invalid JSON at {path}: {e}") from e
        except Exception as e:
            raise StorageException(f"Failed to read JSON from {path}: {e}") from e

    async def delete(self, path: str) -> bool:
        """Delete a document from the filesystem."""
        full_path = self._resolve(path)

        if not full_path.exists():
            return False

        try:
            full_path.unlink()
            return True
        except Exception as e:
            logger.error(f"Failed to delete {path}: {e}")
            return False
