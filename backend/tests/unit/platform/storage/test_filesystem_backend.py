"""Tests for the filesystem storage backend."""

import pytest

from spvm.platform.storage import StorageException, StorageNotFoundError


@pytest.mark.asyncio
async def test_write_then_read(storage_backend, tmp_path):
    """Test JSON documents are written under the base path."""
    await storage_backend.write_json("console/config.json", {"tenant_address": "x"})

    assert (tmp_path / "console" / "config.json").exists()
    assert not (tmp_path / "console" / "config.json.tmp").exists()
    assert await storage_backend.read_json("console/config.json") == {"tenant_address": "x"}


@pytest.mark.asyncio
async def test_read_missing_document(storage_backend):
    """Test that a missing document raises StorageNotFoundError."""
    with pytest.raises(StorageNotFoundError):
        await storage_backend.read_json("console/missing.json")


@pytest.mark.asyncio
async def test_read_corrupt_document(storage_backend, tmp_path):
    """Test that invalid JSON raises StorageException."""
    (tmp_path / "broken.json").write_text("{not json", encoding="utf-8")

    with pytest.raises(StorageException):
        await storage_backend.read_json("broken.json")


@pytest.mark.asyncio
async def test_delete(storage_backend, tmp_path):
    """Test delete reports whether something was removed."""
    await storage_backend.write_json("a.json", {})

    assert await storage_backend.delete("a.json") is True
    assert await storage_backend.delete("a.json") is False
    assert not (tmp_path / "a.json").exists()
