"""Unit test conftest for setting up test environment."""

import os
import tempfile

# Set environment variables before importing any spvm modules so the
# Settings singleton is built for tests.
os.environ.setdefault("SPVM_ENVIRONMENT", "test")
os.environ.setdefault("SPVM_STORAGE_PATH", tempfile.mkdtemp(prefix="spvm-test-"))
os.environ.setdefault("SPVM_AUTH_PROVIDER", "static")
os.environ.setdefault("SPVM_STATIC_ACCESS_TOKEN", "test-access-token")
os.environ.setdefault("SPVM_INTER_SITE_DELAY_SECONDS", "0")
os.environ.setdefault("SPVM_LOG_LEVEL", "DEBUG")

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402

from spvm.platform.auth import StaticTokenProvider, TokenManager  # noqa: E402
from spvm.platform.storage import FilesystemBackend  # noqa: E402
from spvm.schemas import AccountInfo, VersionPolicy  # noqa: E402

TENANT = "https://contoso.sharepoint.com"


@pytest.fixture
def storage_backend(tmp_path):
    """Filesystem backend rooted in a per-test directory."""
    return FilesystemBackend(base_path=tmp_path)


@pytest.fixture
def policy():
    """The default retention policy (3 major, 1 minor)."""
    return VersionPolicy(major_version_limit=3, minor_version_limit=1)


@pytest.fixture
def static_provider():
    """Static provider handing out a fixed token."""
    return StaticTokenProvider("test-access-token", account=AccountInfo(username="admin@contoso"))


@pytest_asyncio.fixture
async def signed_in_token_manager(static_provider):
    """Token manager that already holds a credential."""
    manager = TokenManager(static_provider, scopes=["scope"])
    await manager.login()
    return manager
