"""Tests for the token manager."""

from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock

import pytest

from spvm.core.exceptions import CredentialExpiredError
from spvm.platform.auth import Credential, TokenManager
from spvm.schemas import AccountInfo

ACCOUNT = AccountInfo(username="admin@contoso.com")


def _credential(token: str, expires_in_seconds: int) -> Credential:
    return Credential(
        account=ACCOUNT,
        access_token=token,
        expires_at=datetime.now(timezone.utc) + timedelta(seconds=expires_in_seconds),
    )


@pytest.fixture
def provider():
    """Mock credential provider."""
    mock = AsyncMock()
    mock.pending_message = None
    return mock


@pytest.mark.asyncio
async def test_not_signed_in(provider):
    """Test that asking for a token before sign-in fails."""
    manager = TokenManager(provider)

    assert manager.has_credential is False
    with pytest.raises(CredentialExpiredError):
        await manager.get_valid_token()


@pytest.mark.asyncio
async def test_login_and_fresh_token(provider):
    """Test that a fresh token is handed out without refreshing."""
    provider.acquire_interactive.return_value = _credential("t1", 3600)
    manager = TokenManager(provider, refresh_margin_seconds=300)

    account = await manager.login(["scope-a"])

    assert account == ACCOUNT
    assert await manager.get_valid_token() == "t1"
    provider.acquire_interactive.assert_awaited_once_with(["scope-a"])
    provider.acquire_silent.assert_not_called()


@pytest.mark.asyncio
async def test_refreshes_within_margin(provider):
    """Test that a token close to expiry is renewed silently."""
    provider.acquire_silent.return_value = _credential("t2", 3600)
    manager = TokenManager(
        provider, scopes=["scope"], credential=_credential("t1", 60), refresh_margin_seconds=300
    )

    assert await manager.get_valid_token() == "t2"
    provider.acquire_silent.assert_awaited_once_with(ACCOUNT, ["scope"])


@pytest.mark.asyncio
async def test_failed_refresh_keeps_operator_signed_in(provider):
    """Test that a failed refresh raises but does not sign the operator out."""
    provider.acquire_silent.side_effect = CredentialExpiredError("expired")
    manager = TokenManager(provider, credential=_credential("t1", -10))

    with pytest.raises(CredentialExpiredError):
        await manager.get_valid_token()
    assert manager.has_credential is True


@pytest.mark.asyncio
async def test_refresh_on_unauthorized(provider):
    """Test the forced refresh after a 401."""
    provider.acquire_silent.return_value = _credential("t2", 3600)
    manager = TokenManager(provider, credential=_credential("t1", 3600))

    assert await manager.refresh_on_unauthorized() == "t2"


@pytest.mark.asyncio
async def test_restore(provider):
    """Test resuming a saved session, successfully or not."""
    provider.acquire_silent.return_value = _credential("t1", 3600)
    manager = TokenManager(provider)
    assert await manager.restore(ACCOUNT) is True
    assert manager.account == ACCOUNT

    provider.acquire_silent.side_effect = CredentialExpiredError("gone")
    other = TokenManager(provider)
    assert await other.restore(ACCOUNT) is False
    assert other.has_credential is False


@pytest.mark.asyncio
async def test_logout(provider):
    """Test that logout signs out at the provider and forgets the credential."""
    manager = TokenManager(provider, credential=_credential("t1", 3600))

    await manager.logout()

    provider.sign_out.assert_awaited_once_with(ACCOUNT)
    assert manager.has_credential is False
