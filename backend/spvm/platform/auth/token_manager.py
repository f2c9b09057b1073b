"""Token manager: the credential handle passed into a batch."""

from typing import List, Optional

from spvm.core.config import settings
from spvm.core.exceptions import CredentialExpiredError
from spvm.core.logging import ContextualLogger
from spvm.core.logging import logger as default_logger
from spvm.platform.auth._base import Credential, CredentialProvider
from spvm.schemas.console import AccountInfo


class TokenManager:
    """Holds the current credential and keeps it fresh.

    Tokens are refreshed silently when they are expired or within
    ``TOKEN_REFRESH_MARGIN_SECONDS`` of expiring, and on demand after a 401.
    A failed refresh leaves the manager without a credential usable for the
    next call, but does not sign the operator out.
    """

    def __init__(
        self,
        provider: CredentialProvider,
        scopes: Optional[List[str]] = None,
        credential: Optional[Credential] = None,
        refresh_margin_seconds: Optional[int] = None,
        logger: Optional[ContextualLogger] = None,
    ):
        """Initialize the token manager.

        Args:
            provider: Credential provider used to sign in and refresh
            scopes: Scopes requested from the provider
            credential: Already acquired credential, if any
            refresh_margin_seconds: Refresh this long before expiry (defaults to settings)
            logger: Optional contextual logger
        """
        self.provider = provider
        self.scopes = list(scopes or [])
        self._credential = credential
        self.refresh_margin_seconds = (
            settings.TOKEN_REFRESH_MARGIN_SECONDS
            if refresh_margin_seconds is None
            else refresh_margin_seconds
        )
        self.logger = logger or default_logger.with_context(component="token_manager")

    @property
    def has_credential(self) -> bool:
        """Whether the operator is signed in."""
        return self._credential is not None

    @property
    def account(self) -> Optional[AccountInfo]:
        """The signed-in account, if any."""
        return self._credential.account if self._credential else None

    async def login(self, scopes: Optional[List[str]] = None) -> AccountInfo:
        """Sign in interactively and keep the resulting credential."""
        if scopes is not None:
            self.scopes = list(scopes)
        self._credential = await self.provider.acquire_interactive(self.scopes)
        return self._credential.account

    async def restore(self, account: AccountInfo) -> bool:
        """Try to resume a saved session without operator interaction.

        Returns:
            True if a credential was obtained silently
        """
        try:
            self._credential = await self.provider.acquire_silent(account, self.scopes)
        except CredentialExpiredError:
            self.logger.info(f"Saved session for {account.username} could not be resumed")
            return False
        return True

    async def logout(self) -> None:
        """Sign out and forget the credential."""
        if self._credential is not None:
            await self.provider.sign_out(self._credential.account)
        self._credential = None

    async def get_valid_token(self) -> str:
        """Return a bearer token, refreshing it first if needed.

        Raises:
            CredentialExpiredError: Not signed in, or the refresh failed
        """
        if self._credential is None:
            raise CredentialExpiredError("Not signed in")
        if self._credential.is_expired(self.refresh_margin_seconds):
            await self._refresh()
        return self._credential.access_token

    async def refresh_on_unauthorized(self) -> str:
        """Force a refresh after the service rejected the current token.

        Raises:
            CredentialExpiredError: Not signed in, or the refresh failed
        """
        if self._credential is None:
            raise CredentialExpiredError("Not signed in")
        await self._refresh()
        return self._credential.access_token

    async def _refresh(self) -> None:
        self.logger.debug("Refreshing access token")
        try:
            self._credential = await self.provider.acquire_silent(
                self._credential.account, self.scopes
            )
        except CredentialExpiredError:
            self.logger.warning("Silent token refresh failed")
            raise
