"""Static token provider.

Uses a bearer token issued elsewhere (for example by an admin script). It
cannot renew the token: once it expires the operator must sign in again with
a fresh one.
"""

from datetime import datetime
from typing import List, Optional

from spvm.core.exceptions import CredentialAcquisitionError, CredentialExpiredError
from spvm.platform.auth._base import Credential, CredentialProvider
from spvm.schemas.console import AccountInfo


class StaticTokenProvider(CredentialProvider):
    """Provider backed by a pre-issued access token."""

    def __init__(
        self,
        access_token: Optional[str],
        account: Optional[AccountInfo] = None,
        expires_at: Optional[datetime] = None,
    ):
        """Initialize the provider.

        Args:
            access_token: The pre-issued bearer token
            account: Account the token belongs to
            expires_at: Token expiry, if known
        """
        self._access_token = access_token
        self._account = account or AccountInfo(username="static-token")
        self._expires_at = expires_at
        self._signed_out = False

    def _credential(self) -> Credential:
        return Credential(
            account=self._account,
            access_token=self._access_token,
            expires_at=self._expires_at,
        )

    async def acquire_interactive(self, scopes: List[str]) -> Credential:
        """Hand out the configured token."""
        if not self._access_token:
            raise CredentialAcquisitionError("No static access token configured")
        self._signed_out = False
        return self._credential()

    async def acquire_silent(self, account: AccountInfo, scopes: List[str]) -> Credential:
        """Hand out the configured token again if it is still valid."""
        credential = self._credential()
        if self._signed_out or not self._access_token or credential.is_expired():
            raise CredentialExpiredError("Static access token expired; sign in again")
        return credential

    async def sign_out(self, account: AccountInfo) -> None:
        """Stop handing out the token until the next interactive sign-in."""
        self._signed_out = True
