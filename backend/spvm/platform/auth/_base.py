"""Credential provider interface.

The batch never talks to an identity vendor directly; it asks a
``TokenManager`` for a bearer token, and the token manager asks a
``CredentialProvider``. Providers differ only in how a token is obtained.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import List, Optional

from spvm.schemas.console import AccountInfo


def sharepoint_scopes(tenant_address: str) -> List[str]:
    """Delegated scopes needed to manage libraries on a SharePoint tenant.

    Args:
        tenant_address: Tenant root URL, e.g. ``https://contoso.sharepoint.com``
    """
    return [f"{tenant_address.rstrip('/')}/AllSites.FullControl", "offline_access"]


@dataclass
class Credential:
    """A bearer token and the account it was issued for."""

    account: AccountInfo
    access_token: str
    expires_at: Optional[datetime] = None

    def is_expired(self, margin_seconds: int = 0) -> bool:
        """Whether the token is expired, or will be within ``margin_seconds``."""
        if self.expires_at is None:
            return False
        now = datetime.now(timezone.utc)
        return now + timedelta(seconds=margin_seconds) >= self.expires_at


class CredentialProvider(ABC):
    """Source of bearer credentials for the console."""

    @abstractmethod
    async def acquire_interactive(self, scopes: List[str]) -> Credential:
        """Sign the operator in.

        Raises:
            UserCancelledError: The operator declined or abandoned the sign-in
            PopupBlockedError: The interactive sign-in could not be opened
            InteractionInProgressError: Another sign-in is already pending
        """
        pass

    @abstractmethod
    async def acquire_silent(self, account: AccountInfo, scopes: List[str]) -> Credential:
        """Renew a token without operator interaction.

        Raises:
            CredentialExpiredError: The session cannot be renewed silently
        """
        pass

    @abstractmethod
    async def sign_out(self, account: AccountInfo) -> None:
        """Forget everything cached for ``account``."""
        pass

    @property
    def pending_message(self) -> Optional[str]:
        """Instructions for a sign-in waiting on the operator, if any."""
        return None
