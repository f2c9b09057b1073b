"""OAuth2 device-code provider for the Microsoft identity platform.

Interactive sign-in uses the device authorization grant: the console shows
the operator a code and a verification URL, then polls the token endpoint
until the operator completes the sign-in in any browser. Silent renewal uses
the refresh-token grant; refresh tokens rotate and are kept in memory only.

Reference:
  https://learn.microsoft.com/en-us/entra/identity-platform/v2-oauth2-device-code
"""

import asyncio
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional

import httpx
import jwt

from spvm.core.config import settings
from spvm.core.exceptions import (
    CredentialAcquisitionError,
    CredentialExpiredError,
    InteractionInProgressError,
    PopupBlockedError,
    UserCancelledError,
)
from spvm.core.logging import ContextualLogger
from spvm.core.logging import logger as default_logger
from spvm.platform.auth._base import Credential, CredentialProvider
from spvm.schemas.console import AccountInfo

DEVICE_CODE_GRANT = "urn:ietf:params:oauth:grant-type:device_code"


def _decode_id_token_claims(id_token: Optional[str]) -> Dict[str, Any]:
    """Read the claims of an ID token without verifying it.

    The token comes straight from the token endpoint over TLS and is only used
    to label the account.
    """
    if not id_token:
        return {}
    try:
        return jwt.decode(id_token, options={"verify_signature": False})
    except jwt.PyJWTError:
        return {}


class DeviceCodeProvider(CredentialProvider):
    """Credential provider using the device authorization grant."""

    def __init__(
        self,
        client_id: str,
        tenant_id: Optional[str] = None,
        authority: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        logger: Optional[ContextualLogger] = None,
    ):
        """Initialize the provider.

        Args:
            client_id: Application (client) ID
            tenant_id: Directory tenant (defaults to settings)
            authority: Identity platform base URL (defaults to settings)
            transport: Optional httpx transport (used by tests)
            logger: Optional contextual logger
        """
        self.client_id = client_id
        self.tenant_id = tenant_id or settings.AUTH_TENANT_ID
        self.authority = (authority or settings.AUTH_AUTHORITY).rstrip("/")
        self._transport = transport
        self.logger = logger or default_logger.with_context(component="device_code_auth")

        self._refresh_tokens: Dict[str, str] = {}
        self._pending_message: Optional[str] = None
        self._interaction_in_progress = False

    @property
    def pending_message(self) -> Optional[str]:
        """Instructions shown to the operator while a sign-in is pending."""
        return self._pending_message

    def _endpoint(self, name: str) -> str:
        return f"{self.authority}/{self.tenant_id}/oauth2/v2.0/{name}"

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=settings.HTTP_TIMEOUT_SECONDS, transport=self._transport)

    def _credential_from_response(self, data: Dict[str, Any]) -> Credential:
        claims = _decode_id_token_claims(data.get("id_token"))
        tenant_id = claims.get("tid")
        object_id = claims.get("oid")
        account = AccountInfo(
            username=claims.get("preferred_username") or claims.get("upn"),
            tenant_id=tenant_id,
            home_account_id=f"{object_id}.{tenant_id}" if object_id else None,
        )

        refresh_token = data.get("refresh_token")
        if refresh_token:
            self._refresh_tokens[self._account_key(account)] = refresh_token

        expires_in = int(data.get("expires_in", 3600))
        return Credential(
            account=account,
            access_token=data["access_token"],
            expires_at=datetime.now(timezone.utc) + timedelta(seconds=expires_in),
        )

    @staticmethod
    def _account_key(account: AccountInfo) -> str:
        return account.home_account_id or account.username or "default"

    async def acquire_interactive(self, scopes: List[str]) -> Credential:
        """Run the device-code sign-in and wait for the operator to finish it."""
        if self._interaction_in_progress:
            raise InteractionInProgressError("A sign-in is already waiting for the operator")

        self._interaction_in_progress = True
        try:
            async with self._client() as client:
                flow = await self._start_flow(client, scopes)
                return await self._poll_for_token(client, flow)
        finally:
            self._interaction_in_progress = False
            self._pending_message = None

    async def _start_flow(self, client: httpx.AsyncClient, scopes: List[str]) -> Dict[str, Any]:
        scope = " ".join(["openid", "profile", *scopes])
        try:
            response = await client.post(
                self._endpoint("devicecode"),
                data={"client_id": self.client_id, "scope": scope},
            )
        except httpx.HTTPError as e:
            raise PopupBlockedError(f"Could not start the sign-in: {e}") from e

        if response.status_code != 200:
            raise PopupBlockedError(
                f"Could not start the sign-in: HTTP {response.status_code} {response.text}"
            )

        flow = response.json()
        self._pending_message = flow.get("message") or (
            f"Open {flow.get('verification_uri')} and enter the code {flow.get('user_code')}"
        )
        self.logger.warning(self._pending_message)
        return flow

    async def _poll_for_token(self, client: httpx.AsyncClient, flow: Dict[str, Any]) -> Credential:
        interval = float(flow.get("interval", 5))
        deadline = asyncio.get_running_loop().time() + float(flow.get("expires_in", 900))

        while asyncio.get_running_loop().time() < deadline:
            await asyncio.sleep(interval)
            response = await client.post(
                self._endpoint("token"),
                data={
                    "grant_type": DEVICE_CODE_GRANT,
                    "client_id": self.client_id,
                    "device_code": flow["device_code"],
                },
            )
            if response.status_code == 200:
                credential = self._credential_from_response(response.json())
                self.logger.info(f"Signed in as {credential.account.username}")
                return credential

            try:
                error = response.json().get("error", "")
            except ValueError:
                error = ""
            if error == "authorization_pending":
                continue
            if error == "slow_down":
                interval += 5
                continue
            if error in ("authorization_declined", "bad_verification_code"):
                raise UserCancelledError("The sign-in was declined")
            if error == "expired_token":
                raise UserCancelledError("The sign-in code expired before it was used")
            raise CredentialAcquisitionError(f"Sign-in failed: {error or response.status_code}")

        raise UserCancelledError("The sign-in code expired before it was used")

    async def acquire_silent(self, account: AccountInfo, scopes: List[str]) -> Credential:
        """Redeem the cached refresh token for a new access token."""
        refresh_token = self._refresh_tokens.get(self._account_key(account))
        if not refresh_token:
            raise CredentialExpiredError("No cached session for this account; sign in again")

        try:
            async with self._client() as client:
                response = await client.post(
                    self._endpoint("token"),
                    data={
                        "grant_type": "refresh_token",
                        "client_id": self.client_id,
                        "refresh_token": refresh_token,
                        "scope": " ".join(scopes),
                    },
                )
        except httpx.HTTPError as e:
            raise CredentialExpiredError(f"Token refresh failed: {e}") from e

        if response.status_code != 200:
            self._refresh_tokens.pop(self._account_key(account), None)
            raise CredentialExpiredError(f"Token refresh failed: HTTP {response.status_code}")

        data = response.json()
        # Responses to refresh requests may omit the ID token; keep the known account.
        if not data.get("id_token"):
            if data.get("refresh_token"):
                self._refresh_tokens[self._account_key(account)] = data["refresh_token"]
            return Credential(
                account=account,
                access_token=data["access_token"],
                expires_at=datetime.now(timezone.utc)
                + timedelta(seconds=int(data.get("expires_in", 3600))),
            )
        return self._credential_from_response(data)

    async def sign_out(self, account: AccountInfo) -> None:
        """Drop the cached refresh token."""
        self._refresh_tokens.pop(self._account_key(account), None)
