"""SharePoint REST connector.

Performs single calls against a site's REST endpoint:
 - read the site metadata
 - list the site's document libraries
 - update one library's versioning settings

Reference:
  https://learn.microsoft.com/en-us/sharepoint/dev/sp-add-ins/working-with-lists-and-list-items-with-rest
"""

from dataclasses import dataclass
from typing import Any, Dict, Literal, Optional

import httpx
from tenacity import retry, stop_after_attempt

from spvm.core.config import settings
from spvm.core.logging import ContextualLogger
from spvm.core.logging import logger as default_logger
from spvm.platform.connectors.retry_helpers import (
    THROTTLING_STATUS_CODES,
    retry_if_rate_limit_or_timeout,
    wait_rate_limit_with_backoff,
)
from spvm.schemas.policy import VersionPolicy

ODATA_JSON = "application/json;odata=nometadata"
DOCUMENT_LIBRARY_TEMPLATE = 101

STATUS_DESCRIPTIONS = {
    401: "unauthorized, the access token was rejected",
    403: "forbidden, the account needs Full Control on the site (AllSites.FullControl)",
    404: "not found",
    429: "throttled by SharePoint",
    503: "SharePoint is too busy, throttled",
}


def describe_status(status_code: int) -> str:
    """Short operator-facing description of an HTTP status."""
    description = STATUS_DESCRIPTIONS.get(status_code)
    if description:
        return f"HTTP {status_code} ({description})"
    return f"HTTP {status_code}"


@dataclass
class ConnectorResponse:
    """Outcome of one remote call."""

    status_ok: bool
    status_code: int
    body: Optional[Any] = None


class SharePointConnector:
    """Issues one REST call per command against a SharePoint site.

    Throttled (429 or 503) and timed-out calls are retried with tenacity; every
    other HTTP status is returned to the caller as a ``ConnectorResponse``.
    Transport failures that survive the retries raise ``httpx.HTTPError``.
    """

    def __init__(
        self,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        timeout: Optional[float] = None,
        logger: Optional[ContextualLogger] = None,
    ):
        """Initialize the connector.

        Args:
            transport: Optional httpx transport (used by tests)
            timeout: Request timeout in seconds (defaults to settings)
            logger: Optional contextual logger
        """
        self._transport = transport
        self.timeout = timeout or settings.HTTP_TIMEOUT_SECONDS
        self.logger = logger or default_logger.with_context(component="sharepoint_connector")

    @staticmethod
    def _url(site: str, path: str) -> str:
        return f"{site.rstrip('/')}/{path.lstrip('/')}"

    @retry(
        stop=stop_after_attempt(settings.HTTP_MAX_RETRIES),
        retry=retry_if_rate_limit_or_timeout,
        wait=wait_rate_limit_with_backoff,
        reraise=True,
    )
    async def _send(
        self,
        method: str,
        url: str,
        headers: Dict[str, str],
        body: Optional[Dict[str, Any]] = None,
    ) -> httpx.Response:
        async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
            response = await client.request(method, url, headers=headers, json=body)

        if response.status_code in THROTTLING_STATUS_CODES:
            retry_after = response.headers.get("Retry-After", "?")
            self.logger.warning(f"Throttled at {url}, retrying after {retry_after}s")
            response.raise_for_status()
        return response

    async def call(
        self,
        site: str,
        token: str,
        path: str,
        method: Literal["GET", "PATCH"] = "GET",
        body: Optional[Dict[str, Any]] = None,
    ) -> ConnectorResponse:
        """Perform one authenticated call against a site.

        Args:
            site: Site address
            token: Bearer token
            path: Path relative to the site (e.g. "_api/web")
            method: GET or PATCH
            body: JSON body for PATCH

        Returns:
            ConnectorResponse with the status and the decoded JSON body, if any
        """
        headers = {"Authorization": f"Bearer {token}", "Accept": ODATA_JSON}
        if method == "PATCH":
            headers["Content-Type"] = ODATA_JSON
            headers["IF-MATCH"] = "*"

        url = self._url(site, path)
        try:
            response = await self._send(method, url, headers, body)
        except httpx.HTTPStatusError as e:
            # Retries exhausted on throttling
            return ConnectorResponse(status_ok=False, status_code=e.response.status_code)

        payload = None
        if response.content:
            try:
                payload = response.json()
            except ValueError:
                payload = response.text

        if not response.is_success:
            self.logger.debug(f"{method} {url} -> {response.status_code}")

        return ConnectorResponse(
            status_ok=response.is_success,
            status_code=response.status_code,
            body=payload,
        )

    async def get_site_metadata(self, site: str, token: str) -> ConnectorResponse:
        """Read the site's title and URL."""
        return await self.call(site, token, "_api/web?$select=Title,Url")

    async def list_document_libraries(self, site: str, token: str) -> ConnectorResponse:
        """List the site's visible document libraries."""
        return await self.call(
            site,
            token,
            "_api/web/lists?$filter=BaseTemplate eq "
            f"{DOCUMENT_LIBRARY_TEMPLATE} and Hidden eq false&$select=Id,Title",
        )

    async def update_library_versioning(
        self, site: str, token: str, library_id: str, policy: VersionPolicy
    ) -> ConnectorResponse:
        """Apply a version retention policy to one library."""
        return await self.call(
            site,
            token,
            f"_api/web/lists(guid'{library_id}')",
            method="PATCH",
            body=policy.to_library_patch(),
        )
