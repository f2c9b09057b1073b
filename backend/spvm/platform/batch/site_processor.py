"""Site processor: applies the version policy to every library of one site."""

from typing import Awaitable, Callable, List, Optional, Tuple

import httpx

from spvm.core.exceptions import CredentialExpiredError, LibraryUpdateError, SiteUnreachableError
from spvm.core.logging import ContextualLogger
from spvm.core.logging import logger as default_logger
from spvm.platform.auth.token_manager import TokenManager
from spvm.platform.connectors.sharepoint import (
    ConnectorResponse,
    SharePointConnector,
    describe_status,
)
from spvm.schemas.batch import SESSION_EXPIRED, SiteResult
from spvm.schemas.policy import VersionPolicy
from spvm.schemas.site import LibraryRef, SiteMetadata

ConnectorCall = Callable[[str], Awaitable[ConnectorResponse]]


class SiteProcessor:
    """Brings one site's document libraries in line with a version policy.

    ``process_site`` never raises: discovery failures, library failures and
    expired sessions all end up in the returned ``SiteResult``.
    """

    def __init__(self, connector: SharePointConnector, logger: Optional[ContextualLogger] = None):
        """Initialize the processor.

        Args:
            connector: SharePoint connector used for every remote call
            logger: Default logger when ``process_site`` is not given one
        """
        self.connector = connector
        self.logger = logger or default_logger.with_context(component="site_processor")

    async def process_site(
        self,
        site: str,
        token_manager: TokenManager,
        policy: VersionPolicy,
        logger: Optional[ContextualLogger] = None,
    ) -> SiteResult:
        """Configure every document library of ``site``.

        Args:
            site: Site address
            token_manager: Credential handle
            policy: Version policy to apply
            logger: Logger for this run (defaults to the processor's)

        Returns:
            The site's result
        """
        log = (logger or self.logger).with_context(site=site)
        log.info(f"Connecting to site: {site}")

        try:
            await token_manager.get_valid_token()
        except CredentialExpiredError:
            log.error(f"Session expired before processing {site}")
            return SiteResult.failure(site, SESSION_EXPIRED)

        try:
            try:
                metadata, libraries = await self._discover(site, token_manager, log)
            except SiteUnreachableError as e:
                log.error(f"Could not reach site {site}: {e.reason}")
                return SiteResult.failure(site, f"site unreachable: {e.reason}")
            except CredentialExpiredError:
                log.error(f"Session expired while reading {site}")
                return SiteResult.failure(site, SESSION_EXPIRED)

            log.info(
                f"Found {len(libraries)} document libraries"
                + (f" in '{metadata.title}'" if metadata.title else "")
            )

            configured = 0
            failed = 0
            for library in libraries:
                try:
                    await self._update_library(site, token_manager, library, policy, log)
                except LibraryUpdateError as e:
                    failed += 1
                    log.error(f"Library '{library.display_name}' failed: {e.reason}")
                else:
                    configured += 1
                    log.success(f"Library '{library.display_name}' configured")

            log.info(f"Disconnected from site: {site}")
            return SiteResult.from_counts(site, configured, failed)

        except Exception as e:
            log.exception(f"Unexpected error while processing {site}: {e}")
            return SiteResult.failure(site, f"unexpected error: {e}")

    async def _call_with_reauth(
        self, token_manager: TokenManager, call: ConnectorCall, log: ContextualLogger
    ) -> ConnectorResponse:
        """Run a connector call, refreshing the token once after a 401.

        Raises:
            CredentialExpiredError: The refresh after a 401 failed
        """
        token = await token_manager.get_valid_token()
        response = await call(token)
        if response.status_code == 401:
            log.warning("Got 401 Unauthorized from SharePoint, refreshing token...")
            token = await token_manager.refresh_on_unauthorized()
            response = await call(token)
        return response

    async def _discover(
        self, site: str, token_manager: TokenManager, log: ContextualLogger
    ) -> Tuple[SiteMetadata, List[LibraryRef]]:
        """Read the site and list its document libraries.

        Raises:
            SiteUnreachableError: The site could not be read
            CredentialExpiredError: The session could not be renewed
        """
        try:
            response = await self._call_with_reauth(
                token_manager,
                lambda token: self.connector.get_site_metadata(site, token),
                log,
            )
            if not response.status_ok:
                raise SiteUnreachableError(
                    site, describe_status(response.status_code), response.status_code
                )
            metadata = SiteMetadata.from_api(
                response.body if isinstance(response.body, dict) else {}
            )

            response = await self._call_with_reauth(
                token_manager,
                lambda token: self.connector.list_document_libraries(site, token),
                log,
            )
        except httpx.HTTPError as e:
            raise SiteUnreachableError(site, str(e) or type(e).__name__) from e

        if not response.status_ok:
            raise SiteUnreachableError(
                site, describe_status(response.status_code), response.status_code
            )
        if not isinstance(response.body, dict) or not isinstance(response.body.get("value"), list):
            raise SiteUnreachableError(site, "unexpected library listing response")

        return metadata, [LibraryRef.from_api(item) for item in response.body["value"]]

    async def _update_library(
        self,
        site: str,
        token_manager: TokenManager,
        library: LibraryRef,
        policy: VersionPolicy,
        log: ContextualLogger,
    ) -> None:
        """Apply ``policy`` to one library.

        Raises:
            LibraryUpdateError: The update was not accepted
        """
        try:
            response = await self._call_with_reauth(
                token_manager,
                lambda token: self.connector.update_library_versioning(
                    site, token, library.id, policy
                ),
                log,
            )
        except CredentialExpiredError as e:
            raise LibraryUpdateError(library.display_name, SESSION_EXPIRED) from e
        except httpx.HTTPError as e:
            raise LibraryUpdateError(library.display_name, str(e) or type(e).__name__) from e

        if not response.status_ok:
            raise LibraryUpdateError(
                library.display_name, describe_status(response.status_code), response.status_code
            )
