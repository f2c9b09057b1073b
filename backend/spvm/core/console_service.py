"""Console service: the operator-facing facade over the batch machinery.

One ``ConsoleService`` owns everything a console session needs (saved
configuration and site list, the credential handle, the operator log,
notifications, the orchestrator and report history) and is created by the
application factory rather than living in a global.
"""

import asyncio
import logging
from typing import List, Optional, Tuple
from uuid import uuid4

from spvm.core.exceptions import (
    BatchAlreadyRunningError,
    ConfirmationRequiredError,
    ConsoleBusyError,
    CredentialAcquisitionError,
    PreconditionError,
)
from spvm.core.export import SITES_EXPORT_FILENAME, report_filename, report_to_csv
from spvm.core.live_log import LiveLog, LiveLogHandler
from spvm.core.logging import logger as default_logger
from spvm.core.notifications import NotificationCenter
from spvm.platform.auth import (
    CredentialProvider,
    TokenManager,
    create_credential_provider,
    sharepoint_scopes,
)
from spvm.platform.batch import BatchOrchestrator, BatchStatePublisher, SiteProcessor
from spvm.platform.connectors import SharePointConnector
from spvm.platform.storage import (
    ConsoleStore,
    ReportStore,
    StorageBackend,
    get_storage_backend,
)
from spvm.schemas.batch import BatchReport, ProcessingStatus
from spvm.schemas.console import (
    AuthStatus,
    ConsoleConfig,
    ConsoleConfigUpdate,
    LogEntry,
    Notification,
)
from spvm.schemas.site import SiteList, SiteValidationResult, build_sample_sites

# How long a login request waits for the provider before answering with the
# pending sign-in instructions.
LOGIN_WAIT_SECONDS = 2.0


def _retrieve_task_exception(task: asyncio.Task) -> None:
    if not task.cancelled():
        task.exception()


class ConsoleService:
    """Operator console for one tenant.

    All mutations of the site list and policy are rejected while a batch is
    running, so a run always sees the snapshot it was started with.
    """

    def __init__(
        self,
        backend: Optional[StorageBackend] = None,
        provider: Optional[CredentialProvider] = None,
        connector: Optional[SharePointConnector] = None,
        inter_site_delay: Optional[float] = None,
        console_id: Optional[str] = None,
    ):
        """Initialize the console.

        Args:
            backend: Storage backend for configuration, sites and reports
            provider: Credential provider (defaults to the one in settings)
            connector: SharePoint connector
            inter_site_delay: Pause between sites in seconds (defaults to settings)
            console_id: Identifier attached to every log record of this console
        """
        self.console_id = console_id or uuid4().hex[:8]
        self.logger = default_logger.with_context(console_id=self.console_id)

        self.live_log = LiveLog()
        self._log_handler = LiveLogHandler(self.live_log, self.console_id)
        logging.getLogger("spvm").addHandler(self._log_handler)

        self.notifications = NotificationCenter()

        backend = backend or get_storage_backend()
        self.console_store = ConsoleStore(backend, logger=self.logger)
        self.report_store = ReportStore(backend, logger=self.logger)

        self.token_manager = TokenManager(
            provider or create_credential_provider(), logger=self.logger
        )
        self.processor = SiteProcessor(connector or SharePointConnector(), logger=self.logger)
        self.publisher = BatchStatePublisher(logger=self.logger, notifications=self.notifications)
        self.orchestrator = BatchOrchestrator(
            self.processor,
            report_store=self.report_store,
            publisher=self.publisher,
            inter_site_delay=inter_site_delay,
            logger=self.logger,
        )

        self.config = ConsoleConfig()
        self.sites: List[str] = []
        self._batch_task: Optional[asyncio.Task] = None
        self._login_task: Optional[asyncio.Task] = None

    # ------------------------------------------------------------------ #
    # Lifecycle
    # ------------------------------------------------------------------ #

    async def load(self) -> None:
        """Load saved state and try to resume the saved session."""
        self.config = await self.console_store.load_config()
        self.sites = await self.console_store.load_sites()

        if self.config.tenant_address:
            self.token_manager.scopes = sharepoint_scopes(self.config.tenant_address)
        if self.config.account_info is not None:
            if await self.token_manager.restore(self.config.account_info):
                self.logger.info(f"Session resumed for {self.config.account_info.username}")
            else:
                self.config = self.config.model_copy(update={"account_info": None})
                await self.console_store.save_config(self.config)

        self.logger.info("System started")

    async def close(self) -> None:
        """Stop any running batch or pending sign-in and detach the log handler."""
        if self._batch_task is not None and not self._batch_task.done():
            self.orchestrator.cancel()
            try:
                await self._batch_task
            except Exception as e:
                self.logger.error(f"Batch ended with an error during shutdown: {e}")
        if self._login_task is not None and not self._login_task.done():
            self._login_task.cancel()
        logging.getLogger("spvm").removeHandler(self._log_handler)

    @property
    def is_processing(self) -> bool:
        """Whether a batch is running (or about to start)."""
        return self._batch_task is not None and not self._batch_task.done()

    def _ensure_idle(self) -> None:
        if self.is_processing:
            raise ConsoleBusyError()

    # ------------------------------------------------------------------ #
    # Configuration
    # ------------------------------------------------------------------ #

    def get_config(self) -> ConsoleConfig:
        """Current configuration."""
        return self.config

    async def save_config(self, update: ConsoleConfigUpdate) -> ConsoleConfig:
        """Apply and persist a configuration change.

        Raises:
            ConsoleBusyError: A batch is running
        """
        self._ensure_idle()

        changes = update.model_dump(exclude_none=True)
        if "tenant_address" in changes:
            changes["tenant_address"] = changes["tenant_address"].strip().rstrip("/")
        config = self.config.model_copy(update=changes)
        config = ConsoleConfig.model_validate(config.model_dump())

        await self.console_store.save_config(config)
        self.config = config
        if config.tenant_address:
            self.token_manager.scopes = sharepoint_scopes(config.tenant_address)

        self.logger.success("Configuration saved")
        self.notifications.success("Configuration saved!")
        return config

    # ------------------------------------------------------------------ #
    # Authentication
    # ------------------------------------------------------------------ #

    def auth_status(self) -> AuthStatus:
        """Whether the operator is signed in, or a sign-in is pending."""
        return AuthStatus(
            authenticated=self.token_manager.has_credential,
            account=self.token_manager.account,
            pending_message=self.token_manager.provider.pending_message,
        )

    async def login(self) -> AuthStatus:
        """Sign in, or sign out when already signed in.

        Interactive providers may need the operator to act elsewhere; if the
        sign-in has not finished within ``LOGIN_WAIT_SECONDS`` the pending
        instructions are returned and the sign-in completes in the background.

        Raises:
            PreconditionError: No tenant address configured
            CredentialAcquisitionError: The sign-in failed
        """
        if self.token_manager.has_credential:
            return await self.logout()
        if not self.config.tenant_address:
            raise PreconditionError("Configure the tenant address first", redirect_to="config")

        if self._login_task is None or self._login_task.done():
            self._login_task = asyncio.create_task(self._login())
            self._login_task.add_done_callback(_retrieve_task_exception)

        done, _ = await asyncio.wait({self._login_task}, timeout=LOGIN_WAIT_SECONDS)
        if done:
            self._login_task.result()
        return self.auth_status()

    async def _login(self) -> None:
        self.logger.info("Starting authentication...")
        try:
            account = await self.token_manager.login(sharepoint_scopes(self.config.tenant_address))
        except CredentialAcquisitionError as e:
            self.logger.error(f"Authentication error: {e}")
            self.notifications.error("Authentication failed")
            raise

        self.config = self.config.model_copy(update={"account_info": account})
        await self.console_store.save_config(self.config)
        self.logger.success("Authentication successful")
        self.notifications.success("Signed in!")

    async def logout(self) -> AuthStatus:
        """Sign out and forget the saved account."""
        await self.token_manager.logout()
        self.config = self.config.model_copy(update={"account_info": None})
        await self.console_store.save_config(self.config)
        self.logger.info("Logged out")
        self.notifications.info("Signed out")
        return self.auth_status()

    # ------------------------------------------------------------------ #
    # Sites
    # ------------------------------------------------------------------ #

    async def set_sites(self, sites: List[str]) -> List[str]:
        """Replace and persist the site list.

        Raises:
            ConsoleBusyError: A batch is running
        """
        self._ensure_idle()
        await self.console_store.save_sites(list(sites))
        self.sites = list(sites)
        self.logger.info(f"Site list saved: {len(self.sites)} sites")
        return self.sites

    async def load_sample_sites(self) -> List[str]:
        """Replace the site list with sample sites of the configured tenant.

        Raises:
            PreconditionError: No tenant address configured
            ConsoleBusyError: A batch is running
        """
        if not self.config.tenant_address:
            raise PreconditionError("Configure the tenant address first", redirect_to="config")
        sites = await self.set_sites(build_sample_sites(self.config.tenant_address))
        self.logger.info("Sample sites loaded")
        return sites

    def validate_sites(self) -> SiteValidationResult:
        """Check every address of the site list."""
        result = SiteValidationResult.for_sites(self.sites)
        if result.is_valid:
            self.logger.success(result.message)
        elif result.valid_count or result.invalid_sites:
            self.logger.warning(result.message)
        else:
            self.logger.error(result.message)
            self.notifications.error("Add sites to the list first")
        return result

    async def clear_sites(self, confirm: bool = False) -> List[str]:
        """Empty the site list.

        Raises:
            ConfirmationRequiredError: ``confirm`` was not given
            ConsoleBusyError: A batch is running
        """
        if not confirm:
            raise ConfirmationRequiredError("clear the site list")
        sites = await self.set_sites([])
        self.logger.info("Site list cleared")
        return sites

    def export_sites(self) -> Tuple[str, str]:
        """The site list as a downloadable text file.

        Returns:
            (filename, content)
        """
        self.notifications.success("Site list exported!")
        return SITES_EXPORT_FILENAME, SiteList(sites=self.sites).to_text()

    # ------------------------------------------------------------------ #
    # Processing
    # ------------------------------------------------------------------ #

    def processing_status(self) -> ProcessingStatus:
        """Snapshot of the processing state."""
        running = self.is_processing
        return ProcessingStatus(
            status=self.orchestrator.status,
            is_processing=running,
            can_start=not running,
            can_stop=running,
            progress=self.publisher.progress,
            last_error=self.orchestrator.last_error,
        )

    async def start_processing(self) -> ProcessingStatus:
        """Start a batch over the current site list in the background.

        Raises:
            PreconditionError: Not signed in, or the site list is empty
            BatchAlreadyRunningError: A batch is already running
        """
        self.orchestrator.check_preconditions(self.sites, self.token_manager)
        if self.is_processing:
            raise BatchAlreadyRunningError("Processing already in progress")

        self._batch_task = asyncio.create_task(
            self.orchestrator.run_batch(list(self.sites), self.config.policy, self.token_manager)
        )
        self._batch_task.add_done_callback(_retrieve_task_exception)
        return self.processing_status()

    async def wait_for_processing(self) -> Optional[BatchReport]:
        """Wait for the current batch to end and return its report, if any."""
        if self._batch_task is None:
            return None
        return await self._batch_task

    def stop_processing(self, confirm: bool = False) -> ProcessingStatus:
        """Ask the running batch to stop before its next site.

        Raises:
            ConfirmationRequiredError: ``confirm`` was not given
            PreconditionError: No batch is running
        """
        if not confirm:
            raise ConfirmationRequiredError("stop processing")
        if not self.orchestrator.cancel():
            raise PreconditionError("No processing in progress")
        self.logger.warning("Stopping processing...")
        return self.processing_status()

    # ------------------------------------------------------------------ #
    # Log, notifications, reports
    # ------------------------------------------------------------------ #

    def log_entries(self) -> List[LogEntry]:
        """Operator log, oldest first."""
        return self.live_log.entries()

    def clear_log(self) -> List[LogEntry]:
        """Empty the operator log."""
        self.live_log.clear()
        return self.live_log.entries()

    def drain_notifications(self) -> List[Notification]:
        """Pending notifications, removed from the queue."""
        return self.notifications.drain()

    async def list_reports(self) -> List[BatchReport]:
        """Report history, newest first."""
        return await self.report_store.list_reports()

    async def get_report(self, index: int) -> Optional[BatchReport]:
        """One report of the history (0 = newest)."""
        return await self.report_store.get_report(index)

    async def export_report(self, index: int) -> Optional[Tuple[str, str]]:
        """One report as a downloadable CSV file.

        Returns:
            (filename, content), or None if there is no report at ``index``
        """
        report = await self.report_store.get_report(index)
        if report is None:
            return None
        self.notifications.success("Report exported!")
        return report_filename(report), report_to_csv(report)
