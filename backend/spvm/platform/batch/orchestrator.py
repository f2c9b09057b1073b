"""Batch orchestrator: processes an ordered list of sites one at a time."""

import asyncio
from typing import List, Optional, Sequence

from spvm.core.config import settings
from spvm.core.exceptions import BatchAlreadyRunningError, BatchFailedError, PreconditionError
from spvm.core.logging import ContextualLogger
from spvm.core.logging import logger as default_logger
from spvm.core.shared_models import BatchStatus
from spvm.platform.auth.token_manager import TokenManager
from spvm.platform.batch.context import BatchRunContext
from spvm.platform.batch.site_processor import SiteProcessor
from spvm.platform.batch.state_publisher import BatchStatePublisher
from spvm.platform.storage.exceptions import StorageException
from spvm.platform.storage.report_store import ReportStore
from spvm.schemas.batch import BatchReport, SiteResult
from spvm.schemas.policy import VersionPolicy


class BatchOrchestrator:
    """Runs batches of sites through a ``SiteProcessor``.

    Sites are processed strictly in order, never concurrently. A failed site
    never stops the batch; only a stop request (``cancel``) or a processor that
    breaks its never-raise contract ends a run early.

    State machine: idle -> running -> completed | cancelled | failed.
    One run at a time per orchestrator.
    """

    def __init__(
        self,
        processor: SiteProcessor,
        report_store: Optional[ReportStore] = None,
        publisher: Optional[BatchStatePublisher] = None,
        inter_site_delay: Optional[float] = None,
        logger: Optional[ContextualLogger] = None,
    ):
        """Initialize the orchestrator.

        Args:
            processor: Processor invoked once per site
            report_store: Where completed reports are kept (optional)
            publisher: Progress/log/notification publisher
            inter_site_delay: Pause between sites in seconds (defaults to settings)
            logger: Optional contextual logger
        """
        self.processor = processor
        self.report_store = report_store
        self.logger = logger or default_logger.with_context(component="batch_orchestrator")
        self.publisher = publisher or BatchStatePublisher(logger=self.logger)
        self.inter_site_delay = (
            settings.INTER_SITE_DELAY_SECONDS if inter_site_delay is None else inter_site_delay
        )

        self.status = BatchStatus.IDLE
        self.last_error: Optional[str] = None
        self._running = False
        self._context: Optional[BatchRunContext] = None

    @property
    def is_processing(self) -> bool:
        """Whether a run is in progress."""
        return self._running

    @property
    def can_start(self) -> bool:
        """Whether the start affordance should be enabled."""
        return not self._running

    @property
    def can_stop(self) -> bool:
        """Whether the stop affordance should be enabled."""
        return self._running

    def cancel(self) -> bool:
        """Request a stop of the current run.

        Returns:
            True if a running batch was asked to stop
        """
        if not self._running or self._context is None:
            return False
        self._context.cancellation.cancel()
        return True

    def check_preconditions(
        self, sites: Sequence[str], token_manager: Optional[TokenManager]
    ) -> None:
        """Reject a start that cannot proceed, before any remote call.

        Raises:
            PreconditionError: Not signed in, or no sites
            BatchAlreadyRunningError: Another run is in progress
        """
        if token_manager is None or not token_manager.has_credential:
            raise PreconditionError("Sign in first", redirect_to="auth")
        if not sites:
            raise PreconditionError("Add sites to the list first", redirect_to="sites")
        if self._running:
            raise BatchAlreadyRunningError("Processing already in progress")

    async def run_batch(
        self,
        sites: Sequence[str],
        policy: VersionPolicy,
        token_manager: Optional[TokenManager],
    ) -> Optional[BatchReport]:
        """Process every site and build the batch report.

        Args:
            sites: Ordered site addresses (duplicates are processed twice)
            policy: Version policy applied to every library
            token_manager: Credential handle

        Returns:
            The stored report, or None if the run was cancelled

        Raises:
            PreconditionError: The run could not start
            BatchFailedError: The site processor raised instead of returning a result
            Exception: Any other failure ends the run in the failed state and propagates
        """
        self.check_preconditions(sites, token_manager)

        self._running = True
        self.status = BatchStatus.RUNNING
        self.last_error = None
        context = BatchRunContext(
            sites=tuple(sites),
            policy=policy,
            token_manager=token_manager,
            logger=self.logger,
        )
        context.logger = self.logger.with_context(batch_id=str(context.batch_id))
        self._context = context

        try:
            self.publisher.publish_started(context.total)
            results = await self._process_sites(context)

            if context.cancellation.is_cancelled:
                self.status = BatchStatus.CANCELLED
                self.publisher.publish_cancellation()
                return None

            report = BatchReport.build(policy, results)
            await self._store_report(report)
            self.status = BatchStatus.COMPLETED
            self.publisher.publish_completion(report)
            return report

        except BatchFailedError as e:
            self.status = BatchStatus.FAILED
            self.last_error = str(e)
            self.publisher.publish_failure(str(e))
            raise
        except asyncio.CancelledError:
            # The hosting task was cancelled (e.g. shutdown); treat as a stop.
            self.status = BatchStatus.CANCELLED
            self.publisher.publish_cancellation()
            raise
        except Exception as e:
            self.status = BatchStatus.FAILED
            self.last_error = str(e)
            self.publisher.publish_failure(str(e))
            raise
        finally:
            self._running = False
            self._context = None

    async def _process_sites(self, context: BatchRunContext) -> List[SiteResult]:
        for index, site in enumerate(context.sites):
            if context.cancellation.is_cancelled:
                break

            context.index = index
            self.publisher.publish_progress(index, context.total, site)

            try:
                result = await self.processor.process_site(
                    site, context.token_manager, context.policy, logger=context.logger
                )
            except Exception as e:
                raise BatchFailedError(f"Site processor raised for {site}: {e}") from e
            if not isinstance(result, SiteResult):
                raise BatchFailedError(f"Site processor returned no result for {site}")

            context.results.append(result)
            self.publisher.publish_site_result(result)

            if not context.is_last(index) and not context.cancellation.is_cancelled:
                self.publisher.publish_pause(self.inter_site_delay)
                await context.cancellation.sleep(self.inter_site_delay)

        return list(context.results)

    async def _store_report(self, report: BatchReport) -> None:
        if self.report_store is None:
            return
        try:
            await self.report_store.save(report)
        except StorageException as e:
            self.logger.error(f"Could not store the batch report: {e}")
