"""Batch state publisher.

Turns orchestrator milestones into:
- the latest ``BatchProgress`` snapshot (polled by the console UI)
- operator log lines (through the contextual logger)
- toast notifications for terminal outcomes

Separated from the orchestrator so the loop stays free of presentation:
- BatchOrchestrator: drives the run (control flow)
- BatchStatePublisher: reports the run (side effects)
"""

from typing import Callable, Optional

from spvm.core.logging import ContextualLogger
from spvm.core.logging import logger as default_logger
from spvm.core.notifications import NotificationCenter
from spvm.core.shared_models import BatchStatus
from spvm.schemas.batch import BatchProgress, BatchReport, SiteResult

ProgressListener = Callable[[BatchProgress], None]


class BatchStatePublisher:
    """Publishes batch progress, log lines and notifications."""

    def __init__(
        self,
        logger: Optional[ContextualLogger] = None,
        notifications: Optional[NotificationCenter] = None,
        listener: Optional[ProgressListener] = None,
    ):
        """Initialize the publisher.

        Args:
            logger: Logger feeding stdout and the operator log
            notifications: Notification center for terminal outcomes
            listener: Optional callback invoked with every progress snapshot
        """
        self.logger = logger or default_logger.with_context(component="batch_publisher")
        self.notifications = notifications or NotificationCenter()
        self._listener = listener
        self.progress = BatchProgress()

    def _set(self, progress: BatchProgress) -> BatchProgress:
        self.progress = progress
        if self._listener is not None:
            self._listener(progress)
        return progress

    def publish_started(self, total: int) -> None:
        """Announce the start of a run."""
        self._set(BatchProgress(status=BatchStatus.RUNNING, total=total, message="Starting"))
        self.logger.info(f"Starting processing of {total} sites")
        self.logger.warning("Stay nearby: sites may require you to authenticate again")

    def publish_progress(self, index: int, total: int, site: str) -> BatchProgress:
        """Publish progress before processing ``site`` (``index`` is zero-based)."""
        percentage = (index + 1) / total * 100
        self.logger.info(f"[{index + 1}/{total}] Processing site: {site}")
        return self._set(
            BatchProgress(
                status=BatchStatus.RUNNING,
                percentage=percentage,
                current_site=site,
                index=index,
                total=total,
                message=f"Processing: {site}",
            )
        )

    def publish_site_result(self, result: SiteResult) -> None:
        """Log the outcome of one site."""
        if result.succeeded:
            self.logger.success(
                f"Site processed: {result.libraries_configured} libraries configured"
            )
        else:
            self.logger.error(f"Site failed: {result.error}")

    def publish_pause(self, seconds: float) -> None:
        """Log the pause before the next site."""
        self.logger.info(f"Waiting {seconds:g} seconds before the next site...")

    def publish_completion(self, report: BatchReport) -> None:
        """Publish the final report of a completed run."""
        summary = report.summary
        self._set(
            BatchProgress(
                status=BatchStatus.COMPLETED,
                percentage=100.0,
                index=summary.total_sites,
                total=summary.total_sites,
                message="Processing complete!",
            )
        )
        self.logger.info("=== FINAL REPORT ===")
        self.logger.success(f"Sites processed successfully: {summary.successful_sites}")
        self.logger.error(f"Sites with failures: {summary.failed_sites}")
        self.logger.success(f"Total libraries configured: {summary.total_libraries_configured}")
        self.notifications.success("Processing complete!")

    def publish_cancellation(self) -> None:
        """Publish that the run was stopped by the operator."""
        self._set(self.progress.model_copy(update={"status": BatchStatus.CANCELLED}))
        self.logger.warning("Processing stopped by the operator")
        self.notifications.warning("Processing stopped!")

    def publish_failure(self, error: str) -> None:
        """Publish that the run failed."""
        self._set(
            self.progress.model_copy(update={"status": BatchStatus.FAILED, "message": error})
        )
        self.logger.error(f"Error during processing: {error}")
        self.notifications.error("Error during processing!")
