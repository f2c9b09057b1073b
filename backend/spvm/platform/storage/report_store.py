"""Capped history of batch reports.

Reports are stored newest-first in a single JSON document; when the history
is full the oldest report is dropped.
"""

from typing import List, Optional

from pydantic import ValidationError

from spvm.core.config import settings
from spvm.core.logging import ContextualLogger
from spvm.core.logging import logger as default_logger
from spvm.platform.storage.backend import StorageBackend
from spvm.platform.storage.exceptions import StorageException, StorageNotFoundError
from spvm.platform.storage.paths import paths
from spvm.schemas.batch import BatchReport


class ReportStore:
    """Persists the last ``REPORT_HISTORY_LIMIT`` batch reports."""

    def __init__(
        self,
        backend: StorageBackend,
        capacity: Optional[int] = None,
        logger: Optional[ContextualLogger] = None,
    ):
        """Initialize the report store.

        Args:
            backend: Storage backend holding the history document
            capacity: Maximum number of reports kept (defaults to settings)
            logger: Optional contextual logger
        """
        self.backend = backend
        self.capacity = capacity or settings.REPORT_HISTORY_LIMIT
        self.logger = logger or default_logger.with_context(component="report_store")

    async def list_reports(self) -> List[BatchReport]:
        """Return stored reports, newest first.

        An unreadable history is logged and treated as empty.
        """
        try:
            data = await self.backend.read_json(paths.REPORTS)
        except StorageNotFoundError:
            return []
        except StorageException as e:
            self.logger.error(f"Error reading report history: {e}. Starting from empty history.")
            return []

        if not isinstance(data, dict) or not isinstance(data.get("reports", []), list):
            self.logger.error("Report history has an unexpected shape. Starting from empty history.")
            return []
        try:
            return [BatchReport.model_validate(item) for item in data.get("reports", [])]
        except ValidationError as e:
            self.logger.error(f"Invalid report in history: {e}. Starting from empty history.")
            return []

    async def get_report(self, index: int) -> Optional[BatchReport]:
        """Return the report at ``index`` (0 = newest), or None."""
        reports = await self.list_reports()
        if 0 <= index < len(reports):
            return reports[index]
        return None

    async def save(self, report: BatchReport) -> List[BatchReport]:
        """Prepend a report to the history and evict beyond capacity.

        Returns:
            The stored history, newest first
        """
        reports = await self.list_reports()
        reports.insert(0, report)
        del reports[self.capacity :]

        await self.backend.write_json(
            paths.REPORTS,
            {"reports": [item.model_dump(mode="json") for item in reports]},
        )
        self.logger.debug(f"Stored batch report ({len(reports)}/{self.capacity} in history)")
        return reports

    async def clear(self) -> None:
        """Delete the whole history."""
        await self.backend.delete(paths.REPORTS)
