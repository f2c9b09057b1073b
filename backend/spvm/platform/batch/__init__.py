"""Sequential multi-site batch processing."""

from spvm.platform.batch.cancellation import CancellationToken
from spvm.platform.batch.context import BatchRunContext
from spvm.platform.batch.orchestrator import BatchOrchestrator
from spvm.platform.batch.site_processor import SiteProcessor
from spvm.platform.batch.state_publisher import BatchStatePublisher

__all__ = [
    "BatchOrchestrator",
    "BatchRunContext",
    "BatchStatePublisher",
    "CancellationToken",
    "SiteProcessor",
]
