"""Per-run state of a batch."""

from dataclasses import dataclass, field
from typing import List, Tuple
from uuid import UUID, uuid4

from spvm.core.logging import ContextualLogger
from spvm.platform.auth.token_manager import TokenManager
from spvm.platform.batch.cancellation import CancellationToken
from spvm.schemas.batch import SiteResult
from spvm.schemas.policy import VersionPolicy


@dataclass
class BatchRunContext:
    """State owned by the orchestrator for exactly one run.

    Created when a run starts and dropped when it ends, whatever the outcome.
    The site list and policy are snapshots; nothing mutates them during the run.

    Attributes:
        sites: Ordered site snapshot
        policy: Policy snapshot
        token_manager: Credential handle for the run
        logger: Logger carrying the batch id
        cancellation: Stop flag for this run
        index: Index of the site being processed
        results: Site results collected so far, in site order
        batch_id: Identifier used in logs
    """

    sites: Tuple[str, ...]
    policy: VersionPolicy
    token_manager: TokenManager
    logger: ContextualLogger
    cancellation: CancellationToken = field(default_factory=CancellationToken)
    index: int = 0
    results: List[SiteResult] = field(default_factory=list)
    batch_id: UUID = field(default_factory=uuid4)

    @property
    def total(self) -> int:
        """Number of sites in the run."""
        return len(self.sites)

    def is_last(self, index: int) -> bool:
        """Whether ``index`` is the final site of the run."""
        return index >= self.total - 1
