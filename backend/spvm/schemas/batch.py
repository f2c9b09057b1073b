"""Batch result, report and progress schemas."""

from datetime import datetime, timezone
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from spvm.core.shared_models import BatchStatus
from spvm.schemas.policy import VersionPolicy

NO_LIBRARIES_PROCESSED = "no libraries processed"
SESSION_EXPIRED = "session expired"


class SiteResult(BaseModel):
    """Outcome of processing one site. Immutable once created."""

    model_config = ConfigDict(frozen=True)

    site: str
    succeeded: bool
    libraries_configured: int = Field(0, ge=0)
    libraries_failed: int = Field(0, ge=0)
    libraries_total: int = Field(0, ge=0)
    error: Optional[str] = None

    @model_validator(mode="after")
    def _check_counts(self) -> "SiteResult":
        if self.libraries_configured + self.libraries_failed != self.libraries_total:
            raise ValueError(
                "libraries_configured + libraries_failed must equal libraries_total "
                f"({self.libraries_configured} + {self.libraries_failed} "
                f"!= {self.libraries_total})"
            )
        if self.succeeded != (self.libraries_configured > 0):
            raise ValueError("succeeded must be true exactly when a library was configured")
        return self

    @classmethod
    def from_counts(cls, site: str, configured: int, failed: int) -> "SiteResult":
        """Aggregate per-library outcomes into a site result.

        A site with no configured library is a failure with
        ``"no libraries processed"``.
        """
        succeeded = configured > 0
        return cls(
            site=site,
            succeeded=succeeded,
            libraries_configured=configured,
            libraries_failed=failed,
            libraries_total=configured + failed,
            error=None if succeeded else NO_LIBRARIES_PROCESSED,
        )

    @classmethod
    def failure(cls, site: str, error: str) -> "SiteResult":
        """Zero-count result for a site that could not be processed at all."""
        return cls(site=site, succeeded=False, error=error)


class BatchSummary(BaseModel):
    """Aggregate counts over a batch's site results."""

    model_config = ConfigDict(frozen=True)

    total_sites: int
    successful_sites: int
    failed_sites: int
    total_libraries_configured: int

    @classmethod
    def from_results(cls, results: List[SiteResult]) -> "BatchSummary":
        """Compute the summary of a list of site results."""
        successful = sum(1 for result in results if result.succeeded)
        return cls(
            total_sites=len(results),
            successful_sites=successful,
            failed_sites=len(results) - successful,
            total_libraries_configured=sum(r.libraries_configured for r in results),
        )


class BatchReport(BaseModel):
    """Report of a completed batch, as kept in the report history."""

    model_config = ConfigDict(frozen=True)

    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    policy: VersionPolicy
    results: List[SiteResult]
    summary: BatchSummary

    @classmethod
    def build(cls, policy: VersionPolicy, results: List[SiteResult]) -> "BatchReport":
        """Build a report and its summary from ordered site results."""
        return cls(
            policy=policy,
            results=list(results),
            summary=BatchSummary.from_results(results),
        )


class BatchProgress(BaseModel):
    """Progress event emitted while a batch runs."""

    status: BatchStatus = BatchStatus.IDLE
    percentage: float = 0.0
    current_site: Optional[str] = None
    index: int = 0
    total: int = 0
    message: Optional[str] = None


class ProcessingStatus(BaseModel):
    """Snapshot of the console's processing state."""

    status: BatchStatus
    is_processing: bool
    can_start: bool
    can_stop: bool
    progress: BatchProgress
    last_error: Optional[str] = None
