"""Schemas for the versioning console."""

from .batch import (
    NO_LIBRARIES_PROCESSED,
    SESSION_EXPIRED,
    BatchProgress,
    BatchReport,
    BatchSummary,
    ProcessingStatus,
    SiteResult,
)
from .console import (
    AccountInfo,
    AuthStatus,
    ConsoleConfig,
    ConsoleConfigUpdate,
    LogEntry,
    Notification,
)
from .policy import VersionPolicy
from .site import (
    LibraryRef,
    SiteAddress,
    SiteList,
    SiteListUpdate,
    SiteMetadata,
    SiteValidationResult,
)

__all__ = [
    "NO_LIBRARIES_PROCESSED",
    "SESSION_EXPIRED",
    "AccountInfo",
    "AuthStatus",
    "BatchProgress",
    "BatchReport",
    "BatchSummary",
    "ConsoleConfig",
    "ConsoleConfigUpdate",
    "LibraryRef",
    "LogEntry",
    "Notification",
    "ProcessingStatus",
    "SiteAddress",
    "SiteList",
    "SiteListUpdate",
    "SiteMetadata",
    "SiteResult",
    "SiteValidationResult",
    "VersionPolicy",
]
