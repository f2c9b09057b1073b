"""Enums shared across schemas, services and the API."""

from enum import Enum


class BatchStatus(str, Enum):
    """Lifecycle of a batch run."""

    IDLE = "idle"
    RUNNING = "running"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    FAILED = "failed"


class LogLevel(str, Enum):
    """Level tags shown in the operator log."""

    INFO = "INFO"
    SUCCESS = "SUCCESS"
    WARNING = "WARNING"
    ERROR = "ERROR"


class NotificationType(str, Enum):
    """Toast notification kinds."""

    SUCCESS = "success"
    ERROR = "error"
    WARNING = "warning"
    INFO = "info"
