"""Console configuration, authentication and operator feed schemas."""

from datetime import datetime, timezone
from typing import Optional

from pydantic import BaseModel, Field

from spvm.core.config import settings
from spvm.core.shared_models import LogLevel, NotificationType
from spvm.schemas.policy import VersionPolicy


class AccountInfo(BaseModel):
    """Signed-in account, persisted so the console can renew tokens silently."""

    username: Optional[str] = None
    tenant_id: Optional[str] = None
    home_account_id: Optional[str] = None


class ConsoleConfig(BaseModel):
    """Persisted console configuration.

    Bearer tokens are never part of this model.
    """

    major_version_limit: int = Field(default_factory=lambda: settings.DEFAULT_MAJOR_VERSIONS, ge=0)
    minor_version_limit: int = Field(default_factory=lambda: settings.DEFAULT_MINOR_VERSIONS, ge=0)
    tenant_address: str = ""
    account_info: Optional[AccountInfo] = None

    @property
    def policy(self) -> VersionPolicy:
        """Snapshot of the configured retention policy."""
        return VersionPolicy(
            major_version_limit=self.major_version_limit,
            minor_version_limit=self.minor_version_limit,
        )


class ConsoleConfigUpdate(BaseModel):
    """Request body for saving the configuration."""

    major_version_limit: Optional[int] = Field(None, ge=0)
    minor_version_limit: Optional[int] = Field(None, ge=0)
    tenant_address: Optional[str] = None


class AuthStatus(BaseModel):
    """Whether the console currently holds a credential."""

    authenticated: bool
    account: Optional[AccountInfo] = None
    pending_message: Optional[str] = Field(
        None, description="Instructions for a sign-in that is waiting on the operator"
    )


class LogEntry(BaseModel):
    """One line of the operator log."""

    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    level: LogLevel
    message: str


class Notification(BaseModel):
    """A transient toast notification."""

    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    type: NotificationType = NotificationType.INFO
    message: str
