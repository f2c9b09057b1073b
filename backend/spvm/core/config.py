"""Configuration settings for the versioning console.

Values are read from environment variables prefixed with ``SPVM_`` (and an
optional ``.env`` file). Import the module-level ``settings`` object rather
than instantiating ``Settings`` directly.
"""

from typing import Literal, Optional

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Console settings.

    Attributes:
        ENVIRONMENT: Deployment environment (local, test, prd)
        LOG_LEVEL: Root log level for the ``spvm`` logger
        LOG_FORMAT_JSON: Emit JSON log lines instead of plain text
        STORAGE_PATH: Root directory for persisted console state
        API_HOST: Interface the console API listens on
        API_PORT: Port the console API listens on
        INTER_SITE_DELAY_SECONDS: Pause between two sites of a batch
        REPORT_HISTORY_LIMIT: Number of batch reports kept in history
        LIVE_LOG_CAPACITY: Number of entries kept in the operator log
        NOTIFICATION_CAPACITY: Number of pending notifications kept
        HTTP_TIMEOUT_SECONDS: Timeout for SharePoint and identity requests
        HTTP_MAX_RETRIES: Attempts for retryable SharePoint calls (429, timeouts)
        AUTH_PROVIDER: Credential provider used by the console
        AUTH_CLIENT_ID: Application (client) ID registered with the identity platform
        AUTH_TENANT_ID: Directory tenant used for sign-in
        AUTH_AUTHORITY: Identity platform base URL
        STATIC_ACCESS_TOKEN: Pre-issued bearer token for the static provider
        TOKEN_REFRESH_MARGIN_SECONDS: Refresh tokens this long before they expire
        DEFAULT_MAJOR_VERSIONS: Major version limit for a fresh configuration
        DEFAULT_MINOR_VERSIONS: Minor version limit for a fresh configuration
    """

    model_config = SettingsConfigDict(
        env_prefix="SPVM_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    ENVIRONMENT: Literal["local", "test", "prd"] = "local"
    LOG_LEVEL: str = "INFO"
    LOG_FORMAT_JSON: bool = False

    STORAGE_PATH: str = "./local_storage"

    API_HOST: str = "127.0.0.1"
    API_PORT: int = 8001

    INTER_SITE_DELAY_SECONDS: float = 2.0
    REPORT_HISTORY_LIMIT: int = 10
    LIVE_LOG_CAPACITY: int = 100
    NOTIFICATION_CAPACITY: int = 20

    HTTP_TIMEOUT_SECONDS: float = 30.0
    HTTP_MAX_RETRIES: int = 3

    AUTH_PROVIDER: Literal["device_code", "static"] = "device_code"
    AUTH_CLIENT_ID: Optional[str] = None
    AUTH_TENANT_ID: str = "organizations"
    AUTH_AUTHORITY: str = "https://login.microsoftonline.com"
    STATIC_ACCESS_TOKEN: Optional[str] = None
    TOKEN_REFRESH_MARGIN_SECONDS: int = 300

    DEFAULT_MAJOR_VERSIONS: int = 3
    DEFAULT_MINOR_VERSIONS: int = 1

    @field_validator("LOG_LEVEL")
    @classmethod
    def _normalize_log_level(cls, value: str) -> str:
        return value.upper()

    @field_validator("INTER_SITE_DELAY_SECONDS")
    @classmethod
    def _non_negative_delay(cls, value: float) -> float:
        if value < 0:
            raise ValueError("INTER_SITE_DELAY_SECONDS must be >= 0")
        return value

    @field_validator("REPORT_HISTORY_LIMIT", "LIVE_LOG_CAPACITY", "NOTIFICATION_CAPACITY")
    @classmethod
    def _positive_capacity(cls, value: int) -> int:
        if value < 1:
            raise ValueError("capacities must be >= 1")
        return value


settings = Settings()
