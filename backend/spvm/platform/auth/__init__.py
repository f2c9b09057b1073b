"""Authentication capability for the versioning console."""

from typing import Optional

from spvm.core.config import settings
from spvm.platform.auth._base import Credential, CredentialProvider, sharepoint_scopes
from spvm.platform.auth.device_code import DeviceCodeProvider
from spvm.platform.auth.static import StaticTokenProvider
from spvm.platform.auth.token_manager import TokenManager

__all__ = [
    "Credential",
    "CredentialProvider",
    "DeviceCodeProvider",
    "StaticTokenProvider",
    "TokenManager",
    "create_credential_provider",
    "sharepoint_scopes",
]


def create_credential_provider(provider_name: Optional[str] = None) -> CredentialProvider:
    """Build the credential provider selected in settings."""
    name = provider_name or settings.AUTH_PROVIDER
    if name == "static":
        return StaticTokenProvider(settings.STATIC_ACCESS_TOKEN)
    if name == "device_code":
        if not settings.AUTH_CLIENT_ID:
            raise ValueError("SPVM_AUTH_CLIENT_ID is required for the device_code provider")
        return DeviceCodeProvider(client_id=settings.AUTH_CLIENT_ID)
    raise ValueError(f"Unsupported credential provider: {name}")
