"""Persistence of the console configuration and site list."""

from typing import List, Optional

from pydantic import ValidationError

from spvm.core.logging import ContextualLogger
from spvm.core.logging import logger as default_logger
from spvm.platform.storage.backend import StorageBackend
from spvm.platform.storage.exceptions import StorageException, StorageNotFoundError
from spvm.platform.storage.paths import paths
from spvm.schemas.console import ConsoleConfig
from spvm.schemas.site import SiteList


class ConsoleStore:
    """Loads and saves the console configuration and site list.

    Only ``ConsoleConfig`` fields are written; access tokens live in the
    token manager and are never persisted.
    """

    def __init__(self, backend: StorageBackend, logger: Optional[ContextualLogger] = None):
        """Initialize the store.

        Args:
            backend: Storage backend
            logger: Optional contextual logger
        """
        self.backend = backend
        self.logger = logger or default_logger.with_context(component="console_store")

    async def load_config(self) -> ConsoleConfig:
        """Load the saved configuration, or defaults if none was saved."""
        try:
            data = await self.backend.read_json(paths.CONFIG)
        except StorageNotFoundError:
            return ConsoleConfig()
        except StorageException as e:
            self.logger.error(f"Error reading saved configuration: {e}. Using defaults.")
            return ConsoleConfig()
        try:
            return ConsoleConfig.model_validate(data)
        except ValidationError as e:
            self.logger.error(f"Invalid saved configuration: {e}. Using defaults.")
            return ConsoleConfig()

    async def save_config(self, config: ConsoleConfig) -> None:
        """Persist the configuration."""
        await self.backend.write_json(paths.CONFIG, config.model_dump(mode="json"))

    async def load_sites(self) -> List[str]:
        """Load the saved site list, or an empty list."""
        try:
            data = await self.backend.read_json(paths.SITES)
        except StorageNotFoundError:
            return []
        except StorageException as e:
            self.logger.error(f"Error reading saved site list: {e}. Starting empty.")
            return []
        try:
            return list(SiteList.model_validate(data).sites)
        except ValidationError as e:
            self.logger.error(f"Invalid saved site list: {e}. Starting empty.")
            return []

    async def save_sites(self, sites: List[str]) -> None:
        """Persist the site list."""
        await self.backend.write_json(paths.SITES, SiteList(sites=sites).model_dump(mode="json"))
