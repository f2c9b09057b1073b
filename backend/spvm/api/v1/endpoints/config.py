"""Console configuration API endpoints."""

from fastapi import Depends

from spvm import schemas
from spvm.api import deps
from spvm.api.router import TrailingSlashRouter
from spvm.core.console_service import ConsoleService

router = TrailingSlashRouter()


@router.get("/", response_model=schemas.ConsoleConfig)
async def get_config(
    *,
    console: ConsoleService = Depends(deps.get_console),
) -> schemas.ConsoleConfig:
    """Get the saved retention policy and tenant address."""
    return console.get_config()


@router.put("/", response_model=schemas.ConsoleConfig)
async def save_config(
    *,
    update: schemas.ConsoleConfigUpdate,
    console: ConsoleService = Depends(deps.get_console),
) -> schemas.ConsoleConfig:
    """Save the retention policy and/or tenant address.

    Rejected with 409 while a batch is running.
    """
    return await console.save_config(update)
