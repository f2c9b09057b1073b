"""Notification API endpoints."""

from typing import List

from fastapi import Depends

from spvm import schemas
from spvm.api import deps
from spvm.api.router import TrailingSlashRouter
from spvm.core.console_service import ConsoleService

router = TrailingSlashRouter()


@router.get("/", response_model=List[schemas.Notification])
async def drain_notifications(
    *,
    console: ConsoleService = Depends(deps.get_console),
) -> List[schemas.Notification]:
    """Pending notifications. Each one is returned only once."""
    return console.drain_notifications()
