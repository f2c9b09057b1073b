"""Operator log API endpoints."""

from typing import List

from fastapi import Depends

from spvm import schemas
from spvm.api import deps
from spvm.api.router import TrailingSlashRouter
from spvm.core.console_service import ConsoleService

router = TrailingSlashRouter()


@router.get("/", response_model=List[schemas.LogEntry])
async def get_log(
    *,
    console: ConsoleService = Depends(deps.get_console),
) -> List[schemas.LogEntry]:
    """The most recent operator log entries, oldest first."""
    return console.log_entries()


@router.delete("/", response_model=List[schemas.LogEntry])
async def clear_log(
    *,
    console: ConsoleService = Depends(deps.get_console),
) -> List[schemas.LogEntry]:
    """Clear the operator log."""
    return console.clear_log()
