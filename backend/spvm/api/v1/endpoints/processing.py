"""Batch processing API endpoints."""

from fastapi import Depends, Query

from spvm import schemas
from spvm.api import deps
from spvm.api.router import TrailingSlashRouter
from spvm.core.console_service import ConsoleService

router = TrailingSlashRouter()


@router.post("/start", response_model=schemas.ProcessingStatus, status_code=202)
async def start_processing(
    *,
    console: ConsoleService = Depends(deps.get_console),
) -> schemas.ProcessingStatus:
    """Start a batch over the current site list.

    The batch runs in the background; poll ``/processing/status`` for progress.
    """
    return await console.start_processing()


@router.post("/stop", response_model=schemas.ProcessingStatus)
async def stop_processing(
    *,
    confirm: bool = Query(False, description="Must be true to stop the batch"),
    console: ConsoleService = Depends(deps.get_console),
) -> schemas.ProcessingStatus:
    """Stop the running batch before its next site."""
    return console.stop_processing(confirm=confirm)


@router.get("/status", response_model=schemas.ProcessingStatus)
async def get_processing_status(
    *,
    console: ConsoleService = Depends(deps.get_console),
) -> schemas.ProcessingStatus:
    """Current status, progress and start/stop affordances."""
    return console.processing_status()
