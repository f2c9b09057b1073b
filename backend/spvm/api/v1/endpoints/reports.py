"""Batch report API endpoints."""

from typing import List

from fastapi import Depends, HTTPException
from fastapi.responses import Response

from spvm import schemas
from spvm.api import deps
from spvm.api.router import TrailingSlashRouter
from spvm.core.console_service import ConsoleService

router = TrailingSlashRouter()


@router.get("/", response_model=List[schemas.BatchReport])
async def list_reports(
    *,
    console: ConsoleService = Depends(deps.get_console),
) -> List[schemas.BatchReport]:
    """Report history, newest first."""
    return await console.list_reports()


@router.get("/{index}", response_model=schemas.BatchReport)
async def get_report(
    *,
    index: int,
    console: ConsoleService = Depends(deps.get_console),
) -> schemas.BatchReport:
    """One report with its per-site results (0 = newest)."""
    report = await console.get_report(index)
    if report is None:
        raise HTTPException(status_code=404, detail=f"No report at index {index}")
    return report


@router.get("/{index}/export")
async def export_report(
    *,
    index: int,
    console: ConsoleService = Depends(deps.get_console),
) -> Response:
    """Download one report as CSV."""
    exported = await console.export_report(index)
    if exported is None:
        raise HTTPException(status_code=404, detail=f"No report at index {index}")
    filename, content = exported
    return Response(
        content,
        media_type="text/csv; charset=utf-8",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )
