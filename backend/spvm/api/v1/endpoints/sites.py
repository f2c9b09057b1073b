"""Site list API endpoints."""

from fastapi import Depends, Query
from fastapi.responses import PlainTextResponse

from spvm import schemas
from spvm.api import deps
from spvm.api.router import TrailingSlashRouter
from spvm.core.console_service import ConsoleService

router = TrailingSlashRouter()


@router.get("/", response_model=schemas.SiteList)
async def get_sites(
    *,
    console: ConsoleService = Depends(deps.get_console),
) -> schemas.SiteList:
    """Get the ordered site list."""
    return schemas.SiteList(sites=console.sites)


@router.put("/", response_model=schemas.SiteList)
async def set_sites(
    *,
    update: schemas.SiteListUpdate,
    console: ConsoleService = Depends(deps.get_console),
) -> schemas.SiteList:
    """Replace the site list, from a list or from newline-delimited text."""
    sites = await console.set_sites(update.resolve())
    return schemas.SiteList(sites=sites)


@router.delete("/", response_model=schemas.SiteList)
async def clear_sites(
    *,
    confirm: bool = Query(False, description="Must be true to clear the list"),
    console: ConsoleService = Depends(deps.get_console),
) -> schemas.SiteList:
    """Empty the site list."""
    sites = await console.clear_sites(confirm=confirm)
    return schemas.SiteList(sites=sites)


@router.post("/sample", response_model=schemas.SiteList)
async def load_sample_sites(
    *,
    console: ConsoleService = Depends(deps.get_console),
) -> schemas.SiteList:
    """Replace the site list with sample sites of the configured tenant."""
    sites = await console.load_sample_sites()
    return schemas.SiteList(sites=sites)


@router.post("/validate", response_model=schemas.SiteValidationResult)
async def validate_sites(
    *,
    console: ConsoleService = Depends(deps.get_console),
) -> schemas.SiteValidationResult:
    """Check every address of the site list."""
    return console.validate_sites()


@router.get("/export", response_class=PlainTextResponse)
async def export_sites(
    *,
    console: ConsoleService = Depends(deps.get_console),
) -> PlainTextResponse:
    """Download the site list as a text file."""
    filename, content = console.export_sites()
    return PlainTextResponse(
        content,
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )
