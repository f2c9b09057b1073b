"""Dependencies that are used in the API endpoints."""

from fastapi import HTTPException, Request

from spvm.core.console_service import ConsoleService


async def get_console(request: Request) -> ConsoleService:
    """Return the console service created by the application factory."""
    console = getattr(request.app.state, "console", None)
    if console is None:
        raise HTTPException(status_code=503, detail="Console is not initialized")
    return console
