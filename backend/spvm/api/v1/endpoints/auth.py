"""Authentication API endpoints."""

from fastapi import Depends

from spvm import schemas
from spvm.api import deps
from spvm.api.router import TrailingSlashRouter
from spvm.core.console_service import ConsoleService

router = TrailingSlashRouter()


@router.get("/status", response_model=schemas.AuthStatus)
async def get_auth_status(
    *,
    console: ConsoleService = Depends(deps.get_console),
) -> schemas.AuthStatus:
    """Whether the operator is signed in, or a sign-in is waiting on them."""
    return console.auth_status()


@router.post("/login", response_model=schemas.AuthStatus)
async def login(
    *,
    console: ConsoleService = Depends(deps.get_console),
) -> schemas.AuthStatus:
    """Sign in to the configured tenant, or sign out when already signed in.

    For the device-code provider the response carries ``pending_message`` with
    the code to enter; poll ``/auth/status`` until ``authenticated`` is true.
    """
    return await console.login()


@router.post("/logout", response_model=schemas.AuthStatus)
async def logout(
    *,
    console: ConsoleService = Depends(deps.get_console),
) -> schemas.AuthStatus:
    """Sign out and forget the saved account."""
    return await console.logout()
