"""Application factory for the versioning console API."""

from contextlib import asynccontextmanager
from typing import Optional

import uvicorn
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from spvm.api.v1.api import api_router
from spvm.core.config import settings
from spvm.core.console_service import ConsoleService
from spvm.core.exceptions import (
    BatchAlreadyRunningError,
    ConsoleBusyError,
    CredentialAcquisitionError,
    InteractionInProgressError,
    PreconditionError,
)
from spvm.core.logging import logger
from spvm.platform.storage.exceptions import StorageException


def _precondition_status(exc: PreconditionError) -> int:
    if isinstance(exc, (BatchAlreadyRunningError, ConsoleBusyError)):
        return 409
    return 400


async def precondition_exception_handler(request: Request, exc: PreconditionError) -> JSONResponse:
    """Rejected operator actions: nothing was changed and no remote call was made."""
    return JSONResponse(
        status_code=_precondition_status(exc),
        content={"detail": exc.message, "redirect_to": exc.redirect_to},
    )


async def credential_exception_handler(
    request: Request, exc: CredentialAcquisitionError
) -> JSONResponse:
    """Failed interactive sign-in."""
    status_code = 409 if isinstance(exc, InteractionInProgressError) else 401
    return JSONResponse(status_code=status_code, content={"detail": str(exc)})


async def storage_exception_handler(request: Request, exc: StorageException) -> JSONResponse:
    """Console state could not be read or written."""
    logger.error(f"Storage error on {request.url.path}: {exc}")
    return JSONResponse(status_code=500, content={"detail": "Could not access console storage"})


def create_app(console: Optional[ConsoleService] = None) -> FastAPI:
    """Build the FastAPI application.

    Args:
        console: Console service to serve; built from settings when omitted

    Returns:
        The configured application
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        service = console or ConsoleService()
        await service.load()
        app.state.console = service
        try:
            yield
        finally:
            await service.close()
            app.state.console = None

    app = FastAPI(
        title="SharePoint Versioning Manager",
        description="Configure document library versioning across SharePoint sites",
        version="1.0.0",
        lifespan=lifespan,
    )
    app.add_exception_handler(PreconditionError, precondition_exception_handler)
    app.add_exception_handler(CredentialAcquisitionError, credential_exception_handler)
    app.add_exception_handler(StorageException, storage_exception_handler)
    app.include_router(api_router, prefix="/api/v1")

    @app.get("/health", include_in_schema=False)
    async def health() -> dict:
        return {"status": "healthy"}

    return app


app = create_app()


def run() -> None:
    """Serve the console API with uvicorn."""
    uvicorn.run(app, host=settings.API_HOST, port=settings.API_PORT, log_config=None)
