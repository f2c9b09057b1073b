"""API routes for version 1 of the console API."""

from spvm.api.router import TrailingSlashRouter
from spvm.api.v1.endpoints import (
    auth,
    config,
    log,
    notifications,
    processing,
    reports,
    sites,
)

api_router = TrailingSlashRouter()
api_router.include_router(config.router, prefix="/config", tags=["config"])
api_router.include_router(auth.router, prefix="/auth", tags=["auth"])
api_router.include_router(sites.router, prefix="/sites", tags=["sites"])
api_router.include_router(processing.router, prefix="/processing", tags=["processing"])
api_router.include_router(log.router, prefix="/log", tags=["log"])
api_router.include_router(notifications.router, prefix="/notifications", tags=["notifications"])
api_router.include_router(reports.router, prefix="/reports", tags=["reports"])
