"""
MDLive API Main Application.

FastAPI application serving the viewer page, with error handling.
Requires Python 3.11+.
"""

from collections.abc import Sequence
from typing import Any

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles

from api.routes import preview
from api.routes.websocket import UpdateHub, channel_info
from content.models import WatchTarget
from utils.config import Settings, get_settings
from utils.logger import get_logger

logger = get_logger("api")


def create_app(
    hub: UpdateHub,
    targets: Sequence[WatchTarget],
    settings: Settings | None = None,
) -> FastAPI:
    """
    Create and configure the viewer page application.

    Args:
        hub: Hub providing the current state for first paint
        targets: Watched targets, document first
        settings: Settings to serve with (cached settings if omitted)

    Returns:
        Configured FastAPI instance
    """
    settings = settings or get_settings()

    application = FastAPI(
        title=settings.app_name,
        description="Live Markdown preview",
        version=settings.app_version,
        docs_url=None,
        redoc_url=None,
    )
    application.state.hub = hub
    application.state.settings = settings
    application.state.targets = tuple(targets)

    # Global exception handler
    @application.exception_handler(Exception)
    async def global_exception_handler(
        request: Request, exc: Exception
    ) -> JSONResponse:
        logger.exception(
            "unhandled_exception",
            path=request.url.path,
            method=request.method,
            error=str(exc),
        )
        return JSONResponse(
            status_code=500,
            content={
                "error": "Internal server error",
                "message": str(exc) if settings.is_development else "An unexpected error occurred",
            },
        )

    # Health check endpoint
    @application.get("/health")
    async def health_check() -> dict[str, Any]:
        """Health check endpoint."""
        return {
            "status": "healthy",
            "version": settings.app_version,
            **channel_info(hub),
        }

    application.include_router(preview.router, tags=["Preview"])

    # Files next to the document (images, linked pages); routes above win
    if settings.server.serve_assets and targets:
        application.mount(
            "/",
            StaticFiles(directory=targets[0].directory),
            name="assets",
        )

    return application
