"""
MDLive API Dependencies.

Shared dependencies for FastAPI routes.
Requires Python 3.11+.
"""

from typing import TYPE_CHECKING

from fastapi import HTTPException
from fastapi.requests import HTTPConnection

from content.models import WatchTarget
from utils.config import Settings

if TYPE_CHECKING:
    from api.routes.websocket import UpdateHub


# Shared state is attached to app.state by the app factories


def get_hub(connection: HTTPConnection) -> "UpdateHub":
    """
    Dependency returning the hub that owns the viewer sessions.

    Raises HTTPException if the app was created without one.
    """
    hub = getattr(connection.app.state, "hub", None)
    if hub is None:
        raise HTTPException(status_code=503, detail="Update hub unavailable")
    return hub


def get_app_settings(connection: HTTPConnection) -> Settings:
    """Dependency returning the settings the app was created with."""
    return connection.app.state.settings


def get_targets(connection: HTTPConnection) -> tuple[WatchTarget, ...]:
    """Dependency returning the watched targets."""
    return connection.app.state.targets
