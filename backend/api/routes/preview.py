"""
MDLive Preview Routes.

Viewer bootstrap page and a snapshot of the current state.
Requires Python 3.11+.
"""

from fastapi import APIRouter, Depends
from fastapi.responses import HTMLResponse
from jinja2 import Environment, PackageLoader, select_autoescape

from api.dependencies import get_app_settings, get_hub, get_targets
from api.routes.websocket import UpdateHub
from content.models import Update, WatchTarget
from utils.config import Settings
from utils.logger import get_logger

router = APIRouter()
logger = get_logger("api.preview")

# Delay before a viewer retries a dropped update channel
RECONNECT_MS = 1000

_templates = Environment(
    loader=PackageLoader("api", "templates"),
    autoescape=select_autoescape(["html"]),
)


def render_shell(
    update: Update, websocket_port: int, title: str = "MDLive"
) -> str:
    """
    Render the viewer page.

    The page inlines the given state for first paint and then follows the
    update channel on websocket_port.
    """
    template = _templates.get_template("shell.html")
    return template.render(
        title=title,
        content=update.content or "",
        stylesheet=update.stylesheet or "",
        websocket_port=websocket_port,
        reconnect_ms=RECONNECT_MS,
    )


@router.get("/", response_class=HTMLResponse)
async def viewer_page(
    hub: UpdateHub = Depends(get_hub),
    settings: Settings = Depends(get_app_settings),
    targets: tuple[WatchTarget, ...] = Depends(get_targets),
) -> HTMLResponse:
    """Serve the self-contained viewer page."""
    title = targets[0].path.name if targets else settings.app_name
    html = render_shell(
        hub.current_update(),
        websocket_port=settings.server.websocket_port,
        title=title,
    )
    logger.debug("viewer_page_served", title=title, viewers=hub.session_count)
    return HTMLResponse(html)


@router.get("/update", response_model=Update)
async def current_update(hub: UpdateHub = Depends(get_hub)) -> Update:
    """Most recently computed full state."""
    return hub.current_update()
