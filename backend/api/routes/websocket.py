"""
MDLive WebSocket Routes.

Live updates to connected viewers via WebSocket.
Requires Python 3.11+.
"""

import asyncio
from typing import Any

from fastapi import APIRouter, Depends, FastAPI, WebSocket, WebSocketDisconnect

from api.dependencies import get_hub
from content.models import Update
from utils.logger import get_logger

router = APIRouter()
logger = get_logger("api.websocket")

# Seconds a viewer may take to accept one message
DEFAULT_SEND_TIMEOUT = 2.0


class UpdateHub:
    """
    Owns the set of connected viewer sessions and fans out Updates.

    Joining, leaving and broadcasting all go through one lock: a joining
    viewer receives the full current state and is added to the set before
    any later broadcast can run, and no session is removed while a send
    to it is in progress.

    Every send is bounded by ``send_timeout``. A viewer that stops reading
    is treated like one whose send raised: it is evicted, and the lock is
    released no later than one timeout after a broadcast starts.
    """

    def __init__(self, initial: Update, send_timeout: float = DEFAULT_SEND_TIMEOUT) -> None:
        """
        Initialize the hub.

        Args:
            initial: Full state (content and stylesheet) sent to new viewers
            send_timeout: Seconds a single send may take before the session is dropped
        """
        self._sessions: set[WebSocket] = set()
        self._lock = asyncio.Lock()
        self._current = initial
        self._send_timeout = send_timeout
        self._loop: asyncio.AbstractEventLoop | None = None
        self._broadcasts = 0

    def current_update(self) -> Update:
        """Most recently computed full state."""
        return self._current

    @property
    def session_count(self) -> int:
        """Get the number of registered sessions."""
        return len(self._sessions)

    @property
    def broadcast_count(self) -> int:
        return self._broadcasts

    async def _send(self, session: WebSocket, payload: str) -> bool:
        """Send one payload, reporting failure or timeout as False."""
        try:
            await asyncio.wait_for(session.send_text(payload), self._send_timeout)
        except TimeoutError:
            logger.warning("session_send_timeout", timeout=self._send_timeout)
            return False
        except Exception as e:
            logger.warning("session_send_failed", error=str(e) or type(e).__name__)
            return False
        return True

    async def connect(self, websocket: WebSocket) -> bool:
        """
        Accept a viewer, send it the full state, then register it.

        Args:
            websocket: The WebSocket connection to register

        Returns:
            True if the viewer was registered
        """
        await websocket.accept()
        async with self._lock:
            if not await self._send(websocket, self._current.to_json()):
                return False
            self._sessions.add(websocket)
        logger.info("connection_established", total_connections=len(self._sessions))
        return True

    async def disconnect(self, websocket: WebSocket) -> None:
        """
        Unregister a viewer.

        Args:
            websocket: The WebSocket connection to unregister
        """
        async with self._lock:
            if websocket not in self._sessions:
                return
            self._sessions.discard(websocket)
        logger.info("connection_closed", total_connections=len(self._sessions))

    async def broadcast(self, update: Update) -> int:
        """
        Deliver an Update to every registered viewer.

        The Update is serialized once and the same payload is sent to each
        session concurrently. A session whose send fails or times out is
        dropped; the others still receive the Update.

        Args:
            update: The Update to deliver

        Returns:
            Number of sessions the Update was delivered to
        """
        payload = update.to_json()

        async with self._lock:
            self._current = self._current.merged(update)
            self._broadcasts += 1

            sessions = list(self._sessions)
            results = await asyncio.gather(
                *(self._send(session, payload) for session in sessions)
            )
            dropped = {s for s, ok in zip(sessions, results) if not ok}

            # Clean up failed sessions
            self._sessions -= dropped

        delivered = len(sessions) - len(dropped)
        logger.debug(
            "update_broadcast",
            delivered=delivered,
            dropped=len(dropped),
            content=update.content is not None,
            stylesheet=update.stylesheet is not None,
        )
        return delivered

    def bind_loop(self, loop: asyncio.AbstractEventLoop) -> None:
        """Set the event loop that serves the viewer sessions."""
        self._loop = loop

    def publish(self, update: Update) -> int:
        """
        Broadcast from another thread and wait for delivery to finish.

        Waiting keeps Updates in the order they were published.

        Raises:
            RuntimeError: If no event loop has been bound
        """
        if self._loop is None:
            raise RuntimeError("UpdateHub.publish called before bind_loop")
        future = asyncio.run_coroutine_threadsafe(self.broadcast(update), self._loop)
        return future.result()


@router.websocket("/")
async def websocket_endpoint(
    websocket: WebSocket,
    hub: UpdateHub = Depends(get_hub),
) -> None:
    """
    Update channel endpoint.

    Viewers receive the full state on connect and every Update after.
    Inbound messages carry no meaning and are discarded.
    """
    if not await hub.connect(websocket):
        return

    try:
        while True:
            message = await websocket.receive()
            if message["type"] == "websocket.disconnect":
                break
    except WebSocketDisconnect:
        pass
    except Exception as e:
        logger.error("websocket_error", error=str(e))
    finally:
        await hub.disconnect(websocket)


def create_channel_app(hub: UpdateHub) -> FastAPI:
    """
    Create the update channel application.

    Served on its own port, independent from the viewer page.

    Args:
        hub: Hub owning the viewer sessions

    Returns:
        Configured FastAPI instance
    """
    application = FastAPI(docs_url=None, redoc_url=None, openapi_url=None)
    application.state.hub = hub
    application.include_router(router, tags=["WebSocket"])
    return application


def channel_info(hub: UpdateHub) -> dict[str, Any]:
    """Summary of the channel used by the health endpoint."""
    return {"viewers": hub.session_count, "broadcasts": hub.broadcast_count}
