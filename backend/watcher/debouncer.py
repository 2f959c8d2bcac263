"""
MDLive Debounced Event Router.

Coalesces bursts of raw file events and turns each burst into one Update.
Requires Python 3.11+.
"""

import queue
import threading
import time
from collections.abc import Callable, Iterable
from enum import Enum
from pathlib import Path
from typing import Any

from content.models import (
    ChangeKind,
    RawChangeEvent,
    TargetRole,
    Update,
    WatchTarget,
    canonicalize,
)
from content.renderer import MarkdownRenderer
from content.source import ContentSource
from utils.errors import ContentReadError
from utils.logger import LoggerMixin


class RouterState(str, Enum):
    """Debounce state."""

    IDLE = "idle"
    COLLECTING = "collecting"


class DebouncedEventRouter(LoggerMixin):
    """
    Trailing-edge debouncer and classifier for raw change events.

    Idle until an event for a watched target arrives, then Collecting
    until the window passes with no further target events. Every target
    event re-arms the same deadline, so a burst of writes yields a single
    Update whose contents are read after the burst has settled.

    Created and modified events are both honoured; a removed event takes
    part in the burst and is resolved by the read (a file that is still
    gone produces no Update). Events for paths that are not targets are
    logged and ignored without touching the timer.
    """

    # Upper bound on a blocking get while idle, so stop requests are seen.
    IDLE_POLL_SECONDS = 0.5

    def __init__(
        self,
        targets: Iterable[WatchTarget],
        events: "queue.Queue[RawChangeEvent]",
        sink: Callable[[Update], Any],
        source: ContentSource | None = None,
        renderer: MarkdownRenderer | None = None,
        delay_ms: int = 30,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """
        Initialize the router.

        Args:
            targets: Watched files with their roles
            events: Queue filled by the file watcher
            sink: Called with each emitted Update, in order
            source: Reader for target files
            renderer: Markdown renderer for the document
            delay_ms: Debounce window in milliseconds
            clock: Monotonic time source
        """
        self._targets: dict[Path, WatchTarget] = {t.path: t for t in targets}
        self._events = events
        self._sink = sink
        self._source = source or ContentSource()
        self._renderer = renderer or MarkdownRenderer()
        self._delay = delay_ms / 1000.0
        self._clock = clock

        self._state = RouterState.IDLE
        self._pending: dict[TargetRole, WatchTarget] = {}
        self._deadline: float | None = None
        self._emitted = 0

        self._stop_event = threading.Event()
        self._thread: threading.Thread | None = None

    @property
    def state(self) -> RouterState:
        return self._state

    @property
    def pending_roles(self) -> set[TargetRole]:
        return set(self._pending)

    @property
    def emitted_count(self) -> int:
        """Number of Updates handed to the sink."""
        return self._emitted

    @property
    def deadline(self) -> float | None:
        return self._deadline

    def resolve(self, path: Path) -> WatchTarget | None:
        """Match a reported path against the targets by canonical path."""
        return self._targets.get(canonicalize(path))

    def handle_event(self, event: RawChangeEvent) -> None:
        """Feed one raw event into the state machine."""
        if event.kind is ChangeKind.OTHER:
            return

        target = self.resolve(event.path)
        if target is None:
            self.log.debug(
                "unexpected_change_path", path=str(event.path), kind=event.kind.value
            )
            return

        self._pending[target.role] = target
        self._deadline = self._clock() + self._delay
        self._state = RouterState.COLLECTING

    def poll(self) -> Update | None:
        """Fire if collecting and the window has passed."""
        if self._state is RouterState.COLLECTING and self._is_due():
            return self.fire()
        return None

    def fire(self) -> Update | None:
        """
        Close the current burst and emit its Update.

        Returns:
            The emitted Update, or None if nothing could be read
        """
        pending = self._pending
        self._pending = {}
        self._deadline = None
        self._state = RouterState.IDLE

        update = self._build_update(pending)
        if update is None:
            return None

        try:
            self._sink(update)
        except Exception as e:
            self.log.error("update_sink_failed", error=str(e))
            return None

        self._emitted += 1
        self.log.debug(
            "update_emitted",
            content=update.content is not None,
            stylesheet=update.stylesheet is not None,
        )
        return update

    def _build_update(self, pending: dict[TargetRole, WatchTarget]) -> Update | None:
        content: str | None = None
        stylesheet: str | None = None

        document = pending.get(TargetRole.DOCUMENT)
        if document is not None:
            text = self._read(document)
            if text is not None:
                content = self._renderer.render(text)

        styles = pending.get(TargetRole.STYLESHEET)
        if styles is not None:
            stylesheet = self._read(styles)

        if content is None and stylesheet is None:
            return None
        return Update(content=content, stylesheet=stylesheet)

    def _read(self, target: WatchTarget) -> str | None:
        try:
            return self._source.read(target.path)
        except ContentReadError as e:
            self.log.warning(
                "content_read_failed",
                path=str(target.path),
                role=target.role.value,
                error=e.reason,
            )
            return None

    def _is_due(self) -> bool:
        return self._deadline is not None and self._clock() >= self._deadline

    def _next_timeout(self) -> float:
        if self._deadline is None:
            return self.IDLE_POLL_SECONDS
        return max(0.0, self._deadline - self._clock())

    def run(self, stop_event: threading.Event | None = None) -> None:
        """
        Consume events until stopped.

        Each iteration waits for whichever comes first: the next raw event
        or the end of the debounce window.
        """
        stop_event = stop_event or self._stop_event
        self.log.info("event_router_started", delay_ms=int(self._delay * 1000))

        while not stop_event.is_set():
            try:
                event = self._events.get(timeout=self._next_timeout())
            except queue.Empty:
                self.poll()
                continue

            self.handle_event(event)
            # Non-target events leave the deadline alone; it may already be due
            self.poll()

        self.log.info("event_router_stopped", emitted=self._emitted)

    def start(self) -> None:
        """Run the router on a background thread."""
        if self._thread is not None and self._thread.is_alive():
            return

        self._stop_event.clear()
        self._thread = threading.Thread(
            target=self.run,
            args=(self._stop_event,),
            name="mdlive-router",
            daemon=True,
        )
        self._thread.start()

    def stop(self) -> None:
        """Signal the router thread to stop and wait for it."""
        self._stop_event.set()
        if self._thread is not None:
            self._thread.join(timeout=5.0)
            self._thread = None

    @property
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()
