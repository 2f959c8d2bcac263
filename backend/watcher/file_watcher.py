"""
MDLive File Watcher.

Cross-platform file system monitoring using watchdog.
Requires Python 3.11+.
"""

import queue
from collections.abc import Iterable
from pathlib import Path
from typing import Any

from watchdog.observers import Observer
from watchdog.events import (
    FileSystemEventHandler,
    FileClosedEvent,
    FileCreatedEvent,
    FileModifiedEvent,
    FileDeletedEvent,
    FileMovedEvent,
    DirCreatedEvent,
    DirDeletedEvent,
    DirModifiedEvent,
    DirMovedEvent,
)

from content.models import ChangeKind, RawChangeEvent, WatchTarget
from utils.errors import WatchError
from utils.logger import LoggerMixin


class TargetEventHandler(FileSystemEventHandler, LoggerMixin):
    """
    Turns watchdog events into RawChangeEvents on a bounded queue.

    Events are forwarded as reported, including siblings of the watched
    files that share their directory; classification is the router's job.
    """

    def __init__(self, events: "queue.Queue[RawChangeEvent]") -> None:
        """
        Initialize the handler.

        Args:
            events: Queue shared with the event router
        """
        super().__init__()
        self._events = events
        self._dropped = 0

    @property
    def dropped_count(self) -> int:
        """Number of events dropped because the queue was full."""
        return self._dropped

    def _emit(self, path: str | bytes, kind: ChangeKind) -> None:
        if isinstance(path, bytes):
            path = path.decode()
        event = RawChangeEvent(path=Path(path), kind=kind)
        try:
            self._events.put_nowait(event)
        except queue.Full:
            self._dropped += 1
            self.log.warning(
                "change_event_dropped",
                path=str(event.path),
                kind=kind.value,
                dropped=self._dropped,
            )

    def on_created(self, event: FileCreatedEvent | DirCreatedEvent) -> None:
        """Handle file creation."""
        if isinstance(event, DirCreatedEvent):
            return
        self._emit(event.src_path, ChangeKind.CREATED)

    def on_modified(self, event: FileModifiedEvent | DirModifiedEvent) -> None:
        """Handle file modification."""
        if isinstance(event, DirModifiedEvent):
            return
        self._emit(event.src_path, ChangeKind.MODIFIED)

    def on_deleted(self, event: FileDeletedEvent | DirDeletedEvent) -> None:
        """Handle file deletion."""
        if isinstance(event, DirDeletedEvent):
            return
        self._emit(event.src_path, ChangeKind.REMOVED)

    def on_moved(self, event: FileMovedEvent | DirMovedEvent) -> None:
        """Handle file move/rename (atomic saves land here)."""
        if isinstance(event, DirMovedEvent):
            return
        self._emit(event.src_path, ChangeKind.REMOVED)
        self._emit(event.dest_path, ChangeKind.CREATED)

    def on_closed(self, event: FileClosedEvent) -> None:
        """Handle close-after-write; reported but not acted upon."""
        self._emit(event.src_path, ChangeKind.OTHER)


class FileWatcher(LoggerMixin):
    """
    Watches the directories of a fixed set of targets.

    Each distinct parent directory gets one non-recursive watch. Raw events
    are handed to the consumer through a bounded queue; if the consumer
    stalls, new events are dropped rather than blocking the observer thread.
    """

    def __init__(
        self,
        targets: Iterable[WatchTarget],
        events: "queue.Queue[RawChangeEvent] | None" = None,
        queue_size: int = 1024,
    ) -> None:
        """
        Initialize the file watcher.

        Args:
            targets: Files whose changes should be reported
            events: Queue to push events to (created if omitted)
            queue_size: Capacity of the created queue
        """
        self._targets = tuple(targets)
        self._events: queue.Queue[RawChangeEvent] = (
            events if events is not None else queue.Queue(maxsize=queue_size)
        )
        self._handler = TargetEventHandler(self._events)
        self._observer: Observer | None = None
        self._running = False

    @property
    def events(self) -> "queue.Queue[RawChangeEvent]":
        """Queue the raw events are delivered to."""
        return self._events

    @property
    def directories(self) -> list[Path]:
        """Distinct directories being watched, in target order."""
        seen: list[Path] = []
        for target in self._targets:
            if target.directory not in seen:
                seen.append(target.directory)
        return seen

    def start(self) -> None:
        """
        Start watching for file changes.

        Raises:
            WatchError: If a directory cannot be watched
        """
        if self._running:
            return

        observer = Observer()
        try:
            for directory in self.directories:
                observer.schedule(self._handler, str(directory), recursive=False)
            observer.start()
        except OSError as e:
            raise WatchError(f"cannot watch {e.filename or ''}: {e.strerror or e}") from e

        self._observer = observer
        self._running = True

        self.log.info(
            "file_watcher_started",
            directories=[str(d) for d in self.directories],
            targets=[str(t.path) for t in self._targets],
        )

    def stop(self) -> None:
        """Stop watching for file changes."""
        if not self._running:
            return

        if self._observer is not None:
            self._observer.stop()
            self._observer.join(timeout=5.0)
            self._observer = None

        self._running = False
        self.log.info("file_watcher_stopped", dropped=self._handler.dropped_count)

    @property
    def is_running(self) -> bool:
        """Check if the watcher is running."""
        return self._running

    def __enter__(self) -> "FileWatcher":
        """Context manager entry."""
        self.start()
        return self

    def __exit__(self, *args: Any) -> None:
        """Context manager exit."""
        self.stop()
