"""
MDLive File Watcher Package.

File system monitoring and debounced routing of change events.
Requires Python 3.11+.
"""

from watcher.file_watcher import FileWatcher, TargetEventHandler
from watcher.debouncer import DebouncedEventRouter, RouterState

__all__ = ["FileWatcher", "TargetEventHandler", "DebouncedEventRouter", "RouterState"]
