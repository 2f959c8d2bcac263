"""
MDLive Content Package.

Watched targets, the Update message, and turning files into renderable form.
Requires Python 3.11+.
"""

from content.models import (
    ChangeKind,
    RawChangeEvent,
    TargetRole,
    Update,
    WatchTarget,
    build_targets,
    canonicalize,
)
from content.renderer import MarkdownRenderer
from content.source import ContentSource, default_stylesheet

__all__ = [
    # Enums
    "ChangeKind",
    "TargetRole",
    # Data classes
    "RawChangeEvent",
    "Update",
    "WatchTarget",
    # Helpers
    "build_targets",
    "canonicalize",
    "default_stylesheet",
    # Content classes
    "ContentSource",
    "MarkdownRenderer",
]
