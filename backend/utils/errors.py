"""
MDLive Error Hierarchy.

Startup failures raise these and are reported by the CLI.
Requires Python 3.11+.
"""

from pathlib import Path


class PreviewError(Exception):
    """Base error for all preview operations."""


class ConfigError(PreviewError):
    """Invalid or missing configuration (document or stylesheet path)."""


class ContentReadError(PreviewError):
    """A watched file could not be read or decoded."""

    def __init__(self, path: Path, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"could not read {path}: {reason}")


class WatchError(PreviewError):
    """Filesystem change notification could not be set up."""
