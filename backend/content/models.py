"""
MDLive Content Data Models.

Defines the watched targets, raw change events and the Update wire message.
Requires Python 3.11+.
"""

from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from pydantic import BaseModel, ConfigDict

from utils.errors import ConfigError


class TargetRole(str, Enum):
    """What a watched file is used for."""

    DOCUMENT = "document"
    STYLESHEET = "stylesheet"


class ChangeKind(str, Enum):
    """Kinds of raw filesystem notifications."""

    CREATED = "created"
    MODIFIED = "modified"
    REMOVED = "removed"
    OTHER = "other"


@dataclass(frozen=True)
class WatchTarget:
    """A canonical file path and the role it plays in the preview."""

    path: Path
    role: TargetRole

    @property
    def directory(self) -> Path:
        """Directory that has to be watched to see changes to this file."""
        return self.path.parent


@dataclass(frozen=True)
class RawChangeEvent:
    """A low-level change notification, as reported by the watcher."""

    path: Path
    kind: ChangeKind


class Update(BaseModel):
    """
    A live update pushed to viewers.

    Either field may be None; the viewer overwrites its content area
    and/or style block for each populated field.
    """

    model_config = ConfigDict(frozen=True)

    content: str | None = None
    stylesheet: str | None = None

    @property
    def is_empty(self) -> bool:
        return self.content is None and self.stylesheet is None

    @property
    def is_complete(self) -> bool:
        return self.content is not None and self.stylesheet is not None

    def merged(self, other: "Update") -> "Update":
        """Return a new Update with the populated fields of other applied."""
        return Update(
            content=other.content if other.content is not None else self.content,
            stylesheet=(
                other.stylesheet if other.stylesheet is not None else self.stylesheet
            ),
        )

    def to_json(self) -> str:
        """Serialize to the wire format."""
        return self.model_dump_json()


def canonicalize(path: Path | str) -> Path:
    """Absolute path with symlinks resolved; the file need not exist."""
    return Path(path).expanduser().resolve()


def build_targets(
    document: Path | str, stylesheet: Path | str | None = None
) -> tuple[WatchTarget, ...]:
    """
    Create the watch targets from user supplied paths.

    Args:
        document: Markdown document to preview
        stylesheet: Optional CSS file replacing the default styles

    Returns:
        Document target followed by the stylesheet target, if any

    Raises:
        ConfigError: If a path does not name an existing file
    """
    targets = [WatchTarget(path=_existing_file(document, "document"), role=TargetRole.DOCUMENT)]
    if stylesheet is not None:
        targets.append(
            WatchTarget(
                path=_existing_file(stylesheet, "stylesheet"),
                role=TargetRole.STYLESHEET,
            )
        )
    return tuple(targets)


def _existing_file(path: Path | str, label: str) -> Path:
    resolved = canonicalize(path)
    if not resolved.exists():
        raise ConfigError(f"{label} not found: {path}")
    if not resolved.is_file():
        raise ConfigError(f"{label} is not a regular file: {path}")
    return resolved
