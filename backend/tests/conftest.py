"""
MDLive Test Configuration.

Pytest fixtures and configuration.
Requires Python 3.11+.
"""

import asyncio
import queue
from pathlib import Path

import pytest

from content.models import RawChangeEvent, WatchTarget, build_targets
from utils.config import Settings


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 100.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeSession:
    """Stands in for an accepted WebSocket."""

    def __init__(self, fail: bool = False, stall: bool = False) -> None:
        self.sent: list[str] = []
        self.accepted = False
        self.fail = fail
        self.stall = stall

    async def accept(self) -> None:
        self.accepted = True

    async def send_text(self, data: str) -> None:
        if self.stall:
            # A viewer that stopped reading: the send never completes
            await asyncio.sleep(3600)
        if self.fail:
            raise ConnectionError("client went away")
        self.sent.append(data)


@pytest.fixture
def sample_markdown() -> str:
    """Sample Markdown document for testing."""
    return """# Title

Some *emphasis* and a [link](https://example.com).

- one
- two
"""


@pytest.fixture
def sample_stylesheet() -> str:
    """Sample stylesheet for testing."""
    return "body { color: #333; }\n"


@pytest.fixture
def document_file(tmp_path: Path, sample_markdown: str) -> Path:
    """Create a temporary Markdown document."""
    file_path = tmp_path / "doc.md"
    file_path.write_text(sample_markdown)
    return file_path


@pytest.fixture
def stylesheet_file(tmp_path: Path, sample_stylesheet: str) -> Path:
    """Create a temporary stylesheet."""
    file_path = tmp_path / "style.css"
    file_path.write_text(sample_stylesheet)
    return file_path


@pytest.fixture
def targets(document_file: Path, stylesheet_file: Path) -> tuple[WatchTarget, ...]:
    """Document and stylesheet targets."""
    return build_targets(document_file, stylesheet_file)


@pytest.fixture
def events() -> "queue.Queue[RawChangeEvent]":
    """Queue shared between watcher and router."""
    return queue.Queue(maxsize=64)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def settings() -> Settings:
    """Settings with the browser launch turned off."""
    base = Settings()
    return base.model_copy(
        update={"server": base.server.model_copy(update={"open_browser": False})}
    )


@pytest.fixture
def make_session():
    """Factory for fake viewer sessions."""
    return FakeSession
