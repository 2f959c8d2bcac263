"""
Tests for the Preview Server wiring.

Requires Python 3.11+.
"""

import asyncio
import json
import time
from pathlib import Path

import pytest

from api.server import PreviewServer
from content.models import TargetRole
from content.source import default_stylesheet
from utils.config import Settings
from utils.errors import ConfigError, ContentReadError


class TestInitialState:
    """Test cases for startup."""

    def test_initial_update_is_complete(self, document_file: Path, settings: Settings):
        server = PreviewServer(document_file, settings=settings)
        initial = server.hub.current_update()

        assert initial.is_complete
        assert "<h1>Title</h1>" in initial.content
        assert initial.stylesheet == default_stylesheet()

    def test_initial_update_uses_stylesheet(
        self, document_file: Path, stylesheet_file: Path, sample_stylesheet: str, settings: Settings
    ):
        server = PreviewServer(document_file, stylesheet_file, settings=settings)

        assert server.hub.current_update().stylesheet == sample_stylesheet
        assert [t.role for t in server.targets] == [TargetRole.DOCUMENT, TargetRole.STYLESHEET]

    def test_title_scenario(self, tmp_path: Path, settings: Settings):
        document = tmp_path / "title.md"
        document.write_text("# Title")

        server = PreviewServer(document, settings=settings)
        assert server.hub.current_update().content == "<h1>Title</h1>\n"

    def test_missing_document(self, tmp_path: Path, settings: Settings):
        with pytest.raises(ConfigError):
            PreviewServer(tmp_path / "missing.md", settings=settings)

    def test_unreadable_document(self, tmp_path: Path, settings: Settings):
        document = tmp_path / "binary.md"
        document.write_bytes(b"\xff\xfe\xfa")

        with pytest.raises(ContentReadError):
            PreviewServer(document, settings=settings)


class _Recorder:
    """Fake session collecting payloads."""

    def __init__(self) -> None:
        self.sent: list[dict] = []

    async def accept(self) -> None:
        pass

    async def send_text(self, data: str) -> None:
        self.sent.append(json.loads(data))


class TestPipeline:
    """End-to-end: file write to viewer session, without HTTP."""

    @pytest.mark.asyncio
    async def test_write_reaches_viewer(self, document_file: Path, settings: Settings):
        server = PreviewServer(document_file, settings=settings)
        viewer = _Recorder()
        await server.hub.connect(viewer)

        server.hub.bind_loop(asyncio.get_running_loop())
        server._watcher.start()
        server._router.start()
        try:
            await asyncio.sleep(0.1)
            document_file.write_text("# Title\n\nBody")

            deadline = time.monotonic() + 5.0
            while len(viewer.sent) < 2 and time.monotonic() < deadline:
                await asyncio.sleep(0.02)
        finally:
            await asyncio.to_thread(server._router.stop)
            server._watcher.stop()

        assert viewer.sent[0]["stylesheet"] is not None
        latest = viewer.sent[-1]
        assert "<p>Body</p>" in latest["content"]
        assert latest["stylesheet"] is None
