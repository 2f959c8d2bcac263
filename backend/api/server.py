"""
MDLive Preview Server.

Wires the watcher, router, hub and both HTTP servers together.
Requires Python 3.11+.
"""

import asyncio
import webbrowser
from pathlib import Path

import uvicorn

from api.main import create_app
from api.routes.websocket import UpdateHub, create_channel_app
from content.models import TargetRole, Update, WatchTarget, build_targets
from content.renderer import MarkdownRenderer
from content.source import ContentSource, default_stylesheet
from utils.config import Settings, get_settings
from utils.logger import LoggerMixin
from watcher.debouncer import DebouncedEventRouter
from watcher.file_watcher import FileWatcher


class PreviewServer(LoggerMixin):
    """
    One live preview session.

    Construction performs every fatal check: targets exist, the initial
    document and stylesheet can be read, and the renderer is configured.
    ``run()`` then starts watching and serves until interrupted.
    """

    def __init__(
        self,
        document: Path | str,
        stylesheet: Path | str | None = None,
        settings: Settings | None = None,
    ) -> None:
        """
        Initialize the preview session.

        Args:
            document: Markdown file to preview
            stylesheet: Optional CSS file replacing the default styles
            settings: Settings to run with (cached settings if omitted)

        Raises:
            ConfigError: If a path is missing or the renderer is misconfigured
            ContentReadError: If the initial read fails
        """
        self._settings = settings or get_settings()
        self._targets = build_targets(document, stylesheet)
        self._source = ContentSource()
        self._renderer = MarkdownRenderer(
            preset=self._settings.render.preset,
            extensions=self._settings.render.extensions,
        )
        self._hub = UpdateHub(
            self.initial_update(), send_timeout=self._settings.server.send_timeout
        )

        self._watcher = FileWatcher(
            self._targets, queue_size=self._settings.watcher.queue_size
        )
        self._router = DebouncedEventRouter(
            targets=self._targets,
            events=self._watcher.events,
            sink=self._hub.publish,
            source=self._source,
            renderer=self._renderer,
            delay_ms=self._settings.watcher.debounce_delay_ms,
        )

    @property
    def hub(self) -> UpdateHub:
        return self._hub

    @property
    def targets(self) -> tuple[WatchTarget, ...]:
        return self._targets

    @property
    def settings(self) -> Settings:
        return self._settings

    def _target(self, role: TargetRole) -> WatchTarget | None:
        return next((t for t in self._targets if t.role is role), None)

    def render(self, text: str) -> str:
        """Render Markdown with this session's renderer."""
        return self._renderer.render(text)

    def initial_update(self) -> Update:
        """
        Read and render the full starting state.

        Raises:
            ContentReadError: If the document or stylesheet cannot be read
        """
        document = self._target(TargetRole.DOCUMENT)
        stylesheet = self._target(TargetRole.STYLESHEET)
        content = self.render(self._source.read(document.path))
        styles = (
            self._source.read(stylesheet.path) if stylesheet is not None else default_stylesheet()
        )
        return Update(content=content, stylesheet=styles)

    def run(self) -> None:
        """Serve until interrupted."""
        asyncio.run(self.serve())

    async def serve(self) -> None:
        """
        Start the pipeline and both servers, and stop them when either exits.

        Raises:
            WatchError: If the watched directories cannot be subscribed to
        """
        server_settings = self._settings.server
        page_server = uvicorn.Server(
            uvicorn.Config(
                create_app(self._hub, self._targets, self._settings),
                host=server_settings.host,
                port=server_settings.port,
                log_config=None,
            )
        )
        channel_server = uvicorn.Server(
            uvicorn.Config(
                create_channel_app(self._hub),
                host=server_settings.host,
                port=server_settings.websocket_port,
                log_config=None,
            )
        )

        self._hub.bind_loop(asyncio.get_running_loop())
        self._watcher.start()
        self._router.start()

        tasks = [
            asyncio.create_task(page_server.serve(), name="mdlive-page"),
            asyncio.create_task(channel_server.serve(), name="mdlive-channel"),
        ]
        announce = asyncio.create_task(self._announce(page_server))

        try:
            done, pending = await asyncio.wait(tasks, return_when=asyncio.FIRST_COMPLETED)
            page_server.should_exit = True
            channel_server.should_exit = True
            await asyncio.gather(*pending)
            for task in done:
                task.result()
        finally:
            announce.cancel()
            # The router may be waiting on this loop inside publish()
            await asyncio.to_thread(self._router.stop)
            self._watcher.stop()
            self.log.info("preview_stopped", updates=self._router.emitted_count)

    async def _announce(self, page_server: uvicorn.Server) -> None:
        while not page_server.started:
            await asyncio.sleep(0.05)

        url = self._settings.server.page_url
        print(f"Serving content at {url}", flush=True)
        self.log.info(
            "preview_started",
            document=str(self._targets[0].path),
            url=url,
            websocket_port=self._settings.server.websocket_port,
        )
        if self._settings.server.open_browser:
            webbrowser.open(url)
