"""
MDLive Markdown Renderer.

Thin wrapper around markdown-it-py.
Requires Python 3.11+.
"""

from collections.abc import Iterable

from markdown_it import MarkdownIt

from utils.errors import ConfigError
from utils.logger import LoggerMixin


class MarkdownRenderer(LoggerMixin):
    """
    Renders Markdown text to HTML.

    CommonMark has a defined rendering for every input, so malformed
    syntax comes out as literal text instead of raising.
    """

    def __init__(self, preset: str = "commonmark", extensions: Iterable[str] = ()) -> None:
        """
        Initialize the renderer.

        Args:
            preset: markdown-it preset name
            extensions: Extra rules to enable (e.g. "table", "strikethrough")

        Raises:
            ConfigError: If the preset or an extension is unknown
        """
        try:
            self._md = MarkdownIt(preset)
        except KeyError as e:
            raise ConfigError(f"unknown markdown preset: {preset}") from e
        self._extensions = tuple(extensions)
        if self._extensions:
            try:
                self._md.enable(list(self._extensions))
            except ValueError as e:
                raise ConfigError(f"unknown markdown extension: {e}") from e
            self.log.debug("renderer_extensions_enabled", extensions=self._extensions)

    @property
    def extensions(self) -> tuple[str, ...]:
        return self._extensions

    def render(self, text: str) -> str:
        """Render Markdown text to an HTML fragment."""
        return self._md.render(text)
