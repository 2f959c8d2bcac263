"""
Tests for Settings and the CLI.

Requires Python 3.11+.
"""

from pathlib import Path

import pytest

from api.cli import build_parser, main, settings_from_args
from utils.config import RenderSettings, Settings, WatcherSettings, get_settings
from utils.errors import ConfigError
from utils.logger import AppContext, build_processors


class TestSettings:
    """Test cases for Settings."""

    def test_defaults(self):
        settings = Settings()

        assert settings.watcher.debounce_delay_ms == 30
        assert settings.debounce_seconds == pytest.approx(0.03)
        assert settings.server.port == 8000
        assert settings.server.websocket_port == 3012
        assert settings.server.page_url == "http://127.0.0.1:8000"
        assert settings.render.preset == "commonmark"
        assert settings.server.send_timeout == 2.0

    def test_env_override(self, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.setenv("WATCHER_DEBOUNCE_DELAY_MS", "75")
        assert WatcherSettings().debounce_delay_ms == 75

    def test_extensions_from_comma_list(self, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.setenv("RENDER_EXTENSIONS", "table, strikethrough")
        assert RenderSettings().extensions == ["table", "strikethrough"]

    def test_debounce_bounds(self):
        with pytest.raises(ValueError):
            WatcherSettings(debounce_delay_ms=0)


class TestCommandLine:
    """Test cases for argument handling."""

    def parse(self, *argv: str):
        settings = Settings()
        return build_parser(settings).parse_args(list(argv)), settings

    def test_short_and_long_flags(self):
        args, _ = self.parse("doc.md", "-s", "style.css", "--no-open", "-p", "9000")

        assert args.file == Path("doc.md")
        assert args.stylesheet == Path("style.css")
        assert args.no_open
        assert args.port == 9000

    def test_overrides_applied(self):
        args, settings = self.parse("doc.md", "--no-open", "--port", "9000", "--debounce-ms", "50")
        updated = settings_from_args(args, settings)

        assert updated.server.port == 9000
        assert updated.server.open_browser is False
        assert updated.watcher.debounce_delay_ms == 50
        assert settings.server.port == 8000

    def test_same_ports_rejected(self):
        args, settings = self.parse("doc.md", "-p", "3012")
        with pytest.raises(ConfigError):
            settings_from_args(args, settings)

    @pytest.fixture(autouse=True)
    def _keep_logging(self, monkeypatch: pytest.MonkeyPatch):
        """Leave the global structlog configuration untouched."""
        monkeypatch.setattr("api.cli.configure_logging", lambda settings: None)

    def test_missing_document_exits_nonzero(self, tmp_path: Path, capsys):
        """Test that startup failures print a diagnostic and fail."""
        status = main([str(tmp_path / "missing.md"), "--no-open"])

        assert status == 1
        assert "error:" in capsys.readouterr().err

    def test_missing_stylesheet_exits_nonzero(self, document_file: Path, tmp_path: Path, capsys):
        status = main([str(document_file), "-s", str(tmp_path / "missing.css"), "--no-open"])

        assert status == 1
        assert "stylesheet" in capsys.readouterr().err

    def test_invalid_environment_exits_nonzero(
        self, document_file: Path, monkeypatch: pytest.MonkeyPatch, capsys
    ):
        """Test that a bad environment value is reported instead of raised."""
        monkeypatch.setenv("WATCHER_DEBOUNCE_DELAY_MS", "0")
        get_settings.cache_clear()
        try:
            status = main([str(document_file), "--no-open"])
        finally:
            get_settings.cache_clear()

        assert status == 1
        assert "error:" in capsys.readouterr().err


class TestLogging:
    """Test cases for the structlog processor chain."""

    def test_app_context_uses_given_settings(self):
        settings = Settings(app_name="Notes", app_version="9.9")
        settings = settings.model_copy(
            update={"logging": settings.logging.model_copy(update={"format": "json"})}
        )

        context = next(p for p in build_processors(settings) if isinstance(p, AppContext))
        entry = context(None, "info", {"event": "started"})

        assert entry == {"event": "started", "app": "Notes", "version": "9.9"}

    def test_console_format_has_no_app_context(self, settings: Settings):
        assert not any(isinstance(p, AppContext) for p in build_processors(settings))
