"""
MDLive Configuration Module.

Centralizes all configuration settings using Pydantic Settings.
Requires Python 3.11+.
"""

from functools import lru_cache
from pathlib import Path
from typing import Annotated

from dotenv import load_dotenv
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

# Load .env file into os.environ at module import time
# This ensures nested BaseSettings classes can read the values
_env_file = Path(__file__).parent.parent / ".env"
if _env_file.exists():
    load_dotenv(_env_file)
else:
    # Try current working directory
    load_dotenv()


class WatcherSettings(BaseSettings):
    """File watcher and debounce settings."""

    model_config = SettingsConfigDict(env_prefix="WATCHER_")

    debounce_delay_ms: int = Field(
        default=30, ge=1, le=5000, description="Quiet period before a burst is emitted"
    )
    queue_size: int = Field(
        default=1024, ge=1, description="Pending raw events kept before dropping"
    )


class ServerSettings(BaseSettings):
    """Page server and update channel settings."""

    model_config = SettingsConfigDict(env_prefix="SERVER_")

    host: str = Field(default="127.0.0.1")
    port: int = Field(default=8000, ge=1, le=65535, description="Viewer page port")
    websocket_port: int = Field(
        default=3012, ge=1, le=65535, description="Update channel port"
    )
    open_browser: bool = Field(default=True)
    serve_assets: bool = Field(
        default=True, description="Serve files next to the document (images, etc.)"
    )
    send_timeout: float = Field(
        default=2.0, gt=0, le=60, description="Seconds before an unresponsive viewer is dropped"
    )

    @property
    def page_url(self) -> str:
        """URL of the viewer page."""
        return f"http://{self.host}:{self.port}"


class RenderSettings(BaseSettings):
    """Markdown renderer settings."""

    model_config = SettingsConfigDict(env_prefix="RENDER_")

    preset: str = Field(default="commonmark", description="markdown-it preset name")
    extensions: Annotated[list[str], NoDecode] = Field(
        default=[],
        description="Extra markdown-it rules to enable (e.g. table, strikethrough)",
    )

    @field_validator("extensions", mode="before")
    @classmethod
    def parse_extensions(cls, v: str | list[str]) -> list[str]:
        """Parse extensions from comma-separated string or list."""
        if isinstance(v, str):
            return [e.strip() for e in v.split(",") if e.strip()]
        return v


class LoggingSettings(BaseSettings):
    """Logging configuration settings."""

    model_config = SettingsConfigDict(env_prefix="LOG_")

    level: str = Field(default="INFO")
    format: str = Field(default="console")  # "json" or "console"


class Settings(BaseSettings):
    """Main application settings aggregating all sub-settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application metadata
    app_name: str = Field(default="MDLive")
    app_version: str = Field(default="0.1.0")
    environment: str = Field(default="development")

    # Sub-settings
    watcher: WatcherSettings = Field(default_factory=WatcherSettings)
    server: ServerSettings = Field(default_factory=ServerSettings)
    render: RenderSettings = Field(default_factory=RenderSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)

    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.environment.lower() in ("development", "dev", "local")

    @property
    def debounce_seconds(self) -> float:
        """Debounce window in seconds."""
        return self.watcher.debounce_delay_ms / 1000.0


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """
    Get cached application settings.

    Returns singleton instance of Settings for performance.
    The CLI derives per-run overrides from it with ``model_copy``.
    """
    return Settings()
