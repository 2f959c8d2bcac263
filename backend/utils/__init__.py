"""
MDLive Utilities Package.

Configuration, logging and errors shared across all backend modules.
Requires Python 3.11+.
"""

from utils.config import Settings, get_settings
from utils.errors import ConfigError, ContentReadError, PreviewError, WatchError
from utils.logger import configure_logging, get_logger, LoggerMixin

__all__ = [
    "Settings",
    "get_settings",
    "configure_logging",
    "get_logger",
    "LoggerMixin",
    "PreviewError",
    "ConfigError",
    "ContentReadError",
    "WatchError",
]
