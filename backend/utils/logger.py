"""
MDLive Structured Logging Module.

structlog setup for the preview. Everything goes to stderr so stdout only
carries the served URL.
Requires Python 3.11+.
"""

import logging
import sys

import structlog
from structlog.types import EventDict, Processor, WrappedLogger

from utils.config import Settings, get_settings

# Third-party loggers that are too chatty at INFO
_QUIET_LOGGERS = ("watchdog", "uvicorn.access", "markdown_it")


class AppContext:
    """Processor stamping each entry with the configured app name and version."""

    def __init__(self, settings: Settings) -> None:
        self._app = settings.app_name
        self._version = settings.app_version

    def __call__(
        self, logger: WrappedLogger, method_name: str, event_dict: EventDict
    ) -> EventDict:
        event_dict.setdefault("app", self._app)
        event_dict.setdefault("version", self._version)
        return event_dict


def build_processors(settings: Settings) -> list[Processor]:
    """Processor chain for the configured output format."""
    processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.StackInfoRenderer(),
        structlog.dev.set_exc_info,
        structlog.processors.TimeStamper(fmt="iso"),
    ]

    if settings.logging.format == "json":
        processors += [
            AppContext(settings),
            structlog.processors.dict_tracebacks,
            structlog.processors.JSONRenderer(),
        ]
    else:
        processors.append(
            structlog.dev.ConsoleRenderer(
                colors=sys.stderr.isatty(),
                exception_formatter=structlog.dev.plain_traceback,
            )
        )
    return processors


def configure_logging(settings: Settings | None = None) -> None:
    """
    Configure structured logging for the application.

    Call this once at startup. The CLI passes its overridden settings so
    that ``--log-level`` takes effect.
    """
    settings = settings or get_settings()
    level = logging.getLevelNamesMapping().get(settings.logging.level.upper(), logging.INFO)

    structlog.configure(
        processors=build_processors(settings),
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=True,
    )

    # uvicorn and watchdog log through the standard library
    logging.basicConfig(
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
        level=level,
    )
    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    """
    Get a structured logger instance.

    Args:
        name: Logger name (typically the component name)
    """
    return structlog.get_logger(name)


class LoggerMixin:
    """Gives a class a ``log`` property bound to its class name."""

    @property
    def log(self) -> structlog.stdlib.BoundLogger:
        if not hasattr(self, "_logger"):
            self._logger = get_logger(self.__class__.__name__)
        return self._logger
