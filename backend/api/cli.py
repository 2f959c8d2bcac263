"""
MDLive Command Line Interface.

Preview a Markdown file in the browser, updating live as it is saved.
Requires Python 3.11+.

Usage:
    mdlive README.md
    mdlive notes.md --stylesheet theme.css --port 8080 --no-open
"""

import argparse
import sys
from pathlib import Path

from pydantic import ValidationError

from utils.config import Settings, get_settings
from utils.errors import ConfigError, PreviewError
from utils.logger import configure_logging


def build_parser(settings: Settings) -> argparse.ArgumentParser:
    """Build the argument parser, using settings for defaults."""
    parser = argparse.ArgumentParser(
        prog="mdlive",
        description="Render a Markdown file and keep the browser view in sync with it.",
    )
    parser.add_argument("file", type=Path, help="Markdown document to preview")
    parser.add_argument(
        "-s",
        "--stylesheet",
        type=Path,
        default=None,
        help="A .css file to replace the default styles",
    )
    parser.add_argument(
        "--no-open",
        action="store_true",
        help="Do not open the rendered markdown in the browser",
    )
    parser.add_argument(
        "-p",
        "--port",
        type=int,
        default=settings.server.port,
        help="Port for the viewer page (default: %(default)s)",
    )
    parser.add_argument(
        "--websocket-port",
        type=int,
        default=settings.server.websocket_port,
        help="Port for the live update channel (default: %(default)s)",
    )
    parser.add_argument(
        "--host",
        default=settings.server.host,
        help="Bind address (default: %(default)s)",
    )
    parser.add_argument(
        "--debounce-ms",
        type=int,
        default=settings.watcher.debounce_delay_ms,
        help="Quiet period before changes are pushed (default: %(default)s)",
    )
    parser.add_argument(
        "--log-level",
        default=settings.logging.level,
        help="Logging level (default: %(default)s)",
    )
    return parser


def settings_from_args(args: argparse.Namespace, settings: Settings) -> Settings:
    """Apply command line overrides on top of the loaded settings."""
    if not 1 <= args.port <= 65535 or not 1 <= args.websocket_port <= 65535:
        raise ConfigError("ports must be between 1 and 65535")
    if args.port == args.websocket_port:
        raise ConfigError("--port and --websocket-port must differ")
    if args.debounce_ms < 1:
        raise ConfigError("--debounce-ms must be positive")

    return settings.model_copy(
        update={
            "server": settings.server.model_copy(
                update={
                    "host": args.host,
                    "port": args.port,
                    "websocket_port": args.websocket_port,
                    "open_browser": settings.server.open_browser and not args.no_open,
                }
            ),
            "watcher": settings.watcher.model_copy(
                update={"debounce_delay_ms": args.debounce_ms}
            ),
            "logging": settings.logging.model_copy(update={"level": args.log_level}),
        }
    )


def main(argv: list[str] | None = None) -> int:
    """CLI entry point."""
    try:
        base = get_settings()
        args = build_parser(base).parse_args(argv)
        settings = settings_from_args(args, base)
        configure_logging(settings)

        from api.server import PreviewServer

        server = PreviewServer(args.file, args.stylesheet, settings=settings)
        server.run()
    except (PreviewError, ValidationError) as e:
        print(f"error: {e}", file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        pass

    return 0


if __name__ == "__main__":
    sys.exit(main())
