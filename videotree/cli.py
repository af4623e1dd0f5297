"""Command-line front door for videotree.

Parses CLI options, resolves settings against the environment and config
file, configures logging, and serves the application with uvicorn.
"""

from __future__ import annotations

import argparse
import logging
from pathlib import Path

import uvicorn

from .config import Settings, load_settings
from .server import create_app

LOG_LEVELS = ("critical", "error", "warning", "info", "debug")


def _port(value: str) -> int:
    """argparse type for TCP port numbers."""
    try:
        parsed = int(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"invalid port value: {value!r}") from exc
    if not 0 < parsed < 65536:
        raise argparse.ArgumentTypeError("port must be between 1 and 65535")
    return parsed


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="videotree",
        description="Serve a directory of videos as a browsable JSON tree.",
    )
    parser.add_argument(
        "root",
        nargs="?",
        type=Path,
        help="video directory to expose (default: $VIDEO_ROOT, config file, or .. relative to the working directory)",
    )
    parser.add_argument("--host", help="interface to bind (default: 0.0.0.0)")
    parser.add_argument("--port", type=_port, help="port to listen on (default: 3000)")
    parser.add_argument("--static-dir", type=Path, help="browser UI asset folder (default: public in the working directory)")
    parser.add_argument(
        "--no-watch",
        dest="watch",
        action="store_false",
        default=None,
        help="disable automatic refresh on filesystem changes",
    )
    parser.add_argument(
        "--poll",
        dest="poll_watch",
        action="store_true",
        default=None,
        help="detect changes by polling (for network mounts without native notifications)",
    )
    parser.add_argument("--log-level", choices=LOG_LEVELS, default="info")
    return parser


def settings_from_args(args: argparse.Namespace) -> Settings:
    """Resolve settings with CLI values taking precedence."""
    return load_settings(
        video_root=args.root,
        host=args.host,
        port=args.port,
        static_dir=args.static_dir,
        watch=args.watch,
        poll_watch=args.poll_watch,
    )


def main(argv: list[str] | None = None) -> None:
    """Parse arguments and run the HTTP server until interrupted."""
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=args.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    settings = settings_from_args(args)
    app = create_app(settings)
    uvicorn.run(app, host=settings.host, port=settings.port, log_level=args.log_level)


__all__ = ["build_parser", "settings_from_args", "main"]
