"""Server settings from the environment and a persistent JSON config file.

Precedence is command-line overrides, then environment variables, then the
config file, then built-in defaults. All access is defensive: malformed or
missing config falls back to defaults.
"""

from __future__ import annotations

import json
import os
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path

from platformdirs import user_config_dir

APP_NAME = "videotree"
CONFIG_FILENAME = "config.json"
CONFIG_PATH = Path(user_config_dir(APP_NAME, appauthor=False)) / CONFIG_FILENAME

ROOT_ENV_VAR = "VIDEO_ROOT"
HOST_ENV_VAR = "VIDEOTREE_HOST"
PORT_ENV_VAR = "VIDEOTREE_PORT"
STATIC_DIR_ENV_VAR = "VIDEOTREE_STATIC_DIR"
POLL_ENV_VAR = "VIDEOTREE_POLL"

# The server is usually started from a folder inside the video library.
DEFAULT_VIDEO_ROOT = Path("..")
DEFAULT_HOST = "0.0.0.0"
DEFAULT_PORT = 3000
DEFAULT_STATIC_DIR = Path("public")

_TRUE_STRINGS = frozenset({"1", "true", "yes", "on"})
_FALSE_STRINGS = frozenset({"0", "false", "no", "off"})


@dataclass(frozen=True)
class Settings:
    """Resolved server configuration."""

    video_root: Path
    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT
    static_dir: Path | None = None
    watch: bool = True
    poll_watch: bool = False


def load_config() -> dict[str, object]:
    """Load the persisted JSON config object.

    Returns an empty dict when the file is missing, unreadable, malformed, or
    does not decode to a top-level JSON object.
    """
    try:
        data = json.loads(CONFIG_PATH.read_text(encoding="utf-8"))
    except Exception:
        return {}
    return data if isinstance(data, dict) else {}


def _coerce_port(value: object) -> int | None:
    """Accept ints (or digit strings) in the TCP port range."""
    if isinstance(value, bool):
        return None
    if isinstance(value, str):
        value = value.strip()
        if not value.isdigit():
            return None
        value = int(value)
    if not isinstance(value, int) or not 0 < value < 65536:
        return None
    return value


def _coerce_bool(value: object) -> bool | None:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in _TRUE_STRINGS:
            return True
        if lowered in _FALSE_STRINGS:
            return False
    return None


def _coerce_text(value: object) -> str | None:
    if not isinstance(value, str):
        return None
    stripped = value.strip()
    return stripped or None


def _first(*candidates: object) -> object | None:
    for candidate in candidates:
        if candidate is not None:
            return candidate
    return None


def load_settings(
    environ: Mapping[str, str] | None = None,
    *,
    video_root: Path | None = None,
    host: str | None = None,
    port: int | None = None,
    static_dir: Path | None = None,
    watch: bool | None = None,
    poll_watch: bool | None = None,
) -> Settings:
    """Resolve ``Settings`` from overrides, ``environ`` and the config file.

    ``environ`` defaults to ``os.environ``. Relative paths are resolved
    against the current working directory. The static asset directory is
    only kept when it exists.
    """
    env = os.environ if environ is None else environ
    config = load_config()

    root_text = _first(
        str(video_root) if video_root is not None else None,
        _coerce_text(env.get(ROOT_ENV_VAR)),
        _coerce_text(config.get("video_root")),
    )
    resolved_root = Path(root_text) if isinstance(root_text, str) else DEFAULT_VIDEO_ROOT

    resolved_host = _first(
        host,
        _coerce_text(env.get(HOST_ENV_VAR)),
        _coerce_text(config.get("host")),
        DEFAULT_HOST,
    )
    resolved_port = _first(
        port,
        _coerce_port(env.get(PORT_ENV_VAR)),
        _coerce_port(config.get("port")),
        DEFAULT_PORT,
    )

    static_text = _first(
        str(static_dir) if static_dir is not None else None,
        _coerce_text(env.get(STATIC_DIR_ENV_VAR)),
        _coerce_text(config.get("static_dir")),
    )
    static_path = Path(static_text) if isinstance(static_text, str) else DEFAULT_STATIC_DIR
    static_path = static_path.expanduser().resolve()

    resolved_watch = _first(watch, _coerce_bool(config.get("watch")), True)
    resolved_poll = _first(
        poll_watch,
        _coerce_bool(env.get(POLL_ENV_VAR)),
        _coerce_bool(config.get("poll_watch")),
        False,
    )

    return Settings(
        video_root=resolved_root.expanduser().resolve(),
        host=str(resolved_host),
        port=int(resolved_port),
        static_dir=static_path if static_path.is_dir() else None,
        watch=bool(resolved_watch),
        poll_watch=bool(resolved_poll),
    )


__all__ = [
    "APP_NAME",
    "CONFIG_PATH",
    "ROOT_ENV_VAR",
    "HOST_ENV_VAR",
    "PORT_ENV_VAR",
    "STATIC_DIR_ENV_VAR",
    "POLL_ENV_VAR",
    "DEFAULT_HOST",
    "DEFAULT_PORT",
    "Settings",
    "load_config",
    "load_settings",
]
