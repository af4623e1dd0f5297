"""Public package surface for videotree.

``main`` runs the HTTP server from the command line; ``create_app`` and
``load_settings`` embed it in another ASGI process. Both are imported lazily
so ``import videotree`` stays free of web-stack imports.
"""

from __future__ import annotations

__version__ = "0.1.0"


def main(argv: list[str] | None = None) -> None:
    """Run the command-line entrypoint."""
    from .cli import main as _main

    _main(argv)


def create_app(*args, **kwargs):
    """Build the ASGI application (see ``videotree.server.create_app``)."""
    from .server import create_app as _create_app

    return _create_app(*args, **kwargs)


def load_settings(*args, **kwargs):
    """Resolve settings (see ``videotree.config.load_settings``)."""
    from .config import load_settings as _load_settings

    return _load_settings(*args, **kwargs)


__all__ = ["__version__", "main", "create_app", "load_settings"]
