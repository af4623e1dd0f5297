"""HTTP surface: tree/refresh/status JSON endpoints plus static file serving.

``/api/files`` answers from the in-memory cache only and never touches the
filesystem. ``/api/refresh`` starts a background rescan and returns at once.
Video bytes are served from the root under ``/videos`` and the browser UI,
when an asset folder is configured, from ``/``.
"""

from __future__ import annotations

import asyncio
import logging
import os
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any

from fastapi import FastAPI
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException
from starlette.responses import Response
from starlette.types import Scope

from .config import Settings
from .file_tree_model import is_excluded_name, tree_to_json
from .runtime import ChangeWatcher, ScanCoordinator

logger = logging.getLogger(__name__)

RETRY_AFTER_SECONDS = 3
NOT_READY_MESSAGE = "The server is still scanning the video library. Retry in a few seconds."
REFRESH_STARTED_MESSAGE = "Rescan started. The tree will update shortly."


class SinglePageStaticFiles(StaticFiles):
    """Static assets that fall back to ``index.html`` for unknown paths."""

    async def get_response(self, path: str, scope: Scope) -> Response:
        try:
            return await super().get_response(path, scope)
        except HTTPException as exc:
            if exc.status_code != 404:
                raise
            return await super().get_response("index.html", scope)


class LibraryStaticFiles(StaticFiles):
    """Video bytes from the root, hiding entries the scanner never lists."""

    async def get_response(self, path: str, scope: Scope) -> Response:
        segments = path.replace(os.sep, "/").split("/")
        if any(segment and segment != "." and is_excluded_name(segment) for segment in segments):
            raise HTTPException(status_code=404)
        return await super().get_response(path, scope)


def create_app(
    settings: Settings,
    *,
    coordinator: ScanCoordinator | None = None,
    watcher: ChangeWatcher | None = None,
) -> FastAPI:
    """Build the application around one coordinator and (optionally) a watcher.

    When ``settings.watch`` is true and no ``watcher`` is given, a
    ``ChangeWatcher`` on the video root is created and started after the
    initial scan.
    """
    if coordinator is None:
        coordinator = ScanCoordinator(settings.video_root)
    if watcher is None and settings.watch:
        watcher = ChangeWatcher(
            settings.video_root,
            coordinator.request_refresh,
            polling=settings.poll_watch,
        )

    async def startup() -> None:
        await coordinator.refresh()
        if watcher is not None:
            watcher.start()

    @asynccontextmanager
    async def lifespan(_app: FastAPI):
        logger.info("serving videos from %s", settings.video_root)
        startup_task = asyncio.create_task(startup())
        try:
            yield
        finally:
            startup_task.cancel()
            await asyncio.gather(startup_task, return_exceptions=True)
            if watcher is not None:
                watcher.stop()
            await coordinator.aclose()

    app = FastAPI(title="videotree", lifespan=lifespan)
    app.state.settings = settings
    app.state.coordinator = coordinator
    app.state.watcher = watcher

    @app.get("/api/files")
    async def get_files() -> Response:
        tree = coordinator.get_current()
        if tree is None:
            return JSONResponse(
                {"error": NOT_READY_MESSAGE, "loading": True},
                status_code=503,
                headers={"Retry-After": str(RETRY_AFTER_SECONDS)},
            )
        return JSONResponse(tree_to_json(tree))

    @app.post("/api/refresh")
    async def post_refresh() -> dict[str, str]:
        logger.info("manual rescan requested")
        coordinator.request_refresh()
        return {"message": REFRESH_STARTED_MESSAGE}

    @app.get("/api/status")
    async def get_status() -> dict[str, Any]:
        report = coordinator.last_report
        return {
            "ready": coordinator.get_current() is not None,
            "scanning": coordinator.scan_running,
            "watching": watcher is not None and watcher.active,
            "root": str(settings.video_root),
            "fileCount": report.file_count if report is not None else None,
            "lastScanSeconds": report.elapsed_seconds if report is not None else None,
        }

    app.mount(
        "/videos",
        LibraryStaticFiles(directory=settings.video_root, check_dir=False, follow_symlink=True),
        name="videos",
    )
    static_dir: Path | None = settings.static_dir
    if static_dir is not None and static_dir.is_dir():
        app.mount("/", SinglePageStaticFiles(directory=static_dir, html=True), name="ui")
    return app


__all__ = [
    "LibraryStaticFiles",
    "SinglePageStaticFiles",
    "create_app",
]
