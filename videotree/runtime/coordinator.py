"""Single-owner cache of the most recent successful video-tree scan."""

from __future__ import annotations

import asyncio
import logging
import os
import stat
import time
from collections.abc import Awaitable, Callable, Iterable
from dataclasses import dataclass
from pathlib import Path

from ..file_tree_model import DirectoryNode, FileNode, TreeNode, scan_directory

logger = logging.getLogger(__name__)

Scanner = Callable[[Path], Awaitable[tuple[TreeNode, ...]]]


class ScanRootError(RuntimeError):
    """Raised when the configured root is missing or not a directory."""


@dataclass(frozen=True)
class ScanReport:
    """Outcome of the last successful scan."""

    file_count: int
    elapsed_seconds: float
    finished_at: float


def count_files(tree: Iterable[TreeNode]) -> int:
    """Count file nodes across the full depth of ``tree``."""
    total = 0
    for node in tree:
        if isinstance(node, FileNode):
            total += 1
        elif isinstance(node, DirectoryNode):
            total += count_files(node.children)
    return total


class ScanCoordinator:
    """Owns the cached tree and guarantees at most one scan at a time.

    The in-progress flag is checked and set without an intervening ``await``,
    which is sufficient mutual exclusion on a single event loop.
    """

    def __init__(self, root: Path, *, scanner: Scanner = scan_directory) -> None:
        self._root = Path(root)
        self._scanner = scanner
        self._tree: tuple[TreeNode, ...] | None = None
        self._scan_running = False
        self._last_report: ScanReport | None = None
        self._tasks: set[asyncio.Task] = set()

    @property
    def root(self) -> Path:
        return self._root

    @property
    def scan_running(self) -> bool:
        return self._scan_running

    @property
    def last_report(self) -> ScanReport | None:
        return self._last_report

    def get_current(self) -> tuple[TreeNode, ...] | None:
        """Return the cached tree, or ``None`` before the first successful scan."""
        return self._tree

    async def _check_root(self) -> None:
        try:
            st = await asyncio.to_thread(os.stat, self._root)
        except OSError as exc:
            raise ScanRootError(f"video root {self._root} is not accessible: {exc}") from exc
        if not stat.S_ISDIR(st.st_mode):
            raise ScanRootError(f"video root {self._root} is not a directory")

    async def refresh(self) -> bool:
        """Rescan the root and replace the cache on success.

        Returns ``True`` when a scan ran and updated the cache. A request made
        while another scan is running is dropped and returns ``False``.
        """
        if self._scan_running:
            logger.info("scan already in progress, skipping duplicate request")
            return False

        self._scan_running = True
        logger.info("scanning %s", self._root)
        started = time.perf_counter()
        try:
            await self._check_root()
            tree = await self._scanner(self._root)
        except Exception:
            logger.exception("scan of %s failed; keeping previous tree", self._root)
            return False
        finally:
            self._scan_running = False

        elapsed = time.perf_counter() - started
        report = ScanReport(
            file_count=count_files(tree),
            elapsed_seconds=elapsed,
            finished_at=time.time(),
        )
        self._tree = tree
        self._last_report = report
        logger.info(
            "scan finished in %.0fms, %d videos found",
            elapsed * 1000.0,
            report.file_count,
        )
        return True

    def request_refresh(self) -> asyncio.Task:
        """Start ``refresh`` in the background on the running loop."""
        task = asyncio.get_running_loop().create_task(self.refresh())
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def aclose(self) -> None:
        """Cancel background refresh tasks still pending at shutdown."""
        tasks = list(self._tasks)
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)


__all__ = [
    "Scanner",
    "ScanRootError",
    "ScanReport",
    "ScanCoordinator",
    "count_files",
]
