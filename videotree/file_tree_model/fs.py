"""Asynchronous filesystem scanning for the video tree.

``scan_directory`` walks a root directory and returns the pruned, sorted
tree of video files below it. Blocking ``listdir``/``stat`` calls run in
the default executor; siblings are stat'ed and recursed concurrently.
Filesystem failures never escape: an unreadable directory contributes
nothing and an entry that cannot be stat'ed is skipped.
"""

from __future__ import annotations

import asyncio
import logging
import os
import stat
from collections.abc import Iterable
from pathlib import Path

from .types import DirectoryNode, FileNode, TreeNode

logger = logging.getLogger(__name__)

VIDEO_EXTENSIONS = frozenset({".mp4", ".mkv", ".webm", ".avi", ".mov"})
# Dependency storage and the UI asset folder live next to the videos.
EXCLUDED_NAMES = frozenset({"node_modules", "__pycache__", "web_view"})

_DirectoryKey = tuple[int, int]


def is_video_name(name: str) -> bool:
    """Return whether ``name`` carries an allow-listed extension (any case)."""
    return os.path.splitext(name)[1].lower() in VIDEO_EXTENSIONS


def is_excluded_name(name: str) -> bool:
    """Return whether a directory entry is hidden or reserved."""
    return name.startswith(".") or name in EXCLUDED_NAMES


def relative_posix_path(root: Path, path: Path) -> str:
    """Return ``path`` relative to ``root`` using ``/`` separators."""
    relative = os.path.relpath(path, root)
    if os.sep != "/":
        relative = relative.replace(os.sep, "/")
    return relative


def _node_sort_key(node: TreeNode) -> tuple[bool, str, str]:
    return (isinstance(node, FileNode), node.name.casefold(), node.name)


def sort_nodes(nodes: Iterable[TreeNode]) -> tuple[TreeNode, ...]:
    """Order directories before files, then by case-insensitive name."""
    return tuple(sorted(nodes, key=_node_sort_key))


async def _scan_entry(
    root: Path,
    path: Path,
    ancestors: frozenset[_DirectoryKey],
) -> TreeNode | None:
    try:
        st = await asyncio.to_thread(os.stat, path)
    except OSError:
        return None

    if stat.S_ISDIR(st.st_mode):
        key = (st.st_dev, st.st_ino)
        if key in ancestors:
            logger.debug("skipping directory loop at %s", path)
            return None
        children = await _scan_children(root, path, ancestors | {key})
        if not children:
            return None
        return DirectoryNode(
            name=path.name,
            relative_path=relative_posix_path(root, path),
            children=children,
        )

    if not is_video_name(path.name):
        return None
    return FileNode(
        name=path.name,
        relative_path=relative_posix_path(root, path),
        size=int(st.st_size),
    )


async def _scan_children(
    root: Path,
    directory: Path,
    ancestors: frozenset[_DirectoryKey],
) -> tuple[TreeNode, ...]:
    try:
        names = await asyncio.to_thread(os.listdir, directory)
    except OSError as exc:
        logger.warning("skipping unreadable directory %s: %s", directory, exc)
        return ()

    results = await asyncio.gather(
        *(
            _scan_entry(root, directory / name, ancestors)
            for name in names
            if not is_excluded_name(name)
        )
    )
    return sort_nodes(node for node in results if node is not None)


async def scan_directory(root: Path) -> tuple[TreeNode, ...]:
    """Scan ``root`` and return its pruned, sorted video tree.

    ``relative_path`` of every node is computed against ``root``. Directories
    without any video file in their subtree are omitted at every level.
    """
    root = Path(root)
    try:
        st = await asyncio.to_thread(os.stat, root)
        ancestors = frozenset({(st.st_dev, st.st_ino)})
    except OSError:
        ancestors = frozenset()
    return await _scan_children(root, root, ancestors)


__all__ = [
    "VIDEO_EXTENSIONS",
    "EXCLUDED_NAMES",
    "is_video_name",
    "is_excluded_name",
    "relative_posix_path",
    "sort_nodes",
    "scan_directory",
]
