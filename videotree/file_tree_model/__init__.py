"""Domain model for the scanned video tree.

This package contains the non-HTTP tree primitives:
- directory/file node datatypes and their JSON shape
- the asynchronous filesystem scanner with extension and name filters
"""

from __future__ import annotations

from .types import DirectoryNode, FileNode, TreeNode, tree_to_json
from .fs import (
    EXCLUDED_NAMES,
    VIDEO_EXTENSIONS,
    is_excluded_name,
    is_video_name,
    relative_posix_path,
    scan_directory,
    sort_nodes,
)

__all__ = [
    "DirectoryNode",
    "FileNode",
    "TreeNode",
    "tree_to_json",
    "EXCLUDED_NAMES",
    "VIDEO_EXTENSIONS",
    "is_excluded_name",
    "is_video_name",
    "relative_posix_path",
    "scan_directory",
    "sort_nodes",
]
