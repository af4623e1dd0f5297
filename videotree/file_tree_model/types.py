"""Domain datatypes for the scanned video tree.

Nodes are frozen and hold tuples, so a finished tree can be shared between
the cache and concurrent readers without copying.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass


@dataclass(frozen=True)
class FileNode:
    """Video file entry with its size in bytes."""

    name: str
    relative_path: str
    size: int

    def to_json(self) -> dict[str, object]:
        return {
            "name": self.name,
            "type": "file",
            "relativePath": self.relative_path,
            "size": self.size,
        }


@dataclass(frozen=True)
class DirectoryNode:
    """Directory entry with recursively nested, non-empty children."""

    name: str
    relative_path: str
    children: tuple["TreeNode", ...] = ()

    def to_json(self) -> dict[str, object]:
        return {
            "name": self.name,
            "type": "directory",
            "relativePath": self.relative_path,
            "children": tree_to_json(self.children),
        }


TreeNode = DirectoryNode | FileNode


def tree_to_json(tree: Iterable[TreeNode]) -> list[dict[str, object]]:
    """Return the JSON-ready list form of a node sequence."""
    return [node.to_json() for node in tree]


__all__ = [
    "FileNode",
    "DirectoryNode",
    "TreeNode",
    "tree_to_json",
]
