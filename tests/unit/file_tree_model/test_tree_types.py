"""Tests for tree node JSON shape."""

from __future__ import annotations

import json
import unittest

from videotree.file_tree_model import DirectoryNode, FileNode, tree_to_json


class TreeJsonTests(unittest.TestCase):
    def test_nested_tree_serializes_with_type_tags(self) -> None:
        tree = (
            DirectoryNode(
                name="Shows",
                relative_path="Shows",
                children=(FileNode(name="pilot.mkv", relative_path="Shows/pilot.mkv", size=42),),
            ),
            FileNode(name="intro.mp4", relative_path="intro.mp4", size=0),
        )

        payload = tree_to_json(tree)

        self.assertEqual(
            payload,
            [
                {
                    "name": "Shows",
                    "type": "directory",
                    "relativePath": "Shows",
                    "children": [
                        {"name": "pilot.mkv", "type": "file", "relativePath": "Shows/pilot.mkv", "size": 42},
                    ],
                },
                {"name": "intro.mp4", "type": "file", "relativePath": "intro.mp4", "size": 0},
            ],
        )
        json.dumps(payload)

    def test_nodes_are_immutable(self) -> None:
        node = FileNode(name="a.mp4", relative_path="a.mp4", size=1)
        with self.assertRaises(AttributeError):
            node.size = 2  # type: ignore[misc]


if __name__ == "__main__":
    unittest.main()
