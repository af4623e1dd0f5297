"""Tests for the asynchronous video-tree scanner."""

from __future__ import annotations

import asyncio
import os
import tempfile
import unittest
from pathlib import Path
from unittest import mock

from videotree.file_tree_model import (
    DirectoryNode,
    FileNode,
    is_video_name,
    relative_posix_path,
    scan_directory,
)


def _write(path: Path, payload: bytes = b"x") -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(payload)


def _scan(root: Path):
    return asyncio.run(scan_directory(root))


def _all_directories(tree):
    for node in tree:
        if isinstance(node, DirectoryNode):
            yield node
            yield from _all_directories(node.children)


class ScanDirectoryTests(unittest.TestCase):
    def test_directories_sort_before_files_then_case_insensitive_name(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp).resolve()
            _write(root / "Zebra.mp4")
            _write(root / "apple" / "inner.webm")
            _write(root / "Banana.mkv")

            tree = _scan(root)

            self.assertEqual([node.name for node in tree], ["apple", "Banana.mkv", "Zebra.mp4"])
            self.assertIsInstance(tree[0], DirectoryNode)

    def test_only_allow_listed_extensions_are_emitted_in_any_case(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp).resolve()
            for name in ("clip.MP4", "clip.txt", "a.mkv", "b.WebM", "c.avi", "d.mov", "e.srt", "noext"):
                _write(root / name)

            tree = _scan(root)

            self.assertEqual(
                sorted(node.name for node in tree),
                sorted(["clip.MP4", "a.mkv", "b.WebM", "c.avi", "d.mov"]),
            )
            self.assertTrue(all(isinstance(node, FileNode) for node in tree))

    def test_empty_subtrees_are_pruned_at_every_depth(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp).resolve()
            (root / "empty").mkdir()
            _write(root / "only_text" / "deep" / "notes.txt")
            (root / "nested" / "a" / "b").mkdir(parents=True)
            _write(root / "kept" / "x" / "y" / "movie.mp4")

            tree = _scan(root)

            self.assertEqual([node.name for node in tree], ["kept"])
            for directory in _all_directories(tree):
                self.assertTrue(directory.children, directory.relative_path)

    def test_root_without_videos_yields_empty_tree(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp).resolve()
            _write(root / "readme.md")
            self.assertEqual(_scan(root), ())

    def test_hidden_and_reserved_names_never_appear(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp).resolve()
            _write(root / ".git" / "objects" / "a.mp4")
            _write(root / "node_modules" / "pkg" / "demo.mp4")
            _write(root / "web_view" / "intro.mp4")
            _write(root / ".hidden.mp4")
            _write(root / "shows" / ".cache" / "thumb.mp4")
            _write(root / "shows" / "episode.mkv")

            tree = _scan(root)

            self.assertEqual(len(tree), 1)
            shows = tree[0]
            self.assertIsInstance(shows, DirectoryNode)
            self.assertEqual([child.name for child in shows.children], ["episode.mkv"])

    def test_nodes_carry_root_relative_forward_slash_paths_and_sizes(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp).resolve()
            _write(root / "Season 1" / "Disc A" / "ep1.mkv", b"12345")

            tree = _scan(root)

            season = tree[0]
            disc = season.children[0]
            episode = disc.children[0]
            self.assertEqual(season.relative_path, "Season 1")
            self.assertEqual(disc.relative_path, "Season 1/Disc A")
            self.assertEqual(episode, FileNode(name="ep1.mkv", relative_path="Season 1/Disc A/ep1.mkv", size=5))

    def test_scanning_unchanged_tree_twice_is_structurally_identical(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp).resolve()
            _write(root / "b" / "two.mp4")
            _write(root / "a" / "one.mov")
            _write(root / "top.avi")

            self.assertEqual(_scan(root), _scan(root))

    def test_unreadable_directory_does_not_abort_siblings(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp).resolve()
            _write(root / "locked" / "secret.mp4")
            _write(root / "open" / "public.mp4")
            locked = root / "locked"
            real_listdir = os.listdir

            def flaky_listdir(path):
                if Path(path) == locked:
                    raise PermissionError(13, "Permission denied", str(path))
                return real_listdir(path)

            with mock.patch("videotree.file_tree_model.fs.os.listdir", side_effect=flaky_listdir):
                with self.assertLogs("videotree.file_tree_model.fs", level="WARNING"):
                    tree = _scan(root)

            self.assertEqual([node.name for node in tree], ["open"])

    def test_missing_root_yields_empty_tree(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            missing = Path(tmp).resolve() / "gone"
            with self.assertLogs("videotree.file_tree_model.fs", level="WARNING"):
                self.assertEqual(_scan(missing), ())

    @unittest.skipUnless(hasattr(os, "symlink"), "symlinks unavailable")
    def test_directory_symlink_loop_terminates(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp).resolve()
            _write(root / "movies" / "film.mp4")
            try:
                os.symlink(root, root / "movies" / "loop", target_is_directory=True)
            except OSError:
                self.skipTest("cannot create symlinks here")

            tree = _scan(root)

            movies = tree[0]
            self.assertEqual([child.name for child in movies.children], ["film.mp4"])


class ScannerHelperTests(unittest.TestCase):
    def test_is_video_name_ignores_case_and_requires_extension(self) -> None:
        self.assertTrue(is_video_name("clip.MP4"))
        self.assertTrue(is_video_name("archive.tar.mkv"))
        self.assertFalse(is_video_name("clip.txt"))
        self.assertFalse(is_video_name("mp4"))
        self.assertFalse(is_video_name(".mp4"))

    def test_relative_posix_path_uses_forward_slashes(self) -> None:
        root = Path("/srv/videos")
        self.assertEqual(relative_posix_path(root, root / "a" / "b.mp4"), "a/b.mp4")


if __name__ == "__main__":
    unittest.main()
