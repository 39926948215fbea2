# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Tests for filesystem helpers: atomic writes, moves, deletes.
"""

from pathlib import Path

import pytest

from srcdist.utils.filesystem import atomic_write, move_into, move_matching, remove_tree, safe_delete
from srcdist.utils.paths import validate_path_within


class TestAtomicWrite:
    def test_writes_exact_bytes(self, tmp_path: Path) -> None:
        target = tmp_path / "marker"
        atomic_write(target, "abc123\n")
        assert target.read_bytes() == b"abc123\n"

    def test_overwrites_existing_file(self, tmp_path: Path) -> None:
        target = tmp_path / "marker"
        target.write_text("old", encoding="utf-8")
        atomic_write(target, "new\n")
        assert target.read_text(encoding="utf-8") == "new\n"

    def test_leaves_no_temp_files(self, tmp_path: Path) -> None:
        atomic_write(tmp_path / "a.txt", "content")
        assert [p.name for p in tmp_path.iterdir()] == ["a.txt"]

    def test_creates_parent_directories(self, tmp_path: Path) -> None:
        target = tmp_path / "x" / "y" / "z.txt"
        atomic_write(target, "deep")
        assert target.read_text(encoding="utf-8") == "deep"


class TestMoves:
    def test_move_into_replaces_existing(self, tmp_path: Path) -> None:
        src = tmp_path / "src"
        dst = tmp_path / "dst"
        src.mkdir()
        dst.mkdir()
        (src / "a.tar.gz").write_bytes(b"new")
        (dst / "a.tar.gz").write_bytes(b"old")

        moved = move_into(src / "a.tar.gz", dst)

        assert moved == dst / "a.tar.gz"
        assert moved.read_bytes() == b"new"
        assert not (src / "a.tar.gz").exists()

    def test_move_matching_moves_only_matches(self, tmp_path: Path) -> None:
        src = tmp_path / "po"
        src.mkdir()
        (src / "de.gmo").write_bytes(b"de")
        (src / "fr.gmo").write_bytes(b"fr")
        (src / "Makefile").write_text("all:", encoding="utf-8")

        moved = move_matching(src, "*.gmo", tmp_path / "out")

        assert [p.name for p in moved] == ["de.gmo", "fr.gmo"]
        assert (src / "Makefile").exists()

    def test_move_matching_without_matches_raises(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError, match="No files matching"):
            move_matching(tmp_path, "*.gmo", tmp_path / "out")


class TestDeletes:
    def test_safe_delete_missing_file(self, tmp_path: Path) -> None:
        assert safe_delete(tmp_path / "nope") is False

    def test_safe_delete_existing_file(self, tmp_path: Path) -> None:
        target = tmp_path / "f"
        target.touch()
        assert safe_delete(target) is True
        assert not target.exists()

    def test_remove_tree(self, tmp_path: Path) -> None:
        (tmp_path / "d" / "e").mkdir(parents=True)
        assert remove_tree(tmp_path / "d") is True
        assert remove_tree(tmp_path / "d") is False


class TestValidatePathWithin:
    def test_child_path_is_accepted(self, tmp_path: Path) -> None:
        assert validate_path_within(tmp_path / "a" / "b", tmp_path) == (tmp_path / "a" / "b").resolve()

    def test_traversal_is_rejected(self, tmp_path: Path) -> None:
        with pytest.raises(ValueError, match="outside"):
            validate_path_within(tmp_path / ".." / "elsewhere", tmp_path)

    def test_sibling_with_common_prefix_is_rejected(self, tmp_path: Path) -> None:
        root = tmp_path / "work"
        root.mkdir()
        with pytest.raises(ValueError):
            validate_path_within(tmp_path / "workspace-evil", root)
