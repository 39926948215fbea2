# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Tests for release packaging.
"""

import bz2
import gzip
import tarfile
from datetime import date
from pathlib import Path

import pytest

from srcdist.release.checksums.integrity import verify_md5_sidecar
from srcdist.release.naming import release_name
from srcdist.release.packaging.packager import artifact_paths, package_tree


@pytest.fixture()
def assembled(tmp_path: Path) -> Path:
    """A workspace holding an assembled demo-1.2 tree."""
    workspace = tmp_path / "ws"
    tree = workspace / "demo-1.2"
    (tree / "po").mkdir(parents=True)
    (tree / "README").write_text("demo\n", encoding="utf-8")
    (tree / "po" / "de.gmo").write_bytes(b"\x95\x04\x12\xde")
    (tree / "git-commit-id").write_text("a" * 40 + "\n", encoding="utf-8")
    return workspace


def test_package_writes_archives_and_sidecars(assembled: Path) -> None:
    name = release_name("demo", "1.2", snapshot=False)
    result, artifacts = package_tree(assembled, name)

    assert result.ok, result.error
    assert artifacts.tar.is_file()
    assert artifacts.gzip == assembled / "demo-1.2.tar.gz"
    assert artifacts.bzip2 == assembled / "demo-1.2.tar.bz2"
    for sidecar in (artifacts.gzip_md5, artifacts.bzip2_md5):
        assert verify_md5_sidecar(sidecar).is_valid


def test_compressed_copies_match_the_tar(assembled: Path) -> None:
    name = release_name("demo", "1.2", snapshot=False)
    _, artifacts = package_tree(assembled, name)

    raw = artifacts.tar.read_bytes()
    assert gzip.decompress(artifacts.gzip.read_bytes()) == raw
    assert bz2.decompress(artifacts.bzip2.read_bytes()) == raw


def test_archive_top_dir_and_contents(assembled: Path) -> None:
    name = release_name("demo", "1.2", snapshot=False)
    _, artifacts = package_tree(assembled, name)

    with tarfile.open(artifacts.gzip, "r:gz") as archive:
        names = archive.getnames()
        members = archive.getmembers()

    assert {n.split("/")[0] for n in names} == {"demo-1.2"}
    assert "demo-1.2/README" in names
    assert "demo-1.2/po/de.gmo" in names
    assert all(m.uid == 0 and m.gid == 0 for m in members)


def test_snapshot_names(tmp_path: Path) -> None:
    name = release_name("project", "0.12", snapshot=True, today=date(2024, 3, 1))
    workspace = tmp_path / "ws"
    (workspace / name.top_dir).mkdir(parents=True)
    (workspace / name.top_dir / "README").write_text("x", encoding="utf-8")

    result, artifacts = package_tree(workspace, name)

    assert result.ok
    assert sorted(p.name for p in artifacts.published()) == [
        "project-current-0.12.tar.bz2",
        "project-current-0.12.tar.bz2.md5",
        "project-current-0.12.tar.gz",
        "project-current-0.12.tar.gz.md5",
    ]
    with tarfile.open(artifacts.bzip2, "r:bz2") as archive:
        assert archive.getnames()[0] == "project-0.12-20240301"


def test_missing_tree_fails_the_block(tmp_path: Path) -> None:
    name = release_name("demo", "1.2", snapshot=False)
    result, _ = package_tree(tmp_path, name)
    assert not result.ok
    assert result.failed_step == "check-tree"


def test_artifact_paths_are_inside_workspace(tmp_path: Path) -> None:
    artifacts = artifact_paths(tmp_path, release_name("demo", "1.2", snapshot=False))
    assert all(p.parent == tmp_path for p in artifacts)
    assert artifacts.gzip_md5.name == "demo-1.2.tar.gz.md5"
