# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Release packager — turns the assembled tree into compressed tarballs.

Inside the workspace, after packaging:

    <workspace>/
    ├─ <top_dir>/                 the assembled tree
    ├─ <base>.tar                 intermediate, removed with the workspace
    ├─ <base>.tar.bz2
    ├─ <base>.tar.bz2.md5
    ├─ <base>.tar.gz              gzip level 9
    └─ <base>.tar.gz.md5

Packaging runs as one all-or-nothing block. The sidecars are checked
against their archives before the block reports success, so a release never
ships a checksum that doesn't match.
"""

import bz2
import gzip
import shutil
import tarfile
from pathlib import Path
from typing import NamedTuple

from srcdist.build.steps import Step, StepResult, run_steps
from srcdist.logging.logger import get_logger
from srcdist.release.checksums.integrity import (
    sidecar_path,
    verify_md5_sidecar,
    write_md5_sidecar,
)
from srcdist.release.naming import ReleaseName

_logger = get_logger(__name__)

GZIP_LEVEL = 9
BZIP2_LEVEL = 9
_COPY_BUFFER_SIZE = 1024 * 1024


class ReleaseArtifacts(NamedTuple):
    """Where the packager puts its outputs, all inside the workspace."""

    tar: Path
    bzip2: Path
    gzip: Path
    bzip2_md5: Path
    gzip_md5: Path

    def published(self) -> list[Path]:
        """The four files that leave the workspace."""
        return [self.gzip, self.bzip2, self.gzip_md5, self.bzip2_md5]


def artifact_paths(workspace: Path, name: ReleaseName) -> ReleaseArtifacts:
    tar = workspace / f"{name.base_name}.tar"
    bzip2 = workspace / f"{name.base_name}.tar.bz2"
    gzip_path = workspace / f"{name.base_name}.tar.gz"
    return ReleaseArtifacts(
        tar=tar,
        bzip2=bzip2,
        gzip=gzip_path,
        bzip2_md5=sidecar_path(bzip2),
        gzip_md5=sidecar_path(gzip_path),
    )


def _normalize_owner(info: tarfile.TarInfo) -> tarfile.TarInfo:
    # Whoever ran the nightly job is nobody the downloader cares about.
    info.uid = 0
    info.gid = 0
    info.uname = "root"
    info.gname = "root"
    return info


def create_tar(source_dir: Path, tar_path: Path) -> Path:
    """
    Archive source_dir into an uncompressed tar with source_dir's name as the top directory.

    TarFile.add walks directories in sorted order, so the member order only
    depends on the tree's contents.
    """
    with tarfile.open(tar_path, mode="w", format=tarfile.PAX_FORMAT) as archive:
        archive.add(str(source_dir), arcname=source_dir.name, filter=_normalize_owner)
    _logger.info("Tar written", extra={"path": str(tar_path)})
    return tar_path


def compress_bzip2(tar_path: Path, target: Path) -> Path:
    """Write a bzip2-compressed copy of tar_path, keeping the original."""
    with open(tar_path, "rb") as src, bz2.open(target, "wb", compresslevel=BZIP2_LEVEL) as dst:
        shutil.copyfileobj(src, dst, _COPY_BUFFER_SIZE)
    _logger.info("bzip2 archive written", extra={"path": str(target)})
    return target


def compress_gzip(tar_path: Path, target: Path) -> Path:
    """Write a gzip-compressed copy of tar_path at maximum compression, keeping the original."""
    with open(tar_path, "rb") as src, gzip.open(target, "wb", compresslevel=GZIP_LEVEL) as dst:
        shutil.copyfileobj(src, dst, _COPY_BUFFER_SIZE)
    _logger.info("gzip archive written", extra={"path": str(target)})
    return target


def _write_and_check_sidecar(archive: Path) -> None:
    write_md5_sidecar(archive)
    result = verify_md5_sidecar(sidecar_path(archive))
    if not result.is_valid:
        raise ValueError(f"Checksum verification failed: {'; '.join(result.errors)}")


def package_tree(workspace: Path, name: ReleaseName) -> tuple[StepResult, ReleaseArtifacts]:
    """
    Package <workspace>/<top_dir> into the release archives and sidecars.

    Returns:
        The block result and the paths the artifacts were written to. The
        paths are only meaningful when the result is ok.
    """
    source_dir = workspace / name.top_dir
    artifacts = artifact_paths(workspace, name)

    def check_source() -> None:
        if not source_dir.is_dir():
            raise FileNotFoundError(f"Release tree not found: {source_dir}")

    steps = [
        Step("check-tree", check_source),
        Step("tar", lambda: create_tar(source_dir, artifacts.tar)),
        Step("bzip2", lambda: compress_bzip2(artifacts.tar, artifacts.bzip2)),
        Step("gzip", lambda: compress_gzip(artifacts.tar, artifacts.gzip)),
        Step("md5-bzip2", lambda: _write_and_check_sidecar(artifacts.bzip2)),
        Step("md5-gzip", lambda: _write_and_check_sidecar(artifacts.gzip)),
    ]

    _logger.info(
        "Packaging release",
        extra={"top_dir": name.top_dir, "base_name": name.base_name},
    )
    return run_steps("package", steps), artifacts
