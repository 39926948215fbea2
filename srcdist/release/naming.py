# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Release naming and final tree layout.

Two names come out of a release:
  - top_dir:   the directory every path in the tarball starts with
  - base_name: the archive file stem

Numbered releases use "<project>-<label>" for both. Snapshots put the build
date into the top directory and "current" into the file name, so a nightly
job overwrites yesterday's download link but unpacks into a dated directory:

    project-current-0.12.tar.gz  ->  project-0.12-20240301/
"""

import shutil
from datetime import date
from pathlib import Path
from typing import NamedTuple, Optional

from srcdist.errors import BuildError
from srcdist.logging.logger import get_logger

logger = get_logger(__name__)

SNAPSHOT_DATE_FORMAT = "%Y%m%d"


class ReleaseName(NamedTuple):
    top_dir: str
    base_name: str


def release_name(
    project: str,
    label: str,
    snapshot: bool,
    today: Optional[date] = None,
) -> ReleaseName:
    """Compute the tarball top directory and file stem for a release."""
    if snapshot:
        stamp = (today or date.today()).strftime(SNAPSHOT_DATE_FORMAT)
        return ReleaseName(
            top_dir=f"{project}-{label}-{stamp}",
            base_name=f"{project}-current-{label}",
        )
    name = f"{project}-{label}"
    return ReleaseName(top_dir=name, base_name=name)


def assemble(tree: Path, build_subdir: str, name: ReleaseName) -> Path:
    """
    Drop the build directory and rename the tree to its release name.

    The renamed tree stays in the same workspace, next to where the
    archives will be written.

    Raises:
        BuildError: The release directory already exists or the rename failed.
    """
    build_dir = tree / build_subdir
    if build_dir.exists():
        shutil.rmtree(build_dir)

    target = tree.parent / name.top_dir
    if target.exists():
        raise BuildError(
            f"Release directory already exists in workspace: {target}",
            step="assemble",
            workspace=str(tree.parent),
        )

    try:
        tree.rename(target)
    except OSError as err:
        raise BuildError(
            f"Cannot rename {tree} to {target}: {err}",
            step="assemble",
            workspace=str(tree.parent),
        ) from err

    logger.info("Assembled release tree", extra={"top_dir": name.top_dir})
    return target
