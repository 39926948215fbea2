# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Move finished artifacts to the output directory and drop the workspace.

The output directory belongs to whoever runs us; we never create it. Files
with the same names are replaced, so two snapshot runs of one label on the
same day leave the later run's archives behind.
"""

import os
from pathlib import Path

from srcdist.errors import PublishError
from srcdist.logging.logger import get_logger
from srcdist.utils.filesystem import move_into, remove_tree

_logger = get_logger(__name__)


def check_output_dir(out_dir: Path) -> Path:
    """
    Make sure the output directory exists and we can write to it.

    Raises:
        PublishError: If it's missing, not a directory, or not writable.
    """
    if not out_dir.is_dir():
        raise PublishError(f"Output directory does not exist: {out_dir}")
    if not os.access(out_dir, os.W_OK | os.X_OK):
        raise PublishError(f"Output directory is not writable: {out_dir}")
    return out_dir


def remove_workspace(workspace: Path) -> None:
    """Recursively delete the workspace. A missing workspace is not an error."""
    if remove_tree(workspace):
        _logger.info("Removed workspace", extra={"workspace": str(workspace)})


def publish(workspace: Path, artifacts: list[Path], out_dir: Path) -> list[Path]:
    """
    Move artifacts into out_dir, then remove the whole workspace.

    The workspace goes away even if a move fails, so a failed publish doesn't
    leave the temp directory behind as well.

    Returns:
        The published paths, in the order given.

    Raises:
        PublishError: out_dir is unusable or a move failed.
    """
    published: list[Path] = []
    try:
        check_output_dir(out_dir)
        for artifact in artifacts:
            try:
                target = move_into(artifact, out_dir)
            except OSError as err:
                raise PublishError(f"Cannot move {artifact.name} to {out_dir}: {err}") from err
            published.append(target)
            _logger.info("Published artifact", extra={"path": str(target)})
    finally:
        remove_workspace(workspace)

    return published
