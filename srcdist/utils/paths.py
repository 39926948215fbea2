# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Path utilities for srcdist.

Everything the pipeline touches lives under the workspace. These helpers keep
directory creation explicit and stop archive members or configured relative
paths from escaping the directory they belong to.
"""

from pathlib import Path


def ensure_directory(path: Path) -> Path:
    """
    Create a directory (and parents) if it doesn't exist. Returns the path for chaining.
    """
    path.mkdir(parents=True, exist_ok=True)
    return path


def validate_path_within(target: Path, root: Path) -> Path:
    """
    Make sure a path doesn't escape the given root directory.

    Both paths are resolved before comparing, so tricks like ../../etc/passwd
    or a symlink pointing outside get caught.

    Returns:
        The resolved absolute path if it's safe.

    Raises:
        ValueError: If the path escapes the root.
    """
    resolved_target = target.resolve()
    resolved_root = root.resolve()

    if resolved_target != resolved_root and resolved_root not in resolved_target.parents:
        raise ValueError(
            f"Path '{target}' resolves to '{resolved_target}' which is outside "
            f"'{resolved_root}'. This is not allowed."
        )

    return resolved_target
