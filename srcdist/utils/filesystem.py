# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Filesystem helpers for srcdist.

Small files the pipeline writes (the commit marker, checksum sidecars) are
written atomically: write to a temp file in the same directory, then rename.
Rename on the same filesystem is atomic on POSIX, so a crash leaves either
the old file or the new one, never a truncated one.

Moves and copies take explicit source and destination paths. Nothing in
here looks at the process working directory.
"""

import shutil
import tempfile
from pathlib import Path


def atomic_write(target_path: Path, content: str, encoding: str = "utf-8") -> None:
    """
    Write content to a file atomically.

    Args:
        target_path: Where the final file should end up.
        content: The string content to write.
        encoding: Text encoding to use.

    Raises:
        OSError: If the write or rename fails.
    """
    target_path.parent.mkdir(parents=True, exist_ok=True)

    # delete=False because the file has to survive closing so we can rename it.
    temp_fd = tempfile.NamedTemporaryFile(
        mode="w",
        encoding=encoding,
        newline="\n",
        dir=str(target_path.parent),
        prefix=".srcdist_tmp_",
        suffix=".tmp",
        delete=False,
    )
    temp_path = Path(temp_fd.name)

    try:
        temp_fd.write(content)
        temp_fd.flush()
        temp_fd.close()
        temp_path.replace(target_path)
    except BaseException:
        temp_fd.close()
        if temp_path.exists():
            temp_path.unlink()
        raise


def move_into(source: Path, destination_dir: Path) -> Path:
    """
    Move a file into a directory, replacing a same-named file there.

    Returns:
        The new path of the moved file.
    """
    target = destination_dir / source.name
    shutil.move(str(source), str(target))
    return target


def move_matching(source_dir: Path, pattern: str, destination_dir: Path) -> list[Path]:
    """
    Move every file in source_dir matching a glob pattern into destination_dir.

    Matches are moved in sorted order so the log reads the same every run.

    Raises:
        FileNotFoundError: If nothing matches. A glob that produced no files
            means the build step that should have created them did not.
    """
    matches = sorted(p for p in source_dir.glob(pattern) if p.is_file())
    if not matches:
        raise FileNotFoundError(f"No files matching '{pattern}' in {source_dir}")

    destination_dir.mkdir(parents=True, exist_ok=True)
    return [move_into(match, destination_dir) for match in matches]


def safe_delete(file_path: Path) -> bool:
    """
    Delete a file if it exists. Returns whether anything was actually deleted.

    Raises:
        OSError: If the file exists but can't be deleted (permissions, etc).
    """
    if file_path.exists():
        file_path.unlink()
        return True
    return False


def remove_tree(path: Path) -> bool:
    """Recursively delete a directory if it exists. Returns whether it existed."""
    if path.is_dir():
        shutil.rmtree(path)
        return True
    return False
