# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Hashing utilities for srcdist.

Release tarballs ship with md5sum-compatible sidecar files, so MD5 is the
digest used here. It identifies downloads, it is not a security boundary.
"""

import hashlib
from pathlib import Path

HASH_ALGORITHM = "md5"
HASH_BUFFER_SIZE = 65536  # 64 KiB


def compute_md5(file_path: Path) -> str:
    """
    Compute the MD5 hex digest of a file, reading it in chunks.

    Args:
        file_path: Path to the file to hash.

    Returns:
        Lowercase hex string of the MD5 digest.

    Raises:
        FileNotFoundError: If the file doesn't exist.
        OSError: If the file can't be read.
    """
    hasher = hashlib.md5()
    with open(file_path, "rb") as f:
        while True:
            chunk = f.read(HASH_BUFFER_SIZE)
            if not chunk:
                break
            hasher.update(chunk)
    return hasher.hexdigest()


def compute_md5_bytes(data: bytes) -> str:
    """Compute the MD5 hex digest of raw bytes."""
    return hashlib.md5(data).hexdigest()
