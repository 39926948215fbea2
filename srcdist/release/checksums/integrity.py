# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
md5sum-compatible checksum sidecars.

Each archive gets a <archive>.md5 file next to it, in the format GNU
coreutils writes with `md5sum --binary`:

    <md5hex> *<filename>

One line, a single space, an asterisk marking binary mode, the bare file
name and a trailing newline. `md5sum -c` accepts it as is. When parsing we
also accept the text-mode form with two spaces.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import NamedTuple

from srcdist.logging.logger import get_logger
from srcdist.utils.filesystem import atomic_write
from srcdist.utils.hashing import compute_md5

_logger = get_logger(__name__)

SIDECAR_SUFFIX = ".md5"
_MD5_HEX_LENGTH = 32


class ChecksumEntry(NamedTuple):
    digest: str
    filename: str
    binary: bool


@dataclass(frozen=True)
class VerificationResult:
    """Outcome of checking one sidecar against its archive."""

    is_valid: bool
    filename: str
    errors: list[str] = field(default_factory=list)


def sidecar_path(file_path: Path) -> Path:
    return file_path.with_name(file_path.name + SIDECAR_SUFFIX)


def format_checksum_line(digest: str, filename: str) -> str:
    """Format one binary-mode md5sum line, including the trailing newline."""
    return f"{digest} *{filename}\n"


def write_md5_sidecar(file_path: Path) -> Path:
    """
    Hash a file and write its sidecar next to it.

    Returns:
        Path to the written .md5 file.
    """
    digest = compute_md5(file_path)
    target = sidecar_path(file_path)
    atomic_write(target, format_checksum_line(digest, file_path.name))

    _logger.info(
        "Checksum file written",
        extra={"file": file_path.name, "md5": digest},
    )
    return target


def parse_md5_sidecar(checksum_path: Path) -> ChecksumEntry:
    """
    Read the single entry of a sidecar file.

    Raises:
        FileNotFoundError: If the sidecar doesn't exist.
        ValueError: If it doesn't hold exactly one well-formed line.
    """
    if not checksum_path.is_file():
        raise FileNotFoundError(f"Checksum file not found: {checksum_path}")

    lines = [line for line in checksum_path.read_text(encoding="utf-8").splitlines() if line]
    if len(lines) != 1:
        raise ValueError(
            f"Expected exactly one checksum line in {checksum_path}, found {len(lines)}"
        )

    line = lines[0]
    digest = line[:_MD5_HEX_LENGTH]
    separator = line[_MD5_HEX_LENGTH : _MD5_HEX_LENGTH + 2]
    filename = line[_MD5_HEX_LENGTH + 2 :]

    if len(digest) != _MD5_HEX_LENGTH or any(c not in "0123456789abcdefABCDEF" for c in digest):
        raise ValueError(f"Invalid MD5 digest in {checksum_path}: {line!r}")
    if separator not in (" *", "  ") or not filename:
        raise ValueError(
            f"Invalid checksum format in {checksum_path}: expected "
            f"'<md5> *<filename>', got: {line!r}"
        )

    return ChecksumEntry(digest=digest.lower(), filename=filename, binary=separator == " *")


def verify_md5_sidecar(checksum_path: Path) -> VerificationResult:
    """
    Recompute the hash of the file a sidecar names and compare.

    The named file is looked up in the sidecar's own directory.
    """
    try:
        entry = parse_md5_sidecar(checksum_path)
    except (FileNotFoundError, ValueError) as err:
        return VerificationResult(is_valid=False, filename=checksum_path.name, errors=[str(err)])

    target = checksum_path.parent / entry.filename
    if not target.is_file():
        _logger.error("File missing during verification", extra={"file": entry.filename})
        return VerificationResult(
            is_valid=False, filename=entry.filename, errors=[f"{entry.filename} not found"]
        )

    actual = compute_md5(target)
    if actual != entry.digest:
        _logger.error(
            "Checksum mismatch",
            extra={"file": entry.filename, "expected": entry.digest, "actual": actual},
        )
        return VerificationResult(
            is_valid=False,
            filename=entry.filename,
            errors=[f"{entry.filename}: expected {entry.digest}, got {actual}"],
        )

    _logger.debug("Checksum verified", extra={"file": entry.filename})
    return VerificationResult(is_valid=True, filename=entry.filename)
