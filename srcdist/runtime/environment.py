# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Pre-flight environment checks.

A nightly job that discovers a missing `make` after exporting and
bootstrapping has wasted its slot. We check the interpreter and the external
tools up front and fail before anything touches the disk.
"""

import platform
import shutil
import sys
from dataclasses import dataclass
from typing import Iterable, NamedTuple

from srcdist.errors import EnvironmentCheckError
from srcdist.logging.logger import get_logger

logger = get_logger(__name__)

MINIMUM_PYTHON_MAJOR = 3
MINIMUM_PYTHON_MINOR = 12


class SystemInfo(NamedTuple):
    """Snapshot of the current system environment."""

    python_version: str
    platform: str
    architecture: str
    hostname: str


@dataclass(frozen=True)
class ToolCheck:
    """Result of looking up one external program."""

    name: str
    found: bool
    path: str


def check_minimum_python() -> None:
    """
    Verify the interpreter is new enough.

    Raises:
        EnvironmentCheckError: If the Python version is too old.
    """
    major, minor = sys.version_info[:2]
    if major < MINIMUM_PYTHON_MAJOR or (
        major == MINIMUM_PYTHON_MAJOR and minor < MINIMUM_PYTHON_MINOR
    ):
        raise EnvironmentCheckError(
            f"srcdist requires Python >= {MINIMUM_PYTHON_MAJOR}.{MINIMUM_PYTHON_MINOR}, "
            f"but you're running {major}.{minor}."
        )


def check_required_tools(names: Iterable[str]) -> list[ToolCheck]:
    """
    Look up each program on PATH.

    Names containing a slash are relative or absolute paths into the exported
    tree (like ./autogen.sh) and can't be checked before the export, so they
    are skipped.

    Raises:
        EnvironmentCheckError: Listing every tool that is missing.
    """
    checks: list[ToolCheck] = []
    for name in dict.fromkeys(names):
        if "/" in name:
            continue
        path = shutil.which(name)
        checks.append(ToolCheck(name=name, found=path is not None, path=path or ""))

    for check in checks:
        log_fn = logger.debug if check.found else logger.error
        log_fn(
            "Tool check",
            extra={"tool": check.name, "found": check.found, "path": check.path},
        )

    missing = [c.name for c in checks if not c.found]
    if missing:
        raise EnvironmentCheckError(f"Required tools not found on PATH: {', '.join(missing)}")

    return checks


def get_system_info() -> SystemInfo:
    """Collect basic system information for logging and diagnostics."""
    return SystemInfo(
        python_version=platform.python_version(),
        platform=platform.system(),
        architecture=platform.machine(),
        hostname=platform.node(),
    )
