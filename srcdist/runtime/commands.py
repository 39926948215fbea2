# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
External command execution.

Every collaborator (git, autogen, configure, make) runs through run_command.
The working directory is always passed explicitly; the process-wide current
directory is never changed. Output is captured and logged at DEBUG, and a
non-zero exit turns into CommandError carrying the tail of stderr.
"""

import os
import subprocess
from pathlib import Path
from typing import Mapping, Optional, Sequence

from srcdist.logging.logger import get_logger

logger = get_logger(__name__)

DEFAULT_TIMEOUT_SECONDS = 600
_OUTPUT_TAIL_CHARS = 2000


class CommandError(Exception):
    """An external command failed to start, timed out, or exited non-zero."""

    def __init__(self, argv: Sequence[str], returncode: Optional[int], stderr: str) -> None:
        self.argv = list(argv)
        self.returncode = returncode
        self.stderr = stderr
        detail = stderr.strip()[-_OUTPUT_TAIL_CHARS:]
        if returncode is None:
            message = f"Command could not run: {' '.join(self.argv)}"
        else:
            message = f"Command exited with status {returncode}: {' '.join(self.argv)}"
        if detail:
            message = f"{message}\n{detail}"
        super().__init__(message)


def _tail(text: str | bytes | None) -> str:
    if not text:
        return ""
    if isinstance(text, bytes):
        text = text.decode("utf-8", errors="replace")
    return text[-_OUTPUT_TAIL_CHARS:]


def run_command(
    argv: Sequence[str],
    cwd: Path,
    timeout: int = DEFAULT_TIMEOUT_SECONDS,
    env: Optional[Mapping[str, str]] = None,
    stdout_path: Optional[Path] = None,
) -> subprocess.CompletedProcess[str]:
    """
    Run a command in `cwd` and fail loudly if it doesn't succeed.

    Args:
        argv: Program and arguments. No shell is involved.
        cwd: Directory to run in.
        timeout: Seconds before the command is killed.
        env: Replacement environment. None inherits ours.
        stdout_path: If set, stdout is streamed to this file instead of captured.
            Used for binary output like `git archive`.

    Returns:
        The completed process with captured text output.

    Raises:
        CommandError: The program is missing, timed out, or exited non-zero.
    """
    argv = [str(arg) for arg in argv]
    logger.debug("Running command", extra={"argv": argv, "cwd": str(cwd)})

    try:
        if stdout_path is not None:
            with open(stdout_path, "wb") as out:
                proc = subprocess.run(
                    argv,
                    cwd=str(cwd),
                    env=dict(env) if env is not None else None,
                    stdout=out,
                    stderr=subprocess.PIPE,
                    timeout=timeout,
                    check=False,
                )
            result = subprocess.CompletedProcess(
                proc.args, proc.returncode, "", _tail(proc.stderr)
            )
        else:
            result = subprocess.run(
                argv,
                cwd=str(cwd),
                env=dict(env) if env is not None else None,
                capture_output=True,
                text=True,
                timeout=timeout,
                check=False,
            )
    except FileNotFoundError as err:
        raise CommandError(argv, None, str(err)) from err
    except PermissionError as err:
        raise CommandError(argv, None, str(err)) from err
    except subprocess.TimeoutExpired as err:
        raise CommandError(
            argv, None, f"timed out after {timeout} seconds\n{_tail(err.stderr)}"
        ) from err

    if result.returncode != 0:
        logger.debug(
            "Command failed",
            extra={"argv": argv, "returncode": result.returncode, "stdout": _tail(result.stdout)},
        )
        raise CommandError(argv, result.returncode, result.stderr or "")

    logger.debug(
        "Command finished",
        extra={"argv": argv, "stdout": _tail(result.stdout)},
    )
    return result


def scrubbed_environ(*names: str) -> dict[str, str]:
    """Copy of the current environment without the given variables."""
    return {key: value for key, value in os.environ.items() if key not in names}
