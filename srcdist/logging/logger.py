# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Structured JSON logger for srcdist.

Every log entry is one JSON line with a timestamp, a level, the source module
and the message. Progress goes to stdout and problems go to stderr, so a cron
job can mail stderr and still keep a full progress log.

How this works:
  - Every module calls `get_logger(__name__)`. Those loggers carry no handlers
    of their own and propagate to the package logger named "srcdist".
  - `configure_logging` sets the level on the package logger once, from the
    CLI, and optionally adds a file handler.
  - The console handlers look up sys.stdout / sys.stderr at emit time, which
    keeps them working when tests swap the streams out.

The JSON structure looks like:
  {"ts": "2026-...", "level": "INFO", "module": "srcdist.vcs.git", "msg": "resolved revision", ...}
"""

import json
import logging
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

ROOT_LOGGER_NAME = "srcdist"


class JsonFormatter(logging.Formatter):
    """
    Formats log records as single-line JSON objects.

    Each log entry contains four mandatory fields:
      ts     — ISO 8601 UTC timestamp
      level  — log level name
      module — the logger name (usually the Python module path)
      msg    — the formatted message string

    Anything passed through `extra=` is merged in as additional fields.
    """

    _STANDARD_ATTRS = frozenset(
        {
            "name",
            "msg",
            "args",
            "created",
            "relativeCreated",
            "exc_info",
            "exc_text",
            "stack_info",
            "lineno",
            "funcName",
            "pathname",
            "filename",
            "module",
            "levelno",
            "levelname",
            "processName",
            "process",
            "threadName",
            "thread",
            "message",
            "msecs",
            "taskName",
        }
    )

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, object] = {
            "ts": datetime.now(tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "module": record.name,
            "msg": record.getMessage(),
        }

        for key, value in record.__dict__.items():
            if key not in self._STANDARD_ATTRS and not key.startswith("_"):
                entry[key] = value

        if record.exc_info:
            entry["exc"] = self.formatException(record.exc_info)

        return json.dumps(entry, default=str)


class _ConsoleHandler(logging.StreamHandler):
    """StreamHandler bound to a sys attribute name instead of a stream object."""

    def __init__(self, stream_name: str) -> None:
        self._stream_name = stream_name
        super().__init__()

    @property
    def stream(self):  # type: ignore[override]
        return getattr(sys, self._stream_name)

    @stream.setter
    def stream(self, value) -> None:  # type: ignore[no-untyped-def]
        # Always resolved from sys at emit time.
        pass


class _BelowWarningFilter(logging.Filter):
    def filter(self, record: logging.LogRecord) -> bool:
        return record.levelno < logging.WARNING


_VALID_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


def _resolve_log_level(level_name: str) -> int:
    """Turn a level name string into the corresponding logging constant."""
    upper = level_name.upper()
    if upper not in _VALID_LOG_LEVELS:
        raise ValueError(
            f"Invalid log level '{level_name}'. Must be one of: {', '.join(sorted(_VALID_LOG_LEVELS))}"
        )
    return getattr(logging, upper)


def _root_logger() -> logging.Logger:
    root = logging.getLogger(ROOT_LOGGER_NAME)
    if root.handlers:
        return root

    formatter = JsonFormatter()

    stdout_handler = _ConsoleHandler("stdout")
    stdout_handler.addFilter(_BelowWarningFilter())
    stdout_handler.setFormatter(formatter)
    root.addHandler(stdout_handler)

    stderr_handler = _ConsoleHandler("stderr")
    stderr_handler.setLevel(logging.WARNING)
    stderr_handler.setFormatter(formatter)
    root.addHandler(stderr_handler)

    root.setLevel(logging.INFO)
    # Don't propagate to the interpreter root logger, we handle all output ourselves.
    root.propagate = False
    return root


def configure_logging(log_level: str = "INFO", log_file: Optional[Path] = None) -> logging.Logger:
    """
    Set the verbosity of every srcdist logger and optionally tee to a file.

    Called once by the CLI before the pipeline starts. Calling it again
    replaces any file handler added by a previous call.

    Args:
        log_level: One of DEBUG, INFO, WARNING, ERROR, CRITICAL.
        log_file: Optional path to a log file that receives every record.

    Returns:
        The package logger.
    """
    root = _root_logger()
    root.setLevel(_resolve_log_level(log_level))

    for handler in list(root.handlers):
        if isinstance(handler, logging.FileHandler):
            root.removeHandler(handler)
            handler.close()

    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(str(log_file), encoding="utf-8")
        file_handler.setFormatter(JsonFormatter())
        root.addHandler(file_handler)

    return root


def get_logger(name: str) -> logging.Logger:
    """
    Return the logger for a module.

    This is the only sanctioned way to get a logger in srcdist. Names outside
    the "srcdist" namespace are nested under it so they share its handlers.
    """
    _root_logger()
    if name != ROOT_LOGGER_NAME and not name.startswith(ROOT_LOGGER_NAME + "."):
        name = f"{ROOT_LOGGER_NAME}.{name}"
    return logging.getLogger(name)
