"""
Logging utilities for versionkeeper.

All loggers live under the ``versionkeeper`` namespace. Until
:func:`setup_logging` runs they only carry a ``NullHandler``, so importing
the package as a library never prints anything.

Two renderings are supported:

- a terminal rendering with optionally colored level names
- a GitHub Actions rendering, used when ``GITHUB_ACTIONS=true``, where
  warnings and errors become ``::warning::`` / ``::error::`` workflow
  commands so that a blocked release shows up as a run annotation
"""

from __future__ import annotations

import os
import sys
import logging
import threading
from typing import IO, Optional

from versionkeeper.constants import (
    GITHUB_ACTIONS_ENV,
    LOG_DATE_FORMAT,
    LOG_DEFAULT_FORMAT,
    LOG_VERBOSE_FORMAT,
)

_ROOT_LOGGER_NAME = "versionkeeper"

_lock = threading.Lock()


class ColoredFormatter(logging.Formatter):
    """Terminal formatter that colors the level name on a TTY."""

    COLORS = {
        "DEBUG": "\033[36m",
        "INFO": "\033[32m",
        "WARNING": "\033[33m",
        "ERROR": "\033[31m",
        "CRITICAL": "\033[35m",
    }
    RESET = "\033[0m"

    def __init__(
        self,
        fmt: str,
        *,
        datefmt: Optional[str] = None,
        use_color: bool = True,
    ) -> None:
        super().__init__(fmt=fmt, datefmt=datefmt)
        self.use_color = use_color

    def format(self, record: logging.LogRecord) -> str:
        color = self.COLORS.get(record.levelname)
        if color and self.use_color and self._should_use_color():
            # Other handlers must still see the plain level name
            record = logging.makeLogRecord(record.__dict__)
            record.levelname = f"{color}{record.levelname}{self.RESET}"
        return super().format(record)

    @staticmethod
    def _should_use_color() -> bool:
        if os.environ.get("NO_COLOR") or os.environ.get("CI"):
            return False
        try:
            return sys.stderr.isatty()
        except (AttributeError, OSError):
            return False


class WorkflowCommandFormatter(logging.Formatter):
    """Render records as GitHub Actions workflow commands.

    ``WARNING`` and above become annotations, ``DEBUG`` goes to the step
    debug log (shown only when the runner has debug logging enabled) and
    ``INFO`` stays a plain line.
    """

    COMMANDS = {
        logging.DEBUG: "debug",
        logging.WARNING: "warning",
        logging.ERROR: "error",
        logging.CRITICAL: "error",
    }

    def format(self, record: logging.LogRecord) -> str:
        message = super().format(record)
        command = self.COMMANDS.get(record.levelno)
        if command is None:
            return message
        if command == "debug":
            return f"::debug::{escape_workflow_data(message)}"
        return f"::{command} title={_ROOT_LOGGER_NAME}::{escape_workflow_data(message)}"


def escape_workflow_data(value: str) -> str:
    """Escape a workflow command message (``%``, CR and LF)."""
    return value.replace("%", "%25").replace("\r", "%0D").replace("\n", "%0A")


def running_in_github_actions() -> bool:
    """Return True when executing inside a GitHub Actions job."""
    return os.environ.get(GITHUB_ACTIONS_ENV, "").lower() == "true"


def setup_logging(
    *,
    level: int = logging.INFO,
    verbose: bool = False,
    stream: Optional[IO[str]] = None,
    annotations: Optional[bool] = None,
) -> None:
    """Install the versionkeeper log handler.

    Safe to call repeatedly: the previous handler is replaced.

    Args:
        level: Logging level (e.g. ``logging.WARNING``).
        verbose: Include timestamps and logger names.
        stream: Output stream; defaults to ``sys.stderr``.
        annotations: Emit GitHub Actions workflow commands. ``None``
            detects it from ``GITHUB_ACTIONS``.
    """
    if annotations is None:
        annotations = running_in_github_actions()

    fmt = LOG_VERBOSE_FORMAT if verbose else LOG_DEFAULT_FORMAT
    formatter: logging.Formatter
    if annotations:
        formatter = WorkflowCommandFormatter(
            LOG_VERBOSE_FORMAT if verbose else "%(message)s",
            datefmt=LOG_DATE_FORMAT,
        )
    else:
        formatter = ColoredFormatter(
            fmt,
            datefmt=LOG_DATE_FORMAT,
            use_color=not os.environ.get("NO_COLOR"),
        )

    handler = logging.StreamHandler(stream or sys.stderr)
    handler.setLevel(level)
    handler.setFormatter(formatter)

    with _lock:
        root_logger = logging.getLogger(_ROOT_LOGGER_NAME)
        root_logger.handlers.clear()
        root_logger.setLevel(level)
        root_logger.addHandler(handler)
        root_logger.propagate = False


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """Return a logger within the versionkeeper namespace.

    ``get_logger("engine")`` and ``get_logger("versionkeeper.engine")``
    return the same logger.
    """
    if not name or name == _ROOT_LOGGER_NAME:
        logger = logging.getLogger(_ROOT_LOGGER_NAME)
    elif name.startswith(f"{_ROOT_LOGGER_NAME}."):
        logger = logging.getLogger(name)
    else:
        logger = logging.getLogger(f"{_ROOT_LOGGER_NAME}.{name}")

    if not logger.handlers and (not logger.parent or not logger.parent.handlers):
        logger.addHandler(logging.NullHandler())

    return logger
