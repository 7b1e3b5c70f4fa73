"""Logging setup for the terminal host and the ``terminal-event`` line format."""

from __future__ import annotations

import logging as py_logging
import sys
from contextlib import suppress
from pathlib import Path
from typing import TextIO

PACKAGE_LOGGER = "folioterm"
LOG_LEVELS = {
    "DEBUG": py_logging.DEBUG,
    "INFO": py_logging.INFO,
    "WARN": py_logging.WARNING,
    "WARNING": py_logging.WARNING,
    "ERROR": py_logging.ERROR,
}
DEFAULT_LOG_PATH = Path("~/.config/folioterm/logs/folioterm.log")
_FALLBACK_LOG_PATH = Path(".folioterm/logs/folioterm.log")
_FORMAT = "%(asctime)s %(levelname)s %(name)s:%(lineno)d %(message)s"


def resolve_level(level: str) -> int:
    return LOG_LEVELS.get(level.strip().upper(), py_logging.INFO)


def default_log_path() -> Path:
    try:
        return DEFAULT_LOG_PATH.expanduser().resolve()
    except RuntimeError:
        # No home directory to expand against.
        return (Path.cwd() / _FALLBACK_LOG_PATH).resolve()


def _file_handler(log_file: str | Path, formatter: py_logging.Formatter) -> py_logging.Handler | None:
    path = Path(log_file)
    with suppress(RuntimeError):
        path = path.expanduser()
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        handler = py_logging.FileHandler(path.resolve(), encoding="utf-8")
    except OSError:
        return None
    handler.setLevel(py_logging.DEBUG)
    handler.setFormatter(formatter)
    return handler


def configure_logging(
    level: str = "INFO",
    stream: TextIO | None = None,
    *,
    log_file: str | Path | None = None,
) -> py_logging.Logger:
    """(Re)build the package logger; a log file that cannot be opened is skipped."""
    resolved = resolve_level(level)
    formatter = py_logging.Formatter(_FORMAT)

    logger = py_logging.getLogger(PACKAGE_LOGGER)
    logger.setLevel(resolved)
    for existing in list(logger.handlers):
        logger.removeHandler(existing)
        existing.close()

    console = py_logging.StreamHandler(stream or sys.stderr)
    console.setLevel(resolved)
    console.setFormatter(formatter)
    logger.addHandler(console)

    if log_file:
        handler = _file_handler(log_file, formatter)
        if handler is not None:
            logger.addHandler(handler)

    logger.propagate = False
    return logger


def log_event(
    logger: py_logging.Logger,
    step: str,
    message: str,
    *,
    level: int = py_logging.INFO,
) -> None:
    """Emit one ``terminal-event step=<step> message=<message>`` line."""
    logger.log(level, "terminal-event step=%s message=%s", step, message)
