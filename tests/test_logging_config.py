from __future__ import annotations

import io
import logging as py_logging
from pathlib import Path

import folioterm.logging as ft_logging


def test_default_log_path_is_expanded() -> None:
    path = ft_logging.default_log_path()

    assert path.is_absolute()
    assert path.name == "folioterm.log"


def test_warning_alias_maps_to_warning_level() -> None:
    logger = ft_logging.configure_logging("warning")

    assert logger.level == ft_logging.LOG_LEVELS["WARN"]


def test_unknown_log_level_falls_back_to_info() -> None:
    logger = ft_logging.configure_logging("not-a-level")

    assert logger.level == py_logging.INFO


def test_configure_logging_resets_existing_handlers() -> None:
    logger = ft_logging.configure_logging("INFO")
    assert len(logger.handlers) == 1

    logger = ft_logging.configure_logging("INFO")
    assert len(logger.handlers) == 1


def test_configure_logging_adds_debug_file_handler(tmp_path: Path) -> None:
    log_file = tmp_path / "logs" / "folioterm.log"

    logger = ft_logging.configure_logging("ERROR", log_file=log_file)
    file_handlers = [
        handler for handler in logger.handlers if isinstance(handler, py_logging.FileHandler)
    ]

    assert len(file_handlers) == 1
    assert file_handlers[0].level == py_logging.DEBUG
    assert log_file.exists()


def test_log_event_goes_through_package_logger() -> None:
    stream = io.StringIO()
    ft_logging.configure_logging("DEBUG", stream=stream)

    ft_logging.log_event(py_logging.getLogger("folioterm.widget"), "effect", "Reload delay=0")

    assert "terminal-event step=effect" in stream.getvalue()
    assert "folioterm.widget" in stream.getvalue()


def test_resolve_level() -> None:
    assert ft_logging.resolve_level(" debug ") == py_logging.DEBUG
    assert ft_logging.resolve_level("WARN") == py_logging.WARNING
    assert ft_logging.resolve_level("loud") == py_logging.INFO
