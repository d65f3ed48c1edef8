"""Tests for the logging helpers."""

from __future__ import annotations

import logging
from pathlib import Path

from prompt_dialects.logging import configure_debug_file_logging, get_logger


def test_debug_file_leaves_root_handlers_alone(tmp_path: Path, package_logger) -> None:
    root = logging.getLogger()
    before = [(handler, handler.level, list(handler.filters)) for handler in root.handlers]
    root_level = root.level

    configure_debug_file_logging(tmp_path / "debug.log")

    assert [(handler, handler.level, list(handler.filters)) for handler in root.handlers] == before
    assert root.level == root_level


def test_debug_file_collects_package_records(tmp_path: Path, package_logger) -> None:
    debug_path = tmp_path / "nested" / "debug.log"
    handler = configure_debug_file_logging(debug_path)

    get_logger("prompt_dialects.dialogue").debug("hello %s", "file")
    handler.flush()

    assert "DEBUG prompt_dialects.dialogue: hello file" in debug_path.read_text(encoding="utf-8")


def test_debug_file_is_configured_once_per_path(tmp_path: Path, package_logger) -> None:
    debug_path = tmp_path / "debug.log"
    first = configure_debug_file_logging(debug_path)
    second = configure_debug_file_logging(debug_path)

    assert first is second
    assert package_logger.handlers.count(first) == 1


def test_warnings_still_reach_caplog_after_debug_file(tmp_path: Path, package_logger, caplog) -> None:
    configure_debug_file_logging(tmp_path / "debug.log")
    with caplog.at_level(logging.WARNING):
        get_logger("prompt_dialects.config").warning("still visible")
    assert "still visible" in caplog.text
