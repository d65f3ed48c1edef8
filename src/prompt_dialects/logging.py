from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

PACKAGE_LOGGER = "prompt_dialects"
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def configure_logging(level: int = logging.WARNING, fmt: Optional[str] = None) -> None:
    """Install a stderr handler on the root logger unless one is already set up."""
    root = logging.getLogger()
    if root.handlers:
        return
    console = logging.StreamHandler()
    console.setLevel(level)
    console.setFormatter(logging.Formatter(fmt or LOG_FORMAT))
    root.addHandler(console)
    root.setLevel(level)


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)


def configure_debug_file_logging(
    debug_path: Path, *, level: int = logging.DEBUG
) -> logging.FileHandler:
    """Write package log records at ``level`` and above to ``debug_path``.

    The handler lives on the package logger, so handlers owned by the
    application (or a test runner) keep their own thresholds. Calling this
    twice for the same path returns the existing handler.
    """
    package_logger = logging.getLogger(PACKAGE_LOGGER)
    target = str(debug_path.resolve())
    for handler in package_logger.handlers:
        if isinstance(handler, logging.FileHandler) and handler.baseFilename == target:
            return handler

    debug_path.parent.mkdir(parents=True, exist_ok=True)
    file_handler = logging.FileHandler(debug_path, encoding="utf-8")
    file_handler.setLevel(level)
    file_handler.setFormatter(logging.Formatter(LOG_FORMAT))
    package_logger.addHandler(file_handler)
    if package_logger.getEffectiveLevel() > level:
        package_logger.setLevel(level)
    return file_handler
