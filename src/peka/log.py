"""Logging setup.

Modules log through ``logging.getLogger(__name__)``. The TUI owns the
terminal, so records go to a file; CLI commands additionally echo warnings
to stderr through rich.
"""

import logging
from pathlib import Path
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler

from .config import config

LOGGER_NAME = "peka"
FILE_FORMAT = "%(asctime)s [%(name)s] %(levelname)s: %(message)s"

_file_handler: Optional[logging.FileHandler] = None


def setup_logging(
    log_file: Optional[str] = None,
    level: Optional[str] = None,
    console: bool = False,
    console_level: int = logging.WARNING,
) -> logging.Logger:
    """
    Initialize the ``peka`` logger.

    Args:
        log_file: Log file path. Defaults to config.log_file
        level: Level name for the file handler. Defaults to config.log_level
        console: Also log to stderr with rich formatting
        console_level: Minimum level for console output

    Returns:
        The configured package logger
    """
    global _file_handler

    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(logging.DEBUG)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    path = Path(log_file or config.log_file)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        _file_handler = logging.FileHandler(path, encoding="utf-8")
    except OSError:
        _file_handler = None
    if _file_handler is not None:
        level_name = (level or config.log_level).upper()
        _file_handler.setLevel(getattr(logging, level_name, logging.INFO))
        _file_handler.setFormatter(logging.Formatter(FILE_FORMAT))
        logger.addHandler(_file_handler)

    if console:
        rich_handler = RichHandler(
            console=Console(stderr=True),
            show_time=False,
            show_path=False,
            markup=False,
        )
        rich_handler.setLevel(console_level)
        logger.addHandler(rich_handler)

    if not logger.handlers:
        logger.addHandler(logging.NullHandler())

    logger.propagate = False
    logger.debug("Logging initialized (file=%s)", path if _file_handler else None)
    return logger


def get_log_file() -> Optional[str]:
    """Get the active log file path, if file logging is on."""
    return _file_handler.baseFilename if _file_handler else None
