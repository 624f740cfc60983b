"""Logging setup: Rich console output plus an optional detailed log file."""

import logging
from pathlib import Path
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler

ROOT_LOGGER_NAME = "photobridge"

FILE_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(filename)s:%(lineno)d - %(message)s"


def _console_handler(console: Console, level: int) -> logging.Handler:
    handler = RichHandler(
        console=console,
        show_time=True,
        show_path=level <= logging.DEBUG,
        rich_tracebacks=True,
        markup=False,
    )
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(fmt="%(message)s", datefmt="[%X]"))
    return handler


def _file_handler(log_file: Path) -> logging.Handler:
    log_file.parent.mkdir(parents=True, exist_ok=True)
    handler = logging.FileHandler(log_file, encoding="utf-8")
    handler.setLevel(logging.DEBUG)
    handler.setFormatter(logging.Formatter(fmt=FILE_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
    return handler


def setup_logging(
    level: str = "INFO",
    log_file: Optional[Path] = None,
    console: Optional[Console] = None
) -> logging.Logger:
    """Configure the ``photobridge`` logger.

    Console output goes to stderr so it never mixes with command output. The
    log file, when given, records every ADB command at DEBUG whatever the
    console level is.

    Args:
        level: Console level name, e.g. ``INFO``
        log_file: Optional path of the detailed log file
        console: Console to log to, stderr by default

    Returns:
        The configured logger
    """
    console_level = logging.getLevelName(level.upper())
    if not isinstance(console_level, int):
        raise ValueError(f"Unknown log level: {level}")

    logger = logging.getLogger(ROOT_LOGGER_NAME)
    for handler in logger.handlers[:]:
        logger.removeHandler(handler)
        handler.close()

    logger.addHandler(_console_handler(console or Console(stderr=True), console_level))
    if log_file:
        logger.addHandler(_file_handler(log_file))

    logger.setLevel(logging.DEBUG if log_file else console_level)
    return logger


def get_logger(name: str = ROOT_LOGGER_NAME) -> logging.Logger:
    """Get a logger instance."""
    return logging.getLogger(name)
