"""Utility module initialization."""

from .logging import get_logger, setup_logging
from .paths import (
    ensure_directory,
    folder_name,
    format_size,
    relative_to_folder,
    remote_join,
    safe_filename,
)
from .timeutil import format_duration

__all__ = [
    # logging
    "get_logger",
    "setup_logging",
    # paths
    "ensure_directory",
    "folder_name",
    "format_size",
    "relative_to_folder",
    "remote_join",
    "safe_filename",
    # timeutil
    "format_duration",
]
