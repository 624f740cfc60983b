"""Utility functions for path operations."""

import posixpath
from pathlib import Path


def ensure_directory(path: Path) -> Path:
    """Ensure directory exists, creating it if necessary."""
    path.mkdir(parents=True, exist_ok=True)
    return path


# Characters that are unsafe in local folder names, or awkward in adb arguments
_UNSAFE_CHARS = str.maketrans({char: "_" for char in '/\\:*?"<>|\n\r\t '})


def safe_filename(filename: str) -> str:
    """Turn a device model or folder name into a safe local folder name."""
    safe_name = filename.translate(_UNSAFE_CHARS).strip("_.")
    return safe_name or "unknown"


def remote_join(folder: str, relative_path: str) -> str:
    """Join a device folder and a listing-relative path."""
    return posixpath.join(folder.rstrip("/") or "/", relative_path)


def relative_to_folder(folder: str, device_path: str) -> str:
    """Strip a device folder prefix from an absolute device path."""
    prefix = folder.rstrip("/") + "/"
    if device_path.startswith(prefix):
        return device_path[len(prefix):]
    return device_path.lstrip("/")


def folder_name(device_folder: str) -> str:
    """Last component of a device folder, for naming the local copy."""
    return safe_filename(posixpath.basename(device_folder.rstrip("/")) or "root")


def format_size(size_bytes: float) -> str:
    """Format file size in human readable format."""
    if size_bytes == 0:
        return "0 B"

    size_names = ["B", "KB", "MB", "GB", "TB"]
    i = 0
    while size_bytes >= 1024.0 and i < len(size_names) - 1:
        size_bytes /= 1024.0
        i += 1

    return f"{size_bytes:.1f} {size_names[i]}"
