"""Device shell commands for listing folders and files."""

import re
import shlex
from typing import List

from ..sync.models import FileEntry
from ..util.logging import get_logger
from ..util.paths import relative_to_folder

logger = get_logger(__name__)

STAT_SEPARATOR = "|"


def _start_point(folder: str) -> str:
    # find does not descend into a symlinked starting point (/sdcard is one)
    # unless it ends with a slash
    return shlex.quote(folder.rstrip("/") + "/")


def _normalize(device_path: str) -> str:
    return re.sub(r"/{2,}", "/", device_path)


def list_files_command(folder: str) -> str:
    """Shell command printing ``path|size|mtime`` for every file under folder.

    A missing folder prints nothing, so it lists as empty.
    """
    start = _start_point(folder)
    return (
        f"if [ -d {start} ]; then "
        f"find {start} -type f -exec stat -c '%n{STAT_SEPARATOR}%s{STAT_SEPARATOR}%Y' {{}} +; "
        f"fi"
    )


def list_folders_command(root: str) -> str:
    """Shell command printing the immediate subfolders of root."""
    return f"find {_start_point(root)} -mindepth 1 -maxdepth 1 -type d"


def delete_file_command(path: str) -> str:
    return f"rm {shlex.quote(path)}"


def _is_hidden(relative_path: str) -> bool:
    return any(part.startswith(".") for part in relative_path.split("/"))


def parse_file_listing(output: str, folder: str) -> List[FileEntry]:
    """Parse ``list_files_command`` output into entries sorted by path.

    Hidden files and anything inside hidden folders (thumbnails, trashed
    or pending camera files) are skipped.
    """
    entries = []

    for line in output.splitlines():
        line = line.strip()
        if not line:
            continue

        # Split from the right: file names may contain the separator
        parts = line.rsplit(STAT_SEPARATOR, 2)
        if len(parts) != 3:
            logger.debug(f"Ignoring unparseable stat line: {line}")
            continue

        device_path, size, mtime = parts
        relative_path = relative_to_folder(_normalize(folder), _normalize(device_path))
        if _is_hidden(relative_path):
            continue

        try:
            size_bytes, mtime_seconds = int(size), int(mtime)
        except ValueError:
            logger.debug(f"Ignoring stat line with bad numbers: {line}")
            continue

        try:
            entries.append(FileEntry(path=relative_path, size=size_bytes, mtime=mtime_seconds))
        except ValueError:
            logger.warning(f"Skipping file with an unusable name: {relative_path!r}")

    return sorted(entries, key=lambda e: e.path)


def parse_folder_listing(output: str) -> List[str]:
    """Parse ``list_folders_command`` output into sorted, non-hidden folder paths."""
    folders = []

    for line in output.splitlines():
        path = _normalize(line.strip()).rstrip("/")
        if not path:
            continue
        name = path.rsplit("/", 1)[-1]
        if name.startswith("."):
            continue
        folders.append(path)

    return sorted(folders, key=str.lower)
