"""ADB client wrapper implementing the sync transport."""

import subprocess
import typing as t
from pathlib import Path

from tenacity import (
    retry,
    retry_if_exception_type,
    retry_if_not_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from ..sync.errors import TransportError, TransportTimeout, TransportUnavailable
from ..sync.models import DeviceIdentity, FileEntry
from ..util.logging import get_logger
from ..util.paths import ensure_directory
from .device import parse_devices_output
from .shell import (
    delete_file_command,
    list_files_command,
    list_folders_command,
    parse_file_listing,
    parse_folder_listing,
)

logger = get_logger(__name__)

# stderr fragments adb prints when its daemon cannot be reached
DAEMON_FAILURE_MARKERS = (
    "cannot connect to daemon",
    "daemon not running",
    "failed to start daemon",
)


class ADBError(TransportError):
    """ADB command failed."""
    pass


class ADBTimeoutError(ADBError, TransportTimeout):
    """ADB command exceeded its timeout."""
    pass


class ADBUnavailableError(ADBError, TransportUnavailable):
    """ADB binary missing or its server unreachable."""
    pass


class ADBClient:
    """ADB client wrapper.

    Every public call takes the timeout it must complete within; nothing
    here retries transfers or deletions.
    """

    def __init__(self, adb_path: str = "adb") -> None:
        """Initialize ADB client.

        Args:
            adb_path: Path to adb executable
        """
        self.adb_path = adb_path

    def _run_command(self, args: t.List[str], timeout: float, serial: t.Optional[str] = None) -> str:
        """Run ADB command and return output.

        Args:
            args: Command arguments
            timeout: Seconds the command may run
            serial: Device to address with ``-s``

        Returns:
            Command output

        Raises:
            ADBTimeoutError: If the command timed out
            ADBUnavailableError: If adb is missing or its daemon unreachable
            ADBError: If the command failed otherwise
        """
        cmd = [self.adb_path]
        if serial is not None:
            cmd += ["-s", serial]
        cmd += args

        logger.debug(f"Running ADB command: {' '.join(cmd)}")
        try:
            # surrogateescape keeps undecodable device file names usable as later argv
            result = subprocess.run(
                cmd,
                capture_output=True,
                encoding="utf-8",
                errors="surrogateescape",
                timeout=timeout,
                check=True
            )
            return result.stdout.strip()
        except subprocess.CalledProcessError as e:
            stderr = (e.stderr or "").strip()
            if any(marker in stderr for marker in DAEMON_FAILURE_MARKERS):
                raise ADBUnavailableError(f"ADB server unavailable: {stderr}") from e
            raise ADBError(f"ADB command failed: {' '.join(cmd)}: {stderr or e.stdout}") from e
        except subprocess.TimeoutExpired as e:
            raise ADBTimeoutError(f"ADB command timed out after {timeout}s: {' '.join(cmd)}") from e
        except FileNotFoundError as e:
            raise ADBUnavailableError("ADB not found. Please install Android platform tools.") from e

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=1, max=10),
        retry=retry_if_exception_type(ADBError) & retry_if_not_exception_type((ADBTimeoutError, ADBUnavailableError)),
        reraise=True,
    )
    def _run_listing(self, serial: str, command: str, timeout: float) -> str:
        """Run a read-only shell command, retrying plain command failures."""
        return self._run_command(["shell", command], timeout=timeout, serial=serial)

    # Service lifecycle

    def check_available(self, timeout: float = 10) -> None:
        """Check that the adb binary runs.

        Raises:
            ADBUnavailableError: If adb is missing or broken
        """
        try:
            version = self._run_command(["version"], timeout=timeout)
        except ADBUnavailableError:
            raise
        except ADBError as e:
            raise ADBUnavailableError(f"ADB is not working: {e}") from e
        logger.debug(version.splitlines()[0] if version else "adb version: unknown")

    def start_server(self, timeout: float = 15) -> None:
        self._run_command(["start-server"], timeout=timeout)

    def kill_server(self, timeout: float = 15) -> None:
        self._run_command(["kill-server"], timeout=timeout)

    # Devices

    def list_devices(self, timeout: float = 15) -> t.List[DeviceIdentity]:
        """List attached devices in adb order, whatever their state."""
        output = self._run_command(["devices", "-l"], timeout=timeout)
        return parse_devices_output(output)

    def connect(self, host: str, port: int, timeout: float = 15) -> str:
        """Connect to a device over wireless debugging.

        Returns:
            adb's description of the result
        """
        return self._run_command(["connect", f"{host}:{port}"], timeout=timeout)

    def pair(self, host: str, port: int, pairing_code: str, timeout: float = 15) -> str:
        """Pair with a device using its wireless debugging pairing code."""
        return self._run_command(["pair", f"{host}:{port}", pairing_code], timeout=timeout)

    # Files

    def pull(self, device: DeviceIdentity, remote_path: str, local_path: Path, timeout: float) -> None:
        """Pull file from device, preserving its modification time.

        Args:
            device: Source device
            remote_path: Remote file path
            local_path: Local destination path
            timeout: Seconds the copy may take
        """
        ensure_directory(local_path.parent)
        self._run_command(["pull", "-a", remote_path, str(local_path)], timeout=timeout, serial=device.serial)

    def push(self, device: DeviceIdentity, local_path: Path, remote_path: str, timeout: float) -> None:
        """Push file to device.

        Args:
            device: Destination device
            local_path: Local source path
            remote_path: Remote destination path
            timeout: Seconds the copy may take
        """
        self._run_command(["push", str(local_path), remote_path], timeout=timeout, serial=device.serial)

    def delete_remote_file(self, device: DeviceIdentity, path: str, timeout: float) -> None:
        self._run_command(["shell", delete_file_command(path)], timeout=timeout, serial=device.serial)

    def list_remote_files(self, device: DeviceIdentity, folder: str, timeout: float) -> t.List[FileEntry]:
        """List files under a device folder, recursively.

        Returns:
            Entries relative to folder, sorted by path
        """
        output = self._run_listing(device.serial, list_files_command(folder), timeout)
        return parse_file_listing(output, folder)

    def list_remote_folders(self, device: DeviceIdentity, root: str, timeout: float) -> t.List[str]:
        """List the non-hidden top-level folders under root."""
        output = self._run_listing(device.serial, list_folders_command(root), timeout)
        return parse_folder_listing(output)

    def list_local_files(self, folder: Path) -> t.List[FileEntry]:
        """List regular files under a local folder, sorted by relative path.

        A missing folder lists as empty.
        """
        if not folder.is_dir():
            return []

        entries = []
        for path in folder.rglob("*"):
            if not path.is_file():
                continue
            stat = path.stat()
            entries.append(FileEntry(
                path=path.relative_to(folder).as_posix(),
                size=stat.st_size,
                mtime=int(stat.st_mtime),
            ))

        return sorted(entries, key=lambda e: e.path)
