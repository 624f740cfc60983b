"""Transport interface consumed by the sync engine.

Every call takes an explicit ``timeout`` in seconds and either completes or
raises: ``TransportTimeout`` when the bound is exceeded,
``TransportUnavailable`` when the transport itself cannot be reached and
``TransportError`` for any other failure.
"""

from pathlib import Path
from typing import List, Protocol

from .models import DeviceIdentity, FileEntry


class Transport(Protocol):
    """Per-file primitives over a device bridge."""

    def list_devices(self, timeout: float) -> List[DeviceIdentity]:
        ...

    def pull(self, device: DeviceIdentity, remote_path: str, local_path: Path, timeout: float) -> None:
        ...

    def push(self, device: DeviceIdentity, local_path: Path, remote_path: str, timeout: float) -> None:
        ...

    def list_remote_files(self, device: DeviceIdentity, folder: str, timeout: float) -> List[FileEntry]:
        ...

    def list_local_files(self, folder: Path) -> List[FileEntry]:
        ...

    def delete_remote_file(self, device: DeviceIdentity, path: str, timeout: float) -> None:
        ...

    def list_remote_folders(self, device: DeviceIdentity, root: str, timeout: float) -> List[str]:
        ...

    def connect(self, host: str, port: int, timeout: float) -> str:
        ...

    def pair(self, host: str, port: int, pairing_code: str, timeout: float) -> str:
        ...


class ServiceControl(Protocol):
    """Lifecycle of the transport daemon."""

    def check_available(self, timeout: float) -> None:
        ...

    def start_server(self, timeout: float) -> None:
        ...

    def kill_server(self, timeout: float) -> None:
        ...
