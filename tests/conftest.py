"""Shared fixtures: an in-memory transport standing in for adb."""

import os
from pathlib import Path
from typing import Dict, List, Optional, Set, Tuple

import pytest

from photobridge.adb.client import ADBClient
from photobridge.config import ConfigIdentityStore, PhotoBridgeConfig
from photobridge.sync.context import PhotoBridgeContext
from photobridge.sync.errors import TransportError, TransportTimeout
from photobridge.sync.models import DeviceIdentity, FileEntry


class FakeTransport:
    """Devices with in-memory storage and scriptable failures."""

    def __init__(self):
        self.devices: List[DeviceIdentity] = []
        self.storage: Dict[str, Dict[str, Tuple[int, int]]] = {}
        self.fail_pull: Set[str] = set()
        self.timeout_pull: Set[str] = set()
        self.fail_push: Set[str] = set()
        self.fail_delete: Set[str] = set()
        self.scan_error: Optional[Exception] = None
        self.service_error: Optional[Exception] = None
        self.calls: List[Tuple[str, str]] = []

    def add_device(self, serial: str, model: str, product: str, state: str = "device") -> DeviceIdentity:
        device = DeviceIdentity(serial=serial, model=model, product=product, state=state)
        self.devices.append(device)
        self.storage.setdefault(serial, {})
        return device

    def add_remote_file(self, serial: str, path: str, size: int, mtime: int) -> None:
        self.storage[serial][path] = (size, mtime)

    def remote_paths(self, serial: str) -> List[str]:
        return sorted(self.storage[serial])

    # Service control

    def check_available(self, timeout: float) -> None:
        if self.service_error is not None:
            raise self.service_error

    def start_server(self, timeout: float) -> None:
        self.calls.append(("start-server", ""))

    def kill_server(self, timeout: float) -> None:
        self.calls.append(("kill-server", ""))

    # Transport

    def list_devices(self, timeout: float) -> List[DeviceIdentity]:
        if self.scan_error is not None:
            raise self.scan_error
        return list(self.devices)

    def pull(self, device: DeviceIdentity, remote_path: str, local_path: Path, timeout: float) -> None:
        self.calls.append(("pull", remote_path))
        if remote_path in self.timeout_pull:
            raise TransportTimeout(f"pull timed out: {remote_path}")
        if remote_path in self.fail_pull:
            raise TransportError(f"pull failed: {remote_path}")

        size, mtime = self.storage[device.serial][remote_path]
        local_path.parent.mkdir(parents=True, exist_ok=True)
        local_path.write_bytes(b"x" * size)
        os.utime(local_path, (mtime, mtime))

    def push(self, device: DeviceIdentity, local_path: Path, remote_path: str, timeout: float) -> None:
        self.calls.append(("push", remote_path))
        if remote_path in self.fail_push:
            raise TransportError(f"push failed: {remote_path}")

        stat = local_path.stat()
        self.storage[device.serial][remote_path] = (stat.st_size, int(stat.st_mtime))

    def delete_remote_file(self, device: DeviceIdentity, path: str, timeout: float) -> None:
        self.calls.append(("delete", path))
        if path in self.fail_delete:
            raise TransportError(f"rm failed: {path}")
        del self.storage[device.serial][path]

    def list_remote_files(self, device: DeviceIdentity, folder: str, timeout: float) -> List[FileEntry]:
        prefix = folder.rstrip("/") + "/"
        return sorted(
            (
                FileEntry(path=path[len(prefix):], size=size, mtime=mtime)
                for path, (size, mtime) in self.storage[device.serial].items()
                if path.startswith(prefix)
            ),
            key=lambda e: e.path,
        )

    def list_remote_folders(self, device: DeviceIdentity, root: str, timeout: float) -> List[str]:
        prefix = root.rstrip("/") + "/"
        folders = {
            prefix + path[len(prefix):].split("/", 1)[0]
            for path in self.storage[device.serial]
            if path.startswith(prefix) and "/" in path[len(prefix):]
        }
        return sorted(folders)

    def list_local_files(self, folder: Path) -> List[FileEntry]:
        return ADBClient().list_local_files(folder)

    def connect(self, host: str, port: int, timeout: float) -> str:
        return f"connected to {host}:{port}"

    def pair(self, host: str, port: int, pairing_code: str, timeout: float) -> str:
        return f"Successfully paired to {host}:{port}"


@pytest.fixture
def transport():
    return FakeTransport()


@pytest.fixture
def config(tmp_path):
    return PhotoBridgeConfig(local_root=tmp_path / "local")


@pytest.fixture
def identity_store(config, tmp_path):
    return ConfigIdentityStore(config, tmp_path / "config.yaml")


@pytest.fixture
def context(config, transport, identity_store):
    return PhotoBridgeContext(config, transport, transport, identity_store)
