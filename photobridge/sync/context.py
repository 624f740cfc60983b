"""Explicit context object wiring the sync engine to its collaborators."""

import typing as t
from pathlib import Path

from ..adb.client import ADBClient
from ..config import ConfigIdentityStore, PhotoBridgeConfig
from ..util.logging import get_logger
from ..util.paths import folder_name, remote_join, safe_filename
from .bootstrap import Bootstrapper
from .deletion import DeletionCoordinator
from .errors import DeviceNotFound
from .executor import ProgressCallback, TransferExecutor
from .models import (
    BackupIdentity,
    ClassifiedDevices,
    DeletionOutcome,
    DeviceIdentity,
    Direction,
    FileEntry,
    FileOutcome,
    ScanResult,
    TransferPlan,
    TransferResult,
)
from .planner import merge_plans, plan
from .registry import DeviceRegistry, IdentityStore
from .results import aggregate
from .transport import ServiceControl, Transport

logger = get_logger(__name__)


class PhotoBridgeContext:
    """Everything one PhotoBridge session needs, built once and passed around.

    Holds the device registry and the transfer components, and exposes the
    backup workflows on top of them.
    """

    def __init__(
        self,
        config: PhotoBridgeConfig,
        transport: Transport,
        service: ServiceControl,
        identity_store: IdentityStore,
    ):
        self.config = config
        self.transport = transport
        self.service = service
        self.identity_store = identity_store

        self.registry = DeviceRegistry(identity_store)
        self.bootstrapper = Bootstrapper(
            transport,
            service,
            self.registry,
            service_timeout=config.service_timeout,
            scan_timeout=config.scan_timeout,
        )
        self.executor = TransferExecutor(transport, file_timeout=config.transfer.file_timeout)
        self.deletion = DeletionCoordinator(transport, timeout=config.transfer.delete_timeout)

    @classmethod
    def from_config(cls, config: PhotoBridgeConfig, config_path: t.Optional[Path] = None) -> "PhotoBridgeContext":
        """Build a context talking to a real adb binary."""
        client = ADBClient(config.adb_path)
        return cls(config, client, client, ConfigIdentityStore(config, config_path))

    # Devices

    def initialize(self) -> ScanResult:
        return self.bootstrapper.initialize()

    def rescan(self) -> ScanResult:
        return self.bootstrapper.rescan()

    def classified(self) -> ClassifiedDevices:
        return self.registry.classified()

    def is_backup_connected(self) -> bool:
        return self.registry.is_backup_connected()

    @property
    def backup_identity(self) -> BackupIdentity:
        return self.identity_store.get_backup_identity()

    def set_backup_identity(self, model: str, product: str) -> ClassifiedDevices:
        """Change which device is the backup; returns the new classification."""
        self.identity_store.set_backup_identity(model, product)
        return self.classified()

    def connect_wireless(self, host: str, port: int) -> str:
        return self.transport.connect(host, port, timeout=self.config.service_timeout)

    def pair_wireless(self, host: str, port: int, pairing_code: str) -> str:
        return self.transport.pair(host, port, pairing_code, timeout=self.config.service_timeout)

    def shutdown(self) -> None:
        """Stop the transport daemon."""
        self.service.kill_server(timeout=self.config.service_timeout)

    def list_root_folders(self, serial: str) -> t.List[str]:
        device = self.registry.get_device(serial)
        return self.transport.list_remote_folders(
            device,
            self.config.transfer.storage_root,
            timeout=self.config.transfer.listing_timeout,
        )

    # Workflows

    def local_folder_for(self, device: DeviceIdentity, name: str) -> Path:
        """Local folder holding copies of one device folder."""
        device_dir = safe_filename(f"{device.model or 'device'}_{device.serial}")
        return Path(self.config.local_root) / device_dir / name

    def _list_remote(self, device: DeviceIdentity, folder: str) -> t.List[FileEntry]:
        return self.transport.list_remote_files(device, folder, timeout=self.config.transfer.listing_timeout)

    def _finish(
        self,
        origin: DeviceIdentity,
        transfer_plan: TransferPlan,
        outcome: t.Sequence[FileOutcome],
        local_folder: Path,
        delete_after: bool,
    ) -> TransferResult:
        deletion: t.Optional[DeletionOutcome] = None
        if delete_after:
            deletion = self.deletion.delete_confirmed(origin, transfer_plan, outcome)

        result = aggregate(transfer_plan, outcome, local_folder, deletion)
        logger.info(
            f"Pulled {result.pulled_count}/{result.to_be_pulled_count}, "
            f"pushed {result.pushed_count}/{result.to_be_pushed_count}, "
            f"synced={result.all_files_synced}"
        )
        return result

    def backup_folder(
        self,
        serial: str,
        folder: str,
        delete_after: bool = False,
        progress_callback: t.Optional[ProgressCallback] = None,
    ) -> TransferResult:
        """Copy a device folder to the local machine.

        Args:
            serial: Device to back up
            folder: Device folder, absolute or relative to shared storage
            delete_after: Delete device copies of the files pulled
            progress_callback: Optional callback (current, total, path)
        """
        device = self.registry.get_device(serial)
        remote_folder = folder if folder.startswith("/") else remote_join(self.config.transfer.storage_root, folder)
        local_folder = self.local_folder_for(device, folder_name(remote_folder))

        logger.info(f"Backing up {remote_folder} from {device.serial} to {local_folder}")

        pull_plan = plan(
            self._list_remote(device, remote_folder),
            self.transport.list_local_files(local_folder),
            Direction.PULL,
            pull_source=remote_folder,
            local_folder=local_folder,
        )
        outcome = self.executor.execute(device, pull_plan, progress_callback)

        return self._finish(device, pull_plan, outcome, local_folder, delete_after)

    def transfer_photos(
        self,
        origin_serial: str,
        delete_from_origin: bool = False,
        progress_callback: t.Optional[ProgressCallback] = None,
    ) -> TransferResult:
        """Copy origin photos to the backup device through a local staging folder.

        Photos are pulled into the local folder, then every origin photo whose
        local copy is current is pushed to the backup device when missing or
        stale there.

        With ``delete_from_origin`` only photos pulled in this run are deleted
        from the origin. A photo already staged locally by an earlier run is
        left on the origin even when this run pushed it to the backup device;
        ``deleted_count`` on the result says how many were actually removed.

        Raises:
            DeviceNotFound: If the origin or the backup device is not connected
        """
        origin = self.registry.get_device(origin_serial)
        backup = self.classified().backup
        if backup is None:
            raise DeviceNotFound(self.backup_identity.display_name)
        if backup.serial == origin.serial:
            raise ValueError("The backup device cannot also be the origin")

        transfer = self.config.transfer
        local_folder = self.local_folder_for(origin, folder_name(transfer.photos_folder))

        logger.info(f"Transferring photos from {origin.serial} to backup {backup.serial}")

        source_listing = self._list_remote(origin, transfer.photos_folder)
        pull_plan = plan(
            source_listing,
            self.transport.list_local_files(local_folder),
            Direction.PULL,
            pull_source=transfer.photos_folder,
            local_folder=local_folder,
        )
        pull_outcome = self.executor.execute(origin, pull_plan, progress_callback)

        # Only origin photos with a current local copy move on to the backup
        pull_failed = {o.entry.path for o in pull_outcome if not o.copied}
        origin_paths = {entry.path for entry in source_listing} - pull_failed
        staged = [e for e in self.transport.list_local_files(local_folder) if e.path in origin_paths]

        push_plan = plan(
            staged,
            self._list_remote(backup, transfer.backup_folder),
            Direction.PUSH,
            local_folder=local_folder,
            push_target=transfer.backup_folder,
        )
        push_outcome = self.executor.execute(backup, push_plan, progress_callback)

        combined = merge_plans(pull_plan, push_plan)
        return self._finish(origin, combined, pull_outcome + push_outcome, local_folder, delete_from_origin)

    def push_to_documents(
        self,
        serial: str,
        files: t.Sequence[Path],
        progress_callback: t.Optional[ProgressCallback] = None,
    ) -> TransferResult:
        """Push local files into the device documents folder.

        Files already present there with the same size and modification time
        are skipped.
        """
        device = self.registry.get_device(serial)
        target = self.config.transfer.documents_folder

        groups: t.Dict[Path, t.List[FileEntry]] = {}
        names = set()
        for file_path in files:
            file_path = Path(file_path)
            if not file_path.is_file():
                raise ValueError(f"Not a file: {file_path}")
            if file_path.name in names:
                raise ValueError(f"Duplicate file name: {file_path.name}")
            names.add(file_path.name)

            stat = file_path.stat()
            entry = FileEntry(path=file_path.name, size=stat.st_size, mtime=int(stat.st_mtime))
            groups.setdefault(file_path.parent, []).append(entry)

        remote_listing = self._list_remote(device, target)

        planned: t.List[FileEntry] = []
        outcome: t.List[FileOutcome] = []
        for parent, entries in groups.items():
            push_plan = plan(entries, remote_listing, Direction.PUSH, local_folder=parent, push_target=target)
            planned.extend(push_plan.to_push)
            outcome.extend(self.executor.execute(device, push_plan, progress_callback))

        local_folder = next(iter(groups)) if len(groups) == 1 else None
        return aggregate(TransferPlan(to_push=tuple(planned), push_target=target), outcome, local_folder)
