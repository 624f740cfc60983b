"""Device snapshot and backup/origin classification."""

from typing import Iterable, Protocol, Tuple

from ..util.logging import get_logger
from .errors import DeviceNotFound, ErrorKind, TransportError, TransportTimeout, TransportUnavailable
from .models import BackupIdentity, ClassifiedDevices, DeviceIdentity, ScanResult
from .transport import Transport

logger = get_logger(__name__)

DEFAULT_SCAN_TIMEOUT = 15.0


class IdentityStore(Protocol):
    """Where the backup identity is persisted."""

    def get_backup_identity(self) -> BackupIdentity:
        ...

    def set_backup_identity(self, model: str, product: str) -> None:
        ...


def classify(devices: Iterable[DeviceIdentity], backup_identity: BackupIdentity) -> ClassifiedDevices:
    """Split connected devices into the backup device and origins.

    The first connected device matching ``backup_identity`` in scan order is
    the backup; every other connected device is an origin. Devices that are
    offline or unauthorized are ignored.
    """
    backup = None
    origins = []

    for device in devices:
        if not device.is_connected:
            continue
        if backup is None and backup_identity.matches(device):
            backup = device
        else:
            origins.append(device)

    return ClassifiedDevices(backup=backup, origins=tuple(origins))


class DeviceRegistry:
    """Holds the latest device snapshot.

    The snapshot is only written by :meth:`scan` and is always replaced as a
    whole. Classification is recomputed on every query from the snapshot and
    the identity store, so nothing derived from it is cached.
    """

    def __init__(self, identity_store: IdentityStore):
        self.identity_store = identity_store
        self._devices: Tuple[DeviceIdentity, ...] = ()

    @property
    def devices(self) -> Tuple[DeviceIdentity, ...]:
        return self._devices

    def scan(self, transport: Transport, timeout: float = DEFAULT_SCAN_TIMEOUT) -> ScanResult:
        """Replace the snapshot with the devices currently attached.

        A timed-out or failed scan leaves an empty snapshot and returns a
        failed :class:`ScanResult`. ``TransportUnavailable`` is raised after
        emptying the snapshot.
        """
        try:
            devices = tuple(transport.list_devices(timeout=timeout))
        except TransportUnavailable:
            self._devices = ()
            raise
        except TransportTimeout as e:
            self._devices = ()
            logger.error(f"Device scan timed out after {timeout}s: {e}")
            return ScanResult(error=ErrorKind.TIMEOUT, message=str(e))
        except TransportError as e:
            self._devices = ()
            logger.error(f"Device scan failed: {e}")
            return ScanResult(error=ErrorKind.SCAN_FAILURE, message=str(e))

        self._devices = devices
        logger.info(f"Scan found {len(devices)} device(s)")
        return ScanResult(devices=devices)

    def classified(self) -> ClassifiedDevices:
        """Classify the current snapshot against the stored backup identity."""
        return classify(self._devices, self.identity_store.get_backup_identity())

    def is_backup_connected(self) -> bool:
        return self.classified().backup is not None

    def get_device(self, serial: str) -> DeviceIdentity:
        """Get a connected device from the snapshot by serial number.

        Raises:
            DeviceNotFound: If the device was not in the latest scan
        """
        for device in self._devices:
            if device.serial == serial and device.is_connected:
                return device

        raise DeviceNotFound(serial)
