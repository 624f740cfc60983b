"""Error kinds and exceptions shared by the sync engine and its transports."""

from enum import Enum


class ErrorKind(str, Enum):
    """Why an operation or a single file did not complete."""

    TRANSPORT_UNAVAILABLE = "transport_unavailable"
    TIMEOUT = "timeout"
    SCAN_FAILURE = "scan_failure"
    DEVICE_NOT_FOUND = "device_not_found"
    TRANSFER_FAILURE = "transfer_failure"
    DELETION_FAILURE = "deletion_failure"


class PhotoBridgeError(Exception):
    """Base class for PhotoBridge errors."""
    pass


class TransportError(PhotoBridgeError):
    """A transport call failed."""
    pass


class TransportTimeout(TransportError):
    """A transport call exceeded its timeout."""
    pass


class TransportUnavailable(TransportError):
    """The transport binary or daemon cannot be reached.

    Fatal to the whole operation; the engine never retries it.
    """
    pass


class DeviceNotFound(PhotoBridgeError):
    """The requested device is not part of the latest scan."""

    def __init__(self, serial: str):
        self.serial = serial
        super().__init__(f"Device not found in latest scan: {serial}")


class BootstrapError(PhotoBridgeError):
    """Device readiness could not be reached."""
    pass
