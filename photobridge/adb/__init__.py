"""ADB module initialization."""

from .client import ADBClient, ADBError, ADBTimeoutError, ADBUnavailableError
from .device import parse_device_line, parse_devices_output
from .shell import parse_file_listing, parse_folder_listing

__all__ = [
    # client
    "ADBClient",
    "ADBError",
    "ADBTimeoutError",
    "ADBUnavailableError",
    # device
    "parse_device_line",
    "parse_devices_output",
    # shell
    "parse_file_listing",
    "parse_folder_listing",
]
