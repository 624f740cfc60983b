"""Parsing of ``adb devices -l`` output."""

from typing import List, Optional

from ..sync.models import DeviceIdentity
from ..util.logging import get_logger

logger = get_logger(__name__)


def parse_device_line(line: str) -> Optional[DeviceIdentity]:
    """Parse one line of ``adb devices -l``.

    Lines look like::

        R58M123ABC  device usb:1-1 product:redfin model:Pixel_5 device:redfin transport_id:1

    Unauthorized and offline devices carry no model/product details; they
    are returned with empty strings for those fields.
    """
    parts = line.split()
    if len(parts) < 2:
        return None

    serial, state = parts[0], parts[1]
    details = {}
    for part in parts[2:]:
        key, sep, value = part.partition(":")
        if sep:
            details[key] = value

    return DeviceIdentity(
        serial=serial,
        model=details.get("model", ""),
        product=details.get("product", ""),
        state=state,
    )


def parse_devices_output(output: str) -> List[DeviceIdentity]:
    """Parse the full ``adb devices -l`` output, keeping adb's order."""
    devices = []

    for line in output.splitlines():
        line = line.strip()
        # Skip header and daemon startup chatter
        if not line or line.startswith("List of devices") or line.startswith("*"):
            continue

        device = parse_device_line(line)
        if device is None:
            logger.debug(f"Ignoring unparseable device line: {line}")
            continue
        devices.append(device)

    return devices
