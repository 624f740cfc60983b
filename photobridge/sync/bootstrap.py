"""Device readiness state machine."""

from enum import Enum
from typing import Dict, FrozenSet, Optional

from ..util.logging import get_logger
from .errors import BootstrapError, TransportError
from .models import ScanResult
from .registry import DEFAULT_SCAN_TIMEOUT, DeviceRegistry
from .transport import ServiceControl, Transport

logger = get_logger(__name__)

DEFAULT_SERVICE_TIMEOUT = 15.0


class BootstrapState(str, Enum):
    UNINITIALIZED = "uninitialized"
    DEPENDENCIES_READY = "dependencies_ready"
    SERVICE_RUNNING = "service_running"
    DEVICES_SCANNED = "devices_scanned"
    READY = "ready"


TRANSITIONS: Dict[BootstrapState, FrozenSet[BootstrapState]] = {
    BootstrapState.UNINITIALIZED: frozenset({BootstrapState.DEPENDENCIES_READY}),
    BootstrapState.DEPENDENCIES_READY: frozenset({BootstrapState.SERVICE_RUNNING}),
    BootstrapState.SERVICE_RUNNING: frozenset({BootstrapState.DEVICES_SCANNED}),
    BootstrapState.DEVICES_SCANNED: frozenset({BootstrapState.DEVICES_SCANNED, BootstrapState.READY}),
    BootstrapState.READY: frozenset({BootstrapState.DEVICES_SCANNED}),
}


class Bootstrapper:
    """Brings the transport from nothing to a scanned, usable state.

    Readiness says nothing about the backup device: whether it is connected
    is asked of the registry, not of this state machine.
    """

    def __init__(
        self,
        transport: Transport,
        service: ServiceControl,
        registry: DeviceRegistry,
        service_timeout: float = DEFAULT_SERVICE_TIMEOUT,
        scan_timeout: float = DEFAULT_SCAN_TIMEOUT,
    ):
        self.transport = transport
        self.service = service
        self.registry = registry
        self.service_timeout = service_timeout
        self.scan_timeout = scan_timeout
        self._state = BootstrapState.UNINITIALIZED
        self.last_scan: Optional[ScanResult] = None

    @property
    def state(self) -> BootstrapState:
        return self._state

    @property
    def is_ready(self) -> bool:
        return self._state is BootstrapState.READY

    def _advance(self, target: BootstrapState) -> None:
        if target not in TRANSITIONS[self._state]:
            raise BootstrapError(f"Illegal transition {self._state.value} -> {target.value}")
        logger.debug(f"Bootstrap state {self._state.value} -> {target.value}")
        self._state = target

    def initialize(self) -> ScanResult:
        """Run every step up to READY.

        Raises:
            BootstrapError: If the transport binary or its daemon is unusable
        """
        self.check_dependencies()
        self.start_service()
        return self.rescan()

    def check_dependencies(self) -> None:
        try:
            self.service.check_available(timeout=self.service_timeout)
        except TransportError as e:
            raise BootstrapError(f"Transport dependencies not ready: {e}") from e
        self._advance(BootstrapState.DEPENDENCIES_READY)

    def start_service(self) -> None:
        try:
            self.service.start_server(timeout=self.service_timeout)
        except TransportError as e:
            raise BootstrapError(f"Transport service failed to start: {e}") from e
        self._advance(BootstrapState.SERVICE_RUNNING)
        logger.info("Transport service running")

    def rescan(self) -> ScanResult:
        """Scan devices and return to READY.

        A failed scan still reaches READY with an empty snapshot; the failure
        is reported in the returned result.
        """
        self._advance(BootstrapState.DEVICES_SCANNED)
        self.last_scan = self.registry.scan(self.transport, timeout=self.scan_timeout)
        self._advance(BootstrapState.READY)
        return self.last_scan
