"""Sync engine: device classification and transfer reconciliation.

The context object lives in :mod:`photobridge.sync.context`; it is not
imported here so that the engine has no import-time dependency on the ADB
transport or the configuration file.
"""

from .bootstrap import Bootstrapper, BootstrapState
from .deletion import DeletionCoordinator, eligible_for_deletion
from .errors import (
    BootstrapError,
    DeviceNotFound,
    ErrorKind,
    PhotoBridgeError,
    TransportError,
    TransportTimeout,
    TransportUnavailable,
)
from .executor import TransferExecutor, create_transfer_progress_bar
from .models import (
    BackupIdentity,
    ClassifiedDevices,
    DeletionOutcome,
    DeviceIdentity,
    DeviceRole,
    Direction,
    FileEntry,
    FileOutcome,
    OutcomeStatus,
    ScanResult,
    TransferPlan,
    TransferResult,
)
from .planner import merge_plans, plan
from .registry import DeviceRegistry, classify
from .results import aggregate

__all__ = [
    # bootstrap
    "Bootstrapper",
    "BootstrapState",
    # deletion
    "DeletionCoordinator",
    "eligible_for_deletion",
    # errors
    "BootstrapError",
    "DeviceNotFound",
    "ErrorKind",
    "PhotoBridgeError",
    "TransportError",
    "TransportTimeout",
    "TransportUnavailable",
    # executor
    "TransferExecutor",
    "create_transfer_progress_bar",
    # models
    "BackupIdentity",
    "ClassifiedDevices",
    "DeletionOutcome",
    "DeviceIdentity",
    "DeviceRole",
    "Direction",
    "FileEntry",
    "FileOutcome",
    "OutcomeStatus",
    "ScanResult",
    "TransferPlan",
    "TransferResult",
    # planner
    "merge_plans",
    "plan",
    # registry
    "DeviceRegistry",
    "classify",
    # results
    "aggregate",
]
