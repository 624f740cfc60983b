"""Data model for device classification and transfer reconciliation."""

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field

from .errors import ErrorKind


@dataclass(frozen=True)
class DeviceIdentity:
    """A device as reported by one scan."""

    serial: str
    model: str
    product: str
    state: str = "device"

    @property
    def is_connected(self) -> bool:
        """Whether the device is usable (authorized and online)."""
        return self.state == "device"

    @property
    def display_name(self) -> str:
        """Get a human-readable device name."""
        return f"{self.model} ({self.product})"


@dataclass(frozen=True)
class BackupIdentity:
    """The (model, product) pair that designates the backup device."""

    model: str
    product: str

    def matches(self, device: DeviceIdentity) -> bool:
        return (
            device.model.lower() == self.model.lower()
            and device.product.lower() == self.product.lower()
        )

    @property
    def display_name(self) -> str:
        return f"{self.model} ({self.product})"


class DeviceRole(str, Enum):
    ORIGIN = "origin"
    BACKUP = "backup"
    UNCLASSIFIED = "unclassified"


@dataclass(frozen=True)
class ClassifiedDevices:
    """Classification of one device snapshot against a backup identity."""

    backup: Optional[DeviceIdentity] = None
    origins: Tuple[DeviceIdentity, ...] = ()

    def role_of(self, device: DeviceIdentity) -> DeviceRole:
        """Derive the role of a device from this classification."""
        if self.backup is not None and device.serial == self.backup.serial:
            return DeviceRole.BACKUP
        if self.backup is not None and device in self.origins:
            return DeviceRole.ORIGIN
        return DeviceRole.UNCLASSIFIED


class FileEntry(BaseModel):
    """A file in a folder listing, relative to the listed folder."""

    path: str = Field(description="Relative path using forward slashes")
    size: int = Field(description="File size in bytes")
    mtime: int = Field(description="Modification time (Unix timestamp)")

    model_config = ConfigDict(frozen=True)


class Direction(str, Enum):
    """Copy direction, seen from the local machine."""

    PULL = "pull"
    PUSH = "push"


@dataclass(frozen=True)
class TransferPlan:
    """Files to copy in each direction for one reconciliation pass.

    ``pull_source`` is the device folder pulled from and ``local_folder`` the
    local side; ``push_target`` is the device folder pushed into.
    """

    to_pull: Tuple[FileEntry, ...] = ()
    to_push: Tuple[FileEntry, ...] = ()
    pull_source: Optional[str] = None
    local_folder: Optional[Path] = None
    push_target: Optional[str] = None

    @property
    def is_empty(self) -> bool:
        return not self.to_pull and not self.to_push


class OutcomeStatus(str, Enum):
    COPIED = "copied"
    FAILED = "failed"


@dataclass(frozen=True)
class FileOutcome:
    """Result of copying one planned file."""

    entry: FileEntry
    direction: Direction
    status: OutcomeStatus
    reason: Optional[ErrorKind] = None
    message: str = ""

    @property
    def copied(self) -> bool:
        return self.status is OutcomeStatus.COPIED


ExecutionOutcome = Tuple[FileOutcome, ...]


@dataclass(frozen=True)
class DeletionOutcome:
    """Result of deleting confirmed-copied originals."""

    deleted: Tuple[str, ...] = ()
    failed: Tuple[Tuple[str, ErrorKind], ...] = ()

    @property
    def completed(self) -> bool:
        """True iff every eligible file was deleted."""
        return not self.failed


class TransferResult(BaseModel):
    """Summary of one transfer, derived from per-file outcomes."""

    to_be_pulled_count: int = Field(default=0, description="Files planned for pull")
    pulled_count: int = Field(default=0, description="Files pulled successfully")
    to_be_pushed_count: int = Field(default=0, description="Files planned for push")
    pushed_count: int = Field(default=0, description="Files pushed successfully")
    delete_requested: bool = Field(default=False, description="Caller asked to delete originals")
    deletion_completed: bool = Field(default=False, description="Every eligible original was deleted")
    deleted_count: int = Field(default=0, description="Originals deleted after the transfer")
    folder_path: Optional[str] = Field(default=None, description="Local folder used for the transfer")

    model_config = ConfigDict(frozen=True)

    @property
    def all_files_synced(self) -> bool:
        return (
            self.pulled_count == self.to_be_pulled_count
            and self.pushed_count == self.to_be_pushed_count
        )

    @property
    def delete_completed(self) -> Optional[bool]:
        """``None`` when deletion was not requested."""
        if not self.delete_requested:
            return None
        return self.all_files_synced and self.deletion_completed


@dataclass(frozen=True)
class ScanResult:
    """Outcome of one device scan."""

    devices: Tuple[DeviceIdentity, ...] = ()
    error: Optional[ErrorKind] = None
    message: str = ""

    @property
    def ok(self) -> bool:
        return self.error is None
