"""Removal of origin files once they are confirmed copied."""

from typing import Iterable, List, Set, Tuple

from ..util.logging import get_logger
from ..util.paths import remote_join
from .errors import ErrorKind, TransportError, TransportTimeout, TransportUnavailable
from .models import DeletionOutcome, DeviceIdentity, Direction, FileEntry, FileOutcome, TransferPlan
from .transport import Transport

logger = get_logger(__name__)

DEFAULT_DELETE_TIMEOUT = 30.0


def eligible_for_deletion(plan: TransferPlan, outcome: Iterable[FileOutcome]) -> List[FileEntry]:
    """Origin files that may be deleted, in plan order.

    A file qualifies when its pull was ``COPIED`` and, if the same path was
    pushed onwards in this plan, that push did not fail.
    """
    pulled: Set[str] = set()
    push_failed: Set[str] = set()

    for file_outcome in outcome:
        if file_outcome.direction is Direction.PULL and file_outcome.copied:
            pulled.add(file_outcome.entry.path)
        elif file_outcome.direction is Direction.PUSH and not file_outcome.copied:
            push_failed.add(file_outcome.entry.path)

    return [
        entry for entry in plan.to_pull
        if entry.path in pulled and entry.path not in push_failed
    ]


class DeletionCoordinator:
    """Deletes confirmed-copied files from the origin device."""

    def __init__(self, transport: Transport, timeout: float = DEFAULT_DELETE_TIMEOUT):
        self.transport = transport
        self.timeout = timeout

    def delete_confirmed(
        self,
        device: DeviceIdentity,
        plan: TransferPlan,
        outcome: Iterable[FileOutcome]
    ) -> DeletionOutcome:
        """Delete origin copies of the files this plan copied successfully.

        Must only be called once the whole transfer batch has finished.
        Files whose transfer failed are never touched. A failed deletion is
        recorded and the remaining files are still deleted.
        """
        eligible = eligible_for_deletion(plan, outcome)
        if not eligible:
            return DeletionOutcome()

        if plan.pull_source is None:
            raise ValueError("Deletion needs the plan's pull_source")

        logger.info(f"Deleting {len(eligible)} copied files from {device.serial}")

        deleted: List[str] = []
        failed: List[Tuple[str, ErrorKind]] = []

        for entry in eligible:
            remote_path = remote_join(plan.pull_source, entry.path)
            try:
                self.transport.delete_remote_file(device, remote_path, timeout=self.timeout)
            except TransportUnavailable:
                raise
            except TransportTimeout as e:
                logger.warning(f"Timed out deleting {remote_path}: {e}")
                failed.append((entry.path, ErrorKind.TIMEOUT))
                continue
            except TransportError as e:
                logger.warning(f"Failed to delete {remote_path}: {e}")
                failed.append((entry.path, ErrorKind.DELETION_FAILURE))
                continue

            deleted.append(entry.path)

        logger.info(f"Deletion completed: {len(deleted)}/{len(eligible)} files removed")
        return DeletionOutcome(deleted=tuple(deleted), failed=tuple(failed))
