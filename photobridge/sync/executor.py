"""Transfer execution engine."""

import typing as t
from pathlib import Path

from tqdm import tqdm

from ..util.logging import get_logger
from ..util.paths import format_size, remote_join
from .errors import ErrorKind, TransportError, TransportTimeout, TransportUnavailable
from .models import (
    DeviceIdentity,
    Direction,
    ExecutionOutcome,
    FileEntry,
    FileOutcome,
    OutcomeStatus,
    TransferPlan,
)
from .transport import Transport

logger = get_logger(__name__)

DEFAULT_FILE_TIMEOUT = 300.0

ProgressCallback = t.Callable[[int, int, str], None]


class TransferExecutor:
    """Executes transfer plans one file at a time."""

    def __init__(self, transport: Transport, file_timeout: float = DEFAULT_FILE_TIMEOUT) -> None:
        """Initialize transfer executor.

        Args:
            transport: Transport providing push/pull primitives
            file_timeout: Upper bound in seconds for a single file transfer
        """
        self.transport = transport
        self.file_timeout = file_timeout

    def execute(
        self,
        device: DeviceIdentity,
        plan: TransferPlan,
        progress_callback: t.Optional[ProgressCallback] = None
    ) -> ExecutionOutcome:
        """Execute a plan against one device.

        Pulls run first, then pushes, each in plan order. A failed file is
        recorded and the batch moves on; only an unavailable transport stops
        it.

        Args:
            device: Device on the remote side of every copy in the plan
            plan: Files to copy
            progress_callback: Optional callback (current, total, path)

        Returns:
            One outcome per planned file, in execution order
        """
        if plan.to_pull and (plan.pull_source is None or plan.local_folder is None):
            raise ValueError("Pull plan needs both pull_source and local_folder")
        if plan.to_push and (plan.push_target is None or plan.local_folder is None):
            raise ValueError("Push plan needs both push_target and local_folder")

        if plan.is_empty:
            logger.info(f"Nothing to transfer for {device.serial}")
            return ()

        total = len(plan.to_pull) + len(plan.to_push)
        total_bytes = sum(entry.size for entry in plan.to_pull + plan.to_push)
        logger.info(f"Starting transfer of {total} files ({format_size(total_bytes)}) with {device.serial}")

        outcomes: t.List[FileOutcome] = []
        steps = [(Direction.PULL, entry) for entry in plan.to_pull]
        steps += [(Direction.PUSH, entry) for entry in plan.to_push]

        for i, (direction, entry) in enumerate(steps):
            if progress_callback:
                progress_callback(i + 1, total, entry.path)

            outcome = self._transfer_file(device, plan, direction, entry)
            outcomes.append(outcome)

            if not outcome.copied:
                logger.warning(
                    f"Failed to {direction.value} file {i + 1}/{total}: {entry.path} ({outcome.reason.value})"
                )

        successful = sum(1 for outcome in outcomes if outcome.copied)
        logger.info(f"Transfer completed: {successful}/{total} files successful")

        return tuple(outcomes)

    def _transfer_file(
        self,
        device: DeviceIdentity,
        plan: TransferPlan,
        direction: Direction,
        entry: FileEntry
    ) -> FileOutcome:
        local_path = Path(plan.local_folder) / entry.path

        try:
            if direction is Direction.PULL:
                remote_path = remote_join(plan.pull_source, entry.path)
                logger.debug(f"Pulling {remote_path} -> {local_path}")
                self.transport.pull(device, remote_path, local_path, timeout=self.file_timeout)
            else:
                remote_path = remote_join(plan.push_target, entry.path)
                logger.debug(f"Pushing {local_path} -> {remote_path}")
                self.transport.push(device, local_path, remote_path, timeout=self.file_timeout)
        except TransportUnavailable:
            raise
        except TransportTimeout as e:
            return FileOutcome(entry, direction, OutcomeStatus.FAILED, ErrorKind.TIMEOUT, str(e))
        except TransportError as e:
            return FileOutcome(entry, direction, OutcomeStatus.FAILED, ErrorKind.TRANSFER_FAILURE, str(e))

        return FileOutcome(entry, direction, OutcomeStatus.COPIED)


def create_transfer_progress_bar(total_files: int, desc: str = "Transferring files") -> tqdm:
    """Create a progress bar for file transfer operations."""
    return tqdm(
        total=total_files,
        desc=desc,
        unit="file",
        bar_format="{l_bar}{bar}| {n_fmt}/{total_fmt} [{elapsed}<{remaining}, {rate_fmt}{postfix}]"
    )
