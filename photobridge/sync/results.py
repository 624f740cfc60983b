"""Fold per-file outcomes into a transfer summary."""

from pathlib import Path
from typing import Iterable, Optional, Union

from .models import DeletionOutcome, Direction, FileOutcome, TransferPlan, TransferResult


def aggregate(
    plan: TransferPlan,
    outcome: Iterable[FileOutcome],
    folder_path: Optional[Union[str, Path]] = None,
    deletion: Optional[DeletionOutcome] = None,
) -> TransferResult:
    """Build the summary of one transfer.

    Planned counts come from the plan and completed counts from ``COPIED``
    outcomes; whether everything synced is derived from the two, never
    tracked separately. Passing ``deletion`` marks deletion as requested.
    """
    pulled = 0
    pushed = 0
    for file_outcome in outcome:
        if not file_outcome.copied:
            continue
        if file_outcome.direction is Direction.PULL:
            pulled += 1
        else:
            pushed += 1

    return TransferResult(
        to_be_pulled_count=len(plan.to_pull),
        pulled_count=pulled,
        to_be_pushed_count=len(plan.to_push),
        pushed_count=pushed,
        delete_requested=deletion is not None,
        deletion_completed=deletion is not None and deletion.completed,
        deleted_count=len(deletion.deleted) if deletion is not None else 0,
        folder_path=str(folder_path) if folder_path is not None else None,
    )
