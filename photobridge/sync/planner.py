"""Transfer planning: which files need copying for one reconciliation pass."""

from pathlib import Path
from typing import Dict, Iterable, Optional, Tuple

from .models import Direction, FileEntry, TransferPlan


def _index(listing: Iterable[FileEntry]) -> Dict[str, Tuple[int, int]]:
    return {entry.path: (entry.size, entry.mtime) for entry in listing}


def needs_copy(entry: FileEntry, destination: Dict[str, Tuple[int, int]]) -> bool:
    """Whether ``entry`` is missing from, or stale in, an indexed destination.

    Files are compared by size and modification time only, so a file whose
    content changed without either of them changing counts as synced.
    """
    existing = destination.get(entry.path)
    return existing is None or existing != (entry.size, entry.mtime)


def plan(
    source_listing: Iterable[FileEntry],
    dest_listing: Iterable[FileEntry],
    direction: Direction,
    pull_source: Optional[str] = None,
    local_folder: Optional[Path] = None,
    push_target: Optional[str] = None,
) -> TransferPlan:
    """Compute the files to copy from a source listing to a destination listing.

    The result keeps the source listing order. Neither listing is modified.

    Args:
        source_listing: Files on the side being copied from
        dest_listing: Files already present on the side being copied to
        direction: Which plan sequence receives the files
        pull_source: Device folder the pull side reads from
        local_folder: Local folder on the machine side
        push_target: Device folder the push side writes into

    Returns:
        TransferPlan with only the sequence for ``direction`` populated
    """
    destination = _index(dest_listing)
    to_copy = tuple(entry for entry in source_listing if needs_copy(entry, destination))

    if direction is Direction.PULL:
        return TransferPlan(
            to_pull=to_copy,
            pull_source=pull_source,
            local_folder=local_folder,
            push_target=push_target,
        )

    return TransferPlan(
        to_push=to_copy,
        pull_source=pull_source,
        local_folder=local_folder,
        push_target=push_target,
    )


def merge_plans(pull_plan: TransferPlan, push_plan: TransferPlan) -> TransferPlan:
    """Combine a pull-only plan and a push-only plan into one."""
    return TransferPlan(
        to_pull=pull_plan.to_pull,
        to_push=push_plan.to_push,
        pull_source=pull_plan.pull_source or push_plan.pull_source,
        local_folder=pull_plan.local_folder or push_plan.local_folder,
        push_target=push_plan.push_target or pull_plan.push_target,
    )
