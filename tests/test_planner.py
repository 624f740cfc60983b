"""Tests for transfer planning."""

from pathlib import Path

import pytest

from photobridge.sync.models import Direction, FileEntry
from photobridge.sync.planner import merge_plans, plan


def entry(path, size, mtime):
    return FileEntry(path=path, size=size, mtime=mtime)


class TestPlan:
    """Test plan computation from two listings."""

    def test_missing_file_is_planned(self):
        """Test the documented scenario: only the missing file is pulled."""
        source = [entry("a.jpg", 100, 1), entry("b.jpg", 200, 2)]
        dest = [entry("a.jpg", 100, 1)]

        result = plan(source, dest, Direction.PULL)

        assert [e.path for e in result.to_pull] == ["b.jpg"]
        assert result.to_push == ()

    def test_changed_size_or_mtime_is_planned(self):
        """Test that stale files are copied again."""
        source = [entry("a.jpg", 100, 1), entry("b.jpg", 200, 2), entry("c.jpg", 300, 3)]
        dest = [entry("a.jpg", 101, 1), entry("b.jpg", 200, 5), entry("c.jpg", 300, 3)]

        result = plan(source, dest, Direction.PULL)

        assert [e.path for e in result.to_pull] == ["a.jpg", "b.jpg"]

    def test_matching_size_and_mtime_counts_as_synced(self):
        """Test that content is never compared."""
        result = plan([entry("a.jpg", 100, 1)], [entry("a.jpg", 100, 1)], Direction.PUSH)

        assert result.is_empty

    def test_extra_destination_files_are_ignored(self):
        """Test that the plan never copies destination-only files back."""
        result = plan([], [entry("only-here.jpg", 1, 1)], Direction.PULL)

        assert result.is_empty

    def test_push_direction_fills_to_push(self):
        """Test the direction selects the plan sequence."""
        result = plan([entry("a.jpg", 1, 1)], [], Direction.PUSH, push_target="/sdcard/DCIM/Camera")

        assert [e.path for e in result.to_push] == ["a.jpg"]
        assert result.to_pull == ()
        assert result.push_target == "/sdcard/DCIM/Camera"

    def test_plan_keeps_source_order(self):
        """Test that plan order follows the source listing."""
        source = [entry("z.jpg", 1, 1), entry("a.jpg", 1, 1), entry("m.jpg", 1, 1)]

        result = plan(source, [], Direction.PULL)

        assert [e.path for e in result.to_pull] == ["z.jpg", "a.jpg", "m.jpg"]

    def test_plan_does_not_mutate_listings(self):
        """Test that both listings are left untouched."""
        source = [entry("a.jpg", 1, 1), entry("b.jpg", 2, 2)]
        dest = [entry("a.jpg", 1, 1)]
        source_copy, dest_copy = list(source), list(dest)

        plan(source, dest, Direction.PULL)

        assert source == source_copy
        assert dest == dest_copy

    def test_plan_is_stable_across_runs(self):
        """Test that identical listings always produce identical plans."""
        source = [entry("a.jpg", 1, 1), entry("b.jpg", 2, 2)]

        assert plan(source, [], Direction.PULL) == plan(source, [], Direction.PULL)

    def test_plan_is_empty_once_everything_was_copied(self):
        """Test idempotence: copying the planned files converges to no work."""
        source = [entry("a.jpg", 1, 1), entry("b.jpg", 2, 2), entry("c.jpg", 3, 3)]
        dest = [entry("a.jpg", 1, 1)]

        first = plan(source, dest, Direction.PULL)
        dest_after = dest + list(first.to_pull)
        second = plan(source, dest_after, Direction.PULL)

        assert len(first.to_pull) == 2
        assert second.is_empty

    @pytest.mark.parametrize("direction", [Direction.PULL, Direction.PUSH])
    def test_plan_contains_exactly_the_differing_paths(self, direction):
        """Test the plan holds exactly the missing-or-differing source paths."""
        source = [entry(f"{i}.jpg", i, i) for i in range(10)]
        dest = [entry(f"{i}.jpg", i, i if i % 3 else i + 1) for i in range(0, 10, 2)]

        result = plan(source, dest, direction)
        planned = result.to_pull if direction is Direction.PULL else result.to_push

        dest_index = {e.path: (e.size, e.mtime) for e in dest}
        expected = [e.path for e in source if dest_index.get(e.path) != (e.size, e.mtime)]
        assert [e.path for e in planned] == expected


class TestMergePlans:
    """Test combining pull and push plans."""

    def test_merge_keeps_both_directions(self):
        """Test that merging keeps both sequences and their folders."""
        pull_plan = plan([entry("a.jpg", 1, 1)], [], Direction.PULL,
                         pull_source="/sdcard/DCIM/Camera", local_folder=Path("/tmp/photos"))
        push_plan = plan([entry("a.jpg", 1, 1)], [], Direction.PUSH,
                         local_folder=Path("/tmp/photos"), push_target="/sdcard/Backup")

        merged = merge_plans(pull_plan, push_plan)

        assert [e.path for e in merged.to_pull] == ["a.jpg"]
        assert [e.path for e in merged.to_push] == ["a.jpg"]
        assert merged.pull_source == "/sdcard/DCIM/Camera"
        assert merged.push_target == "/sdcard/Backup"
        assert merged.local_folder == Path("/tmp/photos")
