"""Per-interval deltas between cumulative snapshots."""

from __future__ import annotations

from opstat.core.types import Delta, Snapshot
from opstat.data.dataset import Dataset


def counter_delta(later: Snapshot, earlier: Snapshot | None, op: int) -> Delta:
    """Later minus earlier for one operation.

    With no earlier snapshot the later counter is returned as a delta from
    zero: the first interval covers everything since process start.
    """
    current = later.counter(op)
    if earlier is None:
        return Delta(later.block_number, int(op), current.count, current.exec_time)
    if earlier.block_number >= later.block_number:
        raise ValueError(
            f"earlier block {earlier.block_number} is not before {later.block_number}"
        )
    previous = earlier.counter(op)
    return Delta(
        block_number=later.block_number,
        op=int(op),
        count=current.count - previous.count,
        exec_time=current.exec_time - previous.exec_time,
    )


def delta(
    dataset: Dataset,
    earlier_height: int | None,
    later_height: int,
    op: int,
) -> Delta:
    """Delta of ``op`` between two heights of ``dataset``.

    ``earlier_height=None`` means since process start. A height that is not
    in the dataset raises MissingHeightError.
    """
    later = dataset.snapshot(later_height)
    earlier = None if earlier_height is None else dataset.snapshot(earlier_height)
    return counter_delta(later, earlier, op)


def snapshot_deltas(later: Snapshot, earlier: Snapshot | None) -> list[Delta]:
    """Deltas for every operation slot between two snapshots."""
    return [counter_delta(later, earlier, op) for op in range(len(later.counters))]
