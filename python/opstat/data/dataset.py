"""Immutable, height-ordered collection of checkpoint snapshots."""

from __future__ import annotations

from bisect import bisect_left
from types import MappingProxyType
from typing import Iterable, Iterator, Mapping

import structlog

from opstat.core.errors import MissingHeightError
from opstat.core.types import Snapshot

logger = structlog.get_logger()


class Dataset:
    """Snapshots keyed by block height, read-only once built."""

    def __init__(self, snapshots: Mapping[int, Snapshot]) -> None:
        for height, snapshot in snapshots.items():
            if height != snapshot.block_number:
                raise ValueError(
                    f"snapshot for block {snapshot.block_number} keyed under {height}"
                )
        self._heights: tuple[int, ...] = tuple(sorted(snapshots))
        self._snapshots = MappingProxyType({h: snapshots[h] for h in self._heights})

    @classmethod
    def from_snapshots(cls, snapshots: Iterable[Snapshot]) -> Dataset:
        """Build a dataset; a later snapshot at an already-seen height wins."""
        merged: dict[int, Snapshot] = {}
        for snapshot in snapshots:
            if snapshot.block_number in merged:
                logger.warning("height_collision", block=snapshot.block_number)
            merged[snapshot.block_number] = snapshot
        return cls(merged)

    def __len__(self) -> int:
        return len(self._heights)

    def __contains__(self, block_number: object) -> bool:
        return block_number in self._snapshots

    def __iter__(self) -> Iterator[Snapshot]:
        for height in self._heights:
            yield self._snapshots[height]

    def __getitem__(self, block_number: int) -> Snapshot:
        return self.snapshot(block_number)

    @property
    def heights(self) -> tuple[int, ...]:
        return self._heights

    @property
    def snapshots(self) -> Mapping[int, Snapshot]:
        return self._snapshots

    @property
    def first(self) -> Snapshot:
        if not self._heights:
            raise LookupError("dataset is empty")
        return self._snapshots[self._heights[0]]

    @property
    def last(self) -> Snapshot:
        if not self._heights:
            raise LookupError("dataset is empty")
        return self._snapshots[self._heights[-1]]

    def snapshot(self, block_number: int) -> Snapshot:
        try:
            return self._snapshots[block_number]
        except KeyError:
            raise MissingHeightError(block_number) from None

    def heights_from(self, from_block: int = 0) -> tuple[int, ...]:
        return self._heights[bisect_left(self._heights, from_block):]

    def pairs(self, from_block: int = 0) -> Iterator[tuple[Snapshot, Snapshot]]:
        """Consecutive (earlier, later) snapshots at heights >= from_block."""
        heights = self.heights_from(from_block)
        for earlier, later in zip(heights, heights[1:]):
            yield self._snapshots[earlier], self._snapshots[later]

    def gaps(self) -> list[int]:
        """Distances between consecutive checkpoints."""
        return [b - a for a, b in zip(self._heights, self._heights[1:])]
