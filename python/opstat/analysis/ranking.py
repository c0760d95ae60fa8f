"""Window aggregates: one delta per operation across two checkpoints, ranked."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable

import structlog

from opstat.analysis.delta import delta, snapshot_deltas
from opstat.analysis.metrics import Metric, PricedDelta
from opstat.core.opcodes import ALL_OPS, opcode_name
from opstat.data.dataset import Dataset
from opstat.schedule.fees import FeeSchedule

logger = structlog.get_logger()


class ExclusionReason(Enum):
    INFREQUENT = "infrequent"
    RESTARTED = "restarted"
    NOT_STATIC = "not_static"


@dataclass(frozen=True, slots=True)
class RankedEntry:
    op: int
    value: float
    point: PricedDelta

    @property
    def label(self) -> str:
        return opcode_name(self.op)


@dataclass(frozen=True, slots=True)
class WindowRanking:
    """Operations ranked by one metric over ``(start, end]``."""

    start: int | None
    end: int
    metric: str
    entries: tuple[RankedEntry, ...]
    excluded: dict[int, ExclusionReason] = field(default_factory=dict)

    @property
    def blocks(self) -> int:
        return self.end - (self.start or 0)

    def __len__(self) -> int:
        return len(self.entries)

    def as_pairs(self) -> list[tuple[str, float]]:
        return [(e.label, e.value) for e in self.entries]

    def shares(self) -> list[tuple[str, float]]:
        """Each entry's fraction of the ranked total, for pie charts."""
        total = sum(e.value for e in self.entries)
        if total == 0:
            return [(e.label, 0.0) for e in self.entries]
        return [(e.label, e.value / total) for e in self.entries]


class WindowAggregator:
    """Ranks operations by a metric computed over a whole window.

    Before ranking, operations are excluded when they ran less than once per
    block in the window, when the window spans a restart, or (for gas-based
    metrics) when their cost cannot be resolved statically.
    """

    def __init__(self, dataset: Dataset, schedule: FeeSchedule) -> None:
        self.dataset = dataset
        self.schedule = schedule

    def restarted_ops(self, start: int | None, end: int) -> set[int]:
        """Operations whose counters went backwards in any interval of the window."""
        heights = [h for h in self.dataset.heights_from(start or 0) if h <= end]
        restarted: set[int] = set()
        for earlier, later in zip(heights, heights[1:]):
            for d in snapshot_deltas(self.dataset[later], self.dataset[earlier]):
                if d.restarted:
                    restarted.add(d.op)
        return restarted

    def rank(
        self,
        start: int | None,
        end: int,
        metric: Metric,
        top_n: int | None = None,
        ops: Iterable[int] = ALL_OPS,
    ) -> WindowRanking:
        if start is not None and start >= end:
            raise ValueError(f"empty window: start {start} >= end {end}")
        if top_n is not None and top_n < 0:
            raise ValueError(f"top_n must be non-negative, got {top_n}")

        self.dataset.snapshot(end)
        if start is not None:
            self.dataset.snapshot(start)
        restarted = self.restarted_ops(start, end)
        blocks = end - (start or 0)
        entries: list[RankedEntry] = []
        excluded: dict[int, ExclusionReason] = {}

        for op in ops:
            point = PricedDelta.price(delta(self.dataset, start, end, op), self.schedule)
            if point.delta.restarted or op in restarted:
                excluded[op] = ExclusionReason.RESTARTED
                continue
            if point.count < blocks:
                excluded[op] = ExclusionReason.INFREQUENT
                continue
            if metric.requires_gas and not point.cost.priced:
                excluded[op] = ExclusionReason.NOT_STATIC
                continue
            entries.append(RankedEntry(int(op), metric(point), point))

        entries.sort(key=lambda e: (-e.value, e.op))
        if top_n is not None:
            entries = entries[:top_n]

        logger.info(
            "window_ranked",
            start=start,
            end=end,
            metric=metric.name,
            ranked=len(entries),
            excluded=len(excluded),
        )
        return WindowRanking(start, end, metric.name, tuple(entries), excluded)
