"""Per-operation metric time series across consecutive checkpoints."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Iterable

import numpy as np
from numpy.typing import NDArray
import structlog

from opstat.analysis.delta import counter_delta
from opstat.analysis.metrics import Metric, PricedDelta
from opstat.core.opcodes import opcode_name
from opstat.data.dataset import Dataset
from opstat.schedule.fees import FeeSchedule

logger = structlog.get_logger()

SeriesFilter = Callable[["TimeSeries"], bool]


@dataclass(frozen=True, slots=True, eq=False)
class TimeSeries:
    """Ordered (height, value) points of one metric for one operation."""

    op: int
    metric: str
    heights: NDArray[np.float64]
    values: NDArray[np.float64]

    @property
    def name(self) -> str:
        return opcode_name(self.op)

    def __len__(self) -> int:
        return len(self.heights)

    @property
    def empty(self) -> bool:
        return len(self.heights) == 0

    def points(self) -> list[tuple[float, float]]:
        return list(zip(self.heights.tolist(), self.values.tolist()))

    def moving_average(self, window: int) -> TimeSeries:
        """Simple moving average; the first ``window - 1`` points are dropped."""
        if window < 1:
            raise ValueError(f"window must be positive, got {window}")
        if len(self.values) < window:
            return TimeSeries(self.op, f"{self.metric}_sma{window}", self.heights[:0], self.values[:0])
        kernel = np.ones(window, dtype=np.float64) / window
        averaged = np.convolve(self.values, kernel, mode="valid")
        return TimeSeries(
            self.op, f"{self.metric}_sma{window}", self.heights[window - 1:], averaged
        )


def min_filter(threshold: float) -> SeriesFilter:
    """Keep a series if any of its values reaches ``threshold``."""

    def keep(series: TimeSeries) -> bool:
        return bool(np.any(series.values >= threshold))

    return keep


class SeriesBuilder:
    """Builds metric series from an already-loaded dataset.

    A point is emitted for an interval only if the operation ran more than
    ``threshold`` times in it; rates computed from a handful of invocations
    are too noisy to compare.
    """

    def __init__(
        self,
        dataset: Dataset,
        schedule: FeeSchedule,
        threshold: int = 500,
        include_restarts: bool = False,
    ) -> None:
        if threshold < 0:
            raise ValueError(f"threshold must be non-negative, got {threshold}")
        self.dataset = dataset
        self.schedule = schedule
        self.threshold = threshold
        self.include_restarts = include_restarts

    def priced_deltas(self, op: int, from_block: int = 0) -> Iterable[PricedDelta]:
        """Every consecutive-interval delta of ``op``, priced at its height."""
        for earlier, later in self.dataset.pairs(from_block):
            yield PricedDelta.price(counter_delta(later, earlier, op), self.schedule)

    def build(self, op: int, metric: Metric, from_block: int = 0) -> TimeSeries:
        heights: list[float] = []
        values: list[float] = []
        for point in self.priced_deltas(op, from_block):
            if point.delta.restarted:
                logger.warning(
                    "restart_detected",
                    op=opcode_name(op),
                    block=point.delta.block_number,
                    count=point.delta.count,
                )
                if not self.include_restarts:
                    continue
            if point.count <= self.threshold:
                continue
            heights.append(float(point.delta.block_number))
            values.append(metric(point))
        return TimeSeries(
            op=int(op),
            metric=metric.name,
            heights=np.asarray(heights, dtype=np.float64),
            values=np.asarray(values, dtype=np.float64),
        )

    def build_many(
        self,
        ops: Iterable[int],
        metric: Metric,
        from_block: int = 0,
        series_filter: SeriesFilter | None = None,
    ) -> list[TimeSeries]:
        """Series for several operations, dropping those the filter rejects."""
        result: list[TimeSeries] = []
        for op in ops:
            series = self.build(op, metric, from_block)
            if series_filter is not None and not series_filter(series):
                continue
            result.append(series)
        logger.debug("series_built", metric=metric.name, kept=len(result))
        return result
