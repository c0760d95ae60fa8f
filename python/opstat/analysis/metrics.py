"""Derived performance metrics.

All inputs are whole gas units and integer nanoseconds. ``time_per_gas`` is
expressed in nanoseconds per gas, which is numerically the same as
milliseconds per megagas. Degenerate intervals (no gas, no elapsed time)
yield exactly 0.0; a zero therefore means "nothing to measure", not "fast".
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable

from opstat.core.types import Delta, GasCost
from opstat.schedule.fees import FeeSchedule

NANOS_PER_SECOND = 1_000_000_000
NANOS_PER_MILLI = 1_000_000


def total_gas(delta: Delta, cost: GasCost) -> int:
    return delta.count * cost.gas


def time_per_gas(delta: Delta, cost: GasCost) -> float:
    gas = total_gas(delta, cost)
    if gas == 0:
        return 0.0
    return delta.exec_time / gas


def gas_per_second(delta: Delta, cost: GasCost) -> float:
    if delta.exec_time == 0:
        return 0.0
    return total_gas(delta, cost) * NANOS_PER_SECOND / delta.exec_time


@dataclass(frozen=True, slots=True)
class PricedDelta:
    """A delta together with the gas cost in effect at its block height."""

    delta: Delta
    cost: GasCost

    @classmethod
    def price(cls, delta: Delta, schedule: FeeSchedule) -> PricedDelta:
        return cls(delta, schedule.resolve(delta.op, delta.block_number))

    @property
    def count(self) -> int:
        return self.delta.count

    @property
    def exec_time(self) -> int:
        return self.delta.exec_time

    @property
    def time_ms(self) -> float:
        return self.delta.exec_time / NANOS_PER_MILLI

    @property
    def total_gas(self) -> int:
        return total_gas(self.delta, self.cost)

    @property
    def time_per_gas(self) -> float:
        return time_per_gas(self.delta, self.cost)

    @property
    def gas_per_second(self) -> float:
        return gas_per_second(self.delta, self.cost)

    @property
    def mgas_per_second(self) -> float:
        return self.gas_per_second / 1_000_000


@dataclass(frozen=True, slots=True)
class Metric:
    """A named scalar derived from a priced delta."""

    name: str
    label: str
    unit: str
    fn: Callable[[PricedDelta], float]
    requires_gas: bool = False

    def __call__(self, point: PricedDelta) -> float:
        return self.fn(point)


TIME_MS = Metric("time_ms", "Time spent", "Milliseconds", lambda p: p.time_ms)
COUNT = Metric("count", "Invocations", "Count", lambda p: float(p.count))
TOTAL_GAS = Metric(
    "total_gas", "Gas used", "Gas", lambda p: float(p.total_gas), requires_gas=True
)
TIME_PER_GAS = Metric(
    "time_per_gas", "Milliseconds per Mgas", "Milliseconds",
    lambda p: p.time_per_gas, requires_gas=True,
)
GAS_PER_SECOND = Metric(
    "gas_per_second", "Gas per second", "Gas/s",
    lambda p: p.gas_per_second, requires_gas=True,
)

METRICS: dict[str, Metric] = {
    m.name: m for m in (TIME_MS, COUNT, TOTAL_GAS, TIME_PER_GAS, GAS_PER_SECOND)
}


def get_metric(name: str) -> Metric:
    try:
        return METRICS[name]
    except KeyError:
        raise ValueError(
            f"unknown metric {name!r}, expected one of {sorted(METRICS)}"
        ) from None


def capped(metric: Metric, ceiling: float) -> Metric:
    """Clamp a metric at ``ceiling`` so outliers don't flatten a chart."""

    def fn(point: PricedDelta) -> float:
        return min(metric.fn(point), ceiling)

    return Metric(
        name=f"{metric.name}_cap{ceiling:g}",
        label=f"{metric.label} (capped at {ceiling:g})",
        unit=metric.unit,
        fn=fn,
        requires_gas=metric.requires_gas,
    )
