"""Core type definitions for opstat counter analysis."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Sequence, TypeAlias

from opstat.core.errors import DecodeError
from opstat.core.opcodes import NUM_OPCODES, check_opcode

Nanoseconds: TypeAlias = int
Gas: TypeAlias = int


@dataclass(frozen=True, slots=True)
class Counter:
    """Cumulative invocation count and execution time of one operation."""

    count: int
    exec_time: Nanoseconds

    def __post_init__(self) -> None:
        if self.count < 0 or self.exec_time < 0:
            raise DecodeError(
                f"negative counter value (count={self.count}, exec_time={self.exec_time})"
            )


@dataclass(frozen=True, slots=True)
class Snapshot:
    """Full counter table taken at one checkpoint."""

    block_number: int
    counters: tuple[Counter, ...]

    def __post_init__(self) -> None:
        if self.block_number < 0:
            raise ValueError(f"negative block number: {self.block_number}")
        if len(self.counters) != NUM_OPCODES:
            raise DecodeError(
                f"expected {NUM_OPCODES} counters, got {len(self.counters)}"
            )

    @classmethod
    def from_pairs(
        cls, block_number: int, pairs: Sequence[tuple[int, int]]
    ) -> Snapshot:
        return cls(block_number, tuple(Counter(c, t) for c, t in pairs))

    def counter(self, op: int) -> Counter:
        return self.counters[check_opcode(op)]

    @property
    def total_count(self) -> int:
        return sum(c.count for c in self.counters)

    @property
    def total_exec_time(self) -> Nanoseconds:
        return sum(c.exec_time for c in self.counters)


@dataclass(frozen=True, slots=True)
class Delta:
    """Difference between two cumulative snapshots for one operation.

    ``block_number`` is the height of the later snapshot. Components are
    signed: a negative value means the process restarted between the two
    checkpoints, which is reported through ``restarted`` rather than clamped.
    """

    block_number: int
    op: int
    count: int
    exec_time: Nanoseconds

    @property
    def restarted(self) -> bool:
        return self.count < 0 or self.exec_time < 0


class CostKind(Enum):
    STATIC = "static"
    INACTIVE = "inactive"
    DYNAMIC = "dynamic"
    UNDEFINED = "undefined"


@dataclass(frozen=True, slots=True)
class GasCost:
    """Gas cost of an operation at a given height, with its resolution kind."""

    gas: Gas
    kind: CostKind

    @property
    def staticizable(self) -> bool:
        return self.kind in (CostKind.STATIC, CostKind.INACTIVE)

    @property
    def priced(self) -> bool:
        """True when the cost can be used for per-gas comparisons."""
        return self.staticizable and self.gas > 0
