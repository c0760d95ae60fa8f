"""
opstat: fork-aware opcode performance analysis

Turns cumulative per-opcode execution counters, snapshotted at block-height
checkpoints during a full historical replay, into per-interval deltas priced
with the fee schedule active at each height.
"""

from opstat.core.types import (
    Counter,
    Snapshot,
    Delta,
    GasCost,
    CostKind,
)
from opstat.core.opcodes import OpCode
from opstat.data.dataset import Dataset
from opstat.schedule.fees import FeeSchedule

__version__ = "0.1.0"
__all__ = [
    "Counter",
    "Snapshot",
    "Delta",
    "GasCost",
    "CostKind",
    "OpCode",
    "Dataset",
    "FeeSchedule",
]
