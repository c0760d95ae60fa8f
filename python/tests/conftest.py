"""Shared fixtures for the opstat test suite."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Mapping

import pytest
import structlog

from opstat.core.config import ForkConfig
from opstat.core.opcodes import NUM_OPCODES, OpCode
from opstat.core.types import Counter, Snapshot
from opstat.data.dataset import Dataset
from opstat.schedule.fees import FeeSchedule

CounterSpec = Mapping[int, tuple[int, int]]


def make_snapshot(block_number: int, counters: CounterSpec | None = None) -> Snapshot:
    """Snapshot with every slot zero except those given as ``op: (count, ns)``."""
    table = [Counter(0, 0)] * NUM_OPCODES
    for op, (count, exec_time) in (counters or {}).items():
        table[op] = Counter(count, exec_time)
    return Snapshot(block_number, tuple(table))


def checkpoint_json(counters: CounterSpec | None = None, length: int = NUM_OPCODES) -> str:
    records = [{"Num": 0, "Time": 0} for _ in range(length)]
    for op, (count, exec_time) in (counters or {}).items():
        records[op] = {"Num": count, "Time": exec_time}
    return json.dumps(records)


# ── Logging ──────────────────────────────────────────────────────────────


@pytest.fixture(autouse=True)
def _reset_structlog():
    """The CLI reconfigures structlog globally; undo it after each test."""
    yield
    structlog.reset_defaults()


# ── Schedule ─────────────────────────────────────────────────────────────


@pytest.fixture
def forks() -> ForkConfig:
    return ForkConfig()


@pytest.fixture
def schedule(forks: ForkConfig) -> FeeSchedule:
    return FeeSchedule.mainnet(forks)


# ── Datasets ─────────────────────────────────────────────────────────────


@pytest.fixture
def replay_dataset() -> Dataset:
    """Three checkpoints of a continuous run, after the EIP150 repricing.

    Per interval: ADD runs 10_000 times for 60_000 ns, SLOAD 2_000 times for
    4_000_000 ns, SHA3 (dynamic cost) 5_000 times.
    """
    return Dataset.from_snapshots([
        make_snapshot(3_000_000, {
            OpCode.ADD: (10_000, 60_000),
            OpCode.SLOAD: (2_000, 4_000_000),
            OpCode.SHA3: (5_000, 1_000_000),
        }),
        make_snapshot(3_001_000, {
            OpCode.ADD: (20_000, 120_000),
            OpCode.SLOAD: (4_000, 8_000_000),
            OpCode.SHA3: (10_000, 2_000_000),
        }),
        make_snapshot(3_002_000, {
            OpCode.ADD: (30_000, 180_000),
            OpCode.SLOAD: (6_000, 12_000_000),
            OpCode.SHA3: (15_000, 3_000_000),
        }),
    ])


@pytest.fixture
def checkpoint_dir(tmp_path: Path) -> Path:
    """Directory laid out like a replay run's metrics output."""
    directory = tmp_path / "metrics"
    directory.mkdir()
    for block, scale in ((4_760_000, 1), (4_770_000, 2), (4_780_000, 3)):
        (directory / f"metrics_to_{block}").write_text(checkpoint_json({
            OpCode.ADD: (50_000 * scale, 300_000 * scale),
            OpCode.SLOAD: (20_000 * scale, 90_000_000 * scale),
            OpCode.BALANCE: (15_000 * scale, 40_000_000 * scale),
        }))
    (directory / "README.txt").write_text("not a checkpoint")
    return directory
