"""Tests for opstat.analysis.delta: per-interval counter differences."""

from __future__ import annotations

import pytest

from opstat.analysis.delta import counter_delta, delta, snapshot_deltas
from opstat.core.errors import MissingHeightError
from opstat.core.opcodes import OpCode
from opstat.core.types import Delta
from opstat.data.dataset import Dataset

from conftest import make_snapshot


@pytest.fixture
def continuous() -> Dataset:
    return Dataset.from_snapshots([
        make_snapshot(100, {OpCode.ADD: (10, 1_000), OpCode.SLOAD: (4, 9_000)}),
        make_snapshot(200, {OpCode.ADD: (25, 2_500), OpCode.SLOAD: (4, 9_000)}),
        make_snapshot(300, {OpCode.ADD: (70, 9_000), OpCode.SLOAD: (10, 30_000)}),
    ])


class TestDelta:

    def test_component_wise(self, continuous):
        result = delta(continuous, 100, 200, OpCode.ADD)
        assert result == Delta(block_number=200, op=OpCode.ADD, count=15, exec_time=1_500)
        assert not result.restarted

    def test_every_operation(self, continuous):
        earlier, later = continuous[100], continuous[300]
        for op in range(256):
            result = delta(continuous, 100, 300, op)
            assert result.count == later.counter(op).count - earlier.counter(op).count
            assert result.exec_time == later.counter(op).exec_time - earlier.counter(op).exec_time

    def test_non_adjacent_heights(self, continuous):
        result = delta(continuous, 100, 300, OpCode.SLOAD)
        assert (result.count, result.exec_time) == (6, 21_000)
        assert result.block_number == 300

    def test_idle_interval(self, continuous):
        result = delta(continuous, 100, 200, OpCode.SLOAD)
        assert (result.count, result.exec_time) == (0, 0)

    def test_first_interval_is_raw_counter(self, continuous):
        result = delta(continuous, None, 100, OpCode.ADD)
        raw = continuous[100].counter(OpCode.ADD)
        assert (result.count, result.exec_time) == (raw.count, raw.exec_time)
        assert result.block_number == 100

    def test_missing_later_height(self, continuous):
        with pytest.raises(MissingHeightError):
            delta(continuous, 100, 250, OpCode.ADD)

    def test_missing_earlier_height(self, continuous):
        with pytest.raises(MissingHeightError):
            delta(continuous, 150, 200, OpCode.ADD)

    def test_reversed_heights(self, continuous):
        with pytest.raises(ValueError):
            delta(continuous, 300, 200, OpCode.ADD)

    def test_same_height(self, continuous):
        with pytest.raises(ValueError):
            delta(continuous, 200, 200, OpCode.ADD)


class TestRestart:
    """A counter going backwards means the process restarted."""

    def test_smaller_count_is_flagged(self):
        earlier = make_snapshot(100, {OpCode.ADD: (5_000, 90_000)})
        later = make_snapshot(200, {OpCode.ADD: (40, 1_000)})
        result = counter_delta(later, earlier, OpCode.ADD)
        assert result.restarted
        # Values are reported as-is, never clamped.
        assert result.count == -4_960
        assert result.exec_time == -89_000

    def test_time_only_regression_is_flagged(self):
        earlier = make_snapshot(100, {OpCode.ADD: (10, 90_000)})
        later = make_snapshot(200, {OpCode.ADD: (20, 1_000)})
        assert counter_delta(later, earlier, OpCode.ADD).restarted

    def test_unaffected_operations_not_flagged(self):
        earlier = make_snapshot(100, {OpCode.ADD: (5_000, 90_000), OpCode.MUL: (1, 1)})
        later = make_snapshot(200, {OpCode.ADD: (40, 1_000), OpCode.MUL: (2, 2)})
        assert not counter_delta(later, earlier, OpCode.MUL).restarted


def test_snapshot_deltas_covers_all_slots():
    earlier = make_snapshot(1, {OpCode.ADD: (1, 1)})
    later = make_snapshot(2, {OpCode.ADD: (3, 3)})
    deltas = snapshot_deltas(later, earlier)
    assert len(deltas) == 256
    assert deltas[OpCode.ADD].count == 2
    assert all(d.block_number == 2 for d in deltas)
