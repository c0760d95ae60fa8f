"""Tests for opstat.schedule.fees: fork-aware gas cost resolution."""

from __future__ import annotations

import pytest

from opstat.core.config import ForkConfig
from opstat.core.opcodes import DUP_OPS, LOG_OPS, PUSH_OPS, SWAP_OPS, OpCode
from opstat.core.types import CostKind
from opstat.schedule.fees import (
    FEE_TABLE_EIP150,
    FEE_TABLE_HOMESTEAD,
    FeeSchedule,
    ScheduleVersion,
)


EIP150 = 2_463_000
EIP158 = 2_675_000
BYZANTIUM = 4_370_000
CONSTANTINOPLE = 7_280_000


class TestStepClasses:
    """Operations with a fixed cost independent of the fork."""

    @pytest.mark.parametrize("op,gas", [
        (OpCode.STOP, 0),
        (OpCode.ADD, 3),
        (OpCode.CALLDATALOAD, 3),
        (OpCode.MUL, 5),
        (OpCode.SIGNEXTEND, 5),
        (OpCode.ADDMOD, 8),
        (OpCode.JUMP, 8),
        (OpCode.JUMPI, 10),
        (OpCode.ADDRESS, 2),
        (OpCode.GAS, 2),
        (OpCode.BLOCKHASH, 20),
        (OpCode.JUMPDEST, 1),
    ])
    def test_fixed_cost(self, schedule, op, gas):
        for height in (0, EIP150, CONSTANTINOPLE + 1):
            cost = schedule.resolve(op, height)
            assert cost.gas == gas
            assert cost.kind is CostKind.STATIC

    def test_stop_is_a_legitimate_zero(self, schedule):
        cost = schedule.resolve(OpCode.STOP, 5_000_000)
        assert cost.staticizable
        assert not cost.priced


class TestRanges:
    """Push, dup and swap families resolve by identifier range."""

    @pytest.mark.parametrize("op", PUSH_OPS + DUP_OPS + SWAP_OPS)
    def test_range_member_costs_fastest_step(self, schedule, op):
        assert schedule.cost(op, 4_000_000) == 3

    def test_width_does_not_matter(self, schedule):
        costs = {schedule.cost(op, 1) for op in PUSH_OPS}
        assert costs == {3}


class TestVersionedTable:
    """SLOAD and the external-state operations follow the fork table."""

    @pytest.mark.parametrize("height,gas", [
        (0, 50),
        (EIP150 - 1, 50),
        (EIP150, 200),
        (EIP150 + 1, 200),
        (EIP158, 200),
        (CONSTANTINOPLE, 200),
    ])
    def test_sload(self, schedule, height, gas):
        assert schedule.cost(OpCode.SLOAD, height) == gas

    @pytest.mark.parametrize("op,before,after", [
        (OpCode.BALANCE, 20, 400),
        (OpCode.EXTCODESIZE, 20, 700),
        (OpCode.EXTCODECOPY, 20, 700),
        (OpCode.CALL, 40, 700),
    ])
    def test_eip150_repricing(self, schedule, op, before, after):
        assert schedule.cost(op, EIP150 - 1) == before
        assert schedule.cost(op, EIP150) == after

    def test_version_at_boundaries(self, schedule):
        assert schedule.version_at(0).name == "homestead"
        assert schedule.version_at(EIP150 - 1).name == "homestead"
        assert schedule.version_at(EIP150).name == "eip150"
        assert schedule.version_at(EIP158 - 1).name == "eip150"
        assert schedule.version_at(EIP158).name == "eip158"
        assert schedule.version_at(CONSTANTINOPLE - 1).name == "eip158"
        assert schedule.version_at(CONSTANTINOPLE).name == "constantinople"

    def test_baseline_starts_at_genesis(self, schedule):
        assert "homestead_block" not in ForkConfig.model_fields
        first = schedule.versions[0]
        assert (first.activation, first.name) == (0, "homestead")

    def test_custom_fork_heights(self):
        schedule = FeeSchedule.mainnet(ForkConfig(
            eip150_block=10, eip158_block=20,
            byzantium_block=30, constantinople_block=40,
        ))
        assert schedule.cost(OpCode.SLOAD, 9) == 50
        assert schedule.cost(OpCode.SLOAD, 10) == 200
        assert schedule.cost(OpCode.SHL, 39) == 0
        assert schedule.cost(OpCode.SHL, 40) == 3

    def test_coinciding_forks_collapse(self):
        schedule = FeeSchedule.mainnet(ForkConfig(
            eip150_block=0, eip158_block=0,
            byzantium_block=0, constantinople_block=0,
        ))
        assert schedule.version_at(0).name == "constantinople"
        assert schedule.cost(OpCode.EXTCODEHASH, 0) == 400

    def test_explicit_versions(self):
        schedule = FeeSchedule([
            ScheduleVersion(100, "eip150", FEE_TABLE_EIP150),
            ScheduleVersion(0, "homestead", FEE_TABLE_HOMESTEAD),
        ])
        assert schedule.cost(OpCode.BALANCE, 99) == 20
        assert schedule.cost(OpCode.BALANCE, 100) == 400

    def test_versions_must_start_at_genesis(self):
        with pytest.raises(ValueError):
            FeeSchedule([ScheduleVersion(5, "eip150", FEE_TABLE_EIP150)])

    def test_duplicate_activations_rejected(self):
        with pytest.raises(ValueError):
            FeeSchedule([
                ScheduleVersion(0, "a", FEE_TABLE_HOMESTEAD),
                ScheduleVersion(0, "b", FEE_TABLE_EIP150),
            ])


class TestIntroducedOperations:
    """Operations that only exist from a given fork on."""

    @pytest.mark.parametrize("op", [OpCode.SHL, OpCode.SHR, OpCode.SAR])
    def test_shifts(self, schedule, op):
        before = schedule.resolve(op, CONSTANTINOPLE - 1)
        assert before.gas == 0
        assert before.kind is CostKind.INACTIVE
        after = schedule.resolve(op, CONSTANTINOPLE)
        assert after.gas == 3
        assert after.kind is CostKind.STATIC

    def test_extcodehash(self, schedule):
        assert schedule.resolve(OpCode.EXTCODEHASH, CONSTANTINOPLE - 1).kind is CostKind.INACTIVE
        assert schedule.cost(OpCode.EXTCODEHASH, CONSTANTINOPLE) == 400

    def test_returndatasize(self, schedule):
        assert schedule.cost(OpCode.RETURNDATASIZE, BYZANTIUM - 1) == 0
        assert schedule.cost(OpCode.RETURNDATASIZE, BYZANTIUM) == 2


class TestNonStatic:
    """Dynamic and undefined operations resolve to a flagged zero."""

    @pytest.mark.parametrize("op", [
        OpCode.SHA3, OpCode.EXP, OpCode.SSTORE, OpCode.MLOAD, OpCode.CALLDATACOPY,
        OpCode.CREATE, OpCode.DELEGATECALL, *LOG_OPS,
    ])
    def test_dynamic(self, schedule, op):
        cost = schedule.resolve(op, 5_000_000)
        assert cost.gas == 0
        assert cost.kind is CostKind.DYNAMIC
        assert not cost.staticizable
        assert schedule.cost(op, 5_000_000) == 0

    @pytest.mark.parametrize("op", [0x0C, 0x21, 0x46, 0xB0, 0xFE])
    def test_undefined(self, schedule, op):
        cost = schedule.resolve(op, 5_000_000)
        assert cost.kind is CostKind.UNDEFINED
        assert cost.gas == 0

    def test_out_of_range(self, schedule):
        with pytest.raises(ValueError):
            schedule.resolve(256, 0)

    def test_negative_height(self, schedule):
        with pytest.raises(ValueError):
            schedule.resolve(OpCode.ADD, -1)


def test_resolution_is_pure(schedule):
    first = [schedule.resolve(op, EIP150) for op in range(256)]
    schedule.resolve(OpCode.SLOAD, 0)
    assert first == [schedule.resolve(op, EIP150) for op in range(256)]
