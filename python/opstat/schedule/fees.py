"""Fork-aware static gas cost resolution.

Costs follow the go-ethereum fee schedule of the homestead through
constantinople era. Operations fall into four buckets:

* fixed step-class costs, independent of the active fork;
* push/dup/swap families, resolved by identifier range;
* storage and external-state operations, resolved through an ordered table
  of ``(activation height, version, FeeTable)`` entries;
* operations whose cost depends on runtime context (memory expansion, data
  size, call target). These resolve to a zero sentinel of kind
  ``CostKind.DYNAMIC`` so callers can tell them apart from genuinely free
  operations.
"""

from __future__ import annotations

from bisect import bisect_right
from dataclasses import dataclass
from typing import Sequence

from opstat.core.config import ForkConfig
from opstat.core.opcodes import OpCode, check_opcode, is_defined
from opstat.core.types import CostKind, GasCost

GAS_QUICK_STEP = 2
GAS_FASTEST_STEP = 3
GAS_FAST_STEP = 5
GAS_MID_STEP = 8
GAS_SLOW_STEP = 10
GAS_EXT_STEP = 20
JUMPDEST_GAS = 1

_FIXED: dict[int, int] = {OpCode.STOP: 0, OpCode.JUMPDEST: JUMPDEST_GAS}
for _op in (
    OpCode.ADD, OpCode.SUB, OpCode.LT, OpCode.GT, OpCode.SLT, OpCode.SGT,
    OpCode.EQ, OpCode.ISZERO, OpCode.AND, OpCode.OR, OpCode.XOR, OpCode.NOT,
    OpCode.BYTE, OpCode.CALLDATALOAD,
):
    _FIXED[_op] = GAS_FASTEST_STEP
for _op in (
    OpCode.MUL, OpCode.DIV, OpCode.SDIV, OpCode.MOD, OpCode.SMOD,
    OpCode.SIGNEXTEND,
):
    _FIXED[_op] = GAS_FAST_STEP
for _op in (OpCode.ADDMOD, OpCode.MULMOD, OpCode.JUMP):
    _FIXED[_op] = GAS_MID_STEP
for _op in (
    OpCode.ADDRESS, OpCode.ORIGIN, OpCode.CALLER, OpCode.CALLVALUE,
    OpCode.CALLDATASIZE, OpCode.CODESIZE, OpCode.GASPRICE, OpCode.COINBASE,
    OpCode.TIMESTAMP, OpCode.NUMBER, OpCode.DIFFICULTY, OpCode.GASLIMIT,
    OpCode.POP, OpCode.PC, OpCode.MSIZE, OpCode.GAS,
):
    _FIXED[_op] = GAS_QUICK_STEP
_FIXED[OpCode.BLOCKHASH] = GAS_EXT_STEP
_FIXED[OpCode.JUMPI] = GAS_SLOW_STEP
del _op

# Identifier ranges resolved to a single class cost.
_RANGES: tuple[tuple[int, int, int], ...] = (
    (OpCode.PUSH1, OpCode.PUSH32, GAS_FASTEST_STEP),
    (OpCode.DUP1, OpCode.DUP16, GAS_FASTEST_STEP),
    (OpCode.SWAP1, OpCode.SWAP16, GAS_FASTEST_STEP),
)

VERSIONED_OPS = frozenset({
    OpCode.SLOAD, OpCode.EXTCODESIZE, OpCode.EXTCODECOPY, OpCode.BALANCE,
    OpCode.EXTCODEHASH, OpCode.CALL,
})

DYNAMIC_OPS = frozenset({
    OpCode.EXP, OpCode.SHA3, OpCode.CALLDATACOPY, OpCode.CODECOPY,
    OpCode.RETURNDATACOPY, OpCode.MLOAD, OpCode.MSTORE, OpCode.MSTORE8,
    OpCode.SSTORE, OpCode.LOG0, OpCode.LOG1, OpCode.LOG2, OpCode.LOG3,
    OpCode.LOG4, OpCode.CREATE, OpCode.CREATE2, OpCode.CALLCODE,
    OpCode.RETURN, OpCode.DELEGATECALL, OpCode.STATICCALL, OpCode.REVERT,
    OpCode.SELFDESTRUCT,
})

SHIFT_OPS = frozenset({OpCode.SHL, OpCode.SHR, OpCode.SAR})


@dataclass(frozen=True, slots=True)
class FeeTable:
    """Costs of the operations repriced across forks."""

    sload: int
    extcode_size: int
    extcode_copy: int
    balance: int
    extcode_hash: int
    calls: int

    def lookup(self, op: int) -> int:
        if op == OpCode.SLOAD:
            return self.sload
        if op == OpCode.EXTCODESIZE:
            return self.extcode_size
        if op == OpCode.EXTCODECOPY:
            return self.extcode_copy
        if op == OpCode.BALANCE:
            return self.balance
        if op == OpCode.EXTCODEHASH:
            return self.extcode_hash
        if op == OpCode.CALL:
            return self.calls
        raise KeyError(op)


FEE_TABLE_HOMESTEAD = FeeTable(
    sload=50, extcode_size=20, extcode_copy=20, balance=20, extcode_hash=0, calls=40,
)
FEE_TABLE_EIP150 = FeeTable(
    sload=200, extcode_size=700, extcode_copy=700, balance=400, extcode_hash=0, calls=700,
)
# EIP158 only changes the EXP byte cost, which is dynamic here.
FEE_TABLE_EIP158 = FEE_TABLE_EIP150
FEE_TABLE_CONSTANTINOPLE = FeeTable(
    sload=200, extcode_size=700, extcode_copy=700, balance=400, extcode_hash=400, calls=700,
)


@dataclass(frozen=True, slots=True)
class ScheduleVersion:
    activation: int
    name: str
    table: FeeTable


class FeeSchedule:
    """Resolves the gas cost of an operation at a block height."""

    def __init__(
        self,
        versions: Sequence[ScheduleVersion],
        introductions: dict[int, tuple[int, int]] | None = None,
    ) -> None:
        if not versions:
            raise ValueError("fee schedule needs at least one version")
        ordered = sorted(versions, key=lambda v: v.activation)
        if ordered[0].activation != 0:
            raise ValueError("first fee schedule version must activate at block 0")
        if len({v.activation for v in ordered}) != len(ordered):
            raise ValueError("duplicate fee schedule activation heights")
        self.versions: tuple[ScheduleVersion, ...] = tuple(ordered)
        self._activations = [v.activation for v in ordered]
        # op -> (activation height, cost once active)
        self.introductions: dict[int, tuple[int, int]] = dict(introductions or {})

    @classmethod
    def mainnet(cls, forks: ForkConfig | None = None) -> FeeSchedule:
        forks = forks or ForkConfig()
        # Forks sharing a height collapse into the latest of them.
        by_height: dict[int, ScheduleVersion] = {}
        for activation, name, table in (
            (0, "homestead", FEE_TABLE_HOMESTEAD),
            (forks.eip150_block, "eip150", FEE_TABLE_EIP150),
            (forks.eip158_block, "eip158", FEE_TABLE_EIP158),
            (forks.constantinople_block, "constantinople", FEE_TABLE_CONSTANTINOPLE),
        ):
            by_height[activation] = ScheduleVersion(activation, name, table)
        versions = list(by_height.values())
        introductions = {
            OpCode.RETURNDATASIZE: (forks.byzantium_block, GAS_QUICK_STEP),
            OpCode.SHL: (forks.constantinople_block, GAS_FASTEST_STEP),
            OpCode.SHR: (forks.constantinople_block, GAS_FASTEST_STEP),
            OpCode.SAR: (forks.constantinople_block, GAS_FASTEST_STEP),
            OpCode.EXTCODEHASH: (forks.constantinople_block, FEE_TABLE_CONSTANTINOPLE.extcode_hash),
        }
        return cls(versions, introductions)

    def version_at(self, block_number: int) -> ScheduleVersion:
        if block_number < 0:
            raise ValueError(f"negative block number: {block_number}")
        return self.versions[bisect_right(self._activations, block_number) - 1]

    def resolve(self, op: int, block_number: int) -> GasCost:
        op = check_opcode(op)
        if block_number < 0:
            raise ValueError(f"negative block number: {block_number}")

        if op in _FIXED:
            return GasCost(_FIXED[op], CostKind.STATIC)
        for first, last, gas in _RANGES:
            if first <= op <= last:
                return GasCost(gas, CostKind.STATIC)

        if op in self.introductions:
            activation, gas = self.introductions[op]
            if block_number < activation:
                return GasCost(0, CostKind.INACTIVE)
            if op not in VERSIONED_OPS:
                return GasCost(gas, CostKind.STATIC)

        if op in VERSIONED_OPS:
            return GasCost(self.version_at(block_number).table.lookup(op), CostKind.STATIC)
        if op in DYNAMIC_OPS:
            return GasCost(0, CostKind.DYNAMIC)
        if not is_defined(op):
            return GasCost(0, CostKind.UNDEFINED)
        # Defined but without a known static price (shift ops with no
        # introduction entry in a custom schedule, for instance).
        return GasCost(0, CostKind.DYNAMIC)

    def cost(self, op: int, block_number: int) -> int:
        """Gas units in effect; 0 for dynamic, undefined or inactive ops."""
        return self.resolve(op, block_number).gas
