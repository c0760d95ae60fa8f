"""EVM instruction set and the instruction groups used for charting."""

from __future__ import annotations

from enum import IntEnum

NUM_OPCODES = 256


class OpCode(IntEnum):
    # 0x00 arithmetic
    STOP = 0x00
    ADD = 0x01
    MUL = 0x02
    SUB = 0x03
    DIV = 0x04
    SDIV = 0x05
    MOD = 0x06
    SMOD = 0x07
    ADDMOD = 0x08
    MULMOD = 0x09
    EXP = 0x0A
    SIGNEXTEND = 0x0B

    # 0x10 comparison and bitwise
    LT = 0x10
    GT = 0x11
    SLT = 0x12
    SGT = 0x13
    EQ = 0x14
    ISZERO = 0x15
    AND = 0x16
    OR = 0x17
    XOR = 0x18
    NOT = 0x19
    BYTE = 0x1A
    SHL = 0x1B
    SHR = 0x1C
    SAR = 0x1D

    SHA3 = 0x20

    # 0x30 environment
    ADDRESS = 0x30
    BALANCE = 0x31
    ORIGIN = 0x32
    CALLER = 0x33
    CALLVALUE = 0x34
    CALLDATALOAD = 0x35
    CALLDATASIZE = 0x36
    CALLDATACOPY = 0x37
    CODESIZE = 0x38
    CODECOPY = 0x39
    GASPRICE = 0x3A
    EXTCODESIZE = 0x3B
    EXTCODECOPY = 0x3C
    RETURNDATASIZE = 0x3D
    RETURNDATACOPY = 0x3E
    EXTCODEHASH = 0x3F

    # 0x40 block
    BLOCKHASH = 0x40
    COINBASE = 0x41
    TIMESTAMP = 0x42
    NUMBER = 0x43
    DIFFICULTY = 0x44
    GASLIMIT = 0x45

    # 0x50 storage and execution
    POP = 0x50
    MLOAD = 0x51
    MSTORE = 0x52
    MSTORE8 = 0x53
    SLOAD = 0x54
    SSTORE = 0x55
    JUMP = 0x56
    JUMPI = 0x57
    PC = 0x58
    MSIZE = 0x59
    GAS = 0x5A
    JUMPDEST = 0x5B

    PUSH1 = 0x60
    PUSH2 = 0x61
    PUSH3 = 0x62
    PUSH4 = 0x63
    PUSH5 = 0x64
    PUSH6 = 0x65
    PUSH7 = 0x66
    PUSH8 = 0x67
    PUSH9 = 0x68
    PUSH10 = 0x69
    PUSH11 = 0x6A
    PUSH12 = 0x6B
    PUSH13 = 0x6C
    PUSH14 = 0x6D
    PUSH15 = 0x6E
    PUSH16 = 0x6F
    PUSH17 = 0x70
    PUSH18 = 0x71
    PUSH19 = 0x72
    PUSH20 = 0x73
    PUSH21 = 0x74
    PUSH22 = 0x75
    PUSH23 = 0x76
    PUSH24 = 0x77
    PUSH25 = 0x78
    PUSH26 = 0x79
    PUSH27 = 0x7A
    PUSH28 = 0x7B
    PUSH29 = 0x7C
    PUSH30 = 0x7D
    PUSH31 = 0x7E
    PUSH32 = 0x7F

    DUP1 = 0x80
    DUP2 = 0x81
    DUP3 = 0x82
    DUP4 = 0x83
    DUP5 = 0x84
    DUP6 = 0x85
    DUP7 = 0x86
    DUP8 = 0x87
    DUP9 = 0x88
    DUP10 = 0x89
    DUP11 = 0x8A
    DUP12 = 0x8B
    DUP13 = 0x8C
    DUP14 = 0x8D
    DUP15 = 0x8E
    DUP16 = 0x8F

    SWAP1 = 0x90
    SWAP2 = 0x91
    SWAP3 = 0x92
    SWAP4 = 0x93
    SWAP5 = 0x94
    SWAP6 = 0x95
    SWAP7 = 0x96
    SWAP8 = 0x97
    SWAP9 = 0x98
    SWAP10 = 0x99
    SWAP11 = 0x9A
    SWAP12 = 0x9B
    SWAP13 = 0x9C
    SWAP14 = 0x9D
    SWAP15 = 0x9E
    SWAP16 = 0x9F

    LOG0 = 0xA0
    LOG1 = 0xA1
    LOG2 = 0xA2
    LOG3 = 0xA3
    LOG4 = 0xA4

    # 0xf0 closures
    CREATE = 0xF0
    CALL = 0xF1
    CALLCODE = 0xF2
    RETURN = 0xF3
    DELEGATECALL = 0xF4
    CREATE2 = 0xF5
    STATICCALL = 0xFA
    REVERT = 0xFD
    SELFDESTRUCT = 0xFF


_DEFINED = frozenset(int(op) for op in OpCode)


def is_defined(op: int) -> bool:
    return op in _DEFINED


def check_opcode(op: int) -> int:
    """Validate an operation identifier, returning it as a plain int."""
    if not 0 <= op < NUM_OPCODES:
        raise ValueError(f"operation identifier out of range: {op}")
    return int(op)


def opcode_name(op: int) -> str:
    """Canonical display name, e.g. ``SLOAD`` or ``opcode 0x0c``."""
    check_opcode(op)
    if op in _DEFINED:
        return OpCode(op).name
    return f"opcode 0x{op:02x}"


def parse_opcode(value: str) -> int:
    """Parse a mnemonic (``sload``) or a numeric id (``0x54``, ``84``)."""
    text = value.strip()
    try:
        return OpCode[text.upper()]
    except KeyError:
        pass
    try:
        return check_opcode(int(text, 0))
    except ValueError:
        raise ValueError(f"unknown operation: {value!r}") from None


def _span(first: OpCode, last: OpCode) -> tuple[OpCode, ...]:
    return tuple(OpCode(i) for i in range(first, last + 1))


PUSH_OPS = _span(OpCode.PUSH1, OpCode.PUSH32)
DUP_OPS = _span(OpCode.DUP1, OpCode.DUP16)
SWAP_OPS = _span(OpCode.SWAP1, OpCode.SWAP16)
LOG_OPS = _span(OpCode.LOG0, OpCode.LOG4)

ALL_OPS: tuple[int, ...] = tuple(range(NUM_OPCODES))

ARITHMETIC_OPS = (
    OpCode.ADD, OpCode.MUL, OpCode.SUB, OpCode.DIV, OpCode.SDIV, OpCode.MOD,
    OpCode.SMOD, OpCode.ADDMOD, OpCode.MULMOD, OpCode.EXP, OpCode.SIGNEXTEND,
)
COMPARISON_OPS = (
    OpCode.LT, OpCode.GT, OpCode.SLT, OpCode.SGT, OpCode.EQ, OpCode.ISZERO,
    OpCode.AND, OpCode.OR, OpCode.XOR, OpCode.NOT, OpCode.BYTE,
)
CONTEXT_OPS_1 = (
    OpCode.ADDRESS, OpCode.BALANCE, OpCode.ORIGIN, OpCode.CALLER,
    OpCode.CALLVALUE, OpCode.CALLDATASIZE,
)
CONTEXT_OPS_2 = (
    OpCode.CODESIZE, OpCode.GASPRICE, OpCode.EXTCODESIZE,
    OpCode.RETURNDATASIZE, OpCode.EXTCODEHASH,
)
BLOCK_OPS = (
    OpCode.COINBASE, OpCode.TIMESTAMP, OpCode.NUMBER, OpCode.DIFFICULTY,
    OpCode.GASLIMIT,
)
STORAGE_OPS = (
    OpCode.POP, OpCode.MLOAD, OpCode.SLOAD, OpCode.PC, OpCode.MSIZE, OpCode.GAS,
)
STACK_OPS = PUSH_OPS + DUP_OPS + SWAP_OPS

GROUPS: dict[str, tuple[int, ...]] = {
    "all": ALL_OPS,
    "arithmetic": ARITHMETIC_OPS,
    "comparison": COMPARISON_OPS,
    "context1": CONTEXT_OPS_1,
    "context2": CONTEXT_OPS_2,
    "block": BLOCK_OPS,
    "storage": STORAGE_OPS,
    "stack": STACK_OPS,
    "logging": LOG_OPS,
}
