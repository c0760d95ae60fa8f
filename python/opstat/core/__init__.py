"""Core types, configuration and errors for opstat."""

from opstat.core.types import (
    Counter,
    Snapshot,
    Delta,
    GasCost,
    CostKind,
)
from opstat.core.opcodes import OpCode, opcode_name
from opstat.core.config import OpstatConfig
from opstat.core.errors import OpstatError, DecodeError, MissingHeightError, ConfigError

__all__ = [
    "Counter",
    "Snapshot",
    "Delta",
    "GasCost",
    "CostKind",
    "OpCode",
    "opcode_name",
    "OpstatConfig",
    "OpstatError",
    "DecodeError",
    "MissingHeightError",
    "ConfigError",
]
