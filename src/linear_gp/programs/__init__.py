"""
Linear register-machine primitives.

This package groups the opcode registry, instructions, register sets and the
Program container together with its random generation and variation logic.
"""

from .types import (
    EPS,
    OP_KINDS,
    OP_REGISTRY,
    OPERAND_MODES,
    SAFE_MAX,
    OpKind,
    OperandMode,
    OpSpec,
)
from . import operators
from .instruction import Instruction
from .registers import Registers
from .program import Program

__all__ = [
    "EPS",
    "OP_KINDS",
    "OP_REGISTRY",
    "OPERAND_MODES",
    "SAFE_MAX",
    "OpKind",
    "OperandMode",
    "OpSpec",
    "operators",
    "Instruction",
    "Registers",
    "Program",
]
