from __future__ import annotations
from typing import TYPE_CHECKING, List, Optional, Type
import numpy as np

from .instruction import Instruction
from .types import OP_REGISTRY, OpKind

if TYPE_CHECKING:
    from linear_gp.config.model import ProgramParams
    from .program import Program


def allowed_opcodes(params: "ProgramParams", kind: Optional[OpKind] = None) -> List[str]:
    """Opcodes the generator may emit, optionally restricted to one kind."""
    names = list(params.opcodes) if params.opcodes is not None else list(OP_REGISTRY)
    if kind is not None:
        names = [n for n in names if OP_REGISTRY[n].kind == kind]
    return names


def random_operand(params: "ProgramParams", rng: np.random.Generator) -> dict:
    """Draw operand fields (``src``, ``mode``, ``constant``) for one instruction."""
    if rng.random() < params.constant_probability:
        value = float(rng.uniform(-params.constant_range, params.constant_range))
        return {"src": 0, "mode": "constant", "constant": value}
    if rng.random() < params.external_probability:
        return {"src": int(rng.integers(params.input_count)), "mode": "external", "constant": None}
    return {"src": int(rng.integers(params.register_count)), "mode": "internal", "constant": None}


def random_destination(params: "ProgramParams", kind: str, rng: np.random.Generator) -> int:
    # action instructions may only write the task's action registers
    limit = params.action_count if kind == "action" else params.register_count
    return int(rng.integers(limit))


def random_instruction(
    params: "ProgramParams",
    rng: np.random.Generator,
    opcode: Optional[str] = None,
) -> Instruction:
    """Build one valid instruction; ``opcode`` pins the operation if given."""
    if opcode is None:
        names = allowed_opcodes(params)
        opcode = names[int(rng.integers(len(names)))]
    kind = OP_REGISTRY[opcode].kind
    dst = random_destination(params, kind, rng)
    return Instruction(opcode, dst, **random_operand(params, rng))


def generate_random_program_logic(
    cls: Type["Program"],
    params: "ProgramParams",
    rng: Optional[np.random.Generator] = None,
) -> "Program":
    """
    Build a random but valid Program with 1..max_instructions instructions.
    This is the core logic for Program.random_program.
    """
    rng = rng or np.random.default_rng()
    n_instructions = int(rng.integers(1, params.max_instructions + 1))
    instructions = tuple(random_instruction(params, rng) for _ in range(n_instructions))
    return cls(instructions, params)
