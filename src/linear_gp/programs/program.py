from __future__ import annotations
from dataclasses import dataclass, field
import hashlib
import itertools
import json
import textwrap
from typing import TYPE_CHECKING, Optional, Sequence, Tuple
import numpy as np

from linear_gp.utils.errors import InvariantViolation
from .types import OP_REGISTRY
from .instruction import Instruction
from .registers import Registers

if TYPE_CHECKING:
    from linear_gp.config.model import ProgramParams

_PROGRAM_IDS = itertools.count()


def _next_program_id() -> int:
    return next(_PROGRAM_IDS)


@dataclass(eq=False)
class Program:
    """An ordered instruction sequence plus the registers it runs on.

    ``fitness`` stays ``None`` until a task scores the program. Variation
    never edits a program in place: :meth:`mutate` and :meth:`crossover`
    build new programs whose fitness is unset.
    """

    instructions: Tuple[Instruction, ...]
    params: "ProgramParams"
    fitness: Optional[float] = None
    program_id: int = field(default_factory=_next_program_id)
    registers: Registers = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self.instructions = tuple(self.instructions)
        if not self.params.is_bound:
            raise InvariantViolation(
                f"program {self.program_id}: parameters are not bound to a task"
            )
        self.validate()
        self.registers = Registers(self.params.register_count, self.params.input_count)

    def validate(self) -> None:
        """Check every construction invariant, failing fast on the first breach."""
        p = self.params
        n = len(self.instructions)
        if not 1 <= n <= p.max_instructions:
            raise InvariantViolation(
                f"program {self.program_id}: {n} instructions outside [1, {p.max_instructions}]"
            )
        allowed = set(p.opcodes) if p.opcodes is not None else None
        for idx, ins in enumerate(self.instructions):
            where = f"program {self.program_id}, instruction {idx} ({ins!r})"
            spec = OP_REGISTRY.get(ins.opcode)
            if spec is None or (allowed is not None and ins.opcode not in allowed):
                raise InvariantViolation(f"{where}: opcode not allowed")
            dst_limit = p.action_count if spec.kind == "action" else p.register_count
            if not 0 <= ins.dst < dst_limit:
                raise InvariantViolation(f"{where}: destination outside [0, {dst_limit})")
            if ins.mode == "internal":
                src_limit = p.register_count
            elif ins.mode == "external":
                src_limit = p.input_count
            elif ins.mode == "constant":
                if ins.constant is None:
                    raise InvariantViolation(f"{where}: constant operand missing")
                continue
            else:
                raise InvariantViolation(f"{where}: unknown operand mode")
            if not 0 <= ins.src < src_limit:
                raise InvariantViolation(f"{where}: source outside [0, {src_limit})")

    @classmethod
    def random_program(
        cls,
        params: "ProgramParams",
        rng: Optional[np.random.Generator] = None,
    ) -> "Program":
        """Create a random, valid program (see :func:`generate_random_program_logic`)."""
        from .logic_generation import generate_random_program_logic

        return generate_random_program_logic(cls, params, rng)

    def copy(self) -> "Program":
        """Return a clone sharing the (immutable) instructions and the fitness."""
        return Program(self.instructions, self.params, fitness=self.fitness)

    def mutate(self, rng: Optional[np.random.Generator] = None, max_edits: int = 1) -> "Program":
        """Return a mutated copy of this program."""
        from .logic_variation import mutate_program_logic

        return mutate_program_logic(self, rng, max_edits)

    def crossover(
        self,
        other: "Program",
        rng: Optional[np.random.Generator] = None,
        kind: str = "two_point",
    ) -> Tuple["Program", "Program"]:
        """Create two offspring from this program and ``other``."""
        from .logic_variation import crossover_program_logic

        return crossover_program_logic(self, other, rng, kind)

    def execute(self, inputs: Optional[Sequence[float]] = None) -> Registers:
        """Run every instruction once and return the final registers.

        Registers are zeroed and the input bank is seeded from ``inputs``
        before the first instruction. A false branch skips the next
        instruction; under the ``"nested"`` policy skipping a branch also
        skips the instruction it guards.
        """
        regs = self.registers
        regs.reset(inputs)
        values, in_bank = regs.values, regs.inputs
        nested = self.params.branch_policy == "nested"

        skip = 0
        for ins in self.instructions:
            if skip:
                skip -= 1
                if nested and ins.is_branch:
                    skip += 1
                continue
            if not ins.apply(values, in_bank):
                skip = 1
        return regs

    @property
    def size(self) -> int:
        return len(self.instructions)

    def to_string(self, max_len: int = 1000) -> str:
        """Return a short text representation of the program."""
        full_txt = "; ".join(map(str, self.instructions))
        return textwrap.shorten(full_txt, width=max_len, placeholder="...")

    @property
    def fingerprint(self) -> str:
        """Stable hash representing the program structure."""
        serial = [(i.opcode, i.dst, i.src, i.mode, i.constant) for i in self.instructions]
        return hashlib.sha1(
            json.dumps(serial, separators=(",", ":")).encode()
        ).hexdigest()
