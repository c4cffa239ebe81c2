from __future__ import annotations
from dataclasses import dataclass
from typing import Optional
import numpy as np

from .types import OP_REGISTRY, OpSpec, OperandMode
from .operators import clean_num

# ---------------------------------------------------------------------------
# 3 - Instruction container
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class Instruction:
    """Single register operation executed by :class:`Program`.

    ``dst`` is both the first operand and the written register; the second
    operand is ``registers[src]``, ``inputs[src]`` or ``constant`` depending
    on ``mode``.
    """

    opcode: str
    dst: int
    src: int = 0
    mode: OperandMode = "internal"
    constant: Optional[float] = None

    @property
    def spec(self) -> OpSpec:
        return OP_REGISTRY[self.opcode]

    @property
    def kind(self) -> str:
        return self.spec.kind

    @property
    def is_branch(self) -> bool:
        return self.spec.is_branch

    def operand(self, values: np.ndarray, inputs: np.ndarray) -> float:
        if self.mode == "internal":
            return values[self.src]
        if self.mode == "external":
            return inputs[self.src]
        return self.constant  # type: ignore[return-value]

    def apply(self, values: np.ndarray, inputs: np.ndarray) -> bool:
        """Execute against ``values`` in place.

        Returns the branch condition for branch instructions and ``True`` for
        everything else.
        """
        spec = self.spec
        result = spec.func(values[self.dst], self.operand(values, inputs))
        if spec.is_branch:
            return bool(result)
        values[self.dst] = clean_num(result)
        return True

    def operand_str(self) -> str:
        if self.mode == "internal":
            return f"r[{self.src}]"
        if self.mode == "external":
            return f"x[{self.src}]"
        return f"{self.constant:g}"

    def __str__(self):
        if self.is_branch:
            return f"{self.opcode}(r[{self.dst}], {self.operand_str()})"
        return f"r[{self.dst}] = {self.opcode}(r[{self.dst}], {self.operand_str()})"
