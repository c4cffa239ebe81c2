from __future__ import annotations
from dataclasses import dataclass
from typing import Callable, Dict, Literal

# ---------------------------------------------------------------------------
# 1 -- Instruction kinds, operand modes (and core constants)
# ---------------------------------------------------------------------------

OpKind = Literal["arithmetic", "comparison", "branch", "action"]
OperandMode = Literal["internal", "external", "constant"]

OP_KINDS: tuple[OpKind, ...] = ("arithmetic", "comparison", "branch", "action")
OPERAND_MODES: tuple[OperandMode, ...] = ("internal", "external", "constant")

SAFE_MAX = 1e6  # saturation bound for every register write
EPS = 1e-9      # unified small epsilon for division and equality guards

@dataclass(frozen=True)
class OpSpec:
    func: Callable[[float, float], float | bool]
    kind: OpKind

    @property
    def is_branch(self) -> bool:
        return self.kind == "branch"

OP_REGISTRY: Dict[str, OpSpec] = {}
