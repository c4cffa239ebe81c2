# config/model.py
"""
Dataclass-based "single source of truth" for every evolution knob.

* ProgramParams    - shape of the programs (instruction limit, registers,
                     operand sampling, branch policy)
* HyperParameters  - everything the generation loop needs
"""

import dataclasses
import math
from dataclasses import dataclass, field
from typing import Optional, Tuple

from linear_gp.utils.errors import ConfigurationError

BRANCH_POLICIES = ("single", "nested")
CROSSOVER_KINDS = ("one_point", "two_point")


def _check_fraction(name: str, value: float) -> None:
    if not isinstance(value, (int, float)) or not math.isfinite(value) or not 0.0 <= value <= 1.0:
        raise ConfigurationError(f"{name} must be within [0, 1], got {value!r}")


def _check_min(name: str, value, minimum: int) -> None:
    if not isinstance(value, int) or isinstance(value, bool) or value < minimum:
        raise ConfigurationError(f"{name} must be an integer >= {minimum}, got {value!r}")


# ─────────────────────────────────────────────────────────────────────────────
#  program shape
# ─────────────────────────────────────────────────────────────────────────────
@dataclass(frozen=True)
class ProgramParams:
    max_instructions: int = 32
    # Working registers; the first ``action_count`` of them are the action
    # registers. ``None`` resolves to ``action_count + 1``.
    register_count: Optional[int] = None
    # ``None`` means "take it from the task" (see ``bind``).
    input_count: Optional[int] = None
    action_count: Optional[int] = None
    # Allowed opcodes; ``None`` allows every registered opcode.
    opcodes: Optional[Tuple[str, ...]] = None

    # operand sampling
    constant_probability: float = 0.1
    external_probability: float = 0.5
    constant_range: float = 10.0

    # "single": a false branch skips one instruction.
    # "nested": skipping a branch also skips the instruction it guards.
    branch_policy: str = "single"

    @property
    def is_bound(self) -> bool:
        return None not in (self.register_count, self.input_count, self.action_count)

    def bind(self, task) -> "ProgramParams":
        """Return a copy whose register layout is resolved against ``task``.

        Explicit counts must agree with the task; missing ones are filled in.
        """
        input_count = self.input_count if self.input_count is not None else task.input_count
        action_count = self.action_count if self.action_count is not None else task.action_count
        if input_count != task.input_count:
            raise ConfigurationError(
                f"input_count={input_count} does not match task input_count={task.input_count}"
            )
        if action_count != task.action_count:
            raise ConfigurationError(
                f"action_count={action_count} does not match task action_count={task.action_count}"
            )
        register_count = self.register_count if self.register_count is not None else action_count + 1
        bound = dataclasses.replace(
            self,
            register_count=register_count,
            input_count=input_count,
            action_count=action_count,
        )
        bound.validate()
        return bound

    def validate(self) -> None:
        _check_min("max_instructions", self.max_instructions, 1)
        for name in ("register_count", "input_count", "action_count"):
            value = getattr(self, name)
            if value is not None:
                _check_min(name, value, 1)
        if (
            self.register_count is not None
            and self.action_count is not None
            and self.register_count < self.action_count
        ):
            raise ConfigurationError(
                f"register_count={self.register_count} cannot hold {self.action_count} action registers"
            )
        _check_fraction("constant_probability", self.constant_probability)
        _check_fraction("external_probability", self.external_probability)
        if not math.isfinite(self.constant_range) or self.constant_range <= 0:
            raise ConfigurationError(f"constant_range must be > 0, got {self.constant_range!r}")
        if self.branch_policy not in BRANCH_POLICIES:
            raise ConfigurationError(
                f"branch_policy must be one of {BRANCH_POLICIES}, got {self.branch_policy!r}"
            )
        if self.opcodes is not None:
            # Deferred import: the registry is populated by the operators module.
            from linear_gp.programs import OP_REGISTRY

            if not self.opcodes:
                raise ConfigurationError("opcodes must name at least one opcode")
            unknown = [name for name in self.opcodes if name not in OP_REGISTRY]
            if unknown:
                raise ConfigurationError(f"unknown opcodes: {unknown}")


# ─────────────────────────────────────────────────────────────────────────────
#  evolution search
# ─────────────────────────────────────────────────────────────────────────────
@dataclass
class HyperParameters:
    population_size: int = 100
    max_generations: int = 100
    # fraction of the ranked population kept as the breeding pool
    gap: float = 0.5
    # fractions of the offspring slots produced by mutation / crossover
    n_mutations: float = 0.5
    n_crossovers: float = 0.5
    crossover_kind: str = "two_point"
    max_mutation_edits: int = 1

    # re-score programs whose instructions did not change (stochastic tasks)
    reevaluate: bool = False

    seed: int = 42
    # multiprocessing workers for fitness evaluation (1 = sequential)
    workers: int = 1
    quiet: bool = False

    program: ProgramParams = field(default_factory=ProgramParams)

    def validate(self) -> None:
        """Raise :class:`ConfigurationError` for any invalid setting."""
        _check_min("population_size", self.population_size, 2)
        _check_min("max_generations", self.max_generations, 0)
        _check_fraction("gap", self.gap)
        if self.gap <= 0.0:
            raise ConfigurationError("gap must be > 0 so at least one program survives")
        _check_fraction("n_mutations", self.n_mutations)
        _check_fraction("n_crossovers", self.n_crossovers)
        if self.crossover_kind not in CROSSOVER_KINDS:
            raise ConfigurationError(
                f"crossover_kind must be one of {CROSSOVER_KINDS}, got {self.crossover_kind!r}"
            )
        _check_min("max_mutation_edits", self.max_mutation_edits, 1)
        _check_min("workers", self.workers, 1)
        if not isinstance(self.program, ProgramParams):
            raise ConfigurationError("program must be a ProgramParams instance")
        self.program.validate()
