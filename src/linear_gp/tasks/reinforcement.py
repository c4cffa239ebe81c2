from __future__ import annotations
from typing import TYPE_CHECKING, Any, Callable, NamedTuple, Protocol, runtime_checkable
import numpy as np

from linear_gp.utils.errors import ConfigurationError
from .base import Task

if TYPE_CHECKING:
    from linear_gp.programs import Program


class StepResult(NamedTuple):
    state: Any
    reward: float
    terminal: bool


@runtime_checkable
class Environment(Protocol):
    """Episodic environment driven one action at a time."""

    def reset(self, seed: int) -> Any:
        ...

    def step(self, action: int) -> StepResult:
        ...

    def close(self) -> None:
        ...


class ReinforcementLearningTask(Task):
    """Control task: a program acts as a policy over several episodes.

    ``make_environment`` builds a fresh environment for every evaluation, so
    evaluations never share simulator state. Run ``i`` resets the environment
    with ``seed + i``. At each step the program runs on the current state and
    the action is the lowest index among the tied maximum action registers.
    An episode ends on a terminal step or after ``max_episode_length`` steps.
    Fitness is the upper median of the per-run reward sums.

    With ``workers > 1`` the factory must be picklable (a module-level
    function or class).
    """

    def __init__(
        self,
        make_environment: Callable[[], Environment],
        input_count: int,
        action_count: int,
        n_runs: int = 5,
        max_episode_length: int = 200,
        seed: int = 0,
    ) -> None:
        if input_count < 1:
            raise ConfigurationError(f"input_count must be >= 1, got {input_count}")
        if action_count < 1:
            raise ConfigurationError(f"action_count must be >= 1, got {action_count}")
        if n_runs < 1:
            raise ConfigurationError(f"n_runs must be >= 1, got {n_runs}")
        if max_episode_length < 1:
            raise ConfigurationError(f"max_episode_length must be >= 1, got {max_episode_length}")
        self.make_environment = make_environment
        self._input_count = int(input_count)
        self._action_count = int(action_count)
        self.n_runs = int(n_runs)
        self.max_episode_length = int(max_episode_length)
        self.seed = int(seed)

    @property
    def input_count(self) -> int:
        return self._input_count

    @property
    def action_count(self) -> int:
        return self._action_count

    def choose_action(self, program: "Program", state: Any) -> int:
        return program.execute(self.seed_registers(state)).argmax(self._action_count)[0]

    def run_episode(self, program: "Program", env: Environment, seed: int) -> float:
        state = env.reset(seed)
        score = 0.0
        for _ in range(self.max_episode_length):
            result = env.step(self.choose_action(program, state))
            score += float(result.reward)
            if result.terminal:
                break
            state = result.state
        return score

    def evaluate(self, program: "Program") -> float:
        env = self.make_environment()
        try:
            scores = [self.run_episode(program, env, self.seed + run) for run in range(self.n_runs)]
        finally:
            env.close()
        return float(np.sort(scores)[self.n_runs // 2])
