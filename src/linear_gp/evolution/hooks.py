"""Generation observers.

Every observer method receives the current :class:`Population` and returns
``None``, ``True`` or :attr:`HookSignal.CONTINUE` to carry on,
:attr:`HookSignal.STOP` to end the run after the current generation, or
``False`` to report a failure (raised as :class:`HookError`).
"""

from __future__ import annotations
import enum
import logging
from typing import TYPE_CHECKING, Callable, List, Optional, Sequence

import pandas as pd

from linear_gp.utils.errors import HookError
from .diagnostics import GenerationSummary, summarize

if TYPE_CHECKING:
    from .population import Population

logger = logging.getLogger(__name__)


class HookSignal(enum.Enum):
    CONTINUE = "continue"
    STOP = "stop"


class GenerationObserver:
    """Base observer; override only the events you need."""

    def on_initialized(self, population: "Population"):
        return None

    def on_evaluated(self, population: "Population"):
        return None

    def on_ranked(self, population: "Population"):
        return None

    def on_selected(self, population: "Population"):
        return None

    def on_generation_end(self, population: "Population"):
        return None


Callback = Callable[["Population"], object]


class CallbackObserver(GenerationObserver):
    """Wrap plain callables as the after-evaluate / after-rank / after-generation hooks."""

    def __init__(
        self,
        after_evaluate: Optional[Callback] = None,
        after_rank: Optional[Callback] = None,
        after_generation: Optional[Callback] = None,
    ) -> None:
        self.after_evaluate = after_evaluate
        self.after_rank = after_rank
        self.after_generation = after_generation

    def on_evaluated(self, population):
        return self.after_evaluate(population) if self.after_evaluate else None

    def on_ranked(self, population):
        return self.after_rank(population) if self.after_rank else None

    def on_generation_end(self, population):
        return self.after_generation(population) if self.after_generation else None


class HistoryObserver(GenerationObserver):
    """Collect a :class:`GenerationSummary` for every ranked generation."""

    def __init__(self) -> None:
        self.history: List[GenerationSummary] = []

    def on_ranked(self, population):
        self.history.append(summarize(population))

    def best_fitness(self) -> List[float]:
        return [s.best for s in self.history]

    def to_frame(self) -> pd.DataFrame:
        """History as a DataFrame indexed by generation."""
        columns = list(GenerationSummary.__dataclass_fields__)
        frame = pd.DataFrame([s.as_dict() for s in self.history], columns=columns)
        return frame.set_index("generation")


class LoggingObserver(GenerationObserver):
    """Log best/median fitness of each ranked generation."""

    def __init__(self, level: int = logging.INFO, show_program: bool = False) -> None:
        self.level = level
        self.show_program = show_program

    def on_ranked(self, population):
        s = summarize(population)
        logger.log(
            self.level,
            "Gen %d | best %.6g | median %.6g | worst %.6g | best length %s",
            s.generation, s.best, s.median, s.worst, s.best_length,
        )
        if self.show_program and s.best_program:
            logger.log(self.level, "Gen %d | best program: %s", s.generation, s.best_program)


class TargetFitnessObserver(GenerationObserver):
    """Stop the run once the best fitness reaches ``target``."""

    def __init__(self, target: float) -> None:
        self.target = float(target)

    def on_ranked(self, population):
        best = population.best()
        if best is not None and best.fitness >= self.target:
            logger.info(
                "Target fitness %.6g reached by program %d (%.6g)",
                self.target, best.program_id, best.fitness,
            )
            return HookSignal.STOP
        return HookSignal.CONTINUE


def dispatch(observers: Sequence[GenerationObserver], event: str, population: "Population") -> bool:
    """Call ``event`` on every observer; return True when one asked to stop.

    All observers run even after one fails; the first failure is then raised
    as :class:`HookError`.
    """
    stop = False
    failure: Optional[HookError] = None
    for observer in observers:
        name = type(observer).__name__
        try:
            result = getattr(observer, event)(population)
        except Exception as exc:
            logger.error("Observer %s raised in %s: %r", name, event, exc)
            if failure is None:
                failure = HookError(f"observer {name} raised in {event}: {exc!r}")
                failure.__cause__ = exc
            continue
        if result is False:
            logger.error("Observer %s reported failure in %s", name, event)
            if failure is None:
                failure = HookError(f"observer {name} reported failure in {event}")
        elif result is HookSignal.STOP:
            logger.info("Observer %s requested stop in %s", name, event)
            stop = True
    if failure is not None:
        raise failure
    return stop
