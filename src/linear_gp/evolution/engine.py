from __future__ import annotations
import enum
import logging
import time
from typing import TYPE_CHECKING, Iterator, List, Optional, Sequence
import numpy as np

from .breeding import reproduce
from .evaluation import evaluate_population, worker_pool
from .hooks import GenerationObserver, dispatch
from .population import Population

if TYPE_CHECKING:
    from multiprocessing.pool import Pool as PoolType
    from linear_gp.config import HyperParameters
    from linear_gp.tasks import Task

logger = logging.getLogger(__name__)


class EngineState(enum.Enum):
    INITIALIZED = "initialized"
    EVALUATING = "evaluating"
    RANKED = "ranked"
    SELECTING = "selecting"
    REPRODUCING = "reproducing"
    REPLACED = "replaced"
    TERMINATED = "terminated"


class EvolutionEngine:
    """Generation loop: evaluate, rank, select, reproduce, replace.

    One seeded ``numpy`` generator drives every random choice, so two engines
    built from equal hyper-parameters and tasks produce identical runs
    (evaluation may run in worker processes without changing the result).
    The task is only read.
    """

    def __init__(
        self,
        hyper_params: "HyperParameters",
        task: "Task",
        observers: Sequence[GenerationObserver] = (),
        rng: Optional[np.random.Generator] = None,
    ) -> None:
        hyper_params.validate()
        # fail on a task/parameter mismatch before any generation
        hyper_params.program.bind(task)
        self.hyper_params = hyper_params
        self.task = task
        self.observers: List[GenerationObserver] = list(observers)
        self.rng = rng if rng is not None else np.random.default_rng(hyper_params.seed)
        self.population: Optional[Population] = None
        # most recent generation returned by step(), ranked
        self.last_ranked: Optional[Population] = None
        self.state: Optional[EngineState] = None
        self._stop_requested = False

    @property
    def generation(self) -> int:
        return self.population.generation if self.population is not None else 0

    @property
    def finished(self) -> bool:
        return self._stop_requested or self.generation >= self.hyper_params.max_generations

    def _notify(self, event: str, population: Population) -> None:
        if dispatch(self.observers, event, population):
            self._stop_requested = True

    def initialize(self) -> Population:
        """Generate the initial population and notify ``on_initialized``."""
        self.population = Population.generate(self.hyper_params, self.task, self.rng)
        self.last_ranked = None
        self._stop_requested = False
        self.state = EngineState.INITIALIZED
        self._notify("on_initialized", self.population)
        return self.population

    def step(self, pool: Optional["PoolType"] = None) -> Population:
        """Run one generation and return it ranked.

        Afterwards ``self.population`` holds the next generation.
        """
        if self.population is None:
            self.initialize()
        hp = self.hyper_params
        population = self.population
        gen = population.generation

        self.state = EngineState.EVALUATING
        logger.debug("Gen %s/%s | evaluating %s programs", gen + 1, hp.max_generations, len(population))
        evaluate_population(
            population,
            self.task,
            pool=pool,
            reevaluate=hp.reevaluate,
            quiet=hp.quiet,
            desc=f"Gen {gen + 1}/{hp.max_generations}",
        )
        self._notify("on_evaluated", population)

        self.state = EngineState.RANKED
        population.rank()
        best = population.best()
        logger.info(
            "Gen %s/%s | best %.6g | median %.6g",
            gen + 1, hp.max_generations,
            best.fitness if best is not None else float("nan"),
            float(np.nanmedian(population.fitness_array())),
        )
        self._notify("on_ranked", population)

        self.state = EngineState.SELECTING
        survivors = population.select(hp.gap)
        self._notify("on_selected", survivors)

        self.state = EngineState.REPRODUCING
        offspring = reproduce(survivors, hp, self.rng)

        self.state = EngineState.REPLACED
        offspring.generation = gen + 1
        self.population = offspring
        self._notify("on_generation_end", offspring)

        if self.finished:
            self.state = EngineState.TERMINATED
        self.last_ranked = population
        return population

    def iter_generations(self) -> Iterator[Population]:
        """Yield each ranked generation until the run terminates."""
        if self.population is None:
            self.initialize()
        hp = self.hyper_params
        with worker_pool(self.task, hp.workers) as pool:
            while not self.finished:
                yield self.step(pool)
        self.state = EngineState.TERMINATED

    def run(self) -> Population:
        """Evolve to completion and return the last ranked population.

        With ``max_generations=0`` (or a stop at initialisation) this is the
        initial, unevaluated population.
        Calling it again on a finished engine returns the same population.
        """
        hp = self.hyper_params
        logger.info(
            "Starting evolution: task %s | population %d | %d generations | gap %.3g | seed %s | workers %d",
            type(self.task).__name__, hp.population_size, hp.max_generations, hp.gap, hp.seed, hp.workers,
        )
        t0 = time.perf_counter()
        for _ in self.iter_generations():
            pass
        last = self.last_ranked if self.last_ranked is not None else self.population
        best = last.best()
        logger.info(
            "Evolution finished after %d generation(s) in %.2fs | best fitness %s",
            self.generation, time.perf_counter() - t0,
            f"{best.fitness:.6g}" if best is not None else "n/a",
        )
        return last


def evolve(
    hyper_params: "HyperParameters",
    task: "Task",
    observers: Sequence[GenerationObserver] = (),
) -> Population:
    """Build an :class:`EvolutionEngine` and run it to completion."""
    return EvolutionEngine(hyper_params, task, observers).run()
