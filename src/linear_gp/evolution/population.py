from __future__ import annotations
import logging
import math
from typing import TYPE_CHECKING, Iterable, Iterator, List, Optional
import numpy as np

from linear_gp.programs import Program

if TYPE_CHECKING:
    from linear_gp.config import HyperParameters
    from linear_gp.tasks import Task

logger = logging.getLogger(__name__)


def _rank_key(prog: Program) -> float:
    # unscored programs sort after every scored one
    return -prog.fitness if prog.fitness is not None else math.inf


class Population:
    """Ordered collection of programs for one generation.

    ``capacity`` is the configured population size; a breeding pool taken
    from :meth:`select` holds fewer programs but keeps the capacity of the
    population it came from.
    """

    def __init__(
        self,
        programs: Iterable[Program] = (),
        capacity: Optional[int] = None,
        generation: int = 0,
    ) -> None:
        self.programs: List[Program] = list(programs)
        self.capacity = capacity if capacity is not None else len(self.programs)
        self.generation = generation

    def __len__(self) -> int:
        return len(self.programs)

    def __iter__(self) -> Iterator[Program]:
        return iter(self.programs)

    def __getitem__(self, index):
        return self.programs[index]

    def __repr__(self) -> str:
        return (
            f"Population(generation={self.generation}, size={len(self.programs)}, "
            f"capacity={self.capacity})"
        )

    @classmethod
    def generate(cls, hyper_params: "HyperParameters", task: "Task", rng: np.random.Generator) -> "Population":
        """``population_size`` random programs bound to ``task``'s register layout."""
        params = hyper_params.program.bind(task)
        programs = [Program.random_program(params, rng) for _ in range(hyper_params.population_size)]
        logger.debug(
            "Generated %d programs (registers=%d, inputs=%d, actions=%d)",
            len(programs), params.register_count, params.input_count, params.action_count,
        )
        return cls(programs, capacity=hyper_params.population_size)

    def rank(self) -> "Population":
        """Sort by descending fitness in place; ties keep their current order."""
        self.programs.sort(key=_rank_key)
        return self

    def select(self, gap: float) -> "Population":
        """Return the breeding pool: the first ``ceil(gap * capacity)`` programs (at least 1).

        Assumes the population is ranked.
        """
        # the epsilon keeps e.g. 0.3 * 10 from rounding up to 4
        n_keep = max(1, math.ceil(gap * self.capacity - 1e-9))
        return Population(self.programs[:n_keep], capacity=self.capacity, generation=self.generation)

    def fitness_array(self) -> np.ndarray:
        """Fitness values in population order; unscored programs are NaN."""
        return np.array(
            [p.fitness if p.fitness is not None else np.nan for p in self.programs],
            dtype=float,
        )

    def best(self) -> Optional[Program]:
        """Highest-fitness program, or ``None`` when nothing is scored."""
        scored = [p for p in self.programs if p.fitness is not None]
        if not scored:
            return None
        return min(scored, key=_rank_key)


def generate_population(hyper_params: "HyperParameters", task: "Task", rng: np.random.Generator) -> Population:
    return Population.generate(hyper_params, task, rng)


def rank(population: Population) -> Population:
    return population.rank()


def select(population: Population, gap: float) -> Population:
    return population.select(gap)
