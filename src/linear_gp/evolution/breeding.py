from __future__ import annotations
import logging
import math
from typing import TYPE_CHECKING, List
import numpy as np

from linear_gp.programs import Program
from .population import Population

if TYPE_CHECKING:
    from linear_gp.config import HyperParameters

logger = logging.getLogger(__name__)

_warned_small_pool = False


def _warn_small_pool_once(pool_size: int) -> None:
    global _warned_small_pool
    if not _warned_small_pool:
        logger.warning(
            "Breeding pool holds %d program(s); crossover falls back to mutation", pool_size
        )
        _warned_small_pool = True


def _pick(pool: Population, rng: np.random.Generator) -> Program:
    return pool.programs[int(rng.integers(len(pool)))]


def _pick_distinct_pair(pool: Population, rng: np.random.Generator):
    i, j = rng.choice(len(pool), size=2, replace=False)
    return pool.programs[int(i)], pool.programs[int(j)]


def reproduce(pool: Population, hyper_params: "HyperParameters", rng: np.random.Generator) -> Population:
    """Refill ``pool`` up to ``population_size``.

    Survivors are kept unchanged. Of the ``remaining`` empty slots,
    ``floor(n_crossovers * remaining)`` hold crossover children of two
    distinct survivors and the rest hold clones of random survivors. Then
    ``floor(n_mutations * remaining)`` randomly chosen offspring are replaced
    by a mutant of themselves, so one offspring may be both crossed and
    mutated. With fewer than two survivors the crossover slots become
    mutants of a random survivor.
    """
    target = hyper_params.population_size
    remaining = target - len(pool)
    if remaining <= 0:
        return Population(pool.programs[:target], capacity=target, generation=pool.generation)

    n_cross = math.floor(hyper_params.n_crossovers * remaining)
    n_mut = math.floor(hyper_params.n_mutations * remaining)
    kind = hyper_params.crossover_kind
    max_edits = hyper_params.max_mutation_edits

    offspring: List[Program] = []
    if n_cross and len(pool) < 2:
        _warn_small_pool_once(len(pool))
        offspring.extend(_pick(pool, rng).mutate(rng, max_edits) for _ in range(n_cross))
    else:
        while len(offspring) < n_cross:
            parent_a, parent_b = _pick_distinct_pair(pool, rng)
            # keep one or both children depending on the slots left
            offspring.extend(parent_a.crossover(parent_b, rng, kind)[: n_cross - len(offspring)])

    while len(offspring) < remaining:
        offspring.append(_pick(pool, rng).copy())

    if n_mut:
        for idx in rng.choice(remaining, size=n_mut, replace=False):
            offspring[int(idx)] = offspring[int(idx)].mutate(rng, max_edits)

    logger.debug(
        "Reproduced %d offspring (%d crossover, %d clones, %d mutated) from %d survivors",
        remaining, n_cross, remaining - n_cross, n_mut, len(pool),
    )
    return Population(pool.programs + offspring, capacity=target, generation=pool.generation)
