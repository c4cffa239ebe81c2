from __future__ import annotations
from contextlib import contextmanager
import logging
import math
from multiprocessing import Pool, cpu_count
from typing import TYPE_CHECKING, Iterator, List, Optional, Tuple

from linear_gp.utils.errors import LinearGPError, TaskError
from linear_gp.utils.progress import pbar

if TYPE_CHECKING:
    from multiprocessing.pool import Pool as PoolType
    from linear_gp.programs import Program
    from linear_gp.tasks import Task
    from .population import Population

logger = logging.getLogger(__name__)

# Task installed once per worker process by ``_pool_init``.
_WORKER_TASK: Optional["Task"] = None


def evaluate_program(program: "Program", task: "Task") -> float:
    """Score one program; any task failure or non-finite score is a TaskError."""
    try:
        fitness = task.evaluate(program)
    except LinearGPError:
        raise
    except Exception as exc:
        raise TaskError(
            f"task {type(task).__name__} failed on program {program.program_id}: {exc!r}"
        ) from exc
    try:
        fitness = float(fitness)
    except (TypeError, ValueError) as exc:
        raise TaskError(
            f"program {program.program_id}: fitness {fitness!r} is not a number"
        ) from exc
    if not math.isfinite(fitness):
        raise TaskError(f"program {program.program_id}: non-finite fitness {fitness}")
    return fitness


def _pool_init(task: "Task") -> None:
    """Initializer for worker processes: install the shared task once per worker."""
    global _WORKER_TASK
    _WORKER_TASK = task


def _eval_worker(args: Tuple[int, "Program"]) -> Tuple[int, float]:
    idx, program = args
    if _WORKER_TASK is None:
        raise TaskError("worker process has no task installed")
    return idx, evaluate_program(program, _WORKER_TASK)


@contextmanager
def worker_pool(task: "Task", workers: int) -> Iterator[Optional["PoolType"]]:
    """Yield a process pool with ``task`` preloaded, or ``None`` for one worker."""
    processes = min(workers, cpu_count())
    if processes <= 1:
        yield None
        return
    logger.info("Starting evaluation pool with %d worker processes", processes)
    with Pool(processes=processes, initializer=_pool_init, initargs=(task,)) as pool:
        yield pool


def evaluate_population(
    population: "Population",
    task: "Task",
    *,
    pool: Optional["PoolType"] = None,
    reevaluate: bool = False,
    quiet: bool = True,
    desc: str = "Evaluating",
) -> int:
    """Assign fitness to every unscored program (every program with ``reevaluate``).

    Returns the number of programs evaluated. Results are written back in
    population order once all of them are in, so a pool run matches a
    sequential one.
    """
    pending: List[Tuple[int, "Program"]] = [
        (idx, prog)
        for idx, prog in enumerate(population)
        if reevaluate or prog.fitness is None
    ]
    if not pending:
        return 0

    scores: List[Tuple[int, float]] = []
    if pool is None:
        bar = pbar(pending, desc=desc, disable=quiet, total=len(pending))
        for idx, prog in bar:
            scores.append((idx, evaluate_program(prog, task)))
    else:
        results_iter = pool.imap_unordered(_eval_worker, pending)
        bar = pbar(results_iter, desc=desc, disable=quiet, total=len(pending))
        for idx, fitness in bar:
            scores.append((idx, fitness))

    programs = population.programs
    for idx, fitness in sorted(scores):
        programs[idx].fitness = fitness
        logger.debug("program %d fitness %.6g", programs[idx].program_id, fitness)
    return len(scores)
