from __future__ import annotations
from dataclasses import asdict, dataclass
from typing import TYPE_CHECKING, Any, Dict, Optional
import numpy as np

if TYPE_CHECKING:
    from .population import Population


@dataclass(frozen=True)
class GenerationSummary:
    """Fitness statistics of one ranked generation."""

    generation: int
    size: int
    n_scored: int
    best: float
    median: float
    worst: float
    mean: float
    best_program_id: Optional[int] = None
    best_length: Optional[int] = None
    best_fingerprint: Optional[str] = None
    best_program: Optional[str] = None

    def as_dict(self) -> Dict[str, Any]:
        return asdict(self)


def summarize(population: "Population") -> GenerationSummary:
    """Summarise ``population``; statistics are NaN when no program is scored."""
    fitness = population.fitness_array()
    scored = fitness[~np.isnan(fitness)]
    best_prog = population.best()
    if scored.size:
        stats = (float(scored.max()), float(np.median(scored)), float(scored.min()), float(scored.mean()))
    else:
        stats = (float("nan"),) * 4
    return GenerationSummary(
        generation=population.generation,
        size=len(population),
        n_scored=int(scored.size),
        best=stats[0],
        median=stats[1],
        worst=stats[2],
        mean=stats[3],
        best_program_id=best_prog.program_id if best_prog else None,
        best_length=best_prog.size if best_prog else None,
        best_fingerprint=best_prog.fingerprint if best_prog else None,
        best_program=best_prog.to_string(max_len=200) if best_prog else None,
    )
