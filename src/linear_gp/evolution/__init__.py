"""
Evolutionary loop for linear programs.

Population handling, fitness evaluation, breeding, observers and the engine
that strings them together.
"""

from .population import Population, generate_population, rank, select
from .evaluation import evaluate_population, evaluate_program, worker_pool
from .breeding import reproduce
from .diagnostics import GenerationSummary, summarize
from .hooks import (
    CallbackObserver,
    GenerationObserver,
    HistoryObserver,
    HookSignal,
    LoggingObserver,
    TargetFitnessObserver,
)
from .engine import EngineState, EvolutionEngine, evolve

__all__ = [
    "Population",
    "generate_population",
    "rank",
    "select",
    "evaluate_population",
    "evaluate_program",
    "worker_pool",
    "reproduce",
    "GenerationSummary",
    "summarize",
    "CallbackObserver",
    "GenerationObserver",
    "HistoryObserver",
    "HookSignal",
    "LoggingObserver",
    "TargetFitnessObserver",
    "EngineState",
    "EvolutionEngine",
    "evolve",
]
