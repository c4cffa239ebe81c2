"""
Linear genetic programming.

Populations of linear register programs evolved against pluggable tasks.
"""

from .config import HyperParameters, ProgramParams, load_hyper_parameters
from .programs import Instruction, Program, Registers
from .tasks import (
    ClassificationTask,
    Environment,
    LabeledSample,
    ReinforcementLearningTask,
    StepResult,
    Task,
)
from .evolution import (
    CallbackObserver,
    EvolutionEngine,
    GenerationObserver,
    HistoryObserver,
    HookSignal,
    LoggingObserver,
    Population,
    TargetFitnessObserver,
    evolve,
)
from .utils import setup_logging

__version__ = "0.1.0"

__all__ = [
    "HyperParameters",
    "ProgramParams",
    "load_hyper_parameters",
    "Instruction",
    "Program",
    "Registers",
    "ClassificationTask",
    "Environment",
    "LabeledSample",
    "ReinforcementLearningTask",
    "StepResult",
    "Task",
    "CallbackObserver",
    "EvolutionEngine",
    "GenerationObserver",
    "HistoryObserver",
    "HookSignal",
    "LoggingObserver",
    "Population",
    "TargetFitnessObserver",
    "evolve",
    "setup_logging",
]
