from __future__ import annotations
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any
import numpy as np

if TYPE_CHECKING:
    from linear_gp.programs import Program


class Task(ABC):
    """Problem a population is evolved against.

    A task declares how many inputs a program reads (``input_count``) and how
    many action registers it decides with (``action_count``), and scores a
    program with :meth:`evaluate` (higher is better). The engine shares one
    task read-only across every evaluation; tasks used with ``workers > 1``
    must be picklable.
    """

    @property
    @abstractmethod
    def input_count(self) -> int:
        ...

    @property
    @abstractmethod
    def action_count(self) -> int:
        ...

    def seed_registers(self, sample: Any) -> np.ndarray:
        """Input vector that ``sample`` seeds into a program's input bank."""
        return np.asarray(sample, dtype=float).ravel()

    @abstractmethod
    def evaluate(self, program: "Program") -> float:
        """Score ``program``; must not mutate the task."""
