from __future__ import annotations
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, List, Optional, Sequence, Union
import numpy as np

from linear_gp.utils.errors import ConfigurationError
from .base import Task

if TYPE_CHECKING:
    from linear_gp.programs import Program


@dataclass(frozen=True)
class LabeledSample:
    features: np.ndarray
    label: int


class Accuracy:
    """Running accuracy; a ``None`` prediction counts as wrong."""

    def __init__(self) -> None:
        self.correct = 0
        self.total = 0

    def observe(self, predicted: Optional[int], label: int) -> None:
        self.total += 1
        if predicted is not None and predicted == label:
            self.correct += 1

    def calculate(self) -> float:
        if self.total == 0:
            return 0.0
        return self.correct / self.total


class ClassificationTask(Task):
    """Supervised classification scored by accuracy.

    Each sample's features seed the input bank; the predicted class is the
    index of the action register holding the unique maximum. A tie between
    action registers is no prediction.
    """

    def __init__(self, samples: Sequence[LabeledSample], action_count: int) -> None:
        if not samples:
            raise ConfigurationError("ClassificationTask needs at least one sample")
        if action_count < 1:
            raise ConfigurationError(f"action_count must be >= 1, got {action_count}")
        rows = [np.asarray(s.features, dtype=float).ravel() for s in samples]
        widths = sorted({row.shape[0] for row in rows})
        if len(widths) != 1:
            raise ConfigurationError(f"samples have differing feature counts: {widths}")
        features = np.vstack(rows)
        labels = np.asarray([int(s.label) for s in samples], dtype=int)
        bad = labels[(labels < 0) | (labels >= action_count)]
        if bad.size:
            raise ConfigurationError(
                f"labels {sorted(set(bad.tolist()))} outside [0, {action_count})"
            )
        self._features = features
        self._labels = labels
        self._action_count = int(action_count)

    @classmethod
    def from_csv(
        cls,
        path: Union[str, Path],
        *,
        label_column: int = -1,
        class_names: Optional[Sequence[str]] = None,
    ) -> "ClassificationTask":
        """Build a task from a header-less CSV (see :func:`load_labeled_samples`)."""
        from .loading import load_labeled_samples

        samples, names = load_labeled_samples(path, label_column=label_column, class_names=class_names)
        return cls(samples, action_count=len(names))

    @property
    def input_count(self) -> int:
        return int(self._features.shape[1])

    @property
    def action_count(self) -> int:
        return self._action_count

    def __len__(self) -> int:
        return int(self._labels.shape[0])

    @property
    def samples(self) -> List[LabeledSample]:
        return [LabeledSample(f, int(l)) for f, l in zip(self._features, self._labels)]

    def seed_registers(self, sample: LabeledSample) -> np.ndarray:
        return np.asarray(sample.features, dtype=float).ravel()

    def predict(self, program: "Program", features: Sequence[float]) -> Optional[int]:
        winners = program.execute(features).argmax(self._action_count)
        return winners[0] if len(winners) == 1 else None

    def evaluate(self, program: "Program") -> float:
        metric = Accuracy()
        for features, label in zip(self._features, self._labels):
            metric.observe(self.predict(program, features), int(label))
        return metric.calculate()
