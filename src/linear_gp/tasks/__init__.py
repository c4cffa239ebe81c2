from .base import Task
from .classification import Accuracy, ClassificationTask, LabeledSample
from .reinforcement import Environment, ReinforcementLearningTask, StepResult
from .loading import load_labeled_samples

__all__ = [
    "Task",
    "Accuracy",
    "ClassificationTask",
    "LabeledSample",
    "Environment",
    "ReinforcementLearningTask",
    "StepResult",
    "load_labeled_samples",
]
