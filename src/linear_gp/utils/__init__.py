from .errors import (
    ConfigurationError,
    DataLoadError,
    HookError,
    InvariantViolation,
    LinearGPError,
    TaskError,
)
from .logging import setup_logging
from .progress import pbar

__all__ = [
    "ConfigurationError",
    "DataLoadError",
    "HookError",
    "InvariantViolation",
    "LinearGPError",
    "TaskError",
    "setup_logging",
    "pbar",
]
