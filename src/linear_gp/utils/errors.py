class LinearGPError(Exception):
    """Base error for the linear GP project."""


class ConfigurationError(LinearGPError):
    """Raised for invalid hyper-parameters or task/parameter mismatches."""


class TaskError(LinearGPError):
    """Raised when a task fails to score a program."""


class InvariantViolation(LinearGPError):
    """Raised when a program breaks a construction invariant (a defect, not bad input)."""


class HookError(LinearGPError):
    """Raised when a generation observer reports failure."""


class DataLoadError(LinearGPError):
    """Raised when a sample file cannot be loaded or labels do not resolve."""
