from __future__ import annotations
from typing import List, Optional, Sequence
import numpy as np

from linear_gp.utils.errors import TaskError


class Registers:
    """Working registers plus a read-only input bank for one program.

    The first ``action_count`` working registers double as action registers;
    tasks read the chosen action from them after execution.
    """

    __slots__ = ("values", "inputs")

    def __init__(self, register_count: int, input_count: int = 0) -> None:
        self.values = np.zeros(register_count, dtype=float)
        self.inputs = np.zeros(input_count, dtype=float)

    def __len__(self) -> int:
        return int(self.values.shape[0])

    def __getitem__(self, index):
        return self.values[index]

    def __repr__(self) -> str:
        return f"Registers(values={self.values.tolist()}, inputs={self.inputs.tolist()})"

    def reset(self, inputs: Optional[Sequence[float]] = None) -> None:
        """Zero both banks, then seed the input bank from ``inputs`` if given."""
        self.values.fill(0.0)
        self.inputs.fill(0.0)
        if inputs is None:
            return
        arr = np.asarray(inputs, dtype=float).ravel()
        if arr.shape[0] != self.inputs.shape[0]:
            raise TaskError(
                f"expected {self.inputs.shape[0]} inputs, got {arr.shape[0]}"
            )
        self.inputs[:] = np.nan_to_num(arr, nan=0.0)

    def argmax(self, action_count: int) -> List[int]:
        """Indices of the action registers tied for the maximum value."""
        actions = self.values[:action_count]
        if actions.size == 0:
            return []
        best = actions.max()
        return [int(i) for i in np.flatnonzero(actions == best)]
