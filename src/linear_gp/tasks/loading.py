from __future__ import annotations
from pathlib import Path
from typing import List, Optional, Sequence, Tuple, Union
import pandas as pd

from linear_gp.utils.errors import DataLoadError
from .classification import LabeledSample


def _resolve_labels(column: pd.Series, class_names: Optional[Sequence[str]]) -> Tuple[List[int], List[str]]:
    if class_names is not None:
        names = [str(n) for n in class_names]
        index = {n: i for i, n in enumerate(names)}
        as_str = column.astype(str).str.strip()
        unknown = sorted(set(as_str) - set(index))
        if unknown:
            raise DataLoadError(f"labels {unknown} not in class_names {names}")
        return [index[v] for v in as_str], names

    # integer labels are used as class indices directly
    if pd.api.types.is_integer_dtype(column):
        if (column < 0).any():
            raise DataLoadError("integer labels must be non-negative")
        n_classes = int(column.max()) + 1
        return [int(v) for v in column], [str(i) for i in range(n_classes)]

    names = sorted(set(column.astype(str).str.strip()))
    index = {n: i for i, n in enumerate(names)}
    return [index[v] for v in column.astype(str).str.strip()], names


def load_labeled_samples(
    path: Union[str, Path],
    *,
    label_column: int = -1,
    class_names: Optional[Sequence[str]] = None,
) -> Tuple[List[LabeledSample], List[str]]:
    """Load a header-less CSV of numeric features plus one label column.

    Returns the samples and the class names indexed by label. Without
    ``class_names`` integer labels are taken as indices and any other labels
    are numbered in sorted order.
    """
    path = Path(path)
    if not path.exists():
        raise DataLoadError(f"sample file not found: {path}")
    df = pd.read_csv(path, header=None, skipinitialspace=True)
    df = df.dropna(how="all")
    if df.empty:
        raise DataLoadError(f"no samples in {path}")
    if df.shape[1] < 2:
        raise DataLoadError(f"{path}: need at least one feature column and a label column")

    label_idx = label_column % df.shape[1]
    label_col = df.columns[label_idx]
    try:
        features = df.drop(columns=[label_col]).astype(float).to_numpy()
    except ValueError as exc:
        raise DataLoadError(f"{path}: non-numeric feature value ({exc})") from exc
    labels, names = _resolve_labels(df[label_col], class_names)
    samples = [LabeledSample(row, label) for row, label in zip(features, labels)]
    return samples, names
