"""Progress bars for long evaluation phases."""

from __future__ import annotations
from typing import Iterable, Optional

from tqdm import tqdm


def pbar(iterable: Iterable, *, desc: str, disable: bool, total: Optional[int] = None):
    """Return ``iterable`` wrapped in a tqdm progress bar.

    ``disable=True`` keeps the iteration but hides the bar, so callers never
    need a separate code path for quiet runs.
    """
    return tqdm(
        iterable,
        desc=desc,
        total=total,
        disable=disable,
        leave=False,
        ncols=100,
        bar_format='{l_bar}{bar}| {n_fmt}/{total_fmt} [{elapsed}<{remaining}, {rate_fmt}{postfix}]',
    )
