"""Helpers for feeding numpy data into Pyomo parameters."""

from __future__ import annotations

import numpy as np


def matrix_param(values: np.ndarray, *, skip_zeros: bool = False) -> dict[tuple[int, int], float]:
    """Map a 2D array to ``{(i, j): value}``.

    With ``skip_zeros`` only the non-zero entries are emitted, for use with a
    ``Param`` declared with ``default=0``.
    """

    arr = np.asarray(values, dtype=float)
    if arr.ndim != 2:
        raise ValueError("Expected a 2D array")
    rows, cols = np.nonzero(arr) if skip_zeros else np.indices(arr.shape).reshape(2, -1)
    return {(int(i), int(j)): float(arr[i, j]) for i, j in zip(rows, cols)}
