"""Probability-simplex helpers used before the line search."""

from __future__ import annotations

import numpy as np


def project_simplex(v: np.ndarray) -> np.ndarray:
    """Euclidean projection of ``v`` onto ``{a >= 0, sum(a) = 1}`` (sort-based)."""

    v = np.asarray(v, dtype=float).ravel()
    if v.size == 0:
        raise ValueError("Cannot project an empty vector")
    mu = np.sort(v)[::-1]
    cssv = np.cumsum(mu) - 1.0
    ind = np.arange(1, v.size + 1)
    cond = mu - cssv / ind > 0
    r = ind[cond][-1]
    theta = cssv[cond][-1] / r
    return np.maximum(v - theta, 0.0)


def boundary_simplex(begin: np.ndarray, end: np.ndarray) -> tuple[np.ndarray, np.ndarray]:
    """Place both points on the simplex and stretch their segment to the simplex boundary.

    The returned pair lies on the line through the projected points, each
    endpoint having at least one zero weight. If the projections coincide
    they are returned unchanged.
    """

    b = project_simplex(begin)
    e = project_simplex(end)
    d = e - b
    if not np.any(d):
        return b, e

    dec = d < 0
    inc = d > 0
    # b + t d >= 0 for t in [t_lo, t_hi]; t_lo <= 0 and t_hi >= 1 since b, e are feasible
    t_hi = float(np.min(-b[dec] / d[dec]))
    t_lo = float(np.max(-b[inc] / d[inc]))

    lo = np.maximum(b + t_lo * d, 0.0)
    hi = np.maximum(b + t_hi * d, 0.0)
    return lo / lo.sum(), hi / hi.sum()
