"""Objective, feasibility and optimality metrics for the soft-margin LP."""

from __future__ import annotations

import math

import numpy as np


def margins(H: np.ndarray, a: np.ndarray) -> np.ndarray:
    """Return ``H^T a``, the margin of every column."""

    return np.asarray(H, dtype=float).T @ np.asarray(a, dtype=float)


def slack(H: np.ndarray, a: np.ndarray, rho: float) -> np.ndarray:
    """Return ``xi = max(rho - H^T a, 0)``."""

    return np.maximum(float(rho) - margins(H, a), 0.0)


def primal_objective(H: np.ndarray, D: float, a: np.ndarray, rho: float) -> float:
    """Evaluate ``D * sum(xi) - rho`` with the slacks implied by ``(a, rho)``."""

    return float(D * np.sum(slack(H, a, rho)) - rho)


def optimal_threshold(H: np.ndarray, D: float, a: np.ndarray) -> float:
    """Threshold minimising :func:`primal_objective` for fixed weights.

    The objective is piecewise linear in ``rho`` with slope
    ``D * #{margin < rho} - 1``; its minimiser is the ``ceil(1/D)``-th
    smallest margin.
    """

    m = np.sort(margins(H, a))
    count = math.ceil(1.0 / D - 1e-12)
    if count > m.shape[0]:
        raise ValueError(f"D * n must be at least 1 (D={D}, n={m.shape[0]})")
    return float(m[count - 1])


def dual_infeasibility(H: np.ndarray, D: float, u: np.ndarray, beta: float) -> float:
    """Largest violation of ``H u <= beta``, ``sum(u) = 1`` and ``0 <= u <= D``."""

    u = np.asarray(u, dtype=float)
    viol = [
        float(np.max(np.asarray(H, dtype=float) @ u - beta, initial=0.0)),
        abs(float(np.sum(u)) - 1.0),
        float(np.max(-u, initial=0.0)),
        float(np.max(u - D, initial=0.0)),
    ]
    return max(viol)


def duality_gap(fval: float, beta: float) -> float:
    """Absolute gap between the primal objective and ``-beta``."""

    return abs(float(fval) + float(beta))
