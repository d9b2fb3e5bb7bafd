"""Primal and dual result containers."""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np


@dataclass(slots=True)
class PrimalSolution:
    """Weights ``a`` (length p), threshold ``rho`` and slacks ``xi = max(rho - H^T a, 0)``."""

    a: np.ndarray
    rho: float
    xi: np.ndarray


@dataclass(slots=True)
class DualSolution:
    """Box-constrained multipliers ``u`` (length n) and ``beta = -fval``."""

    u: np.ndarray
    beta: float
