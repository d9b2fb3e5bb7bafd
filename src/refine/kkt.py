"""Exact recovery of the dual multipliers from a converged primal solution.

ADMM duals converge too slowly to be useful, so they are rebuilt from the
KKT conditions assuming that (i) the support of the weights is known, (ii)
the columns with positive slack sit at the box bound ``u = D`` and (iii) the
optimal value ``beta = -fval`` is known. The remaining ``0 < u < D`` entries
then follow from a small non-negative least-squares system.
"""

from __future__ import annotations

import logging
import math

import numpy as np
from scipy.optimize import nnls

from coord.errors import DualRecoveryError
from coord.solution import DualSolution, PrimalSolution

logger = logging.getLogger(__name__)


def recover_duals(
    H: np.ndarray,
    D: float,
    primal: PrimalSolution,
    fval: float,
    *,
    tol: float = 1e-5,
) -> DualSolution:
    """Solve for the dual vector ``u`` consistent with ``primal`` and ``fval``.

    Raises
    ------
    DualRecoveryError
        If more free multipliers are required than there are active weights.
    """

    H = np.asarray(H, dtype=float)
    n = H.shape[1]
    xi = np.asarray(primal.xi, dtype=float)
    a = np.asarray(primal.a, dtype=float)

    viol = xi > tol
    n_viol = int(np.count_nonzero(viol))
    support = a > tol
    available = int(np.count_nonzero(support))
    required = math.ceil((1.0 - D * n_viol) / D - 1e-9)
    if required > available:
        raise DualRecoveryError(required, available)

    u = np.zeros(n, dtype=float)
    u[viol] = D

    if required >= 1:
        candidates = np.flatnonzero(~viol)
        # slack is zero on every candidate; rank by distance to the margin
        gap = np.abs(H.T @ a - float(primal.rho))
        free = candidates[np.argsort(gap[candidates], kind="stable")][:available]
        M = np.vstack((H[np.ix_(support, free)], np.ones((1, free.shape[0]))))
        rhs = np.concatenate(
            (
                -fval * np.ones(available) - D * H[np.ix_(support, viol)].sum(axis=1),
                [1.0 - n_viol * D],
            )
        )
        values, residual = nnls(M, rhs)
        u[free] = values
        logger.debug(
            "KKT dual recovery | violating=%d | support=%d | free=%d | residual=%.3e",
            n_viol,
            available,
            free.shape[0],
            residual,
        )

    return DualSolution(u=u, beta=-float(fval))
