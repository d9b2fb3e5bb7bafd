"""Reference dense LP used to validate ADMM results.

The dual of the soft-margin problem is::

    minimise   beta
    subject to H u <= beta,  sum(u) = 1,  0 <= u <= D

and its optimal ``beta`` equals ``-fval`` of the primal.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

import numpy as np
from scipy.optimize import linprog

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class LPProblem:
    c: np.ndarray
    A_ub: np.ndarray
    b_ub: np.ndarray
    A_eq: np.ndarray
    b_eq: np.ndarray
    bounds: list[tuple[float | None, float | None]]


@dataclass(slots=True)
class ReferenceSolution:
    """Optimal dual ``u``, ``beta`` and the primal weights read off the constraint marginals."""

    u: np.ndarray
    beta: float
    weights: np.ndarray
    message: str


def create_problem(H: np.ndarray, D: float) -> LPProblem:
    """Assemble the dual LP over ``[u, beta]``."""

    H = np.asarray(H, dtype=float)
    p, n = H.shape
    c = np.zeros(n + 1)
    c[-1] = 1.0
    A_ub = np.hstack((H, -np.ones((p, 1))))
    A_eq = np.concatenate((np.ones(n), [0.0]))[None, :]
    bounds: list[tuple[float | None, float | None]] = [(0.0, float(D))] * n + [(None, None)]
    return LPProblem(c=c, A_ub=A_ub, b_ub=np.zeros(p), A_eq=A_eq, b_eq=np.ones(1), bounds=bounds)


def solve_reference_lp(H: np.ndarray, D: float) -> ReferenceSolution:
    """Solve the dual LP with HiGHS.

    Raises
    ------
    RuntimeError
        If the solver does not report an optimal solution.
    """

    prob = create_problem(H, D)
    res = linprog(
        prob.c,
        A_ub=prob.A_ub,
        b_ub=prob.b_ub,
        A_eq=prob.A_eq,
        b_eq=prob.b_eq,
        bounds=prob.bounds,
        method="highs",
    )
    if res.status != 0:
        raise RuntimeError(f"Reference LP failed: status={res.status}, message={res.message}")
    x = np.asarray(res.x, dtype=float)
    weights = -np.asarray(res.ineqlin.marginals, dtype=float)
    return ReferenceSolution(u=x[:-1], beta=float(x[-1]), weights=weights, message=str(res.message))


def compare_with_reference(beta: float, reference: ReferenceSolution, tol: float = 1e-3) -> bool:
    """Return whether ``beta`` agrees with the reference optimum, warning if not."""

    ok = abs(reference.beta - beta) <= tol
    if not ok:
        logger.warning(
            "ADMM solution differs from reference LP: actual %.4f vs %.4f",
            -reference.beta,
            -beta,
        )
    return ok
