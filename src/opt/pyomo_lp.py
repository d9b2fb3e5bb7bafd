"""Pyomo formulation of the reference dual LP."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import numpy as np
import pandas as pd
import pyomo.environ as pyo

from utils.pyomo_utils import matrix_param
from utils.solver import finalize_solver_choice


@dataclass
class LPModelResult:
    """Dual weights per column and the optimal ``beta``."""

    u: pd.Series
    beta: float


def build_lp_model(H: np.ndarray, D: float) -> pyo.ConcreteModel:
    """Create ``min beta s.t. H u <= beta, sum(u) = 1, 0 <= u <= D``."""

    H = np.asarray(H, dtype=float)
    if H.ndim != 2:
        raise ValueError("H must be a two-dimensional matrix")
    if not 0 < D <= 1:
        raise ValueError("D must lie in (0, 1]")
    p, n = H.shape

    model = pyo.ConcreteModel("ReferenceLP")
    model.R = pyo.Set(initialize=range(p))
    model.C = pyo.Set(initialize=range(n))
    model.H = pyo.Param(model.R, model.C, initialize=matrix_param(H, skip_zeros=True), default=0.0)
    model.D = pyo.Param(initialize=float(D))

    model.u = pyo.Var(model.C, bounds=(0.0, float(D)), initialize=1.0 / n)
    model.beta = pyo.Var(domain=pyo.Reals)

    def row_rule(m, r):
        return sum(m.H[r, c] * m.u[c] for c in m.C) <= m.beta

    model.rows = pyo.Constraint(model.R, rule=row_rule)
    model.simplex = pyo.Constraint(expr=sum(model.u[c] for c in model.C) == 1.0)
    model.objective = pyo.Objective(expr=model.beta, sense=pyo.minimize)
    return model


def solve_lp_model(
    model: pyo.ConcreteModel,
    solver: str = "glpk",
    options: dict[str, Any] | None = None,
) -> pyo.SolverResults:
    """Solve the Pyomo reference LP with the selected solver."""

    selected, mapped_options = finalize_solver_choice(solver, options)
    solver_obj = pyo.SolverFactory(selected)
    if solver_obj is None or not solver_obj.available(exception_flag=False):
        raise RuntimeError(f"Solver {selected} is not available")

    results = solver_obj.solve(model, tee=False, options=mapped_options)

    termination = results.solver.termination_condition
    status = results.solver.status
    if status != pyo.SolverStatus.ok or termination != pyo.TerminationCondition.optimal:
        raise RuntimeError(f"Reference LP failed: status={status}, termination={termination}")
    return results


def extract_solution(model: pyo.ConcreteModel) -> LPModelResult:
    columns = sorted(model.C)
    u = pd.Series([pyo.value(model.u[c]) for c in columns], index=columns, name="u")
    return LPModelResult(u=u, beta=float(pyo.value(model.beta)))
