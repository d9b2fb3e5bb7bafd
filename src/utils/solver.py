"""Solver utilities for Pyomo: solver selection and time limits.

The reference LP can be handed to any of a small set of LP solvers. This
module validates the choice and maps a generic time limit to the
solver-specific option.
"""

from __future__ import annotations

from typing import Any

import pyomo.environ as pyo

SUPPORTED_SOLVERS = ("glpk", "cbc", "gurobi", "appsi_highs")

_TIME_LIMIT_KEYS = {
    "glpk": "tmlim",
    "cbc": "sec",
    "gurobi": "TimeLimit",
    "appsi_highs": "time_limit",
}


def is_solver_available(name: str) -> bool:
    obj = pyo.SolverFactory(name)
    return bool(obj is not None and obj.available(exception_flag=False))


def finalize_solver_choice(
    solver: str | None,
    options: dict[str, Any] | None,
) -> tuple[str, dict[str, Any]]:
    """Validate the LP solver name and map options.

    Returns the lowercase solver name and the mapped options dict.
    """
    name = (solver or "").lower()
    if name not in SUPPORTED_SOLVERS:
        raise ValueError(f"solver must be one of {SUPPORTED_SOLVERS}")
    mapped = map_time_limit_option(name, options or {})
    return name, mapped


def map_time_limit_option(solver: str, options: dict[str, Any]) -> dict[str, Any]:
    """Map a generic time limit to solver-specific parameters.

    Supports a generic option ``time_limit_seconds`` (aliases ``time_limit``,
    ``timelimit``, ``max_time``). Returns a new dict.
    """

    opts = dict(options) if options else {}
    tl = None
    for key in ("time_limit_seconds", "time_limit", "timelimit", "max_time"):
        if key in opts:
            tl = opts.pop(key)
            break
    if tl is None:
        return opts

    try:
        tl_val = float(tl)
    except (TypeError, ValueError):
        raise ValueError(f"Invalid time limit: {tl!r}") from None

    key = _TIME_LIMIT_KEYS.get(solver.lower())
    if key is None:
        raise ValueError("Unsupported solver for time limit mapping")
    # glpk and cbc expect whole seconds
    opts.setdefault(key, int(tl_val) if solver in {"glpk", "cbc"} else tl_val)
    return opts
