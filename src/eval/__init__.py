"""Evaluation utilities for LP solutions."""

from .metrics import (
    dual_infeasibility,
    duality_gap,
    margins,
    optimal_threshold,
    primal_objective,
    slack,
)

__all__ = [
    "margins",
    "slack",
    "primal_objective",
    "optimal_threshold",
    "dual_infeasibility",
    "duality_gap",
]
