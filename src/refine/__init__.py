"""Post-processing of ADMM iterates: line-search refinement and dual recovery."""

from .kkt import recover_duals
from .linesearch import LineSearchReport, ScanState, find_oscillation, line_search, recent_window_points
from .simplex import boundary_simplex, project_simplex

__all__ = [
    "line_search",
    "find_oscillation",
    "recent_window_points",
    "LineSearchReport",
    "ScanState",
    "boundary_simplex",
    "project_simplex",
    "recover_duals",
]
