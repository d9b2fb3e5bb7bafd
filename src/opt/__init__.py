"""Reference LP solvers used to validate ADMM results."""

from .lp import ReferenceSolution, compare_with_reference, create_problem, solve_reference_lp

__all__ = ["create_problem", "solve_reference_lp", "compare_with_reference", "ReferenceSolution"]
