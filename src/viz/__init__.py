"""Visualization helpers for ADMM diagnostics."""

from .plots import plot_convergence, plot_weights

__all__ = ["plot_convergence", "plot_weights"]
