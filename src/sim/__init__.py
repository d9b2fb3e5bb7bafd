"""Experiment plumbing: problem construction and config-driven runs."""

from .problems import load_problem, random_problem

__all__ = ["random_problem", "load_problem"]
