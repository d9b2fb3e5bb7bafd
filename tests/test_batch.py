"""Tests for batch utilities."""

from __future__ import annotations

from pathlib import Path

import pandas as pd

from coord.admm import ADMMConfig, solve_lp_admm
from sim.problems import random_problem
from utils.batch import run_batch


def test_run_batch_creates_csv(tmp_path: Path) -> None:
    seeds = [1, 2, 3]

    def solve(seed: int) -> dict[str, float]:
        return {"fval": float(seed), "iterations": 10 * seed}

    df = run_batch(solve, seeds, tmp_path / "batch")
    assert (tmp_path / "batch" / "batch.csv").exists()
    assert len(df) == len(seeds)
    assert df.columns.tolist() == ["seed", "fval", "iterations"]


def test_run_batch_over_solver(tmp_path: Path) -> None:
    cfg = ADMMConfig(D=0.25, npar=2, max_iters=40)

    def solve(seed: int) -> dict[str, float]:
        result = solve_lp_admm(random_problem(2, 8, seed=seed), cfg)
        return {"exitflag": result.exitflag, "fval": result.fval}

    df = run_batch(solve, [0, 1], tmp_path, filename="sweep.csv")
    saved = pd.read_csv(tmp_path / "sweep.csv")
    assert saved["seed"].tolist() == [0, 1]
    assert set(df["exitflag"]).issubset({-1, 0, 1})
