"""Solve several random problems and tabulate ADMM against the reference LP.

Usage:
  uv run python scripts/sweep_seeds.py --p 5 --n 200 --npar 4 --cases 10 --tag sweep
"""

from __future__ import annotations

import argparse
from typing import Any

from coord.admm import ADMMConfig, solve_lp_admm
from opt.lp import solve_reference_lp
from sim.problems import random_problem
from utils import ensure_run_dir
from utils.batch import run_batch
from utils.random import seed_sequence


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--p", type=int, default=5, help="Number of constraints (rows of H)")
    parser.add_argument("--n", type=int, default=200, help="Number of columns of H")
    parser.add_argument("--D", type=float, default=0.05, help="Dual box bound")
    parser.add_argument("--npar", type=int, default=4)
    parser.add_argument("--max-iters", type=int, default=1000)
    parser.add_argument("--cases", type=int, default=10, help="Number of random problems")
    parser.add_argument("--seed", type=int, default=42)
    parser.add_argument("--tag", default=None)
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> None:
    args = parse_args(argv)
    cfg = ADMMConfig(D=args.D, npar=args.npar, max_iters=args.max_iters)

    def solve(seed: int) -> dict[str, Any]:
        H = random_problem(args.p, args.n, seed=seed)
        result = solve_lp_admm(H, cfg)
        reference = solve_reference_lp(H, args.D)
        return {
            "exitflag": result.exitflag,
            "iterations": result.iterations,
            "fval": result.fval,
            "reference_fval": -reference.beta,
            "gap": abs(result.fval + reference.beta),
        }

    run_dir = ensure_run_dir(args.tag)
    frame = run_batch(solve, seed_sequence(args.seed, args.cases), run_dir)
    print(frame.describe().to_string())


if __name__ == "__main__":
    main()
