"""Config-driven solver runs: build the problem, solve, validate, write artifacts."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import numpy as np

from coord.admm import ADMMConfig, ADMMResult, solve_lp_admm
from opt.lp import ReferenceSolution, compare_with_reference, solve_reference_lp
from sim.io_utils import init_run_and_logging, summarize, write_history, write_summary
from sim.problems import load_problem
from utils.config import load_config, with_defaults
from utils.random import set_global_seed
from viz.plots import plot_convergence, plot_weights

logger = logging.getLogger(__name__)


def solve_reference(H: np.ndarray, D: float, ref_cfg: dict[str, Any]) -> ReferenceSolution:
    """Solve the reference LP with the configured backend (``scipy`` or ``pyomo``)."""

    backend = str(ref_cfg.get("backend", "scipy")).lower()
    if backend == "scipy":
        return solve_reference_lp(H, D)
    if backend == "pyomo":
        from opt.pyomo_lp import build_lp_model, extract_solution, solve_lp_model

        model = build_lp_model(H, D)
        solve_lp_model(model, solver=ref_cfg.get("solver", "glpk"), options=ref_cfg.get("options"))
        sol = extract_solution(model)
        return ReferenceSolution(
            u=sol.u.to_numpy(),
            beta=sol.beta,
            weights=np.full(H.shape[0], np.nan),
            message="pyomo",
        )
    raise ValueError(f"Unsupported reference backend: {backend}")


def run(cfg: dict[str, Any]) -> dict[str, Any]:
    cfg = with_defaults(cfg)
    seed = int(cfg.get("seed", 0))
    set_global_seed(seed)

    run_dir, log_dir, run_logger = init_run_and_logging(cfg)
    H = load_problem(cfg["problem"], seed=seed)
    admm_cfg = ADMMConfig.from_dict(cfg["admm"])
    run_logger.info(
        "Run created | seed=%d | p=%d | n=%d | npar=%d | run_dir=%s",
        seed,
        H.shape[0],
        H.shape[1],
        admm_cfg.npar,
        run_dir,
    )

    result: ADMMResult = solve_lp_admm(H, admm_cfg)

    reference: ReferenceSolution | None = None
    if cfg["reference"].get("enabled", True):
        reference = solve_reference(H, float(admm_cfg.D), cfg["reference"])
        compare_with_reference(-result.fval, reference)

    hist = write_history(result, run_dir, run_logger)
    summary = summarize(result, reference)
    write_summary(summary, run_dir)

    if cfg["plots"].get("enabled", True):
        try:
            plot_convergence(hist, run_dir / "admm_convergence.png")
            ref_weights = None if reference is None or np.isnan(reference.weights).any() else reference.weights
            plot_weights(result.primal.a, run_dir / "weights.png", reference=ref_weights)
        except (ValueError, OSError) as exc:
            logger.warning("Plotting failed: %s", exc)

    return {"result": result, "summary": summary, "run_dir": run_dir, "log_dir": log_dir}


def run_from_file(cfg_path: Path | str) -> dict[str, Any]:
    return run(load_config(cfg_path))
