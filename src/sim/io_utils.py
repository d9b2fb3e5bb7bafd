"""Runner I/O helpers: logging setup and artifact writing.

Isolated from solver logic to keep the runner orchestration simple.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

import numpy as np
import pandas as pd

from coord.admm import ADMMResult
from opt.lp import ReferenceSolution
from utils import ensure_run_dir
from utils.logging_utils import setup_structured_logging


def init_run_and_logging(cfg: dict[str, Any]) -> tuple[Path, Path, logging.Logger]:
    run_cfg = cfg.get("run", {})
    run_dir = ensure_run_dir(tag=run_cfg.get("tag"), base=run_cfg.get("base", "runs"))

    log_cfg = cfg.get("logging", {})
    if "base_dir" in log_cfg:
        log_dir = Path(log_cfg["base_dir"]) / run_dir.name
    else:
        log_dir = run_dir / "logs"
    logger = setup_structured_logging(
        log_dir,
        log_file=log_cfg.get("log_file", "runner.log"),
        level=log_cfg.get("level", "INFO"),
    )
    return run_dir, log_dir, logger


def write_history(result: ADMMResult, run_dir: Path, logger: logging.Logger) -> pd.DataFrame:
    df = result.history.to_frame()
    path = run_dir / "admm_history.csv"
    df.to_csv(path)
    logger.info("History written to %s (%d iterations)", path, len(df))
    return df


def summarize(result: ADMMResult, reference: ReferenceSolution | None = None) -> dict[str, Any]:
    ls = result.line_search
    summary: dict[str, Any] = {
        "exitflag": int(result.exitflag),
        "status": result.status.value,
        "iterations": int(result.iterations),
        "fval": float(result.fval),
        "fval_admm": float(result.fval_admm),
        "threshold": float(result.primal.rho),
        "weights": np.asarray(result.primal.a, dtype=float).tolist(),
        "weight_sum": float(np.sum(result.primal.a)),
        "line_search": None
        if ls is None
        else {
            "strategy": ls.strategy,
            "deep_failed": bool(ls.deep_failed),
            "accepted": bool(ls.accepted),
            "improvement": float(ls.improvement),
        },
        "beta": None if result.dual is None else float(result.dual.beta),
    }
    if reference is not None:
        summary["reference_beta"] = float(reference.beta)
        summary["reference_gap"] = float(abs(reference.beta + result.fval))
    return summary


def write_summary(summary: dict[str, Any], run_dir: Path) -> None:
    (run_dir / "summary.json").write_text(json.dumps(summary, indent=2))

    md = [
        "# Run Summary",
        "",
        f"- Exit flag: {summary['exitflag']} ({summary['status']})",
        f"- Iterations: {summary['iterations']}",
        f"- Objective: {summary['fval']:.7f} (ADMM point {summary['fval_admm']:.7f})",
        f"- Threshold: {summary['threshold']:.7f}",
    ]
    if summary.get("line_search"):
        ls = summary["line_search"]
        md.append(f"- Line search: {ls['strategy']}, accepted={ls['accepted']}, improvement={ls['improvement']:.3e}")
    if "reference_gap" in summary:
        md.append(f"- Reference gap: {summary['reference_gap']:.3e}")
    (run_dir / "summary.md").write_text("\n".join(md))
