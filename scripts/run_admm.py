"""Run consensus ADMM on a configured problem and export convergence artifacts.

Usage:
  uv run python scripts/run_admm.py --cfg config/demo.yaml --tag admm_demo

Outputs under runs/<tag>/:
  - admm_history.csv
  - admm_convergence.png
  - weights.png
  - summary.json / summary.md
"""

from __future__ import annotations

import argparse
import json
from pathlib import Path

from sim.runner import run
from utils.config import load_config


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    p = argparse.ArgumentParser(description=__doc__)
    p.add_argument("--cfg", type=Path, required=True, help="YAML/JSON config with problem and admm sections")
    p.add_argument("--tag", default=None, help="Run directory tag")
    p.add_argument("--force-ls", action="store_true", help="Force the line-search refinement")
    p.add_argument("--dual", action="store_true", help="Recover exact duals from the KKT system")
    return p.parse_args(argv)


def main(argv: list[str] | None = None) -> None:
    args = parse_args(argv)
    cfg = load_config(args.cfg)
    admm = dict(cfg.get("admm", {}))
    if args.force_ls:
        admm["force_line_search"] = True
    if args.dual:
        admm["dual_required"] = True
    cfg["admm"] = admm
    if args.tag:
        cfg["run"] = {**cfg.get("run", {}), "tag": args.tag}

    out = run(cfg)
    print(json.dumps({"run_dir": str(out["run_dir"]), **out["summary"]}, indent=2))


if __name__ == "__main__":
    main()
