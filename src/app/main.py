"""Command-line entrypoint for consensus ADMM runs.

Usage examples (via uv):
  uv run consensus-lp --config demo
  uv run consensus-lp --config config/demo.yaml --npar 4 --max-iters 2000 --verbose
"""

from __future__ import annotations

import argparse
import json
import sys

from sim.runner import run
from utils.config import list_available_configs, load_config, resolve_config_path


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Solve a partitioned LP with consensus ADMM.")
    parser.add_argument(
        "--config",
        type=str,
        help=(
            "Config file path or name under config/. "
            "Examples: --config config/demo.yaml or --config demo"
        ),
    )
    parser.add_argument(
        "--list-configs",
        action="store_true",
        help="List discovered configs under config/ and exit",
    )
    parser.add_argument("--npar", type=int, default=None, help="Override admm.npar")
    parser.add_argument("--max-iters", type=int, default=None, help="Override admm.max_iters")
    parser.add_argument("--workers", type=int, default=None, help="Threads for the local solves")
    parser.add_argument("--tag", default=None, help="Run directory tag")
    parser.add_argument("--verbose", action="store_true", help="Log every ADMM iteration")
    return parser.parse_args(argv)


def apply_overrides(cfg: dict, args: argparse.Namespace) -> dict:
    admm = dict(cfg.get("admm", {}))
    for key, value in (("npar", args.npar), ("max_iters", args.max_iters), ("workers", args.workers)):
        if value is not None:
            admm[key] = value
    if args.verbose:
        admm["verbose"] = True
    out = {**cfg, "admm": admm}
    if args.tag:
        out["run"] = {**cfg.get("run", {}), "tag": args.tag}
    return out


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    if args.list_configs:
        for p in list_available_configs():
            print(p)
        return 0
    if not args.config:
        print("error: --config is required", file=sys.stderr)
        return 2

    cfg = apply_overrides(load_config(resolve_config_path(args.config)), args)
    out = run(cfg)
    print(json.dumps({"run_dir": str(out["run_dir"]), **out["summary"]}, indent=2))
    return 0 if out["summary"]["exitflag"] >= 0 else 1


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main(sys.argv[1:]))
