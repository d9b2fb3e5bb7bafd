"""Configuration and output directory helpers.

Configs are YAML or JSON files, resolvable by name under ``config/``
(e.g. ``"demo"`` -> ``config/demo.yaml``). Missing sections are filled from
:data:`DEFAULT_CONFIG`.
"""

from __future__ import annotations

import copy
import json
from collections.abc import Mapping
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

import yaml

DEFAULT_CONFIG: dict[str, Any] = {
    "seed": 0,
    "problem": {"kind": "random", "p": 5, "n": 50, "offset": 0.0},
    "admm": {"D": 0.1},
    "reference": {"enabled": True, "backend": "scipy", "solver": "glpk", "options": {}},
    "run": {"base": "runs", "tag": None},
    "logging": {"level": "INFO", "log_file": "runner.log"},
    "plots": {"enabled": True},
}


def load_config(path: str | Path) -> dict[str, Any]:
    """Load a JSON or YAML configuration file.

    Parameters
    ----------
    path:
        Path or string pointing to a ``.json`` or ``.yaml``/``.yml`` file.

    Returns
    -------
    dict[str, Any]
        Parsed configuration dictionary. Empty configs yield an empty dict.

    Raises
    ------
    FileNotFoundError
        If the file does not exist.
    ValueError
        If the suffix is unsupported.
    """

    cfg_path = Path(path)
    if not cfg_path.exists():
        raise FileNotFoundError(f"Config file not found: {cfg_path}")

    suffix = cfg_path.suffix.lower()
    with cfg_path.open("r", encoding="utf-8") as handle:
        if suffix == ".json":
            data = json.load(handle)
            return data if isinstance(data, dict) else {}
        if suffix in {".yaml", ".yml"}:
            data = yaml.safe_load(handle)
            return data if isinstance(data, dict) else {}

    raise ValueError(f"Unsupported config format: {cfg_path.suffix}")


def with_defaults(cfg: Mapping[str, Any], defaults: Mapping[str, Any] = DEFAULT_CONFIG) -> dict[str, Any]:
    """Recursively overlay ``cfg`` on a copy of ``defaults``."""

    merged = copy.deepcopy(dict(defaults))
    for key, value in cfg.items():
        base = merged.get(key)
        if isinstance(base, Mapping) and isinstance(value, Mapping):
            merged[key] = with_defaults(value, base)
        else:
            merged[key] = copy.deepcopy(value)
    return merged


def ensure_run_dir(tag: str | None = None, base: str | Path = "runs") -> Path:
    """Create and return a run directory under ``base``.

    A UTC timestamp is used as the directory name when ``tag`` is omitted.
    """

    base_path = Path(base)
    base_path.mkdir(parents=True, exist_ok=True)

    slug = _slugify(tag) if tag else datetime.now(timezone.utc).strftime("%Y%m%dT%H%M%SZ")
    run_dir = base_path / slug
    run_dir.mkdir(parents=True, exist_ok=True)
    return run_dir


def _slugify(value: str) -> str:
    stripped = value.strip().replace(" ", "-")
    safe_chars = [c for c in stripped if c.isalnum() or c in {"-", "_"}]
    return "".join(safe_chars) or "run"


# --- Config discovery helpers ---

_CANDIDATE_DIRS = ("config",)
_CANDIDATE_EXTS = (".yaml", ".yml", ".json")


def resolve_config_path(spec: str | Path, search_dirs: tuple[str | Path, ...] = _CANDIDATE_DIRS) -> Path:
    """Resolve a config name or path to an existing file.

    An existing path is returned as is; otherwise each directory in
    ``search_dirs`` is searched, trying the known extensions when ``spec``
    has none.
    """

    p = Path(spec)
    if p.exists() and p.is_file():
        return p

    name = str(spec)
    names = [name] if Path(name).suffix else [name + ext for ext in _CANDIDATE_EXTS]

    for d in search_dirs:
        for n in names:
            cand = Path(d) / n
            if cand.exists() and cand.is_file():
                return cand

    raise FileNotFoundError(f"Could not resolve config '{spec}' in {[str(d) for d in search_dirs]}")


def list_available_configs(search_dirs: tuple[str | Path, ...] = _CANDIDATE_DIRS) -> list[Path]:
    """List YAML/JSON files under the config directories."""

    found: list[Path] = []
    for d in search_dirs:
        base = Path(d)
        if not base.is_dir():
            continue
        for ext in _CANDIDATE_EXTS:
            found.extend(sorted(base.glob(f"*{ext}")))
    return found
