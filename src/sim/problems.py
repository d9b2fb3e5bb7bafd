"""Problem matrices for experiments: synthetic, inline or loaded from CSV."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import numpy as np
import pandas as pd


def random_problem(p: int, n: int, seed: int = 0, offset: float = 0.0) -> np.ndarray:
    """Draw a ``(p, n)`` Gaussian constraint matrix, shifted by ``offset``."""

    if p <= 0 or n <= 0:
        raise ValueError("p and n must be positive")
    rng = np.random.default_rng(seed)
    return rng.normal(size=(p, n)) + float(offset)


def load_problem(cfg: dict[str, Any], seed: int = 0) -> np.ndarray:
    """Build ``H`` from the ``problem`` config section.

    ``kind`` selects ``random`` (``p``, ``n``, ``offset``), ``inline``
    (``matrix`` as nested lists) or ``csv`` (``path`` to a header-less file
    with one row per constraint).
    """

    kind = str(cfg.get("kind", "random")).lower()
    if kind == "random":
        return random_problem(
            int(cfg.get("p", 5)),
            int(cfg.get("n", 50)),
            seed=int(cfg.get("seed", seed)),
            offset=float(cfg.get("offset", 0.0)),
        )
    if kind == "inline":
        if "matrix" not in cfg:
            raise ValueError("Inline problem requires 'matrix'")
        H = np.asarray(cfg["matrix"], dtype=float)
    elif kind == "csv":
        if "path" not in cfg:
            raise ValueError("CSV problem requires 'path'")
        path = Path(cfg["path"])
        if not path.exists():
            raise FileNotFoundError(f"Problem file not found: {path}")
        H = pd.read_csv(path, header=None).to_numpy(dtype=float)
    else:
        raise ValueError(f"Unsupported problem kind: {kind}")

    if H.ndim != 2 or H.size == 0:
        raise ValueError("Problem matrix must be a non-empty 2D array")
    return H
