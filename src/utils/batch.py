"""Batch execution helpers for solving several seeded problems."""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from pathlib import Path
from typing import Any

import pandas as pd

logger = logging.getLogger(__name__)


def run_batch(
    solve: Callable[[int], dict[str, Any]],
    seeds: Sequence[int],
    run_dir: Path,
    *,
    filename: str = "batch.csv",
) -> pd.DataFrame:
    """Call ``solve`` once per seed and collect the returned records in ``run_dir / filename``."""

    records: list[dict[str, Any]] = []
    run_dir.mkdir(parents=True, exist_ok=True)
    for seed in seeds:
        record = {"seed": int(seed), **solve(int(seed))}
        logger.info("Batch seed %d done", int(seed))
        records.append(record)
    frame = pd.DataFrame(records)
    frame.to_csv(run_dir / filename, index=False)
    return frame
