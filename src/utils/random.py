"""Global random seed helpers."""

from __future__ import annotations

import os
import random

import numpy as np


def set_global_seed(seed: int) -> None:
    """Seed the stdlib and legacy numpy generators for reproducible runs."""

    if seed < 0:
        raise ValueError("Seed must be non-negative")

    random.seed(seed)
    np.random.seed(seed)
    os.environ["PYTHONHASHSEED"] = str(seed)


def seed_sequence(base_seed: int, count: int) -> list[int]:
    """Derive ``count`` reproducible child seeds from ``base_seed``."""

    if count < 0:
        raise ValueError("count must be non-negative")
    children = np.random.SeedSequence(base_seed).spawn(count)
    return [int(child.generate_state(1)[0]) for child in children]
