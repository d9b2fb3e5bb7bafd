"""Visualization functions for ADMM diagnostics."""

from __future__ import annotations

from pathlib import Path

import matplotlib.pyplot as plt
import numpy as np
import pandas as pd


def plot_convergence(hist: pd.DataFrame, out: Path) -> None:
    """Plot primal/dual residuals against their thresholds, plus the objective."""

    required = {"r_norm", "s_norm", "eps_pri", "eps_dual", "objective"}
    if not required.issubset(hist.columns):
        missing = required - set(hist.columns)
        raise ValueError(f"History missing columns: {missing}")

    fig, axes = plt.subplots(1, 3, figsize=(12, 4))
    axes[0].plot(hist.index, hist["r_norm"], label="r norm")
    axes[0].plot(hist.index, hist["eps_pri"], "k--", label="eps pri")
    axes[1].plot(hist.index, hist["s_norm"], label="s norm")
    axes[1].plot(hist.index, hist["eps_dual"], "k--", label="eps dual")
    axes[2].plot(hist.index, hist["objective"], label="objective")

    for ax, title in zip(axes, ("primal", "dual", "objective")):
        if title != "objective":
            ax.set_yscale("log")
        ax.set_xlabel("iteration")
        ax.set_title(title)
        ax.grid(True, linestyle="--", alpha=0.4)
        ax.legend()
    fig.tight_layout()

    out = Path(out)
    out.parent.mkdir(parents=True, exist_ok=True)
    fig.savefig(out)
    plt.close(fig)


def plot_weights(weights: np.ndarray, out: Path, reference: np.ndarray | None = None) -> None:
    """Bar chart of the final weight vector, optionally next to reference weights."""

    w = np.asarray(weights, dtype=float)
    if w.ndim != 1 or w.size == 0:
        raise ValueError("weights must be a non-empty 1D array")

    fig, ax = plt.subplots(figsize=(8, 4))
    idx = np.arange(w.size)
    width = 0.4 if reference is not None else 0.8
    ax.bar(idx, w, width=width, label="admm")
    if reference is not None:
        ax.bar(idx + width, np.asarray(reference, dtype=float), width=width, label="reference")
        ax.legend()
    ax.set_xlabel("feature")
    ax.set_ylabel("weight")
    ax.grid(True, linestyle="--", alpha=0.4, axis="y")
    fig.tight_layout()

    out = Path(out)
    out.parent.mkdir(parents=True, exist_ok=True)
    fig.savefig(out)
    plt.close(fig)
