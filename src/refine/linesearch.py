"""Line-search fallback for ADMM runs that oscillate instead of converging.

Two reference points are picked from the consensus weight history, either
around the most recent peak/trough pair of the dual residual (deep history)
or from the best and worst halves of a recent window. The segment through
them is stretched to the simplex boundary and the true LP objective is
minimised along it by bisection. This is a heuristic: it assumes the
iterates oscillate around the optimum and gives no optimality guarantee.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum

import numpy as np

from coord.solution import PrimalSolution
from eval.metrics import optimal_threshold, primal_objective, slack

from .simplex import boundary_simplex

logger = logging.getLogger(__name__)

_MIN_SEGMENT = 1e-4


class ScanState(Enum):
    SEARCHING_FIRST_EXTREMUM = "searching_first"
    SEARCHING_SECOND_EXTREMUM = "searching_second"
    DONE = "done"
    FAILED = "failed"


@dataclass(slots=True)
class OscillationScan:
    state: ScanState
    begin: np.ndarray | None = None
    end: np.ndarray | None = None
    begin_index: int | None = None
    end_index: int | None = None


@dataclass(slots=True)
class LineSearchReport:
    strategy: str
    deep_failed: bool
    begin: np.ndarray
    end: np.ndarray
    fval: float
    accepted: bool = False
    improvement: float = 0.0
    primal: PrimalSolution | None = None


def _local_mean(weights: np.ndarray, center: int, span: int) -> np.ndarray:
    lo = max(center - span, 0)
    hi = min(center + span + 1, weights.shape[0])
    return weights[lo:hi].mean(axis=0)


def find_oscillation(
    s_norm: np.ndarray,
    weights: np.ndarray,
    *,
    span: int = 5,
    max_window: int = 500,
) -> OscillationScan:
    """Scan the dual residual backwards for the most recent peak/trough pair.

    Only the last ``min(2k/3, max_window)`` iterations are searched. Each
    reference point is the mean of the weight snapshots within ``span``
    iterations of the detected extremum. After the first extremum the
    pointer skips back a tenth of the window before looking for an extremum
    of the opposite kind.
    """

    s = np.asarray(s_norm, dtype=float)
    weights = np.asarray(weights, dtype=float)
    k = s.shape[0]
    rising = np.diff(s) > 0
    if rising.shape[0] < 2:
        return OscillationScan(ScanState.FAILED)

    window = int(min(2 * k / 3, max_window))
    floor = max(k - 1 - window, 0)
    skip = max(window // 10, 1)

    scan = OscillationScan(ScanState.SEARCHING_FIRST_EXTREMUM)
    ptr = rising.shape[0] - 2
    prv = bool(rising[ptr + 1])
    first_kind = prv

    while scan.state in (ScanState.SEARCHING_FIRST_EXTREMUM, ScanState.SEARCHING_SECOND_EXTREMUM):
        if bool(rising[ptr]) != prv:
            # s[ptr + 1] is a local extremum
            if scan.state is ScanState.SEARCHING_FIRST_EXTREMUM:
                scan.end = _local_mean(weights, ptr + 1, span)
                scan.end_index = ptr + 1
                first_kind = prv
                scan.state = ScanState.SEARCHING_SECOND_EXTREMUM
                ptr -= skip
            elif first_kind != prv:
                scan.begin = _local_mean(weights, ptr + 1, span)
                scan.begin_index = ptr + 1
                scan.state = ScanState.DONE
                break
        if ptr <= floor:
            scan.state = ScanState.FAILED
            break
        prv = bool(rising[ptr])
        ptr -= 1

    return scan


def recent_window_points(s_norm: np.ndarray, weights: np.ndarray) -> tuple[np.ndarray, np.ndarray]:
    """Average the weights of the better and worse halves of a recent window.

    The window holds the last ``round(clamp(k/5, 5, 50))`` iterations (at
    most ``k``), ranked by dual residual.
    """

    s = np.asarray(s_norm, dtype=float)
    weights = np.asarray(weights, dtype=float)
    k = s.shape[0]
    if k == 0:
        raise ValueError("Empty residual history")

    width = int(np.floor(max(5.0, min(k / 5.0, 50.0)) + 0.5))
    width = min(width, k)
    idx = np.arange(k - width, k)
    order = idx[np.argsort(s[idx], kind="stable")]
    half = width // 2
    if half == 0:
        point = weights[idx].mean(axis=0)
        return point, point.copy()
    return weights[order[:half]].mean(axis=0), weights[order[half:]].mean(axis=0)


def _segment_value(H: np.ndarray, D: float, begin: np.ndarray, end: np.ndarray, t: float) -> float:
    a = (1.0 - t) * begin + t * end
    return primal_objective(H, D, a, optimal_threshold(H, D, a))


def bisection_on_segment(
    H: np.ndarray,
    D: float,
    begin: np.ndarray,
    end: np.ndarray,
    *,
    max_iter: int = 60,
    tol: float = 1e-10,
) -> tuple[np.ndarray, float, np.ndarray, float]:
    """Minimise the LP objective over weights on the segment ``[begin, end]``.

    For every candidate weight vector the threshold is chosen optimally, which
    makes the restricted objective convex in the segment parameter ``t``; the
    sign of its slope drives the bisection. Returns ``(a, rho, xi, fval)``.
    """

    begin = np.asarray(begin, dtype=float)
    end = np.asarray(end, dtype=float)
    lo, hi = 0.0, 1.0
    for _ in range(max_iter):
        if hi - lo < tol:
            break
        mid = 0.5 * (lo + hi)
        h = min(1e-7, 0.25 * (hi - lo))
        slope = _segment_value(H, D, begin, end, mid + h) - _segment_value(H, D, begin, end, mid - h)
        if slope > 0:
            hi = mid
        elif slope < 0:
            lo = mid
        else:
            lo = hi = mid
            break

    candidates = (0.0, 0.5 * (lo + hi), 1.0)
    values = [_segment_value(H, D, begin, end, t) for t in candidates]
    best = candidates[int(np.argmin(values))]
    a = (1.0 - best) * begin + best * end
    rho = optimal_threshold(H, D, a)
    return a, rho, slack(H, a, rho), float(min(values))


def line_search(
    H: np.ndarray,
    D: float,
    s_norm: list[float] | np.ndarray,
    weights: np.ndarray,
    fval: float,
    *,
    deep: bool,
) -> LineSearchReport:
    """Pick reference points from the history and refine the solution along their segment.

    Parameters
    ----------
    H, D:
        Problem data.
    s_norm:
        Dual residual per iteration.
    weights:
        Consensus weight snapshots, shape ``(k, p)``.
    fval:
        Objective at the ADMM consensus point; a refined point is adopted only
        if it does not exceed this value.
    deep:
        Try the oscillation scan first (long runs); falls back to the recent
        window strategy when the scan fails.
    """

    s = np.asarray(s_norm, dtype=float)
    weights = np.asarray(weights, dtype=float)

    strategy = "window"
    deep_failed = False
    points: tuple[np.ndarray, np.ndarray] | None = None
    if deep:
        scan = find_oscillation(s, weights)
        if scan.state is ScanState.DONE:
            strategy = "oscillation"
            points = (scan.begin, scan.end)
        else:
            deep_failed = True
            logger.info("No oscillation found in residual history; using recent window")
    if points is None:
        points = recent_window_points(s, weights)

    begin, end = points
    report = LineSearchReport(strategy=strategy, deep_failed=deep_failed, begin=begin, end=end, fval=fval)
    if np.linalg.norm(begin - end) <= _MIN_SEGMENT:
        return report

    lo, hi = boundary_simplex(begin, end)
    a, rho, xi, refined = bisection_on_segment(H, D, lo, hi)
    logger.debug("Line search (%s) | admm=%.7f | refined=%.7f", strategy, fval, refined)
    if refined <= fval:
        report.accepted = True
        report.improvement = fval - refined
        report.fval = refined
        report.primal = PrimalSolution(a=a, rho=rho, xi=xi)
    return report
