"""Tests for the oscillation scan and line-search refinement."""

from __future__ import annotations

import numpy as np
import pytest

from refine.linesearch import (
    ScanState,
    bisection_on_segment,
    find_oscillation,
    line_search,
    recent_window_points,
)
from refine.simplex import boundary_simplex, project_simplex

TOY_H = np.array([[1.0, 2.0, 3.0], [3.0, 2.0, 1.0]])


def ramp_weights(k: int) -> np.ndarray:
    t = np.arange(k, dtype=float)
    return np.column_stack((t, np.ones(k)))


def test_find_oscillation_locates_last_peak_trough_pair():
    k = 600
    s_norm = 1.0 + 0.5 * np.sin(2 * np.pi * np.arange(k) / 40.0)
    scan = find_oscillation(s_norm, ramp_weights(k))

    assert scan.state is ScanState.DONE
    # last trough at 590; after skipping back, the next opposite extremum is the peak at 530
    assert scan.end_index == 590
    assert scan.begin_index == 530
    assert np.allclose(scan.end, [590.0, 1.0])
    assert np.allclose(scan.begin, [530.0, 1.0])


def test_find_oscillation_fails_on_monotone_history():
    k = 600
    s_norm = np.linspace(1.0, 0.1, k)
    scan = find_oscillation(s_norm, ramp_weights(k))
    assert scan.state is ScanState.FAILED
    assert scan.begin is None


def test_find_oscillation_short_history_fails():
    assert find_oscillation(np.array([1.0, 0.5]), ramp_weights(2)).state is ScanState.FAILED


def test_recent_window_points_split_by_rank():
    k = 20
    s_norm = np.ones(k)
    s_norm[15:] = [0.5, 0.1, 0.9, 0.2, 0.7]
    begin, end = recent_window_points(s_norm, ramp_weights(k))
    # window of 5: best two are iterations 16 and 18, the rest 15, 17, 19
    assert np.allclose(begin, [17.0, 1.0])
    assert np.allclose(end, [17.0, 1.0])

    s_norm[15:] = [0.1, 0.2, 0.9, 0.8, 0.7]
    begin, end = recent_window_points(s_norm, ramp_weights(k))
    assert np.allclose(begin, [15.5, 1.0])
    assert np.allclose(end, [18.0, 1.0])


def test_recent_window_caps_at_history_length():
    begin, end = recent_window_points(np.array([0.3, 0.1, 0.2]), ramp_weights(3))
    assert np.allclose(begin, [1.0, 1.0])
    assert np.allclose(end, [1.0, 1.0])


def test_project_simplex():
    assert np.allclose(project_simplex(np.array([0.5, 0.5])), [0.5, 0.5])
    assert np.allclose(project_simplex(np.array([2.0, 0.0])), [1.0, 0.0])
    out = project_simplex(np.array([-1.0, 0.2, 0.3]))
    assert out.sum() == pytest.approx(1.0)
    assert np.all(out >= 0.0)
    assert out[0] == 0.0


def test_boundary_simplex_extends_to_faces():
    lo, hi = boundary_simplex(np.array([0.6, 0.4, 0.0]), np.array([0.4, 0.6, 0.0]))
    assert np.allclose(lo, [1.0, 0.0, 0.0])
    assert np.allclose(hi, [0.0, 1.0, 0.0])


def test_boundary_simplex_identical_points():
    lo, hi = boundary_simplex(np.array([0.2, 0.8]), np.array([0.2, 0.8]))
    assert np.allclose(lo, hi)


def test_bisection_finds_segment_minimum():
    a, rho, xi, fval = bisection_on_segment(TOY_H, 0.5, np.array([1.0, 0.0]), np.array([0.0, 1.0]))
    assert fval == pytest.approx(-2.0, abs=1e-6)
    assert np.allclose(a, [0.5, 0.5], atol=1e-4)
    assert rho == pytest.approx(2.0, abs=1e-4)
    assert np.all(xi <= 1e-4)


def test_line_search_adopts_only_improvements():
    k = 30
    weights = np.column_stack((np.linspace(1.0, 0.0, k), np.linspace(0.0, 1.0, k)))
    s_norm = np.abs(np.sin(np.arange(k)))
    report = line_search(TOY_H, 0.5, s_norm, weights, fval=-1.5, deep=False)
    assert report.strategy == "window"
    assert report.accepted
    assert report.fval == pytest.approx(-2.0, abs=1e-6)
    assert report.improvement == pytest.approx(0.5, abs=1e-6)

    rejected = line_search(TOY_H, 0.5, s_norm, weights, fval=-3.0, deep=False)
    assert not rejected.accepted
    assert rejected.fval == -3.0
    assert rejected.primal is None


def test_line_search_deep_failure_falls_back_to_window():
    k = 450
    weights = np.column_stack((np.linspace(1.0, 0.0, k), np.linspace(0.0, 1.0, k)))
    s_norm = np.linspace(1.0, 0.1, k)
    report = line_search(TOY_H, 0.5, s_norm, weights, fval=0.0, deep=True)
    assert report.deep_failed
    assert report.strategy == "window"
