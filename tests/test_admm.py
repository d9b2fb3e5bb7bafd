"""Tests for the consensus ADMM solver."""

from __future__ import annotations

import logging

import numpy as np
import pytest

from coord.admm import ADMMConfig, ADMMStatus, run_admm, solve_lp_admm
from opt.lp import solve_reference_lp
from refine import linesearch
from refine.linesearch import OscillationScan, ScanState
from sim.problems import random_problem

TOY_H = np.array([[1.0, 2.0, 3.0], [3.0, 2.0, 1.0]])


def toy_config(**overrides) -> ADMMConfig:
    params = dict(D=0.5, rho=1.0, eta=0.999, max_iters=200, tol=1e-6, reltol=1e-4, npar=1)
    params.update(overrides)
    return ADMMConfig(**params)


def test_single_partition_converges_to_lp_optimum():
    result = solve_lp_admm(TOY_H, toy_config())

    assert result.exitflag == 1
    assert result.status is ADMMStatus.CONVERGED
    a = result.primal.a
    assert a.sum() == pytest.approx(1.0, abs=1e-3)
    assert np.all(a >= 0.0)
    assert np.all(a <= 0.5 + 1e-3)

    reference = solve_reference_lp(TOY_H, 0.5)
    assert result.fval == pytest.approx(-reference.beta, abs=1e-3)
    assert result.fval == pytest.approx(-2.0, abs=1e-3)


@pytest.mark.parametrize("npar", [2, 3])
def test_partitioned_run_matches_reference(npar):
    H = random_problem(4, 60, seed=1, offset=0.5)
    cfg = ADMMConfig(D=0.1, npar=npar, max_iters=10000, tol=1e-6, reltol=1e-4)
    result = solve_lp_admm(H, cfg)

    assert result.exitflag == 1
    assert result.primal.a.sum() == pytest.approx(1.0, abs=1e-3)
    assert result.fval == pytest.approx(-solve_reference_lp(H, 0.1).beta, abs=1e-3)


def test_weights_stay_nonnegative_every_iteration():
    H = random_problem(3, 12, seed=3)
    loop = run_admm(H, ADMMConfig(D=0.25, npar=3, max_iters=150))
    weights = loop.history.weights
    assert weights.shape == (loop.iterations, 3)
    assert np.all(weights >= -1e-12)


def test_primal_residual_reaches_threshold():
    H = random_problem(2, 10, seed=11)
    cfg = ADMMConfig(D=0.2, rho=1.0, max_iters=500, tol=1e-4, reltol=1e-2, npar=2)
    loop = run_admm(H, cfg)
    r_norm = np.asarray(loop.history.r_norm)
    eps_pri = np.asarray(loop.history.eps_pri)
    assert np.any(r_norm < eps_pri)


def test_repeated_runs_are_identical():
    H = random_problem(4, 30, seed=5)
    cfg = ADMMConfig(D=0.1, npar=3, max_iters=120, seed=9)
    first = solve_lp_admm(H, cfg)
    second = solve_lp_admm(H, cfg)
    assert first.iterations == second.iterations
    assert np.allclose(first.primal.a, second.primal.a, atol=1e-12)
    assert first.primal.rho == pytest.approx(second.primal.rho, abs=1e-12)


def test_threaded_map_matches_serial():
    H = random_problem(4, 40, seed=2)
    serial = run_admm(H, ADMMConfig(D=0.1, npar=4, max_iters=60))
    threaded = run_admm(H, ADMMConfig(D=0.1, npar=4, max_iters=60, workers=3))
    assert np.allclose(serial.z, threaded.z, atol=1e-12)
    assert serial.history.r_norm == pytest.approx(threaded.history.r_norm)


def test_partitions_cover_all_columns():
    H = random_problem(2, 7, seed=0)
    loop = run_admm(H, ADMMConfig(D=0.5, npar=3, max_iters=5))
    sizes = sorted(len(cols) for cols in loop.partitions)
    assert sizes == [2, 2, 3]
    assert sorted(np.concatenate(loop.partitions).tolist()) == list(range(7))


def test_iteration_limit_triggers_line_search():
    H = random_problem(5, 60, seed=4)
    cfg = ADMMConfig(D=0.1, max_iters=50, tol=1e-10, reltol=1e-10, npar=2)
    result = solve_lp_admm(H, cfg)

    assert result.exitflag == 0
    assert result.status is ADMMStatus.MAX_ITER_EXCEEDED
    assert result.iterations == 50
    assert result.line_search is not None
    assert result.line_search.strategy == "window"
    assert result.fval <= result.fval_admm


def test_failed_oscillation_scan_reports_minus_one(monkeypatch):
    monkeypatch.setattr(linesearch, "find_oscillation", lambda s, w: OscillationScan(ScanState.FAILED))
    H = random_problem(6, 120, seed=4)
    cfg = ADMMConfig(D=0.05, max_iters=401, tol=1e-300, reltol=0.0, npar=3)
    result = solve_lp_admm(H, cfg)

    assert result.status is ADMMStatus.MAX_ITER_EXCEEDED
    assert result.exitflag == -1
    assert result.line_search.deep_failed
    assert result.line_search.strategy == "window"
    assert result.fval <= result.fval_admm


def test_forced_line_search_keeps_converged_flag():
    result = solve_lp_admm(TOY_H, toy_config(force_line_search=True))
    assert result.exitflag == 1
    assert result.line_search is not None
    assert result.fval <= result.fval_admm


def test_dual_recovery_on_request():
    result = solve_lp_admm(TOY_H, toy_config(dual_required=True))
    assert result.dual is not None
    assert result.dual.beta == pytest.approx(-result.fval)
    assert np.all(result.dual.u >= 0.0)
    assert result.dual.u.sum() == pytest.approx(1.0, abs=1e-3)


def test_dual_omitted_by_default():
    assert solve_lp_admm(TOY_H, toy_config()).dual is None


def test_history_frame_has_one_row_per_iteration():
    H = random_problem(3, 20, seed=8)
    result = solve_lp_admm(H, ADMMConfig(D=0.1, npar=2, max_iters=30))
    frame = result.history.to_frame()
    assert len(frame) == result.iterations
    assert frame.index.name == "iter"
    assert {"r_norm", "s_norm", "eps_pri", "eps_dual", "objective", "threshold"}.issubset(frame.columns)
    assert {"objective_part_0", "objective_part_1", "a_0", "a_2"}.issubset(frame.columns)


def test_verbose_logs_each_iteration(caplog):
    caplog.set_level(logging.INFO, logger="coord.admm")
    run_admm(TOY_H, toy_config(max_iters=3, verbose=True))
    lines = [r.getMessage() for r in caplog.records if r.name == "coord.admm"]
    assert "r norm" in lines[0]
    assert len(lines) == 4


@pytest.mark.parametrize(
    "overrides",
    [
        {"D": np.array([0.5, 0.5])},
        {"D": 0.0},
        {"eta": 1.0},
        {"eta": 0.1},
        {"rho": -1.0},
        {"npar": 0},
        {"max_iters": 0},
    ],
)
def test_invalid_config_raises(overrides):
    with pytest.raises(ValueError):
        run_admm(TOY_H, toy_config(**overrides))


def test_config_from_dict_rejects_unknown_keys():
    cfg = ADMMConfig.from_dict({"D": 0.2, "npar": 2})
    assert cfg.npar == 2
    with pytest.raises(ValueError):
        ADMMConfig.from_dict({"D": 0.2, "alpha": 1.5})
    with pytest.raises(ValueError):
        ADMMConfig.from_dict({"rho": 1.0})


def test_quiet_run_keeps_iteration_table_at_debug(caplog):
    caplog.set_level(logging.INFO, logger="coord.admm")
    run_admm(TOY_H, toy_config(max_iters=3))
    assert not [r for r in caplog.records if r.name == "coord.admm"]
