"""Consensus ADMM for the partitioned soft-margin LP.

Solves::

    minimise   D * sum(xi) - rho
    subject to H^T a + xi >= rho,  sum(a) = 1,  a >= 0,  xi >= 0

by splitting the columns of ``H`` into ``npar`` partitions. Each partition
solves an unconstrained KKT system per iteration (map), the shared
``[rho, a]`` block is averaged and projected centrally (reduce) and the new
consensus value is sent back to every partition (broadcast).

Adapted from the scaled-form LP iteration of S. Boyd, N. Parikh, E. Chu,
B. Peleato and J. Eckstein (Distributed Optimization and Statistical Learning
via the Alternating Direction Method of Multipliers, ch. 5).
"""

from __future__ import annotations

import logging
from collections.abc import Iterator, Mapping
from concurrent.futures import ThreadPoolExecutor
from contextlib import contextmanager
from dataclasses import dataclass, field, fields
from enum import Enum
from typing import Any

import numpy as np
import pandas as pd

from eval.metrics import primal_objective, slack
from refine.kkt import recover_duals
from refine.linesearch import LineSearchReport, line_search

from .consensus import ConsensusCoordinator
from .partition import build_partitions
from .solution import DualSolution, PrimalSolution
from .state import PartitionState

logger = logging.getLogger(__name__)

_DEEP_SEARCH_MIN_ITERS = 400


@dataclass(slots=True)
class ADMMConfig:
    """Configuration for the consensus ADMM routine.

    ``verbose`` raises the per-iteration table from DEBUG to INFO on the
    ``coord.admm`` logger. Nothing is printed unless logging is configured
    (e.g. ``logging.basicConfig(level=logging.INFO)`` or
    :func:`utils.logging_utils.setup_structured_logging`), since Python's
    fallback handler only shows warnings.
    """

    D: float
    rho: float = 1.0
    eta: float = 0.999
    max_iters: int = 1000
    tol: float = 1e-4
    reltol: float = 1e-2
    npar: int = 1
    force_line_search: bool = False
    dual_required: bool = False
    verbose: bool = False
    seed: int = 0
    workers: int = 1

    def validate(self) -> None:
        """Raise ``ValueError`` on any precondition violation."""

        if np.ndim(self.D) != 0:
            raise ValueError("D must be scalar")
        if not 0 < float(self.D) <= 1:
            raise ValueError("D must lie in (0, 1]")
        if self.rho <= 0:
            raise ValueError("rho must be positive")
        # eta only matters for the accelerated variant; still validated
        if self.eta >= 1 or self.eta < 0.25:
            raise ValueError("eta must be less than, but close to 1")
        if self.max_iters < 1:
            raise ValueError("max_iters must be at least 1")
        if self.tol <= 0:
            raise ValueError("tol must be positive")
        if self.reltol < 0:
            raise ValueError("reltol must be non-negative")
        if self.npar < 1:
            raise ValueError("npar must be at least 1")
        if self.workers < 1:
            raise ValueError("workers must be at least 1")

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> ADMMConfig:
        """Build a config from a mapping such as the ``admm`` section of a YAML file."""

        known = {f.name for f in fields(cls)}
        unknown = set(data) - known
        if unknown:
            raise ValueError(f"Unknown ADMM options: {sorted(unknown)}")
        if "D" not in data:
            raise ValueError("ADMM config requires D")
        return cls(**dict(data))


class ADMMStatus(Enum):
    RUNNING = "running"
    CONVERGED = "converged"
    MAX_ITER_EXCEEDED = "max_iter_exceeded"


@dataclass
class ADMMHistory:
    """Append-only per-iteration diagnostics."""

    npar: int
    objval: list[float] = field(default_factory=list)
    r_norm: list[float] = field(default_factory=list)
    s_norm: list[float] = field(default_factory=list)
    eps_pri: list[float] = field(default_factory=list)
    eps_dual: list[float] = field(default_factory=list)
    partition_objval: list[list[float]] = field(default_factory=list)
    consensus: np.ndarray | None = None

    def __len__(self) -> int:
        return len(self.objval)

    def append(
        self,
        objval: float,
        r_norm: float,
        s_norm: float,
        eps_pri: float,
        eps_dual: float,
        partition_objval: list[float],
    ) -> None:
        self.objval.append(objval)
        self.r_norm.append(r_norm)
        self.s_norm.append(s_norm)
        self.eps_pri.append(eps_pri)
        self.eps_dual.append(eps_dual)
        self.partition_objval.append(partition_objval)

    @property
    def weights(self) -> np.ndarray:
        """Weight block of the consensus snapshots, shape ``(k, p)``."""

        if self.consensus is None:
            return np.zeros((0, 0), dtype=float)
        return self.consensus[:, 1:]

    def to_frame(self) -> pd.DataFrame:
        """Tabulate the history with one row per iteration (indexed from 1)."""

        frame = pd.DataFrame(
            {
                "objective": self.objval,
                "r_norm": self.r_norm,
                "eps_pri": self.eps_pri,
                "s_norm": self.s_norm,
                "eps_dual": self.eps_dual,
            },
            index=pd.RangeIndex(1, len(self) + 1, name="iter"),
        )
        if self.partition_objval:
            per_part = np.asarray(self.partition_objval, dtype=float)
            for i in range(per_part.shape[1]):
                frame[f"objective_part_{i}"] = per_part[:, i]
        if self.consensus is not None and len(self.consensus) == len(self):
            frame["threshold"] = self.consensus[:, 0]
            for j in range(self.consensus.shape[1] - 1):
                frame[f"a_{j}"] = self.consensus[:, j + 1]
        return frame


@dataclass
class ADMMLoopResult:
    status: ADMMStatus
    iterations: int
    z: np.ndarray
    history: ADMMHistory
    partitions: list[np.ndarray]


@dataclass
class ADMMResult:
    """Outcome of :func:`solve_lp_admm`."""

    primal: PrimalSolution
    dual: DualSolution | None
    fval: float
    fval_admm: float
    exitflag: int
    iterations: int
    status: ADMMStatus
    history: ADMMHistory
    line_search: LineSearchReport | None = None

    @property
    def converged(self) -> bool:
        return self.status is ADMMStatus.CONVERGED


@contextmanager
def _map_executor(workers: int) -> Iterator[ThreadPoolExecutor | None]:
    if workers <= 1:
        yield None
        return
    with ThreadPoolExecutor(max_workers=workers) as pool:
        yield pool


def _x_updates(
    pool: ThreadPoolExecutor | None, states: list[PartitionState], rho: float
) -> list[np.ndarray]:
    if pool is None:
        return [state.x_update(rho) for state in states]
    # map preserves partition order and re-raises worker exceptions
    return list(pool.map(lambda state: state.x_update(rho), states))


def run_admm(H: np.ndarray, config: ADMMConfig) -> ADMMLoopResult:
    """Run the consensus ADMM loop until convergence or ``max_iters``.

    Parameters
    ----------
    H:
        Constraint matrix of shape ``(p, n)``.
    config:
        Solver configuration; validated before any work is done.

    Returns
    -------
    ADMMLoopResult
        Final status, iteration count, consensus vector ``[rho, a]``, the
        diagnostics history and the column indices of every partition.
    """

    config.validate()
    H = np.asarray(H, dtype=float)
    if H.ndim != 2:
        raise ValueError("H must be a two-dimensional matrix")
    p, n = H.shape
    rho = float(config.rho)

    problems = build_partitions(H, float(config.D), rho, config.npar, seed=config.seed)
    states = [PartitionState(problem) for problem in problems]
    for state in states:
        state.factorize()

    coordinator = ConsensusCoordinator(p, config.npar)
    history = ADMMHistory(npar=config.npar)
    log = logger.info if config.verbose else logger.debug
    log("%4s | %10s | %10s | %10s | %10s | %10s", "iter", "r norm", "eps pri", "s norm", "eps dual", "objective")

    status = ADMMStatus.RUNNING
    sqrt_shared = np.sqrt(p + 1)
    with _map_executor(config.workers) as pool:
        for k in range(1, config.max_iters + 1):
            x_blocks = _x_updates(pool, states, rho)

            gl_z = coordinator.gather(x_blocks)
            for state in states:
                coordinator.record_u(state.problem.index, state.local_update(gl_z))
            coordinator.snapshot()

            diags = [state.diagnostics(gl_z) for state in states]
            totals = {key: sum(d[key] for d in diags) for key in diags[0]}

            objval = totals["fx"] / n
            r_norm = float(np.sqrt(totals["xmz_sq"]))
            s_norm = float(rho * np.sqrt(totals["zmz_sq"]))
            eps_pri = float(
                sqrt_shared * config.tol
                + config.reltol * max(np.sqrt(totals["x_sq"]), np.sqrt(totals["z_sq"]))
            )
            eps_dual = float(sqrt_shared * config.tol + config.reltol * rho * np.sqrt(totals["u_sq"]))
            history.append(objval, r_norm, s_norm, eps_pri, eps_dual, [d["fx"] for d in diags])

            log("%4d | %10.4f | %10.4f | %10.4f | %10.4f | %10.2f", k, r_norm, eps_pri, s_norm, eps_dual, objval)

            if r_norm < eps_pri and s_norm < eps_dual:
                status = ADMMStatus.CONVERGED
                break
        else:
            status = ADMMStatus.MAX_ITER_EXCEEDED

    history.consensus = coordinator.snapshots
    return ADMMLoopResult(
        status=status,
        iterations=len(history),
        z=coordinator.z,
        history=history,
        partitions=[problem.columns for problem in problems],
    )


def solve_lp_admm(H: np.ndarray, config: ADMMConfig) -> ADMMResult:
    """Solve the LP with consensus ADMM, refine by line search and optionally recover duals.

    The exit flag is ``1`` on convergence, ``0`` when ``max_iters`` is
    reached and ``-1`` when it is reached and the oscillation scan over the
    residual history failed.
    """

    H = np.asarray(H, dtype=float)
    D = float(config.D)
    loop = run_admm(H, config)
    k = loop.iterations
    history = loop.history

    threshold = float(loop.z[0])
    weights = loop.z[1:].copy()
    fval_admm = primal_objective(H, D, weights, threshold)
    fval = fval_admm
    primal = PrimalSolution(a=weights, rho=threshold, xi=slack(H, weights, threshold))

    exceeded = loop.status is ADMMStatus.MAX_ITER_EXCEEDED
    exitflag = 0 if exceeded else 1
    report: LineSearchReport | None = None

    if exceeded or config.force_line_search:
        deep = (exceeded and config.max_iters > _DEEP_SEARCH_MIN_ITERS) or (
            config.force_line_search and k > _DEEP_SEARCH_MIN_ITERS
        )
        report = line_search(H, D, history.s_norm, history.weights, fval_admm, deep=deep)
        if report.deep_failed and exceeded:
            exitflag = -1
        if report.accepted and report.primal is not None:
            primal = report.primal
            fval = report.fval

    improvement = report.improvement if report is not None else 0.0
    logger.info(
        "num iter: %d | fpval: %.7f | rho: %.7f | ls: %.7f",
        k,
        fval,
        primal.rho,
        improvement,
    )

    dual = recover_duals(H, D, primal, fval) if config.dual_required else None

    return ADMMResult(
        primal=primal,
        dual=dual,
        fval=fval,
        fval_admm=fval_admm,
        exitflag=exitflag,
        iterations=k,
        status=loop.status,
        history=history,
        line_search=report,
    )
