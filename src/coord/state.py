"""Mutable per-partition ADMM state."""

from __future__ import annotations

from dataclasses import dataclass, field

import numpy as np
from scipy.linalg import lu_factor, lu_solve

from .errors import SingularSystemError
from .partition import PartitionProblem


@dataclass(slots=True)
class PartitionState:
    """Local iterates of one partition plus the cached factorisation of its KKT matrix.

    ``x``, ``z`` and ``u`` all have length ``problem.size``. The trailing
    ``p + 1`` entries of ``z`` mirror the global consensus vector after every
    :meth:`local_update`; the leading entries are partition-local slacks.
    """

    problem: PartitionProblem
    x: np.ndarray = field(init=False)
    z: np.ndarray = field(init=False)
    z_old: np.ndarray = field(init=False)
    u: np.ndarray = field(init=False)
    _lu: tuple[np.ndarray, np.ndarray] | None = field(init=False, default=None, repr=False)

    def __post_init__(self) -> None:
        size = self.problem.size
        p = self.problem.p
        self.x = np.zeros(size, dtype=float)
        self.z = np.zeros(size, dtype=float)
        self.z[-p:] = 1.0 / p
        self.z_old = self.z.copy()
        self.u = np.zeros(size, dtype=float)

    @property
    def shared(self) -> int:
        """Number of trailing entries shared through consensus."""

        return self.problem.p + 1

    def factorize(self) -> None:
        """LU-factorise the constant local KKT matrix once for repeated back-substitution."""

        lu, piv = lu_factor(self.problem.M, check_finite=True)
        diag = np.abs(np.diag(lu))
        threshold = np.finfo(float).eps * diag.shape[0] * max(float(diag.max(initial=0.0)), 1.0)
        bad = np.flatnonzero(~np.isfinite(diag) | (diag <= threshold))
        if bad.size:
            raise SingularSystemError(self.problem.index, int(bad[0]))
        self._lu = (lu, piv)

    def x_update(self, rho: float) -> np.ndarray:
        """Solve ``M x = [rho (z - u) - f; b]`` and return the shared block of ``x``."""

        if self._lu is None:
            self.factorize()
        rhs = np.concatenate((rho * (self.z - self.u) - self.problem.f, self.problem.b))
        sol = lu_solve(self._lu, rhs)
        self.x = sol[: self.problem.size]
        return self.x[-self.shared :].copy()

    def local_update(self, global_z: np.ndarray) -> np.ndarray:
        """Project local slacks, adopt the consensus block and take the scaled dual step.

        Returns the shared block of the updated ``u`` for the next consensus average.
        """

        k = self.shared
        self.z_old = self.z.copy()
        self.z[:-k] = np.maximum(self.x[:-k] + self.u[:-k], 0.0)
        self.z[-k:] = global_z
        self.u = self.u - self.z + self.x
        return self.u[-k:].copy()

    def diagnostics(self, global_z: np.ndarray) -> dict[str, float]:
        """Per-partition contributions to the objective and residual sums."""

        n_local = self.problem.n
        xmz = self.x - self.z
        zmz = self.z - self.z_old
        return {
            "fx": float(self.problem.f @ self.x),
            "x_sq": float(np.sum(self.x[n_local:] ** 2)),
            "z_sq": float(np.sum(np.asarray(global_z) ** 2)),
            "u_sq": float(np.sum(self.u**2)),
            "xmz_sq": float(xmz @ xmz),
            "zmz_sq": float(zmz @ zmz),
        }
