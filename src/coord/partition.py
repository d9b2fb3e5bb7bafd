"""Column partitioning and per-partition local problem construction.

Each partition owns a disjoint block of the columns of ``H`` and a local
equality-constrained QP over ``[xi, s, threshold, weights]``::

    xi - s - threshold + H_i^T a = 0
    sum(a) = 1

The trailing ``p + 1`` entries (threshold and weights) are shared across
partitions through the consensus vector.
"""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np


@dataclass(frozen=True)
class PartitionProblem:
    """Immutable local data for one partition."""

    index: int
    columns: np.ndarray
    H: np.ndarray
    f: np.ndarray
    A: np.ndarray
    b: np.ndarray
    M: np.ndarray

    @property
    def n(self) -> int:
        return int(self.columns.shape[0])

    @property
    def p(self) -> int:
        return int(self.H.shape[0])

    @property
    def size(self) -> int:
        """Length of the local primal vector (``2 n_i + p + 1``)."""

        return 2 * self.n + self.p + 1


def partition_indices(n: int, npar: int, seed: int = 0) -> list[np.ndarray]:
    """Randomly split ``range(n)`` into ``npar`` blocks of near-equal size.

    Block sizes differ by at most one. Both the column permutation and the
    choice of which blocks receive the remainder come from a generator seeded
    with ``seed``, so repeated calls are identical.
    """

    if npar < 1:
        raise ValueError("npar must be at least 1")
    if npar > n:
        raise ValueError(f"npar ({npar}) cannot exceed the number of columns ({n})")

    rng = np.random.default_rng(seed)
    order = rng.permutation(n)

    base, extra = divmod(n, npar)
    sizes = np.full(npar, base, dtype=int)
    sizes[:extra] += 1
    sizes = sizes[rng.permutation(npar)]

    bounds = np.concatenate(([0], np.cumsum(sizes)))
    return [np.sort(order[bounds[i] : bounds[i + 1]]) for i in range(npar)]


def local_objective(n_total: int, n_local: int, p: int, D: float) -> np.ndarray:
    """Local objective ``[n D 1; 0; -n_i; 0_p]``; partial sums add up to ``n`` times the LP objective."""

    return np.concatenate(
        (
            np.full(n_local, n_total * D, dtype=float),
            np.zeros(n_local, dtype=float),
            [-float(n_local)],
            np.zeros(p, dtype=float),
        )
    )


def local_constraints(H_local: np.ndarray) -> tuple[np.ndarray, np.ndarray]:
    """Return the local equality operator ``A_i`` and right-hand side ``b_i``."""

    p, n_local = H_local.shape
    size = 2 * n_local + p + 1

    A = np.zeros((n_local + 1, size), dtype=float)
    eye = np.eye(n_local)
    A[:n_local, :n_local] = eye
    A[:n_local, n_local : 2 * n_local] = -eye
    A[:n_local, 2 * n_local] = -1.0
    A[:n_local, 2 * n_local + 1 :] = H_local.T
    # weights sum to one; slack and threshold columns stay zero
    A[n_local, 2 * n_local + 1 :] = 1.0

    b = np.zeros(n_local + 1, dtype=float)
    b[-1] = 1.0
    return A, b


def kkt_matrix(A: np.ndarray, rho: float) -> np.ndarray:
    """Augmented KKT matrix ``[[rho I, A^T], [A, 0]]``."""

    m, size = A.shape
    return np.block(
        [
            [rho * np.eye(size), A.T],
            [A, np.zeros((m, m))],
        ]
    )


def build_partitions(
    H: np.ndarray,
    D: float,
    rho: float,
    npar: int,
    seed: int = 0,
) -> list[PartitionProblem]:
    """Split ``H`` column-wise and assemble the local QP data of every partition.

    Parameters
    ----------
    H:
        Constraint matrix of shape ``(p, n)``.
    D:
        Box bound on the dual variables.
    rho:
        ADMM penalty parameter used in each local KKT matrix.
    npar:
        Number of partitions to simulate.
    seed:
        Seed of the column permutation.

    Returns
    -------
    list[PartitionProblem]
        One entry per partition, in partition order.
    """

    H = np.asarray(H, dtype=float)
    if H.ndim != 2:
        raise ValueError("H must be a two-dimensional matrix")
    p, n = H.shape

    problems: list[PartitionProblem] = []
    for index, columns in enumerate(partition_indices(n, npar, seed)):
        H_local = H[:, columns]
        A, b = local_constraints(H_local)
        problems.append(
            PartitionProblem(
                index=index,
                columns=columns,
                H=H_local,
                f=local_objective(n, columns.shape[0], p, D),
                A=A,
                b=b,
                M=kkt_matrix(A, rho),
            )
        )
    return problems
