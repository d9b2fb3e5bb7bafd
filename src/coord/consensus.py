"""Central consensus step shared by all partitions."""

from __future__ import annotations

import numpy as np


class ConsensusCoordinator:
    """Own the global consensus vector ``[threshold, weights]`` and its history.

    The coordinator is the single writer of the consensus vector. Partitions
    only ever receive copies through :meth:`broadcast`.
    """

    def __init__(self, p: int, npar: int) -> None:
        if p <= 0:
            raise ValueError("p must be positive")
        if npar <= 0:
            raise ValueError("npar must be positive")
        self._p = p
        self._npar = npar
        self._z = np.concatenate(([0.0], np.full(p, 1.0 / p)))
        self._x_blocks = np.zeros((p + 1, npar), dtype=float)
        self._u_blocks = np.zeros((p + 1, npar), dtype=float)
        self._snapshots: list[np.ndarray] = []

    @property
    def size(self) -> int:
        return self._p + 1

    @property
    def z(self) -> np.ndarray:
        return self._z.copy()

    def broadcast(self) -> np.ndarray:
        """Read-only copy of the consensus vector for the partitions."""

        out = self._z.copy()
        out.setflags(write=False)
        return out

    def gather(self, x_blocks: list[np.ndarray]) -> np.ndarray:
        """Average ``x_i + u_i`` over partitions and project the weights onto ``>= 0``.

        The threshold entry keeps its sign.
        """

        if len(x_blocks) != self._npar:
            raise ValueError(f"Expected {self._npar} contributions, got {len(x_blocks)}")
        for i, block in enumerate(x_blocks):
            self._x_blocks[:, i] = block
        z = np.mean(self._x_blocks + self._u_blocks, axis=1)
        z[1:] = np.maximum(z[1:], 0.0)
        self._z = z
        return self.broadcast()

    def record_u(self, index: int, u_block: np.ndarray) -> None:
        self._u_blocks[:, index] = u_block

    def snapshot(self) -> None:
        self._snapshots.append(self._z.copy())

    @property
    def snapshots(self) -> np.ndarray:
        """Consensus history with shape ``(k, p + 1)``."""

        if not self._snapshots:
            return np.zeros((0, self.size), dtype=float)
        return np.vstack(self._snapshots)
