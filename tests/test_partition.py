"""Tests for column partitioning and local problem assembly."""

from __future__ import annotations

import numpy as np
import pytest

from coord.partition import build_partitions, kkt_matrix, local_constraints, partition_indices


def test_partition_sizes_and_cover():
    blocks = partition_indices(7, 3, seed=0)
    assert sorted(len(b) for b in blocks) == [2, 2, 3]
    merged = np.concatenate(blocks)
    assert sorted(merged.tolist()) == list(range(7))
    assert len(set(merged.tolist())) == 7


def test_partition_is_seeded():
    first = partition_indices(20, 4, seed=3)
    second = partition_indices(20, 4, seed=3)
    for a, b in zip(first, second):
        assert np.array_equal(a, b)


def test_partition_rejects_bad_counts():
    with pytest.raises(ValueError):
        partition_indices(5, 0)
    with pytest.raises(ValueError):
        partition_indices(3, 4)


def test_local_constraints_layout():
    H_local = np.array([[1.0, 2.0], [3.0, 4.0], [5.0, 6.0]])
    A, b = local_constraints(H_local)
    # two slack-split rows plus the weight-sum row, over [xi(2), s(2), rho, a(3)]
    assert A.shape == (3, 8)
    assert np.array_equal(A[0], [1, 0, -1, 0, -1, 1, 3, 5])
    assert np.array_equal(A[1], [0, 1, 0, -1, -1, 2, 4, 6])
    assert np.array_equal(A[2], [0, 0, 0, 0, 0, 1, 1, 1])
    assert np.array_equal(b, [0.0, 0.0, 1.0])


def test_kkt_matrix_blocks():
    A = np.array([[1.0, -1.0, 2.0]])
    M = kkt_matrix(A, rho=2.5)
    assert M.shape == (4, 4)
    assert np.allclose(M[:3, :3], 2.5 * np.eye(3))
    assert np.allclose(M[:3, 3], A[0])
    assert np.allclose(M[3, :3], A[0])
    assert M[3, 3] == 0.0


def test_build_partitions_objectives_sum_to_global():
    rng = np.random.default_rng(1)
    H = rng.normal(size=(3, 10))
    D = 0.2
    parts = build_partitions(H, D, rho=1.0, npar=3)

    assert sum(part.n for part in parts) == 10
    for part in parts:
        assert part.size == 2 * part.n + 3 + 1
        assert part.f.shape == (part.size,)
        assert part.M.shape == (part.size + part.n + 1, part.size + part.n + 1)
        assert np.allclose(part.f[: part.n], 10 * D)
        assert np.allclose(part.H, H[:, part.columns])
    # threshold coefficients add up to -n, i.e. -1 after the global 1/n scaling
    assert sum(part.f[2 * part.n] for part in parts) == pytest.approx(-10.0)
