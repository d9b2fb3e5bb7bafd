"""Tests for the central consensus step."""

from __future__ import annotations

import numpy as np
import pytest

from coord.consensus import ConsensusCoordinator


def test_initial_consensus_is_uniform():
    coord = ConsensusCoordinator(p=4, npar=2)
    assert np.allclose(coord.z, [0.0, 0.25, 0.25, 0.25, 0.25])


def test_gather_averages_and_projects_weights_only():
    coord = ConsensusCoordinator(p=2, npar=2)
    coord.record_u(0, np.array([0.0, 0.1, 0.0]))
    coord.record_u(1, np.array([0.0, -0.1, 0.0]))
    z = coord.gather([np.array([-1.0, 0.6, -0.4]), np.array([-3.0, 0.4, 0.2])])
    # threshold keeps its sign, negative weights clipped
    assert z[0] == pytest.approx(-2.0)
    assert z[1] == pytest.approx(0.5)
    assert z[2] == 0.0


def test_broadcast_is_read_only():
    coord = ConsensusCoordinator(p=2, npar=1)
    z = coord.broadcast()
    with pytest.raises(ValueError):
        z[0] = 1.0


def test_gather_checks_contribution_count():
    coord = ConsensusCoordinator(p=2, npar=3)
    with pytest.raises(ValueError):
        coord.gather([np.zeros(3), np.zeros(3)])


def test_snapshots_append():
    coord = ConsensusCoordinator(p=2, npar=1)
    assert coord.snapshots.shape == (0, 3)
    coord.snapshot()
    coord.gather([np.array([1.0, 0.2, 0.8])])
    coord.snapshot()
    snaps = coord.snapshots
    assert snaps.shape == (2, 3)
    assert np.allclose(snaps[1], [1.0, 0.2, 0.8])
