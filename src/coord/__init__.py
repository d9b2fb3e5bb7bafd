"""Partitioned consensus ADMM building blocks.

The solver loop itself lives in :mod:`coord.admm`.
"""

from .consensus import ConsensusCoordinator
from .errors import ADMMError, DualRecoveryError, SingularSystemError
from .partition import PartitionProblem, build_partitions, partition_indices
from .solution import DualSolution, PrimalSolution
from .state import PartitionState

__all__ = [
    "partition_indices",
    "build_partitions",
    "PartitionProblem",
    "PartitionState",
    "ConsensusCoordinator",
    "PrimalSolution",
    "DualSolution",
    "ADMMError",
    "SingularSystemError",
    "DualRecoveryError",
]
