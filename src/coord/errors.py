"""Exceptions raised by the consensus ADMM solver."""

from __future__ import annotations


class ADMMError(RuntimeError):
    """Base class for fatal solver failures."""


class SingularSystemError(ADMMError):
    """A partition's local KKT matrix could not be factorised."""

    def __init__(self, partition: int, pivot: int) -> None:
        super().__init__(
            f"Local system of partition {partition} is singular (zero pivot at row {pivot})"
        )
        self.partition = partition
        self.pivot = pivot


class DualRecoveryError(ADMMError):
    """The KKT dual system has more unknowns than active constraints."""

    def __init__(self, required: int, available: int) -> None:
        super().__init__(
            "KKT dual solve failure - more indices to be determined than "
            f"constraints ({required} > {available})"
        )
        self.required = required
        self.available = available
