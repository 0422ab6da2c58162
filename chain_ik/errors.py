"""Exception hierarchy for the chain IK solver."""
from __future__ import annotations


class ChainIKError(ValueError):
    """Base class for every error raised by :mod:`chain_ik`."""


class InvalidChainError(ChainIKError):
    """Raised when a chain is empty or holds a non-positive segment length."""


class ContinuityLengthMismatchError(ChainIKError):
    """Raised when the continuity hint does not have one vector per segment."""


class DegenerateVectorError(ChainIKError):
    """Raised in strict mode when a direction is taken from a zero-length vector."""


class InfeasibleSubchainError(ChainIKError):
    """Raised in strict mode when no effective inner length forms a triangle."""


class InfeasibleIntersectionError(ChainIKError):
    """Raised in strict mode when two circles do not intersect."""


__all__ = [
    "ChainIKError",
    "InvalidChainError",
    "ContinuityLengthMismatchError",
    "DegenerateVectorError",
    "InfeasibleSubchainError",
    "InfeasibleIntersectionError",
]
