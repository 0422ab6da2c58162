"""Configuration for the chain solver."""
from __future__ import annotations

from dataclasses import dataclass, fields
from typing import Any, Mapping

POLE_MODES = ("ignore", "side")


@dataclass(frozen=True)
class SolverConfig:
    """Tunable knobs of :class:`chain_ik.ik_solver.ChainSolver`.

    Attributes
    ----------
    side_step:
        Decrement of the effective-length search. Smaller steps give a
        tighter inner reach at the cost of more triangle checks per joint.
    tie_epsilon:
        The first intersection candidate wins only when it is closer to the
        continuity hint by more than this margin; otherwise the second wins.
    strict:
        Raise on degenerate geometry instead of clamping to a best-effort pose.
    pole_mode:
        ``"ignore"`` leaves the pole out of candidate selection.
        ``"side"`` prefers the candidate on the pole's side of the
        base-to-target axis.
    reach_tolerance:
        Allowed gap between a caller supplied reach and the chain's summed
        lengths before a warning is logged.
    length_tolerance:
        Largest accepted gap between a solved offset's magnitude and its
        segment length. Larger gaps are reported (or raised in strict mode).
    """

    side_step: float = 0.5
    tie_epsilon: float = 0.0
    strict: bool = False
    pole_mode: str = "ignore"
    reach_tolerance: float = 1e-6
    length_tolerance: float = 1e-6

    def __post_init__(self) -> None:
        if self.side_step <= 0:
            raise ValueError("side_step must be > 0")
        if self.tie_epsilon < 0:
            raise ValueError("tie_epsilon must be >= 0")
        if self.reach_tolerance < 0:
            raise ValueError("reach_tolerance must be >= 0")
        if self.length_tolerance < 0:
            raise ValueError("length_tolerance must be >= 0")
        if self.pole_mode not in POLE_MODES:
            raise ValueError(f"pole_mode must be one of {POLE_MODES}, got {self.pole_mode!r}")

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "SolverConfig":
        """Build a config from a plain mapping such as a parsed settings file."""
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ValueError(f"unknown solver config keys: {', '.join(unknown)}")
        return cls(**dict(data))


DEFAULT_CONFIG = SolverConfig()

__all__ = ["POLE_MODES", "SolverConfig", "DEFAULT_CONFIG"]
