"""Chain inverse kinematics by successive circle intersections.

The solver walks a planar chain from the tip toward the base. At every joint
it looks for the longest length the inner part of the chain may span that
still closes a triangle with the current segment, then places the joint on
one of the two intersections of the segment's circle and the inner circle.
The previous pose steers which of the two intersections is kept.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Iterable, List, Optional, Sequence, Tuple, Union

import numpy as np

from . import geometry as gm
from .config import DEFAULT_CONFIG, SolverConfig
from .errors import (
    ContinuityLengthMismatchError,
    InfeasibleSubchainError,
    InvalidChainError,
)

logger = logging.getLogger(__name__)

Vec2 = gm.Vec2
VecLike = gm.VecLike

_ORIGIN = np.zeros(2)

# ---------------------------------------------------------------------------
# Chain description
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Chain:
    """Ordered segment lengths, index 0 attached to the base."""

    lengths: Tuple[float, ...]

    def __post_init__(self) -> None:
        lengths = tuple(float(v) for v in self.lengths)
        if not lengths:
            raise InvalidChainError("chain must hold at least one segment")
        for idx, value in enumerate(lengths):
            if not np.isfinite(value) or value <= 0:
                raise InvalidChainError(f"segment {idx} has non-positive length {value!r}")
        object.__setattr__(self, "lengths", lengths)

    @classmethod
    def from_lengths(cls, lengths: Iterable[float]) -> "Chain":
        return cls(tuple(lengths))

    def __len__(self) -> int:
        return len(self.lengths)

    @property
    def reach(self) -> float:
        """Maximum distance between the base and the tip."""
        return float(sum(self.lengths))

    def zero_offsets(self) -> np.ndarray:
        """All-zero offsets, the continuity hint for a first solve."""
        return np.zeros((len(self.lengths), 2))


# ---------------------------------------------------------------------------
# Public dataclasses
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class JointDiagnostic:
    index: int
    effective_length: float
    candidates: Tuple[Vec2, Vec2]
    chosen: int
    infeasible: bool = False
    degenerate: bool = False
    tie: bool = False


@dataclass
class SolveDiagnostics:
    joints: List[JointDiagnostic] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)
    max_length_error: float = 0.0

    @property
    def infeasible(self) -> bool:
        return any(j.infeasible for j in self.joints)

    @property
    def degenerate(self) -> bool:
        return any(j.degenerate for j in self.joints)


@dataclass
class ChainSolution:
    """Result of one solve.

    ``offsets[i]`` is the displacement from joint ``i`` to joint ``i + 1``;
    joint 0 is the base at the chain-local origin.
    """

    offsets: np.ndarray
    target: np.ndarray
    clamped: bool
    diagnostics: SolveDiagnostics = field(default_factory=SolveDiagnostics)

    @property
    def ok(self) -> bool:
        return not self.diagnostics.warnings

    @property
    def tip(self) -> np.ndarray:
        return self.offsets.sum(axis=0)

    def joint_positions(self, base: VecLike = (0.0, 0.0)) -> np.ndarray:
        return joint_positions(self.offsets, base)

    def segment_angles(self) -> np.ndarray:
        return segment_angles(self.offsets)


# ---------------------------------------------------------------------------
# Pose helpers
# ---------------------------------------------------------------------------

def joint_positions(offsets: Sequence[VecLike], base: VecLike = (0.0, 0.0)) -> np.ndarray:
    """Absolute joint positions, base first and tip last (``n + 1`` rows)."""
    arr = np.asarray(offsets, dtype=float).reshape(-1, 2)
    start = gm.vec2(base)
    return np.vstack([start, start + np.cumsum(arr, axis=0)])


def segment_angles(offsets: Sequence[VecLike]) -> np.ndarray:
    """Absolute direction of each offset in radians, in ``(-pi, pi]``."""
    arr = np.asarray(offsets, dtype=float).reshape(-1, 2)
    return np.arctan2(arr[:, 1], arr[:, 0])


def _cross(a: np.ndarray, b: np.ndarray) -> float:
    return float(a[0] * b[1] - a[1] * b[0])


# ---------------------------------------------------------------------------
# Solver
# ---------------------------------------------------------------------------

class ChainSolver:
    """Circle-intersection IK solver for a single planar chain.

    Coordinate System:
        - The base joint sits at the origin of chain-local space.
        - Targets, poles and offsets are expressed in that space; callers
          translate screen or device coordinates (axis flips included).

    The solver keeps no state between calls. Callers thread the offsets of
    the previous solve back in as ``continuity_hint``.
    """

    def __init__(self, chain: Union[Chain, Sequence[float]],
                 config: Optional[SolverConfig] = None) -> None:
        self.chain = chain if isinstance(chain, Chain) else Chain.from_lengths(chain)
        self.config = config or DEFAULT_CONFIG
        lengths = np.asarray(self.chain.lengths)
        # _inner[i] is the summed length of segments [0, i)
        self._inner = np.concatenate([[0.0], np.cumsum(lengths)])

    def _coerce_hint(self, continuity_hint: Optional[Sequence[VecLike]]) -> np.ndarray:
        n = len(self.chain)
        if continuity_hint is None:
            return self.chain.zero_offsets()
        hint = np.asarray(continuity_hint, dtype=float)
        if hint.size == 0:
            hint = hint.reshape(0, 2)
        if hint.ndim != 2 or hint.shape[1] != 2:
            raise ValueError(f"continuity hint must be a sequence of 2D vectors, got shape {hint.shape}")
        if hint.shape[0] != n:
            raise ContinuityLengthMismatchError(
                f"continuity hint has {hint.shape[0]} vectors, chain has {n} segments"
            )
        return hint

    def _select(self, first: np.ndarray, second: np.ndarray, previous: np.ndarray,
                target: np.ndarray, pole: np.ndarray) -> Tuple[int, bool]:
        """Pick candidate 0 or 1, returning ``(index, tie)``."""
        cfg = self.config
        if cfg.pole_mode == "side":
            pole_side = _cross(target, pole)
            s1 = _cross(target, first)
            s2 = _cross(target, second)
            if pole_side != 0.0 and s1 * s2 < 0.0:
                return (0 if s1 * pole_side > 0.0 else 1), False
        d1 = gm.length(first - previous)
        d2 = gm.length(second - previous)
        tie = abs(d1 - d2) <= cfg.tie_epsilon
        return (0 if d1 + cfg.tie_epsilon < d2 else 1), tie

    def solve(self, target: VecLike, continuity_hint: Optional[Sequence[VecLike]] = None,
              pole: VecLike = (0.0, 0.0), *, reach: Optional[float] = None) -> ChainSolution:
        cfg = self.config
        lengths = self.chain.lengths
        n = len(lengths)
        hint = self._coerce_hint(continuity_hint)
        pole = gm.vec2(pole)
        target = gm.vec2(target)
        max_reach = self.chain.reach if reach is None else float(reach)

        clamped = False
        if gm.length(target) > max_reach:
            target = gm.normalize(target, strict=cfg.strict) * max_reach
            clamped = True

        diagnostics = SolveDiagnostics()
        offsets = np.zeros((n, 2))
        cursor = target.copy()

        for i in range(n - 1, 0, -1):
            seg = lengths[i]
            side = gm.length(cursor)
            inner = float(self._inner[i])
            effective = gm.search_side(0.0, inner, seg, side, cfg.side_step)
            infeasible = effective is None
            if infeasible:
                msg = (f"joint {i}: no inner length in [0, {inner:.6g}] closes a triangle "
                       f"with sides {seg:.6g} and {side:.6g}")
                if cfg.strict:
                    raise InfeasibleSubchainError(msg)
                logger.debug(msg)
                diagnostics.warnings.append(msg)
                effective = 0.0
            degenerate = side == 0.0
            first, second = gm.circle_intersect(cursor, seg, _ORIGIN, effective, strict=cfg.strict)
            if degenerate:
                diagnostics.warnings.append(f"joint {i}: cursor sits on the base, bending along +x")

            chosen, tie = self._select(first, second, hint[i - 1], target, pole)
            point = first if chosen == 0 else second
            logger.debug("joint %d: side=%.6g effective=%.6g chosen=%d tie=%s",
                         i, side, effective, chosen, tie)

            offsets[i] = cursor - point
            cursor = point
            diagnostics.joints.append(JointDiagnostic(
                index=i,
                effective_length=float(effective),
                candidates=(tuple(first.tolist()), tuple(second.tolist())),
                chosen=chosen,
                infeasible=infeasible,
                degenerate=degenerate,
                tie=tie,
            ))

        offsets[0] = cursor
        diagnostics.joints.reverse()

        spans = np.hypot(offsets[:, 0], offsets[:, 1])
        errors = np.abs(spans - np.asarray(lengths))
        diagnostics.max_length_error = float(errors.max())
        if diagnostics.max_length_error > cfg.length_tolerance:
            worst = int(errors.argmax())
            msg = f"segment {worst} spans {spans[worst]:.6g} instead of {lengths[worst]:.6g}"
            if cfg.strict:
                raise InfeasibleSubchainError(f"target {target.tolist()} is inside the dead zone: {msg}")
            diagnostics.warnings.append(msg)

        return ChainSolution(offsets=offsets, target=target, clamped=clamped, diagnostics=diagnostics)

    def solve_or_none(self, target: VecLike, continuity_hint: Optional[Sequence[VecLike]] = None,
                      pole: VecLike = (0.0, 0.0)) -> Optional[ChainSolution]:
        """Return the solution only when every segment kept its length without fallbacks."""
        sol = self.solve(target, continuity_hint, pole)
        if not sol.ok:
            logger.info("Chain pose for %s is approximate: %s", tuple(sol.target.tolist()),
                        "; ".join(sol.diagnostics.warnings))
            return None
        return sol

    def solve_sequence(self, targets: Iterable[VecLike],
                       continuity_hint: Optional[Sequence[VecLike]] = None,
                       pole: VecLike = (0.0, 0.0)) -> List[ChainSolution]:
        """Solve consecutive targets, feeding each pose into the next solve."""
        solutions: List[ChainSolution] = []
        hint = continuity_hint
        for t in targets:
            sol = self.solve(t, hint, pole)
            solutions.append(sol)
            hint = sol.offsets
        return solutions


def solve(chain: Union[Chain, Sequence[float]], continuity_hint: Optional[Sequence[VecLike]],
          target: VecLike, reach: Optional[float] = None, pole: VecLike = (0.0, 0.0),
          *, config: Optional[SolverConfig] = None) -> np.ndarray:
    """Functional entry point returning the ``(n, 2)`` joint offsets."""
    solver = ChainSolver(chain, config)
    if reach is not None and abs(reach - solver.chain.reach) > solver.config.reach_tolerance:
        logger.warning("reach %.6g differs from the chain's summed length %.6g",
                       reach, solver.chain.reach)
    return solver.solve(target, continuity_hint, pole, reach=reach).offsets


__all__ = [
    "Chain",
    "JointDiagnostic",
    "SolveDiagnostics",
    "ChainSolution",
    "ChainSolver",
    "joint_positions",
    "segment_angles",
    "solve",
]
