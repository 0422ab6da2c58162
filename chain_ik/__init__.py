"""Public package exports for the chain IK library."""

from .config import DEFAULT_CONFIG, SolverConfig
from .errors import (
    ChainIKError,
    ContinuityLengthMismatchError,
    DegenerateVectorError,
    InfeasibleIntersectionError,
    InfeasibleSubchainError,
    InvalidChainError,
)
from .geometry import Geometry, circle_intersect, find_side, is_valid_triangle
from .ik_solver import (
    Chain,
    ChainSolution,
    ChainSolver,
    JointDiagnostic,
    SolveDiagnostics,
    joint_positions,
    segment_angles,
    solve,
)
from .path_planner import PathPlanner, SegmentPlan

__all__ = [
    "DEFAULT_CONFIG",
    "SolverConfig",
    "ChainIKError",
    "ContinuityLengthMismatchError",
    "DegenerateVectorError",
    "InfeasibleIntersectionError",
    "InfeasibleSubchainError",
    "InvalidChainError",
    "Geometry",
    "circle_intersect",
    "find_side",
    "is_valid_triangle",
    "Chain",
    "ChainSolution",
    "ChainSolver",
    "JointDiagnostic",
    "SolveDiagnostics",
    "joint_positions",
    "segment_angles",
    "solve",
    "PathPlanner",
    "SegmentPlan",
]
