"""Path planning utilities for driving the chain solver along straight segments.

The planner moves the target at uniform linear speed and reports the
angular velocity each segment needs so that all segments finish every
sub-segment at the same time. Waypoints are solved in order, each solve
reusing the previous pose as its continuity hint.
"""
from __future__ import annotations

from dataclasses import dataclass
import math
from typing import Iterable, List, Optional, Sequence, Tuple

import numpy as np

from .ik_solver import ChainSolution, ChainSolver

Vec2 = Tuple[float, float]


@dataclass(frozen=True)
class SegmentPlan:
	"""Description of a single straight-line sub-segment of the target path.

	Attributes
	----------
	index:
		Sequential index of the sub-segment within the planned motion (0-based).
	start, end:
		Start and end targets in chain-local coordinates.
	length:
		Euclidean distance between start and end (same units as input).
	duration:
		Time required to traverse the sub-segment at the planner's linear speed.
	start_angles, end_angles:
		Absolute direction (radians) of every chain segment at start/end.
	deltas, velocities:
		Minimal signed angular displacement (radians) and required angular
		velocity (radians per second) of every chain segment.
	start_pose, end_pose:
		Joint offsets returned by the solver at start/end.
	"""

	index: int
	start: Vec2
	end: Vec2
	length: float
	duration: float
	start_angles: Tuple[float, ...]
	end_angles: Tuple[float, ...]
	deltas: Tuple[float, ...]
	velocities: Tuple[float, ...]
	start_pose: np.ndarray
	end_pose: np.ndarray


class PathPlanner:
	"""Plan straight-line target motions for the chain solver with uniform speed."""

	def __init__(self, solver: ChainSolver, *, max_segment_length: float, linear_speed: float) -> None:
		if max_segment_length <= 0:
			raise ValueError("max_segment_length must be > 0")
		if linear_speed <= 0:
			raise ValueError("linear_speed must be > 0")
		self.solver = solver
		self.max_segment_length = float(max_segment_length)
		self.linear_speed = float(linear_speed)

	def plan(self, start: Vec2, end: Vec2, continuity_hint: Optional[Sequence[Vec2]] = None,
			 pole: Vec2 = (0.0, 0.0)) -> List[SegmentPlan]:
		"""Create a sequence of sub-segments and joint velocities from start to end."""
		segments = self._segment_points(start, end)
		if not segments:
			return []

		points = [segments[0][0]] + [seg[1] for seg in segments]
		poses = self._solve_poses(points, continuity_hint, pole)

		plans: List[SegmentPlan] = []
		for idx, ((p0, p1), (s0, s1)) in enumerate(zip(segments, pairs(poses))):
			seg_length = math.hypot(p1[0] - p0[0], p1[1] - p0[1])
			duration = seg_length / self.linear_speed if seg_length > 0 else 0.0

			a0 = tuple(float(a) for a in s0.segment_angles())
			a1 = tuple(float(a) for a in s1.segment_angles())
			deltas = tuple(shortest_angle_delta(x, y) for x, y in zip(a0, a1))
			velocities = tuple(d / duration if duration > 0 else 0.0 for d in deltas)

			plans.append(
				SegmentPlan(
					index=idx,
					start=p0,
					end=p1,
					length=seg_length,
					duration=duration,
					start_angles=a0,
					end_angles=a1,
					deltas=deltas,
					velocities=velocities,
					start_pose=s0.offsets,
					end_pose=s1.offsets,
				)
			)

		return plans

	def _segment_points(self, start: Vec2, end: Vec2) -> List[Tuple[Vec2, Vec2]]:
		dx = end[0] - start[0]
		dy = end[1] - start[1]
		distance = math.hypot(dx, dy)
		if distance == 0:
			return []

		num_segments = max(1, int(math.ceil(distance / self.max_segment_length)))
		xs = np.linspace(start[0], end[0], num_segments + 1)
		ys = np.linspace(start[1], end[1], num_segments + 1)
		points = [(float(x), float(y)) for x, y in zip(xs, ys)]
		return list(zip(points[:-1], points[1:]))

	def _solve_poses(self, points: Sequence[Vec2], continuity_hint: Optional[Sequence[Vec2]],
					 pole: Vec2) -> List[ChainSolution]:
		return self.solver.solve_sequence(points, continuity_hint, pole)


def shortest_angle_delta(start: float, end: float) -> float:
	"""Return the minimal signed angle delta taking wrap-around into account."""
	diff = (end - start + math.pi) % (2 * math.pi) - math.pi
	return diff


def pairs(items: Sequence) -> Iterable[Tuple]:
	"""Yield consecutive pairs from a sequence."""
	for i in range(len(items) - 1):
		yield items[i], items[i + 1]
