"""Low-level geometric helpers for the circle-intersection chain solver."""
from __future__ import annotations

import math
from typing import Iterator, Optional, Sequence, Tuple, Union

import numpy as np

from .errors import DegenerateVectorError, InfeasibleIntersectionError

Vec2 = Tuple[float, float]
VecLike = Union[Vec2, Sequence[float], np.ndarray]

# Relative slack for flat triangles and tangent circles.
_REL_TOL = 1e-9


class Geometry:
    """Namespace-style container for low-level geometric helper methods."""

    @staticmethod
    def vec2(v: VecLike) -> np.ndarray:
        """Return ``v`` as a float array of shape ``(2,)``."""
        arr = np.asarray(v, dtype=float)
        if arr.shape != (2,):
            raise ValueError(f"expected a 2D vector, got shape {arr.shape}")
        return arr

    @staticmethod
    def length(v: VecLike) -> float:
        return float(math.hypot(v[0], v[1]))

    @staticmethod
    def normalize(v: VecLike, *, strict: bool = False) -> np.ndarray:
        """Unit vector along ``v``.

        A zero vector has no direction: strict mode raises
        :class:`DegenerateVectorError`, lenient mode returns the zero vector.
        """
        arr = Geometry.vec2(v)
        d = Geometry.length(arr)
        if d == 0.0:
            if strict:
                raise DegenerateVectorError("cannot normalize a zero-length vector")
            return np.zeros(2)
        return arr / d

    @staticmethod
    def axis_ratios(v: VecLike, *, strict: bool = False) -> Vec2:
        """Return ``(y / |v|, x / |v|)``, the sine and cosine of the axis along ``v``.

        ``(-h * s, h * c)`` is then the offset of length ``h`` perpendicular
        to ``v``. Zero vectors follow the same policy as :meth:`normalize`.
        """
        d = Geometry.length(v)
        if d == 0.0:
            if strict:
                raise DegenerateVectorError("axis ratios of a zero-length vector are undefined")
            return (0.0, 0.0)
        return (float(v[1]) / d, float(v[0]) / d)

    @staticmethod
    def is_valid_triangle(a: float, b: float, c: float, tol: float = 0.0) -> bool:
        """True when three non-negative lengths can close a (possibly flat) triangle."""
        return a + b + tol >= c and a + c + tol >= b and b + c + tol >= a

    @staticmethod
    def circle_intersect(c0: VecLike, r0: float, c1: VecLike, r1: float,
                         *, strict: bool = False) -> Tuple[np.ndarray, np.ndarray]:
        """Return both intersection candidates of two circles.

        The first candidate lies on the left of the ``c0 -> c1`` axis, the
        second on the right. In lenient mode a pair is always returned:
        the distance ``a`` from ``c0`` to the chord is clamped to ``>= 0``
        and the squared half-chord to ``>= 0``, so disjoint or nested
        circles collapse to a best-effort point pair. Coincident centers use
        the ``+x`` axis with ``a = 0``. Strict mode keeps the exact signed
        ``a`` and raises when the circles are disjoint, nested or concentric.
        """
        c0 = Geometry.vec2(c0)
        c1 = Geometry.vec2(c1)
        v = c1 - c0
        d = Geometry.length(v)
        if d == 0.0:
            if strict:
                raise DegenerateVectorError("circle centers coincide")
            u = np.array([1.0, 0.0])
            s, c = 0.0, 1.0
            a = 0.0
        else:
            if strict:
                tol = _REL_TOL * max(1.0, d, r0, r1)
                if d > r0 + r1 + tol or d < abs(r0 - r1) - tol:
                    raise InfeasibleIntersectionError(
                        f"circles do not intersect (d={d:.6g}, r0={r0:.6g}, r1={r1:.6g})"
                    )
            u = v / d
            s, c = Geometry.axis_ratios(v)
            a = (r0 * r0 - r1 * r1 + d * d) / (2.0 * d)
            if not strict:
                a = max(a, 0.0)
        h = math.sqrt(max(r0 * r0 - a * a, 0.0))
        height = np.array([-h * s, h * c])
        p_mid = c0 + a * u
        return (p_mid + height, p_mid - height)

    @staticmethod
    def side_candidates(min_length: float, max_length: float, step: float) -> Iterator[float]:
        """Yield ``max_length, max_length - step, ...`` down to ``min_length``."""
        if step <= 0:
            raise ValueError("step must be > 0")
        if max_length < min_length:
            return
        count = int(math.floor((max_length - min_length) / step + 1e-9))
        for k in range(count + 1):
            yield max_length - k * step

    @staticmethod
    def search_side(min_length: float, max_length: float, side_a: float, side_b: float,
                    step: float = 0.5) -> Optional[float]:
        """Largest candidate length closing a triangle with ``side_a`` and ``side_b``.

        Returns ``None`` when the range holds no feasible candidate.
        """
        # Flat triangles come out of earlier intersections with rounding noise
        tol = _REL_TOL * max(1.0, abs(max_length), side_a, side_b)
        for side in Geometry.side_candidates(min_length, max_length, step):
            if Geometry.is_valid_triangle(side, side_a, side_b, tol):
                return side
        return None

    @staticmethod
    def find_side(min_length: float, max_length: float, side_a: float, side_b: float,
                  step: float = 0.5) -> float:
        """Same as :meth:`search_side` but returns ``0.0`` when the search is exhausted."""
        side = Geometry.search_side(min_length, max_length, side_a, side_b, step)
        return 0.0 if side is None else side


# Module-level helpers

def vec2(v: VecLike) -> np.ndarray:
    return Geometry.vec2(v)


def length(v: VecLike) -> float:
    return Geometry.length(v)


def normalize(v: VecLike, *, strict: bool = False) -> np.ndarray:
    return Geometry.normalize(v, strict=strict)


def axis_ratios(v: VecLike, *, strict: bool = False) -> Vec2:
    return Geometry.axis_ratios(v, strict=strict)


def is_valid_triangle(a: float, b: float, c: float, tol: float = 0.0) -> bool:
    return Geometry.is_valid_triangle(a, b, c, tol)


def circle_intersect(c0: VecLike, r0: float, c1: VecLike, r1: float,
                     *, strict: bool = False) -> Tuple[np.ndarray, np.ndarray]:
    return Geometry.circle_intersect(c0, r0, c1, r1, strict=strict)


def search_side(min_length: float, max_length: float, side_a: float, side_b: float,
                step: float = 0.5) -> Optional[float]:
    return Geometry.search_side(min_length, max_length, side_a, side_b, step)


def find_side(min_length: float, max_length: float, side_a: float, side_b: float,
              step: float = 0.5) -> float:
    return Geometry.find_side(min_length, max_length, side_a, side_b, step)


__all__ = [
    "Vec2",
    "VecLike",
    "Geometry",
    "vec2",
    "length",
    "normalize",
    "axis_ratios",
    "is_valid_triangle",
    "circle_intersect",
    "search_side",
    "find_side",
]
