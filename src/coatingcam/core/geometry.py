"""Planar geometry primitives shared by the masking engine and planner.

All intersection tests use the parametric line form
``P(t) = p1 + t * (p2 - p1)`` with ``t`` in ``[0, 1]``.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class Point:
    """A point on the work surface (optionally with a Z height)."""
    x: float
    y: float
    z: Optional[float] = None

    def distance_to(self, other: Point) -> float:
        return math.hypot(self.x - other.x, self.y - other.y)

    def lerp(self, other: Point, t: float) -> Point:
        """Point at parameter *t* along ``self -> other``."""
        return Point(
            self.x + (other.x - self.x) * t,
            self.y + (other.y - self.y) * t,
        )

    def as_tuple(self) -> tuple[float, float]:
        return (self.x, self.y)


@dataclass(frozen=True)
class Rect:
    """Axis-aligned rectangle, ``(x, y)`` is the minimum corner."""
    x: float
    y: float
    width: float
    height: float

    @property
    def x_max(self) -> float:
        return self.x + self.width

    @property
    def y_max(self) -> float:
        return self.y + self.height

    def expanded(self, margin: float) -> Rect:
        return Rect(
            self.x - margin,
            self.y - margin,
            self.width + margin * 2,
            self.height + margin * 2,
        )

    def contains_point(self, p: Point) -> bool:
        return self.x <= p.x <= self.x_max and self.y <= p.y <= self.y_max

    def contains_rect(self, other: Rect) -> bool:
        return (
            other.x >= self.x
            and other.y >= self.y
            and other.x_max <= self.x_max
            and other.y_max <= self.y_max
        )

    def overlaps(self, other: Rect) -> bool:
        """Strict overlap; rectangles that only touch do not overlap."""
        return (
            self.x < other.x_max
            and self.x_max > other.x
            and self.y < other.y_max
            and self.y_max > other.y
        )

    def corners(self) -> list[Point]:
        """Corners in order: min/min, max/min, max/max, min/max."""
        return [
            Point(self.x, self.y),
            Point(self.x_max, self.y),
            Point(self.x_max, self.y_max),
            Point(self.x, self.y_max),
        ]


@dataclass(frozen=True)
class Circle:
    cx: float
    cy: float
    radius: float

    @property
    def center(self) -> Point:
        return Point(self.cx, self.cy)

    def expanded(self, margin: float) -> Circle:
        return Circle(self.cx, self.cy, self.radius + margin)

    def contains_point(self, p: Point) -> bool:
        return math.hypot(p.x - self.cx, p.y - self.cy) <= self.radius

    def bounds(self) -> Rect:
        return Rect(
            self.cx - self.radius,
            self.cy - self.radius,
            self.radius * 2,
            self.radius * 2,
        )


def path_length(points: list[Point]) -> float:
    """Total length of the polyline through *points*."""
    return sum(a.distance_to(b) for a, b in zip(points, points[1:]))


# ---------------------------------------------------------------------------
# Boolean intersection tests
# ---------------------------------------------------------------------------


def segment_intersects_rect(p1: Point, p2: Point, rect: Rect) -> bool:
    """True if the segment ``p1 -> p2`` touches or enters *rect*.

    Bounding-box rejection first, then endpoint containment, then the four
    boundary edges.
    """
    if (
        max(p1.x, p2.x) < rect.x
        or min(p1.x, p2.x) > rect.x_max
        or max(p1.y, p2.y) < rect.y
        or min(p1.y, p2.y) > rect.y_max
    ):
        return False

    if rect.contains_point(p1) or rect.contains_point(p2):
        return True

    edges = (
        (rect.x, rect.y_max, rect.x_max, rect.y_max),
        (rect.x, rect.y, rect.x_max, rect.y),
        (rect.x, rect.y, rect.x, rect.y_max),
        (rect.x_max, rect.y, rect.x_max, rect.y_max),
    )
    for x1, y1, x2, y2 in edges:
        den = (y2 - y1) * (p2.x - p1.x) - (x2 - x1) * (p2.y - p1.y)
        if den == 0:
            continue
        t = ((x2 - x1) * (p1.y - y1) - (y2 - y1) * (p1.x - x1)) / den
        u = -((y1 - p1.y) * (p2.x - p1.x) - (x1 - p1.x) * (p2.y - p1.y)) / den
        if 0 <= t <= 1 and 0 <= u <= 1:
            return True
    return False


def _circle_roots(
    p1: Point, p2: Point, circle: Circle
) -> Optional[tuple[float, float]]:
    """Roots of ``a t^2 + b t + c = 0`` for the line through p1, p2.

    Returns ``None`` when the discriminant is negative or the segment is
    degenerate.
    """
    dx = p2.x - p1.x
    dy = p2.y - p1.y
    fx = p1.x - circle.cx
    fy = p1.y - circle.cy

    a = dx * dx + dy * dy
    if a == 0:
        return None
    b = 2 * (fx * dx + fy * dy)
    c = (fx * fx + fy * fy) - circle.radius * circle.radius

    disc = b * b - 4 * a * c
    if disc < 0:
        return None
    disc = math.sqrt(disc)
    t1 = (-b - disc) / (2 * a)
    t2 = (-b + disc) / (2 * a)
    return (min(t1, t2), max(t1, t2))


def segment_intersects_circle(p1: Point, p2: Point, circle: Circle) -> bool:
    """True if any part of the segment ``p1 -> p2`` lies in *circle*."""
    roots = _circle_roots(p1, p2, circle)
    if roots is None:
        return circle.contains_point(p1)
    t1, t2 = roots
    return t1 <= 1 and t2 >= 0


# ---------------------------------------------------------------------------
# Parametric clipping
# ---------------------------------------------------------------------------


def clip_segment_to_rect(
    p1: Point, p2: Point, rect: Rect
) -> Optional[tuple[float, float]]:
    """Parametric interval of ``p1 -> p2`` inside *rect* (slab clipping).

    Returns ``(t0, t1)`` with ``0 <= t0 < t1 <= 1`` or ``None`` when the
    segment misses the rectangle or only grazes a single point of it.
    """
    dx = p2.x - p1.x
    dy = p2.y - p1.y
    t0, t1 = 0.0, 1.0

    for p, q in (
        (-dx, p1.x - rect.x),
        (dx, rect.x_max - p1.x),
        (-dy, p1.y - rect.y),
        (dy, rect.y_max - p1.y),
    ):
        if p == 0:
            # Parallel to this slab: either fully inside or fully outside
            if q < 0:
                return None
            continue
        r = q / p
        if p < 0:
            if r > t1:
                return None
            t0 = max(t0, r)
        else:
            if r < t0:
                return None
            t1 = min(t1, r)

    if t0 >= t1:
        return None
    return (t0, t1)


def clip_segment_to_circle(
    p1: Point, p2: Point, circle: Circle
) -> Optional[tuple[float, float]]:
    """Parametric interval of ``p1 -> p2`` inside *circle*, clamped to [0, 1]."""
    roots = _circle_roots(p1, p2, circle)
    if roots is None:
        return None
    t0 = max(0.0, roots[0])
    t1 = min(1.0, roots[1])
    if t0 >= t1:
        return None
    return (t0, t1)


def merge_intervals(
    intervals: list[tuple[float, float]],
) -> list[tuple[float, float]]:
    """Merge overlapping or touching intervals after sorting on start."""
    if not intervals:
        return []
    ordered = sorted(intervals)
    merged = [ordered[0]]
    for start, end in ordered[1:]:
        cur_start, cur_end = merged[-1]
        if start <= cur_end:
            merged[-1] = (cur_start, max(cur_end, end))
        else:
            merged.append((start, end))
    return merged
