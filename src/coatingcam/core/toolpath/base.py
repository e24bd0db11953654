"""Core toolpath data structures."""

from __future__ import annotations

import itertools
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Optional

from ..geometry import Point

_ids = itertools.count(1)


def new_segment_id() -> str:
    return f"seg-{next(_ids)}"


class SegmentKind(Enum):
    """Type of applicator motion."""
    TRAVEL = "G0"   # non-depositing rapid move
    COAT = "G1"     # depositing move


@dataclass(frozen=True)
class PathSegment:
    """A straight move from ``start`` to ``end``.

    Segments are never mutated; splitting and reversing create new ones.
    """
    start: Point
    end: Point
    kind: SegmentKind = SegmentKind.COAT
    id: str = field(default_factory=new_segment_id)
    speed: Optional[float] = None
    feed_rate: Optional[float] = None
    source_line_ref: Optional[int] = None
    comment: Optional[str] = None

    @property
    def length(self) -> float:
        return self.start.distance_to(self.end)

    @property
    def midpoint(self) -> Point:
        return self.start.lerp(self.end, 0.5)

    def reversed(self) -> PathSegment:
        """Same segment traversed end -> start (keeps the id)."""
        return replace(self, start=self.end, end=self.start)

    def sub_segment(self, t0: float, t1: float, suffix: str) -> PathSegment:
        """New segment covering parameters ``[t0, t1]`` of this one."""
        start = self.start if t0 == 0.0 else self.start.lerp(self.end, t0)
        end = self.end if t1 == 1.0 else self.start.lerp(self.end, t1)
        return replace(self, start=start, end=end, id=f"{self.id}.{suffix}")


@dataclass
class PathGroup:
    """A named bundle of segments tied back to one source shape."""
    id: str
    name: str
    segments: list[PathSegment] = field(default_factory=list)
    visible: bool = True
    locked: bool = False
    source_shape_id: Optional[str] = None
    is_relative: bool = False
    base_transform: Optional[tuple[float, float]] = None

    @property
    def coat_segments(self) -> list[PathSegment]:
        return [s for s in self.segments if s.kind is SegmentKind.COAT]

    @property
    def travel_distance(self) -> float:
        return sum(s.length for s in self.segments if s.kind is SegmentKind.TRAVEL)

    @property
    def is_empty(self) -> bool:
        return len(self.segments) == 0


def segments_from_coords(
    coords: list[tuple[float, float]],
    kind: SegmentKind = SegmentKind.COAT,
) -> list[PathSegment]:
    """Consecutive segments along the polyline *coords*."""
    return [
        PathSegment(Point(x0, y0), Point(x1, y1), kind)
        for (x0, y0), (x1, y1) in zip(coords, coords[1:])
        if (x0, y0) != (x1, y1)
    ]
