"""Masking engine: keeps coating moves out of masked regions.

Every mask is grown by its clearance (the mask's own ``masking_clearance``
or the global one, plus half the coating width) before any test.  Masks
with missing geometry, such as a circle without a radius, never intersect
anything.

Algorithm per coating segment
-----------------------------
1. Clip the segment against every mask to get unsafe ``[t0, t1]`` intervals
   (slab clipping for rectangles, the line/circle quadratic for circles).
2. Sort the intervals on start and merge overlapping or touching ones.
3. Emit one new segment per gap between merged intervals, dropping any
   piece shorter than :data:`MIN_SEGMENT_LENGTH`.
"""

from __future__ import annotations

import logging
from typing import Optional, Sequence

from ...config.settings import CoatingSettings
from ..geometry import (
    Circle,
    Point,
    Rect,
    clip_segment_to_circle,
    clip_segment_to_rect,
    merge_intervals,
    segment_intersects_circle,
    segment_intersects_rect,
)
from ..shapes import CoatingShape, as_number
from .base import PathSegment

logger = logging.getLogger(__name__)

MIN_SEGMENT_LENGTH = 0.01


class MaskingEngine:
    """Clearance-aware queries against a snapshot of masking shapes."""

    def __init__(
        self,
        settings: CoatingSettings,
        mask_shapes: Sequence[CoatingShape] = (),
    ):
        self.settings = settings
        self.mask_shapes = list(mask_shapes)
        self._half_width = max(settings.coating_width, 0.0) / 2

    def has_active_masks(self) -> bool:
        return self.settings.enable_masking and len(self.mask_shapes) > 0

    def clearance_for(self, mask: CoatingShape) -> float:
        """Effective clearance around *mask*, never negative."""
        own = as_number(mask.masking_clearance) if mask.is_masking else None
        base = own if own is not None else self.settings.masking_clearance
        return max(base + self._half_width, 0.0)

    def expanded_rect(self, mask: CoatingShape) -> Optional[Rect]:
        rect = mask.as_rect()
        return rect.expanded(self.clearance_for(mask)) if rect is not None else None

    def expanded_circle(self, mask: CoatingShape) -> Optional[Circle]:
        circle = mask.as_circle()
        return circle.expanded(self.clearance_for(mask)) if circle is not None else None

    # -- containment -------------------------------------------------------

    def is_fully_masked(self, shape: CoatingShape) -> bool:
        """True if *shape* lies entirely inside a single expanded mask."""
        if not self.has_active_masks():
            return False
        return any(self._is_inside_mask(shape, m) for m in self.mask_shapes)

    def _is_inside_mask(self, shape: CoatingShape, mask: CoatingShape) -> bool:
        mask_rect = self.expanded_rect(mask)
        mask_circle = self.expanded_circle(mask)
        shape_rect = shape.as_rect()
        shape_circle = shape.as_circle()

        if mask_rect is not None:
            if shape_rect is not None:
                return mask_rect.contains_rect(shape_rect)
            if shape_circle is not None:
                return mask_rect.contains_rect(shape_circle.bounds())
        elif mask_circle is not None:
            if shape_circle is not None:
                gap = mask_circle.center.distance_to(shape_circle.center)
                return gap + shape_circle.radius <= mask_circle.radius
            if shape_rect is not None:
                return all(mask_circle.contains_point(c) for c in shape_rect.corners())
        return False

    # -- segment filtering -------------------------------------------------

    def filter_segments(
        self,
        segments: Sequence[PathSegment],
        shape: CoatingShape,
    ) -> list[PathSegment]:
        """Split *segments* around every mask and return the safe pieces."""
        if not self.has_active_masks():
            return list(segments)

        if self.is_fully_masked(shape):
            logger.info(
                "Shape %s lies inside a mask; skipping coating",
                shape.display_name,
            )
            return []

        result: list[PathSegment] = []
        for seg in segments:
            result.extend(self._split_segment(seg))
        logger.debug(
            "Masking %s: %d segments in, %d out",
            shape.display_name, len(segments), len(result),
        )
        return result

    def unsafe_intervals(self, seg: PathSegment) -> list[tuple[float, float]]:
        """Merged parametric intervals of *seg* that fall inside masks."""
        intervals: list[tuple[float, float]] = []
        for mask in self.mask_shapes:
            rect = self.expanded_rect(mask)
            if rect is not None:
                span = clip_segment_to_rect(seg.start, seg.end, rect)
            else:
                circle = self.expanded_circle(mask)
                if circle is None:
                    continue
                span = clip_segment_to_circle(seg.start, seg.end, circle)
            if span is not None:
                intervals.append(span)
        return merge_intervals(intervals)

    def _split_segment(self, seg: PathSegment) -> list[PathSegment]:
        unsafe = self.unsafe_intervals(seg)
        if not unsafe:
            return [seg]

        safe: list[tuple[float, float]] = []
        last_t = 0.0
        for t0, t1 in unsafe:
            if t0 > last_t:
                safe.append((last_t, t0))
            last_t = max(last_t, t1)
        if last_t < 1.0:
            safe.append((last_t, 1.0))

        pieces = []
        for i, (t0, t1) in enumerate(safe):
            if (t1 - t0) * seg.length < MIN_SEGMENT_LENGTH:
                continue
            pieces.append(seg.sub_segment(t0, t1, str(i)))
        return pieces

    # -- travel queries ----------------------------------------------------

    def find_intersecting_masks(self, p1: Point, p2: Point) -> list[CoatingShape]:
        """Every mask whose expanded footprint the segment ``p1 -> p2`` touches."""
        if not self.has_active_masks():
            return []

        hits = []
        for mask in self.mask_shapes:
            rect = self.expanded_rect(mask)
            if rect is not None:
                if segment_intersects_rect(p1, p2, rect):
                    hits.append(mask)
                continue
            circle = self.expanded_circle(mask)
            if circle is not None and segment_intersects_circle(p1, p2, circle):
                hits.append(mask)
        return hits

    def is_point_inside_any_mask(self, point: Point) -> bool:
        if not self.has_active_masks():
            return False
        for mask in self.mask_shapes:
            rect = self.expanded_rect(mask)
            if rect is not None and rect.contains_point(point):
                return True
            circle = self.expanded_circle(mask)
            if circle is not None and circle.contains_point(point):
                return True
        return False

    def do_bounds_overlap(self, shape_a: CoatingShape, shape_b: CoatingShape) -> bool:
        """Coarse bounding-box overlap; *shape_b* is grown by its clearance."""
        a = shape_a.bounds()
        b = shape_b.bounds(self.clearance_for(shape_b))
        if a is None or b is None:
            return False
        return a.overlaps(b)
