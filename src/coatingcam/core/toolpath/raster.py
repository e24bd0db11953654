"""Raw coating path generation for fill and outline shapes.

Fill patterns
-------------
horizontal / vertical
    Parallel raster lines at *line_spacing*, the first and last inset by
    half the coating width, clipped to the shape polygon and alternated in
    direction (snake order).
concentric
    Successive inward offsets of the outline, starting half a coating width
    inside the edge.
auto
    Rasters along the longer side, or the shorter side when more than 40%
    of a 5x5 sample grid over the shape is masked.

Outlines trace ``outline_passes`` rings offset from the edge by
``line_spacing`` per pass.
"""

from __future__ import annotations

import warnings
from typing import Optional

from shapely.geometry import LineString, MultiLineString, Polygon, box
from shapely.geometry import Point as ShapelyPoint

from ...config.settings import CoatingSettings
from ..geometry import Point
from ..shapes import CoatingShape, CoatingType, FillPattern, OutlineStart
from .base import PathSegment, segments_from_coords
from .masking import MaskingEngine
from .utils import ensure_polygon, iter_polygons, ring_segments

CIRCLE_QUAD_SEGS = 16
DENSITY_GRID = 5
DENSITY_THRESHOLD = 0.4


def shape_polygon(shape: CoatingShape) -> Polygon:
    """Shapely polygon of *shape*, empty when its geometry is unusable."""
    rect = shape.as_rect()
    if rect is not None:
        if rect.width <= 0 or rect.height <= 0:
            return Polygon()
        return box(rect.x, rect.y, rect.x_max, rect.y_max)
    circle = shape.as_circle()
    if circle is not None and circle.radius > 0:
        return ShapelyPoint(circle.cx, circle.cy).buffer(
            circle.radius, quad_segs=CIRCLE_QUAD_SEGS)
    return Polygon()


def generate_raw_segments(
    shape: CoatingShape,
    settings: CoatingSettings,
    masker: Optional[MaskingEngine] = None,
) -> list[PathSegment]:
    """Unmasked candidate coating segments for *shape*, in absolute coords."""
    polygon = shape_polygon(shape)
    if polygon.is_empty:
        warnings.warn(
            f"Shape {shape.display_name} has no usable geometry",
            UserWarning,
            stacklevel=2,
        )
        return []

    if shape.coating_type is CoatingType.FILL:
        return _fill_segments(shape, polygon, settings, masker)
    if shape.coating_type is CoatingType.OUTLINE:
        return _outline_segments(shape, polygon, settings)
    return []


# ---------------------------------------------------------------------------
# Fill
# ---------------------------------------------------------------------------


def _fill_segments(
    shape: CoatingShape,
    polygon: Polygon,
    settings: CoatingSettings,
    masker: Optional[MaskingEngine],
) -> list[PathSegment]:
    spacing = settings.line_spacing_for(shape)
    width = settings.coating_width_for(shape)
    if spacing <= 0:
        return []

    pattern = settings.fill_pattern_for(shape)
    if pattern is FillPattern.CONCENTRIC:
        return _concentric_segments(polygon, spacing, width)
    if pattern is FillPattern.AUTO:
        pattern = choose_raster_direction(polygon, masker)

    return _raster_segments(polygon, spacing, width, pattern is FillPattern.VERTICAL)


def choose_raster_direction(
    polygon: Polygon, masker: Optional[MaskingEngine] = None
) -> FillPattern:
    """Pick horizontal or vertical rasters for the ``auto`` pattern."""
    minx, miny, maxx, maxy = polygon.bounds
    wide = (maxx - minx) > (maxy - miny)
    if masker is not None and masker.has_active_masks():
        if mask_density(polygon, masker) > DENSITY_THRESHOLD:
            wide = not wide
    return FillPattern.HORIZONTAL if wide else FillPattern.VERTICAL


def mask_density(polygon: Polygon, masker: MaskingEngine) -> float:
    """Fraction of a coarse sample grid over *polygon* that is masked."""
    minx, miny, maxx, maxy = polygon.bounds
    step_x = (maxx - minx) / DENSITY_GRID
    step_y = (maxy - miny) / DENSITY_GRID
    masked = 0
    for i in range(DENSITY_GRID):
        for j in range(DENSITY_GRID):
            x = minx + (i + 0.5) * step_x
            y = miny + (j + 0.5) * step_y
            if not polygon.covers(ShapelyPoint(x, y)):
                continue
            if masker.is_point_inside_any_mask(Point(x, y)):
                masked += 1
    return masked / (DENSITY_GRID * DENSITY_GRID)


def raster_offsets(lo: float, hi: float, spacing: float, inset: float) -> list[float]:
    """Raster line positions between *lo* and *hi*, inset at both ends."""
    first = lo + inset
    last = hi - inset
    if first > last:
        return []

    offsets = []
    value = first
    while value <= last + 0.01:
        offsets.append(value)
        value = first + len(offsets) * spacing
    return offsets


def _raster_segments(
    polygon: Polygon, spacing: float, width: float, vertical: bool
) -> list[PathSegment]:
    minx, miny, maxx, maxy = polygon.bounds
    segments: list[PathSegment] = []

    if vertical:
        offsets = raster_offsets(minx, maxx, spacing, width / 2)
        lines = [LineString([(x, miny - 1), (x, maxy + 1)]) for x in offsets]
    else:
        offsets = raster_offsets(miny, maxy, spacing, width / 2)
        lines = [LineString([(minx - 1, y), (maxx + 1, y)]) for y in offsets]

    for i, line in enumerate(lines):
        pieces = _clip_line(line, polygon)
        # For snake order: reverse every other raster
        if i % 2 == 1:
            pieces = [list(reversed(coords)) for coords in reversed(pieces)]
        for coords in pieces:
            segments.extend(segments_from_coords([coords[0], coords[-1]]))

    return segments


def _clip_line(line: LineString, polygon: Polygon) -> list[list[tuple[float, float]]]:
    intersection = line.intersection(polygon)
    if intersection.is_empty:
        return []

    raw: list[LineString] = []
    if isinstance(intersection, LineString):
        raw = [intersection]
    elif isinstance(intersection, MultiLineString):
        raw = list(intersection.geoms)
    else:
        for geom in getattr(intersection, "geoms", [intersection]):
            if isinstance(geom, LineString):
                raw.append(geom)

    return [list(ls.coords) for ls in raw if len(ls.coords) >= 2]


def _concentric_segments(
    polygon: Polygon, spacing: float, width: float
) -> list[PathSegment]:
    segments: list[PathSegment] = []
    inset = width / 2
    ring_poly = ensure_polygon(polygon.buffer(-inset, join_style="mitre"))

    while not ring_poly.is_empty:
        for poly in iter_polygons(ring_poly):
            segments.extend(ring_segments(poly))
        inset += spacing
        ring_poly = ensure_polygon(polygon.buffer(-inset, join_style="mitre"))

    return segments


# ---------------------------------------------------------------------------
# Outline
# ---------------------------------------------------------------------------


def _outline_segments(
    shape: CoatingShape, polygon: Polygon, settings: CoatingSettings
) -> list[PathSegment]:
    offset = settings.line_spacing_for(shape)
    passes = shape.outline_passes
    if not isinstance(passes, int) or passes < 1:
        passes = 1
    start = shape.outline_start or OutlineStart.CENTER

    if start is OutlineStart.OUTSIDE:
        first = offset
    elif start is OutlineStart.INSIDE:
        first = -offset
    else:
        first = 0.0

    segments: list[PathSegment] = []
    for n in range(passes):
        current = first + offset * n
        ring = polygon if current == 0 else polygon.buffer(current, join_style="mitre")
        for poly in iter_polygons(ensure_polygon(ring)):
            segments.extend(ring_segments(poly))
    return segments
