"""Shapely helpers shared by the path generators."""

from __future__ import annotations

from shapely.geometry import GeometryCollection, MultiPolygon, Polygon
from shapely.ops import unary_union
from shapely.validation import make_valid

from .base import PathSegment, segments_from_coords


def ensure_polygon(geom) -> Polygon | MultiPolygon:
    """Return a valid Polygon or MultiPolygon, or empty Polygon on failure."""
    if geom is None or geom.is_empty:
        return Polygon()
    if not geom.is_valid:
        geom = make_valid(geom)
    if isinstance(geom, (Polygon, MultiPolygon)):
        return geom
    if isinstance(geom, GeometryCollection):
        polys = [g for g in geom.geoms if isinstance(g, (Polygon, MultiPolygon))]
        if polys:
            return unary_union(polys)
    return Polygon()


def iter_polygons(geom: Polygon | MultiPolygon):
    """Yield individual non-empty Polygons from a possibly Multi geometry."""
    if isinstance(geom, Polygon):
        if not geom.is_empty:
            yield geom
    elif isinstance(geom, MultiPolygon):
        for p in geom.geoms:
            if not p.is_empty:
                yield p


def ring_segments(polygon: Polygon) -> list[PathSegment]:
    """Closed exterior ring of *polygon* as consecutive coat segments."""
    coords = list(polygon.exterior.coords)
    if len(coords) < 2:
        return []
    if coords[0] != coords[-1]:
        coords.append(coords[0])
    return segments_from_coords(coords)
