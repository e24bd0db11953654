"""Tests for zone clustering."""

import pytest

from coatingcam.core.geometry import Point
from coatingcam.core.toolpath.base import PathSegment
from coatingcam.core.toolpath.zones import cluster_zones


def _grid_segments(n_rows: int, n_blocks: int) -> list[PathSegment]:
    """Short horizontal segments in *n_blocks* well separated clumps."""
    segments = []
    for block in range(n_blocks):
        x0 = block * 1000.0
        for row in range(n_rows):
            segments.append(PathSegment(Point(x0, row * 2.0), Point(x0 + 10, row * 2.0)))
    return segments


class TestClusterZones:
    def test_conservation(self):
        segments = _grid_segments(7, 3)
        zones = cluster_zones(segments, 5, 50)
        flat = [s for z in zones for s in z]
        assert len(flat) == len(segments)
        assert {s.id for s in flat} == {s.id for s in segments}

    def test_returns_k_zones(self):
        zones = cluster_zones(_grid_segments(2, 1), 5, 5)
        assert len(zones) == 5
        assert sum(len(z) for z in zones) == 2

    def test_deterministic(self):
        segments = _grid_segments(6, 4)
        first = cluster_zones(segments, 5, 10)
        second = cluster_zones(segments, 5, 10)
        assert [[s.id for s in z] for z in first] == [[s.id for s in z] for z in second]

    def test_separated_blocks_stay_together(self):
        grid = _grid_segments(4, 2)
        # Seeds come from the first k midpoints: one per block
        segments = [grid[0], grid[4], *grid[1:4], *grid[5:]]
        zones = [z for z in cluster_zones(segments, 2, 20) if z]
        assert len(zones) == 2
        for zone in zones:
            xs = {s.start.x for s in zone}
            assert len(xs) == 1

    def test_zone_keeps_segment_data(self):
        seg = PathSegment(Point(0, 0), Point(1, 1), speed=123.0, comment="x")
        zones = cluster_zones([seg], 3, 5)
        assert zones[0] == [seg]

    @pytest.mark.parametrize("k", [0, -1])
    def test_no_zones_for_non_positive_k(self, k):
        assert cluster_zones(_grid_segments(2, 1), k) == []

    def test_empty_input(self):
        assert cluster_zones([], 5) == []
