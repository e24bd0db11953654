"""Tests for raw fill and outline path generation."""

import pytest

from coatingcam.config.settings import CoatingSettings
from coatingcam.core.geometry import Point
from coatingcam.core.shapes import (
    CoatingShape,
    CoatingType,
    FillPattern,
    OutlineStart,
    ShapeType,
)
from coatingcam.core.toolpath.masking import MaskingEngine
from coatingcam.core.toolpath.raster import (
    choose_raster_direction,
    generate_raw_segments,
    mask_density,
    raster_offsets,
    shape_polygon,
)


def _rect(w, h, coating_type=CoatingType.FILL, **kw) -> CoatingShape:
    return CoatingShape(
        id="r", type=ShapeType.RECTANGLE, coating_type=coating_type,
        x=0, y=0, width=w, height=h, **kw,
    )


def _total_length(segments) -> float:
    return sum(s.length for s in segments)


@pytest.fixture
def settings() -> CoatingSettings:
    return CoatingSettings(coating_width=10.0, line_spacing=10.0)


class TestRasterOffsets:
    def test_inset_both_ends(self):
        assert raster_offsets(0, 30, 10, 5) == pytest.approx([5, 15, 25])

    def test_too_narrow(self):
        assert raster_offsets(0, 8, 10, 5) == []

    def test_single_line(self):
        assert raster_offsets(0, 10, 10, 5) == pytest.approx([5])


class TestFill:
    def test_horizontal_rows(self, settings):
        shape = _rect(100, 30, fill_pattern=FillPattern.HORIZONTAL)
        segments = generate_raw_segments(shape, settings)

        assert len(segments) == 3
        assert [s.start.y for s in segments] == pytest.approx([5, 15, 25])
        assert all(s.length == pytest.approx(100) for s in segments)

    def test_snake_order(self, settings):
        shape = _rect(100, 30, fill_pattern=FillPattern.HORIZONTAL)
        segments = generate_raw_segments(shape, settings)
        directions = [s.end.x > s.start.x for s in segments]
        assert directions == [True, False, True]

    def test_vertical_rows(self, settings):
        shape = _rect(100, 30, fill_pattern=FillPattern.VERTICAL)
        segments = generate_raw_segments(shape, settings)
        assert len(segments) == 10
        assert all(s.start.x == pytest.approx(s.end.x) for s in segments)

    def test_auto_follows_long_side(self, settings):
        wide = generate_raw_segments(_rect(100, 30), settings)
        tall = generate_raw_segments(_rect(30, 100), settings)
        assert all(s.start.y == pytest.approx(s.end.y) for s in wide)
        assert all(s.start.x == pytest.approx(s.end.x) for s in tall)

    def test_concentric(self, settings):
        shape = _rect(40, 40, fill_pattern=FillPattern.CONCENTRIC)
        segments = generate_raw_segments(shape, settings)
        # 30x30 ring then 10x10 ring
        assert _total_length(segments) == pytest.approx(160)

    def test_circle_chords_inside(self, settings):
        shape = CoatingShape(
            id="c", type=ShapeType.CIRCLE, coating_type=CoatingType.FILL,
            x=50, y=50, radius=20, fill_pattern=FillPattern.HORIZONTAL,
        )
        segments = generate_raw_segments(shape, settings)
        assert len(segments) == 4
        center = Point(50, 50)
        for s in segments:
            assert s.start.distance_to(center) <= 20 + 1e-6
            assert s.end.distance_to(center) <= 20 + 1e-6

    def test_shape_overrides(self, settings):
        shape = _rect(100, 30, fill_pattern=FillPattern.HORIZONTAL,
                      line_spacing=5.0, coating_width=2.0)
        segments = generate_raw_segments(shape, settings)
        assert len(segments) == 6

    def test_zero_spacing(self):
        settings = CoatingSettings(line_spacing=0.0)
        assert generate_raw_segments(_rect(100, 30), settings) == []


class TestOutline:
    def test_center(self, settings):
        shape = _rect(100, 50, CoatingType.OUTLINE, line_spacing=5.0)
        segments = generate_raw_segments(shape, settings)
        assert _total_length(segments) == pytest.approx(300)
        assert segments[0].start == segments[-1].end

    def test_outside_passes(self, settings):
        shape = _rect(100, 50, CoatingType.OUTLINE, line_spacing=5.0,
                      outline_passes=2, outline_start=OutlineStart.OUTSIDE)
        segments = generate_raw_segments(shape, settings)
        assert _total_length(segments) == pytest.approx(340 + 380)

    def test_inside(self, settings):
        shape = _rect(100, 50, CoatingType.OUTLINE, line_spacing=5.0,
                      outline_start=OutlineStart.INSIDE)
        segments = generate_raw_segments(shape, settings)
        assert _total_length(segments) == pytest.approx(260)

    def test_bad_pass_count(self, settings):
        shape = _rect(100, 50, CoatingType.OUTLINE, outline_passes=0)
        assert _total_length(generate_raw_segments(shape, settings)) == pytest.approx(300)


class TestEdgeCases:
    def test_masking_shape_has_no_paths(self, settings):
        assert generate_raw_segments(_rect(10, 10, CoatingType.MASKING), settings) == []

    def test_degenerate_geometry_warns(self, settings):
        with pytest.warns(UserWarning, match="no usable geometry"):
            assert generate_raw_segments(_rect(0, 10), settings) == []

    def test_circle_without_radius(self):
        shape = CoatingShape(id="c", type=ShapeType.CIRCLE, coating_type=CoatingType.FILL)
        assert shape_polygon(shape).is_empty


class TestDirection:
    def _mask(self, x, y, w, h) -> CoatingShape:
        return CoatingShape(
            id="m", type=ShapeType.RECTANGLE, coating_type=CoatingType.MASKING,
            x=x, y=y, width=w, height=h,
        )

    def test_dense_masking_flips(self, settings):
        masker = MaskingEngine(settings, [self._mask(-10, -10, 200, 200)])
        polygon = shape_polygon(_rect(100, 30))
        assert mask_density(polygon, masker) == pytest.approx(1.0)
        assert choose_raster_direction(polygon, masker) is FillPattern.VERTICAL

    def test_threshold_is_exclusive(self, settings):
        # Covers the first two sample columns (x=10, x=30)
        masker = MaskingEngine(settings, [self._mask(-10, -10, 40, 50)])
        polygon = shape_polygon(_rect(100, 30))
        assert mask_density(polygon, masker) == pytest.approx(0.4)
        assert choose_raster_direction(polygon, masker) is FillPattern.HORIZONTAL

    def test_no_masker(self):
        assert choose_raster_direction(shape_polygon(_rect(30, 100))) is FillPattern.VERTICAL
