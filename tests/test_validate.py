"""Tests for program validation."""

import pytest

from coatingcam.core.geometry import Point
from coatingcam.core.toolpath.base import PathSegment, SegmentKind
from coatingcam.gcode.validate import WorkEnvelope, validate_program


def _move(x0, y0, x1, y1, kind=SegmentKind.COAT, feed=1000.0) -> PathSegment:
    return PathSegment(Point(x0, y0), Point(x1, y1), kind, feed_rate=feed)


@pytest.fixture
def envelope() -> WorkEnvelope:
    return WorkEnvelope.from_work_area(500, 300, max_feed=3000)


class TestValidate:
    def test_clean_program(self, envelope):
        moves = [
            _move(0, 0, 100, 100, SegmentKind.TRAVEL, 2000),
            _move(100, 100, 200, 100),
        ]
        result = validate_program(moves, envelope)
        assert result.is_ok

    def test_no_coating_moves(self, envelope):
        moves = [_move(0, 0, 100, 100, SegmentKind.TRAVEL)]
        result = validate_program(moves, envelope)
        assert result.has_errors
        assert "coat nothing" in result.issues[0].message

    def test_empty_program(self, envelope):
        assert validate_program([], envelope).has_errors

    def test_outside_envelope(self, envelope):
        moves = [_move(0, 0, 600, 100), _move(600, 100, 100, -5)]
        result = validate_program(moves, envelope)
        messages = [i.message for i in result.issues if i.severity == "error"]
        assert len(messages) == 2
        assert messages[0].startswith("X=600.000")
        assert messages[1].startswith("Y=-5.000")
        assert result.issues[0].move is moves[0]

    def test_feed_warning(self, envelope):
        result = validate_program([_move(0, 0, 10, 0, feed=5000)], envelope)
        assert not result.has_errors
        assert result.has_warnings

    def test_no_feed_limit(self):
        envelope = WorkEnvelope.from_work_area(500, 300)
        result = validate_program([_move(0, 0, 10, 0, feed=50000)], envelope)
        assert result.is_ok
