"""Tests for G-code formatting and the G-code emitter."""

import pytest

from coatingcam.config.settings import CoatingSettings
from coatingcam.core.geometry import Point
from coatingcam.core.toolpath.base import SegmentKind
from coatingcam.core.units import Units
from coatingcam.gcode import gcode_writer as gw
from coatingcam.gcode.emitter import GCodeEmitter


class TestWriter:
    def test_fmt(self):
        assert gw.fmt(1.23456) == "1.235"
        assert gw.fmt(1000, 0) == "1000"
        assert gw.fmt(-0.0001) == "0.000"
        assert gw.fmt(-1.5) == "-1.500"

    def test_rapid(self):
        assert gw.rapid(x=1, y=2, f=2000) == "G0 F2000 X1.000 Y2.000"

    def test_linear_z_only(self):
        assert gw.linear(z=-0.5) == "G1 Z-0.500"

    def test_comment(self):
        assert gw.comment("hello") == "; hello"
        assert gw.comment("; already") == "; already"

    def test_nozzle(self):
        assert gw.nozzle(True) == "M503 ; Nozzle ON"
        assert gw.nozzle(False) == "M504 ; Nozzle OFF"


@pytest.fixture
def emitter() -> GCodeEmitter:
    return GCodeEmitter(CoatingSettings(pixels_per_mm=10.0, move_speed=2000.0))


class TestEmitter:
    def test_starts_at_origin_safe_height(self, emitter):
        assert emitter.get_current_position() == Point(0.0, 0.0, 80.0)
        assert emitter.get_gcode() == ""

    def test_travel_converts_pixels(self, emitter):
        emitter.travel_to(100, 50)
        assert emitter.lines == ["G0 F2000 X10.000 Y5.000"]
        move = emitter.moves[0]
        assert move.kind is SegmentKind.TRAVEL
        assert move.end == Point(100, 50, 80.0)
        assert move.feed_rate == 2000
        assert move.source_line_ref == 1

    def test_coat_move(self, emitter):
        emitter.coat_to_with_speed(200, 0, 500)
        assert emitter.lines == ["G1 F500 X20.000 Y0.000"]
        assert emitter.coat_move_count == 1

    def test_set_z_keeps_xy(self, emitter):
        emitter.travel_to(100, 50)
        emitter.set_coating_z(20.0)
        assert emitter.lines[-1] == "G0 F2000 X10.000 Y5.000 Z20.000"
        assert emitter.get_current_position() == Point(100, 50, 20.0)

    def test_redundant_moves_skipped(self, emitter):
        emitter.travel_to(0, 0)
        emitter.set_z(80.0)
        emitter.travel_to(0.005, 0)
        assert emitter.lines == []
        assert emitter.moves == []

    def test_nozzle_and_comment_lines(self, emitter):
        emitter.add_line("; start")
        emitter.nozzle_on()
        emitter.nozzle_off()
        assert emitter.get_gcode() == "; start\nM503 ; Nozzle ON\nM504 ; Nozzle OFF\n"

    def test_inch_output(self):
        emitter = GCodeEmitter(CoatingSettings(unit=Units.INCH, pixels_per_mm=1.0))
        emitter.travel_to(25.4, 0)
        emitter.set_z(25.4)
        assert emitter.lines == ["G0 F2000 X1.000 Y0.000", "G0 F2000 X1.000 Y0.000 Z1.000"]

    def test_invalid_scale_falls_back(self):
        emitter = GCodeEmitter(CoatingSettings(pixels_per_mm=0.0))
        emitter.travel_to(100, 0)
        assert emitter.lines == ["G0 F2000 X10.000 Y0.000"]

    def test_suppressed_move_updates_position(self):
        emitter = GCodeEmitter(CoatingSettings(pixels_per_mm=100.0))
        emitter.travel_to(0.05, 0)
        assert emitter.lines == []
        assert emitter.get_current_position() == Point(0.05, 0, 80.0)
        emitter.coat_to_with_speed(80, 0, 500)
        assert emitter.moves[0].start == Point(0.05, 0, 80.0)

    def test_suppressed_moves_do_not_accumulate(self):
        emitter = GCodeEmitter(CoatingSettings(pixels_per_mm=100.0))
        for step in range(1, 4):
            emitter.travel_to(0.04 * step, 0)
        # 0.12 px is 0.0012 mm from the last written position
        assert emitter.lines == ["G0 F2000 X0.001 Y0.000"]
