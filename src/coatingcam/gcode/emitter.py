"""Concrete G-code emitter tracking the tool position.

Coordinates arrive in work-surface units (typically canvas pixels) and are
converted to millimetres with ``pixels_per_mm`` and then to the output
unit.  Z heights are already in millimetres.
"""

from __future__ import annotations

from typing import Optional

from ..config.settings import CoatingSettings
from ..core.geometry import Point
from ..core.toolpath.base import PathSegment, SegmentKind
from ..core.units import pixels_to_mm
from . import gcode_writer as gw

MOVE_EPSILON_MM = 0.001


class GCodeEmitter:
    """Accumulates G-code lines and records every emitted move."""

    def __init__(self, settings: CoatingSettings):
        self.settings = settings
        self._lines: list[str] = []
        self._position = Point(0.0, 0.0, settings.safe_height)
        self._written = self._position
        self.moves: list[PathSegment] = []

    # -- conversion --------------------------------------------------------

    def to_output_units(self, value: float) -> float:
        """Work-surface coordinate to the output unit (mm or inch)."""
        mm = pixels_to_mm(value, self.settings.pixels_per_mm)
        return self.settings.unit.from_mm(mm)

    def _z_out(self, z: float) -> float:
        return self.settings.unit.from_mm(z)

    # -- emitter interface -------------------------------------------------

    def add_line(self, text: str) -> None:
        self._lines.append(text)

    def get_current_position(self) -> Point:
        return self._position

    def travel_to(self, x: float, y: float) -> None:
        self._move_to(x, y, None, self.settings.move_speed, SegmentKind.TRAVEL)

    def coat_to_with_speed(self, x: float, y: float, speed: float) -> None:
        self._move_to(x, y, None, speed, SegmentKind.COAT)

    def set_z(self, z: float) -> None:
        p = self._position
        self._move_to(p.x, p.y, z, self.settings.move_speed, SegmentKind.TRAVEL)

    def set_coating_z(self, z: float) -> None:
        self.set_z(z)

    def nozzle_on(self) -> None:
        self.add_line(gw.nozzle(True))

    def nozzle_off(self) -> None:
        self.add_line(gw.nozzle(False))

    # -- internals ---------------------------------------------------------

    def _move_to(
        self,
        x: float,
        y: float,
        z: Optional[float],
        speed: float,
        kind: SegmentKind,
    ) -> None:
        last = self._position
        new_z = last.z if z is None else z
        target = Point(x, y, new_z)

        # Measured from the last written line; the tracked position always
        # follows the caller.
        written = self._written
        ppm = self.settings.pixels_per_mm
        dx = abs(pixels_to_mm(x - written.x, ppm))
        dy = abs(pixels_to_mm(y - written.y, ppm))
        dz = abs(new_z - written.z)
        self._position = target
        if dx < MOVE_EPSILON_MM and dy < MOVE_EPSILON_MM and dz < MOVE_EPSILON_MM:
            return

        writer = gw.rapid if kind is SegmentKind.TRAVEL else gw.linear
        self.add_line(writer(
            x=self.to_output_units(x),
            y=self.to_output_units(y),
            z=None if z is None else self._z_out(z),
            f=speed,
        ))

        self._written = target
        self.moves.append(PathSegment(
            start=last,
            end=target,
            kind=kind,
            feed_rate=speed,
            source_line_ref=len(self._lines),
        ))

    # -- output ------------------------------------------------------------

    @property
    def lines(self) -> list[str]:
        return list(self._lines)

    @property
    def coat_move_count(self) -> int:
        return sum(1 for m in self.moves if m.kind is SegmentKind.COAT)

    def get_gcode(self) -> str:
        if not self._lines:
            return ""
        return "\n".join(self._lines) + "\n"
