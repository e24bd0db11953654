"""Output units and work-surface scale.

Shapes live on the work surface in its own units (canvas pixels for the
drawing host).  The emitter scales them to millimetres with
``pixels_per_mm`` and then to the program's output unit.
"""

from enum import Enum

MM_PER_INCH = 25.4
DEFAULT_PIXELS_PER_MM = 10.0


class Units(Enum):
    MM = "mm"
    INCH = "inch"

    @property
    def mm_per_unit(self) -> float:
        return MM_PER_INCH if self is Units.INCH else 1.0

    def to_mm(self, value: float) -> float:
        return value * self.mm_per_unit

    def from_mm(self, value: float) -> float:
        return value / self.mm_per_unit

    def label(self) -> str:
        return "in" if self is Units.INCH else "mm"

    @property
    def gcode_modal(self) -> str:
        """G20 (inch) or G21 (mm)."""
        return "G20" if self is Units.INCH else "G21"


def pixels_to_mm(value: float, pixels_per_mm: float) -> float:
    """Work-surface coordinate to millimetres.

    A non-positive *pixels_per_mm* falls back to
    :data:`DEFAULT_PIXELS_PER_MM`.
    """
    scale = pixels_per_mm if pixels_per_mm > 0 else DEFAULT_PIXELS_PER_MM
    return value / scale
