"""Drawn shapes and their coating intent.

Shapes are read-only snapshots handed over by the host document.  Per-shape
overrides are optional; anything missing or malformed falls back to the
global :class:`~coatingcam.config.settings.CoatingSettings`.
"""

from __future__ import annotations

import math
import warnings
from dataclasses import dataclass, field, fields
from enum import Enum
from typing import Any, Optional

from .geometry import Circle, Point, Rect


class ShapeType(Enum):
    RECTANGLE = "rectangle"
    CIRCLE = "circle"
    IMAGE = "image"          # handled as its bounding rectangle


class CoatingType(Enum):
    FILL = "fill"
    OUTLINE = "outline"
    MASKING = "masking"


class FillPattern(Enum):
    HORIZONTAL = "horizontal"
    VERTICAL = "vertical"
    CONCENTRIC = "concentric"
    AUTO = "auto"


class AvoidanceStrategy(Enum):
    LIFT = "lift"            # raise to safe Z and fly over
    CONTOUR = "contour"      # travel around the mask's perimeter


class OutlineStart(Enum):
    OUTSIDE = "outside"
    CENTER = "center"
    INSIDE = "inside"


def as_number(value: Any) -> Optional[float]:
    """Return *value* as a finite float, or None if it is not one."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    if not math.isfinite(value):
        return None
    return float(value)


def number_or(value: Any, default: float) -> float:
    n = as_number(value)
    return default if n is None else n


def _enum_or_none(enum_cls, value: Any, key: str):
    if value is None or isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(value)
    except ValueError:
        warnings.warn(
            f"Ignoring unknown {key} {value!r}",
            UserWarning,
            stacklevel=3,
        )
        return None


@dataclass
class CoatingShape:
    """A shape on the work surface tagged with a coating intent.

    ``x``/``y`` are the minimum corner for rectangles and images and the
    centre for circles.
    """

    id: str
    type: ShapeType
    coating_type: CoatingType
    name: str = ""
    x: float = 0.0
    y: float = 0.0
    width: Optional[float] = None
    height: Optional[float] = None
    radius: Optional[float] = None

    # Per-shape overrides
    coating_height: Optional[float] = None
    coating_speed: Optional[float] = None
    coating_width: Optional[float] = None
    line_spacing: Optional[float] = None
    fill_pattern: Optional[FillPattern] = None
    outline_passes: Optional[int] = None
    outline_start: Optional[OutlineStart] = None
    masking_clearance: Optional[float] = None
    avoidance_strategy: Optional[AvoidanceStrategy] = None

    skip_coating: bool = False
    coating_order: Optional[int] = None
    extra: dict[str, Any] = field(default_factory=dict)

    @property
    def label(self) -> str:
        """Short type label used in G-code annotations."""
        return "PCB" if self.type is ShapeType.IMAGE else self.type.value.upper()

    @property
    def display_name(self) -> str:
        return self.name or self.id

    @property
    def is_masking(self) -> bool:
        return self.coating_type is CoatingType.MASKING

    @property
    def is_coating(self) -> bool:
        return self.coating_type in (CoatingType.FILL, CoatingType.OUTLINE)

    def as_rect(self) -> Optional[Rect]:
        """Rectangle geometry for rectangle/image shapes, else None."""
        if self.type not in (ShapeType.RECTANGLE, ShapeType.IMAGE):
            return None
        return Rect(
            self.x,
            self.y,
            number_or(self.width, 0.0),
            number_or(self.height, 0.0),
        )

    def as_circle(self) -> Optional[Circle]:
        """Circle geometry, or None when not a circle or radius is missing."""
        if self.type is not ShapeType.CIRCLE:
            return None
        r = as_number(self.radius)
        if not r:
            return None
        return Circle(self.x, self.y, r)

    def bounds(self, clearance: float = 0.0) -> Optional[Rect]:
        """Axis-aligned bounding box grown by *clearance*."""
        rect = self.as_rect()
        if rect is not None:
            return rect.expanded(clearance)
        circle = self.as_circle()
        if circle is not None:
            return circle.expanded(clearance).bounds()
        return None

    def contains_point(self, p: Point) -> bool:
        rect = self.as_rect()
        if rect is not None:
            return rect.contains_point(p)
        circle = self.as_circle()
        if circle is not None:
            return circle.contains_point(p)
        return False

    @classmethod
    def from_dict(cls, d: dict) -> CoatingShape:
        """Build a shape from a JSON-style dict.

        Raises
        ------
        ValueError:
            If ``type`` or ``coating_type`` is missing or unknown.
        """
        d = dict(d)
        try:
            shape_type = ShapeType(d.pop("type"))
            coating_type = CoatingType(d.pop("coating_type"))
        except (KeyError, ValueError) as exc:
            raise ValueError(f"Invalid shape {d.get('id', '?')}: {exc}") from exc

        known = {f.name for f in fields(cls)}
        extra = {k: v for k, v in d.items() if k not in known}
        kwargs = {k: v for k, v in d.items() if k in known and k != "extra"}

        kwargs["fill_pattern"] = _enum_or_none(
            FillPattern, kwargs.get("fill_pattern"), "fill_pattern")
        kwargs["outline_start"] = _enum_or_none(
            OutlineStart, kwargs.get("outline_start"), "outline_start")
        kwargs["avoidance_strategy"] = _enum_or_none(
            AvoidanceStrategy, kwargs.get("avoidance_strategy"),
            "avoidance_strategy")
        kwargs["x"] = number_or(kwargs.get("x"), 0.0)
        kwargs["y"] = number_or(kwargs.get("y"), 0.0)
        kwargs["id"] = str(kwargs.get("id", ""))

        return cls(type=shape_type, coating_type=coating_type, extra=extra, **kwargs)

    def to_dict(self) -> dict:
        d: dict[str, Any] = {}
        for f in fields(self):
            if f.name == "extra":
                continue
            value = getattr(self, f.name)
            if isinstance(value, Enum):
                value = value.value
            if value is not None:
                d[f.name] = value
        d.update(self.extra)
        return d
