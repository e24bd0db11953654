"""Global coating settings (persisted to disk).

Per-shape overrides on :class:`~coatingcam.core.shapes.CoatingShape` take
precedence over these values wherever they are set.
"""

from __future__ import annotations

import json
import warnings
from dataclasses import asdict, dataclass, fields
from enum import Enum
from pathlib import Path
from typing import Optional

from ..core.shapes import (
    AvoidanceStrategy,
    CoatingShape,
    FillPattern,
    as_number,
    number_or,
)
from ..core.units import DEFAULT_PIXELS_PER_MM, Units


@dataclass
class CoatingSettings:
    """Coating defaults, serialized to ~/.coatingcam/settings.json."""

    coating_width: float = 10.0          # mm
    line_spacing: float = 10.0           # mm
    coating_speed: float = 1000.0        # mm/min
    move_speed: float = 2000.0           # mm/min

    safe_height: float = 80.0            # mm
    coating_height: float = 20.0         # mm

    fill_pattern: FillPattern = FillPattern.AUTO

    enable_masking: bool = True
    masking_clearance: float = 0.0       # mm
    travel_avoidance_strategy: AvoidanceStrategy = AvoidanceStrategy.CONTOUR

    unit: Units = Units.MM
    pixels_per_mm: float = DEFAULT_PIXELS_PER_MM

    # -- per-shape resolution ----------------------------------------------

    def coating_height_for(self, shape: CoatingShape) -> float:
        return number_or(shape.coating_height, self.coating_height)

    def coating_speed_for(self, shape: CoatingShape) -> float:
        speed = number_or(shape.coating_speed, self.coating_speed)
        return speed if speed > 0 else self.coating_speed

    def coating_width_for(self, shape: CoatingShape) -> float:
        return number_or(shape.coating_width, self.coating_width)

    def line_spacing_for(self, shape: CoatingShape) -> float:
        return number_or(shape.line_spacing, self.line_spacing)

    def fill_pattern_for(self, shape: CoatingShape) -> FillPattern:
        return shape.fill_pattern or self.fill_pattern

    def avoidance_strategy_for(
        self, shape: Optional[CoatingShape] = None
    ) -> AvoidanceStrategy:
        if shape is not None and shape.avoidance_strategy is not None:
            return shape.avoidance_strategy
        return self.travel_avoidance_strategy

    # -- serialization -----------------------------------------------------

    def to_dict(self) -> dict:
        d = asdict(self)
        for k, v in d.items():
            if isinstance(v, Enum):
                d[k] = v.value
        return d

    @classmethod
    def from_dict(cls, data: dict) -> CoatingSettings:
        """Build settings from *data*, ignoring unknown keys.

        Values of the wrong type fall back to the field default with a
        warning.
        """
        defaults = cls()
        kwargs = {}
        for f in fields(cls):
            if f.name not in data:
                continue
            default = getattr(defaults, f.name)
            value = data[f.name]
            try:
                if isinstance(default, Enum):
                    value = type(default)(value)
                elif isinstance(default, bool):
                    if not isinstance(value, bool):
                        raise ValueError(value)
                elif isinstance(default, float):
                    if as_number(value) is None:
                        raise ValueError(value)
                    value = float(value)
            except ValueError:
                warnings.warn(
                    f"Invalid setting {f.name}={value!r}; using {default!r}",
                    UserWarning,
                    stacklevel=2,
                )
                continue
            kwargs[f.name] = value
        return cls(**kwargs)

    @staticmethod
    def _path() -> Path:
        return Path.home() / ".coatingcam" / "settings.json"

    def save(self, path: Optional[Path] = None) -> None:
        p = path or self._path()
        p.parent.mkdir(parents=True, exist_ok=True)
        p.write_text(json.dumps(self.to_dict(), indent=2))

    @classmethod
    def load(cls, path: Optional[Path] = None) -> CoatingSettings:
        p = path or cls._path()
        if p.exists():
            return cls.from_dict(json.loads(p.read_text()))
        return cls()
