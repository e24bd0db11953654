"""Job orchestrator: ties settings, shapes and masks together.

For each coating shape the job generates raw segments, filters them
through the masking engine and hands the survivors to the tour planner.
The CoatingJob class is the top-level entry point for the CLI.
"""

from __future__ import annotations

import asyncio
import json
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from ..config.defaults import DEFAULT_WORK_AREA, build_default_snippets
from ..config.settings import CoatingSettings
from ..gcode import gcode_writer as gw
from ..gcode.emitter import GCodeEmitter
from ..gcode.snippets import GCodeSnippet, wrap_body
from .shapes import CoatingShape
from .toolpath.base import PathGroup
from .toolpath.masking import MaskingEngine
from .toolpath.planner import CancelSignal, Emitter, ProgressCallback, TourPlanner
from .toolpath.raster import generate_raw_segments

logger = logging.getLogger(__name__)

DEFAULT_COATING_ORDER = 999


@dataclass
class CoatingJob:
    """A complete coating job: settings + work area + shapes + snippets."""

    name: str = "Untitled"
    settings: CoatingSettings = field(default_factory=CoatingSettings)
    work_area: tuple[float, float] = DEFAULT_WORK_AREA
    shapes: list[CoatingShape] = field(default_factory=list)
    snippets: list[GCodeSnippet] = field(default_factory=build_default_snippets)

    @property
    def active_shapes(self) -> list[CoatingShape]:
        return [s for s in self.shapes if not s.skip_coating]

    @property
    def mask_shapes(self) -> list[CoatingShape]:
        if not self.settings.enable_masking:
            return []
        return [s for s in self.active_shapes if s.is_masking]

    @property
    def coating_shapes(self) -> list[CoatingShape]:
        """Fill/outline shapes in coating order, then by x, then by y."""
        shapes = [s for s in self.active_shapes if s.is_coating]
        return sorted(shapes, key=lambda s: (
            s.coating_order if s.coating_order is not None else DEFAULT_COATING_ORDER,
            s.x,
            s.y,
        ))

    async def generate(
        self,
        emitter: Emitter,
        on_progress: Optional[ProgressCallback] = None,
        cancel: Optional[CancelSignal] = None,
    ) -> list[PathGroup]:
        """Emit the coating body for every shape into *emitter*.

        When the emitter records its moves (as :class:`GCodeEmitter` does)
        the moves are also returned grouped per shape.
        """
        settings = self.settings
        masker = MaskingEngine(settings, self.mask_shapes)
        planner = TourPlanner(settings, masker, cancel=cancel)

        emitter.set_z(settings.safe_height)
        if on_progress:
            on_progress(5, "Analysing paths...")

        groups: list[PathGroup] = []
        recorded = getattr(emitter, "moves", None)
        shapes = self.coating_shapes
        if not shapes:
            if on_progress:
                on_progress(100, "No shapes to coat")
            return groups

        for i, shape in enumerate(shapes):
            if on_progress:
                on_progress(
                    5 + i / len(shapes) * 90,
                    f"{shape.label} {i + 1}/{len(shapes)} computing paths...",
                )

            raw = generate_raw_segments(shape, settings, masker)
            safe = masker.filter_segments(raw, shape)
            if not safe:
                logger.info("No coating path for %s", shape.display_name)
                emitter.add_line(gw.comment(f"{shape.display_name} - no path to generate"))
                continue

            first = len(recorded) if recorded is not None else 0
            await planner.plan_and_emit(
                safe, emitter, shape, _shape_slice(on_progress, i, len(shapes)))
            if recorded is not None:
                groups.append(PathGroup(
                    id=f"group-{shape.id}",
                    name=shape.display_name,
                    segments=recorded[first:],
                    source_shape_id=shape.id,
                ))
            await planner.checkpoint()

        if on_progress:
            on_progress(100, "G-code generation complete")
        return groups

    async def generate_gcode(
        self,
        on_progress: Optional[ProgressCallback] = None,
        cancel: Optional[CancelSignal] = None,
    ) -> tuple[str, GCodeEmitter]:
        """Full program text (snippets + body) and the emitter that built it."""
        emitter = GCodeEmitter(self.settings)
        await self.generate(emitter, on_progress, cancel)

        body = emitter.get_gcode()
        variables = {
            "unit": self.settings.unit.value,
            "unit_modal": self.settings.unit.gcode_modal,
            "work_area": {"width": self.work_area[0], "height": self.work_area[1]},
            "safe_height": self.settings.safe_height,
            "time": datetime.now(timezone.utc).isoformat(),
        }
        logger.info(
            "Generated %d lines (%d coating moves) for job %s",
            len(emitter.lines), emitter.coat_move_count, self.name,
        )
        return wrap_body(body, self.snippets, variables), emitter

    def generate_gcode_sync(
        self, on_progress: Optional[ProgressCallback] = None
    ) -> tuple[str, GCodeEmitter]:
        return asyncio.run(self.generate_gcode(on_progress))

    # -- persistence -------------------------------------------------------

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "work_area": {"width": self.work_area[0], "height": self.work_area[1]},
            "settings": self.settings.to_dict(),
            "shapes": [s.to_dict() for s in self.shapes],
            "snippets": [s.to_dict() for s in self.snippets],
        }

    @classmethod
    def from_dict(cls, data: dict) -> CoatingJob:
        """Build a job from a project dict.

        Raises
        ------
        ValueError:
            If *data* is not a dict or ``shapes`` is not a list.
        """
        if not isinstance(data, dict):
            raise ValueError("Project file must contain a JSON object")
        shapes = data.get("shapes", [])
        if not isinstance(shapes, list):
            raise ValueError("'shapes' must be a list")

        area = data.get("work_area") or {}
        work_area = (
            float(area.get("width", DEFAULT_WORK_AREA[0])),
            float(area.get("height", DEFAULT_WORK_AREA[1])),
        )
        snippets = (
            [GCodeSnippet.from_dict(s) for s in data["snippets"]]
            if "snippets" in data
            else build_default_snippets()
        )
        return cls(
            name=data.get("name", "Untitled"),
            settings=CoatingSettings.from_dict(data.get("settings") or {}),
            work_area=work_area,
            shapes=[CoatingShape.from_dict(s) for s in shapes],
            snippets=snippets,
        )


def load_job(path: Path) -> CoatingJob:
    """Load a JSON project file.

    Raises FileNotFoundError or ValueError on failure.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Project file not found: {path}")
    try:
        data = json.loads(path.read_text())
    except json.JSONDecodeError as exc:
        raise ValueError(f"Could not parse {path}: {exc}") from exc
    job = CoatingJob.from_dict(data)
    if job.name == "Untitled":
        job.name = path.stem
    return job


def _shape_slice(
    on_progress: Optional[ProgressCallback], index: int, count: int
) -> Optional[ProgressCallback]:
    """Rescale the planner's 20-90% range into shape *index*'s share of 5-95%."""
    if on_progress is None:
        return None
    lo = 5 + index / count * 90
    hi = 5 + (index + 1) / count * 90

    def report(percent: float, message: str) -> None:
        on_progress(lo + (percent - 20) / 70 * (hi - lo), message)

    return report
