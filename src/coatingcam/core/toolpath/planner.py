"""Tour planner: orders masked coating segments and drives an emitter.

Algorithm per coating shape
---------------------------
1. Cluster the safe segments into up to :data:`ZONE_COUNT` zones.
2. Pick the unvisited zone holding the segment endpoint nearest to the
   tool; that endpoint is the zone's entry point.
3. Travel to the entry point.  When the straight travel crosses masks,
   either detour around a single rectangular mask (``contour``) or lift to
   the safe height and fly over (``lift`` and every other case).
4. Drop to the shape's coating height and chain the zone's segments by
   nearest endpoint, reversing segments where that is shorter.
5. Lift to the safe height once every zone is done.

The planner yields to the event loop after each zone and every
:data:`YIELD_EVERY` segments while ordering zones larger than
:data:`LARGE_ZONE`.  Yielding never changes the output.
"""

from __future__ import annotations

import asyncio
import logging
import math
from typing import Callable, Optional, Protocol, Sequence

from ...config.settings import CoatingSettings
from ..geometry import Point, path_length
from ..shapes import AvoidanceStrategy, CoatingShape
from .base import PathSegment
from .masking import MaskingEngine
from .zones import cluster_zones

logger = logging.getLogger(__name__)

ZONE_COUNT = 5
ZONE_ITERATIONS = 5
POSITION_TOLERANCE = 0.01
LARGE_ZONE = 1000
YIELD_EVERY = 100

ProgressCallback = Callable[[float, str], None]


class Emitter(Protocol):
    """Stateful instruction sink consumed by the planner."""

    def get_current_position(self) -> Point: ...
    def travel_to(self, x: float, y: float) -> None: ...
    def coat_to_with_speed(self, x: float, y: float, speed: float) -> None: ...
    def set_z(self, z: float) -> None: ...
    def set_coating_z(self, z: float) -> None: ...
    def nozzle_on(self) -> None: ...
    def nozzle_off(self) -> None: ...
    def add_line(self, text: str) -> None: ...


class CancelSignal(Protocol):
    def is_set(self) -> bool: ...


class PlanningCancelled(Exception):
    """Raised at a yield point when the caller's cancel signal is set."""


class TourPlanner:
    """Plans and emits the motion sequence for one shape at a time."""

    def __init__(
        self,
        settings: CoatingSettings,
        masker: MaskingEngine,
        cancel: Optional[CancelSignal] = None,
    ):
        self.settings = settings
        self.masker = masker
        self.cancel = cancel

    async def checkpoint(self) -> None:
        """Cooperative yield point; raises if cancellation was requested."""
        if self.cancel is not None and self.cancel.is_set():
            raise PlanningCancelled("Toolpath planning cancelled")
        await asyncio.sleep(0)

    async def plan_and_emit(
        self,
        segments: Sequence[PathSegment],
        emitter: Emitter,
        shape: CoatingShape,
        on_progress: Optional[ProgressCallback] = None,
    ) -> None:
        """Emit coating moves for *segments* of *shape* into *emitter*."""
        if not segments:
            return

        zones = cluster_zones(segments, ZONE_COUNT, ZONE_ITERATIONS)
        unvisited = [z for z in zones if z]
        total_zones = len(unvisited)
        coating_z = self.settings.coating_height_for(shape)
        speed = self.settings.coating_speed_for(shape)

        emitter.add_line(f"; ---- {shape.label} {shape.display_name} start ----")

        processed = 0
        while unvisited:
            current = emitter.get_current_position()
            found = self._nearest_entry(unvisited, current)
            if found is None:
                break
            zone_idx, entry = found
            zone = unvisited.pop(zone_idx)

            self._travel_to_entry(emitter, current, entry, shape)
            emitter.set_coating_z(coating_z)

            ordered = await self.order_zone(zone, entry)
            for seg in ordered:
                pos = emitter.get_current_position()
                if pos.distance_to(seg.start) > POSITION_TOLERANCE:
                    emitter.travel_to(seg.start.x, seg.start.y)
                emitter.nozzle_on()
                emitter.coat_to_with_speed(seg.end.x, seg.end.y, speed)
                emitter.nozzle_off()

            processed += 1
            if on_progress is not None:
                on_progress(
                    20 + processed / total_zones * 70,
                    f"{shape.label} - zone {processed}/{total_zones} done",
                )
            await self.checkpoint()

        emitter.set_z(self.settings.safe_height)
        emitter.add_line(f"; ---- {shape.label} {shape.display_name} end ----")

    # -- zone selection ----------------------------------------------------

    @staticmethod
    def _nearest_entry(
        zones: list[list[PathSegment]], current: Point
    ) -> Optional[tuple[int, Point]]:
        best: Optional[tuple[int, Point]] = None
        best_dist = math.inf
        for idx, zone in enumerate(zones):
            for seg in zone:
                for candidate in (seg.start, seg.end):
                    dist = current.distance_to(candidate)
                    if dist < best_dist:
                        best_dist = dist
                        best = (idx, candidate)
        return best

    async def order_zone(
        self, zone: Sequence[PathSegment], start: Point
    ) -> list[PathSegment]:
        """Nearest-neighbour chain through *zone* starting at *start*.

        Ties go to the earlier segment, and to its start over its end.
        """
        remaining = list(zone)
        ordered: list[PathSegment] = []
        position = start
        large = len(zone) > LARGE_ZONE

        while remaining:
            best_idx = 0
            best_dist = math.inf
            reverse = False
            for idx, seg in enumerate(remaining):
                d_start = position.distance_to(seg.start)
                if d_start < best_dist:
                    best_idx, best_dist, reverse = idx, d_start, False
                d_end = position.distance_to(seg.end)
                if d_end < best_dist:
                    best_idx, best_dist, reverse = idx, d_end, True

            seg = remaining.pop(best_idx)
            if reverse:
                seg = seg.reversed()
            ordered.append(seg)
            position = seg.end

            if large and len(ordered) % YIELD_EVERY == 0:
                await self.checkpoint()

        return ordered

    # -- travel ------------------------------------------------------------

    def _travel_to_entry(
        self,
        emitter: Emitter,
        current: Point,
        entry: Point,
        shape: CoatingShape,
    ) -> None:
        masks = self.masker.find_intersecting_masks(current, entry)
        if not masks:
            emitter.travel_to(entry.x, entry.y)
            return

        strategy = self.effective_strategy(masks, shape)
        emitter.add_line(f"; [INFO] Mask collision detected. Strategy: {strategy.value}")

        if strategy is AvoidanceStrategy.CONTOUR and len(masks) == 1:
            waypoints = self.plan_detour(current, entry, masks[0])
            emitter.add_line(
                f"; [INFO] Detouring around {masks[0].display_name} "
                f"via {len(waypoints)} waypoints."
            )
            logger.debug("Detour around %s: %s", masks[0].display_name, waypoints)
            for wp in waypoints:
                emitter.travel_to(wp.x, wp.y)
            emitter.travel_to(entry.x, entry.y)
        else:
            emitter.add_line("; [INFO] Falling back to Z-Lift maneuver.")
            logger.debug("Lifting over %d mask(s)", len(masks))
            emitter.set_z(self.settings.safe_height)
            emitter.travel_to(entry.x, entry.y)

    def effective_strategy(
        self, masks: list[CoatingShape], shape: CoatingShape
    ) -> AvoidanceStrategy:
        """A single mask's own strategy wins; otherwise the shape/global one."""
        if len(masks) == 1:
            mask = masks[0]
            if mask.is_masking and mask.avoidance_strategy is not None:
                return mask.avoidance_strategy
        return self.settings.avoidance_strategy_for(shape)

    def plan_detour(
        self, start: Point, end: Point, mask: CoatingShape
    ) -> list[Point]:
        """Corner waypoints around a rectangular *mask*, shorter way round.

        Non-rectangular masks get no waypoints.
        """
        rect = self.masker.expanded_rect(mask)
        if rect is None:
            return []

        corners = rect.corners()
        first = _closest_index(corners, start)
        last = _closest_index(corners, end)

        forward = _walk(corners, first, last, step=1)
        backward = _walk(corners, first, last, step=3)

        if path_length([start, *forward, end]) < path_length([start, *backward, end]):
            return forward
        return backward


def _closest_index(points: list[Point], target: Point) -> int:
    return min(range(len(points)), key=lambda i: points[i].distance_to(target))


def _walk(corners: list[Point], first: int, last: int, step: int) -> list[Point]:
    path = []
    i = first
    while i != last:
        path.append(corners[i])
        i = (i + step) % len(corners)
    path.append(corners[last])
    return path
