"""Sanity checks on an emitted coating program.

The one failure worth surfacing to the user is a program that coats
nothing; out-of-envelope moves and excessive feeds are reported as well.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from ..core.toolpath.base import PathSegment, SegmentKind


@dataclass
class WorkEnvelope:
    """XY limits of the work surface (in work-surface units) and feed cap."""

    x_min: float = 0.0
    x_max: float = 1000.0
    y_min: float = 0.0
    y_max: float = 1000.0
    max_feed: Optional[float] = None   # mm/min, None disables the check

    @classmethod
    def from_work_area(
        cls, width: float, height: float, max_feed: Optional[float] = None
    ) -> WorkEnvelope:
        return cls(x_max=width, y_max=height, max_feed=max_feed)


@dataclass
class ValidationIssue:
    """A single validation problem found in the program."""

    severity: str  # "error" or "warning"
    message: str
    move: Optional[PathSegment] = None


@dataclass
class ValidationResult:
    issues: list[ValidationIssue] = field(default_factory=list)

    @property
    def has_errors(self) -> bool:
        return any(i.severity == "error" for i in self.issues)

    @property
    def has_warnings(self) -> bool:
        return any(i.severity == "warning" for i in self.issues)

    @property
    def is_ok(self) -> bool:
        return len(self.issues) == 0


def validate_program(
    moves: list[PathSegment],
    envelope: WorkEnvelope,
) -> ValidationResult:
    """Check emitted *moves* against *envelope*.

    Checks performed:
    - At least one coating move was emitted
    - All XY coordinates within the work envelope
    - Feed rates within the machine maximum
    """
    result = ValidationResult()

    if not any(m.kind is SegmentKind.COAT for m in moves):
        result.issues.append(ValidationIssue(
            "error",
            "No coating moves were emitted; the G-code would coat nothing",
        ))

    for move in moves:
        p = move.end
        if p.x < envelope.x_min or p.x > envelope.x_max:
            result.issues.append(ValidationIssue(
                "error",
                f"X={p.x:.3f} outside work area "
                f"[{envelope.x_min}, {envelope.x_max}]",
                move,
            ))
        if p.y < envelope.y_min or p.y > envelope.y_max:
            result.issues.append(ValidationIssue(
                "error",
                f"Y={p.y:.3f} outside work area "
                f"[{envelope.y_min}, {envelope.y_max}]",
                move,
            ))
        if (
            envelope.max_feed is not None
            and move.feed_rate is not None
            and move.feed_rate > envelope.max_feed
        ):
            result.issues.append(ValidationIssue(
                "warning",
                f"Feed {move.feed_rate:.1f} exceeds machine max "
                f"({envelope.max_feed:.1f})",
                move,
            ))

    return result
