"""Toolpath planning package."""

from .base import PathGroup, PathSegment, SegmentKind
from .masking import MaskingEngine
from .planner import PlanningCancelled, TourPlanner
from .zones import cluster_zones

__all__ = [
    "PathGroup",
    "PathSegment",
    "SegmentKind",
    "MaskingEngine",
    "PlanningCancelled",
    "TourPlanner",
    "cluster_zones",
]
