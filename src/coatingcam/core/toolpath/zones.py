"""Spatial zone clustering of coating segments.

Segments are represented by their midpoints and grouped with a plain
k-means.  The first ``k`` midpoints seed the centroids, so the result is
fully determined by input order.
"""

from __future__ import annotations

from typing import Sequence

import numpy as np

from .base import PathSegment

CONVERGENCE_SHIFT = 0.01


def cluster_zones(
    segments: Sequence[PathSegment],
    k: int,
    max_iterations: int = 50,
) -> list[list[PathSegment]]:
    """Partition *segments* into ``k`` zones (some possibly empty).

    Every segment lands in exactly one zone and zones keep input order.
    With fewer than ``k`` segments the surplus zones stay empty.
    """
    if len(segments) == 0 or k <= 0:
        return []

    midpoints = np.array(
        [(s.midpoint.x, s.midpoint.y) for s in segments], dtype=float
    )
    centroids = midpoints[:k].copy()
    n_zones = len(centroids)

    for _ in range(max(max_iterations, 1)):
        assignments = _assign(midpoints, centroids)

        new_centroids = centroids.copy()
        for i in range(n_zones):
            members = midpoints[assignments == i]
            if len(members):
                new_centroids[i] = members.mean(axis=0)

        shift = np.linalg.norm(new_centroids - centroids, axis=1).sum()
        if shift < CONVERGENCE_SHIFT:
            break
        centroids = new_centroids

    zones: list[list[PathSegment]] = [[] for _ in range(k)]
    for seg, zone_idx in zip(segments, assignments):
        zones[int(zone_idx)].append(seg)
    return zones


def _assign(points: np.ndarray, centroids: np.ndarray) -> np.ndarray:
    """Index of the nearest centroid per point (first one wins ties)."""
    dist = np.linalg.norm(points[:, None, :] - centroids[None, :, :], axis=2)
    return np.argmin(dist, axis=1)
