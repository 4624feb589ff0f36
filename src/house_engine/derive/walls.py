"""Outer wall derivation from level footprints.

Two forms are produced:
- shells: one ring-with-hole cross-section per level (footprint offset
  outward / inward by half the wall thickness), extruded by level height
- segments: one independent rectangular wall per footprint edge at full
  thickness, for consumers that need per-edge walls

Walls stand on the level elevation and reach elevation + height.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass

import numpy as np
from shapely.geometry import Polygon

from house_engine.geometry.polygon import offset_inward, signed_area, to_shapely
from house_engine.models.geometry import Point2D, Point3D
from house_engine.models.house import House

logger = logging.getLogger(__name__)


@dataclass
class DerivedWallShell:
    """Closed wall ring of one level."""

    id: str
    level_id: str
    outer_ring: list[Point2D]
    inner_ring: list[Point2D]
    base: float
    height: float

    @property
    def cross_section(self) -> Polygon:
        """Wall cross-section: outer ring with the inner ring as a hole."""
        return to_shapely(self.outer_ring, [self.inner_ring])


@dataclass
class DerivedWallSegment:
    """A straight wall along one footprint edge."""

    id: str
    level_id: str
    edge_index: int
    start: Point3D
    end: Point3D
    height: float
    thickness: float
    outward: tuple[float, float]

    @property
    def length(self) -> float:
        return math.hypot(self.end.x - self.start.x, self.end.y - self.start.y)


def derive_wall_shells(house: House) -> list[DerivedWallShell]:
    """One wall shell per level."""
    half = house.wall_thickness / 2
    shells: list[DerivedWallShell] = []
    for level in house.levels:
        outer = level.footprint.outer
        shells.append(DerivedWallShell(
            id=f"wall-shell-{level.id}",
            level_id=level.id,
            outer_ring=offset_inward(outer, -half),
            inner_ring=offset_inward(outer, half),
            base=level.elevation,
            height=level.height,
        ))
    return shells


def derive_wall_segments(house: House) -> list[DerivedWallSegment]:
    """One wall segment per footprint edge, centered on the edge."""
    segments: list[DerivedWallSegment] = []
    for level in house.levels:
        outer = level.footprint.outer
        if len(outer) < 2:
            continue
        # Outward is the right normal of a CCW ring, the left normal of a CW one
        sign = 1.0 if signed_area(outer) > 0 else -1.0
        for i in range(len(outer)):
            a, b = level.footprint.edge(i)
            dx, dy = b.x - a.x, b.y - a.y
            length = math.hypot(dx, dy)
            if length == 0:
                logger.debug("Skipping zero-length edge %d on level '%s'", i, level.id)
                continue
            segments.append(DerivedWallSegment(
                id=f"wall-{level.id}-{i}",
                level_id=level.id,
                edge_index=i,
                start=Point3D(x=a.x, y=a.y, z=level.elevation),
                end=Point3D(x=b.x, y=b.y, z=level.elevation),
                height=level.height,
                thickness=house.wall_thickness,
                outward=(sign * dy / length, -sign * dx / length),
            ))
    return segments


def wall_segment_box(segment: DerivedWallSegment) -> np.ndarray:
    """Eight corners of a wall segment's box, shape (8, 3).

    Order: bottom (start+n, start-n, end+n, end-n), then the same on top,
    where n is half the thickness along the left normal.
    """
    dx = segment.end.x - segment.start.x
    dy = segment.end.y - segment.start.y
    length = math.hypot(dx, dy)
    if length == 0:
        return np.zeros((0, 3))

    px, py = -dy / length, dx / length
    half = segment.thickness / 2
    z0 = segment.start.z
    z1 = z0 + segment.height

    footprint = [
        (segment.start.x + px * half, segment.start.y + py * half),
        (segment.start.x - px * half, segment.start.y - py * half),
        (segment.end.x + px * half, segment.end.y + py * half),
        (segment.end.x - px * half, segment.end.y - py * half),
    ]
    corners = [(x, y, z0) for x, y in footprint] + [(x, y, z1) for x, y in footprint]
    return np.array(corners, dtype=float)
