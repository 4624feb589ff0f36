"""Geometric primitives for house entities."""

from __future__ import annotations

import math

from house_engine.models.base import SpecModel


class Point2D(SpecModel):
    """2D point in the plan (XY) plane, meters."""

    x: float
    y: float

    def distance_to(self, other: Point2D) -> float:
        """Euclidean distance to another point."""
        return math.sqrt((self.x - other.x) ** 2 + (self.y - other.y) ** 2)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Point2D):
            return NotImplemented
        return math.isclose(self.x, other.x, abs_tol=1e-6) and math.isclose(
            self.y, other.y, abs_tol=1e-6
        )

    def __hash__(self) -> int:
        return hash((round(self.x, 6), round(self.y, 6)))


class Point3D(SpecModel):
    """3D point (meters). Z is elevation."""

    x: float
    y: float
    z: float

    def distance_to(self, other: Point3D) -> float:
        """Euclidean distance to another point."""
        return math.sqrt(
            (self.x - other.x) ** 2
            + (self.y - other.y) ** 2
            + (self.z - other.z) ** 2
        )


class Footprint(SpecModel):
    """Horizontal outline of a level: outer ring plus optional holes.

    Rings are open (the first vertex is not repeated).
    """

    outer: list[Point2D]
    holes: list[list[Point2D]] = []

    @property
    def edge_count(self) -> int:
        return len(self.outer)

    def edge(self, index: int) -> tuple[Point2D, Point2D]:
        """Endpoints of outer edge `index` (wraps to the first vertex)."""
        n = len(self.outer)
        return self.outer[index], self.outer[(index + 1) % n]
