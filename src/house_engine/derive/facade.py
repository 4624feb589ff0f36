"""Facade panels: one thin wall panel per footprint edge, with opening holes.

Outlines are 2D rectangles in the panel's local frame, centered on the
panel (x along the edge, y up). The panel is placed at `center` and faces
`outward`; an external mesh layer extrudes it by `thickness`.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field

from house_engine.config import FACADE_PANEL_THICKNESS, MIN_HOLE_SIZE
from house_engine.derive.openings import DerivedOpening, pick_outward_normal
from house_engine.models.geometry import Point3D
from house_engine.models.house import House

Rect = tuple[float, float, float, float]  # (x_min, y_min, x_max, y_max)


@dataclass
class FacadePanel:
    id: str
    level_index: int
    edge_index: int
    width: float
    height: float
    outline: Rect
    center: Point3D
    outward: tuple[float, float]
    thickness: float
    holes: list[Rect] = field(default_factory=list)
    opening_ids: list[str] = field(default_factory=list)

    @property
    def yaw(self) -> float:
        """Rotation about Z taking local +X to the panel's outward direction."""
        return math.atan2(self.outward[1], self.outward[0])

    @property
    def solid_area(self) -> float:
        """Panel area minus its holes."""
        holes = sum((x1 - x0) * (y1 - y0) for x0, y0, x1, y1 in self.holes)
        return self.width * self.height - holes


def build_facade_panels(
    house: House,
    openings: list[DerivedOpening],
    thickness: float = FACADE_PANEL_THICKNESS,
) -> list[FacadePanel]:
    """Build facade panels for every level edge, cutting opening holes."""
    panels: list[FacadePanel] = []

    for level_index, level in enumerate(house.levels):
        outer = level.footprint.outer
        if len(outer) < 2:
            continue

        for edge_index in range(len(outer)):
            a, b = level.footprint.edge(edge_index)
            dx, dy = b.x - a.x, b.y - a.y
            width = math.hypot(dx, dy)
            if width < MIN_HOLE_SIZE:
                continue
            tangent = (dx / width, dy / width)
            half_w = width / 2
            half_h = level.height / 2

            edge_openings = [
                op for op in openings
                if op.level_index == level_index and op.edge_index == edge_index
            ]
            holes: list[Rect] = []
            for op in edge_openings:
                x_min, x_max = op.u_min - half_w, op.u_max - half_w
                y_min, y_max = op.v_min - half_h, op.v_max - half_h
                if x_max - x_min <= MIN_HOLE_SIZE or y_max - y_min <= MIN_HOLE_SIZE:
                    continue
                holes.append((x_min, y_min, x_max, y_max))

            if edge_openings:
                outward = edge_openings[0].outward
            else:
                outward = pick_outward_normal(outer, a, tangent, 0.0, width)

            panels.append(FacadePanel(
                id=f"wall_L{level_index}_E{edge_index}",
                level_index=level_index,
                edge_index=edge_index,
                width=width,
                height=level.height,
                outline=(-half_w, -half_h, half_w, half_h),
                center=Point3D(
                    x=(a.x + b.x) / 2,
                    y=(a.y + b.y) / 2,
                    z=level.elevation + half_h,
                ),
                outward=outward,
                thickness=thickness,
                holes=holes,
                opening_ids=[op.id for op in edge_openings],
            ))

    return panels
