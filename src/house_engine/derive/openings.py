"""Opening derivation: declarative openings → edge-local rectangles.

Each derived opening carries its rectangle in the host edge's (u, v) frame
(u along the edge from its start vertex, v up from the level elevation)
plus the world-space center, tangent and outward normal. Facade hole
cutting and decorative window/door builders both consume this.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Any

from house_engine.config import GEOM_EPSILON, OUTWARD_PROBE_DISTANCE
from house_engine.geometry.polygon import point_in_polygon, signed_area
from house_engine.models.geometry import Point2D, Point3D
from house_engine.models.house import House
from house_engine.models.openings import OpeningKind

logger = logging.getLogger(__name__)

Vec2 = tuple[float, float]


@dataclass
class DerivedOpening:
    """Opening rectangle on its host edge."""

    id: str
    kind: OpeningKind
    level_index: int
    edge_index: int
    u_min: float
    u_max: float
    v_min: float
    v_max: float
    center: Point3D
    tangent: Vec2
    outward: Vec2
    style: dict[str, Any] | None = None

    @property
    def width(self) -> float:
        return self.u_max - self.u_min

    @property
    def height(self) -> float:
        return self.v_max - self.v_min


def _probe_outside(outer: list[Point2D], origin: Point2D, normal: Vec2, distance: float) -> bool:
    probe = Point2D(x=origin.x + normal[0] * distance, y=origin.y + normal[1] * distance)
    return not point_in_polygon(outer, probe)


def pick_outward_normal(
    outer: list[Point2D],
    a: Point2D,
    tangent: Vec2,
    u_min: float,
    u_max: float,
    probe_distance: float = OUTWARD_PROBE_DISTANCE,
) -> Vec2:
    """Choose which edge normal points out of the footprint.

    The winding-consistent normal is returned whenever a probe just
    outside the span midpoint on its side tests outside the footprint.
    Otherwise the other normal is returned if its midpoint probe tests
    outside. Only when both midpoint probes land inside do extra probes at
    the quarter points and at twice the distance vote, ties going to the
    preferred normal.
    """
    tx, ty = tangent
    left = (-ty, tx)
    right = (ty, -tx)
    ccw = signed_area(outer) > 0
    preferred, fallback = (right, left) if ccw else (left, right)

    def at(u: float) -> Point2D:
        return Point2D(x=a.x + tx * u, y=a.y + ty * u)

    mid = at((u_min + u_max) / 2)
    preferred_out = _probe_outside(outer, mid, preferred, probe_distance)
    fallback_out = _probe_outside(outer, mid, fallback, probe_distance)
    if preferred_out:
        return preferred
    if fallback_out:
        return fallback

    span = u_max - u_min
    samples = [at(u_min + span * 0.25), mid, at(u_min + span * 0.75)]
    score = 0
    for origin in samples:
        for distance in (probe_distance, 2 * probe_distance):
            score += _probe_outside(outer, origin, preferred, distance)
            score -= _probe_outside(outer, origin, fallback, distance)
    if score < 0:
        logger.debug("Outward normal resolved to the non-winding side by vote")
        return fallback
    return preferred


def derive_openings(house: House) -> list[DerivedOpening]:
    """Derive the edge-local rectangle of every opening.

    Openings whose level or edge cannot be located are skipped; the
    opening validator rejects them with a precise error.
    """
    out: list[DerivedOpening] = []

    for opening in house.openings:
        level_index = house.level_index(opening.level_id)
        if level_index is None:
            logger.warning("Opening '%s' has unknown level '%s'", opening.id, opening.level_id)
            continue

        level = house.levels[level_index]
        outer = level.footprint.outer
        edge_index = opening.edge.edge_index
        if not outer or not 0 <= edge_index < len(outer):
            logger.warning("Opening '%s' has invalid edge %d", opening.id, edge_index)
            continue

        a, b = level.footprint.edge(edge_index)
        dx, dy = b.x - a.x, b.y - a.y
        edge_length = math.hypot(dx, dy)
        if edge_length <= GEOM_EPSILON:
            continue
        tangent = (dx / edge_length, dy / edge_length)

        if opening.edge.from_end:
            u_min = edge_length - (opening.offset + opening.width)
        else:
            u_min = opening.offset
        u_max = u_min + opening.width
        v_min = opening.sill_height
        v_max = opening.sill_height + opening.height

        side = opening.edge.outward_side
        if side == "left":
            outward = (-tangent[1], tangent[0])
        elif side == "right":
            outward = (tangent[1], -tangent[0])
        else:
            outward = pick_outward_normal(outer, a, tangent, u_min, u_max)

        u_mid = (u_min + u_max) / 2
        out.append(DerivedOpening(
            id=opening.id,
            kind=opening.kind,
            level_index=level_index,
            edge_index=edge_index,
            u_min=u_min,
            u_max=u_max,
            v_min=v_min,
            v_max=v_max,
            center=Point3D(
                x=a.x + tangent[0] * u_mid,
                y=a.y + tangent[1] * u_mid,
                z=level.elevation + (v_min + v_max) / 2,
            ),
            tangent=tangent,
            outward=outward,
            style=opening.style,
        ))

    return out
