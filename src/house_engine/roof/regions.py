"""Face-region resolution for multi-plane roofs.

A face region is turned into an ordered list of concrete half-planes:
ridge-perpendicular cuts and ridge dividers are resolved against the roof's
ridge segments. Ridge-cap triangles have no half-plane form.
"""

from __future__ import annotations

import math

from house_engine.config import PERP_CUT_PROBE_DISTANCE, REFERENCE_HALF_EXTENT
from house_engine.geometry.polygon import side_of_line
from house_engine.models.geometry import Point2D
from house_engine.models.roofs import (
    CompoundRegion,
    ExplicitPlane,
    FaceRegion,
    HalfPlane,
    HalfPlanesRegion,
    MaterializedDivider,
    MultiPlaneRoof,
    RidgeCapTriangleRegion,
    RidgeDivider,
    RidgePerpCut,
    RidgeSegment,
)


def ridge_point_at(ridge: RidgeSegment, t: float) -> Point2D:
    """Point at parameter t along the ridge (0 = start, 1 = end)."""
    return Point2D(
        x=ridge.start.x + (ridge.end.x - ridge.start.x) * t,
        y=ridge.start.y + (ridge.end.y - ridge.start.y) * t,
    )


def ridge_perp_cut_to_half_plane(ridge: RidgeSegment, t: float, keep: str) -> HalfPlane:
    """Half-plane through the ridge point at t, perpendicular to the ridge.

    "ahead" keeps the side the ridge direction points into, "behind" the
    other one. The side is found by probing just past the cut.
    """
    e = ridge_point_at(ridge, t)
    dx = ridge.end.x - ridge.start.x
    dy = ridge.end.y - ridge.start.y
    length = math.hypot(dx, dy) or 1.0
    ux, uy = dx / length, dy / length
    nx, ny = -uy, ux

    a = Point2D(x=e.x - nx * REFERENCE_HALF_EXTENT, y=e.y - ny * REFERENCE_HALF_EXTENT)
    b = Point2D(x=e.x + nx * REFERENCE_HALF_EXTENT, y=e.y + ny * REFERENCE_HALF_EXTENT)

    probe = Point2D(
        x=e.x + ux * PERP_CUT_PROBE_DISTANCE, y=e.y + uy * PERP_CUT_PROBE_DISTANCE
    )
    keep_ahead = "left" if side_of_line(probe, a, b) >= 0 else "right"
    if keep == "ahead":
        return HalfPlane(a=a, b=b, keep=keep_ahead)
    return HalfPlane(a=a, b=b, keep="right" if keep_ahead == "left" else "left")


def ridge_divider_to_half_plane(ridge: RidgeSegment, keep: str) -> HalfPlane:
    """Half-plane along the ridge's own line."""
    return HalfPlane(a=ridge.start, b=ridge.end, keep=keep)


def resolve_region(region: FaceRegion, roof: MultiPlaneRoof) -> list[HalfPlane] | None:
    """Resolve a face region to concrete half-planes, in order.

    Returns None for ridge-cap triangles and for regions referencing a
    ridge the roof does not have.
    """
    if isinstance(region, HalfPlanesRegion):
        return list(region.planes)
    if isinstance(region, RidgeCapTriangleRegion):
        return None
    if not isinstance(region, CompoundRegion):
        raise TypeError(f"Unknown face region: {type(region).__name__}")

    planes: list[HalfPlane] = []
    for item in region.items:
        if isinstance(item, (ExplicitPlane, MaterializedDivider)):
            planes.append(HalfPlane(a=item.a, b=item.b, keep=item.keep))
        elif isinstance(item, RidgePerpCut):
            ridge = roof.get_ridge(item.ridge_id)
            if ridge is None:
                return None
            planes.append(ridge_perp_cut_to_half_plane(ridge, item.t, item.keep))
        elif isinstance(item, RidgeDivider):
            ridge = roof.get_ridge(item.ridge_id)
            if ridge is None:
                return None
            planes.append(ridge_divider_to_half_plane(ridge, item.keep))
        else:
            raise TypeError(f"Unknown region item: {type(item).__name__}")
    return planes


def normalize_multi_plane_roof(roof: MultiPlaneRoof) -> MultiPlaneRoof:
    """Materialize symbolic ridge dividers into concrete half-planes.

    Only compound regions of ridge-side faces are touched. Dividers whose
    ridge is unknown stay symbolic. Returns a new roof.
    """
    faces = []
    for face in roof.faces:
        region = face.region
        if face.kind != "ridgeSideSegment" or not isinstance(region, CompoundRegion):
            faces.append(face)
            continue

        items = []
        for item in region.items:
            ridge = roof.get_ridge(item.ridge_id) if isinstance(item, RidgeDivider) else None
            if ridge is None:
                items.append(item)
            else:
                items.append(
                    MaterializedDivider(
                        a=ridge.start, b=ridge.end, keep=item.keep, ridge_id=ridge.id
                    )
                )
        faces.append(face.model_copy(update={"region": CompoundRegion(items=items)}))

    return roof.model_copy(update={"faces": faces})
