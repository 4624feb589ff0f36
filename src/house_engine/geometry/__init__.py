"""Polygon kernel: winding, offsets, intersections, containment, clipping."""

from house_engine.geometry.polygon import (
    clip_by_half_plane,
    line_intersection,
    offset_inward,
    point_in_polygon,
    polygon_difference,
    side_of_line,
    signed_area,
    triangulate,
)

__all__ = [
    "clip_by_half_plane",
    "line_intersection",
    "offset_inward",
    "point_in_polygon",
    "polygon_difference",
    "side_of_line",
    "signed_area",
    "triangulate",
]
