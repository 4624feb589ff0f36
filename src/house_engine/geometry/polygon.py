"""2D polygon kernel for footprints and roof regions.

Polygons are open rings of Point2D (the first vertex is not repeated).
Positive signed area means counter-clockwise winding.

The half-plane side convention used throughout the roof code:

    side(p, a, b) = (p - a) x (b - a)

`keep="left"` keeps points with side >= -eps, `keep="right"` keeps
points with side <= eps.
"""

from __future__ import annotations

import math
from collections.abc import Sequence

import shapely
from shapely.geometry import Polygon

from house_engine.config import (
    GEOM_EPSILON,
    MITER_LIMIT_FACTOR,
    ON_EDGE_EPSILON,
    REFERENCE_HALF_EXTENT,
)
from house_engine.models.geometry import Point2D
from house_engine.models.roofs import HalfPlane

Vec2 = tuple[float, float]
Ring = list[Point2D]


def signed_area(points: Sequence[Point2D]) -> float:
    """Shoelace area. Sign gives winding (positive = CCW)."""
    n = len(points)
    area = 0.0
    for i in range(n):
        p1 = points[i]
        p2 = points[(i + 1) % n]
        area += p1.x * p2.y - p2.x * p1.y
    return area / 2.0


def _normalize(dx: float, dy: float) -> Vec2:
    length = math.hypot(dx, dy)
    if length < GEOM_EPSILON:
        return (0.0, 0.0)
    return (dx / length, dy / length)


def _cross(u: Vec2, v: Vec2) -> float:
    return u[0] * v[1] - u[1] * v[0]


def line_intersection(p1: Point2D, d1: Vec2, p2: Point2D, d2: Vec2) -> Point2D:
    """Intersect the lines p1 + s·d1 and p2 + t·d2.

    Near-parallel lines have no stable intersection; `p1` is returned in
    that case. Callers that need to tell the two apart must check the
    cross product of the directions themselves.
    """
    det = _cross(d1, d2)
    if abs(det) < GEOM_EPSILON:
        return p1
    dx = p2.x - p1.x
    dy = p2.y - p1.y
    t = (dx * d2[1] - dy * d2[0]) / det
    return Point2D(x=p1.x + d1[0] * t, y=p1.y + d1[1] * t)


def remove_consecutive_duplicates(points: Sequence[Point2D], eps: float = GEOM_EPSILON) -> Ring:
    """Drop consecutive duplicates, including a closing duplicate of the first point."""
    deduped: Ring = []
    for point in points:
        if not deduped or deduped[-1].distance_to(point) > eps:
            deduped.append(point)
    if len(deduped) > 1 and deduped[0].distance_to(deduped[-1]) <= eps:
        deduped.pop()
    return deduped


def offset_inward(points: Sequence[Point2D], distance: float) -> Ring:
    """Offset a polygon inward by `distance` (negative offsets outward).

    Each vertex becomes the intersection of its two adjacent edges' offset
    lines. Near-parallel edges, and miters longer than
    MITER_LIMIT_FACTOR × |distance|, are beveled: both offset segment
    endpoints are emitted instead of the miter point.
    """
    if len(points) < 3 or distance == 0:
        return list(points)

    ccw = signed_area(points) > 0
    miter_limit = MITER_LIMIT_FACTOR * abs(distance)
    n = len(points)
    result: Ring = []

    for i in range(n):
        p_prev = points[(i - 1) % n]
        p = points[i]
        p_next = points[(i + 1) % n]

        e1 = _normalize(p.x - p_prev.x, p.y - p_prev.y)
        e2 = _normalize(p_next.x - p.x, p_next.y - p.y)
        if e1 == (0.0, 0.0) or e2 == (0.0, 0.0):
            continue

        # Inward is the left normal for CCW rings, the right normal for CW
        if ccw:
            n1, n2 = (-e1[1], e1[0]), (-e2[1], e2[0])
        else:
            n1, n2 = (e1[1], -e1[0]), (e2[1], -e2[0])

        l1 = Point2D(x=p.x + n1[0] * distance, y=p.y + n1[1] * distance)
        l2 = Point2D(x=p.x + n2[0] * distance, y=p.y + n2[1] * distance)

        if abs(_cross(e1, e2)) < GEOM_EPSILON:
            result.extend((l1, l2))
            continue

        miter = line_intersection(l1, e1, l2, e2)
        if miter.distance_to(p) > miter_limit:
            result.extend((l1, l2))
        else:
            result.append(miter)

    return remove_consecutive_duplicates(result)


def _distance_to_segment(point: Point2D, a: Point2D, b: Point2D) -> float:
    abx, aby = b.x - a.x, b.y - a.y
    length_sq = abx * abx + aby * aby
    if length_sq < GEOM_EPSILON * GEOM_EPSILON:
        return point.distance_to(a)
    t = ((point.x - a.x) * abx + (point.y - a.y) * aby) / length_sq
    t = max(0.0, min(1.0, t))
    return math.hypot(point.x - (a.x + t * abx), point.y - (a.y + t * aby))


def point_in_polygon(
    polygon: Sequence[Point2D], point: Point2D, eps: float = ON_EDGE_EPSILON
) -> bool:
    """Ray-casting containment test.

    Points within `eps` of an edge count as inside.
    """
    n = len(polygon)
    if n < 3:
        return False

    inside = False
    j = n - 1
    for i in range(n):
        a = polygon[i]
        b = polygon[j]
        if _distance_to_segment(point, a, b) <= eps:
            return True
        if (a.y > point.y) != (b.y > point.y):
            x_cross = (b.x - a.x) * (point.y - a.y) / (b.y - a.y) + a.x
            if point.x < x_cross:
                inside = not inside
        j = i
    return inside


def side_of_line(p: Point2D, a: Point2D, b: Point2D) -> float:
    """Signed side of `p` relative to the directed line a→b: (p−a)×(b−a)."""
    return (p.x - a.x) * (b.y - a.y) - (p.y - a.y) * (b.x - a.x)


def _segment_line_hit(p: Point2D, q: Point2D, a: Point2D, b: Point2D) -> Point2D | None:
    rx, ry = q.x - p.x, q.y - p.y
    sx, sy = b.x - a.x, b.y - a.y
    denom = rx * sy - ry * sx
    if abs(denom) < GEOM_EPSILON:
        return None
    apx, apy = a.x - p.x, a.y - p.y
    t = (apx * sy - apy * sx) / denom
    if t < -GEOM_EPSILON or t > 1 + GEOM_EPSILON:
        return None
    return Point2D(x=p.x + t * rx, y=p.y + t * ry)


def clip_by_half_plane(
    polygon: Sequence[Point2D], plane: HalfPlane, eps: float = GEOM_EPSILON
) -> Ring:
    """Sutherland–Hodgman clip of `polygon` against one half-plane.

    Returns fewer than 3 vertices when the plane excludes the polygon.
    """
    if not polygon:
        return []

    def inside(pt: Point2D) -> bool:
        s = side_of_line(pt, plane.a, plane.b)
        return s >= -eps if plane.keep == "left" else s <= eps

    # Edges (i-1, i) so a polygon fully inside comes back in its own order
    out: Ring = []
    for i in range(len(polygon)):
        p = polygon[i - 1]
        q = polygon[i]
        p_in = inside(p)
        q_in = inside(q)
        if p_in and q_in:
            out.append(q)
        elif p_in:
            hit = _segment_line_hit(p, q, plane.a, plane.b)
            if hit is not None:
                out.append(hit)
        elif q_in:
            hit = _segment_line_hit(p, q, plane.a, plane.b)
            if hit is not None:
                out.append(hit)
            out.append(q)

    if len(out) < 3:
        return out
    return remove_consecutive_duplicates(out, eps)


def reference_square(half_extent: float = REFERENCE_HALF_EXTENT) -> Ring:
    """Large CCW square used as the seed for region clipping."""
    h = half_extent
    return [
        Point2D(x=-h, y=-h),
        Point2D(x=h, y=-h),
        Point2D(x=h, y=h),
        Point2D(x=-h, y=h),
    ]


def bounding_box(points: Sequence[Point2D]) -> tuple[float, float, float, float]:
    """(min_x, min_y, max_x, max_y)."""
    xs = [p.x for p in points]
    ys = [p.y for p in points]
    return (min(xs), min(ys), max(xs), max(ys))


# ── shapely-backed operations ─────────────────────────────────────────


def to_shapely(outer: Sequence[Point2D], holes: Sequence[Sequence[Point2D]] = ()) -> Polygon:
    """Build a shapely Polygon from open rings."""
    return Polygon(
        [(p.x, p.y) for p in outer],
        [[(p.x, p.y) for p in hole] for hole in holes if len(hole) >= 3],
    )


def _ring_from_coords(coords) -> Ring:
    pts = [Point2D(x=x, y=y) for x, y in list(coords)[:-1]]
    return pts


def repair_ring(points: Sequence[Point2D]) -> Ring:
    """Simple outer ring covering the area enclosed by `points`.

    Mitered outward offsets of narrow notches and slots fold back over
    themselves; such rings are rebuilt from the union of their enclosed
    areas (holes dropped). A valid ring is returned unchanged.

    Raises:
        ValueError: when the ring encloses no area or falls apart into
            disconnected pieces.
    """
    if len(points) < 3:
        raise ValueError(f"Ring has only {len(points)} vertices")
    polygon = to_shapely(points)
    if polygon.is_valid and polygon.area > GEOM_EPSILON:
        return list(points)

    fixed = shapely.make_valid(polygon, method="structure", keep_collapsed=False)
    parts = [
        geom for geom in getattr(fixed, "geoms", [fixed])
        if isinstance(geom, Polygon) and geom.area > GEOM_EPSILON
    ]
    merged = shapely.unary_union(parts) if parts else None
    if not isinstance(merged, Polygon) or merged.is_empty:
        count = len(getattr(merged, "geoms", [])) if merged is not None else 0
        raise ValueError(f"Ring does not enclose a single area ({count} pieces)")
    return _ring_from_coords(merged.exterior.coords)


def polygon_difference(
    base: Sequence[Point2D], cutter: Sequence[Point2D]
) -> list[tuple[Ring, list[Ring]]]:
    """Area of `base` not covered by `cutter`, as (outer, holes) pieces."""
    result = to_shapely(base).difference(to_shapely(cutter))
    pieces: list[tuple[Ring, list[Ring]]] = []
    for geom in getattr(result, "geoms", [result]):
        if geom.is_empty or not isinstance(geom, Polygon) or geom.area <= GEOM_EPSILON:
            continue
        pieces.append(
            (
                _ring_from_coords(geom.exterior.coords),
                [_ring_from_coords(interior.coords) for interior in geom.interiors],
            )
        )
    return pieces


def triangulate(points: Sequence[Point2D]) -> list[tuple[int, int, int]]:
    """Constrained Delaunay triangulation of a simple polygon.

    Returns CCW index triples into `points`. Triangles only use the
    polygon's own vertices.
    """
    if len(points) < 3:
        return []

    index_of = {(round(p.x, 9), round(p.y, 9)): i for i, p in enumerate(points)}

    def lookup(x: float, y: float) -> int:
        key = (round(x, 9), round(y, 9))
        if key in index_of:
            return index_of[key]
        return min(
            range(len(points)),
            key=lambda i: math.hypot(points[i].x - x, points[i].y - y),
        )

    triangles: list[tuple[int, int, int]] = []
    result = shapely.constrained_delaunay_triangles(to_shapely(points))
    for tri in getattr(result, "geoms", []):
        if tri.is_empty or tri.area <= GEOM_EPSILON * GEOM_EPSILON:
            continue
        (x0, y0), (x1, y1), (x2, y2) = list(tri.exterior.coords)[:3]
        i0, i1, i2 = lookup(x0, y0), lookup(x1, y1), lookup(x2, y2)
        if len({i0, i1, i2}) < 3:
            continue
        if signed_area([points[i0], points[i1], points[i2]]) < 0:
            i1, i2 = i2, i1
        triangles.append((i0, i1, i2))
    return triangles
