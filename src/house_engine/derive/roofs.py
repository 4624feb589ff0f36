"""Roof derivation for every roof kind.

Heights in roof specs are relative to the base level's elevation. Meshes
are plain numpy arrays (vertices (N, 3), triangle faces (M, 3)) for an
external mesh layer to consume.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field

import numpy as np

from house_engine.config import GEOM_EPSILON, REFERENCE_HALF_EXTENT
from house_engine.geometry.polygon import (
    clip_by_half_plane,
    offset_inward,
    polygon_difference,
    repair_ring,
    signed_area,
    triangulate,
)
from house_engine.models.geometry import Point2D
from house_engine.models.house import House, Level
from house_engine.models.roofs import (
    FlatRoof,
    GableRoof,
    HalfPlane,
    MultiPlaneRoof,
    MultiRidgeRoof,
    RoofSpec,
)
from house_engine.roof.regions import normalize_multi_plane_roof, resolve_region
from house_engine.validators.roof import RoofValidationResult, validate_multi_plane_roof

logger = logging.getLogger(__name__)

Ring = list[Point2D]


# ── Result types ──────────────────────────────────────────────────────


@dataclass
class RoofMesh:
    """Closed roof plate: top surface, bottom surface and side walls."""

    vertices: np.ndarray
    faces: np.ndarray

    @property
    def max_z(self) -> float:
        return float(self.vertices[:, 2].max()) if len(self.vertices) else 0.0

    @property
    def min_z(self) -> float:
        return float(self.vertices[:, 2].min()) if len(self.vertices) else 0.0


@dataclass
class FlatRoofPiece:
    outer: Ring
    holes: list[Ring]
    bottom: float
    top: float


@dataclass
class DerivedFlatRoof:
    roof_id: str
    pieces: list[FlatRoofPiece] = field(default_factory=list)


@dataclass
class DerivedGableRoof:
    roof_id: str
    mesh: RoofMesh


@dataclass
class DerivedMultiRidgeRoof:
    """West and east halves split at the first ridge's X coordinate.

    A half is None when the footprint has no area on that side.
    """

    roof_id: str
    split_x: float
    west: RoofMesh | None
    east: RoofMesh | None


@dataclass
class ResolvedFace:
    """A multi-plane face with its region resolved.

    Ridge-cap faces carry `cap` = (ridge_id, end) instead of half-planes.
    """

    face_id: str
    kind: str
    ridge_id: str | None
    half_planes: list[HalfPlane] | None = None
    cap: tuple[str, str] | None = None


@dataclass
class DerivedMultiPlaneRoof:
    roof_id: str
    base_elevation: float
    report: RoofValidationResult
    faces: list[ResolvedFace] = field(default_factory=list)


DerivedRoof = DerivedFlatRoof | DerivedGableRoof | DerivedMultiRidgeRoof | DerivedMultiPlaneRoof


# ── Helpers ───────────────────────────────────────────────────────────


def _base_level(house: House, roof: RoofSpec) -> Level:
    level = house.get_level(roof.base_level_id)
    if level is None:
        raise ValueError(
            f"Roof '{roof.id}' base level '{roof.base_level_id}' not found"
        )
    return level


def _roof_outline(level: Level, overhang: float) -> Ring:
    """Base footprint grown by the overhang.

    Growing a notch or slot can fold the mitered ring over itself; the
    result is repaired to a simple ring before any shapely operation.
    """
    try:
        return repair_ring(offset_inward(level.footprint.outer, -overhang))
    except ValueError as e:
        raise ValueError(f"Level '{level.id}' roof outline is degenerate: {e}") from e


def _build_plate(
    ring: Sequence[Point2D],
    height_at: Callable[[Point2D], float],
    thickness: float,
    open_edge: Callable[[Point2D, Point2D], bool] | None = None,
) -> RoofMesh:
    """Triangulate `ring` into a sloped plate of constant vertical thickness.

    Top vertices sit at `height_at(p)`, bottom vertices `thickness` below,
    so both surfaces share the same slope. Edges for which `open_edge`
    returns True get no side wall (they are shared with another plate).
    """
    points = list(ring)
    if signed_area(points) < 0:
        points.reverse()
    n = len(points)

    top = [(p.x, p.y, height_at(p)) for p in points]
    bottom = [(x, y, z - thickness) for x, y, z in top]
    vertices = np.array(top + bottom, dtype=float).reshape(-1, 3)

    faces: list[tuple[int, int, int]] = []
    triangles = triangulate(points)
    faces.extend(triangles)
    faces.extend((i0 + n, i2 + n, i1 + n) for i0, i1, i2 in triangles)
    for i in range(n):
        j = (i + 1) % n
        if open_edge is not None and open_edge(points[i], points[j]):
            continue
        faces.append((i, i + n, j + n))
        faces.append((i, j + n, j))

    return RoofMesh(vertices=vertices, faces=np.array(faces, dtype=int).reshape(-1, 3))


def _merge_meshes(meshes: Sequence[RoofMesh]) -> RoofMesh:
    vertices = []
    faces = []
    offset = 0
    for mesh in meshes:
        vertices.append(mesh.vertices)
        faces.append(mesh.faces + offset)
        offset += len(mesh.vertices)
    if not vertices:
        return RoofMesh(vertices=np.zeros((0, 3)), faces=np.zeros((0, 3), dtype=int))
    return RoofMesh(vertices=np.vstack(vertices), faces=np.vstack(faces))


# ── Per-kind derivers ─────────────────────────────────────────────────


def derive_flat_roof(house: House, roof: FlatRoof) -> DerivedFlatRoof:
    """Flat slab on top of the base level.

    When `subtract_above_level_id` names a level, its footprint is removed
    so the slab does not cover that (taller) volume.
    """
    level = _base_level(house, roof)
    outline = _roof_outline(level, roof.overhang)
    bottom = level.wall_top
    top = bottom + roof.thickness

    if roof.subtract_above_level_id:
        above = house.get_level(roof.subtract_above_level_id)
        if above is None:
            logger.warning(
                "Roof '%s': subtract level '%s' not found, using full outline",
                roof.id, roof.subtract_above_level_id,
            )
            shapes = [(outline, [])]
        else:
            shapes = polygon_difference(outline, repair_ring(above.footprint.outer))
    else:
        shapes = [(outline, [])]

    pieces = [
        FlatRoofPiece(outer=outer, holes=holes, bottom=bottom, top=top)
        for outer, holes in shapes
    ]
    logger.debug("Flat roof '%s': %d pieces", roof.id, len(pieces))
    return DerivedFlatRoof(roof_id=roof.id, pieces=pieces)


def derive_gable_roof(house: House, roof: GableRoof) -> DerivedGableRoof:
    """Two slopes falling from the ridge line to the eaves.

    Each vertex's height interpolates from the ridge height (on the ridge
    line) to the eave height at the farthest vertex on the same side.
    """
    level = _base_level(house, roof)
    outline = _roof_outline(level, roof.overhang)
    base = level.elevation

    start, end = roof.ridge.start, roof.ridge.end
    dx, dy = end.x - start.x, end.y - start.y
    length = math.hypot(dx, dy)
    if length <= GEOM_EPSILON:
        raise ValueError(f"Gable roof '{roof.id}' has a zero-length ridge")
    ux, uy = dx / length, dy / length

    def signed_distance(p: Point2D) -> float:
        return ux * (p.y - start.y) - uy * (p.x - start.x)

    distances = [signed_distance(p) for p in outline]
    max_left = max((d for d in distances if d > 0), default=0.0)
    max_right = max((-d for d in distances if d < 0), default=0.0)
    drop = roof.ridge_height - roof.eave_height

    def height_at(p: Point2D) -> float:
        d = signed_distance(p)
        reach = max_left if d > 0 else max_right
        if reach <= GEOM_EPSILON:
            return base + roof.ridge_height
        return base + roof.ridge_height - drop * abs(d) / reach

    def on_ridge_line(p: Point2D, q: Point2D) -> bool:
        return abs(signed_distance(p)) <= GEOM_EPSILON and abs(signed_distance(q)) <= GEOM_EPSILON

    # Split along the ridge line so the ridge becomes a crease of the mesh
    a = Point2D(x=start.x - ux * REFERENCE_HALF_EXTENT, y=start.y - uy * REFERENCE_HALF_EXTENT)
    b = Point2D(x=start.x + ux * REFERENCE_HALF_EXTENT, y=start.y + uy * REFERENCE_HALF_EXTENT)
    halves = []
    for keep in ("left", "right"):
        half = clip_by_half_plane(outline, HalfPlane(a=a, b=b, keep=keep))
        if len(half) >= 3 and abs(signed_area(half)) > GEOM_EPSILON:
            halves.append(_build_plate(half, height_at, roof.thickness, open_edge=on_ridge_line))

    return DerivedGableRoof(roof_id=roof.id, mesh=_merge_meshes(halves))


def derive_multi_ridge_roof(house: House, roof: MultiRidgeRoof) -> DerivedMultiRidgeRoof:
    """Split the footprint at the first ridge and slope each half to it."""
    level = _base_level(house, roof)
    if not roof.ridge_segments:
        raise ValueError(f"Multi-ridge roof '{roof.id}' has no ridge segments")

    outline = _roof_outline(level, roof.overhang)
    ridge = roof.ridge_segments[0]
    split_x = ridge.start.x
    base = level.elevation

    # Directed line pointing +Y: "left" keeps x >= split_x, "right" keeps x <= split_x
    a = Point2D(x=split_x, y=-REFERENCE_HALF_EXTENT)
    b = Point2D(x=split_x, y=REFERENCE_HALF_EXTENT)

    def half_mesh(keep: str) -> RoofMesh | None:
        half = clip_by_half_plane(outline, HalfPlane(a=a, b=b, keep=keep))
        if len(half) < 3 or abs(signed_area(half)) <= GEOM_EPSILON:
            return None
        reach = max(abs(p.x - split_x) for p in half)

        def height_at(p: Point2D) -> float:
            if reach <= GEOM_EPSILON:
                return base + ridge.height
            t = abs(p.x - split_x) / reach
            return base + ridge.height - (ridge.height - roof.eave_height) * t

        return _build_plate(half, height_at, roof.thickness)

    return DerivedMultiRidgeRoof(
        roof_id=roof.id,
        split_x=split_x,
        west=half_mesh("right"),
        east=half_mesh("left"),
    )


def derive_multi_plane_roof(house: House, roof: MultiPlaneRoof) -> DerivedMultiPlaneRoof:
    """Validate the roof and resolve every face region to half-planes."""
    level = _base_level(house, roof)
    normalized = normalize_multi_plane_roof(roof)
    report = validate_multi_plane_roof(normalized)

    faces: list[ResolvedFace] = []
    for face in normalized.faces:
        region = face.region
        if region.type == "ridgeCapTriangle":
            faces.append(ResolvedFace(
                face_id=face.id,
                kind=face.kind,
                ridge_id=face.ridge_id or region.ridge_id,
                cap=(region.ridge_id, region.end),
            ))
            continue
        faces.append(ResolvedFace(
            face_id=face.id,
            kind=face.kind,
            ridge_id=face.ridge_id,
            half_planes=resolve_region(region, normalized),
        ))

    return DerivedMultiPlaneRoof(
        roof_id=roof.id,
        base_elevation=level.elevation,
        report=report,
        faces=faces,
    )


def derive_roof(house: House, roof: RoofSpec) -> DerivedRoof:
    """Derive one roof, dispatching on its kind."""
    if isinstance(roof, FlatRoof):
        return derive_flat_roof(house, roof)
    if isinstance(roof, GableRoof):
        return derive_gable_roof(house, roof)
    if isinstance(roof, MultiRidgeRoof):
        return derive_multi_ridge_roof(house, roof)
    if isinstance(roof, MultiPlaneRoof):
        return derive_multi_plane_roof(house, roof)
    raise TypeError(f"Unknown roof kind: {type(roof).__name__}")


def derive_roofs(house: House) -> list[DerivedRoof]:
    """Derive every roof of the house, in declaration order."""
    return [derive_roof(house, roof) for roof in house.roofs]
