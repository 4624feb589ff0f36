"""Roof descriptions.

Roof kinds and face-region kinds are tagged unions discriminated on `type`.
Region items inside compound regions are tagged too, so an author-written
half-plane (`explicit`) is never confused with a ridge divider that was
materialized from a ridge (`materializedDivider`).
"""

from __future__ import annotations

from typing import Annotated, Any, Literal, Union

from pydantic import Discriminator, Field, Tag

from house_engine.config import DEFAULT_ROOF_THICKNESS
from house_engine.models.base import SpecModel
from house_engine.models.geometry import Point2D

Side = Literal["left", "right"]


class RidgeLine(SpecModel):
    """Ridge line of a gable roof."""

    start: Point2D
    end: Point2D


class RidgeSegment(SpecModel):
    """A ridge segment of a multi-ridge or multi-plane roof.

    `height` is the outer ridge height above the base level elevation.
    """

    id: str
    start: Point2D
    end: Point2D
    height: float
    hip_start: bool = False
    hip_end: bool = False

    @property
    def length(self) -> float:
        return self.start.distance_to(self.end)


class HalfPlane(SpecModel):
    """Infinite half-plane bounded by the directed line a→b."""

    a: Point2D
    b: Point2D
    keep: Side


class PlanePoint(SpecModel):
    """Plan point with a height, used to define a roof face plane."""

    x: float
    y: float
    h: float


# ── Compound region items ─────────────────────────────────────────────


class ExplicitPlane(HalfPlane):
    """Author-specified half-plane."""

    type: Literal["explicit"] = "explicit"


class MaterializedDivider(HalfPlane):
    """Ridge divider already resolved into concrete endpoints.

    `ridge_id` records the ridge it was materialized from; legacy data
    without a tag leaves it unset.
    """

    type: Literal["materializedDivider"] = "materializedDivider"
    ridge_id: str | None = None


class RidgeDivider(SpecModel):
    """Symbolic half-plane along the ridge's own line."""

    type: Literal["ridgeDivider"] = "ridgeDivider"
    ridge_id: str
    keep: Side


class RidgePerpCut(SpecModel):
    """Half-plane perpendicular to a ridge at parameter `t`."""

    type: Literal["ridgePerpCut"] = "ridgePerpCut"
    ridge_id: str
    t: float
    keep: Literal["ahead", "behind"]


def _region_item_tag(value: Any) -> str | None:
    # Untagged {a, b, keep} items are dividers written by older editors.
    if isinstance(value, dict):
        return value.get("type", "materializedDivider")
    return getattr(value, "type", None)


RegionItem = Annotated[
    Union[
        Annotated[ExplicitPlane, Tag("explicit")],
        Annotated[MaterializedDivider, Tag("materializedDivider")],
        Annotated[RidgeDivider, Tag("ridgeDivider")],
        Annotated[RidgePerpCut, Tag("ridgePerpCut")],
    ],
    Discriminator(_region_item_tag),
]


# ── Face regions ──────────────────────────────────────────────────────


class HalfPlanesRegion(SpecModel):
    """Region given as an explicit list of half-planes."""

    type: Literal["halfPlanes"] = "halfPlanes"
    planes: list[HalfPlane]


class RidgeCapTriangleRegion(SpecModel):
    """Triangular hip cap closing one end of a ridge."""

    type: Literal["ridgeCapTriangle"] = "ridgeCapTriangle"
    ridge_id: str
    end: Literal["start", "end"]


class CompoundRegion(SpecModel):
    """Region mixing explicit and ridge-derived half-planes."""

    type: Literal["compound"] = "compound"
    items: list[RegionItem]


FaceRegion = Annotated[
    Union[HalfPlanesRegion, RidgeCapTriangleRegion, CompoundRegion],
    Field(discriminator="type"),
]


class RoofFace(SpecModel):
    """A face of a multi-plane roof."""

    id: str
    kind: Literal["ridgeSideSegment", "hipCap"]
    ridge_id: str | None = None
    ridge_t0: float | None = None
    ridge_t1: float | None = None
    side: Side | None = None
    cap_end: Literal["start", "end"] | None = None
    p1: PlanePoint | None = None
    p2: PlanePoint | None = None
    p3: PlanePoint | None = None
    region: FaceRegion


# ── Roofs ─────────────────────────────────────────────────────────────


class FlatRoof(SpecModel):
    """Flat roof slab on top of a level, optionally avoiding a taller level."""

    type: Literal["flat"] = "flat"
    id: str
    base_level_id: str
    subtract_above_level_id: str | None = None
    thickness: float = DEFAULT_ROOF_THICKNESS
    overhang: float = 0.0


class GableRoof(SpecModel):
    """Two-slope roof around a single ridge line.

    Heights are relative to the base level elevation.
    """

    type: Literal["gable"] = "gable"
    id: str
    base_level_id: str
    eave_height: float
    ridge_height: float
    ridge: RidgeLine
    overhang: float = 0.0
    thickness: float = DEFAULT_ROOF_THICKNESS


class MultiRidgeRoof(SpecModel):
    """Roof split vertically through its (first) ridge."""

    type: Literal["multi-ridge"] = "multi-ridge"
    id: str
    base_level_id: str
    eave_height: float
    thickness: float = DEFAULT_ROOF_THICKNESS
    overhang: float = 0.0
    ridge_segments: list[RidgeSegment]


class MultiPlaneRoof(SpecModel):
    """Hip / multi-plane roof: ridge segments plus declared faces."""

    type: Literal["multi-plane"] = "multi-plane"
    id: str
    base_level_id: str
    eave_height: float = 0.0
    thickness: float = DEFAULT_ROOF_THICKNESS
    overhang: float = 0.0
    ridge_segments: list[RidgeSegment] = Field(default_factory=list)
    faces: list[RoofFace] = Field(default_factory=list)

    def get_ridge(self, ridge_id: str) -> RidgeSegment | None:
        """First ridge with the given id."""
        return next((r for r in self.ridge_segments if r.id == ridge_id), None)

    def get_face(self, face_id: str) -> RoofFace | None:
        """First face with the given id."""
        return next((f for f in self.faces if f.id == face_id), None)


RoofSpec = Annotated[
    Union[FlatRoof, GableRoof, MultiRidgeRoof, MultiPlaneRoof],
    Field(discriminator="type"),
]
