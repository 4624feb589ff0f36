"""House data models."""

from house_engine.models.geometry import Footprint, Point2D, Point3D
from house_engine.models.openings import EdgeRef, Opening, OpeningKind
from house_engine.models.roofs import (
    CompoundRegion,
    ExplicitPlane,
    FaceRegion,
    FlatRoof,
    GableRoof,
    HalfPlane,
    HalfPlanesRegion,
    MaterializedDivider,
    MultiPlaneRoof,
    MultiRidgeRoof,
    PlanePoint,
    RegionItem,
    RidgeCapTriangleRegion,
    RidgeDivider,
    RidgeLine,
    RidgePerpCut,
    RidgeSegment,
    RoofFace,
    RoofSpec,
)
from house_engine.models.house import ElevationConvention, House, Level, SlabSpec

__all__ = [
    "Point2D",
    "Point3D",
    "Footprint",
    "EdgeRef",
    "Opening",
    "OpeningKind",
    "CompoundRegion",
    "ExplicitPlane",
    "FaceRegion",
    "FlatRoof",
    "GableRoof",
    "HalfPlane",
    "HalfPlanesRegion",
    "MaterializedDivider",
    "MultiPlaneRoof",
    "MultiRidgeRoof",
    "PlanePoint",
    "RegionItem",
    "RidgeCapTriangleRegion",
    "RidgeDivider",
    "RidgeLine",
    "RidgePerpCut",
    "RidgeSegment",
    "RoofFace",
    "RoofSpec",
    "ElevationConvention",
    "House",
    "Level",
    "SlabSpec",
]
