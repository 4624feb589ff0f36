"""Two-level reference house.

Ground level with a deep footprint, a shallower first level on top, a flat
roof over the part of the ground level the first level does not cover, and
a hip roof over the first level.

The ground level reaches y=15, the first level stops at y=12; the hip
roof ridge runs north-south at x=0.6 between y=12 and y=8.45.
"""

from __future__ import annotations

from house_engine.models.geometry import Footprint, Point2D
from house_engine.models.house import House, Level, SlabSpec
from house_engine.models.openings import EdgeRef, Opening, OpeningKind
from house_engine.models.roofs import (
    CompoundRegion,
    FlatRoof,
    MultiPlaneRoof,
    RidgeCapTriangleRegion,
    RidgeDivider,
    RidgePerpCut,
    RidgeSegment,
    RoofFace,
)

GROUND_OUTER = [
    (4.1, 15.0),
    (-3.5, 15.0),
    (-3.5, 12.0),
    (-3.5, 8.45),
    (-4.1, 8.45),
    (-4.1, 4.0),
    (-4.8, 4.0),
    (-4.8, 0.0),
    (4.8, 0.0),
]

FIRST_OUTER = [
    (-3.5, 12.0),
    (-3.5, 8.45),
    (-4.1, 8.45),
    (-4.1, 4.0),
    (-4.8, 4.0),
    (-4.8, 0.0),
    (4.8, 0.0),
    (4.1, 12.0),
]

MAIN_RIDGE_START = (0.6, 12.0)
MAIN_RIDGE_END = (0.6, 8.45)


def _footprint(coords: list[tuple[float, float]]) -> Footprint:
    return Footprint(outer=[Point2D(x=x, y=y) for x, y in coords])


def _side_face(face_id: str, side: str) -> RoofFace:
    """Ridge-side face between the two ridge ends, on one side of the ridge."""
    return RoofFace(
        id=face_id,
        kind="ridgeSideSegment",
        ridge_id="main",
        ridge_t0=0.05,
        ridge_t1=0.95,
        side=side,
        region=CompoundRegion(items=[
            RidgeDivider(ridge_id="main", keep=side),
            RidgePerpCut(ridge_id="main", t=0.0, keep="ahead"),
            RidgePerpCut(ridge_id="main", t=1.0, keep="behind"),
        ]),
    )


def _cap_face(face_id: str, end: str) -> RoofFace:
    return RoofFace(
        id=face_id,
        kind="hipCap",
        ridge_id="main",
        region=RidgeCapTriangleRegion(ridge_id="main", end=end),
    )


def generate_reference_house(with_openings: bool = True) -> House:
    """Build the two-level reference house.

    Level "first" sits at 3.05: the ground wall top (2.8) plus its own
    0.25 slab, so the structure validates without issues.
    """
    ground = Level(
        id="ground",
        elevation=0.0,
        height=2.8,
        footprint=_footprint(GROUND_OUTER),
        slab=SlabSpec(thickness=0.3),
    )
    first = Level(
        id="first",
        elevation=3.05,
        height=2.8,
        footprint=_footprint(FIRST_OUTER),
        slab=SlabSpec(thickness=0.25),
    )

    ridge = RidgeSegment(
        id="main",
        start=Point2D(x=MAIN_RIDGE_START[0], y=MAIN_RIDGE_START[1]),
        end=Point2D(x=MAIN_RIDGE_END[0], y=MAIN_RIDGE_END[1]),
        height=3.4,
        hip_start=True,
        hip_end=True,
    )
    main_roof = MultiPlaneRoof(
        id="main-roof",
        base_level_id="first",
        eave_height=first.height,
        thickness=0.2,
        overhang=0.3,
        ridge_segments=[ridge],
        faces=[
            _side_face("main-west", "left"),
            _side_face("main-east", "right"),
            _cap_face("hip-north", "start"),
            _cap_face("hip-south", "end"),
        ],
    )
    ground_flat = FlatRoof(
        id="ground-flat",
        base_level_id="ground",
        subtract_above_level_id="first",
        thickness=0.2,
    )

    openings: list[Opening] = []
    if with_openings:
        openings = [
            # South edge of the ground level runs (-4.8, 0) → (4.8, 0)
            Opening(
                id="front-door",
                kind=OpeningKind.DOOR,
                level_id="ground",
                edge=EdgeRef(edge_index=7),
                offset=4.3,
                width=1.0,
                height=2.1,
            ),
            Opening(
                id="ground-window-south",
                level_id="ground",
                edge=EdgeRef(edge_index=7),
                offset=1.0,
                width=1.6,
                height=1.4,
                sill_height=0.9,
            ),
            Opening(
                id="first-window-south",
                level_id="first",
                edge=EdgeRef(edge_index=5, from_end=True),
                offset=1.5,
                width=1.2,
                height=1.4,
                sill_height=0.9,
            ),
        ]

    return House(
        name="Reference House",
        wall_thickness=0.3,
        levels=[ground, first],
        roofs=[ground_flat, main_roof],
        openings=openings,
    )
