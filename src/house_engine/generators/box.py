"""Rectangular house generator.

Given a rectangular footprint and level count, generates:
- Levels whose slabs rest exactly on the walls below
- An optional flat or gable roof on the top level

Useful as a starting point for editing and as a known-good fixture.
"""

from __future__ import annotations

from typing import Literal

from house_engine.models.geometry import Footprint, Point2D
from house_engine.models.house import House, Level, SlabSpec
from house_engine.models.roofs import FlatRoof, GableRoof, RidgeLine


def generate_box_house(
    name: str = "Box House",
    width: float = 10.0,
    depth: float = 8.0,
    num_levels: int = 2,
    level_height: float = 2.8,
    slab_thickness: float = 0.25,
    wall_thickness: float = 0.3,
    roof: Literal["flat", "gable"] | None = "flat",
    ridge_rise: float = 2.0,
) -> House:
    """Generate a rectangular house.

    Elevations follow the top-of-slab convention: level i sits at the wall
    top of level i-1 plus its own slab thickness.

    Args:
        name: House name.
        width: Footprint width in X direction (meters).
        depth: Footprint depth in Y direction (meters).
        num_levels: Number of levels.
        level_height: Wall height of every level (meters).
        slab_thickness: Slab thickness of every level (meters).
        wall_thickness: Outer wall thickness (meters).
        roof: Roof on the top level, or None.
        ridge_rise: Gable ridge height above the eaves (meters).

    Returns:
        House with levels and roof.
    """
    footprint = Footprint(outer=[
        Point2D(x=0.0, y=0.0),
        Point2D(x=width, y=0.0),
        Point2D(x=width, y=depth),
        Point2D(x=0.0, y=depth),
    ])

    levels: list[Level] = []
    elevation = 0.0
    for i in range(num_levels):
        if i > 0:
            elevation = levels[-1].wall_top + slab_thickness
        levels.append(Level(
            id=f"L{i}",
            elevation=elevation,
            height=level_height,
            footprint=footprint,
            slab=SlabSpec(thickness=slab_thickness),
        ))

    roofs = []
    if levels and roof == "flat":
        roofs.append(FlatRoof(id="roof", base_level_id=levels[-1].id))
    elif levels and roof == "gable":
        roofs.append(GableRoof(
            id="roof",
            base_level_id=levels[-1].id,
            eave_height=level_height,
            ridge_height=level_height + ridge_rise,
            ridge=RidgeLine(
                start=Point2D(x=0.0, y=depth / 2),
                end=Point2D(x=width, y=depth / 2),
            ),
        ))

    return House(
        name=name,
        wall_thickness=wall_thickness,
        levels=levels,
        roofs=roofs,
    )
