"""Floor slab derivation: one thickness band per level."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from house_engine.geometry.polygon import offset_inward
from house_engine.models.geometry import Point2D
from house_engine.models.house import House
from house_engine.validators.structural import slab_bottom, slab_top

logger = logging.getLogger(__name__)


@dataclass
class DerivedSlab:
    """Slab outline and vertical extent, ready for extrusion."""

    id: str
    level_id: str
    level_index: int
    outline: list[Point2D]
    holes: list[list[Point2D]]
    elevation_top: float
    elevation_bottom: float
    inset: float

    @property
    def thickness(self) -> float:
        return self.elevation_top - self.elevation_bottom


def derive_slabs(house: House) -> list[DerivedSlab]:
    """Derive the slab band of every level.

    The outer ring is shrunk by the slab inset; holes are kept as authored.
    Levels without a usable slab are skipped (the structural validator
    reports them).
    """
    slabs: list[DerivedSlab] = []
    for index, level in enumerate(house.levels):
        slab = level.slab
        if slab is None or not slab.thickness > 0:
            logger.debug("Level '%s' has no slab, skipping", level.id)
            continue
        slabs.append(DerivedSlab(
            id=f"slab-{level.id}",
            level_id=level.id,
            level_index=index,
            outline=offset_inward(level.footprint.outer, slab.inset),
            holes=[list(hole) for hole in level.footprint.holes if hole],
            elevation_top=slab_top(level.elevation, slab.thickness, house.elevation_convention),
            elevation_bottom=slab_bottom(
                level.elevation, slab.thickness, house.elevation_convention
            ),
            inset=slab.inset,
        ))
    return slabs
