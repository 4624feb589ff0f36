"""Top-level house model: House and Level.

A house is one immutable "version" of the declarative description. Derived
geometry and validation reports are recomputed from it on every call.
"""

from __future__ import annotations

from enum import Enum
from pathlib import Path

from pydantic import Field

from house_engine.models.base import SpecModel
from house_engine.models.geometry import Footprint
from house_engine.models.openings import Opening
from house_engine.models.roofs import RoofSpec


class ElevationConvention(str, Enum):
    """What `Level.elevation` refers to.

    TOP_OF_SLAB: finished floor / top of the structural slab
    BOTTOM_OF_SLAB: underside of the slab
    """

    TOP_OF_SLAB = "TOP_OF_SLAB"
    BOTTOM_OF_SLAB = "BOTTOM_OF_SLAB"


class SlabSpec(SpecModel):
    """Floor slab of a level."""

    thickness: float
    inset: float = Field(default=0.0, description="Inward offset of the slab outline")


class Level(SpecModel):
    """A single level (story) of the house.

    `height` is measured from the wall base to the top of the walls.
    """

    id: str
    elevation: float
    height: float
    footprint: Footprint
    slab: SlabSpec | None = None

    @property
    def wall_top(self) -> float:
        return self.elevation + self.height


class House(SpecModel):
    """Declarative house description."""

    name: str = "Untitled House"
    wall_thickness: float = Field(default=0.3, description="Outer wall thickness in meters")
    elevation_convention: ElevationConvention = ElevationConvention.TOP_OF_SLAB
    allow_ground_support: bool = Field(
        default=True, description="Level 0 slab may rest on the ground"
    )
    support_gap_level_ids: list[str] = Field(
        default_factory=list,
        description="Levels whose slab may float above the level below (stilts, pilotis)",
    )
    levels: list[Level] = Field(default_factory=list)
    roofs: list[RoofSpec] = Field(default_factory=list)
    openings: list[Opening] = Field(default_factory=list)

    # ── File I/O ──────────────────────────────────────────────────────

    @classmethod
    def load(cls, path: str | Path) -> House:
        """Load a house from a JSON file."""
        path = Path(path)
        return cls.model_validate_json(path.read_text())

    def save(self, path: str | Path) -> Path:
        """Save the house to a JSON file. Creates parent dirs if needed."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(self.model_dump_json(indent=2))
        return path

    # ── Lookups ───────────────────────────────────────────────────────

    def get_level(self, level_id: str) -> Level | None:
        """Find a level by id."""
        return next((lvl for lvl in self.levels if lvl.id == level_id), None)

    def level_index(self, level_id: str) -> int | None:
        """Index of a level in `levels`, or None."""
        return next(
            (i for i, lvl in enumerate(self.levels) if lvl.id == level_id), None
        )

    def get_roof(self, roof_id: str) -> RoofSpec | None:
        """Find a roof by id."""
        return next((r for r in self.roofs if r.id == roof_id), None)
