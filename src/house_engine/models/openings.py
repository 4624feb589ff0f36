"""Openings (windows and doors) hosted on a level's outer footprint edge."""

from __future__ import annotations

from enum import Enum
from typing import Any, Literal

from pydantic import Field

from house_engine.models.base import SpecModel


class OpeningKind(str, Enum):
    """Opening kind."""

    WINDOW = "window"
    DOOR = "door"


class EdgeRef(SpecModel):
    """Reference to the host edge of an opening.

    `from_end` measures `offset` from the edge's far end (b) instead of its
    start (a). `outward_side` pins the outward normal to the left or right
    of the edge direction and skips point-in-polygon probing.
    """

    edge_index: int
    from_end: bool = False
    outward_side: Literal["left", "right"] | None = None


class Opening(SpecModel):
    """A rectangular wall opening on an outer footprint edge.

    Offsets and sizes are not range-checked here: the opening validator
    rejects out-of-bounds openings with a precise message.
    """

    id: str
    kind: OpeningKind = OpeningKind.WINDOW
    level_id: str
    edge: EdgeRef
    offset: float = Field(description="Distance along the edge to the opening's near side")
    width: float
    height: float
    sill_height: float = Field(default=0.0, description="Height above level elevation")
    style: dict[str, Any] | None = Field(
        default=None, description="Opaque style passed through to decoration builders"
    )
