"""Opening validation: every opening must fit its host edge and wall.

These are input-shape preconditions, not structural findings: the first
violation raises immediately instead of being collected.
"""

from __future__ import annotations

import logging
import math

from house_engine.config import MIN_OPENING_DIMENSION, OPENING_TOLERANCE
from house_engine.models.house import House

logger = logging.getLogger(__name__)


class OpeningValidationError(ValueError):
    """An opening references a missing host or exceeds its host bounds."""

    def __init__(self, opening_id: str, message: str):
        super().__init__(f"Opening {opening_id}: {message}")
        self.opening_id = opening_id


def validate_openings(house: House, tolerance: float = OPENING_TOLERANCE) -> None:
    """Check every opening against its host level and edge.

    Raises:
        OpeningValidationError: on the first opening that is out of bounds.
    """
    levels = {level.id: level for level in house.levels}

    for op in house.openings:
        level = levels.get(op.level_id)
        if level is None:
            raise OpeningValidationError(op.id, f"invalid levelId {op.level_id}")

        outer = level.footprint.outer
        if not outer:
            raise OpeningValidationError(op.id, "level has no footprint.outer")

        edge_index = op.edge.edge_index
        if edge_index < 0 or edge_index >= len(outer):
            raise OpeningValidationError(
                op.id, f"invalid edgeIndex {edge_index} (level has {len(outer)} edges)"
            )

        if not (op.width > 0 and op.height > 0):
            raise OpeningValidationError(op.id, "width/height must be > 0")

        if op.width < MIN_OPENING_DIMENSION or op.height < MIN_OPENING_DIMENSION:
            raise OpeningValidationError(
                op.id,
                f"width/height must be >= {MIN_OPENING_DIMENSION}m "
                f"(got width={op.width}, height={op.height})",
            )

        if op.sill_height < -tolerance:
            raise OpeningValidationError(op.id, "sillHeight must be >= 0")

        if op.sill_height + op.height > level.height + tolerance:
            raise OpeningValidationError(
                op.id,
                f"exceeds wall height (sill {op.sill_height} + height {op.height} "
                f"> level height {level.height})",
            )

        a, b = level.footprint.edge(edge_index)
        length = math.hypot(b.x - a.x, b.y - a.y)
        if length < tolerance:
            raise OpeningValidationError(op.id, "edge length too small")

        if op.offset < -tolerance:
            raise OpeningValidationError(op.id, "offset must be >= 0")

        if op.offset + op.width > length + tolerance:
            raise OpeningValidationError(
                op.id,
                f"offset+width exceeds edge length "
                f"({op.offset} + {op.width} > {length:.3f})",
            )

    logger.debug("Validated %d openings", len(house.openings))
