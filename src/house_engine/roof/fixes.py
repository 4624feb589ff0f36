"""Ridge-edit consistency: keep materialized dividers on their ridge.

When an editor moves a ridge's endpoints, faces that carry a materialized
copy of that ridge's divider still point at the old line. Planning and
applying are separate steps so the caller can review patches before
anything changes.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from house_engine.config import GEOM_EPSILON
from house_engine.models.geometry import Point2D
from house_engine.models.roofs import (
    CompoundRegion,
    MaterializedDivider,
    MultiPlaneRoof,
    RidgeSegment,
)

logger = logging.getLogger(__name__)


@dataclass
class SyncRidgeDividerPatch:
    """Overwrite one divider item with the ridge's new endpoints."""

    face_id: str
    ridge_id: str
    item_index: int
    next_a: Point2D
    next_b: Point2D
    kind: str = "syncRidgeDivider"


@dataclass
class RoofFixPlan:
    patches: list[SyncRidgeDividerPatch] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)


def _ridge_moved(before: RidgeSegment | None, after: RidgeSegment) -> bool:
    if before is None:
        return False
    return (
        before.start.x != after.start.x
        or before.start.y != after.start.y
        or before.end.x != after.end.x
        or before.end.y != after.end.y
    )


def plan_roof_fixes(before: MultiPlaneRoof, after: MultiPlaneRoof) -> RoofFixPlan:
    """Plan divider updates for every ridge whose endpoints changed.

    Only materialized dividers in compound regions of ridge-side faces
    referencing the moved ridge are targeted. A ridge that became
    zero-length is not propagated and is reported in `errors`.
    """
    plan = RoofFixPlan()

    for ridge in after.ridge_segments:
        if not _ridge_moved(before.get_ridge(ridge.id), ridge):
            continue
        if ridge.length <= GEOM_EPSILON:
            plan.errors.append(
                f"Ridge '{ridge.id}' moved to a zero-length line; dividers not synchronized."
            )
            continue

        for face in after.faces:
            if face.kind != "ridgeSideSegment" or face.ridge_id != ridge.id:
                continue
            if not isinstance(face.region, CompoundRegion):
                continue
            for index, item in enumerate(face.region.items):
                if not isinstance(item, MaterializedDivider):
                    continue
                if item.ridge_id not in (None, ridge.id):
                    continue
                plan.patches.append(SyncRidgeDividerPatch(
                    face_id=face.id,
                    ridge_id=ridge.id,
                    item_index=index,
                    next_a=ridge.start,
                    next_b=ridge.end,
                ))

    logger.debug("Planned %d divider patches for roof '%s'", len(plan.patches), after.id)
    return plan


def apply_roof_fix_plan(roof: MultiPlaneRoof, plan: RoofFixPlan) -> MultiPlaneRoof:
    """Return a copy of `roof` with the planned patches applied.

    Everything not targeted by a patch is left untouched. Patches whose
    face or item no longer exists are skipped.
    """
    if not plan.patches:
        return roof

    data = roof.model_dump(by_alias=False)
    faces = {face["id"]: face for face in data["faces"]}

    for patch in plan.patches:
        face = faces.get(patch.face_id)
        if face is None or face["kind"] != "ridgeSideSegment":
            continue
        region = face["region"]
        if region["type"] != "compound":
            continue
        if not 0 <= patch.item_index < len(region["items"]):
            continue
        item = region["items"][patch.item_index]
        if item.get("type") != "materializedDivider":
            continue
        item["a"] = patch.next_a.model_dump(by_alias=False)
        item["b"] = patch.next_b.model_dump(by_alias=False)

    return MultiPlaneRoof.model_validate(data)
