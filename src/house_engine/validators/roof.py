"""Topology validation for multi-plane roofs.

Checks ridge segments (unique ids, non-zero length, positive height) and
faces (ridge references, parametric ranges, regions that clip to a real
polygon). Problems are collected per roof; nothing is raised, so one bad
roof never blocks the rest of the house.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from enum import Enum

from house_engine.config import (
    GEOM_EPSILON,
    SUSPICIOUS_RIDGE_SPAN,
    SUSPICIOUS_RIDGE_T_MARGIN,
)
from house_engine.geometry.polygon import clip_by_half_plane, reference_square
from house_engine.models.geometry import Point2D
from house_engine.models.roofs import (
    MultiPlaneRoof,
    RidgeCapTriangleRegion,
    RidgeSegment,
    RoofFace,
)
from house_engine.roof.regions import resolve_region

logger = logging.getLogger(__name__)


class RoofIssueCode(str, Enum):
    RIDGE_ZERO_LENGTH = "RIDGE_ZERO_LENGTH"
    RIDGE_DUPLICATE_ID = "RIDGE_DUPLICATE_ID"
    RIDGE_HEIGHT_INVALID = "RIDGE_HEIGHT_INVALID"
    FACE_MISSING_RIDGE = "FACE_MISSING_RIDGE"
    FACE_RIDGE_RANGE_ORDER = "FACE_RIDGE_RANGE_ORDER"
    FACE_RIDGE_RANGE_BOUNDS = "FACE_RIDGE_RANGE_BOUNDS"
    FACE_INVALID_REGION = "FACE_INVALID_REGION"
    FACE_CAP_END_INVALID = "FACE_CAP_END_INVALID"
    FACE_SUSPICIOUS_RIDGE_RANGE = "FACE_SUSPICIOUS_RIDGE_RANGE"
    ROOF_BASE_LEVEL_MISSING = "ROOF_BASE_LEVEL_MISSING"
    ROOF_GEOMETRY_INVALID = "ROOF_GEOMETRY_INVALID"


@dataclass
class RoofValidationMessage:
    """A single roof error or warning."""

    code: RoofIssueCode
    message: str
    roof_id: str
    ridge_id: str | None = None
    face_id: str | None = None


@dataclass
class RoofDebugInfo:
    """Offending entities, for a diagnostics overlay."""

    invalid_ridges: list[RidgeSegment] = field(default_factory=list)
    invalid_faces: list[RoofFace] = field(default_factory=list)
    suspicious_faces: list[RoofFace] = field(default_factory=list)
    invalid_face_polygons: dict[str, list[Point2D]] = field(default_factory=dict)


@dataclass
class RoofValidationResult:
    """Errors are fatal for the roof, warnings advisory."""

    errors: list[RoofValidationMessage] = field(default_factory=list)
    warnings: list[RoofValidationMessage] = field(default_factory=list)
    debug: RoofDebugInfo = field(default_factory=RoofDebugInfo)

    @property
    def ok(self) -> bool:
        return not self.errors


def _cap_indicator_triangle(ridge: RidgeSegment, end: str) -> list[Point2D]:
    """Small triangle at a ridge end, marking a cap face on the overlay."""
    apex = ridge.start if end == "start" else ridge.end
    base = ridge.end if end == "start" else ridge.start
    mx, my = (apex.x + base.x) / 2, (apex.y + base.y) / 2
    return [apex, Point2D(x=mx + 0.4, y=my), Point2D(x=mx - 0.4, y=my)]


def _clip_face_region(face: RoofFace, roof: MultiPlaneRoof) -> tuple[bool, list[Point2D]]:
    """Clip the reference square by the face's half-planes.

    Returns (valid, polygon). Stops at the first plane that leaves fewer
    than 3 vertices.
    """
    region = face.region
    if isinstance(region, RidgeCapTriangleRegion):
        ridge = roof.get_ridge(region.ridge_id)
        if ridge is None:
            return False, []
        return True, _cap_indicator_triangle(ridge, region.end)

    planes = resolve_region(region, roof)
    if planes is None:
        return False, []

    poly = reference_square()
    for plane in planes:
        poly = clip_by_half_plane(poly, plane)
        if len(poly) < 3:
            return False, poly
    return True, poly


def _is_number(value: float | None) -> bool:
    return isinstance(value, (int, float)) and not math.isnan(value)


def validate_multi_plane_roof(roof: MultiPlaneRoof) -> RoofValidationResult:
    """Validate ridges and faces of one multi-plane roof."""
    result = RoofValidationResult()
    debug = result.debug
    errors = result.errors
    warnings = result.warnings

    ridge_ids: set[str] = set()
    for ridge in roof.ridge_segments:
        invalid = False

        if ridge.id in ridge_ids:
            invalid = True
            errors.append(RoofValidationMessage(
                code=RoofIssueCode.RIDGE_DUPLICATE_ID,
                message=f"Ridge '{ridge.id}' is duplicated.",
                roof_id=roof.id, ridge_id=ridge.id,
            ))
        ridge_ids.add(ridge.id)

        if ridge.length <= GEOM_EPSILON:
            invalid = True
            errors.append(RoofValidationMessage(
                code=RoofIssueCode.RIDGE_ZERO_LENGTH,
                message=f"Ridge '{ridge.id}' has zero/near-zero length.",
                roof_id=roof.id, ridge_id=ridge.id,
            ))

        if not (math.isfinite(ridge.height) and ridge.height > 0):
            invalid = True
            errors.append(RoofValidationMessage(
                code=RoofIssueCode.RIDGE_HEIGHT_INVALID,
                message=f"Ridge '{ridge.id}' height must be above base level (> 0).",
                roof_id=roof.id, ridge_id=ridge.id,
            ))

        if invalid:
            debug.invalid_ridges.append(ridge)

    for face in roof.faces:
        invalid = False

        if face.kind == "ridgeSideSegment":
            if not face.ridge_id or face.ridge_id not in ridge_ids:
                invalid = True
                errors.append(RoofValidationMessage(
                    code=RoofIssueCode.FACE_MISSING_RIDGE,
                    message=f"Face '{face.id}' references missing ridge '{face.ridge_id}'.",
                    roof_id=roof.id, face_id=face.id, ridge_id=face.ridge_id,
                ))

            t0, t1 = face.ridge_t0, face.ridge_t1
            if not (_is_number(t0) and _is_number(t1)):
                invalid = True
                errors.append(RoofValidationMessage(
                    code=RoofIssueCode.FACE_RIDGE_RANGE_ORDER,
                    message=f"Face '{face.id}' requires numeric ridgeT0/ridgeT1.",
                    roof_id=roof.id, face_id=face.id, ridge_id=face.ridge_id,
                ))
            else:
                if not t0 < t1:
                    invalid = True
                    errors.append(RoofValidationMessage(
                        code=RoofIssueCode.FACE_RIDGE_RANGE_ORDER,
                        message=(
                            f"Face '{face.id}' has invalid range: ridgeT0 ({t0}) "
                            f"must be < ridgeT1 ({t1})."
                        ),
                        roof_id=roof.id, face_id=face.id, ridge_id=face.ridge_id,
                    ))

                if not (0 <= t0 <= 1 and 0 <= t1 <= 1):
                    invalid = True
                    errors.append(RoofValidationMessage(
                        code=RoofIssueCode.FACE_RIDGE_RANGE_BOUNDS,
                        message=f"Face '{face.id}' has ridge range outside [0,1].",
                        roof_id=roof.id, face_id=face.id, ridge_id=face.ridge_id,
                    ))

                if (
                    t0 <= SUSPICIOUS_RIDGE_T_MARGIN
                    or t1 >= 1 - SUSPICIOUS_RIDGE_T_MARGIN
                    or t1 - t0 < SUSPICIOUS_RIDGE_SPAN
                ):
                    debug.suspicious_faces.append(face)
                    warnings.append(RoofValidationMessage(
                        code=RoofIssueCode.FACE_SUSPICIOUS_RIDGE_RANGE,
                        message=f"Face '{face.id}' has suspicious ridge range ({t0}..{t1}).",
                        roof_id=roof.id, face_id=face.id, ridge_id=face.ridge_id,
                    ))

        if face.cap_end is not None and face.kind != "ridgeSideSegment":
            invalid = True
            errors.append(RoofValidationMessage(
                code=RoofIssueCode.FACE_CAP_END_INVALID,
                message=f"Face '{face.id}' uses capEnd but is not ridgeSideSegment.",
                roof_id=roof.id, face_id=face.id,
            ))

        region_ok, polygon = _clip_face_region(face, roof)
        if not region_ok:
            invalid = True
            debug.invalid_face_polygons[face.id] = polygon
            errors.append(RoofValidationMessage(
                code=RoofIssueCode.FACE_INVALID_REGION,
                message=f"Face '{face.id}' region clips to empty or invalid polygon.",
                roof_id=roof.id, face_id=face.id, ridge_id=face.ridge_id,
            ))

        if invalid:
            debug.invalid_faces.append(face)

    if errors or warnings:
        logger.warning(
            "Roof '%s': %d errors, %d warnings", roof.id, len(errors), len(warnings)
        )
    return result
