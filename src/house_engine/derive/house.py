"""Whole-house derivation: validate, then derive every geometry product."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from shapely.errors import ShapelyError

from house_engine.config import STRUCTURE_TOLERANCE
from house_engine.derive.facade import FacadePanel, build_facade_panels
from house_engine.derive.openings import DerivedOpening, derive_openings
from house_engine.derive.roofs import DerivedMultiPlaneRoof, DerivedRoof, derive_roof
from house_engine.derive.slabs import DerivedSlab, derive_slabs
from house_engine.derive.walls import (
    DerivedWallSegment,
    DerivedWallShell,
    derive_wall_segments,
    derive_wall_shells,
)
from house_engine.models.house import House
from house_engine.validators.openings import validate_openings
from house_engine.validators.roof import (
    RoofIssueCode,
    RoofValidationMessage,
    RoofValidationResult,
)
from house_engine.validators.structural import (
    ValidationMode,
    ValidationReport,
    validate_structure,
)

logger = logging.getLogger(__name__)


@dataclass
class DerivedHouse:
    """Everything derived from one house description."""

    structure: ValidationReport
    slabs: list[DerivedSlab] = field(default_factory=list)
    wall_shells: list[DerivedWallShell] = field(default_factory=list)
    wall_segments: list[DerivedWallSegment] = field(default_factory=list)
    openings: list[DerivedOpening] = field(default_factory=list)
    facade_panels: list[FacadePanel] = field(default_factory=list)
    roofs: list[DerivedRoof] = field(default_factory=list)
    roof_reports: dict[str, RoofValidationResult] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return self.structure.ok and all(r.ok for r in self.roof_reports.values())


def _derive_roofs(house: House) -> tuple[list[DerivedRoof], dict[str, RoofValidationResult]]:
    roofs: list[DerivedRoof] = []
    reports: dict[str, RoofValidationResult] = {}

    for roof in house.roofs:
        report = RoofValidationResult()
        reports[roof.id] = report

        if house.get_level(roof.base_level_id) is None:
            report.errors.append(RoofValidationMessage(
                code=RoofIssueCode.ROOF_BASE_LEVEL_MISSING,
                message=f"Roof '{roof.id}' base level '{roof.base_level_id}' does not exist.",
                roof_id=roof.id,
            ))
            logger.warning("Skipping roof '%s': base level missing", roof.id)
            continue

        try:
            derived = derive_roof(house, roof)
        except (ValueError, ShapelyError) as e:
            report.errors.append(RoofValidationMessage(
                code=RoofIssueCode.ROOF_GEOMETRY_INVALID,
                message=str(e),
                roof_id=roof.id,
            ))
            logger.warning("Skipping roof '%s': %s", roof.id, e)
            continue

        if isinstance(derived, DerivedMultiPlaneRoof):
            reports[roof.id] = derived.report
        roofs.append(derived)

    return roofs, reports


def derive_house(
    house: House,
    mode: ValidationMode | str = ValidationMode.THROW,
    tolerance: float = STRUCTURE_TOLERANCE,
) -> DerivedHouse:
    """Validate a house and derive all of its geometry.

    Structural problems raise StructureValidationError in "throw" mode and
    are returned in `structure` in "report" mode. Malformed openings always
    raise OpeningValidationError. Roof problems never raise; they are
    collected per roof in `roof_reports`.
    """
    structure = validate_structure(house, tolerance=tolerance, mode=mode)
    validate_openings(house)

    openings = derive_openings(house)
    roofs, roof_reports = _derive_roofs(house)

    derived = DerivedHouse(
        structure=structure,
        slabs=derive_slabs(house),
        wall_shells=derive_wall_shells(house),
        wall_segments=derive_wall_segments(house),
        openings=openings,
        facade_panels=build_facade_panels(house, openings),
        roofs=roofs,
        roof_reports=roof_reports,
    )
    logger.debug(
        "Derived '%s': %d slabs, %d openings, %d roofs",
        house.name, len(derived.slabs), len(derived.openings), len(derived.roofs),
    )
    return derived
