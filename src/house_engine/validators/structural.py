"""Structural validation: level / slab / wall support chain.

Checks that no slab or wall floats: every level has a slab, each slab rests
on the ground (level 0) or on the top of the walls below, and levels are
stacked in elevation order.

The validator reads levels through a StructureAdapter so it works on any
level representation; `StructureAdapter.for_house` covers the House model.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from house_engine.config import STRUCTURE_TOLERANCE
from house_engine.models.house import ElevationConvention, House

logger = logging.getLogger(__name__)


class Severity(str, Enum):
    ERROR = "error"
    WARNING = "warning"


class IssueCode(str, Enum):
    LEVEL_FLOATING = "LEVEL_FLOATING"
    SLAB_MISSING = "SLAB_MISSING"
    SLAB_FLOATING = "SLAB_FLOATING"
    WALL_FLOATING = "WALL_FLOATING"
    LEVEL_ORDER_INVALID = "LEVEL_ORDER_INVALID"
    LEVEL_GAP_UNSUPPORTED = "LEVEL_GAP_UNSUPPORTED"


class ValidationMode(str, Enum):
    """THROW aborts on a failing report, REPORT returns it to the caller."""

    THROW = "throw"
    REPORT = "report"


@dataclass
class ValidationIssue:
    """A single structural issue."""

    severity: Severity
    code: IssueCode
    message: str
    level_index: int | None = None
    details: dict[str, Any] = field(default_factory=dict)


@dataclass
class ValidationReport:
    """Outcome of a structural validation run."""

    ok: bool
    issues: list[ValidationIssue]

    @property
    def errors(self) -> list[ValidationIssue]:
        return [i for i in self.issues if i.severity == Severity.ERROR]

    @property
    def warnings(self) -> list[ValidationIssue]:
        return [i for i in self.issues if i.severity == Severity.WARNING]


class StructureValidationError(Exception):
    """Raised in THROW mode when the report contains errors."""

    def __init__(self, report: ValidationReport):
        super().__init__("\n".join(i.message for i in report.issues))
        self.report = report


def _levels_of(house: Any) -> Sequence[Any]:
    return house.levels


def _elevation_of(level: Any, index: int) -> float:
    return level.elevation


def _height_of(level: Any, index: int) -> float:
    return level.height


def _slab_thickness_of(level: Any, index: int) -> float | None:
    return level.slab.thickness if level.slab is not None else None


@dataclass
class StructureAdapter:
    """How the validator reads a house.

    Accessors receive (level, index). `is_support_gap_allowed` receives
    (house, index) and marks levels whose slab may legitimately sit above
    the walls below (stilts, pilotis); such gaps become warnings.
    """

    get_levels: Callable[[Any], Sequence[Any]] = _levels_of
    level_elevation: Callable[[Any, int], float] = _elevation_of
    level_height: Callable[[Any, int], float] = _height_of
    slab_thickness: Callable[[Any, int], float | None] = _slab_thickness_of
    elevation_convention: ElevationConvention = ElevationConvention.TOP_OF_SLAB
    allow_ground_support: bool = True
    enforce_sorted_levels: bool = True
    is_support_gap_allowed: Callable[[Any, int], bool] | None = None

    @classmethod
    def for_house(cls, house: House) -> StructureAdapter:
        """Adapter reading convention and support policy from the house itself."""
        gap_ids = set(house.support_gap_level_ids)

        def gap_allowed(h: House, index: int) -> bool:
            return h.levels[index].id in gap_ids

        return cls(
            elevation_convention=house.elevation_convention,
            allow_ground_support=house.allow_ground_support,
            is_support_gap_allowed=gap_allowed,
        )


def slab_top(elevation: float, thickness: float, convention: ElevationConvention) -> float:
    if convention == ElevationConvention.TOP_OF_SLAB:
        return elevation
    return elevation + thickness


def slab_bottom(elevation: float, thickness: float, convention: ElevationConvention) -> float:
    if convention == ElevationConvention.TOP_OF_SLAB:
        return elevation - thickness
    return elevation


def _is_positive(value: float | None) -> bool:
    return value is not None and math.isfinite(value) and value > 0


def validate_structure(
    house: Any,
    adapter: StructureAdapter | None = None,
    tolerance: float = STRUCTURE_TOLERANCE,
    mode: ValidationMode | str = ValidationMode.THROW,
) -> ValidationReport:
    """Validate that no slab or wall floats.

    Args:
        house: The house (any object the adapter understands).
        adapter: Level accessors and support policy. Defaults to
            `StructureAdapter.for_house(house)`.
        tolerance: Allowed vertical mismatch in meters (default 2mm).
        mode: "throw" raises StructureValidationError when errors exist,
            "report" returns the report either way.

    Returns:
        ValidationReport with all collected issues.
    """
    mode = ValidationMode(mode)
    if adapter is None:
        adapter = StructureAdapter.for_house(house)

    issues: list[ValidationIssue] = []
    levels = adapter.get_levels(house)

    if adapter.enforce_sorted_levels:
        for i in range(1, len(levels)):
            prev_e = adapter.level_elevation(levels[i - 1], i - 1)
            cur_e = adapter.level_elevation(levels[i], i)
            if cur_e + tolerance < prev_e:
                issues.append(
                    ValidationIssue(
                        severity=Severity.ERROR,
                        code=IssueCode.LEVEL_ORDER_INVALID,
                        level_index=i,
                        message=(
                            f"Levels are not sorted by elevation: level {i - 1} "
                            f"elevation={prev_e} > level {i} elevation={cur_e}."
                        ),
                        details={"prev_elevation": prev_e, "elevation": cur_e},
                    )
                )

    for i, level in enumerate(levels):
        elevation = adapter.level_elevation(level, i)
        height = adapter.level_height(level, i)
        thickness = adapter.slab_thickness(level, i)

        if not _is_positive(thickness):
            issues.append(
                ValidationIssue(
                    severity=Severity.ERROR,
                    code=IssueCode.SLAB_MISSING,
                    level_index=i,
                    message=f"Level {i} is missing a valid slab thickness (got {thickness}).",
                    details={"elevation": elevation, "height": height, "thickness": thickness},
                )
            )
            continue

        top = slab_top(elevation, thickness, adapter.elevation_convention)
        bottom = slab_bottom(elevation, thickness, adapter.elevation_convention)

        if i == 0:
            if not adapter.allow_ground_support:
                issues.append(
                    ValidationIssue(
                        severity=Severity.ERROR,
                        code=IssueCode.SLAB_FLOATING,
                        level_index=i,
                        message="Level 0 slab may not rest on the ground by configuration.",
                        details={"elevation": elevation, "top": top, "bottom": bottom},
                    )
                )
        else:
            below = levels[i - 1]
            below_elevation = adapter.level_elevation(below, i - 1)
            below_height = adapter.level_height(below, i - 1)
            support_plane = below_elevation + below_height
            gap = bottom - support_plane

            if abs(gap) > tolerance:
                gap_allowed = (
                    adapter.is_support_gap_allowed is not None
                    and adapter.is_support_gap_allowed(house, i)
                )
                details = {
                    "expected_support_plane": support_plane,
                    "slab_bottom": bottom,
                    "gap": gap,
                    "tolerance": tolerance,
                }
                if gap_allowed:
                    issues.append(
                        ValidationIssue(
                            severity=Severity.WARNING,
                            code=IssueCode.LEVEL_GAP_UNSUPPORTED,
                            level_index=i,
                            message=(
                                f"Level {i} slab support gap detected (gap {gap:.3f}m) "
                                f"but allowed for this level."
                            ),
                            details=details,
                        )
                    )
                else:
                    issues.append(
                        ValidationIssue(
                            severity=Severity.ERROR,
                            code=IssueCode.SLAB_FLOATING,
                            level_index=i,
                            message=(
                                f"Level {i} slab appears unsupported/floating. Expected slab "
                                f"bottom ≈ top of walls below ({support_plane:.3f}), got "
                                f"{bottom:.3f} (gap {gap:.3f}m)."
                            ),
                            details=details,
                        )
                    )

        if not math.isfinite(top):
            issues.append(
                ValidationIssue(
                    severity=Severity.ERROR,
                    code=IssueCode.WALL_FLOATING,
                    level_index=i,
                    message=f"Level {i} slab top is not a finite number; walls would float.",
                    details={"elevation": elevation, "thickness": thickness, "top": top},
                )
            )

        if not _is_positive(height):
            issues.append(
                ValidationIssue(
                    severity=Severity.ERROR,
                    code=IssueCode.LEVEL_FLOATING,
                    level_index=i,
                    message=f"Level {i} has invalid height (got {height}).",
                    details={"elevation": elevation, "height": height},
                )
            )

    report = ValidationReport(
        ok=all(issue.severity != Severity.ERROR for issue in issues),
        issues=issues,
    )
    logger.debug(
        "Structure check over %d levels: %d errors, %d warnings",
        len(levels), len(report.errors), len(report.warnings),
    )

    if mode == ValidationMode.THROW and not report.ok:
        raise StructureValidationError(report)
    return report
