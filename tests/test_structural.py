"""Tests for structural (support chain) validation."""

import math

import pytest

from house_engine.generators.box import generate_box_house
from house_engine.generators.reference import generate_reference_house
from house_engine.models.house import ElevationConvention, House
from house_engine.validators.structural import (
    IssueCode,
    Severity,
    StructureAdapter,
    StructureValidationError,
    ValidationMode,
    slab_bottom,
    slab_top,
    validate_structure,
)


def _with_level(house: House, index: int, **update) -> House:
    """Copy of `house` with one level's fields replaced."""
    levels = list(house.levels)
    levels[index] = levels[index].model_copy(update=update)
    return house.model_copy(update={"levels": levels})


def _report(house: House, **kwargs):
    return validate_structure(house, mode=ValidationMode.REPORT, **kwargs)


class TestSlabHelpers:
    def test_top_of_slab(self):
        assert slab_top(3.0, 0.25, ElevationConvention.TOP_OF_SLAB) == 3.0
        assert slab_bottom(3.0, 0.25, ElevationConvention.TOP_OF_SLAB) == 2.75

    def test_bottom_of_slab(self):
        assert slab_top(3.0, 0.25, ElevationConvention.BOTTOM_OF_SLAB) == 3.25
        assert slab_bottom(3.0, 0.25, ElevationConvention.BOTTOM_OF_SLAB) == 3.0


class TestSupportChain:
    def test_reference_house_has_no_issues(self):
        report = _report(generate_reference_house())
        assert report.ok
        assert report.issues == []

    def test_box_house_stacks_cleanly(self):
        report = _report(generate_box_house(num_levels=4))
        assert report.ok
        assert report.issues == []

    def test_floating_slab_detected(self):
        """Raising the first level by 1cm leaves its slab 1cm above the walls."""
        house = _with_level(generate_reference_house(), 1, elevation=3.06)
        report = _report(house)
        assert not report.ok
        assert len(report.issues) == 1
        issue = report.issues[0]
        assert issue.code == IssueCode.SLAB_FLOATING
        assert issue.severity == Severity.ERROR
        assert issue.level_index == 1
        assert issue.details["gap"] == pytest.approx(0.01)

    def test_overlap_also_floating(self):
        """A slab sunk into the walls below is a mismatch too."""
        house = _with_level(generate_reference_house(), 1, elevation=3.0)
        report = _report(house)
        assert [i.code for i in report.issues] == [IssueCode.SLAB_FLOATING]

    def test_within_tolerance(self):
        house = _with_level(generate_reference_house(), 1, elevation=3.051)
        assert _report(house).ok

    def test_custom_tolerance(self):
        house = _with_level(generate_reference_house(), 1, elevation=3.06)
        assert _report(house, tolerance=0.02).ok

    def test_allowed_support_gap_is_warning(self):
        house = _with_level(generate_reference_house(), 1, elevation=3.5)
        house = house.model_copy(update={"support_gap_level_ids": ["first"]})
        report = _report(house)
        assert report.ok
        assert len(report.warnings) == 1
        assert report.warnings[0].code == IssueCode.LEVEL_GAP_UNSUPPORTED

    def test_ground_support_forbidden(self):
        house = generate_reference_house().model_copy(update={"allow_ground_support": False})
        report = _report(house)
        assert [(i.code, i.level_index) for i in report.errors] == [
            (IssueCode.SLAB_FLOATING, 0)
        ]

    def test_bottom_of_slab_convention(self):
        """With BOTTOM_OF_SLAB, elevations sit directly on the walls below."""
        house = generate_box_house(num_levels=2)
        house = _with_level(house, 1, elevation=house.levels[0].wall_top)
        house = house.model_copy(
            update={"elevation_convention": ElevationConvention.BOTTOM_OF_SLAB}
        )
        assert _report(house).ok
        # Same house under TOP_OF_SLAB sinks the slab into the walls
        house = house.model_copy(update={"elevation_convention": ElevationConvention.TOP_OF_SLAB})
        assert not _report(house).ok


class TestLevelChecks:
    def test_missing_slab_skips_support_check(self):
        house = _with_level(generate_reference_house(), 1, slab=None, elevation=10.0)
        report = _report(house)
        assert [(i.code, i.level_index) for i in report.issues] == [
            (IssueCode.SLAB_MISSING, 1)
        ]

    def test_zero_thickness_slab_missing(self):
        house = generate_reference_house()
        slab = house.levels[0].slab.model_copy(update={"thickness": 0.0})
        report = _report(_with_level(house, 0, slab=slab))
        assert IssueCode.SLAB_MISSING in [i.code for i in report.errors]

    def test_invalid_height(self):
        house = _with_level(generate_box_house(num_levels=1), 0, height=0.0)
        report = _report(house)
        assert [i.code for i in report.issues] == [IssueCode.LEVEL_FLOATING]

    def test_nan_height(self):
        house = _with_level(generate_box_house(num_levels=1), 0, height=math.nan)
        report = _report(house)
        assert IssueCode.LEVEL_FLOATING in [i.code for i in report.issues]

    def test_unsorted_levels(self):
        house = generate_reference_house()
        house = house.model_copy(update={"levels": list(reversed(house.levels))})
        report = _report(house)
        order = [i for i in report.issues if i.code == IssueCode.LEVEL_ORDER_INVALID]
        assert len(order) == 1
        assert order[0].level_index == 1

    def test_unsorted_levels_allowed_by_adapter(self):
        house = generate_reference_house()
        house = house.model_copy(update={"levels": list(reversed(house.levels))})
        adapter = StructureAdapter(enforce_sorted_levels=False)
        report = _report(house, adapter=adapter)
        assert IssueCode.LEVEL_ORDER_INVALID not in [i.code for i in report.issues]


class TestModes:
    def test_throw_mode_raises(self):
        house = _with_level(generate_reference_house(), 1, elevation=3.06)
        with pytest.raises(StructureValidationError) as exc:
            validate_structure(house)
        assert exc.value.report.issues[0].code == IssueCode.SLAB_FLOATING
        assert "floating" in str(exc.value)

    def test_throw_mode_returns_clean_report(self):
        report = validate_structure(generate_reference_house(), mode="throw")
        assert report.ok

    def test_warnings_do_not_throw(self):
        house = _with_level(generate_reference_house(), 1, elevation=3.5)
        house = house.model_copy(update={"support_gap_level_ids": ["first"]})
        report = validate_structure(house, mode="throw")
        assert report.ok


class TestAdapter:
    def test_plain_dict_levels(self):
        """The validator reads any level representation through the adapter."""
        data = {"levels": [
            {"e": 0.0, "h": 3.0, "t": 0.2},
            {"e": 3.2, "h": 3.0, "t": 0.2},
            {"e": 6.5, "h": 3.0, "t": 0.2},
        ]}
        adapter = StructureAdapter(
            get_levels=lambda h: h["levels"],
            level_elevation=lambda lvl, i: lvl["e"],
            level_height=lambda lvl, i: lvl["h"],
            slab_thickness=lambda lvl, i: lvl["t"],
        )
        report = _report(data, adapter=adapter)
        assert [(i.code, i.level_index) for i in report.issues] == [
            (IssueCode.SLAB_FLOATING, 2)
        ]

    def test_gap_callback(self):
        data = {"levels": [{"e": 0.0, "h": 3.0, "t": 0.2}, {"e": 4.0, "h": 3.0, "t": 0.2}]}
        adapter = StructureAdapter(
            get_levels=lambda h: h["levels"],
            level_elevation=lambda lvl, i: lvl["e"],
            level_height=lambda lvl, i: lvl["h"],
            slab_thickness=lambda lvl, i: lvl["t"],
            is_support_gap_allowed=lambda h, i: i == 1,
        )
        report = _report(data, adapter=adapter)
        assert report.ok
        assert report.warnings[0].code == IssueCode.LEVEL_GAP_UNSUPPORTED
