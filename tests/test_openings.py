"""Tests for opening validation and derivation."""

import pytest

from house_engine.derive.openings import derive_openings, pick_outward_normal
from house_engine.generators.reference import generate_reference_house
from house_engine.models import EdgeRef, Footprint, House, Opening, OpeningKind, Point2D
from house_engine.models.house import Level, SlabSpec
from house_engine.validators.openings import OpeningValidationError, validate_openings


def _pts(*coords):
    return [Point2D(x=x, y=y) for x, y in coords]


def _house(outer, *openings: Opening, height: float = 2.8) -> House:
    """Single-level house with the given outer ring."""
    level = Level(
        id="L0",
        elevation=0.0,
        height=height,
        footprint=Footprint(outer=outer),
        slab=SlabSpec(thickness=0.25),
    )
    return House(levels=[level], openings=list(openings))


def _opening(edge_index=0, offset=0.5, width=1.0, height=1.2, sill=0.9, **kwargs) -> Opening:
    return Opening(
        id=kwargs.pop("id", "op"),
        level_id=kwargs.pop("level_id", "L0"),
        edge=EdgeRef(edge_index=edge_index, **kwargs),
        offset=offset,
        width=width,
        height=height,
        sill_height=sill,
    )


SQUARE = _pts((0, 0), (4, 0), (4, 4), (0, 4))
NARROW = _pts((0, 0), (1, 0), (1, 4), (0, 4))


class TestOpeningValidation:
    def test_valid_openings_pass(self):
        validate_openings(generate_reference_house())

    def test_wider_than_edge(self):
        """A 1.2m opening cannot fit a 1.0m edge."""
        house = _house(NARROW, _opening(edge_index=0, offset=0.0, width=1.2))
        with pytest.raises(OpeningValidationError, match="offset\\+width exceeds edge length"):
            validate_openings(house)

    def test_error_carries_opening_id(self):
        house = _house(NARROW, _opening(id="w7", edge_index=0, offset=0.0, width=1.2))
        with pytest.raises(OpeningValidationError) as exc:
            validate_openings(house)
        assert exc.value.opening_id == "w7"
        assert isinstance(exc.value, ValueError)

    def test_unknown_level(self):
        house = _house(SQUARE, _opening(level_id="attic"))
        with pytest.raises(OpeningValidationError, match="invalid levelId"):
            validate_openings(house)

    def test_edge_index_out_of_range(self):
        house = _house(SQUARE, _opening(edge_index=4))
        with pytest.raises(OpeningValidationError, match="invalid edgeIndex"):
            validate_openings(house)

    def test_non_positive_size(self):
        house = _house(SQUARE, _opening(width=0.0))
        with pytest.raises(OpeningValidationError, match="must be > 0"):
            validate_openings(house)

    def test_too_small(self):
        house = _house(SQUARE, _opening(width=0.04))
        with pytest.raises(OpeningValidationError, match=">= 0.05m"):
            validate_openings(house)

    def test_negative_sill(self):
        house = _house(SQUARE, _opening(sill=-0.1))
        with pytest.raises(OpeningValidationError, match="sillHeight"):
            validate_openings(house)

    def test_exceeds_wall_height(self):
        house = _house(SQUARE, _opening(sill=1.0, height=2.0), height=2.8)
        with pytest.raises(OpeningValidationError, match="exceeds wall height"):
            validate_openings(house)

    def test_negative_offset(self):
        house = _house(SQUARE, _opening(offset=-0.5))
        with pytest.raises(OpeningValidationError, match="offset must be >= 0"):
            validate_openings(house)

    def test_exact_fit_allowed(self):
        house = _house(NARROW, _opening(edge_index=0, offset=0.0, width=1.0, sill=0.0, height=2.8))
        validate_openings(house)


class TestDeriveOpenings:
    def test_rectangle_on_edge(self):
        house = _house(SQUARE, _opening(edge_index=0, offset=0.5, width=1.0))
        (op,) = derive_openings(house)
        assert (op.u_min, op.u_max) == pytest.approx((0.5, 1.5))
        assert (op.v_min, op.v_max) == pytest.approx((0.9, 2.1))
        assert op.width == pytest.approx(1.0)
        assert op.height == pytest.approx(1.2)
        assert op.level_index == 0
        assert op.edge_index == 0
        assert op.tangent == pytest.approx((1.0, 0.0))
        assert op.kind == OpeningKind.WINDOW

    def test_center(self):
        house = _house(SQUARE, _opening(edge_index=1, offset=1.0, width=2.0))
        (op,) = derive_openings(house)
        # Edge 1 runs (4, 0) → (4, 4)
        assert op.center.x == pytest.approx(4.0)
        assert op.center.y == pytest.approx(2.0)
        assert op.center.z == pytest.approx(1.5)

    def test_from_end(self):
        house = _house(SQUARE, _opening(edge_index=0, offset=0.5, width=1.0, from_end=True))
        (op,) = derive_openings(house)
        assert (op.u_min, op.u_max) == pytest.approx((2.5, 3.5))

    def test_outward_ccw(self):
        house = _house(SQUARE, _opening(edge_index=0))
        (op,) = derive_openings(house)
        assert op.outward == pytest.approx((0.0, -1.0))

    def test_outward_cw(self):
        cw = list(reversed(SQUARE))  # (0,4) → (4,4) → (4,0) → (0,0)
        house = _house(cw, _opening(edge_index=0))
        (op,) = derive_openings(house)
        assert op.outward == pytest.approx((0.0, 1.0))

    def test_outward_override(self):
        house = _house(SQUARE, _opening(edge_index=0, outward_side="left"))
        (op,) = derive_openings(house)
        assert op.outward == pytest.approx((0.0, 1.0))

    def test_level_elevation_applied(self):
        house = generate_reference_house()
        first = {o.id: o for o in derive_openings(house)}["first-window-south"]
        assert first.level_index == 1
        assert first.center.z == pytest.approx(3.05 + 0.9 + 0.7)
        assert first.u_min == pytest.approx(9.6 - 2.7)
        assert first.outward == pytest.approx((0.0, -1.0))

    def test_style_passed_through(self):
        op = _opening().model_copy(update={"style": {"frame": "oak"}})
        (derived,) = derive_openings(_house(SQUARE, op))
        assert derived.style == {"frame": "oak"}

    def test_unknown_level_skipped(self):
        house = _house(SQUARE, _opening(level_id="attic"))
        assert derive_openings(house) == []


class TestPickOutwardNormal:
    def test_unambiguous_probe(self):
        n = pick_outward_normal(SQUARE, SQUARE[0], (1.0, 0.0), 1.0, 3.0)
        assert n == pytest.approx((0.0, -1.0))

    def test_ambiguous_probe_prefers_winding(self):
        """Probes far past a thin footprint land outside on both sides."""
        n = pick_outward_normal(SQUARE, SQUARE[0], (1.0, 0.0), 1.0, 3.0, probe_distance=10.0)
        assert n == pytest.approx((0.0, -1.0))

    def test_clear_midpoint_beats_quarter_points(self):
        """Both sample points off the span midpoint are outside, so the winding normal is kept.

        The line y=4 runs over a notch cut down into the top of the ring;
        at the quarter points only the upward side is outside.
        """
        ring = _pts(
            (0, 0), (4, 0), (4, 4), (2.1, 4), (2.1, 3), (1.9, 3), (1.9, 4), (0, 4),
        )
        n = pick_outward_normal(ring, Point2D(x=0, y=4), (1.0, 0.0), 0.0, 4.0)
        assert n == pytest.approx((0.0, -1.0))

    def test_thin_wing_vote(self):
        """Both midpoint probes land inside a wing; the quarter points decide.

        The edge y=0, x∈[0,4] of a CCW ring is followed below by a wing
        under its middle, so the midpoint probe below the edge hits the wing.
        """
        ring = _pts(
            (0, 0), (1.9, 0), (1.9, -1), (2.1, -1), (2.1, 0), (4, 0), (4, 4), (0, 4),
        )
        # Wall spanning the whole south side, measured along y=0 from x=0
        n = pick_outward_normal(ring, Point2D(x=0, y=0), (1.0, 0.0), 0.0, 4.0)
        assert n == pytest.approx((0.0, -1.0))
