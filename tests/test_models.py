"""Tests for house data models and JSON I/O."""

import pytest
from pydantic import ValidationError

from house_engine.models import (
    CompoundRegion,
    ExplicitPlane,
    FlatRoof,
    GableRoof,
    House,
    MaterializedDivider,
    MultiPlaneRoof,
    OpeningKind,
    Point2D,
    RidgeCapTriangleRegion,
    RidgeDivider,
    RidgePerpCut,
)
from house_engine.generators.reference import generate_reference_house

CAMEL_HOUSE = {
    "name": "Camel",
    "wallThickness": 0.25,
    "levels": [
        {
            "id": "L0",
            "elevation": 0,
            "height": 3.0,
            "slab": {"thickness": 0.2},
            "footprint": {"outer": [
                {"x": 0, "y": 0}, {"x": 6, "y": 0}, {"x": 6, "y": 4}, {"x": 0, "y": 4},
            ]},
        },
    ],
    "roofs": [
        {
            "id": "r",
            "type": "multi-plane",
            "baseLevelId": "L0",
            "ridgeSegments": [
                {"id": "main", "start": {"x": 1, "y": 2}, "end": {"x": 5, "y": 2}, "height": 2.0},
            ],
            "faces": [
                {
                    "id": "f1",
                    "kind": "ridgeSideSegment",
                    "ridgeId": "main",
                    "ridgeT0": 0.1,
                    "ridgeT1": 0.9,
                    "region": {"type": "compound", "items": [
                        {"a": {"x": 1, "y": 2}, "b": {"x": 5, "y": 2}, "keep": "left"},
                        {"type": "explicit", "a": {"x": 0, "y": 0}, "b": {"x": 1, "y": 0},
                         "keep": "right"},
                        {"type": "ridgeDivider", "ridgeId": "main", "keep": "left"},
                        {"type": "ridgePerpCut", "ridgeId": "main", "t": 0.5, "keep": "ahead"},
                    ]},
                },
                {
                    "id": "cap",
                    "kind": "hipCap",
                    "region": {"type": "ridgeCapTriangle", "ridgeId": "main", "end": "start"},
                },
            ],
        },
    ],
    "openings": [
        {
            "id": "w1",
            "levelId": "L0",
            "edge": {"edgeIndex": 0, "fromEnd": True},
            "offset": 1.0,
            "width": 1.2,
            "height": 1.0,
            "sillHeight": 0.9,
        },
    ],
}


class TestParsing:
    def test_camel_case_keys(self):
        house = House.model_validate(CAMEL_HOUSE)
        assert house.wall_thickness == 0.25
        assert house.levels[0].slab.thickness == 0.2
        assert house.openings[0].edge.from_end is True
        assert house.openings[0].kind == OpeningKind.WINDOW

    def test_snake_case_keys(self):
        house = House.model_validate({
            "wall_thickness": 0.4,
            "support_gap_level_ids": ["L1"],
        })
        assert house.wall_thickness == 0.4
        assert house.support_gap_level_ids == ["L1"]

    def test_roof_discriminator(self):
        house = House.model_validate(CAMEL_HOUSE)
        assert isinstance(house.roofs[0], MultiPlaneRoof)

    def test_region_item_tags(self):
        """Untagged {a, b, keep} items are read as materialized dividers."""
        roof = House.model_validate(CAMEL_HOUSE).roofs[0]
        items = roof.faces[0].region.items
        assert isinstance(roof.faces[0].region, CompoundRegion)
        assert isinstance(items[0], MaterializedDivider)
        assert items[0].ridge_id is None
        assert isinstance(items[1], ExplicitPlane)
        assert isinstance(items[2], RidgeDivider)
        assert isinstance(items[3], RidgePerpCut)

    def test_cap_region(self):
        roof = House.model_validate(CAMEL_HOUSE).roofs[0]
        assert isinstance(roof.faces[1].region, RidgeCapTriangleRegion)

    def test_unknown_roof_type_rejected(self):
        data = {"roofs": [{"id": "x", "type": "dome", "baseLevelId": "L0"}]}
        with pytest.raises(ValidationError):
            House.model_validate(data)

    def test_flat_and_gable_defaults(self):
        house = House.model_validate({"roofs": [
            {"id": "f", "type": "flat", "baseLevelId": "L0"},
            {
                "id": "g", "type": "gable", "baseLevelId": "L0",
                "eaveHeight": 2.8, "ridgeHeight": 4.8,
                "ridge": {"start": {"x": 0, "y": 2}, "end": {"x": 6, "y": 2}},
            },
        ]})
        flat, gable = house.roofs
        assert isinstance(flat, FlatRoof)
        assert flat.thickness == 0.2
        assert flat.subtract_above_level_id is None
        assert isinstance(gable, GableRoof)
        assert gable.overhang == 0.0


class TestImmutability:
    def test_frozen(self):
        p = Point2D(x=1, y=2)
        with pytest.raises(ValidationError):
            p.x = 5

    def test_model_copy_leaves_original(self):
        house = generate_reference_house()
        moved = house.levels[1].model_copy(update={"elevation": 4.0})
        assert moved.elevation == 4.0
        assert house.levels[1].elevation == 3.05


class TestLookups:
    def test_get_level(self):
        house = generate_reference_house()
        assert house.get_level("first").elevation == 3.05
        assert house.get_level("attic") is None

    def test_level_index(self):
        house = generate_reference_house()
        assert house.level_index("first") == 1
        assert house.level_index("attic") is None

    def test_get_roof(self):
        house = generate_reference_house()
        assert house.get_roof("main-roof").type == "multi-plane"
        assert house.get_roof("nope") is None

    def test_get_ridge_and_face(self):
        roof = generate_reference_house().get_roof("main-roof")
        assert roof.get_ridge("main").length == pytest.approx(3.55)
        assert roof.get_face("hip-north").kind == "hipCap"
        assert roof.get_face("nope") is None


class TestSaveLoad:
    def test_roundtrip(self, tmp_path):
        house = generate_reference_house()
        path = house.save(tmp_path / "sub" / "house.json")
        loaded = House.load(path)
        assert loaded.model_dump() == house.model_dump()

    def test_written_in_camel_case(self, tmp_path):
        path = generate_reference_house().save(tmp_path / "house.json")
        text = path.read_text()
        assert '"wallThickness"' in text
        assert '"baseLevelId"' in text
        assert '"wall_thickness"' not in text

    def test_load_malformed(self, tmp_path):
        path = tmp_path / "bad.json"
        path.write_text('{"levels": [{"id": "L0"}]}')
        with pytest.raises(ValidationError):
            House.load(path)
