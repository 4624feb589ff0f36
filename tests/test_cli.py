"""Tests for the CLI interface."""
import json
import subprocess
import sys
from pathlib import Path

import pytest

from house_engine.generators.reference import generate_reference_house
from house_engine.models import House, Point2D
from house_engine.roof.regions import normalize_multi_plane_roof

CLI = [sys.executable, "-m", "house_engine"]
ROOT = Path(__file__).parent.parent


def run_cli(*args: str) -> dict:
    """Run CLI command and return parsed JSON output."""
    result = subprocess.run(
        [*CLI, *args],
        capture_output=True, text=True, cwd=str(ROOT),
    )
    assert result.returncode == 0, f"CLI failed: {result.stderr}\n{result.stdout}"
    return json.loads(result.stdout)


def run_cli_expect_fail(*args: str) -> dict:
    """Run CLI command expecting failure, return parsed JSON output."""
    result = subprocess.run(
        [*CLI, *args],
        capture_output=True, text=True, cwd=str(ROOT),
    )
    assert result.returncode != 0
    return json.loads(result.stdout)


@pytest.fixture
def house_file(tmp_path) -> str:
    return str(generate_reference_house().save(tmp_path / "house.json"))


@pytest.fixture
def floating_file(tmp_path) -> str:
    house = generate_reference_house()
    levels = list(house.levels)
    levels[1] = levels[1].model_copy(update={"elevation": 3.06})
    return str(house.model_copy(update={"levels": levels}).save(tmp_path / "floating.json"))


class TestSample:
    def test_reference(self, tmp_path):
        out = tmp_path / "ref.json"
        data = run_cli("sample", str(out))
        assert data["ok"] is True
        assert data["levels"] == 2
        assert data["structure"]["ok"] is True
        assert out.exists()

    def test_box(self, tmp_path):
        data = run_cli("sample", str(tmp_path / "box.json"), "--generator", "box")
        assert data["generator"] == "box"

    def test_unknown_generator(self, tmp_path):
        data = run_cli_expect_fail("sample", str(tmp_path / "x.json"), "-g", "castle")
        assert "Unknown generator" in data["error"]


class TestValidate:
    def test_reference_ok(self, house_file):
        data = run_cli("validate", house_file)
        assert data["ok"] is True
        assert data["house"] == "Reference House"
        assert data["structure"]["issues"] == []
        assert data["openings"] == {"ok": True}
        assert data["roofs"]["main-roof"]["ok"] is True

    def test_floating_level(self, floating_file):
        data = run_cli_expect_fail("validate", floating_file)
        assert data["ok"] is False
        (issue,) = data["structure"]["issues"]
        assert issue["code"] == "SLAB_FLOATING"
        assert issue["level_index"] == 1

    def test_tolerance_option(self, floating_file):
        data = run_cli("validate", floating_file, "--tolerance", "0.05")
        assert data["ok"] is True

    def test_missing_file(self, tmp_path):
        data = run_cli_expect_fail("validate", str(tmp_path / "nope.json"))
        assert data["ok"] is False
        assert "not found" in data["error"]

    def test_malformed_file(self, tmp_path):
        path = tmp_path / "bad.json"
        path.write_text('{"levels": [{"id": "L0"}]}')
        data = run_cli_expect_fail("validate", str(path))
        assert "Invalid house description" in data["error"]


class TestDerive:
    def test_reference(self, house_file):
        data = run_cli("derive", house_file)
        assert data["ok"] is True
        assert [s["id"] for s in data["slabs"]] == ["slab-ground", "slab-first"]
        assert data["wall_segments"] == 17
        assert len(data["facade_panels"]) == 17
        assert [r["type"] for r in data["roofs"]] == ["flat", "multi-plane"]
        door = next(o for o in data["openings"] if o["id"] == "front-door")
        assert door["kind"] == "door"
        assert door["outward"] == [0.0, -1.0]

    def test_throw_mode_fails(self, floating_file):
        data = run_cli_expect_fail("derive", floating_file)
        assert data["structure"]["issues"][0]["code"] == "SLAB_FLOATING"

    def test_report_mode(self, floating_file):
        data = run_cli("derive", floating_file, "--mode", "report")
        assert data["ok"] is False
        assert len(data["slabs"]) == 2

    def test_unknown_mode(self, house_file):
        data = run_cli_expect_fail("derive", house_file, "--mode", "loose")
        assert "Unknown mode" in data["error"]


class TestRoofCheck:
    def test_reference(self, house_file):
        data = run_cli("roof-check", house_file)
        assert data["ok"] is True
        assert data["roofs"]["main-roof"]["errors"] == []

    def test_single_roof(self, house_file):
        data = run_cli("roof-check", house_file, "--roof", "main-roof")
        assert list(data["roofs"]) == ["main-roof"]

    def test_unknown_roof(self, house_file):
        data = run_cli_expect_fail("roof-check", house_file, "--roof", "ground-flat")
        assert "not found" in data["error"]

    def test_broken_ridge(self, tmp_path):
        house = generate_reference_house()
        roof = house.get_roof("main-roof")
        ridge = roof.ridge_segments[0].model_copy(update={"end": Point2D(x=0.6, y=12)})
        roof = roof.model_copy(update={"ridge_segments": [ridge]})
        house = house.model_copy(update={"roofs": [house.roofs[0], roof]})
        path = house.save(tmp_path / "broken.json")

        data = run_cli_expect_fail("roof-check", str(path))
        report = data["roofs"]["main-roof"]
        assert "RIDGE_ZERO_LENGTH" in [e["code"] for e in report["errors"]]
        assert report["invalid_ridges"] == ["main"]


class TestRoofFix:
    def test_moved_ridge(self, tmp_path, house_file):
        house = generate_reference_house()
        roof = house.get_roof("main-roof")
        ridge = roof.ridge_segments[0].model_copy(update={"start": Point2D(x=0.8, y=12)})
        moved = roof.model_copy(update={"ridge_segments": [ridge]})
        after = house.model_copy(update={"roofs": [house.roofs[0], moved]})
        after_file = str(after.save(tmp_path / "after.json"))

        out = tmp_path / "fixed.json"
        data = run_cli("roof-fix", house_file, after_file, "--output", str(out))
        assert data["ok"] is True
        # Symbolic dividers follow the ridge on their own
        assert data["plans"][0]["patches"] == []
        assert out.exists()

    def test_materialized_dividers_patched(self, tmp_path):
        house = generate_reference_house()
        roof = normalize_multi_plane_roof(house.get_roof("main-roof"))
        before = house.model_copy(update={"roofs": [house.roofs[0], roof]})
        ridge = roof.ridge_segments[0].model_copy(update={"start": Point2D(x=0.8, y=12)})
        after = before.model_copy(update={
            "roofs": [house.roofs[0], roof.model_copy(update={"ridge_segments": [ridge]})],
        })
        before_file = str(before.save(tmp_path / "before.json"))
        after_file = str(after.save(tmp_path / "after.json"))

        out = tmp_path / "fixed.json"
        data = run_cli("roof-fix", before_file, after_file, "-o", str(out))
        patches = data["plans"][0]["patches"]
        assert [p["face_id"] for p in patches] == ["main-west", "main-east"]
        assert patches[0]["a"] == [0.8, 12.0]

        fixed = House.load(out).get_roof("main-roof")
        assert fixed.get_face("main-west").region.items[0].a == Point2D(x=0.8, y=12)

    def test_no_changes(self, house_file):
        data = run_cli("roof-fix", house_file, house_file)
        assert data["ok"] is True
        assert data["plans"] == [{"roof": "main-roof", "patches": [], "errors": []}]


class TestRender:
    def test_render(self, tmp_path, house_file):
        out = tmp_path / "plan.png"
        data = run_cli("render", house_file, "--output", str(out))
        assert data["ok"] is True
        assert out.exists()

    def test_unknown_level(self, tmp_path, house_file):
        data = run_cli_expect_fail(
            "render", house_file, "--output", str(tmp_path / "x.png"), "--level", "attic"
        )
        assert "not found" in data["error"]


class TestVersion:
    def test_version(self):
        data = run_cli("version")
        assert data["version"] == "0.1.0"
