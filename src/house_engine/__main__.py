"""House Engine CLI.

Usage:
    python -m house_engine <command> <house.json> [options]

Every command prints JSON to stdout and exits with code 1 on failure.
"""
from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Optional

import typer
from pydantic import ValidationError

from house_engine import __version__
from house_engine.derive.house import derive_house
from house_engine.derive.roofs import (
    DerivedFlatRoof,
    DerivedGableRoof,
    DerivedMultiPlaneRoof,
    DerivedMultiRidgeRoof,
    DerivedRoof,
)
from house_engine.models.house import House
from house_engine.models.roofs import MultiPlaneRoof
from house_engine.roof.fixes import apply_roof_fix_plan, plan_roof_fixes
from house_engine.roof.regions import normalize_multi_plane_roof
from house_engine.validators.openings import OpeningValidationError, validate_openings
from house_engine.validators.roof import (
    RoofValidationMessage,
    RoofValidationResult,
    validate_multi_plane_roof,
)
from house_engine.validators.structural import (
    StructureValidationError,
    ValidationIssue,
    ValidationMode,
    ValidationReport,
    validate_structure,
)

app = typer.Typer(
    name="house_engine",
    help="House Engine: derive and validate house geometry.",
    no_args_is_help=True,
)


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
):
    """Derive and validate house geometry from a declarative description."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _output(data: dict) -> None:
    """Print JSON output to stdout."""
    typer.echo(json.dumps(data, indent=2, ensure_ascii=False))


def _fail(error: str, **extra) -> None:
    _output({"ok": False, "error": error, **extra})
    raise typer.Exit(1)


def _load_house(path: str) -> House:
    """Load a house JSON file, failing with a JSON error."""
    file = Path(path)
    if not file.exists():
        _fail(f"File not found: {file}")
    try:
        return House.load(file)
    except ValidationError as e:
        _fail(f"Invalid house description: {e.error_count()} errors", details=str(e))


def _issue_json(issue: ValidationIssue) -> dict:
    return {
        "severity": issue.severity.value,
        "code": issue.code.value,
        "message": issue.message,
        "level_index": issue.level_index,
        "details": issue.details,
    }


def _structure_json(report: ValidationReport) -> dict:
    return {"ok": report.ok, "issues": [_issue_json(i) for i in report.issues]}


def _roof_message_json(msg: RoofValidationMessage) -> dict:
    data = {"code": msg.code.value, "message": msg.message}
    if msg.ridge_id:
        data["ridge_id"] = msg.ridge_id
    if msg.face_id:
        data["face_id"] = msg.face_id
    return data


def _roof_report_json(result: RoofValidationResult) -> dict:
    return {
        "ok": result.ok,
        "errors": [_roof_message_json(m) for m in result.errors],
        "warnings": [_roof_message_json(m) for m in result.warnings],
        "invalid_ridges": [r.id for r in result.debug.invalid_ridges],
        "invalid_faces": [f.id for f in result.debug.invalid_faces],
        "suspicious_faces": [f.id for f in result.debug.suspicious_faces],
    }


def _roof_summary(roof: DerivedRoof) -> dict:
    if isinstance(roof, DerivedFlatRoof):
        return {
            "id": roof.roof_id,
            "type": "flat",
            "pieces": [
                {
                    "vertices": len(p.outer),
                    "holes": len(p.holes),
                    "bottom": round(p.bottom, 4),
                    "top": round(p.top, 4),
                }
                for p in roof.pieces
            ],
        }
    if isinstance(roof, DerivedGableRoof):
        return {
            "id": roof.roof_id,
            "type": "gable",
            "vertices": len(roof.mesh.vertices),
            "faces": len(roof.mesh.faces),
            "max_z": round(roof.mesh.max_z, 4),
        }
    if isinstance(roof, DerivedMultiRidgeRoof):
        return {
            "id": roof.roof_id,
            "type": "multi-ridge",
            "split_x": roof.split_x,
            "west_faces": len(roof.west.faces) if roof.west else 0,
            "east_faces": len(roof.east.faces) if roof.east else 0,
        }
    if isinstance(roof, DerivedMultiPlaneRoof):
        return {
            "id": roof.roof_id,
            "type": "multi-plane",
            "faces": [
                {
                    "id": f.face_id,
                    "half_planes": len(f.half_planes) if f.half_planes is not None else None,
                    "cap": list(f.cap) if f.cap else None,
                }
                for f in roof.faces
            ],
        }
    raise TypeError(f"Unknown derived roof: {type(roof).__name__}")


def _multi_plane_roofs(house: House, roof_id: Optional[str]) -> list[MultiPlaneRoof]:
    roofs = [r for r in house.roofs if isinstance(r, MultiPlaneRoof)]
    if roof_id is not None:
        roofs = [r for r in roofs if r.id == roof_id]
        if not roofs:
            _fail(f"Multi-plane roof '{roof_id}' not found")
    return roofs


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------

@app.command()
def validate(
    house_file: str = typer.Argument(..., help="House JSON file"),
    tolerance: float = typer.Option(0.002, "--tolerance", "-t", help="Vertical tolerance (m)"),
):
    """Validate structure, openings and multi-plane roofs."""
    house = _load_house(house_file)
    structure = validate_structure(house, tolerance=tolerance, mode=ValidationMode.REPORT)

    openings: dict = {"ok": True}
    try:
        validate_openings(house)
    except OpeningValidationError as e:
        openings = {"ok": False, "opening_id": e.opening_id, "error": str(e)}

    roofs = {
        roof.id: _roof_report_json(validate_multi_plane_roof(normalize_multi_plane_roof(roof)))
        for roof in _multi_plane_roofs(house, None)
    }

    ok = structure.ok and openings["ok"] and all(r["ok"] for r in roofs.values())
    _output({
        "ok": ok,
        "house": house.name,
        "structure": _structure_json(structure),
        "openings": openings,
        "roofs": roofs,
    })
    if not ok:
        raise typer.Exit(1)


@app.command()
def derive(
    house_file: str = typer.Argument(..., help="House JSON file"),
    mode: str = typer.Option("throw", "--mode", "-m", help="Structure check mode: throw | report"),
    tolerance: float = typer.Option(0.002, "--tolerance", "-t", help="Vertical tolerance (m)"),
):
    """Derive slabs, walls, openings, facade panels and roofs."""
    if mode not in [m.value for m in ValidationMode]:
        _fail(f"Unknown mode: {mode}. Available: throw, report")
    house = _load_house(house_file)
    try:
        derived = derive_house(house, mode=ValidationMode(mode), tolerance=tolerance)
    except StructureValidationError as e:
        _fail(str(e), structure=_structure_json(e.report))
    except OpeningValidationError as e:
        _fail(str(e), opening_id=e.opening_id)

    _output({
        "ok": derived.ok,
        "house": house.name,
        "structure": _structure_json(derived.structure),
        "slabs": [
            {
                "id": s.id,
                "level": s.level_id,
                "top": round(s.elevation_top, 4),
                "bottom": round(s.elevation_bottom, 4),
            }
            for s in derived.slabs
        ],
        "wall_shells": [
            {
                "id": w.id,
                "base": round(w.base, 4),
                "height": w.height,
                "area_m2": round(w.cross_section.area, 3),
            }
            for w in derived.wall_shells
        ],
        "wall_segments": len(derived.wall_segments),
        "openings": [
            {
                "id": o.id,
                "kind": o.kind.value,
                "level_index": o.level_index,
                "edge_index": o.edge_index,
                "u": [round(o.u_min, 4), round(o.u_max, 4)],
                "v": [round(o.v_min, 4), round(o.v_max, 4)],
                "outward": [round(o.outward[0], 4), round(o.outward[1], 4)],
            }
            for o in derived.openings
        ],
        "facade_panels": [
            {"id": p.id, "width": round(p.width, 4), "holes": len(p.holes)}
            for p in derived.facade_panels
        ],
        "roofs": [_roof_summary(r) for r in derived.roofs],
        "roof_reports": {
            roof_id: _roof_report_json(report)
            for roof_id, report in derived.roof_reports.items()
        },
    })


@app.command("roof-check")
def roof_check(
    house_file: str = typer.Argument(..., help="House JSON file"),
    roof: Optional[str] = typer.Option(None, "--roof", "-r", help="Check one roof only"),
):
    """Check multi-plane roof topology."""
    house = _load_house(house_file)
    reports = {
        r.id: _roof_report_json(validate_multi_plane_roof(normalize_multi_plane_roof(r)))
        for r in _multi_plane_roofs(house, roof)
    }
    ok = all(r["ok"] for r in reports.values())
    _output({"ok": ok, "roofs": reports})
    if not ok:
        raise typer.Exit(1)


@app.command("roof-fix")
def roof_fix(
    before_file: str = typer.Argument(..., help="House JSON before the ridge edit"),
    after_file: str = typer.Argument(..., help="House JSON after the ridge edit"),
    roof: Optional[str] = typer.Option(None, "--roof", "-r", help="Fix one roof only"),
    output: Optional[str] = typer.Option(
        None, "--output", "-o", help="Write the fixed house here"
    ),
):
    """Plan (and optionally apply) divider updates after ridges moved."""
    before = _load_house(before_file)
    after = _load_house(after_file)

    plans = []
    fixed_roofs = {}
    for after_roof in _multi_plane_roofs(after, roof):
        before_roof = before.get_roof(after_roof.id)
        if not isinstance(before_roof, MultiPlaneRoof):
            continue
        plan = plan_roof_fixes(before_roof, after_roof)
        fixed_roofs[after_roof.id] = apply_roof_fix_plan(after_roof, plan)
        plans.append({
            "roof": after_roof.id,
            "patches": [
                {
                    "face_id": p.face_id,
                    "ridge_id": p.ridge_id,
                    "item_index": p.item_index,
                    "a": [p.next_a.x, p.next_a.y],
                    "b": [p.next_b.x, p.next_b.y],
                }
                for p in plan.patches
            ],
            "errors": plan.errors,
        })

    result: dict = {"ok": all(not p["errors"] for p in plans), "plans": plans}
    if output:
        roofs = [fixed_roofs.get(r.id, r) for r in after.roofs]
        saved = after.model_copy(update={"roofs": roofs}).save(output)
        result["saved"] = str(saved)

    _output(result)
    if not result["ok"]:
        raise typer.Exit(1)


@app.command()
def render(
    house_file: str = typer.Argument(..., help="House JSON file"),
    output: str = typer.Option("plan.png", "--output", "-o", help="Output PNG path"),
    level: Optional[str] = typer.Option(None, "--level", "-l", help="Render one level only"),
):
    """Render a plan view (with roof diagnostics) to PNG."""
    from house_engine.export.plan import render_plan

    house = _load_house(house_file)
    try:
        path = render_plan(house, output, level_id=level)
    except ValueError as e:
        _fail(str(e))
    _output({"ok": True, "rendered": str(path)})


@app.command()
def sample(
    output: str = typer.Argument(..., help="Where to write the house JSON"),
    generator: str = typer.Option(
        "reference", "--generator", "-g", help="Generator name (reference, box)"
    ),
):
    """Write a generated sample house to a JSON file."""
    if generator == "reference":
        from house_engine.generators.reference import generate_reference_house
        house = generate_reference_house()
    elif generator == "box":
        from house_engine.generators.box import generate_box_house
        house = generate_box_house()
    else:
        _fail(f"Unknown generator: {generator}. Available: reference, box")

    path = house.save(output)
    structure = validate_structure(house, mode=ValidationMode.REPORT)
    _output({
        "ok": True,
        "generator": generator,
        "saved": str(path),
        "levels": len(house.levels),
        "structure": _structure_json(structure),
    })


@app.command()
def version():
    """Print the package version."""
    _output({"ok": True, "version": __version__})


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------

if __name__ == "__main__":
    app()
