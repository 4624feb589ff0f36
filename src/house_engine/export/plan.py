"""2D plan rendering using matplotlib.

Top-down view of one level (or all levels overlaid):
- Footprints as outlines, wall shells as filled rings
- Openings as colored strips on their host edge (windows blue, doors brown)
- Roof ridges as dashed lines
- Multi-plane roof diagnostics: invalid ridges red, suspicious face ranges
  yellow, invalid face regions as red hatched polygons
"""

from __future__ import annotations

import logging
from pathlib import Path

import matplotlib
matplotlib.use("Agg")  # headless rendering
import matplotlib.pyplot as plt
import matplotlib.patheffects as pe
from matplotlib.patches import Polygon as PolygonPatch

from house_engine.derive.openings import DerivedOpening, derive_openings
from house_engine.derive.walls import DerivedWallShell, derive_wall_shells
from house_engine.geometry.polygon import bounding_box
from house_engine.models.geometry import Point2D
from house_engine.models.house import House, Level
from house_engine.models.openings import OpeningKind
from house_engine.models.roofs import GableRoof, MultiPlaneRoof, MultiRidgeRoof
from house_engine.roof.regions import normalize_multi_plane_roof, ridge_point_at
from house_engine.validators.roof import RoofValidationResult, validate_multi_plane_roof

logger = logging.getLogger(__name__)

_TEXT_HALO = [pe.withStroke(linewidth=3, foreground="white")]

_LEVEL_COLORS = ["#546E7A", "#8D6E63", "#7E57C2", "#26A69A"]


def _xy(points: list[Point2D]) -> tuple[list[float], list[float]]:
    return [p.x for p in points], [p.y for p in points]


def _closed(points: list[Point2D]) -> tuple[list[float], list[float]]:
    xs, ys = _xy(points)
    return xs + xs[:1], ys + ys[:1]


def render_plan(
    house: House,
    output_path: str | Path,
    level_id: str | None = None,
    title: str | None = None,
    dpi: int = 150,
    show_roofs: bool = True,
    show_info_box: bool = True,
) -> Path:
    """Render a plan view of the house to PNG.

    Args:
        house: The house to render.
        output_path: Output image path.
        level_id: Only draw this level (default: all levels overlaid).
        title: Plot title (defaults to the house name).
        dpi: Image resolution.
        show_roofs: Draw ridges and multi-plane roof diagnostics.
        show_info_box: Show an info overlay (levels, openings, roof issues).

    Returns:
        Path to the output image.
    """
    if not house.levels:
        raise ValueError("House has no levels to render")

    if level_id is None:
        levels = list(house.levels)
    else:
        level = house.get_level(level_id)
        if level is None:
            raise ValueError(f"Level '{level_id}' not found")
        levels = [level]

    output_path = Path(output_path)
    fig, ax = plt.subplots(1, 1, figsize=(12, 10))
    ax.set_aspect("equal")
    ax.set_facecolor("#FAFAFA")
    fig.patch.set_facecolor("white")

    shells = {s.level_id: s for s in derive_wall_shells(house)}
    openings = derive_openings(house)
    shown_ids = {lvl.id for lvl in levels}

    for i, level in enumerate(levels):
        color = _LEVEL_COLORS[i % len(_LEVEL_COLORS)]
        _draw_level(ax, level, shells.get(level.id), color)

    for opening in openings:
        level = house.levels[opening.level_index]
        if level.id in shown_ids:
            _draw_opening(ax, opening, house.wall_thickness)

    reports: dict[str, RoofValidationResult] = {}
    if show_roofs:
        for roof in house.roofs:
            if isinstance(roof, GableRoof):
                _draw_ridge(ax, roof.ridge.start, roof.ridge.end, roof.id)
            elif isinstance(roof, MultiRidgeRoof):
                for ridge in roof.ridge_segments:
                    _draw_ridge(ax, ridge.start, ridge.end, ridge.id)
            elif isinstance(roof, MultiPlaneRoof):
                for ridge in roof.ridge_segments:
                    _draw_ridge(ax, ridge.start, ridge.end, ridge.id)
                report = validate_multi_plane_roof(normalize_multi_plane_roof(roof))
                reports[roof.id] = report
                _draw_roof_diagnostics(ax, roof, report)

    ax.legend(loc="lower right", fontsize=8)
    ax.set_title(title or house.name, fontsize=16, fontweight="bold", pad=20)
    ax.grid(True, alpha=0.2, linestyle="--")
    ax.set_xlabel("X (meters)", fontsize=10)
    ax.set_ylabel("Y (meters)", fontsize=10)

    # Clipped face regions can be huge; frame the view on the footprints
    margin = 1.5
    all_points = [p for lvl in levels for p in lvl.footprint.outer]
    if all_points:
        min_x, min_y, max_x, max_y = bounding_box(all_points)
        ax.set_xlim(min_x - margin, max_x + margin)
        ax.set_ylim(min_y - margin, max_y + margin)

    if show_info_box:
        roof_errors = sum(len(r.errors) for r in reports.values())
        roof_warnings = sum(len(r.warnings) for r in reports.values())
        info_lines = [
            f"Levels: {', '.join(lvl.id for lvl in levels)}",
            f"Wall thickness: {house.wall_thickness:.2f}m",
            f"Openings: {sum(1 for o in openings if house.levels[o.level_index].id in shown_ids)}",
            f"Roofs: {len(house.roofs)}",
            f"Roof issues: {roof_errors} errors, {roof_warnings} warnings" if reports else "",
        ]
        info_text = "\n".join(line for line in info_lines if line)
        ax.text(
            0.02, 0.98, info_text,
            transform=ax.transAxes,
            fontsize=8,
            verticalalignment="top",
            fontfamily="monospace",
            bbox=dict(boxstyle="round,pad=0.5", facecolor="white", alpha=0.8, edgecolor="#CCCCCC"),
            zorder=100,
        )

    plt.tight_layout()
    fig.savefig(str(output_path), dpi=dpi, bbox_inches="tight")
    plt.close(fig)
    logger.debug("Rendered plan of '%s' to %s", house.name, output_path)

    return output_path


def _draw_level(ax: plt.Axes, level: Level, shell: DerivedWallShell | None, color: str) -> None:
    """Footprint outline plus the wall shell ring."""
    outer = level.footprint.outer
    if len(outer) < 3:
        return

    if shell is not None and len(shell.outer_ring) >= 3:
        ax.add_patch(PolygonPatch(
            _xy_pairs(shell.outer_ring), closed=True,
            facecolor=color, alpha=0.35, edgecolor="none", zorder=5,
        ))
        if len(shell.inner_ring) >= 3:
            ax.add_patch(PolygonPatch(
                _xy_pairs(shell.inner_ring), closed=True,
                facecolor="#FAFAFA", edgecolor="none", zorder=6,
            ))

    xs, ys = _closed(outer)
    ax.plot(xs, ys, color=color, linewidth=1.2, linestyle="-", zorder=7, label=level.id)

    for hole in level.footprint.holes:
        if len(hole) >= 3:
            hx, hy = _closed(hole)
            ax.plot(hx, hy, color=color, linewidth=0.8, linestyle=":", zorder=7)

    # Edge indices, for authoring openings
    for i in range(len(outer)):
        a, b = level.footprint.edge(i)
        ax.text(
            (a.x + b.x) / 2, (a.y + b.y) / 2, str(i),
            fontsize=6, ha="center", va="center", color=color,
            path_effects=_TEXT_HALO, zorder=20,
        )


def _xy_pairs(points: list[Point2D]) -> list[tuple[float, float]]:
    return [(p.x, p.y) for p in points]


def _draw_opening(ax: plt.Axes, opening: DerivedOpening, wall_thickness: float) -> None:
    """Opening as a strip across the wall, on its host edge span."""
    tx, ty = opening.tangent
    nx, ny = opening.outward
    half_w = opening.width / 2
    t = wall_thickness / 2
    cx, cy = opening.center.x, opening.center.y

    corners = [
        (cx - tx * half_w + nx * t, cy - ty * half_w + ny * t),
        (cx + tx * half_w + nx * t, cy + ty * half_w + ny * t),
        (cx + tx * half_w - nx * t, cy + ty * half_w - ny * t),
        (cx - tx * half_w - nx * t, cy - ty * half_w - ny * t),
    ]
    color = "#1E88E5" if opening.kind == OpeningKind.WINDOW else "#6D4C41"
    ax.add_patch(PolygonPatch(corners, closed=True, facecolor=color, alpha=0.8, zorder=12))

    # Small tick pointing outward
    ax.plot(
        [cx, cx + nx * (t + 0.25)], [cy, cy + ny * (t + 0.25)],
        color=color, linewidth=1.0, zorder=12,
    )
    ax.text(
        cx + nx * (t + 0.45), cy + ny * (t + 0.45), opening.id,
        fontsize=6, ha="center", va="center", color=color,
        path_effects=_TEXT_HALO, zorder=20,
    )


def _draw_ridge(ax: plt.Axes, start: Point2D, end: Point2D, label: str) -> None:
    ax.plot(
        [start.x, end.x], [start.y, end.y],
        color="#37474F", linewidth=1.5, linestyle="--", zorder=15,
    )
    ax.text(
        (start.x + end.x) / 2, (start.y + end.y) / 2, label,
        fontsize=7, ha="left", va="bottom", color="#37474F",
        path_effects=_TEXT_HALO, zorder=20,
    )


def _draw_roof_diagnostics(ax: plt.Axes, roof: MultiPlaneRoof, report: RoofValidationResult) -> None:
    """Highlight the entities a roof validation flagged."""
    for ridge in report.debug.invalid_ridges:
        ax.plot(
            [ridge.start.x, ridge.end.x], [ridge.start.y, ridge.end.y],
            color="#E53935", linewidth=3.0, zorder=16,
        )
        ax.scatter([ridge.start.x], [ridge.start.y], color="#E53935", s=30, zorder=16)

    for face in report.debug.suspicious_faces:
        ridge = roof.get_ridge(face.ridge_id) if face.ridge_id else None
        if ridge is None or face.ridge_t0 is None or face.ridge_t1 is None:
            continue
        p0 = ridge_point_at(ridge, face.ridge_t0)
        p1 = ridge_point_at(ridge, face.ridge_t1)
        ax.plot([p0.x, p1.x], [p0.y, p1.y], color="#FDD835", linewidth=4.0, zorder=16)

    for face_id, polygon in report.debug.invalid_face_polygons.items():
        if len(polygon) >= 3:
            ax.add_patch(PolygonPatch(
                _xy_pairs(polygon), closed=True,
                facecolor="#E53935", alpha=0.15, edgecolor="#E53935",
                hatch="//", zorder=14,
            ))
        elif polygon:
            xs, ys = _xy(polygon)
            ax.plot(xs, ys, color="#E53935", linewidth=2.0, zorder=14)
        logger.debug("Roof '%s': drew invalid face '%s'", roof.id, face_id)
