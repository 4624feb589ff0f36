"""Reference house: derive and validate a two-level house.

- Ground level: 9-vertex footprint, elevation 0, 2.8m walls, 0.3m slab
- First level: 8-vertex footprint, elevation 3.05, 2.8m walls, 0.25m slab
- Flat roof over the ground area the first level does not cover
- Hip roof on the first level (ridge "main", two side faces, two caps)
- A front door and two south windows

Writes the house JSON and a plan render next to this script.
"""

from pathlib import Path

from house_engine.derive.house import derive_house
from house_engine.export.plan import render_plan
from house_engine.generators.reference import generate_reference_house

OUT_DIR = Path(__file__).parent / "output"

house = generate_reference_house()
derived = derive_house(house)

print(f"House: {house.name}")
print(f"Structure ok: {derived.structure.ok} ({len(derived.structure.issues)} issues)")
for slab in derived.slabs:
    print(f"  {slab.id}: {slab.elevation_bottom:.2f} .. {slab.elevation_top:.2f}")
for shell in derived.wall_shells:
    print(f"  {shell.id}: base {shell.base:.2f}, area {shell.cross_section.area:.2f} m²")
for opening in derived.openings:
    print(
        f"  {opening.id}: level {opening.level_index} edge {opening.edge_index} "
        f"u=[{opening.u_min:.2f}, {opening.u_max:.2f}] outward={opening.outward}"
    )
print(f"Facade panels: {len(derived.facade_panels)}")
for roof_id, report in derived.roof_reports.items():
    print(f"  roof {roof_id}: {len(report.errors)} errors, {len(report.warnings)} warnings")

json_path = house.save(OUT_DIR / "reference_house.json")
png_path = render_plan(house, OUT_DIR / "reference_house.png")
print(f"Saved: {json_path}")
print(f"Rendered: {png_path}")
