"""Validation for house descriptions.

- structural: level/slab support chain (floating slabs, ordering, dimensions)
- openings: openings fit their host edge and wall height
- roof: multi-plane roof topology (ridges, face ranges, face regions)
"""
