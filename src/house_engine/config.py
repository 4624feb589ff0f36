"""Engine-wide constants: tolerances, probe distances, limits.

All lengths are in meters.
"""

# Default tolerance for level/slab support checks (2mm)
STRUCTURE_TOLERANCE = 0.002

# Generic geometric epsilon for degenerate edges and parallel lines
GEOM_EPSILON = 1e-6

# Tolerance for "point lies on polygon edge" in point-in-polygon tests
ON_EDGE_EPSILON = 1e-9

# Miter points farther than this factor × |offset| fall back to a bevel
MITER_LIMIT_FACTOR = 6.0

# Openings
MIN_OPENING_DIMENSION = 0.05
OPENING_TOLERANCE = 1e-6
OUTWARD_PROBE_DISTANCE = 0.05

# Facade panels
FACADE_PANEL_THICKNESS = 0.025
MIN_HOLE_SIZE = 1e-4

# Multi-plane roofs
REFERENCE_HALF_EXTENT = 1000.0
PERP_CUT_PROBE_DISTANCE = 0.01
SUSPICIOUS_RIDGE_T_MARGIN = 0.01
SUSPICIOUS_RIDGE_SPAN = 0.02

# Roof plates
DEFAULT_ROOF_THICKNESS = 0.2
