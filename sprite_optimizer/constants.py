"""
Configuration constants for sprite mesh optimization.

All the magic numbers live here! Want different defaults for your project?
Edit these values and every OptimizerConfig built without overrides picks
them up. No hunting through the pipeline required! 🎯
"""

__version__ = "1.0.0"

# ============================================================================
# Cleaning (contour simplification)
# ============================================================================

# Number of simplification rounds. Each round raises the area budget a bit
# further, so cheap vertices go first and expensive ones last.
CLEAN_STEPS = 100

# Maximum (doubled) triangle area a single cleaning operation may ADD to the
# silhouette, reached on the final round. Adding area is harmless: the sprite
# just draws a few more transparent pixels.
AREA_INCREASE_TOLERANCE = 0.6

# Maximum (doubled) triangle area a single cleaning operation may REMOVE.
# Removing area is far more dangerous (it cuts off visible pixels), so the
# default is zero.
AREA_DECREASE_TOLERANCE = 0.0

# Upper bounds for clean_steps in each profile
MAX_CLEAN_STEPS_CLIP = 1000
MAX_CLEAN_STEPS_REMOVAL = 100

# Upper bound for the removal profile's area tolerances
MAX_AREA_TOLERANCE_REMOVAL = 2.0

# ============================================================================
# Hull simplification (clip strategy)
# ============================================================================

# Fraction of ring vertices kept by the outer-hull simplifier.
# 0 disables the pass, 1 keeps every vertex.
TIGHTNESS = 0.0

# Maximum area the hull simplifier may add, as a ratio of the polygon area.
# 0 means "no area limit, stop on vertex count only".
AREA_DELTA_RATIO = 0.0

# ============================================================================
# Triangulation quality
# ============================================================================

# Angle constraints in degrees (0 = unconstrained)
MINIMUM_ANGLE = 0.0
MAXIMUM_ANGLE = 0.0

# Maximum number of Steiner points the triangulator may insert
# (0 = let the triangulator insert as many as the quality settings need)
STEINER_POINTS = 0

# ============================================================================
# Numeric tolerances
# ============================================================================

# Denominator threshold below which two lines are treated as parallel
INTERSECTION_EPSILON = 1e-6

# Corner extensions may land this far outside the bounds rectangle
BOUNDS_CONTAINS_EPSILON = 1e-5

# Output vertices are clamped this far inside the bounds rectangle. Vertices
# exactly on the texture edge trigger validation warnings in sprite tools.
BOUNDS_CLAMP_EPSILON = 0.0001

# ============================================================================
# Output capacity
# ============================================================================

# Sprite meshes use 16-bit unsigned indices: 0..65535
MAX_VERTEX_COUNT = 65536
