"""
Mesh validation for optimized sprite meshes.

Checks that an output mesh can be handed to a sprite renderer without
complaints:
- Every index addresses an existing vertex (and fits in 16 bits)
- No degenerate (zero-area) triangles
- Consistent triangle winding (neighbours agree on edge direction)
- Every vertex sits inside the bounds rectangle

And that the optimization did what it promised: fewer triangles, without
losing covered area beyond the configured tolerances.
"""

from typing import Any, Dict, List, Optional
import logging

import numpy as np

from .constants import MAX_VERTEX_COUNT
from .geometry import mesh_winding
from .mesh import Bounds, Mesh
from .mesh_stats import compare_mesh_stats, compute_mesh_stats

# Set up logging for this module
logger = logging.getLogger(__name__)


class ValidationResult:
    """
    Result of mesh validation containing issues found and statistics.
    """

    def __init__(self):
        """Initialize an empty validation result."""
        self.is_valid = True
        self.errors: List[str] = []
        self.warnings: List[str] = []
        self.stats: Dict[str, Any] = {}

    def add_error(self, message: str) -> None:
        """Add a critical error that makes the mesh invalid."""
        self.is_valid = False
        self.errors.append(message)

    def add_warning(self, message: str) -> None:
        """Add a non-critical warning about mesh quality."""
        self.warnings.append(message)

    def add_stat(self, key: str, value: Any) -> None:
        """Add a statistic about the mesh."""
        self.stats[key] = value

    def __repr__(self) -> str:
        status = "VALID" if self.is_valid else "INVALID"
        return f"ValidationResult({status}, errors={len(self.errors)}, warnings={len(self.warnings)})"


def validate_mesh(mesh: Mesh, bounds: Optional[Bounds] = None, mesh_name: str = "mesh") -> ValidationResult:
    """
    Validate a sprite mesh.

    Args:
        mesh: Mesh object to validate
        bounds: Rectangle every vertex must lie in (skipped when None)
        mesh_name: Name for error messages (e.g., the sprite's name)

    Returns:
        ValidationResult with detailed findings
    """
    result = ValidationResult()
    result.add_stat("vertices", len(mesh.vertices))
    result.add_stat("triangles", len(mesh.triangles))

    if not mesh.triangles:
        result.add_warning(f"{mesh_name} has no triangles")
        return result

    # Critical check: index range
    try:
        mesh.validate()
    except ValueError as e:
        result.add_error(f"{mesh_name}: {e}")
        return result

    if len(mesh.vertices) > MAX_VERTEX_COUNT:
        result.add_error(f"{mesh_name} has {len(mesh.vertices)} vertices, "
                         f"more than 16-bit indices can address ({MAX_VERTEX_COUNT})")

    vertices = np.asarray(mesh.vertices, dtype=np.float64)
    corners = vertices[np.asarray(mesh.triangles, dtype=np.int64)]
    u = corners[:, 1] - corners[:, 0]
    v = corners[:, 2] - corners[:, 0]
    doubled_areas = u[:, 0] * v[:, 1] - u[:, 1] * v[:, 0]

    # Quality check: degenerate triangles
    degenerate_threshold = 1e-10
    degenerate_count = int((np.abs(doubled_areas) < degenerate_threshold).sum())
    result.add_stat("degenerate_faces", degenerate_count)
    if degenerate_count > 0:
        result.add_warning(f"{mesh_name} has {degenerate_count} degenerate (zero-area) triangles")

    # Critical check: winding consistency
    # Two triangles agreeing on winding traverse their shared edge in
    # opposite directions, so a repeated directed edge means a flipped one
    directed_count: Dict[tuple, int] = {}
    for tri in mesh.triangles:
        for a, b in ((tri[0], tri[1]), (tri[1], tri[2]), (tri[2], tri[0])):
            directed_count[(a, b)] = directed_count.get((a, b), 0) + 1
    repeated = [edge for edge, count in directed_count.items() if count > 1]
    if repeated:
        result.add_error(f"{mesh_name} has inconsistent triangle winding")
        result.add_error(f"  {len(repeated)} edges are traversed in the same direction by two triangles")
    else:
        result.add_stat("winding_consistent", True)

    nondegenerate = doubled_areas[np.abs(doubled_areas) >= degenerate_threshold]
    ccw = int((nondegenerate > 0).sum())
    cw = int((nondegenerate < 0).sum())
    result.add_stat("ccw_triangles", ccw)
    result.add_stat("cw_triangles", cw)
    result.add_stat("winding", {1: "CCW", -1: "CW", 0: "mixed"}[mesh_winding(mesh.vertices, mesh.triangles)])
    if ccw and cw:
        result.add_warning(f"{mesh_name} mixes {ccw} CCW and {cw} CW triangles")

    # Critical check: bounds
    if bounds is not None:
        outside = int(sum(1 for point in mesh.vertices if not bounds.contains(point)))
        result.add_stat("vertices_outside_bounds", outside)
        if outside:
            result.add_error(f"{mesh_name} has {outside} vertices outside {bounds}")

    # Quality check: triangle angles
    angles = []
    for k in range(3):
        e1 = corners[:, (k + 1) % 3] - corners[:, k]
        e2 = corners[:, (k + 2) % 3] - corners[:, k]
        norms = np.linalg.norm(e1, axis=1) * np.linalg.norm(e2, axis=1)
        cosine = np.einsum('ij,ij->i', e1, e2) / np.where(norms > 0, norms, 1.0)
        angles.append(np.degrees(np.arccos(np.clip(cosine, -1.0, 1.0))))
    angles_deg = np.stack(angles)
    min_angle = float(angles_deg.min())
    max_angle = float(angles_deg.max())
    result.add_stat("min_angle_deg", min_angle)
    result.add_stat("max_angle_deg", max_angle)
    if min_angle < 1.0:
        result.add_warning(f"{mesh_name} has very acute triangles (min angle: {min_angle:.1f}°)")

    return result


def validate_optimization_quality(
    original: Mesh,
    optimized: Mesh,
    bounds: Bounds,
    max_area_loss_pct: float = 0.0,
    mesh_name: str = "mesh"
) -> ValidationResult:
    """
    Compare an optimized mesh to the original it came from.

    Args:
        original: Mesh before optimization
        optimized: Mesh after optimization
        bounds: Bounds rectangle both meshes belong to
        max_area_loss_pct: Largest covered-area loss (percent) that is
                           still acceptable
        mesh_name: Name for messages

    Returns:
        ValidationResult; stats hold both stats dicts plus the comparison
    """
    result = validate_mesh(optimized, bounds, mesh_name)

    before = compute_mesh_stats(original, bounds)
    after = compute_mesh_stats(optimized, bounds)
    comparison = compare_mesh_stats(before, after)
    result.add_stat("before", before)
    result.add_stat("after", after)
    result.stats.update(comparison)

    if after['triangles'] > before['triangles']:
        result.add_warning(
            f"{mesh_name} gained triangles ({before['triangles']} -> {after['triangles']})"
        )

    area_loss = -comparison['area_change_pct']
    if area_loss > max_area_loss_pct + 1e-9:
        result.add_error(f"{mesh_name} lost {area_loss:.2f}% of its covered area")

    logger.debug(f"{mesh_name}: {before['triangles']} -> {after['triangles']} triangles, "
                 f"area change {comparison['area_change_pct']:+.2f}%")
    return result
