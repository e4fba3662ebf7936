"""
Sprite mesh optimization pipeline.

Takes a dense sprite mesh (one quad per pixel, or whatever the sprite tool
generated) and rebuilds it as a tight mesh around the same silhouette with
far fewer triangles:

1. Find the boundary edges (edges used by exactly one triangle)
2. Walk them into closed contours, oriented so the solid is on the left
3. Clean each contour under the configured area budgets
4. Rebuild a polygon from the cleaned contours
5. Triangulate the polygon with the triangle library
6. Reindex the triangles into a compact mesh clamped inside the bounds

Every call is independent: no caches, no globals. A failure raises an
OptimizationError subclass carrying the stage (and loop) it came from; the
core never falls back to a "best effort" mesh. Deciding to skip the sprite
or retry with other settings is up to the caller.
"""

import logging
from typing import Any, Dict, List, Optional

from shapely.geometry.base import BaseGeometry

from .boundary_graph import build_boundary_graph
from .config import OptimizerConfig, SimplificationStrategy
from .contour_simplifier import materialize_contour, simplify_contours
from .contour_walker import extract_contours, orient_contours
from .errors import GeometryError, GraphInconsistencyError
from .geometry import mesh_winding
from .hull_simplifier import simplify_hull
from .mesh import Bounds, Mesh, Point
from .mesh_stats import compare_mesh_stats, compute_mesh_stats
from .polygon_triangulator import build_polygon, orient_triangles, polygonize_loops, triangulate_geometry
from .reindexer import reindex_triangles

# Set up logging for this module
logger = logging.getLogger(__name__)


class OptimizationResult:
    """
    Everything optimize_mesh_detailed() produced along the way.

    Attributes:
        mesh: The optimized mesh
        contours: Walked contours (vertex indices into the input mesh),
                  normalized so outer loops are CCW
        loops: Cleaned coordinate loops handed to the polygon stage
        geometry: shapely Polygon/MultiPolygon that was triangulated
                  (None when the input had no boundary)
        before: compute_mesh_stats() of the input mesh
        after: compute_mesh_stats() of the optimized mesh
        changed: False when the input was returned unchanged
    """

    def __init__(
        self,
        mesh: Mesh,
        contours: List[List[int]],
        loops: List[List[Point]],
        geometry: Optional[BaseGeometry],
        before: Dict[str, Any],
        after: Dict[str, Any],
        changed: bool = True
    ):
        self.mesh = mesh
        self.contours = contours
        self.loops = loops
        self.geometry = geometry
        self.before = before
        self.after = after
        self.changed = changed

    @property
    def reduction(self) -> Dict[str, float]:
        return compare_mesh_stats(self.before, self.after)

    def __repr__(self) -> str:
        return (f"OptimizationResult(triangles {self.before['triangles']} -> {self.after['triangles']}, "
                f"vertices {self.before['vertices']} -> {self.after['vertices']})")


def _build_geometry(loops: List[List[Point]], config: OptimizerConfig) -> BaseGeometry:
    if config.strategy is SimplificationStrategy.CLIP:
        geometry = polygonize_loops(loops, config.extract_only_polygonal, config.check_rings_valid)
        return simplify_hull(geometry, config.tightness, config.area_delta_ratio)
    return build_polygon(loops, config.holes)


def optimize_mesh_detailed(
    mesh: Mesh,
    bounds: Bounds,
    config: Optional[OptimizerConfig] = None
) -> OptimizationResult:
    """
    Optimize a sprite mesh and keep the intermediate results.

    Args:
        mesh: Input mesh; vertices in the same space as bounds
        bounds: Rectangle the output must stay within
        config: OptimizerConfig (defaults to the removal profile)

    Returns:
        OptimizationResult

    Raises:
        ValueError: If the mesh references missing vertices
        GraphInconsistencyError: If the boundary cannot be walked into loops
        GeometryError: If the loops do not form a valid polygon
        TriangulationError: If the triangle library fails
        CapacityError: If the result needs more than 16-bit indices
    """
    if config is None:
        config = OptimizerConfig()

    mesh.validate()
    before = compute_mesh_stats(mesh, bounds)
    logger.info(f"Optimizing {mesh} with the {config.strategy.value} strategy")

    # Step 1: Boundary edges
    graph = build_boundary_graph(mesh.triangles)
    if graph.is_empty():
        logger.info("Mesh has no boundary edges, nothing to optimize")
        return OptimizationResult(mesh.copy(), [], [], None, before, before, changed=False)

    # Step 2: Contours
    contour_set = extract_contours(graph)
    if not contour_set.is_consistent:
        failure = contour_set.failures[0]
        raise GraphInconsistencyError(
            f"Contour walk from edge {failure.edge} failed: {failure.reason}",
            loop_index=failure.loop_index
        )
    contours = orient_contours(contour_set.contours, mesh.vertices, mesh.triangles)
    logger.debug(f"Step 2: {len(contours)} contours, {sum(len(c) for c in contours)} boundary vertices")

    # Step 3: Cleaning
    loops = simplify_contours(
        [materialize_contour(contour, mesh.vertices) for contour in contours],
        config,
        bounds
    )
    if not loops:
        raise GeometryError("Every loop collapsed below 3 vertices", stage="simplify")
    logger.debug(f"Step 3: {sum(len(loop) for loop in loops)} vertices left in {len(loops)} loops")

    # Step 4-5: Polygon and triangulation
    geometry = _build_geometry(loops, config)
    coordinate_triangles = triangulate_geometry(geometry, config)

    # Step 6: Reindex, then match the input's winding convention
    optimized = reindex_triangles(coordinate_triangles, bounds)
    clockwise = mesh_winding(mesh.vertices, mesh.triangles) < 0
    optimized.triangles = orient_triangles(optimized.vertices, optimized.triangles, clockwise=clockwise)

    after = compute_mesh_stats(optimized, bounds)
    logger.info(f"Optimized mesh: {before['vertices']} -> {after['vertices']} vertices, "
                f"{before['triangles']} -> {after['triangles']} triangles")

    return OptimizationResult(optimized, contours, loops, geometry, before, after)


def optimize_mesh(mesh: Mesh, bounds: Bounds, config: Optional[OptimizerConfig] = None) -> Mesh:
    """
    Optimize a sprite mesh.

    Same as optimize_mesh_detailed() but only returns the new mesh.
    """
    return optimize_mesh_detailed(mesh, bounds, config).mesh
