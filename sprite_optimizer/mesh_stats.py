"""
Mesh statistics for reporting optimization results.

The numbers mirror what a sprite preview shows next to the mesh: vertex and
triangle counts, plus the total triangle edge length and covered area
relative to the texture rectangle. A lower perimeter ratio means fewer and
fatter triangles (cheaper to rasterize), a lower cover ratio means less
overdraw of transparent pixels.
"""

from typing import Any, Dict, List, Tuple

import numpy as np

from .mesh import Bounds, Mesh


def count_mesh_stats(meshes: List[Mesh]) -> Tuple[int, int]:
    """
    Count total vertices and triangles across all meshes.

    Args:
        meshes: List of meshes to analyze

    Returns:
        (total_vertices, total_triangles)

    Example:
        vertices, triangles = count_mesh_stats([mesh])
        print(f"Sprite has {vertices} vertices and {triangles} triangles")
    """
    total_vertices = sum(len(mesh.vertices) for mesh in meshes)
    total_triangles = sum(len(mesh.triangles) for mesh in meshes)
    return total_vertices, total_triangles


def _triangle_corners(mesh: Mesh) -> np.ndarray:
    if not mesh.triangles:
        return np.zeros((0, 3, 2))
    vertices = np.asarray(mesh.vertices, dtype=np.float64)
    return vertices[np.asarray(mesh.triangles, dtype=np.int64)]


def covered_area(mesh: Mesh) -> float:
    """Sum of the (unsigned) triangle areas."""
    corners = _triangle_corners(mesh)
    if len(corners) == 0:
        return 0.0
    u = corners[:, 1] - corners[:, 0]
    v = corners[:, 2] - corners[:, 0]
    return float(np.abs(u[:, 0] * v[:, 1] - u[:, 1] * v[:, 0]).sum() * 0.5)


def edge_length(mesh: Mesh) -> float:
    """Sum of every triangle's perimeter (shared edges count twice)."""
    corners = _triangle_corners(mesh)
    if len(corners) == 0:
        return 0.0
    rolled = np.roll(corners, -1, axis=1)
    return float(np.linalg.norm(rolled - corners, axis=2).sum())


def compute_mesh_stats(mesh: Mesh, bounds: Bounds) -> Dict[str, Any]:
    """
    Gather preview statistics for one mesh.

    Returns:
        Dict with 'vertices', 'triangles', 'area', 'perimeter',
        'area_ratio' and 'perimeter_ratio' (the last two relative to the
        bounds area, 0 when the bounds are empty)
    """
    area = covered_area(mesh)
    perimeter = edge_length(mesh)
    surface = bounds.area

    return {
        'vertices': len(mesh.vertices),
        'triangles': len(mesh.triangles),
        'area': area,
        'perimeter': perimeter,
        'area_ratio': area / surface if surface > 0 else 0.0,
        'perimeter_ratio': perimeter / surface if surface > 0 else 0.0,
    }


def _reduction_pct(before: float, after: float) -> float:
    if before == 0:
        return 0.0
    return (before - after) / before * 100.0


def compare_mesh_stats(before: Dict[str, Any], after: Dict[str, Any]) -> Dict[str, float]:
    """
    Compare two stats dicts from compute_mesh_stats().

    Returns:
        Reduction percentages (positive = smaller after) for vertices,
        triangles and perimeter, plus the relative covered-area change
        (positive = the optimized mesh covers more)
    """
    area_change = 0.0
    if before['area'] > 0:
        area_change = (after['area'] - before['area']) / before['area'] * 100.0

    return {
        'vertex_reduction_pct': _reduction_pct(before['vertices'], after['vertices']),
        'triangle_reduction_pct': _reduction_pct(before['triangles'], after['triangles']),
        'perimeter_reduction_pct': _reduction_pct(before['perimeter'], after['perimeter']),
        'area_change_pct': area_change,
    }


def format_mesh_stats(stats: Dict[str, Any]) -> str:
    """Format stats the way the sprite preview overlay prints them."""
    return (
        f"Vertices: {stats['vertices']}\n"
        f"Triangles: {stats['triangles']}\n"
        f"Perimeter: {stats['perimeter_ratio']:.2%}\n"
        f"Cover: {stats['area_ratio']:.2%}"
    )
