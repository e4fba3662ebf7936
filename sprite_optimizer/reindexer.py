"""
Turn triangulator output (coordinate triples) back into an indexed mesh.

Vertices are shared by exact coordinate equality, in the order they are
first seen, and then clamped a hair inside the bounds rectangle.
"""

import logging
from typing import Dict, List, Sequence, Tuple

import numpy as np

from .constants import BOUNDS_CLAMP_EPSILON, MAX_VERTEX_COUNT
from .errors import CapacityError
from .mesh import Bounds, Mesh, Point, Triangle

# Set up logging for this module
logger = logging.getLogger(__name__)


def reindex_triangles(
    coordinate_triangles: Sequence[Tuple[Point, Point, Point]],
    bounds: Bounds,
    epsilon: float = BOUNDS_CLAMP_EPSILON,
    max_vertices: int = MAX_VERTEX_COUNT
) -> Mesh:
    """
    Build a compact indexed mesh from coordinate triangles.

    Args:
        coordinate_triangles: Triangles as three (x, y) points each
        bounds: Rectangle every output vertex is clamped into
        epsilon: Inset from the rectangle edges
        max_vertices: Largest vertex count the index format can address

    Returns:
        Mesh with unique vertices and triangles in input order

    Raises:
        CapacityError: If there are more unique vertices than max_vertices
    """
    index_of: Dict[Point, int] = {}
    unique: List[Point] = []
    triangles: List[Triangle] = []

    for corners in coordinate_triangles:
        indices = []
        for x, y in corners:
            key = (float(x), float(y))
            index = index_of.get(key)
            if index is None:
                index = len(unique)
                index_of[key] = index
                unique.append(key)
            indices.append(index)
        triangles.append((indices[0], indices[1], indices[2]))

    if len(unique) > max_vertices:
        raise CapacityError(len(unique), len(triangles), max_vertices)

    if not unique:
        return Mesh(vertices=[], triangles=[])

    low = np.array([bounds.x_min + epsilon, bounds.y_min + epsilon])
    high = np.array([bounds.x_max - epsilon, bounds.y_max - epsilon])
    # An axis narrower than twice the inset collapses onto its centre line
    centre = (low + high) / 2.0
    collapsed = low > high
    low = np.where(collapsed, centre, low)
    high = np.where(collapsed, centre, high)

    clamped = np.clip(np.array(unique, dtype=np.float64), low, high)
    vertices = [(float(x), float(y)) for x, y in clamped]

    logger.debug(f"Reindexed {len(triangles)} triangles onto {len(vertices)} unique vertices")
    return Mesh(vertices=vertices, triangles=triangles)
