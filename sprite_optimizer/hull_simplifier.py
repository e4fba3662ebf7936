"""
Outer-hull simplification for polygonized sprite outlines.

Trades silhouette fidelity for vertex count: ring vertices are removed one
by one, cheapest first, but only where the removal GROWS the solid (outer
rings bulge outward, holes shrink). The sprite may cover a few more
transparent pixels, it never loses visible ones.
"""

import logging
import math
from typing import Callable, List, Optional, Sequence, Tuple

from shapely.geometry import MultiPolygon, Polygon
from shapely.geometry.base import BaseGeometry
from shapely.geometry.polygon import orient
from shapely.ops import unary_union

from .errors import GeometryError
from .geometry import corner_area, open_loop
from .mesh import Point

# Set up logging for this module
logger = logging.getLogger(__name__)


def _removal_candidates(ring: Sequence[Point]) -> List[Tuple[float, int]]:
    """(added area, index) for every vertex whose removal does not shrink the solid."""
    candidates = []
    count = len(ring)
    for i in range(count):
        added = -corner_area(ring[i - 1], ring[i], ring[(i + 1) % count]) / 2.0
        if added >= 0:
            candidates.append((added, i))
    candidates.sort()
    return candidates


def simplify_ring_outward(
    ring: Sequence[Point],
    target_count: int,
    accept: Callable[[List[Point]], bool],
    area_budget: Optional[float] = None
) -> Tuple[List[Point], float]:
    """
    Greedily remove vertices from one ring until it has target_count left.

    Args:
        ring: Open ring with the solid on its left
        target_count: Stop once the ring has this many vertices (>= 3)
        accept: Called with a candidate ring; False rejects the removal
                (e.g. because the polygon would become invalid)
        area_budget: Total area the removals may add (None = unlimited)

    Returns:
        (simplified ring, area added)
    """
    points = list(ring)
    added_total = 0.0
    target_count = max(3, target_count)

    while len(points) > target_count:
        removed = False
        for added, index in _removal_candidates(points):
            if area_budget is not None and added_total + added > area_budget:
                # Candidates are sorted, nothing cheaper is left
                break
            candidate = points[:index] + points[index + 1:]
            if accept(candidate):
                points = candidate
                added_total += added
                removed = True
                break
        if not removed:
            break

    return points, added_total


def _simplify_polygon(poly: Polygon, tightness: float, area_delta_ratio: float) -> Polygon:
    poly = orient(poly, sign=1.0)
    exterior = open_loop(list(poly.exterior.coords))
    holes = [open_loop(list(interior.coords)) for interior in poly.interiors]

    budget: Optional[float] = None
    if area_delta_ratio > 0:
        budget = area_delta_ratio * poly.area

    def target(ring: Sequence[Point]) -> int:
        return math.ceil(tightness * len(ring))

    exterior, added = simplify_ring_outward(
        exterior,
        target(exterior),
        lambda candidate: Polygon(candidate, holes).is_valid,
        budget
    )

    for hole_index in range(len(holes)):
        remaining = None if budget is None else max(0.0, budget - added)

        def accept(candidate: List[Point], hole_index: int = hole_index) -> bool:
            rings = holes[:hole_index] + [candidate] + holes[hole_index + 1:]
            return Polygon(exterior, rings).is_valid

        holes[hole_index], hole_added = simplify_ring_outward(
            holes[hole_index], target(holes[hole_index]), accept, remaining
        )
        added += hole_added

    logger.debug(f"Hull simplification added {added:.4f} area to a polygon of {poly.area:.4f}")
    return Polygon(exterior, holes)


def simplify_hull(geometry: BaseGeometry, tightness: float, area_delta_ratio: float = 0.0) -> BaseGeometry:
    """
    Simplify every polygon's rings outward.

    Args:
        geometry: Polygon or MultiPolygon
        tightness: Fraction of ring vertices to keep; 0 disables the pass,
                   1 keeps the geometry as is
        area_delta_ratio: Max added area relative to each polygon's area
                          (0 = only the vertex count limits the pass)

    Returns:
        Simplified Polygon or MultiPolygon

    Raises:
        GeometryError: If the simplified parts do not union into a polygon
    """
    if tightness <= 0 or tightness >= 1:
        return geometry

    if isinstance(geometry, MultiPolygon):
        polygons = list(geometry.geoms)
    else:
        polygons = [geometry]

    before = sum(len(p.exterior.coords) - 1 + sum(len(r.coords) - 1 for r in p.interiors) for p in polygons)
    simplified = [_simplify_polygon(p, tightness, area_delta_ratio) for p in polygons]
    merged = unary_union(simplified)

    if not isinstance(merged, (Polygon, MultiPolygon)) or merged.is_empty:
        raise GeometryError(f"Hull simplification produced {merged.geom_type}", stage="hull")

    after = sum(len(p.exterior.coords) - 1 + sum(len(r.coords) - 1 for r in p.interiors) for p in simplified)
    logger.debug(f"Hull simplification: {before} -> {after} ring vertices (tightness={tightness})")
    return merged
