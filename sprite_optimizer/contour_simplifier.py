"""
Contour cleaning: shrink each boundary loop's vertex count under an area budget.

Two policies are available, picked by the config's strategy:

- REMOVAL drops vertices whose triangle with its two neighbours is small.
  Adding area and removing area have separate budgets, since removing
  area is far more dangerous (it cuts visible pixels off the sprite).
- CLIP extends two nearly-parallel edges until they meet, replacing the two
  vertices in between with the corner. Only ever adds area, and the new
  corner must stay inside the bounds rectangle.

Both policies ramp their budget up over ``clean_steps`` rounds so the low
hanging fruit goes first. Loops are expected in normalized orientation
(outer loops CCW, holes CW): the solid is always on the left.
"""

import logging
from typing import List, Optional, Sequence

from .config import OptimizerConfig, SimplificationStrategy
from .constants import BOUNDS_CONTAINS_EPSILON, INTERSECTION_EPSILON
from .geometry import close_loop, corner_area, line_intersection, open_loop
from .mesh import Bounds, Point

# Set up logging for this module
logger = logging.getLogger(__name__)

# A polygon ring needs at least this many vertices
MIN_LOOP_VERTICES = 3


def materialize_contour(contour: Sequence[int], vertices: Sequence[Point]) -> List[Point]:
    """Turn a contour of vertex indices into an open list of coordinates."""
    return [(float(vertices[i][0]), float(vertices[i][1])) for i in contour]


def remove_loop_vertices(
    loop: Sequence[Point],
    clean_steps: int,
    area_increase_tolerance: float,
    area_decrease_tolerance: float
) -> List[Point]:
    """
    Remove vertices that barely contribute to the loop's area.

    Args:
        loop: Open loop of coordinates (no repeated end point)
        clean_steps: Number of rounds; round s allows (s + 1) / clean_steps
                     of each tolerance
        area_increase_tolerance: Largest (doubled) area a removal may add
        area_decrease_tolerance: Largest (doubled) area a removal may remove

    Returns:
        New open loop; never shorter than 3 vertices unless the input was
    """
    points = list(loop)

    for step in range(clean_steps):
        permissive_ratio = (step + 1) / clean_steps
        max_remove = permissive_ratio * area_decrease_tolerance
        max_add = permissive_ratio * area_increase_tolerance

        i = 0
        while i < len(points) and len(points) > MIN_LOOP_VERTICES:
            count = len(points)
            prev_point = points[(i - 1 + count) % count]
            next_point = points[(i + 1) % count]

            # Cutting a left turn (solid on the left) loses area
            delta = -corner_area(prev_point, points[i], next_point)

            if (delta < 0 and -delta < max_remove) or (0 < delta < max_add):
                del points[i]
                # The neighbour sliding into slot i waits for the next round
            i += 1

    return points


def clip_loop(
    loop: Sequence[Point],
    clean_steps: int,
    area_increase_tolerance: float,
    bounds: Bounds
) -> List[Point]:
    """
    Join nearly-parallel edges into sharp corners.

    For every window (a, b, c, d) the edge a->b is extended forward and the
    edge c->d backward. If they meet inside the bounds and the triangle
    (b, corner, c) adds no more than the round's budget, b and c are both
    moved onto the corner.

    Args:
        loop: Open loop of coordinates
        clean_steps: Number of rounds
        area_increase_tolerance: Largest (doubled) area one extension may add
        bounds: Rectangle the new corners must stay within

    Returns:
        New open loop with coincident neighbours merged
    """
    points = open_loop(loop)
    allowed = bounds.expanded(BOUNDS_CONTAINS_EPSILON)

    for step in range(clean_steps):
        if len(points) < 4:
            break

        max_add = (step + 1) / clean_steps * area_increase_tolerance
        count = len(points)
        extended = 0

        for i in range(count):
            a = points[i]
            bi = (i + 1) % count
            ci = (i + 2) % count
            b = points[bi]
            c = points[ci]
            d = points[(i + 3) % count]

            hit = line_intersection(a, b, c, d, INTERSECTION_EPSILON)
            if hit is None:
                continue
            corner, t, u = hit
            if t < 0 or u > 0 or not allowed.contains(corner):
                continue

            added = corner_area(b, corner, c)
            if 0 <= added <= max_add:
                points[bi] = corner
                points[ci] = corner
                extended += 1

        # Rewrite the closing point and merge the duplicates we just made
        points = _merge_coincident(close_loop(points))
        if extended:
            logger.debug(f"Clip round {step + 1}/{clean_steps}: {extended} corners extended, "
                         f"{len(points)} vertices left")

    return points


def _merge_coincident(closed: Sequence[Point]) -> List[Point]:
    """Drop consecutive duplicates of a closed loop and return it open."""
    merged: List[Point] = []
    for point in open_loop(closed):
        if not merged or merged[-1] != point:
            merged.append(point)
    while len(merged) > 1 and merged[0] == merged[-1]:
        merged.pop()
    return merged


def simplify_loop(loop: Sequence[Point], config: OptimizerConfig, bounds: Bounds) -> Optional[List[Point]]:
    """
    Clean one loop with the configured policy.

    Returns:
        The cleaned open loop, or None if the loop is degenerate (fewer than
        3 distinct vertices) and should be dropped
    """
    if len(loop) < MIN_LOOP_VERTICES:
        return None

    if config.strategy is SimplificationStrategy.CLIP:
        cleaned = clip_loop(loop, config.clean_steps, config.area_increase_tolerance, bounds)
    else:
        cleaned = remove_loop_vertices(
            loop,
            config.clean_steps,
            config.area_increase_tolerance,
            config.area_decrease_tolerance
        )

    if len(cleaned) < MIN_LOOP_VERTICES:
        return None
    return cleaned


def simplify_contours(
    loops: Sequence[Sequence[Point]],
    config: OptimizerConfig,
    bounds: Bounds
) -> List[List[Point]]:
    """
    Clean every loop, dropping the ones that degenerate.

    Args:
        loops: Open coordinate loops in normalized orientation
        config: OptimizerConfig selecting the policy and budgets
        bounds: Bounds rectangle (used by the clip policy)

    Returns:
        Surviving loops, in input order
    """
    cleaned_loops: List[List[Point]] = []
    for loop_index, loop in enumerate(loops):
        cleaned = simplify_loop(loop, config, bounds)
        if cleaned is None:
            logger.debug(f"Loop {loop_index} collapsed below {MIN_LOOP_VERTICES} vertices, dropping it")
            continue
        logger.debug(f"Loop {loop_index}: {len(loop)} -> {len(cleaned)} vertices")
        cleaned_loops.append(cleaned)
    return cleaned_loops
