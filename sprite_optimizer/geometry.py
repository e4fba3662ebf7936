"""
Small 2D geometry helpers: signed areas, winding and line intersection.

Sign convention: counter-clockwise is positive (the usual math convention,
y pointing up).
"""

from typing import List, Optional, Sequence, Tuple

from .constants import INTERSECTION_EPSILON
from .mesh import Point


def corner_area(p: Point, q: Point, r: Point) -> float:
    """
    Signed area of triangle (p, q, r), doubled.

    Positive when p -> q -> r turns left (CCW). The factor of two is kept on
    purpose: cleaning tolerances are expressed in this unit.
    """
    return (p[0] * (q[1] - r[1])
            + q[0] * (r[1] - p[1])
            + r[0] * (p[1] - q[1]))


def signed_area(coords: Sequence[Point]) -> float:
    """
    Signed area of a ring using the shoelace formula.

    The ring may be open or closed (a repeated end point adds nothing).
    Positive for CCW rings, negative for CW rings.
    """
    area = 0.0
    n = len(coords)
    for i in range(n):
        x1, y1 = coords[i]
        x2, y2 = coords[(i + 1) % n]
        area += x1 * y2 - x2 * y1
    return area / 2.0


def is_ccw(coords: Sequence[Point]) -> bool:
    """Check if coordinates are counter-clockwise using the shoelace formula."""
    return signed_area(coords) > 0


def mesh_winding(vertices: Sequence[Point], triangles: Sequence[Sequence[int]]) -> int:
    """
    Predominant winding of a triangle list.

    Returns:
        1 if the summed triangle area is positive (CCW), -1 if negative (CW),
        0 for an empty or fully degenerate mesh
    """
    total = 0.0
    for a, b, c in triangles:
        total += corner_area(vertices[a], vertices[b], vertices[c])
    if total > 0:
        return 1
    if total < 0:
        return -1
    return 0


def close_loop(loop: Sequence[Point]) -> List[Point]:
    """Return the loop with its first point repeated at the end."""
    points = list(loop)
    if points and points[0] != points[-1]:
        points.append(points[0])
    return points


def open_loop(loop: Sequence[Point]) -> List[Point]:
    """Return the loop without a repeated closing point."""
    points = list(loop)
    if len(points) > 1 and points[0] == points[-1]:
        points.pop()
    return points


def line_intersection(
    a: Point,
    b: Point,
    c: Point,
    d: Point,
    epsilon: float = INTERSECTION_EPSILON
) -> Optional[Tuple[Point, float, float]]:
    """
    Intersect the line through a->b with the line through c->d.

    Both lines are parametrised from their inner end points:
        P(t) = b + t * (b - a)      t >= 0 is "forward past b"
        Q(u) = c + u * (d - c)      u <= 0 is "backward before c"

    Args:
        a, b: Points of the first segment
        c, d: Points of the second segment
        epsilon: Lines whose direction cross product is below this are parallel

    Returns:
        (point, t, u), or None for parallel, near-parallel or zero-length input
    """
    rx, ry = b[0] - a[0], b[1] - a[1]
    sx, sy = d[0] - c[0], d[1] - c[1]

    denominator = rx * sy - ry * sx
    if abs(denominator) < epsilon:
        return None

    qx, qy = c[0] - b[0], c[1] - b[1]
    t = (qx * sy - qy * sx) / denominator
    u = (qx * ry - qy * rx) / denominator

    return (b[0] + t * rx, b[1] + t * ry), t, u
