"""
Polygon assembly and triangulation using shapely and triangle.

Cleaned loops come in, a shapely Polygon (or MultiPolygon) is built from
them, and the triangle library turns it into a fresh constrained Delaunay
triangulation. Two ways of building the polygon exist, one per strategy:

- build_polygon(): classify loops by orientation (CCW = outer, CW = hole)
  and assemble shells and holes directly
- polygonize_loops(): node the loops' linework and let shapely's
  polygonizer find the faces, which tolerates the coincident vertices the
  clip policy leaves behind

Invalid geometry is REPORTED, never quietly repaired: the caller decides
whether to skip the sprite or retry with other settings.
"""

import logging
from typing import List, Optional, Sequence, Tuple

import numpy as np
import triangle as tr
from shapely.geometry import LineString, MultiPolygon, Polygon
from shapely.geometry.base import BaseGeometry
from shapely.geometry.polygon import orient
from shapely.ops import polygonize_full, unary_union
from shapely.validation import explain_validity

from .config import OptimizerConfig
from .errors import GeometryError, TriangulationError
from .geometry import close_loop, open_loop, signed_area
from .mesh import Point, Triangle

# Set up logging for this module
logger = logging.getLogger(__name__)

CoordinateTriangle = Tuple[Point, Point, Point]


def _dedupe_ring(coords: Sequence[Point]) -> List[Point]:
    """Drop consecutive duplicate points (and the closing point) from a ring."""
    ring: List[Point] = []
    for x, y in open_loop(coords):
        point = (float(x), float(y))
        if not ring or ring[-1] != point:
            ring.append(point)
    while len(ring) > 1 and ring[0] == ring[-1]:
        ring.pop()
    return ring


def _polygon_parts(geometry: BaseGeometry) -> List[Polygon]:
    if isinstance(geometry, MultiPolygon):
        return list(geometry.geoms)
    if isinstance(geometry, Polygon):
        return [geometry]
    raise GeometryError(f"Expected Polygon or MultiPolygon but got {geometry.geom_type}")


def _check_valid(geometry: BaseGeometry, what: str, loop_index: Optional[int] = None) -> None:
    if not geometry.is_valid:
        error_msg = explain_validity(geometry)
        logger.error(f"Invalid {what}: {error_msg}")
        raise GeometryError(f"Invalid {what}: {error_msg}", loop_index=loop_index)


def build_polygon(loops: Sequence[Sequence[Point]], holes: bool) -> BaseGeometry:
    """
    Assemble oriented loops into a polygon.

    Args:
        loops: Open loops in normalized orientation (outer CCW, holes CW)
        holes: Keep hole loops as interior rings; otherwise holes are filled

    Returns:
        Polygon, or MultiPolygon when the sprite has several separate parts

    Raises:
        GeometryError: For zero-area or self-intersecting loops, holes
                       outside every outer loop, or no outer loop at all
    """
    shells: List[Tuple[int, Polygon]] = []
    hole_loops: List[Tuple[int, List[Point]]] = []

    for loop_index, loop in enumerate(loops):
        ring = _dedupe_ring(loop)
        if len(ring) < 3:
            continue
        area = signed_area(ring)
        if area == 0:
            raise GeometryError("Loop has zero area", loop_index=loop_index)
        if area > 0:
            shell = Polygon(ring)
            _check_valid(shell, f"outer loop {loop_index}", loop_index)
            shells.append((loop_index, shell))
        elif holes:
            _check_valid(Polygon(ring), f"hole loop {loop_index}", loop_index)
            hole_loops.append((loop_index, ring))

    if not shells:
        raise GeometryError("No outer loop found (every loop is wound as a hole)")

    logger.debug(f"Building polygon from {len(shells)} outer loops and {len(hole_loops)} holes "
                 f"(holes {'kept' if holes else 'filled'})")

    if not holes:
        merged = unary_union([shell for _, shell in shells])
        _check_valid(merged, "polygon")
        return merged

    interiors: List[List[List[Point]]] = [[] for _ in shells]
    for loop_index, ring in hole_loops:
        hole_poly = Polygon(ring)
        # The smallest containing shell owns the hole (islands may sit in holes)
        owners = [i for i, (_, shell) in enumerate(shells) if shell.contains(hole_poly)]
        if not owners:
            raise GeometryError("Hole is not inside any outer loop", loop_index=loop_index)
        owner = min(owners, key=lambda i: shells[i][1].area)
        interiors[owner].append(ring)

    polygons = []
    for (loop_index, shell), shell_holes in zip(shells, interiors):
        poly = Polygon(shell.exterior.coords, shell_holes)
        _check_valid(poly, f"polygon with outer loop {loop_index}", loop_index)
        polygons.append(poly)

    if len(polygons) == 1:
        return polygons[0]

    multi = MultiPolygon(polygons)
    _check_valid(multi, "multi-part polygon")
    return multi


def _ring_parity(point: Point, ring: Sequence[Point]) -> bool:
    """Even-odd crossing test; True if point is inside the ring."""
    x, y = point
    inside = False
    count = len(ring)
    for i in range(count):
        x1, y1 = ring[i]
        x2, y2 = ring[(i + 1) % count]
        if (y1 > y) != (y2 > y):
            cross_x = x1 + (y - y1) * (x2 - x1) / (y2 - y1)
            if x < cross_x:
                inside = not inside
    return inside


def polygonize_loops(
    loops: Sequence[Sequence[Point]],
    extract_only_polygonal: bool = True,
    check_rings_valid: bool = True
) -> BaseGeometry:
    """
    Node the loops' linework and rebuild polygons from the faces it encloses.

    Args:
        loops: Open loops (orientation does not matter here)
        extract_only_polygonal: Keep only faces enclosed by an odd number of
                                loops, so holes stay holes; otherwise every
                                face is kept and holes are filled
        check_rings_valid: Raise on invalid rings reported by the polygonizer

    Returns:
        Polygon or MultiPolygon

    Raises:
        GeometryError: If the linework has invalid rings (when checked) or
                       encloses no face at all
    """
    rings = [_dedupe_ring(loop) for loop in loops]
    rings = [ring for ring in rings if len(ring) >= 3]
    if not rings:
        raise GeometryError("No loop with at least 3 vertices to polygonize")

    # unary_union splits the lines at every crossing so faces close properly
    noded = unary_union([LineString(close_loop(ring)) for ring in rings])
    faces, cuts, dangles, invalid_rings = polygonize_full(noded)

    if not cuts.is_empty or not dangles.is_empty:
        logger.debug(f"Polygonizer ignored {len(cuts.geoms)} cut edges and {len(dangles.geoms)} dangles")

    if check_rings_valid and not invalid_rings.is_empty:
        raise GeometryError(f"Polygonizer found {len(invalid_rings.geoms)} invalid rings")

    face_list = list(faces.geoms)
    if extract_only_polygonal:
        kept = []
        for face in face_list:
            probe = face.representative_point()
            depth = sum(_ring_parity((probe.x, probe.y), ring) for ring in rings)
            if depth % 2 == 1:
                kept.append(face)
        face_list = kept

    if not face_list:
        raise GeometryError("Polygonization produced no faces")

    merged = unary_union(face_list)
    if not isinstance(merged, (Polygon, MultiPolygon)):
        raise GeometryError(f"Polygonization produced {merged.geom_type}")
    _check_valid(merged, "polygonized geometry")

    logger.debug(f"Polygonized {len(rings)} loops into {len(face_list)} faces")
    return merged


def _validate_polygon_for_triangulation(poly: Polygon) -> Tuple[bool, str]:
    """
    Validate polygon geometry before passing it to the triangle library.

    Triangle is a C library and does not take kindly to garbage input,
    so obviously broken shapes are caught here first.

    Returns:
        (bool, str): (True, "") if valid, (False, "reason") otherwise
    """
    if not poly.is_valid:
        return (False, f"Invalid polygon: {explain_validity(poly)}")

    if poly.area <= 0:
        return (False, f"Polygon has zero or negative area: {poly.area}")

    exterior_coords = _dedupe_ring(list(poly.exterior.coords))
    if len(exterior_coords) < 3:
        return (False, f"Polygon exterior has fewer than 3 vertices: {len(exterior_coords)}")

    # A polygon that is essentially a line is degenerate
    xs = [c[0] for c in exterior_coords]
    ys = [c[1] for c in exterior_coords]
    x_range = max(xs) - min(xs)
    y_range = max(ys) - min(ys)
    if x_range < 1e-6 or y_range < 1e-6:
        return (False, f"Polygon is degenerate (too thin): x_range={x_range}, y_range={y_range}")

    for i, interior in enumerate(poly.interiors):
        hole_coords = _dedupe_ring(list(interior.coords))
        if len(hole_coords) < 3:
            return (False, f"Hole {i} has fewer than 3 vertices: {len(hole_coords)}")

    return (True, "")


def triangle_flags(config: OptimizerConfig) -> str:
    """
    Build the triangle switch string for the configured quality options.

    'p' = Planar Straight Line Graph (respects boundary edges and holes)
    'Q' = Quiet mode (suppress output)
    'q' = Minimum angle quality constraint
    'S' = Maximum number of Steiner points
    'D' = Conforming Delaunay (needed before any smoothing pass)
    """
    flags = "pQ"
    if config.minimum_angle > 0:
        flags += f"q{config.minimum_angle:g}"
    if config.steiner_points > 0:
        flags += f"S{config.steiner_points}"
    if config.conforming_delaunay:
        flags += "D"
    return flags


def triangulate_polygon_2d(
    poly: Polygon,
    flags: str = "pQ",
    part_index: Optional[int] = None
) -> Tuple[np.ndarray, np.ndarray]:
    """
    Triangulate a 2D polygon using constrained Delaunay triangulation.

    Triangle library requires:
    - CCW winding for the exterior
    - CW winding for holes
    - One point strictly inside every hole

    Args:
        poly: shapely Polygon to triangulate
        flags: triangle switches (see triangle_flags())
        part_index: Index of the polygon in a MultiPolygon, for error reports

    Returns:
        (vertices, triangles) numpy arrays of shape (n, 2) and (m, 3)

    Raises:
        GeometryError: If the polygon fails validation
        TriangulationError: If the triangle library fails or returns nothing
    """
    is_valid, error_msg = _validate_polygon_for_triangulation(poly)
    if not is_valid:
        logger.error(f"Polygon validation failed: {error_msg}")
        raise GeometryError(error_msg, stage="triangulation", loop_index=part_index)

    poly = orient(poly, sign=1.0)
    exterior_coords = _dedupe_ring(list(poly.exterior.coords))

    all_vertices = np.array(exterior_coords, dtype=np.float64)
    all_segments = [np.array(
        [[i, (i + 1) % len(exterior_coords)] for i in range(len(exterior_coords))],
        dtype=np.int32
    )]
    hole_points_list = []

    for hole_idx, interior in enumerate(poly.interiors):
        hole_coords = _dedupe_ring(list(interior.coords))
        offset = len(all_vertices)
        all_vertices = np.vstack([all_vertices, np.array(hole_coords, dtype=np.float64)])
        all_segments.append(np.array(
            [[offset + i, offset + (i + 1) % len(hole_coords)] for i in range(len(hole_coords))],
            dtype=np.int32
        ))

        # representative_point() is guaranteed to be inside the hole area
        hole_point = Polygon(hole_coords).representative_point()
        hole_points_list.append([hole_point.x, hole_point.y])
        logger.debug(f"Hole {hole_idx + 1} point: ({hole_point.x:.2f}, {hole_point.y:.2f})")

    triangle_input = {
        'vertices': all_vertices,
        'segments': np.vstack(all_segments)
    }
    if hole_points_list:
        triangle_input['holes'] = np.array(hole_points_list, dtype=np.float64)

    logger.debug(f"Calling triangle with '{flags}': {len(all_vertices)} vertices, "
                 f"{len(triangle_input['segments'])} segments, {len(hole_points_list)} holes")
    try:
        result = tr.triangulate(triangle_input, flags)
    except Exception as e:
        logger.error(f"Triangulation with '{flags}' failed: {e}")
        raise TriangulationError(f"Triangulation with '{flags}' failed: {e}", loop_index=part_index) from e

    triangles = result.get('triangles')
    if triangles is None or len(triangles) == 0:
        raise TriangulationError("Triangulation produced no triangles", loop_index=part_index)

    return np.asarray(result['vertices'], dtype=np.float64), np.asarray(triangles, dtype=np.int64)


def _count_wide_triangles(vertices: np.ndarray, triangles: np.ndarray, maximum_angle: float) -> int:
    """Count triangles with an interior angle above maximum_angle degrees."""
    corners = vertices[triangles]  # (m, 3, 2)
    widest = np.zeros(len(triangles))
    for k in range(3):
        p = corners[:, k]
        u = corners[:, (k + 1) % 3] - p
        v = corners[:, (k + 2) % 3] - p
        norms = np.linalg.norm(u, axis=1) * np.linalg.norm(v, axis=1)
        cosine = np.einsum('ij,ij->i', u, v) / np.where(norms > 0, norms, 1.0)
        widest = np.maximum(widest, np.degrees(np.arccos(np.clip(cosine, -1.0, 1.0))))
    return int(np.count_nonzero(widest > maximum_angle + 1e-9))


def triangulate_geometry(geometry: BaseGeometry, config: OptimizerConfig) -> List[CoordinateTriangle]:
    """
    Triangulate every polygon of the geometry.

    Args:
        geometry: Polygon or MultiPolygon
        config: OptimizerConfig with the quality options

    Returns:
        Triangles as coordinate triples (no shared indices yet; the
        reindexer takes care of that)
    """
    flags = triangle_flags(config)
    coordinate_triangles: List[CoordinateTriangle] = []

    for part_index, poly in enumerate(_polygon_parts(geometry)):
        vertices, triangles = triangulate_polygon_2d(poly, flags, part_index)

        if config.maximum_angle > 0:
            wide = _count_wide_triangles(vertices, triangles, config.maximum_angle)
            if wide:
                logger.warning(f"{wide} triangles exceed the maximum angle of {config.maximum_angle:g} degrees "
                               f"(triangle only enforces minimum angles)")

        points = [(float(x), float(y)) for x, y in vertices]
        for a, b, c in triangles:
            coordinate_triangles.append((points[a], points[b], points[c]))

    logger.debug(f"Triangulation complete: {len(coordinate_triangles)} triangles")
    return coordinate_triangles


def orient_triangles(
    vertices: Sequence[Point],
    triangles: Sequence[Triangle],
    clockwise: bool = False
) -> List[Triangle]:
    """
    Give every triangle the same winding.

    Uses the signed area to detect each triangle's winding and swaps two
    indices where it disagrees with the requested one.

    Args:
        vertices: List of (x, y) vertex coordinates
        triangles: List of (v0, v1, v2) vertex index triples
        clockwise: Target winding (False = CCW)

    Returns:
        List of triangles with the requested winding
    """
    corrected = []
    reversed_count = 0

    for tri in triangles:
        v0 = vertices[tri[0]]
        v1 = vertices[tri[1]]
        v2 = vertices[tri[2]]
        signed = (v1[0] - v0[0]) * (v2[1] - v0[1]) - (v1[1] - v0[1]) * (v2[0] - v0[0])

        if (signed < 0) != clockwise and signed != 0:
            corrected.append((tri[0], tri[2], tri[1]))
            reversed_count += 1
        else:
            corrected.append(tri)

    if reversed_count > 0:
        logger.debug(f"Rewound {reversed_count} triangles to {'CW' if clockwise else 'CCW'}")

    return corrected
