"""
Test helper utilities for creating test meshes and sample data.

This module provides small sprite-like meshes used across multiple test
files: a unit square, pixel grids with cells knocked out, and loops.
"""

from typing import Iterable, List, Optional, Set, Tuple

from sprite_optimizer.mesh import Mesh, Point


def create_unit_square_mesh(clockwise: bool = False) -> Mesh:
    """
    Two triangles forming the unit square (0,0)-(1,1).

    Args:
        clockwise: Wind the triangles clockwise (sprite tool convention)
    """
    vertices = [(0.0, 0.0), (1.0, 0.0), (1.0, 1.0), (0.0, 1.0)]
    triangles = [(0, 1, 2), (0, 2, 3)]
    if clockwise:
        triangles = [(a, c, b) for a, b, c in triangles]
    return Mesh(vertices=vertices, triangles=triangles)


def create_grid_mesh(
    width: int,
    height: int,
    skip: Optional[Iterable[Tuple[int, int]]] = None,
    clockwise: bool = False,
    cell_size: float = 1.0
) -> Mesh:
    """
    Create a pixel-grid mesh: two triangles per cell, shared grid vertices.

    This is what a dense sprite mesh looks like before optimization.

    Args:
        width: Cells along x
        height: Cells along y
        skip: (x, y) cells to leave out (transparent pixels)
        clockwise: Wind the triangles clockwise
        cell_size: Edge length of one cell

    Returns:
        Mesh with (width + 1) * (height + 1) vertices (unused ones included)
    """
    skipped: Set[Tuple[int, int]] = set(skip or [])

    def vertex(x: int, y: int) -> int:
        return y * (width + 1) + x

    vertices = [
        (x * cell_size, y * cell_size)
        for y in range(height + 1)
        for x in range(width + 1)
    ]
    triangles = []
    for y in range(height):
        for x in range(width):
            if (x, y) in skipped:
                continue
            v00, v10 = vertex(x, y), vertex(x + 1, y)
            v01, v11 = vertex(x, y + 1), vertex(x + 1, y + 1)
            cell = [(v00, v10, v11), (v00, v11, v01)]
            if clockwise:
                cell = [(a, c, b) for a, b, c in cell]
            triangles.extend(cell)

    return Mesh(vertices=vertices, triangles=triangles)


def create_annulus_mesh(clockwise: bool = False) -> Mesh:
    """3x3 grid with the centre cell missing: one outer loop, one hole."""
    return create_grid_mesh(3, 3, skip=[(1, 1)], clockwise=clockwise)


def create_closed_mesh() -> Mesh:
    """
    A closed triangle soup (the four faces of a tetrahedron, projected).

    Every edge is used once in each direction, so it has no boundary.
    """
    vertices = [(0.0, 0.0), (4.0, 0.0), (2.0, 4.0), (2.0, 1.0)]
    triangles = [(0, 1, 3), (1, 2, 3), (2, 0, 3), (0, 2, 1)]
    return Mesh(vertices=vertices, triangles=triangles)


def chamfered_square_loop() -> List[Point]:
    """CCW 4x4 square with every corner cut off by a 1x1 diagonal."""
    return [
        (1.0, 0.0), (3.0, 0.0), (4.0, 1.0), (4.0, 3.0),
        (3.0, 4.0), (1.0, 4.0), (0.0, 3.0), (0.0, 1.0),
    ]


def shoelace_area(loop: List[Point]) -> float:
    """Unsigned area of an open loop."""
    total = 0.0
    for i in range(len(loop)):
        x1, y1 = loop[i]
        x2, y2 = loop[(i + 1) % len(loop)]
        total += x1 * y2 - x2 * y1
    return abs(total) / 2.0
