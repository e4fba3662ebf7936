"""
Mesh and bounds types shared by every stage of the pipeline.

A sprite mesh is just:
- A list of 2D points (vertices)
- A list of triangles (each triangle = 3 vertex indices)

The bounds rectangle is the texture area the optimized mesh has to stay in.
Sprite tools complain loudly about vertices sitting exactly on (or outside)
the texture edge, so the final stage clamps everything slightly inside it.
"""

from typing import Iterable, List, Sequence, Tuple

Point = Tuple[float, float]
Triangle = Tuple[int, int, int]


class Mesh:
    """
    A 2D triangle mesh defined by vertices and triangles.

    Example:
        vertices = [(0, 0), (1, 0), (1, 1), (0, 1)]
        triangles = [(0, 1, 2), (0, 2, 3)]  # a unit square

    Winding is NOT assumed to be consistent on input, although the boundary
    extraction only works on meshes whose neighbouring triangles agree.
    """

    def __init__(self, vertices: List[Point], triangles: List[Triangle]):
        """
        Initialize a mesh.

        Args:
            vertices: List of (x, y) coordinates
            triangles: List of (v0, v1, v2) vertex indices (0-indexed)
        """
        self.vertices = vertices
        self.triangles = triangles

    @classmethod
    def from_flat(cls, vertices: Iterable[Sequence[float]], indices: Sequence[int]) -> 'Mesh':
        """
        Build a mesh from a flat index list (the host's ``ushort[]`` layout).

        Raises:
            ValueError: If the index count is not a multiple of 3
        """
        if len(indices) % 3 != 0:
            raise ValueError(f"Index count must be a multiple of 3, got {len(indices)}")
        points = [(float(v[0]), float(v[1])) for v in vertices]
        triangles = [
            (int(indices[i]), int(indices[i + 1]), int(indices[i + 2]))
            for i in range(0, len(indices), 3)
        ]
        return cls(vertices=points, triangles=triangles)

    def flat_indices(self) -> List[int]:
        """Return the triangles as one flat index list."""
        return [index for tri in self.triangles for index in tri]

    def validate(self) -> None:
        """
        Check that every triangle references existing vertices.

        Raises:
            ValueError: On negative or out-of-range indices
        """
        count = len(self.vertices)
        for tri_index, tri in enumerate(self.triangles):
            if len(tri) != 3:
                raise ValueError(f"Triangle {tri_index} has {len(tri)} indices, expected 3")
            for index in tri:
                if index < 0 or index >= count:
                    raise ValueError(
                        f"Triangle {tri_index} references vertex {index}, "
                        f"but the mesh only has {count} vertices"
                    )

    def to_texture_space(self, pivot: Point, pixels_per_unit: float) -> 'Mesh':
        """
        Map object-space vertices to texture (pixel) space.

        Sprite vertices are stored relative to the pivot in world units;
        the bounds rectangle lives in pixels: ``pixel = vertex * ppu + pivot``.
        """
        px, py = pivot
        vertices = [(x * pixels_per_unit + px, y * pixels_per_unit + py) for x, y in self.vertices]
        return Mesh(vertices=vertices, triangles=list(self.triangles))

    def copy(self) -> 'Mesh':
        return Mesh(vertices=list(self.vertices), triangles=list(self.triangles))

    def __repr__(self) -> str:
        return f"Mesh(vertices={len(self.vertices)}, triangles={len(self.triangles)})"


class Bounds:
    """
    Axis-aligned rectangle the optimized mesh must stay within.

    Usually the sprite's texture rectangle: Bounds.from_size(width, height).
    """

    def __init__(self, x_min: float, y_min: float, x_max: float, y_max: float):
        if x_max < x_min or y_max < y_min:
            raise ValueError(
                f"Invalid bounds: ({x_min}, {y_min}) - ({x_max}, {y_max})"
            )
        self.x_min = float(x_min)
        self.y_min = float(y_min)
        self.x_max = float(x_max)
        self.y_max = float(y_max)

    @classmethod
    def from_size(cls, width: float, height: float) -> 'Bounds':
        return cls(0.0, 0.0, width, height)

    @property
    def width(self) -> float:
        return self.x_max - self.x_min

    @property
    def height(self) -> float:
        return self.y_max - self.y_min

    @property
    def area(self) -> float:
        return self.width * self.height

    def contains(self, point: Point, epsilon: float = 0.0) -> bool:
        """True if the point lies inside the rectangle grown by epsilon."""
        x, y = point
        return (
            self.x_min - epsilon <= x <= self.x_max + epsilon
            and self.y_min - epsilon <= y <= self.y_max + epsilon
        )

    def expanded(self, epsilon: float) -> 'Bounds':
        return Bounds(
            self.x_min - epsilon,
            self.y_min - epsilon,
            self.x_max + epsilon,
            self.y_max + epsilon
        )

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Bounds):
            return NotImplemented
        return (self.x_min, self.y_min, self.x_max, self.y_max) == (
            other.x_min, other.y_min, other.x_max, other.y_max
        )

    def __repr__(self) -> str:
        return f"Bounds(({self.x_min}, {self.y_min}) - ({self.x_max}, {self.y_max}))"
