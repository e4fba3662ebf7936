"""
Boundary graph construction by edge cancellation.

Every triangle contributes its three edges in winding order. An edge shared
by two triangles shows up once in each direction (A->B and B->A), so when
we see the reverse of an edge that's already stored, both of them are
interior and cancel out. Whatever survives is used by exactly one triangle:
the silhouette of the mesh, outer border and holes alike.
"""

import logging
from collections import defaultdict
from typing import Dict, Iterable, Iterator, List, NamedTuple, Optional, Sequence

# Set up logging for this module
logger = logging.getLogger(__name__)


class DirectedEdge(NamedTuple):
    """An edge taken in the winding order of the triangle that owns it."""

    a: int
    b: int

    def reversed(self) -> 'DirectedEdge':
        return DirectedEdge(self.b, self.a)

    def __str__(self) -> str:
        return f"({self.a}->{self.b})"


class BoundaryGraph:
    """
    Directed multigraph of boundary edges with an insert/cancel operation.

    Edges are kept in insertion order (a dict used as an ordered set), so
    walking the graph is deterministic for a given triangle list.
    """

    def __init__(self) -> None:
        self._edges: Dict[DirectedEdge, None] = {}
        self._by_source: Optional[Dict[int, List[DirectedEdge]]] = None

    @classmethod
    def from_triangles(cls, triangles: Iterable[Sequence[int]]) -> 'BoundaryGraph':
        """
        Build the boundary graph of a triangle list.

        Args:
            triangles: Iterable of (a, b, c) vertex index triples

        Returns:
            BoundaryGraph holding only the edges used by a single triangle
        """
        graph = cls()
        canceled = 0
        triangle_count = 0
        for a, b, c in triangles:
            triangle_count += 1
            canceled += graph.cancel_or_add(a, b)
            canceled += graph.cancel_or_add(b, c)
            canceled += graph.cancel_or_add(c, a)

        logger.debug(f"Boundary graph: {triangle_count} triangles, {canceled} interior edge pairs "
                     f"canceled, {len(graph)} boundary edges left")
        return graph

    def add_edge(self, edge: DirectedEdge) -> None:
        """Insert a directed edge (no-op if it is already present)."""
        self._edges[edge] = None
        self._by_source = None

    def remove_edge(self, edge: DirectedEdge) -> bool:
        """Remove a directed edge, returning False if it was not present."""
        if edge not in self._edges:
            return False
        del self._edges[edge]
        self._by_source = None
        return True

    def cancel_or_add(self, a: int, b: int) -> bool:
        """
        Add edge a->b unless its reverse b->a is present.

        Returns:
            True if the reverse edge was found and removed (the pair is
            interior), False if a->b was inserted
        """
        edge = DirectedEdge(a, b)
        if self.remove_edge(edge.reversed()):
            return True
        self.add_edge(edge)
        return False

    def edges_from(self, vertex: int) -> List[DirectedEdge]:
        """All boundary edges starting at vertex, in insertion order."""
        if self._by_source is None:
            index: Dict[int, List[DirectedEdge]] = defaultdict(list)
            for edge in self._edges:
                index[edge.a].append(edge)
            self._by_source = dict(index)
        return self._by_source.get(vertex, [])

    def edges(self) -> List[DirectedEdge]:
        return list(self._edges)

    def is_empty(self) -> bool:
        return not self._edges

    def __contains__(self, edge: object) -> bool:
        return edge in self._edges

    def __iter__(self) -> Iterator[DirectedEdge]:
        return iter(self._edges)

    def __len__(self) -> int:
        return len(self._edges)

    def __repr__(self) -> str:
        return f"BoundaryGraph(edges={len(self._edges)})"


def build_boundary_graph(triangles: Iterable[Sequence[int]]) -> BoundaryGraph:
    """Convenience wrapper around BoundaryGraph.from_triangles()."""
    return BoundaryGraph.from_triangles(triangles)
