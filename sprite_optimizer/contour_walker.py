"""
Walk the boundary graph into closed, oriented contours.

Starting from any unused boundary edge we keep hopping to an unused edge
leaving the current edge's destination until we're back where we started.
Each walk is a tiny state machine so that "this loop closed" and "this
graph is broken" are ordinary results rather than exceptions.
"""

import logging
from enum import Enum
from typing import Dict, List, Optional, Sequence, Set

from .boundary_graph import BoundaryGraph, DirectedEdge
from .geometry import mesh_winding
from .mesh import Point

# Set up logging for this module
logger = logging.getLogger(__name__)


class WalkState(Enum):
    WALKING = "walking"
    CLOSED = "closed"
    INCONSISTENT = "inconsistent"


class ContourWalk:
    """
    Follow one boundary loop edge by edge.

    Call step() until the state leaves WALKING. The shared ``used`` set is
    updated as edges are consumed so that later walks skip them.
    """

    def __init__(self, graph: BoundaryGraph, start: DirectedEdge, used: Set[DirectedEdge]):
        self.graph = graph
        self.start = start
        self.used = used
        self.current: Optional[DirectedEdge] = start
        self.vertices: List[int] = []
        self.state = WalkState.WALKING
        self.reason = ""
        # A loop can never be longer than the whole graph
        self._budget = len(graph)

    def step(self) -> WalkState:
        """Consume the current edge and move to the next one."""
        if self.state is not WalkState.WALKING:
            return self.state

        edge = self.current
        assert edge is not None

        if edge in self.used:
            return self._fail(f"edge {edge} visited twice")
        if self._budget <= 0:
            return self._fail(f"walk exceeded {len(self.graph)} edges")

        self._budget -= 1
        self.vertices.append(edge.a)
        self.used.add(edge)

        self.current = next(
            (e for e in self.graph.edges_from(edge.b) if e not in self.used),
            None
        )
        if self.current is None:
            if edge.b == self.start.a:
                self.state = WalkState.CLOSED
            else:
                return self._fail(f"chain ends at vertex {edge.b} without returning to {self.start.a}")
        return self.state

    def run(self) -> WalkState:
        while self.step() is WalkState.WALKING:
            pass
        return self.state

    def _fail(self, reason: str) -> WalkState:
        self.state = WalkState.INCONSISTENT
        self.reason = reason
        return self.state


class ContourFailure:
    """A walk that could not be closed."""

    def __init__(self, loop_index: int, edge: DirectedEdge, reason: str):
        self.loop_index = loop_index
        self.edge = edge
        self.reason = reason

    def __repr__(self) -> str:
        return f"ContourFailure(loop={self.loop_index}, edge={self.edge}, reason={self.reason!r})"


class ContourSet:
    """Closed contours plus any walks that failed along the way."""

    def __init__(self) -> None:
        self.contours: List[List[int]] = []
        self.failures: List[ContourFailure] = []

    @property
    def is_consistent(self) -> bool:
        return not self.failures

    def __len__(self) -> int:
        return len(self.contours)

    def __repr__(self) -> str:
        return f"ContourSet(contours={len(self.contours)}, failures={len(self.failures)})"


def split_at_repeats(contour: Sequence[int]) -> List[List[int]]:
    """
    Split a closed walk into simple loops at every repeated vertex.

    Where two loops touch at a single vertex (a hole meeting a notch at one
    corner, say) that vertex has two outgoing boundary edges and one walk
    runs through both loops. Cutting the walk where a vertex comes back
    yields loops that are each still a closed run of boundary edges.

    Example: [0, 1, 2, 3, 1, 4] -> [[1, 2, 3], [0, 1, 4]]
    """
    loops: List[List[int]] = []
    stack: List[int] = []
    position: Dict[int, int] = {}

    for vertex in contour:
        if vertex in position:
            start = position[vertex]
            loop = stack[start:]
            for v in loop:
                del position[v]
            del stack[start:]
            loops.append(loop)
        position[vertex] = len(stack)
        stack.append(vertex)

    if stack:
        loops.append(stack)
    return loops


def extract_contours(graph: BoundaryGraph) -> ContourSet:
    """
    Turn every boundary edge into part of exactly one contour.

    Walks that pass through a vertex twice are split into simple loops with
    split_at_repeats().

    Args:
        graph: Boundary graph from build_boundary_graph()

    Returns:
        ContourSet; vertex order inside a contour follows the boundary,
        contour order follows edge insertion order and carries no meaning
    """
    result = ContourSet()
    used: Set[DirectedEdge] = set()

    for loop_index, start in enumerate(e for e in graph if e not in used):
        walk = ContourWalk(graph, start, used)
        if walk.run() is WalkState.CLOSED:
            loops = split_at_repeats(walk.vertices)
            if len(loops) > 1:
                logger.debug(f"Contour {loop_index} touches itself, split into {len(loops)} loops")
            result.contours.extend(loops)
        else:
            logger.warning(f"Contour {loop_index} starting at {start} is inconsistent: {walk.reason}")
            result.failures.append(ContourFailure(loop_index, start, walk.reason))

    logger.debug(f"Extracted {len(result.contours)} contours from {len(graph)} boundary edges "
                 f"({len(result.failures)} failed)")
    return result


def orient_contours(
    contours: Sequence[Sequence[int]],
    vertices: Sequence[Point],
    triangles: Sequence[Sequence[int]]
) -> List[List[int]]:
    """
    Normalize contour orientation so outer loops are CCW and holes CW.

    Boundary edges follow triangle winding, so contours of a CCW mesh already
    have the right orientation. Sprite meshes usually come CW (the host's
    front-face convention) and get every loop reversed.
    """
    if mesh_winding(vertices, triangles) < 0:
        logger.debug("Mesh is wound clockwise, reversing contours")
        return [list(reversed(contour)) for contour in contours]
    return [list(contour) for contour in contours]
