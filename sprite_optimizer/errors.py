"""
Exception types raised by the optimization pipeline.

Every failure carries the pipeline stage it came from (and the loop index
when a single contour is at fault), so a batch caller can log the asset and
move on to the next one.
"""

from typing import Optional


class OptimizationError(RuntimeError):
    """Base class for all pipeline failures."""

    def __init__(self, message: str, stage: str, loop_index: Optional[int] = None):
        self.stage = stage
        self.loop_index = loop_index
        location = f"{stage}" if loop_index is None else f"{stage}, loop {loop_index}"
        super().__init__(f"[{location}] {message}")
        self.reason = message


class GraphInconsistencyError(OptimizationError):
    """A boundary edge was revisited or a contour walk did not close."""

    def __init__(self, message: str, loop_index: Optional[int] = None):
        super().__init__(message, stage="contours", loop_index=loop_index)


class GeometryError(OptimizationError, ValueError):
    """Loops could not be turned into a valid polygon."""

    def __init__(self, message: str, stage: str = "polygon", loop_index: Optional[int] = None):
        super().__init__(message, stage=stage, loop_index=loop_index)


class TriangulationError(GeometryError):
    """The triangulation library rejected the polygon or produced nothing."""

    def __init__(self, message: str, loop_index: Optional[int] = None):
        super().__init__(message, stage="triangulation", loop_index=loop_index)


class CapacityError(OptimizationError):
    """The optimized mesh does not fit into 16-bit indices."""

    def __init__(self, vertex_count: int, triangle_count: int, limit: int):
        self.vertex_count = vertex_count
        self.triangle_count = triangle_count
        self.limit = limit
        super().__init__(
            f"Optimized mesh has {vertex_count} vertices and {triangle_count} triangles, "
            f"but indices are limited to {limit} vertices",
            stage="reindex"
        )
