"""
Sprite Mesh Optimizer Package

Rebuild dense sprite meshes as tight, low-poly meshes around the same
silhouette: boundary extraction, contour cleaning, polygon rebuilding and
constrained Delaunay triangulation, clamped inside the sprite's bounds.
"""

__version__ = "1.0.0"

# Core optimization functions and configuration
from .optimizer import optimize_mesh, optimize_mesh_detailed, OptimizationResult
from .config import OptimizerConfig, SimplificationStrategy, get_warnings
from .mesh import Mesh, Bounds

# Errors callers are expected to catch
from .errors import (
    OptimizationError,
    GraphInconsistencyError,
    GeometryError,
    TriangulationError,
    CapacityError
)

# Mesh utility functions for validation and statistics
from .mesh_stats import count_mesh_stats, compute_mesh_stats, format_mesh_stats
from .mesh_validation import validate_mesh, validate_optimization_quality

# Batch processing
from .batch import SpriteJob, PathFilter, BatchResult, optimize_batch, print_batch_summary, configure_logging

__all__ = [
    "optimize_mesh",
    "optimize_mesh_detailed",
    "OptimizationResult",
    "OptimizerConfig",
    "SimplificationStrategy",
    "get_warnings",
    "Mesh",
    "Bounds",
    "OptimizationError",
    "GraphInconsistencyError",
    "GeometryError",
    "TriangulationError",
    "CapacityError",
    "count_mesh_stats",
    "compute_mesh_stats",
    "format_mesh_stats",
    "validate_mesh",
    "validate_optimization_quality",
    "SpriteJob",
    "PathFilter",
    "BatchResult",
    "optimize_batch",
    "print_batch_summary",
    "configure_logging",
]
