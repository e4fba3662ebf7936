"""
Batch optimization of many sprites with progress reporting.

This is the "re-optimize everything" loop: each sprite job is optimized in
turn, failures are recorded and skipped, and the caller can cancel between
sprites. The original meshes are kept in the result so a caller can put them
back (e.g. when previewing a sprite unoptimized).

The pipeline itself never prints; everything user-facing lives here and goes
through rich. 🎨
"""

import logging
from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence, Tuple

from rich import box
from rich.console import Console
from rich.progress import BarColumn, Progress, SpinnerColumn, TaskProgressColumn, TextColumn
from rich.table import Table

from .config import OptimizerConfig
from .errors import OptimizationError
from .mesh import Bounds, Mesh
from .optimizer import optimize_mesh_detailed

# Set up logging for this module
logger = logging.getLogger(__name__)

# Create Rich console for pretty output
console = Console()

PACKAGE_LOGGER = 'sprite_optimizer'


def configure_logging(level: int = logging.INFO) -> logging.Logger:
    """
    Route the package's log messages to stderr.

    Only the sprite_optimizer logger is touched, so other logging
    configurations stay as they are. A handler is added only if the logger
    does not have one yet.
    """
    package_logger = logging.getLogger(PACKAGE_LOGGER)
    package_logger.setLevel(level)

    # Add handler only if one doesn't exist
    if not package_logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter('   [OPTIMIZE] %(message)s'))
        package_logger.addHandler(handler)

    return package_logger


class SpriteJob:
    """
    One sprite to optimize.

    Attributes:
        path: Asset path the sprite belongs to (one texture can hold many sprites)
        name: Sprite name, unique within the asset
        mesh: Sprite mesh in texture space
        bounds: Texture rectangle of the sprite
        tight: False for rectangle-packed sprites, which are left alone
    """

    def __init__(self, path: str, name: str, mesh: Mesh, bounds: Bounds, tight: bool = True):
        self.path = path
        self.name = name
        self.mesh = mesh
        self.bounds = bounds
        self.tight = tight

    @property
    def key(self) -> Tuple[str, str]:
        return (self.path, self.name)

    def __repr__(self) -> str:
        return f"SpriteJob({self.path!r}, {self.name!r}, {self.mesh})"


class PathFilter:
    """
    Deny list of asset paths that must not be optimized.

    Comparison ignores case, the way asset paths compare on case-insensitive
    file systems.
    """

    def __init__(self, denied: Optional[Iterable[str]] = None):
        self._denied = {path.casefold() for path in (denied or []) if path}

    def deny(self, path: str) -> None:
        if path:
            self._denied.add(path.casefold())

    def allow(self, path: str) -> None:
        self._denied.discard(path.casefold())

    def is_allowed(self, path: str) -> bool:
        return path.casefold() not in self._denied

    def __len__(self) -> int:
        return len(self._denied)


class BatchResult:
    """
    Outcome of optimize_batch().

    Attributes:
        success: Dicts with 'path', 'name' and before/after counts
        skipped: Dicts with 'path', 'name' and 'reason'
        failed: Dicts with 'path', 'name', 'stage' and 'error'
        meshes: Optimized meshes by (path, name)
        originals: Input meshes by (path, name), for restoring them later
        cancelled: True if should_cancel stopped the batch early
        total: Number of jobs handed in
    """

    def __init__(self, total: int = 0):
        self.success: List[Dict[str, Any]] = []
        self.skipped: List[Dict[str, Any]] = []
        self.failed: List[Dict[str, Any]] = []
        self.meshes: Dict[Tuple[str, str], Mesh] = {}
        self.originals: Dict[Tuple[str, str], Mesh] = {}
        self.cancelled = False
        self.total = total

    @property
    def processed(self) -> int:
        return len(self.success) + len(self.skipped) + len(self.failed)

    def restore(self, path: str, name: str) -> Optional[Mesh]:
        """The mesh the sprite had before optimization, if it was processed."""
        original = self.originals.get((path, name))
        return original.copy() if original is not None else None

    def __repr__(self) -> str:
        return (f"BatchResult(success={len(self.success)}, skipped={len(self.skipped)}, "
                f"failed={len(self.failed)}, cancelled={self.cancelled})")


def _process_job(
    job: SpriteJob,
    config: OptimizerConfig,
    path_filter: Optional[PathFilter],
    result: BatchResult
) -> None:
    if path_filter is not None and not path_filter.is_allowed(job.path):
        result.skipped.append({'path': job.path, 'name': job.name, 'reason': "path is denied"})
        logger.debug(f"Skipping {job.path}:{job.name}, path is denied")
        return

    if not job.tight:
        result.skipped.append({'path': job.path, 'name': job.name, 'reason': "rectangle-packed sprite"})
        logger.debug(f"Skipping {job.path}:{job.name}, sprite is not tight-packed")
        return

    result.originals[job.key] = job.mesh.copy()

    try:
        optimized = optimize_mesh_detailed(job.mesh, job.bounds, config)
    except OptimizationError as e:
        result.failed.append({'path': job.path, 'name': job.name, 'stage': e.stage, 'error': str(e)})
        logger.warning(f"Failed to optimize {job.path}:{job.name}: {e}")
        return
    except ValueError as e:
        # Broken input mesh (bad indices)
        result.failed.append({'path': job.path, 'name': job.name, 'stage': "input", 'error': str(e)})
        logger.warning(f"Failed to optimize {job.path}:{job.name}: {e}")
        return

    result.meshes[job.key] = optimized.mesh
    result.success.append({
        'path': job.path,
        'name': job.name,
        'vertices_before': optimized.before['vertices'],
        'vertices_after': optimized.after['vertices'],
        'triangles_before': optimized.before['triangles'],
        'triangles_after': optimized.after['triangles'],
    })


def optimize_batch(
    jobs: Sequence[SpriteJob],
    config: Optional[OptimizerConfig] = None,
    path_filter: Optional[PathFilter] = None,
    should_cancel: Optional[Callable[[int, int, SpriteJob], bool]] = None,
    show_progress: bool = False
) -> BatchResult:
    """
    Optimize every job in order.

    Args:
        jobs: Sprites to optimize
        config: OptimizerConfig used for every sprite
        path_filter: Paths to leave alone (None = allow everything)
        should_cancel: Called after each job with (done, total, job); True
                       stops the batch
        show_progress: Show a rich progress bar on the console

    Returns:
        BatchResult with 'success', 'skipped' and 'failed' entries
    """
    if config is None:
        config = OptimizerConfig()

    result = BatchResult(total=len(jobs))
    progress: Optional[Progress] = None
    task = None

    if show_progress:
        progress = Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            BarColumn(),
            TaskProgressColumn(),
            console=console,
            transient=False
        )
        progress.start()
        task = progress.add_task("[cyan]✂️  Optimizing sprites...", total=len(jobs))

    try:
        for current, job in enumerate(jobs, start=1):
            if progress is not None and task is not None:
                progress.update(task, description=f"[cyan]✂️  {job.path}:{job.name}")

            _process_job(job, config, path_filter, result)

            if progress is not None and task is not None:
                progress.update(task, completed=current)

            if should_cancel is not None and should_cancel(current, len(jobs), job):
                result.cancelled = True
                logger.info(f"Batch cancelled, processed {current}/{len(jobs)} sprites")
                break
    finally:
        if progress is not None:
            progress.stop()

    logger.info(f"Batch done: {len(result.success)} optimized, {len(result.skipped)} skipped, "
                f"{len(result.failed)} failed")
    return result


def print_batch_summary(result: BatchResult, output: Optional[Console] = None) -> None:
    """Print a batch result as rich tables."""
    out = output if output is not None else console

    out.print()
    out.print("[bold]📊 Batch Summary[/bold]")
    out.print(f"   [green]✅ Optimized: {len(result.success)} sprites[/green]")
    out.print(f"   [yellow]⚠️  Skipped:   {len(result.skipped)} sprites[/yellow]")
    out.print(f"   [red]❌ Failed:    {len(result.failed)} sprites[/red]")
    if result.cancelled:
        out.print(f"   [yellow]⏹️  Cancelled after {result.processed}/{result.total} sprites[/yellow]")
    out.print()

    if result.success:
        table = Table(title="Optimized", box=box.ROUNDED, show_header=True, header_style="bold cyan")
        table.add_column("Sprite", style="white")
        table.add_column("Vertices", justify="right")
        table.add_column("Triangles", justify="right")
        for item in result.success:
            table.add_row(
                f"{item['path']}:{item['name']}",
                f"{item['vertices_before']} → {item['vertices_after']}",
                f"{item['triangles_before']} → {item['triangles_after']}"
            )
        out.print(table)

    if result.failed:
        table = Table(title="Failed", box=box.ROUNDED, show_header=True, header_style="bold red")
        table.add_column("Sprite", style="white")
        table.add_column("Stage")
        table.add_column("Error")
        for item in result.failed:
            table.add_row(f"{item['path']}:{item['name']}", item['stage'], item['error'])
        out.print(table)
