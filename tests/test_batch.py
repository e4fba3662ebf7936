"""
Tests for batch optimization.

Tests the path filter, skipping/failing behaviour, cancellation and
the rich summary output.
"""

import io
import logging
import unittest
from rich.console import Console

from sprite_optimizer.batch import (
    PACKAGE_LOGGER,
    BatchResult,
    PathFilter,
    SpriteJob,
    configure_logging,
    optimize_batch,
    print_batch_summary
)
from sprite_optimizer.mesh import Bounds, Mesh
from tests.helpers import create_annulus_mesh, create_grid_mesh, create_unit_square_mesh


def _jobs():
    return [
        SpriteJob("Assets/hero.png", "hero_0", create_grid_mesh(4, 4), Bounds.from_size(4, 4)),
        SpriteJob("Assets/hero.png", "hero_1", create_annulus_mesh(), Bounds.from_size(3, 3)),
        SpriteJob("Assets/tiles.png", "tile_0", create_unit_square_mesh(), Bounds.from_size(1, 1)),
    ]


class TestPathFilter(unittest.TestCase):
    """Test the deny list."""

    def test_case_insensitive(self):
        path_filter = PathFilter(["Assets/Hero.png"])
        self.assertFalse(path_filter.is_allowed("assets/hero.PNG"))
        self.assertTrue(path_filter.is_allowed("Assets/tiles.png"))

    def test_deny_and_allow(self):
        path_filter = PathFilter()
        self.assertEqual(len(path_filter), 0)
        path_filter.deny("a.png")
        self.assertFalse(path_filter.is_allowed("A.PNG"))
        path_filter.allow("A.png")
        self.assertTrue(path_filter.is_allowed("a.png"))

    def test_empty_paths_ignored(self):
        path_filter = PathFilter(["", None])
        self.assertEqual(len(path_filter), 0)


class TestOptimizeBatch(unittest.TestCase):
    """Test the batch loop."""

    def test_all_succeed(self):
        result = optimize_batch(_jobs())

        self.assertEqual(len(result.success), 3)
        self.assertEqual(result.processed, 3)
        self.assertFalse(result.cancelled)
        self.assertIn(("Assets/hero.png", "hero_0"), result.meshes)
        self.assertLess(result.success[0]['triangles_after'], result.success[0]['triangles_before'])

    def test_denied_path_skipped(self):
        result = optimize_batch(_jobs(), path_filter=PathFilter(["assets/HERO.png"]))

        self.assertEqual(len(result.skipped), 2)
        self.assertEqual(len(result.success), 1)
        self.assertEqual(result.skipped[0]['reason'], "path is denied")

    def test_rectangle_sprite_skipped(self):
        job = SpriteJob("a.png", "a", create_unit_square_mesh(), Bounds.from_size(1, 1), tight=False)
        result = optimize_batch([job])
        self.assertEqual(len(result.skipped), 1)
        self.assertNotIn(job.key, result.originals)

    def test_failure_recorded_and_batch_continues(self):
        broken = Mesh([(0, 0), (1, 0), (1, 1), (0, 1)], [(0, 1, 2), (0, 3, 2)])
        jobs = [SpriteJob("bad.png", "bad", broken, Bounds.from_size(1, 1))] + _jobs()
        result = optimize_batch(jobs)

        self.assertEqual(len(result.failed), 1)
        self.assertEqual(result.failed[0]['stage'], "contours")
        self.assertEqual(len(result.success), 3)

    def test_bad_indices_recorded(self):
        broken = Mesh([(0, 0)], [(0, 1, 2)])
        result = optimize_batch([SpriteJob("bad.png", "bad", broken, Bounds.from_size(1, 1))])
        self.assertEqual(result.failed[0]['stage'], "input")

    def test_cancel(self):
        calls = []

        def should_cancel(done, total, job):
            calls.append((done, total, job.name))
            return done == 2

        result = optimize_batch(_jobs(), should_cancel=should_cancel)

        self.assertTrue(result.cancelled)
        self.assertEqual(result.processed, 2)
        self.assertEqual(result.total, 3)
        self.assertEqual(calls, [(1, 3, "hero_0"), (2, 3, "hero_1")])

    def test_originals_restorable(self):
        jobs = _jobs()
        result = optimize_batch(jobs)

        restored = result.restore("Assets/hero.png", "hero_0")
        self.assertEqual(restored.triangles, jobs[0].mesh.triangles)
        self.assertIsNone(result.restore("Assets/missing.png", "x"))

    def test_progress_bar(self):
        result = optimize_batch(_jobs()[:1], show_progress=True)
        self.assertEqual(len(result.success), 1)


class TestSummaryAndLogging(unittest.TestCase):
    """Test user-facing output."""

    def test_print_summary(self):
        broken = Mesh([(0, 0), (1, 0), (1, 1), (0, 1)], [(0, 1, 2), (0, 3, 2)])
        result = optimize_batch(_jobs() + [SpriteJob("bad.png", "bad", broken, Bounds.from_size(1, 1))])

        buffer = io.StringIO()
        print_batch_summary(result, Console(file=buffer, width=200, force_terminal=False))
        output = buffer.getvalue()

        self.assertIn("Optimized: 3 sprites", output)
        self.assertIn("Failed:    1 sprites", output)
        self.assertIn("Assets/hero.png:hero_0", output)
        self.assertIn("bad.png:bad", output)

    def test_print_empty_summary(self):
        buffer = io.StringIO()
        print_batch_summary(BatchResult(), Console(file=buffer, width=120))
        self.assertIn("Optimized: 0 sprites", buffer.getvalue())

    def test_configure_logging_adds_one_handler(self):
        package_logger = logging.getLogger(PACKAGE_LOGGER)
        saved = list(package_logger.handlers)
        for handler in saved:
            package_logger.removeHandler(handler)
        try:
            configure_logging(logging.DEBUG)
            configure_logging(logging.DEBUG)
            self.assertEqual(len(package_logger.handlers), 1)
            self.assertEqual(package_logger.level, logging.DEBUG)
        finally:
            for handler in list(package_logger.handlers):
                package_logger.removeHandler(handler)
            for handler in saved:
                package_logger.addHandler(handler)
            package_logger.setLevel(logging.NOTSET)


if __name__ == '__main__':
    unittest.main()
