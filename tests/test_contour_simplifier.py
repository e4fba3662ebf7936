"""
Tests for contour cleaning (vertex removal and corner clipping).
"""

import unittest

from sprite_optimizer.config import OptimizerConfig
from sprite_optimizer.constants import BOUNDS_CONTAINS_EPSILON
from sprite_optimizer.contour_simplifier import (
    clip_loop,
    materialize_contour,
    remove_loop_vertices,
    simplify_contours,
    simplify_loop
)
from sprite_optimizer.mesh import Bounds
from tests.helpers import chamfered_square_loop, shoelace_area


class TestRemoveLoopVertices(unittest.TestCase):
    """Test the removal policy."""

    def test_zero_tolerances_are_identity(self):
        loop = chamfered_square_loop()
        self.assertEqual(remove_loop_vertices(loop, 100, 0.0, 0.0), loop)

    def test_zero_steps_are_identity(self):
        loop = chamfered_square_loop()
        self.assertEqual(remove_loop_vertices(loop, 0, 2.0, 2.0), loop)

    def test_collinear_vertex_is_kept(self):
        """Removing a collinear vertex changes nothing, so it is not worth a step."""
        loop = [(0.0, 0.0), (1.0, 0.0), (2.0, 0.0), (2.0, 2.0), (0.0, 2.0)]
        self.assertEqual(len(remove_loop_vertices(loop, 10, 2.0, 0.0)), 5)

    def test_removes_notch_that_adds_area(self):
        """A small inward notch is filled when the increase budget allows it."""
        loop = [(0.0, 0.0), (2.0, 0.0), (2.0, 2.0), (1.0, 1.5), (0.0, 2.0)]
        cleaned = remove_loop_vertices(loop, 1, 2.0, 0.0)

        self.assertNotIn((1.0, 1.5), cleaned)
        self.assertEqual(len(cleaned), 4)
        self.assertGreater(shoelace_area(cleaned), shoelace_area(loop))

    def test_convex_corner_needs_decrease_budget(self):
        """Cutting a convex corner loses area and needs the decrease budget."""
        loop = chamfered_square_loop()
        self.assertEqual(remove_loop_vertices(loop, 1, 2.0, 0.0), loop)

        cleaned = remove_loop_vertices(loop, 1, 0.0, 3.0)
        self.assertLess(len(cleaned), len(loop))
        self.assertLess(shoelace_area(cleaned), shoelace_area(loop))

    def test_never_below_three_vertices(self):
        loop = chamfered_square_loop()
        cleaned = remove_loop_vertices(loop, 100, 10.0, 10.0)
        self.assertGreaterEqual(len(cleaned), 3)


class TestClipLoop(unittest.TestCase):
    """Test the corner-extension policy."""

    def test_chamfers_become_corners(self):
        cleaned = clip_loop(chamfered_square_loop(), 1, 2.0, Bounds.from_size(4, 4))

        self.assertEqual(len(cleaned), 4)
        self.assertEqual(set(cleaned), {(0.0, 0.0), (4.0, 0.0), (4.0, 4.0), (0.0, 4.0)})
        self.assertAlmostEqual(shoelace_area(cleaned), 16.0)

    def test_budget_too_small(self):
        loop = chamfered_square_loop()
        self.assertEqual(clip_loop(loop, 1, 0.5, Bounds.from_size(4, 4)), loop)

    def test_corners_outside_bounds_are_rejected(self):
        """Every new corner lies inside the epsilon-expanded bounds."""
        loop = chamfered_square_loop()
        bounds = Bounds(0.0, 0.0, 3.5, 3.5)
        cleaned = clip_loop(loop, 10, 2.0, bounds)

        allowed = bounds.expanded(BOUNDS_CONTAINS_EPSILON)
        for point in cleaned:
            if point not in loop:
                self.assertTrue(allowed.contains(point), f"{point} outside {bounds}")
        self.assertIn((0.0, 0.0), cleaned)
        self.assertNotIn((4.0, 4.0), cleaned)

    def test_zero_steps_are_identity(self):
        loop = chamfered_square_loop()
        self.assertEqual(clip_loop(loop, 0, 2.0, Bounds.from_size(4, 4)), loop)

    def test_triangle_is_left_alone(self):
        loop = [(0.0, 0.0), (1.0, 0.0), (0.0, 1.0)]
        self.assertEqual(clip_loop(loop, 10, 2.0, Bounds.from_size(1, 1)), loop)

    def test_no_consecutive_duplicates(self):
        cleaned = clip_loop(chamfered_square_loop(), 5, 2.0, Bounds.from_size(4, 4))
        for i in range(len(cleaned)):
            self.assertNotEqual(cleaned[i], cleaned[(i + 1) % len(cleaned)])


class TestSimplifyContours(unittest.TestCase):
    """Test policy selection and loop dropping."""

    def test_materialize_contour(self):
        vertices = [(0, 0), (1, 0), (1, 1)]
        self.assertEqual(materialize_contour([2, 0], vertices), [(1.0, 1.0), (0.0, 0.0)])

    def test_degenerate_loop_dropped(self):
        config = OptimizerConfig.triangle_profile()
        loops = [[(0.0, 0.0), (1.0, 0.0)], chamfered_square_loop()]

        self.assertIsNone(simplify_loop(loops[0], config, Bounds.from_size(4, 4)))
        self.assertEqual(len(simplify_contours(loops, config, Bounds.from_size(4, 4))), 1)

    def test_clean_steps_zero_keeps_vertex_counts(self):
        loops = [chamfered_square_loop(), [(1.0, 1.0), (1.0, 2.0), (2.0, 2.0), (2.0, 1.0)]]
        for config in (OptimizerConfig.triangle_profile(clean_steps=0),
                       OptimizerConfig.clip_profile(clean_steps=0)):
            cleaned = simplify_contours(loops, config, Bounds.from_size(4, 4))
            self.assertEqual([len(loop) for loop in cleaned], [8, 4])

    def test_strategy_picks_policy(self):
        bounds = Bounds.from_size(4, 4)
        clip = simplify_loop(chamfered_square_loop(), OptimizerConfig.clip_profile(area_increase_tolerance=2.0), bounds)
        removal = simplify_loop(chamfered_square_loop(), OptimizerConfig.triangle_profile(area_increase_tolerance=2.0), bounds)

        self.assertEqual(len(clip), 4)
        self.assertEqual(removal, chamfered_square_loop())


if __name__ == '__main__':
    unittest.main()
