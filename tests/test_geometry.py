"""
Tests for the 2D geometry helpers.
"""

import unittest

from sprite_optimizer.geometry import (
    close_loop,
    corner_area,
    is_ccw,
    line_intersection,
    mesh_winding,
    open_loop,
    signed_area
)
from tests.helpers import create_unit_square_mesh


class TestAreas(unittest.TestCase):
    """Test signed area helpers."""

    def test_corner_area_is_doubled_and_signed(self):
        self.assertEqual(corner_area((0, 0), (1, 0), (0, 1)), 1.0)
        self.assertEqual(corner_area((0, 0), (0, 1), (1, 0)), -1.0)

    def test_collinear_corner_is_zero(self):
        self.assertEqual(corner_area((0, 0), (1, 1), (2, 2)), 0.0)

    def test_signed_area_orientation(self):
        square = [(0, 0), (2, 0), (2, 2), (0, 2)]
        self.assertEqual(signed_area(square), 4.0)
        self.assertEqual(signed_area(list(reversed(square))), -4.0)
        self.assertTrue(is_ccw(square))

    def test_signed_area_closed_ring(self):
        square = [(0, 0), (2, 0), (2, 2), (0, 2), (0, 0)]
        self.assertEqual(signed_area(square), 4.0)

    def test_mesh_winding(self):
        self.assertEqual(mesh_winding(create_unit_square_mesh().vertices, create_unit_square_mesh().triangles), 1)
        cw = create_unit_square_mesh(clockwise=True)
        self.assertEqual(mesh_winding(cw.vertices, cw.triangles), -1)
        self.assertEqual(mesh_winding([], []), 0)


class TestLoops(unittest.TestCase):
    """Test open/closed loop conversion."""

    def test_close_and_open(self):
        loop = [(0, 0), (1, 0), (1, 1)]
        closed = close_loop(loop)
        self.assertEqual(closed, [(0, 0), (1, 0), (1, 1), (0, 0)])
        self.assertEqual(close_loop(closed), closed)
        self.assertEqual(open_loop(closed), loop)
        self.assertEqual(open_loop(loop), loop)


class TestLineIntersection(unittest.TestCase):
    """Test the ray/line intersection used by corner extension."""

    def test_forward_and_backward_parameters(self):
        # x axis extended forward from (1, 0), x = 3 line approached backward
        hit = line_intersection((0, 0), (1, 0), (3, 1), (3, 2))
        self.assertIsNotNone(hit)
        point, t, u = hit
        self.assertAlmostEqual(point[0], 3.0)
        self.assertAlmostEqual(point[1], 0.0)
        self.assertAlmostEqual(t, 2.0)
        self.assertAlmostEqual(u, -1.0)

    def test_parallel_lines(self):
        self.assertIsNone(line_intersection((0, 0), (1, 0), (0, 1), (1, 1)))

    def test_nearly_parallel_lines(self):
        self.assertIsNone(line_intersection((0, 0), (1, 0), (0, 1), (1, 1 + 1e-9)))

    def test_zero_length_segment(self):
        self.assertIsNone(line_intersection((1, 1), (1, 1), (0, 0), (0, 1)))


if __name__ == '__main__':
    unittest.main()
