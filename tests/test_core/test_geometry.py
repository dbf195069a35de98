"""
Tests for the geometry helpers.
"""

import math
import unittest

from sketch2print.core.geometry import (
    Point, BoundingBox, bounds_of_points, point_in_polygon,
    distance_to_segment, arc_sweep, arc_points, arc_to_beziers,
    flatten_cubic_bezier, quadratic_to_cubic
)


class TestPoint(unittest.TestCase):

    def test_distance(self):
        self.assertEqual(Point(0, 0).distance_to(Point(3, 4)), 5.0)

    def test_rotate_about_center(self):
        p = Point(2, 1).rotate(math.pi / 2, Point(1, 1))
        self.assertAlmostEqual(p.x, 1.0)
        self.assertAlmostEqual(p.y, 2.0)

    def test_translated(self):
        self.assertEqual(Point(1, 2).translated(3, -2), Point(4, 0))


class TestBoundingBox(unittest.TestCase):

    def test_contains_edges(self):
        box = BoundingBox(0, 0, 10, 10)
        self.assertTrue(box.contains(Point(10, 10)))
        self.assertFalse(box.contains(Point(10.01, 5)))

    def test_intersects(self):
        a = BoundingBox(0, 0, 10, 10)
        self.assertTrue(a.intersects(BoundingBox(5, 5, 15, 15)))
        self.assertTrue(a.intersects(BoundingBox(10, 0, 20, 10)))
        self.assertFalse(a.intersects(BoundingBox(11, 0, 20, 10)))

    def test_union(self):
        box = BoundingBox(0, 0, 1, 1).union(BoundingBox(-5, 2, 3, 8))
        self.assertEqual(box, BoundingBox(-5, 0, 3, 8))

    def test_ensure_min_size(self):
        box = BoundingBox(5, 5, 5, 20).ensure_min_size()
        self.assertEqual(box, BoundingBox(4.5, 5, 5.5, 20))

    def test_to_dict(self):
        record = BoundingBox(1, 2, 4, 8).to_dict()
        self.assertEqual(record, {'left': 1, 'top': 2, 'right': 4, 'bottom': 8,
                                  'width': 3, 'height': 6})


class TestHelpers(unittest.TestCase):

    def test_bounds_of_points(self):
        box = bounds_of_points([Point(3, -1), Point(-2, 4), Point(0, 0)])
        self.assertEqual(box, BoundingBox(-2, -1, 3, 4))

    def test_point_in_concave_polygon(self):
        # U shape open at the top
        u_shape = [Point(0, 0), Point(10, 0), Point(10, 30), Point(20, 30),
                   Point(20, 0), Point(30, 0), Point(30, 40), Point(0, 40)]
        self.assertTrue(point_in_polygon(Point(5, 10), u_shape))
        self.assertFalse(point_in_polygon(Point(15, 10), u_shape))
        self.assertTrue(point_in_polygon(Point(15, 35), u_shape))
        self.assertFalse(point_in_polygon(Point(5, 5), u_shape[:2]))

    def test_distance_to_segment(self):
        self.assertEqual(distance_to_segment(Point(5, 3), Point(0, 0), Point(10, 0)), 3.0)
        self.assertEqual(distance_to_segment(Point(13, 4), Point(0, 0), Point(10, 0)), 5.0)
        self.assertEqual(distance_to_segment(Point(3, 4), Point(0, 0), Point(0, 0)), 5.0)


class TestArcs(unittest.TestCase):

    def test_sweep_clockwise(self):
        self.assertAlmostEqual(arc_sweep(0, math.pi / 2), math.pi / 2)
        self.assertAlmostEqual(arc_sweep(math.pi / 2, 0), 3 * math.pi / 2)
        self.assertEqual(arc_sweep(0, 4 * math.pi), 2 * math.pi)

    def test_sweep_counterclockwise(self):
        self.assertAlmostEqual(arc_sweep(0, math.pi / 2, True), -3 * math.pi / 2)
        self.assertAlmostEqual(arc_sweep(math.pi / 2, 0, True), -math.pi / 2)
        self.assertEqual(arc_sweep(0, -2 * math.pi, True), -2 * math.pi)

    def test_arc_points_follow_sweep(self):
        points = arc_points(Point(0, 0), 10, 0, math.pi, segments=4)
        self.assertEqual(len(points), 5)
        # Clockwise in y-down space passes through +y
        self.assertAlmostEqual(points[2].x, 0.0)
        self.assertAlmostEqual(points[2].y, 10.0)

    def test_arc_to_beziers(self):
        curves = arc_to_beziers(Point(0, 0), 10, 10, 0, math.pi)
        self.assertEqual(len(curves), 2)
        start, end = curves[0][0], curves[-1][3]
        self.assertAlmostEqual(start.x, 10.0)
        self.assertAlmostEqual(end.x, -10.0)
        self.assertAlmostEqual(end.y, 0.0)
        # First quarter heads towards +y
        self.assertAlmostEqual(curves[0][3].y, 10.0)
        self.assertEqual(arc_to_beziers(Point(0, 0), 1, 1, 0, 0), [])

    def test_arc_to_beziers_full_ellipse(self):
        curves = arc_to_beziers(Point(5, 5), 20, 10, 0, 2 * math.pi)
        self.assertEqual(len(curves), 4)
        self.assertAlmostEqual(curves[1][0].y, 15.0)


class TestBeziers(unittest.TestCase):

    def test_flatten_endpoints(self):
        points = flatten_cubic_bezier(Point(0, 0), Point(0, 10), Point(10, 10), Point(10, 0))
        self.assertEqual(points[0], Point(0, 0))
        self.assertEqual(points[-1], Point(10, 0))
        self.assertGreater(len(points), 2)

    def test_quadratic_to_cubic(self):
        cp1, cp2 = quadratic_to_cubic(Point(0, 0), Point(30, 30), Point(60, 0))
        self.assertAlmostEqual(cp1.x, 20.0)
        self.assertAlmostEqual(cp2.x, 40.0)
        self.assertAlmostEqual(cp1.y, 20.0)


if __name__ == '__main__':
    unittest.main()
