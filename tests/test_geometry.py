"""Tests for planar point and rectangle primitives."""

from __future__ import annotations

import math
import unittest

from kdtree_st import FULL_PLANE, Point2D, RectHV


class Point2DTest(unittest.TestCase):
    """Validate point construction, equality and distances."""

    def test_equality_and_hash_are_by_value(self) -> None:
        self.assertEqual(Point2D(0.5, 0.25), Point2D(0.5, 0.25))
        self.assertEqual(len({Point2D(1, 2), Point2D(1.0, 2.0)}), 1)

    def test_negative_zero_is_normalized(self) -> None:
        p = Point2D(-0.0, -0.0)
        self.assertEqual(p, Point2D(0.0, 0.0))
        self.assertEqual(hash(p), hash(Point2D(0.0, 0.0)))
        self.assertEqual(math.copysign(1.0, p.x), 1.0)

    def test_non_finite_coordinates_are_rejected(self) -> None:
        with self.assertRaises(ValueError):
            Point2D(math.nan, 0.0)
        with self.assertRaises(ValueError):
            Point2D(0.0, math.inf)

    def test_distances(self) -> None:
        a = Point2D(0.0, 0.0)
        b = Point2D(3.0, 4.0)
        self.assertEqual(a.distance_squared_to(b), 25.0)
        self.assertEqual(a.distance_to(b), 5.0)


class RectHVTest(unittest.TestCase):
    """Validate rectangle containment, intersection and distance rules."""

    def setUp(self) -> None:
        self.rect = RectHV(0.0, 0.0, 2.0, 2.0)

    def test_invalid_bounds_are_rejected(self) -> None:
        with self.assertRaises(ValueError):
            RectHV(1.0, 0.0, 0.0, 1.0)
        with self.assertRaises(ValueError):
            RectHV(0.0, 1.0, 1.0, 0.0)
        with self.assertRaises(ValueError):
            RectHV(math.nan, 0.0, 1.0, 1.0)

    def test_contains_includes_boundary(self) -> None:
        self.assertTrue(self.rect.contains(Point2D(1.0, 1.0)))
        self.assertTrue(self.rect.contains(Point2D(0.0, 2.0)))
        self.assertTrue(self.rect.contains(Point2D(2.0, 0.5)))
        self.assertFalse(self.rect.contains(Point2D(2.5, 1.0)))

    def test_intersects_includes_touching(self) -> None:
        self.assertTrue(self.rect.intersects(RectHV(2.0, 2.0, 3.0, 3.0)))
        self.assertTrue(self.rect.intersects(RectHV(0.5, 0.5, 1.0, 1.0)))
        self.assertTrue(self.rect.intersects(FULL_PLANE))
        self.assertFalse(self.rect.intersects(RectHV(2.1, 0.0, 3.0, 1.0)))
        self.assertFalse(self.rect.intersects(RectHV(0.0, -1.0, 1.0, -0.1)))

    def test_distance_squared_to_point(self) -> None:
        self.assertEqual(self.rect.distance_squared_to(Point2D(1.0, 1.0)), 0.0)
        self.assertEqual(self.rect.distance_squared_to(Point2D(2.0, 2.0)), 0.0)
        self.assertEqual(self.rect.distance_squared_to(Point2D(5.0, 6.0)), 25.0)
        self.assertEqual(self.rect.distance_squared_to(Point2D(-3.0, 1.0)), 9.0)
        self.assertEqual(self.rect.distance_to(Point2D(1.0, -4.0)), 4.0)

    def test_unbounded_rectangles(self) -> None:
        half_plane = RectHV(1.0, -math.inf, math.inf, math.inf)
        self.assertEqual(half_plane.distance_squared_to(Point2D(-1.0, 100.0)), 4.0)
        self.assertEqual(FULL_PLANE.distance_squared_to(Point2D(1e9, -1e9)), 0.0)
        self.assertEqual(self.rect.width, 2.0)
        self.assertEqual(self.rect.height, 2.0)


if __name__ == "__main__":
    unittest.main()
