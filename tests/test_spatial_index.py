"""Tests for the brute-force reference table."""

from __future__ import annotations

import unittest

from kdtree_st import BruteForcePointST, InvalidArgumentError, Point2D, RectHV


class BruteForcePointSTTest(unittest.TestCase):
    """Validate the linear-scan table used for cross-checks."""

    def setUp(self) -> None:
        self.table: BruteForcePointST[str] = BruteForcePointST(
            [
                (Point2D(0.0, 0.0), "origin"),
                (Point2D(2.0, 0.0), "east"),
                (Point2D(0.0, 3.0), "north"),
            ]
        )

    def test_insert_get_and_update(self) -> None:
        self.assertEqual(self.table.size(), 3)
        self.assertEqual(self.table.get(Point2D(2.0, 0.0)), "east")

        self.table.insert(Point2D(2.0, 0.0), "east2")
        self.assertEqual(len(self.table), 3)
        self.assertEqual(self.table.get(Point2D(2.0, 0.0)), "east2")
        self.assertIsNone(self.table.get(Point2D(5.0, 5.0)))
        self.assertTrue(self.table.contains(Point2D(0.0, 3.0)))
        self.assertNotIn(Point2D(1.0, 1.0), self.table)

    def test_range_keeps_insertion_order(self) -> None:
        found = self.table.range(RectHV(0.0, 0.0, 2.0, 3.0))
        self.assertEqual(found, [Point2D(0.0, 0.0), Point2D(2.0, 0.0), Point2D(0.0, 3.0)])
        self.assertEqual(self.table.range(RectHV(0.5, 0.5, 1.0, 1.0)), [])

    def test_queries_see_points_added_later(self) -> None:
        self.assertEqual(self.table.nearest(Point2D(1.9, 2.9)), Point2D(0.0, 3.0))
        self.table.insert(Point2D(2.0, 3.0), "corner")
        self.assertEqual(self.table.nearest(Point2D(1.9, 2.9)), Point2D(2.0, 3.0))
        self.assertEqual(len(self.table.range(RectHV(1.0, 1.0, 3.0, 3.0))), 1)

    def test_nearest_tie_uses_insertion_order(self) -> None:
        self.assertEqual(self.table.nearest(Point2D(1.0, 0.0)), Point2D(0.0, 0.0))

    def test_empty_table(self) -> None:
        table: BruteForcePointST[int] = BruteForcePointST()
        self.assertTrue(table.is_empty())
        self.assertIsNone(table.nearest(Point2D(0.0, 0.0)))
        self.assertEqual(table.range(RectHV(0.0, 0.0, 1.0, 1.0)), [])
        self.assertEqual(table.points(), [])

    def test_none_arguments_are_rejected(self) -> None:
        with self.assertRaises(InvalidArgumentError):
            self.table.insert(Point2D(1.0, 1.0), None)
        with self.assertRaises(InvalidArgumentError):
            self.table.range(None)  # type: ignore[arg-type]
        with self.assertRaises(InvalidArgumentError):
            self.table.nearest(None)  # type: ignore[arg-type]


if __name__ == "__main__":
    unittest.main()
