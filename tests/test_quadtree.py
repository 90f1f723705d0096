from __future__ import annotations

import unittest

import numpy as np

from luvatrix_axes.errors import AxisConfigError, AxisDataError, OutOfBoundsError
from luvatrix_axes.quadtree import QuadTree, Rect


class RectTests(unittest.TestCase):
    def test_geometry(self) -> None:
        r = Rect.from_corners((4.0, 1.0), (0.0, 3.0))
        self.assertEqual(r, Rect(0.0, 1.0, 4.0, 3.0))
        self.assertEqual((r.width, r.height, r.center), (4.0, 2.0, (2.0, 2.0)))
        self.assertTrue(r.contains(4.0, 3.0))
        self.assertFalse(r.contains(4.1, 3.0))
        self.assertTrue(r.overlaps(Rect(3.0, 2.0, 9.0, 9.0)))
        self.assertFalse(r.overlaps(Rect(5.0, 0.0, 6.0, 1.0)))
        self.assertEqual(r.distance_sq(7.0, 7.0), 25.0)
        self.assertEqual(r.distance_sq(1.0, 2.0), 0.0)
        self.assertEqual(Rect.around((1.0, 1.0), 0.5, 2.0), Rect(0.5, -1.0, 1.5, 3.0))
        with self.assertRaises(AxisConfigError):
            Rect(1.0, 0.0, 0.0, 1.0)


class QuadTreeTests(unittest.TestCase):
    def setUp(self) -> None:
        rng = np.random.default_rng(1234)
        self.xs = rng.uniform(0.0, 1.0, 10_000)
        self.ys = rng.uniform(0.0, 1.0, 10_000)
        self.tree: QuadTree[int] = QuadTree.build(
            range(10_000),
            self.xs,
            self.ys,
            bounds=Rect(0.0, 0.0, 1.0, 1.0),
            capacity=4,
            max_depth=8,
        )

    def test_full_query_returns_each_id_once(self) -> None:
        found = self.tree.query_rect(self.tree.bounds)
        self.assertEqual(len(found), 10_000)
        self.assertEqual(sorted(found), list(range(10_000)))
        self.assertEqual(len(self.tree), 10_000)
        self.assertLessEqual(self.tree.depth, 8)

    def test_rect_query_matches_brute_force(self) -> None:
        rng = np.random.default_rng(99)
        for _ in range(200):
            a = rng.uniform(0.0, 1.0, 2)
            b = rng.uniform(0.0, 1.0, 2)
            rect = Rect.from_corners((float(a[0]), float(a[1])), (float(b[0]), float(b[1])))
            expected = np.flatnonzero(
                (self.xs >= rect.xmin) & (self.xs <= rect.xmax) & (self.ys >= rect.ymin) & (self.ys <= rect.ymax)
            )
            self.assertEqual(sorted(self.tree.query_rect(rect)), expected.tolist())

    def test_point_query_matches_brute_force(self) -> None:
        rng = np.random.default_rng(5)
        radius = 0.02
        for _ in range(1_000):
            qx, qy = (float(v) for v in rng.uniform(0.0, 1.0, 2))
            d2 = (self.xs - qx) ** 2 + (self.ys - qy) ** 2
            best = int(np.argmin(d2))
            expected = best if d2[best] <= radius * radius else None
            self.assertEqual(self.tree.query_point((qx, qy), radius), expected)

    def test_nearest_matches_brute_force(self) -> None:
        rng = np.random.default_rng(6)
        for _ in range(200):
            qx, qy = (float(v) for v in rng.uniform(-0.5, 1.5, 2))
            d2 = (self.xs - qx) ** 2 + (self.ys - qy) ** 2
            self.assertEqual(self.tree.nearest((qx, qy)), int(np.argmin(d2)))

    def test_out_of_bounds_insert(self) -> None:
        with self.assertRaises(OutOfBoundsError):
            self.tree.insert(-1, (1.5, 0.5))
        with self.assertRaises(OutOfBoundsError):
            self.tree.insert_many([-1], np.array([0.5]), np.array([float("nan")]))
        self.assertEqual(len(self.tree), 10_000)


class QuadTreeEdgeTests(unittest.TestCase):
    def test_duplicates_stop_at_max_depth(self) -> None:
        tree: QuadTree[int] = QuadTree(Rect(0.0, 0.0, 1.0, 1.0), capacity=2, max_depth=3)
        for i in range(50):
            tree.insert(i, (0.25, 0.25))
        self.assertEqual(tree.depth, 3)
        self.assertEqual(sorted(tree.query_rect(Rect.around((0.25, 0.25), 0.01))), list(range(50)))
        self.assertEqual(tree.query_point((0.25, 0.25), 0.0), 0)

    def test_empty_and_clear(self) -> None:
        tree: QuadTree[str] = QuadTree(Rect(0.0, 0.0, 10.0, 10.0))
        self.assertIsNone(tree.nearest((1.0, 1.0)))
        self.assertIsNone(tree.query_point((1.0, 1.0), 5.0))
        tree.insert("a", (1.0, 1.0))
        tree.insert("b", (9.0, 9.0))
        self.assertEqual(tree.query_point((2.0, 2.0), 2.0), "a")
        self.assertIsNone(tree.query_point((5.0, 5.0), 1.0))
        self.assertIsNone(tree.query_point((5.0, 5.0), -1.0))
        tree.clear()
        self.assertEqual(len(tree), 0)
        self.assertEqual(tree.node_count, 1)

    def test_build_derives_bounds(self) -> None:
        tree: QuadTree[int] = QuadTree.build([0, 1, 2], np.array([1.0, 2.0, 3.0]), np.array([5.0, 5.0, 5.0]))
        self.assertTrue(tree.bounds.contains(3.0, 5.0))
        self.assertGreater(tree.bounds.height, 0.0)
        self.assertEqual(sorted(tree.query_rect(tree.bounds)), [0, 1, 2])

    def test_invalid_configuration(self) -> None:
        with self.assertRaises(AxisConfigError):
            QuadTree(Rect(0.0, 0.0, 1.0, 1.0), capacity=0)
        with self.assertRaises(AxisConfigError):
            QuadTree(Rect(0.0, 0.0, 0.0, 1.0))
        with self.assertRaises(AxisDataError):
            QuadTree.build([0, 1], np.array([0.0]), np.array([0.0, 1.0]), bounds=Rect(0.0, 0.0, 1.0, 1.0))


if __name__ == "__main__":
    unittest.main()
