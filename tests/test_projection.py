from __future__ import annotations

import unittest

import numpy as np

from luvatrix_axes.axis import Axis, AxisId, AxisInfo, AxisLocation
from luvatrix_axes.bounds import Bounds
from luvatrix_axes.errors import AxisConfigError, ProjectionArityError
from luvatrix_axes.projection import CartesianProjection, PixelTransform, PolarProjection


def _axis(location: AxisLocation, bounds: Bounds, *, inverted: bool = False) -> Axis:
    info = AxisInfo(label=location.value, axis_id=AxisId(location), inverted=inverted)
    return Axis.from_bounds([bounds], info=info, fixed_bounds=bounds)


class PixelTransformTests(unittest.TestCase):
    def test_map_and_inverse(self) -> None:
        t = PixelTransform.from_bounds(Bounds(0.0, 10.0), 200.0)
        self.assertEqual(t.map(2.5), 50.0)
        self.assertEqual(t.inverse(50.0), 2.5)
        np.testing.assert_allclose(t.map(np.array([0.0, 10.0])), [0.0, 200.0])

    def test_inverted_swaps_ends(self) -> None:
        t = PixelTransform.from_bounds(Bounds(0.0, 10.0), 200.0, inverted=True)
        self.assertEqual(t.map(0.0), 200.0)
        self.assertEqual(t.map(10.0), 0.0)
        self.assertEqual(t.inverse(t.map(3.0)), 3.0)

    def test_sampled_monotonicity(self) -> None:
        xs = np.linspace(-3.0, 13.0, 257)
        forward = PixelTransform.from_bounds(Bounds(0.0, 10.0), 200.0)
        backward = PixelTransform.from_bounds(Bounds(0.0, 10.0), 200.0, inverted=True)
        self.assertTrue(np.all(np.diff(forward.map(xs)) > 0))
        self.assertTrue(np.all(np.diff(backward.map(xs)) < 0))
        np.testing.assert_allclose(backward.inverse(backward.map(xs)), xs, atol=1e-12)

    def test_rejects_bad_extent(self) -> None:
        with self.assertRaises(AxisConfigError):
            PixelTransform.from_bounds(Bounds(0.0, 1.0), 0.0)
        with self.assertRaises(AxisConfigError):
            PixelTransform.from_bounds(Bounds(1.0, 1.0), 10.0)


class CartesianProjectionTests(unittest.TestCase):
    def test_identity_on_linear_coordinates(self) -> None:
        proj = CartesianProjection.from_axes(
            _axis(AxisLocation.BOTTOM, Bounds(0.0, 10.0)),
            _axis(AxisLocation.LEFT, Bounds(-1.0, 1.0), inverted=True),
            (100.0, 50.0),
        )
        self.assertEqual(proj.map([3.0, 0.5]), (3.0, 0.5))
        self.assertEqual(proj.inverse((3.0, 0.5)), (3.0, 0.5))
        self.assertEqual(proj.y_transform.map(1.0), 0.0)
        with self.assertRaises(ProjectionArityError):
            proj.map([1.0, 2.0, 3.0])


class PolarProjectionTests(unittest.TestCase):
    def _projection(self, *, inverted_r: bool = False, inverted_theta: bool = False) -> PolarProjection:
        return PolarProjection.from_axes(
            _axis(AxisLocation.RADIAL, Bounds(0.0, 1.0), inverted=inverted_r),
            _axis(AxisLocation.ANGULAR, Bounds(0.0, 360.0), inverted=inverted_theta),
            (200.0, 200.0),
        )

    def test_zero_angle_points_up_and_increases_clockwise(self) -> None:
        proj = self._projection()
        x, y = proj.map([1.0, 0.0])
        self.assertAlmostEqual(x, 0.0)
        self.assertAlmostEqual(y, -1.0)
        x, y = proj.map([1.0, 90.0])
        self.assertAlmostEqual(x, 1.0)
        self.assertAlmostEqual(y, 0.0)

    def test_inverse_round_trip(self) -> None:
        proj = self._projection()
        for r, theta in ((0.5, 10.0), (1.0, 200.0), (0.25, 359.0)):
            back = proj.inverse(proj.map([r, theta]))
            self.assertAlmostEqual(back[0], r)
            self.assertAlmostEqual(back[1], theta)

    def test_inverted_radius_and_angle(self) -> None:
        inverted_r = self._projection(inverted_r=True)
        self.assertEqual(inverted_r.map([1.0, 0.0]), (0.0, -0.0))
        x, y = inverted_r.map([0.0, 0.0])
        self.assertAlmostEqual(y, -1.0)

        ccw = self._projection(inverted_theta=True)
        x, y = ccw.map([1.0, 90.0])
        self.assertAlmostEqual(x, -1.0)
        back = ccw.inverse((x, y))
        self.assertAlmostEqual(back[1], 90.0)

    def test_pixel_extent_is_symmetric(self) -> None:
        proj = self._projection()
        self.assertEqual(proj.x_transform.map(0.0), 100.0)
        self.assertEqual(proj.y_transform.map(-1.0), 0.0)

    def test_map_arrays_matches_scalar(self) -> None:
        proj = self._projection()
        r = np.array([0.1, 0.5, 0.9])
        theta = np.array([0.0, 45.0, 270.0])
        xs, ys = proj.map_arrays(r, theta)
        for i in range(3):
            x, y = proj.map([r[i], theta[i]])
            self.assertAlmostEqual(xs[i], x)
            self.assertAlmostEqual(ys[i], y)


if __name__ == "__main__":
    unittest.main()
