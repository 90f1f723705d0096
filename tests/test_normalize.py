from __future__ import annotations

from decimal import Decimal
import unittest

import numpy as np

from luvatrix_axes.adapters.normalize import bounds_from_values, coerce_column, coerce_columns, finite_mask
from luvatrix_axes.bounds import Bounds
from luvatrix_axes.errors import AxisDataError

try:
    import pandas as pd
except Exception:  # pragma: no cover - optional dependency
    pd = None  # type: ignore[assignment]

try:
    import torch
except Exception:  # pragma: no cover - optional dependency
    torch = None  # type: ignore[assignment]


class CoerceColumnTests(unittest.TestCase):
    def test_sequences_with_missing_values(self) -> None:
        out = coerce_column([1, None, Decimal("2.5"), True])
        self.assertEqual(out.dtype, np.float64)
        self.assertEqual(out[0], 1.0)
        self.assertTrue(np.isnan(out[1]))
        self.assertEqual(out[2], 2.5)
        self.assertEqual(out[3], 1.0)

    def test_numpy_arrays(self) -> None:
        out = coerce_column(np.array([1, 2, 3], dtype=np.int32))
        np.testing.assert_array_equal(out, [1.0, 2.0, 3.0])
        with self.assertRaises(AxisDataError):
            coerce_column(np.zeros((2, 2)))

    def test_object_and_empty_columns(self) -> None:
        out = coerce_column(np.array([Decimal("0.5"), None, 3], dtype=object))
        self.assertEqual(out.dtype, np.float64)
        self.assertEqual(out[0], 0.5)
        self.assertTrue(np.isnan(out[1]))
        self.assertEqual(coerce_column([]).shape, (0,))
        with self.assertRaises(AxisDataError):
            coerce_column([[1.0, 2.0], [3.0, 4.0]])

    def test_rejects_non_numeric(self) -> None:
        with self.assertRaises(AxisDataError):
            coerce_column([1.0, "abc"])
        with self.assertRaises(AxisDataError):
            coerce_column("123")
        with self.assertRaises(AxisDataError):
            coerce_column(42)

    def test_columns_must_align(self) -> None:
        xs, ys = coerce_columns([1.0, 2.0], (3, 4))
        np.testing.assert_array_equal(ys, [3.0, 4.0])
        with self.assertRaises(AxisDataError):
            coerce_columns([1.0, 2.0], [3.0])
        with self.assertRaises(AxisDataError):
            coerce_columns()

    def test_finite_mask_and_bounds(self) -> None:
        xs = np.array([0.0, np.nan, 4.0, 9.0])
        ys = np.array([1.0, 2.0, np.inf, 3.0])
        np.testing.assert_array_equal(finite_mask(xs, ys), [True, False, False, True])
        self.assertEqual(bounds_from_values(xs), Bounds(0.0, 9.0))
        self.assertEqual(bounds_from_values(xs, mask=np.array([True, True, True, False])), Bounds(0.0, 4.0))
        with self.assertRaises(AxisDataError):
            bounds_from_values(xs, mask=np.array([True]))
        with self.assertRaises(AxisDataError):
            bounds_from_values([None, None])


@unittest.skipIf(pd is None, "pandas not installed")
class PandasColumnTests(unittest.TestCase):
    def test_series_and_named_columns(self) -> None:
        df = pd.DataFrame({"t": [3.0, 1.0, 2.0], "name": ["a", "b", "c"]})
        np.testing.assert_array_equal(coerce_column(df["t"]), [3.0, 1.0, 2.0])
        self.assertEqual(bounds_from_values("t", data=df), Bounds(1.0, 3.0))
        np.testing.assert_array_equal(coerce_column(df), [3.0, 1.0, 2.0])
        with self.assertRaises(AxisDataError):
            coerce_column("missing", data=df)
        with self.assertRaises(AxisDataError):
            coerce_column("t", data={"t": [1.0]})

    def test_nullable_values(self) -> None:
        series = pd.Series([1.5, None, 4.0], dtype="Float64")
        out = coerce_column(series)
        self.assertTrue(np.isnan(out[1]))
        self.assertEqual(out[2], 4.0)


@unittest.skipIf(torch is None, "torch not installed")
class TorchColumnTests(unittest.TestCase):
    def test_tensor(self) -> None:
        out = coerce_column(torch.tensor([1.0, 2.0], dtype=torch.float32))
        np.testing.assert_array_equal(out, [1.0, 2.0])
        with self.assertRaises(AxisDataError):
            coerce_column(torch.zeros((2, 2)))


if __name__ == "__main__":
    unittest.main()
