from __future__ import annotations

from collections.abc import Sequence
import math
from typing import Any

import numpy as np

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


def coerce_column(value: Any, *, data: Any = None, label: str = "values") -> np.ndarray:
    """Turn a sequence, numpy array, pandas Series/column name or torch tensor into float64.

    ``None`` and missing entries become NaN; anything non-numeric raises
    ``AxisDataError``.
    """

    arr = _column_array(_resolve_input(value, data=data, label=label), label=label)
    if arr.dtype.kind in "biuf":
        return arr.astype(np.float64, copy=False)
    return np.fromiter(
        (_cell_to_float(cell, i, label) for i, cell in enumerate(arr.tolist())),
        dtype=np.float64,
        count=arr.size,
    )


def coerce_columns(*columns: Any, data: Any = None) -> tuple[np.ndarray, ...]:
    if not columns:
        raise AxisDataError("at least one column is required")
    arrays = tuple(coerce_column(col, data=data, label=f"column {i}") for i, col in enumerate(columns))
    size = arrays[0].size
    for i, arr in enumerate(arrays[1:], start=1):
        if arr.size != size:
            raise AxisDataError(f"column length mismatch: column {i} has {arr.size} values, expected {size}")
    return arrays


def finite_mask(*arrays: np.ndarray) -> np.ndarray:
    if not arrays:
        raise AxisDataError("at least one array is required")
    mask = np.isfinite(arrays[0])
    for arr in arrays[1:]:
        mask &= np.isfinite(arr)
    return mask


def bounds_from_values(values: Any, *, data: Any = None, mask: np.ndarray | None = None) -> Bounds:
    """Numeric extent of a column, ignoring NaN/inf and entries where ``mask`` is False."""

    arr = coerce_column(values, data=data)
    if mask is not None:
        mask_arr = np.asarray(mask, dtype=bool)
        if mask_arr.shape != arr.shape:
            raise AxisDataError(f"mask length mismatch: {mask_arr.size} != {arr.size}")
        arr = arr[mask_arr]
    return Bounds.from_values(arr)


def _resolve_input(value: Any, *, data: Any, label: str) -> Any:
    if data is not None:
        if pd is None:
            raise AxisDataError("pandas is required when using `data=`")
        if not isinstance(data, pd.DataFrame):
            raise AxisDataError("`data` must be a pandas DataFrame")
        if isinstance(value, str):
            if value not in data.columns:
                raise AxisDataError(f"column not found: {value}")
            return data[value]
        return value

    if pd is not None and isinstance(value, pd.DataFrame):
        numeric_cols = [c for c in value.columns if _is_numeric_dtype(value[c])]
        if len(numeric_cols) != 1:
            raise AxisDataError(f"{label}: DataFrame input must contain exactly one numeric column")
        return value[numeric_cols[0]]
    return value


def _is_numeric_dtype(series: Any) -> bool:
    if pd is None:
        return False
    return bool(pd.api.types.is_numeric_dtype(series))


def _column_array(value: Any, *, label: str) -> np.ndarray:
    if torch is not None and isinstance(value, torch.Tensor):
        arr = value.detach().cpu().to(torch.float64).numpy()
    elif pd is not None and isinstance(value, pd.Series):
        arr = value.to_numpy()
    elif isinstance(value, np.ndarray):
        arr = value
    elif isinstance(value, Sequence) and not isinstance(value, (str, bytes, bytearray)):
        arr = np.asarray(value, dtype=object)
    else:
        raise AxisDataError(f"unsupported {label} input type: {type(value)!r}")
    if arr.ndim != 1:
        raise AxisDataError(f"{label} must be 1-D, got shape {arr.shape}")
    return arr


def _cell_to_float(cell: Any, index: int, label: str) -> float:
    # Decimal and numpy scalars go through float(); pandas marks gaps with pd.NA.
    if cell is None or (pd is not None and cell is pd.NA):
        return math.nan
    try:
        return float(cell)
    except (TypeError, ValueError) as exc:
        raise AxisDataError(f"{label} contains non-numeric value at index {index}: {cell!r}") from exc
