from __future__ import annotations

from dataclasses import dataclass
import logging
import math
from typing import Iterable

import numpy as np

from luvatrix_axes.errors import AxisDataError, InvalidBoundsError


LOGGER = logging.getLogger(__name__)
DEFAULT_WIDEN_RATIO = 0.05


@dataclass(frozen=True)
class Bounds:
    """Closed numeric interval. Updates always produce a new instance."""

    min: float
    max: float

    def __post_init__(self) -> None:
        lo = float(self.min)
        hi = float(self.max)
        if math.isnan(lo) or math.isnan(hi):
            raise InvalidBoundsError("bounds must not be NaN")
        if math.isinf(lo) or math.isinf(hi):
            raise InvalidBoundsError(f"bounds must be finite, got ({lo}, {hi})")
        if lo > hi:
            raise InvalidBoundsError(f"bounds min must be <= max, got ({lo}, {hi})")
        object.__setattr__(self, "min", lo)
        object.__setattr__(self, "max", hi)

    @property
    def span(self) -> float:
        return self.max - self.min

    @property
    def center(self) -> float:
        return 0.5 * (self.min + self.max)

    @property
    def is_degenerate(self) -> bool:
        return self.min == self.max

    def union(self, other: Bounds) -> Bounds:
        return Bounds(min(self.min, other.min), max(self.max, other.max))

    def intersection(self, other: Bounds) -> Bounds:
        lo = max(self.min, other.min)
        hi = min(self.max, other.max)
        if lo > hi:
            raise InvalidBoundsError(f"{self} and {other} do not overlap")
        return Bounds(lo, hi)

    __or__ = union
    __and__ = intersection

    def contains(self, value: float, *, inclusive: bool = True) -> bool:
        if inclusive:
            return self.min <= value <= self.max
        return self.min < value < self.max

    def contains_bounds(self, other: Bounds, *, inclusive: bool = True) -> bool:
        return self.contains(other.min, inclusive=inclusive) and self.contains(other.max, inclusive=inclusive)

    def shifted(self, delta: float) -> Bounds:
        return Bounds(self.min + delta, self.max + delta)

    def widened(self, ratio: float = DEFAULT_WIDEN_RATIO) -> Bounds:
        """Return a non-degenerate copy; single-valued ranges grow symmetrically."""

        if not self.is_degenerate:
            return self
        delta = max(1.0, abs(self.min) * ratio)
        LOGGER.debug("widening degenerate bounds at %r by +/-%r", self.min, delta)
        return Bounds(self.min - delta, self.max + delta)

    @classmethod
    def fold(cls, samples: Iterable[Bounds]) -> Bounds:
        result: Bounds | None = None
        for sample in samples:
            result = sample if result is None else result.union(sample)
        if result is None:
            raise InvalidBoundsError("at least one bounds sample is required")
        return result

    @classmethod
    def from_values(cls, values: Iterable[float] | np.ndarray) -> Bounds:
        arr = np.asarray(values, dtype=np.float64).ravel()
        finite = arr[np.isfinite(arr)]
        if finite.size == 0:
            raise AxisDataError("cannot compute bounds without finite values")
        return cls(float(np.min(finite)), float(np.max(finite)))

    def __repr__(self) -> str:
        return f"Bounds({self.min!r}, {self.max!r})"
