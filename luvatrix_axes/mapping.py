from __future__ import annotations

from dataclasses import dataclass
import math
from typing import Literal, TypeAlias

import numpy as np

from luvatrix_axes.bounds import Bounds
from luvatrix_axes.errors import AxisConfigError, InvalidBoundsError
from luvatrix_axes.ticks import AxisTicks, TickBand, linear_ticks, log_ticks


MappingName = Literal["linear", "log", "log10"]


@dataclass(frozen=True)
class LinearMapping:
    @property
    def name(self) -> str:
        return "linear"

    def forward(self, value: float) -> float:
        return float(value)

    def inverse(self, value: float) -> float:
        return float(value)

    def forward_array(self, values: np.ndarray) -> np.ndarray:
        return np.asarray(values, dtype=np.float64)

    def check_domain(self, bounds: Bounds) -> None:
        return None

    def ticks(self, bounds: Bounds, band: TickBand, *, enclose: bool) -> AxisTicks:
        return linear_ticks(bounds, band, enclose=enclose)


@dataclass(frozen=True)
class LogMapping:
    base: float = math.e

    def __post_init__(self) -> None:
        if not math.isfinite(self.base) or self.base <= 0 or self.base == 1.0:
            raise AxisConfigError(f"invalid logarithm base: {self.base!r}")

    @property
    def name(self) -> str:
        if self.base == 10.0:
            return "log10"
        if self.base == math.e:
            return "log"
        return f"log{self.base:g}"

    def forward(self, value: float) -> float:
        x = float(value)
        if not x > 0:
            raise InvalidBoundsError(f"{self.name} mapping is undefined for {value!r}")
        if self.base == 10.0:
            return math.log10(x)
        if self.base == math.e:
            return math.log(x)
        return math.log(x) / math.log(self.base)

    def inverse(self, value: float) -> float:
        # Pixels far outside the plot can land past the float range.
        try:
            if self.base == math.e:
                return math.exp(value)
            return float(self.base**value)
        except OverflowError:
            return math.inf

    def forward_array(self, values: np.ndarray) -> np.ndarray:
        arr = np.asarray(values, dtype=np.float64)
        if np.any(arr <= 0):
            raise InvalidBoundsError(f"{self.name} mapping is undefined for non-positive values")
        if self.base == 10.0:
            return np.log10(arr)
        return np.log(arr) / math.log(self.base)

    def check_domain(self, bounds: Bounds) -> None:
        if bounds.min <= 0:
            raise InvalidBoundsError(f"{self.name} mapping requires positive bounds, got {bounds}")

    def ticks(self, bounds: Bounds, band: TickBand, *, enclose: bool) -> AxisTicks:
        # Log ticks sit on integer powers; the tick-count band does not apply.
        label = "e" if self.base == math.e else None
        return log_ticks(bounds, base=self.base, enclose=enclose, base_label=label)


Mapping: TypeAlias = LinearMapping | LogMapping


def mapping_from_name(name: str) -> Mapping:
    key = name.strip().lower()
    if key == "linear":
        return LinearMapping()
    if key == "log":
        return LogMapping()
    if key == "log10":
        return LogMapping(base=10.0)
    raise AxisConfigError(f"unknown mapping: {name!r} (expected linear, log or log10)")


def map_bounds(mapping: Mapping, bounds: Bounds) -> Bounds:
    mapping.check_domain(bounds)
    return Bounds(mapping.forward(bounds.min), mapping.forward(bounds.max))
