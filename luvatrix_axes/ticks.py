from __future__ import annotations

from dataclasses import dataclass
import logging
import math
from typing import Sequence

import numpy as np

from luvatrix_axes.bounds import Bounds
from luvatrix_axes.errors import AxisConfigError


LOGGER = logging.getLogger(__name__)

NICE_FACTORS: tuple[float, ...] = (1.0, 2.0, 5.0, 10.0)
MAX_STEP_ITERATIONS = 5
DEFAULT_MIN_TICKS = 7
DEFAULT_MAX_TICKS = 15

_SUPERSCRIPTS = str.maketrans("-0123456789", "⁻⁰¹²³⁴⁵⁶⁷⁸⁹")
_LADDER = (1.0, 2.0, 5.0)


@dataclass(frozen=True)
class NiceNumber:
    """A step of ``factor * 10**power`` with ``factor`` in {1, 2, 5, 10}."""

    power: int
    factor: float
    base10: float

    @classmethod
    def from_value(cls, value: float, *, round_result: bool) -> NiceNumber:
        if not math.isfinite(value) or value <= 0:
            raise ValueError(f"nice numbers require a positive finite value, got {value!r}")
        power = math.floor(math.log10(value))
        base10 = _pow10(power)
        frac = value / base10

        if round_result:
            if frac < 1.5:
                factor = 1.0
            elif frac < 3.0:
                factor = 2.0
            elif frac < 7.0:
                factor = 5.0
            else:
                factor = 10.0
        else:
            if frac <= 1.0:
                factor = 1.0
            elif frac <= 2.0:
                factor = 2.0
            elif frac <= 5.0:
                factor = 5.0
            else:
                factor = 10.0
        return cls(power=power, factor=factor, base10=base10)

    @classmethod
    def from_rung(cls, rung: int) -> NiceNumber:
        power, idx = divmod(rung, len(_LADDER))
        return cls(power=power, factor=_LADDER[idx], base10=_pow10(power))

    @property
    def value(self) -> float:
        return self.factor * self.base10

    @property
    def rung(self) -> int:
        # 10 * 10**p is the same step as 1 * 10**(p + 1).
        if self.factor == 10.0:
            return (self.power + 1) * len(_LADDER)
        return self.power * len(_LADDER) + _LADDER.index(self.factor)

    @property
    def decimals(self) -> int:
        if self.factor == 10.0:
            return max(0, -(self.power + 1))
        return max(0, -self.power)

    @property
    def is_integral(self) -> bool:
        return float(self.value).is_integer()

    def shift(self, steps: int) -> NiceNumber:
        """Walk ``steps`` rungs along the 1-2-5 ladder, carrying into ``power``."""

        if steps == 0:
            return self
        return NiceNumber.from_rung(self.rung + steps)

    def __str__(self) -> str:
        return f"{self.value:g} (power={self.power}, factor={self.factor:g})"


@dataclass(frozen=True)
class TickBand:
    min_ticks: int = DEFAULT_MIN_TICKS
    max_ticks: int = DEFAULT_MAX_TICKS

    def __post_init__(self) -> None:
        if self.min_ticks < 2:
            raise AxisConfigError("min_ticks must be >= 2")
        if self.max_ticks < self.min_ticks:
            raise AxisConfigError("max_ticks must be >= min_ticks")

    @property
    def average(self) -> int:
        return (self.min_ticks + self.max_ticks) // 2

    def contains(self, count: int) -> bool:
        return self.min_ticks <= count <= self.max_ticks


@dataclass(frozen=True)
class AxisTicks:
    major: tuple[float, ...]
    minor: tuple[float, ...]
    labels: tuple[str, ...]
    bounds: Bounds

    def __len__(self) -> int:
        return len(self.major)


def estimate_tick_count(span: float, step: float, *, enclose: bool) -> int:
    count = int(math.ceil(span / step)) + 1
    if enclose:
        count += 2
    return count


def linear_tick_step(vmin: float, vmax: float, band: TickBand, *, enclose: bool) -> NiceNumber:
    """Choose a nice step whose tick count falls inside ``band``.

    After ``MAX_STEP_ITERATIONS`` unsuccessful moves along the ladder the
    initial candidate is returned and a warning is logged.
    """

    span = vmax - vmin
    initial = NiceNumber.from_value(span / max(band.average - 1, 1), round_result=True)
    count = estimate_tick_count(span, initial.value, enclose=enclose)
    if band.contains(count):
        return initial

    direction = -1 if count < band.min_ticks else 1
    step = initial
    for _ in range(MAX_STEP_ITERATIONS):
        step = step.shift(direction)
        count = estimate_tick_count(span, step.value, enclose=enclose)
        if band.contains(count):
            return step
        # Overshooting to the other side of the band cannot be repaired by walking further.
        if (direction < 0 and count > band.max_ticks) or (direction > 0 and count < band.min_ticks):
            break
    LOGGER.warning(
        "no nice tick step for span %r within [%d, %d] ticks; keeping %s",
        span,
        band.min_ticks,
        band.max_ticks,
        initial,
    )
    return initial


def linear_ticks(bounds: Bounds, band: TickBand, *, enclose: bool) -> AxisTicks:
    target = bounds.widened()
    vmin, vmax = target.min, target.max
    step = linear_tick_step(vmin, vmax, band, enclose=enclose)
    size = step.value
    # Relative tolerance absorbs representation error in vmin / size.
    eps = 1e-9
    if enclose:
        k_lo = math.floor(vmin / size + eps)
        k_hi = math.ceil(vmax / size - eps)
    else:
        k_lo = math.ceil(vmin / size - eps)
        k_hi = math.floor(vmax / size + eps)

    if k_hi < k_lo:
        return AxisTicks(major=(), minor=(), labels=(), bounds=target)

    values = np.arange(k_lo, k_hi + 1, dtype=np.float64) * size
    values = np.round(values, step.decimals)
    values[values == 0.0] = 0.0
    if enclose:
        values[0] = min(values[0], vmin)
        values[-1] = max(values[-1], vmax)
    else:
        np.clip(values, vmin, vmax, out=values)

    major = tuple(float(v) for v in values)
    labels = tuple(format_tick(v, step) for v in major)
    return AxisTicks(major=major, minor=(), labels=labels, bounds=Bounds(major[0], major[-1]))


def log_ticks(bounds: Bounds, *, base: float, enclose: bool, base_label: str | None = None) -> AxisTicks:
    """Ticks for a logarithmic axis; ``bounds`` are already in log space."""

    target = bounds.widened()
    lo, hi = target.min, target.max
    eps = 1e-9
    if enclose:
        k_lo = math.floor(lo + eps)
        k_hi = math.ceil(hi - eps)
    else:
        k_lo = math.ceil(lo - eps)
        k_hi = math.floor(hi + eps)

    powers = list(range(k_lo, k_hi + 1))
    major = tuple(float(k) for k in powers)
    prefix = base_label if base_label is not None else f"{base:g}"
    labels = tuple(f"{prefix}{str(k).translate(_SUPERSCRIPTS)}" for k in powers)

    span = target if not major else target.union(Bounds(major[0], major[-1]))
    minor: list[float] = []
    if base == 10.0:
        start = math.floor(span.min)
        stop = math.ceil(span.max)
        offsets = np.log10(np.arange(2, 10, dtype=np.float64))
        for decade in range(start, stop):
            for offset in offsets:
                tick = decade + float(offset)
                if span.min < tick < span.max:
                    minor.append(tick)
    return AxisTicks(major=major, minor=tuple(minor), labels=labels, bounds=span)


def categorical_ticks(categories: Sequence[str]) -> AxisTicks:
    if not categories:
        raise AxisConfigError("categorical axes need at least one category")
    major = tuple(float(i) for i in range(len(categories)))
    return AxisTicks(
        major=major,
        minor=(),
        labels=tuple(str(c) for c in categories),
        bounds=Bounds(major[0], major[-1]),
    )


def format_tick(value: float, step: NiceNumber | None = None) -> str:
    if not math.isfinite(value):
        return str(value)
    if step is None:
        return f"{value:g}"
    if abs(value) <= step.value * 1e-9:
        value = 0.0
    if step.is_integral:
        out = str(int(round(value)))
    else:
        out = f"{value:.{abs(step.power)}f}"
    if out.startswith("-") and float(out) == 0.0:
        out = out[1:]
    return out


def _pow10(power: int) -> float:
    if power >= 0:
        return float(10**power)
    return 1.0 / float(10**-power)
