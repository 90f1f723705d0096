from __future__ import annotations

import datetime as dt
import logging
import math

from luvatrix_axes.bounds import Bounds
from luvatrix_axes.errors import UnsupportedAxisError
from luvatrix_axes.ticks import (
    MAX_STEP_ITERATIONS,
    AxisTicks,
    TickBand,
    estimate_tick_count,
    linear_tick_step,
)


LOGGER = logging.getLogger(__name__)

MJD_UNIX_EPOCH = 40587.0
SECONDS_PER_DAY = 86400.0
MICROSECONDS_PER_DAY = 86_400_000_000
_MJD_UNIX_EPOCH_MICROS = 40587 * MICROSECONDS_PER_DAY
UNIX_EPOCH = dt.datetime(1970, 1, 1, tzinfo=dt.timezone.utc)
MIN_TICK_SPAN_S = 1e-3

# Calendar-friendly steps in seconds, from 1 ms up to two weeks.
TIME_STEPS_S: tuple[float, ...] = (
    0.001, 0.002, 0.005, 0.01, 0.02, 0.05, 0.1, 0.2, 0.5,
    1.0, 2.0, 5.0, 10.0, 15.0, 30.0,
    60.0, 120.0, 300.0, 600.0, 900.0, 1800.0,
    3600.0, 7200.0, 10800.0, 21600.0, 43200.0,
    86400.0, 172800.0, 432000.0, 604800.0, 1209600.0,
)


def datetime_to_mjd(value: dt.datetime) -> float:
    """Modified Julian date of ``value``; naive datetimes are taken as UTC."""

    if value.tzinfo is None:
        value = value.replace(tzinfo=dt.timezone.utc)
    delta = value - UNIX_EPOCH
    micros = (delta.days * 86400 + delta.seconds) * 1_000_000 + delta.microseconds
    # Integer numerator keeps the division correctly rounded.
    return (micros + _MJD_UNIX_EPOCH_MICROS) / MICROSECONDS_PER_DAY


def mjd_to_datetime(mjd: float, *, aware: bool = True) -> dt.datetime:
    micros = round((float(mjd) - MJD_UNIX_EPOCH) * MICROSECONDS_PER_DAY)
    out = UNIX_EPOCH + dt.timedelta(microseconds=micros)
    if not aware:
        out = out.replace(tzinfo=None)
    return out


def temporal_tick_step(span_s: float, band: TickBand, *, enclose: bool) -> float:
    if span_s < MIN_TICK_SPAN_S:
        raise UnsupportedAxisError(f"temporal ticks below millisecond granularity are not supported (span={span_s!r}s)")
    target = span_s / max(band.average - 1, 1)
    if target > TIME_STEPS_S[-1]:
        days = linear_tick_step(0.0, span_s / SECONDS_PER_DAY, band, enclose=enclose)
        return days.value * SECONDS_PER_DAY

    initial = min(range(len(TIME_STEPS_S)), key=lambda i: abs(math.log(TIME_STEPS_S[i] / target)))
    count = estimate_tick_count(span_s, TIME_STEPS_S[initial], enclose=enclose)
    if band.contains(count):
        return TIME_STEPS_S[initial]

    direction = -1 if count < band.min_ticks else 1
    idx = initial
    for _ in range(MAX_STEP_ITERATIONS):
        idx += direction
        if idx < 0 or idx >= len(TIME_STEPS_S):
            break
        count = estimate_tick_count(span_s, TIME_STEPS_S[idx], enclose=enclose)
        if band.contains(count):
            return TIME_STEPS_S[idx]
    LOGGER.warning(
        "no calendar tick step for span %.6gs within [%d, %d] ticks; keeping %gs",
        span_s,
        band.min_ticks,
        band.max_ticks,
        TIME_STEPS_S[initial],
    )
    return TIME_STEPS_S[initial]


def temporal_ticks(bounds: Bounds, band: TickBand, *, enclose: bool, aware: bool = True) -> AxisTicks:
    """Ticks for an axis whose display values are modified Julian dates."""

    s_min = (bounds.min - MJD_UNIX_EPOCH) * SECONDS_PER_DAY
    s_max = (bounds.max - MJD_UNIX_EPOCH) * SECONDS_PER_DAY
    step = temporal_tick_step(s_max - s_min, band, enclose=enclose)
    eps = 1e-9
    if enclose:
        k_lo = math.floor(s_min / step + eps)
        k_hi = math.ceil(s_max / step - eps)
    else:
        k_lo = math.ceil(s_min / step - eps)
        k_hi = math.floor(s_max / step + eps)
    if k_hi < k_lo:
        return AxisTicks(major=(), minor=(), labels=(), bounds=bounds)

    major: list[float] = []
    labels: list[str] = []
    for k in range(k_lo, k_hi + 1):
        mjd = k * step / SECONDS_PER_DAY + MJD_UNIX_EPOCH
        major.append(mjd)
        labels.append(format_time_tick(mjd_to_datetime(mjd, aware=aware), step))
    if enclose:
        major[0] = min(major[0], bounds.min)
        major[-1] = max(major[-1], bounds.max)
    else:
        major = [min(max(v, bounds.min), bounds.max) for v in major]
    return AxisTicks(major=tuple(major), minor=(), labels=tuple(labels), bounds=Bounds(major[0], major[-1]))


def format_time_tick(value: dt.datetime, step_s: float) -> str:
    if step_s >= SECONDS_PER_DAY:
        return value.strftime("%Y-%m-%d")
    if step_s >= 60.0:
        return value.strftime("%Y-%m-%d %H:%M")
    if step_s >= 1.0:
        return value.strftime("%H:%M:%S")
    return value.strftime("%H:%M:%S.%f")[:-3]
