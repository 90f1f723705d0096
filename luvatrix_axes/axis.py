from __future__ import annotations

from dataclasses import dataclass, field
import datetime as dt
from enum import Enum
import logging
from typing import Any, Callable, ClassVar, Hashable, Sequence, TypeAlias

import numpy as np

from luvatrix_axes.adapters.normalize import coerce_column
from luvatrix_axes.bounds import Bounds
from luvatrix_axes.controller import AxisController, AxisView
from luvatrix_axes.errors import AxisConfigError, AxisDataError, UnsupportedAxisError
from luvatrix_axes.mapping import LinearMapping, Mapping, map_bounds
from luvatrix_axes.temporal import datetime_to_mjd, mjd_to_datetime, temporal_ticks
from luvatrix_axes.ticks import AxisTicks, TickBand, categorical_ticks


LOGGER = logging.getLogger(__name__)


class AxisLocation(Enum):
    LEFT = "left"
    RIGHT = "right"
    TOP = "top"
    BOTTOM = "bottom"
    X3D = "x3d"
    Y3D = "y3d"
    Z3D = "z3d"
    COLOR = "color"
    RADIAL = "radial"
    ANGULAR = "angular"


HORIZONTAL_LOCATIONS = frozenset({AxisLocation.BOTTOM, AxisLocation.TOP})
VERTICAL_LOCATIONS = frozenset({AxisLocation.LEFT, AxisLocation.RIGHT})
UNSUPPORTED_LOCATIONS = frozenset({AxisLocation.X3D, AxisLocation.Y3D, AxisLocation.Z3D, AxisLocation.COLOR})


@dataclass(frozen=True)
class AxisId:
    location: AxisLocation
    axes_id: Hashable = 0

    def __str__(self) -> str:
        return f"AxisId({self.location.value}, {self.axes_id!r})"


@dataclass(frozen=True)
class AxisInfo:
    label: str
    axis_id: AxisId
    inverted: bool = False
    mapping: Mapping = field(default_factory=LinearMapping)


@dataclass(frozen=True)
class NumericValues:
    kind: ClassVar[str] = "number"

    def to_number(self, value: Any) -> float:
        try:
            return float(value)
        except (TypeError, ValueError) as exc:
            raise AxisDataError(f"not a numeric axis value: {value!r}") from exc

    def from_number(self, value: float) -> float:
        return float(value)

    def ticks(self, bounds: Bounds, band: TickBand, mapping: Mapping, *, enclose: bool) -> AxisTicks:
        return mapping.ticks(bounds, band, enclose=enclose)


@dataclass(frozen=True)
class CategoricalValues:
    """Ordered unique categories; the display value of a category is its index."""

    categories: tuple[str, ...]
    _index: dict[str, int] = field(init=False, repr=False, compare=False)
    kind: ClassVar[str] = "string"

    def __post_init__(self) -> None:
        if not self.categories:
            raise AxisConfigError("categorical axes need at least one category")
        object.__setattr__(self, "_index", {c: i for i, c in enumerate(self.categories)})

    def to_number(self, value: Any) -> float:
        idx = self._index.get(str(value))
        if idx is None:
            raise AxisDataError(f"unknown category: {value!r}")
        return float(idx)

    def from_number(self, value: float) -> str:
        idx = int(round(value))
        idx = min(max(idx, 0), len(self.categories) - 1)
        return self.categories[idx]

    def ticks(self, bounds: Bounds, band: TickBand, mapping: Mapping, *, enclose: bool) -> AxisTicks:
        full = categorical_ticks(self.categories)
        if enclose:
            return full
        keep = [i for i, v in enumerate(full.major) if bounds.contains(v)]
        if not keep:
            return AxisTicks(major=(), minor=(), labels=(), bounds=bounds)
        major = tuple(full.major[i] for i in keep)
        return AxisTicks(
            major=major,
            minor=(),
            labels=tuple(full.labels[i] for i in keep),
            bounds=Bounds(major[0], major[-1]),
        )


@dataclass(frozen=True)
class TemporalValues:
    """Datetimes displayed as modified Julian dates."""

    aware: bool = True
    kind: ClassVar[str] = "datetime"

    def to_number(self, value: Any) -> float:
        if not isinstance(value, dt.datetime):
            raise AxisDataError(f"not a datetime axis value: {value!r}")
        return datetime_to_mjd(value)

    def from_number(self, value: float) -> dt.datetime:
        return mjd_to_datetime(value, aware=self.aware)

    def ticks(self, bounds: Bounds, band: TickBand, mapping: Mapping, *, enclose: bool) -> AxisTicks:
        return temporal_ticks(bounds, band, enclose=enclose, aware=self.aware)


AxisValues: TypeAlias = NumericValues | CategoricalValues | TemporalValues


class Axis:
    """One chart dimension: value conversion, display bounds and ticks.

    ``data_bounds`` are in native numeric units (indices for categories, MJD
    for datetimes); ``bounds`` and ``ticks`` are in display units, i.e. after
    the axis mapping. The displayed pair is held in a single ``AxisView``.
    """

    def __init__(
        self,
        *,
        info: AxisInfo,
        values: AxisValues,
        data_bounds: Bounds,
        view: AxisView,
        tick_band: TickBand | None = None,
        fixed_bounds: Bounds | None = None,
    ) -> None:
        _check_mapping(values, info.mapping)
        if view.bounds.is_degenerate:
            raise AxisConfigError(f"axis {info.label!r} display bounds have zero width")
        self._info = info
        self._values = values
        self._data_bounds = data_bounds
        self._display_data_bounds = map_bounds(info.mapping, data_bounds)
        self._view = view
        self._tick_band = tick_band or TickBand()
        self._fixed_bounds = fixed_bounds
        self._controller: AxisController | None = None
        self._unsubscribe: Callable[[], None] | None = None

    @classmethod
    def from_bounds(
        cls,
        samples: Sequence[Bounds],
        *,
        info: AxisInfo,
        tick_band: TickBand | None = None,
        fixed_bounds: Bounds | None = None,
    ) -> Axis:
        band = tick_band or TickBand()
        data = Bounds.fold(samples)
        view = _initial_view(NumericValues(), info.mapping, data, band, fixed_bounds)
        return cls(
            info=info,
            values=NumericValues(),
            data_bounds=data,
            view=view,
            tick_band=band,
            fixed_bounds=fixed_bounds,
        )

    @classmethod
    def from_categories(
        cls,
        samples: Sequence[Sequence[Any]],
        *,
        info: AxisInfo,
        tick_band: TickBand | None = None,
    ) -> Axis:
        ordered: dict[str, None] = {}
        for sample in samples:
            for value in sample:
                ordered.setdefault(str(value), None)
        values = CategoricalValues(categories=tuple(ordered))
        band = tick_band or TickBand()
        data = Bounds(0.0, float(len(values.categories) - 1))
        view = _initial_view(values, info.mapping, data, band, None)
        return cls(info=info, values=values, data_bounds=data, view=view, tick_band=band)

    @classmethod
    def from_datetimes(
        cls,
        samples: Sequence[Sequence[dt.datetime]],
        *,
        info: AxisInfo,
        tick_band: TickBand | None = None,
        fixed_bounds: Bounds | None = None,
    ) -> Axis:
        flat = [v for sample in samples for v in sample]
        if not flat:
            raise AxisDataError("datetime axes need at least one value")
        aware = flat[0].tzinfo is not None
        values = TemporalValues(aware=aware)
        data = Bounds.from_values([values.to_number(v) for v in flat])
        band = tick_band or TickBand()
        view = _initial_view(values, info.mapping, data, band, fixed_bounds)
        return cls(
            info=info,
            values=values,
            data_bounds=data,
            view=view,
            tick_band=band,
            fixed_bounds=fixed_bounds,
        )

    @property
    def info(self) -> AxisInfo:
        return self._info

    @property
    def axis_id(self) -> AxisId:
        return self._info.axis_id

    @property
    def label(self) -> str:
        return self._info.label

    @property
    def mapping(self) -> Mapping:
        return self._info.mapping

    @property
    def is_inverted(self) -> bool:
        return self._info.inverted

    @property
    def values(self) -> AxisValues:
        return self._values

    @property
    def kind(self) -> str:
        return self._values.kind

    @property
    def data_bounds(self) -> Bounds:
        return self._data_bounds

    @property
    def view(self) -> AxisView:
        return self._view

    @property
    def bounds(self) -> Bounds:
        return self._view.bounds

    @property
    def ticks(self) -> AxisTicks:
        return self._view.ticks

    @property
    def tick_band(self) -> TickBand:
        return self._tick_band

    @property
    def fixed_bounds(self) -> Bounds | None:
        return self._fixed_bounds

    @property
    def is_fixed(self) -> bool:
        return self._fixed_bounds is not None

    @property
    def controller(self) -> AxisController | None:
        return self._controller

    def to_display(self, value: Any) -> float:
        return self.mapping.forward(self._values.to_number(value))

    def from_display(self, value: float) -> Any:
        return self._values.from_number(self.mapping.inverse(value))

    def to_display_array(self, values: Any) -> np.ndarray:
        if isinstance(self._values, NumericValues):
            return self.mapping.forward_array(coerce_column(values, label=self.label))
        return np.asarray([self.to_display(v) for v in values], dtype=np.float64)

    def update_ticks_and_bounds(self, candidate: Bounds) -> None:
        """Regenerate enclosing ticks for ``candidate`` (native units) and grow the display bounds."""

        if self.is_fixed:
            LOGGER.debug("axis %r has pinned bounds; ignoring update to %s", self.label, candidate)
            return
        self._regrow(_widen(self._values, map_bounds(self.mapping, candidate)))

    def add_data(self, samples: Sequence[Bounds]) -> None:
        """Fold new series extents (native units) into ``data_bounds`` and grow the view to show them."""

        if not isinstance(self._values, NumericValues):
            raise UnsupportedAxisError(f"cannot add numeric bounds to a {self.kind} axis")
        data = Bounds.fold([self._data_bounds, *samples])
        display = map_bounds(self.mapping, data)
        self._data_bounds = data
        self._display_data_bounds = display
        if self.is_fixed:
            LOGGER.debug("axis %r has pinned bounds; data now spans %s", self.label, data)
            return
        if self._controller is not None:
            self._controller.include_data(display)
        self._regrow(self.bounds.union(display))

    def set_view(self, bounds: Bounds) -> None:
        """Show ``bounds`` (display units) with ticks kept inside them."""

        if self.is_fixed:
            return
        if bounds.is_degenerate:
            raise AxisConfigError(f"axis {self.label!r} view must have non-zero width")
        self._commit(AxisView(bounds=bounds, ticks=self._ticks_inside(bounds)))

    def translate(self, delta: float) -> None:
        self.set_view(self.bounds.shifted(delta))

    def scale(self, factor: float) -> None:
        if factor <= 0:
            raise ValueError("scale factor must be > 0")
        half = self.bounds.span / factor / 2.0
        center = self.bounds.center
        self.set_view(Bounds(center - half, center + half))

    def link(self, controller: AxisController) -> None:
        """Share this axis' view with every other axis linked to ``controller``.

        The first axis seeds the controller. A later axis adopts the shared
        view, grown first when it does not cover the joining axis' data. An
        axis with pinned bounds stays subscribed but keeps its own view.
        """

        self.unlink()
        self._controller = controller
        self._unsubscribe = controller.subscribe(self._receive)
        if self.is_fixed:
            LOGGER.debug("axis %r has pinned bounds; not following %r", self.label, controller.key)
            return
        shared = controller.include_data(self._display_data_bounds)
        current = controller.view
        if current is None:
            self._commit(self._view)
        elif current.bounds.contains_bounds(self._display_data_bounds):
            self._view = current
        else:
            self._regrow(current.bounds.union(shared))

    def unlink(self) -> None:
        if self._unsubscribe is not None:
            self._unsubscribe()
        self._unsubscribe = None
        self._controller = None

    def _ticks_inside(self, bounds: Bounds) -> AxisTicks:
        return self._values.ticks(bounds, self._tick_band, self.mapping, enclose=False)

    def _regrow(self, mapped: Bounds) -> None:
        # Display bounds never shrink below the data of any linked axis.
        data = self._display_data_bounds
        if self._controller is not None and self._controller.data_bounds is not None:
            data = self._controller.data_bounds
        ticks = self._values.ticks(mapped, self._tick_band, self.mapping, enclose=True)
        bounds = mapped.union(ticks.bounds).union(data)
        self._commit(AxisView(bounds=bounds, ticks=ticks))

    def _receive(self, view: AxisView) -> None:
        if self.is_fixed:
            return
        self._view = view

    def _commit(self, view: AxisView) -> None:
        if self._controller is not None:
            view = self._controller.update(view, source=self._receive, ticker=self._ticks_inside)
        self._view = view

    def __repr__(self) -> str:
        return f"Axis({self.label!r}, {self.axis_id}, kind={self.kind}, bounds={self.bounds})"


def _initial_view(
    values: AxisValues,
    mapping: Mapping,
    data: Bounds,
    band: TickBand,
    fixed_bounds: Bounds | None,
) -> AxisView:
    _check_mapping(values, mapping)
    if fixed_bounds is not None:
        pinned = _widen(values, map_bounds(mapping, fixed_bounds))
        return AxisView(bounds=pinned, ticks=values.ticks(pinned, band, mapping, enclose=False))
    mapped = _widen(values, map_bounds(mapping, data))
    ticks = values.ticks(mapped, band, mapping, enclose=True)
    return AxisView(bounds=mapped.union(ticks.bounds), ticks=ticks)


def _widen(values: AxisValues, bounds: Bounds) -> Bounds:
    # A single timestamp widens by one day either side.
    if isinstance(values, TemporalValues):
        return bounds.widened(0.0)
    return bounds.widened()


def _check_mapping(values: AxisValues, mapping: Mapping) -> None:
    if not isinstance(values, NumericValues) and not isinstance(mapping, LinearMapping):
        raise UnsupportedAxisError(f"{mapping.name} mapping is not supported for {values.kind} axes")
