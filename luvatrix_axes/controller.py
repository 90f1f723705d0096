from __future__ import annotations

from dataclasses import dataclass
import logging
from typing import Callable, Hashable

from luvatrix_axes.bounds import Bounds
from luvatrix_axes.errors import InvalidBoundsError
from luvatrix_axes.ticks import AxisTicks, TickBand, linear_ticks


LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class AxisView:
    """Displayed bounds and the ticks generated for them, replaced as one value."""

    bounds: Bounds
    ticks: AxisTicks


AxisSubscriber = Callable[[AxisView], None]
TickFactory = Callable[[Bounds], AxisTicks]


def _linear_ticks_inside(bounds: Bounds) -> AxisTicks:
    return linear_ticks(bounds, TickBand(), enclose=False)


class AxisController:
    """Broadcasts view updates between axes that share one logical dimension.

    The controller also keeps the union of the linked axes' data extents
    (``data_bounds``) and an optional ``max_bounds`` limit. A view that leaves
    the limit is cut back to it and re-ticked with the last tick factory an
    axis handed to ``update``.
    """

    def __init__(
        self,
        key: Hashable,
        view: AxisView | None = None,
        *,
        max_bounds: Bounds | None = None,
        ticker: TickFactory | None = None,
    ) -> None:
        self._key = key
        self._max_bounds = max_bounds
        self._ticker = ticker or _linear_ticks_inside
        self._data_bounds: Bounds | None = None
        self._subscribers: list[AxisSubscriber] = []
        self._view = None if view is None else self._clamp(view)

    @property
    def key(self) -> Hashable:
        return self._key

    @property
    def view(self) -> AxisView | None:
        return self._view

    @property
    def max_bounds(self) -> Bounds | None:
        return self._max_bounds

    @property
    def data_bounds(self) -> Bounds | None:
        return self._data_bounds

    @property
    def subscriber_count(self) -> int:
        return len(self._subscribers)

    def subscribe(self, subscriber: AxisSubscriber) -> Callable[[], None]:
        self._subscribers.append(subscriber)

        def _unsubscribe() -> None:
            self.unsubscribe(subscriber)

        return _unsubscribe

    def unsubscribe(self, subscriber: AxisSubscriber) -> None:
        if subscriber in self._subscribers:
            self._subscribers.remove(subscriber)

    def include_data(self, bounds: Bounds) -> Bounds:
        """Fold a linked axis' data extent (display units) into ``data_bounds``."""

        if self._data_bounds is None:
            self._data_bounds = bounds
        else:
            self._data_bounds = self._data_bounds.union(bounds)
        return self._data_bounds

    def update(
        self,
        view: AxisView,
        *,
        source: AxisSubscriber | None = None,
        ticker: TickFactory | None = None,
    ) -> AxisView:
        """Store ``view`` (clamped to ``max_bounds``) and deliver it to every subscriber but ``source``."""

        if ticker is not None:
            self._ticker = ticker
        view = self._clamp(view)
        self._publish(view, source)
        return view

    def update_max_bounds_union(self, bounds: Bounds) -> None:
        """Grow ``max_bounds`` to cover ``bounds``; the first call just sets it."""

        self._set_max_bounds(bounds if self._max_bounds is None else self._max_bounds.union(bounds))

    def update_max_bounds_intersection(self, bounds: Bounds) -> None:
        """Shrink ``max_bounds`` to its overlap with ``bounds``; the first call just sets it.

        Disjoint limits raise ``InvalidBoundsError``.
        """

        self._set_max_bounds(bounds if self._max_bounds is None else self._max_bounds.intersection(bounds))

    def _set_max_bounds(self, limit: Bounds) -> None:
        if limit.is_degenerate:
            raise InvalidBoundsError(f"axis {self._key!r} max bounds must have non-zero width, got {limit}")
        self._max_bounds = limit
        LOGGER.debug("axis %r max bounds set to %s", self._key, limit)
        if self._view is None:
            return
        clamped = self._clamp(self._view)
        if clamped is not self._view:
            self._publish(clamped, None)

    def _publish(self, view: AxisView, source: AxisSubscriber | None) -> None:
        self._view = view
        LOGGER.debug("axis %r updated to %s", self._key, view.bounds)
        for subscriber in list(self._subscribers):
            if source is not None and subscriber == source:
                continue
            subscriber(view)

    def _clamp(self, view: AxisView) -> AxisView:
        limit = self._max_bounds
        if limit is None or limit.contains_bounds(view.bounds):
            return view
        lo = max(view.bounds.min, limit.min)
        hi = min(view.bounds.max, limit.max)
        bounds = Bounds(lo, hi) if lo < hi else limit
        return AxisView(bounds=bounds, ticks=self._ticker(bounds))


class AxisLinkRegistry:
    """One controller per axis identity, shared by every frame that links it."""

    def __init__(self) -> None:
        self._controllers: dict[Hashable, AxisController] = {}

    def controller(self, key: Hashable, *, max_bounds: Bounds | None = None) -> AxisController:
        """Controller for ``key``; ``max_bounds`` only applies when it is created here."""

        ctrl = self._controllers.get(key)
        if ctrl is None:
            ctrl = AxisController(key, max_bounds=max_bounds)
            self._controllers[key] = ctrl
        return ctrl

    def __contains__(self, key: object) -> bool:
        return key in self._controllers

    def keys(self) -> list[Hashable]:
        return list(self._controllers.keys())
