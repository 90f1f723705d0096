from __future__ import annotations

from dataclasses import dataclass
import heapq
import logging
import math
from typing import Generic, Hashable, Iterable, TypeVar

import numpy as np

from luvatrix_axes.errors import AxisConfigError, AxisDataError, OutOfBoundsError


LOGGER = logging.getLogger(__name__)

T = TypeVar("T", bound=Hashable)

DEFAULT_CAPACITY = 10
DEFAULT_MAX_DEPTH = 10
_LEAF = -1


@dataclass(frozen=True)
class Rect:
    xmin: float
    ymin: float
    xmax: float
    ymax: float

    def __post_init__(self) -> None:
        if self.xmin > self.xmax or self.ymin > self.ymax:
            raise AxisConfigError(f"invalid rectangle: {self}")

    @classmethod
    def from_corners(cls, a: tuple[float, float], b: tuple[float, float]) -> Rect:
        return cls(min(a[0], b[0]), min(a[1], b[1]), max(a[0], b[0]), max(a[1], b[1]))

    @classmethod
    def around(cls, point: tuple[float, float], rx: float, ry: float | None = None) -> Rect:
        ry = rx if ry is None else ry
        x, y = point
        return cls(x - rx, y - ry, x + rx, y + ry)

    @property
    def width(self) -> float:
        return self.xmax - self.xmin

    @property
    def height(self) -> float:
        return self.ymax - self.ymin

    @property
    def center(self) -> tuple[float, float]:
        return (0.5 * (self.xmin + self.xmax), 0.5 * (self.ymin + self.ymax))

    def contains(self, x: float, y: float) -> bool:
        return self.xmin <= x <= self.xmax and self.ymin <= y <= self.ymax

    def overlaps(self, other: Rect) -> bool:
        return not (
            other.xmin > self.xmax or other.xmax < self.xmin or other.ymin > self.ymax or other.ymax < self.ymin
        )

    def distance_sq(self, x: float, y: float) -> float:
        dx = max(self.xmin - x, 0.0, x - self.xmax)
        dy = max(self.ymin - y, 0.0, y - self.ymax)
        return dx * dx + dy * dy


class QuadTree(Generic[T]):
    """Point quadtree stored as an arena of nodes addressed by integer handles.

    A leaf keeps up to ``capacity`` entries and splits into four quadrants on
    overflow, except at ``max_depth`` where it accepts any number of entries.
    Node ``h`` has its children at ``first_child[h] .. first_child[h] + 3``
    (top-left, top-right, bottom-left, bottom-right, with "top" meaning the
    lower y half).
    """

    def __init__(self, bounds: Rect, *, capacity: int = DEFAULT_CAPACITY, max_depth: int = DEFAULT_MAX_DEPTH) -> None:
        if capacity < 1:
            raise AxisConfigError("quadtree capacity must be >= 1")
        if max_depth < 0:
            raise AxisConfigError("quadtree max_depth must be >= 0")
        if bounds.width <= 0 or bounds.height <= 0:
            raise AxisConfigError(f"quadtree bounds must have positive area: {bounds}")
        self._bounds = bounds
        self._capacity = int(capacity)
        self._max_depth = int(max_depth)
        self.clear()

    @classmethod
    def build(
        cls,
        ids: Iterable[T],
        xs: np.ndarray,
        ys: np.ndarray,
        *,
        bounds: Rect | None = None,
        capacity: int = DEFAULT_CAPACITY,
        max_depth: int = DEFAULT_MAX_DEPTH,
    ) -> QuadTree[T]:
        x_arr = np.asarray(xs, dtype=np.float64)
        y_arr = np.asarray(ys, dtype=np.float64)
        if bounds is None:
            bounds = padded_extent(x_arr, y_arr)
        tree: QuadTree[T] = cls(bounds, capacity=capacity, max_depth=max_depth)
        tree.insert_many(ids, x_arr, y_arr)
        return tree

    @property
    def bounds(self) -> Rect:
        return self._bounds

    @property
    def capacity(self) -> int:
        return self._capacity

    @property
    def max_depth(self) -> int:
        return self._max_depth

    @property
    def node_count(self) -> int:
        return len(self._depth)

    @property
    def depth(self) -> int:
        return max(self._depth)

    def __len__(self) -> int:
        return len(self._ids)

    def clear(self) -> None:
        """Drop every node and entry; the root is recreated empty."""

        self._ids: list[T] = []
        self._xs: list[float] = []
        self._ys: list[float] = []
        self._rect: list[Rect] = [self._bounds]
        self._depth: list[int] = [0]
        self._first_child: list[int] = [_LEAF]
        self._entries: list[list[int]] = [[]]

    def insert(self, item: T, point: tuple[float, float]) -> None:
        x, y = float(point[0]), float(point[1])
        if not self._bounds.contains(x, y):
            raise OutOfBoundsError(f"point ({x}, {y}) lies outside the index bounds {self._bounds}")
        idx = len(self._ids)
        self._ids.append(item)
        self._xs.append(x)
        self._ys.append(y)
        self._place(0, idx)

    def insert_many(self, ids: Iterable[T], xs: np.ndarray, ys: np.ndarray) -> None:
        id_list = list(ids)
        x_arr = np.asarray(xs, dtype=np.float64)
        y_arr = np.asarray(ys, dtype=np.float64)
        if x_arr.shape != (len(id_list),) or y_arr.shape != (len(id_list),):
            raise AxisDataError("ids, xs and ys must have the same length")
        b = self._bounds
        inside = (x_arr >= b.xmin) & (x_arr <= b.xmax) & (y_arr >= b.ymin) & (y_arr <= b.ymax)
        if not np.all(inside):
            bad = int(np.flatnonzero(~inside)[0])
            raise OutOfBoundsError(
                f"point {id_list[bad]!r} ({x_arr[bad]}, {y_arr[bad]}) lies outside the index bounds {b}"
            )
        for item, x, y in zip(id_list, x_arr.tolist(), y_arr.tolist()):
            idx = len(self._ids)
            self._ids.append(item)
            self._xs.append(x)
            self._ys.append(y)
            self._place(0, idx)
        LOGGER.debug("indexed %d points into %d nodes", len(id_list), self.node_count)

    def query_rect(self, rect: Rect) -> list[T]:
        return [self._ids[i] for i in self._rect_indices(rect)]

    def query_rect_entries(self, rect: Rect) -> list[tuple[T, tuple[float, float]]]:
        return [(self._ids[i], (self._xs[i], self._ys[i])) for i in self._rect_indices(rect)]

    def query_point(self, point: tuple[float, float], max_distance: float) -> T | None:
        """Closest entry within ``max_distance`` of ``point``, or None."""

        if max_distance < 0:
            return None
        x, y = float(point[0]), float(point[1])
        best = -1
        best_d = max_distance * max_distance
        for i in self._rect_indices(Rect.around((x, y), max_distance)):
            dx = self._xs[i] - x
            dy = self._ys[i] - y
            d = dx * dx + dy * dy
            if d < best_d or (best < 0 and d == best_d):
                best = i
                best_d = d
        return None if best < 0 else self._ids[best]

    def nearest(self, point: tuple[float, float]) -> T | None:
        """Closest entry to ``point`` without a distance limit (best-first search)."""

        if not self._ids:
            return None
        x, y = float(point[0]), float(point[1])
        best = -1
        best_d = math.inf
        heap: list[tuple[float, int]] = [(self._rect[0].distance_sq(x, y), 0)]
        while heap:
            node_d, node = heapq.heappop(heap)
            if node_d > best_d:
                break
            first = self._first_child[node]
            if first == _LEAF:
                for i in self._entries[node]:
                    dx = self._xs[i] - x
                    dy = self._ys[i] - y
                    d = dx * dx + dy * dy
                    if d < best_d:
                        best = i
                        best_d = d
                continue
            for child in range(first, first + 4):
                child_d = self._rect[child].distance_sq(x, y)
                if child_d <= best_d:
                    heapq.heappush(heap, (child_d, child))
        return None if best < 0 else self._ids[best]

    def _rect_indices(self, rect: Rect) -> list[int]:
        out: list[int] = []
        stack = [0]
        while stack:
            node = stack.pop()
            if not self._rect[node].overlaps(rect):
                continue
            first = self._first_child[node]
            if first == _LEAF:
                for i in self._entries[node]:
                    if rect.contains(self._xs[i], self._ys[i]):
                        out.append(i)
            else:
                stack.extend(range(first, first + 4))
        return out

    def _place(self, node: int, idx: int) -> None:
        x = self._xs[idx]
        y = self._ys[idx]
        while True:
            first = self._first_child[node]
            if first == _LEAF:
                entries = self._entries[node]
                if len(entries) < self._capacity or self._depth[node] >= self._max_depth:
                    entries.append(idx)
                    return
                self._split(node)
                first = self._first_child[node]
            node = first + self._quadrant(node, x, y)

    def _quadrant(self, node: int, x: float, y: float) -> int:
        cx, cy = self._rect[node].center
        return (0 if x <= cx else 1) + (0 if y <= cy else 2)

    def _split(self, node: int) -> None:
        r = self._rect[node]
        cx, cy = r.center
        first = len(self._rect)
        self._rect.extend(
            [
                Rect(r.xmin, r.ymin, cx, cy),
                Rect(cx, r.ymin, r.xmax, cy),
                Rect(r.xmin, cy, cx, r.ymax),
                Rect(cx, cy, r.xmax, r.ymax),
            ]
        )
        depth = self._depth[node] + 1
        self._depth.extend([depth] * 4)
        self._first_child.extend([_LEAF] * 4)
        self._entries.extend([[], [], [], []])
        self._first_child[node] = first
        moved = self._entries[node]
        self._entries[node] = []
        for idx in moved:
            self._place(first + self._quadrant(node, self._xs[idx], self._ys[idx]), idx)


def padded_extent(xs: np.ndarray, ys: np.ndarray, pad_ratio: float = 1e-6) -> Rect:
    finite = np.isfinite(xs) & np.isfinite(ys)
    if not np.any(finite):
        raise AxisDataError("cannot index points without finite coordinates")
    xmin, xmax = float(np.min(xs[finite])), float(np.max(xs[finite]))
    ymin, ymax = float(np.min(ys[finite])), float(np.max(ys[finite]))
    pad_x = max((xmax - xmin) * pad_ratio, 1e-9 * max(1.0, abs(xmin), abs(xmax)))
    pad_y = max((ymax - ymin) * pad_ratio, 1e-9 * max(1.0, abs(ymin), abs(ymax)))
    return Rect(xmin - pad_x, ymin - pad_y, xmax + pad_x, ymax + pad_y)
