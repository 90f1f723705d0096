from __future__ import annotations

import logging
from typing import Any, Generic, Hashable, Iterable, Sequence, TypeVar

import numpy as np

from luvatrix_axes.errors import AxisDataError
from luvatrix_axes.frame import CoordinateFrame
from luvatrix_axes.quadtree import DEFAULT_CAPACITY, DEFAULT_MAX_DEPTH, QuadTree, Rect, padded_extent


LOGGER = logging.getLogger(__name__)

T = TypeVar("T", bound=Hashable)


class SelectionIndex(Generic[T]):
    """Hit testing for one frame: points indexed in linear space, queried in pixels.

    The index is rebuilt wholesale; call ``rebuild`` after the data or the
    radial bounds of a polar frame change.
    """

    def __init__(
        self,
        frame: CoordinateFrame,
        *,
        capacity: int = DEFAULT_CAPACITY,
        max_depth: int = DEFAULT_MAX_DEPTH,
    ) -> None:
        self._frame = frame
        self._capacity = capacity
        self._max_depth = max_depth
        self._tree: QuadTree[T] = QuadTree(self._empty_bounds(), capacity=capacity, max_depth=max_depth)

    @classmethod
    def build(
        cls,
        frame: CoordinateFrame,
        ids: Iterable[T],
        columns: Sequence[Any],
        *,
        capacity: int = DEFAULT_CAPACITY,
        max_depth: int = DEFAULT_MAX_DEPTH,
    ) -> SelectionIndex[T]:
        index: SelectionIndex[T] = cls(frame, capacity=capacity, max_depth=max_depth)
        index.rebuild(ids, columns)
        return index

    @property
    def frame(self) -> CoordinateFrame:
        return self._frame

    @property
    def tree(self) -> QuadTree[T]:
        return self._tree

    def __len__(self) -> int:
        return len(self._tree)

    def rebuild(self, ids: Iterable[T], columns: Sequence[Any]) -> None:
        id_arr = list(ids)
        xs, ys = self._frame.linear_arrays(columns)
        if xs.shape != (len(id_arr),):
            raise AxisDataError(f"expected {len(id_arr)} coordinates per column, got {xs.shape[0]}")
        finite = np.isfinite(xs) & np.isfinite(ys)
        if not np.all(finite):
            LOGGER.debug("skipping %d points without finite coordinates", int(np.count_nonzero(~finite)))
            id_arr = [i for i, ok in zip(id_arr, finite.tolist()) if ok]
            xs = xs[finite]
            ys = ys[finite]
        bounds = padded_extent(xs, ys) if xs.size else self._empty_bounds()
        self._tree = QuadTree.build(
            id_arr,
            xs,
            ys,
            bounds=bounds,
            capacity=self._capacity,
            max_depth=self._max_depth,
        )

    def select_point(self, pixel: tuple[float, float], radius_px: float) -> T | None:
        """Nearest point whose pixel distance to ``pixel`` is at most ``radius_px``."""

        if radius_px < 0 or len(self._tree) == 0:
            return None
        proj = self._frame.projection
        sx = abs(proj.x_transform.scale)
        sy = abs(proj.y_transform.scale)
        lx, ly = self._frame.pixel_to_linear(pixel)
        # A pixel circle is an ellipse in linear space when the scales differ.
        search = Rect.around((lx, ly), radius_px / sx, radius_px / sy)
        best: T | None = None
        best_d = radius_px * radius_px
        found = False
        for item, (x, y) in self._tree.query_rect_entries(search):
            dx = (x - lx) * sx
            dy = (y - ly) * sy
            d = dx * dx + dy * dy
            if d < best_d or (not found and d == best_d):
                best = item
                best_d = d
                found = True
        return best

    def select_rect(self, corner_a: tuple[float, float], corner_b: tuple[float, float]) -> list[T]:
        """Ids inside the drag box spanned by two pixel corners."""

        a = self._frame.pixel_to_linear(corner_a)
        b = self._frame.pixel_to_linear(corner_b)
        return self._tree.query_rect(Rect.from_corners(a, b))

    def _empty_bounds(self) -> Rect:
        xb, yb = self._frame.linear_bounds()
        return Rect(xb.min, yb.min, xb.max, yb.max)
