from __future__ import annotations

import logging
from typing import Any, Literal, Mapping, Sequence

import numpy as np

from luvatrix_axes.axis import (
    HORIZONTAL_LOCATIONS,
    UNSUPPORTED_LOCATIONS,
    VERTICAL_LOCATIONS,
    Axis,
    AxisId,
    AxisLocation,
)
from luvatrix_axes.bounds import Bounds
from luvatrix_axes.controller import AxisView
from luvatrix_axes.errors import (
    AxisConfigError,
    MissingAxisError,
    ProjectionArityError,
    UnsupportedAxisError,
)
from luvatrix_axes.projection import CartesianProjection, Point, PolarProjection, Projection


LOGGER = logging.getLogger(__name__)

ProjectionKind = Literal["cartesian", "polar"]
PROJECTION_ARITY = 2


class CoordinateFrame:
    """Ordered axes plus a projection: data <-> normalized <-> linear <-> pixel.

    Points are passed in axis insertion order. The projection is rebuilt from
    the axes' current views whenever one of them (or the region) changes, so
    updates arriving through a linked controller are picked up automatically.
    """

    def __init__(
        self,
        axes: Mapping[AxisId, Axis],
        *,
        size: tuple[float, float],
        projection: ProjectionKind = "cartesian",
    ) -> None:
        if projection not in ("cartesian", "polar"):
            raise AxisConfigError(f"unknown projection: {projection!r}")
        ordered = dict(axes)
        if len(ordered) != PROJECTION_ARITY:
            raise ProjectionArityError(
                f"{projection} projection requires {PROJECTION_ARITY} axes, got {len(ordered)}"
            )
        for axis_id, axis in ordered.items():
            if axis_id.location in UNSUPPORTED_LOCATIONS:
                raise UnsupportedAxisError(f"axis location {axis_id.location.value} is not supported")
            if axis.axis_id != axis_id:
                raise AxisConfigError(f"axis registered as {axis_id} reports id {axis.axis_id}")
        self._axes = ordered
        self._kind: ProjectionKind = projection
        self._order = list(ordered.keys())
        self._roles = _resolve_roles(self._order, projection)
        self._size = _check_size(size)
        self._cached: tuple[tuple[AxisView, ...], tuple[float, float], Projection] | None = None

    @property
    def projection_kind(self) -> ProjectionKind:
        return self._kind

    @property
    def size(self) -> tuple[float, float]:
        return self._size

    @property
    def axis_ids(self) -> list[AxisId]:
        return list(self._order)

    @property
    def axes(self) -> dict[AxisId, Axis]:
        return dict(self._axes)

    @property
    def dimension(self) -> int:
        return len(self._axes)

    def __getitem__(self, axis_id: AxisId) -> Axis:
        axis = self._axes.get(axis_id)
        if axis is None:
            raise MissingAxisError(f"{axis_id} not contained in the frame")
        return axis

    def __contains__(self, axis_id: object) -> bool:
        return axis_id in self._axes

    def role_axes(self) -> tuple[Axis, Axis]:
        first, second = self._roles
        return (self._axes[self._order[first]], self._axes[self._order[second]])

    @property
    def projection(self) -> Projection:
        views = tuple(self._axes[k].view for k in self._order)
        cached = self._cached
        if cached is not None and cached[1] == self._size and all(a is b for a, b in zip(cached[0], views)):
            return cached[2]
        first, second = self.role_axes()
        if self._kind == "cartesian":
            proj: Projection = CartesianProjection.from_axes(first, second, self._size)
        else:
            proj = PolarProjection.from_axes(first, second, self._size)
        self._cached = (views, self._size, proj)
        return proj

    def linear_bounds(self) -> tuple[Bounds, Bounds]:
        first, second = self.role_axes()
        if self._kind == "cartesian":
            return (first.bounds, second.bounds)
        rho_max = first.bounds.span
        return (Bounds(-rho_max, rho_max), Bounds(-rho_max, rho_max))

    def data_to_normalized(self, point: Sequence[Any]) -> list[float]:
        self._check_point(point)
        return [self._axes[k].to_display(v) for k, v in zip(self._order, point)]

    def normalized_to_data(self, values: Sequence[float]) -> list[Any]:
        self._check_point(values)
        return [self._axes[k].from_display(v) for k, v in zip(self._order, values)]

    def normalized_to_linear(self, values: Sequence[float]) -> Point:
        self._check_point(values)
        first, second = self._roles
        return self.projection.map([values[first], values[second]])

    def linear_to_normalized(self, point: Point) -> list[float]:
        a, b = self.projection.inverse(point)
        out = [0.0, 0.0]
        first, second = self._roles
        out[first] = a
        out[second] = b
        return out

    def linear_to_pixel(self, point: Point) -> Point:
        proj = self.projection
        return (float(proj.x_transform.map(point[0])), float(proj.y_transform.map(point[1])))

    def pixel_to_linear(self, pixel: Point) -> Point:
        proj = self.projection
        return (float(proj.x_transform.inverse(pixel[0])), float(proj.y_transform.inverse(pixel[1])))

    def data_to_linear(self, point: Sequence[Any]) -> Point:
        return self.normalized_to_linear(self.data_to_normalized(point))

    def linear_to_data(self, point: Point) -> list[Any]:
        return self.normalized_to_data(self.linear_to_normalized(point))

    def project(self, point: Sequence[Any]) -> Point:
        return self.linear_to_pixel(self.data_to_linear(point))

    def unproject(self, pixel: Point) -> list[Any]:
        return self.linear_to_data(self.pixel_to_linear(pixel))

    data_to_pixel = project
    pixel_to_data = unproject

    def linear_arrays(self, columns: Sequence[Any]) -> tuple[np.ndarray, np.ndarray]:
        """Vectorised data -> linear for whole columns (one per axis, insertion order)."""

        self._check_point(columns)
        normalized = [self._axes[k].to_display_array(col) for k, col in zip(self._order, columns)]
        first, second = self._roles
        return self.projection.map_arrays(normalized[first], normalized[second])

    def pixel_arrays(self, columns: Sequence[Any]) -> tuple[np.ndarray, np.ndarray]:
        xs, ys = self.linear_arrays(columns)
        proj = self.projection
        return (proj.x_transform.map(xs), proj.y_transform.map(ys))

    def replace_axis(self, axis_id: AxisId, axis: Axis) -> None:
        if axis_id not in self._axes:
            raise MissingAxisError(f"{axis_id} not contained in the frame")
        if axis.axis_id != axis_id:
            raise AxisConfigError(f"cannot replace {axis_id} with an axis identified as {axis.axis_id}")
        self._axes[axis_id] = axis
        self._cached = None
        LOGGER.debug("replaced %s in %r", axis_id, self)

    def resize(self, width: float, height: float) -> None:
        self._size = _check_size((width, height))

    def translate(self, dx: float, dy: float) -> None:
        """Pan so that content follows a drag of ``(dx, dy)`` pixels."""

        if self._kind != "cartesian":
            raise UnsupportedAxisError("panning is only supported for cartesian frames")
        proj = self.projection
        x_axis, y_axis = self.role_axes()
        x_axis.translate(float(proj.x_transform.inverse(0.0) - proj.x_transform.inverse(dx)))
        y_axis.translate(float(proj.y_transform.inverse(0.0) - proj.y_transform.inverse(dy)))

    def scale(self, sx: float, sy: float | None = None) -> None:
        """Zoom by ``sx`` / ``sy`` (> 1 zooms in). Polar frames zoom the radius only."""

        first, second = self.role_axes()
        if self._kind == "cartesian":
            first.scale(sx)
            second.scale(sx if sy is None else sy)
            return
        if sx <= 0:
            raise ValueError("scale factor must be > 0")
        b = first.bounds
        first.set_view(Bounds(b.min, b.min + b.span / sx))

    def _check_point(self, point: Sequence[Any]) -> None:
        if len(point) != len(self._order):
            raise ProjectionArityError(f"expected {len(self._order)} coordinates, got {len(point)}")

    def __repr__(self) -> str:
        ids = ", ".join(str(k) for k in self._order)
        return f"CoordinateFrame({self._kind}, [{ids}], size={self._size})"


def _resolve_roles(order: list[AxisId], kind: ProjectionKind) -> tuple[int, int]:
    if kind == "cartesian":
        first_role, second_role = HORIZONTAL_LOCATIONS, VERTICAL_LOCATIONS
        names = ("horizontal", "vertical")
    else:
        first_role, second_role = frozenset({AxisLocation.RADIAL}), frozenset({AxisLocation.ANGULAR})
        names = ("radial", "angular")

    first = [i for i, k in enumerate(order) if k.location in first_role]
    second = [i for i, k in enumerate(order) if k.location in second_role]
    if len(first) != 1:
        raise MissingAxisError(f"{kind} frame needs exactly one {names[0]} axis, found {len(first)}")
    if len(second) != 1:
        raise MissingAxisError(f"{kind} frame needs exactly one {names[1]} axis, found {len(second)}")
    return (first[0], second[0])


def _check_size(size: tuple[float, float]) -> tuple[float, float]:
    width, height = float(size[0]), float(size[1])
    if width <= 0 or height <= 0:
        raise AxisConfigError("frame width/height must be > 0")
    return (width, height)
