from __future__ import annotations

from dataclasses import dataclass
import math
from typing import ClassVar, Sequence, TypeAlias

import numpy as np

from luvatrix_axes.axis import Axis
from luvatrix_axes.bounds import Bounds
from luvatrix_axes.errors import AxisConfigError, ProjectionArityError


Point = tuple[float, float]


@dataclass(frozen=True)
class PixelTransform:
    """1-D affine map from a linear axis coordinate to pixels."""

    origin: float
    scale: float
    invert_size: float | None = None

    @classmethod
    def from_bounds(cls, bounds: Bounds, extent: float, *, inverted: bool = False) -> PixelTransform:
        if extent <= 0:
            raise AxisConfigError(f"pixel extent must be > 0, got {extent!r}")
        if bounds.span <= 0:
            raise AxisConfigError(f"cannot scale zero-width bounds {bounds} to pixels")
        return cls(
            origin=bounds.min,
            scale=float(extent) / bounds.span,
            invert_size=float(extent) if inverted else None,
        )

    def map(self, x: float | np.ndarray) -> float | np.ndarray:
        result = (x - self.origin) * self.scale
        if self.invert_size is not None:
            result = self.invert_size - result
        return result

    def inverse(self, px: float | np.ndarray) -> float | np.ndarray:
        result = px
        if self.invert_size is not None:
            result = self.invert_size - result
        return result / self.scale + self.origin


def _check_arity(coords: Sequence[float], name: str) -> None:
    if len(coords) != 2:
        raise ProjectionArityError(f"{name} requires two coordinates, got {len(coords)}")


@dataclass(frozen=True)
class CartesianProjection:
    x_transform: PixelTransform
    y_transform: PixelTransform
    arity: ClassVar[int] = 2

    @classmethod
    def from_axes(cls, x_axis: Axis, y_axis: Axis, size: tuple[float, float]) -> CartesianProjection:
        width, height = size
        return cls(
            x_transform=PixelTransform.from_bounds(x_axis.bounds, width, inverted=x_axis.is_inverted),
            y_transform=PixelTransform.from_bounds(y_axis.bounds, height, inverted=y_axis.is_inverted),
        )

    def map(self, coords: Sequence[float]) -> Point:
        _check_arity(coords, "CartesianProjection")
        return (float(coords[0]), float(coords[1]))

    def inverse(self, linear: Point) -> Point:
        return (float(linear[0]), float(linear[1]))

    def map_arrays(self, a: np.ndarray, b: np.ndarray) -> tuple[np.ndarray, np.ndarray]:
        return (np.asarray(a, dtype=np.float64), np.asarray(b, dtype=np.float64))


@dataclass(frozen=True)
class PolarProjection:
    """Radius/angle to x/y with angle 0 pointing up and increasing clockwise (degrees)."""

    x_transform: PixelTransform
    y_transform: PixelTransform
    radial_bounds: Bounds
    theta_origin: float = 0.0
    inverted_r: bool = False
    inverted_theta: bool = False
    arity: ClassVar[int] = 2

    @classmethod
    def from_axes(cls, radial_axis: Axis, angular_axis: Axis, size: tuple[float, float]) -> PolarProjection:
        width, height = size
        r_bounds = radial_axis.bounds
        rho_max = r_bounds.span
        extent = Bounds(-rho_max, rho_max)
        return cls(
            x_transform=PixelTransform.from_bounds(extent, width),
            y_transform=PixelTransform.from_bounds(extent, height),
            radial_bounds=r_bounds,
            theta_origin=angular_axis.bounds.min,
            inverted_r=radial_axis.is_inverted,
            inverted_theta=angular_axis.is_inverted,
        )

    def _rho(self, r):
        if self.inverted_r:
            return self.radial_bounds.max - r
        return r - self.radial_bounds.min

    def _r(self, rho):
        if self.inverted_r:
            return self.radial_bounds.max - rho
        return rho + self.radial_bounds.min

    def map(self, coords: Sequence[float]) -> Point:
        _check_arity(coords, "PolarProjection")
        rho = self._rho(float(coords[0]))
        theta = -float(coords[1]) if self.inverted_theta else float(coords[1])
        rad = math.radians(theta)
        return (rho * math.sin(rad), -rho * math.cos(rad))

    def inverse(self, linear: Point) -> Point:
        x, y = float(linear[0]), float(linear[1])
        rho = math.hypot(x, y)
        theta = math.degrees(math.atan2(x, -y))
        if self.inverted_theta:
            theta = -theta
        theta = self.theta_origin + (theta - self.theta_origin) % 360.0
        return (self._r(rho), theta)

    def map_arrays(self, r: np.ndarray, theta: np.ndarray) -> tuple[np.ndarray, np.ndarray]:
        rho = self._rho(np.asarray(r, dtype=np.float64))
        t = np.asarray(theta, dtype=np.float64)
        if self.inverted_theta:
            t = -t
        rad = np.radians(t)
        return (rho * np.sin(rad), -rho * np.cos(rad))


Projection: TypeAlias = CartesianProjection | PolarProjection
