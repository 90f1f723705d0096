from luvatrix_axes.axis import (
    Axis,
    AxisId,
    AxisInfo,
    AxisLocation,
    CategoricalValues,
    NumericValues,
    TemporalValues,
)
from luvatrix_axes.bounds import Bounds
from luvatrix_axes.config import AxisConfig, ChartConfig
from luvatrix_axes.controller import AxisController, AxisLinkRegistry, AxisView
from luvatrix_axes.errors import (
    AxisConfigError,
    AxisDataError,
    InvalidBoundsError,
    MissingAxisError,
    OutOfBoundsError,
    ProjectionArityError,
    UnsupportedAxisError,
)
from luvatrix_axes.frame import CoordinateFrame
from luvatrix_axes.mapping import LinearMapping, LogMapping, mapping_from_name
from luvatrix_axes.projection import CartesianProjection, PixelTransform, PolarProjection
from luvatrix_axes.quadtree import QuadTree, Rect
from luvatrix_axes.selection import SelectionIndex
from luvatrix_axes.ticks import AxisTicks, NiceNumber, TickBand, linear_ticks, log_ticks

__all__ = [
    "Axis",
    "AxisConfig",
    "AxisConfigError",
    "AxisController",
    "AxisDataError",
    "AxisId",
    "AxisInfo",
    "AxisLinkRegistry",
    "AxisLocation",
    "AxisTicks",
    "AxisView",
    "Bounds",
    "CartesianProjection",
    "CategoricalValues",
    "ChartConfig",
    "CoordinateFrame",
    "InvalidBoundsError",
    "LinearMapping",
    "LogMapping",
    "MissingAxisError",
    "NiceNumber",
    "NumericValues",
    "OutOfBoundsError",
    "PixelTransform",
    "PolarProjection",
    "ProjectionArityError",
    "QuadTree",
    "Rect",
    "SelectionIndex",
    "TemporalValues",
    "TickBand",
    "UnsupportedAxisError",
    "linear_ticks",
    "log_ticks",
    "mapping_from_name",
]
