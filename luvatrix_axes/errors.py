from __future__ import annotations


class AxisConfigError(ValueError):
    """Invalid axis, frame or index configuration."""


class InvalidBoundsError(AxisConfigError):
    pass


class ProjectionArityError(AxisConfigError):
    pass


class MissingAxisError(AxisConfigError):
    pass


class OutOfBoundsError(ValueError):
    pass


class UnsupportedAxisError(NotImplementedError):
    pass


class AxisDataError(ValueError):
    pass
