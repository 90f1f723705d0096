from __future__ import annotations

from dataclasses import dataclass, field, replace
import logging
import os
from pathlib import Path
import tomllib
from typing import Any, Mapping

from luvatrix_axes.axis import AxisId, AxisInfo, AxisLocation
from luvatrix_axes.bounds import Bounds
from luvatrix_axes.errors import AxisConfigError
from luvatrix_axes.mapping import mapping_from_name
from luvatrix_axes.quadtree import DEFAULT_CAPACITY, DEFAULT_MAX_DEPTH
from luvatrix_axes.ticks import DEFAULT_MAX_TICKS, DEFAULT_MIN_TICKS, TickBand


LOGGER = logging.getLogger(__name__)

ENV_PREFIX = "LUVATRIX_AXES_"
_ENV_FIELDS = ("min_ticks", "max_ticks", "quadtree_capacity", "quadtree_max_depth")


@dataclass(frozen=True)
class AxisConfig:
    mapping: str = "linear"
    inverted: bool = False
    fixed_bounds: Bounds | None = None

    def __post_init__(self) -> None:
        mapping_from_name(self.mapping)

    @classmethod
    def from_mapping(cls, raw: Mapping[str, Any], *, name: str = "axis") -> AxisConfig:
        if not isinstance(raw, Mapping):
            raise AxisConfigError(f"{name} must be a table")
        unknown = set(raw) - {"mapping", "inverted", "fixed_bounds"}
        if unknown:
            raise AxisConfigError(f"{name} has unknown fields: {', '.join(sorted(unknown))}")
        mapping = raw.get("mapping", "linear")
        if not isinstance(mapping, str):
            raise AxisConfigError(f"{name}.mapping must be a string")
        inverted = raw.get("inverted", False)
        if not isinstance(inverted, bool):
            raise AxisConfigError(f"{name}.inverted must be a boolean")
        return cls(
            mapping=mapping,
            inverted=inverted,
            fixed_bounds=_coerce_bounds(raw.get("fixed_bounds"), f"{name}.fixed_bounds"),
        )

    def axis_info(self, label: str, axis_id: AxisId) -> AxisInfo:
        return AxisInfo(
            label=label,
            axis_id=axis_id,
            inverted=self.inverted,
            mapping=mapping_from_name(self.mapping),
        )


@dataclass(frozen=True)
class ChartConfig:
    """Chart-wide defaults: tick density, quadtree shape and per-location axis settings."""

    min_ticks: int = DEFAULT_MIN_TICKS
    max_ticks: int = DEFAULT_MAX_TICKS
    quadtree_capacity: int = DEFAULT_CAPACITY
    quadtree_max_depth: int = DEFAULT_MAX_DEPTH
    axes: dict[AxisLocation, AxisConfig] = field(default_factory=dict)

    def __post_init__(self) -> None:
        TickBand(min_ticks=self.min_ticks, max_ticks=self.max_ticks)
        if self.quadtree_capacity < 1:
            raise AxisConfigError("quadtree_capacity must be >= 1")
        if self.quadtree_max_depth < 0:
            raise AxisConfigError("quadtree_max_depth must be >= 0")

    @property
    def tick_band(self) -> TickBand:
        return TickBand(min_ticks=self.min_ticks, max_ticks=self.max_ticks)

    def axis_config(self, location: AxisLocation) -> AxisConfig:
        return self.axes.get(location, AxisConfig())

    def axis_info(self, label: str, axis_id: AxisId) -> AxisInfo:
        return self.axis_config(axis_id.location).axis_info(label, axis_id)

    @classmethod
    def from_mapping(cls, raw: Mapping[str, Any]) -> ChartConfig:
        known = set(_ENV_FIELDS) | {"axes"}
        unknown = set(raw) - known
        if unknown:
            raise AxisConfigError(f"config has unknown fields: {', '.join(sorted(unknown))}")
        defaults = cls()
        values = {name: _coerce_int(raw.get(name, getattr(defaults, name)), name) for name in _ENV_FIELDS}
        raw_axes = raw.get("axes", {})
        if not isinstance(raw_axes, Mapping):
            raise AxisConfigError("axes must be a table keyed by axis location")
        axes: dict[AxisLocation, AxisConfig] = {}
        for key, axis_raw in raw_axes.items():
            try:
                location = AxisLocation(key)
            except ValueError as exc:
                raise AxisConfigError(f"unknown axis location: {key!r}") from exc
            axes[location] = AxisConfig.from_mapping(axis_raw, name=f"axes.{key}")
        return cls(axes=axes, **values)

    @classmethod
    def load(cls, path: str | Path) -> ChartConfig:
        config_path = Path(path)
        if not config_path.exists():
            raise FileNotFoundError(f"axes config not found: {config_path}")
        with config_path.open("rb") as f:
            try:
                raw = tomllib.load(f)
            except tomllib.TOMLDecodeError as exc:
                raise AxisConfigError(f"invalid TOML in {config_path}: {exc}") from exc
        config = cls.from_mapping(raw)
        LOGGER.debug("loaded axes config from %s: %r", config_path, config)
        return config

    @classmethod
    def from_env(cls, base: ChartConfig | None = None, *, prefix: str = ENV_PREFIX) -> ChartConfig:
        """Apply ``<prefix>MIN_TICKS``-style overrides on top of ``base``."""

        config = base or cls()
        overrides: dict[str, int] = {}
        for name in _ENV_FIELDS:
            env_var = prefix + name.upper()
            raw = os.getenv(env_var)
            if raw is None or not raw.strip():
                continue
            try:
                overrides[name] = int(raw.strip())
            except ValueError as exc:
                raise AxisConfigError(f"{env_var} must be an integer, got {raw!r}") from exc
        if not overrides:
            return config
        LOGGER.debug("axes config overrides from environment: %s", overrides)
        return replace(config, **overrides)


def _coerce_int(value: Any, name: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise AxisConfigError(f"{name} must be an integer")
    return value


def _coerce_bounds(value: Any, name: str) -> Bounds | None:
    if value is None:
        return None
    if not isinstance(value, (list, tuple)) or len(value) != 2:
        raise AxisConfigError(f"{name} must be a [min, max] pair")
    lo, hi = value
    if isinstance(lo, bool) or isinstance(hi, bool) or not isinstance(lo, (int, float)) or not isinstance(hi, (int, float)):
        raise AxisConfigError(f"{name} must contain numbers")
    return Bounds(float(lo), float(hi))
