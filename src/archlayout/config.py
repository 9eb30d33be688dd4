"""Layout geometry and heuristic settings."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, fields
from typing import Any

from archlayout.errors import ConfigError

# ─── Geometry defaults (pixels) ───────────────────────────────────────────────

NODE_WIDTH: int = 200
NODE_HEIGHT: int = 120
PADDING: int = 40  # outer canvas padding on every side
H_SPACING: int = 80  # gap between cells along x
V_SPACING: int = 60  # gap between cells along y
TITLE_MARGIN: int = 36  # heading strip at the top of a container box
INNER_PADDING: int = 32  # total container padding per axis, split evenly
CROSSING_ITERATIONS: int = 8
CURVE_OFFSET: int = 40


@dataclass(frozen=True)
class LayoutConfig:
    """Settings for one layout call. Use ``dataclasses.replace`` to override."""

    node_width: int = NODE_WIDTH
    node_height: int = NODE_HEIGHT
    padding: int = PADDING
    horizontal_spacing: int = H_SPACING
    vertical_spacing: int = V_SPACING
    title_margin: int = TITLE_MARGIN
    inner_padding: int = INNER_PADDING
    crossing_iterations: int = CROSSING_ITERATIONS
    curve_offset: int = CURVE_OFFSET
    curved_edges: bool = False

    def __post_init__(self) -> None:
        for f in fields(self):
            value = getattr(self, f.name)
            if f.type == "bool" or f.type is bool:
                if not isinstance(value, bool):
                    raise ConfigError(f"{f.name} must be a boolean, got {value!r}")
                continue
            if isinstance(value, bool) or not isinstance(value, int):
                raise ConfigError(f"{f.name} must be an integer, got {value!r}")
            if value < 0:
                raise ConfigError(f"{f.name} must be non-negative, got {value}")
        if self.node_width == 0 or self.node_height == 0:
            raise ConfigError("default node size must be positive")

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> LayoutConfig:
        """Build a config from a JSON-style mapping; unset keys keep their defaults."""
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ConfigError(f"unknown layout setting(s): {', '.join(unknown)}")
        return cls(**dict(data))


DEFAULT_CONFIG = LayoutConfig()
