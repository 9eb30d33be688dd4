"""archlayout: layered layout of software architecture models.

Public API:
    layout(nodes, edges, direction, config) -> LayoutResult
    overview(arch) / scope_view(arch, id) / scenario_view(arch, title) -> Diagram
    all_views(arch) -> dict[str, Diagram]
"""

from __future__ import annotations

from archlayout.config import DEFAULT_CONFIG, LayoutConfig
from archlayout.errors import ArchLayoutError, ConfigError, ModelError
from archlayout.layout import layout, layout_graph
from archlayout.model import Architecture, Entity, Relation, Scenario, load_architecture
from archlayout.types import (
    Diagram,
    Direction,
    External,
    Known,
    LayoutEdge,
    LayoutNode,
    LayoutResult,
    Position,
)
from archlayout.views import all_views, overview, resolve_direction, scenario_view, scope_view, view, view_names

__all__ = [
    "DEFAULT_CONFIG",
    "ArchLayoutError",
    "Architecture",
    "ConfigError",
    "Diagram",
    "Direction",
    "Entity",
    "External",
    "Known",
    "LayoutConfig",
    "LayoutEdge",
    "LayoutNode",
    "LayoutResult",
    "ModelError",
    "Position",
    "Relation",
    "Scenario",
    "all_views",
    "layout",
    "layout_graph",
    "load_architecture",
    "overview",
    "resolve_direction",
    "scenario_view",
    "scope_view",
    "view",
    "view_names",
]
