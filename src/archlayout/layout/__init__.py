"""Layered graph layout pipeline.

Phases:
  1. Graph building (handles, endpoint resolution, dedup)
  2. Layer assignment (longest path, breadth-first fallback on cycles)
  3. Crossing reduction (barycenter sweeps)
  4. Coordinate assignment (grid cells, direction mirroring)
  5. Hierarchical composition (container sizing and translation)
"""

from __future__ import annotations

from archlayout.layout.anchors import anchor_points, control_points, midpoint
from archlayout.layout.builder import (
    GraphBuilder,
    LayoutGraph,
    build_scope_graph,
    graph_from_parts,
    resolve_endpoint,
)
from archlayout.layout.compose import (
    ScopeLayout,
    absolute_positions,
    compose_scope,
    container_inset,
    container_size,
    translate,
)
from archlayout.layout.coordinates import assign_coordinates
from archlayout.layout.crossing import count_crossings, initial_ordering, minimise_crossings
from archlayout.layout.engine import layout, layout_graph
from archlayout.layout.layering import LayerAssignment

__all__ = [
    "GraphBuilder",
    "LayerAssignment",
    "LayoutGraph",
    "ScopeLayout",
    "absolute_positions",
    "anchor_points",
    "assign_coordinates",
    "build_scope_graph",
    "compose_scope",
    "container_inset",
    "container_size",
    "control_points",
    "count_crossings",
    "graph_from_parts",
    "initial_ordering",
    "layout",
    "layout_graph",
    "midpoint",
    "minimise_crossings",
    "resolve_endpoint",
    "translate",
]
