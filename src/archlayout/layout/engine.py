"""Single-scope layout pipeline: layering → crossing reduction → coordinates."""

from __future__ import annotations

from collections.abc import Iterable

from archlayout.config import DEFAULT_CONFIG, LayoutConfig
from archlayout.layout.builder import LayoutGraph, graph_from_parts
from archlayout.layout.coordinates import assign_coordinates
from archlayout.layout.crossing import minimise_crossings
from archlayout.layout.layering import LayerAssignment
from archlayout.types import Direction, LayoutEdge, LayoutNode, LayoutResult


def layout_graph(
    graph: LayoutGraph,
    direction: Direction = Direction.LR,
    config: LayoutConfig = DEFAULT_CONFIG,
) -> LayoutResult:
    """Run the layout pipeline on an already-built graph."""
    la = LayerAssignment.assign(graph)
    ordering = minimise_crossings(graph, la, config.crossing_iterations)
    return assign_coordinates(graph, ordering, direction, config)


def layout(
    nodes: Iterable[LayoutNode],
    edges: Iterable[LayoutEdge] = (),
    direction: Direction = Direction.LR,
    config: LayoutConfig = DEFAULT_CONFIG,
) -> LayoutResult:
    """Lay out plain nodes and edges.

    Self-loops and duplicate edges are ignored; edge endpoints that are not
    among ``nodes`` are placed as extra nodes of the default size.
    """
    graph = graph_from_parts(list(nodes), list(edges), config.node_width, config.node_height)
    return layout_graph(graph, direction, config)
