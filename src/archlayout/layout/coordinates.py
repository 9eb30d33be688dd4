"""Coordinate Assigner: turn layer/row indices into pixel positions."""

from __future__ import annotations

import logging

from archlayout.config import LayoutConfig
from archlayout.layout.builder import LayoutGraph
from archlayout.types import Direction, LayoutNode, LayoutResult, Position

logger = logging.getLogger(__name__)


def _extents(node: LayoutNode, horizontal: bool) -> tuple[int, int]:
    """(primary, cross) extent of a node: primary runs along the layer axis."""
    return (node.width, node.height) if horizontal else (node.height, node.width)


def _cell_offsets(sizes: list[int], padding: int, spacing: int) -> tuple[list[int], int]:
    """Start offset of each cell laid out in sequence, plus the total length."""
    offsets: list[int] = []
    pos = padding
    for size in sizes:
        offsets.append(pos)
        pos += size + spacing
    if sizes:
        pos -= spacing
    return offsets, pos + padding


def assign_coordinates(
    graph: LayoutGraph,
    ordering: list[list[int]],
    direction: Direction,
    config: LayoutConfig,
) -> LayoutResult:
    """Assign top-left (x, y) coordinates to every node and size the canvas.

    The nodes form a grid: one cell per (layer, index-within-layer). Layer
    cells are as deep as their largest node along the layer axis; cross
    cells as wide as the largest node sharing that index in any layer, so
    no two cells overlap. Each node is centered within its cell.

    For LR/RL layers are columns; for TB/BT they are rows. RL and BT mirror
    the layer-axis coordinate of the LR/TB layout.
    """
    if not graph.nodes:
        return LayoutResult.empty()

    horizontal = direction.is_horizontal
    nodes = graph.nodes

    layer_sizes = [max((_extents(nodes[h], horizontal)[0] for h in layer), default=0) for layer in ordering]
    cross_count = max((len(layer) for layer in ordering), default=0)
    cross_sizes = [0] * cross_count
    for layer in ordering:
        for idx, h in enumerate(layer):
            cross_sizes[idx] = max(cross_sizes[idx], _extents(nodes[h], horizontal)[1])

    # x gaps always use horizontal_spacing and y gaps vertical_spacing.
    primary_spacing = config.horizontal_spacing if horizontal else config.vertical_spacing
    cross_spacing = config.vertical_spacing if horizontal else config.horizontal_spacing

    layer_offsets, primary_total = _cell_offsets(layer_sizes, config.padding, primary_spacing)
    cross_offsets, cross_total = _cell_offsets(cross_sizes, config.padding, cross_spacing)

    positions: dict[str, Position] = {}
    for layer_idx, layer in enumerate(ordering):
        for idx, h in enumerate(layer):
            node = nodes[h]
            primary_ext, cross_ext = _extents(node, horizontal)
            p = layer_offsets[layer_idx] + (layer_sizes[layer_idx] - primary_ext) // 2
            c = cross_offsets[idx] + (cross_sizes[idx] - cross_ext) // 2
            if direction.is_reversed:
                p = primary_total - p - primary_ext
            positions[node.id] = Position(x=p, y=c) if horizontal else Position(x=c, y=p)

    width, height = (primary_total, cross_total) if horizontal else (cross_total, primary_total)
    logger.debug("%s layout: %d nodes on %dx%d canvas", direction.value, len(positions), width, height)
    return LayoutResult(width=width, height=height, positions=positions)
