"""Crossing Reducer: barycenter reordering within layers."""

from __future__ import annotations

import logging
from collections import defaultdict
from collections.abc import Callable, Iterable
from itertools import combinations

from archlayout.config import CROSSING_ITERATIONS
from archlayout.layout.builder import LayoutGraph
from archlayout.layout.layering import LayerAssignment

logger = logging.getLogger(__name__)


def initial_ordering(graph: LayoutGraph, la: LayerAssignment) -> list[list[int]]:
    """Group handles by layer, each layer sorted by node id for determinism."""
    ordering: list[list[int]] = [[] for _ in range(la.layer_count)]
    for handle in sorted(la.layers, key=graph.node_id):
        ordering[la.layers[handle]].append(handle)
    return ordering


def minimise_crossings(
    graph: LayoutGraph,
    la: LayerAssignment,
    iterations: int = CROSSING_ITERATIONS,
) -> list[list[int]]:
    """Minimise edge crossings using the barycenter heuristic.

    Runs a fixed number of iterations; each is a top-down sweep (barycenter
    over predecessors in the layer above) followed by a bottom-up sweep
    (successors in the layer below). Layer membership never changes.

    Returns a list[list[int]]: one inner list of handles per layer.
    """
    ordering = initial_ordering(graph, la)
    layer_count = len(ordering)
    dg = graph.digraph

    before = count_crossings(graph, ordering) if logger.isEnabledFor(logging.DEBUG) else None

    for _ in range(iterations):
        # Top-down sweep: use predecessor positions as barycenter weights.
        for layer_idx in range(1, layer_count):
            _reorder_layer(graph, ordering[layer_idx], ordering[layer_idx - 1], dg.predecessors)

        # Bottom-up sweep: use successor positions as barycenter weights.
        for layer_idx in range(layer_count - 2, -1, -1):
            _reorder_layer(graph, ordering[layer_idx], ordering[layer_idx + 1], dg.successors)

    if before is not None:
        logger.debug("crossings %d -> %d after %d iterations", before, count_crossings(graph, ordering), iterations)
    return ordering


def _reorder_layer(
    graph: LayoutGraph,
    layer: list[int],
    adjacent: list[int],
    neighbours: Callable[[int], Iterable[int]],
) -> None:
    """Sort ``layer`` in place by (barycenter, node id).

    A node with no neighbours in the adjacent layer keeps its current index
    as its barycenter, so it tends to stay where it was.
    """
    adjacent_pos = {h: i for i, h in enumerate(adjacent)}
    keys: dict[int, tuple[float, str]] = {}
    for idx, handle in enumerate(layer):
        positions = [adjacent_pos[nb] for nb in neighbours(handle) if nb in adjacent_pos]
        barycenter = sum(positions) / len(positions) if positions else float(idx)
        keys[handle] = (barycenter, graph.node_id(handle))
    layer.sort(key=keys.__getitem__)


def count_crossings(graph: LayoutGraph, ordering: list[list[int]]) -> int:
    """Count crossings among edges that join adjacent layers.

    Two such edges cross when their source and target positions are
    inverted relative to each other. Edges spanning more than one layer, or
    pointing back up, are not counted.
    """
    slot = {h: (layer_idx, idx) for layer_idx, layer in enumerate(ordering) for idx, h in enumerate(layer)}
    segments: dict[int, list[tuple[int, int]]] = defaultdict(list)
    for u, v in graph.digraph.edges:
        if u not in slot or v not in slot:
            continue
        (lu, pu), (lv, pv) = slot[u], slot[v]
        if lv == lu + 1:
            segments[lu].append((pu, pv))

    return sum(
        1
        for between in segments.values()
        for (s1, t1), (s2, t2) in combinations(between, 2)
        if (s1 - s2) * (t1 - t2) < 0
    )
