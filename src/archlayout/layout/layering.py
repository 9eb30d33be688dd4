"""Layering Assigner: rank every node of a layout graph.

Acyclic graphs get longest-path layering over a topological order. Cyclic
graphs fall back to a breadth-first sweep that may leave back edges pointing
"upward" but always terminates and always ranks every node.
"""

from __future__ import annotations

import logging
from collections import deque

import networkx as nx

from archlayout.layout.builder import LayoutGraph

logger = logging.getLogger(__name__)


class LayerAssignment:
    """Result of layer assignment: each node handle is assigned a layer (rank).

    Layer 0 is the first layer (left for LR, top for TB).

    Attributes:
        layers: Maps node handle → layer index, contiguous from 0.
        layer_count: Total number of layers (0 for an empty graph).
        acyclic: False if the breadth-first fallback was used.
    """

    def __init__(self, layers: dict[int, int], layer_count: int, acyclic: bool = True) -> None:
        self.layers = layers
        self.layer_count = layer_count
        self.acyclic = acyclic

    @classmethod
    def assign(cls, graph: LayoutGraph) -> LayerAssignment:
        """Assign layers: layer(n) = 1 + max(layer(p)) over predecessors, 0 if none."""
        dg = graph.digraph
        if dg.number_of_nodes() == 0:
            return cls(layers={}, layer_count=0)

        try:
            order = list(nx.topological_sort(dg))
        except nx.NetworkXUnfeasible:
            logger.info("graph has cycles, using breadth-first layering for %d nodes", dg.number_of_nodes())
            layers = _breadth_first_layers(dg)
            acyclic = False
        else:
            layers = {}
            for node in order:
                layers[node] = max((layers[p] + 1 for p in dg.predecessors(node)), default=0)
            acyclic = True

        layers = _compact(layers)
        layer_count = max(layers.values()) + 1
        logger.debug("assigned %d nodes to %d layers", len(layers), layer_count)
        return cls(layers=layers, layer_count=layer_count, acyclic=acyclic)

    def by_id(self, graph: LayoutGraph) -> dict[str, int]:
        """Layer map keyed by node id instead of handle."""
        return {graph.node_id(h): layer for h, layer in self.layers.items()}


def _breadth_first_layers(dg: nx.DiGraph) -> dict[int, int]:
    """Breadth-first layering that tolerates back edges.

    Seeds are the zero-indegree nodes (or the lowest handle when every node
    sits on a cycle). Each node is enqueued at most once, so the sweep ends
    even though back edges keep "improving" layers. Nodes the seeds cannot
    reach are seeded in handle order at layer 0.
    """
    handles = sorted(dg.nodes)
    seeds = [h for h in handles if dg.in_degree(h) == 0] or handles[:1]

    layers: dict[int, int] = {}
    visited: set[int] = set()
    queue: deque[int] = deque()

    def seed(h: int) -> None:
        layers[h] = 0
        visited.add(h)
        queue.append(h)

    for h in seeds:
        seed(h)

    remaining = iter(handles)
    while True:
        while queue:
            u = queue.popleft()
            for v in dg.successors(u):
                layers[v] = max(layers.get(v, 0), layers[u] + 1)
                if v not in visited:
                    visited.add(v)
                    queue.append(v)
        h = next((h for h in remaining if h not in visited), None)
        if h is None:
            break
        seed(h)

    return layers


def _compact(layers: dict[int, int]) -> dict[int, int]:
    """Renumber layer values so the used ones are contiguous from 0."""
    used = sorted(set(layers.values()))
    if used == list(range(len(used))):
        return layers
    rank = {value: i for i, value in enumerate(used)}
    return {h: rank[value] for h, value in layers.items()}
