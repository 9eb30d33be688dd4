"""Graph Builder: turns entities and relation endpoints into a layout graph.

Every node gets an integer handle (its index in the node arena) the first
time it is declared. Later stages key everything by handle and only go back
to string ids for tie-breaking and output.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field

import networkx as nx

from archlayout.config import LayoutConfig
from archlayout.model import ModelIndex, last_segment
from archlayout.types import Endpoint, External, Known, LayoutEdge, LayoutNode

logger = logging.getLogger(__name__)


@dataclass
class LayoutGraph:
    """A simplified directed graph: no self-loops, no duplicate edges.

    Attributes:
        nodes: Node arena; ``nodes[h]`` is the node with handle ``h``.
        handles: Maps node id → handle.
        digraph: Directed graph over handles.
        endpoints: Maps handle → Known/External tag.
        edges: Retained edges in insertion order.
    """

    nodes: list[LayoutNode] = field(default_factory=list)
    handles: dict[str, int] = field(default_factory=dict)
    digraph: nx.DiGraph = field(default_factory=nx.DiGraph)
    endpoints: dict[int, Endpoint] = field(default_factory=dict)
    edges: list[LayoutEdge] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.nodes)

    def handle(self, node_id: str) -> int:
        return self.handles[node_id]

    def node_id(self, handle: int) -> str:
        return self.nodes[handle].id

    def endpoint(self, node_id: str) -> Endpoint:
        return self.endpoints[self.handles[node_id]]


class GraphBuilder:
    """Accumulates nodes and edges for a single layout call.

    Not safe to share between concurrent calls; create one per call.
    """

    def __init__(self, default_width: int, default_height: int) -> None:
        self._default_size = (default_width, default_height)
        self._graph = LayoutGraph()

    def add_node(self, node_id: str, width: int, height: int, *, external: bool = False) -> int:
        """Declare a node and return its handle. Re-declaring an id keeps the first size."""
        graph = self._graph
        if node_id in graph.handles:
            return graph.handles[node_id]
        handle = len(graph.nodes)
        graph.nodes.append(LayoutNode(id=node_id, width=width, height=height))
        graph.handles[node_id] = handle
        graph.endpoints[handle] = External(node_id) if external else Known(node_id)
        graph.digraph.add_node(handle)
        return handle

    def add_edge(self, from_id: str, to_id: str) -> bool:
        """Add a directed edge; returns False if it was dropped.

        Ids that were never declared become External nodes of the default
        size instead of raising. Self-loops and repeated ordered pairs are
        dropped.
        """
        graph = self._graph
        src = graph.handles.get(from_id)
        if src is None:
            src = self.add_node(from_id, *self._default_size, external=True)
        tgt = graph.handles.get(to_id)
        if tgt is None:
            tgt = self.add_node(to_id, *self._default_size, external=True)

        if src == tgt:
            logger.debug("dropping self-loop on %r", from_id)
            return False
        if graph.digraph.has_edge(src, tgt):
            return False

        graph.digraph.add_edge(src, tgt)
        graph.edges.append(LayoutEdge(from_id=from_id, to_id=to_id))
        return True

    def build(self) -> LayoutGraph:
        return self._graph


def graph_from_parts(
    nodes: list[LayoutNode],
    edges: list[LayoutEdge],
    default_width: int,
    default_height: int,
) -> LayoutGraph:
    """Build a LayoutGraph straight from node and edge lists."""
    builder = GraphBuilder(default_width, default_height)
    for node in nodes:
        builder.add_node(node.id, node.width, node.height)
    for edge in edges:
        builder.add_edge(edge.from_id, edge.to_id)
    return builder.build()


# ─── Scope Resolution ─────────────────────────────────────────────────────────


def resolve_endpoint(
    index: ModelIndex,
    scope: str | None,
    path: str,
    context: str | None = None,
) -> Endpoint | None:
    """Resolve a relation endpoint to the node that represents it in a scope.

    ``scope`` is the key of the scope being laid out; ``context`` is the key
    of the scope that declares the relation, against which relative paths
    are looked up.

    - An entity at or below one of the scope's children resolves to that
      child (``Known``).
    - An entity elsewhere in the model does not take part in this scope
      (``None``).
    - A path the model does not declare at all becomes ``External`` at the
      model root and ``None`` inside a scope.
    """
    key = index.locate(path, context)
    if key is None:
        return External(last_segment(path)) if scope is None else None

    chain = index.ancestry(key)
    prefix = index.ancestry(scope)
    if len(chain) > len(prefix) and chain[: len(prefix)] == prefix:
        return Known(chain[len(prefix)])
    return None


def build_scope_graph(
    index: ModelIndex,
    scope: str | None,
    config: LayoutConfig,
    sizes: Mapping[str, tuple[int, int]] | None = None,
) -> LayoutGraph:
    """Build the layout graph for one scope of the model.

    Node ids are the bare ids of the scope's children, unique within the
    scope. ``sizes`` overrides the default node size for children whose box
    comes from a nested layout (containers).
    """
    sizes = sizes or {}
    builder = GraphBuilder(config.node_width, config.node_height)

    for child in index.children(scope):
        width, height = sizes.get(child.id, (config.node_width, config.node_height))
        builder.add_node(child.id, width, height)

    dropped = 0
    for owner, rel in index.scoped_relations():
        src = resolve_endpoint(index, scope, rel.source, owner)
        tgt = resolve_endpoint(index, scope, rel.target, owner)
        if src is None or tgt is None:
            dropped += 1
            continue
        builder.add_edge(src.id, tgt.id)

    graph = builder.build()
    logger.debug(
        "scope %r: %d nodes, %d edges (%d relations outside scope)",
        scope or "<root>",
        len(graph.nodes),
        len(graph.edges),
        dropped,
    )
    return graph
