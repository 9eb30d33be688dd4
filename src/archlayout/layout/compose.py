"""Hierarchical Composer: nest scope layouts inside container nodes.

A container's children are laid out first; the resulting canvas, grown by
the container's heading and inner padding, becomes the container's node
size in the parent layout. Once the parent is placed, child positions are
translated into the parent's space. Translation is plain addition, so any
depth of nesting composes to the same absolute coordinates.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field

from archlayout.config import LayoutConfig
from archlayout.layout.builder import LayoutGraph, build_scope_graph
from archlayout.layout.engine import layout_graph
from archlayout.model import ModelIndex, join_path
from archlayout.types import Direction, LayoutResult, Position

logger = logging.getLogger(__name__)

@dataclass
class ScopeLayout:
    """Layout of one scope plus the layouts of its container children.

    ``scope`` is the scope's qualified path (None for the model root).
    ``result`` positions are local to this scope's canvas and keyed by the
    children's bare ids; ``children`` is keyed the same way.
    """

    scope: str | None
    graph: LayoutGraph
    result: LayoutResult
    children: dict[str, ScopeLayout] = field(default_factory=dict)

    @property
    def width(self) -> int:
        return self.result.width

    @property
    def height(self) -> int:
        return self.result.height

    def key(self, node_id: str) -> str:
        """Qualified path of one of this scope's nodes."""
        return join_path(self.scope, node_id)

    def walk(self) -> Iterator[ScopeLayout]:
        """This scope and every nested scope, parents before children."""
        yield self
        for child in self.children.values():
            yield from child.walk()


def container_size(result: LayoutResult, config: LayoutConfig) -> tuple[int, int]:
    """Node size of a container whose children produced ``result``."""
    width = result.width + config.inner_padding
    height = result.height + config.title_margin + config.inner_padding
    return max(width, config.node_width), max(height, config.node_height)


def container_inset(config: LayoutConfig) -> Position:
    """Offset of the child canvas inside a container box."""
    half = config.inner_padding // 2
    return Position(x=half, y=config.title_margin + half)


def translate(result: LayoutResult, origin: Position) -> dict[str, Position]:
    """Child positions moved into the coordinate space where ``origin`` lives."""
    return {
        node_id: Position(x=origin.x + pos.x, y=origin.y + pos.y) for node_id, pos in result.positions.items()
    }


def compose_scope(
    index: ModelIndex,
    scope: str | None,
    direction: Direction,
    config: LayoutConfig,
    max_workers: int | None = None,
) -> ScopeLayout:
    """Lay out a scope, recursing into container children first.

    With ``max_workers`` > 1 the container children of each scope are laid
    out on a thread pool; they share no mutable state.
    """
    containers = [c.id for c in index.children(scope) if c.is_container]
    keys = [join_path(scope, cid) for cid in containers]

    if max_workers and max_workers > 1 and len(keys) > 1:
        with ThreadPoolExecutor(max_workers=max_workers) as pool:
            futures = [pool.submit(compose_scope, index, key, direction, config, max_workers) for key in keys]
            nested = [f.result() for f in futures]
    else:
        nested = [compose_scope(index, key, direction, config, max_workers) for key in keys]

    children = dict(zip(containers, nested))
    sizes = {cid: container_size(child.result, config) for cid, child in children.items()}

    graph = build_scope_graph(index, scope, config, sizes)
    result = layout_graph(graph, direction, config)
    logger.debug("composed scope %r: %dx%d", scope or "<root>", result.width, result.height)
    return ScopeLayout(scope=scope, graph=graph, result=result, children=children)


def absolute_positions(
    scope: ScopeLayout,
    config: LayoutConfig,
    origin: Position = Position(0, 0),
) -> dict[str, Position]:
    """Absolute positions of every node in ``scope`` and below, keyed by qualified path."""
    local = translate(scope.result, origin)
    placed = {scope.key(node_id): pos for node_id, pos in local.items()}
    inset = container_inset(config)
    for child_id, child in scope.children.items():
        box = local[child_id]
        placed.update(absolute_positions(child, config, Position(x=box.x + inset.x, y=box.y + inset.y)))
    return placed
