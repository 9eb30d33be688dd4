"""Diagram views over an architecture model.

Every view runs the same pipeline; they differ only in which nodes and
relations feed the Graph Builder:

- overview: the whole model, containers drawn with their internals nested
- scope view: the internals of one system / container / deployment node
- scenario view: the participants of one scenario's steps
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from concurrent.futures import ThreadPoolExecutor
from dataclasses import replace

from archlayout.config import DEFAULT_CONFIG, LayoutConfig
from archlayout.errors import ModelError
from archlayout.layout.anchors import anchor_points, control_points, midpoint
from archlayout.layout.builder import GraphBuilder, LayoutGraph, resolve_endpoint
from archlayout.layout.compose import ScopeLayout, absolute_positions, compose_scope
from archlayout.layout.engine import layout_graph
from archlayout.model import Architecture, ModelIndex, Relation, join_path, last_segment
from archlayout.types import Diagram, Direction, Endpoint, External, Known, PositionedEdge, PositionedNode

logger = logging.getLogger(__name__)

DIRECTION_KEYS = ("svg_direction", "direction")
EXTERNAL_KIND = "external"
OVERVIEW = "overview"
SCENARIO_PREFIX = "scenario:"


def _lookup(mapping: dict[str, str], keys: tuple[str, ...]) -> str | None:
    lowered = {k.lower(): v for k, v in mapping.items()}
    for key in keys:
        value = lowered.get(key)
        if value:
            return value
    return None


def resolve_direction(arch: Architecture, override: str | Direction | None = None) -> Direction:
    """Pick the layout direction.

    An explicit override wins, then document metadata, then style; values
    are case-insensitive. Invalid values are logged and skipped. Defaults
    to LR.
    """
    candidates = [("override", override)] if override else []
    candidates.append(("metadata", _lookup(arch.metadata, DIRECTION_KEYS)))
    candidates.append(("style", _lookup(arch.style, DIRECTION_KEYS)))
    for source, value in candidates:
        if not value:
            continue
        try:
            return Direction.parse(value)
        except ValueError as exc:
            logger.warning("ignoring %s direction: %s", source, exc)
    return Direction.LR


def _check(arch: Architecture | None) -> ModelIndex:
    if arch is None:
        raise ModelError("architecture is nil")
    return ModelIndex(arch)


def _settings(
    arch: Architecture,
    direction: str | Direction | None,
    config: LayoutConfig | None,
    curved: bool | None,
) -> tuple[Direction, LayoutConfig]:
    config = config or DEFAULT_CONFIG
    if curved is not None:
        config = replace(config, curved_edges=curved)
    return resolve_direction(arch, direction), config


# ─── Diagram Assembly ─────────────────────────────────────────────────────────

Resolver = Callable[[str, str | None], str | None]


def _node(
    index: ModelIndex,
    graph: LayoutGraph,
    node_id: str,
    key: str,
    pos_x: int,
    pos_y: int,
    parent: str | None,
    depth: int,
) -> PositionedNode:
    layout_node = graph.nodes[graph.handle(node_id)]
    external = graph.endpoint(node_id).external
    if external or key not in index:
        bare, label, kind, container = node_id, node_id, EXTERNAL_KIND, False
    else:
        entity = index.entity(key)
        bare, label, kind, container = entity.id, entity.display_label, entity.kind, entity.is_container
    return PositionedNode(
        id=bare,
        path=key,
        label=label,
        kind=kind,
        x=pos_x,
        y=pos_y,
        width=layout_node.width,
        height=layout_node.height,
        parent=parent,
        depth=depth,
        container=container,
        external=external,
    )


def _qualified(endpoint: Endpoint, scope: str | None) -> Endpoint:
    if endpoint.external:
        return External(endpoint.id)
    return Known(join_path(scope, endpoint.id))


def _edges(
    graph: LayoutGraph,
    scope: str | None,
    boxes: dict[str, PositionedNode],
    labels: dict[tuple[str, str], str],
    direction: Direction,
    config: LayoutConfig,
) -> list[PositionedEdge]:
    edges: list[PositionedEdge] = []
    for edge in graph.edges:
        start, end = anchor_points(boxes[edge.from_id], boxes[edge.to_id], direction)
        controls = control_points(start, end, direction, config.curve_offset) if config.curved_edges else None
        label = labels.get((edge.from_id, edge.to_id))
        edges.append(
            PositionedEdge(
                source=_qualified(graph.endpoint(edge.from_id), scope),
                target=_qualified(graph.endpoint(edge.to_id), scope),
                start=start,
                end=end,
                controls=controls,
                label=label,
                label_point=midpoint(start, end) if label else None,
            )
        )
    return edges


def _edge_labels(
    relations: Iterable[tuple[str | None, Relation]],
    resolve: Resolver,
) -> dict[tuple[str, str], str]:
    """First non-empty label per resolved (from, to) pair."""
    labels: dict[tuple[str, str], str] = {}
    for owner, rel in relations:
        if not rel.label:
            continue
        src, tgt = resolve(rel.source, owner), resolve(rel.target, owner)
        if src is not None and tgt is not None:
            labels.setdefault((src, tgt), rel.label)
    return labels


def _scope_resolver(index: ModelIndex, scope: str | None) -> Resolver:
    def resolve(path: str, owner: str | None) -> str | None:
        endpoint = resolve_endpoint(index, scope, path, owner)
        return None if endpoint is None else endpoint.id

    return resolve


def _scope_diagram(
    name: str,
    index: ModelIndex,
    root: ScopeLayout,
    direction: Direction,
    config: LayoutConfig,
) -> Diagram:
    placed = absolute_positions(root, config)
    nodes: list[PositionedNode] = []
    edges: list[PositionedEdge] = []
    base_depth = len(index.ancestry(root.scope))

    for scope in root.walk():
        depth = len(index.ancestry(scope.scope)) - base_depth
        parent = None if scope is root else scope.scope
        boxes: dict[str, PositionedNode] = {}
        for node in scope.graph.nodes:
            key = scope.key(node.id)
            pos = placed[key]
            boxes[node.id] = _node(index, scope.graph, node.id, key, pos.x, pos.y, parent, depth)
        nodes.extend(boxes.values())
        labels = _edge_labels(index.scoped_relations(), _scope_resolver(index, scope.scope))
        edges.extend(_edges(scope.graph, scope.scope, boxes, labels, direction, config))

    return Diagram(name=name, direction=direction, width=root.width, height=root.height, nodes=nodes, edges=edges)


# ─── Public Views ─────────────────────────────────────────────────────────────


def overview(
    arch: Architecture,
    direction: str | Direction | None = None,
    config: LayoutConfig | None = None,
    *,
    curved: bool | None = None,
    max_workers: int | None = None,
) -> Diagram:
    """The whole model with every container's internals nested inside it."""
    index = _check(arch)
    direction, config = _settings(arch, direction, config, curved)
    root = compose_scope(index, None, direction, config, max_workers=max_workers)
    logger.info("overview %r: %d top-level nodes, %dx%d", arch.name, len(root.graph), root.width, root.height)
    return _scope_diagram(OVERVIEW, index, root, direction, config)


def scope_view(
    arch: Architecture,
    scope: str,
    direction: str | Direction | None = None,
    config: LayoutConfig | None = None,
    *,
    curved: bool | None = None,
    max_workers: int | None = None,
) -> Diagram:
    """The internals of one container entity (system, container, deployment node).

    ``scope`` is a qualified path or a bare id; the diagram is named after
    the qualified path.
    """
    index = _check(arch)
    key = index.key(scope)
    if not index.entity(key).is_container:
        raise ModelError(f"{scope!r} has no nested elements to lay out")
    direction, config = _settings(arch, direction, config, curved)
    root = compose_scope(index, key, direction, config, max_workers=max_workers)
    logger.info("scope view %r: %d nodes, %dx%d", key, len(root.graph), root.width, root.height)
    return _scope_diagram(key, index, root, direction, config)


def scenario_view(
    arch: Architecture,
    title: str,
    direction: str | Direction | None = None,
    config: LayoutConfig | None = None,
    *,
    curved: bool | None = None,
) -> Diagram:
    """A flat diagram of the elements taking part in one scenario.

    Participants are matched to model elements by qualified path or id and
    placed under their qualified path; anything else is drawn as an external
    node.
    """
    index = _check(arch)
    scenario = next((s for s in arch.scenarios if s.title == title), None)
    if scenario is None:
        raise ModelError(f"no scenario titled {title!r} in model {arch.name!r}")
    direction, config = _settings(arch, direction, config, curved)

    def participant(path: str, owner: str | None = None) -> str:
        key = index.locate(path, owner)
        return key if key is not None else last_segment(path)

    builder = GraphBuilder(config.node_width, config.node_height)
    for step in scenario.steps:
        for path in (step.source, step.target):
            key = participant(path)
            builder.add_node(key, config.node_width, config.node_height, external=key not in index)
    for step in scenario.steps:
        builder.add_edge(participant(step.source), participant(step.target))
    graph = builder.build()

    result = layout_graph(graph, direction, config)
    boxes: dict[str, PositionedNode] = {}
    for node in graph.nodes:
        pos = result.positions[node.id]
        boxes[node.id] = _node(index, graph, node.id, node.id, pos.x, pos.y, None, 0)
    labels = _edge_labels(((None, step) for step in scenario.steps), participant)
    edges = _edges(graph, None, boxes, labels, direction, config)
    logger.info("scenario view %r: %d nodes, %d edges", title, len(boxes), len(edges))
    return Diagram(
        name=f"{SCENARIO_PREFIX}{title}",
        direction=direction,
        width=result.width,
        height=result.height,
        nodes=list(boxes.values()),
        edges=edges,
    )


def view(
    arch: Architecture,
    name: str,
    direction: str | Direction | None = None,
    config: LayoutConfig | None = None,
    *,
    curved: bool | None = None,
    max_workers: int | None = None,
) -> Diagram:
    """Dispatch on a view name: ``overview``, ``scenario:<title>`` or a scope path.

    ``max_workers`` lets nested sibling scopes of the overview and scope
    views lay out in parallel; scenario views are flat.
    """
    if name == OVERVIEW:
        return overview(arch, direction, config, curved=curved, max_workers=max_workers)
    if name.startswith(SCENARIO_PREFIX):
        return scenario_view(arch, name[len(SCENARIO_PREFIX) :], direction, config, curved=curved)
    return scope_view(arch, name, direction, config, curved=curved, max_workers=max_workers)


def view_names(arch: Architecture) -> list[str]:
    """Every view the model supports, in a stable order. Scopes are named by qualified path."""
    index = _check(arch)
    names = [OVERVIEW]
    names.extend(key for key, entity in index.items() if entity.is_container)
    names.extend(f"{SCENARIO_PREFIX}{s.title}" for s in arch.scenarios)
    return names


def all_views(
    arch: Architecture,
    direction: str | Direction | None = None,
    config: LayoutConfig | None = None,
    *,
    curved: bool | None = None,
    max_workers: int | None = None,
) -> dict[str, Diagram]:
    """Lay out every view. Views are independent and may run on a thread pool."""
    names = view_names(arch)
    if max_workers and max_workers > 1:
        with ThreadPoolExecutor(max_workers=max_workers) as pool:
            futures = {n: pool.submit(view, arch, n, direction, config, curved=curved) for n in names}
            return {n: f.result() for n, f in futures.items()}
    return {n: view(arch, n, direction, config, curved=curved) for n in names}
