"""JSON renderer: dumps the positioned Diagram IR for downstream renderers."""

from __future__ import annotations

import json
from typing import Any

from archlayout.types import Diagram, Endpoint, Point, PositionedEdge, PositionedNode


def _point(p: Point | None) -> dict[str, int] | None:
    return None if p is None else {"x": p.x, "y": p.y}


def _endpoint(ep: Endpoint) -> dict[str, Any]:
    return {"id": ep.id, "external": ep.external}


def _node(n: PositionedNode) -> dict[str, Any]:
    return {
        "id": n.id,
        "path": n.path,
        "label": n.label,
        "kind": n.kind,
        "x": n.x,
        "y": n.y,
        "width": n.width,
        "height": n.height,
        "parent": n.parent,
        "depth": n.depth,
        "container": n.container,
        "external": n.external,
    }


def _edge(e: PositionedEdge) -> dict[str, Any]:
    return {
        "from": _endpoint(e.source),
        "to": _endpoint(e.target),
        "start": _point(e.start),
        "end": _point(e.end),
        "controls": None if e.controls is None else [_point(c) for c in e.controls],
        "label": e.label,
        "labelPoint": _point(e.label_point),
    }


def diagram_to_dict(diagram: Diagram) -> dict[str, Any]:
    return {
        "name": diagram.name,
        "direction": diagram.direction.value,
        "width": diagram.width,
        "height": diagram.height,
        "nodes": [_node(n) for n in diagram.nodes],
        "edges": [_edge(e) for e in diagram.edges],
    }


class JsonRenderer:
    """JSON renderer: consumes a Diagram, produces a JSON document."""

    def __init__(self, indent: int | None = 2) -> None:
        self.indent = indent

    def render(self, diagram: Diagram) -> str:
        return json.dumps(diagram_to_dict(diagram), indent=self.indent)

    def render_many(self, diagrams: dict[str, Diagram]) -> str:
        return json.dumps({name: diagram_to_dict(d) for name, d in diagrams.items()}, indent=self.indent)
