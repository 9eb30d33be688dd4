"""Layout types shared across the pipeline, views and renderers."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType


class Direction(Enum):
    """Primary axis and sense along which layers advance."""

    LR = "LR"
    RL = "RL"
    TB = "TB"
    BT = "BT"

    @property
    def is_horizontal(self) -> bool:
        """Layers are columns (LR/RL) rather than rows (TB/BT)."""
        return self in (Direction.LR, Direction.RL)

    @property
    def is_reversed(self) -> bool:
        return self in (Direction.RL, Direction.BT)

    @classmethod
    def parse(cls, value: str | Direction) -> Direction:
        """Parse a case-insensitive direction name. Raises ValueError if unknown."""
        if isinstance(value, Direction):
            return value
        try:
            return cls(value.strip().upper())
        except (AttributeError, ValueError):
            raise ValueError(f"unknown direction {value!r}, expected one of LR, RL, TB, BT") from None


# ─── Pipeline Types ───────────────────────────────────────────────────────────


@dataclass(frozen=True)
class LayoutNode:
    """A node to be placed: unique id within the call plus its box size."""

    id: str
    width: int
    height: int


@dataclass(frozen=True)
class LayoutEdge:
    """A directed edge between two node ids."""

    from_id: str
    to_id: str


@dataclass(frozen=True)
class Position:
    """Top-left corner of a node box."""

    x: int
    y: int


@dataclass(frozen=True)
class LayoutResult:
    """Output of one layout call: canvas size plus one position per node.

    Results are never mutated after they are returned; callers combine them
    only by translating positions (see ``layout.compose.translate``).
    """

    width: int
    height: int
    positions: Mapping[str, Position] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "positions", MappingProxyType(dict(self.positions)))

    def __hash__(self) -> int:
        return hash((self.width, self.height, frozenset(self.positions.items())))

    @classmethod
    def empty(cls) -> LayoutResult:
        return cls(width=0, height=0, positions={})


# ─── Endpoint Tags ────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class Known:
    """An endpoint resolved to a node declared in the current scope."""

    id: str

    @property
    def external(self) -> bool:
        return False


@dataclass(frozen=True)
class External:
    """An endpoint the model does not declare; laid out as a synthetic node."""

    id: str

    @property
    def external(self) -> bool:
        return True


Endpoint = Known | External


# ─── Renderer-facing IR ───────────────────────────────────────────────────────


@dataclass(frozen=True)
class Point:
    """A 2D point in canvas coordinates."""

    x: int
    y: int


@dataclass
class PositionedNode:
    """A node in absolute canvas coordinates, ready for a renderer.

    ``path`` is the node's qualified model path ("Shop.Api.Orders"), unique
    within a diagram even when bare ids repeat across scopes. Edge endpoints
    and ``parent`` refer to nodes by path.
    """

    id: str
    path: str
    label: str
    kind: str
    x: int
    y: int
    width: int
    height: int
    parent: str | None = None
    depth: int = 0
    container: bool = False
    external: bool = False


@dataclass
class PositionedEdge:
    """A straight (or curved, when ``controls`` is set) anchor-to-anchor edge."""

    source: Endpoint
    target: Endpoint
    start: Point
    end: Point
    controls: tuple[Point, Point] | None = None
    label: str | None = None
    label_point: Point | None = None


@dataclass
class Diagram:
    """Self-contained view output: everything renderers need."""

    name: str
    direction: Direction
    width: int
    height: int
    nodes: list[PositionedNode] = field(default_factory=list)
    edges: list[PositionedEdge] = field(default_factory=list)

    def node(self, ref: str) -> PositionedNode:
        """Look a node up by path, falling back to the first node with that bare id."""
        for n in self.nodes:
            if n.path == ref:
                return n
        for n in self.nodes:
            if n.id == ref:
                return n
        raise KeyError(ref)
