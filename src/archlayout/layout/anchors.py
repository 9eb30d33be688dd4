"""Edge anchor points for each layout direction.

Anchors are expressed in half-extents: (2, 1) is the right-center of a box,
(1, 0) its top-center, and so on. One table serves every view.
"""

from __future__ import annotations

from archlayout.types import Direction, Point, PositionedNode

# direction → (source anchor, target anchor, unit vector along the layer axis)
_ANCHORS: dict[Direction, tuple[tuple[int, int], tuple[int, int], tuple[int, int]]] = {
    Direction.LR: ((2, 1), (0, 1), (1, 0)),
    Direction.RL: ((0, 1), (2, 1), (-1, 0)),
    Direction.TB: ((1, 2), (1, 0), (0, 1)),
    Direction.BT: ((1, 0), (1, 2), (0, -1)),
}


def _anchor(box: PositionedNode, halves: tuple[int, int]) -> Point:
    hx, hy = halves
    return Point(x=box.x + box.width * hx // 2, y=box.y + box.height * hy // 2)


def anchor_points(source: PositionedNode, target: PositionedNode, direction: Direction) -> tuple[Point, Point]:
    """Start point on the source boundary and end point on the target boundary.

    LR: right-center → left-center. RL: left-center → right-center.
    TB: bottom-center → top-center. BT: top-center → bottom-center.
    """
    src_anchor, tgt_anchor, _ = _ANCHORS[direction]
    return _anchor(source, src_anchor), _anchor(target, tgt_anchor)


def control_points(start: Point, end: Point, direction: Direction, offset: int) -> tuple[Point, Point]:
    """Cubic-curve control points pushed ``offset`` along the layer axis."""
    _, _, (dx, dy) = _ANCHORS[direction]
    return (
        Point(x=start.x + dx * offset, y=start.y + dy * offset),
        Point(x=end.x - dx * offset, y=end.y - dy * offset),
    )


def midpoint(start: Point, end: Point) -> Point:
    return Point(x=(start.x + end.x) // 2, y=(start.y + end.y) // 2)
