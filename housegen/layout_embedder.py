"""Embed a room graph onto an integer grid.

Rooms are shelf-packed in order of decreasing degree, then refined by random
pairwise position swaps that never increase the total edge length, and finally
rooms joined by doors are slid into contact with each other.
"""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Tuple

from rtree import index

from housegen.graph import EdgeKind, RoomGraph, RoomNode
from housegen.program import ProgramSpec

logger = logging.getLogger(__name__)

SHELF_COLUMN_LIMIT = 40
PACK_TRIES = 128
CORRIDOR_COST_FACTOR = 1.2
SNAP_PASSES = 64
DEFAULT_MAX_ITERATIONS = 2000


@dataclass(frozen=True)
class Rect:
    """Axis-aligned integer rectangle covering cells [x, x_max) x [y, y_max)."""
    x: int
    y: int
    width: int
    height: int

    @property
    def x_max(self) -> int:
        return self.x + self.width

    @property
    def y_max(self) -> int:
        return self.y + self.height

    @property
    def center(self) -> Tuple[float, float]:
        return (self.x + self.width * 0.5, self.y + self.height * 0.5)

    @property
    def bounds(self) -> Tuple[int, int, int, int]:
        """(min_x, min_y, max_x, max_y), the ordering rtree expects."""
        return (self.x, self.y, self.x_max, self.y_max)

    def overlaps(self, other: "Rect") -> bool:
        return (self.x < other.x_max and other.x < self.x_max and
                self.y < other.y_max and other.y < self.y_max)

    def touches(self, other: "Rect") -> bool:
        return rects_touch(self, other)

    def moved_to(self, x: int, y: int) -> "Rect":
        return Rect(x, y, self.width, self.height)

    def translated(self, dx: int, dy: int) -> "Rect":
        return Rect(self.x + dx, self.y + dy, self.width, self.height)

    def cells(self) -> Iterable[Tuple[int, int]]:
        for cy in range(self.y, self.y_max):
            for cx in range(self.x, self.x_max):
                yield cx, cy


def rects_touch(a: Rect, b: Rect) -> bool:
    """True when two rectangles share a wall segment of positive length."""
    x_touch = a.x_max == b.x or b.x_max == a.x
    y_overlap = not (a.y_max <= b.y or b.y_max <= a.y)
    y_touch = a.y_max == b.y or b.y_max == a.y
    x_overlap = not (a.x_max <= b.x or b.x_max <= a.x)
    return (x_touch and y_overlap) or (y_touch and x_overlap)


def manhattan(a: Rect, b: Rect) -> float:
    (ax, ay), (bx, by) = a.center, b.center
    return abs(ax - bx) + abs(ay - by)


@dataclass
class PlacedRoom:
    node: RoomNode
    rect: Rect


@dataclass
class Layout:
    rooms: Dict[int, PlacedRoom] = field(default_factory=dict)
    doors: List[Tuple[int, int]] = field(default_factory=list)
    corridors: List[Tuple[int, int]] = field(default_factory=list)
    cell_size: Tuple[float, float] = (0.5, 0.5)

    def rect(self, node_id: int) -> Rect:
        return self.rooms[node_id].rect

    def overlapping_pairs(self) -> List[Tuple[int, int]]:
        ids = sorted(self.rooms)
        pairs = []
        for i, a in enumerate(ids):
            for b in ids[i + 1:]:
                if self.rooms[a].rect.overlaps(self.rooms[b].rect):
                    pairs.append((a, b))
        return pairs


def layout_cost(layout: Layout) -> float:
    """Sum of centre-to-centre Manhattan distances; corridors weigh 1.2x."""
    cost = 0.0
    for a, b in layout.doors:
        cost += manhattan(layout.rooms[a].rect, layout.rooms[b].rect)
    for a, b in layout.corridors:
        cost += CORRIDOR_COST_FACTOR * manhattan(layout.rooms[a].rect, layout.rooms[b].rect)
    return cost


def embed(
    graph: RoomGraph,
    program: ProgramSpec,
    seed: int,
    max_iterations: int = DEFAULT_MAX_ITERATIONS,
) -> Layout:
    """Place every room of ``graph`` on the grid.

    Args:
        graph: Sampled room graph.
        program: Supplies the cell-to-world scale.
        seed: Seed for the refinement RNG stream.
        max_iterations: Number of swap attempts.

    Returns:
        A layout whose rectangles are pairwise non-overlapping.
    """
    rng = random.Random(seed)
    layout = Layout(cell_size=tuple(program.cell_size))

    # Better connected rooms are placed first.
    order = sorted(graph.nodes, key=lambda n: graph.degree(n.id), reverse=True)
    _shelf_pack(order, layout)

    for e in graph.edges:
        if e.a == e.b or e.a < 0 or e.b < 0:
            continue
        if e.kind == EdgeKind.DOOR:
            layout.doors.append((e.a, e.b))
        else:
            layout.corridors.append((e.a, e.b))

    best = _refine(order, layout, rng, max_iterations)
    moves = snap_doors(layout)

    logger.info(
        "Embedded %d rooms (cost %.1f after refinement, %d snap moves)",
        len(layout.rooms), best, moves,
    )
    return layout


def _shelf_pack(order: List[RoomNode], layout: Layout) -> None:
    placed = index.Index()
    x = y = 0
    for i, node in enumerate(order):
        rect = Rect(x, y, node.width, node.height)
        tries = 0
        while _intersects_any(rect, placed, layout) and tries < PACK_TRIES:
            x += 1
            if x > SHELF_COLUMN_LIMIT:
                x = 0
                y += 1
            rect = Rect(x, y, node.width, node.height)
            tries += 1

        if _intersects_any(rect, placed, layout):
            # Scan budget exhausted: open a fresh row below everything placed.
            bottom = max(p.rect.y_max for p in layout.rooms.values())
            rect = Rect(0, bottom, node.width, node.height)
            logger.debug("Room %d fell back to a fresh row at y=%d", node.id, bottom)

        placed.insert(node.id, rect.bounds)
        layout.rooms[node.id] = PlacedRoom(node=node, rect=rect)


def _intersects_any(rect: Rect, placed: index.Index, layout: Layout) -> bool:
    # The rtree query is inclusive of shared edges, so confirm with a strict test.
    for candidate in placed.intersection(rect.bounds):
        if rect.overlaps(layout.rooms[candidate].rect):
            return True
    return False


def _refine(order: List[RoomNode], layout: Layout, rng: random.Random, max_iterations: int) -> float:
    best = layout_cost(layout)
    if len(order) < 2:
        return best

    for _ in range(max_iterations):
        a = order[rng.randrange(len(order))]
        b = order[rng.randrange(len(order))]
        if a.id == b.id:
            continue

        ra, rb = layout.rooms[a.id].rect, layout.rooms[b.id].rect
        layout.rooms[a.id].rect = ra.moved_to(rb.x, rb.y)
        layout.rooms[b.id].rect = rb.moved_to(ra.x, ra.y)

        if _collides(layout, a.id) or _collides(layout, b.id):
            cost = None
        else:
            cost = layout_cost(layout)

        if cost is not None and cost <= best:
            best = cost
        else:
            layout.rooms[a.id].rect = ra
            layout.rooms[b.id].rect = rb
    return best


def _collides(layout: Layout, node_id: int, rect: Optional[Rect] = None) -> bool:
    rect = rect or layout.rooms[node_id].rect
    return any(
        other_id != node_id and rect.overlaps(other.rect)
        for other_id, other in layout.rooms.items()
    )


def snap_doors(layout: Layout, max_passes: int = SNAP_PASSES) -> int:
    """Slide door-connected rooms into contact.

    For each door whose rooms neither overlap nor touch, the second room moves
    along the axis with the smaller gap. Moves that would overlap another room
    are skipped. Repeats until nothing moves or the pass budget runs out.

    Returns:
        The number of moves applied.
    """
    moves = 0
    for _ in range(max_passes):
        moved_any = False
        for a, b in layout.doors:
            ra, rb = layout.rooms[a].rect, layout.rooms[b].rect
            if ra.overlaps(rb) or rects_touch(ra, rb):
                continue

            shift = _contact_shift(ra, rb)
            if shift is None:
                continue
            moved = rb.translated(*shift)
            if _collides(layout, b, moved):
                continue
            layout.rooms[b].rect = moved
            moved_any = True
            moves += 1
        if not moved_any:
            break
    return moves


def _contact_shift(ra: Rect, rb: Rect) -> Optional[Tuple[int, int]]:
    dx = dy = 0
    if ra.x_max < rb.x:
        dx = ra.x_max - rb.x
    elif rb.x_max < ra.x:
        dx = ra.x - rb.x_max
    if ra.y_max < rb.y:
        dy = ra.y_max - rb.y
    elif rb.y_max < ra.y:
        dy = ra.y - rb.y_max

    if dx != 0 and (dy == 0 or abs(dx) <= abs(dy)):
        if ra.y_max == rb.y or rb.y_max == ra.y:
            # Flush on y already; one more cell turns a corner contact into a shared wall.
            dx += 1 if dx > 0 else -1
        return dx, 0
    if dy != 0:
        if ra.x_max == rb.x or rb.x_max == ra.x:
            dy += 1 if dy > 0 else -1
        return 0, dy
    x_flush = ra.x_max == rb.x or rb.x_max == ra.x
    y_flush = ra.y_max == rb.y or rb.y_max == ra.y
    if x_flush and y_flush:
        # Corner contact only.
        return 0, (-1 if rb.y == ra.y_max else 1)
    return None
