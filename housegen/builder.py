"""Instantiate a layout: rooms, door connections and routed corridors.

Every placed room gets a content variant from the catalog. Door edges are
realised by matching a pair of free, compatible sockets on two touching rooms
and snapping the second room onto the first; door edges that cannot be matched
fall back to corridors. Corridors are routed cell by cell with a breadth-first
search that never enters a room's footprint.
"""

import logging
import random
from collections import deque
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Set, Tuple

import numpy as np

from housegen.catalog import ContentCatalog
from housegen.config import CORRIDOR_VARIANT_SEED_OFFSET, ROOM_VARIANT_SEED_OFFSET
from housegen.layout_embedder import Layout, Rect
from housegen.scene import DoorLink, RoomInstance, Scene
from housegen.sockets import ConnectionSocket, rank_socket_pairs, yaw_of, yaw_to_face
from housegen.space import Cell, GridSpace, border_cells
from housegen.validator import LinkValidator, ValidationResult, Validator

logger = logging.getLogger(__name__)

SNAP_TOLERANCE_CELLS = 2.0
MAX_BFS_EXPANSIONS = 20000

Edge = Tuple[int, int]


@dataclass
class CorridorRoute:
    cells: List[Cell]
    exit_direction: Cell


@dataclass
class BuildReport:
    """What a build actually realised."""
    door_links: List[DoorLink] = field(default_factory=list)
    corridor_paths: Dict[Edge, List[Cell]] = field(default_factory=dict)
    deferred: List[Edge] = field(default_factory=list)
    dropped: List[Edge] = field(default_factory=list)
    skipped_rooms: List[int] = field(default_factory=list)
    corridor_cells: Set[Cell] = field(default_factory=set)
    segments_spawned: int = 0
    validation: Optional[ValidationResult] = None

    @property
    def links(self) -> List[Edge]:
        return [(d.a, d.b) for d in self.door_links] + list(self.corridor_paths)

    @property
    def socket_pairings(self) -> List[Tuple[int, str, int, str]]:
        return [(d.a, d.socket_a, d.b, d.socket_b) for d in self.door_links]


def build(
    layout: Layout,
    catalog: ContentCatalog,
    seed: int,
    scene: Optional[Scene] = None,
    validator: Optional[Validator] = None,
) -> BuildReport:
    """Instantiate ``layout`` into ``scene``.

    Any content already in the scene is discarded first. All state used while
    building (occupancy grids, used sockets) belongs to this call.

    Args:
        layout: The embedded layout. It is not modified.
        catalog: Source of room and corridor variants.
        seed: Building seed; room and corridor picks use their own offsets.
        scene: Target scene. A fresh one is used when omitted.
        validator: Connectivity validator; defaults to ``LinkValidator``.

    Returns:
        A report of the realised doors and corridors.
    """
    scene = scene if scene is not None else Scene()
    scene.clear()
    validator = validator if validator is not None else LinkValidator()

    room_rng = random.Random(seed + ROOM_VARIANT_SEED_OFFSET)
    corridor_rng = random.Random(seed + CORRIDOR_VARIANT_SEED_OFFSET)
    space = GridSpace.from_layout(layout)
    tolerance = SNAP_TOLERANCE_CELLS * max(layout.cell_size)
    report = BuildReport()

    for node_id, placed in layout.rooms.items():
        variant = catalog.pick_room_variant(placed.node.archetype_id, room_rng)
        if variant is None:
            logger.debug("No content variant for %s; room %d left empty", placed.node.archetype_id, node_id)
            report.skipped_rooms.append(node_id)
            continue
        scene.spawn_room(placed, variant, space.cell_to_world((placed.rect.x, placed.rect.y)),
                         space.cell_to_world((placed.rect.x_max, placed.rect.y_max)))
        space.mark_room(node_id, placed.rect)

    for a, b in layout.doors:
        room_a, room_b = scene.room(a), scene.room(b)
        if room_a is None or room_b is None:
            continue
        link = connect_door(scene, room_a, room_b, tolerance)
        if link is None:
            logger.debug("Door %d-%d could not be matched; routing a corridor instead", a, b)
            report.deferred.append((a, b))
        else:
            report.door_links.append(link)

    for edge in list(layout.corridors) + report.deferred:
        a, b = edge
        if scene.room(a) is None or scene.room(b) is None:
            continue
        route = route_corridor(space, layout.rect(a), layout.rect(b))
        if route is None:
            logger.warning("No corridor path between rooms %d and %d; connection dropped", a, b)
            report.dropped.append(edge)
            continue
        report.segments_spawned += _emit_segments(scene, space, catalog, corridor_rng, route, edge)
        report.corridor_paths[edge] = route.cells

    report.corridor_cells = space.corridor_cells()
    report.validation = validator.validate(scene, report.links)

    logger.info(
        "Built %d rooms, %d doors, %d corridors (%d cells), %d dropped",
        len(scene.rooms), len(report.door_links), len(report.corridor_paths),
        len(report.corridor_cells), len(report.dropped),
    )
    return report


def connect_door(scene: Scene, room_a: RoomInstance, room_b: RoomInstance,
                 tolerance: float) -> Optional[DoorLink]:
    """Join two touching rooms through their best compatible socket pair.

    Returns:
        The door link, or None when the rooms do not touch or no free
        compatible pair lies within ``tolerance`` meters.
    """
    if not room_a.rect.touches(room_b.rect):
        return None

    direction = room_b.center - room_a.center
    for distance, socket_a, socket_b in rank_socket_pairs(room_a.free_sockets(), room_b.free_sockets(), direction):
        if distance > tolerance:
            continue
        align_socket_pair(room_b, socket_a, socket_b)
        return scene.open_door(room_a, socket_a, room_b, socket_b)
    return None


def align_socket_pair(room_b: RoomInstance, socket_a: ConnectionSocket, socket_b: ConnectionSocket) -> None:
    """Turn and shift ``room_b`` so ``socket_b`` sits on ``socket_a`` facing it."""
    room_b.rotate_about(socket_b.position.copy(), yaw_to_face(socket_b.normal, socket_a.normal))
    room_b.translate(socket_a.position - socket_b.position)


def route_corridor(space: GridSpace, rect_a: Rect, rect_b: Rect,
                   max_expansions: int = MAX_BFS_EXPANSIONS) -> Optional[CorridorRoute]:
    """Find a corridor from just outside ``rect_a`` to just outside ``rect_b``."""
    target = rect_b.center
    starts = [(cell, d) for cell, d in border_cells(rect_a) if space.is_free(cell)]
    if not starts:
        return None
    start, exit_direction = min(starts, key=lambda cd: _distance_to(cd[0], target))

    goals = [cell for cell, _ in border_cells(rect_b) if space.is_free(cell)]
    if not goals:
        return None
    goal = min(goals, key=lambda c: abs(c[0] - start[0]) + abs(c[1] - start[1]))

    cells = find_path(space, start, goal, max_expansions)
    if cells is None:
        return None
    return CorridorRoute(cells=cells, exit_direction=exit_direction)


def _distance_to(cell: Cell, point: Tuple[float, float]) -> float:
    return abs(cell[0] + 0.5 - point[0]) + abs(cell[1] + 0.5 - point[1])


def find_path(space: GridSpace, start: Cell, goal: Cell,
              max_expansions: int = MAX_BFS_EXPANSIONS) -> Optional[List[Cell]]:
    """Breadth-first search over free cells. Returns the cells from start to goal."""
    if not space.is_free(start) or not space.is_free(goal):
        return None

    parents: Dict[Cell, Optional[Cell]] = {start: None}
    queue = deque([start])
    expansions = 0
    while queue:
        cur = queue.popleft()
        if cur == goal:
            path = [cur]
            while parents[path[-1]] is not None:
                path.append(parents[path[-1]])
            path.reverse()
            return path

        expansions += 1
        if expansions > max_expansions:
            logger.debug("Search from %s to %s gave up after %d expansions", start, goal, max_expansions)
            return None

        for nxt in space.neighbours(cur):
            if nxt in parents or not space.is_free(nxt):
                continue
            parents[nxt] = cur
            queue.append(nxt)
    return None


def _emit_segments(scene: Scene, space: GridSpace, catalog: ContentCatalog, rng: random.Random,
                   route: CorridorRoute, edge: Edge) -> int:
    start = route.cells[0]
    prev = (start[0] - route.exit_direction[0], start[1] - route.exit_direction[1])
    spawned = 0
    for cell in route.cells:
        direction = np.subtract(cell, prev)
        prev = cell
        if not space.mark_corridor(cell):
            continue
        variant = catalog.pick_corridor_variant(rng)
        if variant is None:
            continue
        scene.spawn_corridor_segment(cell, space.cell_center_world(cell), variant, yaw_of(direction), edge)
        spawned += 1
    return spawned
