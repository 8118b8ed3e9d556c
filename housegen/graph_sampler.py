"""Sample a topological room graph from a house program.

The graph grows outward from the foyer as a random tree. Minimum counts take
priority over weights, a handful of extra loop edges are allowed, and two
repair passes run at the end: one injects any rooms still missing to meet a
minimum, the other adds doors for hard adjacency requirements.
"""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass
from typing import Dict, List, Optional, Union

from housegen.graph import EdgeKind, RoomEdge, RoomGraph, RoomNode
from housegen.program import FOYER_ID, ProgramSpec, RoomArchetype

logger = logging.getLogger(__name__)

PREFER_BONUS = 1.3
LOOP_PROBABILITY = 0.2
LOOP_MIN_NODES = 4
BRANCH_PROBABILITY = 0.7
PRUNE_PROBABILITY = 0.3
PRUNE_THRESHOLD = 3


@dataclass(frozen=True)
class Ok:
    graph: RoomGraph


@dataclass(frozen=True)
class MissingArchetype:
    archetype_id: str


SampleResult = Union[Ok, MissingArchetype]


class MissingArchetypeError(ValueError):
    """A mandatory archetype is absent from the program."""

    def __init__(self, archetype_id: str):
        super().__init__(f"Archetype '{archetype_id}' is mandatory but missing from the program")
        self.archetype_id = archetype_id


def sample(program: ProgramSpec, seed: int) -> RoomGraph:
    """Sample a room graph, raising if the program has no foyer.

    Raises:
        MissingArchetypeError: If no archetype has id ``"Foyer"``.
        ProgramError: If the program fails validation.
    """
    result = try_sample(program, seed)
    if isinstance(result, MissingArchetype):
        raise MissingArchetypeError(result.archetype_id)
    return result.graph


def try_sample(program: ProgramSpec, seed: int) -> SampleResult:
    """Sample a room graph for ``program``, fully determined by ``seed``.

    Args:
        program: The house program.
        seed: Seed for the sampling RNG stream.

    Returns:
        ``Ok(graph)``, or ``MissingArchetype("Foyer")`` when the root archetype
        is absent. Nothing is sampled in the latter case.

    Raises:
        ProgramError: If the program fails validation.
    """
    program.validate()
    rng = random.Random(seed)
    foyer = program.archetype(FOYER_ID)
    if foyer is None:
        logger.error("Program has no '%s' archetype; aborting generation", FOYER_ID)
        return MissingArchetype(FOYER_ID)

    graph = RoomGraph()
    foyer_node = _make_node(0, foyer, rng)
    graph.nodes.append(foyer_node)

    need: Dict[str, int] = {}
    for a in program.archetypes:
        if a.id != FOYER_ID and a.min_count > 0:
            need[a.id] = a.min_count

    current = {a.id: 0 for a in program.archetypes}
    current[foyer.id] = 1

    frontier = [foyer_node.id]
    next_id = 1
    loops = 0
    corridor_count = 0
    corridor_limit = program.corridor_limit

    while len(graph.nodes) < program.target_room_count and frontier:
        parent = graph.node(frontier[rng.randrange(len(frontier))])

        pick_id = _pick_archetype_id(program, need, current, parent.archetype_id, rng)
        if pick_id is None:
            logger.debug("No eligible archetype left; stopping expansion at %d rooms", len(graph.nodes))
            break

        archetype = program.archetype(pick_id)
        node = _make_node(next_id, archetype, rng)
        next_id += 1
        graph.nodes.append(node)
        current[pick_id] = current.get(pick_id, 0) + 1

        if archetype.always_door:
            kind = EdgeKind.DOOR
        else:
            kind = EdgeKind.DOOR if rng.random() < 0.5 else EdgeKind.CORRIDOR
        if kind == EdgeKind.CORRIDOR:
            if corridor_count >= corridor_limit:
                kind = EdgeKind.DOOR
            else:
                corridor_count += 1
        graph.edges.append(RoomEdge(parent.id, node.id, kind))

        if pick_id in need:
            need[pick_id] -= 1
            if need[pick_id] <= 0:
                del need[pick_id]

        # Rare extra edges close loops in the otherwise tree-shaped graph.
        if loops < program.max_loops and len(graph.nodes) > LOOP_MIN_NODES and rng.random() < LOOP_PROBABILITY:
            other = graph.nodes[rng.randrange(len(graph.nodes))]
            if other.id != node.id and not graph.has_edge(node.id, other.id):
                loop_kind = EdgeKind.CORRIDOR
                if corridor_count >= corridor_limit:
                    loop_kind = EdgeKind.DOOR
                else:
                    corridor_count += 1
                graph.edges.append(RoomEdge(node.id, other.id, loop_kind))
                loops += 1

        if rng.random() < BRANCH_PROBABILITY:
            frontier.append(node.id)
        if len(frontier) > PRUNE_THRESHOLD and rng.random() < PRUNE_PROBABILITY:
            frontier.pop(rng.randrange(len(frontier)))

    next_id = _inject_missing(graph, program, need, current, foyer_node, next_id, rng)
    _repair_adjacency(graph, program)

    logger.info(
        "Sampled %d rooms, %d doors, %d corridors (seed=%d)",
        len(graph.nodes), graph.edge_count(EdgeKind.DOOR), graph.edge_count(EdgeKind.CORRIDOR), seed,
    )
    return Ok(graph)


def _make_node(node_id: int, archetype: RoomArchetype, rng: random.Random) -> RoomNode:
    width = rng.randint(archetype.size_min[0], archetype.size_max[0])
    height = rng.randint(archetype.size_min[1], archetype.size_max[1])
    return RoomNode(node_id, archetype.id, width, height)


def _pick_archetype_id(
    program: ProgramSpec,
    need: Dict[str, int],
    current: Dict[str, int],
    parent_archetype_id: str,
    rng: random.Random,
) -> Optional[str]:
    """Choose the next archetype: outstanding minimums first, then by weight."""
    if need:
        pending = list(need.keys())
        return pending[rng.randrange(len(pending))]

    # The foyer is the root; a building never gets a second one.
    eligible: List[RoomArchetype] = [
        a for a in program.archetypes
        if a.id != FOYER_ID and a.max_count > 0 and current.get(a.id, 0) < a.max_count
    ]
    if not eligible:
        return None

    def adjusted(a: RoomArchetype) -> float:
        w = max(0.0, a.weight)
        if parent_archetype_id in a.prefer_adjacent_to:
            w *= PREFER_BONUS
        return w

    weights = [adjusted(a) for a in eligible]
    total = sum(weights)
    if total <= 0.0:
        return eligible[rng.randrange(len(eligible))].id

    t = rng.random() * total
    acc = 0.0
    for a, w in zip(eligible, weights):
        acc += w
        if t <= acc:
            return a.id
    return eligible[-1].id


def _inject_missing(
    graph: RoomGraph,
    program: ProgramSpec,
    need: Dict[str, int],
    current: Dict[str, int],
    foyer_node: RoomNode,
    next_id: int,
    rng: random.Random,
) -> int:
    """Force-instantiate rooms still short of their minimum, hung off the foyer."""
    for archetype_id, missing in list(need.items()):
        archetype = program.archetype(archetype_id)
        logger.debug("Injecting %d fallback %s room(s) at the foyer", missing, archetype_id)
        for _ in range(missing):
            node = _make_node(next_id, archetype, rng)
            next_id += 1
            graph.nodes.append(node)
            graph.edges.append(RoomEdge(foyer_node.id, node.id, EdgeKind.DOOR))
            current[archetype_id] = current.get(archetype_id, 0) + 1
        del need[archetype_id]
    return next_id


def _repair_adjacency(graph: RoomGraph, program: ProgramSpec) -> None:
    """Best-effort door insertion for ``must_be_adjacent_to`` requirements.

    Only a door satisfies a requirement. A corridor already joining the pair is
    upgraded to a door rather than duplicated.
    """
    for node in list(graph.nodes):
        archetype = program.archetype(node.archetype_id)
        if archetype is None or not archetype.must_be_adjacent_to:
            continue

        door_types = {
            graph.node(e.other(node.id)).archetype_id
            for e in graph.edges_of(node.id) if e.kind == EdgeKind.DOOR
        }
        for need_type in archetype.must_be_adjacent_to:
            if need_type in door_types:
                continue
            corridor = next(
                (e for e in graph.edges_of(node.id)
                 if e.kind == EdgeKind.CORRIDOR and graph.node(e.other(node.id)).archetype_id == need_type),
                None,
            )
            if corridor is not None:
                corridor.kind = EdgeKind.DOOR
                door_types.add(need_type)
                continue
            target = next((n for n in graph.nodes if n.archetype_id == need_type and n.id != node.id), None)
            if target is None:
                logger.warning(
                    "Room %d (%s) must be adjacent to %s but no such room exists",
                    node.id, node.archetype_id, need_type,
                )
                continue
            graph.edges.append(RoomEdge(node.id, target.id, EdgeKind.DOOR))
            door_types.add(need_type)
