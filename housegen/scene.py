"""The target that generated content is spawned into.

A ``Scene`` owns every room instance, corridor segment and door opened by one
build. Building again into the same scene clears it first.
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

import numpy as np

from housegen.catalog import CorridorVariant, RoomVariant
from housegen.layout_embedder import PlacedRoom, Rect
from housegen.sockets import ConnectionSocket, rotation_matrix

logger = logging.getLogger(__name__)


@dataclass(eq=False)
class RoomInstance:
    """A room variant fitted to its grid rectangle and placed in the world."""
    node_id: int
    archetype_id: str
    variant: RoomVariant
    rect: Rect
    position: np.ndarray
    center: np.ndarray
    yaw: float = 0.0
    sockets: List[ConnectionSocket] = field(default_factory=list)

    @property
    def name(self) -> str:
        return f"Room_{self.archetype_id}_{self.node_id}"

    def free_sockets(self) -> List[ConnectionSocket]:
        return [s for s in self.sockets if not s.used]

    def rotate_about(self, pivot: np.ndarray, degrees: float) -> None:
        """Yaw the whole room about a world-space pivot on the up axis."""
        if degrees == 0.0:
            return
        rot = rotation_matrix(degrees)
        pivot = np.asarray(pivot, dtype=float)
        self.position = pivot + rot @ (self.position - pivot)
        self.center = pivot + rot @ (self.center - pivot)
        for s in self.sockets:
            s.position = pivot + rot @ (s.position - pivot)
            s.normal = rot @ s.normal
        self.yaw = (self.yaw + degrees) % 360.0

    def translate(self, delta: np.ndarray) -> None:
        delta = np.asarray(delta, dtype=float)
        self.position = self.position + delta
        self.center = self.center + delta
        for s in self.sockets:
            s.position = s.position + delta


@dataclass(frozen=True)
class CorridorSegment:
    cell: Tuple[int, int]
    position: Tuple[float, float]
    yaw: float
    variant: CorridorVariant
    edge: Tuple[int, int]
    name: str = "Corridor_Segment"


@dataclass(frozen=True)
class DoorLink:
    """Two rooms joined through a matched socket pair."""
    a: int
    b: int
    socket_a: str
    socket_b: str
    position: Tuple[float, float]


class Scene:
    """Container for everything one build instantiates."""

    def __init__(self):
        self.rooms: Dict[int, RoomInstance] = {}
        self.corridors: List[CorridorSegment] = []
        self.doors: List[DoorLink] = []

    def __len__(self) -> int:
        return len(self.rooms) + len(self.corridors)

    def clear(self) -> None:
        if self.rooms or self.corridors:
            logger.debug("Clearing scene (%d rooms, %d corridor segments)", len(self.rooms), len(self.corridors))
        self.rooms.clear()
        self.corridors.clear()
        self.doors.clear()

    def spawn_room(self, placed: PlacedRoom, variant: RoomVariant,
                   origin: Tuple[float, float], far_corner: Tuple[float, float]) -> RoomInstance:
        """Fit ``variant`` between two world-space corners and add it to the scene."""
        origin = np.array(origin, dtype=float)
        extent = np.array(far_corner, dtype=float) - origin
        sockets = [
            ConnectionSocket(
                name=t.name,
                position=origin + extent * np.array(t.anchor),
                normal=np.array(t.normal, dtype=float),
                tag=t.tag,
                accepts=tuple(t.accepts),
            )
            for t in variant.sockets
        ]
        instance = RoomInstance(
            node_id=placed.node.id,
            archetype_id=placed.node.archetype_id,
            variant=variant,
            rect=placed.rect,
            position=origin,
            center=origin + extent * 0.5,
            sockets=sockets,
        )
        self.rooms[instance.node_id] = instance
        return instance

    def spawn_corridor_segment(self, cell: Tuple[int, int], position: Tuple[float, float],
                               variant: CorridorVariant, yaw: float, edge: Tuple[int, int]) -> CorridorSegment:
        segment = CorridorSegment(cell=cell, position=position, yaw=yaw, variant=variant, edge=edge)
        self.corridors.append(segment)
        return segment

    def open_door(self, a: RoomInstance, socket_a: ConnectionSocket,
                  b: RoomInstance, socket_b: ConnectionSocket) -> DoorLink:
        socket_a.used = True
        socket_b.used = True
        x, y = socket_a.position
        link = DoorLink(a.node_id, b.node_id, socket_a.name, socket_b.name, (float(x), float(y)))
        self.doors.append(link)
        return link

    def room(self, node_id: int) -> Optional[RoomInstance]:
        return self.rooms.get(node_id)
