"""Content catalog: which physical variants exist for each room type.

The catalog is consulted through two calls, ``pick_room_variant`` and
``pick_corridor_variant``; both draw from an RNG supplied by the caller so the
choice stays reproducible from the building seed.
"""

from __future__ import annotations

import json
import random
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from housegen.program import ProgramError

DOOR_TAG = "Door_80cm"


@dataclass(frozen=True)
class SocketTemplate:
    """A socket on a room variant, in coordinates normalised to the footprint.

    ``anchor`` is (u, v) in [0, 1]^2 and is stretched over the room's rectangle
    when the variant is fitted to it. ``normal`` is the outward direction.
    """
    name: str
    anchor: Tuple[float, float]
    normal: Tuple[float, float]
    tag: str = DOOR_TAG
    accepts: Tuple[str, ...] = (DOOR_TAG,)

    @classmethod
    def from_dict(cls, data: dict) -> "SocketTemplate":
        tag = str(data.get("tag", DOOR_TAG))
        return cls(
            name=str(data["name"]),
            anchor=(float(data["anchor"][0]), float(data["anchor"][1])),
            normal=(float(data["normal"][0]), float(data["normal"][1])),
            tag=tag,
            accepts=tuple(data.get("accepts", (tag,))),
        )


@dataclass(frozen=True)
class RoomVariant:
    name: str
    sockets: Tuple[SocketTemplate, ...] = ()


@dataclass(frozen=True)
class CorridorVariant:
    name: str


def wall_midpoint_sockets(tag: str = DOOR_TAG, accepts: Optional[Tuple[str, ...]] = None) -> Tuple[SocketTemplate, ...]:
    """One socket centred on each wall."""
    accepts = accepts if accepts is not None else (tag,)
    return (
        SocketTemplate("south", (0.5, 0.0), (0.0, -1.0), tag, accepts),
        SocketTemplate("north", (0.5, 1.0), (0.0, 1.0), tag, accepts),
        SocketTemplate("west", (0.0, 0.5), (-1.0, 0.0), tag, accepts),
        SocketTemplate("east", (1.0, 0.5), (1.0, 0.0), tag, accepts),
    )


@dataclass
class ContentCatalog:
    rooms: Dict[str, List[RoomVariant]] = field(default_factory=dict)
    corridors: List[CorridorVariant] = field(default_factory=list)

    def pick_room_variant(self, archetype_id: str, rng: random.Random) -> Optional[RoomVariant]:
        variants = self.rooms.get(archetype_id)
        if not variants:
            return None
        return variants[rng.randrange(len(variants))]

    def pick_corridor_variant(self, rng: random.Random) -> Optional[CorridorVariant]:
        if not self.corridors:
            return None
        return self.corridors[rng.randrange(len(self.corridors))]

    @classmethod
    def from_dict(cls, data: dict) -> "ContentCatalog":
        """Build a catalog from its JSON form.

        Expected shape::

            {"rooms": {"Foyer": [{"name": "Foyer1", "sockets": [...]}]},
             "corridors": [{"name": "Hall"}]}

        A room variant without a ``sockets`` list gets one socket per wall.
        """
        try:
            rooms: Dict[str, List[RoomVariant]] = {}
            for room_id, variants in data.get("rooms", {}).items():
                rooms[room_id] = []
                for v in variants:
                    if "sockets" in v:
                        sockets = tuple(SocketTemplate.from_dict(s) for s in v["sockets"])
                    else:
                        sockets = wall_midpoint_sockets()
                    rooms[room_id].append(RoomVariant(str(v["name"]), sockets))
            corridors = [CorridorVariant(str(c["name"])) for c in data.get("corridors", [])]
        except (KeyError, TypeError, ValueError, IndexError, AttributeError) as e:
            raise ProgramError(f"Malformed catalog: {e}") from e
        return cls(rooms=rooms, corridors=corridors)


def load_catalog(path: str) -> ContentCatalog:
    with open(path, "r", encoding="utf-8") as f:
        try:
            data = json.load(f)
        except json.JSONDecodeError as e:
            raise ProgramError(f"{path}: invalid JSON ({e})") from e
    return ContentCatalog.from_dict(data)


def sample_catalog() -> ContentCatalog:
    """Variants for the sample house program."""
    quarter = (
        SocketTemplate("south", (0.25, 0.0), (0.0, -1.0)),
        SocketTemplate("north", (0.75, 1.0), (0.0, 1.0)),
        SocketTemplate("west", (0.0, 0.25), (-1.0, 0.0)),
        SocketTemplate("east", (1.0, 0.75), (1.0, 0.0)),
    )
    mid = wall_midpoint_sockets()
    return ContentCatalog(
        rooms={
            "Foyer": [RoomVariant("Foyer1", mid), RoomVariant("Foyer2", quarter)],
            "Living": [RoomVariant("Living1", mid), RoomVariant("Living2", quarter)],
            "Kitchen": [RoomVariant("Kitchen", mid)],
            "Bathroom": [RoomVariant("Bathroom", mid)],
        },
        corridors=[CorridorVariant("Hall")],
    )
