"""Room archetypes and the house program that drives generation.

A program is the declarative description of a building: which room types
exist, how many of each are allowed, how big they may be and how they like to
sit next to each other. Programs are plain data and can be loaded from JSON.
"""

from __future__ import annotations

import json
import math
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

FOYER_ID = "Foyer"

# Archetypes that always attach to their parent through a door.
DOOR_ONLY_IDS = frozenset({"Bedroom", "Bathroom"})


class ProgramError(ValueError):
    """Raised when a program or catalog configuration is invalid."""


@dataclass(frozen=True)
class RoomArchetype:
    """A room type: size range in grid cells, count bounds and adjacency hints."""
    id: str
    size_min: Tuple[int, int] = (3, 3)
    size_max: Tuple[int, int] = (6, 5)
    min_count: int = 0
    max_count: int = 10
    weight: float = 0.5
    must_be_adjacent_to: Tuple[str, ...] = ()
    prefer_adjacent_to: Tuple[str, ...] = ()
    display_name: Optional[str] = None
    door_only: bool = False

    @property
    def always_door(self) -> bool:
        return self.door_only or self.id in DOOR_ONLY_IDS

    def validate(self) -> None:
        if not self.id:
            raise ProgramError("Archetype id must be a non-empty string")
        for axis in (0, 1):
            if self.size_min[axis] < 1:
                raise ProgramError(f"{self.id}: size_min must be at least 1 cell, got {self.size_min}")
            if self.size_min[axis] > self.size_max[axis]:
                raise ProgramError(f"{self.id}: size_min {self.size_min} exceeds size_max {self.size_max}")
        if self.min_count < 0 or self.max_count < 0:
            raise ProgramError(f"{self.id}: counts must be non-negative")
        if self.min_count > self.max_count:
            raise ProgramError(f"{self.id}: min_count {self.min_count} exceeds max_count {self.max_count}")
        if self.weight < 0:
            raise ProgramError(f"{self.id}: weight must be >= 0, got {self.weight}")

    @classmethod
    def from_dict(cls, data: dict) -> "RoomArchetype":
        try:
            archetype = cls(
                id=str(data["id"]),
                size_min=_int_pair(data.get("size_min", (3, 3))),
                size_max=_int_pair(data.get("size_max", (6, 5))),
                min_count=int(data.get("min_count", 0)),
                max_count=int(data.get("max_count", 10)),
                weight=float(data.get("weight", 0.5)),
                must_be_adjacent_to=tuple(data.get("must_be_adjacent_to") or ()),
                prefer_adjacent_to=tuple(data.get("prefer_adjacent_to") or ()),
                display_name=data.get("display_name"),
                door_only=bool(data.get("door_only", False)),
            )
        except (KeyError, TypeError, ValueError) as e:
            raise ProgramError(f"Malformed archetype {data!r}: {e}") from e
        archetype.validate()
        return archetype

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "size_min": list(self.size_min),
            "size_max": list(self.size_max),
            "min_count": self.min_count,
            "max_count": self.max_count,
            "weight": self.weight,
            "must_be_adjacent_to": list(self.must_be_adjacent_to),
            "prefer_adjacent_to": list(self.prefer_adjacent_to),
            "display_name": self.display_name,
            "door_only": self.door_only,
        }


@dataclass(frozen=True)
class ProgramSpec:
    """Generation configuration shared by every stage of the pipeline."""
    archetypes: Tuple[RoomArchetype, ...]
    target_room_count: int = 12
    max_loops: int = 1
    corridor_area_share: float = 0.2
    cell_size: Tuple[float, float] = (0.5, 0.5)
    _by_id: Dict[str, RoomArchetype] = field(init=False, repr=False, compare=False)

    def __post_init__(self):
        object.__setattr__(self, "archetypes", tuple(self.archetypes))
        object.__setattr__(self, "_by_id", {a.id: a for a in self.archetypes})

    @property
    def corridor_limit(self) -> int:
        """Maximum number of edges that may be realised as corridors."""
        return max(0, math.ceil(self.corridor_area_share * self.target_room_count))

    def archetype(self, archetype_id: str) -> Optional[RoomArchetype]:
        return self._by_id.get(archetype_id)

    def validate(self) -> None:
        """Check the program for configuration errors.

        A missing Foyer is not checked here; the sampler reports it as a
        ``MissingArchetype`` result.

        Raises:
            ProgramError: On the first problem found.
        """
        seen = set()
        for archetype in self.archetypes:
            archetype.validate()
            if archetype.id in seen:
                raise ProgramError(f"Duplicate archetype id: {archetype.id}")
            seen.add(archetype.id)
            if archetype.id == FOYER_ID and archetype.min_count > 1:
                raise ProgramError(f"A building has exactly one {FOYER_ID}, got min_count {archetype.min_count}")
        if self.target_room_count < 1:
            raise ProgramError(f"target_room_count must be positive, got {self.target_room_count}")
        if self.max_loops < 0:
            raise ProgramError(f"max_loops must be >= 0, got {self.max_loops}")
        if not 0.0 <= self.corridor_area_share <= 1.0:
            raise ProgramError(f"corridor_area_share must lie in [0, 1], got {self.corridor_area_share}")
        if self.cell_size[0] <= 0 or self.cell_size[1] <= 0:
            raise ProgramError(f"cell_size must be positive, got {self.cell_size}")

    @classmethod
    def from_dict(cls, data: dict) -> "ProgramSpec":
        try:
            archetypes = [RoomArchetype.from_dict(a) for a in data["archetypes"]]
            cell = data.get("cell_size", (0.5, 0.5))
            program = cls(
                archetypes=tuple(archetypes),
                target_room_count=int(data.get("target_room_count", 12)),
                max_loops=int(data.get("max_loops", 1)),
                corridor_area_share=float(data.get("corridor_area_share", 0.2)),
                cell_size=(float(cell[0]), float(cell[1])),
            )
        except (KeyError, TypeError, ValueError, IndexError) as e:
            if isinstance(e, ProgramError):
                raise
            raise ProgramError(f"Malformed program: {e}") from e
        program.validate()
        return program

    def to_dict(self) -> dict:
        return {
            "archetypes": [a.to_dict() for a in self.archetypes],
            "target_room_count": self.target_room_count,
            "max_loops": self.max_loops,
            "corridor_area_share": self.corridor_area_share,
            "cell_size": list(self.cell_size),
        }


def _int_pair(value) -> Tuple[int, int]:
    x, y = value
    return int(x), int(y)


def load_program(path: str) -> ProgramSpec:
    """Load and validate a program from a JSON file."""
    with open(path, "r", encoding="utf-8") as f:
        try:
            data = json.load(f)
        except json.JSONDecodeError as e:
            raise ProgramError(f"{path}: invalid JSON ({e})") from e
    return ProgramSpec.from_dict(data)


def sample_program(
    target_room_count: int = 10,
    corridor_area_share: float = 0.2,
    max_loops: int = 1,
    cell_size: Tuple[float, float] = (0.5, 0.5),
) -> ProgramSpec:
    """The small sample house: foyer, living rooms, kitchens and bathrooms."""
    archetypes: List[RoomArchetype] = [
        RoomArchetype("Foyer", size_min=(3, 3), size_max=(4, 4), min_count=1, max_count=1),
        RoomArchetype("Living", size_min=(5, 5), size_max=(7, 7), min_count=1, max_count=2,
                      prefer_adjacent_to=("Foyer",)),
        RoomArchetype("Kitchen", size_min=(4, 4), size_max=(6, 6), min_count=1, max_count=2,
                      prefer_adjacent_to=("Living",)),
        RoomArchetype("Bathroom", size_min=(3, 3), size_max=(4, 4), min_count=1, max_count=3),
    ]
    return ProgramSpec(
        archetypes=tuple(archetypes),
        target_room_count=target_room_count,
        max_loops=max_loops,
        corridor_area_share=corridor_area_share,
        cell_size=cell_size,
    )
