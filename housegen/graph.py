from __future__ import annotations

from collections import deque
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Set


class EdgeKind(Enum):
    DOOR = "door"
    CORRIDOR = "corridor"


@dataclass(frozen=True)
class RoomNode:
    """A sampled room. Node 0 is always the foyer; sizes are in grid cells."""
    id: int
    archetype_id: str
    width: int
    height: int


@dataclass
class RoomEdge:
    """An unordered connection between two rooms."""
    a: int
    b: int
    kind: EdgeKind

    def joins(self, a: int, b: int) -> bool:
        return (self.a == a and self.b == b) or (self.a == b and self.b == a)

    def other(self, node_id: int) -> int:
        return self.b if self.a == node_id else self.a


@dataclass
class RoomGraph:
    nodes: List[RoomNode] = field(default_factory=list)
    edges: List[RoomEdge] = field(default_factory=list)

    def node(self, node_id: int) -> RoomNode:
        for n in self.nodes:
            if n.id == node_id:
                return n
        raise KeyError(node_id)

    def has_edge(self, a: int, b: int) -> bool:
        return any(e.joins(a, b) for e in self.edges)

    def edges_of(self, node_id: int) -> List[RoomEdge]:
        return [e for e in self.edges if e.a == node_id or e.b == node_id]

    def degree(self, node_id: int) -> int:
        return len(self.edges_of(node_id))

    def neighbours(self, node_id: int) -> List[int]:
        return [e.other(node_id) for e in self.edges_of(node_id)]

    def count_by_archetype(self) -> Dict[str, int]:
        counts: Dict[str, int] = {}
        for n in self.nodes:
            counts[n.archetype_id] = counts.get(n.archetype_id, 0) + 1
        return counts

    def edge_count(self, kind: Optional[EdgeKind] = None) -> int:
        if kind is None:
            return len(self.edges)
        return sum(1 for e in self.edges if e.kind == kind)

    def reachable_from(self, start: int = 0) -> Set[int]:
        """Node ids reachable from ``start`` along any edge."""
        adjacency: Dict[int, List[int]] = {n.id: [] for n in self.nodes}
        for e in self.edges:
            if e.a == e.b:
                continue
            adjacency.setdefault(e.a, []).append(e.b)
            adjacency.setdefault(e.b, []).append(e.a)
        seen = {start}
        queue = deque([start])
        while queue:
            cur = queue.popleft()
            for nxt in adjacency.get(cur, []):
                if nxt not in seen:
                    seen.add(nxt)
                    queue.append(nxt)
        return seen

    def is_connected(self) -> bool:
        if not self.nodes:
            return False
        return len(self.reachable_from(self.nodes[0].id)) == len(self.nodes)
