"""Connectivity checks run after a build.

Two validators are provided. ``LinkValidator`` trusts the connections the
builder realised (matched doors and routed corridors). ``ProximityValidator``
ignores them and treats rooms whose centres sit close together as connected,
a coarse stand-in for a navigation mesh query.
"""

import logging
from dataclasses import dataclass, field
from typing import Iterable, List, Tuple, Union

import numpy as np
from scipy.sparse import coo_matrix
from scipy.sparse.csgraph import connected_components
from scipy.spatial.distance import cdist

from housegen.scene import Scene

logger = logging.getLogger(__name__)

PROXIMITY_RADIUS = 6.0


@dataclass
class ValidationResult:
    ok: bool
    reachable: int
    total: int
    unreachable: List[int] = field(default_factory=list)

    def __str__(self) -> str:
        return f"{self.reachable}/{self.total} rooms reachable"


def _components(ids: List[int], pairs: Iterable[Tuple[int, int]]) -> ValidationResult:
    if not ids:
        return ValidationResult(ok=False, reachable=0, total=0)

    position = {node_id: i for i, node_id in enumerate(ids)}
    rows, cols = [], []
    for a, b in pairs:
        if a in position and b in position:
            rows.append(position[a])
            cols.append(position[b])
    n = len(ids)
    matrix = coo_matrix(
        (np.ones(len(rows)), (np.array(rows, dtype=np.int64), np.array(cols, dtype=np.int64))),
        shape=(n, n),
    )
    _, labels = connected_components(matrix, directed=False)

    start_label = labels[0]
    unreachable = [node_id for node_id, label in zip(ids, labels) if label != start_label]
    reachable = n - len(unreachable)
    return ValidationResult(ok=not unreachable, reachable=reachable, total=n, unreachable=unreachable)


class LinkValidator:
    """Rooms are connected when a door or a routed corridor joins them."""

    def validate(self, scene: Scene, links: Iterable[Tuple[int, int]]) -> ValidationResult:
        ids = sorted(scene.rooms)
        result = _components(ids, links)
        if not result.ok:
            logger.warning("Connectivity check failed: %s (unreachable: %s)", result, result.unreachable)
        return result


class ProximityValidator:
    """Rooms are connected when their world centres lie within ``radius`` meters."""

    def __init__(self, radius: float = PROXIMITY_RADIUS):
        self.radius = radius

    def validate(self, scene: Scene, links: Iterable[Tuple[int, int]] = ()) -> ValidationResult:
        ids = sorted(scene.rooms)
        if not ids:
            return ValidationResult(ok=False, reachable=0, total=0)
        centres = np.vstack([scene.rooms[i].center for i in ids])
        distances = cdist(centres, centres)
        pairs = [(ids[i], ids[j]) for i, j in zip(*np.nonzero(distances < self.radius)) if i < j]
        result = _components(ids, pairs)
        if not result.ok:
            logger.warning("Rooms do not all appear connected: %s", result)
        return result


# Connectivity validators a build accepts.
Validator = Union[LinkValidator, ProximityValidator]
