"""Physical connection sockets on instantiated room content."""

import math
from dataclasses import dataclass, field
from typing import List, Sequence, Tuple

import numpy as np
from scipy.spatial.distance import cdist


@dataclass(eq=False)
class ConnectionSocket:
    """A door socket in world space on the floor plane.

    Attributes:
        name: Identifier unique within its room
        position: (x, y) world position in meters
        normal: Outward-facing unit vector
        tag: Compatibility tag of this socket
        accepts: Tags this socket can connect to
        used: Set once the socket has been matched in the current build
    """
    name: str
    position: np.ndarray
    normal: np.ndarray
    tag: str
    accepts: Tuple[str, ...] = ()
    used: bool = field(default=False)

    def __str__(self) -> str:
        x, y = self.position
        return f"Socket {self.name} [{self.tag}] at ({x:.2f}, {y:.2f})"


def is_compatible(a: ConnectionSocket, b: ConnectionSocket) -> bool:
    """Either socket accepting the other's tag is enough."""
    return a.tag in b.accepts or b.tag in a.accepts


def yaw_of(vector: Sequence[float]) -> float:
    """Heading of a floor-plane vector in degrees, in [0, 360)."""
    return math.degrees(math.atan2(vector[1], vector[0])) % 360.0


def rotation_matrix(degrees: float) -> np.ndarray:
    rad = math.radians(degrees)
    c, s = math.cos(rad), math.sin(rad)
    return np.array([[c, -s], [s, c]])


def yaw_to_face(normal_b: np.ndarray, normal_a: np.ndarray) -> float:
    """Yaw that turns ``normal_b`` to point exactly against ``normal_a``."""
    delta = yaw_of(-np.asarray(normal_a)) - yaw_of(normal_b)
    # Normalise to (-180, 180] so the smaller turn is reported.
    delta = (delta + 180.0) % 360.0 - 180.0
    return 180.0 if delta == -180.0 else delta


def rank_socket_pairs(
    sockets_a: List[ConnectionSocket],
    sockets_b: List[ConnectionSocket],
    direction: Sequence[float],
) -> List[Tuple[float, ConnectionSocket, ConnectionSocket]]:
    """Order compatible unused socket pairs, best candidates first.

    Pairs whose normals face each other along ``direction`` (from room A
    towards room B) come first; ties are broken by socket distance.

    Returns:
        A list of (distance, socket_a, socket_b).
    """
    free_a = [s for s in sockets_a if not s.used]
    free_b = [s for s in sockets_b if not s.used]
    if not free_a or not free_b:
        return []

    d = np.asarray(direction, dtype=float)
    length = np.linalg.norm(d)
    d = d / length if length > 1e-9 else np.array([1.0, 0.0])

    distances = cdist(np.vstack([s.position for s in free_a]), np.vstack([s.position for s in free_b]))

    candidates = []
    for i, sa in enumerate(free_a):
        for j, sb in enumerate(free_b):
            if not is_compatible(sa, sb):
                continue
            facing = float(np.dot(sa.normal, d) + np.dot(sb.normal, -d))
            candidates.append((-round(facing, 9), round(float(distances[i, j]), 9), i, j))
    candidates.sort()
    return [(dist, free_a[i], free_b[j]) for _, dist, i, j in candidates]
