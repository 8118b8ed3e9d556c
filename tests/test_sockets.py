import numpy as np
import pytest

from housegen.sockets import ConnectionSocket, is_compatible, rank_socket_pairs, yaw_of, yaw_to_face


def _socket(name, position, normal, tag="Door_80cm", accepts=("Door_80cm",)):
    return ConnectionSocket(name, np.array(position, dtype=float), np.array(normal, dtype=float), tag, accepts)


def test_compatibility_is_either_way():
    a = _socket("a", (0, 0), (1, 0), tag="A", accepts=())
    b = _socket("b", (0, 0), (-1, 0), tag="B", accepts=("A",))
    c = _socket("c", (0, 0), (-1, 0), tag="C", accepts=("X",))
    assert is_compatible(a, b)
    assert is_compatible(b, a)
    assert not is_compatible(a, c)


@pytest.mark.parametrize("vector, yaw", [((1, 0), 0.0), ((0, 1), 90.0), ((-1, 0), 180.0), ((0, -1), 270.0)])
def test_yaw_of(vector, yaw):
    assert yaw_of(vector) == pytest.approx(yaw)


def test_yaw_to_face():
    east = np.array([1.0, 0.0])
    assert yaw_to_face(np.array([-1.0, 0.0]), east) == pytest.approx(0.0)
    assert yaw_to_face(np.array([1.0, 0.0]), east) == pytest.approx(180.0)
    assert yaw_to_face(np.array([0.0, 1.0]), east) == pytest.approx(90.0)
    assert yaw_to_face(np.array([0.0, -1.0]), east) == pytest.approx(-90.0)


def test_facing_pairs_rank_first():
    east = _socket("east", (2, 1), (1, 0))
    north = _socket("north", (1, 2), (0, 1))
    west = _socket("west", (2, 1), (-1, 0))
    south = _socket("south", (3, 0), (0, -1))

    ranked = rank_socket_pairs([east, north], [west, south], (1, 0))

    distance, sa, sb = ranked[0]
    assert (sa.name, sb.name) == ("east", "west")
    assert distance == pytest.approx(0.0)
    assert (ranked[-1][1].name, ranked[-1][2].name) == ("north", "south")
    assert len(ranked) == 4


def test_used_and_incompatible_sockets_are_skipped():
    east = _socket("east", (2, 1), (1, 0))
    west = _socket("west", (2, 1), (-1, 0))
    odd = _socket("odd", (2, 1), (-1, 0), tag="Window", accepts=("Window",))

    assert [(a.name, b.name) for _, a, b in rank_socket_pairs([east], [west, odd], (1, 0))] == [("east", "west")]
    west.used = True
    assert rank_socket_pairs([east], [west, odd], (1, 0)) == []
