import numpy as np
import pytest

from conftest import make_layout
from housegen.builder import build, find_path, route_corridor
from housegen.catalog import (
    ContentCatalog,
    CorridorVariant,
    RoomVariant,
    SocketTemplate,
    sample_catalog,
    wall_midpoint_sockets,
)
from housegen.graph_sampler import sample
from housegen.layout_embedder import Rect, embed
from housegen.program import sample_program
from housegen.scene import Scene
from housegen.space import GridSpace


def _inside(rect, cell):
    return rect.x <= cell[0] < rect.x_max and rect.y <= cell[1] < rect.y_max


def _adjacent(a, b):
    return abs(a[0] - b[0]) + abs(a[1] - b[1]) == 1


def test_touching_rooms_join_through_facing_sockets(box_catalog):
    layout = make_layout({0: ("Room", Rect(0, 0, 4, 4)), 1: ("Room", Rect(4, 0, 4, 4))}, doors=[(0, 1)])
    scene = Scene()

    report = build(layout, box_catalog, seed=1, scene=scene)

    assert report.socket_pairings == [(0, "east", 1, "west")]
    assert report.deferred == []
    assert report.corridor_paths == {}
    assert report.validation.ok
    assert scene.rooms[1].yaw == 0.0
    assert np.allclose(scene.rooms[1].position, [4.0, 0.0])
    assert scene.doors[0].position == pytest.approx((4.0, 2.0))


def test_door_alignment_moves_second_room_onto_socket(box_catalog):
    layout = make_layout({0: ("Room", Rect(0, 0, 4, 4)), 1: ("Room", Rect(4, 1, 4, 4))}, doors=[(0, 1)])
    scene = Scene()

    report = build(layout, box_catalog, seed=1, scene=scene)

    assert report.socket_pairings == [(0, "east", 1, "west")]
    room_b = scene.rooms[1]
    west = next(s for s in room_b.sockets if s.name == "west")
    east = next(s for s in scene.rooms[0].sockets if s.name == "east")
    assert np.allclose(west.position, east.position)
    assert np.allclose(room_b.position, [4.0, 0.0])
    assert west.used and east.used


def test_door_between_separated_rooms_becomes_corridor(box_catalog):
    layout = make_layout({0: ("Room", Rect(0, 0, 3, 3)), 1: ("Room", Rect(6, 0, 3, 3))}, doors=[(0, 1)])
    scene = Scene()

    report = build(layout, box_catalog, seed=1, scene=scene)

    assert report.door_links == []
    assert report.deferred == [(0, 1)]
    assert report.corridor_paths[(0, 1)] == [(3, 1), (4, 1), (5, 1)]
    assert report.corridor_cells == {(3, 1), (4, 1), (5, 1)}
    assert report.segments_spawned == 3
    assert [s.yaw for s in scene.corridors] == [0.0, 0.0, 0.0]
    assert [s.position for s in scene.corridors] == [(3.5, 1.5), (4.5, 1.5), (5.5, 1.5)]
    assert all(s.name == "Corridor_Segment" for s in scene.corridors)
    assert report.validation.ok


def test_socket_is_used_at_most_once():
    stub = RoomVariant("Stub", (SocketTemplate("door", (1.0, 0.5), (1.0, 0.0)),))
    catalog = ContentCatalog(
        rooms={"Stub": [stub], "Room": [RoomVariant("Box", wall_midpoint_sockets())]},
        corridors=[CorridorVariant("Hall")],
    )
    layout = make_layout(
        {
            0: ("Stub", Rect(0, 0, 4, 6)),
            1: ("Room", Rect(4, 0, 4, 4)),
            2: ("Room", Rect(4, 4, 4, 4)),
        },
        doors=[(0, 1), (0, 2)],
    )

    report = build(layout, catalog, seed=3)

    assert report.socket_pairings == [(0, "door", 1, "west")]
    assert report.deferred == [(0, 2)]
    assert (0, 2) in report.corridor_paths


def test_corridor_routes_around_rooms(box_catalog):
    rects = {0: Rect(0, 0, 2, 2), 1: Rect(6, 0, 2, 2), 2: Rect(3, -3, 2, 8)}
    layout = make_layout({i: ("Room", r) for i, r in rects.items()}, corridors=[(0, 1)])

    report = build(layout, box_catalog, seed=1)

    path = report.corridor_paths[(0, 1)]
    assert path[0] == (2, 0)
    assert path[-1] == (5, 0)
    assert all(_adjacent(a, b) for a, b in zip(path, path[1:]))
    assert not any(_inside(r, cell) for r in rects.values() for cell in path)
    # Room 2 has no connection of its own.
    assert not report.validation.ok
    assert report.validation.unreachable == [2]


def test_enclosed_room_is_dropped(box_catalog):
    rects = {
        0: Rect(10, 0, 2, 2),
        1: Rect(2, 2, 2, 2),
        2: Rect(0, 0, 6, 2),
        3: Rect(0, 4, 6, 2),
        4: Rect(0, 2, 2, 2),
        5: Rect(4, 2, 2, 2),
    }
    layout = make_layout({i: ("Room", r) for i, r in rects.items()}, corridors=[(0, 1)])

    report = build(layout, box_catalog, seed=1)

    assert report.dropped == [(0, 1)]
    assert report.corridor_paths == {}
    assert report.corridor_cells == set()


def test_rooms_without_variant_are_skipped(box_catalog):
    layout = make_layout({0: ("Room", Rect(0, 0, 4, 4)), 1: ("Attic", Rect(4, 0, 4, 4))}, doors=[(0, 1)])
    scene = Scene()

    report = build(layout, box_catalog, seed=1, scene=scene)

    assert report.skipped_rooms == [1]
    assert list(scene.rooms) == [0]
    assert report.deferred == []
    assert report.door_links == []


def test_corridor_cells_recorded_without_corridor_variant():
    catalog = ContentCatalog(rooms={"Room": [RoomVariant("Box", wall_midpoint_sockets())]})
    layout = make_layout({0: ("Room", Rect(0, 0, 3, 3)), 1: ("Room", Rect(6, 0, 3, 3))}, corridors=[(0, 1)])
    scene = Scene()

    report = build(layout, catalog, seed=1, scene=scene)

    assert report.corridor_cells == {(3, 1), (4, 1), (5, 1)}
    assert report.segments_spawned == 0
    assert scene.corridors == []


def test_shared_corridor_cells_spawn_once(box_catalog):
    layout = make_layout({0: ("Room", Rect(0, 0, 3, 3)), 1: ("Room", Rect(6, 0, 3, 3))},
                         corridors=[(0, 1), (1, 0)])
    scene = Scene()

    report = build(layout, box_catalog, seed=1, scene=scene)

    assert set(report.corridor_paths) == {(0, 1), (1, 0)}
    assert report.segments_spawned == 3
    assert len(scene.corridors) == 3
    assert len({s.cell for s in scene.corridors}) == 3


def test_find_path_respects_expansion_cap():
    layout = make_layout({0: ("Room", Rect(0, 0, 3, 3)), 1: ("Room", Rect(20, 0, 3, 3))})
    space = GridSpace.from_layout(layout)

    assert find_path(space, (3, 1), (19, 1), max_expansions=5) is None
    assert len(find_path(space, (3, 1), (19, 1))) == 17
    assert route_corridor(space, layout.rect(0), layout.rect(1)).exit_direction == (1, 0)


def test_rebuild_into_same_scene_is_idempotent():
    program = sample_program(target_room_count=12)
    layout = embed(sample(program, 8), program, 9)
    catalog = sample_catalog()
    scene = Scene()

    first = build(layout, catalog, seed=8, scene=scene)
    rooms_after_first = len(scene.rooms)
    segments_after_first = len(scene.corridors)
    second = build(layout, catalog, seed=8, scene=scene)

    assert second.socket_pairings == first.socket_pairings
    assert second.corridor_cells == first.corridor_cells
    assert second.dropped == first.dropped
    assert len(scene.rooms) == rooms_after_first
    assert len(scene.corridors) == segments_after_first
    assert len(scene.doors) == len(second.door_links)


def test_room_content_is_fitted_in_world_units(box_catalog):
    layout = make_layout({0: ("Room", Rect(2, 0, 4, 4))}, cell_size=(0.5, 0.5))
    scene = Scene()

    build(layout, box_catalog, seed=1, scene=scene)

    room = scene.rooms[0]
    east = next(s for s in room.sockets if s.name == "east")
    assert np.allclose(room.position, [1.0, 0.0])
    assert np.allclose(room.center, [2.0, 1.0])
    assert np.allclose(east.position, [3.0, 1.0])
    assert len(room.free_sockets()) == 4
