import pytest

from housegen.catalog import ContentCatalog, CorridorVariant, RoomVariant, wall_midpoint_sockets
from housegen.graph import RoomNode
from housegen.layout_embedder import Layout, PlacedRoom, Rect
from housegen.program import ProgramSpec, RoomArchetype


@pytest.fixture
def example_program():
    """One foyer and two to four bedrooms, six rooms targeted."""
    return ProgramSpec(
        archetypes=(
            RoomArchetype("Foyer", size_min=(3, 3), size_max=(4, 4), min_count=1, max_count=1),
            RoomArchetype("Bedroom", size_min=(4, 4), size_max=(6, 6), min_count=2, max_count=4),
        ),
        target_room_count=6,
        max_loops=1,
        corridor_area_share=0.2,
    )


@pytest.fixture
def box_catalog():
    """Every "Room" gets a box with a door socket centred on each wall."""
    return ContentCatalog(
        rooms={"Room": [RoomVariant("Box", wall_midpoint_sockets())]},
        corridors=[CorridorVariant("Hall")],
    )


def make_layout(rooms, doors=(), corridors=(), cell_size=(1.0, 1.0)):
    """Build a layout by hand from {id: (archetype_id, Rect)}."""
    layout = Layout(cell_size=cell_size)
    for node_id, (archetype_id, rect) in rooms.items():
        node = RoomNode(node_id, archetype_id, rect.width, rect.height)
        layout.rooms[node_id] = PlacedRoom(node=node, rect=rect)
    layout.doors.extend(doors)
    layout.corridors.extend(corridors)
    return layout
