"""Tests for programs, archetypes and catalog configuration."""
import json
import random

import pytest

from housegen.catalog import ContentCatalog, load_catalog, sample_catalog
from housegen.program import ProgramError, ProgramSpec, RoomArchetype, load_program, sample_program


def test_corridor_limit(example_program):
    """ceil(0.2 * 6) = 2 corridors allowed."""
    assert example_program.corridor_limit == 2
    assert sample_program(corridor_area_share=0.0).corridor_limit == 0


def test_always_door_archetypes():
    assert RoomArchetype("Bedroom").always_door
    assert RoomArchetype("Bathroom").always_door
    assert RoomArchetype("Den", door_only=True).always_door
    assert not RoomArchetype("Kitchen").always_door


def test_program_from_dict_round_trip():
    program = sample_program(target_room_count=8)
    restored = ProgramSpec.from_dict(program.to_dict())
    assert restored == program
    assert restored.archetype("Living").prefer_adjacent_to == ("Foyer",)


def test_load_program(tmp_path):
    data = {
        "archetypes": [
            {"id": "Foyer", "size_min": [3, 3], "size_max": [4, 4], "min_count": 1, "max_count": 1},
            {"id": "Bathroom", "must_be_adjacent_to": ["Bedroom"]},
        ],
        "target_room_count": 5,
        "cell_size": [1.0, 1.0],
    }
    path = tmp_path / "house.json"
    path.write_text(json.dumps(data))

    program = load_program(str(path))
    assert program.target_room_count == 5
    assert program.cell_size == (1.0, 1.0)
    assert program.archetype("Bathroom").must_be_adjacent_to == ("Bedroom",)
    assert program.archetype("Attic") is None


@pytest.mark.parametrize("archetypes, extra", [
    ([{"id": "Foyer"}, {"id": "Foyer"}], {}),
    ([{"id": "Foyer", "size_min": [5, 5], "size_max": [4, 4]}], {}),
    ([{"id": "Foyer", "weight": -1}], {}),
    ([{"id": "Foyer", "min_count": 3, "max_count": 1}], {}),
    ([{"id": "Foyer"}], {"corridor_area_share": 1.5}),
    ([{"id": "Foyer"}], {"target_room_count": 0}),
    ([{"id": "Foyer"}], {"cell_size": [0, 1]}),
    ([{"id": "Foyer", "min_count": 2, "max_count": 2}], {}),
])
def test_invalid_programs_rejected(archetypes, extra):
    with pytest.raises(ProgramError):
        ProgramSpec.from_dict({"archetypes": archetypes, **extra})


def test_malformed_program_rejected(tmp_path):
    with pytest.raises(ProgramError):
        ProgramSpec.from_dict({"target_room_count": 4})

    path = tmp_path / "broken.json"
    path.write_text("{not json")
    with pytest.raises(ProgramError):
        load_program(str(path))


def test_catalog_from_dict_defaults_to_wall_sockets(tmp_path):
    data = {
        "rooms": {
            "Foyer": [{"name": "Foyer1"}],
            "Kitchen": [{"name": "Galley", "sockets": [
                {"name": "door", "anchor": [1.0, 0.5], "normal": [1.0, 0.0], "tag": "Arch", "accepts": ["Door_80cm"]},
            ]}],
        },
        "corridors": [{"name": "Hall"}],
    }
    path = tmp_path / "catalog.json"
    path.write_text(json.dumps(data))
    catalog = load_catalog(str(path))

    foyer = catalog.pick_room_variant("Foyer", random.Random(0))
    assert [s.name for s in foyer.sockets] == ["south", "north", "west", "east"]
    galley = catalog.pick_room_variant("Kitchen", random.Random(0))
    assert galley.sockets[0].tag == "Arch"
    assert galley.sockets[0].accepts == ("Door_80cm",)
    assert catalog.pick_corridor_variant(random.Random(0)).name == "Hall"


def test_catalog_missing_entries():
    catalog = ContentCatalog()
    assert catalog.pick_room_variant("Foyer", random.Random(1)) is None
    assert catalog.pick_corridor_variant(random.Random(1)) is None
    with pytest.raises(ProgramError):
        ContentCatalog.from_dict({"rooms": {"Foyer": [{"sockets": []}]}})


def test_catalog_pick_is_seeded():
    catalog = sample_catalog()
    first = [catalog.pick_room_variant("Living", random.Random(5)).name for _ in range(3)]
    second = [catalog.pick_room_variant("Living", random.Random(5)).name for _ in range(3)]
    assert first == second
