import numpy as np
import pytest

from game_rng import GameRNG
from worldgen.aesthetics import (
    CellularAutomata,
    PillarGenerationType,
    Pillars,
    apply_modifier,
    parse_modifier,
)
from worldgen.errors import PresetError
from worldgen.room import Room, Tile


class LowestRNG:
    """Always picks the lowest value."""

    def get_int(self, a, b):
        return a

    def get_float(self, a=0.0, b=1.0):
        return a


def wall_cells(room):
    ys, xs = np.nonzero(room.tiles == Tile.WALL)
    return set(zip(xs.tolist(), ys.tolist()))


def test_single_pillar_in_the_middle():
    room = Room(0, 10, 10)
    apply_modifier(room, Pillars(1, 1, PillarGenerationType.BOTH_AXES), LowestRNG())
    assert wall_cells(room) == {(5, 5)}


def test_pillar_grid_is_shifted_by_half_size():
    room = Room(0, 9, 9)
    apply_modifier(room, Pillars(2, 2, PillarGenerationType.BOTH_AXES), LowestRNG())
    expected = set()
    for ax in (3, 6):
        for ay in (3, 6):
            for x in (ax - 1, ax):
                for y in (ay - 1, ay):
                    expected.add((x, y))
    assert wall_cells(room) == expected


def test_axis_pillars_use_random_row():
    room = Room(0, 10, 10)
    apply_modifier(room, Pillars(1, 1, PillarGenerationType.AXIS_X), LowestRNG())
    assert wall_cells(room) == {(5, 0)}

    room = Room(0, 10, 10)
    apply_modifier(room, Pillars(1, 1, PillarGenerationType.AXIS_Y), LowestRNG())
    assert wall_cells(room) == {(0, 5)}


def test_pillars_near_origin_are_clamped():
    room = Room(0, 4, 4)
    apply_modifier(room, Pillars(1, 4, PillarGenerationType.BOTH_AXES), LowestRNG())
    # anchor (2, 2), size 4, shift 2 -> tiles 0..3 on both axes
    assert room.wall_count() == 16


def test_cellular_automata_without_iterations_keeps_the_fill():
    room = Room(0, 16, 12)
    automaton = CellularAutomata(iterations=0, wall_percentage=0.5)
    apply_modifier(room, automaton, GameRNG(3))

    expected = automaton.random_fill(12, 16, GameRNG(3))
    assert np.array_equal(room.tiles == Tile.WALL, expected)
    assert np.all(room.tiles[0, :] == Tile.WALL)
    assert np.all(room.tiles[-1, :] == Tile.WALL)
    assert np.all(room.tiles[:, 0] == Tile.WALL)
    assert np.all(room.tiles[:, -1] == Tile.WALL)


def test_cellular_automata_keeps_existing_walls():
    room = Room(0, 12, 12)
    room.set_tile(4, 4, Tile.WALL)
    apply_modifier(room, CellularAutomata(0, 0.0), LowestRNG())
    # the corridor column is 4 with LowestRNG, so only the old wall stands there
    assert room.get_tile(4, 4) is Tile.WALL
    assert room.get_tile(4, 5) is Tile.GROUND
    assert room.wall_count() == 2 * 12 + 2 * 10 + 1


def test_step_on_open_grid_only_walls_border():
    automaton = CellularAutomata(1, 0.0)
    walls = automaton.step(np.zeros((10, 10), dtype=bool))
    assert walls[1:-1, 1:-1].sum() == 0
    assert walls[0, :].all() and walls[:, -1].all()


def test_step_fills_isolated_pocket():
    automaton = CellularAutomata(1, 0.0)
    walls = np.ones((9, 9), dtype=bool)
    walls[4, 4] = False
    stepped = automaton.step(walls)
    assert stepped.all()


def test_step_is_deterministic_for_a_seed():
    automaton = CellularAutomata(iterations=3, wall_percentage=0.45)
    a = Room(0, 20, 20)
    b = Room(1, 20, 20)
    apply_modifier(a, automaton, GameRNG(11))
    apply_modifier(b, automaton, GameRNG(11))
    assert np.array_equal(a.tiles, b.tiles)


def test_parse_modifier():
    pillars = parse_modifier(
        {"pillars": {"amount": 2, "pillar_size": 3, "generation_type": "x"}}
    )
    assert pillars == Pillars(2, 3, PillarGenerationType.AXIS_X)
    cave = parse_modifier(
        {"cellular_automata": {"iterations": 4, "wall_percentage": 0.45}}
    )
    assert cave == CellularAutomata(4, 0.45)


@pytest.mark.parametrize(
    "data",
    [
        {"lava": {}},
        {"pillars": {"amount": 2}},
        {"pillars": {"amount": 2, "pillar_size": 1, "generation_type": "diagonal"}},
        {"cellular_automata": {"iterations": -1, "wall_percentage": 0.4}},
        {"pillars": {}, "cellular_automata": {}},
        "pillars",
    ],
)
def test_parse_modifier_rejects_bad_entries(data):
    with pytest.raises(PresetError):
        parse_modifier(data)
