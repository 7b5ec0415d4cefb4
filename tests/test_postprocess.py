import networkx as nx
import pytest

from game_rng import GameRNG
from worldgen.aesthetics import Pillars, PillarGenerationType
from worldgen.connecting import find_adjacent_tiles
from worldgen.errors import GenerationError
from worldgen.geometry import Orientation
from worldgen.map_area import MapArea, RoomConnection, RoomGraph
from worldgen.postprocess import (
    apply_aesthetics,
    carve_doors,
    carve_path,
    outer_walls,
    postprocess,
    strip_unconnected_rooms,
)
from worldgen.room import Room, Tile
from worldgen.settings import WorldgenSettings


def side_by_side(gap=0):
    map_area = MapArea()
    map_area.add_room(Room(0, 10, 10, (0, 0), is_main=True))
    map_area.add_room(Room(1, 10, 10, (10 + gap, 0), is_main=True))
    graph = nx.Graph()
    graph.add_edge(0, 1)
    map_area.graph = RoomGraph(mst=graph.copy(), reassembled_graph=graph)
    return map_area


def adjacent_connection(map_area):
    tiles = find_adjacent_tiles(
        map_area.rooms[0], map_area.rooms[1], map_area, Orientation.VERTICAL
    )
    return RoomConnection.adjacent(0, 1, tiles)


def test_unconnected_rooms_are_hidden():
    map_area = side_by_side()
    map_area.add_room(Room(2, 5, 5, (50, 50)))
    map_area.connections = [adjacent_connection(map_area)]

    assert strip_unconnected_rooms(map_area, WorldgenSettings()) == 1
    assert [room.room_id for room in map_area.visible_rooms()] == [0, 1]
    assert 2 in map_area.rooms


def test_stripping_can_be_switched_off():
    map_area = side_by_side()
    map_area.add_room(Room(2, 5, 5, (50, 50)))
    map_area.connections = []
    settings = WorldgenSettings(clear_unconnected_rooms=False)
    assert strip_unconnected_rooms(map_area, settings) == 0
    assert all(room.is_visible for room in map_area.rooms.values())


def test_stripping_needs_connections():
    with pytest.raises(GenerationError):
        strip_unconnected_rooms(side_by_side(), WorldgenSettings())


def test_doors_skip_corner_tiles_and_respect_max_width():
    map_area = side_by_side()
    map_area.connections = [adjacent_connection(map_area)]
    outer_walls(map_area)

    carved = carve_doors(map_area, WorldgenSettings(min_passage_width=2, max_passage_width=3))
    assert carved == 6
    left, right = map_area.rooms[0], map_area.rooms[1]
    for y in range(10):
        expected = Tile.GROUND if 1 <= y <= 3 else Tile.WALL
        assert left.get_tile(9, y) == expected
        assert right.get_tile(0, y) == expected


def test_doors_open_whole_shared_wall_when_allowed():
    map_area = side_by_side()
    map_area.connections = [adjacent_connection(map_area)]
    outer_walls(map_area)
    carve_doors(map_area, WorldgenSettings())
    left = map_area.rooms[0]
    assert [left.get_tile(9, y) for y in range(10)] == [Tile.WALL] + [Tile.GROUND] * 8 + [
        Tile.WALL
    ]


def test_carve_path_breaks_through_shared_walls():
    map_area = side_by_side()
    outer_walls(map_area)
    walls_before = sum(room.wall_count() for room in map_area.rooms.values())

    assert carve_path(map_area, WorldgenSettings()) is True
    left, right = map_area.rooms[0], map_area.rooms[1]
    assert any(
        left.get_tile(9, y) == Tile.GROUND and right.get_tile(0, y) == Tile.GROUND
        for y in range(10)
    )
    assert sum(room.wall_count() for room in map_area.rooms.values()) < walls_before


def test_carve_path_fails_across_empty_space():
    map_area = side_by_side(gap=5)
    assert carve_path(map_area, WorldgenSettings()) is False


def unroutable_first_edge():
    # 0 and 1 sit apart, 1 and 2 share a wall
    map_area = MapArea()
    map_area.add_room(Room(0, 10, 10, (0, 0), is_main=True))
    map_area.add_room(Room(1, 10, 10, (15, 0), is_main=True))
    map_area.add_room(Room(2, 10, 10, (25, 0), is_main=True))
    graph = nx.Graph()
    graph.add_edge(0, 1)
    graph.add_edge(1, 2)
    map_area.graph = RoomGraph(mst=graph.copy(), reassembled_graph=graph)
    return map_area


def test_carve_path_stops_at_first_unroutable_pair():
    map_area = unroutable_first_edge()
    outer_walls(map_area)

    assert carve_path(map_area, WorldgenSettings()) is False
    middle, east = map_area.rooms[1], map_area.rooms[2]
    assert all(middle.get_tile(9, y) == Tile.WALL for y in range(10))
    assert all(east.get_tile(0, y) == Tile.WALL for y in range(10))


def test_postprocess_reports_unroutable_pair_and_still_opens_doors():
    map_area = unroutable_first_edge()
    tiles = find_adjacent_tiles(
        map_area.rooms[1], map_area.rooms[2], map_area, Orientation.VERTICAL
    )
    map_area.connections = [RoomConnection.adjacent(1, 2, tiles)]

    assert postprocess(map_area, WorldgenSettings(), GameRNG(1)) is False
    assert not map_area.rooms[0].is_visible
    middle, east = map_area.rooms[1], map_area.rooms[2]
    for y in range(10):
        expected = Tile.GROUND if 1 <= y <= 8 else Tile.WALL
        assert middle.get_tile(9, y) == expected
        assert east.get_tile(0, y) == expected


def test_postprocess_reports_success():
    map_area = side_by_side()
    map_area.connections = [adjacent_connection(map_area)]
    assert postprocess(map_area, WorldgenSettings(), GameRNG(1)) is True


def test_carve_path_needs_graph():
    map_area = side_by_side()
    map_area.graph = None
    with pytest.raises(GenerationError):
        carve_path(map_area, WorldgenSettings())


def test_aesthetics_keep_walls_set_by_outer_walls():
    map_area = side_by_side()
    room = map_area.rooms[0]
    room.details.aesthetic_modifiers.append(Pillars(1, 2, PillarGenerationType.AXIS_X))
    outer_walls(map_area)
    before = room.wall_count()
    apply_aesthetics(map_area, GameRNG(4))
    assert room.wall_count() >= before
    assert all(room.get_tile(x, 0) == Tile.WALL for x in range(10))
