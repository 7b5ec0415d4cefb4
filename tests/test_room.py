import numpy as np
import pytest

from worldgen.aesthetics import Pillars, PillarGenerationType
from worldgen.geometry import RoomDimensions
from worldgen.room import Room, RoomDetails, RoomType, Tile


def test_new_room_is_all_ground():
    room = Room(0, 6, 4)
    assert room.tiles.shape == (4, 6)
    assert room.tiles.dtype == np.uint8
    assert room.wall_count() == 0
    assert room.is_visible
    assert not room.is_main
    assert not room.is_position_fixed


def test_room_rejects_empty_size():
    with pytest.raises(ValueError):
        Room(0, 0, 4)


def test_get_and_set_tile_bounds_checked():
    room = Room(0, 3, 2)
    assert room.set_tile(2, 1, Tile.WALL)
    assert room.get_tile(2, 1) is Tile.WALL
    assert room.get_tile(3, 0) is None
    assert room.get_tile(0, -1) is None
    assert not room.set_tile(-1, 0, Tile.WALL)
    assert room.wall_count() == 1


def test_fill_edges_walls_the_border_only():
    room = Room(0, 5, 4)
    room.fill_edges()
    assert room.wall_count() == 2 * 5 + 2 * 2
    assert room.get_tile(2, 2) is Tile.GROUND
    assert room.get_tile(0, 3) is Tile.WALL


def test_offset_moves_anchor_not_grid():
    room = Room(1, 4, 3, anchor=(2, -1))
    room.offset(-5, 4)
    assert room.anchor == (-3, 3)
    assert room.tiles.shape == (3, 4)
    assert room.contains_point((-3, 3))
    assert not room.contains_point((1, 3))


def test_tiles_view_is_read_only():
    room = Room(0, 2, 2)
    with pytest.raises(ValueError):
        room.tiles[0, 0] = Tile.WALL


def test_from_dimensions_keeps_details():
    details = RoomDetails(is_main=False, room_type=RoomType.BOSS)
    pillars = Pillars(1, 2, PillarGenerationType.AXIS_X)
    details.aesthetic_modifiers.append(pillars)
    room = Room.from_dimensions(7, RoomDimensions(4, 5, 8, 9), details)
    assert room.room_id == 7
    assert room.dimensions == RoomDimensions(4, 5, 8, 9)
    assert room.details.room_type is RoomType.BOSS
    assert room.details.aesthetic_modifiers == [pillars]
    assert RoomDetails().aesthetic_modifiers == []
    assert room.area == 72
    assert room.area_world((8, 8)) == 72 * 64


def test_is_main_flag_lives_in_details():
    room = Room(0, 2, 2, is_main=True)
    assert room.details.is_main
    room.is_main = False
    assert not room.details.is_main
