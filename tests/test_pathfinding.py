from worldgen.map_area import MapArea
from worldgen.pathfinding import (
    GROUND_COST,
    WALL_COST,
    RoomCellIndex,
    astar,
    find_room_path,
)
from worldgen.room import Room, Tile


def open_grid(width, height):
    def successors(point):
        x, y = point
        for nx_, ny_ in ((x + 1, y), (x - 1, y), (x, y + 1), (x, y - 1)):
            if 0 <= nx_ < width and 0 <= ny_ < height:
                yield (nx_, ny_), 1

    return successors


def test_astar_straight_line():
    target = (3, 0)

    def manhattan(point):
        return abs(point[0] - target[0]) + abs(point[1] - target[1])

    path = astar((0, 0), target, open_grid(5, 5), manhattan)
    assert path == [(0, 0), (1, 0), (2, 0), (3, 0)]


def test_astar_start_is_target():
    assert astar((2, 2), (2, 2), open_grid(5, 5), lambda p: 0) == [(2, 2)]


def test_astar_unreachable():
    assert astar((0, 0), (9, 9), lambda p: [], lambda p: 0) is None


def test_first_room_owns_overlapping_cells():
    map_area = MapArea()
    map_area.add_room(Room(0, 4, 4, (0, 0)))
    map_area.add_room(Room(1, 4, 4, (2, 0)))
    index = RoomCellIndex(map_area)
    assert index.room_at((3, 0)).room_id == 0
    assert index.room_at((5, 0)).room_id == 1
    assert index.room_at((9, 9)) is None
    assert index.step_cost((9, 9)) is None


def test_step_cost_reads_current_tiles():
    map_area = MapArea()
    room = Room(0, 4, 4, (10, 10))
    map_area.add_room(room)
    index = RoomCellIndex(map_area)
    assert index.step_cost((11, 11)) == GROUND_COST
    room.set_tile(1, 1, Tile.WALL)
    assert index.step_cost((11, 11)) == WALL_COST


def test_room_path_walks_around_walls():
    map_area = MapArea()
    room = Room(0, 5, 3, (0, 0))
    room.set_tile(2, 0, Tile.WALL)
    room.set_tile(2, 1, Tile.WALL)
    map_area.add_room(room)

    path = find_room_path(RoomCellIndex(map_area), (0, 0), (4, 0))
    assert path[0] == (0, 0)
    assert path[-1] == (4, 0)
    assert (2, 2) in path
    assert (2, 0) not in path and (2, 1) not in path


def test_room_path_does_not_leave_rooms():
    map_area = MapArea()
    map_area.add_room(Room(0, 3, 3, (0, 0)))
    map_area.add_room(Room(1, 3, 3, (5, 0)))
    assert find_room_path(RoomCellIndex(map_area), (1, 1), (6, 1)) is None
