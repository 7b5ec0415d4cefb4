# worldgen/export.py
"""Read-only views of a finished map for renderers and debugging tools."""
from typing import List, Tuple

import numpy as np

from worldgen.map_area import MapArea
from worldgen.room import Room, RoomId, Tile

EMPTY = 255

TILE_CHARS = {
    int(Tile.GROUND): ".",
    int(Tile.WALL): "#",
    EMPTY: " ",
}


def compose_tiles(map_area: MapArea) -> Tuple[np.ndarray, Tuple[int, int]]:
    """Paste every visible room into one ``[y, x]`` array.

    Returns the array and the world coordinate of its ``[0, 0]`` cell.  Cells
    outside any visible room hold ``EMPTY``.  Where rooms overlap, the room
    that comes first in the map wins.
    """
    rooms = list(map_area.visible_rooms())
    if not rooms:
        return np.full((0, 0), EMPTY, dtype=np.uint8), (0, 0)

    min_x = min(room.x for room in rooms)
    min_y = min(room.y for room in rooms)
    max_x = max(room.end_x for room in rooms)
    max_y = max(room.end_y for room in rooms)

    grid = np.full((max_y - min_y, max_x - min_x), EMPTY, dtype=np.uint8)
    for room in reversed(rooms):
        oy, ox = room.y - min_y, room.x - min_x
        grid[oy : oy + room.height, ox : ox + room.length] = room.tiles
    return grid, (min_x, min_y)


def render_ascii(map_area: MapArea) -> str:
    """Text dump of the composed map, highest y on the first line."""
    grid, _ = compose_tiles(map_area)
    lines = []
    for row in grid[::-1]:
        lines.append("".join(TILE_CHARS.get(int(tile), "?") for tile in row).rstrip())
    return "\n".join(lines)


def graph_edges(map_area: MapArea) -> List[Tuple[RoomId, RoomId]]:
    if map_area.graph is None:
        return []
    return [(a, b) for a, b in map_area.graph.reassembled_graph.edges()]


def main_path(map_area: MapArea) -> List[RoomId]:
    if map_area.graph is None:
        return []
    return list(map_area.graph.main_path_rooms)


def room_tiles(room: Room) -> np.ndarray:
    """Copy of a room's tile grid, indexed ``[y, x]``."""
    return room.tiles.copy()
