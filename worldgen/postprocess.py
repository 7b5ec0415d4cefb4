# worldgen/postprocess.py
"""Tile level finishing passes run after all connections are realized."""
from __future__ import annotations

from typing import List, Tuple

import structlog

from game_rng import GameRNG
from worldgen.aesthetics import apply_modifier
from worldgen.errors import GenerationError
from worldgen.map_area import MapArea
from worldgen.pathfinding import RoomCellIndex, find_room_path
from worldgen.room import Room, Tile

log = structlog.get_logger()


def strip_unconnected_rooms(map_area: MapArea, settings) -> int:
    """Hide rooms that ended up in no connection. Returns how many were hidden."""
    if not settings.clear_unconnected_rooms:
        return 0
    if map_area.connections is None:
        raise GenerationError("Cannot strip rooms before connections are resolved")

    connected = set()
    for connection in map_area.connections:
        connected.update(connection.room_ids)

    hidden = 0
    for room in map_area.rooms.values():
        if room.room_id not in connected:
            room.is_visible = False
            hidden += 1
    log.debug("Unconnected rooms hidden", count=hidden)
    return hidden


def outer_walls(map_area: MapArea) -> None:
    for room in map_area.rooms.values():
        room.fill_edges()


def apply_aesthetics(map_area: MapArea, rng: GameRNG) -> None:
    for room in map_area.rooms.values():
        for modifier in list(room.details.aesthetic_modifiers):
            apply_modifier(room, modifier, rng, destructive=False)


def _carve_square(room: Room, local: Tuple[int, int], half_width: int) -> None:
    lx, ly = local
    for x in range(max(lx - half_width, 0), lx + half_width + 1):
        for y in range(max(ly - half_width, 0), ly + half_width + 1):
            room.set_tile(x, y, Tile.GROUND)


def carve_path(map_area: MapArea, settings) -> bool:
    """Open a walkable route between the centers of every connected room pair.

    A* prefers ground over wall tiles, so existing openings are reused and only
    the walls in the way are knocked out.  Stops at the first pair without any
    route and returns False.
    """
    if map_area.graph is None:
        raise GenerationError("Cannot carve paths without a room graph")

    index = RoomCellIndex(map_area)
    half_width = settings.min_passage_width // 2
    for id1, id2 in list(map_area.graph.reassembled_graph.edges()):
        room1 = map_area.rooms[id1]
        room2 = map_area.rooms[id2]
        path = find_room_path(index, room1.center_cell, room2.center_cell)
        if path is None:
            log.warning("No path between rooms", room1=id1, room2=id2)
            return False
        for cell in path:
            room = index.room_at(cell)
            if room is None:
                continue
            _carve_square(room, room.global_to_local(cell), half_width)
    return True


def _door_tiles(tiles: List[Tuple[int, int]], max_passage_width: int) -> List[Tuple[int, int]]:
    # the two end tiles sit in the corners of the shared wall
    if len(tiles) < 2:
        return []
    trimmed = tiles[1:-1]
    return trimmed[:max_passage_width]


def carve_doors(map_area: MapArea, settings) -> int:
    """Open the shared wall between every pair of adjacent connected rooms."""
    if map_area.connections is None:
        raise GenerationError("Cannot carve doors without room connections")

    carved = 0
    for connection in map_area.connections:
        tiles = connection.adjacent_tiles
        if not connection.is_adjacent or tiles is None:
            continue
        for room_id, room_tiles in (
            (tiles.room1_id, tiles.tiles1),
            (tiles.room2_id, tiles.tiles2),
        ):
            room = map_area.rooms[room_id]
            for x, y in _door_tiles(room_tiles, settings.max_passage_width):
                room.set_tile(x, y, Tile.GROUND)
                carved += 1
    log.debug("Doors carved", tiles=carved)
    return carved


def postprocess(map_area: MapArea, settings, rng: GameRNG) -> bool:
    """Finish the tiles of every room. Returns False when a room pair had no route.

    Doors between adjacent rooms are still carved after a failed route.
    """
    strip_unconnected_rooms(map_area, settings)
    outer_walls(map_area)
    apply_aesthetics(map_area, rng)
    routed = carve_path(map_area, settings)
    outer_walls(map_area)
    carve_doors(map_area, settings)
    return routed
