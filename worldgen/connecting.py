# worldgen/connecting.py
"""Turn graph edges into realized room connections.

Every edge of the reassembled room graph is classified.  Rooms that already
share a wide enough border become ``ADJACENT`` connections with matching door
tiles; rooms with a gap between them get hallway rooms generated and are
reclassified, until every surviving connection is adjacent.
"""
from __future__ import annotations

from enum import Enum, auto
from typing import Iterable, List, Optional, Sequence, Tuple

import structlog

from worldgen.errors import GenerationError
from worldgen.geometry import (
    Orientation,
    RoomDimensions,
    bresenham,
    common_edge,
    door_orientation,
    is_overlapping,
    order_pair,
)
from worldgen.map_area import (
    AdjacentTiles,
    ConnectionKind,
    MapArea,
    RoomConnection,
)
from worldgen.room import Room, RoomDetails, RoomId

log = structlog.get_logger()

MAX_RESOLVE_ITERATIONS = 10
# Gaps without rooms in between are always treated as bridgeable
SEPARATED_ALWAYS_BUILDABLE = True
# Straight hallways span the full shared edge unless this is enabled
CLAMP_HALLWAY_WIDTH = False


class LHallwayOrientation(Enum):
    RIGHT_UP = auto()
    UP_RIGHT = auto()
    LEFT_UP = auto()
    UP_LEFT = auto()


class HallwayError(Exception):
    pass


class HallwayBlocked(HallwayError):
    def __init__(self, room1_id: RoomId, blocker_id: RoomId, room2_id: RoomId) -> None:
        super().__init__(
            f"Hallway between {room1_id} and {room2_id} runs through {blocker_id}"
        )
        self.room1_id = room1_id
        self.blocker_id = blocker_id
        self.room2_id = room2_id


# --- Classification ---


def adjacency(a, b, min_passage_width: int) -> Optional[Tuple[int, Orientation]]:
    """``(overlap, orientation)`` if the rooms touch along a wide enough edge."""
    overlap_x, overlap_y = common_edge(a, b)
    if overlap_x < min_passage_width and overlap_y < min_passage_width:
        return None
    if overlap_x < 0 or overlap_y < 0:
        return None
    return max(overlap_x, overlap_y), door_orientation(overlap_x, overlap_y)


def rooms_between(room1: Room, room2: Room, map_area: MapArea) -> List[RoomId]:
    """Ids of other rooms crossed by the line between the two room centers."""
    found: List[RoomId] = []
    for point in bresenham(room1.center_cell, room2.center_cell):
        room = map_area.room_at(point)
        if room is None:
            continue
        if room.room_id in (room1.room_id, room2.room_id) or room.room_id in found:
            continue
        found.append(room.room_id)
    return found


def can_build_hallway(room1: Room, room2: Room, map_area: MapArea, settings) -> bool:
    if SEPARATED_ALWAYS_BUILDABLE:
        return True
    try:
        create_hallway_dimensions(room1, room2, map_area, settings)
    except HallwayError:
        return False
    return True


def classify_connection(
    room1: Room, room2: Room, map_area: MapArea, settings
) -> RoomConnection:
    touching = adjacency(room1, room2, settings.min_passage_width)
    if touching is not None:
        _, orientation = touching
        tiles = find_adjacent_tiles(room1, room2, map_area, orientation)
        return RoomConnection.adjacent(room1.room_id, room2.room_id, tiles)

    between = rooms_between(room1, room2, map_area)
    if between:
        return RoomConnection.with_rooms_between(room1.room_id, between, room2.room_id)

    if can_build_hallway(room1, room2, map_area, settings):
        return RoomConnection.separated(room1.room_id, room2.room_id)

    return RoomConnection.no_solution(room1.room_id, room2.room_id)


def find_adjacent_tiles(
    room1: Room, room2: Room, map_area: MapArea, orientation: Orientation
) -> AdjacentTiles:
    """Local coordinates of the tiles facing each other across the shared border."""
    if orientation is Orientation.VERTICAL:
        flipped, low, high = order_pair(room1.x < room2.x, room1, room2)
        border = low.end_x - 1
        span = range(max(low.y, high.y), min(high.end_y, low.end_y))
        pairs = (((border, i), (border + 1, i)) for i in span)
    else:
        flipped, low, high = order_pair(room1.y < room2.y, room1, room2)
        border = low.end_y - 1
        span = range(max(low.x, high.x), min(high.end_x, low.end_x))
        pairs = (((i, border), (i, border + 1)) for i in span)

    low_tiles = []
    high_tiles = []
    for point_low, point_high in pairs:
        if map_area.room_at(point_low) is None or map_area.room_at(point_high) is None:
            continue
        local_low = low.global_to_local(point_low)
        local_high = high.global_to_local(point_high)
        if local_low is None or local_high is None:
            continue
        low_tiles.append(local_low)
        high_tiles.append(local_high)

    if flipped:
        low_tiles, high_tiles = high_tiles, low_tiles
    return AdjacentTiles(room1.room_id, low_tiles, room2.room_id, high_tiles)


# --- Hallway synthesis ---


def straight_hallway(
    a,
    b,
    overlap: int,
    orientation: Orientation,
    max_passage_width: Optional[int] = None,
    threshold: Optional[int] = None,
) -> RoomDimensions:
    """Dimensions of a hallway bridging the gap between *a* and *b*.

    VERTICAL hallways run along x between rooms separated on x, HORIZONTAL
    hallways run along y.  The hallway's width is the shared edge *overlap*.
    """
    if orientation is Orientation.VERTICAL:
        _, low, high = order_pair(a.x < b.x, a, b)
        width = _hallway_width(overlap, max_passage_width, threshold, low.height, high.height)
        return RoomDimensions(
            x=low.x + low.length,
            y=max(low.y, high.y),
            length=max(high.x - (low.x + low.length), 1),
            height=width,
        )

    _, low, high = order_pair(a.y < b.y, a, b)
    width = _hallway_width(overlap, max_passage_width, threshold, low.length, high.length)
    return RoomDimensions(
        x=max(low.x, high.x),
        y=low.y + low.height,
        length=width,
        height=max(high.y - (low.y + low.height), 1),
    )


def _hallway_width(
    overlap: int,
    max_passage_width: Optional[int],
    threshold: Optional[int],
    low_side: int,
    high_side: int,
) -> int:
    if not CLAMP_HALLWAY_WIDTH or max_passage_width is None:
        return overlap
    width = min(overlap, max_passage_width)
    if threshold is not None and width >= threshold:
        width = min(low_side, high_side)
    return width


def l_shaped_hallway(
    left, right, width: int, orientation: LHallwayOrientation
) -> List[RoomDimensions]:
    """Leg, corner square, leg. Legs are straight hallways into the corner."""
    left_cx, left_cy = left.center
    right_cx, right_cy = right.center
    half = width / 2.0
    if orientation in (LHallwayOrientation.RIGHT_UP, LHallwayOrientation.UP_LEFT):
        corner = RoomDimensions(int(right_cx - half), int(left_cy - half), width, width)
        first, second = Orientation.VERTICAL, Orientation.HORIZONTAL
    else:
        corner = RoomDimensions(int(left_cx - half), int(right_cy - half), width, width)
        first, second = Orientation.HORIZONTAL, Orientation.VERTICAL

    leg_a = straight_hallway(RoomDimensions.of(left), corner, width, first)
    leg_b = straight_hallway(corner, RoomDimensions.of(right), width, second)
    return [leg_a, corner, leg_b]


def _blocking_rooms(
    pieces: Sequence[RoomDimensions], map_area: MapArea, exclude: Tuple[RoomId, RoomId]
) -> List[RoomId]:
    blockers: List[RoomId] = []
    for piece in pieces:
        for room in map_area.rooms.values():
            if room.room_id in exclude or room.room_id in blockers:
                continue
            if is_overlapping(piece, room):
                blockers.append(room.room_id)
    return blockers


def create_hallway_dimensions(
    room1: Room, room2: Room, map_area: MapArea, settings
) -> List[RoomDimensions]:
    """Hallway pieces that connect *room1* to *room2*, ordered from room1.

    Raises :class:`HallwayBlocked` when every L shaped layout runs through
    another room.
    """
    overlap_x, overlap_y = common_edge(room1, room2)
    overlap = max(overlap_x, overlap_y)
    if overlap >= settings.min_passage_width:
        orientation = door_orientation(overlap_x, overlap_y)
        return [
            straight_hallway(
                room1,
                room2,
                overlap,
                orientation,
                settings.max_passage_width,
                settings.threshold,
            )
        ]

    flipped, left, right = order_pair(room1.x < room2.x, room1, room2)
    if left.y < right.y:
        candidates = [LHallwayOrientation.RIGHT_UP, LHallwayOrientation.UP_RIGHT]
    else:
        candidates = [LHallwayOrientation.LEFT_UP, LHallwayOrientation.UP_LEFT]
    width = max(settings.max_passage_width, settings.min_passage_width)
    endpoints = (room1.room_id, room2.room_id)
    first_blocker: Optional[RoomId] = None
    for orientation in reversed(candidates):
        pieces = l_shaped_hallway(left, right, width, orientation)
        if flipped:
            pieces.reverse()
        blockers = _blocking_rooms(pieces, map_area, endpoints)
        if not blockers:
            return pieces
        if first_blocker is None:
            first_blocker = blockers[0]

    raise HallwayBlocked(room1.room_id, first_blocker, room2.room_id)


def _add_hallway_room(map_area: MapArea, dims: RoomDimensions) -> Room:
    room = Room.from_dimensions(map_area.next_room_id(), dims, RoomDetails(is_main=False))
    map_area.add_room(room)
    return room


def _classify_chain(
    chain: Sequence[RoomId], map_area: MapArea, settings
) -> List[RoomConnection]:
    return [
        classify_connection(map_area.rooms[a], map_area.rooms[b], map_area, settings)
        for a, b in zip(chain, chain[1:])
    ]


def connect_with_hallway(
    connection: RoomConnection, map_area: MapArea, settings
) -> List[RoomConnection]:
    """Build hallway rooms for a SEPARATED connection.

    Returns the reclassified chain ``room1 -> hallway... -> room2``.  A blocked
    L shaped hallway yields a single SEPARATED_ROOMS_BETWEEN connection naming
    the blocker.
    """
    room1 = map_area.rooms[connection.room1_id]
    room2 = map_area.rooms[connection.room2_id]
    try:
        pieces = create_hallway_dimensions(room1, room2, map_area, settings)
    except HallwayBlocked as blocked:
        log.debug(
            "Hallway blocked",
            room1=blocked.room1_id,
            room2=blocked.room2_id,
            blocker=blocked.blocker_id,
        )
        return [
            RoomConnection.with_rooms_between(
                blocked.room1_id, (blocked.blocker_id,), blocked.room2_id
            )
        ]

    new_ids = [_add_hallway_room(map_area, dims).room_id for dims in pieces]
    log.debug(
        "Hallway created",
        room1=room1.room_id,
        room2=room2.room_id,
        hallway_rooms=new_ids,
    )
    chain = [connection.room1_id, *new_ids, connection.room2_id]
    return _classify_chain(chain, map_area, settings)


def reduce_connections(
    connections: Sequence[RoomConnection], map_area: MapArea, settings
) -> List[RoomConnection]:
    reduced: List[RoomConnection] = []
    for connection in connections:
        kind = connection.kind
        if kind is ConnectionKind.ADJACENT:
            reduced.append(connection)
        elif kind is ConnectionKind.SEPARATED:
            reduced.extend(connect_with_hallway(connection, map_area, settings))
        elif kind is ConnectionKind.SEPARATED_ROOMS_BETWEEN:
            chain = [connection.room1_id, *connection.rooms_between, connection.room2_id]
            reduced.extend(_classify_chain(chain, map_area, settings))
        elif kind is ConnectionKind.SEPARATED_NO_SOLUTION:
            log.debug(
                "Dropping unsolvable connection",
                room1=connection.room1_id,
                room2=connection.room2_id,
            )
        else:
            log.warning(
                "Unknown connection kind while reducing connections",
                room1=connection.room1_id,
                room2=connection.room2_id,
            )
    return reduced


def unique_connections(connections: Iterable[RoomConnection]) -> List[RoomConnection]:
    """Drop repeats of a room pair in either direction, first one kept.

    Chains expanded around rooms that overlap a hallway can yield the same
    pair again on every pass.
    """
    seen = set()
    unique: List[RoomConnection] = []
    for connection in connections:
        pair = frozenset(connection.room_ids)
        if pair in seen:
            continue
        seen.add(pair)
        unique.append(connection)
    return unique


def resolve_connections(map_area: MapArea, settings) -> List[RoomConnection]:
    """Classify every graph edge and reduce until all connections are adjacent.

    Stores and returns the surviving ADJACENT connections, one per room pair.
    Hallway rooms created along the way are added to ``map_area.rooms``.
    """
    if map_area.graph is None:
        raise GenerationError("Cannot resolve connections without a room graph")

    connections = [
        classify_connection(map_area.rooms[a], map_area.rooms[b], map_area, settings)
        for a, b in map_area.graph.reassembled_graph.edges()
    ]

    iterations = 0
    while not all(c.is_adjacent for c in connections):
        if iterations >= MAX_RESOLVE_ITERATIONS:
            break
        connections = reduce_connections(connections, map_area, settings)
        iterations += 1

    unresolved = [c for c in connections if not c.is_adjacent]
    if unresolved:
        log.warning(
            "Discarding unresolved connections",
            count=len(unresolved),
            pairs=[c.room_ids for c in unresolved],
        )
    map_area.connections = unique_connections(c for c in connections if c.is_adjacent)
    log.info(
        "Connections resolved",
        connections=len(map_area.connections),
        iterations=iterations,
        rooms=len(map_area.rooms),
    )
    return map_area.connections


__all__ = [
    "LHallwayOrientation",
    "HallwayError",
    "HallwayBlocked",
    "adjacency",
    "rooms_between",
    "classify_connection",
    "find_adjacent_tiles",
    "straight_hallway",
    "l_shaped_hallway",
    "create_hallway_dimensions",
    "connect_with_hallway",
    "reduce_connections",
    "unique_connections",
    "resolve_connections",
]
