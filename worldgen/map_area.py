# worldgen/map_area.py
"""Aggregate state of one generated level."""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Dict, Iterator, List, Optional, Tuple

import networkx as nx

from worldgen.room import Room, RoomId

LocalTile = Tuple[int, int]


class ConnectionKind(Enum):
    ADJACENT = auto()
    SEPARATED = auto()
    SEPARATED_ROOMS_BETWEEN = auto()
    SEPARATED_NO_SOLUTION = auto()
    UNKNOWN = auto()


@dataclass
class AdjacentTiles:
    """Matching door tiles on both sides of a shared border, in local coordinates."""

    room1_id: RoomId
    tiles1: List[LocalTile]
    room2_id: RoomId
    tiles2: List[LocalTile]


@dataclass
class RoomConnection:
    room1_id: RoomId
    room2_id: RoomId
    kind: ConnectionKind = ConnectionKind.UNKNOWN
    adjacent_tiles: Optional[AdjacentTiles] = None
    rooms_between: Tuple[RoomId, ...] = ()

    @classmethod
    def adjacent(cls, room1_id: RoomId, room2_id: RoomId, tiles: AdjacentTiles):
        return cls(room1_id, room2_id, ConnectionKind.ADJACENT, adjacent_tiles=tiles)

    @classmethod
    def separated(cls, room1_id: RoomId, room2_id: RoomId):
        return cls(room1_id, room2_id, ConnectionKind.SEPARATED)

    @classmethod
    def with_rooms_between(cls, room1_id: RoomId, between, room2_id: RoomId):
        return cls(
            room1_id,
            room2_id,
            ConnectionKind.SEPARATED_ROOMS_BETWEEN,
            rooms_between=tuple(between),
        )

    @classmethod
    def no_solution(cls, room1_id: RoomId, room2_id: RoomId):
        return cls(room1_id, room2_id, ConnectionKind.SEPARATED_NO_SOLUTION)

    @property
    def room_ids(self) -> Tuple[RoomId, RoomId]:
        return self.room1_id, self.room2_id

    @property
    def is_adjacent(self) -> bool:
        return self.kind is ConnectionKind.ADJACENT


@dataclass
class Triangulation:
    """Delaunay output over the id-sorted main rooms.

    ``triangles`` and ``hull`` hold indices into ``room_ids``.
    """

    triangles: List[Tuple[int, int, int]]
    hull: List[int]
    room_ids: List[RoomId]

    def hull_edges(self) -> List[Tuple[RoomId, RoomId]]:
        """Consecutive hull pairs as room ids, closed only when triangles exist."""
        ids = [self.room_ids[i] for i in self.hull]
        edges = list(zip(ids, ids[1:]))
        if self.triangles and len(ids) > 2:
            edges.append((ids[-1], ids[0]))
        return edges


@dataclass
class RoomGraph:
    mst: nx.Graph
    reassembled_graph: nx.Graph
    main_path_rooms: List[RoomId] = field(default_factory=list)


@dataclass
class MapArea:
    rooms: Dict[RoomId, Room] = field(default_factory=dict)
    initial_connections: List[Tuple[RoomId, RoomId]] = field(default_factory=list)
    triangulation: Optional[Triangulation] = None
    graph: Optional[RoomGraph] = None
    connections: Optional[List[RoomConnection]] = None

    def add_room(self, room: Room) -> None:
        if room.room_id in self.rooms:
            raise ValueError(f"Duplicate room id {room.room_id}")
        self.rooms[room.room_id] = room

    def next_room_id(self) -> RoomId:
        return max(self.rooms, default=-1) + 1

    def sorted_rooms(self) -> List[Room]:
        return [self.rooms[room_id] for room_id in sorted(self.rooms)]

    def main_rooms(self) -> List[Room]:
        return [room for room in self.sorted_rooms() if room.is_main]

    def visible_rooms(self) -> Iterator[Room]:
        return (room for room in self.rooms.values() if room.is_visible)

    def room_at(self, point: Tuple[int, int]) -> Optional[Room]:
        """First room, in insertion order, whose area contains the world cell."""
        for room in self.rooms.values():
            if room.contains_point(point):
                return room
        return None


__all__ = [
    "ConnectionKind",
    "AdjacentTiles",
    "RoomConnection",
    "Triangulation",
    "RoomGraph",
    "MapArea",
]
