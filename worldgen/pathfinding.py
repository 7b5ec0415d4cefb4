# worldgen/pathfinding.py
import heapq
import itertools
from collections import defaultdict
from typing import Callable, Dict, Iterable, List, Optional, Tuple

import structlog

from worldgen.map_area import MapArea
from worldgen.room import Room, Tile

log = structlog.get_logger()

Position = Tuple[int, int]
SuccessorFn = Callable[[Position], Iterable[Tuple[Position, int]]]
HeuristicFn = Callable[[Position], int]

GROUND_COST = 1
WALL_COST = 100
_STEPS = ((1, 0), (0, 1), (-1, 0), (0, -1))


def astar(
    start: Position,
    target: Position,
    successors: SuccessorFn,
    heuristic: HeuristicFn,
) -> Optional[List[Position]]:
    """A* over an implicit graph.

    Returns the path from *start* to *target*, both included, or ``None`` when
    the target cannot be reached.
    """
    counter = itertools.count()
    open_set: List[Tuple[int, int, Position]] = []
    came_from: Dict[Position, Position] = {}
    g_score: Dict[Position, float] = defaultdict(lambda: float("inf"))

    g_score[start] = 0
    heapq.heappush(open_set, (heuristic(start), next(counter), start))
    closed = set()

    while open_set:
        _, _, current = heapq.heappop(open_set)
        if current == target:
            path = [current]
            while current in came_from:
                current = came_from[current]
                path.append(current)
            path.reverse()
            return path
        if current in closed:
            continue
        closed.add(current)

        for neighbour, cost in successors(current):
            tentative = g_score[current] + cost
            if tentative < g_score[neighbour]:
                came_from[neighbour] = current
                g_score[neighbour] = tentative
                heapq.heappush(
                    open_set, (tentative + heuristic(neighbour), next(counter), neighbour)
                )
    return None


class RoomCellIndex:
    """World cell to owning room lookup, first room in map order wins."""

    def __init__(self, map_area: MapArea) -> None:
        self._owner: Dict[Position, Room] = {}
        for room in map_area.rooms.values():
            for x in range(room.x, room.end_x):
                for y in range(room.y, room.end_y):
                    self._owner.setdefault((x, y), room)

    def room_at(self, point: Position) -> Optional[Room]:
        return self._owner.get(point)

    def step_cost(self, point: Position) -> Optional[int]:
        room = self._owner.get(point)
        if room is None:
            return None
        lx, ly = point[0] - room.x, point[1] - room.y
        return WALL_COST if room.get_tile(lx, ly) == Tile.WALL else GROUND_COST

    def successors(self, point: Position) -> List[Tuple[Position, int]]:
        result = []
        for dx, dy in _STEPS:
            neighbour = (point[0] + dx, point[1] + dy)
            cost = self.step_cost(neighbour)
            if cost is not None:
                result.append((neighbour, cost))
        return result


def find_room_path(
    index: RoomCellIndex, start: Position, target: Position
) -> Optional[List[Position]]:
    """Cheapest 4-way walk between two cells that stays inside rooms."""

    def heuristic(point: Position) -> int:
        return (point[0] - target[0]) ** 2 + (point[1] - target[1]) ** 2

    return astar(start, target, index.successors, heuristic)
