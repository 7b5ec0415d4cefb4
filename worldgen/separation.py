# worldgen/separation.py
from __future__ import annotations

import itertools
import math
from typing import Sequence, Tuple

import structlog

from worldgen.geometry import is_overlapping
from worldgen.map_area import MapArea
from worldgen.room import Room

log = structlog.get_logger()

MAX_SEPARATION_ITERATIONS = 5000


def any_overlap(rooms: Sequence[Room]) -> bool:
    return any(is_overlapping(a, b) for a, b in itertools.combinations(rooms, 2))


def _push_direction(a: Room, b: Room) -> Tuple[float, float]:
    ax, ay = a.center
    bx, by = b.center
    dx, dy = bx - ax, by - ay
    norm = math.hypot(dx, dy)
    if norm == 0.0:
        return 0.0, 0.0
    return dx / norm, dy / norm


def _move(room: Room, direction: Tuple[float, float], factor: float) -> None:
    # int() truncates toward zero, small pushes on one axis are dropped
    room.offset(int(direction[0] * factor), int(direction[1] * factor))


def separate_rooms(map_area: MapArea, settings) -> int:
    """Push overlapping rooms apart until none overlap or the pass cap is hit.

    Every pass walks all room pairs in id order; a room moved by an earlier
    pair is seen at its new position by later pairs.  Rooms with a fixed
    position never move.  Returns the number of passes run.
    """
    rooms = map_area.sorted_rooms()
    factor = settings.separation_factor
    iterations = 0

    while any_overlap(rooms):
        if iterations >= MAX_SEPARATION_ITERATIONS:
            log.debug("Separation did not converge", iterations=iterations)
            break
        for a, b in itertools.combinations(rooms, 2):
            if not is_overlapping(a, b):
                continue
            dx, dy = _push_direction(a, b)
            if not a.is_position_fixed:
                _move(a, (-dx, -dy), factor)
            if not b.is_position_fixed:
                _move(b, (dx, dy), factor)
        iterations += 1

    log.debug("Separation finished", iterations=iterations, rooms=len(rooms))
    return iterations
