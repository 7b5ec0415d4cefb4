# worldgen/geometry.py
"""Integer rectangle helpers shared by every generation stage.

Every structure in the world (rooms, hallway candidates, corner pieces) is an
axis aligned rectangle described by its bottom-left ``anchor`` (``x``, ``y``),
a ``length`` along x and a ``height`` along y.  Ranges are half-open: a room
anchored at ``(0, 0)`` with length 10 covers x in ``[0, 10)``.
"""
from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum, auto
from typing import Iterator, Optional, Protocol, Tuple


class Orientation(Enum):
    """Shape of the opening between two rooms.

    ``VERTICAL`` openings are ``|`` shaped and join rooms separated along x.
    ``HORIZONTAL`` openings are ``_`` shaped and join rooms separated along y.
    """

    VERTICAL = auto()
    HORIZONTAL = auto()


class HasDimensions(Protocol):
    x: int
    y: int
    length: int
    height: int


class DimensionsMixin:
    """Derived geometry for anything exposing ``x``, ``y``, ``length``, ``height``."""

    x: int
    y: int
    length: int
    height: int

    @property
    def anchor(self) -> Tuple[int, int]:
        return self.x, self.y

    @property
    def end_x(self) -> int:
        return self.x + self.length

    @property
    def end_y(self) -> int:
        return self.y + self.height

    @property
    def anchor_end(self) -> Tuple[int, int]:
        return self.end_x, self.end_y

    @property
    def center(self) -> Tuple[float, float]:
        return self.x + self.length / 2.0, self.y + self.height / 2.0

    @property
    def center_cell(self) -> Tuple[int, int]:
        """Center truncated toward zero onto the tile grid."""
        cx, cy = self.center
        return int(cx), int(cy)

    def anchor_world(self, tile_size: Tuple[int, int]) -> Tuple[int, int]:
        return self.x * tile_size[0], self.y * tile_size[1]

    def center_world(self, tile_size: Tuple[int, int]) -> Tuple[float, float]:
        cx, cy = self.center
        return cx * tile_size[0], cy * tile_size[1]

    def local_to_global(self, local: Tuple[int, int]) -> Tuple[int, int]:
        return self.x + local[0], self.y + local[1]

    def global_to_local(self, point: Tuple[int, int]) -> Optional[Tuple[int, int]]:
        """Convert a world cell to local coordinates, ``None`` if outside."""
        lx = point[0] - self.x
        ly = point[1] - self.y
        if lx < 0 or ly < 0 or lx >= self.length or ly >= self.height:
            return None
        return lx, ly

    def contains_point(self, point: Tuple[int, int]) -> bool:
        return self.x <= point[0] < self.end_x and self.y <= point[1] < self.end_y


@dataclass(frozen=True)
class RoomDimensions(DimensionsMixin):
    """Anchor and size of a structure that is not (yet) a materialized room."""

    x: int
    y: int
    length: int
    height: int

    @classmethod
    def of(cls, structure: HasDimensions) -> "RoomDimensions":
        return cls(structure.x, structure.y, structure.length, structure.height)

    def translated(self, dx: int, dy: int) -> "RoomDimensions":
        return RoomDimensions(self.x + dx, self.y + dy, self.length, self.height)


def is_overlapping(a: HasDimensions, b: HasDimensions) -> bool:
    """True if both axis intervals strictly cross. Touching edges do not count."""
    return (
        a.x < b.x + b.length
        and a.x + a.length > b.x
        and a.y < b.y + b.height
        and a.y + a.height > b.y
    )


def line_overlap(a1: int, a2: int, b1: int, b2: int) -> int:
    """Shared length of ``[a1, a2)`` and ``[b1, b2)``; negative values are gaps."""
    return min(a2, b2) - max(a1, b1)


def common_edge(a: HasDimensions, b: HasDimensions) -> Tuple[int, int]:
    """Per axis overlap of two structures.

    Structures can be far apart and still share an edge: two rooms side by side
    on the x axis with a gap between them report a negative x overlap and a
    positive y overlap.
    """
    overlap_x = line_overlap(a.x, a.x + a.length, b.x, b.x + b.length)
    overlap_y = line_overlap(a.y, a.y + a.height, b.y, b.y + b.height)
    return overlap_x, overlap_y


def center_of(structure: HasDimensions) -> Tuple[float, float]:
    return (
        structure.x + structure.length / 2.0,
        structure.y + structure.height / 2.0,
    )


def distance(a: HasDimensions, b: HasDimensions) -> float:
    """Euclidean distance between the centers of two structures."""
    ax, ay = center_of(a)
    bx, by = center_of(b)
    return math.hypot(ax - bx, ay - by)


def door_orientation(overlap_x: int, overlap_y: int) -> Orientation:
    if max(overlap_x, overlap_y) == overlap_x:
        return Orientation.HORIZONTAL
    return Orientation.VERTICAL


def order_pair(first_is_lower: bool, a, b):
    """Return ``(flipped, low, high)`` so that ``low`` is the bottom/left one."""
    if first_is_lower:
        return False, a, b
    return True, b, a


def bresenham(
    start: Tuple[int, int], end: Tuple[int, int]
) -> Iterator[Tuple[int, int]]:
    """Yield grid points on the line from ``start`` up to, not including, ``end``."""
    x0, y0 = start
    x1, y1 = end
    dx = abs(x1 - x0)
    dy = -abs(y1 - y0)
    sx = 1 if x0 < x1 else -1
    sy = 1 if y0 < y1 else -1
    err = dx + dy
    while (x0, y0) != (x1, y1):
        yield x0, y0
        e2 = 2 * err
        if e2 >= dy:
            err += dy
            x0 += sx
        if e2 <= dx:
            err += dx
            y0 += sy


__all__ = [
    "Orientation",
    "DimensionsMixin",
    "RoomDimensions",
    "is_overlapping",
    "line_overlap",
    "common_edge",
    "center_of",
    "distance",
    "door_orientation",
    "order_pair",
    "bresenham",
]
