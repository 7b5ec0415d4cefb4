# worldgen/room.py
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, IntEnum
from typing import TYPE_CHECKING, List, Optional, Tuple

import numpy as np
import structlog

from worldgen.geometry import DimensionsMixin, RoomDimensions

if TYPE_CHECKING:
    from worldgen.aesthetics import AestheticModifier

log = structlog.get_logger()

RoomId = int


class Tile(IntEnum):
    GROUND = 0
    WALL = 1


class RoomType(Enum):
    NORMAL = "normal"
    SHOP = "shop"
    BOSS = "boss"


@dataclass
class RoomDetails:
    """Metadata carried by a room through the pipeline."""

    is_main: bool = False
    room_type: RoomType = RoomType.NORMAL
    # applied in order during postprocessing
    aesthetic_modifiers: List["AestheticModifier"] = field(default_factory=list)


class Room(DimensionsMixin):
    """A rectangular block of tiles placed somewhere in the world.

    The tile grid is stored row-major as ``tiles[y, x]``.  Only the anchor
    ever changes after construction; the grid keeps its shape.
    """

    def __init__(
        self,
        room_id: RoomId,
        length: int,
        height: int,
        anchor: Tuple[int, int] = (0, 0),
        is_main: bool = False,
        details: Optional[RoomDetails] = None,
    ) -> None:
        if length <= 0 or height <= 0:
            raise ValueError(f"Room size must be positive, got {length}x{height}")
        self.room_id = room_id
        self.length = int(length)
        self.height = int(height)
        self.x = int(anchor[0])
        self.y = int(anchor[1])
        self.details = details if details is not None else RoomDetails()
        if is_main:
            self.details.is_main = True
        self.is_position_fixed = False
        self.is_visible = True
        self._tiles = np.full(
            (self.height, self.length), fill_value=Tile.GROUND, dtype=np.uint8
        )

    @classmethod
    def from_dimensions(
        cls,
        room_id: RoomId,
        dims: RoomDimensions,
        details: Optional[RoomDetails] = None,
    ) -> "Room":
        return cls(room_id, dims.length, dims.height, dims.anchor, details=details)

    def __repr__(self) -> str:
        return (
            f"Room(id={self.room_id}, anchor=({self.x}, {self.y}), "
            f"size={self.length}x{self.height}, main={self.is_main})"
        )

    @property
    def is_main(self) -> bool:
        return self.details.is_main

    @is_main.setter
    def is_main(self, value: bool) -> None:
        self.details.is_main = value

    @property
    def dimensions(self) -> RoomDimensions:
        return RoomDimensions(self.x, self.y, self.length, self.height)

    @property
    def tiles(self) -> np.ndarray:
        """Read-only view of the tile grid, indexed ``[y, x]``."""
        view = self._tiles.view()
        view.flags.writeable = False
        return view

    @property
    def grid(self) -> np.ndarray:
        """Writable tile grid for in-place modifiers."""
        return self._tiles

    @property
    def area(self) -> int:
        return self.length * self.height

    def area_world(self, tile_size: Tuple[int, int]) -> int:
        return self.area * tile_size[0] * tile_size[1]

    def offset(self, dx: int, dy: int) -> None:
        self.x += dx
        self.y += dy

    def in_bounds(self, x: int, y: int) -> bool:
        return 0 <= x < self.length and 0 <= y < self.height

    def get_tile(self, x: int, y: int) -> Optional[Tile]:
        if not self.in_bounds(x, y):
            return None
        return Tile(int(self._tiles[y, x]))

    def set_tile(self, x: int, y: int, tile: Tile) -> bool:
        if not self.in_bounds(x, y):
            return False
        self._tiles[y, x] = tile
        return True

    def fill_edges(self) -> None:
        """Turn the outermost ring of tiles into walls."""
        self._tiles[0, :] = Tile.WALL
        self._tiles[-1, :] = Tile.WALL
        self._tiles[:, 0] = Tile.WALL
        self._tiles[:, -1] = Tile.WALL

    def wall_count(self) -> int:
        return int(np.count_nonzero(self._tiles == Tile.WALL))


__all__ = ["RoomId", "Tile", "RoomType", "RoomDetails", "Room"]
