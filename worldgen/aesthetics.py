# worldgen/aesthetics.py
"""Decorative modifiers that reshape a room's interior after layout.

Two modifiers exist: evenly spaced :class:`Pillars` and cave-like
:class:`CellularAutomata`.  Both are plain dataclasses parsed from preset
YAML and applied through :func:`apply_modifier`.
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Tuple, Union

import numpy as np
import structlog
from scipy import ndimage

from game_rng import GameRNG
from worldgen.errors import PresetError
from worldgen.room import Room, Tile

log = structlog.get_logger()

# Neighbourhood kernels for the cave step
_ADJACENT_KERNEL = np.ones((3, 3), dtype=np.int32)
_ADJACENT_KERNEL[1, 1] = 0
_NEARBY_KERNEL = np.ones((5, 5), dtype=np.int32)
_NEARBY_KERNEL[[0, 0, -1, -1], [0, -1, 0, -1]] = 0

CORRIDOR_MARGIN = 4


class PillarGenerationType(Enum):
    AXIS_X = "x"
    AXIS_Y = "y"
    BOTH_AXES = "both_axes"


@dataclass(frozen=True)
class Pillars:
    amount: int
    pillar_size: int
    generation_type: PillarGenerationType = PillarGenerationType.BOTH_AXES

    def pillar_anchors(self, room: Room, rng: GameRNG) -> List[Tuple[int, int]]:
        xs = _evenly_spaced(room.length, self.amount + 1)
        ys = _evenly_spaced(room.height, self.amount + 1)
        anchors: List[Tuple[int, int]] = []
        if self.generation_type is PillarGenerationType.AXIS_X:
            for i in range(self.amount):
                anchors.append((xs[i + 1], ys[rng.get_int(0, len(ys) - 1)]))
        elif self.generation_type is PillarGenerationType.AXIS_Y:
            for i in range(self.amount):
                anchors.append((xs[rng.get_int(0, len(xs) - 1)], ys[i + 1]))
        else:
            for i in range(self.amount):
                for j in range(self.amount):
                    anchors.append((xs[i + 1], ys[j + 1]))
        return anchors

    def generate(self, room: Room, rng: GameRNG, destructive: bool = False) -> None:
        shift = self.pillar_size // 2
        for ax, ay in self.pillar_anchors(room, rng):
            for px in range(ax, ax + self.pillar_size):
                for py in range(ay, ay + self.pillar_size):
                    room.set_tile(max(px - shift, 0), max(py - shift, 0), Tile.WALL)


@dataclass(frozen=True)
class CellularAutomata:
    """Cave carving adapted from the RogueBasin cellular automata method."""

    iterations: int
    wall_percentage: float

    def random_fill(self, rows: int, cols: int, rng: GameRNG) -> np.ndarray:
        walls = np.zeros((rows, cols), dtype=bool)
        if CORRIDOR_MARGIN < cols - CORRIDOR_MARGIN:
            corridor = rng.get_int(CORRIDOR_MARGIN, cols - CORRIDOR_MARGIN - 1)
        else:
            corridor = cols // 2

        for y in range(rows):
            for x in range(cols):
                if x == 0 or y == 0 or x == cols - 1 or y == rows - 1:
                    walls[y, x] = True
                elif x != corridor and rng.get_float() < self.wall_percentage:
                    walls[y, x] = True
        return walls

    def step(self, walls: np.ndarray) -> np.ndarray:
        wall_cells = walls.astype(np.int32)
        open_cells = (~walls).astype(np.int32)
        adjacent_walls = ndimage.correlate(
            wall_cells, _ADJACENT_KERNEL, mode="constant", cval=0
        )
        nearby_open = ndimage.correlate(
            open_cells, _NEARBY_KERNEL, mode="constant", cval=0
        )
        new_walls = (adjacent_walls >= 5) | (nearby_open <= 2)
        new_walls[0, :] = True
        new_walls[-1, :] = True
        new_walls[:, 0] = True
        new_walls[:, -1] = True
        return new_walls

    def generate(self, room: Room, rng: GameRNG, destructive: bool = False) -> None:
        rows, cols = room.height, room.length
        walls = self.random_fill(rows, cols, rng)
        if not destructive:
            walls |= room.tiles == Tile.WALL
        for _ in range(self.iterations):
            walls = self.step(walls)
        room.grid[:, :] = np.where(walls, Tile.WALL, Tile.GROUND).astype(np.uint8)


AestheticModifier = Union[Pillars, CellularAutomata]


def _evenly_spaced(extent: int, steps: int) -> List[int]:
    return [int(k * extent / steps) for k in range(steps)]


def apply_modifier(
    room: Room, modifier: AestheticModifier, rng: GameRNG, destructive: bool = False
) -> None:
    if isinstance(modifier, (Pillars, CellularAutomata)):
        modifier.generate(room, rng, destructive)
    else:
        raise TypeError(f"Unknown aesthetic modifier: {modifier!r}")


def parse_modifier(data: Dict[str, Any]) -> AestheticModifier:
    """Build a modifier from a one-key preset mapping.

    ``{"pillars": {...}}`` and ``{"cellular_automata": {...}}`` are accepted.
    """
    if not isinstance(data, dict) or len(data) != 1:
        raise PresetError(f"Aesthetic entry must be a single-key mapping: {data!r}")
    kind, params = next(iter(data.items()))
    if not isinstance(params, dict):
        raise PresetError(f"Aesthetic '{kind}' needs a mapping of parameters")
    if kind == "pillars":
        modifier: AestheticModifier = _parse_pillars(params)
    elif kind == "cellular_automata":
        modifier = _parse_cellular_automata(params)
    else:
        raise PresetError(f"Unknown aesthetic '{kind}'")
    return modifier


def _parse_pillars(params: Dict[str, Any]) -> Pillars:
    try:
        amount = int(params["amount"])
        pillar_size = int(params["pillar_size"])
        generation_type = PillarGenerationType(
            str(params.get("generation_type", "both_axes")).lower()
        )
    except KeyError as e:
        raise PresetError(f"Aesthetic 'pillars' is missing {e}") from e
    except (TypeError, ValueError) as e:
        raise PresetError(f"Aesthetic 'pillars' has invalid parameters: {e}") from e
    if amount < 0 or pillar_size < 0:
        raise PresetError("Pillar amount and size must not be negative")
    return Pillars(amount, pillar_size, generation_type)


def _parse_cellular_automata(params: Dict[str, Any]) -> CellularAutomata:
    try:
        iterations = int(params["iterations"])
        wall_percentage = float(params["wall_percentage"])
    except KeyError as e:
        raise PresetError(f"Aesthetic 'cellular_automata' is missing {e}") from e
    except (TypeError, ValueError) as e:
        raise PresetError(
            f"Aesthetic 'cellular_automata' has invalid parameters: {e}"
        ) from e
    if iterations < 0:
        raise PresetError("Cellular automata iterations must not be negative")
    return CellularAutomata(iterations, wall_percentage)


__all__ = [
    "PillarGenerationType",
    "Pillars",
    "CellularAutomata",
    "AestheticModifier",
    "apply_modifier",
    "parse_modifier",
]
