"""Procedural room-and-hallway level generation."""

from worldgen.errors import GenerationError, PresetError
from worldgen.map_area import MapArea
from worldgen.pipeline import WorldGenerator, generate_map_area
from worldgen.presets import PresetRepository
from worldgen.room import Room, RoomType, Tile
from worldgen.settings import WorldgenSettings, load_settings

__all__ = [
    "GenerationError",
    "PresetError",
    "MapArea",
    "WorldGenerator",
    "generate_map_area",
    "PresetRepository",
    "Room",
    "RoomType",
    "Tile",
    "WorldgenSettings",
    "load_settings",
]
