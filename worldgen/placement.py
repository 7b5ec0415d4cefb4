# worldgen/placement.py
from __future__ import annotations

import structlog

from game_rng import GameRNG
from worldgen.errors import GenerationError
from worldgen.map_area import MapArea
from worldgen.presets import PresetRepository, instantiate_preset
from worldgen.room import Room

log = structlog.get_logger()

# When False every room is main and the size threshold below is skipped
MAIN_ROOM_THRESHOLD_ENABLED = False


def place_presets(settings, presets: PresetRepository, rng: GameRNG) -> MapArea:
    """Spawn ``presets_to_spawn`` random "normal" presets around the origin.

    Each preset instance is shifted by a random offset drawn from
    ``[-spawn_range, spawn_range]`` on both axes.  Room ids are handed out
    sequentially across all presets, and each preset's internal connections are
    rewritten to those global ids.
    """
    map_area = MapArea()
    next_id = 0

    for _ in range(settings.presets_to_spawn):
        preset = presets.choose("normal", rng)
        if preset is None:
            log.error("No normal preset available", presets=len(presets))
            raise GenerationError("No 'normal' preset available for placement")

        instance = instantiate_preset(preset, rng)
        dx = rng.get_int(-settings.spawn_range, settings.spawn_range)
        dy = rng.get_int(-settings.spawn_range, settings.spawn_range)

        first_id = next_id
        for preset_room in instance.rooms:
            dims = preset_room.dimensions.translated(dx, dy)
            map_area.add_room(Room.from_dimensions(next_id, dims, preset_room.details))
            next_id += 1

        map_area.initial_connections.extend(
            (a + first_id, b + first_id) for a, b in instance.connections
        )
        log.debug(
            "Preset placed",
            preset=preset.name,
            offset=(dx, dy),
            rooms=len(instance.rooms),
        )

    log.info(
        "Rooms placed",
        rooms=len(map_area.rooms),
        initial_connections=len(map_area.initial_connections),
    )
    return map_area


def determine_main_rooms(map_area: MapArea, settings) -> None:
    if not MAIN_ROOM_THRESHOLD_ENABLED:
        for room in map_area.rooms.values():
            room.is_main = True
        return

    if not map_area.rooms:
        return
    mean_area = sum(room.area for room in map_area.rooms.values()) / len(map_area.rooms)
    cutoff = mean_area * settings.main_room_threshold_multiplier
    for room in map_area.rooms.values():
        room.is_main = room.area > cutoff
