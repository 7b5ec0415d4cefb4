# worldgen/pipeline.py
from __future__ import annotations

import time
from typing import Optional

import structlog

from game_rng import GameRNG
from worldgen.connecting import resolve_connections
from worldgen.errors import GenerationError
from worldgen.graphing import build_room_graph, rebuild_graph_from_connections, triangulate
from worldgen.map_area import MapArea
from worldgen.placement import determine_main_rooms, place_presets
from worldgen.postprocess import postprocess
from worldgen.presets import PresetRepository
from worldgen.separation import separate_rooms
from worldgen.settings import WorldgenSettings

log = structlog.get_logger()


def generate_map_area(
    settings: WorldgenSettings, presets: PresetRepository, rng: GameRNG
) -> MapArea:
    """Run every generation phase in order and return the finished map.

    The result depends only on the settings, the preset set and the RNG state,
    so a fresh ``GameRNG(settings.global_seed)`` reproduces the same map.
    """
    phase_start = time.perf_counter()

    def phase_done(name: str) -> None:
        nonlocal phase_start
        now = time.perf_counter()
        log.debug("Phase finished", phase=name, ms=round((now - phase_start) * 1000, 2))
        phase_start = now

    map_area = place_presets(settings, presets, rng)
    phase_done("placement")

    determine_main_rooms(map_area, settings)
    separate_rooms(map_area, settings)
    phase_done("separation")

    map_area.triangulation = triangulate(map_area.main_rooms())
    build_room_graph(map_area, settings, rng)
    phase_done("graph")

    resolve_connections(map_area, settings)
    rebuild_graph_from_connections(map_area)
    phase_done("connections")

    if not postprocess(map_area, settings, rng):
        log.warning("Some connected rooms have no walkable route", seed=rng.initial_seed)
    phase_done("postprocess")

    log.info(
        "Map generated",
        seed=rng.initial_seed,
        rooms=len(map_area.rooms),
        visible=sum(1 for _ in map_area.visible_rooms()),
        connections=len(map_area.connections or []),
    )
    return map_area


class WorldGenerator:
    """Owns the current map and rebuilds it on request.

    A failed regeneration leaves the previous map in place.
    """

    def __init__(self, settings: WorldgenSettings, presets: PresetRepository) -> None:
        self.settings = settings
        self.presets = presets
        self.rng = GameRNG(seed=settings.global_seed)
        self._map_area: Optional[MapArea] = None

    @property
    def map_area(self) -> Optional[MapArea]:
        return self._map_area

    def regenerate(self, settings: Optional[WorldgenSettings] = None) -> bool:
        if settings is not None:
            self.settings = settings
        self.rng.reset(self.settings.global_seed)
        try:
            map_area = generate_map_area(self.settings, self.presets, self.rng)
        except GenerationError as e:
            log.error(
                "Map generation failed, keeping previous map",
                seed=self.settings.global_seed,
                error=str(e),
            )
            return False
        self._map_area = map_area
        return True
