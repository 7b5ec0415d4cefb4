# worldgen/settings.py
from __future__ import annotations

import dataclasses
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Tuple

import structlog

from utils.config_utils import load_yaml_config

log = structlog.get_logger()

CONFIG_SECTION = "worldgen"


@dataclass
class WorldgenSettings:
    """Tunables for one generation run, read from the ``worldgen`` YAML section."""

    tile_size: Tuple[int, int] = (8, 8)
    global_seed: int = 44
    presets_to_spawn: int = 5
    spawn_range: int = 100
    separation_factor: float = 2.0
    graph_reassembly_percentage: float = 0.30
    min_passage_width: int = 6
    max_passage_width: int = 12
    clear_unconnected_rooms: bool = True
    # Only read when the main room threshold / hallway clamp policies are on
    main_room_threshold_multiplier: float = -1.0
    threshold: int = 9999

    def __post_init__(self) -> None:
        self.validate()

    def validate(self) -> None:
        if len(self.tile_size) != 2 or min(self.tile_size) <= 0:
            raise ValueError(f"tile_size must be two positive ints, got {self.tile_size}")
        if self.presets_to_spawn < 0:
            raise ValueError("presets_to_spawn must not be negative")
        if self.spawn_range < 0:
            raise ValueError("spawn_range must not be negative")
        if self.separation_factor <= 0:
            raise ValueError("separation_factor must be positive")
        if self.min_passage_width <= 0 or self.max_passage_width <= 0:
            raise ValueError("passage widths must be positive")

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "WorldgenSettings":
        known = {f.name for f in dataclasses.fields(cls)}
        values: Dict[str, Any] = {}
        for key, value in (data or {}).items():
            if key not in known:
                log.warning("Ignoring unknown worldgen setting", key=key)
                continue
            values[key] = value
        try:
            if "tile_size" in values:
                values["tile_size"] = tuple(int(v) for v in values["tile_size"])
            for key in (
                "global_seed",
                "presets_to_spawn",
                "spawn_range",
                "min_passage_width",
                "max_passage_width",
                "threshold",
            ):
                if key in values:
                    values[key] = int(values[key])
            for key in (
                "separation_factor",
                "graph_reassembly_percentage",
                "main_room_threshold_multiplier",
            ):
                if key in values:
                    values[key] = float(values[key])
        except (TypeError, ValueError) as e:
            raise ValueError(f"Invalid worldgen setting: {e}") from e
        if "clear_unconnected_rooms" in values and not isinstance(
            values["clear_unconnected_rooms"], bool
        ):
            raise ValueError("clear_unconnected_rooms must be true or false")
        return cls(**values)

    def to_dict(self) -> Dict[str, Any]:
        data = dataclasses.asdict(self)
        data["tile_size"] = list(self.tile_size)
        return data


def load_settings(path: Path) -> WorldgenSettings:
    """Load :class:`WorldgenSettings` from the ``worldgen`` section of a YAML file."""
    config = load_yaml_config(Path(path), "Worldgen")
    section = (config.get(CONFIG_SECTION) or {}) if isinstance(config, dict) else None
    if not isinstance(section, dict):
        raise ValueError(f"'{CONFIG_SECTION}' section in {path} must be a mapping")
    settings = WorldgenSettings.from_dict(section)
    log.debug("Worldgen settings loaded", path=str(path), **settings.to_dict())
    return settings


__all__ = ["WorldgenSettings", "load_settings"]
