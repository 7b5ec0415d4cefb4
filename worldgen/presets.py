# worldgen/presets.py
"""Room presets: small hand-authored groups of rooms loaded from YAML.

A preset directory holds one ``*.yaml`` file per preset and an
``index.yaml`` that sorts preset names into the ``start``, ``normal`` and
``boss`` categories::

    start: [entrance]
    normal: [twin_halls, cave_pair]
    boss: [throne]
"""
from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import structlog
import yaml

from game_rng import GameRNG
from utils.config_utils import load_yaml_config
from worldgen.aesthetics import AestheticModifier, parse_modifier
from worldgen.errors import PresetError
from worldgen.geometry import RoomDimensions
from worldgen.room import RoomDetails, RoomType

log = structlog.get_logger()

INDEX_FILE_NAME = "index.yaml"
PRESET_CATEGORIES = ("start", "normal", "boss")
DEFAULT_ROOM_SIZE = (10, 10)
DEFAULT_ROOM_ANCHOR = (0, 0)


@dataclass(frozen=True)
class SizeSpec:
    """``fixed`` size, inclusive per-axis ``range``, or ``dynamic``."""

    kind: str = "dynamic"
    fixed: Tuple[int, int] = DEFAULT_ROOM_SIZE
    length_range: Tuple[int, int] = (0, 0)
    height_range: Tuple[int, int] = (0, 0)

    def resolve(self, rng: GameRNG) -> Tuple[int, int]:
        if self.kind == "fixed":
            return self.fixed
        if self.kind == "range":
            length = rng.get_int(*self.length_range)
            height = rng.get_int(*self.height_range)
            return length, height
        return DEFAULT_ROOM_SIZE


@dataclass(frozen=True)
class PositionSpec:
    kind: str = "dynamic"
    fixed: Tuple[int, int] = DEFAULT_ROOM_ANCHOR

    def resolve(self, rng: GameRNG) -> Tuple[int, int]:
        if self.kind == "fixed":
            return self.fixed
        return DEFAULT_ROOM_ANCHOR


@dataclass(frozen=True)
class PositionalModifier:
    """Layout hint between two rooms of a preset. Parsed but not enforced."""

    kind: str
    room1: str
    room2: str
    distance: Optional[int] = None

    def mentions(self, room_name: str) -> bool:
        return room_name in (self.room1, self.room2)


@dataclass
class PresetRoom:
    name: str
    size: SizeSpec = field(default_factory=SizeSpec)
    position: PositionSpec = field(default_factory=PositionSpec)
    aesthetics: List[AestheticModifier] = field(default_factory=list)
    room_type: RoomType = RoomType.NORMAL


@dataclass
class Preset:
    name: str
    rooms: List[PresetRoom]
    connections: List[Tuple[str, str]] = field(default_factory=list)
    modifiers: List[PositionalModifier] = field(default_factory=list)

    def room_index(self, room_name: str) -> int:
        for index, room in enumerate(self.rooms):
            if room.name == room_name:
                return index
        raise PresetError(f"Preset '{self.name}' has no room named '{room_name}'")


@dataclass
class PresetRoomInstance:
    dimensions: RoomDimensions
    details: RoomDetails
    hints: List[PositionalModifier] = field(default_factory=list)


@dataclass
class PresetInstance:
    """Concrete rooms of one preset, connections as indices into ``rooms``."""

    name: str
    rooms: List[PresetRoomInstance]
    connections: List[Tuple[int, int]]


@dataclass
class PresetIndex:
    start: List[str] = field(default_factory=list)
    normal: List[str] = field(default_factory=list)
    boss: List[str] = field(default_factory=list)


# --- Parsing ---


def _int_pair(value: Any, what: str) -> Tuple[int, int]:
    if not isinstance(value, (list, tuple)) or len(value) != 2:
        raise PresetError(f"{what} must be a pair of integers, got {value!r}")
    try:
        return int(value[0]), int(value[1])
    except (TypeError, ValueError) as e:
        raise PresetError(f"{what} must be a pair of integers, got {value!r}") from e


def parse_size(data: Any) -> SizeSpec:
    if data is None or data == "dynamic":
        return SizeSpec()
    if not isinstance(data, dict) or len(data) != 1:
        raise PresetError(f"Invalid room size: {data!r}")
    if "fixed" in data:
        length, height = _int_pair(data["fixed"], "Fixed size")
        if length <= 0 or height <= 0:
            raise PresetError(f"Fixed size must be positive, got {length}x{height}")
        return SizeSpec(kind="fixed", fixed=(length, height))
    if "range" in data:
        ranges = data["range"]
        if not isinstance(ranges, (list, tuple)) or len(ranges) != 2:
            raise PresetError(f"Size range needs two [min, max] pairs, got {ranges!r}")
        length_range = _int_pair(ranges[0], "Length range")
        height_range = _int_pair(ranges[1], "Height range")
        for low, high in (length_range, height_range):
            if low <= 0 or low > high:
                raise PresetError(f"Invalid size range [{low}, {high}]")
        return SizeSpec(
            kind="range", length_range=length_range, height_range=height_range
        )
    raise PresetError(f"Unknown room size kind: {data!r}")


def parse_position(data: Any) -> PositionSpec:
    if data is None or data == "dynamic":
        return PositionSpec()
    if isinstance(data, dict) and set(data) == {"fixed"}:
        return PositionSpec(kind="fixed", fixed=_int_pair(data["fixed"], "Position"))
    raise PresetError(f"Invalid room position: {data!r}")


def parse_positional_modifier(data: Any) -> PositionalModifier:
    if not isinstance(data, dict) or len(data) != 1:
        raise PresetError(f"Modifier must be a single-key mapping: {data!r}")
    kind, args = next(iter(data.items()))
    if not isinstance(args, (list, tuple)):
        raise PresetError(f"Modifier '{kind}' needs a list of arguments")
    if kind in ("next_to", "same_axis") and len(args) == 2:
        return PositionalModifier(kind, str(args[0]), str(args[1]))
    if kind == "distance_away" and len(args) == 3:
        try:
            distance = int(args[2])
        except (TypeError, ValueError) as e:
            raise PresetError(f"distance_away needs an integer distance: {args!r}") from e
        return PositionalModifier(kind, str(args[0]), str(args[1]), distance)
    raise PresetError(f"Invalid positional modifier: {data!r}")


def parse_preset_room(data: Any) -> PresetRoom:
    if not isinstance(data, dict) or "name" not in data:
        raise PresetError(f"Preset room needs a name: {data!r}")
    room_type_name = str(data.get("room_type", "normal")).lower()
    try:
        room_type = RoomType(room_type_name)
    except ValueError as e:
        raise PresetError(f"Unknown room type '{room_type_name}'") from e
    return PresetRoom(
        name=str(data["name"]),
        size=parse_size(data.get("size")),
        position=parse_position(data.get("position")),
        aesthetics=[parse_modifier(entry) for entry in data.get("aesthetics") or []],
        room_type=room_type,
    )


def parse_preset(data: Any) -> Preset:
    """Validate a raw YAML mapping and turn it into a :class:`Preset`."""
    if not isinstance(data, dict):
        raise PresetError("Preset file must contain a mapping")
    name = data.get("name")
    if not name:
        raise PresetError("Preset is missing a name")
    raw_rooms = data.get("rooms")
    if not isinstance(raw_rooms, list) or not raw_rooms:
        raise PresetError(f"Preset '{name}' needs a non-empty list of rooms")

    rooms = [parse_preset_room(entry) for entry in raw_rooms]
    room_names = [room.name for room in rooms]
    if len(set(room_names)) != len(room_names):
        raise PresetError(f"Preset '{name}' has duplicate room names")

    connections = []
    for entry in data.get("connections") or []:
        room1, room2 = (str(part) for part in _name_pair(entry))
        for room_name in (room1, room2):
            if room_name not in room_names:
                raise PresetError(
                    f"Preset '{name}' connects unknown room '{room_name}'"
                )
        connections.append((room1, room2))

    modifiers = [parse_positional_modifier(m) for m in data.get("modifiers") or []]
    for modifier in modifiers:
        for room_name in (modifier.room1, modifier.room2):
            if room_name not in room_names:
                raise PresetError(
                    f"Preset '{name}' modifier names unknown room '{room_name}'"
                )

    return Preset(str(name), rooms, connections, modifiers)


def _name_pair(entry: Any) -> Tuple[Any, Any]:
    if not isinstance(entry, (list, tuple)) or len(entry) != 2:
        raise PresetError(f"Connection must be a pair of room names: {entry!r}")
    return entry[0], entry[1]


def parse_index(data: Any) -> PresetIndex:
    if not isinstance(data, dict):
        raise PresetError("Preset index must be a mapping")
    lists = {}
    for category in PRESET_CATEGORIES:
        names = data.get(category) or []
        if not isinstance(names, list):
            raise PresetError(f"Preset index category '{category}' must be a list")
        lists[category] = [str(n) for n in names]
    return PresetIndex(**lists)


# --- Instantiation ---


def instantiate_preset(preset: Preset, rng: GameRNG) -> PresetInstance:
    """Resolve every room of *preset* to concrete dimensions.

    Rooms are resolved in list order, anchor before size, so a fixed seed
    always yields the same instance.  Connections become index pairs into the
    returned room list.
    """
    rooms = []
    for preset_room in preset.rooms:
        anchor = preset_room.position.resolve(rng)
        length, height = preset_room.size.resolve(rng)
        details = RoomDetails(
            is_main=False,
            room_type=preset_room.room_type,
            aesthetic_modifiers=list(preset_room.aesthetics),
        )
        hints = [m for m in preset.modifiers if m.mentions(preset_room.name)]
        rooms.append(
            PresetRoomInstance(
                dimensions=RoomDimensions(anchor[0], anchor[1], length, height),
                details=details,
                hints=hints,
            )
        )
    connections = [
        (preset.room_index(room1), preset.room_index(room2))
        for room1, room2 in preset.connections
    ]
    return PresetInstance(preset.name, rooms, connections)


# --- Repository ---


class PresetRepository:
    def __init__(
        self, index: Optional[PresetIndex] = None, presets: Optional[List[Preset]] = None
    ) -> None:
        self.index = index if index is not None else PresetIndex()
        self._presets: Dict[str, Preset] = {}
        for preset in presets or []:
            if preset.name in self._presets:
                log.warning("Duplicate preset name, keeping first", preset=preset.name)
                continue
            self._presets[preset.name] = preset

    def __len__(self) -> int:
        return len(self._presets)

    @property
    def presets(self) -> List[Preset]:
        return list(self._presets.values())

    @classmethod
    def load(cls, directory: Path) -> "PresetRepository":
        """Read ``index.yaml`` and every preset file from *directory*.

        Preset files that fail to parse are skipped.  A missing or broken index
        leaves the repository empty.
        """
        directory = Path(directory)
        index_path = directory / INDEX_FILE_NAME
        try:
            index = parse_index(load_yaml_config(index_path, "Preset index"))
        except (OSError, yaml.YAMLError, PresetError) as e:
            log.warning(
                "Preset index unusable, no presets loaded",
                path=str(index_path),
                error=str(e),
            )
            return cls()

        presets = []
        for path in sorted(directory.glob("*.yaml")):
            if path.name == INDEX_FILE_NAME:
                continue
            try:
                presets.append(parse_preset(load_yaml_config(path, "Preset")))
            except (OSError, yaml.YAMLError, PresetError) as e:
                log.warning("Skipping preset file", path=str(path), error=str(e))
        repository = cls(index, presets)
        log.info(
            "Presets loaded",
            directory=str(directory),
            count=len(repository),
            normal=len(index.normal),
        )
        return repository

    def get_by_name(self, name: str) -> Optional[Preset]:
        return self._presets.get(name)

    def names_in_category(self, category: str) -> Optional[List[str]]:
        if category not in PRESET_CATEGORIES:
            return None
        return list(getattr(self.index, category))

    def choose(self, category: str, rng: GameRNG) -> Optional[Preset]:
        """Pick a preset from *category* uniformly at random."""
        names = self.names_in_category(category)
        if not names:
            return None
        name = rng.choice(names)
        preset = self.get_by_name(name)
        if preset is None:
            log.warning("Indexed preset has no file", category=category, preset=name)
        return preset


__all__ = [
    "SizeSpec",
    "PositionSpec",
    "PositionalModifier",
    "PresetRoom",
    "Preset",
    "PresetRoomInstance",
    "PresetInstance",
    "PresetIndex",
    "PresetRepository",
    "parse_preset",
    "parse_index",
    "instantiate_preset",
]
