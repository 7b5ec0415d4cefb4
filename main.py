# main.py
import argparse
import sys
import time
from pathlib import Path
from typing import List, Optional

import structlog
import yaml

from utils.logging_utils import level_from_verbosity, setup_logging
from worldgen.export import compose_tiles, main_path, render_ascii
from worldgen.pipeline import WorldGenerator
from worldgen.presets import PresetRepository
from worldgen.settings import WorldgenSettings, load_settings

log = structlog.get_logger()

# --- Paths relative to this script's location ---
SCRIPT_DIR = Path(__file__).parent.resolve()
CONFIG_DIR = SCRIPT_DIR / "config"

CONFIG_FILE = CONFIG_DIR / "worldgen.yaml"
PRESETS_DIR = CONFIG_DIR / "presets"
# --- End Paths ---


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Generate a room-and-hallway level and print it as ASCII."
    )
    parser.add_argument("--config", type=Path, default=CONFIG_FILE, help="worldgen YAML file")
    parser.add_argument(
        "--presets", type=Path, default=PRESETS_DIR, help="directory of preset YAML files"
    )
    parser.add_argument("--seed", type=int, default=None, help="override global_seed")
    parser.add_argument(
        "--spawn", type=int, default=None, help="override presets_to_spawn"
    )
    parser.add_argument(
        "-v", "--verbose", action="count", default=0, help="-v info, -vv debug"
    )
    parser.add_argument(
        "--json-logs", action="store_true", help="emit log lines as JSON"
    )
    return parser


def print_summary(generator: WorldGenerator) -> None:
    map_area = generator.map_area
    grid, origin = compose_tiles(map_area)
    print(f"\n--- Map (seed {generator.settings.global_seed}) ---")
    print(f"rooms: {len(map_area.rooms)}  visible: {sum(1 for _ in map_area.visible_rooms())}")
    print(f"connections: {len(map_area.connections or [])}")
    print(f"main path: {main_path(map_area)}")
    print(f"origin: {origin}  size: {grid.shape[1]}x{grid.shape[0]}")
    print(render_ascii(map_area))
    print("------------------------------------\n")


def main(argv: Optional[List[str]] = None) -> int:
    """Entry point: load config and presets, generate one map, print it."""
    args = build_parser().parse_args(argv)
    setup_logging(level_from_verbosity(args.verbose), json_output=args.json_logs)

    try:
        settings = load_settings(args.config) if args.config.is_file() else WorldgenSettings()
        if args.seed is not None:
            settings.global_seed = args.seed
        if args.spawn is not None:
            settings.presets_to_spawn = args.spawn
        settings.validate()
    except (yaml.YAMLError, ValueError) as e:
        log.critical("Invalid worldgen configuration", path=str(args.config), error=str(e))
        return 2

    presets = PresetRepository.load(args.presets)
    generator = WorldGenerator(settings, presets)

    start = time.perf_counter()
    if not generator.regenerate():
        return 1
    log.info("Generation finished", ms=round((time.perf_counter() - start) * 1000, 2))

    print_summary(generator)
    return 0


if __name__ == "__main__":
    sys.exit(main())
