# utils/config_utils.py
from pathlib import Path
from typing import Any, Dict

import structlog
import yaml

log = structlog.get_logger()


def load_yaml_config(config_path: Path, config_name: str) -> Dict[str, Any]:
    """Loads a generic YAML configuration file.

    Raises ``FileNotFoundError`` for a missing file and re-raises YAML parse
    errors after logging them.  An empty file yields an empty dict.
    """
    config_path = Path(config_path)
    if not config_path.is_file():
        log.error(f"{config_name} config file not found", path=str(config_path))
        raise FileNotFoundError(
            f"{config_name} configuration file not found: {config_path}"
        )
    try:
        # bytes stream: PyYAML reports bad encodings as ReaderError
        with config_path.open("rb") as f:
            config_data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        log.error(
            f"Error parsing YAML for {config_name}",
            path=str(config_path),
            error=str(e),
        )
        raise
    if config_data is None:
        log.warning(f"{config_name} config file is empty.", path=str(config_path))
        return {}
    log.debug(f"{config_name} config loaded", path=str(config_path))
    return config_data
