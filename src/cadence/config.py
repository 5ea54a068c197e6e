"""Configuration management for Cadence."""

import logging
import os
from dataclasses import dataclass
from pathlib import Path

logger = logging.getLogger(__name__)

CADENCE_HOME = Path(os.environ.get("CADENCE_HOME", Path.home() / "cadence"))
CONFIG_FILE = CADENCE_HOME / "config" / "cadence.conf"
DATA_DIR = CADENCE_HOME / "data"

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


@dataclass
class Config:
    """Cadence configuration."""

    data_file: str = ""
    snapshot_file: str = ""
    # Nightly refresh, five minutes before midnight
    refresh_time: str = "23:55"
    timezone: str = ""
    undo_capacity: int = 10
    log_level: str = "WARNING"

    @property
    def data_path(self) -> Path:
        if self.data_file:
            return Path(self.data_file).expanduser()
        return DATA_DIR / "tasks.json"

    @property
    def snapshot_path(self) -> Path:
        if self.snapshot_file:
            return Path(self.snapshot_file).expanduser()
        return DATA_DIR / "snapshot.json"


def _parse_int(key: str, value: str, default: int) -> int:
    try:
        return int(value)
    except ValueError:
        logger.warning(f"Invalid {key.upper()} value {value!r}, using {default}")
        return default


def load_config(config_file: Path | None = None) -> Config:
    """Load configuration from cadence.conf file."""
    config = Config()
    config_file = config_file or CONFIG_FILE

    if not config_file.exists():
        return config

    for line in config_file.read_text().splitlines():
        line = line.strip()
        if not line or line.startswith("#"):
            continue

        if "=" not in line:
            continue

        key, _, value = line.partition("=")
        key = key.strip().lower()
        value = value.strip()

        # Handle quoted values with inline comments: "value" # comment
        if value.startswith('"') or value.startswith("'"):
            quote = value[0]
            end_quote = value.find(quote, 1)
            value = value[1:end_quote] if end_quote != -1 else value[1:]
        elif "#" in value:
            value = value.split("#")[0].strip()

        match key:
            case "data_file":
                config.data_file = value
            case "snapshot_file":
                config.snapshot_file = value
            case "refresh_time":
                config.refresh_time = value
            case "timezone":
                config.timezone = value
            case "undo_capacity":
                capacity = _parse_int(key, value, config.undo_capacity)
                if capacity < 1:
                    logger.warning(f"UNDO_CAPACITY must be at least 1, using {config.undo_capacity}")
                else:
                    config.undo_capacity = capacity
            case "log_level":
                config.log_level = value.upper()
            case _:
                logger.debug(f"Ignoring unknown config key {key.upper()}")

    return config


def setup_logging(config: Config, debug: bool = False) -> None:
    """Configure root logging for CLI and daemon entry points."""
    level = logging.DEBUG if debug else getattr(logging, config.log_level, logging.WARNING)
    logging.basicConfig(format=LOG_FORMAT, level=level)
