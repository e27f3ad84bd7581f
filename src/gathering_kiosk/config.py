"""Configuration management for the gathering kiosk."""

import logging
import os
from dataclasses import dataclass
from pathlib import Path

logger = logging.getLogger(__name__)

KIOSK_HOME = Path(os.environ.get("GATHERING_KIOSK_HOME", Path.home() / "gathering-kiosk"))
CONFIG_FILE = KIOSK_HOME / "config" / "kiosk.conf"
DATA_DIR = KIOSK_HOME / "data"


@dataclass
class Config:
    """Gathering kiosk configuration."""

    gatherings_file: str = ""
    timezone: str = ""
    kiosk_gathering_id: int | None = None
    kiosk_start_time: str = ""
    kiosk_end_time: str = ""
    kiosk_checkout_lead_minutes: int = 15
    kiosk_mode_interval_minutes: int = 15
    schedule_horizon_weeks: int = 8

    @property
    def gatherings_path(self) -> Path:
        """Configured gatherings file, or the default under DATA_DIR."""
        if self.gatherings_file:
            return Path(self.gatherings_file).expanduser()
        return DATA_DIR / "gatherings.json"


def _parse_int(key: str, value: str, default: int | None) -> int | None:
    try:
        return int(value)
    except ValueError:
        logger.warning(f"Invalid integer for {key.upper()}: {value!r}")
        return default


def load_config() -> Config:
    """Load configuration from kiosk.conf file."""
    config = Config()

    if not CONFIG_FILE.exists():
        return config

    for line in CONFIG_FILE.read_text().splitlines():
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
            case "gatherings_file":
                config.gatherings_file = value
            case "timezone":
                config.timezone = value
            case "kiosk_gathering_id":
                config.kiosk_gathering_id = _parse_int(key, value, None)
            case "kiosk_start_time":
                config.kiosk_start_time = value
            case "kiosk_end_time":
                config.kiosk_end_time = value
            case "kiosk_checkout_lead_minutes":
                config.kiosk_checkout_lead_minutes = _parse_int(key, value, 15)
            case "kiosk_mode_interval_minutes":
                config.kiosk_mode_interval_minutes = _parse_int(key, value, 15)
            case "schedule_horizon_weeks":
                config.schedule_horizon_weeks = _parse_int(key, value, 8)
            case _:
                logger.debug(f"Ignoring unknown config key: {key}")

    return config
