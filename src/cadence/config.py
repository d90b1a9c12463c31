"""Configuration management for Cadence."""

import logging
import os
from dataclasses import dataclass
from datetime import datetime, tzinfo
from pathlib import Path
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

logger = logging.getLogger(__name__)

CADENCE_HOME = Path(os.environ.get("CADENCE_HOME", Path.home() / "cadence"))
CONFIG_FILE = CADENCE_HOME / "config" / "cadence.conf"
DATA_DIR = CADENCE_HOME / "data"


@dataclass
class Config:
    """Cadence configuration."""

    timezone: str = ""  # IANA name; empty means system local time
    data_file: str = ""
    default_duration_minutes: int = 60
    look_ahead_days: int = 7
    top_suggestions: int = 5
    log_level: str = "WARNING"

    def tzinfo(self) -> tzinfo | None:
        """Resolve the configured timezone. None means system local time."""
        if self.timezone:
            try:
                return ZoneInfo(self.timezone)
            except (ZoneInfoNotFoundError, ValueError):
                logger.warning(f"Unknown timezone {self.timezone!r}, using local time")
        return None

    def now(self) -> datetime:
        """Current time, timezone-aware."""
        tz = self.tzinfo()
        return datetime.now(tz) if tz else datetime.now().astimezone()

    def local_now(self) -> datetime:
        """
        Current wall-clock time for slot generation.

        Naive when no timezone is configured, so each slot's UTC offset is
        resolved from system local time on its own date.
        """
        return datetime.now(self.tzinfo())

    def data_path(self) -> Path:
        if self.data_file:
            return Path(self.data_file).expanduser()
        return DATA_DIR / "sessions.json"


def _parse_int(key: str, value: str, default: int) -> int:
    try:
        return int(value)
    except ValueError:
        logger.warning(f"Invalid integer for {key.upper()}: {value!r}, keeping {default}")
        return default


def load_config(path: Path | None = None) -> Config:
    """Load configuration from cadence.conf file."""
    config = Config()
    path = path or CONFIG_FILE

    if not path.exists():
        return config

    for line in path.read_text().splitlines():
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
            # Unquoted: strip inline comments
            value = value.split("#")[0].strip()

        match key:
            case "timezone":
                config.timezone = value
            case "data_file":
                config.data_file = value
            case "default_duration_minutes":
                config.default_duration_minutes = _parse_int(key, value, config.default_duration_minutes)
            case "look_ahead_days":
                config.look_ahead_days = _parse_int(key, value, config.look_ahead_days)
            case "top_suggestions":
                config.top_suggestions = _parse_int(key, value, config.top_suggestions)
            case "log_level":
                config.log_level = value.upper()

    return config
