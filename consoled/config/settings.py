"""
Dashboard settings.

Defaults come from consoled.constants (which already honor CONSOLED_*
environment overrides); an optional JSON or YAML file can override them.

Example consoled.yaml:

    product_name: Incus OS
    console_devices: [/dev/console, /dev/tty1]
    tick_interval: 5
    clear_interval: 60
"""

import json
import logging
from dataclasses import dataclass, field, fields, asdict
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Optional, Tuple, Union

import yaml

from consoled.constants import Consoles, Display, Paths, Timeouts
from consoled.utils.error_handling import ConfigError

logger = logging.getLogger(__name__)


class ConfigFormat(Enum):
    """Supported configuration file formats."""
    JSON = "json"
    YAML = "yaml"


@dataclass
class DashboardConfig:
    """Runtime settings for the console dashboard."""
    product_name: str = Display.PRODUCT_NAME
    console_devices: Tuple[str, ...] = Consoles.DEVICES
    primary_console: str = Consoles.PRIMARY
    state_file: str = Paths.STATE_FILE
    os_release_file: str = Paths.OS_RELEASE
    tick_interval: float = Timeouts.REDRAW_TICK
    clear_interval: float = Timeouts.CONSOLE_CLEAR
    log_body_limit: int = Display.LOG_BODY_LIMIT
    default_size: Tuple[int, int] = field(
        default_factory=lambda: (Display.DEFAULT_WIDTH, Display.DEFAULT_HEIGHT)
    )

    def __post_init__(self):
        self.console_devices = tuple(self.console_devices)
        self.default_size = tuple(self.default_size)
        self.validate()

    def validate(self) -> None:
        """Raise ConfigError on values the dashboard cannot run with."""
        if not self.console_devices:
            raise ConfigError("console_devices must not be empty")
        if self.tick_interval <= 0:
            raise ConfigError(f"tick_interval must be positive, got {self.tick_interval}")
        if self.clear_interval <= 0:
            raise ConfigError(f"clear_interval must be positive, got {self.clear_interval}")
        if self.log_body_limit < 1:
            raise ConfigError(f"log_body_limit must be at least 1, got {self.log_body_limit}")
        if len(self.default_size) != 2 or min(self.default_size) < 1:
            raise ConfigError(f"default_size must be (width, height), got {self.default_size}")

    @property
    def clear_every(self) -> int:
        """Redraw ticks between two full console clears."""
        return max(1, round(self.clear_interval / self.tick_interval))

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'DashboardConfig':
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ConfigError(f"Unknown configuration keys: {', '.join(unknown)}")
        try:
            return cls(**data)
        except TypeError as e:
            raise ConfigError(str(e)) from e

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def _detect_format(filepath: Path) -> ConfigFormat:
    """Detect configuration format from file extension."""
    if filepath.suffix.lower() == '.json':
        return ConfigFormat.JSON
    return ConfigFormat.YAML


def load_config(path: Optional[Union[str, Path]] = None) -> DashboardConfig:
    """
    Load dashboard settings.

    Args:
        path: Optional JSON/YAML file. A missing file is an error when a path
            is given explicitly; with no path the defaults are returned.

    Returns:
        DashboardConfig
    """
    if path is None:
        return DashboardConfig()

    filepath = Path(path)
    try:
        content = filepath.read_text()
    except OSError as e:
        raise ConfigError(f"Cannot read configuration {filepath}: {e}") from e

    try:
        if _detect_format(filepath) == ConfigFormat.JSON:
            data = json.loads(content)
        else:
            data = yaml.safe_load(content)
    except (ValueError, yaml.YAMLError) as e:
        raise ConfigError(f"Cannot parse configuration {filepath}: {e}") from e

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigError(f"Configuration {filepath} must be a mapping")

    config = DashboardConfig.from_dict(data)
    logger.debug(f"Loaded configuration from {filepath}")
    return config
