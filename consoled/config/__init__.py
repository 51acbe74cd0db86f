"""
Configuration Module for the console dashboard.

Provides settings loading:
- Defaults from consoled.constants (with CONSOLED_* environment overrides)
- Optional JSON or YAML settings file
"""

from .settings import (
    ConfigFormat,
    DashboardConfig,
    load_config,
)

__all__ = [
    'ConfigFormat',
    'DashboardConfig',
    'load_config',
]
