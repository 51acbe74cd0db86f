"""
Centralized Constants Module for the Console Dashboard.

This module consolidates the device paths, intervals and display limits used
throughout the dashboard so that deployments can audit and override them in
one place.

Every value marked with an override can be changed through an environment
variable prefixed with CONSOLED_. Invalid overrides are logged and the default
is kept.

Usage:
    from consoled.constants import Timeouts, Consoles, Paths

    scheduler = RedrawScheduler(redraw, tick_interval=Timeouts.REDRAW_TICK)
"""

import os
import logging
from dataclasses import dataclass
from typing import Tuple, Optional, TypeVar, Callable

logger = logging.getLogger(__name__)

ENV_PREFIX = "CONSOLED_"


# =============================================================================
# ENVIRONMENT VARIABLE OVERRIDE UTILITIES
# =============================================================================

T = TypeVar('T')


def _env_override(
    env_var: str,
    default: T,
    converter: Callable[[str], T] = str,
    validator: Optional[Callable[[T], bool]] = None,
    min_value: Optional[T] = None,
    max_value: Optional[T] = None,
) -> T:
    """Get a configuration value with environment variable override.

    Args:
        env_var: Environment variable name (will be prefixed with CONSOLED_)
        default: Default value if env var not set
        converter: Function to convert string to target type
        validator: Optional validation function
        min_value: Optional minimum allowed value
        max_value: Optional maximum allowed value

    Returns:
        Configured value (from env var if valid, otherwise default)
    """
    full_env_var = f"{ENV_PREFIX}{env_var}"
    env_value = os.environ.get(full_env_var)

    if env_value is None:
        return default

    try:
        converted = converter(env_value)

        if min_value is not None and converted < min_value:
            logger.warning(
                f"{full_env_var}={env_value} below minimum {min_value}, using default"
            )
            return default
        if max_value is not None and converted > max_value:
            logger.warning(
                f"{full_env_var}={env_value} above maximum {max_value}, using default"
            )
            return default

        if validator is not None and not validator(converted):
            logger.warning(f"{full_env_var}={env_value} failed validation, using default")
            return default

        logger.info(f"Using {full_env_var}={converted} (override)")
        return converted

    except (ValueError, TypeError) as e:
        logger.warning(f"Invalid value for {full_env_var}: {e}, using default")
        return default


def _env_override_list(
    env_var: str,
    default: Tuple[str, ...],
    separator: str = ",",
    validator: Optional[Callable[[str], bool]] = None,
) -> Tuple[str, ...]:
    """Get a list configuration value with environment variable override.

    Args:
        env_var: Environment variable name (will be prefixed with CONSOLED_)
        default: Default tuple of values
        separator: Separator for parsing list values
        validator: Optional validation function for each item

    Returns:
        Configured tuple (from env var if valid, otherwise default)
    """
    full_env_var = f"{ENV_PREFIX}{env_var}"
    env_value = os.environ.get(full_env_var)

    if env_value is None:
        return default

    items = tuple(item.strip() for item in env_value.split(separator) if item.strip())

    if not items:
        logger.warning(f"Empty list for {full_env_var}, using default")
        return default

    if validator is not None:
        invalid_items = [item for item in items if not validator(item)]
        if invalid_items:
            logger.warning(f"Invalid items in {full_env_var}: {invalid_items}, using default")
            return default

    logger.info(f"Using {full_env_var}={items} (override)")
    return items


def _is_device_path(path: str) -> bool:
    """Console devices must be absolute paths."""
    return os.path.isabs(path)


# =============================================================================
# TIMEOUT CONSTANTS
# =============================================================================

@dataclass(frozen=True)
class Timeouts:
    """
    Centralized interval values in seconds.
    """
    # Periodic redraw of the dashboard frame
    REDRAW_TICK: float = _env_override(
        "REDRAW_TICK", 5.0, float, min_value=0.5, max_value=300.0
    )

    # Full console clear to wipe output from other processes
    CONSOLE_CLEAR: float = _env_override(
        "CONSOLE_CLEAR", 60.0, float, min_value=1.0, max_value=3600.0
    )

    # How long a console reader waits in select() before checking for shutdown
    READER_POLL: float = 0.5

    # Input loop wait before re-checking the stop flag
    INPUT_POLL: float = 1.0

    # Thread shutdown
    THREAD_JOIN_SHORT: float = 2.0


# =============================================================================
# CONSOLE DEVICE CONSTANTS
# =============================================================================

@dataclass(frozen=True)
class Consoles:
    """
    Console devices the dashboard is mirrored to.

    The first device is the primary console; it also receives the periodic
    clear-screen sequence.
    Override with: CONSOLED_CONSOLE_DEVICES="/dev/console,/dev/tty1"
    """
    PRIMARY: str = "/dev/console"

    DEVICES: Tuple[str, ...] = _env_override_list(
        "CONSOLE_DEVICES",
        (
            "/dev/console",
            "/dev/tty1", "/dev/tty2", "/dev/tty3", "/dev/tty4",
            "/dev/tty5", "/dev/tty6", "/dev/tty7",
        ),
        separator=",",
        validator=_is_device_path,
    )

    # "ESC c": full terminal reset
    CLEAR_SEQUENCE: bytes = b"\x1bc"

    # Ctrl-C as delivered by a terminal in cbreak mode
    INTERRUPT_BYTE: bytes = b"\x03"


# =============================================================================
# PATH CONSTANTS
# =============================================================================

@dataclass(frozen=True)
class Paths:
    """
    Centralized filesystem paths.
    """
    VAR_LIB_BASE: str = "/var/lib/incus-os"
    ETC_BASE: str = "/etc/consoled"

    STATE_FILE: str = _env_override("STATE_FILE", f"{VAR_LIB_BASE}/state.json")
    OS_RELEASE: str = _env_override("OS_RELEASE", "/usr/lib/os-release")
    CONFIG_FILE: str = _env_override("CONFIG_FILE", f"{ETC_BASE}/consoled.yaml")


# =============================================================================
# DISPLAY CONSTANTS
# =============================================================================

@dataclass(frozen=True)
class Display:
    """Layout and rendering values for the dashboard."""
    PRODUCT_NAME: str = _env_override("PRODUCT_NAME", "Incus OS")

    # Used when the console does not report its geometry
    DEFAULT_WIDTH: int = 80
    DEFAULT_HEIGHT: int = 24

    # Log chunks kept in the body buffer
    LOG_BODY_LIMIT: int = _env_override(
        "LOG_BODY_LIMIT", 1000, int, min_value=10, max_value=100000
    )

    TIMESTAMP_FORMAT: str = "%Y-%m-%d %H:%M UTC"

    IP_LABEL: str = "IP Address(es)"
    APPLICATIONS_LABEL: str = "Installed application(s)"

    MODAL_PAGE: str = "modal"
    FRAME_PAGE: str = "frame"


@dataclass(frozen=True)
class LogMarkers:
    """Substrings that identify the severity of a formatted log chunk."""
    WARNING: Tuple[str, ...] = ("level=WARN",)
    ERROR: Tuple[str, ...] = ("level=ERROR", "level=CRITICAL")


@dataclass(frozen=True)
class Version:
    """Version and metadata constants."""
    PACKAGE_VERSION: str = "1.0.0"


__all__ = [
    'Timeouts',
    'Consoles',
    'Paths',
    'Display',
    'LogMarkers',
    'Version',
    'ENV_PREFIX',
]
