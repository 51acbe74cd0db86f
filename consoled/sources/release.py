"""OS release lookup."""

import logging
import shlex
from typing import Dict

from consoled.constants import Paths
from consoled.utils.error_handling import DataSourceError

logger = logging.getLogger(__name__)

# Checked in order; image-based systems publish IMAGE_VERSION
VERSION_KEYS = ("IMAGE_VERSION", "VERSION_ID", "VERSION")


class ReleaseError(DataSourceError):
    """The running release could not be determined."""


def parse_os_release(content: str) -> Dict[str, str]:
    """Parse os-release KEY=VALUE lines, honoring shell quoting."""
    values = {}
    for line in content.splitlines():
        line = line.strip()
        if not line or line.startswith('#') or '=' not in line:
            continue
        key, _, raw = line.partition('=')
        try:
            parts = shlex.split(raw)
        except ValueError:
            parts = [raw.strip('"\'')]
        values[key.strip()] = parts[0] if parts else ""
    return values


def get_current_release(path: str = Paths.OS_RELEASE) -> str:
    """Return the version string of the running OS image."""
    try:
        with open(path, 'r', encoding='utf-8') as f:
            values = parse_os_release(f.read())
    except OSError as e:
        raise ReleaseError(f"cannot read {path}: {e.strerror or e}") from e

    for key in VERSION_KEYS:
        if values.get(key):
            return values[key]

    raise ReleaseError(f"no version found in {path}")
