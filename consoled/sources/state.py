"""
Application state store.

The state file is owned by the daemon; the dashboard only reads the installed
applications and their versions from it.
"""

import json
import logging
from dataclasses import dataclass, field
from typing import Dict, List

from consoled.constants import Paths
from consoled.utils.error_handling import DataSourceError

logger = logging.getLogger(__name__)


class StateError(DataSourceError):
    """The state file exists but could not be loaded."""


@dataclass
class Application:
    """An installed application."""
    version: str = ""

    @classmethod
    def from_dict(cls, data: Dict) -> 'Application':
        if not isinstance(data, dict):
            raise StateError(f"invalid application entry: {data!r}")
        return cls(version=str(data.get('version', '')))


@dataclass
class State:
    """The subset of persisted daemon state shown on the dashboard."""
    applications: Dict[str, Application] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Dict) -> 'State':
        if not isinstance(data, dict):
            raise StateError("state must be a JSON object")
        apps = data.get('applications') or {}
        if not isinstance(apps, dict):
            raise StateError("applications must be a JSON object")
        return cls(applications={
            name: Application.from_dict(info) for name, info in apps.items()
        })

    def application_labels(self) -> List[str]:
        """Return "name(version)" for every application, sorted."""
        return sorted(f"{name}({app.version})" for name, app in self.applications.items())


class StateStore:
    """Loads the daemon state file."""

    def __init__(self, path: str = Paths.STATE_FILE):
        self.path = path

    def load_or_create(self) -> State:
        """
        Load the state, or return a fresh empty state if there is no file yet.

        Raises:
            StateError: The file exists but is unreadable or malformed.
        """
        try:
            with open(self.path, 'r', encoding='utf-8') as f:
                content = f.read()
        except FileNotFoundError:
            logger.debug(f"No state file at {self.path}, using empty state")
            return State()
        except OSError as e:
            raise StateError(f"cannot read {self.path}: {e}") from e

        if not content.strip():
            return State()

        try:
            data = json.loads(content)
        except ValueError as e:
            raise StateError(f"cannot parse {self.path}: {e}") from e

        return State.from_dict(data)
