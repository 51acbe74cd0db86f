"""
Read-only data sources polled by the dashboard on every redraw tick.
"""

from .release import ReleaseError, get_current_release
from .state import Application, State, StateError, StateStore
from .network import filter_addresses, get_ip_addresses

__all__ = [
    'ReleaseError',
    'get_current_release',
    'Application',
    'State',
    'StateError',
    'StateStore',
    'filter_addresses',
    'get_ip_addresses',
]
