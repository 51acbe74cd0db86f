"""
consoled - Console status dashboard for a headless OS daemon.

Mirrors one live dashboard (system header, log pane, status footer and
optional modal dialogs) to every attached system console.
"""

from consoled.constants import Version

__version__ = Version.PACKAGE_VERSION
