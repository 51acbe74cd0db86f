"""
Pytest configuration and shared fixtures for consoled tests.

This module provides common fixtures for testing the dashboard components
without real console devices.
"""

import io
import json
import logging
import os
import shutil
import tempfile
from datetime import datetime, timezone
from pathlib import Path
from typing import Generator, Dict, Any

import pytest

# Add the parent directory to the path for imports
import sys
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from consoled.config import DashboardConfig
from consoled.logging_config import ConsoleFormatter, detach_dashboard
from consoled.sources.state import StateStore
from consoled.tui import dashboard as dashboard_module
from consoled.tui.dashboard import Dashboard
from consoled.tui.screen import ConsoleScreen
from consoled.utils.error_handling import get_error_aggregator


FIXED_TIME = datetime(2026, 10, 18, 12, 34, 56, tzinfo=timezone.utc)


# ===========================================================================
# Temporary Directory Fixtures
# ===========================================================================

@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Provide a temporary directory that is cleaned up after the test."""
    tmpdir = tempfile.mkdtemp(prefix="consoled_test_")
    yield Path(tmpdir)
    shutil.rmtree(tmpdir, ignore_errors=True)


@pytest.fixture
def console_files(temp_dir: Path) -> list:
    """Two regular files standing in for console devices."""
    paths = [temp_dir / "console", temp_dir / "tty1"]
    for path in paths:
        path.touch()
    return [str(p) for p in paths]


@pytest.fixture
def console_fifo(temp_dir: Path) -> str:
    """A FIFO standing in for a console that produces input."""
    path = temp_dir / "ttyS0"
    os.mkfifo(path)
    return str(path)


# ===========================================================================
# Data Source Fixtures
# ===========================================================================

@pytest.fixture
def sample_state() -> Dict[str, Any]:
    """Provide sample daemon state."""
    return {
        'applications': {
            'incus': {'version': '6.0'},
            'migration-manager': {'version': '1.2'},
        },
        'network': {'interfaces': {}},
    }


@pytest.fixture
def state_file(temp_dir: Path, sample_state: Dict[str, Any]) -> Path:
    """Provide a state file with two installed applications."""
    path = temp_dir / "state.json"
    path.write_text(json.dumps(sample_state))
    return path


@pytest.fixture
def os_release_file(temp_dir: Path) -> Path:
    """Provide an os-release file for an image build."""
    path = temp_dir / "os-release"
    path.write_text(
        'NAME="Incus OS"\n'
        'ID=incus-os\n'
        'VERSION_ID="24"\n'
        'IMAGE_VERSION=202610180000\n'
    )
    return path


@pytest.fixture
def fixed_clock():
    """A clock that always returns the same instant."""
    return lambda: FIXED_TIME


# ===========================================================================
# Screen and Dashboard Fixtures
# ===========================================================================

@pytest.fixture
def screen_stream() -> io.StringIO:
    """In-memory stream the screen paints into."""
    return io.StringIO()


@pytest.fixture
def screen(screen_stream: io.StringIO) -> ConsoleScreen:
    """An 80x24 screen over an in-memory stream."""
    return ConsoleScreen(screen_stream, default_size=(80, 24))


@pytest.fixture
def dashboard_config(temp_dir: Path) -> DashboardConfig:
    """Settings that keep the redraw thread quiet during tests."""
    return DashboardConfig(
        console_devices=(str(temp_dir / "console"),),
        primary_console=str(temp_dir / "console"),
        state_file=str(temp_dir / "state.json"),
        os_release_file=str(temp_dir / "os-release"),
        tick_interval=3600,
        clear_interval=3600 * 12,
    )


@pytest.fixture
def dashboard(dashboard_config, screen, state_file, fixed_clock) -> Generator[Dashboard, None, None]:
    """Provide a dashboard with fixed data sources."""
    dash = Dashboard(
        config=dashboard_config,
        screen=screen,
        release_source=lambda: "202610180000",
        state_store=StateStore(str(state_file)),
        address_source=lambda: ["10.0.0.5/24", "2001:db8::5/64"],
        clock=fixed_clock,
        mirror=io.StringIO(),
    )
    yield dash
    dash.shutdown()


@pytest.fixture(autouse=True)
def reset_process_state():
    """Drop handlers installed by consoled logging and forget the process-wide dashboard."""
    root = logging.getLogger()
    level = root.level
    get_error_aggregator().clear()
    yield
    detach_dashboard()
    for handler in root.handlers[:]:
        if isinstance(handler.formatter, ConsoleFormatter):
            root.removeHandler(handler)
            handler.close()
    root.setLevel(level)
    dashboard_module._instance = None


# ===========================================================================
# Markers Registration
# ===========================================================================

def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line("markers", "unit: Unit tests (fast, isolated)")
    config.addinivalue_line("markers", "integration: Integration tests")
    config.addinivalue_line("markers", "slow: Slow tests (>1s)")
