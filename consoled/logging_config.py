"""
Logging Configuration for the Console Dashboard.

Provides centralized logging configuration with a verbose mode toggle and
key/value log formatting. Formatted records carry a ``level=<NAME>`` field,
which is what the dashboard's log sink keys its highlighting on.

Usage:
    from consoled.logging_config import setup_logging, attach_dashboard

    # Setup at daemon startup
    setup_logging(verbose=True, console=False)

    # Send every record to the dashboard (which mirrors to stdout)
    attach_dashboard(dashboard.sink)

    logger = logging.getLogger('consoled.sources.state')
    logger.info("State loaded", extra={'extra_data': {'applications': 2}})
"""

import os
import sys
import json
import logging
import threading
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional
from dataclasses import dataclass, field


# =============================================================================
# THREAD-SAFE CONFIGURATION STATE
# =============================================================================

@dataclass
class LoggingState:
    """Thread-safe logging configuration state."""
    verbose: bool = False
    dashboard_handler: Optional[logging.Handler] = None
    _lock: threading.RLock = field(default_factory=threading.RLock)


_state = LoggingState()


# =============================================================================
# CUSTOM FORMATTER
# =============================================================================

class ConsoleFormatter(logging.Formatter):
    """Key/value formatter (time=... level=... source=... msg=...) with optional JSON output."""

    COLORS = {
        'DEBUG': '\033[36m',      # Cyan
        'WARNING': '\033[33;1m',  # Bold yellow
        'ERROR': '\033[31m',      # Red
        'CRITICAL': '\033[31;1m', # Bold red
        'RESET': '\033[0m',
    }

    def __init__(self, use_colors: bool = False, json_format: bool = False):
        self.use_colors = use_colors and sys.stdout.isatty()
        self.json_format = json_format
        super().__init__()

    def format(self, record: logging.LogRecord) -> str:
        if self.json_format:
            return self._format_json(record)
        return self._format_text(record)

    def _format_text(self, record: logging.LogRecord) -> str:
        timestamp = self._timestamp(record)
        fields = [
            f"time={timestamp}",
            f"level={record.levelname}",
            f"source={self._extract_source(record.name)}",
            f"msg={self._quote(record.getMessage())}",
        ]

        extra_data = getattr(record, 'extra_data', None)
        if extra_data:
            fields.extend(f"{k}={self._quote(str(v))}" for k, v in extra_data.items())

        if record.exc_info:
            fields.append(f"exception={self._quote(self.formatException(record.exc_info))}")

        line = " ".join(fields)

        # Color the whole line so the level field stays intact
        if self.use_colors and record.levelname in self.COLORS:
            line = f"{self.COLORS[record.levelname]}{line}{self.COLORS['RESET']}"
        return line

    def _format_json(self, record: logging.LogRecord) -> str:
        data = {
            'time': self._timestamp(record),
            'level': record.levelname,
            'logger': record.name,
            'source': self._extract_source(record.name),
            'msg': record.getMessage(),
        }

        extra_data = getattr(record, 'extra_data', None)
        if extra_data:
            data['extra'] = extra_data

        if record.exc_info:
            data['exception'] = self.formatException(record.exc_info)

        return json.dumps(data, default=str)

    @staticmethod
    def _timestamp(record: logging.LogRecord) -> str:
        dt = datetime.fromtimestamp(record.created, tz=timezone.utc)
        return dt.strftime('%Y-%m-%dT%H:%M:%S.') + f"{int(record.msecs):03d}Z"

    @staticmethod
    def _quote(value: str) -> str:
        if value and not any(c in value for c in ' "=\n\t'):
            return value
        return json.dumps(value)

    @staticmethod
    def _extract_source(logger_name: str) -> str:
        """Extract the component from the logger name."""
        parts = logger_name.split('.')
        if len(parts) >= 2 and parts[0] == 'consoled':
            # consoled.tui.multiplexer -> tui
            return parts[1]
        return parts[0] or 'root'


# =============================================================================
# SETUP AND CONFIGURATION
# =============================================================================

def setup_logging(
    verbose: bool = False,
    log_file: Optional[str] = None,
    console: bool = True,
    json_format: bool = False,
) -> None:
    """
    Initialize the logging system.

    Args:
        verbose: Enable DEBUG logging
        log_file: Optional file path for log output
        console: Enable plain stdout output (leave off when the dashboard
            sink is attached, since it already mirrors to stdout)
        json_format: Use JSON format for logs
    """
    with _state._lock:
        _state.verbose = verbose

        base_level = logging.DEBUG if verbose else logging.INFO

        root = logging.getLogger()
        root.setLevel(base_level)

        for handler in root.handlers[:]:
            root.removeHandler(handler)
        _state.dashboard_handler = None

        if console:
            console_handler = logging.StreamHandler(sys.stdout)
            console_handler.setLevel(base_level)
            console_handler.setFormatter(ConsoleFormatter(
                use_colors=True,
                json_format=json_format
            ))
            root.addHandler(console_handler)

        if log_file:
            log_path = Path(log_file)
            log_path.parent.mkdir(parents=True, exist_ok=True)

            file_handler = logging.FileHandler(log_file)
            file_handler.setLevel(base_level)
            file_handler.setFormatter(ConsoleFormatter(json_format=json_format))
            root.addHandler(file_handler)


def attach_dashboard(sink) -> logging.Handler:
    """
    Route every log record through the dashboard's log sink.

    The sink receives key/value text so that its severity markers match,
    regardless of the JSON setting used for files.
    """
    with _state._lock:
        detach_dashboard()

        handler = logging.StreamHandler(sink)
        handler.setLevel(logging.DEBUG if _state.verbose else logging.INFO)
        handler.setFormatter(ConsoleFormatter())
        logging.getLogger().addHandler(handler)

        _state.dashboard_handler = handler
        return handler


def detach_dashboard() -> None:
    """Remove the dashboard handler if one is attached."""
    with _state._lock:
        if _state.dashboard_handler is not None:
            logging.getLogger().removeHandler(_state.dashboard_handler)
            _state.dashboard_handler = None


# =============================================================================
# ENVIRONMENT VARIABLE CONFIGURATION
# =============================================================================

def _env_flag(name: str) -> bool:
    return os.environ.get(name, '').lower() in ('1', 'true', 'yes')


def configure_from_environment(console: Optional[bool] = None) -> None:
    """Configure logging from environment variables."""
    if console is None:
        console = not _env_flag('CONSOLED_LOG_NO_CONSOLE')

    setup_logging(
        verbose=_env_flag('CONSOLED_VERBOSE'),
        log_file=os.environ.get('CONSOLED_LOG_FILE'),
        console=console,
        json_format=_env_flag('CONSOLED_LOG_JSON'),
    )


__all__ = [
    'setup_logging',
    'configure_from_environment',
    'attach_dashboard',
    'detach_dashboard',
    'ConsoleFormatter',
]
