"""
Error Handling Utilities for the Console Dashboard

Provides the exception hierarchy and consistent handling of failures:
1. Construction-fatal errors propagate to the caller
2. Data-source errors are absorbed and replaced with placeholders
3. Errors are categorized, deduplicated and logged with context

USAGE:
    from consoled.utils.error_handling import handle_error, ErrorCategory

    try:
        state = store.load_or_create()
    except StateError as e:
        handle_error(e, "load application state", ErrorCategory.DATA_SOURCE)
"""

import logging
import time
import threading
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)


# =============================================================================
# EXCEPTIONS
# =============================================================================

class ConsoleError(Exception):
    """Base class for dashboard errors."""


class NoConsoleAvailableError(ConsoleError):
    """None of the configured console devices could be opened."""

    def __init__(self, paths, errors: Optional[Dict[str, str]] = None):
        self.paths = list(paths)
        self.errors = errors or {}
        detail = ", ".join(f"{p}: {e}" for p, e in self.errors.items())
        message = f"No console device could be opened ({', '.join(self.paths)})"
        if detail:
            message += f": {detail}"
        super().__init__(message)


class ScreenBindError(ConsoleError):
    """The screen could not be bound to the console stream."""


class DataSourceError(Exception):
    """A read-only data source failed to answer."""


class ConfigError(ValueError):
    """Invalid dashboard configuration."""


# =============================================================================
# CATEGORIES AND SEVERITY
# =============================================================================

class ErrorCategory(Enum):
    """Categories of errors for proper handling and reporting."""
    # Console devices and screen binding
    CONSOLE = "console"

    # OS release, state store, network enumeration
    DATA_SOURCE = "data_source"

    # Cosmetic writes such as the periodic screen clear
    COSMETIC = "cosmetic"

    # Settings file and values
    CONFIG = "configuration"

    # Unknown/uncategorized
    UNKNOWN = "unknown"


class ErrorSeverity(Enum):
    """Severity levels for errors."""
    # Informational - operation can continue
    INFO = "info"

    # Warning - something unexpected but not critical
    WARNING = "warning"

    # Error - operation failed but system stable
    ERROR = "error"

    # Fatal - dashboard unusable
    FATAL = "fatal"


@dataclass
class ErrorContext:
    """What failed, where, and how badly."""
    error: Exception
    category: ErrorCategory
    severity: ErrorSeverity
    operation: str
    additional_context: Dict[str, Any] = field(default_factory=dict)

    @property
    def key(self) -> str:
        return f"{self.category.value}:{type(self.error).__name__}:{self.operation}"

    def format_log_message(self) -> str:
        """Format a one-line log message."""
        message = (
            f"{self.operation} failed [{self.category.value}/{self.severity.value}]: "
            f"{type(self.error).__name__}: {self.error}"
        )
        if self.additional_context:
            items = ", ".join(f"{k}={v}" for k, v in self.additional_context.items())
            message += f" ({items})"
        return message


class ErrorAggregator:
    """
    Deduplicates errors before they are logged.

    A data source that fails on every redraw tick is logged once per window;
    the repeats in between are counted and reported with the next log line.
    """

    def __init__(self, dedup_window_seconds: float = 60):
        self._lock = threading.Lock()
        self._dedup_window = dedup_window_seconds
        self._last_error_times: Dict[str, float] = {}
        self._suppressed: Dict[str, int] = {}

    def add_error(self, context: ErrorContext) -> Optional[int]:
        """
        Record an error.

        Returns None if the error falls inside the window of an earlier one,
        otherwise the number of repeats suppressed since it was last logged.
        """
        current_time = time.monotonic()

        with self._lock:
            last_time = self._last_error_times.get(context.key)
            if last_time is not None and current_time - last_time < self._dedup_window:
                self._suppressed[context.key] = self._suppressed.get(context.key, 0) + 1
                return None

            self._last_error_times[context.key] = current_time
            return self._suppressed.pop(context.key, 0)

    def clear(self):
        """Forget all recorded errors."""
        with self._lock:
            self._last_error_times.clear()
            self._suppressed.clear()


_global_aggregator = ErrorAggregator()


def get_error_aggregator() -> ErrorAggregator:
    """Get the global error aggregator instance."""
    return _global_aggregator


def determine_severity(error: Exception, category: ErrorCategory) -> ErrorSeverity:
    """
    Determine the severity level for an error based on type and category.
    """
    if isinstance(error, ConsoleError):
        return ErrorSeverity.FATAL

    # Expected while the system is still booting
    if category in (ErrorCategory.DATA_SOURCE, ErrorCategory.COSMETIC):
        return ErrorSeverity.INFO

    if isinstance(error, FileNotFoundError):
        return ErrorSeverity.WARNING

    return ErrorSeverity.ERROR


_LOG_LEVELS = {
    ErrorSeverity.INFO: logging.DEBUG,
    ErrorSeverity.WARNING: logging.WARNING,
    ErrorSeverity.ERROR: logging.ERROR,
    ErrorSeverity.FATAL: logging.CRITICAL,
}


def handle_error(
    error: Exception,
    operation: str,
    category: ErrorCategory = ErrorCategory.UNKNOWN,
    severity: Optional[ErrorSeverity] = None,
    additional_context: Optional[Dict[str, Any]] = None,
    reraise: bool = False,
) -> ErrorContext:
    """
    Handle an error with logging and deduplication.

    Args:
        error: The exception that occurred
        operation: Name of the operation that failed
        category: Category of the error
        severity: Severity level (auto-determined if not provided)
        additional_context: Additional context information
        reraise: Whether to re-raise the exception after handling

    Returns:
        ErrorContext with full error details
    """
    if severity is None:
        severity = determine_severity(error, category)

    context = ErrorContext(
        error=error,
        category=category,
        severity=severity,
        operation=operation,
        additional_context=additional_context or {},
    )

    suppressed = _global_aggregator.add_error(context)
    if suppressed is not None:
        message = context.format_log_message()
        if suppressed:
            message += f" ({suppressed} repeats since last report)"
        logger.log(_LOG_LEVELS.get(severity, logging.ERROR), message)

    if reraise:
        raise error

    return context


__all__ = [
    'ConsoleError',
    'NoConsoleAvailableError',
    'ScreenBindError',
    'DataSourceError',
    'ConfigError',
    'ErrorCategory',
    'ErrorSeverity',
    'ErrorContext',
    'ErrorAggregator',
    'get_error_aggregator',
    'determine_severity',
    'handle_error',
]
