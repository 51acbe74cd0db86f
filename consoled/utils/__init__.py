"""
Utility modules for the console dashboard.

Provides common utilities including:
- Exception hierarchy
- Error handling with deduplicated logging
"""

from .error_handling import (
    ConsoleError,
    NoConsoleAvailableError,
    ScreenBindError,
    DataSourceError,
    ConfigError,
    ErrorCategory,
    ErrorSeverity,
    ErrorContext,
    ErrorAggregator,
    get_error_aggregator,
    handle_error,
    determine_severity,
)

__all__ = [
    # Exceptions
    'ConsoleError',
    'NoConsoleAvailableError',
    'ScreenBindError',
    'DataSourceError',
    'ConfigError',
    # Error handling
    'ErrorCategory',
    'ErrorSeverity',
    'ErrorContext',
    'ErrorAggregator',
    'get_error_aggregator',
    'handle_error',
    'determine_severity',
]
