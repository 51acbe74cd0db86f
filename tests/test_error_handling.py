"""
Tests for error handling utilities.
"""

import logging
import os
import sys
from unittest.mock import patch

import pytest

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from consoled.sources.state import StateError
from consoled.utils.error_handling import (
    ErrorAggregator,
    ErrorCategory,
    ErrorContext,
    ErrorSeverity,
    NoConsoleAvailableError,
    ScreenBindError,
    determine_severity,
    handle_error,
)


# ===========================================================================
# Exceptions
# ===========================================================================

class TestExceptions:
    """Tests for the dashboard exceptions."""

    def test_no_console_message(self):
        """The message names every device and its error."""
        error = NoConsoleAvailableError(
            ["/dev/console", "/dev/tty1"],
            {"/dev/console": "Permission denied", "/dev/tty1": "No such device"},
        )
        message = str(error)
        assert "/dev/console: Permission denied" in message
        assert "/dev/tty1: No such device" in message

    def test_no_console_without_errors(self):
        """Errors are optional."""
        error = NoConsoleAvailableError([])
        assert error.paths == []
        assert error.errors == {}


# ===========================================================================
# Severity
# ===========================================================================

class TestDetermineSeverity:
    """Tests for determine_severity."""

    def test_console_errors_are_fatal(self):
        """Losing the consoles is fatal."""
        assert determine_severity(ScreenBindError("x"), ErrorCategory.CONSOLE) == ErrorSeverity.FATAL

    def test_data_source_is_info(self):
        """Data source failures are expected while booting."""
        assert determine_severity(StateError("x"), ErrorCategory.DATA_SOURCE) == ErrorSeverity.INFO

    def test_cosmetic_is_info(self):
        """A failed console clear is not worth more than a debug line."""
        assert determine_severity(PermissionError("x"), ErrorCategory.COSMETIC) == ErrorSeverity.INFO

    def test_missing_file_is_warning(self):
        """A missing file elsewhere is a warning."""
        assert determine_severity(FileNotFoundError("x"), ErrorCategory.CONFIG) == ErrorSeverity.WARNING

    def test_default_is_error(self):
        """Anything else is an error."""
        assert determine_severity(RuntimeError("x"), ErrorCategory.UNKNOWN) == ErrorSeverity.ERROR


# ===========================================================================
# Deduplication
# ===========================================================================

class TestErrorAggregator:
    """Tests for ErrorAggregator."""

    def _context(self, operation="load application state"):
        return ErrorContext(
            error=StateError("broken"),
            category=ErrorCategory.DATA_SOURCE,
            severity=ErrorSeverity.INFO,
            operation=operation,
        )

    def test_deduplicates(self):
        """The same error within the window is suppressed."""
        aggregator = ErrorAggregator()
        assert aggregator.add_error(self._context()) == 0
        assert aggregator.add_error(self._context()) is None

    def test_distinct_operations(self):
        """Different operations are tracked separately."""
        aggregator = ErrorAggregator()
        assert aggregator.add_error(self._context("a")) == 0
        assert aggregator.add_error(self._context("b")) == 0

    def test_counts_repeats_after_window(self):
        """Once the window passes, the suppressed repeats are reported."""
        aggregator = ErrorAggregator(dedup_window_seconds=60)
        with patch("consoled.utils.error_handling.time.monotonic", side_effect=[0, 10, 20, 70]):
            aggregator.add_error(self._context())
            aggregator.add_error(self._context())
            aggregator.add_error(self._context())
            assert aggregator.add_error(self._context()) == 2

    def test_clear(self):
        """clear() forgets everything."""
        aggregator = ErrorAggregator()
        aggregator.add_error(self._context())
        aggregator.clear()
        assert aggregator.add_error(self._context()) == 0


# ===========================================================================
# handle_error
# ===========================================================================

class TestHandleError:
    """Tests for handle_error."""

    def test_returns_context(self):
        """The context describes the failure."""
        context = handle_error(StateError("broken"), "load application state",
                               ErrorCategory.DATA_SOURCE)
        assert context.severity == ErrorSeverity.INFO
        assert context.operation == "load application state"

    def test_message(self, caplog):
        """The log line names the operation, category, severity and error."""
        with caplog.at_level(logging.DEBUG, logger="consoled.utils.error_handling"):
            handle_error(PermissionError("denied"), "clear console", ErrorCategory.COSMETIC,
                         additional_context={'device': '/dev/console'})
        assert caplog.records[0].getMessage() == (
            "clear console failed [cosmetic/info]: PermissionError: denied (device=/dev/console)"
        )

    def test_data_source_logged_at_debug(self, caplog):
        """Expected data source failures do not clutter the log."""
        with caplog.at_level(logging.DEBUG, logger="consoled.utils.error_handling"):
            handle_error(StateError("broken"), "load application state", ErrorCategory.DATA_SOURCE)
        assert caplog.records
        assert all(r.levelno == logging.DEBUG for r in caplog.records)

    def test_fatal_logged_as_critical(self, caplog):
        """Console errors are logged as critical."""
        with caplog.at_level(logging.DEBUG, logger="consoled.utils.error_handling"):
            handle_error(NoConsoleAvailableError(["/dev/console"]), "open consoles",
                         ErrorCategory.CONSOLE)
        assert caplog.records[0].levelno == logging.CRITICAL

    def test_repeated_error_logged_once(self, caplog):
        """A failure repeated on every tick is logged once per window."""
        with caplog.at_level(logging.DEBUG, logger="consoled.utils.error_handling"):
            for _ in range(3):
                handle_error(RuntimeError("boom"), "redraw", ErrorCategory.COSMETIC)
        assert len(caplog.records) == 1

    def test_reraise(self):
        """reraise=True raises the original error."""
        with pytest.raises(RuntimeError):
            handle_error(RuntimeError("boom"), "redraw", reraise=True)
