"""
Tests for the terminal multiplexer.

Regular files and FIFOs stand in for console devices.
"""

import errno
import os
import sys
import time
from unittest.mock import patch

import pytest

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from consoled.tui.multiplexer import TtyMultiplexer
from consoled.utils.error_handling import ConsoleError, NoConsoleAvailableError


def _read_file(path) -> bytes:
    with open(path, 'rb') as f:
        return f.read()


# ===========================================================================
# Opening
# ===========================================================================

class TestOpen:
    """Tests for opening console devices."""

    def test_opens_all_devices(self, console_files):
        """Every openable device is used, in order."""
        with TtyMultiplexer(*console_files) as mux:
            assert mux.paths == console_files

    def test_missing_device_is_skipped(self, console_files, temp_dir):
        """Devices that cannot be opened are left out."""
        missing = str(temp_dir / "tty9")
        with TtyMultiplexer(console_files[0], missing, console_files[1]) as mux:
            assert mux.paths == console_files

    def test_no_device_available(self, temp_dir):
        """Failing every device raises NoConsoleAvailableError."""
        missing = [str(temp_dir / "tty8"), str(temp_dir / "tty9")]
        with pytest.raises(NoConsoleAvailableError) as exc_info:
            TtyMultiplexer(*missing)
        assert exc_info.value.paths == missing
        assert set(exc_info.value.errors) == set(missing)
        assert isinstance(exc_info.value, ConsoleError)

    def test_no_paths(self):
        """An empty device list raises NoConsoleAvailableError."""
        with pytest.raises(NoConsoleAvailableError):
            TtyMultiplexer()

    def test_reports_as_terminal(self, console_files):
        """The multiplexer presents itself as a terminal to rich."""
        with TtyMultiplexer(*console_files) as mux:
            assert mux.isatty()
            assert mux.fileno() >= 0

    def test_size_of_non_terminal(self, console_files):
        """Regular files report no geometry."""
        with TtyMultiplexer(*console_files) as mux:
            assert mux.get_size() is None

    def test_start_on_non_terminal(self, console_files):
        """Switching modes skips devices that are not terminals."""
        with TtyMultiplexer(*console_files) as mux:
            mux.start()
            mux.stop()


# ===========================================================================
# Output
# ===========================================================================

class TestWrite:
    """Tests for broadcasting output."""

    def test_broadcast_to_every_device(self, console_files):
        """Output reaches every device unchanged."""
        with TtyMultiplexer(*console_files) as mux:
            assert mux.write("hello\x1b[0m") == len("hello\x1b[0m")
            assert mux.write(b"\x01bytes") == 6
        for path in console_files:
            assert _read_file(path) == b"hello\x1b[0m\x01bytes"

    def test_returns_length_of_input(self, console_files):
        """The return value is the length of what was passed in."""
        with TtyMultiplexer(*console_files) as mux:
            assert mux.write("héllo") == 5

    def test_one_device_failing(self, console_files):
        """A failing device does not stop the write."""
        with TtyMultiplexer(*console_files) as mux:
            with patch('consoled.tui.multiplexer.os.write',
                       side_effect=[OSError(errno.EIO, "I/O error"), 5]):
                assert mux.write("hello") == 5

    def test_every_device_failing(self, console_files):
        """If every device fails the error is raised."""
        with TtyMultiplexer(*console_files) as mux:
            with patch('consoled.tui.multiplexer.os.write',
                       side_effect=OSError(errno.EIO, "I/O error")):
                with pytest.raises(OSError):
                    mux.write("hello")

    def test_flush_is_noop(self, console_files):
        """Flushing an unbuffered multiplexer succeeds."""
        with TtyMultiplexer(*console_files) as mux:
            mux.flush()


# ===========================================================================
# Input
# ===========================================================================

class TestRead:
    """Tests for fanning in input."""

    def test_input_from_fifo(self, console_fifo, console_files):
        """Input written to any device is returned by read()."""
        with TtyMultiplexer(console_files[0], console_fifo) as mux:
            fd = os.open(console_fifo, os.O_WRONLY | os.O_NONBLOCK)
            try:
                os.write(fd, b"\x03")
            finally:
                os.close(fd)
            assert mux.read(timeout=5) == b"\x03"

    def test_read_size(self, console_fifo):
        """read(size) returns at most size bytes and keeps the rest."""
        with TtyMultiplexer(console_fifo) as mux:
            fd = os.open(console_fifo, os.O_WRONLY | os.O_NONBLOCK)
            try:
                os.write(fd, b"abc")
            finally:
                os.close(fd)
            assert mux.read(1, timeout=5) == b"a"
            assert mux.read(timeout=5) == b"bc"

    def test_timeout_without_input(self, console_fifo):
        """read() returns b"" when nothing arrives in time."""
        with TtyMultiplexer(console_fifo) as mux:
            assert mux.read(timeout=0.1) == b""

    def test_all_readers_ended(self, console_files):
        """Once every device is at end of input, read() returns b""."""
        with TtyMultiplexer(*console_files) as mux:
            deadline = time.monotonic() + 5
            while mux.readers_alive and time.monotonic() < deadline:
                assert mux.read(timeout=0.1) == b""
            assert not mux.readers_alive
            assert mux.read() == b""


# ===========================================================================
# Closing
# ===========================================================================

class TestClose:
    """Tests for releasing devices."""

    def test_close_is_idempotent(self, console_files):
        """close() may be called more than once."""
        mux = TtyMultiplexer(*console_files)
        mux.close()
        mux.close()
        assert mux.closed

    def test_context_manager_closes(self, console_fifo):
        """Leaving the context stops the readers."""
        with TtyMultiplexer(console_fifo) as mux:
            pass
        assert mux.closed
        assert all(not reader.is_alive() for reader in mux._readers)
