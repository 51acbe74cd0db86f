"""
Terminal Multiplexer - one stream over several console devices.

Everything written is broadcast to every open device, so the same screen is
shown on the serial console and on every virtual terminal. Input is taken
from whichever device produces it first: one reader thread per device feeds a
shared queue, so a device that never answers cannot starve the others.
"""

import errno
import logging
import os
import queue
import select
import termios
import threading
import tty
from typing import Dict, List, Optional, Tuple, Union

from consoled.constants import Timeouts
from consoled.utils.error_handling import NoConsoleAvailableError

logger = logging.getLogger(__name__)

# Marks the end of one reader in the input queue
_READER_DONE = object()


class TtyMultiplexer:
    """
    File-like object over a set of console devices.

    Only the devices that could be opened are used; if none could be opened
    NoConsoleAvailableError is raised.
    """

    encoding = "utf-8"

    def __init__(self, *paths: str, read_chunk: int = 1024):
        self._fds: List[Tuple[str, int]] = []
        self._saved_modes: Dict[int, list] = {}
        self._input: "queue.Queue" = queue.Queue()
        self._pending = b""
        self._stop_event = threading.Event()
        self._readers: List[threading.Thread] = []
        self._live_readers = 0
        self._lock = threading.Lock()
        self._read_chunk = read_chunk
        self.closed = False

        errors = {}
        for path in paths:
            try:
                fd = os.open(path, os.O_RDWR | os.O_NOCTTY)
            except OSError as e:
                logger.debug(f"Skipping console {path}: {e}")
                errors[path] = e.strerror or str(e)
                continue
            self._fds.append((path, fd))

        if not self._fds:
            raise NoConsoleAvailableError(paths, errors)

        for path, fd in self._fds:
            reader = threading.Thread(
                target=self._reader_loop,
                args=(path, fd),
                name=f"console-reader:{path}",
                daemon=True,
            )
            self._readers.append(reader)
            self._live_readers += 1
            reader.start()

        logger.debug(f"Console multiplexer opened {self.paths}")

    @property
    def paths(self) -> List[str]:
        """Paths of the devices that were opened, in order."""
        return [path for path, _ in self._fds]

    # -------------------------------------------------------------------------
    # Input
    # -------------------------------------------------------------------------

    def _reader_loop(self, path: str, fd: int):
        """Forward input from one device until it fails or we are closed."""
        try:
            while not self._stop_event.is_set():
                try:
                    ready, _, _ = select.select([fd], [], [], Timeouts.READER_POLL)
                except (OSError, ValueError):
                    break
                if not ready:
                    continue
                try:
                    data = os.read(fd, self._read_chunk)
                except OSError as e:
                    if e.errno in (errno.EAGAIN, errno.EINTR):
                        continue
                    logger.debug(f"Console {path} read failed: {e}")
                    break
                if not data:
                    break
                self._input.put(data)
        finally:
            self._input.put(_READER_DONE)

    def read(self, size: int = -1, timeout: Optional[float] = None) -> bytes:
        """
        Read input from any console.

        Blocks until input arrives, ``timeout`` expires (returns b"") or every
        reader has ended (returns b"").
        """
        if not self._pending:
            while True:
                with self._lock:
                    if self._live_readers == 0 and self._input.empty():
                        return b""
                try:
                    item = self._input.get(timeout=timeout)
                except queue.Empty:
                    return b""
                if item is _READER_DONE:
                    with self._lock:
                        self._live_readers -= 1
                    continue
                self._pending = item
                break

        if size is None or size < 0:
            data, self._pending = self._pending, b""
        else:
            data, self._pending = self._pending[:size], self._pending[size:]
        return data

    # -------------------------------------------------------------------------
    # Output
    # -------------------------------------------------------------------------

    def write(self, data: Union[str, bytes]) -> int:
        """Write to every console. Returns the length of ``data``."""
        payload = data.encode(self.encoding, errors="replace") if isinstance(data, str) else data

        last_error: Optional[OSError] = None
        written = 0
        for path, fd in self._fds:
            try:
                view = memoryview(payload)
                while view:
                    n = os.write(fd, view)
                    view = view[n:]
                written += 1
            except OSError as e:
                logger.debug(f"Console {path} write failed: {e}")
                last_error = e

        if written == 0 and last_error is not None:
            raise last_error
        return len(data)

    def flush(self) -> None:
        """Writes are unbuffered."""

    @property
    def readers_alive(self) -> bool:
        """False once every device reader has ended and all input was consumed."""
        with self._lock:
            return self._live_readers > 0 or not self._input.empty() or bool(self._pending)

    def fileno(self) -> int:
        """Descriptor of the primary console."""
        return self._fds[0][1]

    def isatty(self) -> bool:
        return True

    # -------------------------------------------------------------------------
    # Terminal control
    # -------------------------------------------------------------------------

    def start(self) -> None:
        """Switch every terminal device to cbreak mode without echo."""
        for path, fd in self._fds:
            if not os.isatty(fd) or fd in self._saved_modes:
                continue
            try:
                self._saved_modes[fd] = termios.tcgetattr(fd)
                tty.setcbreak(fd)
                mode = termios.tcgetattr(fd)
                mode[3] &= ~(termios.ECHO | termios.ISIG)
                termios.tcsetattr(fd, termios.TCSANOW, mode)
            except termios.error as e:
                logger.debug(f"Cannot set terminal mode on {path}: {e}")
                self._saved_modes.pop(fd, None)

    def stop(self) -> None:
        """Restore the terminal modes saved by start()."""
        for fd, mode in list(self._saved_modes.items()):
            try:
                termios.tcsetattr(fd, termios.TCSADRAIN, mode)
            except termios.error as e:
                logger.debug(f"Cannot restore terminal mode on fd {fd}: {e}")
        self._saved_modes.clear()

    def get_size(self) -> Optional[Tuple[int, int]]:
        """Geometry of the first device that reports a usable one."""
        for _path, fd in self._fds:
            try:
                size = os.get_terminal_size(fd)
            except OSError:
                continue
            if size.columns > 0 and size.lines > 0:
                return size.columns, size.lines
        return None

    def close(self) -> None:
        """Stop the readers and release every device."""
        if self.closed:
            return
        self.closed = True
        self.stop()
        self._stop_event.set()
        for reader in self._readers:
            reader.join(timeout=Timeouts.THREAD_JOIN_SHORT)
        for path, fd in self._fds:
            try:
                os.close(fd)
            except OSError as e:
                logger.debug(f"Closing console {path} failed: {e}")

    def __enter__(self) -> 'TtyMultiplexer':
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
