"""
Redraw Scheduler - periodic refresh of the dashboard.

Every tick redraws the frame so the clock, addresses and applications stay
current. Every ``clear_every`` ticks the primary console is reset first, which
wipes output other processes wrote straight to the console (systemd boot
messages in particular).
"""

import logging
import threading
from typing import Callable, Optional

from consoled.constants import Consoles, Timeouts
from consoled.utils.error_handling import ErrorCategory, handle_error

logger = logging.getLogger(__name__)


def clear_console(path: str = Consoles.PRIMARY) -> None:
    """Send "ESC c" to a console device; failures are ignored."""
    try:
        with open(path, 'wb', buffering=0) as f:
            f.write(Consoles.CLEAR_SEQUENCE)
    except OSError as e:
        handle_error(e, "clear console", ErrorCategory.COSMETIC,
                     additional_context={'device': path})


class RedrawScheduler:
    """Background thread calling ``redraw`` every ``tick_interval`` seconds."""

    def __init__(
        self,
        redraw: Callable[[], None],
        clear: Optional[Callable[[], None]] = None,
        tick_interval: float = Timeouts.REDRAW_TICK,
        clear_every: int = 12,
    ):
        if tick_interval <= 0:
            raise ValueError(f"tick_interval must be positive, got {tick_interval}")
        if clear_every < 1:
            raise ValueError(f"clear_every must be at least 1, got {clear_every}")

        self.redraw = redraw
        self.clear = clear if clear is not None else clear_console
        self.tick_interval = tick_interval
        self.clear_every = clear_every
        self.ticks = 0
        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        if self.running:
            return
        self._stop_event.clear()
        self._thread = threading.Thread(target=self._run, name="dashboard-redraw", daemon=True)
        self._thread.start()

    def stop(self, timeout: float = Timeouts.THREAD_JOIN_SHORT) -> None:
        """Ask the loop to exit at its next wake and wait for it."""
        self._stop_event.set()
        if self._thread is not None and self._thread is not threading.current_thread():
            self._thread.join(timeout=timeout)

    def tick(self) -> None:
        """Run one tick: optional console clear, then redraw."""
        if self.ticks % self.clear_every == 1 or self.clear_every == 1:
            try:
                self.clear()
            except Exception as e:
                handle_error(e, "clear console", ErrorCategory.COSMETIC)

        try:
            self.redraw()
        except Exception:
            logger.exception("Dashboard redraw failed")

        self.ticks += 1

    def _run(self) -> None:
        while not self._stop_event.is_set():
            self.tick()
            self._stop_event.wait(self.tick_interval)
