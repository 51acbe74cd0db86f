"""
Console Dashboard - live system status on every attached console.

Displays:
- Product and OS version, current UTC time (header)
- Recent log output (body)
- IP addresses and installed applications (footer)
- Optional modal dialog with a progress bar

Usage:
    dashboard = get_dashboard(load_config())
    attach_dashboard(dashboard.sink)
    dashboard.run()

All changes to the frame, the page stack and the screen happen under one
re-entrant lock, so the redraw thread, the input loop and any number of
logging threads can drive the dashboard at the same time.
"""

import logging
import signal
import threading
from datetime import datetime, timezone
from functools import partial
from typing import Callable, List, Optional

from consoled.config import DashboardConfig
from consoled.constants import Consoles, Display, Timeouts
from consoled.sources.network import get_ip_addresses
from consoled.sources.release import get_current_release
from consoled.sources.state import StateStore
from consoled.tui.footer import wrap_footer_text
from consoled.tui.frame import Align, Frame
from consoled.tui.log_sink import LogBody, LogSink
from consoled.tui.modal import Modal
from consoled.tui.multiplexer import TtyMultiplexer
from consoled.tui.pages import Pages
from consoled.tui.scheduler import RedrawScheduler, clear_console
from consoled.tui.screen import ConsoleScreen
from consoled.utils.error_handling import ErrorCategory, ScreenBindError, handle_error

logger = logging.getLogger(__name__)


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class Dashboard:
    """
    The console dashboard.

    Collaborators can be injected; by default they are built from ``config``:
    the screen over a multiplexer of the configured console devices, the OS
    release file, the state file and the local network interfaces.
    """

    def __init__(
        self,
        config: Optional[DashboardConfig] = None,
        screen: Optional[ConsoleScreen] = None,
        release_source: Optional[Callable[[], str]] = None,
        state_store: Optional[StateStore] = None,
        address_source: Optional[Callable[[], List[str]]] = None,
        clock: Optional[Callable[[], datetime]] = None,
        mirror=None,
    ):
        self.config = config or DashboardConfig()

        if screen is None:
            ttys = TtyMultiplexer(*self.config.console_devices)
            try:
                screen = ConsoleScreen(ttys, default_size=self.config.default_size)
            except ScreenBindError:
                ttys.close()
                raise
        self.screen = screen

        self.release_source = release_source or partial(
            get_current_release, self.config.os_release_file
        )
        self.state_store = state_store or StateStore(self.config.state_file)
        self.address_source = address_source or get_ip_addresses
        self.clock = clock or _utc_now

        self._lock = threading.RLock()
        self._painting = False
        self._dirty = False
        self._active = False
        self._stop_event = threading.Event()
        self._resize_pending = threading.Event()
        self._previous_winch = None

        self.body = LogBody(limit=self.config.log_body_limit, on_change=self.request_draw)
        self.sink = LogSink(self.body, mirror)

        self.frame = Frame()
        self.pages = Pages(Display.FRAME_PAGE, self.frame)

        self.scheduler = RedrawScheduler(
            self.redraw_screen,
            clear=partial(clear_console, self.config.primary_console),
            tick_interval=self.config.tick_interval,
            clear_every=self.config.clear_every,
        )

    # -------------------------------------------------------------------------
    # Log sink
    # -------------------------------------------------------------------------

    def write(self, chunk) -> int:
        """Write a log chunk to the body and the mirror stream."""
        return self.sink.write(chunk)

    def flush(self) -> None:
        self.sink.flush()

    # -------------------------------------------------------------------------
    # Data sources
    # -------------------------------------------------------------------------

    def _current_release(self) -> str:
        # Queried on every tick since it is not in the state on first boot
        try:
            return self.release_source()
        except Exception as e:
            handle_error(e, "query OS release", ErrorCategory.DATA_SOURCE)
            return f"[{e}]"

    def _applications(self) -> List[str]:
        try:
            state = self.state_store.load_or_create()
        except Exception as e:
            handle_error(e, "load application state", ErrorCategory.DATA_SOURCE)
            return []
        return state.application_labels()

    def _ip_addresses(self) -> List[str]:
        try:
            return list(self.address_source())
        except Exception as e:
            handle_error(e, "list IP addresses", ErrorCategory.DATA_SOURCE)
            return [str(e)]

    # -------------------------------------------------------------------------
    # Frame engine
    # -------------------------------------------------------------------------

    def redraw_screen(self) -> None:
        """
        Rebuild the header and footer from current data and repaint.

        Needed whenever header or footer values change, the clock included.
        """
        if self.frame is None or self.screen is None:
            return

        version = self._current_release()
        applications = sorted(self._applications())
        addresses = self._ip_addresses()
        timestamp = self.clock().astimezone(timezone.utc).strftime(Display.TIMESTAMP_FORMAT)

        with self._lock:
            width, _ = self.screen.size()

            self.frame.clear()
            self.frame.add_text(f"{self.config.product_name} {version}", True, Align.LEFT)
            self.frame.add_text(timestamp, True, Align.RIGHT)

            for line in wrap_footer_text(Display.IP_LABEL, ", ".join(addresses), width):
                self.frame.add_text(line, False, Align.LEFT)
            for line in wrap_footer_text(Display.APPLICATIONS_LABEL, ", ".join(applications), width):
                self.frame.add_text(line, False, Align.LEFT)

            if self.frame.body is not self.body:
                self.frame.set_primitive(self.body)

            self.request_draw()

    def request_draw(self) -> None:
        """
        Repaint the page stack if the dashboard is running.

        Never blocks. If another thread is busy with the screen the request is
        left pending and that thread keeps painting until nothing is pending.
        """
        self._dirty = True
        # Outer loop: a request can miss the lock between the last paint and the release
        while self._dirty:
            # The caller may hold a logging handler lock that the painter needs
            if not self._lock.acquire(blocking=False):
                return
            try:
                # A log record emitted while painting must not paint again
                if not self._active or self._painting:
                    return
                self._painting = True
                try:
                    while self._dirty:
                        self._dirty = False
                        self.screen.show(self.pages)
                finally:
                    self._painting = False
            finally:
                self._lock.release()

    def rendered_text(self) -> List[str]:
        """Plain-text rows of the current page stack at the screen size."""
        with self._lock:
            rows = self.screen.render_text(self.pages)
        # Requests that found the lock taken while rendering
        if self._dirty:
            self.request_draw()
        return rows

    # -------------------------------------------------------------------------
    # Modal
    # -------------------------------------------------------------------------

    def display_modal(self, title: str, message: str, progress: int = 0,
                      max_progress: int = 0) -> Modal:
        """
        Show a centered dialog, replacing any current one.

        With ``max_progress`` greater than zero a progress bar is shown at the
        bottom of the dialog.
        """
        modal = Modal(title, message, progress, max_progress)
        with self._lock:
            self.pages.add_page(Display.MODAL_PAGE, modal.layout)
            self.request_draw()
        return modal

    def remove_modal(self) -> None:
        """Hide the modal dialog, if any."""
        with self._lock:
            self.pages.remove_page(Display.MODAL_PAGE)
            self.request_draw()

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    def start(self) -> None:
        """Take over the consoles and start the periodic redraw."""
        with self._lock:
            if self._active:
                return
            self.screen.init()
            self.screen.clear()
            self._active = True
        self._stop_event.clear()

        if hasattr(signal, 'SIGWINCH') and threading.current_thread() is threading.main_thread():
            self._previous_winch = signal.signal(
                signal.SIGWINCH, lambda *_: self._resize_pending.set()
            )

        self.scheduler.start()

    def stop(self) -> None:
        """Make run() return."""
        self._stop_event.set()

    def run(self) -> None:
        """
        Run the dashboard until an interrupt arrives on a console or stop() is called.
        """
        self.start()
        try:
            while not self._stop_event.is_set():
                data = self._read_input(Timeouts.INPUT_POLL)
                if Consoles.INTERRUPT_BYTE in data:
                    logger.info("Interrupt received on console")
                    break
                if self._resize_pending.is_set():
                    self._resize_pending.clear()
                    self.request_draw()
        except KeyboardInterrupt:
            logger.info("Interrupted")
        finally:
            self.shutdown()

    def _read_input(self, timeout: float) -> bytes:
        stream = self.screen.stream
        read = getattr(stream, "read", None)
        if read is None or not getattr(stream, "readers_alive", True):
            self._stop_event.wait(timeout)
            return b""
        return read(timeout=timeout)

    def shutdown(self) -> None:
        """Stop the redraw thread and restore the consoles."""
        self.scheduler.stop()
        with self._lock:
            if not self._active:
                return
            self._active = False
            self.screen.fini()

        if self._previous_winch is not None and \
                threading.current_thread() is threading.main_thread():
            signal.signal(signal.SIGWINCH, self._previous_winch)
            self._previous_winch = None

    def close(self) -> None:
        """Shut down and release the console devices."""
        self.shutdown()
        close = getattr(self.screen.stream, "close", None)
        if close is not None:
            close()


# =============================================================================
# PROCESS-WIDE INSTANCE
# =============================================================================

_instance: Optional[Dashboard] = None
_instance_lock = threading.Lock()


def get_dashboard(config: Optional[DashboardConfig] = None, **kwargs) -> Dashboard:
    """
    Return the process-wide dashboard, building it on first use.

    Concurrent first callers build exactly one instance. If building fails the
    error is raised and nothing is cached, so a later call tries again.
    """
    global _instance
    if _instance is None:
        with _instance_lock:
            if _instance is None:
                _instance = Dashboard(config, **kwargs)
    return _instance


def release_dashboard() -> None:
    """Close and forget the process-wide dashboard."""
    global _instance
    with _instance_lock:
        if _instance is not None:
            _instance.close()
            _instance = None

