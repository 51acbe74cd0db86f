"""
Screen Adapter - binds a console stream to a rich Console.

All painting of the dashboard goes through ConsoleScreen; nothing above this
layer writes to a device directly.
"""

import io
import logging
import os
import threading
from typing import List, Optional, Tuple

from rich.console import Console, RenderableType
from rich.control import Control
from rich.screen import Screen
from rich.segment import Segment

from consoled.constants import Display
from consoled.utils.error_handling import ScreenBindError

logger = logging.getLogger(__name__)


class ConsoleScreen:
    """
    Full-screen drawing surface over a writable stream.

    The geometry is re-read before every paint, so a resized console is
    picked up on the next draw.
    """

    def __init__(self, stream, default_size: Tuple[int, int] = (Display.DEFAULT_WIDTH,
                                                               Display.DEFAULT_HEIGHT),
                 color_system: Optional[str] = "standard"):
        if not hasattr(stream, "write"):
            raise ScreenBindError(f"{stream!r} is not a writable stream")

        self.stream = stream
        self.default_size = default_size
        self._lock = threading.RLock()
        self._started = False

        width, height = self.size()
        try:
            self.console = Console(
                file=stream,
                width=width,
                height=height,
                force_terminal=True,
                color_system=color_system,
                highlight=False,
                emoji=False,
                markup=False,
            )
        except (TypeError, ValueError) as e:
            raise ScreenBindError(f"Cannot bind screen to {stream!r}: {e}") from e

    def size(self) -> Tuple[int, int]:
        """Current (width, height), or the default if the console cannot tell."""
        get_size = getattr(self.stream, "get_size", None)
        if get_size is not None:
            size = get_size()
            if size:
                return size

        try:
            geometry = os.get_terminal_size(self.stream.fileno())
        except (AttributeError, OSError, ValueError, io.UnsupportedOperation):
            return self.default_size

        if geometry.columns <= 0 or geometry.lines <= 0:
            return self.default_size
        return geometry.columns, geometry.lines

    def init(self) -> None:
        """Take over the terminal: raw input, alternate screen, hidden cursor."""
        with self._lock:
            if self._started:
                return
            start = getattr(self.stream, "start", None)
            if start is not None:
                start()
            self.console.set_alt_screen(True)
            self.console.show_cursor(False)
            self._started = True

    def fini(self) -> None:
        """Give the terminal back."""
        with self._lock:
            if not self._started:
                return
            self.console.show_cursor(True)
            self.console.set_alt_screen(False)
            stop = getattr(self.stream, "stop", None)
            if stop is not None:
                stop()
            self._started = False

    def _sync_size(self) -> Tuple[int, int]:
        width, height = self.size()
        if self.console.size != (width, height):
            self.console.size = (width, height)
        return width, height

    def show(self, renderable: RenderableType) -> None:
        """Paint ``renderable`` over the whole screen."""
        with self._lock:
            self._sync_size()
            self.console.control(Control.home())
            self.console.print(Screen(renderable), end="")

    def clear(self) -> None:
        with self._lock:
            self.console.clear()

    def render_lines(self, renderable: RenderableType) -> List[List[Segment]]:
        """Segment lines for ``renderable`` at exactly the screen size."""
        with self._lock:
            width, height = self._sync_size()
            options = self.console.options.update_dimensions(width, height)
            return self.console.render_lines(renderable, options, pad=True)

    def render_text(self, renderable: RenderableType) -> List[str]:
        """Plain-text rows of what show() would paint."""
        return [
            "".join(segment.text for segment in line)
            for line in self.render_lines(renderable)
        ]
