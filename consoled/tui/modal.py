"""
Modal dialog layered over the dashboard frame.
"""

from dataclasses import dataclass
from typing import Optional, Tuple

from rich import box
from rich.console import Console, ConsoleOptions, RenderResult
from rich.panel import Panel
from rich.segment import Segment
from rich.style import Style
from rich.text import Text

from consoled.tui.progress import ProgressBar


@dataclass(frozen=True)
class Region:
    x: int
    y: int
    width: int
    height: int


class _ModalBody:
    """Message area plus the optional separator and progress row."""

    def __init__(self, message: str, progress_bar: Optional[ProgressBar]):
        self.message = message
        self.progress_bar = progress_bar

    def __rich_console__(self, console: Console, options: ConsoleOptions) -> RenderResult:
        width = options.max_width
        height = options.height if options.height is not None else 0
        text_rows = height - 2 if self.progress_bar is not None else height

        if text_rows > 0:
            # Not scrollable: whatever does not fit is cut off at the bottom
            lines = console.render_lines(
                Text(self.message, overflow="fold"),
                options.update(width=width, height=text_rows),
                pad=True,
            )
            for line in lines:
                yield from line
                yield Segment.line()

        if self.progress_bar is not None and height >= 2:
            yield Segment("─" * width, Style(dim=True))
            yield Segment.line()
            yield from console.render(self.progress_bar, options.update(width=width, height=1))


class Modal:
    """
    A titled dialog, centered on the screen.

    It covers 3/4 of the console width and half its height. With a positive
    ``max_progress`` a progress bar is shown below the message.
    """

    def __init__(self, title: str, message: str, progress: int = 0, max_progress: int = 0):
        self.title = title
        self.message = message
        self.progress_bar: Optional[ProgressBar] = None
        if max_progress > 0:
            self.progress_bar = ProgressBar(max_progress, progress)

    @staticmethod
    def region(screen_width: int, screen_height: int) -> Region:
        width = screen_width * 3 // 4
        height = screen_height // 2
        return Region(
            x=(screen_width - width) // 2,
            y=(screen_height - height) // 2,
            width=width,
            height=height,
        )

    @staticmethod
    def message_rows(modal_height: int, with_progress: bool) -> int:
        """Rows available to the message text."""
        return max(0, modal_height - (6 if with_progress else 4))

    def panel(self, height: int) -> Panel:
        return Panel(
            _ModalBody(self.message, self.progress_bar),
            title=self.title,
            box=box.SQUARE,
            height=height,
            padding=(1, 1),
        )

    def layout(self, screen_size: Tuple[int, int]) -> Tuple[Region, Panel]:
        region = self.region(*screen_size)
        return region, self.panel(region.height)
