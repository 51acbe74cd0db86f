"""
Bounded progress bar shown at the bottom of a modal dialog.
"""

from rich.console import Console, ConsoleOptions, RenderResult
from rich.segment import Segment
from rich.style import Style

FILLED_CHAR = "█"
EMPTY_CHAR = "░"


class ProgressBar:
    """A one-row bar; progress is always clamped to [0, maximum]."""

    def __init__(self, maximum: int = 100, progress: int = 0,
                 style: str = "green", empty_style: str = "white"):
        self._max = 0
        self._progress = 0
        self.style = style
        self.empty_style = empty_style
        self.set_max(maximum)
        self.set_progress(progress)

    @property
    def maximum(self) -> int:
        return self._max

    @property
    def progress(self) -> int:
        return self._progress

    def set_max(self, maximum: int) -> 'ProgressBar':
        self._max = max(0, int(maximum))
        self._progress = min(self._progress, self._max)
        return self

    def set_progress(self, progress: int) -> 'ProgressBar':
        self._progress = min(max(0, int(progress)), self._max)
        return self

    @property
    def fraction(self) -> float:
        if self._max <= 0:
            return 0.0
        return self._progress / self._max

    def filled_cells(self, width: int) -> int:
        """Number of the ``width`` cells drawn as filled."""
        if width <= 0:
            return 0
        return min(width, int(width * self.fraction))

    def render_text(self, width: int) -> str:
        filled = self.filled_cells(width)
        return FILLED_CHAR * filled + EMPTY_CHAR * (max(0, width) - filled)

    def __rich_console__(self, console: Console, options: ConsoleOptions) -> RenderResult:
        width = options.max_width
        filled = self.filled_cells(width)
        if filled:
            yield Segment(FILLED_CHAR * filled, Style.parse(self.style))
        if width - filled:
            yield Segment(EMPTY_CHAR * (width - filled), Style.parse(self.empty_style))
        yield Segment.line()
