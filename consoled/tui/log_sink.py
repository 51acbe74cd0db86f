"""
Log Sink - feeds formatted log output into the dashboard.

LogSink is a plain writable stream, so it can back a logging.StreamHandler.
Each chunk is appended to the dashboard's LogBody, tagged with a severity
derived from its level marker, and then copied unmodified to a mirror stream
(normally stdout).
"""

import sys
import threading
from collections import deque
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Deque, List, Optional, Union

from rich import box
from rich.console import Console, ConsoleOptions, RenderResult
from rich.panel import Panel
from rich.segment import Segment
from rich.text import Text

from consoled.constants import Display, LogMarkers


class Severity(Enum):
    NORMAL = "normal"
    WARNING = "warning"
    ERROR = "error"


SEVERITY_STYLES = {
    Severity.NORMAL: "white",
    Severity.WARNING: "orange1",
    Severity.ERROR: "red",
}


def classify(chunk: str) -> Severity:
    """
    Severity of a formatted log chunk.

    Warning markers are checked before error markers, so a chunk carrying
    both is shown as a warning.
    """
    if any(marker in chunk for marker in LogMarkers.WARNING):
        return Severity.WARNING
    if any(marker in chunk for marker in LogMarkers.ERROR):
        return Severity.ERROR
    return Severity.NORMAL


@dataclass(frozen=True)
class LogLine:
    text: str
    severity: Severity = Severity.NORMAL

    @property
    def style(self) -> str:
        return SEVERITY_STYLES[self.severity]


class _LogTail:
    """Renders the most recent lines that fit, word-wrapped."""

    def __init__(self, body: 'LogBody'):
        self.body = body

    def __rich_console__(self, console: Console, options: ConsoleOptions) -> RenderResult:
        height = options.height if options.height is not None else console.height
        width = options.max_width

        text = self.body.as_text()
        lines = console.render_lines(text, options.update(width=width, height=None), pad=True)
        lines = lines[-height:] if height else []
        lines = Segment.set_shape(lines, width, height)
        for index, line in enumerate(lines):
            yield from line
            if index < len(lines) - 1:
                yield Segment.line()


class LogBody:
    """
    Append-only buffer of log output, drawn inside a bordered box.

    Only the newest ``limit`` chunks are kept. ``on_change`` is called after
    every append, outside the buffer lock.
    """

    def __init__(self, limit: int = Display.LOG_BODY_LIMIT,
                 on_change: Optional[Callable[[], None]] = None):
        self._lines: Deque[LogLine] = deque(maxlen=limit)
        self._lock = threading.Lock()
        self.on_change = on_change

    def append(self, line: LogLine) -> None:
        with self._lock:
            self._lines.append(line)
        if self.on_change is not None:
            self.on_change()

    def lines(self) -> List[LogLine]:
        with self._lock:
            return list(self._lines)

    def as_text(self) -> Text:
        text = Text(overflow="fold", end="")
        for line in self.lines():
            text.append(line.text, style=line.style)
        text.rstrip()
        return text

    def __len__(self) -> int:
        with self._lock:
            return len(self._lines)

    def __rich_console__(self, console: Console, options: ConsoleOptions) -> RenderResult:
        yield Panel(_LogTail(self), box=box.SQUARE, padding=(0, 0))


class LogSink:
    """
    Writable stream that feeds the log body and mirrors to a second stream.

    The body is written first. If the mirror write fails its error is raised
    to the caller and the body keeps the chunk.
    """

    def __init__(self, body: LogBody, mirror=None):
        self.body = body
        self.mirror = mirror if mirror is not None else sys.stdout

    def write(self, chunk: Union[str, bytes]) -> int:
        accepted = len(chunk)
        if isinstance(chunk, bytes):
            chunk = chunk.decode("utf-8", errors="replace")

        self.body.append(LogLine(chunk, classify(chunk)))

        self.mirror.write(chunk)
        self.mirror.flush()
        return accepted

    def flush(self) -> None:
        self.mirror.flush()
