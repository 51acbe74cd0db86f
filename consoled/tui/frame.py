"""
Frame - header rows, footer rows and a single body primitive.

Header texts stack top-down, footer texts stack bottom-up (the first footer
text added is the bottom row). Texts with different alignments share rows,
so a left-aligned and a right-aligned header text both land on the first row.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Optional, Union

from rich.console import Console, ConsoleOptions, RenderableType, RenderResult
from rich.segment import Segment
from rich.text import Text


class Align(Enum):
    LEFT = "left"
    CENTER = "center"
    RIGHT = "right"


@dataclass
class FrameText:
    text: Text
    header: bool
    align: Align


class Frame:
    """
    The dashboard's default view.

    ``header_spacing`` / ``footer_spacing`` blank rows separate the body from
    the header and footer, but only when there is header or footer text.
    """

    def __init__(self, body: Optional[RenderableType] = None,
                 header_spacing: int = 1, footer_spacing: int = 1):
        self.body = body
        self.header_spacing = header_spacing
        self.footer_spacing = footer_spacing
        self._texts: List[FrameText] = []

    def set_primitive(self, body: Optional[RenderableType]) -> 'Frame':
        self.body = body
        return self

    def add_text(self, text: Union[str, Text], header: bool, align: Align = Align.LEFT,
                 style: str = "white") -> 'Frame':
        if isinstance(text, str):
            text = Text(text, style=style)
        self._texts.append(FrameText(text=text, header=header, align=align))
        return self

    def clear(self) -> 'Frame':
        """Remove all header and footer texts; the body stays."""
        self._texts.clear()
        return self

    def _rows(self, header: bool) -> List[Dict[Align, Text]]:
        """Group texts into rows; row 0 is the top header row or the bottom footer row."""
        rows: List[Dict[Align, Text]] = []
        counts = {align: 0 for align in Align}
        for item in self._texts:
            if item.header != header:
                continue
            index = counts[item.align]
            counts[item.align] += 1
            while len(rows) <= index:
                rows.append({})
            rows[index][item.align] = item.text
        return rows

    @staticmethod
    def _compose_row(row: Dict[Align, Text], width: int) -> Text:
        pieces = []
        if Align.LEFT in row:
            pieces.append((0, row[Align.LEFT]))
        if Align.CENTER in row:
            pieces.append(((width - row[Align.CENTER].cell_len) // 2, row[Align.CENTER]))
        if Align.RIGHT in row:
            pieces.append((width - row[Align.RIGHT].cell_len, row[Align.RIGHT]))
        pieces.sort(key=lambda piece: piece[0])

        line = Text(no_wrap=True, overflow="crop", end="")
        cursor = 0
        for start, text in pieces:
            start = max(start, cursor)
            line.append(" " * (start - cursor))
            line.append_text(text)
            cursor = start + text.cell_len
        line.truncate(width, overflow="crop", pad=True)
        return line

    def _render_row(self, console: Console, options: ConsoleOptions,
                    row: Dict[Align, Text], width: int) -> List[Segment]:
        return console.render_lines(
            self._compose_row(row, width), options.update_dimensions(width, 1), pad=True
        )[0]

    def __rich_console__(self, console: Console, options: ConsoleOptions) -> RenderResult:
        width = options.max_width
        height = options.height if options.height is not None else console.height

        header_rows = self._rows(header=True)
        footer_rows = list(reversed(self._rows(header=False)))

        lines: List[List[Segment]] = []
        blank = [Segment(" " * width)]

        for row in header_rows:
            lines.append(self._render_row(console, options, row, width))
        if header_rows:
            lines.extend([blank] * self.header_spacing)

        footer_block = len(footer_rows) + (self.footer_spacing if footer_rows else 0)
        body_height = max(0, height - len(lines) - footer_block)

        if body_height:
            if self.body is None:
                lines.extend([blank] * body_height)
            else:
                lines.extend(console.render_lines(
                    self.body, options.update_dimensions(width, body_height), pad=True
                ))

        if footer_rows:
            lines.extend([blank] * self.footer_spacing)
        for row in footer_rows:
            lines.append(self._render_row(console, options, row, width))

        lines = Segment.set_shape(lines[:height], width, height)
        for index, line in enumerate(lines):
            yield from line
            if index < len(lines) - 1:
                yield Segment.line()
