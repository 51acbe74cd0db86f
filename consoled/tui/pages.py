"""
Page Stack - the base frame plus named overlays, composited top to bottom.
"""

from collections import OrderedDict
from typing import Callable, List, Tuple

from rich.console import Console, ConsoleOptions, RenderableType, RenderResult
from rich.segment import Segment

from consoled.tui.modal import Region

# An overlay computes its region and renderable from the screen size
OverlayLayout = Callable[[Tuple[int, int]], Tuple[Region, RenderableType]]


class Pages:
    """
    Ordered, named pages.

    The base page is always present and always drawn first. Overlay pages are
    drawn over it in insertion order; adding a page under an existing name
    replaces that page and moves it to the top.
    """

    def __init__(self, base_name: str, base: RenderableType):
        self.base_name = base_name
        self.base = base
        self._overlays: "OrderedDict[str, OverlayLayout]" = OrderedDict()

    def add_page(self, name: str, layout: OverlayLayout) -> 'Pages':
        if name == self.base_name:
            raise ValueError(f"'{name}' is the base page and cannot be replaced")
        self._overlays.pop(name, None)
        self._overlays[name] = layout
        return self

    def remove_page(self, name: str) -> 'Pages':
        """Remove an overlay; unknown names are ignored."""
        if name == self.base_name:
            raise ValueError(f"'{name}' is the base page and cannot be removed")
        self._overlays.pop(name, None)
        return self

    def names(self) -> List[str]:
        return [self.base_name] + list(self._overlays)

    def __rich_console__(self, console: Console, options: ConsoleOptions) -> RenderResult:
        width = options.max_width
        height = options.height if options.height is not None else console.height

        lines = console.render_lines(
            self.base, options.update_dimensions(width, height), pad=True
        )

        for layout in self._overlays.values():
            region, renderable = layout((width, height))
            if region.width <= 0 or region.height <= 0:
                continue
            overlay = console.render_lines(
                renderable,
                options.update_dimensions(region.width, region.height),
                pad=True,
            )
            for row, overlay_line in enumerate(overlay):
                y = region.y + row
                if not 0 <= y < len(lines):
                    continue
                parts = list(Segment.divide(
                    lines[y], [region.x, region.x + region.width, width]
                ))
                left = parts[0] if parts else []
                right = parts[2] if len(parts) > 2 else []
                lines[y] = left + overlay_line + right

        for row, line in enumerate(lines):
            yield from line
            if row < len(lines) - 1:
                yield Segment.line()
