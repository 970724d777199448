"""Cursor and viewport state for buffers."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Tuple

Cursor = Tuple[int, int]  # (row, column)


@dataclass(slots=True)
class Viewport:
    """Visible window onto the document.

    ``height`` and ``width`` come from the host terminal; ``scroll_top`` is
    the first visible row.
    """

    scroll_top: int = 0
    height: int = 24
    width: int = 80

    def resize(self, width: int, height: int) -> None:
        self.width = max(1, width)
        self.height = max(1, height)

    def reconcile(self, row: int) -> int:
        if row < self.scroll_top:
            self.scroll_top = row
        elif row >= self.scroll_top + self.height:
            self.scroll_top = row - self.height + 1
        return self.scroll_top

    def visible_rows(self, line_count: int) -> range:
        return range(self.scroll_top, min(line_count, self.scroll_top + self.height))


@dataclass(slots=True)
class BufferState:
    """Mutable cursor + viewport tied to a BufferDocument version."""

    cursor: Cursor = (0, 0)
    viewport: Viewport = field(default_factory=Viewport)

    def set_cursor(self, row: int, col: int) -> None:
        self.cursor = (row, col)

    def reconcile(self) -> int:
        return self.viewport.reconcile(self.cursor[0])
