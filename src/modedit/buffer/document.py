"""Line-oriented document storage."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, List, Tuple

OPENING_BRACE = "{"


def split_lines(text: str) -> List[str]:
    """Split ``text`` into lines; a trailing newline does not add a line."""

    if not text:
        return [""]
    lines = text.split("\n")
    if text.endswith("\n"):
        lines.pop()
    return lines


def leading_whitespace(line: str) -> str:
    return line[: len(line) - len(line.lstrip(" \t"))]


@dataclass(slots=True)
class BufferDocument:
    """Mutable list-of-lines model.

    Never holds zero lines: the empty document is ``[""]``. Every mutation
    bumps ``version`` and sets ``dirty``; coordinates handed to the mutation
    methods are clamped, never rejected.
    """

    _lines: List[str] = field(default_factory=lambda: [""])
    version: int = 0
    dirty: bool = False

    def __post_init__(self) -> None:
        if not self._lines:
            self._lines = [""]

    @classmethod
    def from_text(cls, text: str) -> "BufferDocument":
        return cls(_lines=split_lines(text))

    def serialize(self) -> str:
        return "".join(f"{line}\n" for line in self._lines)

    def snapshot(self) -> Tuple[str, ...]:
        """Return the current lines without exposing internal mutability."""

        return tuple(self._lines)

    def replace(self, lines: Iterable[str], *, dirty: bool | None = None) -> None:
        """Swap in a whole new line array (load, reload, undo, redo)."""

        self._lines = list(lines) or [""]
        self.version += 1
        if dirty is not None:
            self.dirty = dirty

    @property
    def line_count(self) -> int:
        return len(self._lines)

    def get_line(self, index: int) -> str:
        return self._lines[index]

    def line_length(self, index: int) -> int:
        return len(self._lines[index])

    def clamp_row(self, row: int) -> int:
        return max(0, min(row, len(self._lines) - 1))

    def clamp_col(self, row: int, col: int) -> int:
        return max(0, min(col, len(self._lines[row])))

    def insert_char(self, row: int, col: int, ch: str) -> Tuple[int, int]:
        return self.insert_text(row, col, ch)

    def insert_text(self, row: int, col: int, text: str) -> Tuple[int, int]:
        """Insert single-line ``text``; returns the position after it."""

        row = self.clamp_row(row)
        col = self.clamp_col(row, col)
        line = self._lines[row]
        self._lines[row] = line[:col] + text + line[col:]
        self._touch()
        return row, col + len(text)

    def splice(self, row: int, start: int, end: int, text: str) -> Tuple[int, int]:
        """Replace ``[start:end]`` of ``row`` with ``text``."""

        row = self.clamp_row(row)
        start = self.clamp_col(row, start)
        end = max(start, self.clamp_col(row, end))
        line = self._lines[row]
        self._lines[row] = line[:start] + text + line[end:]
        self._touch()
        return row, start + len(text)

    def delete_char_before(self, row: int, col: int) -> Tuple[int, int]:
        """Backspace semantics; returns the resulting position.

        At column 0 of a row other than the first, the row is joined onto
        the previous one. At (0, 0) nothing changes.
        """

        row = self.clamp_row(row)
        col = self.clamp_col(row, col)
        if col > 0:
            line = self._lines[row]
            self._lines[row] = line[: col - 1] + line[col:]
            self._touch()
            return row, col - 1
        if row > 0:
            return self.join_with_next(row - 1)
        return row, col

    def split_line(
        self, row: int, col: int, *, indent_unit: str = "    ", auto_indent: bool = True
    ) -> Tuple[int, int]:
        """Break ``row`` at ``col``; returns the start of the new line's text."""

        row = self.clamp_row(row)
        col = self.clamp_col(row, col)
        line = self._lines[row]
        head, tail = line[:col], line[col:]
        indent = ""
        if auto_indent:
            indent = leading_whitespace(line)
            if head.rstrip().endswith(OPENING_BRACE):
                indent += indent_unit
        self._lines[row] = head
        self._lines.insert(row + 1, indent + tail)
        self._touch()
        return row + 1, len(indent)

    def join_with_next(self, row: int) -> Tuple[int, int]:
        """Append ``row + 1`` onto ``row``; returns the join point."""

        row = self.clamp_row(row)
        join_at = len(self._lines[row])
        if row + 1 >= len(self._lines):
            return row, join_at
        self._lines[row] += self._lines.pop(row + 1)
        self._touch()
        return row, join_at

    def _touch(self) -> None:
        self.version += 1
        self.dirty = True
