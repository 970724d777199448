"""High-level buffer facade combining document, cursor/viewport and history."""

from __future__ import annotations

from contextlib import AbstractContextManager
from dataclasses import dataclass
from typing import ContextManager, Iterable, Optional, Tuple

from modedit.runtime import telemetry

from .document import BufferDocument
from .state import BufferState, Cursor
from .undo import ActionKind, UndoEntry, UndoTimeline
from .validation import clamp_cursor


@dataclass(slots=True)
class BufferView:
    """Read-only snapshot handed to hosts for rendering."""

    version: int
    lines: Tuple[str, ...]
    cursor: Cursor
    scroll_top: int
    dirty: bool

    @property
    def text(self) -> str:
        return "".join(f"{line}\n" for line in self.lines)


@dataclass(slots=True)
class BufferDelta:
    version: int
    cursor: Cursor
    label: str
    changed: bool


class Buffer:
    """One document plus its cursor, viewport and undo history.

    Every mutating method runs inside a ``Transaction`` which records a
    single undo entry when the document actually changed.
    """

    def __init__(
        self,
        *,
        name: str = "default",
        document: Optional[BufferDocument] = None,
        state: Optional[BufferState] = None,
        undo: Optional[UndoTimeline] = None,
    ) -> None:
        self.name = name
        self.document = document or BufferDocument()
        self.state = state or BufferState()
        self.undo_timeline = undo or UndoTimeline()

    @classmethod
    def from_text(cls, text: str, *, name: str = "default") -> "Buffer":
        return cls(name=name, document=BufferDocument.from_text(text))

    @property
    def lines(self) -> Tuple[str, ...]:
        return self.document.snapshot()

    @property
    def cursor(self) -> Cursor:
        return self.state.cursor

    @property
    def dirty(self) -> bool:
        return self.document.dirty

    def mark_clean(self) -> None:
        self.document.dirty = False

    def snapshot(self) -> BufferView:
        return BufferView(
            version=self.document.version,
            lines=self.document.snapshot(),
            cursor=self.state.cursor,
            scroll_top=self.state.viewport.scroll_top,
            dirty=self.document.dirty,
        )

    def text(self) -> str:
        return self.document.serialize()

    def load_lines(self, lines: Iterable[str]) -> None:
        """Replace the document wholesale; history starts over."""

        self.document.replace(lines, dirty=False)
        self.undo_timeline.clear()
        self.state.viewport.scroll_top = 0
        self._set_cursor((0, 0))

    # -- cursor -----------------------------------------------------------

    def move_by(self, d_row: int, d_col: int) -> Cursor:
        row, col = self.state.cursor
        row = self.document.clamp_row(row + d_row)
        col = self.document.clamp_col(row, col + d_col)
        return self._set_cursor((row, col))

    def move_to(self, row: int, col: int) -> Cursor:
        return self._set_cursor(clamp_cursor(self.document, (row, col)))

    def move_line_start(self) -> Cursor:
        return self._set_cursor((self.state.cursor[0], 0))

    def move_line_end(self) -> Cursor:
        row = self.state.cursor[0]
        return self._set_cursor((row, self.document.line_length(row)))

    def jump_to_line(self, number: int) -> bool:
        """Move to 1-based line ``number``; out-of-range numbers are refused."""

        if number < 1 or number > self.document.line_count:
            return False
        self._set_cursor((number - 1, 0))
        return True

    def resize(self, width: int, height: int) -> None:
        self.state.viewport.resize(width, height)
        self.state.reconcile()

    def reconcile(self) -> int:
        return self.state.reconcile()

    # -- edits ------------------------------------------------------------

    def insert_char(self, ch: str) -> BufferDelta:
        with Transaction(self, ActionKind.INSERT, "insert_char") as tx:
            row, col = self.state.cursor
            self._set_cursor(self.document.insert_char(row, col, ch))
            return tx.commit()

    def insert_text(self, text: str) -> BufferDelta:
        with Transaction(self, ActionKind.INSERT, "insert_text") as tx:
            row, col = self.state.cursor
            self._set_cursor(self.document.insert_text(row, col, text))
            return tx.commit()

    def replace_before_cursor(self, count: int, text: str) -> BufferDelta:
        """Swap the ``count`` characters left of the cursor for ``text``."""

        with Transaction(self, ActionKind.INSERT, "complete") as tx:
            row, col = self.state.cursor
            self._set_cursor(self.document.splice(row, col - count, col, text))
            return tx.commit()

    def backspace(self) -> BufferDelta:
        row, col = self.state.cursor
        kind = ActionKind.JOIN if col == 0 else ActionKind.DELETE
        with Transaction(self, kind, "backspace") as tx:
            self._set_cursor(self.document.delete_char_before(row, col))
            return tx.commit()

    def delete_char_at(self) -> BufferDelta:
        """Forward delete: remove the character under the cursor or join."""

        row, col = self.state.cursor
        if col >= self.document.line_length(row):
            return self.join_with_next()
        with Transaction(self, ActionKind.DELETE, "delete_char") as tx:
            self.document.delete_char_before(row, col + 1)
            self._set_cursor((row, col))
            return tx.commit()

    def split_line(self, *, indent_unit: str = "    ", auto_indent: bool = True) -> BufferDelta:
        with Transaction(self, ActionKind.SPLIT, "split_line") as tx:
            row, col = self.state.cursor
            self._set_cursor(
                self.document.split_line(
                    row, col, indent_unit=indent_unit, auto_indent=auto_indent
                )
            )
            return tx.commit()

    def join_with_next(self) -> BufferDelta:
        with Transaction(self, ActionKind.JOIN, "join_lines") as tx:
            self._set_cursor(self.document.join_with_next(self.state.cursor[0]))
            return tx.commit()

    def replace_lines(self, lines: Iterable[str], *, label: str) -> BufferDelta:
        with Transaction(self, ActionKind.REPLACE, label) as tx:
            self.document.replace(lines, dirty=True)
            self._set_cursor(clamp_cursor(self.document, self.state.cursor))
            return tx.commit()

    # -- history ----------------------------------------------------------

    def undo(self) -> bool:
        entry = self.undo_timeline.undo(self._current_entry())
        if entry is None:
            return False
        self._restore(entry, "undo")
        return True

    def redo(self) -> bool:
        entry = self.undo_timeline.redo(self._current_entry())
        if entry is None:
            return False
        self._restore(entry, "redo")
        return True

    def _current_entry(self) -> UndoEntry:
        cursor = self.state.cursor
        return UndoEntry(
            kind=ActionKind.REDO,
            label="redo",
            lines=self.document.snapshot(),
            cursor_before=cursor,
            cursor_after=cursor,
        )

    def _restore(self, entry: UndoEntry, direction: str) -> None:
        self.document.replace(entry.lines, dirty=True)
        self._set_cursor(clamp_cursor(self.document, entry.cursor_before))
        telemetry.record_event(
            f"buffer.{direction}",
            level="debug",
            data={"buffer": self.name, "label": entry.label, "kind": entry.kind.value},
        )

    def _set_cursor(self, cursor: Cursor) -> Cursor:
        self.state.set_cursor(*cursor)
        self.state.reconcile()
        return cursor


class Transaction(AbstractContextManager["Transaction"]):
    """Profiles one edit and turns it into an undo entry on ``commit``."""

    def __init__(self, buffer: Buffer, kind: ActionKind, label: str) -> None:
        self.buffer = buffer
        self.kind = kind
        self.label = label
        self._span_cm: Optional[ContextManager[object]] = None
        self._before_lines: Tuple[str, ...] = ()
        self._before_cursor: Cursor = (0, 0)
        self._before_version = 0

    def __enter__(self) -> "Transaction":
        self._before_lines = self.buffer.document.snapshot()
        self._before_cursor = self.buffer.state.cursor
        self._before_version = self.buffer.document.version
        self._span_cm = telemetry.span(
            name=f"buffer::{self.label}",
            component=True,
            metadata={"buffer": self.buffer.name},
        )
        self._span_cm.__enter__()
        return self

    def commit(self) -> BufferDelta:
        document = self.buffer.document
        changed = document.version != self._before_version
        if changed:
            self.buffer.undo_timeline.record(
                UndoEntry(
                    kind=self.kind,
                    label=self.label,
                    lines=self._before_lines,
                    cursor_before=self._before_cursor,
                    cursor_after=self.buffer.state.cursor,
                )
            )
        return BufferDelta(
            version=document.version,
            cursor=self.buffer.state.cursor,
            label=self.label,
            changed=changed,
        )

    def __exit__(self, exc_type, exc, tb) -> bool:
        if self._span_cm is not None:
            self._span_cm.__exit__(exc_type, exc, tb)
        return False
