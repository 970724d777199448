"""Undo/redo history for buffer operations."""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass
from enum import Enum
from typing import Deque, List, Optional, Tuple

from .state import Cursor

DEFAULT_CAPACITY = 1000


class ActionKind(str, Enum):
    INSERT = "insert"
    DELETE = "delete"
    JOIN = "join"
    SPLIT = "split"
    REPLACE = "replace"
    REDO = "redo"


@dataclass(frozen=True, slots=True)
class UndoEntry:
    """Snapshot of the line array and cursor to return to.

    ``lines`` and ``cursor_before`` describe the state *before* the action;
    ``cursor_after`` is where the action left the cursor.
    """

    kind: ActionKind
    label: str
    lines: Tuple[str, ...]
    cursor_before: Cursor
    cursor_after: Cursor


class UndoTimeline:
    """Two bounded stacks; a fresh record always clears the redo side."""

    def __init__(self, capacity: int = DEFAULT_CAPACITY) -> None:
        if capacity <= 0:
            raise ValueError("capacity must be positive")
        self.capacity = capacity
        self._undo: Deque[UndoEntry] = deque(maxlen=capacity)
        self._redo: List[UndoEntry] = []

    def __len__(self) -> int:
        return len(self._undo)

    @property
    def redo_depth(self) -> int:
        return len(self._redo)

    def entries(self) -> Tuple[UndoEntry, ...]:
        return tuple(self._undo)

    def record(self, entry: UndoEntry) -> None:
        # deque(maxlen) drops the oldest entry on overflow
        self._undo.append(entry)
        self._redo.clear()

    def clear(self) -> None:
        self._undo.clear()
        self._redo.clear()

    def can_undo(self) -> bool:
        return bool(self._undo)

    def can_redo(self) -> bool:
        return bool(self._redo)

    def undo(self, current: UndoEntry) -> Optional[UndoEntry]:
        """Pop the newest entry, parking ``current`` on the redo stack."""

        if not self._undo:
            return None
        entry = self._undo.pop()
        self._redo.append(current)
        return entry

    def redo(self, current: UndoEntry) -> Optional[UndoEntry]:
        """Pop the newest redo entry, parking ``current`` on the undo stack."""

        if not self._redo:
            return None
        entry = self._redo.pop()
        self._undo.append(current)
        return entry
