"""Buffer abstractions, file persistence and undo/redo data structures."""

from .buffer import Buffer, BufferDelta, BufferView, Transaction
from .document import BufferDocument, split_lines
from .files import FileOperationError, LoadedFile
from .state import BufferState, Cursor, Viewport
from .undo import ActionKind, UndoEntry, UndoTimeline
from .validation import clamp_cursor

__all__ = [
    "ActionKind",
    "Buffer",
    "BufferDelta",
    "BufferDocument",
    "BufferState",
    "BufferView",
    "Cursor",
    "FileOperationError",
    "LoadedFile",
    "Transaction",
    "UndoEntry",
    "UndoTimeline",
    "Viewport",
    "clamp_cursor",
    "split_lines",
]
