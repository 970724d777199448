"""Coordinate helpers shared across buffer services."""

from __future__ import annotations

from .document import BufferDocument
from .state import Cursor


def clamp_cursor(document: BufferDocument, cursor: Cursor) -> Cursor:
    """Pull ``cursor`` back inside the document instead of raising."""

    row, col = cursor
    row = document.clamp_row(row)
    return row, document.clamp_col(row, col)
