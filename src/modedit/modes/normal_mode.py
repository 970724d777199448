"""Normal mode: single-key (and short sequence) commands."""

from __future__ import annotations

from .base_mode import ModeKind
from .keymap_helpers import KeymapMode


class NormalMode(KeymapMode):
    kind = ModeKind.NORMAL
