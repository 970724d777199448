"""Insert mode: printable keys edit the buffer, the rest go through keymaps."""

from __future__ import annotations

from typing import Optional

from .base_mode import KeyInput, ModeKind, ModeResult
from .keymap_helpers import KeymapMode, update_flag
from .scratch import InsertScratch

COMPLETION_KEYS = frozenset({"TAB", "DOWN", "UP", "ENTER", "RETURN", "ESC", "<Esc>"})


class InsertMode(KeymapMode):
    kind = ModeKind.INSERT

    @property
    def scratch(self) -> InsertScratch:
        current = self.context.scratch
        if not isinstance(current, InsertScratch):
            current = InsertScratch()
            self.context.scratch = current
        return current

    def on_enter(self, previous: Optional[ModeKind], payload: object | None = None) -> None:
        del previous, payload
        self.context.scratch = InsertScratch()
        update_flag(self.context, "completion_active", False)

    def on_exit(self, next_mode: Optional[ModeKind]) -> None:
        super().on_exit(next_mode)
        self.context.scratch = None
        update_flag(self.context, "completion_active", False)

    def handle_key(self, key: KeyInput) -> ModeResult:
        if self.scratch.completion is not None and key.key not in COMPLETION_KEYS:
            self.dismiss_completion()
        return super().handle_key(key)

    def dismiss_completion(self) -> None:
        self.scratch.completion = None
        update_flag(self.context, "completion_active", False)

    def handle_unbound(self, key: KeyInput) -> ModeResult:
        text = key.text
        if not text or "ctrl" in key.modifiers:
            return ModeResult(consumed=False, status="miss", message="unhandled")

        buffer = self.context.buffer
        if len(text) == 1:
            buffer.insert_char(text)
        else:
            buffer.insert_text(text)
        return ModeResult(consumed=True, status="inserted")
