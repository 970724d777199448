"""Yes/no prompt guarding one pending destructive action."""

from __future__ import annotations

from typing import Optional

from .base_mode import KeyInput, ModeKind, ModeResult
from .keymap_helpers import KeymapMode, update_flag
from .scratch import ConfirmScratch, DeleteFile, OverwriteFile, describe_pending


class ConfirmMode(KeymapMode):
    kind = ModeKind.CONFIRM_PROMPT

    @property
    def scratch(self) -> ConfirmScratch:
        current = self.context.scratch
        if not isinstance(current, ConfirmScratch):
            current = ConfirmScratch()
            self.context.scratch = current
        return current

    def on_enter(self, previous: Optional[ModeKind], payload: object | None = None) -> None:
        del previous
        action = payload if isinstance(payload, (DeleteFile, OverwriteFile)) else None
        self.context.scratch = ConfirmScratch(action=action)
        update_flag(self.context, "confirm_active", True)
        if action is not None:
            self.context.notify(describe_pending(action), "warning")

    def on_exit(self, next_mode: Optional[ModeKind]) -> None:
        super().on_exit(next_mode)
        self.context.scratch = None
        update_flag(self.context, "confirm_active", False)

    def handle_unbound(self, key: KeyInput) -> ModeResult:
        del key
        return ModeResult(consumed=True, status="awaiting_confirm")
