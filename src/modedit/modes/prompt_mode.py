"""Single-line prompt modes (file creation, rename) and their shared base."""

from __future__ import annotations

from typing import Optional, Type

from .base_mode import KeyInput, ModeKind, ModeResult
from .keymap_helpers import KeymapMode, update_flag
from .scratch import FilenameScratch, LineScratch, RenameScratch


class LinePromptMode(KeymapMode):
    """Accumulates one line of text; ENTER and ESC come from the keymaps."""

    scratch_type: Type[LineScratch] = LineScratch
    prompt: str = ""

    @property
    def scratch(self) -> LineScratch:
        current = self.context.scratch
        if not isinstance(current, self.scratch_type):
            current = self.scratch_type()
            self.context.scratch = current
        return current

    @property
    def text(self) -> str:
        return self.scratch.text

    def on_enter(self, previous: Optional[ModeKind], payload: object | None = None) -> None:
        del previous
        scratch = self.scratch_type()
        if isinstance(payload, str):
            scratch.append(payload)
        self.context.scratch = scratch
        update_flag(self.context, f"{self.name}_active", True)
        self.context.bus.emit(f"{self.name}.start", None)

    def on_exit(self, next_mode: Optional[ModeKind]) -> None:
        super().on_exit(next_mode)
        text = self.text
        self.context.scratch = None
        update_flag(self.context, f"{self.name}_active", False)
        self.context.bus.emit(f"{self.name}.end", text)

    def handle_unbound(self, key: KeyInput) -> ModeResult:
        if key.key == "BACKSPACE":
            self.scratch.backspace()
            return ModeResult(consumed=True, status="editing")

        if key.text:
            self.scratch.append(key.text)
            return ModeResult(consumed=True, status="editing")

        return ModeResult(consumed=False, status="miss", message="unhandled")


class FilenamePromptMode(LinePromptMode):
    kind = ModeKind.FILENAME_PROMPT
    scratch_type = FilenameScratch
    prompt = "New file: "


class RenamePromptMode(LinePromptMode):
    kind = ModeKind.RENAME_PROMPT
    scratch_type = RenameScratch
    prompt = "Rename to: "

    def on_enter(self, previous: Optional[ModeKind], payload: object | None = None) -> None:
        super().on_enter(previous, payload)
        scratch = self.scratch
        assert isinstance(scratch, RenameScratch)
        scratch.source = self.context.session.filename


__all__ = ["LinePromptMode", "FilenamePromptMode", "RenamePromptMode"]
