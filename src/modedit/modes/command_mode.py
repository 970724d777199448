"""Command-line mode: ``:verb args`` typed a character at a time."""

from __future__ import annotations

from .base_mode import ModeKind
from .prompt_mode import LinePromptMode
from .scratch import CommandScratch


class CommandMode(LinePromptMode):
    kind = ModeKind.COMMAND
    scratch_type = CommandScratch
    prompt = ":"

    @property
    def current_command(self) -> str:
        return self.text
