"""Insert-mode editing keys that are not plain text."""

from __future__ import annotations

from typing import TYPE_CHECKING

from modedit.modes.base_mode import ModeContext, ModeResult

if TYPE_CHECKING:
    from modedit.keymaps import ResolutionMatch


def newline(context: ModeContext, match: ResolutionMatch) -> ModeResult:
    del match
    settings = context.session.settings
    context.buffer.split_line(
        indent_unit=settings.indent_unit, auto_indent=settings.auto_indent
    )
    return ModeResult(consumed=True, status="split")


def backspace(context: ModeContext, match: ResolutionMatch) -> ModeResult:
    del match
    delta = context.buffer.backspace()
    return ModeResult(consumed=True, status="deleted" if delta.changed else "noop")


def delete_forward(context: ModeContext, match: ResolutionMatch) -> ModeResult:
    del match
    delta = context.buffer.delete_char_at()
    return ModeResult(consumed=True, status="deleted" if delta.changed else "noop")


__all__ = ["newline", "backspace", "delete_forward"]
