"""Core action implementations shared across modes."""

from __future__ import annotations

from typing import TYPE_CHECKING

from modedit.modes.base_mode import ModeContext, ModeKind, ModeResult
from modedit.runtime import telemetry

if TYPE_CHECKING:
    from modedit.keymaps import ResolutionMatch

QUIT_REFUSED = "Unsaved changes! Use :q! to force quit"


def enter_insert_mode(context: ModeContext, match: ResolutionMatch) -> ModeResult:
    del context, match
    return ModeResult(consumed=True, switch_to=ModeKind.INSERT, message="enter_insert")


def exit_to_normal_mode(context: ModeContext, match: ResolutionMatch) -> ModeResult:
    del context, match
    return ModeResult(consumed=True, switch_to=ModeKind.NORMAL, message="exit_to_normal")


def enter_command_mode(context: ModeContext, match: ResolutionMatch) -> ModeResult:
    del context, match
    return ModeResult(consumed=True, switch_to=ModeKind.COMMAND, message="enter_command")


def enter_search_mode(context: ModeContext, match: ResolutionMatch) -> ModeResult:
    del context, match
    return ModeResult(consumed=True, switch_to=ModeKind.SEARCH, message="enter_search")


def noop_action(context: ModeContext, match: ResolutionMatch) -> ModeResult:
    del context, match
    return ModeResult(consumed=True, status="noop")


# -- movement ---------------------------------------------------------------


def _mover(d_row: int, d_col: int):
    def move(context: ModeContext, match: ResolutionMatch) -> ModeResult:
        del match
        context.buffer.move_by(d_row, d_col)
        return ModeResult(consumed=True, status="moved")

    move.__name__ = f"move_{d_row}_{d_col}"
    return move


move_left = _mover(0, -1)
move_right = _mover(0, 1)
move_up = _mover(-1, 0)
move_down = _mover(1, 0)


def move_line_start(context: ModeContext, match: ResolutionMatch) -> ModeResult:
    del match
    context.buffer.move_line_start()
    return ModeResult(consumed=True, status="moved")


def move_line_end(context: ModeContext, match: ResolutionMatch) -> ModeResult:
    del match
    context.buffer.move_line_end()
    return ModeResult(consumed=True, status="moved")


def move_document_start(context: ModeContext, match: ResolutionMatch) -> ModeResult:
    del match
    context.buffer.move_to(0, 0)
    return ModeResult(consumed=True, status="moved")


def move_document_end(context: ModeContext, match: ResolutionMatch) -> ModeResult:
    del match
    buffer = context.buffer
    buffer.move_to(buffer.document.line_count - 1, 0)
    return ModeResult(consumed=True, status="moved")


# -- history ----------------------------------------------------------------


def undo(context: ModeContext, match: ResolutionMatch) -> ModeResult:
    del match
    if not context.buffer.undo():
        context.notify("Nothing to undo")
        return ModeResult(consumed=True, status="noop", message="nothing_to_undo")
    return ModeResult(consumed=True, status="undo")


def redo(context: ModeContext, match: ResolutionMatch) -> ModeResult:
    del match
    if not context.buffer.redo():
        context.notify("Nothing to redo")
        return ModeResult(consumed=True, status="noop", message="nothing_to_redo")
    return ModeResult(consumed=True, status="redo")


def join_lines(context: ModeContext, match: ResolutionMatch) -> ModeResult:
    del match
    delta = context.buffer.join_with_next()
    return ModeResult(consumed=True, status="joined" if delta.changed else "noop")


# -- session ----------------------------------------------------------------


def request_quit(context: ModeContext, *, force: bool = False) -> ModeResult:
    """Flag the session for exit unless unsaved edits would be lost."""

    if context.buffer.dirty and not force:
        context.notify(QUIT_REFUSED, "warning")
        telemetry.record_event(
            "session.quit_refused",
            level="warning",
            data={"filename": context.session.filename},
        )
        return ModeResult(
            consumed=True, switch_to=ModeKind.NORMAL, status="quit_refused"
        )
    context.session.quit_requested = True
    telemetry.record_event("session.quit", data={"forced": force})
    return ModeResult(consumed=True, switch_to=ModeKind.NORMAL, status="quit")


def quit_editor(context: ModeContext, match: ResolutionMatch) -> ModeResult:
    del match
    return request_quit(context)


def toggle_help(context: ModeContext, match: ResolutionMatch) -> ModeResult:
    del match
    context.session.help_visible = not context.session.help_visible
    return ModeResult(consumed=True, status="help")


__all__ = [
    "QUIT_REFUSED",
    "enter_insert_mode",
    "exit_to_normal_mode",
    "enter_command_mode",
    "enter_search_mode",
    "noop_action",
    "move_left",
    "move_right",
    "move_up",
    "move_down",
    "move_line_start",
    "move_line_end",
    "move_document_start",
    "move_document_end",
    "undo",
    "redo",
    "join_lines",
    "request_quit",
    "quit_editor",
    "toggle_help",
]
