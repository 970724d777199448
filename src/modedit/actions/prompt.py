"""Actions bound to the filename, rename and confirm prompts."""

from __future__ import annotations

from typing import TYPE_CHECKING

from modedit.modes.base_mode import ModeContext, ModeKind, ModeResult
from modedit.modes.scratch import (
    ConfirmScratch,
    DeleteFile,
    FilenameScratch,
    OverwriteFile,
    RenameScratch,
)
from modedit.runtime import telemetry

from . import files

if TYPE_CHECKING:
    from modedit.keymaps import ResolutionMatch


def submit_filename(context: ModeContext, match: ResolutionMatch) -> ModeResult:
    del match
    scratch = context.scratch
    name = scratch.text if isinstance(scratch, FilenameScratch) else ""
    return files.create(context, name)


def submit_rename(context: ModeContext, match: ResolutionMatch) -> ModeResult:
    del match
    scratch = context.scratch
    if not isinstance(scratch, RenameScratch):
        return files.rename(context, "")
    return files.rename(context, scratch.text, source=scratch.source)


def confirm_accept(context: ModeContext, match: ResolutionMatch) -> ModeResult:
    """Carry out the pending action held by the confirm prompt."""

    del match
    scratch = context.scratch
    action = scratch.action if isinstance(scratch, ConfirmScratch) else None
    telemetry.record_event(
        "confirm.accept", data={"action": type(action).__name__ if action else None}
    )
    if isinstance(action, DeleteFile):
        files.remove(context, action.path)
    elif isinstance(action, OverwriteFile):
        files.write_buffer(context, action.path)
    return ModeResult(consumed=True, switch_to=ModeKind.NORMAL, status="confirmed")


def confirm_reject(context: ModeContext, match: ResolutionMatch) -> ModeResult:
    del match
    scratch = context.scratch
    action = scratch.action if isinstance(scratch, ConfirmScratch) else None
    if isinstance(action, DeleteFile):
        context.notify("Delete cancelled")
    elif isinstance(action, OverwriteFile):
        context.notify("Save cancelled")
    return ModeResult(consumed=True, switch_to=ModeKind.NORMAL, status="cancelled")


__all__ = ["submit_filename", "submit_rename", "confirm_accept", "confirm_reject"]
