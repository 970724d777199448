"""Assembles a ready-to-drive editor: buffer, session, modes and keymaps."""

from __future__ import annotations

from pathlib import Path
from typing import Optional

from modedit.buffer import Buffer
from modedit.config import EditorSettings
from modedit.modes import ModeBus, ModeContext
from modedit.modes.mode_manager import ModeManager
from modedit.runtime import telemetry
from modedit.runtime.session import EditorSession


def create_editor(
    path: Optional[str] = None,
    *,
    text: Optional[str] = None,
    settings: Optional[EditorSettings] = None,
    settings_path: Optional[Path] = None,
) -> ModeManager:
    """Build a ModeManager with every mode and the default keymaps, in Normal.

    ``path`` is loaded when it exists and otherwise becomes the name of a new
    file. ``text`` seeds an unnamed buffer instead.
    """

    buffer = Buffer.from_text(text or "")
    session = EditorSession(
        settings=settings or EditorSettings(), settings_path=settings_path
    )
    context = ModeContext(buffer=buffer, bus=ModeBus(), session=session)
    manager = ModeManager.with_default_modes(context)
    if path:
        from modedit.actions.files import load_into

        load_into(context, path, missing_ok=True)
    telemetry.record_event(
        "editor.ready",
        data={"filename": session.filename, "lines": buffer.document.line_count},
    )
    return manager


__all__ = ["create_editor"]
