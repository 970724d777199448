"""Explicit control state owned by the event loop."""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass, field
from pathlib import Path
from typing import Deque, Literal, Optional

from modedit.config import EditorSettings

NoticeLevel = Literal["info", "warning", "error"]


@dataclass(frozen=True, slots=True)
class Notice:
    message: str
    level: NoticeLevel = "info"


@dataclass(slots=True)
class EditorSession:
    """Everything about the running session that is not document content.

    ``quit_requested`` is the only way the engine asks the host to exit.
    """

    filename: Optional[str] = None
    settings: EditorSettings = field(default_factory=EditorSettings)
    settings_path: Optional[Path] = None
    status: Optional[Notice] = None
    notices: Deque[Notice] = field(default_factory=lambda: deque(maxlen=100))
    quit_requested: bool = False
    truncated_load: bool = False
    help_visible: bool = False

    def post(self, notice: Notice) -> None:
        self.status = notice
        self.notices.append(notice)

    def clear_status(self) -> None:
        self.status = None

    @property
    def status_text(self) -> str:
        return self.status.message if self.status else ""


__all__ = ["EditorSession", "Notice", "NoticeLevel"]
