"""Typed per-mode scratch payloads and the pending confirm actions."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, List, Optional, Union

if TYPE_CHECKING:
    from modedit.actions.completion import CompletionSession


@dataclass(frozen=True, slots=True)
class DeleteFile:
    path: str


@dataclass(frozen=True, slots=True)
class OverwriteFile:
    path: str


PendingAction = Union[DeleteFile, OverwriteFile]


@dataclass(slots=True)
class LineScratch:
    """Single-line text being typed at a prompt."""

    chars: List[str] = field(default_factory=list)

    @property
    def text(self) -> str:
        return "".join(self.chars)

    def append(self, text: str) -> None:
        self.chars.extend(text)

    def backspace(self) -> bool:
        if not self.chars:
            return False
        self.chars.pop()
        return True


@dataclass(slots=True)
class CommandScratch(LineScratch):
    pass


@dataclass(slots=True)
class SearchScratch(LineScratch):
    pass


@dataclass(slots=True)
class FilenameScratch(LineScratch):
    pass


@dataclass(slots=True)
class RenameScratch(LineScratch):
    source: Optional[str] = None


@dataclass(slots=True)
class ConfirmScratch:
    action: Optional[PendingAction] = None


@dataclass(slots=True)
class InsertScratch:
    completion: Optional["CompletionSession"] = None


Scratch = Union[
    CommandScratch,
    SearchScratch,
    FilenameScratch,
    RenameScratch,
    ConfirmScratch,
    InsertScratch,
]


def describe_pending(action: PendingAction) -> str:
    if isinstance(action, DeleteFile):
        return f"Delete {action.path}? (y/n)"
    return f"Overwrite {action.path}? (y/n)"


__all__ = [
    "CommandScratch",
    "ConfirmScratch",
    "DeleteFile",
    "FilenameScratch",
    "InsertScratch",
    "LineScratch",
    "OverwriteFile",
    "PendingAction",
    "RenameScratch",
    "Scratch",
    "SearchScratch",
    "describe_pending",
]
