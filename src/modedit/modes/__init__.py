"""Mode state machine: one class per input mode plus shared plumbing."""

from .base_mode import KeyInput, Mode, ModeBus, ModeContext, ModeKind, ModeResult
from .scratch import (
    CommandScratch,
    ConfirmScratch,
    DeleteFile,
    FilenameScratch,
    InsertScratch,
    OverwriteFile,
    PendingAction,
    RenameScratch,
    SearchScratch,
)
from .normal_mode import NormalMode
from .insert_mode import InsertMode
from .command_mode import CommandMode
from .search_mode import SearchMode
from .prompt_mode import FilenamePromptMode, LinePromptMode, RenamePromptMode
from .confirm_mode import ConfirmMode

__all__ = [
    "KeyInput",
    "Mode",
    "ModeBus",
    "ModeContext",
    "ModeKind",
    "ModeResult",
    "CommandScratch",
    "ConfirmScratch",
    "DeleteFile",
    "FilenameScratch",
    "InsertScratch",
    "OverwriteFile",
    "PendingAction",
    "RenameScratch",
    "SearchScratch",
    "NormalMode",
    "InsertMode",
    "CommandMode",
    "SearchMode",
    "LinePromptMode",
    "FilenamePromptMode",
    "RenamePromptMode",
    "ConfirmMode",
]
