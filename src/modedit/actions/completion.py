"""Identifier completion for insert mode.

Suggestions come from a ``CompletionProvider``; the default one offers words
already present in the buffer. A ``CompletionSession`` lives in the insert
scratch while the suggestion list is open.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, List, Optional, Protocol

from modedit.buffer import Buffer
from modedit.buffer.files import detect_language
from modedit.modes.base_mode import ModeContext, ModeResult
from modedit.modes.keymap_helpers import update_flag
from modedit.modes.scratch import InsertScratch

if TYPE_CHECKING:
    from modedit.keymaps import ResolutionMatch

IDENTIFIER = re.compile(r"[^\W\d]\w*")
IDENTIFIER_TAIL = re.compile(r"\w+\Z")
MAX_SUGGESTIONS = 50


@dataclass(frozen=True, slots=True)
class Completion:
    text: str
    kind: str = "word"


class CompletionProvider(Protocol):
    def suggest(self, prefix: str, language: str) -> List[Completion]: ...


class BufferWordProvider:
    """Identifiers already in the document, matched case-insensitively."""

    def __init__(self, buffer: Buffer) -> None:
        self.buffer = buffer

    def suggest(self, prefix: str, language: str) -> List[Completion]:
        del language
        if not prefix:
            return []
        wanted = prefix.lower()
        seen: dict[str, None] = {}
        for line in self.buffer.lines:
            for word in IDENTIFIER.findall(line):
                if word != prefix and word.lower().startswith(wanted):
                    seen.setdefault(word, None)
        return [Completion(word) for word in sorted(seen)[:MAX_SUGGESTIONS]]


def identifier_prefix(line: str, col: int) -> str:
    """The run of identifier characters ending at ``col``."""

    tail = IDENTIFIER_TAIL.search(line, 0, col)
    return tail.group() if tail else ""


@dataclass(slots=True)
class CompletionSession:
    prefix: str
    items: List[Completion] = field(default_factory=list)
    index: int = 0

    @property
    def current(self) -> Completion:
        return self.items[self.index]

    def step(self, delta: int) -> Completion:
        self.index = (self.index + delta) % len(self.items)
        return self.current


def _insert_scratch(context: ModeContext) -> InsertScratch:
    scratch = context.scratch
    if not isinstance(scratch, InsertScratch):
        scratch = InsertScratch()
        context.scratch = scratch
    return scratch


def active_session(context: ModeContext) -> Optional[CompletionSession]:
    scratch = context.scratch
    if isinstance(scratch, InsertScratch):
        return scratch.completion
    return None


def _close(context: ModeContext) -> None:
    _insert_scratch(context).completion = None
    update_flag(context, "completion_active", False)


def open_completion(context: ModeContext) -> Optional[CompletionSession]:
    """Start a session for the identifier before the cursor, if any suggestions exist."""

    if not context.session.settings.auto_complete or context.completions is None:
        return None
    buffer = context.buffer
    row, col = buffer.cursor
    prefix = identifier_prefix(buffer.document.get_line(row), col)
    if not prefix:
        return None
    items = context.completions.suggest(
        prefix, detect_language(context.session.filename)
    )
    if not items:
        return None
    session = CompletionSession(prefix=prefix, items=list(items))
    _insert_scratch(context).completion = session
    update_flag(context, "completion_active", True)
    context.bus.emit("completion.open", session)
    return session


def tab_or_complete(context: ModeContext, match: ResolutionMatch) -> ModeResult:
    del match
    if open_completion(context) is not None:
        return ModeResult(consumed=True, status="completion_open")
    context.buffer.insert_text(context.session.settings.indent_unit)
    return ModeResult(consumed=True, status="inserted")


def completion_next(context: ModeContext, match: ResolutionMatch) -> ModeResult:
    del match
    session = active_session(context)
    if session is not None:
        session.step(1)
    return ModeResult(consumed=True, status="completion")


def completion_previous(context: ModeContext, match: ResolutionMatch) -> ModeResult:
    del match
    session = active_session(context)
    if session is not None:
        session.step(-1)
    return ModeResult(consumed=True, status="completion")


def completion_accept(context: ModeContext, match: ResolutionMatch) -> ModeResult:
    """Splice the selected word over the prefix typed so far."""

    del match
    session = active_session(context)
    _close(context)
    if session is None:
        return ModeResult(consumed=True, status="noop")
    context.buffer.replace_before_cursor(len(session.prefix), session.current.text)
    context.bus.emit("completion.accept", session.current)
    return ModeResult(consumed=True, status="completed")


def completion_dismiss(context: ModeContext, match: ResolutionMatch) -> ModeResult:
    del match
    _close(context)
    return ModeResult(consumed=True, status="completion_dismissed")


__all__ = [
    "BufferWordProvider",
    "Completion",
    "CompletionProvider",
    "CompletionSession",
    "active_session",
    "completion_accept",
    "completion_dismiss",
    "completion_next",
    "completion_previous",
    "identifier_prefix",
    "open_completion",
    "tab_or_complete",
]
