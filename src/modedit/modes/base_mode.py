"""Base classes and shared utilities for editor modes."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Callable, Dict, Optional, Tuple

from modedit.buffer import Buffer
from modedit.runtime import telemetry
from modedit.runtime.session import EditorSession, Notice, NoticeLevel
from modedit.search import SearchEngine

from .scratch import Scratch

if TYPE_CHECKING:
    from modedit.actions.completion import CompletionProvider


class ModeKind(str, Enum):
    """Closed set of input modes; exactly one is active at a time."""

    NORMAL = "normal"
    INSERT = "insert"
    COMMAND = "command"
    SEARCH = "search"
    FILENAME_PROMPT = "filename_prompt"
    RENAME_PROMPT = "rename_prompt"
    CONFIRM_PROMPT = "confirm_prompt"


@dataclass(slots=True)
class KeyInput:
    """Normalized key event passed to modes."""

    key: str
    modifiers: Tuple[str, ...] = ()
    text: Optional[str] = None


@dataclass(slots=True)
class ModeResult:
    """Result returned from ``Mode.handle_key``.

    ``payload`` travels with ``switch_to`` into the next mode's ``on_enter``
    (initial prompt text, the pending confirm action).
    """

    consumed: bool
    switch_to: Optional[ModeKind] = None
    status: str = "ok"
    message: Optional[str] = None
    timeout_ms: Optional[int] = None
    payload: object | None = None


class ModeBus:
    """Minimal event bus letting modes exchange structured signals."""

    def __init__(self) -> None:
        self._subscribers: Dict[str, list[Callable[[object], None]]] = {}

    def subscribe(self, event: str, callback: Callable[[object], None]) -> None:
        self._subscribers.setdefault(event, []).append(callback)

    def emit(self, event: str, payload: object | None = None) -> None:
        for callback in self._subscribers.get(event, []):
            callback(payload)


@dataclass(slots=True)
class ModeContext:
    """The single state value every handler receives."""

    buffer: Buffer
    bus: ModeBus
    session: EditorSession = field(default_factory=EditorSession)
    search: Optional[SearchEngine] = None
    completions: Optional["CompletionProvider"] = None
    scratch: Optional[Scratch] = None
    extras: Dict[str, object] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if self.search is None:
            self.search = SearchEngine(self.buffer)
        if self.completions is None:
            from modedit.actions.completion import BufferWordProvider

            self.completions = BufferWordProvider(self.buffer)

    @property
    def search_engine(self) -> SearchEngine:
        assert self.search is not None
        return self.search

    def notify(self, message: str, level: NoticeLevel = "info") -> None:
        notice = Notice(message=message, level=level)
        self.session.post(notice)
        self.bus.emit("status.notice", notice)
        telemetry.record_event(
            "status.notice",
            level="warning" if level != "info" else "debug",
            data={"message": message, "level": level},
        )


class Mode:
    """Base class all concrete editor modes inherit from."""

    kind: ModeKind = ModeKind.NORMAL

    def __init__(self, context: ModeContext) -> None:
        self.context = context

    @property
    def name(self) -> str:
        return self.kind.value

    def on_enter(
        self, previous: Optional[ModeKind], payload: object | None = None
    ) -> None:  # pragma: no cover - default no-op
        del previous, payload

    def on_exit(
        self, next_mode: Optional[ModeKind]
    ) -> None:  # pragma: no cover - default no-op
        del next_mode

    def handle_key(
        self, key: KeyInput
    ) -> ModeResult:  # pragma: no cover - abstract override
        raise NotImplementedError

    def handle_timeout(self) -> ModeResult:
        """Invoked by the manager when a pending key sequence expires."""

        return ModeResult(consumed=False, status="timeout")
