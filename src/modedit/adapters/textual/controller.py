"""Textual-facing controller that wires ModeManager output into UI callbacks."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Dict, Iterable, Optional

from modedit.buffer import BufferView
from modedit.modes import KeyInput, LinePromptMode, ModeKind, ModeResult
from modedit.modes.mode_manager import ModeManager
from modedit.runtime import telemetry
from modedit.runtime.session import Notice


def _noop(*_args, **_kwargs) -> None:  # pragma: no cover - default hook
    return None


@dataclass(slots=True)
class TextualUIHooks:
    """Callbacks invoked by the adapter to update Textual widgets."""

    update_buffer: Callable[[BufferView], None]
    update_status: Callable[[str], None] = _noop
    show_command: Callable[[str], None] = _noop
    handle_event: Callable[[str, object | None], None] = _noop
    request_exit: Callable[[], None] = _noop


BUS_EVENTS = (
    "status.notice",
    "command.submit",
    "command.error",
    "completion.open",
    "completion.accept",
)


class TextualVimAdapter:
    """Bridges ModeManager + bus events to a Textual-friendly surface."""

    def __init__(self, manager: ModeManager, hooks: TextualUIHooks) -> None:
        self.manager = manager
        self.hooks = hooks
        self.logger = telemetry.get_logger("modedit.adapters.textual")
        self._subscribe_events()
        self.refresh()

    @property
    def session(self):
        return self.manager.context.session

    def handle_textual_key(
        self,
        key: str,
        *,
        text: Optional[str] = None,
        modifiers: Iterable[str] = (),
    ) -> ModeResult:
        """Translate a Textual key event into a KeyInput and dispatch it."""

        normalized_modifiers = tuple(str(mod).lower() for mod in modifiers)
        self.session.clear_status()
        result = self.manager.handle_key(
            KeyInput(key=key, text=text, modifiers=normalized_modifiers)
        )
        self.logger.debug(
            f"key={key!r} mode={self.mode_label()} status={result.status}"
        )
        self._after_mode_result(result)
        return result

    def resize(self, width: int, height: int) -> None:
        self.manager.resize(width, height)
        self._refresh_buffer()

    def process_timeouts(self) -> Dict[ModeKind, ModeResult]:
        """Forward expired timers and surface results to the UI."""

        results = self.manager.process_timeouts()
        if results:
            self.refresh()
        return results

    def mode_label(self) -> str:
        active = self.manager.active_mode
        return active.name.upper().replace("_", " ") if active else "?"

    def status_line(self) -> str:
        buffer = self.manager.context.buffer
        filename = self.session.filename or "[New File]"
        row, col = buffer.cursor
        flag = " [+]" if buffer.dirty else ""
        left = f"-- {self.mode_label()} -- {filename}{flag}"
        right = f"{row + 1}:{col + 1}"
        message = self.session.status_text.partition("\n")[0]
        return f"{left}  {right}  {message}".rstrip()

    def command_line(self) -> str:
        active = self.manager.active_mode
        if isinstance(active, LinePromptMode):
            return f"{active.prompt}{active.text}"
        status = self.session.status
        if status is not None and "\n" in status.message:
            return status.message
        return ""

    def refresh(self) -> None:
        self._refresh_buffer()
        self.hooks.update_status(self.status_line())
        self.hooks.show_command(self.command_line())

    def _after_mode_result(self, result: ModeResult) -> None:
        self.refresh()
        if self.session.quit_requested:
            self.hooks.request_exit()

    def _subscribe_events(self) -> None:
        bus = self.manager.context.bus
        for event in BUS_EVENTS:
            bus.subscribe(
                event, lambda payload, name=event: self._handle_event(name, payload)
            )

    def _handle_event(self, name: str, payload: object | None) -> None:
        self.hooks.handle_event(name, payload)
        if name == "status.notice" and isinstance(payload, Notice):
            self.hooks.update_status(self.status_line())

    def _refresh_buffer(self) -> None:
        self.hooks.update_buffer(self.manager.context.buffer.snapshot())


__all__ = ["BUS_EVENTS", "TextualVimAdapter", "TextualUIHooks"]
