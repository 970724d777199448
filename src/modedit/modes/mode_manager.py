"""Mode manager coordinating Normal/Insert/prompt pipelines."""

from __future__ import annotations

from dataclasses import dataclass
import time
from typing import Dict, Optional, Type

from modedit.runtime import telemetry

from modedit.keymaps import KeymapRegistry, KeymapResolver, load_default_keymaps

from .base_mode import KeyInput, Mode, ModeContext, ModeKind, ModeResult
from .command_mode import CommandMode
from .confirm_mode import ConfirmMode
from .insert_mode import InsertMode
from .normal_mode import NormalMode
from .prompt_mode import FilenamePromptMode, RenamePromptMode
from .search_mode import SearchMode

DEFAULT_MODES: tuple[Type[Mode], ...] = (
    NormalMode,
    InsertMode,
    CommandMode,
    SearchMode,
    FilenamePromptMode,
    RenamePromptMode,
    ConfirmMode,
)


@dataclass
class PendingTimeout:
    deadline: float
    timeout_ms: int
    generation: int


class ModeManager:
    """Owns active mode, handles transitions, and dispatches key events."""

    def __init__(
        self,
        context: ModeContext,
        *,
        keymap_registry: KeymapRegistry | None = None,
        keymap_resolver: KeymapResolver | None = None,
        load_defaults: bool = True,
    ) -> None:
        self.context = context
        self._modes: Dict[ModeKind, Mode] = {}
        self._active: Optional[ModeKind] = None
        self.logger = telemetry.get_logger("modedit.modes")
        self.keymap_registry = keymap_registry or KeymapRegistry(
            logger_name="modedit.keymaps"
        )
        if load_defaults and keymap_registry is None:
            load_default_keymaps(self.keymap_registry)
        self.keymap_resolver = keymap_resolver or KeymapResolver(
            self.keymap_registry, logger_name="modedit.keymaps"
        )
        self.context.extras.setdefault("keymap_registry", self.keymap_registry)
        self.context.extras.setdefault("keymap_resolver", self.keymap_resolver)
        self.context.extras.setdefault("keymap_flags", {})
        self.context.extras.setdefault("mode_manager", self)
        self._pending_timeouts: Dict[ModeKind, PendingTimeout] = {}
        self._timer_counter = 0

    @classmethod
    def with_default_modes(cls, context: ModeContext, **kwargs: object) -> "ModeManager":
        """Manager with every built-in mode registered, starting in Normal."""

        manager = cls(context, **kwargs)  # type: ignore[arg-type]
        for mode_cls in DEFAULT_MODES:
            manager.register_mode(mode_cls)
        return manager

    @property
    def active_mode(self) -> Optional[Mode]:
        if self._active is None:
            return None
        return self._modes.get(self._active)

    @property
    def current(self) -> Optional[ModeKind]:
        return self._active

    def mode(self, kind: ModeKind) -> Mode:
        return self._modes[kind]

    def register_mode(
        self,
        mode_cls: Type[Mode],
        /,
        *mode_args: object,
        **mode_kwargs: object,
    ) -> Mode:
        mode = mode_cls(self.context, *mode_args, **mode_kwargs)
        if mode.kind in self._modes:
            raise ValueError(f"Mode '{mode.name}' already registered")
        self._modes[mode.kind] = mode
        if self._active is None:
            self._active = mode.kind
            mode.on_enter(None)
        return mode

    def switch_mode(self, kind: ModeKind, payload: object | None = None) -> None:
        kind = ModeKind(kind)
        if kind not in self._modes:
            raise KeyError(f"Unknown mode '{kind.value}'")
        previous = self.active_mode
        if previous and previous.kind is kind:
            return
        if previous:
            self.cancel_timeout(previous.kind)
            previous.on_exit(kind)
        self._active = kind
        self._modes[kind].on_enter(previous.kind if previous else None, payload)
        self.cancel_timeout(kind)
        telemetry.record_event(
            "mode.switch",
            level="debug",
            data={
                "mode": kind.value,
                "previous": previous.name if previous else None,
            },
        )

    def handle_key(self, key: KeyInput) -> ModeResult:
        mode = self.active_mode
        if mode is None:
            raise RuntimeError("No active mode registered")
        with telemetry.span(
            name=f"mode::{mode.name}",
            component=True,
            metadata={"key": key.key, "mode": mode.name},
        ):
            result = mode.handle_key(key)
        return self._after_mode_result(mode, result)

    def resize(self, width: int, height: int) -> None:
        self.context.buffer.resize(width, height)

    def _after_mode_result(self, mode: Mode, result: ModeResult) -> ModeResult:
        if result.timeout_ms:
            self.arm_timeout(mode.kind, result.timeout_ms)
        else:
            self.cancel_timeout(mode.kind)
        if result.switch_to:
            self.switch_mode(result.switch_to, result.payload)
        self.context.buffer.reconcile()
        return result

    def arm_timeout(self, kind: ModeKind, timeout_ms: int) -> None:
        self._timer_counter += 1
        deadline = time.monotonic() + (timeout_ms / 1000.0)
        self._pending_timeouts[kind] = PendingTimeout(
            deadline=deadline,
            timeout_ms=timeout_ms,
            generation=self._timer_counter,
        )

    def cancel_timeout(self, kind: ModeKind) -> None:
        self._pending_timeouts.pop(kind, None)

    def process_timeouts(self) -> Dict[ModeKind, ModeResult]:
        now = time.monotonic()
        expired = {
            kind: timer
            for kind, timer in self._pending_timeouts.items()
            if timer.deadline <= now
        }
        results: Dict[ModeKind, ModeResult] = {}
        for kind, timer in expired.items():
            results[kind] = self._trigger_timeout(kind, timer.generation)
        return results

    def _trigger_timeout(self, kind: ModeKind, generation: int) -> ModeResult:
        timer = self._pending_timeouts.get(kind)
        if not timer or timer.generation != generation:
            return ModeResult(consumed=False, status="timeout")
        self._pending_timeouts.pop(kind, None)
        mode = self._modes.get(kind)
        if mode is None:
            return ModeResult(consumed=False, status="timeout")
        with telemetry.span(
            name=f"mode_timeout::{kind.value}",
            component=True,
            metadata={"mode": kind.value},
        ):
            result = mode.handle_timeout()
        return self._after_mode_result(mode, result)


__all__ = ["DEFAULT_MODES", "ModeManager", "PendingTimeout"]
