from __future__ import annotations

import time
from typing import Any, Dict, Optional

import pytest

from modedit.buffer import Buffer
from modedit.keymaps import (
    Binding,
    KeySequence,
    KeymapRegistry,
    KeymapResolver,
    load_default_keymaps,
)
from modedit.modes import (
    CommandMode,
    CommandScratch,
    ConfirmMode,
    ConfirmScratch,
    DeleteFile,
    InsertMode,
    InsertScratch,
    KeyInput,
    ModeBus,
    ModeContext,
    ModeKind,
    NormalMode,
    SearchMode,
)
from modedit.modes import mode_manager
from modedit.modes.mode_manager import ModeManager


def make_context(
    registry: KeymapRegistry,
    resolver: KeymapResolver,
    *,
    buffer: Optional[Buffer] = None,
) -> ModeContext:
    extras: Dict[str, Any] = {
        "keymap_registry": registry,
        "keymap_resolver": resolver,
        "keymap_flags": {},
    }
    return ModeContext(buffer=buffer or Buffer(), bus=ModeBus(), extras=extras)


def make_defaults() -> tuple[KeymapRegistry, KeymapResolver]:
    registry = KeymapRegistry()
    load_default_keymaps(registry)
    return registry, KeymapResolver(registry)


def make_manager(text: str = "") -> ModeManager:
    context = ModeContext(buffer=Buffer.from_text(text), bus=ModeBus())
    return ModeManager.with_default_modes(context)


def press(manager: ModeManager, *keys: str) -> None:
    for key in keys:
        text = key if len(key) == 1 else None
        manager.handle_key(KeyInput(key=key, text=text))


def test_normal_mode_uses_keymap_binding() -> None:
    registry, resolver = make_defaults()
    context = make_context(registry, resolver)
    mode = NormalMode(context)

    result = mode.handle_key(KeyInput(key="i"))

    assert result.switch_to == ModeKind.INSERT
    assert result.switch_to == "insert"
    assert result.consumed is True


def test_insert_mode_escape_binding() -> None:
    registry, resolver = make_defaults()
    context = make_context(registry, resolver)
    mode = InsertMode(context)

    result = mode.handle_key(KeyInput(key="ESC"))

    assert result.switch_to == ModeKind.NORMAL
    assert result.consumed is True


def test_normal_mode_pending_sequence() -> None:
    registry, resolver = make_defaults()
    buffer = Buffer.from_text("one\ntwo\nthree")
    buffer.move_to(2, 3)
    context = make_context(registry, resolver, buffer=buffer)
    mode = NormalMode(context)

    pending = mode.handle_key(KeyInput(key="g"))
    assert pending.status == "pending"
    assert pending.consumed is True

    match = mode.handle_key(KeyInput(key="g"))
    assert match.status == "moved"
    assert buffer.cursor == (0, 0)


def test_normal_mode_unbound_key_is_a_miss() -> None:
    registry, resolver = make_defaults()
    context = make_context(registry, resolver)
    mode = NormalMode(context)

    result = mode.handle_key(KeyInput(key="z", text="z"))

    assert result.consumed is False
    assert result.status == "miss"
    assert context.buffer.lines == ("",)


def test_pending_sequence_timeout_via_mode_manager(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    registry, resolver = make_defaults()
    context = make_context(registry, resolver)
    manager = ModeManager(
        context,
        keymap_registry=registry,
        keymap_resolver=resolver,
        load_defaults=False,
    )
    manager.register_mode(NormalMode)

    pending = manager.handle_key(KeyInput(key="g"))
    assert pending.status == "pending"
    assert pending.timeout_ms is not None

    assert manager.process_timeouts() == {}

    later = time.monotonic() + 60
    monkeypatch.setattr(mode_manager.time, "monotonic", lambda: later)
    timeouts = manager.process_timeouts()
    assert ModeKind.NORMAL in timeouts
    timeout_result = timeouts[ModeKind.NORMAL]
    assert timeout_result.status == "timeout"
    assert timeout_result.consumed is False


def test_normal_mode_custom_default_timeout(monkeypatch: pytest.MonkeyPatch) -> None:
    registry, resolver = make_defaults()
    # Force resolver to skip timeout hints so the mode fallback is used.
    monkeypatch.setattr(KeymapResolver, "_pending_timeout", lambda self, node: None)
    context = make_context(registry, resolver)
    mode = NormalMode(context, default_pending_timeout_ms=250)

    pending = mode.handle_key(KeyInput(key="g"))

    assert pending.status == "pending"
    assert pending.timeout_ms == 250


def test_mode_manager_forwards_mode_kwargs(monkeypatch: pytest.MonkeyPatch) -> None:
    registry, resolver = make_defaults()
    monkeypatch.setattr(KeymapResolver, "_pending_timeout", lambda self, node: None)
    context = make_context(registry, resolver)
    manager = ModeManager(
        context,
        keymap_registry=registry,
        keymap_resolver=resolver,
        load_defaults=False,
    )
    manager.register_mode(NormalMode, default_pending_timeout_ms=300)

    pending = manager.handle_key(KeyInput(key="g"))

    assert pending.timeout_ms == 300


def test_mode_manager_rejects_duplicate_mode() -> None:
    manager = make_manager()

    with pytest.raises(ValueError):
        manager.register_mode(NormalMode)


def test_mode_manager_extra_binding_overrides_sequence() -> None:
    registry = KeymapRegistry()
    custom_binding = Binding(
        id="normal.g_g",
        mode="normal",
        sequence=KeySequence.from_strings("g", "g"),
        action_id="core.enter_insert",
    )
    load_default_keymaps(registry, per_mode_overrides={"normal": (custom_binding,)})
    resolver = KeymapResolver(registry)
    context = make_context(registry, resolver)
    manager = ModeManager(
        context, keymap_registry=registry, keymap_resolver=resolver, load_defaults=False
    )
    manager.register_mode(NormalMode)
    manager.register_mode(InsertMode)

    manager.handle_key(KeyInput(key="g"))
    result = manager.handle_key(KeyInput(key="g"))

    assert result.switch_to == ModeKind.INSERT
    assert manager.current is ModeKind.INSERT


def test_command_mode_text_entry_and_submit() -> None:
    registry, resolver = make_defaults()
    context = make_context(registry, resolver)
    submitted: list[str] = []
    context.bus.subscribe("command.submit", lambda payload: submitted.append(payload))
    mode = CommandMode(context)
    mode.on_enter(ModeKind.NORMAL)

    mode.handle_key(KeyInput(key="w", text="w"))
    mode.handle_key(KeyInput(key="c", text="c"))
    assert mode.current_command == "wc"
    result = mode.handle_key(KeyInput(key="ENTER"))

    assert result.switch_to == ModeKind.NORMAL
    assert submitted == ["wc"]
    assert context.session.status_text == "Lines: 1 | Words: 0 | Characters: 0"


def test_command_mode_backspace_edits_line() -> None:
    registry, resolver = make_defaults()
    context = make_context(registry, resolver)
    mode = CommandMode(context)
    mode.on_enter(ModeKind.NORMAL)

    for key in "wx":
        mode.handle_key(KeyInput(key=key, text=key))
    mode.handle_key(KeyInput(key="BACKSPACE"))
    mode.handle_key(KeyInput(key="BACKSPACE"))
    result = mode.handle_key(KeyInput(key="BACKSPACE"))

    assert mode.text == ""
    assert result.status == "editing"


def test_escape_leaves_every_mode_and_clears_scratch() -> None:
    manager = make_manager("hello")
    entries = {
        ModeKind.INSERT: ("i",),
        ModeKind.COMMAND: (":", "w"),
        ModeKind.SEARCH: ("/", "h"),
    }
    for kind, keys in entries.items():
        press(manager, *keys)
        assert manager.current is kind
        assert manager.context.scratch is not None

        press(manager, "ESC")

        assert manager.current is ModeKind.NORMAL
        assert manager.context.scratch is None

    for kind in (ModeKind.FILENAME_PROMPT, ModeKind.RENAME_PROMPT, ModeKind.CONFIRM_PROMPT):
        manager.switch_mode(kind)
        press(manager, "<Esc>")
        assert manager.current is ModeKind.NORMAL
        assert manager.context.scratch is None


def test_escape_in_normal_mode_is_a_noop() -> None:
    manager = make_manager("hello")

    result = manager.handle_key(KeyInput(key="ESC"))

    assert result.status == "noop"
    assert manager.current is ModeKind.NORMAL


def test_scratch_types_follow_active_mode() -> None:
    manager = make_manager()

    press(manager, "i")
    assert isinstance(manager.context.scratch, InsertScratch)
    press(manager, "ESC", ":")
    assert isinstance(manager.context.scratch, CommandScratch)
    press(manager, "ESC")
    manager.switch_mode(ModeKind.CONFIRM_PROMPT, DeleteFile("x.txt"))
    assert isinstance(manager.context.scratch, ConfirmScratch)
    assert manager.context.scratch.action == DeleteFile("x.txt")


def test_search_mode_prompt_text() -> None:
    manager = make_manager("abc")

    press(manager, "/", "b", "c")

    active = manager.active_mode
    assert isinstance(active, SearchMode)
    assert active.prompt + active.text == "/bc"


def test_confirm_mode_swallows_other_keys() -> None:
    manager = make_manager()
    manager.switch_mode(ModeKind.CONFIRM_PROMPT, DeleteFile("x.txt"))

    result = manager.handle_key(KeyInput(key="q", text="q"))

    assert result.status == "awaiting_confirm"
    assert isinstance(manager.active_mode, ConfirmMode)
    assert manager.context.session.status_text == "Delete x.txt? (y/n)"


def test_insert_mode_types_text_and_returns_to_normal() -> None:
    manager = make_manager()

    press(manager, "i", "h", "i", "ESC")

    assert manager.context.buffer.lines == ("hi",)
    assert manager.context.buffer.dirty is True
    assert manager.current is ModeKind.NORMAL


def test_insert_mode_ignores_ctrl_chords() -> None:
    manager = make_manager()
    press(manager, "i")

    result = manager.handle_key(KeyInput(key="x", text="x", modifiers=("ctrl",)))

    assert result.consumed is False
    assert manager.context.buffer.lines == ("",)
