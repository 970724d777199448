from __future__ import annotations

from typing import List

from modedit.adapters.textual import TextualUIHooks, TextualVimAdapter
from modedit.editor import create_editor
from modedit.modes import ModeKind


def make_adapter(text: str = "", **hooks) -> TextualVimAdapter:
    manager = create_editor(text=text)
    hooks.setdefault("update_buffer", lambda view: None)
    return TextualVimAdapter(manager, TextualUIHooks(**hooks))


def type_keys(adapter: TextualVimAdapter, keys: str) -> None:
    for key in keys:
        adapter.handle_textual_key(key, text=key)


def test_adapter_updates_buffer_and_status() -> None:
    updates: List[str] = []
    statuses: List[str] = []
    adapter = make_adapter(
        update_buffer=lambda view: updates.append(view.text),
        update_status=lambda status: statuses.append(status),
    )

    adapter.handle_textual_key("i")
    type_keys(adapter, "ok")
    adapter.handle_textual_key("ESC")

    assert updates[-1] == "ok\n"
    assert statuses[0].startswith("-- NORMAL -- [New File]")
    assert any(status.startswith("-- INSERT --") for status in statuses)
    assert statuses[-1] == "-- NORMAL -- [New File] [+]  1:3"


def test_adapter_relays_command_events() -> None:
    command_lines: List[str] = []
    events: List[tuple[str, object | None]] = []
    adapter = make_adapter(
        "one two",
        show_command=lambda text: command_lines.append(text),
        handle_event=lambda name, payload: events.append((name, payload)),
    )

    type_keys(adapter, ":wc")
    assert command_lines[-1] == ":wc"
    adapter.handle_textual_key("ENTER")

    assert command_lines[-1] == ""
    assert ("command.submit", "wc") in events
    assert adapter.session.status_text == "Lines: 1 | Words: 2 | Characters: 7"


def test_adapter_reports_unknown_command() -> None:
    events: List[tuple[str, object | None]] = []
    adapter = make_adapter(handle_event=lambda name, payload: events.append((name, payload)))

    type_keys(adapter, ":bogus")
    adapter.handle_textual_key("ENTER")

    assert ("command.error", "bogus") in events
    assert adapter.status_line().endswith("Unknown command: bogus")


def test_adapter_requests_exit_on_quit() -> None:
    exits: List[bool] = []
    adapter = make_adapter(request_exit=lambda: exits.append(True))

    type_keys(adapter, ":q")
    adapter.handle_textual_key("ENTER")

    assert exits == [True]
    assert adapter.session.quit_requested is True


def test_adapter_refuses_quit_with_unsaved_changes() -> None:
    exits: List[bool] = []
    adapter = make_adapter(request_exit=lambda: exits.append(True))
    adapter.handle_textual_key("i")
    type_keys(adapter, "x")
    adapter.handle_textual_key("ESC")

    result = adapter.handle_textual_key("q", modifiers=("ctrl",))

    assert result.status == "quit_refused"
    assert exits == []
    assert "Unsaved changes!" in adapter.status_line()


def test_adapter_clears_status_on_next_key() -> None:
    adapter = make_adapter("abc")
    type_keys(adapter, ":wc")
    adapter.handle_textual_key("ENTER")
    assert adapter.session.status_text

    adapter.handle_textual_key("l")

    assert adapter.session.status_text == ""


def test_adapter_help_uses_command_line() -> None:
    adapter = make_adapter()

    type_keys(adapter, ":help")
    adapter.handle_textual_key("ENTER")

    assert adapter.session.help_visible is True
    assert adapter.command_line().startswith("Normal:")
    assert "\n" not in adapter.status_line()


def test_adapter_mode_label_for_prompts() -> None:
    adapter = make_adapter()

    type_keys(adapter, ":new")
    adapter.handle_textual_key("ENTER")

    assert adapter.manager.current is ModeKind.FILENAME_PROMPT
    assert adapter.mode_label() == "FILENAME PROMPT"
    assert adapter.command_line() == "New file: "


def test_adapter_resize_scrolls_viewport() -> None:
    adapter = make_adapter("\n".join(str(n) for n in range(30)))

    adapter.resize(40, 5)
    adapter.handle_textual_key("G")

    viewport = adapter.manager.context.buffer.state.viewport
    assert (viewport.width, viewport.height) == (40, 5)
    assert viewport.scroll_top == 25


def test_adapter_process_timeouts_without_pending() -> None:
    adapter = make_adapter()

    assert adapter.process_timeouts() == {}
