"""Built-in keymaps that seed each mode with sensible defaults.

Action handlers are imported when the defaults are loaded, not at module
import, because the action modules themselves depend on the modes package.
"""

from __future__ import annotations

from typing import Iterable, Mapping, Sequence

from .models import ActionRef, Binding, KeySequence
from .registry import KeymapRegistry

ESCAPES = ("ESC", "<Esc>")
PROMPT_MODES = ("command", "search", "filename_prompt", "rename_prompt")
COMPLETION_ACTIVE = ("completion_active",)


def default_actions() -> tuple[ActionRef, ...]:
    from modedit.actions import command, completion, core, editing, prompt, search

    table = (
        ("core.enter_insert", core.enter_insert_mode, "Enter insert mode"),
        ("core.exit_to_normal", core.exit_to_normal_mode, "Return to normal mode"),
        ("core.enter_command", core.enter_command_mode, "Enter command-line mode"),
        ("core.enter_search", core.enter_search_mode, "Search forward"),
        ("core.move_left", core.move_left, "Cursor left"),
        ("core.move_right", core.move_right, "Cursor right"),
        ("core.move_up", core.move_up, "Cursor up"),
        ("core.move_down", core.move_down, "Cursor down"),
        ("core.line_start", core.move_line_start, "Start of line"),
        ("core.line_end", core.move_line_end, "End of line"),
        ("core.document_start", core.move_document_start, "First line"),
        ("core.document_end", core.move_document_end, "Last line"),
        ("core.undo", core.undo, "Undo"),
        ("core.redo", core.redo, "Redo"),
        ("core.join_lines", core.join_lines, "Join with next line"),
        ("core.quit", core.quit_editor, "Quit (refused with unsaved changes)"),
        ("core.help", core.toggle_help, "Toggle help"),
        ("core.noop", core.noop_action, "Do nothing"),
        ("edit.newline", editing.newline, "Split line"),
        ("edit.backspace", editing.backspace, "Delete before cursor"),
        ("edit.delete", editing.delete_forward, "Delete under cursor"),
        ("completion.tab", completion.tab_or_complete, "Complete word or indent"),
        ("completion.next", completion.completion_next, "Next suggestion"),
        ("completion.previous", completion.completion_previous, "Previous suggestion"),
        ("completion.accept", completion.completion_accept, "Accept suggestion"),
        ("completion.dismiss", completion.completion_dismiss, "Close suggestions"),
        ("search.submit", search.submit_search, "Run search"),
        ("search.cancel", search.cancel_search, "Cancel search"),
        ("search.next", search.next_match, "Next match"),
        ("search.previous", search.previous_match, "Previous match"),
        ("command.submit_line", command.submit_command_line, "Run command line"),
        ("command.save", command.save_current, "Save file"),
        ("prompt.submit_filename", prompt.submit_filename, "Create file"),
        ("prompt.submit_rename", prompt.submit_rename, "Rename file"),
        ("confirm.accept", prompt.confirm_accept, "Confirm"),
        ("confirm.reject", prompt.confirm_reject, "Cancel"),
    )
    return tuple(
        ActionRef(id=action_id, handler=handler, description=description)
        for action_id, handler, description in table
    )


def _bind(
    mode: str,
    keys: Sequence[str],
    action_id: str,
    description: str = "",
    *,
    name: str | None = None,
    when: Sequence[str] = (),
    priority: int = 0,
) -> Binding:
    suffix = name or "_".join(keys)
    return Binding(
        id=f"{mode}.{suffix}",
        mode=mode,
        sequence=KeySequence.from_strings(*keys),
        action_id=action_id,
        description=description,
        when=tuple(when),
        priority=priority,
    )


def _escapes(mode: str, action_id: str, description: str) -> list[Binding]:
    return [
        _bind(mode, (key,), action_id, description, name=f"escape{i}")
        for i, key in enumerate(ESCAPES)
    ]


def _build_bindings() -> tuple[Binding, ...]:
    normal = [
        _bind("normal", ("i",), "core.enter_insert", "Enter insert mode"),
        _bind("normal", (":",), "core.enter_command", "Enter command-line mode"),
        _bind("normal", ("/",), "core.enter_search", "Search forward"),
        _bind("normal", ("h",), "core.move_left", "Cursor left"),
        _bind("normal", ("j",), "core.move_down", "Cursor down"),
        _bind("normal", ("k",), "core.move_up", "Cursor up"),
        _bind("normal", ("l",), "core.move_right", "Cursor right"),
        _bind("normal", ("LEFT",), "core.move_left", "Cursor left"),
        _bind("normal", ("DOWN",), "core.move_down", "Cursor down"),
        _bind("normal", ("UP",), "core.move_up", "Cursor up"),
        _bind("normal", ("RIGHT",), "core.move_right", "Cursor right"),
        _bind("normal", ("0",), "core.line_start", "Start of line"),
        _bind("normal", ("$",), "core.line_end", "End of line"),
        _bind("normal", ("HOME",), "core.line_start", "Start of line"),
        _bind("normal", ("END",), "core.line_end", "End of line"),
        _bind("normal", ("g", "g"), "core.document_start", "First line"),
        _bind("normal", ("G",), "core.document_end", "Last line"),
        _bind("normal", ("u",), "core.undo", "Undo"),
        _bind("normal", ("r",), "core.redo", "Redo"),
        _bind("normal", ("ctrl+r",), "core.redo", "Redo", name="ctrl_r"),
        _bind("normal", ("J",), "core.join_lines", "Join with next line"),
        _bind("normal", ("n",), "search.next", "Next match"),
        _bind("normal", ("N",), "search.previous", "Previous match"),
        _bind("normal", ("?",), "core.help", "Toggle help"),
        _bind("normal", ("ctrl+s",), "command.save", "Save file", name="ctrl_s"),
        _bind("normal", ("ctrl+q",), "core.quit", "Quit", name="ctrl_q"),
        *_escapes("normal", "core.noop", "Stay in normal mode"),
    ]

    insert = [
        *_escapes("insert", "core.exit_to_normal", "Leave insert mode"),
        _bind("insert", ("ENTER",), "edit.newline", "Split line"),
        _bind("insert", ("RETURN",), "edit.newline", "Split line"),
        _bind("insert", ("BACKSPACE",), "edit.backspace", "Delete before cursor"),
        _bind("insert", ("DELETE",), "edit.delete", "Delete under cursor"),
        _bind("insert", ("TAB",), "completion.tab", "Complete word or indent"),
        _bind("insert", ("LEFT",), "core.move_left", "Cursor left"),
        _bind("insert", ("RIGHT",), "core.move_right", "Cursor right"),
        _bind("insert", ("UP",), "core.move_up", "Cursor up"),
        _bind("insert", ("DOWN",), "core.move_down", "Cursor down"),
        _bind("insert", ("ctrl+s",), "command.save", "Save file", name="ctrl_s"),
    ]
    completion = [
        ("TAB", "completion.next"),
        ("DOWN", "completion.next"),
        ("UP", "completion.previous"),
        ("ENTER", "completion.accept"),
        ("RETURN", "completion.accept"),
        ("ESC", "completion.dismiss"),
        ("<Esc>", "completion.dismiss"),
    ]
    insert.extend(
        _bind(
            "insert",
            (key,),
            action_id,
            name=f"completion{index}",
            when=COMPLETION_ACTIVE,
            priority=10,
        )
        for index, (key, action_id) in enumerate(completion)
    )

    prompts: list[Binding] = []
    submit_actions = {
        "command": "command.submit_line",
        "search": "search.submit",
        "filename_prompt": "prompt.submit_filename",
        "rename_prompt": "prompt.submit_rename",
    }
    for mode in PROMPT_MODES:
        cancel = "search.cancel" if mode == "search" else "core.exit_to_normal"
        prompts.extend(_escapes(mode, cancel, "Cancel"))
        prompts.append(_bind(mode, ("ENTER",), submit_actions[mode], "Submit"))
        prompts.append(_bind(mode, ("RETURN",), submit_actions[mode], "Submit"))

    confirm = [
        _bind("confirm_prompt", ("y",), "confirm.accept", "Confirm"),
        _bind("confirm_prompt", ("Y",), "confirm.accept", "Confirm"),
        _bind("confirm_prompt", ("n",), "confirm.reject", "Cancel"),
        _bind("confirm_prompt", ("N",), "confirm.reject", "Cancel"),
        *_escapes("confirm_prompt", "confirm.reject", "Cancel"),
    ]
    return tuple(normal + insert + prompts + confirm)


DEFAULT_BINDINGS: tuple[Binding, ...] = _build_bindings()


def load_default_keymaps(
    registry: KeymapRegistry,
    *,
    replace: bool = False,
    extra_bindings: Iterable[Binding] | None = None,
    default_sequence_timeout_ms: int | None = None,
    include_bindings: Sequence[str] | None = None,
    exclude_bindings: Sequence[str] | None = None,
    per_mode_overrides: Mapping[str, Iterable[Binding]] | None = None,
) -> None:
    """Register built-in actions and bindings for every mode."""

    allowed_bindings = _build_filters(include_bindings, exclude_bindings)

    for action in default_actions():
        registry.register_action(action, replace=replace)

    for binding in DEFAULT_BINDINGS:
        if not _selected(binding.id, allowed_bindings):
            continue
        registry.register_binding(
            _binding_with_timeout(binding, default_sequence_timeout_ms),
            replace=replace,
        )

    for binding in extra_bindings or ():
        registry.register_binding(binding, replace=replace)

    for mode, bindings in (per_mode_overrides or {}).items():
        for binding in bindings:
            if binding.mode != mode:
                raise ValueError(
                    f"Override binding '{binding.id}' must target mode '{mode}'"
                )
            registry.register_binding(binding, replace=True)


def _binding_with_timeout(binding: Binding, timeout_ms: int | None) -> Binding:
    if timeout_ms is None:
        return binding
    return binding.with_timeout(timeout_ms)


def _build_filters(
    include: Sequence[str] | None, exclude: Sequence[str] | None
) -> tuple[set[str] | None, set[str]]:
    include_set = set(include) if include else None
    exclude_set = set(exclude or ())
    return include_set, exclude_set


def _selected(item_id: str, filters: tuple[set[str] | None, set[str]]) -> bool:
    include, exclude = filters
    if include is not None and item_id not in include:
        return False
    if item_id in exclude:
        return False
    return True


__all__ = ["load_default_keymaps", "default_actions", "DEFAULT_BINDINGS"]
