from __future__ import annotations

import os
from functools import partial
from pathlib import Path

import pytest

from modedit.actions import files
from modedit.actions.core import QUIT_REFUSED
from modedit.actions.files import NO_FILENAME, UNSAVED_EDITS
from modedit.buffer import files as buffer_files
from modedit.config import EditorSettings
from modedit.editor import create_editor
from modedit.modes import KeyInput, ModeKind, ModeResult
from modedit.modes.mode_manager import ModeManager


def press(manager: ModeManager, *keys: str) -> ModeResult:
    result = ModeResult(consumed=False)
    for key in keys:
        text = key if len(key) == 1 else None
        result = manager.handle_key(KeyInput(key=key, text=text))
    return result


def run(manager: ModeManager, line: str) -> ModeResult:
    return press(manager, ":", *line, "ENTER")


def status(manager: ModeManager) -> str:
    return manager.context.session.status_text


def make_file(tmp_path: Path, name: str = "doc.txt", text: str = "one\ntwo\n") -> Path:
    path = tmp_path / name
    path.write_text(text)
    return path


def test_empty_command_returns_to_normal() -> None:
    manager = create_editor(text="x")

    result = run(manager, "")

    assert result.status == "command_empty"
    assert manager.current is ModeKind.NORMAL


def test_unknown_command() -> None:
    manager = create_editor()

    result = run(manager, "frobnicate now")

    assert result.status == "command_error"
    assert status(manager) == "Unknown command: frobnicate now"


def test_command_history_is_kept() -> None:
    manager = create_editor()

    run(manager, "wc")
    run(manager, "info")

    assert manager.context.extras["command_state"]["history"] == ["wc", "info"]


def test_write_without_filename() -> None:
    manager = create_editor(text="x")

    result = run(manager, "w")

    assert result.status == "save_failed"
    assert status(manager) == NO_FILENAME


def test_saveas_adopts_new_name(tmp_path: Path) -> None:
    target = tmp_path / "out.txt"
    manager = create_editor(text="hello")
    press(manager, "i", "!", "ESC")

    run(manager, f"saveas {target}")

    assert target.read_text() == "!hello\n"
    assert status(manager) == f"File saved as {target}"
    assert manager.context.session.filename == str(target)
    assert manager.context.buffer.dirty is False


def test_saveas_requires_argument() -> None:
    manager = create_editor()

    run(manager, "saveas")

    assert status(manager) == "Usage: saveas <filename>"


def test_saveas_over_existing_file_asks_first(tmp_path: Path) -> None:
    target = make_file(tmp_path, "taken.txt", "keep\n")
    manager = create_editor(text="replacement")

    run(manager, f"saveas {target}")
    assert manager.current is ModeKind.CONFIRM_PROMPT
    assert status(manager) == f"Overwrite {target}? (y/n)"

    press(manager, "n")
    assert manager.current is ModeKind.NORMAL
    assert status(manager) == "Save cancelled"
    assert target.read_text() == "keep\n"

    run(manager, f"saveas {target}")
    press(manager, "y")
    assert target.read_text() == "replacement\n"
    assert manager.context.session.filename == str(target)


def test_write_current_file(tmp_path: Path) -> None:
    path = make_file(tmp_path)
    manager = create_editor(str(path))
    press(manager, "i", "X", "ESC")

    result = run(manager, "w")

    assert result.status == "saved"
    assert status(manager) == "File saved"
    assert path.read_text() == "Xone\ntwo\n"


def test_failed_write_leaves_buffer_untouched(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    path = make_file(tmp_path)
    manager = create_editor(str(path))
    press(manager, "i", "X", "ESC")

    def broken_replace(src, dst):
        raise OSError("disk full")

    monkeypatch.setattr(os, "replace", broken_replace)

    result = run(manager, "w")

    session = manager.context.session
    assert result.status == "save_failed"
    assert manager.context.buffer.dirty is True
    assert manager.context.buffer.lines == ("Xone", "two")
    assert session.filename == str(path)
    assert session.status is not None
    assert session.status.level == "error"
    assert status(manager) == f"Error saving {path}: disk full"
    assert path.read_text() == "one\ntwo\n"


def test_open_large_file_reports_truncation(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    big = make_file(tmp_path, "big.txt", "".join(f"line {n}\n" for n in range(20)))
    monkeypatch.setattr(
        files, "load_file", partial(buffer_files.load_file, max_bytes=10, line_limit=5)
    )
    manager = create_editor()

    run(manager, f"e {big}")

    session = manager.context.session
    assert manager.context.buffer.lines == tuple(f"line {n}" for n in range(5))
    assert session.truncated_load is True
    assert session.status is not None
    assert session.status.level == "warning"
    assert status(manager) == (
        f"Large file: only first {buffer_files.LARGE_FILE_LINE_LIMIT} lines loaded"
    )


def test_ctrl_s_in_insert_mode_stays_in_insert(tmp_path: Path) -> None:
    path = make_file(tmp_path)
    manager = create_editor(str(path))
    press(manager, "i", "Z")

    manager.handle_key(KeyInput(key="s", modifiers=("ctrl",)))

    assert manager.current is ModeKind.INSERT
    assert path.read_text() == "Zone\ntwo\n"


def test_quit_refused_when_dirty_then_forced() -> None:
    manager = create_editor(text="x")
    press(manager, "i", "y", "ESC")

    result = run(manager, "q")
    assert result.status == "quit_refused"
    assert status(manager) == QUIT_REFUSED
    assert manager.context.session.quit_requested is False

    run(manager, "q!")
    assert manager.context.session.quit_requested is True


def test_wq_saves_then_quits(tmp_path: Path) -> None:
    path = make_file(tmp_path, text="a\n")
    manager = create_editor(str(path))
    press(manager, "i", "b", "ESC")

    run(manager, "wq")

    assert path.read_text() == "ba\n"
    assert manager.context.session.quit_requested is True


def test_open_missing_path_starts_new_file(tmp_path: Path) -> None:
    path = tmp_path / "later.txt"

    manager = create_editor(str(path))

    assert manager.context.buffer.lines == ("",)
    assert manager.context.session.filename == str(path)
    assert status(manager) == f"New file: {path}"
    assert not path.exists()


def test_edit_refused_with_unsaved_changes(tmp_path: Path) -> None:
    other = make_file(tmp_path, "other.txt", "other\n")
    manager = create_editor(text="draft")
    press(manager, "i", "x", "ESC")

    result = run(manager, f"e {other}")
    assert result.status == "open_refused"
    assert status(manager) == UNSAVED_EDITS

    run(manager, f"e! {other}")
    assert manager.context.buffer.lines == ("other",)
    assert manager.context.buffer.dirty is False
    assert status(manager) == f'"{other}" 1L'


def test_reload_picks_up_disk_changes(tmp_path: Path) -> None:
    path = make_file(tmp_path)
    manager = create_editor(str(path))
    path.write_text("changed\n")

    run(manager, "reload")

    assert manager.context.buffer.lines == ("changed",)
    assert status(manager) == f"Reloaded: {path}"


def test_reload_without_file() -> None:
    manager = create_editor()

    run(manager, "reload")

    assert status(manager) == "No file to reload"


def test_new_with_path_creates_file(tmp_path: Path) -> None:
    target = tmp_path / "made.txt"
    manager = create_editor()

    result = run(manager, f"new {target}")

    assert result.status == "created"
    assert target.exists()
    assert status(manager) == f"Created {target}"


def test_new_without_path_prompts_for_name(tmp_path: Path) -> None:
    target = tmp_path / "prompted.txt"
    manager = create_editor()

    run(manager, "new")
    assert manager.current is ModeKind.FILENAME_PROMPT
    press(manager, *str(target), "ENTER")

    assert manager.current is ModeKind.NORMAL
    assert target.exists()


def test_rename_requires_saved_file() -> None:
    manager = create_editor(text="x")

    run(manager, "rename other.txt")

    assert status(manager) == "Save the file before renaming it"


def test_rename_prompt_moves_current_file(tmp_path: Path) -> None:
    path = make_file(tmp_path, "a.txt")
    manager = create_editor(str(path))

    run(manager, "rename")
    assert manager.current is ModeKind.RENAME_PROMPT
    assert manager.context.scratch.source == str(path)
    press(manager, *"b.txt", "ENTER")

    renamed = tmp_path / "b.txt"
    assert renamed.exists()
    assert not path.exists()
    assert manager.context.session.filename == str(renamed)
    assert status(manager) == f"Renamed to {renamed}"


def test_rename_of_other_file_keeps_current_name(tmp_path: Path) -> None:
    path = make_file(tmp_path, "a.txt")
    other = make_file(tmp_path, "notes.txt")
    manager = create_editor(str(path))

    result = files.rename(manager.context, "kept.txt", source=str(other))

    assert result.status == "renamed"
    assert (tmp_path / "kept.txt").exists()
    assert manager.context.session.filename == str(path)

def test_delete_asks_for_confirmation(tmp_path: Path) -> None:
    path = make_file(tmp_path)
    manager = create_editor(str(path))

    run(manager, "delete")
    assert status(manager) == f"Delete {path}? (y/n)"
    press(manager, "N")
    assert path.exists()
    assert status(manager) == "Delete cancelled"

    run(manager, "rm")
    press(manager, "y")
    assert not path.exists()
    assert status(manager) == f"Deleted {path}"
    assert manager.context.buffer.dirty is True


def test_info_describes_buffer(tmp_path: Path) -> None:
    manager = create_editor()
    run(manager, "info")
    assert status(manager) == "File: [New File] | Lines: 1 | Size: 0 bytes | Type: New File"

    path = make_file(tmp_path, "main.py", "x = 1\n")
    manager = create_editor(str(path))
    run(manager, "info")
    assert status(manager) == f"File: {path} | Lines: 1 | Size: 6 bytes | Type: py"


def test_wc_counts() -> None:
    manager = create_editor(text="a b\nc")

    run(manager, "wc")

    assert status(manager) == "Lines: 2 | Words: 3 | Characters: 4"


def test_line_jumps_and_validates() -> None:
    manager = create_editor(text="a\nb\nc")

    run(manager, "line 2")
    assert manager.context.buffer.cursor == (1, 0)
    assert status(manager) == "Jumped to line 2"

    run(manager, "line 9")
    assert status(manager) == "Invalid line number"
    assert manager.context.buffer.cursor == (1, 0)

    run(manager, "line")
    assert status(manager) == "Usage: line <number>"


def test_find_moves_to_next_match_after_cursor() -> None:
    manager = create_editor(text="cat\ndog\ncat")
    press(manager, "j")

    run(manager, "find cat")

    assert manager.context.buffer.cursor == (2, 0)
    assert status(manager) == "Match 2 of 2"


def test_replace_supports_quoted_arguments() -> None:
    manager = create_editor(text="hello world hello")

    run(manager, 'replace hello "bye now"')

    assert manager.context.buffer.lines == ("bye now world bye now",)
    assert status(manager) == "Replaced 2 occurrences"


def test_replace_requires_two_arguments() -> None:
    manager = create_editor(text="abc")

    run(manager, "replace abc")

    assert status(manager) == "Usage: replace <old> <new>"
    assert manager.context.buffer.lines == ("abc",)


def test_help_sets_visible_flag() -> None:
    manager = create_editor()

    run(manager, "help")

    assert manager.context.session.help_visible is True
    assert status(manager).startswith("Normal:")


def test_set_options_and_persist(tmp_path: Path) -> None:
    config = tmp_path / "config.toml"
    manager = create_editor(settings=EditorSettings(), settings_path=config)
    settings = manager.context.session.settings

    run(manager, "set tabsize 2")
    assert settings.tab_size == 2
    assert status(manager) == "Tab size set to 2"
    assert EditorSettings.load(config).tab_size == 2

    run(manager, "set syntax off")
    assert settings.syntax_highlight is False
    assert status(manager) == "Syntax highlighting disabled"

    run(manager, "set number")
    assert settings.show_line_numbers is False
    run(manager, "set number")
    assert settings.show_line_numbers is True
    run(manager, "set nonumber")
    assert status(manager) == "Line numbers disabled"


def test_set_rejects_bad_input() -> None:
    manager = create_editor()

    run(manager, "set tabsize zero")
    assert status(manager) == "Invalid tab size"
    assert manager.context.session.settings.tab_size == 4

    run(manager, "set syntax maybe")
    assert status(manager) == "Usage: set syntax on|off"

    run(manager, "set colour blue")
    assert status(manager) == "Unknown setting: colour"


def test_set_without_arguments_lists_settings() -> None:
    manager = create_editor()

    run(manager, "set")

    assert status(manager) == EditorSettings().describe()
