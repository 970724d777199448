"""Actions that evaluate Ex-style command lines."""

from __future__ import annotations

import shlex
from functools import partial
from typing import TYPE_CHECKING, Callable, Dict, List, MutableMapping, Optional, cast

from modedit.modes.base_mode import ModeContext, ModeKind, ModeResult
from modedit.modes.scratch import CommandScratch
from modedit.runtime import telemetry

from . import files
from .core import request_quit
from .search import run_find

if TYPE_CHECKING:
    from modedit.keymaps import ResolutionMatch

CommandHandler = Callable[[ModeContext, str], ModeResult]
HISTORY_LIMIT = 100

HELP_TEXT = """\
Normal:  i insert  : command  / search  n/N next/prev match
         h j k l / arrows move  0 $ line start/end  gg G top/bottom
         u undo  r or ctrl+r redo  J join  ctrl+s save  ? help
Insert:  ESC normal  TAB complete or indent  ENTER split  BACKSPACE DELETE
Command: w [path]  saveas <path>  q  q!  wq  e[!] <path>  reload
         line <n>  find <text>  replace <old> <new>  wc  info
         new [path]  rename [name]  delete [path]  help
         set  set tabsize <n>  set syntax on|off  set number|nonumber
         set wrap  set autoindent|autocomplete|backup on|off"""


def _command_state(context: ModeContext) -> MutableMapping[str, object]:
    state = cast(
        MutableMapping[str, object], context.extras.setdefault("command_state", {})
    )
    state.setdefault("history", [])
    return state


def _done(status: str, message: Optional[str] = None) -> ModeResult:
    return ModeResult(
        consumed=True, switch_to=ModeKind.NORMAL, status=status, message=message
    )


def _usage(context: ModeContext, text: str) -> ModeResult:
    context.notify(f"Usage: {text}", "warning")
    return _done("command_usage", text)


def submit_command_line(context: ModeContext, match: ResolutionMatch) -> ModeResult:
    del match
    scratch = context.scratch
    text = (scratch.text if isinstance(scratch, CommandScratch) else "").strip()
    return execute_command(context, text)


def save_current(context: ModeContext, match: ResolutionMatch) -> ModeResult:
    """``ctrl+s``: like ``:w`` but stays in the current mode."""

    del match
    result = files.save(context)
    if result.switch_to is ModeKind.NORMAL:
        result.switch_to = None
    return result


def execute_command(context: ModeContext, text: str) -> ModeResult:
    """Parse ``verb [rest]`` and dispatch to the matching handler."""

    text = text.strip()
    context.bus.emit("command.submit", text)
    if not text:
        return _done("command_empty")

    history = cast(List[str], _command_state(context)["history"])
    history.append(text)
    del history[:-HISTORY_LIMIT]

    verb, _, rest = text.partition(" ")
    handler = _COMMAND_HANDLERS.get(verb)
    if handler is None:
        return _unknown_command(context, text)
    with telemetry.span(
        "command::execute", component="commands", metadata={"verb": verb}
    ):
        return handler(context, rest.strip())


def _unknown_command(context: ModeContext, text: str) -> ModeResult:
    context.bus.emit("command.error", text)
    context.notify(f"Unknown command: {text}", "warning")
    return _done("command_error", text)


# -- files ------------------------------------------------------------------


def _handle_write(context: ModeContext, rest: str) -> ModeResult:
    return files.save(context, rest or None)


def _handle_saveas(context: ModeContext, rest: str) -> ModeResult:
    if not rest:
        return _usage(context, "saveas <filename>")
    return files.save(context, rest)


def _handle_quit(context: ModeContext, rest: str, *, force: bool = False) -> ModeResult:
    del rest
    return request_quit(context, force=force)


def _handle_wq(context: ModeContext, rest: str) -> ModeResult:
    target = rest or context.session.filename
    if not target:
        context.notify(files.NO_FILENAME, "warning")
        return _done("save_failed")
    if not files.write_buffer(context, target):
        return _done("save_failed")
    return request_quit(context)


def _handle_edit(context: ModeContext, rest: str, *, force: bool = False) -> ModeResult:
    if not rest:
        return _usage(context, "edit <path>")
    return files.open_file(context, rest, force=force)


def _handle_reload(context: ModeContext, rest: str) -> ModeResult:
    del rest
    return files.reload(context)


def _handle_new(context: ModeContext, rest: str) -> ModeResult:
    if not rest:
        return ModeResult(
            consumed=True, switch_to=ModeKind.FILENAME_PROMPT, status="prompt"
        )
    return files.create(context, rest)


def _handle_rename(context: ModeContext, rest: str) -> ModeResult:
    if not rest:
        return ModeResult(
            consumed=True, switch_to=ModeKind.RENAME_PROMPT, status="prompt"
        )
    return files.rename(context, rest)


def _handle_delete(context: ModeContext, rest: str) -> ModeResult:
    return files.request_delete(context, rest or None)


def _handle_info(context: ModeContext, rest: str) -> ModeResult:
    del rest
    context.notify(files.describe_file(context))
    return _done("command_info")


# -- navigation and search ----------------------------------------------------


def _handle_line(context: ModeContext, rest: str) -> ModeResult:
    if not rest:
        return _usage(context, "line <number>")
    try:
        number = int(rest)
    except ValueError:
        number = 0
    if not context.buffer.jump_to_line(number):
        context.notify("Invalid line number", "warning")
        return _done("command_invalid")
    context.notify(f"Jumped to line {number}")
    return _done("command_line")


def _handle_find(context: ModeContext, rest: str) -> ModeResult:
    if not rest:
        return _usage(context, "find <text>")
    return run_find(context, rest)


def _handle_replace(context: ModeContext, rest: str) -> ModeResult:
    try:
        args = shlex.split(rest)
    except ValueError:
        args = []
    if len(args) != 2:
        return _usage(context, "replace <old> <new>")
    old, new = args
    count = context.search_engine.replace_all(old, new)
    context.notify(f"Replaced {count} occurrences")
    return _done("command_replace")


def _handle_wc(context: ModeContext, rest: str) -> ModeResult:
    del rest
    lines = context.buffer.lines
    words = sum(len(line.split()) for line in lines)
    chars = sum(len(line) for line in lines)
    context.notify(f"Lines: {len(lines)} | Words: {words} | Characters: {chars}")
    return _done("command_wc")


def _handle_help(context: ModeContext, rest: str) -> ModeResult:
    del rest
    context.session.help_visible = True
    context.notify(HELP_TEXT)
    return _done("command_help")


# -- settings -----------------------------------------------------------------

_SWITCHES = {
    "syntax": ("syntax_highlight", "Syntax highlighting"),
    "autoindent": ("auto_indent", "Auto-indent"),
    "autocomplete": ("auto_complete", "Auto-complete"),
    "backup": ("backup_files", "Backups"),
}
_TOGGLES = {
    "number": ("show_line_numbers", "Line numbers"),
    "wrap": ("word_wrap", "Word wrap"),
}


def _state_word(value: bool) -> str:
    return "enabled" if value else "disabled"


def _persist_settings(context: ModeContext) -> None:
    path = context.session.settings_path
    if path is None:
        return
    try:
        context.session.settings.save(path)
    except OSError as e:
        context.notify(f"Could not save settings: {e}", "warning")


def _handle_set(context: ModeContext, rest: str) -> ModeResult:
    settings = context.session.settings
    if not rest:
        context.notify(settings.describe())
        return _done("command_set")

    name, _, value = rest.partition(" ")
    value = value.strip()

    if name == "tabsize":
        if not value:
            return _usage(context, "set tabsize <number>")
        try:
            size = int(value)
        except ValueError:
            size = 0
        if size <= 0:
            context.notify("Invalid tab size", "warning")
            return _done("command_invalid")
        settings.tab_size = size
        message = f"Tab size set to {size}"
    elif name in _SWITCHES:
        field_name, label = _SWITCHES[name]
        if value not in ("on", "off"):
            return _usage(context, f"set {name} on|off")
        setattr(settings, field_name, value == "on")
        message = f"{label} {_state_word(value == 'on')}"
    elif name in _TOGGLES:
        field_name, label = _TOGGLES[name]
        flipped = not getattr(settings, field_name)
        setattr(settings, field_name, flipped)
        message = f"{label} {_state_word(flipped)}"
    elif name == "nonumber":
        settings.show_line_numbers = False
        message = "Line numbers disabled"
    else:
        context.notify(f"Unknown setting: {name}", "warning")
        return _done("command_invalid")

    _persist_settings(context)
    telemetry.record_event("settings.changed", data={"setting": name, "value": value})
    context.notify(message)
    return _done("command_set")


_COMMAND_HANDLERS: Dict[str, CommandHandler] = {
    "w": _handle_write,
    "write": _handle_write,
    "saveas": _handle_saveas,
    "q": _handle_quit,
    "quit": _handle_quit,
    "q!": partial(_handle_quit, force=True),
    "quit!": partial(_handle_quit, force=True),
    "wq": _handle_wq,
    "e": _handle_edit,
    "edit": _handle_edit,
    "e!": partial(_handle_edit, force=True),
    "edit!": partial(_handle_edit, force=True),
    "reload": _handle_reload,
    "new": _handle_new,
    "rename": _handle_rename,
    "delete": _handle_delete,
    "rm": _handle_delete,
    "info": _handle_info,
    "line": _handle_line,
    "find": _handle_find,
    "replace": _handle_replace,
    "wc": _handle_wc,
    "help": _handle_help,
    "set": _handle_set,
}


__all__ = ["HELP_TEXT", "execute_command", "save_current", "submit_command_line"]
