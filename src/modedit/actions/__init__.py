"""Handlers bound to keys and command-line verbs."""

from .core import (
    enter_command_mode,
    enter_insert_mode,
    enter_search_mode,
    exit_to_normal_mode,
    noop_action,
    request_quit,
)
from .command import HELP_TEXT, execute_command, submit_command_line
from .completion import (
    BufferWordProvider,
    Completion,
    CompletionProvider,
    CompletionSession,
)
from .search import next_match, previous_match, run_find

__all__ = [
    "enter_command_mode",
    "enter_insert_mode",
    "enter_search_mode",
    "exit_to_normal_mode",
    "noop_action",
    "request_quit",
    "HELP_TEXT",
    "execute_command",
    "submit_command_line",
    "BufferWordProvider",
    "Completion",
    "CompletionProvider",
    "CompletionSession",
    "next_match",
    "previous_match",
    "run_find",
]
