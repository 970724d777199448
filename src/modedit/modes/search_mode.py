"""Search mode: ``/term`` then ENTER scans the whole document."""

from __future__ import annotations

from .base_mode import ModeKind
from .prompt_mode import LinePromptMode
from .scratch import SearchScratch


class SearchMode(LinePromptMode):
    kind = ModeKind.SEARCH
    scratch_type = SearchScratch
    prompt = "/"
