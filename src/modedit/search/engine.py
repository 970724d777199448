"""Plain-substring search and replace over a buffer."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional

from modedit.buffer import Buffer, Cursor
from modedit.runtime import telemetry


@dataclass(slots=True)
class SearchState:
    term: str = ""
    matches: List[Cursor] = field(default_factory=list)
    index: int = 0
    version: int = -1

    @property
    def active(self) -> bool:
        return bool(self.term)


def scan(lines, term: str) -> List[Cursor]:
    """Row-major positions where ``term`` starts, overlapping ones included."""

    if not term:
        return []
    matches: List[Cursor] = []
    for row, line in enumerate(lines):
        col = line.find(term)
        while col != -1:
            matches.append((row, col))
            col = line.find(term, col + 1)
    return matches


class SearchEngine:
    """Keeps the match list for one term in step with the document.

    The match list is rebuilt lazily whenever the document version moves on,
    so edits never leave stale positions behind.
    """

    def __init__(self, buffer: Buffer) -> None:
        self.buffer = buffer
        self.state = SearchState()

    @property
    def term(self) -> str:
        return self.state.term

    @property
    def matches(self) -> List[Cursor]:
        self._refresh()
        return self.state.matches

    def find_all(self, term: str) -> List[Cursor]:
        with telemetry.span(
            "search::find_all", component="search", metadata={"term": term}
        ) as handle:
            self.state = SearchState(term=term)
            self._refresh()
            handle.add_metadata("matches", len(self.state.matches))
        return self.state.matches

    def current(self) -> Optional[Cursor]:
        matches = self.matches
        if not matches:
            return None
        return matches[self.state.index]

    def next(self) -> Optional[Cursor]:
        return self._step(1)

    def previous(self) -> Optional[Cursor]:
        return self._step(-1)

    def seek_from(self, cursor: Cursor) -> Optional[Cursor]:
        """Select the first match after ``cursor``, wrapping to the top."""

        matches = self.matches
        if not matches:
            return None
        self.state.index = next(
            (i for i, position in enumerate(matches) if position > cursor), 0
        )
        return matches[self.state.index]

    def clear(self) -> None:
        self.state = SearchState()

    def replace_all(self, old: str, new: str) -> int:
        """Replace every non-overlapping ``old`` as one undoable action."""

        if not old:
            return 0
        count = 0
        updated: List[str] = []
        for line in self.buffer.lines:
            if old in line:
                count += line.count(old)
                line = line.replace(old, new)
            updated.append(line)
        if count:
            self.buffer.replace_lines(updated, label="replace_all")
        telemetry.record_event(
            "search.replace_all", data={"old": old, "new": new, "count": count}
        )
        return count

    def _step(self, delta: int) -> Optional[Cursor]:
        matches = self.matches
        if not matches:
            return None
        self.state.index = (self.state.index + delta) % len(matches)
        return matches[self.state.index]

    def _refresh(self) -> None:
        version = self.buffer.document.version
        if self.state.version == version:
            return
        self.state.matches = scan(self.buffer.lines, self.state.term)
        self.state.version = version
        if self.state.index >= len(self.state.matches):
            self.state.index = 0
