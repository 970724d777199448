"""Search prompt submission and match navigation."""

from __future__ import annotations

from typing import TYPE_CHECKING

from modedit.modes.base_mode import ModeContext, ModeKind, ModeResult
from modedit.modes.scratch import SearchScratch

if TYPE_CHECKING:
    from modedit.keymaps import ResolutionMatch


def _report(context: ModeContext, term: str) -> None:
    engine = context.search_engine
    total = len(engine.matches)
    if total:
        context.notify(f"Match {engine.state.index + 1} of {total}")
    else:
        context.notify(f"Pattern not found: {term}", "warning")


def submit_search(context: ModeContext, match: ResolutionMatch) -> ModeResult:
    """Scan for the typed term and jump to the first match in the document."""

    del match
    scratch = context.scratch
    term = scratch.text if isinstance(scratch, SearchScratch) else ""
    if not term:
        context.search_engine.clear()
        return ModeResult(consumed=True, switch_to=ModeKind.NORMAL, status="search_empty")

    engine = context.search_engine
    engine.find_all(term)
    first = engine.current()
    if first is not None:
        context.buffer.move_to(*first)
    _report(context, term)
    return ModeResult(consumed=True, switch_to=ModeKind.NORMAL, status="searched")


def cancel_search(context: ModeContext, match: ResolutionMatch) -> ModeResult:
    del match
    context.search_engine.clear()
    return ModeResult(consumed=True, switch_to=ModeKind.NORMAL, status="search_cancelled")


def run_find(context: ModeContext, term: str) -> ModeResult:
    """``:find``: like ``/`` but starts from the first match after the cursor."""

    engine = context.search_engine
    engine.find_all(term)
    position = engine.seek_from(context.buffer.cursor)
    if position is not None:
        context.buffer.move_to(*position)
    _report(context, term)
    return ModeResult(consumed=True, switch_to=ModeKind.NORMAL, status="searched")


def _step(context: ModeContext, delta: int) -> ModeResult:
    engine = context.search_engine
    if not engine.term:
        context.notify("No previous search")
        return ModeResult(consumed=True, status="noop")
    position = engine.next() if delta > 0 else engine.previous()
    if position is None:
        context.notify(f"Pattern not found: {engine.term}", "warning")
        return ModeResult(consumed=True, status="noop")
    context.buffer.move_to(*position)
    _report(context, engine.term)
    return ModeResult(consumed=True, status="moved")


def next_match(context: ModeContext, match: ResolutionMatch) -> ModeResult:
    del match
    return _step(context, 1)


def previous_match(context: ModeContext, match: ResolutionMatch) -> ModeResult:
    del match
    return _step(context, -1)


__all__ = [
    "submit_search",
    "cancel_search",
    "run_find",
    "next_match",
    "previous_match",
]
