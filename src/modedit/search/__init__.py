"""Search and replace over the document."""

from .engine import SearchEngine, SearchState, scan

__all__ = ["SearchEngine", "SearchState", "scan"]
