"""Textual host integration; the app itself lives in ``app`` and needs textual."""

from .controller import BUS_EVENTS, TextualUIHooks, TextualVimAdapter

__all__ = ["BUS_EVENTS", "TextualUIHooks", "TextualVimAdapter"]
