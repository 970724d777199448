"""UI-agnostic modal text editing engine."""

__all__ = [
    "actions",
    "adapters",
    "buffer",
    "config",
    "editor",
    "keymaps",
    "modes",
    "runtime",
    "search",
]

__version__ = "0.1.0"
