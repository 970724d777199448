"""Executable Textual app that hosts the editing engine."""

from __future__ import annotations

import argparse
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any, Optional, Sequence, Tuple

try:  # pragma: no cover - imported only when the app is run
    from rich.text import Text
    from textual import events
    from textual.app import App, ComposeResult
    from textual.binding import Binding
    from textual.widgets import Static
except ModuleNotFoundError as exc:  # pragma: no cover - friendly error for missing dep
    raise RuntimeError(
        "Install the 'textual' package to use modedit.adapters.textual.app"
    ) from exc

from modedit import __version__
from modedit.buffer import BufferView
from modedit.config import EditorSettings, default_config_path
from modedit.editor import create_editor
from modedit.modes.mode_manager import ModeManager
from modedit.runtime import telemetry

from .controller import TextualUIHooks, TextualVimAdapter

# status line + command line
CHROME_ROWS = 2

KEY_NAMES = {
    "escape": "ESC",
    "enter": "ENTER",
    "backspace": "BACKSPACE",
    "tab": "TAB",
    "delete": "DELETE",
    "up": "UP",
    "down": "DOWN",
    "left": "LEFT",
    "right": "RIGHT",
    "home": "HOME",
    "end": "END",
}
HARD_EXIT = "ctrl+c"

NormalizedKey = Tuple[str, Optional[str], Tuple[str, ...]]


def normalize_key(key: str, character: Optional[str]) -> Optional[NormalizedKey]:
    """Map a Textual key name onto the engine's key vocabulary."""

    if key == HARD_EXIT:
        return None
    if key in KEY_NAMES:
        return (KEY_NAMES[key], None, ())
    if key.startswith("ctrl+"):
        return (key.rsplit("+", 1)[-1], None, ("ctrl",))
    if character and len(character) == 1 and character.isprintable():
        return (character, character, ())
    return None


def render_view(
    view: BufferView, rows: range, *, line_numbers: bool, show_cursor: bool = True
) -> Text:
    """Visible slice of the buffer with the cursor cell highlighted."""

    gutter = len(str(max(len(view.lines), 1))) if line_numbers else 0
    cursor_row, cursor_col = view.cursor
    result = Text()
    for row in rows:
        line = view.lines[row]
        if gutter:
            result.append(f"{row + 1:>{gutter}} ", style="dim")
        if show_cursor and row == cursor_row:
            result.append(line[:cursor_col])
            result.append(line[cursor_col : cursor_col + 1] or " ", style="reverse")
            result.append(line[cursor_col + 1 :])
        else:
            result.append(line)
        result.append("\n")
    return result


@dataclass
class UIState:
    status_text: str = ""
    command_text: str = ""


class ModeditApp(App[None]):
    """Full-screen Textual host: buffer view, status line, command line."""

    CSS = """
	Screen {
		layout: vertical;
	}

	#buffer-view {
		height: 1fr;
		content-align: left top;
	}

	#status-line {
		height: 1;
		background: $surface-darken-1;
		padding: 0 1;
	}

	#command-line {
		height: auto;
		max-height: 12;
		background: $surface-darken-2;
		padding: 0 1;
	}
	"""

    BINDINGS = [
        Binding(HARD_EXIT, "quit", "Quit", priority=True),
        Binding("ctrl+q", "request_quit", "Quit", priority=True),
    ]

    def __init__(
        self,
        path: Optional[str] = None,
        *,
        config_path: Optional[Path] = None,
    ) -> None:
        super().__init__()
        self._path = path
        self._config_path = config_path or default_config_path()
        self._state = UIState()
        self.manager: ModeManager | None = None
        self.adapter: TextualVimAdapter | None = None
        self._buffer_widget: Static | None = None
        self._status_widget: Static | None = None
        self._command_widget: Static | None = None

    def compose(self) -> ComposeResult:
        self._buffer_widget = Static("", id="buffer-view")
        self._status_widget = Static("", id="status-line")
        self._command_widget = Static("", id="command-line")
        yield self._buffer_widget
        yield self._status_widget
        yield self._command_widget

    async def on_mount(self) -> None:
        settings = EditorSettings.load(self._config_path)
        self.manager = create_editor(
            self._path, settings=settings, settings_path=self._config_path
        )
        self.manager.resize(self.size.width, max(1, self.size.height - CHROME_ROWS))
        hooks = TextualUIHooks(
            update_buffer=self._update_buffer,
            update_status=self._update_status,
            show_command=self._show_command,
            request_exit=self.exit,
        )
        self.adapter = TextualVimAdapter(self.manager, hooks)
        self.set_interval(0.1, self._process_timeouts)

    def on_resize(self, event: events.Resize) -> None:
        if self.adapter:
            self.adapter.resize(
                event.size.width, max(1, event.size.height - CHROME_ROWS)
            )

    def action_request_quit(self) -> None:
        """Routed through the engine so unsaved changes still block the exit."""

        if self.adapter:
            self.adapter.handle_textual_key("q", modifiers=("ctrl",))

    def _process_timeouts(self) -> None:
        if self.adapter:
            self.adapter.process_timeouts()

    async def on_key(self, event: events.Key) -> None:
        if not self.adapter:
            return
        normalized = normalize_key(event.key, event.character)
        if normalized is None:
            return
        key, text, modifiers = normalized
        self.adapter.handle_textual_key(key, text=text, modifiers=modifiers)
        event.stop()

    def _update_buffer(self, view: BufferView) -> None:
        if not self.manager or not self._buffer_widget:
            return
        viewport = self.manager.context.buffer.state.viewport
        settings = self.manager.context.session.settings
        self._buffer_widget.update(
            render_view(
                view,
                viewport.visible_rows(len(view.lines)),
                line_numbers=settings.show_line_numbers,
            )
        )

    def _update_status(self, status: str) -> None:
        self._state.status_text = status
        if self._status_widget:
            self._status_widget.update(Text(status))

    def _show_command(self, command: str) -> None:
        self._state.command_text = command
        if self._command_widget:
            self._command_widget.update(Text(command))


def _parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="modedit", description="Modal terminal text editor."
    )
    parser.add_argument("path", nargs="?", help="File to open (created on first save)")
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Settings file (default: $MODEDIT_CONFIG or ~/.config/modedit/config.toml)",
    )
    parser.add_argument(
        "--debug", action="store_true", help="Log at DEBUG level"
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser.parse_args(argv)


def main(argv: Optional[Sequence[str]] = None) -> Any:
    args = _parse_args(argv)
    if args.debug:
        # the screen belongs to Textual, so only the level changes
        telemetry.configure(
            config=replace(telemetry.LogSettings.from_env(), level="DEBUG").build()
        )
    app = ModeditApp(args.path, config_path=args.config)
    return app.run()


if __name__ == "__main__":  # pragma: no cover - manual launch
    main()
