"""Persisted editor options."""

from __future__ import annotations

import os
import tomllib
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Optional

from modedit.runtime import telemetry

CONFIG_ENV = "MODEDIT_CONFIG"


def default_config_path() -> Path:
    """``$MODEDIT_CONFIG`` or ``$XDG_CONFIG_HOME/modedit/config.toml``."""

    override = os.environ.get(CONFIG_ENV)
    if override:
        return Path(override)
    base = os.environ.get("XDG_CONFIG_HOME") or (Path.home() / ".config")
    return Path(base) / "modedit" / "config.toml"


@dataclass
class EditorSettings:
    """Options consumed by the engine and by the host renderer."""

    tab_size: int = 4
    show_line_numbers: bool = True
    syntax_highlight: bool = True
    word_wrap: bool = False
    auto_indent: bool = True
    auto_complete: bool = True
    backup_files: bool = False

    @property
    def indent_unit(self) -> str:
        return " " * self.tab_size

    @classmethod
    def load(cls, path: Optional[Path] = None) -> "EditorSettings":
        """Read ``path`` (default location when omitted) over the defaults.

        A missing file yields the defaults. Malformed TOML or values of the
        wrong shape are logged and skipped; loading never raises.
        """
        settings = cls()
        target = path or default_config_path()
        try:
            with open(target, "rb") as f:
                data = tomllib.load(f)
        except FileNotFoundError:
            return settings
        except tomllib.TOMLDecodeError as e:
            telemetry.record_event(
                "settings.invalid_toml",
                level="warning",
                data={"path": str(target), "error": str(e)},
            )
            return settings
        except OSError as e:
            telemetry.record_event(
                "settings.unreadable",
                level="warning",
                data={"path": str(target), "error": str(e)},
            )
            return settings

        editor_data = data.get("editor", {})
        if isinstance(editor_data, dict):
            settings.apply(editor_data)
        return settings

    def apply(self, values: dict[str, Any]) -> None:
        for item in fields(self):
            if item.name not in values:
                continue
            raw = values[item.name]
            if item.name == "tab_size":
                if isinstance(raw, int) and not isinstance(raw, bool) and raw > 0:
                    self.tab_size = raw
                    continue
            elif isinstance(raw, bool):
                setattr(self, item.name, raw)
                continue
            telemetry.record_event(
                "settings.invalid_value",
                level="warning",
                data={"key": item.name, "value": raw},
            )

    def save(self, path: Optional[Path] = None) -> None:
        """Rewrite the whole settings file. Raises ``OSError`` on failure."""

        target = path or default_config_path()
        target.parent.mkdir(parents=True, exist_ok=True)
        with open(target, "w", encoding="utf-8") as f:
            f.write(self.to_toml())

    def to_toml(self) -> str:
        lines = ["# modedit configuration", "", "[editor]"]
        for key, value in self.items():
            if isinstance(value, bool):
                lines.append(f"{key} = {str(value).lower()}")
            else:
                lines.append(f"{key} = {value}")
        return "\n".join(lines) + "\n"

    def items(self) -> list[tuple[str, Any]]:
        return [(item.name, getattr(self, item.name)) for item in fields(self)]

    def describe(self) -> str:
        return ", ".join(
            f"{key} = {str(value).lower() if isinstance(value, bool) else value}"
            for key, value in self.items()
        )


__all__ = ["EditorSettings", "default_config_path", "CONFIG_ENV"]
