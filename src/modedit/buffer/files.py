"""Reading and writing documents on disk.

Saves are atomic: the content goes to a temporary sibling first and is then
renamed over the target, so a failure leaves the original file untouched.
Every ``OSError`` surfaces as ``FileOperationError``.
"""

from __future__ import annotations

import os
import shutil
import tempfile
from contextlib import suppress
from dataclasses import dataclass
from itertools import islice
from typing import List, Optional

from modedit.runtime import telemetry

from .document import split_lines

LARGE_FILE_BYTES = 50 * 1024 * 1024
LARGE_FILE_LINE_LIMIT = 1000
BACKUP_SUFFIX = ".bak"

LANGUAGE_BY_EXTENSION = {
    ".go": "go",
    ".py": "python",
    ".js": "javascript",
    ".jsx": "javascript",
    ".ts": "javascript",
    ".tsx": "javascript",
    ".rs": "rust",
}


class FileOperationError(RuntimeError):
    """Raised when a file cannot be read, written, created, renamed or removed."""

    def __init__(self, message: str, *, path: str | None = None) -> None:
        super().__init__(message)
        self.path = path


@dataclass(slots=True)
class LoadedFile:
    lines: List[str]
    truncated: bool = False


def load_file(
    path: str,
    *,
    max_bytes: int = LARGE_FILE_BYTES,
    line_limit: int = LARGE_FILE_LINE_LIMIT,
) -> LoadedFile:
    """Read ``path`` into lines.

    Files above ``max_bytes`` only contribute their first ``line_limit``
    lines and come back with ``truncated`` set.
    """

    with telemetry.span("files::load", component="files", metadata={"path": path}):
        try:
            size = os.path.getsize(path)
            with open(path, "r", encoding="utf-8", errors="replace", newline="") as f:
                if size > max_bytes:
                    head = [line.removesuffix("\n") for line in islice(f, line_limit)]
                    return LoadedFile(lines=head or [""], truncated=True)
                text = f.read()
        except OSError as e:
            raise FileOperationError(f"Error opening file: {e}", path=path) from e
    return LoadedFile(lines=split_lines(text))


def _current_umask() -> int:
    mask = os.umask(0)
    os.umask(mask)
    return mask


def _match_mode(temp_name: str, path: str) -> None:
    """Give the temporary file the permissions the target has or would get."""

    if os.path.exists(path):
        shutil.copymode(path, temp_name)
    else:
        os.chmod(temp_name, 0o666 & ~_current_umask())


def save_file(path: str, content: str, *, backup: bool = False) -> int:
    """Atomically write ``content`` to ``path``; returns bytes written."""

    directory = os.path.dirname(path) or "."
    suffix = os.path.splitext(path)[1]
    data = content.encode("utf-8")
    temp_name: Optional[str] = None
    with telemetry.span("files::save", component="files", metadata={"path": path}):
        try:
            if backup and os.path.exists(path):
                shutil.copy2(path, path + BACKUP_SUFFIX)
            with tempfile.NamedTemporaryFile(
                mode="wb", dir=directory, suffix=suffix + ".tmp", delete=False
            ) as temp_file:
                temp_name = temp_file.name
                temp_file.write(data)
                temp_file.flush()
                os.fsync(temp_file.fileno())
            _match_mode(temp_name, path)
            os.replace(temp_name, path)
        except OSError as e:
            if temp_name is not None:
                with suppress(OSError):
                    os.remove(temp_name)
            raise FileOperationError(f"Error saving {path}: {e}", path=path) from e
    return len(data)


def create_file(path: str) -> None:
    """Create an empty file; refuses to clobber an existing one."""

    try:
        parent = os.path.dirname(path)
        if parent:
            os.makedirs(parent, exist_ok=True)
        with open(path, "x", encoding="utf-8"):
            pass
    except OSError as e:
        raise FileOperationError(f"Error creating {path}: {e}", path=path) from e


def rename_file(source: str, target: str) -> str:
    """Rename ``source``; a bare name stays in the source's directory."""

    if not os.path.dirname(target):
        target = os.path.join(os.path.dirname(source), target)
    if os.path.exists(target):
        raise FileOperationError(f"{target} already exists", path=target)
    try:
        os.rename(source, target)
    except OSError as e:
        raise FileOperationError(f"Error renaming {source}: {e}", path=source) from e
    return target


def delete_file(path: str) -> None:
    try:
        os.remove(path)
    except OSError as e:
        raise FileOperationError(f"Error deleting file: {e}", path=path) from e


def file_size(path: Optional[str]) -> int:
    if not path:
        return 0
    try:
        return os.path.getsize(path)
    except OSError:
        return 0


def file_type(path: Optional[str]) -> str:
    if not path:
        return "New File"
    ext = os.path.splitext(path)[1]
    if not ext:
        return "Text"
    return ext.lstrip(".")


def detect_language(path: Optional[str]) -> str:
    if not path:
        return "text"
    return LANGUAGE_BY_EXTENSION.get(os.path.splitext(path)[1].lower(), "text")


__all__ = [
    "FileOperationError",
    "LoadedFile",
    "load_file",
    "save_file",
    "create_file",
    "rename_file",
    "delete_file",
    "file_size",
    "file_type",
    "detect_language",
    "LARGE_FILE_BYTES",
    "LARGE_FILE_LINE_LIMIT",
]
