"""File-level operations: save, open, reload, create, rename, delete, info.

Each function reports its outcome through ``ModeContext.notify``. Filesystem
failures arrive as ``FileOperationError`` and never change the buffer.
"""

from __future__ import annotations

import os
from typing import Optional

from modedit.buffer.files import (
    LARGE_FILE_LINE_LIMIT,
    FileOperationError,
    create_file,
    delete_file,
    file_size,
    file_type,
    load_file,
    rename_file,
    save_file,
)
from modedit.modes.base_mode import ModeContext, ModeKind, ModeResult
from modedit.modes.scratch import DeleteFile, OverwriteFile
from modedit.runtime import telemetry

NO_FILENAME = "No filename. Use :saveas <path>"
UNSAVED_EDITS = "No write since last change (add ! to override)"


def _done(status: str, switch_to: ModeKind = ModeKind.NORMAL) -> ModeResult:
    return ModeResult(consumed=True, switch_to=switch_to, status=status)


def _same_file(left: Optional[str], right: str) -> bool:
    if not left:
        return False
    return os.path.abspath(left) == os.path.abspath(right)


def write_buffer(context: ModeContext, path: str) -> bool:
    """Write the buffer to ``path`` and adopt it as the current filename."""

    buffer = context.buffer
    try:
        written = save_file(
            path, buffer.text(), backup=context.session.settings.backup_files
        )
    except FileOperationError as e:
        context.notify(str(e), "error")
        return False
    renamed = not _same_file(context.session.filename, path)
    buffer.mark_clean()
    context.session.filename = path
    buffer.name = path
    telemetry.record_event(
        "file.saved", data={"path": path, "bytes": written, "lines": buffer.document.line_count}
    )
    context.notify(f"File saved as {path}" if renamed else "File saved")
    return True


def save(context: ModeContext, path: Optional[str] = None) -> ModeResult:
    """``:w`` and ``:saveas``; writing over a different existing file asks first."""

    target = path or context.session.filename
    if not target:
        context.notify(NO_FILENAME, "warning")
        return _done("save_failed")
    if path and not _same_file(context.session.filename, path) and os.path.exists(path):
        return ModeResult(
            consumed=True,
            switch_to=ModeKind.CONFIRM_PROMPT,
            status="confirm",
            payload=OverwriteFile(path),
        )
    return _done("saved" if write_buffer(context, target) else "save_failed")


def load_into(context: ModeContext, path: str, *, missing_ok: bool = False) -> bool:
    """Replace the buffer with the contents of ``path``.

    With ``missing_ok`` a path that does not exist yet opens an empty buffer
    under that name.
    """

    if missing_ok and not os.path.exists(path):
        context.buffer.load_lines([""])
        context.search_engine.clear()
        context.session.filename = path
        context.session.truncated_load = False
        context.buffer.name = path
        context.notify(f"New file: {path}")
        return True
    try:
        loaded = load_file(path)
    except FileOperationError as e:
        context.notify(str(e), "error")
        return False
    context.buffer.load_lines(loaded.lines)
    context.buffer.name = path
    context.search_engine.clear()
    context.session.filename = path
    context.session.truncated_load = loaded.truncated
    telemetry.record_event(
        "file.loaded",
        data={"path": path, "lines": len(loaded.lines), "truncated": loaded.truncated},
    )
    if loaded.truncated:
        context.notify(
            f"Large file: only first {LARGE_FILE_LINE_LIMIT} lines loaded", "warning"
        )
    return True


def open_file(context: ModeContext, path: str, *, force: bool = False) -> ModeResult:
    if context.buffer.dirty and not force:
        context.notify(UNSAVED_EDITS, "warning")
        return _done("open_refused")
    existed = os.path.exists(path)
    if not load_into(context, path, missing_ok=True):
        return _done("open_failed")
    if existed and not context.session.truncated_load:
        context.notify(f'"{path}" {context.buffer.document.line_count}L')
    return _done("opened")


def reload(context: ModeContext) -> ModeResult:
    filename = context.session.filename
    if not filename:
        context.notify("No file to reload", "warning")
        return _done("reload_failed")
    if not load_into(context, filename):
        return _done("reload_failed")
    if not context.session.truncated_load:
        context.notify(f"Reloaded: {filename}")
    return _done("reloaded")


def create(context: ModeContext, path: str) -> ModeResult:
    path = path.strip()
    if not path:
        context.notify("Usage: new <path>", "warning")
        return _done("create_failed")
    try:
        create_file(path)
    except FileOperationError as e:
        context.notify(str(e), "error")
        return _done("create_failed")
    telemetry.record_event("file.created", data={"path": path})
    context.notify(f"Created {path}")
    return _done("created")


def rename(
    context: ModeContext, name: str, *, source: Optional[str] = None
) -> ModeResult:
    """Rename ``source`` (the current file by default) and follow it."""

    name = name.strip()
    source = source or context.session.filename
    if not source or not os.path.exists(source):
        context.notify("Save the file before renaming it", "warning")
        return _done("rename_failed")
    if not name:
        context.notify("Usage: rename <name>", "warning")
        return _done("rename_failed")
    try:
        target = rename_file(source, name)
    except FileOperationError as e:
        context.notify(str(e), "error")
        return _done("rename_failed")
    if source == context.session.filename:
        context.session.filename = target
        context.buffer.name = target
    telemetry.record_event("file.renamed", data={"source": source, "target": target})
    context.notify(f"Renamed to {target}")
    return _done("renamed")


def request_delete(context: ModeContext, path: Optional[str] = None) -> ModeResult:
    target = path or context.session.filename
    if not target:
        context.notify("Usage: delete <path>", "warning")
        return _done("delete_failed")
    return ModeResult(
        consumed=True,
        switch_to=ModeKind.CONFIRM_PROMPT,
        status="confirm",
        payload=DeleteFile(target),
    )


def remove(context: ModeContext, path: str) -> bool:
    try:
        delete_file(path)
    except FileOperationError as e:
        context.notify(str(e), "error")
        return False
    if _same_file(context.session.filename, path):
        # the buffer survives; the next save recreates the file
        context.buffer.document.dirty = True
    telemetry.record_event("file.deleted", data={"path": path})
    context.notify(f"Deleted {path}")
    return True


def describe_file(context: ModeContext) -> str:
    filename = context.session.filename
    return (
        f"File: {filename or '[New File]'} | "
        f"Lines: {context.buffer.document.line_count} | "
        f"Size: {file_size(filename)} bytes | "
        f"Type: {file_type(filename)}"
    )


__all__ = [
    "NO_FILENAME",
    "UNSAVED_EDITS",
    "create",
    "describe_file",
    "load_into",
    "open_file",
    "reload",
    "remove",
    "rename",
    "request_delete",
    "save",
    "write_buffer",
]
