"""Keymap registry storing actions and the bindings that trigger them."""

from __future__ import annotations

from enum import Enum
from typing import Dict, Iterable, Iterator, Optional, Sequence

from modedit.runtime.telemetry import span

from .models import ActionRef, Binding


def mode_key(mode: str | Enum) -> str:
    """Bindings are indexed by the mode's string value."""

    return str(mode.value) if isinstance(mode, Enum) else str(mode)


class KeymapConflictError(RuntimeError):
    """Two bindings claim the same key sequence in overlapping contexts."""

    def __init__(self, binding: Binding, conflicts: Iterable[Binding]):
        conflicts_tuple = tuple(conflicts)
        super().__init__(
            f"Binding '{binding.id}' conflicts with {[b.id for b in conflicts_tuple]}"
        )
        self.binding = binding
        self.conflicts = conflicts_tuple


class KeymapRegistry:
    """Owns action references and binding metadata, indexed per mode."""

    def __init__(self, *, logger_name: str | None = None) -> None:
        self._actions: Dict[str, ActionRef] = {}
        self._bindings: Dict[str, Binding] = {}
        # mode -> key signature -> binding ids
        self._mode_index: Dict[str, Dict[str, set[str]]] = {}
        self._logger_name = logger_name
        self._revision = 0

    def revision(self) -> int:
        return self._revision

    def get_action(self, action_id: str) -> ActionRef:
        try:
            return self._actions[action_id]
        except KeyError as exc:
            raise KeyError(f"Action '{action_id}' is not registered") from exc

    def get_binding(self, binding_id: str) -> Binding:
        try:
            return self._bindings[binding_id]
        except KeyError as exc:
            raise KeyError(f"Binding '{binding_id}' is not registered") from exc

    def has_action(self, action_id: str) -> bool:
        return action_id in self._actions

    def register_action(self, action: ActionRef, *, replace: bool = False) -> ActionRef:
        with span(
            "keymaps::register_action",
            logger_name=self._logger_name,
            component="keymaps",
            metadata={"action_id": action.id},
        ):
            if not replace and action.id in self._actions:
                raise ValueError(f"Action '{action.id}' already registered")
            self._actions[action.id] = action
            return action

    def register_binding(self, binding: Binding, *, replace: bool = False) -> Binding:
        with span(
            "keymaps::register_binding",
            logger_name=self._logger_name,
            component="keymaps",
            metadata={"binding_id": binding.id, "mode": binding.mode},
        ) as handle:
            if binding.action_id not in self._actions:
                handle.add_metadata("missing_action", binding.action_id)
                raise KeyError(
                    f"Binding '{binding.id}' references unknown action '{binding.action_id}'"
                )

            conflicts = self.detect_conflicts(binding, ignore=(binding.id,))
            if conflicts and not replace:
                handle.add_metadata("conflicts", ",".join(c.id for c in conflicts))
                raise KeymapConflictError(binding, conflicts)

            existing = self._bindings.get(binding.id)
            if existing and not replace:
                raise ValueError(f"Binding id '{binding.id}' already registered")

            for stale in [*conflicts, *([existing] if existing else [])]:
                self._unindex(stale)
                self._bindings.pop(stale.id, None)

            self._bindings[binding.id] = binding
            self._index(binding)
            self._revision += 1
            return binding

    def unregister_binding(self, binding_id: str) -> Optional[Binding]:
        with span(
            "keymaps::unregister_binding",
            logger_name=self._logger_name,
            component="keymaps",
            metadata={"binding_id": binding_id},
        ):
            binding = self._bindings.pop(binding_id, None)
            if binding is None:
                return None
            self._unindex(binding)
            self._revision += 1
            return binding

    def iter_bindings(self, mode: Optional[str | Enum] = None) -> Iterator[Binding]:
        if mode is None:
            yield from self._bindings.values()
            return
        for bucket in self._mode_index.get(mode_key(mode), {}).values():
            for binding_id in sorted(bucket):
                yield self._bindings[binding_id]

    def detect_conflicts(
        self, binding: Binding, *, ignore: Sequence[str] | None = None
    ) -> list[Binding]:
        ignored = set(ignore or ())
        candidates = self._mode_index.get(binding.mode, {}).get(binding.key_signature, ())
        return [
            self._bindings[match_id]
            for match_id in sorted(candidates)
            if match_id not in ignored
            and _contexts_overlap(binding, self._bindings[match_id])
        ]

    def _index(self, binding: Binding) -> None:
        by_signature = self._mode_index.setdefault(binding.mode, {})
        by_signature.setdefault(binding.key_signature, set()).add(binding.id)

    def _unindex(self, binding: Binding) -> None:
        by_signature = self._mode_index.get(binding.mode)
        if not by_signature:
            return
        bucket = by_signature.get(binding.key_signature)
        if bucket is None:
            return
        bucket.discard(binding.id)
        if not bucket:
            del by_signature[binding.key_signature]
        if not by_signature:
            del self._mode_index[binding.mode]


def _contexts_overlap(left: Binding, right: Binding) -> bool:
    """Unconditional bindings only clash with other unconditional ones."""

    if left.conditional != right.conditional:
        return False
    if not left.conditional:
        return True
    return dict(left.when_map) == dict(right.when_map)


__all__ = [
    "KeymapRegistry",
    "KeymapConflictError",
    "mode_key",
]
