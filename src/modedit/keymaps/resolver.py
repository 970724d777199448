"""Per-mode key tries: turn the keys typed so far into match, pending or miss."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Literal, Mapping, Optional, Sequence

from modedit.runtime.telemetry import span

from .models import ActionRef, Binding
from .registry import KeymapRegistry, mode_key


@dataclass(slots=True)
class TrieNode:
    """Bindings ending here, children keyed by token, and the shortest
    timeout among the bindings that end strictly below this node."""

    binding_ids: list[str] = field(default_factory=list)
    children: Dict[str, "TrieNode"] = field(default_factory=dict)
    pending_timeout_ms: Optional[int] = None

    def next_tokens(self) -> tuple[str, ...]:
        return tuple(sorted(self.children))


def build_trie(bindings: Sequence[Binding]) -> TrieNode:
    root = TrieNode()
    for binding in bindings:
        node = root
        timeout = binding.sequence.timeout_ms
        for token in binding.sequence.tokens:
            if node.pending_timeout_ms is None or timeout < node.pending_timeout_ms:
                node.pending_timeout_ms = timeout
            node = node.children.setdefault(token, TrieNode())
        node.binding_ids.append(binding.id)
    return root


@dataclass(frozen=True, slots=True)
class ResolutionMatch:
    """Winning binding paired with its action."""

    binding: Binding
    action: ActionRef


@dataclass(frozen=True, slots=True)
class ResolutionResult:
    status: Literal["match", "pending", "miss"]
    match: Optional[ResolutionMatch] = None
    consumed: int = 0
    next_expected: tuple[str, ...] = ()
    timeout_ms: Optional[int] = None


class KeymapResolver:
    """Resolves token sequences against the registry, one cached trie per mode.

    A trie is rebuilt whenever the registry revision moves on.
    """

    def __init__(
        self, registry: KeymapRegistry, *, logger_name: str | None = None
    ) -> None:
        self._registry = registry
        self._logger_name = logger_name
        self._tries: Dict[str, tuple[int, TrieNode]] = {}

    def resolve(
        self,
        mode: str | Enum,
        tokens: Sequence[str],
        *,
        context: Optional[Mapping[str, bool]] = None,
    ) -> ResolutionResult:
        name = mode_key(mode)
        typed = tuple(tokens)
        with span(
            "keymaps::resolve",
            logger_name=self._logger_name,
            component="keymaps",
            metadata={"mode": name, "length": len(typed)},
        ) as handle:
            result = self._resolve(self._trie(name), typed, context or {})
            handle.add_metadata("status", result.status)
            if result.match is not None:
                handle.add_metadata("binding_id", result.match.binding.id)
            return result

    def _resolve(
        self, root: TrieNode, typed: tuple[str, ...], flags: Mapping[str, bool]
    ) -> ResolutionResult:
        node = root
        for consumed, token in enumerate(typed):
            child = node.children.get(token)
            if child is None:
                return ResolutionResult(status="miss", consumed=consumed)
            node = child

        match = self._best_match(node, flags)
        if match is not None:
            return ResolutionResult(status="match", match=match, consumed=len(typed))
        if node.children:
            return ResolutionResult(
                status="pending",
                consumed=len(typed),
                next_expected=node.next_tokens(),
                timeout_ms=self._pending_timeout(node),
            )
        return ResolutionResult(status="miss", consumed=len(typed))

    def _trie(self, mode: str) -> TrieNode:
        revision = self._registry.revision()
        cached = self._tries.get(mode)
        if cached is not None and cached[0] == revision:
            return cached[1]
        root = build_trie(list(self._registry.iter_bindings(mode)))
        self._tries[mode] = (revision, root)
        return root

    def _best_match(
        self, node: TrieNode, flags: Mapping[str, bool]
    ) -> Optional[ResolutionMatch]:
        bindings = [self._registry.get_binding(i) for i in node.binding_ids]
        allowed = [b for b in bindings if b.allows(flags)]
        if not allowed:
            return None
        winner = min(allowed, key=lambda b: (-b.priority, b.id))
        return ResolutionMatch(
            binding=winner, action=self._registry.get_action(winner.action_id)
        )

    def _pending_timeout(self, node: TrieNode) -> Optional[int]:
        return node.pending_timeout_ms


__all__ = [
    "KeymapResolver",
    "ResolutionResult",
    "ResolutionMatch",
    "TrieNode",
    "build_trie",
]
