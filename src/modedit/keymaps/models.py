"""Value types for keymaps: keystrokes, sequences, conditions, bindings."""

from __future__ import annotations

from dataclasses import dataclass, replace
from types import MappingProxyType
from typing import Callable, Iterable, Mapping

DEFAULT_SEQUENCE_TIMEOUT_MS = 1000


def _modifier_set(modifiers: Iterable[str]) -> tuple[str, ...]:
    cleaned = {m.strip().lower() for m in modifiers if m and m.strip()}
    return tuple(sorted(cleaned))


@dataclass(frozen=True, slots=True)
class KeyStroke:
    """One key press; ``token`` is what the trie is keyed on."""

    key: str
    modifiers: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        if not self.key:
            raise ValueError("key cannot be empty")
        object.__setattr__(self, "modifiers", _modifier_set(self.modifiers))

    @classmethod
    def parse(cls, token: str) -> "KeyStroke":
        """``"ctrl+r"`` -> ``KeyStroke("r", ("ctrl",))``; a bare ``"+"`` stays a key."""

        head, sep, key = token.rpartition("+")
        if not sep or not head or not key:
            return cls(token)
        return cls(key, tuple(head.split("+")))

    @property
    def token(self) -> str:
        if not self.modifiers:
            return self.key
        return "+".join((*self.modifiers, self.key))


@dataclass(frozen=True, slots=True)
class KeySequence:
    """Ordered keystrokes plus how long to wait between them."""

    strokes: tuple[KeyStroke, ...]
    timeout_ms: int = DEFAULT_SEQUENCE_TIMEOUT_MS

    def __post_init__(self) -> None:
        if not self.strokes:
            raise ValueError("KeySequence requires at least one stroke")

    @classmethod
    def from_strings(
        cls, *keys: str, timeout_ms: int = DEFAULT_SEQUENCE_TIMEOUT_MS
    ) -> "KeySequence":
        return cls(tuple(KeyStroke.parse(key) for key in keys if key), timeout_ms)

    @property
    def tokens(self) -> tuple[str, ...]:
        return tuple(stroke.token for stroke in self.strokes)

    def with_timeout(self, timeout_ms: int) -> "KeySequence":
        return KeySequence(self.strokes, timeout_ms)


@dataclass(frozen=True, slots=True)
class WhenClause:
    """``flag`` must equal ``expected`` in the mode's flag map; ``!flag`` negates."""

    flag: str
    expected: bool = True

    def __post_init__(self) -> None:
        if not self.flag:
            raise ValueError("flag cannot be empty")

    @classmethod
    def parse(cls, expression: str) -> "WhenClause":
        expr = expression.strip()
        negated = expr.startswith("!")
        flag = expr[1:].strip() if negated else expr
        if not flag:
            raise ValueError("expression cannot be empty")
        return cls(flag, not negated)

    def evaluate(self, flags: Mapping[str, bool]) -> bool:
        return bool(flags.get(self.flag, False)) is self.expected


@dataclass(frozen=True, slots=True)
class ActionRef:
    """Named handler; called as ``handler(context, match)``."""

    id: str
    handler: Callable[..., object]
    description: str = ""

    def __post_init__(self) -> None:
        if not self.id:
            raise ValueError("ActionRef id cannot be empty")
        if not callable(self.handler):
            raise TypeError("handler must be callable")

    def __call__(self, *args: object, **kwargs: object) -> object:
        return self.handler(*args, **kwargs)


@dataclass(frozen=True, slots=True)
class Binding:
    """Key sequence -> action, scoped to one mode and optional ``when`` clauses.

    ``mode`` accepts a ``ModeKind`` and is stored as its string value. Among
    bindings whose clauses all hold, the highest ``priority`` wins.
    """

    id: str
    mode: str
    sequence: KeySequence
    action_id: str
    description: str = ""
    when: tuple[WhenClause, ...] = ()
    priority: int = 0

    def __post_init__(self) -> None:
        if not self.id:
            raise ValueError("binding id cannot be empty")
        mode = str(getattr(self.mode, "value", self.mode) or "")
        if not mode:
            raise ValueError("binding mode cannot be empty")
        if not self.action_id:
            raise ValueError("binding action_id cannot be empty")
        object.__setattr__(self, "mode", mode)
        object.__setattr__(
            self,
            "when",
            tuple(
                clause if isinstance(clause, WhenClause) else WhenClause.parse(str(clause))
                for clause in self.when
            ),
        )

    @property
    def conditional(self) -> bool:
        return bool(self.when)

    @property
    def when_map(self) -> Mapping[str, bool]:
        return MappingProxyType({clause.flag: clause.expected for clause in self.when})

    @property
    def key_signature(self) -> str:
        return " ".join(self.sequence.tokens)

    def allows(self, flags: Mapping[str, bool]) -> bool:
        return all(clause.evaluate(flags) for clause in self.when)

    def with_timeout(self, timeout_ms: int) -> "Binding":
        return replace(self, sequence=self.sequence.with_timeout(timeout_ms))


__all__ = [
    "DEFAULT_SEQUENCE_TIMEOUT_MS",
    "KeyStroke",
    "KeySequence",
    "WhenClause",
    "ActionRef",
    "Binding",
]
