import pytest

from modedit.keymaps import (
    DEFAULT_BINDINGS,
    ActionRef,
    Binding,
    KeySequence,
    KeyStroke,
    KeymapConflictError,
    KeymapRegistry,
    WhenClause,
    load_default_keymaps,
)
from modedit.modes import ModeKind


def make_action(action_id: str = "core.test") -> ActionRef:
    return ActionRef(id=action_id, handler=lambda *args, **kwargs: None)


def make_sequence(*keys: str) -> KeySequence:
    return KeySequence.from_strings(*keys)


def make_binding(
    *,
    binding_id: str,
    mode: str = "normal",
    sequence: KeySequence | None = None,
    action_id: str = "core.test",
    when: tuple[WhenClause, ...] = (),
) -> Binding:
    return Binding(
        id=binding_id,
        mode=mode,
        sequence=sequence or make_sequence("g", "g"),
        action_id=action_id,
        when=when,
    )


def test_register_binding_success() -> None:
    registry = KeymapRegistry()
    registry.register_action(make_action())
    binding = make_binding(binding_id="normal.gg")

    registry.register_binding(binding)

    assert len(list(registry.iter_bindings())) == 1
    assert list(registry.iter_bindings(mode="normal")) == [binding]


def test_binding_mode_accepts_mode_kind() -> None:
    binding = make_binding(binding_id="insert.x", mode=ModeKind.INSERT)

    assert binding.mode == "insert"


def test_iter_bindings_by_mode_kind() -> None:
    registry = KeymapRegistry()
    registry.register_action(make_action())
    binding = make_binding(binding_id="normal.gg")
    registry.register_binding(binding)

    assert list(registry.iter_bindings(ModeKind.NORMAL)) == [binding]


def test_register_binding_requires_known_action() -> None:
    registry = KeymapRegistry()

    with pytest.raises(KeyError):
        registry.register_binding(make_binding(binding_id="normal.gg"))


def test_register_binding_conflict_detection() -> None:
    registry = KeymapRegistry()
    registry.register_action(make_action())

    registry.register_binding(make_binding(binding_id="normal.gg"))

    with pytest.raises(KeymapConflictError):
        registry.register_binding(make_binding(binding_id="normal.gg.duplicate"))


def test_register_binding_non_overlapping_when() -> None:
    registry = KeymapRegistry()
    registry.register_action(make_action())

    registry.register_binding(make_binding(binding_id="default"))
    registry.register_binding(
        make_binding(binding_id="panel", when=(WhenClause("panel_open"),))
    )
    registry.register_binding(
        make_binding(binding_id="no_panel", when=(WhenClause.parse("!panel_open"),))
    )

    assert len(list(registry.iter_bindings())) == 3


def test_register_binding_with_replace() -> None:
    registry = KeymapRegistry()
    registry.register_action(make_action())

    first = make_binding(binding_id="binding")
    second = make_binding(binding_id="binding")

    registry.register_binding(first)
    registry.register_binding(second, replace=True)

    assert list(registry.iter_bindings()) == [second]


def test_unregister_binding() -> None:
    registry = KeymapRegistry()
    registry.register_action(make_action())
    binding = make_binding(binding_id="binding")
    registry.register_binding(binding)

    removed = registry.unregister_binding("binding")

    assert removed == binding
    assert len(list(registry.iter_bindings())) == 0
    assert registry.unregister_binding("binding") is None


def test_keystroke_parse_modifiers() -> None:
    stroke = KeyStroke.parse("ctrl+r")

    assert stroke.key == "r"
    assert stroke.modifiers == ("ctrl",)
    assert stroke.token == "ctrl+r"
    assert KeyStroke.parse("+").key == "+"


def test_default_bindings_have_unique_ids() -> None:
    ids = [binding.id for binding in DEFAULT_BINDINGS]

    assert len(ids) == len(set(ids))


def test_load_default_keymaps_registers_every_mode() -> None:
    registry = KeymapRegistry()

    load_default_keymaps(registry)

    assert {b.mode for b in registry.iter_bindings()} == {kind.value for kind in ModeKind}


def test_every_non_normal_mode_binds_escape() -> None:
    registry = KeymapRegistry()
    load_default_keymaps(registry)

    for kind in ModeKind:
        if kind is ModeKind.NORMAL:
            continue
        signatures = {b.key_signature for b in registry.iter_bindings(kind) if not b.when}
        assert {"ESC", "<Esc>"} <= signatures, kind


def test_load_default_keymaps_timeout_override() -> None:
    registry = KeymapRegistry()

    load_default_keymaps(registry, default_sequence_timeout_ms=1500)

    binding = registry.get_binding("normal.g_g")
    assert binding.sequence.timeout_ms == 1500


def test_load_default_keymaps_include_filters() -> None:
    registry = KeymapRegistry()

    load_default_keymaps(registry, include_bindings=("normal.i",))

    assert len(list(registry.iter_bindings())) == 1
    assert registry.get_binding("normal.i").action_id == "core.enter_insert"


def test_load_default_keymaps_per_mode_override() -> None:
    registry = KeymapRegistry()
    custom_binding = Binding(
        id="normal.i",
        mode="normal",
        sequence=KeySequence.from_strings("a"),
        action_id="core.enter_insert",
    )

    load_default_keymaps(registry, per_mode_overrides={"normal": (custom_binding,)})

    binding = registry.get_binding("normal.i")
    assert binding.sequence.tokens == ("a",)

