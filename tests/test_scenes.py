import pytest

from cobpy.ast import (
    CobLoadable,
    CobSceneLayer,
    CobSceneMacroCall,
    CobSceneMacroCommand,
    CobSceneMacroDef,
    SceneMacroCommandType,
    SceneMacroDelimiter,
)
from cobpy.cob import Cob
from cobpy.diagnostics import Diagnostic
from cobpy.format import to_cob_string
from cobpy.parser import CobParseError
from cobpy.sections import CobDefs, CobScenes
from cobpy.text.span import Span

from tests._debug import debug_dump_ast, debug_dump_diagnostics


def _cob(text: str, sink: list[Diagnostic] | None = None) -> Cob:
    cob = Cob.parse(Span.new(text, file="test.cob", sink=sink))
    debug_dump_ast("scenes", cob, text)
    assert to_cob_string(cob) == text
    return cob


def _cob_fails(text: str, remaining: str) -> None:
    with pytest.raises(CobParseError) as exc_info:
        Cob.parse(Span.new(text, file="test.cob"))
    assert exc_info.value.remaining == remaining


def _scenes(text: str) -> list[CobSceneLayer]:
    section = _cob(text).sections[0]
    assert isinstance(section, CobScenes)
    return section.scenes


def _macros(text: str) -> list[CobSceneMacroDef]:
    section = _cob(text).sections[0]
    assert isinstance(section, CobDefs)
    return section.scene_macros()


# -- #scenes -------------------------------------------------------------------------------------


def test_scenes_section() -> None:
    assert _scenes("#scenes\n") == []
    assert len(_scenes('#scenes\n""\n')) == 1
    assert [scene.name.name for scene in _scenes('#scenes\n"a"\n"B"\n')] == ["a", "B"]

    (nested,) = _scenes('#scenes\n"a"\n "b"\n')
    assert len(nested.entries) == 1
    child = nested.entries[0]
    assert isinstance(child, CobSceneLayer) and child.entries == []

    (with_loadable,) = _scenes('#scenes\n"a"\n    A\n    "b"\n        B\n')
    assert len(with_loadable.entries) == 2


def test_scenes_mixed_entries() -> None:
    (scene,) = _scenes(
        '#scenes\n"a"\n    A\n    "b"\n        B\n    C\n    "c"\n        D\n    E(1)\n    "c"\n        F\n'
    )

    assert len(scene.entries) == 6
    last = scene.entries[5]
    assert isinstance(last, CobSceneLayer) and last.name.name == "c"
    only = last.entries[0]
    assert isinstance(only, CobLoadable) and only.canonical_id() == "F"


def test_scene_layers_nest_by_indentation() -> None:
    (scene,) = _scenes('#scenes\n"a"\n    "b"\n        "c"\n            X\n        Y\n    Z\n')

    b = scene.entries[0]
    assert isinstance(b, CobSceneLayer)
    c, y = b.entries
    assert isinstance(c, CobSceneLayer) and [e.canonical_id() for e in c.entries] == ["X"]  # type: ignore[union-attr]
    assert isinstance(y, CobLoadable) and y.canonical_id() == "Y"
    z = scene.entries[1]
    assert isinstance(z, CobLoadable) and z.canonical_id() == "Z"


def test_misaligned_scene_items_warn() -> None:
    sink: list[Diagnostic] = []

    cob = _cob('#scenes\n"a"\n    A\n      B\n', sink)
    debug_dump_diagnostics("misaligned", sink)

    (scene,) = cob.scenes()[0].scenes
    assert len(scene.entries) == 2
    assert [d.code for d in sink] == ["PARSER_MISALIGNED_SCENE_ITEM"]


@pytest.mark.parametrize(
    ("text", "remaining"),
    [
        ('#scenes\n"a"\nA\n', "A\n"),
        ('#scenes\n"a"\n    A\n    1\n', "1\n"),
        ('#scenes\n"a" A\n', "A\n"),
        ('#scenes\n"a"\n    A B\n', "B\n"),
        ('#scenes\n "a"\n', '"a"\n'),
        ('#scenes\n"a-b"\n', '"a-b"\n'),
    ],
)
def test_scenes_errors(text: str, remaining: str) -> None:
    _cob_fails(text, remaining)


def test_scene_commands_address_loadables_and_layers() -> None:
    (scene,) = _scenes('#scenes\n"a"\n    -A\n    ^B<u8>\n    !"c"\n')

    remove, top, bottom = scene.entries
    assert isinstance(remove, CobSceneMacroCommand) and remove.command is SceneMacroCommandType.REMOVE
    assert isinstance(top, CobSceneMacroCommand) and top.target_key() == "B<u8>"
    assert isinstance(bottom, CobSceneMacroCommand) and bottom.targets_layer()
    assert bottom.command is SceneMacroCommandType.MOVE_TO_BOTTOM
    assert bottom.target_key() == "c"


def test_scene_command_needs_a_target() -> None:
    _cob_fails('#scenes\n"a"\n    ^1\n', "^1\n")


# -- scene macro definitions ---------------------------------------------------------------------


def test_scene_macro_definitions() -> None:
    (empty,) = _macros("#defs\n+a = \\\\\n")
    (single,) = _macros("#defs\n+a = \\\n    A\n\\\n")
    (commands,) = _macros("#defs\n+b = \\\n    A(10)\n    -A\n    ^A\n    !A\n\\\n")

    assert empty.name == "a" and empty.value.entries == []
    assert len(single.value.entries) == 1
    assert [type(e).__name__ for e in commands.value.entries] == [
        "CobLoadable",
        "CobSceneMacroCommand",
        "CobSceneMacroCommand",
        "CobSceneMacroCommand",
    ]
    kinds = [e.command for e in commands.value.entries if isinstance(e, CobSceneMacroCommand)]
    assert kinds == [SceneMacroCommandType.REMOVE, SceneMacroCommandType.MOVE_TO_TOP, SceneMacroCommandType.MOVE_TO_BOTTOM]
    assert all(e.target_key() == "A" for e in commands.value.entries if isinstance(e, CobSceneMacroCommand))


def test_scene_macro_definitions_with_layers_and_calls() -> None:
    macros = _macros(
        "#defs\n"
        "+a = \\\n    A\n\\\n"
        "+c = \\\n    A\n    \"i\"\n        B\n\\\n"
        "+d = \\\n    +c{}\n    +a{\n        A\n    }\n\\\n"
    )

    a, c, d = macros
    assert [e.canonical_id() for e in a.value.entries] == ["A"]  # type: ignore[union-attr]
    layer = c.value.entries[1]
    assert isinstance(layer, CobSceneLayer) and layer.name.name == "i"
    first_call, second_call = d.value.entries
    assert isinstance(first_call, CobSceneMacroCall) and first_call.path == "c"
    assert first_call.container.entries == []
    assert isinstance(second_call, CobSceneMacroCall) and second_call.path == "a"
    assert len(second_call.container.entries) == 1


def test_scene_macro_definitions_accept_braces() -> None:
    (macro,) = _macros("#defs\n+a = {\n    A\n}\n")

    assert macro.value.delimiter is SceneMacroDelimiter.BRACE
    assert len(macro.value.entries) == 1


def test_scene_macro_calls_with_aliased_paths() -> None:
    (scene,) = _scenes('#scenes\n"a"\n    +ui::widgets::button{}\n')

    call = scene.entries[0]
    assert isinstance(call, CobSceneMacroCall) and call.path == "ui::widgets::button"


@pytest.mark.parametrize(
    ("text", "remaining"),
    [
        ("#defs\n $+ = \\\\", "$+ = \\\\"),
        ("#defs\n+_a = \\\\\n", "+_a = \\\\\n"),
        ("#defs\n+a::b = \\\\\n", "::b = \\\\\n"),
        ("#defs\n+a = 1\n", "+a = 1\n"),
        ("#defs\n+a = \\\n    A\n", ""),
    ],
)
def test_scene_macro_definition_errors(text: str, remaining: str) -> None:
    _cob_fails(text, remaining)


def test_scene_macro_call_needs_braces() -> None:
    _cob_fails('#scenes\n"a"\n    +b\n', "+b\n")


def test_synthesized_scene_nodes_use_default_indentation() -> None:
    layer = CobSceneLayer.named("root", [CobLoadable.unit("A"), CobSceneLayer.named("child", [CobLoadable.unit("B")])])
    macro = CobSceneMacroDef.of("m", [CobLoadable.unit("A")])

    assert to_cob_string(layer) == '\n"root"\n    A\n    "child"\n        B'
    assert to_cob_string(macro) == "+m = \\\n    A\n\\"
