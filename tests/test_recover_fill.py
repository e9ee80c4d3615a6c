from dataclasses import dataclass

from cobpy.ast import CobFile, CobLoadable, CobSceneLayer
from cobpy.cob import Cob
from cobpy.format import to_cob_string
from cobpy.loader import loadable_from_instance
from cobpy.parser import CobFill
from cobpy.sections import CobCommands, CobScenes
from cobpy.text.span import Span


@dataclass
class Foo:
    a: int
    b: int


def _parse(text: str) -> Cob:
    return Cob.parse(Span.new(text, file="test.cob"))


def _commands_file(*loadables: CobLoadable) -> Cob:
    return Cob(CobFile.new("test.cob"), [CobCommands(entries=list(loadables))])


def test_synthesized_file_uses_default_formatting() -> None:
    cob = _commands_file(loadable_from_instance(Foo(3, 4)))

    assert to_cob_string(cob) == "#commands\nFoo{a: 3 b: 4}"


def test_recovered_loadable_keeps_old_spacing_with_new_values() -> None:
    old = _parse("#commands\nFoo{a: 1    b: 2}\n").commands()[0].entries[0]
    new = loadable_from_instance(Foo(3, 4))

    new.recover_fill(old)

    assert to_cob_string(new) == "\nFoo{a: 3    b: 4}"


def test_recovered_file_keeps_comments_and_trailing_fill() -> None:
    old = _parse("// config\n#commands\nFoo{a: 1    b: 2}\n// tail\n")
    new = _commands_file(loadable_from_instance(Foo(3, 4)))

    new.recover_fill(old)

    assert to_cob_string(new) == "// config\n#commands\nFoo{a: 3    b: 4}\n// tail\n"


def test_mismatched_payload_shapes_keep_default_formatting() -> None:
    old = _parse("#commands\nFoo(1,    2)\n").commands()[0].entries[0]
    new = loadable_from_instance(Foo(3, 4))

    new.recover_fill(old)

    assert to_cob_string(new) == "\nFoo{a: 3 b: 4}"


def test_existing_fill_is_never_overwritten() -> None:
    old = _parse("#commands\nFoo{a: 1    b: 2}\n").commands()[0].entries[0]
    new = _parse("#commands\nFoo{a: 3 b: 4}\n").commands()[0].entries[0]

    new.recover_fill(old)

    assert to_cob_string(new) == "\nFoo{a: 3 b: 4}"


def test_recovered_scene_keeps_indentation() -> None:
    source = '#scenes\n"a"\n  A\n'
    old = _parse(source)
    new = Cob(CobFile.new("test.cob"), [CobScenes(scenes=[CobSceneLayer.named("a", [CobLoadable.unit("A")])])])

    new.recover_fill(old)

    assert to_cob_string(new) == source


def test_recovery_stops_at_the_shorter_entry_list() -> None:
    old = _parse("#commands\nA\n  B\n").commands()[0]
    new = CobCommands(CobFill(), [CobLoadable.unit("A"), CobLoadable.unit("B"), CobLoadable.unit("C")])

    new.recover_fill(old)

    assert [entry.fill.text for entry in new.entries] == ["\n", "\n  ", ""]
