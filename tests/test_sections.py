import pytest

from cobpy.ast import CobConstant, CobEnum, CobFile, CobNumber, CobValueGroup
from cobpy.cob import Cob
from cobpy.format import to_cob_string
from cobpy.parser import CobParseError
from cobpy.sections import CobCommands, CobDefs, CobImport, CobManifest, CobUsing
from cobpy.text.span import Span

from tests._debug import debug_dump_ast


def _cob(text: str) -> Cob:
    """Parse and check that writing the result back reproduces the input."""
    cob = Cob.parse(Span.new(text, file="test.cob"))
    debug_dump_ast("section", cob, text)
    assert to_cob_string(cob) == text
    return cob


def _cob_fails(text: str, remaining: str) -> None:
    with pytest.raises(CobParseError) as exc_info:
        Cob.parse(Span.new(text, file="test.cob"))
    assert exc_info.value.remaining == remaining


# -- #manifest -----------------------------------------------------------------------------------


def test_manifest_section() -> None:
    empty = _cob("#manifest\n").sections[0]
    single = _cob("#manifest\nself as a\n").sections[0]
    multiple = _cob('\n#manifest\nself as a.b\n"path/to/b.cob" as a.b.c\n').sections[0]

    assert isinstance(empty, CobManifest) and empty.entries == []
    assert isinstance(single, CobManifest)
    assert single.entries[0].is_self()
    assert single.entries[0].key == "a"
    assert isinstance(multiple, CobManifest) and len(multiple.entries) == 2
    assert multiple.entries[0].file is None
    assert multiple.entries[0].key == "a.b"
    assert multiple.entries[1].file == CobFile.try_new("path/to/b.cob")
    assert multiple.entries[1].key == "a.b.c"


@pytest.mark.parametrize(
    ("text", "remaining"),
    [
        ("#manifest\nself as a\n1", "1"),
        ('#manifest\n"a.cob.json as a"', '"a.cob.json as a"'),
        (" #manifest\n", "#manifest\n"),
        ("#manifest\n self as a", "self as a"),
        ("#manifest\nself asa", "a"),
        ("#manifest\nselfas a", "as a"),
        ("#manifest\nself as A", "A"),
        ("#manifest\nself as .a", ".a"),
        ("#manifest\nself as a..b", "..b"),
    ],
)
def test_manifest_errors(text: str, remaining: str) -> None:
    _cob_fails(text, remaining)


@pytest.mark.parametrize("path", ["a.cob", "dir/a.cob", "a.cobweb", "dir\\a.cob"])
def test_cob_file_accepts_cob_extensions(path: str) -> None:
    file = CobFile.try_new(path)

    assert file is not None
    assert "\\" not in file.path


@pytest.mark.parametrize("path", ["a", "a.json", "a.cob.json", "a.caf", "a.cobw"])
def test_cob_file_rejects_other_extensions(path: str) -> None:
    assert CobFile.try_new(path) is None
    with pytest.raises(ValueError):
        CobFile.new(path)


def test_whole_file_parse_requires_cob_file_name() -> None:
    with pytest.raises(CobParseError) as exc_info:
        Cob.parse(Span.new("#manifest\n", file="test.json"))

    assert exc_info.value.spec.code == "PARSER_INVALID_FILE"


# -- #import -------------------------------------------------------------------------------------


def test_import_section() -> None:
    empty = _cob("#import\n").sections[0]
    no_alias = _cob("#import\na as _\n").sections[0]
    aliased = _cob("\n#import\na as a\na.b as a::b\na.b.c as a::b::c\n").sections[0]

    assert isinstance(empty, CobImport) and empty.entries == []
    assert isinstance(no_alias, CobImport)
    assert no_alias.entries[0].alias == "_"
    assert no_alias.entries[0].prefix == ""
    assert isinstance(aliased, CobImport) and len(aliased.entries) == 3
    assert [entry.key for entry in aliased.entries] == ["a", "a.b", "a.b.c"]
    assert [entry.prefix for entry in aliased.entries] == ["a", "a::b", "a::b::c"]


@pytest.mark.parametrize(
    ("text", "remaining"),
    [
        ("#import\na as a\n1", "1"),
        (" #import\n", "#import\n"),
        ("#import\n a as a", "a as a"),
        ("#import\na asa", "a"),
        ("#import\naas a", "a"),
        ("#import\na as A", "A"),
        ("#import\na as ::a", "::a"),
        ("#import\na.b as a:::b", ":::b"),
        ("#import\nfoo as _\n bar as x", "bar as x"),
    ],
)
def test_import_errors(text: str, remaining: str) -> None:
    _cob_fails(text, remaining)


# -- #using --------------------------------------------------------------------------------------


def test_using_section() -> None:
    empty = _cob("#using\n").sections[0]
    same = _cob("#using\nA as A\n").sections[0]
    pathed = _cob("#using\na::b::A as A\n").sections[0]
    generic = _cob("#using\nA<u32, B, C<D>> as A<u32, B, C<D>>\n").sections[0]
    several = _cob("\n#using\nA as B\na::A as B\na::b::A<B> as C\n").sections[0]

    assert isinstance(empty, CobUsing) and empty.entries == []
    assert isinstance(same, CobUsing)
    assert same.entries[0].type_path.to_canonical() == "A"
    assert same.entries[0].identifier.to_canonical() == "A"
    assert isinstance(pathed, CobUsing)
    assert pathed.entries[0].type_path.to_canonical() == "a::b::A"
    assert isinstance(generic, CobUsing)
    assert generic.entries[0].type_path.to_canonical() == "A<u32, B, C<D>>"
    assert generic.entries[0].identifier.to_canonical() == "A<u32, B, C<D>>"
    assert isinstance(several, CobUsing)
    assert [(e.type_path.to_canonical(), e.identifier.to_canonical()) for e in several.entries] == [
        ("A", "B"),
        ("a::A", "B"),
        ("a::b::A<B>", "C"),
    ]


@pytest.mark.parametrize(
    ("text", "remaining"),
    [
        ("#using\nA as B\n1", "1"),
        (" #using\n", "#using\n"),
        ("#using\n A as B", "A as B"),
        ("#using\nA asB", "B"),
        ("#using\nAas B", "B"),
        ("#using\nA::A as B", "::A as B"),
        ("#using\na::a as B", "a::a as B"),
        ("#using\nA as b", "b"),
        ("#using\nA<@a> as B", "A<@a> as B"),
        ("#using\nA as B<@b>", "B<@b>"),
        ("#using\n::A as B", "::A as B"),
        ("#using\na:::b::A as B", "a:::b::A as B"),
    ],
)
def test_using_errors(text: str, remaining: str) -> None:
    _cob_fails(text, remaining)


# -- #commands -----------------------------------------------------------------------------------


def test_commands_section() -> None:
    empty = _cob("#commands\n").sections[0]
    commands = _cob("#commands\nA\nB<A>\nC<D>::X{ a: 1, b: 2 }\n").sections[0]

    assert isinstance(empty, CobCommands) and empty.entries == []
    assert isinstance(commands, CobCommands)
    assert [entry.canonical_id() for entry in commands.entries] == ["A", "B<A>", "C<D>"]
    assert isinstance(commands.entries[2].variant, CobEnum)


@pytest.mark.parametrize(
    ("text", "remaining"),
    [
        ("#commands\nA\n1", "1"),
        (" #commands\n", "#commands\n"),
        ("#commands\n A", "A"),
        ("#commands\nA B", "B"),
    ],
)
def test_commands_errors(text: str, remaining: str) -> None:
    _cob_fails(text, remaining)


# -- #defs ---------------------------------------------------------------------------------------


def test_defs_constants() -> None:
    defs = _cob(
        "#defs\n$a = 10\n$b = X{ a: 1, b: 2 }\n$c = $b\n$d = $a::b::c\n$e = \\ 10 10 10 $a \\\n"
    ).sections[0]

    assert isinstance(defs, CobDefs)
    a, b, c, d, e = defs.constants()
    assert a.name == "a" and isinstance(a.value, CobNumber)
    assert b.name == "b" and isinstance(b.value, CobEnum)
    assert isinstance(c.value, CobConstant) and c.value.path == "b"
    assert isinstance(d.value, CobConstant) and d.value.path == "a::b::c"
    assert isinstance(e.value, CobValueGroup) and len(e.value.entries) == 4
    last = e.value.entries[3]
    assert isinstance(last, CobConstant) and last.path == "a"


@pytest.mark.parametrize(
    ("text", "remaining"),
    [
        ("#defs\n$a = 10\n1", "1"),
        (" #defs\n", "#defs\n"),
        ("#defs\n $a = 10", "$a = 10"),
        ("#defs\n$A = 10\n", "$A = 10\n"),
        ("#defs\n$a::b = 10\n", "::b = 10\n"),
        ("#defs\n$a 10\n", "10\n"),
        ("#defs\n$a = \n", "$a = \n"),
    ],
)
def test_defs_errors(text: str, remaining: str) -> None:
    _cob_fails(text, remaining)


# -- whole files ---------------------------------------------------------------------------------


def test_sections_must_start_on_new_lines() -> None:
    _cob_fails("#manifest\nself as a #import\n", "#import\n")


def test_sections_may_repeat_and_interleave() -> None:
    cob = _cob("#defs\n$a = 1\n\n#commands\nA\n\n#defs\n$b = 2\n\n#commands\nB\n")

    assert [type(section).__name__ for section in cob.sections] == ["CobDefs", "CobCommands", "CobDefs", "CobCommands"]
    assert len(cob.defs()) == 2
    assert len(cob.commands()) == 2


def test_section_keyword_must_end_at_word_boundary() -> None:
    _cob_fails("#manifests\n", "#manifests\n")


def test_parse_error_reports_location() -> None:
    with pytest.raises(CobParseError) as exc_info:
        Cob.parse(Span.new("#commands\nA\n  1", file="test.cob"))

    assert exc_info.value.location == "file: test.cob, line: 3, column: 3"
    diagnostic = exc_info.value.to_diagnostic()
    assert diagnostic.file == "test.cob"
    assert diagnostic.range.as_tuple() == (14, 15)
