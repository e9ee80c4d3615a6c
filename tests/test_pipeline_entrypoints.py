from dataclasses import dataclass
from pathlib import Path

import pytest

from cobpy import load_cob_dir, parse_cob, parse_cob_file
from cobpy.loader import TypeRegistry


@dataclass
class Label:
    text: str


def test_parse_cob_returns_tree_and_round_trips() -> None:
    source = "#defs\n$a = 1\n\n#commands\nA($a)\n"

    result = parse_cob(source)

    assert result.cob is not None
    assert result.file == "main.cob"
    assert result.diagnostics == []
    assert not result.has_errors
    assert result.to_cob_string() == source


def test_parse_cob_reports_hard_failures_as_diagnostics() -> None:
    result = parse_cob("#commands\nA B\n", file="ui.cob")

    assert result.cob is None
    assert result.has_errors
    (diagnostic,) = result.diagnostics
    assert diagnostic.code == "PARSER_INVALID_SYNTAX"
    assert diagnostic.file == "ui.cob"
    assert diagnostic.range.as_tuple() == (12, 13)
    with pytest.raises(ValueError):
        result.to_cob_string()


def test_parse_cob_rejects_non_cob_file_names() -> None:
    result = parse_cob("", file="ui.json")

    assert [d.code for d in result.diagnostics] == ["PARSER_INVALID_FILE"]


def test_parse_cob_keeps_warnings_and_drops_banned_characters() -> None:
    result = parse_cob("#commands\nA\t\n")

    assert [d.code for d in result.diagnostics] == ["PARSER_BANNED_CHARACTERS"]
    assert not result.has_errors
    assert result.to_cob_string() == "#commands\nA\n"


def test_parse_cob_file_reads_utf8_and_uses_posix_path(tmp_path: Path) -> None:
    path = tmp_path / "ui.cob"
    path.write_text('#commands\nLabel("héllo")\n', encoding="utf-8")

    result = parse_cob_file(path)

    assert result.cob is not None
    assert result.file == path.as_posix()
    assert result.to_cob_string() == '#commands\nLabel("héllo")\n'


def test_load_cob_dir_keys_files_by_relative_path(tmp_path: Path) -> None:
    (tmp_path / "lib").mkdir()
    (tmp_path / "lib" / "widgets.cob").write_text("#defs\n$gap = 4\n", encoding="utf-8")
    (tmp_path / "main.cob").write_text(
        '#manifest\nself as main\n"lib/widgets.cob" as widgets\n\n#import\nwidgets as w\n\n#commands\nGap($w::gap)\n',
        encoding="utf-8",
    )
    (tmp_path / "notes.txt").write_text("not cob", encoding="utf-8")

    result = load_cob_dir(tmp_path)

    assert set(result.files) == {"lib/widgets.cob", "main.cob"}
    assert result.diagnostics == []
    main = result.file("main.cob")
    assert main is not None
    assert main.commands[0].variant is not None


def test_load_cob_dir_passes_registry_through(tmp_path: Path) -> None:
    registry = TypeRegistry()
    registry.register(Label)
    (tmp_path / "main.cobweb").write_text('#commands\nLabel("hi")\n', encoding="utf-8")

    result = load_cob_dir(tmp_path, registry)

    main = result.file("main.cobweb")
    assert main is not None
    assert main.command_instances == [Label("hi")]
