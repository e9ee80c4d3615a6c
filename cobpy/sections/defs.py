"""`#defs` section: constants and scene macro definitions."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Final

from cobpy.ast.defs import CobConstantDef
from cobpy.ast.scene import CobSceneMacroDef
from cobpy.parser.fill import CobFill
from cobpy.sections.common import (
    match_section_keyword,
    parse_entries,
    require_entry_newline,
    write_section_header,
)

if TYPE_CHECKING:
    from cobpy.format.serializer import RawSerializer
    from cobpy.text.span import Span

DEFS_KEYWORD: Final[str] = "#defs"

type CobDefEntry = CobConstantDef | CobSceneMacroDef


def _try_parse_def(fill: CobFill, span: Span) -> tuple[CobDefEntry | None, CobFill, Span]:
    entry: CobDefEntry | None
    entry, next_fill, remaining = CobConstantDef.try_parse(fill, span)
    if entry is None:
        entry, next_fill, remaining = CobSceneMacroDef.try_parse(fill, span)
    if entry is None:
        return None, fill, span
    require_entry_newline("definition", fill, span)
    return entry, next_fill, remaining


@dataclass(slots=True)
class CobDefs:
    start_fill: CobFill = field(default_factory=CobFill)
    entries: list[CobDefEntry] = field(default_factory=list)

    def write_to_section(self, writer: RawSerializer, first_section: bool) -> None:
        write_section_header(writer, self.start_fill, DEFS_KEYWORD, first_section)
        for entry in self.entries:
            entry.write_to_with_space(writer, "\n")

    def constants(self) -> list[CobConstantDef]:
        return [entry for entry in self.entries if isinstance(entry, CobConstantDef)]

    def scene_macros(self) -> list[CobSceneMacroDef]:
        return [entry for entry in self.entries if isinstance(entry, CobSceneMacroDef)]

    @classmethod
    def try_parse(cls, start_fill: CobFill, span: Span) -> tuple[CobDefs | None, CobFill, Span]:
        remaining = match_section_keyword(DEFS_KEYWORD, start_fill, span)
        if remaining is None:
            return None, start_fill, span
        item_fill, remaining = CobFill.parse(remaining)
        entries, end_fill, remaining = parse_entries(item_fill, remaining, _try_parse_def)
        return cls(start_fill, entries), end_fill, remaining

    def recover_fill(self, other: CobDefs) -> None:
        self.start_fill.recover(other.start_fill)
        for entry, other_entry in zip(self.entries, other.entries):
            if type(entry) is type(other_entry):
                entry.recover_fill(other_entry)  # type: ignore[arg-type]
