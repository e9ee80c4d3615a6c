"""`#commands` section: loadables applied once when the file loads."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Final

from cobpy.ast.loadable import CobLoadable
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

COMMANDS_KEYWORD: Final[str] = "#commands"


def _try_parse_command(fill: CobFill, span: Span) -> tuple[CobLoadable | None, CobFill, Span]:
    loadable, next_fill, remaining = CobLoadable.try_parse(fill, span)
    if loadable is None:
        return None, fill, span
    require_entry_newline("command", fill, span)
    return loadable, next_fill, remaining


@dataclass(slots=True)
class CobCommands:
    start_fill: CobFill = field(default_factory=CobFill)
    entries: list[CobLoadable] = field(default_factory=list)

    def write_to_section(self, writer: RawSerializer, first_section: bool) -> None:
        write_section_header(writer, self.start_fill, COMMANDS_KEYWORD, first_section)
        for entry in self.entries:
            entry.write_to_with_space(writer, "\n")

    @classmethod
    def try_parse(cls, start_fill: CobFill, span: Span) -> tuple[CobCommands | None, CobFill, Span]:
        remaining = match_section_keyword(COMMANDS_KEYWORD, start_fill, span)
        if remaining is None:
            return None, start_fill, span
        item_fill, remaining = CobFill.parse(remaining)
        entries, end_fill, remaining = parse_entries(item_fill, remaining, _try_parse_command)
        return cls(start_fill, entries), end_fill, remaining

    def recover_fill(self, other: CobCommands) -> None:
        self.start_fill.recover(other.start_fill)
        for entry, other_entry in zip(self.entries, other.entries):
            entry.recover_fill(other_entry)
