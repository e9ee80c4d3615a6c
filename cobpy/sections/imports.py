"""`#import` section: pulls definitions from other files by manifest key."""

from __future__ import annotations

from dataclasses import dataclass, field
import re
from typing import TYPE_CHECKING, Final

from cobpy.parser.errors import fail
from cobpy.parser.fill import CobFill
from cobpy.sections.common import (
    match_section_keyword,
    parse_entries,
    require_as_keyword,
    require_entry_newline,
    write_section_header,
)
from cobpy.sections.manifest import parse_manifest_key

if TYPE_CHECKING:
    from cobpy.format.serializer import RawSerializer
    from cobpy.text.span import Span

IMPORT_KEYWORD: Final[str] = "#import"
NO_ALIAS: Final[str] = "_"
_IMPORT_ALIAS: Final[re.Pattern[str]] = re.compile(r"_(?![A-Za-z0-9_])|[a-z][a-z0-9_]*(?:::[a-z][a-z0-9_]*)*")


@dataclass(slots=True)
class CobImportEntry:
    """`key as alias::path` or `key as _` (definitions imported without a prefix)."""

    entry_fill: CobFill
    key: str
    as_fill: CobFill
    alias_fill: CobFill
    alias: str

    @property
    def prefix(self) -> str:
        """Path prefix for imported definitions; empty for `_`."""
        return "" if self.alias == NO_ALIAS else self.alias

    def write_to(self, writer: RawSerializer) -> None:
        self.entry_fill.write_to_or_else(writer, "\n")
        writer.write_str(self.key)
        self.as_fill.write_to_or_else(writer, " ")
        writer.write_str("as")
        self.alias_fill.write_to_or_else(writer, " ")
        writer.write_str(self.alias)

    @classmethod
    def try_parse(cls, entry_fill: CobFill, span: Span) -> tuple[CobImportEntry | None, CobFill, Span]:
        matched = parse_manifest_key(span)
        if matched is None:
            return None, entry_fill, span
        key, remaining = matched
        require_entry_newline("import", entry_fill, span)
        as_fill, alias_fill, remaining = require_as_keyword("import", remaining)
        alias_match = remaining.match(_IMPORT_ALIAS)
        if alias_match is None:
            raise fail(remaining, "failed parsing import entry; alias must be `_` or a snake-case path like `a::b`")
        alias, remaining = alias_match
        next_fill, remaining = CobFill.parse(remaining)
        return cls(entry_fill, key, as_fill, alias_fill, alias), next_fill, remaining

    def recover_fill(self, other: CobImportEntry) -> None:
        self.entry_fill.recover(other.entry_fill)
        self.as_fill.recover(other.as_fill)
        self.alias_fill.recover(other.alias_fill)

    @classmethod
    def of(cls, key: str, alias: str = NO_ALIAS) -> CobImportEntry:
        return cls(CobFill(), key, CobFill(), CobFill(), alias)


@dataclass(slots=True)
class CobImport:
    start_fill: CobFill = field(default_factory=CobFill)
    entries: list[CobImportEntry] = field(default_factory=list)

    def write_to_section(self, writer: RawSerializer, first_section: bool) -> None:
        write_section_header(writer, self.start_fill, IMPORT_KEYWORD, first_section)
        for entry in self.entries:
            entry.write_to(writer)

    @classmethod
    def try_parse(cls, start_fill: CobFill, span: Span) -> tuple[CobImport | None, CobFill, Span]:
        remaining = match_section_keyword(IMPORT_KEYWORD, start_fill, span)
        if remaining is None:
            return None, start_fill, span
        item_fill, remaining = CobFill.parse(remaining)
        entries, end_fill, remaining = parse_entries(item_fill, remaining, CobImportEntry.try_parse)
        return cls(start_fill, entries), end_fill, remaining

    def recover_fill(self, other: CobImport) -> None:
        self.start_fill.recover(other.start_fill)
        for entry, other_entry in zip(self.entries, other.entries):
            entry.recover_fill(other_entry)
