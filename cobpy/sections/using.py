"""`#using` section: short local aliases for fully-qualified type paths."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Final

from cobpy.ast.loadable import CobLoadableIdentifier
from cobpy.parser.errors import fail
from cobpy.parser.fill import CobFill
from cobpy.parser.identifiers import SNAKE_PATH_PREFIX
from cobpy.sections.common import (
    match_section_keyword,
    parse_entries,
    require_as_keyword,
    require_entry_newline,
    write_section_header,
)

if TYPE_CHECKING:
    from cobpy.format.serializer import RawSerializer
    from cobpy.text.span import Span

USING_KEYWORD: Final[str] = "#using"


@dataclass(slots=True)
class CobUsingTypePath:
    """`crate::module::Type<G>`; only loadable types are aliased, so the last segment is camel case."""

    path_prefix: str
    id: CobLoadableIdentifier

    def write_to(self, writer: RawSerializer) -> None:
        writer.write_str(self.path_prefix)
        self.id.write_to(writer)

    def to_canonical(self) -> str:
        return self.path_prefix + self.id.to_canonical()

    @staticmethod
    def try_parse(span: Span) -> tuple[CobUsingTypePath | None, Span]:
        prefix, remaining = span.match(SNAKE_PATH_PREFIX) or ("", span)
        id, remaining = CobLoadableIdentifier.try_parse(remaining)
        if id is None:
            return None, span
        if not id.is_resolved():
            raise fail(span, f"failed parsing using type path; generics of {id.to_canonical()} are not fully resolved")
        return CobUsingTypePath(prefix, id), remaining


@dataclass(slots=True)
class CobUsingEntry:
    entry_fill: CobFill
    type_path: CobUsingTypePath
    as_fill: CobFill
    identifier_fill: CobFill
    identifier: CobLoadableIdentifier

    def write_to(self, writer: RawSerializer) -> None:
        self.entry_fill.write_to_or_else(writer, "\n")
        self.type_path.write_to(writer)
        self.as_fill.write_to_or_else(writer, " ")
        writer.write_str("as")
        self.identifier_fill.write_to_or_else(writer, " ")
        self.identifier.write_to(writer)

    @classmethod
    def try_parse(cls, entry_fill: CobFill, span: Span) -> tuple[CobUsingEntry | None, CobFill, Span]:
        type_path, remaining = CobUsingTypePath.try_parse(span)
        if type_path is None:
            return None, entry_fill, span
        require_entry_newline("using", entry_fill, span)
        as_fill, identifier_fill, remaining = require_as_keyword("using", remaining)
        identifier, after = CobLoadableIdentifier.try_parse(remaining)
        if identifier is None:
            raise fail(remaining, "failed parsing using entry; alias must be a camel-case identifier")
        if not identifier.is_resolved():
            raise fail(remaining, f"failed parsing using entry; generics of {identifier.to_canonical()} are not fully resolved")
        next_fill, after = CobFill.parse(after)
        return cls(entry_fill, type_path, as_fill, identifier_fill, identifier), next_fill, after

    def recover_fill(self, other: CobUsingEntry) -> None:
        self.entry_fill.recover(other.entry_fill)
        self.type_path.id.recover_fill(other.type_path.id)
        self.as_fill.recover(other.as_fill)
        self.identifier_fill.recover(other.identifier_fill)
        self.identifier.recover_fill(other.identifier)


@dataclass(slots=True)
class CobUsing:
    start_fill: CobFill = field(default_factory=CobFill)
    entries: list[CobUsingEntry] = field(default_factory=list)

    def write_to_section(self, writer: RawSerializer, first_section: bool) -> None:
        write_section_header(writer, self.start_fill, USING_KEYWORD, first_section)
        for entry in self.entries:
            entry.write_to(writer)

    @classmethod
    def try_parse(cls, start_fill: CobFill, span: Span) -> tuple[CobUsing | None, CobFill, Span]:
        remaining = match_section_keyword(USING_KEYWORD, start_fill, span)
        if remaining is None:
            return None, start_fill, span
        item_fill, remaining = CobFill.parse(remaining)
        entries, end_fill, remaining = parse_entries(item_fill, remaining, CobUsingEntry.try_parse)
        return cls(start_fill, entries), end_fill, remaining

    def recover_fill(self, other: CobUsing) -> None:
        self.start_fill.recover(other.start_fill)
        for entry, other_entry in zip(self.entries, other.entries):
            entry.recover_fill(other_entry)
