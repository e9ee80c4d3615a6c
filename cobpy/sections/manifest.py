"""`#manifest` section: registers files under manifest keys."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Final

from cobpy.ast.file import CobFile
from cobpy.parser.errors import fail
from cobpy.parser.fill import CobFill
from cobpy.parser.identifiers import MANIFEST_KEY
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

MANIFEST_KEYWORD: Final[str] = "#manifest"
SELF_REF: Final[str] = "self"


def parse_manifest_key(span: Span) -> tuple[str, Span] | None:
    """`a.b.c`: snake-case segments separated by single dots."""
    return span.match(MANIFEST_KEY)


@dataclass(slots=True)
class CobManifestEntry:
    """`self as key` or `"path/file.cob" as key`; `file` is None for `self`."""

    entry_fill: CobFill
    file: CobFile | None
    as_fill: CobFill
    key_fill: CobFill
    key: str

    def write_to(self, writer: RawSerializer) -> None:
        self.entry_fill.write_to_or_else(writer, "\n")
        if self.file is None:
            writer.write_str(SELF_REF)
        else:
            self.file.write_to(writer)
        self.as_fill.write_to_or_else(writer, " ")
        writer.write_str("as")
        self.key_fill.write_to_or_else(writer, " ")
        writer.write_str(self.key)

    def is_self(self) -> bool:
        return self.file is None

    @classmethod
    def try_parse(cls, entry_fill: CobFill, span: Span) -> tuple[CobManifestEntry | None, CobFill, Span]:
        file: CobFile | None
        if span.startswith(SELF_REF):
            file, remaining = None, span.advance(len(SELF_REF))
        else:
            file, remaining = CobFile.try_parse(span)
            if file is None:
                return None, entry_fill, span
        require_entry_newline("manifest", entry_fill, span)
        as_fill, key_fill, remaining = require_as_keyword("manifest", remaining)
        matched = parse_manifest_key(remaining)
        if matched is None:
            raise fail(remaining, "failed parsing manifest entry; invalid manifest key")
        key, remaining = matched
        next_fill, remaining = CobFill.parse(remaining)
        return cls(entry_fill, file, as_fill, key_fill, key), next_fill, remaining

    def recover_fill(self, other: CobManifestEntry) -> None:
        self.entry_fill.recover(other.entry_fill)
        self.as_fill.recover(other.as_fill)
        self.key_fill.recover(other.key_fill)

    @classmethod
    def of(cls, file: CobFile | None, key: str) -> CobManifestEntry:
        return cls(CobFill(), file, CobFill(), CobFill(), key)


@dataclass(slots=True)
class CobManifest:
    start_fill: CobFill = field(default_factory=CobFill)
    entries: list[CobManifestEntry] = field(default_factory=list)

    def write_to_section(self, writer: RawSerializer, first_section: bool) -> None:
        write_section_header(writer, self.start_fill, MANIFEST_KEYWORD, first_section)
        for entry in self.entries:
            entry.write_to(writer)

    @classmethod
    def try_parse(cls, start_fill: CobFill, span: Span) -> tuple[CobManifest | None, CobFill, Span]:
        remaining = match_section_keyword(MANIFEST_KEYWORD, start_fill, span)
        if remaining is None:
            return None, start_fill, span
        item_fill, remaining = CobFill.parse(remaining)
        entries, end_fill, remaining = parse_entries(item_fill, remaining, CobManifestEntry.try_parse)
        return cls(start_fill, entries), end_fill, remaining

    def recover_fill(self, other: CobManifest) -> None:
        self.start_fill.recover(other.start_fill)
        for entry, other_entry in zip(self.entries, other.entries):
            entry.recover_fill(other_entry)
