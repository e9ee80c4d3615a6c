"""Helpers shared by section parsers."""

from __future__ import annotations

from collections.abc import Callable
import re
from typing import TYPE_CHECKING

from cobpy.parser.errors import fail
from cobpy.parser.fill import CobFill

if TYPE_CHECKING:
    from cobpy.format.serializer import RawSerializer
    from cobpy.text.span import Span

_KEYWORD_END = re.compile(r"[A-Za-z0-9_]")


def match_section_keyword(keyword: str, start_fill: CobFill, span: Span) -> Span | None:
    """Match a `#keyword` header; returns the span after it or None on mismatch.

    A header must be the first thing in the file or start a new line.
    """
    if not span.startswith(keyword):
        return None
    remaining = span.advance(len(keyword))
    if _KEYWORD_END.match(remaining.peek()):
        return None
    if len(start_fill) != 0 and not start_fill.ends_with_newline():
        raise fail(span, f"failed parsing {keyword} section; section doesn't start on a new line")
    return remaining


def require_entry_newline(kind: str, entry_fill: CobFill, span: Span) -> None:
    if not entry_fill.ends_with_newline():
        raise fail(span, f"failed parsing {kind} entry; entry doesn't start on a new line")


def require_as_keyword(kind: str, span: Span) -> tuple[CobFill, CobFill, Span]:
    """Parse `<fill>as<fill>`; both fills must be non-empty."""
    as_fill, remaining = CobFill.parse(span)
    if as_fill.is_empty():
        raise fail(remaining, f"failed parsing {kind} entry; no fill/whitespace before 'as'")
    if not remaining.startswith("as"):
        raise fail(remaining, f"failed parsing {kind} entry; expected 'as'")
    key_fill, remaining = CobFill.parse(remaining.advance(2))
    if key_fill.is_empty():
        raise fail(remaining, f"failed parsing {kind} entry; no fill/whitespace after 'as'")
    return as_fill, key_fill, remaining


def parse_entries[T](
    fill: CobFill,
    span: Span,
    parse_entry: Callable[[CobFill, Span], tuple[T | None, CobFill, Span]],
) -> tuple[list[T], CobFill, Span]:
    entries: list[T] = []
    while True:
        entry, next_fill, remaining = parse_entry(fill, span)
        if entry is None:
            return entries, next_fill, remaining
        entries.append(entry)
        fill, span = next_fill, remaining


def write_section_header(writer: RawSerializer, start_fill: CobFill, keyword: str, first_section: bool) -> None:
    start_fill.write_to_or_else(writer, "" if first_section else "\n\n")
    writer.write_str(keyword)
