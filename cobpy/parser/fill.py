"""Fill: whitespace, comments and ignored separators between tokens."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Final

from cobpy.diagnostics.codes import PARSER_BANNED_CHARACTERS

if TYPE_CHECKING:
    from cobpy.format.serializer import RawSerializer
    from cobpy.text.span import Span

FILL_CHARS: Final[frozenset[str]] = frozenset(" \n,;\r")
ALLOWED_SPECIAL_CHARS: Final[frozenset[str]] = frozenset("\":#@+-=$?{}()[]<>.'\\_^!")


def is_banned_char(c: str) -> bool:
    """True for characters that may not follow a fill sequence."""
    return not (c.isascii() and c.isalnum()) and c not in ALLOWED_SPECIAL_CHARS


def _scan_fill(source: str, index: int) -> int:
    end = len(source)
    while index < end:
        c = source[index]
        if c in FILL_CHARS:
            index += 1
        elif source.startswith("//", index):
            newline = source.find("\n", index + 2)
            index = end if newline < 0 else newline + 1
        elif source.startswith("/*", index):
            terminator = source.find("*/", index + 2)
            index = end if terminator < 0 else terminator + 2
        else:
            break
    return index


def _scan_banned(source: str, index: int) -> int:
    end = len(source)
    while index < end and is_banned_char(source[index]):
        index += 1
    return index


@dataclass(slots=True)
class CobFill:
    """Section of a COB file containing filler characters.

    Includes whitespace (spaces and newlines), comments (line and block
    comments), and ignored characters (commas and semicolons).
    """

    text: str = ""

    @staticmethod
    def parse(span: Span) -> tuple[CobFill, Span]:
        """Parse a fill sequence. The fill may be empty; parsing never fails.

        Banned characters directly after the fill are discarded with a
        warning and scanning resumes after them.
        """
        source = span.source
        parts: list[str] = []
        index = span.offset
        while True:
            fill_end = _scan_fill(source, index)
            parts.append(source[index:fill_end])
            banned_end = _scan_banned(source, fill_end)
            if banned_end == fill_end:
                index = fill_end
                break
            banned = source[fill_end:banned_end]
            span.advance(fill_end - span.offset).warn(
                PARSER_BANNED_CHARACTERS,
                f"discarding banned character sequence {banned.encode('unicode_escape').decode('ascii')!r}",
                length=len(banned),
            )
            index = banned_end
        return CobFill("".join(parts)), span.advance(index - span.offset)

    def __len__(self) -> int:
        return len(self.text)

    def is_empty(self) -> bool:
        return not self.text

    def ends_with_newline(self) -> bool:
        return self.text.endswith("\n")

    def ends_newline_then_num_spaces(self) -> int | None:
        """Number of spaces at the end of the fill if it ends in `\\n` followed by spaces.

        Used to calibrate the scene tree depth of scene nodes.
        """
        trimmed = self.text.rstrip(" ")
        if not trimmed.endswith("\n"):
            return None
        return len(self.text) - len(trimmed)

    def recover(self, other: CobFill) -> None:
        """Copy the other fill if this one is empty."""
        if not self.text:
            self.text = other.text

    def write_to(self, writer: RawSerializer) -> None:
        writer.write_str(self.text)

    def write_to_or_else(self, writer: RawSerializer, fallback: str) -> None:
        writer.write_str(self.text if self.text else fallback)
