"""Scalar values: numbers, strings, bools, none and builtin literals."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
import math
import re
from typing import TYPE_CHECKING, Final

from cobpy.parser.errors import fail
from cobpy.parser.fill import CobFill
from cobpy.parser.identifiers import snake_identifier

if TYPE_CHECKING:
    from cobpy.format.serializer import RawSerializer
    from cobpy.text.span import Span

_NUMBER: Final[re.Pattern[str]] = re.compile(r"-?[0-9]+(?:\.[0-9]+)?(?:[eE][+-]?[0-9]+)?")
_SPECIAL_NUMBER: Final[re.Pattern[str]] = re.compile(r"-?(?:inf|nan)(?![A-Za-z0-9_])")
_HEX_DIGITS: Final[re.Pattern[str]] = re.compile(r"[0-9a-fA-F]{1,8}")
_UNICODE_ESCAPE: Final[re.Pattern[str]] = re.compile(r"u\{([0-9a-fA-F]{1,6})\}")
_SIMPLE_ESCAPES: Final[dict[str, str]] = {
    "n": "\n",
    "r": "\r",
    "t": "\t",
    "b": "\b",
    "f": "\f",
    "\\": "\\",
    '"': '"',
}


@dataclass(frozen=True, slots=True)
class CobNumberValue:
    """A number plus the exact text it was parsed from."""

    original: str
    value: int | float

    @staticmethod
    def parse(span: Span) -> tuple[CobNumberValue, Span] | None:
        special = span.match(_SPECIAL_NUMBER)
        if special is not None:
            text, remaining = special
            return CobNumberValue(text, float(text)), remaining
        matched = span.match(_NUMBER)
        if matched is None:
            return None
        text, remaining = matched
        if "." in text or "e" in text or "E" in text:
            return CobNumberValue(text, float(text)), remaining
        return CobNumberValue(text, int(text)), remaining

    @staticmethod
    def from_python(value: int | float) -> CobNumberValue:
        if isinstance(value, bool):
            raise ValueError("booleans are not numbers")
        if isinstance(value, int):
            return CobNumberValue(str(value), value)
        if math.isnan(value):
            return CobNumberValue("nan", value)
        if math.isinf(value):
            return CobNumberValue("inf" if value > 0 else "-inf", value)
        if value == 0 and math.copysign(1.0, value) < 0:
            return CobNumberValue("-0.0", value)
        if value.is_integer() and abs(value) < 1e16:
            return CobNumberValue(str(int(value)), value)
        return CobNumberValue(repr(value), value)

    def as_float(self) -> float:
        return float(self.value)

    def write_to(self, writer: RawSerializer) -> None:
        writer.write_str(self.original)


@dataclass(slots=True)
class CobNumber:
    fill: CobFill
    number: CobNumberValue

    def write_to(self, writer: RawSerializer) -> None:
        self.write_to_with_space(writer, "")

    def write_to_with_space(self, writer: RawSerializer, space: str) -> None:
        self.fill.write_to_or_else(writer, space)
        self.number.write_to(writer)

    @classmethod
    def try_parse(cls, fill: CobFill, span: Span) -> tuple[CobNumber | None, CobFill, Span]:
        parsed = CobNumberValue.parse(span)
        if parsed is None:
            return None, fill, span
        number, remaining = parsed
        next_fill, remaining = CobFill.parse(remaining)
        return cls(fill, number), next_fill, remaining

    def recover_fill(self, other: CobNumber) -> None:
        self.fill.recover(other.fill)

    @classmethod
    def from_python(cls, value: int | float) -> CobNumber:
        return cls(CobFill(), CobNumberValue.from_python(value))


@dataclass(slots=True)
class CobBool:
    fill: CobFill
    value: bool

    def write_to(self, writer: RawSerializer) -> None:
        self.write_to_with_space(writer, "")

    def write_to_with_space(self, writer: RawSerializer, space: str) -> None:
        self.fill.write_to_or_else(writer, space)
        writer.write_str("true" if self.value else "false")

    @classmethod
    def try_parse(cls, fill: CobFill, span: Span) -> tuple[CobBool | None, CobFill, Span]:
        matched = snake_identifier(span)
        if matched is None or matched[0] not in ("true", "false"):
            return None, fill, span
        word, remaining = matched
        next_fill, remaining = CobFill.parse(remaining)
        return cls(fill, word == "true"), next_fill, remaining

    def recover_fill(self, other: CobBool) -> None:
        self.fill.recover(other.fill)


@dataclass(slots=True)
class CobNone:
    fill: CobFill = field(default_factory=CobFill)

    def write_to(self, writer: RawSerializer) -> None:
        self.write_to_with_space(writer, "")

    def write_to_with_space(self, writer: RawSerializer, space: str) -> None:
        self.fill.write_to_or_else(writer, space)
        writer.write_str("none")

    @classmethod
    def try_parse(cls, fill: CobFill, span: Span) -> tuple[CobNone | None, CobFill, Span]:
        matched = snake_identifier(span)
        if matched is None or matched[0] != "none":
            return None, fill, span
        next_fill, remaining = CobFill.parse(matched[1])
        return cls(fill), next_fill, remaining

    def recover_fill(self, other: CobNone) -> None:
        self.fill.recover(other.fill)


def escape_string(text: str) -> str:
    """Escape control and non-ASCII characters so the result parses back to `text`."""
    out: list[str] = []
    for c in text:
        match c:
            case "\t":
                out.append("\\t")
            case "\r":
                out.append("\\r")
            case "\n":
                out.append("\\n")
            case '"':
                out.append('\\"')
            case "\\":
                out.append("\\\\")
            case _ if " " <= c <= "~":
                out.append(c)
            case _:
                out.append(f"\\u{{{ord(c):x}}}")
    return "".join(out)


@dataclass(slots=True)
class CobStringSegment:
    """One line of a (possibly multi-line) string.

    `original` is the raw source text of the segment so untouched strings are
    written back exactly, including their escapes.
    """

    leading_spaces: int = 0
    original: str = ""
    segment: str = ""

    @classmethod
    def from_text(cls, text: str) -> CobStringSegment:
        return cls(0, escape_string(text), text)

    def write_to(self, writer: RawSerializer) -> None:
        writer.write_str(" " * self.leading_spaces)
        writer.write_str(self.original)


@dataclass(slots=True)
class CobString:
    fill: CobFill
    segments: list[CobStringSegment]

    @property
    def value(self) -> str:
        return "".join(segment.segment for segment in self.segments)

    def write_to(self, writer: RawSerializer) -> None:
        self.write_to_with_space(writer, "")

    def write_to_with_space(self, writer: RawSerializer, space: str) -> None:
        self.fill.write_to_or_else(writer, space)
        writer.write_str('"')
        for idx, segment in enumerate(self.segments):
            if idx > 0:
                writer.write_str("\\\n")
            segment.write_to(writer)
        writer.write_str('"')

    @classmethod
    def try_parse(cls, fill: CobFill, span: Span) -> tuple[CobString | None, CobFill, Span]:
        if not span.startswith('"'):
            return None, fill, span
        segments, remaining = _parse_string_body(span)
        next_fill, remaining = CobFill.parse(remaining)
        return cls(fill, segments), next_fill, remaining

    def recover_fill(self, other: CobString) -> None:
        self.fill.recover(other.fill)

    @classmethod
    def from_python(cls, text: str) -> CobString:
        return cls(CobFill(), [CobStringSegment.from_text(text)])


def _parse_string_body(span: Span) -> tuple[list[CobStringSegment], Span]:
    source = span.source
    end = len(source)
    index = span.offset + 1
    segments: list[CobStringSegment] = []
    leading_spaces = 0
    segment_start = index
    chars: list[str] = []

    while True:
        if index >= end:
            raise fail(span, "failed parsing string; missing closing quote")
        c = source[index]
        if c == '"':
            segments.append(CobStringSegment(leading_spaces, source[segment_start:index], "".join(chars)))
            return segments, span.advance(index + 1 - span.offset)
        if c != "\\":
            literal_end = index
            while literal_end < end and source[literal_end] not in '"\\':
                literal_end += 1
            chars.append(source[index:literal_end])
            index = literal_end
            continue

        escaped = source[index + 1 : index + 2]
        if escaped in _SIMPLE_ESCAPES:
            chars.append(_SIMPLE_ESCAPES[escaped])
            index += 2
        elif escaped == "u" and (unicode := _UNICODE_ESCAPE.match(source, index + 1)) is not None:
            codepoint = int(unicode.group(1), 16)
            if codepoint > 0x10FFFF or 0xD800 <= codepoint <= 0xDFFF:
                raise fail(span.advance(index - span.offset), f"failed parsing string; invalid code point {codepoint:#x}")
            chars.append(chr(codepoint))
            index = unicode.end()
        elif escaped == "\n":
            segments.append(CobStringSegment(leading_spaces, source[segment_start:index], "".join(chars)))
            chars = []
            next_start = index + 2
            while next_start < end and source[next_start] == " ":
                next_start += 1
            leading_spaces = next_start - (index + 2)
            segment_start = next_start
            index = next_start
        else:
            raise fail(
                span.advance(index - span.offset),
                "failed parsing string; invalid escape sequence (supported: \\n, \\r, \\t, \\b, \\f, \\\\, \\\", "
                "\\u{<unicode hex>}, \\<newline><spaces>)",
            )


class ValUnit(StrEnum):
    AUTO = "auto"
    PERCENT = "%"
    PX = "px"
    VW = "vw"
    VH = "vh"
    VMIN = "vmin"
    VMAX = "vmax"


# Longest first so `vmin` is not read as `vm` + `in`.
_UNIT_SUFFIXES: Final[tuple[ValUnit, ...]] = (
    ValUnit.VMIN,
    ValUnit.VMAX,
    ValUnit.PERCENT,
    ValUnit.PX,
    ValUnit.VW,
    ValUnit.VH,
)


@dataclass(frozen=True, slots=True)
class Val:
    """A UI length: `auto`, `10px`, `50%`, `3vw`, ..."""

    unit: ValUnit
    value: float | None = None


@dataclass(frozen=True, slots=True)
class Color:
    """8-bit sRGBA color written as `#RRGGBB` or `#AARRGGBB`."""

    red: int
    green: int
    blue: int
    alpha: int = 255

    @staticmethod
    def from_hex(digits: str) -> Color:
        raw = int(digits, 16)
        alpha = (raw >> 24) & 0xFF if len(digits) == 8 else 255
        return Color((raw >> 16) & 0xFF, (raw >> 8) & 0xFF, raw & 0xFF, alpha)

    def to_hex(self) -> str:
        prefix = "" if self.alpha == 255 else f"{self.alpha:02X}"
        return f"{prefix}{self.red:02X}{self.green:02X}{self.blue:02X}"


@dataclass(slots=True)
class CobHexColor:
    fill: CobFill
    digits: str

    @property
    def color(self) -> Color:
        return Color.from_hex(self.digits)

    def write_to(self, writer: RawSerializer) -> None:
        self.write_to_with_space(writer, "")

    def write_to_with_space(self, writer: RawSerializer, space: str) -> None:
        self.fill.write_to_or_else(writer, space)
        writer.write_str("#")
        writer.write_str(self.digits)

    @classmethod
    def try_parse(cls, fill: CobFill, span: Span) -> tuple[CobHexColor | None, CobFill, Span]:
        if not span.startswith("#"):
            return None, fill, span
        matched = span.advance(1).match(_HEX_DIGITS)
        if matched is None:
            return None, fill, span
        digits, remaining = matched
        if len(digits) not in (6, 8):
            raise fail(span, f"failed parsing hex color; hex length is {len(digits)} but expected 6 or 8")
        next_fill, remaining = CobFill.parse(remaining)
        return cls(fill, digits), next_fill, remaining

    def recover_fill(self, other: CobHexColor) -> None:
        self.fill.recover(other.fill)

    @classmethod
    def from_color(cls, color: Color) -> CobHexColor:
        return cls(CobFill(), color.to_hex())


@dataclass(slots=True)
class CobVal:
    fill: CobFill
    number: CobNumberValue | None
    unit: ValUnit

    @property
    def val(self) -> Val:
        return Val(self.unit, None if self.number is None else self.number.as_float())

    def write_to(self, writer: RawSerializer) -> None:
        self.write_to_with_space(writer, "")

    def write_to_with_space(self, writer: RawSerializer, space: str) -> None:
        self.fill.write_to_or_else(writer, space)
        if self.number is not None:
            self.number.write_to(writer)
        writer.write_str(self.unit.value)

    @classmethod
    def try_parse(cls, fill: CobFill, span: Span) -> tuple[CobVal | None, CobFill, Span]:
        matched = snake_identifier(span)
        if matched is not None and matched[0] == "auto":
            next_fill, remaining = CobFill.parse(matched[1])
            return cls(fill, None, ValUnit.AUTO), next_fill, remaining
        parsed = CobNumberValue.parse(span)
        if parsed is None:
            return None, fill, span
        number, after_number = parsed
        for unit in _UNIT_SUFFIXES:
            if after_number.startswith(unit.value):
                if math.isnan(number.as_float()):
                    raise fail(span, "failed parsing builtin Val; number is not a valid length")
                next_fill, remaining = CobFill.parse(after_number.advance(len(unit.value)))
                return cls(fill, number, unit), next_fill, remaining
        return None, fill, span

    def recover_fill(self, other: CobVal) -> None:
        self.fill.recover(other.fill)

    @classmethod
    def from_val(cls, val: Val) -> CobVal:
        number = None if val.value is None else CobNumberValue.from_python(val.value)
        return cls(CobFill(), number, val.unit)


type CobBuiltin = CobHexColor | CobVal


def try_parse_builtin(fill: CobFill, span: Span) -> tuple[CobBuiltin | None, CobFill, Span]:
    """Builtin literals: hex colors and `Val` lengths."""
    color, fill, remaining = CobHexColor.try_parse(fill, span)
    if color is not None:
        return color, fill, remaining
    return CobVal.try_parse(fill, span)
