"""Value AST: collections, enums, references and the `CobValue` union."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from enum import StrEnum
import re
from typing import TYPE_CHECKING, Final

from cobpy.ast.scalars import (
    CobBool,
    CobBuiltin,
    CobHexColor,
    CobNone,
    CobNumber,
    CobString,
    CobVal,
    try_parse_builtin,
)
from cobpy.parser.errors import fail
from cobpy.parser.fill import CobFill
from cobpy.parser.identifiers import camel_identifier, snake_identifier

if TYPE_CHECKING:
    from cobpy.format.serializer import RawSerializer
    from cobpy.text.span import Span

CONSTANT_PATH: Final[re.Pattern[str]] = re.compile(r"(?:[a-z][a-z0-9_]*::)*[a-z][a-z0-9_]*")
DATA_MACRO_PATH: Final[re.Pattern[str]] = re.compile(r"(?:[a-z][a-z0-9_]*::)*[a-z][a-z0-9_]*(?=!)")


# -- collections ---------------------------------------------------------------------------------


def _write_entries(entries: list, writer: RawSerializer) -> None:
    for idx, entry in enumerate(entries):
        if idx == 0:
            entry.write_to(writer)
        else:
            entry.write_to_with_space(writer, " ")


def _parse_delimited[T](
    kind: str,
    open_char: str,
    close_char: str,
    start_fill: CobFill,
    span: Span,
    parse_entry: Callable[[CobFill, Span], tuple[T | None, CobFill, Span]],
) -> tuple[list[T], CobFill, Span] | None:
    """Shared loop for `[...]`, `(...)`, `{...}` and `\\...\\` bodies.

    Returns entries, the fill before the closing delimiter and the span after
    it, or None if `span` does not start with `open_char`.
    """
    if not span.startswith(open_char):
        return None
    item_fill, remaining = CobFill.parse(span.advance(1))
    entries: list[T] = []
    while True:
        fill_len = len(item_fill)
        entry, next_fill, after_entry = parse_entry(item_fill, remaining)
        if entry is None:
            end_fill, remaining = next_fill, after_entry
            break
        if entries and fill_len == 0:
            raise fail(span, f"failed parsing {kind}; entry #{len(entries) + 1} is not preceded by fill/whitespace")
        entries.append(entry)
        item_fill, remaining = next_fill, after_entry
    if not remaining.startswith(close_char):
        raise fail(remaining, f"failed parsing {kind}; expected '{close_char}'")
    return entries, end_fill, remaining.advance(1)


@dataclass(slots=True)
class CobArray:
    start_fill: CobFill
    entries: list[CobValue]
    end_fill: CobFill = field(default_factory=CobFill)

    def write_to(self, writer: RawSerializer) -> None:
        self.write_to_with_space(writer, "")

    def write_to_with_space(self, writer: RawSerializer, space: str) -> None:
        self.start_fill.write_to_or_else(writer, space)
        writer.write_str("[")
        _write_entries(self.entries, writer)
        self.end_fill.write_to(writer)
        writer.write_str("]")

    @classmethod
    def try_parse(cls, start_fill: CobFill, span: Span) -> tuple[CobArray | None, CobFill, Span]:
        parsed = _parse_delimited("array", "[", "]", start_fill, span, parse_value)
        if parsed is None:
            return None, start_fill, span
        entries, end_fill, remaining = parsed
        post_fill, remaining = CobFill.parse(remaining)
        return cls(start_fill, entries, end_fill), post_fill, remaining

    def recover_fill(self, other: CobArray) -> None:
        self.start_fill.recover(other.start_fill)
        for entry, other_entry in zip(self.entries, other.entries):
            recover_value_fill(entry, other_entry)
        self.end_fill.recover(other.end_fill)

    @classmethod
    def of(cls, entries: list[CobValue]) -> CobArray:
        return cls(CobFill(), entries)


@dataclass(slots=True)
class CobTuple:
    start_fill: CobFill
    entries: list[CobValue]
    end_fill: CobFill = field(default_factory=CobFill)

    def write_to(self, writer: RawSerializer) -> None:
        self.write_to_with_space(writer, "")

    def write_to_with_space(self, writer: RawSerializer, space: str) -> None:
        self.start_fill.write_to_or_else(writer, space)
        writer.write_str("(")
        _write_entries(self.entries, writer)
        self.end_fill.write_to(writer)
        writer.write_str(")")

    @classmethod
    def try_parse(cls, start_fill: CobFill, span: Span) -> tuple[CobTuple | None, CobFill, Span]:
        parsed = _parse_delimited("tuple", "(", ")", start_fill, span, parse_value)
        if parsed is None:
            return None, start_fill, span
        entries, end_fill, remaining = parsed
        post_fill, remaining = CobFill.parse(remaining)
        return cls(start_fill, entries, end_fill), post_fill, remaining

    def recover_fill(self, other: CobTuple) -> None:
        self.start_fill.recover(other.start_fill)
        for entry, other_entry in zip(self.entries, other.entries):
            recover_value_fill(entry, other_entry)
        self.end_fill.recover(other.end_fill)

    @classmethod
    def of(cls, entries: list[CobValue]) -> CobTuple:
        return cls(CobFill(), entries)


# -- maps ----------------------------------------------------------------------------------------


@dataclass(slots=True)
class CobMapFieldName:
    """Struct-field style map key: `field_name: value`."""

    fill: CobFill
    name: str

    def write_to(self, writer: RawSerializer) -> None:
        self.write_to_with_space(writer, "")

    def write_to_with_space(self, writer: RawSerializer, space: str) -> None:
        self.fill.write_to_or_else(writer, space)
        writer.write_str(self.name)

    def recover_fill(self, other: CobMapFieldName) -> None:
        self.fill.recover(other.fill)


type CobMapKey = CobValue | CobMapFieldName


def _try_parse_map_key(fill: CobFill, span: Span) -> tuple[CobMapKey | None, CobFill, Span]:
    value, fill, remaining = parse_value(fill, span)
    if value is not None:
        return value, fill, remaining
    matched = snake_identifier(span)
    if matched is None:
        return None, fill, span
    name, remaining = matched
    next_fill, remaining = CobFill.parse(remaining)
    return CobMapFieldName(fill, name), next_fill, remaining


class KeyValueParse(StrEnum):
    SUCCESS = "success"
    KEY_NO_VALUE = "key_no_value"
    FAILURE = "failure"


@dataclass(slots=True)
class CobMapKeyValue:
    key: CobMapKey
    semicolon_fill: CobFill
    value: CobValue

    def write_to(self, writer: RawSerializer) -> None:
        self.write_to_with_space(writer, "")

    def write_to_with_space(self, writer: RawSerializer, space: str) -> None:
        self.key.write_to_with_space(writer, space)
        self.semicolon_fill.write_to(writer)
        writer.write_str(":")
        self.value.write_to(writer)

    @classmethod
    def try_parse(
        cls, fill: CobFill, span: Span
    ) -> tuple[KeyValueParse, CobMapKeyValue | CobMapKey | None, CobFill, Span]:
        """Parse `key: value`.

        A key that is not followed by `:` is handed back as KEY_NO_VALUE so
        callers can treat it as a plain value.
        """
        key, semicolon_fill, remaining = _try_parse_map_key(fill, span)
        if key is None:
            return KeyValueParse.FAILURE, None, semicolon_fill, span
        if not remaining.startswith(":"):
            return KeyValueParse.KEY_NO_VALUE, key, semicolon_fill, remaining
        value_fill, remaining = CobFill.parse(remaining.advance(1))
        value, next_fill, remaining = parse_value(value_fill, remaining)
        if value is None:
            raise fail(span, "failed parsing value for map entry; no valid value found")
        return KeyValueParse.SUCCESS, cls(key, semicolon_fill, value), next_fill, remaining

    def recover_fill(self, other: CobMapKeyValue) -> None:
        if isinstance(self.key, CobMapFieldName) and isinstance(other.key, CobMapFieldName):
            self.key.recover_fill(other.key)
        elif not isinstance(self.key, CobMapFieldName) and not isinstance(other.key, CobMapFieldName):
            recover_value_fill(self.key, other.key)
        self.semicolon_fill.recover(other.semicolon_fill)
        recover_value_fill(self.value, other.value)

    @classmethod
    def struct_field(cls, name: str, value: CobValue) -> CobMapKeyValue:
        return cls(CobMapFieldName(CobFill(), name), CobFill(), value)

    @classmethod
    def map_entry(cls, key: CobValue, value: CobValue) -> CobMapKeyValue:
        return cls(key, CobFill(), value)


type CobMapEntry = CobMapKeyValue | CobConstant | CobMacroParam


def _try_parse_map_entry(fill: CobFill, span: Span) -> tuple[CobMapEntry | None, CobFill, Span]:
    status, parsed, next_fill, remaining = CobMapKeyValue.try_parse(fill, span)
    match status:
        case KeyValueParse.SUCCESS:
            return parsed, next_fill, remaining  # type: ignore[return-value]
        case KeyValueParse.FAILURE:
            return None, next_fill, span
    match parsed:
        case CobConstant() | CobMacroParam():
            return parsed, next_fill, remaining
        case CobMapFieldName(name=name):
            raise fail(span, f"failed parsing map; struct-field key \"{name}\" has no value (use key:value syntax)")
        case _:
            raise fail(span, "failed parsing map; value-like key has no value (use key:value syntax)")


@dataclass(slots=True)
class CobMap:
    start_fill: CobFill
    entries: list[CobMapEntry]
    end_fill: CobFill = field(default_factory=CobFill)

    def write_to(self, writer: RawSerializer) -> None:
        self.write_to_with_space(writer, "")

    def write_to_with_space(self, writer: RawSerializer, space: str) -> None:
        self.start_fill.write_to_or_else(writer, space)
        writer.write_str("{")
        _write_entries(self.entries, writer)
        self.end_fill.write_to(writer)
        writer.write_str("}")

    @classmethod
    def try_parse(cls, start_fill: CobFill, span: Span) -> tuple[CobMap | None, CobFill, Span]:
        parsed = _parse_delimited("map", "{", "}", start_fill, span, _try_parse_map_entry)
        if parsed is None:
            return None, start_fill, span
        entries, end_fill, remaining = parsed
        post_fill, remaining = CobFill.parse(remaining)
        return cls(start_fill, entries, end_fill), post_fill, remaining

    def recover_fill(self, other: CobMap) -> None:
        self.start_fill.recover(other.start_fill)
        for entry, other_entry in zip(self.entries, other.entries):
            if type(entry) is type(other_entry):
                entry.recover_fill(other_entry)  # type: ignore[arg-type]
        self.end_fill.recover(other.end_fill)

    @classmethod
    def of(cls, entries: list[CobMapEntry]) -> CobMap:
        return cls(CobFill(), entries)


# -- enums ---------------------------------------------------------------------------------------

type CobPayload = CobTuple | CobArray | CobMap | None


def parse_payload(span: Span) -> tuple[CobPayload, CobFill, Span]:
    """Payload directly attached to an identifier; no fill is allowed in between."""
    for parser in (CobTuple.try_parse, CobArray.try_parse, CobMap.try_parse):
        payload, next_fill, remaining = parser(CobFill(), span)
        if payload is not None:
            return payload, next_fill, remaining
    next_fill, remaining = CobFill.parse(span)
    return None, next_fill, remaining


def recover_payload_fill(payload: CobPayload, other: CobPayload) -> None:
    if payload is not None and type(payload) is type(other):
        payload.recover_fill(other)  # type: ignore[arg-type]


@dataclass(slots=True)
class CobEnum:
    """`Variant`, `Variant(..)`, `Variant[..]` or `Variant{..}` in value position."""

    fill: CobFill
    id: str
    variant: CobPayload = None

    def write_to(self, writer: RawSerializer) -> None:
        self.write_to_with_space(writer, "")

    def write_to_with_space(self, writer: RawSerializer, space: str) -> None:
        self.fill.write_to_or_else(writer, space)
        writer.write_str(self.id)
        if self.variant is not None:
            self.variant.write_to(writer)

    @classmethod
    def try_parse(cls, fill: CobFill, span: Span) -> tuple[CobEnum | None, CobFill, Span]:
        matched = camel_identifier(span)
        if matched is None:
            return None, fill, span
        name, remaining = matched
        variant, next_fill, remaining = parse_payload(remaining)
        return cls(fill, name, variant), next_fill, remaining

    def recover_fill(self, other: CobEnum) -> None:
        self.fill.recover(other.fill)
        recover_payload_fill(self.variant, other.variant)

    @classmethod
    def unit(cls, variant: str) -> CobEnum:
        return cls(CobFill(), variant)

    @classmethod
    def newtype(cls, variant: str, value: CobValue) -> CobEnum:
        return cls(CobFill(), variant, CobTuple.of([value]))


# -- references ----------------------------------------------------------------------------------


@dataclass(slots=True)
class CobConstant:
    """Reference to a constant: `$name` or `$alias::name`."""

    start_fill: CobFill
    path: str

    def write_to(self, writer: RawSerializer) -> None:
        self.write_to_with_space(writer, "")

    def write_to_with_space(self, writer: RawSerializer, space: str) -> None:
        self.start_fill.write_to_or_else(writer, space)
        writer.write_str("$")
        writer.write_str(self.path)

    @classmethod
    def try_parse(cls, start_fill: CobFill, span: Span) -> tuple[CobConstant | None, CobFill, Span]:
        if not span.startswith("$"):
            return None, start_fill, span
        matched = span.advance(1).match(CONSTANT_PATH)
        if matched is None:
            return None, start_fill, span
        path, remaining = matched
        end_fill, remaining = CobFill.parse(remaining)
        return cls(start_fill, path), end_fill, remaining

    def recover_fill(self, other: CobConstant) -> None:
        self.start_fill.recover(other.start_fill)


class MacroParamKind(StrEnum):
    REQUIRED = "@"
    OPTIONAL = "?"
    CATCH_ALL = ".."


@dataclass(slots=True)
class CobMacroParam:
    """Placeholder filled in by a macro invocation: `@name`, `?name` or `..name`."""

    fill: CobFill
    kind: MacroParamKind
    name: str

    def write_to(self, writer: RawSerializer) -> None:
        self.write_to_with_space(writer, "")

    def write_to_with_space(self, writer: RawSerializer, space: str) -> None:
        self.fill.write_to_or_else(writer, space)
        writer.write_str(self.kind.value)
        writer.write_str(self.name)

    @classmethod
    def try_parse(cls, fill: CobFill, span: Span) -> tuple[CobMacroParam | None, CobFill, Span]:
        for kind in MacroParamKind:
            if span.startswith(kind.value):
                break
        else:
            return None, fill, span
        matched = snake_identifier(span.advance(len(kind.value)))
        if matched is None:
            raise fail(span, f"failed parsing macro parameter; expected a snake-case name after '{kind.value}'")
        name, remaining = matched
        next_fill, remaining = CobFill.parse(remaining)
        return cls(fill, kind, name), next_fill, remaining

    def recover_fill(self, other: CobMacroParam) -> None:
        self.fill.recover(other.fill)


@dataclass(slots=True)
class CobDataMacroCall:
    """`path!(args)`; kept verbatim, never expanded by this package."""

    fill: CobFill
    path: str
    args: CobTuple

    def write_to(self, writer: RawSerializer) -> None:
        self.write_to_with_space(writer, "")

    def write_to_with_space(self, writer: RawSerializer, space: str) -> None:
        self.fill.write_to_or_else(writer, space)
        writer.write_str(self.path)
        writer.write_str("!")
        self.args.write_to(writer)

    @classmethod
    def try_parse(cls, fill: CobFill, span: Span) -> tuple[CobDataMacroCall | None, CobFill, Span]:
        matched = span.match(DATA_MACRO_PATH)
        if matched is None:
            return None, fill, span
        path, remaining = matched
        args, next_fill, remaining = CobTuple.try_parse(CobFill(), remaining.advance(1))
        if args is None:
            raise fail(span, f"failed parsing data macro call {path}!; expected '(' after '!'")
        return cls(fill, path, args), next_fill, remaining

    def recover_fill(self, other: CobDataMacroCall) -> None:
        self.fill.recover(other.fill)
        self.args.recover_fill(other.args)


# -- value union ---------------------------------------------------------------------------------

type CobValue = (
    CobEnum
    | CobHexColor
    | CobVal
    | CobArray
    | CobTuple
    | CobMap
    | CobNumber
    | CobBool
    | CobNone
    | CobString
    | CobConstant
    | CobDataMacroCall
    | CobMacroParam
)

VALUE_TYPES: Final[tuple[type, ...]] = (
    CobEnum,
    CobHexColor,
    CobVal,
    CobArray,
    CobTuple,
    CobMap,
    CobNumber,
    CobBool,
    CobNone,
    CobString,
    CobConstant,
    CobDataMacroCall,
    CobMacroParam,
)

_VALUE_PARSERS: Final[tuple[Callable[[CobFill, Span], tuple[CobValue | CobBuiltin | None, CobFill, Span]], ...]] = (
    CobEnum.try_parse,
    try_parse_builtin,
    CobArray.try_parse,
    CobTuple.try_parse,
    CobMap.try_parse,
    CobNumber.try_parse,
    CobBool.try_parse,
    CobNone.try_parse,
    CobString.try_parse,
    CobConstant.try_parse,
    CobDataMacroCall.try_parse,
    CobMacroParam.try_parse,
)


def is_value(node: object) -> bool:
    return isinstance(node, VALUE_TYPES)


def parse_value(fill: CobFill, span: Span) -> tuple[CobValue | None, CobFill, Span]:
    """Try each value production in priority order."""
    for parser in _VALUE_PARSERS:
        value, next_fill, remaining = parser(fill, span)
        if value is not None:
            return value, next_fill, remaining
    return None, fill, span


def recover_value_fill(value: CobValue, other: CobValue) -> None:
    """Copy fill from `other` when both values are the same variant."""
    if type(value) is type(other):
        value.recover_fill(other)  # type: ignore[arg-type]


def value_fill(value: CobValue | CobValueGroup | CobMapKeyValue) -> CobFill:
    """The fill owned by the start of a value."""
    match value:
        case CobArray() | CobTuple() | CobMap() | CobConstant() | CobValueGroup():
            return value.start_fill
        case CobMapKeyValue(key=key):
            return value_fill(key) if not isinstance(key, CobMapFieldName) else key.fill
        case _:
            return value.fill


# -- value groups --------------------------------------------------------------------------------

type CobValueGroupEntry = CobMapKeyValue | CobValue


def _try_parse_group_entry(fill: CobFill, span: Span) -> tuple[CobValueGroupEntry | None, CobFill, Span]:
    status, parsed, next_fill, remaining = CobMapKeyValue.try_parse(fill, span)
    match status:
        case KeyValueParse.FAILURE:
            return None, next_fill, span
        case KeyValueParse.SUCCESS:
            return parsed, next_fill, remaining  # type: ignore[return-value]
    if isinstance(parsed, CobMapFieldName):
        raise fail(span, f"failed parsing value group entry; found field name without value: {parsed.name}")
    return parsed, next_fill, remaining  # type: ignore[return-value]


@dataclass(slots=True)
class CobValueGroup:
    """`\\ entries \\`: several values (or key-values) bound to one constant."""

    start_fill: CobFill
    entries: list[CobValueGroupEntry]
    end_fill: CobFill = field(default_factory=CobFill)

    def write_to(self, writer: RawSerializer) -> None:
        self.write_to_with_space(writer, "")

    def write_to_with_space(self, writer: RawSerializer, space: str) -> None:
        self.start_fill.write_to_or_else(writer, space)
        writer.write_str("\\")
        _write_entries(self.entries, writer)
        self.end_fill.write_to(writer)
        writer.write_str("\\")

    @classmethod
    def try_parse(cls, start_fill: CobFill, span: Span) -> tuple[CobValueGroup | None, CobFill, Span]:
        parsed = _parse_delimited("value group", "\\", "\\", start_fill, span, _try_parse_group_entry)
        if parsed is None:
            return None, start_fill, span
        entries, end_fill, remaining = parsed
        post_fill, remaining = CobFill.parse(remaining)
        return cls(start_fill, entries, end_fill), post_fill, remaining

    def recover_fill(self, other: CobValueGroup) -> None:
        self.start_fill.recover(other.start_fill)
        for entry, other_entry in zip(self.entries, other.entries):
            if type(entry) is type(other_entry):
                entry.recover_fill(other_entry)  # type: ignore[arg-type]
        self.end_fill.recover(other.end_fill)
