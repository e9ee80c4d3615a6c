"""Generic arguments on loadable identifiers: `Foo<Bar<i32>, (u8, u8)>`."""

from __future__ import annotations

from dataclasses import dataclass, field
import re
from typing import TYPE_CHECKING, Final

from cobpy.parser.errors import fail
from cobpy.parser.fill import CobFill
from cobpy.parser.identifiers import camel_identifier, snake_identifier

if TYPE_CHECKING:
    from cobpy.format.serializer import RawSerializer
    from cobpy.text.span import Span

RUST_PRIMITIVE: Final[re.Pattern[str]] = re.compile(r"f32|f64|[iu](?:8|16|32|64|128|size)|bool|char")


@dataclass(slots=True)
class CobRustPrimitive:
    fill: CobFill
    primitive: str

    def write_to_with_space(self, writer: RawSerializer, space: str) -> None:
        self.fill.write_to_or_else(writer, space)
        writer.write_str(self.primitive)

    def write_canonical(self, buff: list[str]) -> None:
        buff.append(self.primitive)

    def recover_fill(self, other: CobRustPrimitive) -> None:
        self.fill.recover(other.fill)


@dataclass(slots=True)
class CobGenericStruct:
    fill: CobFill
    id: str
    generics: CobGenerics | None = None

    def write_to_with_space(self, writer: RawSerializer, space: str) -> None:
        self.fill.write_to_or_else(writer, space)
        writer.write_str(self.id)
        if self.generics is not None:
            self.generics.write_to(writer)

    def write_canonical(self, buff: list[str]) -> None:
        buff.append(self.id)
        if self.generics is not None:
            self.generics.write_canonical(buff)

    def recover_fill(self, other: CobGenericStruct) -> None:
        self.fill.recover(other.fill)
        if self.generics is not None and other.generics is not None:
            self.generics.recover_fill(other.generics)


@dataclass(slots=True)
class CobGenericTuple:
    fill: CobFill
    values: list[CobGenericItem]
    close_fill: CobFill = field(default_factory=CobFill)

    def write_to_with_space(self, writer: RawSerializer, space: str) -> None:
        self.fill.write_to_or_else(writer, space)
        writer.write_str("(")
        _write_items(self.values, writer)
        self.close_fill.write_to(writer)
        writer.write_str(")")

    def write_canonical(self, buff: list[str]) -> None:
        buff.append("(")
        _write_items_canonical(self.values, buff)
        buff.append(")")

    def recover_fill(self, other: CobGenericTuple) -> None:
        self.fill.recover(other.fill)
        for value, other_value in zip(self.values, other.values):
            _recover_item(value, other_value)
        self.close_fill.recover(other.close_fill)


@dataclass(slots=True)
class CobGenericMacroParam:
    """`@name` placeholder that a macro fills in; never canonical."""

    fill: CobFill
    name: str

    def write_to_with_space(self, writer: RawSerializer, space: str) -> None:
        self.fill.write_to_or_else(writer, space)
        writer.write_str("@")
        writer.write_str(self.name)

    def write_canonical(self, buff: list[str]) -> None:
        buff.append("@")
        buff.append(self.name)

    def recover_fill(self, other: CobGenericMacroParam) -> None:
        self.fill.recover(other.fill)


type CobGenericItem = CobGenericStruct | CobGenericTuple | CobRustPrimitive | CobGenericMacroParam


def _write_items(items: list[CobGenericItem], writer: RawSerializer) -> None:
    for idx, item in enumerate(items):
        item.write_to_with_space(writer, "" if idx == 0 else ", ")


def _write_items_canonical(items: list[CobGenericItem], buff: list[str]) -> None:
    for idx, item in enumerate(items):
        if idx > 0:
            buff.append(", ")
        item.write_canonical(buff)


def _recover_item(item: CobGenericItem, other: CobGenericItem) -> None:
    if type(item) is type(other):
        item.recover_fill(other)  # type: ignore[arg-type]


def _parse_item(span: Span) -> tuple[CobGenericItem, Span] | None:
    """Parse one generic item (with its leading fill); None if nothing matches."""
    fill, remaining = CobFill.parse(span)

    camel = camel_identifier(remaining)
    if camel is not None:
        name, after = camel
        generics, after = CobGenerics.try_parse(after)
        return CobGenericStruct(fill, name, generics), after

    if remaining.startswith("("):
        values, after = _parse_items(remaining.advance(1))
        close_fill, after = CobFill.parse(after)
        if not after.startswith(")"):
            raise fail(after, "failed parsing generic tuple; expected ')'")
        return CobGenericTuple(fill, values, close_fill), after.advance(1)

    if remaining.startswith("@"):
        param = snake_identifier(remaining.advance(1))
        if param is None:
            raise fail(remaining, "failed parsing generic macro parameter; expected `@name`")
        return CobGenericMacroParam(fill, param[0]), param[1]

    primitive = remaining.match(RUST_PRIMITIVE)
    if primitive is not None:
        return CobRustPrimitive(fill, primitive[0]), primitive[1]
    return None


def _parse_items(span: Span) -> tuple[list[CobGenericItem], Span]:
    items: list[CobGenericItem] = []
    remaining = span
    while (parsed := _parse_item(remaining)) is not None:
        item, remaining = parsed
        items.append(item)
    return items, remaining


@dataclass(slots=True)
class CobGenerics:
    values: list[CobGenericItem]
    close_fill: CobFill = field(default_factory=CobFill)

    def write_to(self, writer: RawSerializer) -> None:
        writer.write_str("<")
        _write_items(self.values, writer)
        self.close_fill.write_to(writer)
        writer.write_str(">")

    def write_canonical(self, buff: list[str]) -> None:
        buff.append("<")
        _write_items_canonical(self.values, buff)
        buff.append(">")

    def to_canonical(self) -> str:
        buff: list[str] = []
        self.write_canonical(buff)
        return "".join(buff)

    def is_resolved(self) -> bool:
        """False while any macro parameter placeholder remains."""
        return all(_item_is_resolved(item) for item in self.values)

    @staticmethod
    def try_parse(span: Span) -> tuple[CobGenerics | None, Span]:
        if not span.startswith("<"):
            return None, span
        values, remaining = _parse_items(span.advance(1))
        if not values:
            raise fail(remaining, "failed parsing generics; expected at least one generic argument")
        close_fill, remaining = CobFill.parse(remaining)
        if not remaining.startswith(">"):
            raise fail(remaining, "failed parsing generics; expected '>'")
        return CobGenerics(values, close_fill), remaining.advance(1)

    def recover_fill(self, other: CobGenerics) -> None:
        for value, other_value in zip(self.values, other.values):
            _recover_item(value, other_value)
        self.close_fill.recover(other.close_fill)


def _item_is_resolved(item: CobGenericItem) -> bool:
    match item:
        case CobGenericMacroParam():
            return False
        case CobGenericStruct(generics=generics):
            return generics is None or generics.is_resolved()
        case CobGenericTuple(values=values):
            return all(_item_is_resolved(value) for value in values)
        case _:
            return True
