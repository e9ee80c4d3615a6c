"""Constant definitions: `$name = value` and `$name = \\ group \\`."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from cobpy.ast.value import CobValue, CobValueGroup, parse_value, recover_value_fill, value_fill
from cobpy.parser.errors import fail
from cobpy.parser.fill import CobFill
from cobpy.parser.identifiers import snake_identifier

if TYPE_CHECKING:
    from cobpy.format.serializer import RawSerializer
    from cobpy.text.span import Span

type CobConstantValue = CobValue | CobValueGroup


def try_parse_constant_value(fill: CobFill, span: Span) -> tuple[CobConstantValue | None, CobFill, Span]:
    value, next_fill, remaining = parse_value(fill, span)
    if value is not None:
        return value, next_fill, remaining
    return CobValueGroup.try_parse(fill, span)


def recover_constant_value_fill(value: CobConstantValue, other: CobConstantValue) -> None:
    if isinstance(value, CobValueGroup) and isinstance(other, CobValueGroup):
        value.recover_fill(other)
    elif not isinstance(value, CobValueGroup) and not isinstance(other, CobValueGroup):
        recover_value_fill(value, other)


@dataclass(slots=True)
class CobConstantDef:
    start_fill: CobFill
    name: str
    pre_eq_fill: CobFill
    value: CobConstantValue

    def write_to(self, writer: RawSerializer) -> None:
        self.write_to_with_space(writer, "")

    def write_to_with_space(self, writer: RawSerializer, space: str) -> None:
        self.start_fill.write_to_or_else(writer, space)
        writer.write_str("$")
        writer.write_str(self.name)
        self.pre_eq_fill.write_to(writer)
        writer.write_str("=")
        self.value.write_to(writer)

    @classmethod
    def try_parse(cls, fill: CobFill, span: Span) -> tuple[CobConstantDef | None, CobFill, Span]:
        if not span.startswith("$"):
            return None, fill, span
        matched = snake_identifier(span.advance(1))
        if matched is None:
            return None, fill, span
        name, remaining = matched
        pre_eq_fill, remaining = CobFill.parse(remaining)
        if not remaining.startswith("="):
            raise fail(remaining, f"failed parsing constant definition ${name}; expected '='")
        eq_fill, remaining = CobFill.parse(remaining.advance(1))
        value, next_fill, remaining = try_parse_constant_value(eq_fill, remaining)
        if value is None:
            raise fail(span, f"failed parsing constant definition ${name}; no valid value or value group found")
        return cls(fill, name, pre_eq_fill, value), next_fill, remaining

    def recover_fill(self, other: CobConstantDef) -> None:
        self.start_fill.recover(other.start_fill)
        self.pre_eq_fill.recover(other.pre_eq_fill)
        recover_constant_value_fill(self.value, other.value)

    @classmethod
    def of(cls, name: str, value: CobConstantValue) -> CobConstantDef:
        value_fill(value).text = value_fill(value).text or " "
        return cls(CobFill(), name, CobFill(" "), value)
