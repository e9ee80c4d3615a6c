"""Loadables: typed value blocks such as `Foo<u8>{a: 1}` or `Mode::Fast`."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from cobpy.ast.generics import CobGenerics
from cobpy.ast.value import (
    CobEnum,
    CobPayload,
    parse_payload,
    recover_payload_fill,
)
from cobpy.parser.errors import fail
from cobpy.parser.fill import CobFill
from cobpy.parser.identifiers import camel_identifier

if TYPE_CHECKING:
    from cobpy.format.serializer import RawSerializer
    from cobpy.text.span import Span


@dataclass(slots=True)
class CobLoadableIdentifier:
    name: str
    generics: CobGenerics | None = None

    def write_to(self, writer: RawSerializer) -> None:
        writer.write_str(self.name)
        if self.generics is not None:
            self.generics.write_to(writer)

    def write_canonical(self, buff: list[str]) -> None:
        buff.append(self.name)
        if self.generics is not None:
            self.generics.write_canonical(buff)

    def to_canonical(self) -> str:
        """`Name<G1, G2>` with normalized spacing, used as the lookup key."""
        buff: list[str] = []
        self.write_canonical(buff)
        return "".join(buff)

    def is_resolved(self) -> bool:
        return self.generics is None or self.generics.is_resolved()

    def set_canonical(self, canonical: str) -> None:
        """Replace the identifier with an already-canonical name, folding any generics into it."""
        if self.name == canonical and self.generics is None:
            return
        self.name = canonical
        self.generics = None

    @staticmethod
    def try_parse(span: Span) -> tuple[CobLoadableIdentifier | None, Span]:
        matched = camel_identifier(span)
        if matched is None:
            return None, span
        name, remaining = matched
        generics, remaining = CobGenerics.try_parse(remaining)
        return CobLoadableIdentifier(name, generics), remaining

    def recover_fill(self, other: CobLoadableIdentifier) -> None:
        if self.generics is not None and other.generics is not None:
            self.generics.recover_fill(other.generics)


type CobLoadableVariant = CobPayload | CobEnum


@dataclass(slots=True)
class CobLoadable:
    """A loadable with its payload: unit, tuple, array, map or `::Variant`."""

    fill: CobFill
    id: CobLoadableIdentifier
    variant: CobLoadableVariant = None

    def write_to(self, writer: RawSerializer) -> None:
        self.write_to_with_space(writer, "")

    def write_to_with_space(self, writer: RawSerializer, space: str) -> None:
        self.fill.write_to_or_else(writer, space)
        self.id.write_to(writer)
        match self.variant:
            case None:
                pass
            case CobEnum():
                writer.write_str("::")
                self.variant.write_to(writer)
            case _:
                self.variant.write_to(writer)

    @property
    def name(self) -> str:
        return self.id.name

    def canonical_id(self) -> str:
        return self.id.to_canonical()

    @classmethod
    def try_parse(cls, fill: CobFill, span: Span) -> tuple[CobLoadable | None, CobFill, Span]:
        id, remaining = CobLoadableIdentifier.try_parse(span)
        if id is None:
            return None, fill, span
        if remaining.startswith("::"):
            variant, next_fill, remaining = CobEnum.try_parse(CobFill(), remaining.advance(2))
            if variant is None:
                raise fail(span, f"failed parsing loadable {id.name}; expected enum variant after '::'")
            return cls(fill, id, variant), next_fill, remaining
        payload, next_fill, remaining = parse_payload(remaining)
        return cls(fill, id, payload), next_fill, remaining

    def recover_fill(self, other: CobLoadable) -> None:
        self.fill.recover(other.fill)
        self.id.recover_fill(other.id)
        if isinstance(self.variant, CobEnum) and isinstance(other.variant, CobEnum):
            self.variant.recover_fill(other.variant)
        elif not isinstance(self.variant, CobEnum) and not isinstance(other.variant, CobEnum):
            recover_payload_fill(self.variant, other.variant)

    @classmethod
    def unit(cls, name: str) -> CobLoadable:
        return cls(CobFill(), CobLoadableIdentifier(name))

    @classmethod
    def from_instance(cls, obj: object) -> CobLoadable:
        """Synthesize a loadable from a dataclass instance or enum member."""
        from cobpy.loader.extract import loadable_from_instance

        return loadable_from_instance(obj)

