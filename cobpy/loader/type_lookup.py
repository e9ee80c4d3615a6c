"""Type lookup contracts used to canonicalize and instantiate loadables."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
import logging
from typing import Protocol

logger = logging.getLogger(__name__)


def split_generics(canonical: str) -> tuple[str, str]:
    """Split `path::Name<G>` into `("path::Name", "<G>")`."""
    idx = canonical.find("<")
    if idx < 0:
        return canonical, ""
    return canonical[:idx], canonical[idx:]


def short_name(canonical: str) -> str:
    """Last path segment without generics: `a::b::Foo<u8>` -> `Foo`."""
    base, _ = split_generics(canonical)
    return base.rsplit("::", 1)[-1]


class TypeLookup(Protocol):
    """Abstract type registry consulted by the resolver and the extractor."""

    def canonical_name(self, name: str) -> str | None: ...

    def get(self, canonical: str) -> type | None: ...


@dataclass(frozen=True, slots=True)
class NullTypeLookup:
    """Lookup that knows no types; loadables keep their written names."""

    def canonical_name(self, name: str) -> str | None:
        return None

    def get(self, canonical: str) -> type | None:
        return None


@dataclass(slots=True)
class TypeRegistry:
    """In-memory registry of Python dataclasses and enums.

    Types are registered under a canonical path (`ui::widgets::Button`, or just
    the class name). Loadables may name a type by its canonical path or by its
    short name; generic arguments are carried through unchanged.
    """

    types: dict[str, type] = field(default_factory=dict)
    short_names: dict[str, str] = field(default_factory=dict)

    def register(self, cls: type, path: str | None = None) -> type:
        canonical = path if path is not None else cls.__name__
        self.types[canonical] = cls
        short = short_name(canonical)
        existing = self.short_names.get(short)
        if existing is not None and existing != canonical:
            logger.warning("short type name %s is ambiguous between %s and %s", short, existing, canonical)
        self.short_names[short] = canonical
        return cls

    def canonical_name(self, name: str) -> str | None:
        base, generics = split_generics(name)
        if base in self.types:
            return base + generics
        canonical = self.short_names.get(base)
        if canonical is None:
            return None
        return canonical + generics

    def get(self, canonical: str) -> type | None:
        found = self.types.get(canonical)
        if found is not None:
            return found
        base, _ = split_generics(canonical)
        return self.types.get(base)


@dataclass(frozen=True, slots=True)
class ScopedTypeLookup:
    """Type lookup extended with one file's `#using` aliases."""

    parent: TypeLookup
    aliases: Mapping[str, str]

    def canonical_name(self, name: str) -> str | None:
        target = self.aliases.get(name)
        if target is None:
            base, generics = split_generics(name)
            target = self.aliases.get(base)
            if target is None:
                return self.parent.canonical_name(name)
            target = target + generics
        return self.parent.canonical_name(target) or target

    def get(self, canonical: str) -> type | None:
        return self.parent.get(canonical)
