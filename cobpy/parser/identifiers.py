"""Identifier grammars."""

from __future__ import annotations

import re
from typing import TYPE_CHECKING, Final

if TYPE_CHECKING:
    from cobpy.text.span import Span

SNAKE_IDENTIFIER: Final[re.Pattern[str]] = re.compile(r"[a-z][a-z0-9_]*")
NUMERICAL_SNAKE_IDENTIFIER: Final[re.Pattern[str]] = re.compile(r"[a-z0-9][a-z0-9_]*")
CAMEL_IDENTIFIER: Final[re.Pattern[str]] = re.compile(r"[A-Z][A-Za-z0-9]*")
ANYTHING_IDENTIFIER: Final[re.Pattern[str]] = re.compile(r"[A-Za-z0-9][A-Za-z0-9_]*")

# `a::b::name` where every segment but the last is snake case.
SNAKE_PATH_PREFIX: Final[re.Pattern[str]] = re.compile(r"(?:[a-z][a-z0-9_]*::)*")
SNAKE_PATH: Final[re.Pattern[str]] = re.compile(r"[a-z][a-z0-9_]*(?:::[a-z][a-z0-9_]*)*")
ANYTHING_PATH: Final[re.Pattern[str]] = re.compile(r"(?:[a-z][a-z0-9_]*::)*[A-Za-z0-9][A-Za-z0-9_]*")
MANIFEST_KEY: Final[re.Pattern[str]] = re.compile(r"[a-z][a-z0-9_]*(?:\.[a-z][a-z0-9_]*)*")

DEFS_SEPARATOR: Final[str] = "::"


def snake_identifier(span: Span) -> tuple[str, Span] | None:
    return span.match(SNAKE_IDENTIFIER)


def numerical_snake_identifier(span: Span) -> tuple[str, Span] | None:
    return span.match(NUMERICAL_SNAKE_IDENTIFIER)


def camel_identifier(span: Span) -> tuple[str, Span] | None:
    return span.match(CAMEL_IDENTIFIER)


def anything_identifier(span: Span) -> tuple[str, Span] | None:
    return span.match(ANYTHING_IDENTIFIER)


def path_to_string(separator: str, parts: list[str] | tuple[str, ...]) -> str:
    """Join non-empty path parts: `a::b::c`."""
    return separator.join(part for part in parts if part)
