"""Scene trees: layers, scene macro definitions, calls and commands.

Scene structure is carried by indentation. Every entry in a layer starts on
its own line and is indented deeper than its parent; siblings are expected to
share the indentation of the first entry.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
import re
from typing import TYPE_CHECKING, Final

from cobpy.ast.loadable import CobLoadable, CobLoadableIdentifier
from cobpy.diagnostics.codes import PARSER_MISALIGNED_SCENE_ITEM
from cobpy.parser.errors import fail
from cobpy.parser.fill import CobFill
from cobpy.parser.identifiers import ANYTHING_IDENTIFIER, ANYTHING_PATH, anything_identifier

if TYPE_CHECKING:
    from cobpy.format.serializer import RawSerializer
    from cobpy.text.span import Span

INDENT_STEP: Final[int] = 4
_NODE_NAME: Final[re.Pattern[str]] = re.compile(r'"(' + ANYTHING_IDENTIFIER.pattern + r')?"')


def _indent_of(text: str) -> int:
    indent = CobFill(text).ends_newline_then_num_spaces()
    return 0 if indent is None else indent


def _child_space(own_space: str) -> str:
    return "\n" + " " * (_indent_of(own_space) + INDENT_STEP)


@dataclass(slots=True)
class CobSceneNodeName:
    """Quoted layer name; the empty name `""` marks an anonymous layer."""

    name: str = ""

    def write_to(self, writer: RawSerializer) -> None:
        writer.write_str('"')
        writer.write_str(self.name)
        writer.write_str('"')

    @staticmethod
    def try_parse(span: Span) -> tuple[CobSceneNodeName | None, Span]:
        if not span.startswith('"'):
            return None, span
        matched = span.match(_NODE_NAME)
        if matched is None:
            raise fail(span, "failed parsing scene node name; names must be empty or [A-Za-z0-9][A-Za-z0-9_]*")
        text, remaining = matched
        return CobSceneNodeName(text[1:-1]), remaining


class SceneMacroCommandType(StrEnum):
    REMOVE = "-"
    MOVE_TO_TOP = "^"
    MOVE_TO_BOTTOM = "!"


type CobSceneMacroCommandTarget = CobLoadableIdentifier | CobSceneNodeName


@dataclass(slots=True)
class CobSceneMacroCommand:
    """`-Loadable`, `^Loadable`, `!Loadable` or the same addressed at a layer: `^"name"`."""

    fill: CobFill
    command: SceneMacroCommandType
    target: CobSceneMacroCommandTarget

    def write_to(self, writer: RawSerializer) -> None:
        self.write_to_with_space(writer, "")

    def write_to_with_space(self, writer: RawSerializer, space: str) -> None:
        self.fill.write_to_or_else(writer, space)
        writer.write_str(self.command.value)
        self.target.write_to(writer)

    def targets_layer(self) -> bool:
        return isinstance(self.target, CobSceneNodeName)

    def target_key(self) -> str:
        if isinstance(self.target, CobSceneNodeName):
            return self.target.name
        return self.target.to_canonical()

    @classmethod
    def try_parse(cls, fill: CobFill, span: Span) -> tuple[CobSceneMacroCommand | None, CobFill, Span]:
        for command in SceneMacroCommandType:
            if span.startswith(command.value):
                break
        else:
            return None, fill, span
        remaining = span.advance(1)
        target: CobSceneMacroCommandTarget | None
        if remaining.startswith('"'):
            target, remaining = CobSceneNodeName.try_parse(remaining)
        else:
            target, remaining = CobLoadableIdentifier.try_parse(remaining)
        if target is None:
            raise fail(span, f"failed parsing scene macro command '{command.value}'; expected a loadable id or layer name")
        next_fill, remaining = CobFill.parse(remaining)
        return cls(fill, command, target), next_fill, remaining

    def recover_fill(self, other: CobSceneMacroCommand) -> None:
        self.fill.recover(other.fill)


@dataclass(slots=True)
class CobSceneLayer:
    name_fill: CobFill
    name: CobSceneNodeName
    entries: list[CobSceneLayerEntry] = field(default_factory=list)

    def write_to(self, writer: RawSerializer) -> None:
        self.write_to_with_space(writer, "\n")

    def write_to_with_space(self, writer: RawSerializer, space: str) -> None:
        own_space = self.name_fill.text or space
        writer.write_str(own_space)
        self.name.write_to(writer)
        write_scene_entries(self.entries, writer, _child_space(own_space))

    @classmethod
    def try_parse(cls, name_fill: CobFill, span: Span) -> tuple[CobSceneLayer | None, CobFill, Span]:
        name, remaining = CobSceneNodeName.try_parse(span)
        if name is None:
            return None, name_fill, span
        layer_indent = name_fill.ends_newline_then_num_spaces()
        if layer_indent is None:
            raise fail(span, f"failed parsing scene layer \"{name.name}\"; layer doesn't start on a new line")
        item_fill, remaining = CobFill.parse(remaining)
        if item_fill.ends_newline_then_num_spaces() is None:
            if remaining.is_empty():
                return cls(name_fill, name), item_fill, remaining
            raise fail(remaining, f"failed parsing scene layer \"{name.name}\"; first item isn't on a new line")
        entries, next_fill, remaining = parse_scene_entries(layer_indent, item_fill, remaining)
        return cls(name_fill, name, entries), next_fill, remaining

    def recover_fill(self, other: CobSceneLayer) -> None:
        self.name_fill.recover(other.name_fill)
        recover_scene_entries_fill(self.entries, other.entries)

    @classmethod
    def named(cls, name: str, entries: list[CobSceneLayerEntry] | None = None) -> CobSceneLayer:
        return cls(CobFill(), CobSceneNodeName(name), entries if entries is not None else [])


@dataclass(slots=True)
class CobSceneMacroCallContainer:
    """`{ overrides }` attached to a scene macro call."""

    entries: list[CobSceneLayerEntry] = field(default_factory=list)
    end_fill: CobFill = field(default_factory=CobFill)

    def write_to_with_space(self, writer: RawSerializer, own_space: str) -> None:
        writer.write_str("{")
        write_scene_entries(self.entries, writer, _child_space(own_space))
        if self.entries and self.end_fill.is_empty():
            writer.write_str("\n" + " " * _indent_of(own_space))
        else:
            self.end_fill.write_to(writer)
        writer.write_str("}")

    def recover_fill(self, other: CobSceneMacroCallContainer) -> None:
        recover_scene_entries_fill(self.entries, other.entries)
        self.end_fill.recover(other.end_fill)


@dataclass(slots=True)
class CobSceneMacroCall:
    """`+path{ overrides }`: expands a scene macro in place."""

    fill: CobFill
    path: str
    container: CobSceneMacroCallContainer = field(default_factory=CobSceneMacroCallContainer)

    def write_to(self, writer: RawSerializer) -> None:
        self.write_to_with_space(writer, "")

    def write_to_with_space(self, writer: RawSerializer, space: str) -> None:
        own_space = self.fill.text or space
        writer.write_str(own_space)
        writer.write_str("+")
        writer.write_str(self.path)
        self.container.write_to_with_space(writer, own_space)

    @classmethod
    def try_parse(cls, fill: CobFill, span: Span, indent: int) -> tuple[CobSceneMacroCall | None, CobFill, Span]:
        if not span.startswith("+"):
            return None, fill, span
        matched = span.advance(1).match(ANYTHING_PATH)
        if matched is None:
            return None, fill, span
        path, remaining = matched
        if not remaining.startswith("{"):
            raise fail(span, f"failed parsing scene macro call +{path}; expected '{{' directly after the macro path")
        item_fill, remaining = CobFill.parse(remaining.advance(1))
        if remaining.startswith("}"):
            container = CobSceneMacroCallContainer([], item_fill)
        else:
            entries, end_fill, remaining = parse_scene_entries(indent, item_fill, remaining)
            if not remaining.startswith("}"):
                raise fail(remaining, f"failed parsing scene macro call +{path}; expected '}}'")
            container = CobSceneMacroCallContainer(entries, end_fill)
        next_fill, remaining = CobFill.parse(remaining.advance(1))
        return cls(fill, path, container), next_fill, remaining

    def recover_fill(self, other: CobSceneMacroCall) -> None:
        self.fill.recover(other.fill)
        self.container.recover_fill(other.container)


type CobSceneLayerEntry = CobLoadable | CobSceneMacroCall | CobSceneMacroCommand | CobSceneLayer


def write_scene_entries(entries: list[CobSceneLayerEntry], writer: RawSerializer, space: str) -> None:
    for entry in entries:
        entry.write_to_with_space(writer, space)


def recover_scene_entries_fill(entries: list[CobSceneLayerEntry], others: list[CobSceneLayerEntry]) -> None:
    for entry, other in zip(entries, others):
        if type(entry) is type(other):
            entry.recover_fill(other)  # type: ignore[arg-type]


def try_parse_scene_layer_entry(
    parent_indent: int, expected_indent: int | None, fill: CobFill, span: Span
) -> tuple[CobSceneLayerEntry | None, CobFill, Span]:
    """Parse one entry of a layer, or return None if the layer has ended."""
    indent = fill.ends_newline_then_num_spaces()
    if indent is None:
        if span.is_empty():
            return None, fill, span
        raise fail(span, "failed parsing scene layer entry; entry isn't on a separate line")
    if indent <= parent_indent:
        return None, fill, span
    if expected_indent is not None and indent != expected_indent:
        span.warn(
            PARSER_MISALIGNED_SCENE_ITEM,
            f"expected indentation of {expected_indent} spaces but found {indent}",
            length=len(span.fragment.split("\n", 1)[0]),
        )

    loadable, next_fill, remaining = CobLoadable.try_parse(fill, span)
    if loadable is not None:
        return loadable, next_fill, remaining
    call, next_fill, remaining = CobSceneMacroCall.try_parse(fill, span, indent)
    if call is not None:
        return call, next_fill, remaining
    command, next_fill, remaining = CobSceneMacroCommand.try_parse(fill, span)
    if command is not None:
        return command, next_fill, remaining
    return CobSceneLayer.try_parse(fill, span)


def parse_scene_entries(
    parent_indent: int, fill: CobFill, span: Span
) -> tuple[list[CobSceneLayerEntry], CobFill, Span]:
    entries: list[CobSceneLayerEntry] = []
    expected_indent: int | None = None
    while True:
        entry, next_fill, remaining = try_parse_scene_layer_entry(parent_indent, expected_indent, fill, span)
        if entry is None:
            return entries, fill, span
        if expected_indent is None:
            expected_indent = fill.ends_newline_then_num_spaces()
        entries.append(entry)
        fill, span = next_fill, remaining


class SceneMacroDelimiter(StrEnum):
    BACKSLASH = "\\"
    BRACE = "{"

    @property
    def closing(self) -> str:
        return "\\" if self is SceneMacroDelimiter.BACKSLASH else "}"


@dataclass(slots=True)
class CobSceneMacroValue:
    """Template body of a scene macro definition."""

    start_fill: CobFill
    entries: list[CobSceneLayerEntry] = field(default_factory=list)
    end_fill: CobFill = field(default_factory=CobFill)
    delimiter: SceneMacroDelimiter = SceneMacroDelimiter.BACKSLASH

    def write_to(self, writer: RawSerializer) -> None:
        self.write_to_with_space(writer, "")

    def write_to_with_space(self, writer: RawSerializer, space: str) -> None:
        self.start_fill.write_to_or_else(writer, space)
        writer.write_str(self.delimiter.value)
        write_scene_entries(self.entries, writer, _child_space("\n"))
        if self.entries and self.end_fill.is_empty():
            writer.write_str("\n")
        else:
            self.end_fill.write_to(writer)
        writer.write_str(self.delimiter.closing)

    @classmethod
    def try_parse(cls, start_fill: CobFill, span: Span, indent: int) -> tuple[CobSceneMacroValue | None, CobFill, Span]:
        for delimiter in SceneMacroDelimiter:
            if span.startswith(delimiter.value):
                break
        else:
            return None, start_fill, span
        item_fill, remaining = CobFill.parse(span.advance(1))
        if remaining.startswith(delimiter.closing):
            value = cls(start_fill, [], item_fill, delimiter)
        else:
            entries, end_fill, remaining = parse_scene_entries(indent, item_fill, remaining)
            if not remaining.startswith(delimiter.closing):
                raise fail(remaining, f"failed parsing scene macro definition; expected '{delimiter.closing}'")
            value = cls(start_fill, entries, end_fill, delimiter)
        next_fill, remaining = CobFill.parse(remaining.advance(1))
        return value, next_fill, remaining

    def recover_fill(self, other: CobSceneMacroValue) -> None:
        self.start_fill.recover(other.start_fill)
        recover_scene_entries_fill(self.entries, other.entries)
        self.end_fill.recover(other.end_fill)


@dataclass(slots=True)
class CobSceneMacroDef:
    """`+name = \\ entries \\`."""

    start_fill: CobFill
    name: str
    pre_eq_fill: CobFill
    value: CobSceneMacroValue

    def write_to(self, writer: RawSerializer) -> None:
        self.write_to_with_space(writer, "")

    def write_to_with_space(self, writer: RawSerializer, space: str) -> None:
        self.start_fill.write_to_or_else(writer, space)
        writer.write_str("+")
        writer.write_str(self.name)
        self.pre_eq_fill.write_to(writer)
        writer.write_str("=")
        self.value.write_to(writer)

    @classmethod
    def try_parse(cls, fill: CobFill, span: Span) -> tuple[CobSceneMacroDef | None, CobFill, Span]:
        if not span.startswith("+"):
            return None, fill, span
        matched = anything_identifier(span.advance(1))
        if matched is None:
            return None, fill, span
        name, remaining = matched
        pre_eq_fill, remaining = CobFill.parse(remaining)
        if not remaining.startswith("="):
            raise fail(remaining, f"failed parsing scene macro definition +{name}; expected '='")
        value_start_fill, remaining = CobFill.parse(remaining.advance(1))
        indent = fill.ends_newline_then_num_spaces() or 0
        value, next_fill, remaining = CobSceneMacroValue.try_parse(value_start_fill, remaining, indent)
        if value is None:
            raise fail(span, f"failed parsing scene macro definition +{name}; expected '\\' or '{{' after '='")
        return cls(fill, name, pre_eq_fill, value), next_fill, remaining

    def recover_fill(self, other: CobSceneMacroDef) -> None:
        self.start_fill.recover(other.start_fill)
        self.pre_eq_fill.recover(other.pre_eq_fill)
        self.value.recover_fill(other.value)

    @classmethod
    def of(cls, name: str, entries: list[CobSceneLayerEntry]) -> CobSceneMacroDef:
        return cls(CobFill(), name, CobFill(" "), CobSceneMacroValue(CobFill(" "), entries))
