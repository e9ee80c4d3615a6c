from dataclasses import dataclass, field
from enum import Enum

import pytest

from cobpy.ast import CobLoadable, Color, Val, ValUnit, parse_value
from cobpy.format import to_cob_string
from cobpy.loader import (
    CobExtractError,
    CobUnregisteredTypeError,
    TypeRegistry,
    from_python,
    instantiate,
    loadable_from_instance,
    payload_to_python,
    to_python,
)
from cobpy.parser import CobFill
from cobpy.text.span import Span


class Display(Enum):
    Flex = "flex"
    Grid = "grid"


@dataclass
class Text:
    text: str
    size: float = 12.0


@dataclass
class Node:
    width: Val
    display: Display


@dataclass
class BackgroundColor:
    color: Color


@dataclass
class Size:
    w: float
    h: float


@dataclass
class Frame:
    size: Size
    label: str | None = None
    tags: list[str] = field(default_factory=list)
    scores: dict[str, int] = field(default_factory=dict)


@dataclass
class Marker:
    pass


@dataclass
class Points:
    values: list[int]


def _registry() -> TypeRegistry:
    registry = TypeRegistry()
    for cls in (Display, Text, Node, BackgroundColor, Size, Frame, Marker, Points):
        registry.register(cls)
    return registry


def _value(text: str):
    value, _, remaining = parse_value(CobFill(), Span.new(text, file="test.cob"))
    assert value is not None and remaining.is_empty()
    return value


def _loadable(text: str) -> CobLoadable:
    loadable, _, remaining = CobLoadable.try_parse(CobFill(), Span.new(text, file="test.cob"))
    assert loadable is not None and remaining.is_empty()
    return loadable


@pytest.mark.parametrize(
    ("text", "expected"),
    [
        ("[1 2.5 \"a\"]", [1, 2.5, "a"]),
        ("(1, true)", (1, True)),
        ('{a: 1 "b": none}', {"a": 1, "b": None}),
        ("Red", "Red"),
        ("Some(10)", {"Some": 10}),
        ("Rect{w: 1}", {"Rect": {"w": 1}}),
        ("Pair(1 2)", {"Pair": (1, 2)}),
        ("#FF0000", Color(255, 0, 0)),
        ("10px", Val(ValUnit.PX, 10.0)),
    ],
)
def test_to_python(text: str, expected: object) -> None:
    assert to_python(_value(text)) == expected


@pytest.mark.parametrize("text", ["$a", "@a", "rgba!(1 2 3)", "{$a}"])
def test_to_python_rejects_unresolved_values(text: str) -> None:
    with pytest.raises(CobExtractError):
        to_python(_value(text))


def test_payload_to_python_unwraps_single_entry_tuples() -> None:
    assert payload_to_python(_loadable("Foo(1)").variant) == 1  # type: ignore[arg-type]
    assert payload_to_python(_loadable("Foo(1 2)").variant) == (1, 2)  # type: ignore[arg-type]
    assert payload_to_python(_loadable("Foo").variant) is None  # type: ignore[arg-type]


def test_instantiate_positional_and_named_fields() -> None:
    registry = _registry()

    assert instantiate(_loadable('Text("hi")'), registry) == Text("hi")
    named = instantiate(_loadable('Text{text: "hi" size: 14}'), registry)
    assert named == Text("hi", 14.0)
    assert isinstance(named.size, float)  # type: ignore[attr-defined]


def test_instantiate_builtins_and_enums() -> None:
    registry = _registry()

    assert instantiate(_loadable("Node{width: 10px display: Grid}"), registry) == Node(
        Val(ValUnit.PX, 10.0), Display.Grid
    )
    assert instantiate(_loadable("BackgroundColor(#FF0000)"), registry) == BackgroundColor(Color(255, 0, 0))
    assert instantiate(_loadable("Display::Flex"), registry) is Display.Flex


def test_instantiate_nested_and_container_fields() -> None:
    registry = _registry()

    frame = instantiate(
        _loadable('Frame{size: Size{w: 1 h: 2} label: none tags: ["a" "b"] scores: {a: 1 "b": 2}}'),
        registry,
    )

    assert frame == Frame(Size(1.0, 2.0), None, ["a", "b"], {"a": 1, "b": 2})
    assert instantiate(_loadable("Frame{size: Size(3, 4) label: \"x\"}"), registry) == Frame(Size(3.0, 4.0), "x")


def test_instantiate_unit_and_array_payloads() -> None:
    registry = _registry()

    assert instantiate(_loadable("Marker"), registry) == Marker()
    assert instantiate(_loadable("Points[1 2 3]"), registry) == Points([1, 2, 3])


def test_instantiate_unregistered_type() -> None:
    with pytest.raises(CobUnregisteredTypeError) as exc_info:
        instantiate(_loadable("Unknown(1)"), _registry())

    assert exc_info.value.name == "Unknown"


@pytest.mark.parametrize(
    "text",
    [
        'Text{text: "hi" color: 1}',
        'Text("a" 1 2)',
        "Display::Block",
        "Text::Small",
        "Frame{size: 1}",
    ],
)
def test_instantiate_rejects_mismatched_payloads(text: str) -> None:
    with pytest.raises(CobExtractError):
        instantiate(_loadable(text), _registry())


def test_registry_resolves_short_names_and_keeps_generics() -> None:
    registry = TypeRegistry()
    registry.register(Text, "ui::widgets::Text")

    assert registry.canonical_name("Text") == "ui::widgets::Text"
    assert registry.canonical_name("Text<u8>") == "ui::widgets::Text<u8>"
    assert registry.canonical_name("ui::widgets::Text") == "ui::widgets::Text"
    assert registry.canonical_name("Other") is None
    assert registry.get("ui::widgets::Text<u8>") is Text


@pytest.mark.parametrize(
    ("obj", "text"),
    [
        ({"a": 1}, '{"a": 1}'),
        ([1, 2], "[1 2]"),
        ((1, "x"), '(1 "x")'),
        (Display.Grid, "Grid"),
        (None, "none"),
        (True, "true"),
        (2.5, "2.5"),
        (Text("hi"), 'Text{text: "hi" size: 12}'),
        (Marker(), "Marker"),
    ],
)
def test_from_python(obj: object, text: str) -> None:
    assert to_cob_string(from_python(obj)) == text


@pytest.mark.parametrize("obj", [Color(255, 0, 0), Color(1, 2, 3, 4), Val(ValUnit.AUTO), Val(ValUnit.PERCENT, 50.0)])
def test_builtins_survive_serialization(obj: object) -> None:
    assert to_python(_value(to_cob_string(from_python(obj)))) == obj


def test_from_python_rejects_unknown_objects() -> None:
    with pytest.raises(CobExtractError):
        from_python(object())


@pytest.mark.parametrize(
    "obj",
    [
        Text("hi", 14.5),
        Node(Val(ValUnit.VW, 20.0), Display.Flex),
        Frame(Size(1.5, 2.0), "x", ["a"], {"k": 3}),
        Display.Grid,
        Marker(),
    ],
)
def test_loadable_from_instance_round_trips_through_text(obj: object) -> None:
    registry = _registry()
    loadable = loadable_from_instance(obj)

    reparsed = _loadable(to_cob_string(loadable))

    assert instantiate(loadable, registry) == obj
    assert instantiate(reparsed, registry) == obj


def test_loadable_from_instance_matches_classmethod() -> None:
    assert CobLoadable.from_instance(Text("hi")) == loadable_from_instance(Text("hi"))


def test_loadable_from_instance_accepts_a_custom_name() -> None:
    loadable = loadable_from_instance(Text("hi"), "ui::Label")

    assert loadable.canonical_id() == "ui::Label"


def test_loadable_from_instance_rejects_plain_values() -> None:
    with pytest.raises(CobExtractError):
        loadable_from_instance(1)
