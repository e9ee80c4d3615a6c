import math

import pytest

from cobpy.ast import (
    CobArray,
    CobBool,
    CobConstant,
    CobDataMacroCall,
    CobEnum,
    CobHexColor,
    CobMacroParam,
    CobMap,
    CobMapFieldName,
    CobMapKeyValue,
    CobNone,
    CobNumber,
    CobString,
    CobTuple,
    CobVal,
    CobValue,
    Color,
    MacroParamKind,
    Val,
    ValUnit,
    parse_value,
)
from cobpy.format import to_cob_string
from cobpy.parser import CobFill, CobParseError
from cobpy.text.span import Span


def _value(text: str) -> CobValue:
    value, _, remaining = parse_value(CobFill(), Span.new(text, file="test.cob"))
    assert value is not None, text
    assert remaining.is_empty(), remaining.fragment
    assert to_cob_string(value) == text.rstrip()
    return value


def _value_fails(text: str, remaining: str) -> None:
    with pytest.raises(CobParseError) as exc_info:
        parse_value(CobFill(), Span.new(text, file="test.cob"))
    assert exc_info.value.remaining == remaining


@pytest.mark.parametrize(
    ("text", "expected"),
    [
        ("0", 0),
        ("-12", -12),
        ("1.0", 1.0),
        ("1.00", 1.0),
        ("1e3", 1000.0),
        ("2.5E-2", 0.025),
    ],
)
def test_numbers_keep_original_text(text: str, expected: int | float) -> None:
    value = _value(text)

    assert isinstance(value, CobNumber)
    assert value.number.original == text
    assert value.number.value == expected
    assert type(value.number.value) is type(expected)


def test_special_float_numbers() -> None:
    inf = _value("inf")
    neg_inf = _value("-inf")
    nan = _value("nan")

    assert isinstance(inf, CobNumber) and inf.number.value == math.inf
    assert isinstance(neg_inf, CobNumber) and neg_inf.number.value == -math.inf
    assert isinstance(nan, CobNumber) and math.isnan(nan.number.value)


def test_bool_none_and_strings() -> None:
    assert _value("true") == CobBool(CobFill(), True)
    assert _value("false") == CobBool(CobFill(), False)
    assert isinstance(_value("none"), CobNone)

    string = _value('"hello world"')
    assert isinstance(string, CobString)
    assert string.value == "hello world"


@pytest.mark.parametrize(
    ("raw", "converted", "num_segments"),
    [
        ("", "", 1),
        ("a", "a", 1),
        ("a\n", "a\n", 1),
        ("a\\nb", "a\nb", 1),
        ("a\\\\b", "a\\b", 1),
        ("\\\n", "", 2),
        ("a\\\nb", "ab", 2),
        ("a\\\n b", "ab", 2),
        ("a\\\nb\\\nc", "abc", 3),
        ("a\na1 a2\\\n\nb\\\nc d", "a\na1 a2\nbc d", 3),
        ("\\u{48}\\u{1F600}", "H\U0001f600", 1),
    ],
)
def test_string_conversion(raw: str, converted: str, num_segments: int) -> None:
    value = _value(f'"{raw}"')

    assert isinstance(value, CobString)
    assert len(value.segments) == num_segments
    assert value.value == converted

    synthesized = CobString.from_python(converted)
    assert len(synthesized.segments) == 1
    assert synthesized.value == converted
    reparsed = _value(to_cob_string(synthesized))
    assert isinstance(reparsed, CobString)
    assert reparsed.value == converted


def test_string_errors() -> None:
    _value_fails('"abc', '"abc')
    _value_fails('"a\\qb"', '\\qb"')
    _value_fails('"\\u{D800}"', '\\u{D800}"')


def test_builtins() -> None:
    color = _value("#FF0000")
    with_alpha = _value("#80FF0000")
    auto = _value("auto")
    px = _value("10px")
    percent = _value("50%")
    vmin = _value("2.5vmin")

    assert isinstance(color, CobHexColor) and color.color == Color(255, 0, 0)
    assert isinstance(with_alpha, CobHexColor) and with_alpha.color == Color(255, 0, 0, 0x80)
    assert isinstance(auto, CobVal) and auto.val == Val(ValUnit.AUTO)
    assert isinstance(px, CobVal) and px.val == Val(ValUnit.PX, 10.0)
    assert isinstance(percent, CobVal) and percent.val == Val(ValUnit.PERCENT, 50.0)
    assert isinstance(vmin, CobVal) and vmin.val == Val(ValUnit.VMIN, 2.5)


def test_hex_color_length_is_checked() -> None:
    _value_fails("#FFF", "#FFF")


def test_collections() -> None:
    array = _value("[1 2 3]")
    tuple_ = _value("(1, \"a\")")
    map_ = _value('{a: 1 "b": 2 3: [4]}')

    assert isinstance(array, CobArray) and len(array.entries) == 3
    assert isinstance(tuple_, CobTuple) and len(tuple_.entries) == 2
    assert isinstance(map_, CobMap) and len(map_.entries) == 3
    first, second, third = map_.entries
    assert isinstance(first, CobMapKeyValue) and first.key == CobMapFieldName(CobFill(), "a")
    assert isinstance(second, CobMapKeyValue) and isinstance(second.key, CobString)
    assert isinstance(third, CobMapKeyValue) and isinstance(third.key, CobNumber)


def test_collection_entries_need_separating_fill() -> None:
    _value_fails('["a""b"]', '["a""b"]')


def test_unclosed_collections_fail_at_the_missing_delimiter() -> None:
    _value_fails("[1 2", "")
    _value_fails("(1 2}", "}")


def test_map_key_without_value_fails() -> None:
    _value_fails("{a}", "a}")
    _value_fails("{1 2}", "1 2}")


def test_enums() -> None:
    unit = _value("Red")
    newtype = _value("Some(10)")
    struct = _value("Rect{w: 1 h: 2}")

    assert unit == CobEnum(CobFill(), "Red")
    assert isinstance(newtype, CobEnum) and isinstance(newtype.variant, CobTuple)
    assert isinstance(struct, CobEnum) and isinstance(struct.variant, CobMap)


def test_references_and_placeholders() -> None:
    constant = _value("$a::b::c")
    data_macro = _value("rgba!(1 2 3)")
    required = _value("@size")
    optional = _value("?size")
    catch_all = _value("..rest")

    assert constant == CobConstant(CobFill(), "a::b::c")
    assert isinstance(data_macro, CobDataMacroCall) and data_macro.path == "rgba"
    assert isinstance(required, CobMacroParam) and required.kind is MacroParamKind.REQUIRED
    assert isinstance(optional, CobMacroParam) and optional.kind is MacroParamKind.OPTIONAL
    assert isinstance(catch_all, CobMacroParam) and catch_all.kind is MacroParamKind.CATCH_ALL


def test_macro_param_needs_a_name() -> None:
    _value_fails("@1", "@1")


def test_data_macro_needs_arguments() -> None:
    _value_fails("rgba!1", "rgba!1")


def test_synthesized_collections_use_default_spacing() -> None:
    array = CobArray.of([CobNumber.from_python(1), CobNumber.from_python(2.5), CobString.from_python("x")])
    map_ = CobMap.of([CobMapKeyValue.struct_field("a", CobBool(CobFill(" "), True))])

    assert to_cob_string(array) == '[1 2.5 "x"]'
    assert to_cob_string(map_) == "{a: true}"


@pytest.mark.parametrize(("value", "text"), [(-0.0, "-0.0"), (0.0, "0"), (-2.0, "-2"), (-0.5, "-0.5")])
def test_synthesized_numbers_keep_their_sign(value: float, text: str) -> None:
    number = CobNumber.from_python(value)

    assert to_cob_string(number) == text
    reparsed = _value(text)
    assert isinstance(reparsed, CobNumber)
    assert math.copysign(1.0, reparsed.number.as_float()) == math.copysign(1.0, value)
