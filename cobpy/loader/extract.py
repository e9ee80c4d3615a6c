"""Conversion between resolved COB values and Python objects.

`to_python` turns values into plain data. `instantiate` builds registered
dataclasses and enums, using their type hints to pick conversions. `from_python`
and `loadable_from_instance` go the other way and synthesize AST nodes with
default fill, ready to be serialized.
"""

from __future__ import annotations

import dataclasses
from enum import Enum
import types
from typing import TYPE_CHECKING, Any, Union, get_args, get_origin, get_type_hints

from cobpy.ast.loadable import CobLoadable, CobLoadableIdentifier
from cobpy.ast.scalars import (
    CobBool,
    CobHexColor,
    CobNone,
    CobNumber,
    CobString,
    CobVal,
    Color,
    Val,
)
from cobpy.ast.value import (
    CobArray,
    CobConstant,
    CobDataMacroCall,
    CobEnum,
    CobMacroParam,
    CobMap,
    CobMapEntry,
    CobMapFieldName,
    CobMapKeyValue,
    CobPayload,
    CobTuple,
    CobValue,
    value_fill,
)
from cobpy.parser.fill import CobFill

if TYPE_CHECKING:
    from cobpy.loader.type_lookup import TypeLookup


class CobExtractError(ValueError):
    """A value cannot be converted to or from Python data."""


class CobUnregisteredTypeError(CobExtractError):
    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"type {name} is not registered")


# -- COB -> plain data ---------------------------------------------------------------------------


def to_python(value: CobValue) -> Any:
    """Convert a resolved value to plain Python data.

    Enums become their variant name, or `{"Variant": payload}` when they carry
    a payload; a single-entry tuple payload is unwrapped.
    """
    match value:
        case CobNumber(number=number):
            return number.value
        case CobBool(value=flag):
            return flag
        case CobNone():
            return None
        case CobString():
            return value.value
        case CobHexColor():
            return value.color
        case CobVal():
            return value.val
        case CobArray(entries=entries):
            return [to_python(entry) for entry in entries]
        case CobTuple(entries=entries):
            return tuple(to_python(entry) for entry in entries)
        case CobMap(entries=entries):
            return _map_to_python(entries)
        case CobEnum(id=id, variant=None):
            return id
        case CobEnum(id=id, variant=variant):
            return {id: payload_to_python(variant)}
        case CobConstant(path=path):
            raise CobExtractError(f"constant ${path} was not resolved")
        case CobMacroParam(kind=kind, name=name):
            raise CobExtractError(f"macro parameter {kind.value}{name} has no value outside a macro")
        case CobDataMacroCall(path=path):
            raise CobExtractError(f"data macro {path}! is not expanded by this loader")
    raise CobExtractError(f"cannot convert {type(value).__name__} to Python data")


def payload_to_python(payload: CobPayload) -> Any:
    if isinstance(payload, CobTuple) and len(payload.entries) == 1:
        return to_python(payload.entries[0])
    if payload is None:
        return None
    return to_python(payload)


def _map_key(key: CobValue | CobMapFieldName) -> Any:
    if isinstance(key, CobMapFieldName):
        return key.name
    converted = to_python(key)
    try:
        hash(converted)
    except TypeError as exc:
        raise CobExtractError("map key does not convert to a hashable Python value") from exc
    return converted


def _map_to_python(entries: list[CobMapEntry]) -> dict[Any, Any]:
    result: dict[Any, Any] = {}
    for entry in entries:
        if not isinstance(entry, CobMapKeyValue):
            raise CobExtractError(f"unresolved map entry {type(entry).__name__}")
        result[_map_key(entry.key)] = to_python(entry.value)
    return result


# -- COB -> registered types ---------------------------------------------------------------------


def instantiate(loadable: CobLoadable, lookup: TypeLookup) -> object:
    """Build an instance of the registered type named by `loadable`."""
    canonical = loadable.canonical_id()
    cls = lookup.get(canonical)
    if cls is None:
        raise CobUnregisteredTypeError(canonical)
    if isinstance(loadable.variant, CobEnum):
        if not issubclass(cls, Enum):
            raise CobExtractError(f"{canonical} is not an enum but the loadable names variant {loadable.variant.id}")
        return _enum_member(cls, loadable.variant)
    return _build(cls, loadable.variant)


def _enum_member(cls: type[Enum], value: CobEnum) -> Enum:
    try:
        return cls[value.id]
    except KeyError as exc:
        raise CobExtractError(f"{cls.__name__} has no variant {value.id}") from exc


def _field_hints(cls: type) -> list[tuple[str, Any]]:
    if not dataclasses.is_dataclass(cls):
        return []
    hints = get_type_hints(cls)
    return [(field.name, hints.get(field.name, Any)) for field in dataclasses.fields(cls) if field.init]


def _build(cls: type, payload: CobPayload) -> object:
    hints = _field_hints(cls)
    match payload:
        case None:
            return cls()
        case CobTuple(entries=entries):
            if hints and len(entries) > len(hints):
                raise CobExtractError(f"{cls.__name__} takes {len(hints)} fields but {len(entries)} were given")
            args = [
                _convert(hints[idx][1] if hints else Any, entry)
                for idx, entry in enumerate(entries)
            ]
            return cls(*args)
        case CobArray():
            annotation = hints[0][1] if hints else Any
            return cls(_convert(annotation, payload))
        case CobMap(entries=entries):
            by_name = dict(hints)
            kwargs: dict[str, Any] = {}
            for entry in entries:
                if not isinstance(entry, CobMapKeyValue) or not isinstance(entry.key, CobMapFieldName):
                    raise CobExtractError(f"{cls.__name__} fields must be written as `name: value`")
                name = entry.key.name
                if hints and name not in by_name:
                    raise CobExtractError(f"{cls.__name__} has no field {name}")
                kwargs[name] = _convert(by_name.get(name, Any), entry.value)
            return cls(**kwargs)
    raise CobExtractError(f"unsupported payload for {cls.__name__}")


def _convert(annotation: Any, value: CobValue) -> Any:
    if annotation is Any or isinstance(value, CobHexColor | CobVal):
        return to_python(value)
    origin = get_origin(annotation)
    if origin is Union or origin is types.UnionType:
        if isinstance(value, CobNone):
            return None
        options = [arg for arg in get_args(annotation) if arg is not type(None)]
        return _convert(options[0] if len(options) == 1 else Any, value)
    if isinstance(annotation, type):
        if issubclass(annotation, Enum):
            if isinstance(value, CobEnum):
                return _enum_member(annotation, value)
            return annotation(to_python(value))
        if dataclasses.is_dataclass(annotation):
            match value:
                case CobEnum(variant=variant):
                    return _build(annotation, variant)
                case CobMap() | CobTuple() | CobArray():
                    return _build(annotation, value)
            raise CobExtractError(f"expected a {annotation.__name__} value")
        if annotation is float and isinstance(value, CobNumber):
            return float(value.number.value)
    if origin is list and isinstance(value, CobArray | CobTuple):
        (item_type,) = get_args(annotation) or (Any,)
        return [_convert(item_type, entry) for entry in value.entries]
    if origin is tuple and isinstance(value, CobArray | CobTuple):
        args = get_args(annotation)
        if len(args) == 2 and args[1] is Ellipsis:
            return tuple(_convert(args[0], entry) for entry in value.entries)
        if args and len(args) != len(value.entries):
            raise CobExtractError(f"expected {len(args)} tuple entries, found {len(value.entries)}")
        return tuple(_convert(args[idx] if args else Any, entry) for idx, entry in enumerate(value.entries))
    if origin is dict and isinstance(value, CobMap):
        key_type, value_type = get_args(annotation) or (Any, Any)
        result: dict[Any, Any] = {}
        for entry in value.entries:
            if not isinstance(entry, CobMapKeyValue):
                raise CobExtractError(f"unresolved map entry {type(entry).__name__}")
            key = entry.key.name if isinstance(entry.key, CobMapFieldName) else _convert(key_type, entry.key)
            result[key] = _convert(value_type, entry.value)
        return result
    return to_python(value)


# -- Python -> COB -------------------------------------------------------------------------------


def from_python(obj: object) -> CobValue:
    """Synthesize a value node for `obj` with default fill."""
    match obj:
        case Enum():
            return CobEnum.unit(obj.name)
        case bool():
            return CobBool(CobFill(), obj)
        case int() | float():
            return CobNumber.from_python(obj)
        case None:
            return CobNone()
        case str():
            return CobString.from_python(obj)
        case Color():
            return CobHexColor.from_color(obj)
        case Val():
            return CobVal.from_val(obj)
        case list():
            return CobArray.of([from_python(item) for item in obj])
        case tuple():
            return CobTuple.of([from_python(item) for item in obj])
        case dict():
            return CobMap.of([_entry(CobMapKeyValue.map_entry(from_python(k), from_python(v))) for k, v in obj.items()])
    if dataclasses.is_dataclass(obj) and not isinstance(obj, type):
        return CobEnum(CobFill(), type(obj).__name__, _struct_payload(obj))
    raise CobExtractError(f"cannot convert {type(obj).__name__} to a COB value")


def _entry(entry: CobMapKeyValue) -> CobMapKeyValue:
    value_fill(entry.value).text = " "
    return entry


def _struct_payload(obj: Any) -> CobPayload:
    fields = dataclasses.fields(obj)
    if not fields:
        return None
    return CobMap.of(
        [_entry(CobMapKeyValue.struct_field(field.name, from_python(getattr(obj, field.name)))) for field in fields]
    )


def loadable_from_instance(obj: object, name: str | None = None) -> CobLoadable:
    """Loadable for a dataclass instance or enum member, named after its class by default."""
    type_name = name if name is not None else type(obj).__name__
    if isinstance(obj, Enum):
        return CobLoadable(CobFill(), CobLoadableIdentifier(type_name), CobEnum.unit(obj.name))
    if dataclasses.is_dataclass(obj) and not isinstance(obj, type):
        return CobLoadable(CobFill(), CobLoadableIdentifier(type_name), _struct_payload(obj))
    raise CobExtractError(f"cannot build a loadable from {type(obj).__name__}; expected a dataclass or enum member")
