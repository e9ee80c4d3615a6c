"""Constant substitution.

Constants are stored per file in a `ConstantsResolver`. Imported files are
appended under their import alias, so `$alias::name` finds `$name` in the
imported file. References are replaced in place; a reference to a value group
is spliced into the surrounding collection.
"""

from __future__ import annotations

import copy
from dataclasses import dataclass, field
import logging

from cobpy.ast.defs import CobConstantDef, CobConstantValue
from cobpy.ast.loadable import CobLoadable
from cobpy.ast.scene import CobSceneLayer, CobSceneLayerEntry, CobSceneMacroCall
from cobpy.ast.value import (
    CobArray,
    CobConstant,
    CobDataMacroCall,
    CobEnum,
    CobMap,
    CobMapEntry,
    CobMapFieldName,
    CobMapKeyValue,
    CobPayload,
    CobTuple,
    CobValue,
    CobValueGroup,
    CobValueGroupEntry,
    value_fill,
)
from cobpy.parser.identifiers import DEFS_SEPARATOR, path_to_string
from cobpy.resolve.errors import CobResolveError

logger = logging.getLogger(__name__)

type ConstantsTable = dict[str, CobConstantValue]


@dataclass(slots=True)
class ConstantsResolver:
    """Stack of `(prefix, constants)` tables plus the table of the file being processed."""

    new_file: ConstantsTable = field(default_factory=dict)
    stack: list[tuple[str, ConstantsTable]] = field(default_factory=list)

    def start_new_file(self) -> None:
        self.new_file = {}

    def insert(self, name: str, value: CobConstantValue) -> None:
        if name in self.new_file:
            logger.warning("overwriting constant definition $%s", name)
        self.new_file[name] = value

    def get(self, path: str) -> CobConstantValue | None:
        """Look up `path`, preferring definitions from the current file, then the most recent import."""
        found = self.new_file.get(path)
        if found is not None:
            return found
        for prefix, table in reversed(self.stack):
            if not prefix:
                found = table.get(path)
            elif path.startswith(prefix + DEFS_SEPARATOR):
                found = table.get(path[len(prefix) + len(DEFS_SEPARATOR) :])
            else:
                continue
            if found is not None:
                return found
        return None

    def end_new_file(self) -> None:
        self.stack.append(("", self.new_file))
        self.new_file = {}

    def append(self, alias: str, other: ConstantsResolver) -> None:
        """Make `other`'s constants visible under `alias`; shared tables are not copied."""
        for prefix, table in other.stack:
            new_prefix = path_to_string(DEFS_SEPARATOR, (alias, prefix))
            self.stack = [
                (existing_prefix, existing)
                for existing_prefix, existing in self.stack
                if not (existing_prefix == new_prefix and existing is table)
            ]
            self.stack.append((new_prefix, table))

    def lookup(self, constant: CobConstant) -> CobConstantValue:
        found = self.get(constant.path)
        if found is None:
            raise CobResolveError(f"constant lookup failed for ${constant.path}")
        return found

    def resolve_def(self, definition: CobConstantDef) -> None:
        """Resolve a definition's value against earlier definitions, then register it."""
        definition.value = resolve_constant_value(definition.value, self)
        self.insert(definition.name, definition.value)


def _substitute(constant: CobConstant, resolver: ConstantsResolver) -> CobConstantValue:
    """Deep-copied constant value carrying the reference's leading fill."""
    value = copy.deepcopy(resolver.lookup(constant))
    if isinstance(value, CobValueGroup):
        if value.entries:
            value_fill(value.entries[0]).text = constant.start_fill.text
        return value
    value_fill(value).text = constant.start_fill.text
    return value


def resolve_value(value: CobValue, resolver: ConstantsResolver) -> CobConstantValue:
    """Resolve constants inside `value`.

    Returns the replacement for `value` itself, which is a `CobValueGroup` when
    `value` is a reference to a group; the caller splices it into its parent.
    """
    match value:
        case CobConstant():
            return _substitute(value, resolver)
        case CobArray() | CobTuple():
            value.entries = _resolve_sequence(value.entries, resolver, _sequence_kind(value))
        case CobMap():
            value.entries = _resolve_map_entries(value.entries, resolver)
        case CobEnum():
            _resolve_payload(value.variant, resolver)
        case CobDataMacroCall():
            value.args.entries = _resolve_sequence(value.args.entries, resolver, "data macro arguments")
    return value


def resolve_constant_value(value: CobConstantValue, resolver: ConstantsResolver) -> CobConstantValue:
    if isinstance(value, CobValueGroup):
        value.entries = _resolve_group_entries(value.entries, resolver)
        return value
    return resolve_value(value, resolver)


def resolve_plain_value(value: CobValue, resolver: ConstantsResolver, position: str) -> CobValue:
    resolved = resolve_value(value, resolver)
    if isinstance(resolved, CobValueGroup):
        raise CobResolveError(
            f"constant ${_reference_path(value)} in {position} points to a value group but only plain values are allowed"
        )
    return resolved


def _resolve_sequence(entries: list[CobValue], resolver: ConstantsResolver, kind: str) -> list[CobValue]:
    resolved_entries: list[CobValue] = []
    for entry in entries:
        resolved = resolve_value(entry, resolver)
        if not isinstance(resolved, CobValueGroup):
            resolved_entries.append(resolved)
            continue
        for group_entry in resolved.entries:
            if isinstance(group_entry, CobMapKeyValue):
                raise CobResolveError(
                    f"failed flattening value group constant ${_reference_path(entry)} into {kind}; "
                    "the group contains key-value entries"
                )
            resolved_entries.append(group_entry)
    return resolved_entries


def _resolve_key_value(entry: CobMapKeyValue, resolver: ConstantsResolver) -> None:
    if not isinstance(entry.key, CobMapFieldName):
        entry.key = resolve_plain_value(entry.key, resolver, "a map entry's key")
    entry.value = resolve_plain_value(entry.value, resolver, "a map entry's value")


def _resolve_map_entries(entries: list[CobMapEntry], resolver: ConstantsResolver) -> list[CobMapEntry]:
    resolved_entries: list[CobMapEntry] = []
    for entry in entries:
        match entry:
            case CobMapKeyValue():
                _resolve_key_value(entry, resolver)
                resolved_entries.append(entry)
            case CobConstant():
                group = _substitute(entry, resolver)
                if not isinstance(group, CobValueGroup):
                    raise CobResolveError(
                        f"constant ${entry.path} in a map points to a plain value but only key-value groups are allowed"
                    )
                for group_entry in group.entries:
                    if not isinstance(group_entry, CobMapKeyValue):
                        raise CobResolveError(
                            f"failed flattening value group constant ${entry.path} into a map; "
                            "the group contains plain values"
                        )
                    resolved_entries.append(group_entry)
            case _:
                resolved_entries.append(entry)
    return resolved_entries


def _resolve_group_entries(entries: list[CobValueGroupEntry], resolver: ConstantsResolver) -> list[CobValueGroupEntry]:
    resolved_entries: list[CobValueGroupEntry] = []
    for entry in entries:
        if isinstance(entry, CobMapKeyValue):
            _resolve_key_value(entry, resolver)
            resolved_entries.append(entry)
            continue
        resolved = resolve_value(entry, resolver)
        if isinstance(resolved, CobValueGroup):
            resolved_entries.extend(resolved.entries)
        else:
            resolved_entries.append(resolved)
    return resolved_entries


def _resolve_payload(payload: CobPayload, resolver: ConstantsResolver) -> None:
    match payload:
        case CobArray() | CobTuple():
            payload.entries = _resolve_sequence(payload.entries, resolver, _sequence_kind(payload))
        case CobMap():
            payload.entries = _resolve_map_entries(payload.entries, resolver)


def resolve_loadable(loadable: CobLoadable, resolver: ConstantsResolver) -> None:
    """Resolve constants in a loadable's payload, in place."""
    if isinstance(loadable.variant, CobEnum):
        _resolve_payload(loadable.variant.variant, resolver)
    else:
        _resolve_payload(loadable.variant, resolver)


def _sequence_kind(value: CobArray | CobTuple) -> str:
    return "an array" if isinstance(value, CobArray) else "a tuple"


def _reference_path(value: CobValue) -> str:
    return value.path if isinstance(value, CobConstant) else ""


def resolve_scene_entries(
    entries: list[CobSceneLayerEntry], resolver: ConstantsResolver, *, nested_layers: bool = True
) -> None:
    """Resolve constants in loadables, including macro call overrides.

    With `nested_layers=False` only the layer owning `entries` is resolved;
    its child layers are left for the caller.
    """
    for entry in entries:
        match entry:
            case CobLoadable():
                resolve_loadable(entry, resolver)
            case CobSceneLayer() if nested_layers:
                resolve_scene_entries(entry.entries, resolver)
            case CobSceneMacroCall():
                resolve_scene_entries(entry.container.entries, resolver)
