"""Scene macro tables and expansion.

A scene macro is a template of scene layer entries. Calling it clones the
template and applies the call's entries as overrides:

- loadables replace the template loadable with the same canonical id, or are
  appended;
- `-`, `^` and `!` commands remove an entry or move it to the top/bottom;
- layers are matched by name and updated recursively, new layers are appended.
"""

from __future__ import annotations

import copy
from dataclasses import dataclass, field
import logging
from typing import TYPE_CHECKING

from cobpy.ast.loadable import CobLoadable, CobLoadableIdentifier
from cobpy.ast.scene import (
    CobSceneLayer,
    CobSceneLayerEntry,
    CobSceneMacroCall,
    CobSceneMacroCommand,
    CobSceneMacroValue,
    CobSceneNodeName,
    SceneMacroCommandType,
)
from cobpy.parser.fill import CobFill
from cobpy.parser.identifiers import DEFS_SEPARATOR, path_to_string
from cobpy.resolve.errors import CobResolveError

if TYPE_CHECKING:
    from cobpy.loader.type_lookup import TypeLookup

logger = logging.getLogger(__name__)

type SceneMacrosTable = dict[str, CobSceneMacroValue]


def canonical_id(id: CobLoadableIdentifier, type_lookup: TypeLookup | None) -> str:
    """Canonical form of `id`, mapped through the type lookup when it knows the name."""
    canonical = id.to_canonical()
    if type_lookup is not None:
        return type_lookup.canonical_name(canonical) or canonical
    return canonical


def canonicalize_loadable_names(entries: list[CobSceneLayerEntry], type_lookup: TypeLookup | None = None) -> None:
    for entry in entries:
        match entry:
            case CobLoadable(id=id):
                id.set_canonical(canonical_id(id, type_lookup))
            case CobSceneMacroCommand(target=CobLoadableIdentifier() as target):
                target.set_canonical(canonical_id(target, type_lookup))
            case CobSceneLayer(entries=layer_entries):
                canonicalize_loadable_names(layer_entries, type_lookup)
            case CobSceneMacroCall(container=container):
                canonicalize_loadable_names(container.entries, type_lookup)


def _find_loadable(entries: list[CobSceneLayerEntry], canonical: str) -> int | None:
    for idx, entry in enumerate(entries):
        if isinstance(entry, CobLoadable) and entry.canonical_id() == canonical:
            return idx
    return None


def _find_layer(entries: list[CobSceneLayerEntry], name: str) -> int | None:
    for idx, entry in enumerate(entries):
        if isinstance(entry, CobSceneLayer) and entry.name.name == name:
            return idx
    return None


def _apply_command(entries: list[CobSceneLayerEntry], command: CobSceneMacroCommand) -> None:
    key = command.target_key()
    pos = _find_layer(entries, key) if command.targets_layer() else _find_loadable(entries, key)
    if pos is None:
        logger.debug("scene macro command %s%s has no target", command.command.value, key)
        return
    removed = entries.pop(pos)
    match command.command:
        case SceneMacroCommandType.MOVE_TO_TOP:
            entries.insert(0, removed)
        case SceneMacroCommandType.MOVE_TO_BOTTOM:
            entries.append(removed)
        case SceneMacroCommandType.REMOVE:
            pass


def apply_overrides(result: list[CobSceneLayerEntry], overrides: list[CobSceneLayerEntry]) -> None:
    """Merge `overrides` into `result` in place.

    Loadable ids in both lists must already be canonical.
    """
    for override in overrides:
        match override:
            case CobLoadable():
                pos = _find_loadable(result, override.canonical_id())
                if pos is None:
                    result.append(override)
                else:
                    override.id = result[pos].id  # type: ignore[union-attr]
                    result[pos] = override
            case CobSceneMacroCommand():
                _apply_command(result, override)

    # A touched layer that sits above the previously touched layer is moved
    # directly after it, so override order wins where the template is ambiguous.
    prev: int | None = None
    for override in overrides:
        if not isinstance(override, CobSceneLayer):
            continue
        existing = _find_layer(result, override.name.name)
        if existing is None:
            result.append(CobSceneLayer(CobFill(override.name_fill.text), CobSceneNodeName(override.name.name)))
            prev = len(result) - 1
        else:
            prev_prev, prev = prev, existing
            if prev_prev is not None and existing < prev_prev:
                result.insert(prev_prev, result.pop(existing))
                prev = prev_prev
        target = result[prev]
        if isinstance(target, CobSceneLayer):
            apply_overrides(target.entries, override.entries)


@dataclass(slots=True)
class SceneMacrosResolver:
    """Stack of `(prefix, macros)` tables plus the table of the file being processed.

    Tables on the stack are shared between resolvers and never mutated.
    """

    type_lookup: TypeLookup | None = None
    new_file: SceneMacrosTable = field(default_factory=dict)
    stack: list[tuple[str, SceneMacrosTable]] = field(default_factory=list)

    def start_new_file(self) -> None:
        self.new_file = {}

    def end_new_file(self) -> None:
        self.stack.append(("", self.new_file))
        self.new_file = {}

    def insert(self, file: str, name: str, value: CobSceneMacroValue) -> None:
        """Register a definition for the current file.

        Calls to other macros inside the definition are expanded here, so a
        definition can only use macros defined before it.
        """
        value = copy.deepcopy(value)
        self.resolve_entries(name, value.entries)
        canonicalize_loadable_names(value.entries, self.type_lookup)
        if name in self.new_file:
            logger.warning("overwriting scene macro definition +%s in %s", name, file)
        self.new_file[name] = value

    def get(self, path: str) -> CobSceneMacroValue | None:
        """Search the current file first, then the stack from the most recent import backward."""
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

    def expand(self, call: CobSceneMacroCall) -> list[CobSceneLayerEntry]:
        """Expand a call into scene layer entries."""
        template = self.get(call.path)
        if template is None:
            raise CobResolveError(f"no scene macro definition at '{call.path}'")
        result = copy.deepcopy(template.entries)
        overrides = copy.deepcopy(call.container.entries)
        self.resolve_entries(f"+{call.path}", overrides)
        canonicalize_loadable_names(overrides, self.type_lookup)
        apply_overrides(result, overrides)
        return result

    def resolve_entries(self, name: str, entries: list[CobSceneLayerEntry]) -> None:
        """Replace every macro call in `entries` (at any depth) with its expansion, in place."""
        for entry in entries:
            if isinstance(entry, CobSceneLayer):
                self.resolve_entries(entry.name.name, entry.entries)
        self.resolve_layer(name, entries)

    def resolve_layer(self, name: str, entries: list[CobSceneLayerEntry]) -> None:
        """Expand the macro calls directly in `entries`; child layers are not visited."""
        idx = 0
        while idx < len(entries):
            entry = entries[idx]
            if not isinstance(entry, CobSceneMacroCall):
                idx += 1
                continue
            expanded = self.expand(entry)
            for expanded_entry in expanded:
                if isinstance(expanded_entry, CobSceneMacroCall):
                    raise CobResolveError(
                        f"failed resolving scene layer named {name}; scene macro call unexpectedly not resolved"
                    )
                if isinstance(expanded_entry, CobSceneMacroCommand):
                    raise CobResolveError(f"failed resolving scene layer named {name}; unexpected scene macro command")
            entries[idx : idx + 1] = expanded
            idx += len(expanded)

    def append(self, alias: str, other: SceneMacrosResolver) -> None:
        """Make `other`'s macros visible under `alias`; shared tables are not copied."""
        for prefix, table in other.stack:
            new_prefix = path_to_string(DEFS_SEPARATOR, (alias, prefix))
            self.stack = [
                (existing_prefix, existing)
                for existing_prefix, existing in self.stack
                if not (existing_prefix == new_prefix and existing is table)
            ]
            self.stack.append((new_prefix, table))
