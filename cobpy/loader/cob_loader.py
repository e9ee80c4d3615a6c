"""Multi-file loading: manifests, imports and per-file resolution.

Files are registered with `CobLoader.add_file` and processed together by
`CobLoader.load`. Manifest sections map keys to files, import sections name
those keys. Each file is resolved after everything it imports, with the
imported files' constants and scene macros visible under the import alias.
"""

from __future__ import annotations

import copy
from dataclasses import dataclass, field
import logging

from cobpy.ast.defs import CobConstantDef, CobConstantValue
from cobpy.ast.file import CobFile
from cobpy.ast.loadable import CobLoadable
from cobpy.ast.scene import CobSceneLayer, CobSceneLayerEntry, CobSceneMacroDef
from cobpy.cob import Cob
from cobpy.diagnostics.codes import (
    LOADER_DUPLICATE_MANIFEST_KEY,
    LOADER_EXTRACTION_FAILED,
    LOADER_IMPORT_CYCLE,
    LOADER_MISSING_FILE,
    LOADER_UNREGISTERED_TYPE,
    RESOLVE_CONSTANT_FAILED,
    RESOLVE_DEFINITION_OVERWRITTEN,
    RESOLVE_SCENE_MACRO_FAILED,
    DiagnosticSpec,
)
from cobpy.diagnostics.diagnostic import Diagnostic
from cobpy.diagnostics.report import diagnostic_from_spec, has_errors
from cobpy.loader.extract import CobExtractError, CobUnregisteredTypeError, instantiate
from cobpy.loader.scene_tree import SceneNode, extract_scene
from cobpy.loader.type_lookup import NullTypeLookup, ScopedTypeLookup, TypeLookup
from cobpy.parser.errors import CobParseError
from cobpy.parser.identifiers import DEFS_SEPARATOR
from cobpy.resolve.constants import resolve_loadable, resolve_scene_entries
from cobpy.resolve.errors import CobResolveError
from cobpy.resolve.resolver import CobResolver
from cobpy.resolve.scene_macros import canonical_id, canonicalize_loadable_names
from cobpy.sections import CobCommands, CobDefs, CobImportEntry, CobScenes, CobUsing
from cobpy.text.span import Span

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class LoadedCobFile:
    """One file after resolution.

    `cob` is a resolved copy of the parsed file: constants are substituted and
    scene macro calls expanded. The parsed original is left untouched.
    """

    file: CobFile
    cob: Cob
    resolver: CobResolver
    constants: dict[str, CobConstantValue] = field(default_factory=dict)
    commands: list[CobLoadable] = field(default_factory=list)
    command_instances: list[object] = field(default_factory=list)
    scenes: list[SceneNode] = field(default_factory=list)
    diagnostics: list[Diagnostic] = field(default_factory=list)

    @property
    def has_errors(self) -> bool:
        return has_errors(self.diagnostics)

    def scene(self, path: str) -> SceneNode | None:
        """Scene node at `path`, starting with a base layer name."""
        base, _, rest = path.partition("::")
        for node in self.scenes:
            if node.name == base:
                return node.find(rest) if rest else node
        return None


@dataclass(slots=True)
class CobLoader:
    registry: TypeLookup | None = None
    sources: dict[str, Cob] = field(default_factory=dict)
    diagnostics: list[Diagnostic] = field(default_factory=list)

    def add_file(self, path: str, text: str) -> Cob | None:
        """Parse and register a file; parse failures are recorded as diagnostics."""
        span = Span.new(text, file=path, sink=self.diagnostics)
        try:
            cob = Cob.parse(span)
        except CobParseError as exc:
            logger.warning("failed parsing %s: %s", path, exc)
            self.diagnostics.append(exc.to_diagnostic())
            return None
        self.add_cob(cob)
        return cob

    def add_cob(self, cob: Cob) -> None:
        if cob.file.path in self.sources:
            logger.debug("replacing registered file %s", cob.file)
        self.sources[cob.file.path] = cob

    def manifest_keys(self) -> dict[str, str]:
        """Map of manifest key to file path across all registered files."""
        keys: dict[str, str] = {}
        for path, cob in self.sources.items():
            for manifest in cob.manifests():
                for entry in manifest.entries:
                    target = path if entry.file is None else entry.file.path
                    existing = keys.get(entry.key)
                    if existing is not None and existing != target:
                        logger.warning("manifest key %s maps to both %s and %s", entry.key, existing, target)
                        self.diagnostics.append(
                            diagnostic_from_spec(
                                LOADER_DUPLICATE_MANIFEST_KEY,
                                f"{entry.key} ({existing} and {target})",
                                file=path,
                            )
                        )
                        continue
                    keys[entry.key] = target
        return keys

    def load(self) -> dict[str, LoadedCobFile]:
        """Resolve every registered file, dependencies first."""
        keys = self.manifest_keys()
        loaded: dict[str, LoadedCobFile] = {}
        visiting: set[str] = set()

        def visit(path: str) -> None:
            if path in loaded:
                return
            visiting.add(path)
            deps: list[tuple[CobImportEntry, str]] = []
            for entry in _import_entries(self.sources[path]):
                dep = keys.get(entry.key)
                if dep is None or dep not in self.sources:
                    logger.warning("%s imports unknown manifest key %s", path, entry.key)
                    self.diagnostics.append(diagnostic_from_spec(LOADER_MISSING_FILE, entry.key, file=path))
                    continue
                if dep in visiting:
                    logger.warning("import cycle between %s and %s", path, dep)
                    self.diagnostics.append(diagnostic_from_spec(LOADER_IMPORT_CYCLE, f"{path} -> {dep}", file=path))
                    continue
                visit(dep)
                deps.append((entry, dep))
            visiting.discard(path)
            loaded[path] = self._load_file(self.sources[path], [(entry.prefix, loaded[dep]) for entry, dep in deps])

        for path in self.sources:
            visit(path)
        return loaded

    def _load_file(self, source: Cob, deps: list[tuple[str, LoadedCobFile]]) -> LoadedCobFile:
        logger.debug("loading %s with %d imports", source.file, len(deps))
        resolver = CobResolver.with_type_lookup(self.registry)
        for prefix, dep in deps:
            resolver.append(prefix, dep.resolver)
        resolver.start_new_file()

        loaded = LoadedCobFile(source.file, copy.deepcopy(source), resolver)
        loaded.constants = resolver.constants.new_file
        file = source.file.path
        lookup: TypeLookup = self.registry if self.registry is not None else NullTypeLookup()
        anonymous_scenes = 0

        for section in loaded.cob.sections:
            match section:
                case CobUsing():
                    lookup = _scoped_lookup(lookup, section)
                    resolver.scene_macros.type_lookup = lookup
                case CobDefs():
                    for entry in section.entries:
                        self._load_def(loaded, entry)
                case CobCommands():
                    for loadable in section.entries:
                        self._load_command(loaded, loadable, lookup)
                case CobScenes():
                    for layer in section.scenes:
                        if not self._resolve_layer(loaded, layer, layer.name.name):
                            continue
                        canonicalize_loadable_names(layer.entries, lookup)
                        loaded.scenes.append(
                            extract_scene(
                                layer,
                                anonymous_index=anonymous_scenes,
                                lookup=lookup if self.registry is not None else None,
                                diagnostics=loaded.diagnostics,
                                file=file,
                            )
                        )
                        if not layer.name.name:
                            anonymous_scenes += 1

        resolver.end_new_file()
        self.diagnostics.extend(loaded.diagnostics)
        return loaded

    def _load_def(self, loaded: LoadedCobFile, entry: CobConstantDef | CobSceneMacroDef) -> None:
        resolver = loaded.resolver
        match entry:
            case CobConstantDef(name=name):
                if name in resolver.constants.new_file:
                    self._record(loaded, RESOLVE_DEFINITION_OVERWRITTEN, f"${name}")
                try:
                    resolver.constants.resolve_def(entry)
                except CobResolveError as exc:
                    self._record(loaded, RESOLVE_CONSTANT_FAILED, f"${name}: {exc}")
            case CobSceneMacroDef(name=name):
                if name in resolver.scene_macros.new_file:
                    self._record(loaded, RESOLVE_DEFINITION_OVERWRITTEN, f"+{name}")
                try:
                    resolve_scene_entries(entry.value.entries, resolver.constants)
                    resolver.scene_macros.insert(loaded.file.path, name, entry.value)
                except CobResolveError as exc:
                    self._record(loaded, RESOLVE_SCENE_MACRO_FAILED, f"+{name}: {exc}")

    def _resolve_layer(self, loaded: LoadedCobFile, layer: CobSceneLayer, path: str) -> bool:
        """Resolve one scene layer, then its children; a failing child layer is dropped alone."""
        resolver = loaded.resolver
        try:
            resolve_scene_entries(layer.entries, resolver.constants, nested_layers=False)
        except CobResolveError as exc:
            self._record(loaded, RESOLVE_CONSTANT_FAILED, f"scene layer \"{path}\": {exc}")
            return False
        try:
            resolver.scene_macros.resolve_layer(layer.name.name, layer.entries)
        except CobResolveError as exc:
            self._record(loaded, RESOLVE_SCENE_MACRO_FAILED, f"scene layer \"{path}\": {exc}")
            return False

        kept: list[CobSceneLayerEntry] = []
        for entry in layer.entries:
            if isinstance(entry, CobSceneLayer) and not self._resolve_layer(
                loaded, entry, f"{path}{DEFS_SEPARATOR}{entry.name.name}"
            ):
                continue
            kept.append(entry)
        layer.entries = kept
        return True

    def _load_command(self, loaded: LoadedCobFile, loadable: CobLoadable, lookup: TypeLookup) -> None:
        try:
            resolve_loadable(loadable, loaded.resolver.constants)
        except CobResolveError as exc:
            self._record(loaded, RESOLVE_CONSTANT_FAILED, f"command {loadable.canonical_id()}: {exc}")
            return
        loadable.id.set_canonical(canonical_id(loadable.id, lookup))
        loaded.commands.append(loadable)
        if self.registry is None:
            return
        try:
            loaded.command_instances.append(instantiate(loadable, lookup))
        except CobUnregisteredTypeError as exc:
            self._record(loaded, LOADER_UNREGISTERED_TYPE, f"command {exc.name}")
        except (CobExtractError, TypeError) as exc:
            self._record(loaded, LOADER_EXTRACTION_FAILED, f"command {loadable.canonical_id()}: {exc}")

    def _record(self, loaded: LoadedCobFile, spec: DiagnosticSpec, detail: str) -> None:
        logger.warning("%s: %s (%s)", loaded.file, detail, spec.code)
        loaded.diagnostics.append(diagnostic_from_spec(spec, detail, file=loaded.file.path))


def _import_entries(cob: Cob) -> list[CobImportEntry]:
    return [entry for section in cob.imports() for entry in section.entries]


def _scoped_lookup(parent: TypeLookup, section: CobUsing) -> ScopedTypeLookup:
    aliases: dict[str, str] = {}
    if isinstance(parent, ScopedTypeLookup):
        aliases.update(parent.aliases)
        parent = parent.parent
    for entry in section.entries:
        aliases[entry.identifier.to_canonical()] = entry.type_path.to_canonical()
    return ScopedTypeLookup(parent, aliases)
