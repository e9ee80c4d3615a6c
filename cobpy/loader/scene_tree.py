"""Extraction of resolved scene layers into a tree of named nodes."""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field
import logging
from typing import TYPE_CHECKING

from cobpy.ast.loadable import CobLoadable
from cobpy.ast.scene import CobSceneLayer, CobSceneMacroCall, CobSceneMacroCommand
from cobpy.diagnostics.codes import (
    LOADER_DUPLICATE_LOADABLE,
    LOADER_EXTRACTION_FAILED,
    LOADER_UNREGISTERED_TYPE,
    RESOLVE_SCENE_MACRO_FAILED,
)
from cobpy.diagnostics.report import diagnostic_from_spec
from cobpy.loader.extract import CobExtractError, CobUnregisteredTypeError, instantiate
from cobpy.parser.identifiers import DEFS_SEPARATOR, path_to_string

if TYPE_CHECKING:
    from cobpy.diagnostics.diagnostic import Diagnostic
    from cobpy.loader.type_lookup import TypeLookup

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class SceneNode:
    """One scene layer after macro expansion.

    `path` joins layer names with `::`; anonymous layers are named `_0`, `_1`,
    ... in order among their siblings.
    """

    path: str
    name: str
    loadables: list[CobLoadable] = field(default_factory=list)
    instances: dict[str, object] = field(default_factory=dict)
    children: list[SceneNode] = field(default_factory=list)

    def child(self, name: str) -> SceneNode | None:
        for child in self.children:
            if child.name == name:
                return child
        return None

    def find(self, path: str) -> SceneNode | None:
        """Descendant at `path`, relative to this node."""
        node: SceneNode | None = self
        for part in path.split(DEFS_SEPARATOR):
            if node is None:
                return None
            node = node.child(part)
        return node

    def loadable(self, canonical: str) -> CobLoadable | None:
        for loadable in self.loadables:
            if loadable.canonical_id() == canonical:
                return loadable
        return None

    def walk(self) -> Iterator[SceneNode]:
        yield self
        for child in self.children:
            yield from child.walk()


def extract_scene(
    layer: CobSceneLayer,
    *,
    parent_path: str = "",
    anonymous_index: int = 0,
    lookup: TypeLookup | None = None,
    diagnostics: list[Diagnostic] | None = None,
    file: str | None = None,
) -> SceneNode:
    """Build the node tree for a resolved base layer."""
    sink = diagnostics if diagnostics is not None else []
    name = layer.name.name or f"_{anonymous_index}"
    node = SceneNode(path_to_string(DEFS_SEPARATOR, (parent_path, name)), name)
    anonymous = 0
    for entry in layer.entries:
        match entry:
            case CobLoadable():
                _add_loadable(node, entry, lookup, sink, file)
            case CobSceneLayer():
                child = extract_scene(
                    entry,
                    parent_path=node.path,
                    anonymous_index=anonymous,
                    lookup=lookup,
                    diagnostics=sink,
                    file=file,
                )
                if not entry.name.name:
                    anonymous += 1
                node.children.append(child)
            case CobSceneMacroCall() | CobSceneMacroCommand():
                logger.error("scene node %s contains an unresolved %s", node.path, type(entry).__name__)
                sink.append(
                    diagnostic_from_spec(
                        RESOLVE_SCENE_MACRO_FAILED,
                        f"scene node {node.path} contains an unresolved {type(entry).__name__}",
                        file=file,
                    )
                )
    return node


def _add_loadable(
    node: SceneNode,
    loadable: CobLoadable,
    lookup: TypeLookup | None,
    sink: list[Diagnostic],
    file: str | None,
) -> None:
    canonical = loadable.canonical_id()
    if node.loadable(canonical) is not None:
        logger.warning("ignoring duplicate loadable %s in scene node %s", canonical, node.path)
        sink.append(diagnostic_from_spec(LOADER_DUPLICATE_LOADABLE, f"{canonical} in {node.path}", file=file))
        return
    node.loadables.append(loadable)
    if lookup is None:
        return
    try:
        node.instances[canonical] = instantiate(loadable, lookup)
    except CobUnregisteredTypeError as exc:
        logger.warning("%s in scene node %s", exc, node.path)
        sink.append(diagnostic_from_spec(LOADER_UNREGISTERED_TYPE, f"{exc.name} in {node.path}", file=file))
    except (CobExtractError, TypeError) as exc:
        logger.warning("failed extracting %s in scene node %s: %s", canonical, node.path, exc)
        sink.append(diagnostic_from_spec(LOADER_EXTRACTION_FAILED, f"{canonical} in {node.path}: {exc}", file=file))
