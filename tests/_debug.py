"""Shared debug printers for parser/resolver/loader tests."""

from __future__ import annotations

import os

from cobpy.ast import CobLoadable, CobSceneLayer, CobSceneLayerEntry, CobSceneMacroCall, CobSceneMacroCommand
from cobpy.cob import Cob
from cobpy.diagnostics import Diagnostic
from cobpy.format import to_cob_string
from cobpy.loader import SceneNode
from cobpy.sections import CobCommands, CobDefs, CobImport, CobManifest, CobScenes, CobUsing

PRINT_AST = os.getenv("PRINT_AST", "0").lower() in {"1", "true", "yes", "on"}
PRINT_SOURCE = os.getenv("PRINT_SOURCE", "0").lower() in {"1", "true", "yes", "on"}
PRINT_DIAGNOSTICS = os.getenv("PRINT_DIAGNOSTICS", "0").lower() in {
    "1",
    "true",
    "yes",
    "on",
}
PRINT_SCENES = os.getenv("PRINT_SCENES", "0").lower() in {"1", "true", "yes", "on"}


def debug_print_source(test_name: str, source: str) -> None:
    if not PRINT_SOURCE:
        return
    print(f"\n===== {test_name} SOURCE =====")
    print(source)


def debug_dump_ast(test_name: str, cob: Cob, source: str | None = None) -> None:
    if not PRINT_AST:
        return
    if source is not None:
        debug_print_source(test_name, source)
    print(f"\n===== {test_name} AST =====")
    print(_dump_ast(cob))


def debug_dump_diagnostics(test_name: str, diagnostics: list[Diagnostic], source: str | None = None) -> None:
    if not PRINT_DIAGNOSTICS:
        return
    if source is not None:
        debug_print_source(test_name, source)
    print(f"===== {test_name} DIAGNOSTICS =====")
    if not diagnostics:
        print("(none)")
        return
    for diagnostic in diagnostics:
        where = f"{diagnostic.file}:{diagnostic.range.start}-{diagnostic.range.end}"
        print(f"{where} [{diagnostic.severity}] {diagnostic.code}: {diagnostic.message}")


def debug_dump_scene(test_name: str, node: SceneNode) -> None:
    if not PRINT_SCENES:
        return
    print(f"\n===== {test_name} SCENE =====")
    for current in node.walk():
        depth = current.path.count("::")
        ids = ", ".join(loadable.canonical_id() for loadable in current.loadables)
        print(f"{'  ' * depth}{current.name!r} [{ids}]")


def _dump_ast(cob: Cob) -> str:
    lines: list[str] = [f"Cob file={cob.file.path!r}"]

    def walk_entries(entries: list[CobSceneLayerEntry], depth: int) -> None:
        indent = "  " * depth
        for entry in entries:
            match entry:
                case CobLoadable():
                    lines.append(f"{indent}Loadable {entry.canonical_id()} payload={type(entry.variant).__name__}")
                case CobSceneLayer():
                    lines.append(f"{indent}Layer {entry.name.name!r}")
                    walk_entries(entry.entries, depth + 1)
                case CobSceneMacroCall():
                    lines.append(f"{indent}MacroCall +{entry.path}")
                    walk_entries(entry.container.entries, depth + 1)
                case CobSceneMacroCommand():
                    lines.append(f"{indent}Command {entry.command.name} {entry.target_key()!r}")

    for section in cob.sections:
        match section:
            case CobManifest():
                lines.append("  #manifest")
                for entry in section.entries:
                    lines.append(f"    {entry.file or 'self'} as {entry.key}")
            case CobImport():
                lines.append("  #import")
                for entry in section.entries:
                    lines.append(f"    {entry.key} as {entry.alias}")
            case CobUsing():
                lines.append("  #using")
                for entry in section.entries:
                    lines.append(f"    {entry.type_path.to_canonical()} as {entry.identifier.to_canonical()}")
            case CobDefs():
                lines.append("  #defs")
                for entry in section.entries:
                    lines.append(f"    {to_cob_string(entry).strip()!r}")
            case CobCommands():
                lines.append("  #commands")
                for entry in section.entries:
                    lines.append(f"    {entry.canonical_id()}")
            case CobScenes():
                lines.append("  #scenes")
                for scene in section.scenes:
                    lines.append(f"    Scene {scene.name.name!r}")
                    walk_entries(scene.entries, 3)
    return "\n".join(lines)
