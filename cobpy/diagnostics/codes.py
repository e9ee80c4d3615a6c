"""Diagnostic codes and messages."""

from dataclasses import dataclass
from typing import Final, Literal

Severity = Literal["error", "warning"]


@dataclass(frozen=True, slots=True)
class DiagnosticSpec:
    code: str
    message: str
    hint: str | None = None
    severity: Severity = "error"
    category: str | None = None


PARSER_INVALID_SYNTAX: Final[DiagnosticSpec] = DiagnosticSpec(
    code="PARSER_INVALID_SYNTAX",
    message="Invalid COB syntax",
    severity="error",
    category="parser",
)

PARSER_INVALID_FILE: Final[DiagnosticSpec] = DiagnosticSpec(
    code="PARSER_INVALID_FILE",
    message="COB file names must end with `.cob` or `.cobweb`.",
    hint="Rename the file or fix the manifest entry.",
    severity="error",
    category="parser",
)

PARSER_LEFTOVER_INPUT: Final[DiagnosticSpec] = DiagnosticSpec(
    code="PARSER_LEFTOVER_INPUT",
    message="Input remains that does not belong to any section",
    hint="Every entry must live inside a `#manifest`, `#import`, `#using`, `#defs`, `#commands` or `#scenes` section.",
    severity="error",
    category="parser",
)

PARSER_BANNED_CHARACTERS: Final[DiagnosticSpec] = DiagnosticSpec(
    code="PARSER_BANNED_CHARACTERS",
    message="Ignoring banned characters",
    hint="Tabs and non-ASCII characters are only allowed inside strings and comments.",
    severity="warning",
    category="parser",
)

PARSER_MISALIGNED_SCENE_ITEM: Final[DiagnosticSpec] = DiagnosticSpec(
    code="PARSER_MISALIGNED_SCENE_ITEM",
    message="Scene item is not aligned with other items in the same layer",
    severity="warning",
    category="parser",
)

RESOLVE_CONSTANT_FAILED: Final[DiagnosticSpec] = DiagnosticSpec(
    code="RESOLVE_CONSTANT_FAILED",
    message="Failed resolving constants",
    severity="error",
    category="resolve",
)

RESOLVE_SCENE_MACRO_FAILED: Final[DiagnosticSpec] = DiagnosticSpec(
    code="RESOLVE_SCENE_MACRO_FAILED",
    message="Failed expanding scene macro",
    severity="error",
    category="resolve",
)

RESOLVE_DEFINITION_OVERWRITTEN: Final[DiagnosticSpec] = DiagnosticSpec(
    code="RESOLVE_DEFINITION_OVERWRITTEN",
    message="Definition overwrites an earlier definition with the same name",
    severity="warning",
    category="resolve",
)

LOADER_MISSING_FILE: Final[DiagnosticSpec] = DiagnosticSpec(
    code="LOADER_MISSING_FILE",
    message="Imported manifest key does not name a known COB file",
    hint="Add the file to a `#manifest` section of a loaded file.",
    severity="error",
    category="loader",
)

LOADER_DUPLICATE_MANIFEST_KEY: Final[DiagnosticSpec] = DiagnosticSpec(
    code="LOADER_DUPLICATE_MANIFEST_KEY",
    message="Manifest key is already registered for another file",
    severity="warning",
    category="loader",
)

LOADER_IMPORT_CYCLE: Final[DiagnosticSpec] = DiagnosticSpec(
    code="LOADER_IMPORT_CYCLE",
    message="Import cycle detected",
    severity="error",
    category="loader",
)

LOADER_UNREGISTERED_TYPE: Final[DiagnosticSpec] = DiagnosticSpec(
    code="LOADER_UNREGISTERED_TYPE",
    message="Loadable type is not registered",
    hint="Register the type with the TypeRegistry passed to the loader.",
    severity="warning",
    category="loader",
)

LOADER_DUPLICATE_LOADABLE: Final[DiagnosticSpec] = DiagnosticSpec(
    code="LOADER_DUPLICATE_LOADABLE",
    message="Ignoring duplicate loadable in the same scene node",
    severity="warning",
    category="loader",
)

LOADER_EXTRACTION_FAILED: Final[DiagnosticSpec] = DiagnosticSpec(
    code="LOADER_EXTRACTION_FAILED",
    message="Failed extracting a value",
    severity="warning",
    category="loader",
)
