"""Diagnostics."""

from cobpy.diagnostics.codes import (
    LOADER_DUPLICATE_LOADABLE,
    LOADER_DUPLICATE_MANIFEST_KEY,
    LOADER_EXTRACTION_FAILED,
    LOADER_IMPORT_CYCLE,
    LOADER_MISSING_FILE,
    LOADER_UNREGISTERED_TYPE,
    PARSER_BANNED_CHARACTERS,
    PARSER_INVALID_FILE,
    PARSER_INVALID_SYNTAX,
    PARSER_LEFTOVER_INPUT,
    PARSER_MISALIGNED_SCENE_ITEM,
    RESOLVE_CONSTANT_FAILED,
    RESOLVE_DEFINITION_OVERWRITTEN,
    RESOLVE_SCENE_MACRO_FAILED,
    DiagnosticSpec,
)
from cobpy.diagnostics.diagnostic import Diagnostic, Severity
from cobpy.diagnostics.report import diagnostic_from_spec, has_errors

__all__ = [
    "LOADER_DUPLICATE_LOADABLE",
    "LOADER_DUPLICATE_MANIFEST_KEY",
    "LOADER_EXTRACTION_FAILED",
    "LOADER_IMPORT_CYCLE",
    "LOADER_MISSING_FILE",
    "LOADER_UNREGISTERED_TYPE",
    "PARSER_BANNED_CHARACTERS",
    "PARSER_INVALID_FILE",
    "PARSER_INVALID_SYNTAX",
    "PARSER_LEFTOVER_INPUT",
    "PARSER_MISALIGNED_SCENE_ITEM",
    "RESOLVE_CONSTANT_FAILED",
    "RESOLVE_DEFINITION_OVERWRITTEN",
    "RESOLVE_SCENE_MACRO_FAILED",
    "Diagnostic",
    "DiagnosticSpec",
    "Severity",
    "diagnostic_from_spec",
    "has_errors",
]
