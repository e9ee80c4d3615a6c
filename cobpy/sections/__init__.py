"""COB file sections."""

from cobpy.sections.commands import COMMANDS_KEYWORD, CobCommands
from cobpy.sections.defs import DEFS_KEYWORD, CobDefEntry, CobDefs
from cobpy.sections.imports import IMPORT_KEYWORD, NO_ALIAS, CobImport, CobImportEntry
from cobpy.sections.manifest import MANIFEST_KEYWORD, SELF_REF, CobManifest, CobManifestEntry, parse_manifest_key
from cobpy.sections.scenes import SCENES_KEYWORD, CobScenes
from cobpy.sections.using import USING_KEYWORD, CobUsing, CobUsingEntry, CobUsingTypePath

type CobSection = CobManifest | CobImport | CobUsing | CobDefs | CobCommands | CobScenes

SECTION_TYPES = (CobManifest, CobImport, CobUsing, CobDefs, CobCommands, CobScenes)

__all__ = [
    "COMMANDS_KEYWORD",
    "DEFS_KEYWORD",
    "IMPORT_KEYWORD",
    "MANIFEST_KEYWORD",
    "NO_ALIAS",
    "SCENES_KEYWORD",
    "SECTION_TYPES",
    "SELF_REF",
    "USING_KEYWORD",
    "CobCommands",
    "CobDefEntry",
    "CobDefs",
    "CobImport",
    "CobImportEntry",
    "CobManifest",
    "CobManifestEntry",
    "CobScenes",
    "CobSection",
    "CobUsing",
    "CobUsingEntry",
    "CobUsingTypePath",
    "parse_manifest_key",
]
