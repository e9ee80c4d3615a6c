"""Parser, serializer and loader for COB scene/config files."""

from cobpy.cob import Cob
from cobpy.loader import CobLoader, TypeRegistry
from cobpy.parser import CobParseError
from cobpy.pipeline import CobLoadResult, CobParseResult, load_cob_dir, load_cob_files, parse_cob, parse_cob_file
from cobpy.resolve import CobResolveError

__all__ = [
    "Cob",
    "CobLoadResult",
    "CobLoader",
    "CobParseError",
    "CobParseResult",
    "CobResolveError",
    "TypeRegistry",
    "load_cob_dir",
    "load_cob_files",
    "parse_cob",
    "parse_cob_file",
]
