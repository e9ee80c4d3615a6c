"""Parse/load carriers and pipeline entrypoints."""

from cobpy.pipeline.entrypoints import load_cob_dir, load_cob_files, parse_cob, parse_cob_file
from cobpy.pipeline.result import CobLoadResult, CobParseResult

__all__ = [
    "CobLoadResult",
    "CobParseResult",
    "load_cob_dir",
    "load_cob_files",
    "parse_cob",
    "parse_cob_file",
]
