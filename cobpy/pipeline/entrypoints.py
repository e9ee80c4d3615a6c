"""Entrypoints that turn COB source text into parse and load results."""

from __future__ import annotations

from collections.abc import Mapping
import logging
from pathlib import Path
from typing import TYPE_CHECKING

from cobpy.cob import Cob
from cobpy.diagnostics import Diagnostic
from cobpy.loader import CobLoader
from cobpy.parser import CobParseError
from cobpy.pipeline.result import CobLoadResult, CobParseResult
from cobpy.text.span import Span

if TYPE_CHECKING:
    from cobpy.loader import TypeLookup

logger = logging.getLogger(__name__)


def parse_cob(text: str, *, file: str = "main.cob") -> CobParseResult:
    """Parse one COB source text; hard failures become diagnostics."""
    diagnostics: list[Diagnostic] = []
    try:
        cob = Cob.parse(Span.new(text, file=file, sink=diagnostics))
    except CobParseError as exc:
        logger.debug("parse of %s failed: %s", file, exc)
        diagnostics.append(exc.to_diagnostic())
        return CobParseResult(text, file, None, diagnostics)
    return CobParseResult(text, file, cob, diagnostics)


def parse_cob_file(path: str | Path) -> CobParseResult:
    file_path = Path(path)
    text = file_path.read_text(encoding="utf-8")
    return parse_cob(text, file=file_path.as_posix())


def load_cob_files(sources: Mapping[str, str], registry: TypeLookup | None = None) -> CobLoadResult:
    """Parse and resolve a set of files given as `{path: text}`."""
    loader = CobLoader(registry)
    for path, text in sources.items():
        loader.add_file(path, text)
    files = loader.load()
    return CobLoadResult(files, loader.diagnostics)


def load_cob_dir(root: str | Path, registry: TypeLookup | None = None) -> CobLoadResult:
    """Load every `.cob` and `.cobweb` file below `root`, keyed by root-relative path."""
    root_path = Path(root)
    sources: dict[str, str] = {}
    for file_path in sorted(root_path.rglob("*")):
        if file_path.suffix in (".cob", ".cobweb") and file_path.is_file():
            sources[file_path.relative_to(root_path).as_posix()] = file_path.read_text(encoding="utf-8")
    return load_cob_files(sources, registry)
