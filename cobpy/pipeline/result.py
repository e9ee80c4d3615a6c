"""Parse/load carriers returned by the pipeline entrypoints."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from cobpy.diagnostics import has_errors

if TYPE_CHECKING:
    from cobpy.cob import Cob
    from cobpy.diagnostics import Diagnostic
    from cobpy.loader import LoadedCobFile


@dataclass(slots=True)
class CobParseResult:
    """One parsed source text; `cob` is None when parsing failed."""

    source_text: str
    file: str
    cob: Cob | None
    diagnostics: list[Diagnostic] = field(default_factory=list)

    @property
    def has_errors(self) -> bool:
        return self.cob is None or has_errors(self.diagnostics)

    def to_cob_string(self) -> str:
        if self.cob is None:
            raise ValueError(f"{self.file} failed to parse; nothing to serialize")
        from cobpy.format import to_cob_string

        return to_cob_string(self.cob)


@dataclass(slots=True)
class CobLoadResult:
    """Resolved files keyed by path, plus every diagnostic from parsing and loading."""

    files: dict[str, LoadedCobFile] = field(default_factory=dict)
    diagnostics: list[Diagnostic] = field(default_factory=list)

    @property
    def has_errors(self) -> bool:
        return has_errors(self.diagnostics)

    def file(self, path: str) -> LoadedCobFile | None:
        return self.files.get(path)
