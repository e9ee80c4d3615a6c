"""Source spans.

A `Span` is an immutable cursor into one COB source text. Parser functions
consume a span and hand back the span that follows whatever they matched, so
the remaining input of a failed parse is always available for error reports.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
import logging
import re

from cobpy.diagnostics.codes import DiagnosticSpec
from cobpy.diagnostics.diagnostic import Diagnostic
from cobpy.text import TextRange

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class Span:
    source: str
    offset: int = 0
    file: str = "<memory>"
    sink: list[Diagnostic] | None = field(default=None, compare=False, hash=False, repr=False)

    @staticmethod
    def new(source: str, *, file: str = "<memory>", sink: list[Diagnostic] | None = None) -> Span:
        return Span(source, 0, file, sink)

    @property
    def fragment(self) -> str:
        return self.source[self.offset :]

    def is_empty(self) -> bool:
        return self.offset >= len(self.source)

    def peek(self) -> str:
        return self.source[self.offset : self.offset + 1]

    def startswith(self, prefix: str) -> bool:
        return self.source.startswith(prefix, self.offset)

    def advance(self, count: int) -> Span:
        return replace(self, offset=min(self.offset + count, len(self.source)))

    def match(self, pattern: re.Pattern[str]) -> tuple[str, Span] | None:
        """Match `pattern` at the current offset, returning the text and the span after it."""
        found = pattern.match(self.source, self.offset)
        if found is None:
            return None
        return found.group(0), replace(self, offset=found.end())

    def line_column(self) -> tuple[int, int]:
        """1-based line and column of the span start."""
        line = self.source.count("\n", 0, self.offset) + 1
        line_start = self.source.rfind("\n", 0, self.offset) + 1
        return line, self.offset - line_start + 1

    def location(self) -> str:
        return get_location(self)

    def text_range(self, length: int = 0) -> TextRange:
        end = min(self.offset + length, len(self.source))
        return TextRange(self.offset, end)

    def warn(self, spec: DiagnosticSpec, detail: str, *, length: int = 0) -> None:
        """Log a recoverable problem and record it in the attached diagnostics sink."""
        logger.warning("%s at %s", detail, self.location())
        if self.sink is None:
            return
        self.sink.append(
            Diagnostic(
                code=spec.code,
                message=f"{spec.message}: {detail}",
                range=self.text_range(length),
                severity=spec.severity,
                hint=spec.hint,
                category=spec.category,
                file=self.file,
            )
        )


def get_location(span: Span) -> str:
    line, column = span.line_column()
    return f"file: {span.file}, line: {line}, column: {column}"
