"""Parse errors."""

from __future__ import annotations

import logging

from cobpy.diagnostics.codes import PARSER_INVALID_SYNTAX, DiagnosticSpec
from cobpy.diagnostics.diagnostic import Diagnostic
from cobpy.text.span import Span

logger = logging.getLogger(__name__)


class CobParseError(ValueError):
    """Hard parse failure at a committed production.

    `remaining` is the unparsed source starting at the failure position.
    """

    def __init__(self, span: Span, message: str, spec: DiagnosticSpec = PARSER_INVALID_SYNTAX) -> None:
        self.span = span
        self.message = message
        self.spec = spec
        self.location = span.location()
        super().__init__(f"{message} at {self.location}")

    @property
    def remaining(self) -> str:
        return self.span.fragment

    def to_diagnostic(self) -> Diagnostic:
        return Diagnostic(
            code=self.spec.code,
            message=self.message,
            range=self.span.text_range(len(self.remaining.split("\n", 1)[0])),
            severity=self.spec.severity,
            hint=self.spec.hint,
            category=self.spec.category,
            file=self.span.file,
        )


def fail(span: Span, message: str, spec: DiagnosticSpec = PARSER_INVALID_SYNTAX) -> CobParseError:
    """Log and build a parse error; callers `raise fail(...)`."""
    logger.debug("parse failure: %s at %s", message, span.location())
    return CobParseError(span, message, spec)
