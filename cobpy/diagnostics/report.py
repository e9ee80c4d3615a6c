"""Diagnostics helpers."""

from __future__ import annotations

from collections.abc import Iterable

from cobpy.diagnostics.codes import DiagnosticSpec
from cobpy.diagnostics.diagnostic import Diagnostic
from cobpy.text import TextRange


def has_errors(diagnostics: Iterable[Diagnostic]) -> bool:
    return any(d.severity == "error" for d in diagnostics)


def diagnostic_from_spec(
    spec: DiagnosticSpec,
    detail: str | None = None,
    *,
    range: TextRange | None = None,
    file: str | None = None,
) -> Diagnostic:
    """Build a diagnostic from a spec, appending `detail` to the spec message."""
    message = spec.message if detail is None else f"{spec.message}: {detail}"
    return Diagnostic(
        code=spec.code,
        message=message,
        range=range if range is not None else TextRange(0, 0),
        severity=spec.severity,
        hint=spec.hint,
        category=spec.category,
        file=file,
    )
