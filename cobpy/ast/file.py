"""COB file references."""

from __future__ import annotations

from dataclasses import dataclass
import re
from typing import TYPE_CHECKING, Final

from cobpy.diagnostics.codes import PARSER_INVALID_FILE
from cobpy.parser.errors import fail

if TYPE_CHECKING:
    from cobpy.format.serializer import RawSerializer
    from cobpy.text.span import Span

COB_EXTENSIONS: Final[tuple[str, ...]] = (".cob", ".cobweb")
_QUOTED_PATH: Final[re.Pattern[str]] = re.compile(r'"([^"\n]*)"')


@dataclass(frozen=True, slots=True)
class CobFile:
    """Path of a `.cob` or `.cobweb` file, with `/` separators."""

    path: str

    @staticmethod
    def try_new(path: str) -> CobFile | None:
        if not path.endswith(COB_EXTENSIONS):
            return None
        return CobFile(path.replace("\\", "/"))

    @staticmethod
    def new(path: str) -> CobFile:
        file = CobFile.try_new(path)
        if file is None:
            raise ValueError(f"invalid COB file name {path!r}; expected a `.cob` or `.cobweb` extension")
        return file

    def write_to(self, writer: RawSerializer) -> None:
        writer.write_str('"')
        writer.write_str(self.path)
        writer.write_str('"')

    @staticmethod
    def try_parse(span: Span) -> tuple[CobFile | None, Span]:
        """Parse `"path.cob"`; anything that isn't a quoted COB file name is a mismatch."""
        matched = span.match(_QUOTED_PATH)
        if matched is None:
            return None, span
        text, remaining = matched
        file = CobFile.try_new(text[1:-1])
        if file is None:
            return None, span
        return file, remaining

    @staticmethod
    def parse(span: Span) -> tuple[CobFile, Span]:
        file, remaining = CobFile.try_parse(span)
        if file is None:
            raise fail(span, "failed parsing COB file name; expected a quoted `.cob` or `.cobweb` path", PARSER_INVALID_FILE)
        return file, remaining

    def __str__(self) -> str:
        return self.path
