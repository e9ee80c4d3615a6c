"""Whole-file COB documents."""

from __future__ import annotations

from dataclasses import dataclass, field
import logging
from typing import TYPE_CHECKING

from cobpy.ast.file import CobFile
from cobpy.diagnostics.codes import PARSER_INVALID_FILE, PARSER_LEFTOVER_INPUT
from cobpy.parser.errors import fail
from cobpy.parser.fill import CobFill
from cobpy.sections import (
    SECTION_TYPES,
    CobCommands,
    CobDefs,
    CobImport,
    CobManifest,
    CobScenes,
    CobSection,
    CobUsing,
)

if TYPE_CHECKING:
    from cobpy.format.serializer import RawSerializer
    from cobpy.text.span import Span

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class Cob:
    """A parsed COB file: an ordered list of sections plus the trailing fill."""

    file: CobFile
    sections: list[CobSection] = field(default_factory=list)
    end_fill: CobFill = field(default_factory=CobFill)

    def write_to(self, writer: RawSerializer) -> None:
        for idx, section in enumerate(self.sections):
            section.write_to_section(writer, idx == 0)
        self.end_fill.write_to(writer)

    @staticmethod
    def parse(span: Span) -> Cob:
        """Parse a whole file. The span's file name must be a `.cob` or `.cobweb` path."""
        file = CobFile.try_new(span.file)
        if file is None:
            raise fail(span, f"failed parsing COB file {span.file!r}; invalid file extension", PARSER_INVALID_FILE)

        fill, remaining = CobFill.parse(span)
        sections: list[CobSection] = []
        while True:
            for section_type in SECTION_TYPES:
                section, next_fill, after = section_type.try_parse(fill, remaining)
                if section is not None:
                    sections.append(section)
                    fill, remaining = next_fill, after
                    break
            else:
                break

        if not remaining.is_empty():
            raise fail(remaining, "failed parsing COB file; encountered content that isn't part of a section", PARSER_LEFTOVER_INPUT)
        logger.debug("parsed %s with %d sections", file, len(sections))
        return Cob(file, sections, fill)

    def recover_fill(self, other: Cob) -> None:
        for section, other_section in zip(self.sections, other.sections):
            if type(section) is type(other_section):
                section.recover_fill(other_section)  # type: ignore[arg-type]
        self.end_fill.recover(other.end_fill)

    def _sections_of[T](self, section_type: type[T]) -> list[T]:
        return [section for section in self.sections if isinstance(section, section_type)]

    def manifests(self) -> list[CobManifest]:
        return self._sections_of(CobManifest)

    def imports(self) -> list[CobImport]:
        return self._sections_of(CobImport)

    def usings(self) -> list[CobUsing]:
        return self._sections_of(CobUsing)

    def defs(self) -> list[CobDefs]:
        return self._sections_of(CobDefs)

    def commands(self) -> list[CobCommands]:
        return self._sections_of(CobCommands)

    def scenes(self) -> list[CobScenes]:
        return self._sections_of(CobScenes)
