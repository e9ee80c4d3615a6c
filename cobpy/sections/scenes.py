"""`#scenes` section: named scene trees laid out by indentation."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Final

from cobpy.ast.scene import CobSceneLayer
from cobpy.parser.errors import fail
from cobpy.parser.fill import CobFill
from cobpy.sections.common import match_section_keyword, write_section_header

if TYPE_CHECKING:
    from cobpy.format.serializer import RawSerializer
    from cobpy.text.span import Span

SCENES_KEYWORD: Final[str] = "#scenes"


@dataclass(slots=True)
class CobScenes:
    start_fill: CobFill = field(default_factory=CobFill)
    scenes: list[CobSceneLayer] = field(default_factory=list)

    def write_to_section(self, writer: RawSerializer, first_section: bool) -> None:
        write_section_header(writer, self.start_fill, SCENES_KEYWORD, first_section)
        for scene in self.scenes:
            scene.write_to_with_space(writer, "\n")

    @classmethod
    def try_parse(cls, start_fill: CobFill, span: Span) -> tuple[CobScenes | None, CobFill, Span]:
        remaining = match_section_keyword(SCENES_KEYWORD, start_fill, span)
        if remaining is None:
            return None, start_fill, span
        fill, remaining = CobFill.parse(remaining)
        scenes: list[CobSceneLayer] = []
        while remaining.startswith('"'):
            if fill.ends_newline_then_num_spaces() != 0:
                raise fail(remaining, "failed parsing scene; base-level scene layers must start at the beginning of a line")
            scene, next_fill, after = CobSceneLayer.try_parse(fill, remaining)
            if scene is None:
                break
            scenes.append(scene)
            fill, remaining = next_fill, after
        return cls(start_fill, scenes), fill, remaining

    def recover_fill(self, other: CobScenes) -> None:
        self.start_fill.recover(other.start_fill)
        for scene, other_scene in zip(self.scenes, other.scenes):
            scene.recover_fill(other_scene)
