"""Per-file resolution state: constants plus scene macros."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from cobpy.resolve.constants import ConstantsResolver
from cobpy.resolve.scene_macros import SceneMacrosResolver

if TYPE_CHECKING:
    from cobpy.loader.type_lookup import TypeLookup


@dataclass(slots=True)
class CobResolver:
    constants: ConstantsResolver = field(default_factory=ConstantsResolver)
    scene_macros: SceneMacrosResolver = field(default_factory=SceneMacrosResolver)

    @classmethod
    def with_type_lookup(cls, type_lookup: TypeLookup | None) -> CobResolver:
        return cls(ConstantsResolver(), SceneMacrosResolver(type_lookup))

    def start_new_file(self) -> None:
        self.constants.start_new_file()
        self.scene_macros.start_new_file()

    def end_new_file(self) -> None:
        self.constants.end_new_file()
        self.scene_macros.end_new_file()

    def append(self, alias: str, other: CobResolver) -> None:
        self.constants.append(alias, other.constants)
        self.scene_macros.append(alias, other.scene_macros)
