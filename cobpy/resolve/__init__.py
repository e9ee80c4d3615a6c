"""Constant substitution and scene macro expansion."""

from cobpy.resolve.constants import (
    ConstantsResolver,
    resolve_constant_value,
    resolve_loadable,
    resolve_scene_entries,
    resolve_value,
)
from cobpy.resolve.errors import CobResolveError
from cobpy.resolve.resolver import CobResolver
from cobpy.resolve.scene_macros import (
    SceneMacrosResolver,
    apply_overrides,
    canonicalize_loadable_names,
)

__all__ = [
    "CobResolveError",
    "CobResolver",
    "ConstantsResolver",
    "SceneMacrosResolver",
    "apply_overrides",
    "canonicalize_loadable_names",
    "resolve_constant_value",
    "resolve_loadable",
    "resolve_scene_entries",
    "resolve_value",
]
