"""Loading resolved COB files into Python objects."""

from cobpy.loader.cob_loader import CobLoader, LoadedCobFile
from cobpy.loader.extract import (
    CobExtractError,
    CobUnregisteredTypeError,
    from_python,
    instantiate,
    loadable_from_instance,
    payload_to_python,
    to_python,
)
from cobpy.loader.scene_tree import SceneNode, extract_scene
from cobpy.loader.type_lookup import NullTypeLookup, ScopedTypeLookup, TypeLookup, TypeRegistry

__all__ = [
    "CobExtractError",
    "CobLoader",
    "CobUnregisteredTypeError",
    "LoadedCobFile",
    "NullTypeLookup",
    "SceneNode",
    "ScopedTypeLookup",
    "TypeLookup",
    "TypeRegistry",
    "extract_scene",
    "from_python",
    "instantiate",
    "loadable_from_instance",
    "payload_to_python",
    "to_python",
]
