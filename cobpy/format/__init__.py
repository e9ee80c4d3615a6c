"""Serialization."""

from cobpy.format.serializer import DefaultRawSerializer, RawSerializer, to_cob_string

__all__ = [
    "DefaultRawSerializer",
    "RawSerializer",
    "to_cob_string",
]
