"""Raw serialization targets for COB nodes."""

from __future__ import annotations

import io
from typing import Protocol


class RawSerializer(Protocol):
    def write_str(self, text: str) -> None: ...


class DefaultRawSerializer:
    """Serializer that buffers written text in memory."""

    __slots__ = ("_buffer",)

    def __init__(self) -> None:
        self._buffer = io.StringIO()

    def write_str(self, text: str) -> None:
        self._buffer.write(text)

    def getvalue(self) -> str:
        return self._buffer.getvalue()


class Writable(Protocol):
    def write_to(self, writer: RawSerializer) -> None: ...


def to_cob_string(node: Writable) -> str:
    """Serialize one node (or a whole `Cob`) to text."""
    writer = DefaultRawSerializer()
    node.write_to(writer)
    return writer.getvalue()
