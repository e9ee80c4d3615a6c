"""Text positions."""

from cobpy.text.text import TextRange

__all__ = [
    "TextRange",
]
