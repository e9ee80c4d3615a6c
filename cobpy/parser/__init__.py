"""Parser primitives shared by every COB node."""

from cobpy.parser.errors import CobParseError, fail
from cobpy.parser.fill import CobFill, is_banned_char
from cobpy.parser.identifiers import (
    DEFS_SEPARATOR,
    anything_identifier,
    camel_identifier,
    numerical_snake_identifier,
    path_to_string,
    snake_identifier,
)

__all__ = [
    "DEFS_SEPARATOR",
    "CobFill",
    "CobParseError",
    "anything_identifier",
    "camel_identifier",
    "fail",
    "is_banned_char",
    "numerical_snake_identifier",
    "path_to_string",
    "snake_identifier",
]
