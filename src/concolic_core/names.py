"""Concolic variable naming: "<base>.<tag>#<qualifier>" identifiers."""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from .errors import IdentifierTooLongError, InvariantViolation
from .protocol import MAX_IDENTIFIER_LEN, PATH_SEP, TAG_SEP


class KindTag(Enum):
    """How the raw bytes of a variable are turned back into a value."""

    INTEGER = "i"
    PLATFORM_SIZE = "l"
    BYTE_STRING = "s"
    UNICODE_STRING = "u"
    BYTE_ARRAY = "b"

    @classmethod
    def from_char(cls, char: str) -> KindTag:
        try:
            return cls(char)
        except ValueError:
            raise InvariantViolation(f"unknown kind tag {char!r}") from None


@dataclass(frozen=True)
class VariableName:
    base: str
    qualifier: str
    tag: KindTag = KindTag.BYTE_ARRAY

    def encode(self) -> str:
        return encode_name(self.base, self.qualifier, self.tag)

    @classmethod
    def decode(cls, identifier: str) -> VariableName:
        return cls(*decode_name(identifier))


def encode_name(base: str, qualifier: str, tag: KindTag) -> str:
    """Build the engine identifier for one field of a named variable.

    Overlong identifiers are rejected, never truncated.
    """
    if not qualifier or PATH_SEP in qualifier:
        raise ValueError(f"Invalid qualifier {qualifier!r}")
    identifier = f"{base}{PATH_SEP}{tag.value}{TAG_SEP}{qualifier}"
    size = len(identifier.encode("utf-8"))
    if size > MAX_IDENTIFIER_LEN:
        raise IdentifierTooLongError(
            f"{size} bytes > {MAX_IDENTIFIER_LEN} for {identifier[:32]!r}..."
        )
    return identifier


def decode_name(identifier: str) -> tuple[str, str, KindTag]:
    """Split an identifier into (key, qualifier, tag).

    The split happens at the last '.', so the key keeps any dotted path
    the caller used. Names without a tag prefix decode as byte arrays.
    """
    key, sep, rest = identifier.rpartition(PATH_SEP)
    if not sep:
        return identifier, "", KindTag.BYTE_ARRAY

    if len(rest) > 1 and rest[1] == TAG_SEP:
        if len(rest) == 2:
            raise InvariantViolation(f"empty qualifier in {identifier!r}")
        return key, rest[2:], KindTag.from_char(rest[0])

    return key, rest, KindTag.BYTE_ARRAY
