"""Rebuild structured values from an engine-produced assignment.

An assignment maps identifiers to raw bytes, one entry per marked field.
Decoding groups the fields by key::

    {"req.body": {"value": b"hi", "size": 2}}
"""
from __future__ import annotations

import struct
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any
from warnings import warn

from .errors import InvariantViolation
from .names import KindTag, decode_name
from .protocol import (
    INT_FMT,
    INT_LEN,
    SSIZE_FMT,
    SSIZE_LEN,
    MAX_CODE_POINT,
    UNICODE_UNIT_FMT,
    UNICODE_UNIT_WIDTH,
)

AssignmentTree = dict[str, dict[str, Any]]


@dataclass(frozen=True)
class AssignmentEntry:
    key: str
    qualifier: str
    tag: KindTag
    raw: bytes


def _unpack(fmt: str, width: int, raw: bytes) -> int:
    if len(raw) != width:
        raise InvariantViolation(f"expected {width} bytes, got {len(raw)}")
    return struct.unpack(fmt, raw)[0]


def units_to_text(raw: bytes) -> str | tuple[int, ...]:
    """Reinterpret raw bytes as UCS-4 code units.

    Units above U+10FFFF have no str form; the engine may still produce
    them, so such a value comes back as the tuple of its units.
    """
    count = len(raw) // UNICODE_UNIT_WIDTH
    units = struct.unpack(f"={count}{UNICODE_UNIT_FMT}",
                          raw[: count * UNICODE_UNIT_WIDTH])
    if all(unit <= MAX_CODE_POINT for unit in units):
        return "".join(map(chr, units))
    return units


def convert_value(raw: bytes, tag: KindTag) -> Any:
    """Reinterpret raw assignment bytes according to ``tag``."""
    if tag is KindTag.INTEGER:
        return _unpack(INT_FMT, INT_LEN, raw)
    if tag is KindTag.PLATFORM_SIZE:
        return _unpack(SSIZE_FMT, SSIZE_LEN, raw)
    if tag is KindTag.BYTE_STRING:
        return bytes(raw)
    if tag is KindTag.UNICODE_STRING:
        if len(raw) % UNICODE_UNIT_WIDTH:
            raise InvariantViolation(
                f"{len(raw)} bytes is not a whole number of code units"
            )
        return units_to_text(bytes(raw))
    if tag is KindTag.BYTE_ARRAY:
        return bytearray(raw)
    raise InvariantViolation(f"unknown kind tag {tag!r}")


def split_entry(identifier: str, raw: bytes) -> AssignmentEntry:
    key, qualifier, tag = decode_name(identifier)
    return AssignmentEntry(key, qualifier, tag, bytes(raw))


def decode_entry(tree: AssignmentTree, identifier: str, raw: bytes) -> None:
    """Decode one identifier into ``tree``; the last write for a
    (key, qualifier) pair wins."""
    entry = split_entry(identifier, raw)
    value = convert_value(entry.raw, entry.tag)

    fields = tree.setdefault(entry.key, {})
    if entry.qualifier in fields and fields[entry.qualifier] != value:
        warn(f"Overwriting {entry.key}.{entry.qualifier} from {identifier!r}")
    fields[entry.qualifier] = value


def decode_assignment(assignment: Mapping[str, bytes],
                      tree: AssignmentTree | None = None) -> AssignmentTree:
    if tree is None:
        tree = {}
    for identifier, raw in assignment.items():
        decode_entry(tree, identifier, raw)
    return tree
