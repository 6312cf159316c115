"""Concolic session: mark host values as concolic variables.

Every marker validates its input completely and allocates every buffer it
needs before the first engine call. The engine may fork the process on any
``mark_concolic``/``assume``, so once a marking sequence starts talking to
the engine it runs to the end.
"""
from __future__ import annotations

import struct
from collections.abc import Iterator, Mapping
from contextlib import ExitStack, contextmanager
from typing import Any

from .assignment import AssignmentTree, decode_assignment, units_to_text
from .errors import (
    AllocationError,
    ConstraintError,
    PreconditionError,
    UnsupportedTypeError,
)
from .gateway import EngineGateway, Predicate
from .names import KindTag, encode_name
from .protocol import (
    DEFAULT_MAX_SYMBOLIC_SIZE,
    INT_FMT,
    INT_MAX,
    INT_MIN,
    QUALIFIER_SIZE,
    QUALIFIER_VALUE,
    SIZE_UNTRACKED,
    SSIZE_FMT,
    UNICODE_CODEC,
    UNICODE_ERRORS,
    UNICODE_UNIT_WIDTH,
)
from .sizes import SizeBounds, check_size, constrain_size


@contextmanager
def transient_buffer(data: bytes) -> Iterator[memoryview]:
    """Private, writable copy of ``data``, released on exit."""
    try:
        buf = bytearray(data)
    except MemoryError:
        raise AllocationError(f"{len(data)} bytes") from None
    view = memoryview(buf)
    try:
        yield view
    finally:
        view.release()


class ConcolicSession:
    def __init__(self, gateway: EngineGateway,
                 max_symbolic_size: int = DEFAULT_MAX_SYMBOLIC_SIZE):
        if max_symbolic_size <= 0:
            raise ValueError("max_symbolic_size must be positive")
        self.gateway = gateway
        self.max_symbolic_size = max_symbolic_size

    def _require_active(self) -> None:
        if not self.gateway.is_active():
            raise PreconditionError()

    # -- integers ---------------------------------------------------------

    def make_concolic_int(self, value: int, name: str,
                          max_value: int = -1, min_value: int = 0) -> int:
        """Mark a 4-byte integer. The range check is enabled when
        ``min_value <= max_value``."""
        self._require_active()

        if not isinstance(value, int) or isinstance(value, bool):
            raise UnsupportedTypeError(type(value).__name__)

        ranged = min_value <= max_value
        if ranged and not (min_value <= value <= max_value):
            raise ConstraintError(f"{value} not in [{min_value}, {max_value}]")
        if not (INT_MIN <= value <= INT_MAX):
            raise ConstraintError(f"{value} does not fit {INT_FMT!r}")

        identifier = encode_name(name, QUALIFIER_VALUE, KindTag.INTEGER)
        with transient_buffer(struct.pack(INT_FMT, value)) as view:
            self.gateway.mark_concolic(view, identifier)
            if ranged:
                self.gateway.assume(Predicate(identifier, ">=", min_value))
                self.gateway.assume(Predicate(identifier, "<=", max_value))
            return struct.unpack(INT_FMT, view)[0]

    # -- sequences --------------------------------------------------------

    def make_concolic_sequence(self, value: Any, name: str,
                               max_size: int = SIZE_UNTRACKED,
                               min_size: int = 0) -> Any:
        """Mark a sequence according to its runtime type.

        Strings come back as new objects built from the engine buffer;
        lists, dicts and tuples come back as the very same object.
        """
        self._require_active()

        if min_size < 0:
            raise ConstraintError("Minimum size cannot be negative")

        bounds = SizeBounds(min_size, max_size)
        if value is None:
            raise UnsupportedTypeError("Cannot make symbolic None")
        elif isinstance(value, bytes):
            return self._mark_string(value, name, bounds)
        elif isinstance(value, str):
            return self._mark_unicode(value, name, bounds)
        elif isinstance(value, list):
            return self._mark_list(value, name, bounds)
        elif isinstance(value, dict):
            return self._mark_container(value, name)
        elif isinstance(value, tuple):
            return self._mark_container(value, name)
        raise UnsupportedTypeError(type(value).__name__)

    def make_concolic_string(self, value: bytes, name: str,
                             max_size: int = SIZE_UNTRACKED,
                             min_size: int = 0) -> bytes:
        self._require_active()
        if min_size < 0:
            raise ConstraintError("Minimum size cannot be negative")
        return self._mark_string(value, name, SizeBounds(min_size, max_size))

    def make_concolic_unicode(self, value: str, name: str,
                              max_size: int = SIZE_UNTRACKED,
                              min_size: int = 0) -> str | tuple[int, ...]:
        self._require_active()
        if min_size < 0:
            raise ConstraintError("Minimum size cannot be negative")
        return self._mark_unicode(value, name, SizeBounds(min_size, max_size))

    def _check_bounds(self, size: int, bounds: SizeBounds) -> None:
        if not check_size(size, bounds.max_size, bounds.min_size):
            raise ConstraintError(
                f"size {size} outside [{bounds.min_size}, {bounds.max_size}]"
            )

    def _size_identifier(self, name: str, bounds: SizeBounds) -> str | None:
        if not bounds.tracked:
            return None
        return encode_name(name, QUALIFIER_SIZE, KindTag.PLATFORM_SIZE)

    def _mark_buffer(self, payload: bytes, size: int, name: str,
                     tag: KindTag, bounds: SizeBounds, unit: int = 1) -> bytes:
        """Mark a private copy of ``payload`` and return the bytes the
        engine left in it.

        With a tracked size, the result holds as many ``unit``-byte units
        as the engine left in the size field.
        """
        value_id = encode_name(name, QUALIFIER_VALUE, tag)
        size_id = self._size_identifier(name, bounds)

        with ExitStack() as stack:
            view = stack.enter_context(transient_buffer(payload))
            size_view = None
            if size_id is not None:
                size_view = stack.enter_context(
                    transient_buffer(struct.pack(SSIZE_FMT, size)))

            self.gateway.mark_concolic(view, value_id)
            result = view.tobytes()
            if size_view is not None:
                self.gateway.mark_concolic(size_view, size_id)
                constrain_size(self.gateway, size_id,
                               bounds.max_size, bounds.min_size)
                length = struct.unpack(SSIZE_FMT, size_view)[0]
                result = result[: max(length, 0) * unit]
        return result

    def _mark_string(self, value: bytes, name: str, bounds: SizeBounds) -> bytes:
        self._check_bounds(len(value), bounds)
        return self._mark_buffer(value, len(value), name,
                                 KindTag.BYTE_STRING, bounds)

    def _mark_unicode(self, value: str, name: str,
                      bounds: SizeBounds) -> str | tuple[int, ...]:
        self._check_bounds(len(value), bounds)
        payload = value.encode(UNICODE_CODEC, UNICODE_ERRORS)
        data = self._mark_buffer(payload, len(value), name,
                                 KindTag.UNICODE_STRING, bounds,
                                 unit=UNICODE_UNIT_WIDTH)
        return units_to_text(data)

    # -- containers -------------------------------------------------------

    def _mark_size_field(self, size: int, identifier: str) -> None:
        with transient_buffer(struct.pack(SSIZE_FMT, size)) as view:
            self.gateway.mark_concolic(view, identifier)

    def _mark_list(self, value: list, name: str, bounds: SizeBounds) -> list:
        """Only the element count is tracked, never the elements."""
        self._check_bounds(len(value), bounds)

        size_id = self._size_identifier(name, bounds)
        if size_id is not None:
            self._mark_size_field(len(value), size_id)
            constrain_size(self.gateway, size_id,
                           bounds.max_size, bounds.min_size)
        return value

    def _mark_container(self, value: dict | tuple, name: str) -> dict | tuple:
        size_id = encode_name(name, QUALIFIER_SIZE, KindTag.PLATFORM_SIZE)
        self._mark_size_field(len(value), size_id)
        self.gateway.assume(Predicate(size_id, ">=", 0))
        self.gateway.assume(Predicate(size_id, "<", self.max_symbolic_size))
        return value

    # -- assignments ------------------------------------------------------

    def decode_assignment(self, assignment: Mapping[str, bytes]) -> AssignmentTree:
        """Structured view of an engine-produced assignment."""
        return decode_assignment(assignment)
